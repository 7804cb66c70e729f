# SPDX-License-Identifier: MIT
"""Shared fixtures for makemake tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

POM_TEMPLATE = """\
<project xmlns="http://maven.apache.org/POM/4.0.0"
         xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
    <modelVersion>4.0.0</modelVersion>
    <artifactId>{artifact}</artifactId>
    <packaging>jar</packaging>
    <build>
        <plugins>
{plugins}
        </plugins>
    </build>
</project>
"""

ANTLR_PLUGIN_TEMPLATE = """\
            <plugin>
                <groupId>org.antlr</groupId>
                <artifactId>antlr4-maven-plugin</artifactId>
                <version>${{antlr.version}}</version>
                <configuration>
                    <sourceDirectory>{source_directory}</sourceDirectory>
                    <includes>
{includes}
                    </includes>
                    <visitor>true</visitor>
                    <listener>true</listener>
                </configuration>
            </plugin>
"""

TEST_PLUGIN = """\
            <plugin>
                <groupId>com.khubla.antlr</groupId>
                <artifactId>antlr4test-maven-plugin</artifactId>
                <configuration>
                    <verbose>false</verbose>
                    <entryPoint>start</entryPoint>
                    <exampleFiles>examples/</exampleFiles>
                </configuration>
            </plugin>
"""


def pom_xml(
    includes: list[str],
    *,
    plugin: bool = True,
    source_directory: str = "${basedir}",
    artifact: str = "grammar",
) -> str:
    """Text of a grammars-v4 style pom.xml."""
    plugins = TEST_PLUGIN
    if plugin:
        include_lines = "\n".join(
            f"                        <include>{i}</include>" for i in includes
        )
        plugins = (
            ANTLR_PLUGIN_TEMPLATE.format(
                source_directory=source_directory, includes=include_lines
            )
            + plugins
        )
    return POM_TEMPLATE.format(artifact=artifact, plugins=plugins)


def grammar_source(name: str, kind: str = "combined", header: str = "") -> str:
    """Text of a minimal .g4 grammar."""
    prefix = "" if kind == "combined" else f"{kind} "
    body = "ID : [a-z]+ ;\n"
    if kind != "lexer":
        body = "start : ID+ EOF ;\n" + ("" if kind == "parser" else body)
    return f"{prefix}grammar {name};\n{header}\n{body}"


@pytest.fixture
def grammars_root(tmp_path: Path) -> Path:
    """An empty grammar root directory."""
    root = tmp_path / "grammars-v4"
    root.mkdir()
    return root


@pytest.fixture
def make_project(grammars_root: Path) -> Callable[..., Path]:
    """Factory creating a project directory with a pom and grammars.

    make_project("json", {"JSON.g4": "combined"}) writes
    grammars-v4/json/pom.xml and grammars-v4/json/JSON.g4 and returns
    the pom path.
    """

    def factory(
        directory: str,
        grammars: dict[str, str],
        *,
        plugin: bool = True,
        write_grammars: bool = True,
        includes: list[str] | None = None,
    ) -> Path:
        project_dir = grammars_root / directory
        project_dir.mkdir(parents=True, exist_ok=True)
        if write_grammars:
            for filename, kind in grammars.items():
                header = ""
                if kind == "parser":
                    lexer = filename[: -len("Parser.g4")] + "Lexer"
                    header = f"options {{ tokenVocab = {lexer}; }}\n"
                (project_dir / filename).write_text(
                    grammar_source(Path(filename).stem, kind, header)
                )
        pom = project_dir / "pom.xml"
        pom.write_text(
            pom_xml(includes if includes is not None else list(grammars), plugin=plugin)
        )
        return pom

    return factory
