# SPDX-License-Identifier: MIT
"""Maven pom.xml project descriptors.

Only the handful of fields makemake needs are extracted: the
antlr4-maven-plugin configuration (source directory and includes)
and the antlr4test-maven-plugin test settings. Everything else in
the pom is ignored.

Example descriptor:
    <project xmlns="http://maven.apache.org/POM/4.0.0">
      <artifactId>json</artifactId>
      <build>
        <plugins>
          <plugin>
            <groupId>org.antlr</groupId>
            <artifactId>antlr4-maven-plugin</artifactId>
            <configuration>
              <sourceDirectory>${basedir}</sourceDirectory>
              <includes>
                <include>JSON.g4</include>
              </includes>
            </configuration>
          </plugin>
        </plugins>
      </build>
    </project>
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from makemake.core.errors import DescriptorError
from makemake.core.naming import package_name
from makemake.core.project import Project

logger = logging.getLogger(__name__)

ANTLR_PLUGIN = "antlr4-maven-plugin"
ANTLR_TEST_PLUGIN = "antlr4test-maven-plugin"

# Where Maven looks for grammars when sourceDirectory is not given
DEFAULT_SOURCE_DIRECTORY = "src/main/antlr4"

_BASEDIR_VARS = ("${basedir}", "${project.basedir}")
_GLOB_CHARS = frozenset("*?[")


def parse_pom(path: Path | str) -> Project:
    """Extract a Project from a pom.xml file.

    Args:
        path: Path to the descriptor.

    Returns:
        The project. generation_enabled is False when the pom does not
        configure the ANTLR plugin.

    Raises:
        DescriptorError: If the file cannot be read or is not a pom.
    """
    path = Path(path)
    try:
        tree = ET.parse(path)
    except ET.ParseError as e:
        raise DescriptorError(f"malformed descriptor: {e}", path) from e
    except OSError as e:
        raise DescriptorError(f"cannot read descriptor: {e.strerror}", path) from e

    root = tree.getroot()
    _strip_namespaces(root)
    if root.tag != "project":
        raise DescriptorError(
            f"expected <project> root element, got <{root.tag}>", path
        )

    enabled = False
    includes: list[Path] = []
    entry_point: str | None = None
    example_files: str | None = None
    for plugin in _plugins(root):
        artifact = _text(plugin, "artifactId")
        config = plugin.find("configuration")
        if artifact == ANTLR_PLUGIN:
            enabled = True
            if config is not None:
                includes = _includes(config, path.parent)
        elif artifact == ANTLR_TEST_PLUGIN and config is not None:
            entry_point = _text(config, "entryPoint")
            example_files = _text(config, "exampleFiles")

    directory = path.parent.name or path.resolve().parent.name
    project = Project(
        name=package_name(directory),
        descriptor=path,
        includes=includes,
        generation_enabled=enabled,
        entry_point=entry_point,
        example_files=example_files,
    )

    logger.debug(
        "parsed %s: name=%s plugin=%s includes=%d",
        path,
        project.name,
        project.generation_enabled,
        len(project.includes),
    )
    return project


def _strip_namespaces(root: ET.Element) -> None:
    """Drop the {namespace} prefix from every tag in place."""
    for el in root.iter():
        if isinstance(el.tag, str) and "}" in el.tag:
            el.tag = el.tag.split("}", 1)[1]


def _plugins(root: ET.Element) -> list[ET.Element]:
    return root.findall("build/plugins/plugin") + root.findall(
        "build/pluginManagement/plugins/plugin"
    )


def _text(el: ET.Element, tag: str) -> str | None:
    child = el.find(tag)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def _source_directory(config: ET.Element, pom_dir: Path) -> Path:
    """Resolve the plugin's sourceDirectory relative to the pom."""
    text = _text(config, "sourceDirectory") or DEFAULT_SOURCE_DIRECTORY
    for var in _BASEDIR_VARS:
        if text.startswith(var):
            return pom_dir / text[len(var) :].lstrip("/")
    return pom_dir / text


def _includes(config: ET.Element, pom_dir: Path) -> list[Path]:
    """Grammar files named by <includes>, or by <grammars> as a fallback."""
    source_dir = _source_directory(config, pom_dir)

    patterns = [
        el.text.strip()
        for el in config.findall("includes/include")
        if el.text and el.text.strip()
    ]
    if not patterns:
        grammars = _text(config, "grammars")
        if grammars:
            patterns = [g.strip() for g in grammars.split(",") if g.strip()]

    includes: list[Path] = []
    for pattern in patterns:
        if _GLOB_CHARS.intersection(pattern):
            matches = sorted(source_dir.glob(pattern))
        else:
            matches = [source_dir / pattern]
        for match in matches:
            if match not in includes:
                includes.append(match)
    return includes
