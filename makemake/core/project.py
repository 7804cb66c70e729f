# SPDX-License-Identifier: MIT
"""Grammar projects and the aggregate index built from them.

A Project is one grammar unit discovered from a descriptor: it is
generated, compiled and tested as a single Go package named after it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from makemake.core.naming import derive_generated_files

# Valid grammar kinds, as declared in the grammar header
GrammarKind = Literal[
    "combined",  # grammar Foo;
    "lexer",  # lexer grammar FooLexer;
    "parser",  # parser grammar FooParser;
]


@dataclass
class Grammar:
    """A single .g4 grammar file.

    Attributes:
        path: Path to the .g4 file.
        name: Declared grammar name (e.g. "JSON", "CPP14Lexer").
        kind: Grammar kind.
        dependencies: Grammar files this one reads tokens or rules from.
    """

    path: Path
    name: str
    kind: GrammarKind = "combined"
    dependencies: list[Path] = field(default_factory=list)

    @classmethod
    def from_filename(cls, path: Path | str) -> Grammar:
        """Describe a grammar by file name convention only.

        FooLexer.g4 is a lexer grammar, FooParser.g4 a parser grammar,
        anything else a combined grammar.
        """
        path = Path(path)
        name = path.stem
        kind: GrammarKind = "combined"
        if name.endswith("Lexer") and name != "Lexer":
            kind = "lexer"
        elif name.endswith("Parser") and name != "Parser":
            kind = "parser"
        return cls(path=path, name=name, kind=kind)


@dataclass
class Project:
    """A grammar project extracted from a descriptor.

    Attributes:
        name: Package name; unique key and output directory.
        descriptor: Path to the descriptor the project came from.
        includes: Grammar source files, in declaration order.
        generation_enabled: True if the ANTLR code generation plugin
            is configured.
        file_prefix: Prefix of the generated test file.
        grammars: One Grammar per include.
        entry_point: Start rule used by the grammar tests, if known.
        example_files: Directory of example inputs, if known.
    """

    name: str
    descriptor: Path
    includes: list[Path] = field(default_factory=list)
    generation_enabled: bool = False
    file_prefix: str = ""
    grammars: list[Grammar] = field(default_factory=list)
    entry_point: str | None = None
    example_files: str | None = None

    def __post_init__(self) -> None:
        if not self.file_prefix:
            self.file_prefix = self.name
        if not self.grammars:
            self.grammars = [Grammar.from_filename(p) for p in self.includes]

    @property
    def test_file(self) -> str:
        """Path of the generated test file, relative to the Makefile."""
        return f"{self.name}/{self.file_prefix}_test.go"

    def generated_filenames(
        self, *, listener: bool = True, visitor: bool = False
    ) -> list[str]:
        """Names of the files ANTLR generates for this project."""
        return derive_generated_files(self.grammars, listener=listener, visitor=visitor)

    def dependencies(self) -> list[Path]:
        """All grammar files the generated sources depend on.

        The includes come first, followed by any imported or token
        vocabulary grammars not already included.
        """
        result = list(self.includes)
        for grammar in self.grammars:
            for dep in grammar.dependencies:
                if dep not in result:
                    result.append(dep)
        return result


@dataclass
class AggregateIndex:
    """Every retained project of one run, keyed by name.

    Attributes:
        projects: Project name to project.
        generated_files: Project name to generated file paths,
            each prefixed with the project's output directory.
    """

    projects: dict[str, Project] = field(default_factory=dict)
    generated_files: dict[str, list[str]] = field(default_factory=dict)

    def names(self) -> list[str]:
        """Project names in deterministic (sorted) order."""
        return sorted(self.projects)

    def __len__(self) -> int:
        return len(self.projects)

    def __contains__(self, name: object) -> bool:
        return name in self.projects
