# SPDX-License-Identifier: MIT
"""Discover grammar projects and aggregate them into one build graph.

Two discovery strategies share the same result type:

- ProjectAggregator walks project descriptors (pom.xml) and keys each
  project by the package name derived from its directory.
- GrammarScanner walks .g4 files directly, keys them by grammar name,
  and merges split FooParser/FooLexer pairs into a single project.

Both return an AggregateIndex whose generated file sets have already
been checked, so the renderer never sees an inconsistent project.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable, Iterator, Sequence
from pathlib import Path
from typing import Literal

from makemake.core.errors import (
    DuplicateProjectError,
    InconsistencyError,
    MergeError,
)
from makemake.core.naming import package_name
from makemake.core.project import AggregateIndex, Grammar, Project
from makemake.descriptors.grammar import parse_grammar
from makemake.descriptors.pom import parse_pom

logger = logging.getLogger(__name__)

DuplicatePolicy = Literal["error", "overwrite"]
DUPLICATE_POLICIES: tuple[str, ...] = ("error", "overwrite")

# Projects whose layout the generated Makefile cannot build
DEFAULT_IGNORE: tuple[str, ...] = (
    "objc",  # Is actually two subprojects
    "swift-fin",  # Grammars are nested under src/main/antlr4
)

# Path fragments skipped when scanning grammar files directly
DEFAULT_IGNORE_PATHS: tuple[str, ...] = (
    "/antlr4/examples/",
    "/CSharpSharwell/",
    "/Python/",
    "/CSharp/",
    "/JavaScript/",
    "/two-step-processing/",
    "/python3-js/",
    "/python3-py/",
    "/python3-ts/",
    ".TypeScriptTarget.",
    ".JavaScriptTarget.",
    ".PythonTarget.",
    "/LexBasic.g4",
    "ecmascript/ECMAScript.g4",
)

MIN_GENERATED_FILES = 2


class IgnoreList:
    """Path suffixes of descriptors that must never be parsed.

    An entry naming a project directory ("objc") matches
    ".../objc/pom.xml"; an entry that already ends with the descriptor
    name ("sql/plsql/pom.xml") is matched as given.
    """

    def __init__(
        self, entries: Iterable[str] = DEFAULT_IGNORE, descriptor_name: str = "pom.xml"
    ) -> None:
        self._entries = tuple(entries)
        suffixes = []
        for entry in self._entries:
            entry = entry.strip("/")
            if not entry.endswith(descriptor_name):
                entry = f"{entry}/{descriptor_name}"
            suffixes.append(entry)
        self._suffixes = tuple(suffixes)

    @property
    def entries(self) -> tuple[str, ...]:
        return self._entries

    def matches(self, path: Path | str) -> bool:
        """True if the descriptor at path is on the ignore list."""
        posix = Path(path).as_posix()
        return any(posix == s or posix.endswith("/" + s) for s in self._suffixes)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"IgnoreList({list(self._entries)!r})"


def walk_files(root: Path, predicate: Callable[[str], bool]) -> Iterator[Path]:
    """Yield files under root accepted by predicate, in sorted order.

    Sorting makes the walk, and therefore duplicate detection and the
    overwrite policy, independent of filesystem ordering.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            if predicate(filename):
                yield Path(dirpath) / filename


def check_generated_files(
    projects: dict[str, Project], *, listener: bool = True, visitor: bool = False
) -> dict[str, list[str]]:
    """Derive each project's generated file set and check its size.

    Raises:
        InconsistencyError: If a project would generate fewer than two
            files (at least one lexer and one parser).
    """
    generated_files: dict[str, list[str]] = {}
    for name in sorted(projects):
        project = projects[name]
        generated = [
            f"{name}/{filename}"
            for filename in project.generated_filenames(
                listener=listener, visitor=visitor
            )
        ]
        if len(generated) < MIN_GENERATED_FILES:
            raise InconsistencyError(name, generated)
        generated_files[name] = generated
    return generated_files


class ProjectAggregator:
    """Build an AggregateIndex from the descriptors under a root directory.

    Example:
        aggregator = ProjectAggregator(Path("grammars-v4"), ignore=["objc"])
        index = aggregator.aggregate()
        for name in index.names():
            print(name, index.generated_files[name])

    Attributes:
        root: Directory to walk.
        ignore: Descriptors to skip before parsing.
        descriptor_name: File name of project descriptors.
        on_duplicate: What to do when two descriptors derive the same
            project name: "error" raises DuplicateProjectError,
            "overwrite" keeps the later one.
    """

    def __init__(
        self,
        root: Path | str,
        *,
        ignore: Iterable[str] | IgnoreList = DEFAULT_IGNORE,
        descriptor_name: str = "pom.xml",
        on_duplicate: DuplicatePolicy = "error",
        inspect_grammars: bool = True,
        listener: bool = True,
        visitor: bool = False,
        parser: Callable[[Path], Project] = parse_pom,
    ) -> None:
        """Create an aggregator.

        Args:
            root: Directory to walk.
            ignore: Ignore list entries, or a prepared IgnoreList.
            descriptor_name: File name of project descriptors.
            on_duplicate: Duplicate project name policy.
            inspect_grammars: If True, read each include's grammar
                header to learn its real name, kind and dependencies.
            listener: Whether ANTLR generates listeners.
            visitor: Whether ANTLR generates visitors.
            parser: Descriptor parser, parse_pom by default.

        Raises:
            ValueError: If on_duplicate is not a known policy.
        """
        self.root = Path(root)
        if on_duplicate not in DUPLICATE_POLICIES:
            raise ValueError(
                f"unknown duplicate policy {on_duplicate!r}"
                f" (expected one of {', '.join(DUPLICATE_POLICIES)})"
            )
        if not isinstance(ignore, IgnoreList):
            ignore = IgnoreList(ignore, descriptor_name)
        self.ignore = ignore
        self.descriptor_name = descriptor_name
        self.on_duplicate = on_duplicate
        self.inspect_grammars = inspect_grammars
        self.listener = listener
        self.visitor = visitor
        self._parser = parser

    def descriptors(self) -> Iterator[Path]:
        """All descriptor files under root, in sorted order."""
        return walk_files(self.root, lambda name: name == self.descriptor_name)

    def aggregate(self) -> AggregateIndex:
        """Walk, parse, filter and validate every project under root.

        Raises:
            DescriptorError: On the first malformed descriptor.
            GrammarError: On the first unreadable grammar header.
            DuplicateProjectError: If two projects share a name and
                on_duplicate is "error".
            InconsistencyError: If a project generates too few files.
        """
        projects: dict[str, Project] = {}

        for path in self.descriptors():
            if self.ignore.matches(path):
                logger.debug("ignoring %s", path)
                continue

            project = self._parser(path)

            # Ignore descriptors which don't even have the ANTLR plugin
            if not project.generation_enabled:
                logger.debug("skipping %s as it has no ANTLR plugin", path)
                continue

            if not project.includes:
                logger.info("skipping %s as it contains no grammars", path)
                continue

            if self.inspect_grammars:
                project.grammars = [self._inspect(g) for g in project.grammars]

            self._insert(projects, project)

        generated_files = check_generated_files(
            projects, listener=self.listener, visitor=self.visitor
        )
        logger.info("found %d grammar projects under %s", len(projects), self.root)
        return AggregateIndex(projects=projects, generated_files=generated_files)

    def _inspect(self, grammar: Grammar) -> Grammar:
        if not grammar.path.is_file():
            logger.warning(
                "%s: grammar file not found, using its file name", grammar.path
            )
            return grammar
        return parse_grammar(grammar.path)

    def _insert(self, projects: dict[str, Project], project: Project) -> None:
        existing = projects.get(project.name)
        if existing is not None:
            if self.on_duplicate == "error":
                raise DuplicateProjectError(
                    project.name, existing.descriptor, project.descriptor
                )
            logger.warning(
                "%s replaces %s as project %r",
                project.descriptor,
                existing.descriptor,
                project.name,
            )
        projects[project.name] = project

    def __repr__(self) -> str:
        return f"ProjectAggregator(root={self.root}, ignore={self.ignore!r})"


def aggregate(
    root: Path | str, ignore: Iterable[str] = DEFAULT_IGNORE, **kwargs
) -> AggregateIndex:
    """Aggregate the projects under root. See ProjectAggregator."""
    return ProjectAggregator(root, ignore=ignore, **kwargs).aggregate()


def merge_split_grammars(
    groups: dict[str, list[Grammar]],
) -> dict[str, list[Grammar]]:
    """Merge split lexer and parser grammars into shared projects.

    Keys are lower-cased grammar names. "fooparser" and "foolexer"
    become "foo" holding [parser, lexer]; a lone "fooparser" is renamed
    "foo"; a lone "foolexer" joins an existing single-grammar "foo".

    Args:
        groups: Grammars keyed by lower-cased grammar name.

    Returns:
        A new mapping; the input is not modified.

    Raises:
        MergeError: If a merged or shortened name is already taken, or
            a lexer has nothing to join.
    """
    merged = {name: list(grammars) for name, grammars in groups.items()}

    for name in sorted(groups):
        if not name.endswith("parser") or name == "parser":
            continue
        base = name[: -len("parser")]
        lexer = base + "lexer"
        if base in merged:
            if lexer in merged:
                what = "merge parser and lexer"
            else:
                what = "shorten parser name"
            raise MergeError(f"can not {what} for {base!r}: {base!r} already exists")

        if lexer in merged:
            merged[base] = [merged[name][0], merged[lexer][0]]
            del merged[lexer]
        else:
            merged[base] = merged[name]
        del merged[name]

    # Lexers whose parser is a combined grammar or has another name
    for name in sorted(merged):
        if not name.endswith("lexer") or name == "lexer":
            continue
        base = name[: -len("lexer")]
        if base not in merged:
            raise MergeError(f"no parser grammar to pair with lexer {name!r}")
        if len(merged[base]) > 1:
            raise MergeError(f"can not shorten lexer name for {base!r}")
        merged[base] = [merged[base][0], merged[name][0]]
        del merged[name]

    return merged


class GrammarScanner:
    """Build an AggregateIndex from the .g4 files under a root directory.

    Each grammar is keyed by its lower-cased declared name, then split
    lexer and parser grammars are merged with merge_split_grammars.
    """

    def __init__(
        self,
        root: Path | str,
        *,
        ignore_paths: Sequence[str] = DEFAULT_IGNORE_PATHS,
        descriptor_name: str = "pom.xml",
        listener: bool = True,
        visitor: bool = False,
    ) -> None:
        self.root = Path(root)
        self.ignore_paths = tuple(ignore_paths)
        self.descriptor_name = descriptor_name
        self.listener = listener
        self.visitor = visitor

    def _ignored(self, path: Path) -> bool:
        posix = path.as_posix()
        return any(fragment in posix for fragment in self.ignore_paths)

    def grammars(self) -> dict[str, list[Grammar]]:
        """Parse every grammar under root, keyed by lower-cased name.

        Raises:
            DuplicateProjectError: If two files declare the same name.
        """
        groups: dict[str, list[Grammar]] = {}
        for path in walk_files(self.root, lambda name: name.endswith(".g4")):
            if self._ignored(path):
                logger.debug("ignoring %s", path)
                continue
            grammar = parse_grammar(path)
            name = grammar.name.lower()
            if name in groups:
                raise DuplicateProjectError(name, groups[name][0].path, path)
            groups[name] = [grammar]
        return groups

    def scan(self) -> AggregateIndex:
        """Discover, merge and validate every grammar project under root."""
        projects: dict[str, Project] = {}
        for base, grammars in merge_split_grammars(self.grammars()).items():
            name = package_name(base)
            if name in projects:
                raise DuplicateProjectError(
                    name, projects[name].includes[0], grammars[0].path
                )
            projects[name] = Project(
                name=name,
                descriptor=grammars[0].path.with_name(self.descriptor_name),
                includes=[g.path for g in grammars],
                generation_enabled=True,
                grammars=grammars,
            )

        generated_files = check_generated_files(
            projects, listener=self.listener, visitor=self.visitor
        )
        logger.info("found %d grammars under %s", len(projects), self.root)
        return AggregateIndex(projects=projects, generated_files=generated_files)
