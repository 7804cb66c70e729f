# SPDX-License-Identifier: MIT
"""Naming conventions shared by descriptors, grammars and generated code.

The generated file names follow the ANTLR Go target: a grammar named
FooParser produces foo_parser.go plus fooparser_listener.go and
friends, while a combined grammar Foo produces foo_lexer.go and
foo_parser.go from the one file.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from makemake.core.project import Grammar

_NON_IDENT = re.compile(r"[^a-z0-9_]")


def package_name(directory: str) -> str:
    """Turn a project directory name into a Go package name.

    Example:
        package_name("swift-fin") == "swift_fin"
        package_name("6502") == "g6502"
    """
    name = _NON_IDENT.sub("_", directory.lower())
    if not name or name[0].isdigit():
        name = "g" + name
    return name


def recognizer_base(name: str) -> str:
    """Strip a trailing Lexer/Parser from a grammar name and lower-case it."""
    for suffix in ("Lexer", "Parser"):
        if name.endswith(suffix) and name != suffix:
            name = name[: -len(suffix)]
            break
    return name.lower()


def grammar_outputs(
    grammar: Grammar, *, listener: bool = True, visitor: bool = False
) -> list[str]:
    """Files ANTLR generates for a single grammar."""
    base = recognizer_base(grammar.name)
    if grammar.kind == "lexer":
        return [f"{base}_lexer.go"]

    files = []
    if grammar.kind == "combined":
        files.append(f"{base}_lexer.go")
    files.append(f"{base}_parser.go")

    lname = grammar.name.lower()
    if listener:
        files += [f"{lname}_listener.go", f"{lname}_base_listener.go"]
    if visitor:
        files += [f"{lname}_visitor.go", f"{lname}_base_visitor.go"]
    return files


def derive_generated_files(
    grammars: Iterable[Grammar], *, listener: bool = True, visitor: bool = False
) -> list[str]:
    """Ordered, de-duplicated generated file names for a set of grammars."""
    seen: dict[str, None] = {}
    for grammar in grammars:
        for filename in grammar_outputs(grammar, listener=listener, visitor=visitor):
            seen.setdefault(filename, None)
    return list(seen)
