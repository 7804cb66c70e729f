# SPDX-License-Identifier: MIT
"""ANTLR grammar (.g4) headers.

Only the prelude of a grammar is read: the declaration that names the
grammar and gives its kind, the tokenVocab option, and the import
statement. Rules are never parsed.

    parser grammar CPP14Parser;
    options { tokenVocab = CPP14Lexer; }
    import Common;
"""

from __future__ import annotations

import re
from pathlib import Path

from makemake.core.errors import GrammarError
from makemake.core.project import Grammar, GrammarKind

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT = re.compile(r"//[^\n]*")

_DECLARATION = re.compile(r"\s*(?:(lexer|parser)\s+)?grammar\s+(\w+)\s*;")
_OPTIONS = re.compile(r"\boptions\s*\{([^}]*)\}")
_TOKEN_VOCAB = re.compile(r"\btokenVocab\s*=\s*(\w+)\s*;")
_IMPORT = re.compile(r"^\s*import\s+([\w\s,=]+);", re.MULTILINE)


def strip_comments(text: str) -> str:
    """Remove block and line comments from grammar source."""
    return _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub(" ", text))


def parse_grammar(path: Path | str) -> Grammar:
    """Read the header of a grammar file.

    Args:
        path: Path to a .g4 file.

    Returns:
        The grammar, with dependencies on any sibling grammar files it
        imports or takes its token vocabulary from.

    Raises:
        GrammarError: If the file cannot be read or has no grammar
            declaration.
    """
    path = Path(path)
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise GrammarError(f"cannot read grammar: {e}", path) from e

    text = strip_comments(source)
    match = _DECLARATION.match(text)
    if match is None:
        raise GrammarError("no grammar declaration found", path)

    kind: GrammarKind = "combined"
    if match.group(1) == "lexer":
        kind = "lexer"
    elif match.group(1) == "parser":
        kind = "parser"

    names: list[str] = []
    options = _OPTIONS.search(text, match.end())
    if options:
        vocab = _TOKEN_VOCAB.search(options.group(1))
        if vocab:
            names.append(vocab.group(1))
    imports = _IMPORT.search(text, match.end())
    if imports:
        for entry in imports.group(1).split(","):
            # "import Alias=Name;" imports Name
            name = entry.split("=")[-1].strip()
            if name:
                names.append(name)

    dependencies: list[Path] = []
    for name in names:
        dep = path.with_name(f"{name}.g4")
        if dep != path and dep.is_file() and dep not in dependencies:
            dependencies.append(dep)

    return Grammar(
        path=path,
        name=match.group(2),
        kind=kind,
        dependencies=dependencies,
    )
