# SPDX-License-Identifier: MIT
"""Tests for makemake.core.naming."""

from pathlib import Path

from makemake.core.naming import (
    derive_generated_files,
    grammar_outputs,
    package_name,
    recognizer_base,
)
from makemake.core.project import Grammar


class TestPackageName:
    def test_lowercases(self):
        assert package_name("JSON") == "json"

    def test_replaces_dashes(self):
        assert package_name("swift-fin") == "swift_fin"

    def test_replaces_other_characters(self):
        assert package_name("c.sharp 2") == "c_sharp_2"

    def test_leading_digit(self):
        assert package_name("6502") == "g6502"


class TestRecognizerBase:
    def test_strips_lexer(self):
        assert recognizer_base("CPP14Lexer") == "cpp14"

    def test_strips_parser(self):
        assert recognizer_base("CPP14Parser") == "cpp14"

    def test_combined_name_unchanged(self):
        assert recognizer_base("JSON") == "json"

    def test_bare_suffix_kept(self):
        assert recognizer_base("Lexer") == "lexer"


class TestGrammarOutputs:
    def test_combined(self):
        g = Grammar(Path("JSON.g4"), "JSON", "combined")
        assert grammar_outputs(g) == [
            "json_lexer.go",
            "json_parser.go",
            "json_listener.go",
            "json_base_listener.go",
        ]

    def test_lexer(self):
        g = Grammar(Path("FooLexer.g4"), "FooLexer", "lexer")
        assert grammar_outputs(g) == ["foo_lexer.go"]

    def test_parser(self):
        g = Grammar(Path("FooParser.g4"), "FooParser", "parser")
        assert grammar_outputs(g) == [
            "foo_parser.go",
            "fooparser_listener.go",
            "fooparser_base_listener.go",
        ]

    def test_visitor_without_listener(self):
        g = Grammar(Path("FooParser.g4"), "FooParser", "parser")
        assert grammar_outputs(g, listener=False, visitor=True) == [
            "foo_parser.go",
            "fooparser_visitor.go",
            "fooparser_base_visitor.go",
        ]


class TestDeriveGeneratedFiles:
    def test_split_grammar_pair(self):
        grammars = [
            Grammar(Path("FooParser.g4"), "FooParser", "parser"),
            Grammar(Path("FooLexer.g4"), "FooLexer", "lexer"),
        ]
        assert derive_generated_files(grammars, listener=False) == [
            "foo_parser.go",
            "foo_lexer.go",
        ]

    def test_duplicates_removed_in_order(self):
        grammars = [
            Grammar(Path("A.g4"), "A", "combined"),
            Grammar(Path("ALexer.g4"), "ALexer", "lexer"),
        ]
        assert derive_generated_files(grammars, listener=False) == [
            "a_lexer.go",
            "a_parser.go",
        ]

    def test_lexer_only_is_single_file(self):
        grammars = [Grammar(Path("FooLexer.g4"), "FooLexer", "lexer")]
        assert len(derive_generated_files(grammars)) == 1

    def test_empty(self):
        assert derive_generated_files([]) == []
