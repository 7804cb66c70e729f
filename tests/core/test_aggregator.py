# SPDX-License-Identifier: MIT
"""Tests for makemake.core.aggregator."""

from pathlib import Path

import pytest

from makemake.core.aggregator import (
    DEFAULT_IGNORE,
    IgnoreList,
    ProjectAggregator,
    aggregate,
    check_generated_files,
)
from makemake.core.errors import (
    DescriptorError,
    DuplicateProjectError,
    GrammarError,
    InconsistencyError,
)
from makemake.core.project import Project
from makemake.descriptors.pom import parse_pom


class TestIgnoreList:
    def test_directory_entry(self):
        ignore = IgnoreList(["objc"])
        assert ignore.matches("grammars-v4/objc/pom.xml")
        assert not ignore.matches("grammars-v4/objc/two/pom.xml")
        assert not ignore.matches("grammars-v4/notobjc/pom.xml")

    def test_full_suffix_entry(self):
        ignore = IgnoreList(["sql/plsql/pom.xml"])
        assert ignore.matches("grammars-v4/sql/plsql/pom.xml")
        assert not ignore.matches("grammars-v4/plsql/pom.xml")

    def test_relative_root(self):
        assert IgnoreList(["objc"]).matches("objc/pom.xml")

    def test_custom_descriptor_name(self):
        ignore = IgnoreList(["objc"], descriptor_name="build.xml")
        assert ignore.matches("root/objc/build.xml")
        assert not ignore.matches("root/objc/pom.xml")

    def test_defaults(self):
        ignore = IgnoreList()
        assert ignore.entries == DEFAULT_IGNORE
        assert ignore.matches("grammars-v4/swift-fin/pom.xml")

    def test_empty(self):
        ignore = IgnoreList([])
        assert len(ignore) == 0
        assert not ignore.matches("grammars-v4/objc/pom.xml")


class TestProjectAggregator:
    def test_single_project(self, grammars_root, make_project):
        make_project("json", {"JSON.g4": "combined"})

        index = ProjectAggregator(grammars_root).aggregate()

        assert list(index.projects) == ["json"]
        assert index.generated_files["json"] == [
            "json/json_lexer.go",
            "json/json_parser.go",
            "json/json_listener.go",
            "json/json_base_listener.go",
        ]

    def test_example_from_two_includes(self, grammars_root, make_project):
        make_project("proj", {"A.g4": "combined", "ALexer.g4": "lexer"})

        index = aggregate(grammars_root, listener=False)

        project = index.projects["proj"]
        assert project.includes == [
            grammars_root / "proj" / "A.g4",
            grammars_root / "proj" / "ALexer.g4",
        ]
        assert index.generated_files["proj"] == ["proj/a_lexer.go", "proj/a_parser.go"]

    def test_split_grammar_dependencies(self, grammars_root, make_project):
        make_project("cpp", {"CPP14Parser.g4": "parser", "CPP14Lexer.g4": "lexer"})

        index = aggregate(grammars_root)

        parser = index.projects["cpp"].grammars[0]
        assert parser.kind == "parser"
        assert parser.dependencies == [grammars_root / "cpp" / "CPP14Lexer.g4"]

    def test_nested_projects(self, grammars_root, make_project):
        make_project("sql/mysql", {"MySQL.g4": "combined"})
        make_project("sql/sqlite", {"SQLite.g4": "combined"})

        index = aggregate(grammars_root)

        assert index.names() == ["mysql", "sqlite"]

    def test_skips_project_without_plugin(self, grammars_root, make_project):
        make_project("docs", {}, plugin=False)
        make_project("json", {"JSON.g4": "combined"})

        index = aggregate(grammars_root)

        assert index.names() == ["json"]

    def test_skips_project_without_includes(
        self, grammars_root, make_project, caplog
    ):
        make_project("empty", {})
        make_project("json", {"JSON.g4": "combined"})

        with caplog.at_level("INFO", logger="makemake"):
            index = aggregate(grammars_root)

        assert "empty" not in index
        assert "contains no grammars" in caplog.text

    def test_ignored_descriptor_is_never_parsed(self, grammars_root, make_project):
        make_project("json", {"JSON.g4": "combined"})
        bad = grammars_root / "swift-fin" / "pom.xml"
        bad.parent.mkdir()
        bad.write_text("<project><not-closed>")

        parsed: list[Path] = []

        def parser(path: Path) -> Project:
            parsed.append(path)
            return parse_pom(path)

        index = ProjectAggregator(grammars_root, parser=parser).aggregate()

        assert index.names() == ["json"]
        assert bad not in parsed

    def test_injected_ignore_list(self, grammars_root, make_project):
        make_project("json", {"JSON.g4": "combined"})
        make_project("xml", {"XML.g4": "combined"})

        index = aggregate(grammars_root, ignore=["xml"])

        assert index.names() == ["json"]

    def test_malformed_descriptor_aborts(self, grammars_root, make_project):
        make_project("json", {"JSON.g4": "combined"})
        bad = grammars_root / "broken" / "pom.xml"
        bad.parent.mkdir()
        bad.write_text("<project><build>")

        with pytest.raises(DescriptorError) as excinfo:
            aggregate(grammars_root)

        assert excinfo.value.path == bad

    def test_malformed_grammar_aborts(self, grammars_root, make_project):
        pom = make_project("json", {"JSON.g4": "combined"})
        (pom.parent / "JSON.g4").write_text("json : value ;")

        with pytest.raises(GrammarError):
            aggregate(grammars_root)

    def test_missing_grammar_uses_file_name(self, grammars_root, make_project):
        make_project("proj", {"A.g4": "combined"}, write_grammars=False)

        index = aggregate(grammars_root)

        assert index.projects["proj"].grammars[0].name == "A"

    def test_header_kind_overrides_file_name(self, grammars_root, make_project):
        pom = make_project("calc", {"Calc.g4": "combined"})
        (pom.parent / "Calc.g4").write_text("lexer grammar Calc;\nID : [a-z]+ ;\n")

        with pytest.raises(InconsistencyError):
            aggregate(grammars_root)

    def test_inspect_grammars_disabled(self, grammars_root, make_project):
        pom = make_project("calc", {"Calc.g4": "combined"})
        (pom.parent / "Calc.g4").write_text("not a grammar")

        index = aggregate(grammars_root, inspect_grammars=False)

        assert index.projects["calc"].grammars[0].kind == "combined"

    def test_lexer_only_project_is_fatal(self, grammars_root, make_project):
        make_project("json", {"JSON.g4": "combined"})
        make_project("tokens", {"TokensLexer.g4": "lexer"})

        with pytest.raises(InconsistencyError) as excinfo:
            aggregate(grammars_root)

        assert excinfo.value.name == "tokens"
        assert excinfo.value.generated == ["tokens/tokens_lexer.go"]


class TestDuplicateNames:
    def test_duplicate_is_fatal_by_default(self, grammars_root, make_project):
        first = make_project("a/json", {"JSON.g4": "combined"})
        second = make_project("b/json", {"JSON5.g4": "combined"})

        with pytest.raises(DuplicateProjectError) as excinfo:
            aggregate(grammars_root)

        assert excinfo.value.name == "json"
        assert excinfo.value.first == first
        assert excinfo.value.second == second

    def test_sanitized_names_collide(self, grammars_root, make_project):
        make_project("swift-fin2", {"A.g4": "combined"})
        make_project("swift_fin2", {"B.g4": "combined"})

        with pytest.raises(DuplicateProjectError):
            aggregate(grammars_root)

    def test_overwrite_keeps_later_project(self, grammars_root, make_project, caplog):
        make_project("a/json", {"JSON.g4": "combined"})
        second = make_project("b/json", {"JSON5.g4": "combined"})

        with caplog.at_level("WARNING", logger="makemake"):
            index = aggregate(grammars_root, on_duplicate="overwrite")

        assert len(index) == 1
        assert index.projects["json"].descriptor == second
        assert index.generated_files["json"][0] == "json/json5_lexer.go"
        assert "replaces" in caplog.text

    def test_unknown_policy_rejected(self, grammars_root):
        with pytest.raises(ValueError, match="unknown duplicate policy 'keep'"):
            ProjectAggregator(grammars_root, on_duplicate="keep")  # type: ignore[arg-type]


class TestCheckGeneratedFiles:
    def test_prefixes_project_directory(self):
        project = Project(
            name="json", descriptor=Path("pom.xml"), includes=[Path("JSON.g4")]
        )
        generated = check_generated_files({"json": project}, listener=False)
        assert generated == {"json": ["json/json_lexer.go", "json/json_parser.go"]}

    def test_too_few_files(self):
        project = Project(
            name="lex", descriptor=Path("pom.xml"), includes=[Path("LexLexer.g4")]
        )
        with pytest.raises(InconsistencyError, match="'lex'"):
            check_generated_files({"lex": project})
