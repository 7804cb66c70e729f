# SPDX-License-Identifier: MIT
"""Makefile generator.

Rendering happens in two phases. MakefileGenerator.build() turns an
AggregateIndex into a Makefile: plain dataclasses describing every
variable and rule, with nothing formatted yet. write_makefile() then
serializes that description to text.

The generated Makefile builds each grammar project in three steps:

    json: json/json_test.go
    json/json_lexer.go ...: GRAMMAR_SOURCES := grammars-v4/json/JSON.g4
    json/json_lexer.go ...: grammars-v4/json/JSON.g4
    json/json_test.go: json/json_lexer.go json/json_parser.go ...

Shared pattern rules run ANTLR on $(GRAMMAR_SOURCES) (and go build) for
%_lexer.go %_parser.go, and the test generator (and go test) for
%_test.go.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from makemake.core.errors import RenderError
from makemake.generators.generator import BaseGenerator

if TYPE_CHECKING:
    from makemake.core.project import AggregateIndex, Project

_VARIABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")
_ASSIGNMENT_OPS = frozenset({"=", ":=", "?=", "+="})

# Targets every generated Makefile defines
FIXED_TARGETS = frozenset({"all", "antlr", "clean", "rebuild", "test"})

# Target-specific variable holding the grammars ANTLR is run on
SOURCES_VARIABLE = "GRAMMAR_SOURCES"


# =============================================================================
# Intermediate representation
# =============================================================================


@dataclass
class Variable:
    """A variable assignment: NAME op value."""

    name: str
    value: str
    op: str = ":="


@dataclass
class Command:
    """One shell command of a recipe.

    A command spanning several lines is written with backslash
    continuations, so the shell sees it as a single line.
    """

    lines: list[str]


@dataclass
class Rule:
    """A rule: targets, prerequisites and an optional recipe.

    Attributes:
        targets: Files or names this rule makes.
        prerequisites: What the targets depend on.
        commands: Recipe; empty for dependency-only rules.
        comment: Written as a # line above the rule.
        group: Consecutive rules of the same group are written without
            blank lines between them.
        variables: Target-specific variables, written as "targets: NAME := value"
            lines above the rule.
    """

    targets: list[str]
    prerequisites: list[str] = field(default_factory=list)
    commands: list[Command] = field(default_factory=list)
    comment: str | None = None
    group: str | None = None
    variables: list[Variable] = field(default_factory=list)

    @property
    def is_pattern(self) -> bool:
        return any("%" in t for t in self.targets)


@dataclass
class Makefile:
    """Fully resolved contents of a Makefile.

    Attributes:
        header: Comment lines at the top of the file.
        preamble: Make settings and special targets, written without
            blank lines between them.
        variables: Variable assignments.
        rules: Rules, in output order.
    """

    header: list[str] = field(default_factory=list)
    preamble: list[Variable | Rule] = field(default_factory=list)
    variables: list[Variable] = field(default_factory=list)
    rules: list[Rule] = field(default_factory=list)

    def rule(self, target: str) -> Rule | None:
        """Find the first rule making target."""
        for rule in self.rules:
            if target in rule.targets:
                return rule
        return None

    def variable(self, name: str) -> Variable | None:
        """Find the last assignment to name."""
        found = None
        for var in self.variables:
            if var.name == name:
                found = var
        return found


# =============================================================================
# Options
# =============================================================================


@dataclass
class MakefileOptions:
    """Settings threaded into the generated Makefile.

    Attributes:
        antlr_version: ANTLR complete jar to download and run.
        listener: Generate parse tree listeners.
        visitor: Generate parse tree visitors.
        jobs: Parallel jobs used by the "all" target.
        test_timeout: go test -timeout value.
        test_generator: Command that writes <project>/<prefix>_test.go,
            called with the project directory.
        regenerate: Command that regenerates the Makefile itself.
    """

    antlr_version: str = "4.7"
    listener: bool = True
    visitor: bool = False
    jobs: int = 2
    test_timeout: str = "10s"
    test_generator: str = "go run maketest.go"
    regenerate: str = "python -m makemake"

    @property
    def antlr_args(self) -> str:
        args = ["-Dlanguage=Go"]
        args.append("-listener" if self.listener else "-no-listener")
        args.append("-visitor" if self.visitor else "-no-visitor")
        return " ".join(args)


# =============================================================================
# Recipes
# =============================================================================


def _checked(
    command: str,
    label: str,
    *,
    before_check: tuple[str, ...] = (),
    cleanup: tuple[str, ...] = (),
) -> list[str]:
    """Lines running command, then logging and exiting on failure."""
    return [
        f"{command};",
        "RET=$$?;",
        *before_check,
        "if [ $$RET -ne 0 ]; then",
        f'\t$(XLOG) "$$lang" "{label}: $$(tail -n 1 $$errors)";',
        *(f"\t{c};" for c in cleanup),
        "\texit $$RET;",
        "fi;",
    ]


GENERATE_RECIPE = Command(
    [
        "lang=$$(dirname $@);",
        "errors=$$lang/$$(basename $*).errors;",
        "basedir=$$PWD;",
        "mkdir -p $$lang;",
        "pushd $$(dirname $<) > /dev/null;",
    ]
    + _checked(
        f"$(ANTLR) -package $$(basename $$lang) $(notdir $({SOURCES_VARIABLE}))"
        " -o $$basedir/$$lang > $$basedir/$$errors 2>&1",
        "antlr",
        before_check=("popd > /dev/null;",),
        cleanup=("rm -f $$lang/*.go",),
    )
    + _checked("go build ./$$lang >> $$errors 2>&1", "build")
)

TEST_RECIPE = Command(
    [
        "lang=$$(dirname $@);",
        "errors=$$lang/$$(basename $*).errors;",
    ]
    + _checked("$(TEST_GENERATOR) $$lang >> $$errors 2>&1", "maketest")
    + _checked("go test -timeout $(TEST_TIMEOUT) ./$$lang >> $$errors 2>&1", "test")
    + [
        # A passing go test always prints its "ok" line
        "if [ -s $$errors ]; then",
        "\trm -f $$errors;",
        '\t$(LOG) "$$lang" "";',
        "else",
        '\t$(WLOG) "$$lang" "no test output";',
        "fi",
    ]
)


def _status(symbol: str) -> str:
    return f'printf "| %s  | $(LANG_COLOR)%-15s$(NO_COLOR) | %-75s |\\n" "{symbol}"'


# =============================================================================
# Generator
# =============================================================================


class MakefileGenerator(BaseGenerator):
    """Generator that produces a Makefile for every grammar project.

    Example:
        index = ProjectAggregator(Path("grammars-v4")).aggregate()
        generator = MakefileGenerator()
        generator.generate(index, Path("Makefile"))
    """

    def __init__(self, options: MakefileOptions | None = None) -> None:
        super().__init__("make")
        self.options = options or MakefileOptions()

    def render(self, index: AggregateIndex) -> str:
        return write_makefile(self.build(index))

    def build(self, index: AggregateIndex) -> Makefile:
        """Describe the Makefile for index without formatting it."""
        opts = self.options
        names = index.names()
        test_files = [index.projects[name].test_file for name in names]

        makefile = Makefile()
        makefile.header = [
            "Do not edit this file, it is generated by makemake",
        ]
        makefile.preamble = [
            Variable("MAKEFLAGS", "--no-builtin-rules", "+="),
            Variable("SHELL", "/bin/bash"),
            Rule(
                [".PHONY"],
                [*sorted(FIXED_TARGETS), "$(GRAMMARS)"],
            ),
            Rule([".SILENT"]),
            Rule([".DELETE_ON_ERROR"]),
            Rule([".SUFFIXES"]),
        ]
        makefile.variables = [
            Variable("ANTLR_VERSION", opts.antlr_version),
            Variable("ANTLR_BIN", "$(PWD)/.bin/antlr-$(ANTLR_VERSION)-complete.jar"),
            Variable(
                "ANTLR_URL",
                "https://www.antlr.org/download/antlr-$(ANTLR_VERSION)-complete.jar",
            ),
            Variable("ANTLR_ARGS", opts.antlr_args),
            Variable("ANTLR", "java -jar $(ANTLR_BIN) $(ANTLR_ARGS)"),
            Variable("MAKEMAKE", opts.regenerate),
            Variable("TEST_GENERATOR", opts.test_generator),
            Variable("TEST_TIMEOUT", opts.test_timeout),
            Variable("GRAMMARS", " ".join(names)),
            Variable("LANG_COLOR", r"\033[0;36m", "="),
            Variable("NO_COLOR", r"\033[m", "="),
            Variable("LOG", _status("✅"), "="),
            Variable("WLOG", _status("⚠️"), "="),
            Variable("XLOG", _status("❌"), "="),
        ]

        rules = makefile.rules
        rules.append(
            Rule(["rebuild"], ["antlr", "test"], comment="This is the default target")
        )
        rules.append(
            Rule(
                ["all"],
                commands=[
                    Command(["$(MAKEMAKE)"]),
                    Command(["$(MAKE) clean"]),
                    Command([f"$(MAKE) -k -j{opts.jobs} rebuild 2> /dev/null"]),
                ],
            )
        )
        rules.append(Rule(["clean"], commands=[Command(["rm -rf $(GRAMMARS)"])]))
        rules.append(Rule(["antlr"], ["$(ANTLR_BIN)"]))
        rules.append(
            Rule(
                ["$(ANTLR_BIN)"],
                commands=[
                    Command(["mkdir -p $(dir $@)"]),
                    Command(["curl -sSL -o $@ $(ANTLR_URL)"]),
                ],
            )
        )
        rules.append(Rule(["test"], test_files))

        for name in names:
            if name in FIXED_TARGETS:
                raise RenderError(
                    f"project name {name!r} clashes with the {name!r} target"
                )
            rules.extend(
                self.project_rules(index.projects[name], index.generated_files[name])
            )

        rules.append(Rule(["%_lexer.go", "%_parser.go"], commands=[GENERATE_RECIPE]))
        rules.append(Rule(["%_test.go"], commands=[TEST_RECIPE]))
        return makefile

    def project_rules(self, project: Project, generated: list[str]) -> list[Rule]:
        """The three rules that build and test one project.

        Imported and token vocabulary grammars are prerequisites of the
        generated files, but ANTLR only runs on the project's includes.
        """
        name = project.name
        sources = [p.as_posix() for p in project.dependencies()]
        includes = " ".join(p.as_posix() for p in project.includes)
        return [
            Rule([name], [project.test_file], group=name),
            Rule(
                list(generated),
                sources,
                group=name,
                variables=[Variable(SOURCES_VARIABLE, includes)],
            ),
            Rule([project.test_file], list(generated), group=name),
        ]


# =============================================================================
# Serialization
# =============================================================================


def _check_words(words: list[str], what: str) -> None:
    for word in words:
        if not word or any(c.isspace() for c in word):
            raise RenderError(f"invalid {what} {word!r}: empty or contains whitespace")


def _write_comment(line: str) -> str:
    return f"# {line}\n" if line else "#\n"


def _write_variable(var: Variable) -> str:
    if not _VARIABLE_NAME.match(var.name):
        raise RenderError(f"invalid variable name {var.name!r}")
    if var.op not in _ASSIGNMENT_OPS:
        raise RenderError(f"invalid assignment operator {var.op!r} for {var.name}")
    return f"{var.name} {var.op} {var.value}".rstrip() + "\n"


def _write_rule(rule: Rule) -> str:
    if not rule.targets:
        raise RenderError("rule has no targets")
    _check_words(rule.targets, "target")
    _check_words(rule.prerequisites, "prerequisite")

    out = ""
    if rule.comment:
        out += f"# {rule.comment}\n"
    targets = " ".join(rule.targets)
    for var in rule.variables:
        out += f"{targets}: {_write_variable(var)}"
    line = targets + ":"
    if rule.prerequisites:
        line += " " + " ".join(rule.prerequisites)
    out += line + "\n"
    for command in rule.commands:
        if not command.lines:
            raise RenderError(f"empty command in rule for {rule.targets[0]}")
        out += "\t" + " \\\n\t".join(command.lines) + "\n"
    return out


def write_makefile(makefile: Makefile) -> str:
    """Serialize a Makefile description to text.

    Raises:
        RenderError: If a rule has no targets, a target or
            prerequisite is empty or contains whitespace, or a variable
            is malformed.
    """
    parts: list[str] = []

    if makefile.header:
        parts.append("".join(_write_comment(line) for line in makefile.header))

    if makefile.preamble:
        parts.append(
            "".join(
                _write_variable(item)
                if isinstance(item, Variable)
                else _write_rule(item)
                for item in makefile.preamble
            )
        )

    if makefile.variables:
        parts.append("".join(_write_variable(var) for var in makefile.variables))

    previous_group: str | None = None
    for rule in makefile.rules:
        text = _write_rule(rule)
        if rule.group is not None and rule.group == previous_group:
            parts[-1] += text
        else:
            parts.append(text)
        previous_group = rule.group

    return "\n".join(parts)
