# SPDX-License-Identifier: MIT
"""
Makemake: generate a Makefile that builds and tests ANTLR grammars.

Makemake walks a tree of grammar projects (such as grammars-v4), reads
each project's pom.xml and grammar headers, and writes one Makefile
that generates, compiles and tests every grammar with the Go target.
"""

from __future__ import annotations

__version__ = "0.2.0"

# Re-export commonly used classes for convenient imports
from makemake.core.aggregator import (  # noqa: E402
    GrammarScanner,
    IgnoreList,
    ProjectAggregator,
    aggregate,
    merge_split_grammars,
)
from makemake.core.errors import MakemakeError  # noqa: E402
from makemake.core.project import AggregateIndex, Grammar, Project  # noqa: E402
from makemake.descriptors import parse_grammar, parse_pom  # noqa: E402
from makemake.generators.makefile import (  # noqa: E402
    MakefileGenerator,
    MakefileOptions,
)

# Public API exports
__all__ = [
    # Version
    "__version__",
    # Data model
    "AggregateIndex",
    "Grammar",
    "Project",
    # Discovery
    "GrammarScanner",
    "IgnoreList",
    "ProjectAggregator",
    "aggregate",
    "merge_split_grammars",
    "parse_grammar",
    "parse_pom",
    # Rendering
    "MakefileGenerator",
    "MakefileOptions",
    # Errors
    "MakemakeError",
]
