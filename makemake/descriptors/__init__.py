# SPDX-License-Identifier: MIT
"""Parsers for project descriptors and grammar headers."""

from makemake.descriptors.grammar import parse_grammar
from makemake.descriptors.pom import parse_pom

__all__ = [
    "parse_grammar",
    "parse_pom",
]
