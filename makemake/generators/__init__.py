# SPDX-License-Identifier: MIT
"""Build file generators for makemake."""

from makemake.generators.generator import BaseGenerator, Generator
from makemake.generators.makefile import MakefileGenerator, MakefileOptions
from makemake.generators.mermaid import MermaidGenerator

__all__ = [
    "BaseGenerator",
    "Generator",
    "MakefileGenerator",
    "MakefileOptions",
    "MermaidGenerator",
]
