# SPDX-License-Identifier: MIT
"""Custom exceptions for makemake.

All makemake exceptions inherit from MakemakeError, which includes
the optional path of the file that caused the error for better
error messages.
"""

from __future__ import annotations

from pathlib import Path


class MakemakeError(Exception):
    """Base class for all makemake exceptions.

    Attributes:
        message: The error message.
        path: Optional path of the offending descriptor or grammar.
    """

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
    ) -> None:
        self.message = message
        self.path = path
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.path is not None:
            return f"{Path(self.path).as_posix()}: {self.message}"
        return self.message


class DescriptorError(MakemakeError):
    """A project descriptor (pom.xml) could not be parsed."""


class GrammarError(MakemakeError):
    """A grammar file has no usable grammar declaration."""


class ConfigError(MakemakeError):
    """Invalid makemake configuration."""


class AggregationError(MakemakeError):
    """The discovered projects do not form a consistent build graph."""


class DuplicateProjectError(AggregationError):
    """Two descriptors derive the same project name.

    Attributes:
        name: The colliding project name.
        first: Descriptor that claimed the name first.
        second: Descriptor that tried to claim it again.
    """

    def __init__(self, name: str, first: Path | str, second: Path | str) -> None:
        self.name = name
        self.first = first
        self.second = second
        super().__init__(
            f"duplicate project name {name!r}: "
            f"{Path(first).as_posix()} and {Path(second).as_posix()}"
        )


class InconsistencyError(AggregationError):
    """A retained project yields fewer generated files than expected.

    Attributes:
        name: The offending project.
        generated: The generated files that were derived.
    """

    def __init__(self, name: str, generated: list[str]) -> None:
        self.name = name
        self.generated = generated
        super().__init__(
            f"expected at least two generated files for {name!r}, got {generated!r}"
        )


class MergeError(AggregationError):
    """Split lexer and parser grammars cannot be merged into one project."""


class RenderError(MakemakeError):
    """The build file could not be rendered."""
