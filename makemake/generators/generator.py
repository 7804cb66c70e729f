# SPDX-License-Identifier: MIT
"""Generator protocol for build file generation.

Generators take an aggregated index of grammar projects and produce a
single output file (a Makefile, a dependency diagram, ...).
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from makemake.core.project import AggregateIndex


@runtime_checkable
class Generator(Protocol):
    """Protocol for build file generators.

    A Generator renders an AggregateIndex to text and writes it to an
    output file. Different generators produce different formats.
    """

    @property
    def name(self) -> str:
        """Generator name (e.g., 'make', 'mermaid')."""
        ...

    def render(self, index: AggregateIndex) -> str:
        """Render the index to the generator's output format."""
        ...

    def generate(self, index: AggregateIndex, output: Path) -> Path:
        """Render the index and write it to output.

        Args:
            index: The aggregated projects to generate for.
            output: File to write.

        Returns:
            The path written.
        """
        ...


class BaseGenerator:
    """Base class for generators with common functionality."""

    def __init__(self, name: str) -> None:
        """Initialize a generator.

        Args:
            name: Generator name.
        """
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def render(self, index: AggregateIndex) -> str:
        """Render the index. Subclasses must implement."""
        raise NotImplementedError

    def generate(self, index: AggregateIndex, output: Path) -> Path:
        """Render the index, then replace output with the result.

        Rendering completes before the destination is touched, and the
        text goes to a temporary file in the same directory that is
        renamed over output, so a failure never leaves a partial file.
        """
        text = self.render(index)
        write_atomic(Path(output), text)
        return Path(output)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"


def write_atomic(path: Path, text: str) -> None:
    """Write text to path by renaming a fully written temporary file."""
    directory = path.parent
    directory.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=directory, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
