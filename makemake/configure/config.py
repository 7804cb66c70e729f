# SPDX-License-Identifier: MIT
"""Settings for makemake.

Settings come from, lowest precedence first:
    1. The defaults below
    2. makemake.toml, or [tool.makemake] in pyproject.toml
    3. Environment variables (MAKEMAKE_ROOT, MAKEMAKE_OUTPUT)
    4. Command line flags

Example makemake.toml:
    root = "grammars-v4"
    ignore = ["objc", "swift-fin"]
    on_duplicate = "error"
    visitor = true
"""

from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]

from makemake.core.aggregator import (
    DEFAULT_IGNORE,
    DEFAULT_IGNORE_PATHS,
    DUPLICATE_POLICIES,
)
from makemake.core.errors import ConfigError
from makemake.generators.makefile import MakefileOptions

logger = logging.getLogger(__name__)

CONFIG_FILE = "makemake.toml"
PYPROJECT_FILE = "pyproject.toml"

# Environment variable -> setting
ENV_OVERRIDES = {
    "MAKEMAKE_ROOT": "root",
    "MAKEMAKE_OUTPUT": "output",
}

_CHOICES = {
    "discover": ("pom", "grammar"),
    "on_duplicate": DUPLICATE_POLICIES,
}


@dataclass
class Settings:
    """Everything a makemake run can be configured with.

    Attributes:
        root: Directory holding the grammar projects.
        output: Makefile to write.
        descriptor_name: File name of project descriptors.
        discover: "pom" to walk descriptors, "grammar" to walk .g4 files.
        ignore: Descriptor path suffixes to skip ("pom" discovery).
        ignore_paths: Path fragments to skip ("grammar" discovery).
        on_duplicate: "error" or "overwrite" on project name collisions.
        inspect_grammars: Read grammar headers of included files.
        antlr_version: ANTLR release used by the generated Makefile.
        listener: Generate parse tree listeners.
        visitor: Generate parse tree visitors.
        jobs: Parallel jobs for "make all".
        test_timeout: Timeout passed to go test.
        test_generator: Command writing each project's test file.
        regenerate: Command the Makefile runs to regenerate itself.
    """

    root: str = "grammars-v4"
    output: str = "Makefile"
    descriptor_name: str = "pom.xml"
    discover: str = "pom"
    ignore: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE))
    ignore_paths: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATHS))
    on_duplicate: str = "error"
    inspect_grammars: bool = True
    antlr_version: str = "4.7"
    listener: bool = True
    visitor: bool = False
    jobs: int = 2
    test_timeout: str = "10s"
    test_generator: str = "go run maketest.go"
    regenerate: str = "python -m makemake"

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any], source: Path | str | None = None
    ) -> Settings:
        """Create settings from a mapping, validating every value.

        Raises:
            ConfigError: On unknown keys or values of the wrong type.
        """
        return cls().update(data, source)

    def update(
        self, data: Mapping[str, Any], source: Path | str | None = None
    ) -> Settings:
        """Return a copy with values from data applied.

        None values are skipped, so parsed command line arguments can be
        passed through directly.
        """
        fields = {f.name: f for f in dataclasses.fields(self)}
        changes: dict[str, Any] = {}
        for key, value in data.items():
            if value is None:
                continue
            if key not in fields:
                raise ConfigError(f"unknown setting {key!r}", source)
            changes[key] = _check_value(key, value, getattr(self, key), source)
        return dataclasses.replace(self, **changes)

    def makefile_options(self) -> MakefileOptions:
        """Options for the Makefile generator."""
        return MakefileOptions(
            antlr_version=self.antlr_version,
            listener=self.listener,
            visitor=self.visitor,
            jobs=self.jobs,
            test_timeout=self.test_timeout,
            test_generator=self.test_generator,
            regenerate=self.regenerate,
        )


def _check_value(key: str, value: Any, default: Any, source: Path | str | None) -> Any:
    if isinstance(default, bool):
        ok = isinstance(value, bool)
    elif isinstance(default, int):
        ok = isinstance(value, int) and not isinstance(value, bool) and value > 0
    elif isinstance(default, list):
        ok = isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)
        value = list(value) if ok else value
    else:
        ok = isinstance(value, str) and value != ""
    if not ok:
        raise ConfigError(f"invalid value for {key!r}: {value!r}", source)

    choices = _CHOICES.get(key)
    if choices and value not in choices:
        raise ConfigError(
            f"invalid value for {key!r}: {value!r} "
            f"(expected one of {', '.join(choices)})",
            source,
        )
    return value


def read_config_file(path: Path) -> dict[str, Any]:
    """Read settings from a TOML file.

    For pyproject.toml only the [tool.makemake] table is used.

    Raises:
        ConfigError: If the file is unreadable or not valid TOML.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML: {e}", path) from e
    except OSError as e:
        raise ConfigError(f"cannot read config: {e.strerror}", path) from e

    if path.name == PYPROJECT_FILE:
        data = data.get("tool", {}).get("makemake", {})
    if not isinstance(data, dict):
        raise ConfigError("[tool.makemake] must be a table", path)
    return data


def find_config_file(search_dir: Path | None = None) -> Path | None:
    """Find makemake.toml, or a pyproject.toml with [tool.makemake]."""
    if search_dir is None:
        search_dir = Path.cwd()

    candidate = search_dir / CONFIG_FILE
    if candidate.is_file():
        return candidate

    pyproject = search_dir / PYPROJECT_FILE
    if pyproject.is_file() and read_config_file(pyproject):
        return pyproject

    return None


def load_settings(
    path: Path | str | None = None,
    *,
    search_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from a config file and the environment.

    Args:
        path: Explicit config file. If None, look for one in search_dir.
        search_dir: Directory to search (default: current dir).
        environ: Environment to read overrides from (default: os.environ).

    Returns:
        The settings.

    Raises:
        ConfigError: If the explicit file is missing, or any file or
            environment value is invalid.
    """
    if path is not None:
        config_path: Path | None = Path(path)
        if not config_path.is_file():
            raise ConfigError("config file not found", config_path)
    else:
        config_path = find_config_file(search_dir)

    settings = Settings()
    if config_path is not None:
        logger.debug("loading settings from %s", config_path)
        settings = settings.update(read_config_file(config_path), config_path)

    if environ is None:
        environ = os.environ
    overrides = {
        key: environ[var] for var, key in ENV_OVERRIDES.items() if environ.get(var)
    }
    if overrides:
        logger.debug("environment overrides: %s", overrides)
        settings = settings.update(overrides, "environment")

    return settings
