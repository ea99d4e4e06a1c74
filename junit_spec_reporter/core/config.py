"""
Configuration management for the JUnit spec reporter.
"""

import os
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, fields, MISSING

from junit_spec_reporter.core.errors import ConfigurationError

OUTPUT_ENV_VAR = "JUNIT_SPEC_FILE"
CONFIG_ENV_VAR = "JUNIT_SPEC_CONFIG"
CONFIG_FILE_NAME = "junit_spec.toml"
DEFAULT_SUITE_NAME = "Test Run"

PATH_KEYS = frozenset({"output_path", "config_file"})


def resolve_output_path(option: Optional[Path] = None) -> Optional[Path]:
    """
    Pick the report destination.

    The environment variable wins whenever it is set; the explicit option is
    only consulted when the environment value is absent.
    """
    env_path = os.environ.get(OUTPUT_ENV_VAR)
    if env_path:
        return Path(env_path)
    if option:
        return Path(option)
    return None


@dataclass
class ReporterConfig:
    """Configuration class for the JUnit spec reporter."""

    # Report destination; None means standard output
    output_path: Optional[Path] = None
    suite_name: str = DEFAULT_SUITE_NAME

    # Failure detail
    hide_diff: bool = False

    # Console spec output
    spec_output: bool = True
    color: bool = False
    verbosity: int = 0  # 0=warnings, 1=progress, 2=details, 3=debug

    config_file: Optional[Path] = None

    def __post_init__(self):
        """Post-initialization processing."""
        self._load_config_file()

        self.output_path = resolve_output_path(self.output_path)

        if self.suite_name is None:
            self.suite_name = DEFAULT_SUITE_NAME

        if not 0 <= self.verbosity <= 3:
            raise ConfigurationError(f"verbosity must be between 0 and 3, got {self.verbosity}")

    def _load_config_file(self) -> None:
        """Load defaults from junit_spec.toml or [tool.junit_spec] in pyproject.toml."""
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            self.config_file = Path(env_path).resolve()
            if not self.config_file.exists():
                raise ConfigurationError(
                    f"{CONFIG_ENV_VAR} points to a missing file: {self.config_file}"
                )
        elif self.config_file is None:
            candidate = Path.cwd() / CONFIG_FILE_NAME
            if not candidate.exists():
                candidate = Path.cwd() / "pyproject.toml"
            self.config_file = candidate
        else:
            self.config_file = Path(self.config_file).resolve()

        if not self.config_file.exists():
            return

        try:
            try:
                import tomllib  # Python 3.11+
            except ModuleNotFoundError:  # Python 3.8-3.10
                import tomli as tomllib

            data = tomllib.loads(self.config_file.read_text())
        except Exception as e:
            raise ConfigurationError(f"Failed to read config file: {self.config_file}: {e}") from e

        table = data.get("junit_spec") or data.get("tool", {}).get("junit_spec", {})
        if not isinstance(table, dict):
            raise ConfigurationError(f"[junit_spec] in {self.config_file} must be a table")

        defaults = {
            f.name: f.default for f in fields(self) if f.default is not MISSING
        }
        for key, value in table.items():
            if key not in defaults or key == "config_file":
                continue
            if value is None:
                continue
            # Explicit constructor values win over the file
            if getattr(self, key) != defaults[key]:
                continue
            if key in PATH_KEYS:
                value = Path(value)
            setattr(self, key, value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "output_path": str(self.output_path) if self.output_path else None,
            "suite_name": self.suite_name,
            "hide_diff": self.hide_diff,
            "spec_output": self.spec_output,
            "color": self.color,
            "verbosity": self.verbosity,
            "config_file": str(self.config_file) if self.config_file else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReporterConfig":
        """Create configuration from dictionary."""
        data = dict(data)
        for key in PATH_KEYS:
            if key in data and isinstance(data[key], str):
                data[key] = Path(data[key])
        return cls(**data)
