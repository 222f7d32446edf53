"""reelscript configuration settings."""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from collections.abc import Callable
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from reelscript.exceptions import ConfigurationError, check_config_keys

def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open(encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as f:
        return tomllib.load(f)


def _load_json(path: Path) -> dict[str, Any]:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


CONFIG_LOADERS: dict[str, Callable[[Path], dict[str, Any]]] = {
    ".yml": _load_yaml,
    ".yaml": _load_yaml,
    ".toml": _load_toml,
    ".json": _load_json,
}

# Historical names the web app stored per project for each dialect
_DIALECT_ALIASES = {
    "inline": "inline",
    "linchong": "inline",
    "quoted": "quoted",
    "yashan": "quoted",
}


class ReelScriptSettings(BaseSettings):
    """reelscript configuration settings.

    Settings are loaded with the following precedence (highest to lowest):
    1. CLI arguments (when provided via command flags)
       Example: reelscript import --db-path /custom/path.db

    2. Config file values (YAML, TOML, or JSON)
       Example: reelscript --config myconfig.yaml

    3. Environment variables (prefixed with REELSCRIPT_)
       Example: export REELSCRIPT_PROJECTS_ROOT=/data/projects

    4. .env file (in current directory or specified path)

    5. Default values (defined in field declarations below)
    """

    model_config = SettingsConfigDict(
        env_prefix="REELSCRIPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database settings
    database_path: Path = Field(
        default_factory=lambda: Path.cwd() / "reelscript.db",
        description="Path to the SQLite database file",
    )
    database_timeout: float = Field(
        default=30.0,
        description="SQLite connection timeout in seconds",
        ge=0.1,
    )
    database_journal_mode: str = Field(
        default="WAL",
        description="SQLite journal mode (DELETE, TRUNCATE, PERSIST, MEMORY, WAL, OFF)",
        pattern="^(DELETE|TRUNCATE|PERSIST|MEMORY|WAL|OFF)$",
    )

    # Project folder settings
    projects_root: Path = Field(
        default_factory=Path.cwd,
        description="Directory holding the '<name>项目' project folders",
    )
    project_folder_suffix: str = Field(
        default="项目",
        description="Suffix that marks a directory as a project folder",
        min_length=1,
    )
    asset_subfolder: str = Field(
        default="素材",
        description="Subfolder created inside every project folder for images",
        min_length=1,
    )
    default_dialect: str = Field(
        default="inline",
        description="Markdown dialect for new projects (inline or quoted)",
    )

    # Debug settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Logging settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        pattern="^(?i)(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    log_format: str = Field(
        default="console",
        description="Log output format (console, json, structured)",
        pattern="^(?i)(console|json|structured)$",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    @field_validator("database_path", "projects_root", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path | None:
        """Expand $VARS and ~, then make the path absolute."""
        if v is None or isinstance(v, Path):
            return v.resolve() if v is not None else None
        if isinstance(v, (dict, list, set, tuple)):  # noqa: UP038
            raise ValueError(
                f"Path fields cannot accept {type(v).__name__} values: {v!r}"
            )
        return Path(os.path.expandvars(str(v))).expanduser().resolve()

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Normalize log level to uppercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.upper()
        raise ValueError(f"log_level must be a string, got {type(v).__name__}")

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, v: Any) -> str:
        """Normalize log format to lowercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.lower()
        raise ValueError(f"log_format must be a string, got {type(v).__name__}")

    @field_validator("default_dialect", mode="before")
    @classmethod
    def normalize_dialect(cls, v: Any) -> str:
        """Map dialect names (including the legacy project names) to inline/quoted."""
        if not isinstance(v, str):
            raise ValueError(
                f"default_dialect must be a string, got {type(v).__name__}"
            )
        normalized = v.strip().lower()
        if normalized not in _DIALECT_ALIASES:
            raise ValueError(
                f"Unknown dialect '{v}'. Expected one of: "
                f"{', '.join(sorted(_DIALECT_ALIASES))}"
            )
        return _DIALECT_ALIASES[normalized]

    @classmethod
    def from_env(cls) -> ReelScriptSettings:
        """Create settings from environment variables."""
        return cls()

    @classmethod
    def from_file(cls, config_path: Path | str) -> ReelScriptSettings:
        """Load settings from a YAML, TOML or JSON file."""
        return cls(**cls.read_config_file(config_path))

    @staticmethod
    def read_config_file(config_path: Path | str) -> dict[str, Any]:
        """Return the raw settings mapping stored in a config file.

        Raises:
            ConfigurationError: If the suffix is not a known format or the
                file uses a misnamed key
            FileNotFoundError: If the file does not exist
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        suffix = config_path.suffix.lower()
        loader = CONFIG_LOADERS.get(suffix)
        if loader is None:
            raise ConfigurationError(
                message=f"Unsupported configuration file format: {suffix}",
                hint=f"Use one of: {', '.join(CONFIG_LOADERS)}",
                details={"file": str(config_path)},
            )

        data = loader(config_path)
        check_config_keys(data)
        return data

    @classmethod
    def from_multiple_sources(
        cls,
        config_files: list[Path | str] | None = None,
        cli_args: dict[str, Any] | None = None,
    ) -> ReelScriptSettings:
        """Merge config files and CLI arguments over the environment.

        Later files override earlier ones and non-None CLI arguments
        override every file. Missing files are logged and skipped.
        """
        data: dict[str, Any] = {}
        for config_file in config_files or []:
            try:
                data.update(cls.read_config_file(config_file))
            except FileNotFoundError:
                # Imported here to avoid a cycle during module initialization
                from reelscript.config.logging import get_logger as _get_logger

                _get_logger("reelscript.config.settings").warning(
                    "Configuration file not found, using defaults",
                    config_file=str(config_file),
                )

        data.update({k: v for k, v in (cli_args or {}).items() if v is not None})
        return cls(**data)


# Global settings instance
_settings: ReelScriptSettings | None = None


def _get_config_paths() -> list[Path | str]:
    """Get list of existing config file paths, later files override earlier."""
    potential_paths = [
        Path.home() / ".config" / "reelscript" / "config.yaml",
        Path.home() / ".config" / "reelscript" / "config.toml",
        Path.cwd() / "reelscript.yaml",
        Path.cwd() / "reelscript.json",
        Path.cwd() / "reelscript.toml",
    ]

    existing_paths: list[Path | str] = []
    for path in potential_paths:
        try:
            if path.is_file():
                existing_paths.append(path)
        except OSError:
            continue
    return existing_paths


def get_settings() -> ReelScriptSettings:
    """Get the global settings instance.

    Returns:
        Global ReelScriptSettings instance.
    """
    global _settings
    if _settings is None:
        config_paths = _get_config_paths()
        if config_paths:
            _settings = ReelScriptSettings.from_multiple_sources(
                config_files=config_paths
            )
        else:
            _settings = ReelScriptSettings.from_env()
    return _settings


def set_settings(settings: ReelScriptSettings) -> None:
    """Set the global settings instance.

    Args:
        settings: Settings instance to use globally.
    """
    global _settings
    _settings = settings


def clear_settings_cache() -> None:
    """Clear the global settings cache.

    Forces get_settings() to re-read environment variables and configuration
    files on the next call. Useful for tests that monkeypatch the environment.
    """
    global _settings
    _settings = None


def get_settings_for_cli(
    config_file: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> ReelScriptSettings:
    """Get settings for CLI commands with consistent precedence.

    Args:
        config_file: Optional specific config file to load.
        cli_overrides: Dictionary of CLI argument overrides (e.g., database_path).
                      Only non-None values are applied.

    Returns:
        ReelScriptSettings instance with all sources merged.

    Raises:
        FileNotFoundError: If config_file is specified but doesn't exist.
    """
    if config_file:
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        return ReelScriptSettings.from_multiple_sources(
            config_files=[config_file],
            cli_args=cli_overrides,
        )

    settings = get_settings()
    if cli_overrides:
        filtered = {k: v for k, v in cli_overrides.items() if v is not None}
        if filtered:
            data = settings.model_dump()
            data.update(filtered)
            settings = ReelScriptSettings(**data)
    return settings
