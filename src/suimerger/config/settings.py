"""SuiMerger configuration settings."""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from suimerger.exceptions import ConfigurationError, check_config_keys

_NEWLINE_ALIASES = {
    "\n": "\n",
    "\r\n": "\r\n",
    "lf": "\n",
    "crlf": "\r\n",
}


class SuiMergerSettings(BaseSettings):
    """SuiMerger configuration settings.

    Settings are loaded with the following precedence (highest to lowest):
    1. CLI arguments (when provided via command flags)
       Example: suimerger merge-bgm in.txt out.txt --bgm-folder ./BGM

    2. Config file values (YAML, TOML, or JSON)
       Example: suimerger merge-bgm in.txt out.txt --config merger.toml

    3. Environment variables (prefixed with SUIMERGER_)
       Example: export SUIMERGER_MUSIC_THRESHOLD_SECONDS=45

    4. .env file (in current directory)

    5. Default values (defined in field declarations below)
    """

    model_config = SettingsConfigDict(
        env_prefix="SUIMERGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Merge settings
    bgm_folders: list[Path] = Field(
        default_factory=list,
        description="Folders searched, in order, for '<name>.ogg' BGM files",
    )
    music_threshold_seconds: float = Field(
        default=30.0,
        description="Audio at least this long (seconds) is treated as music",
        ge=0.0,
    )
    newline: str = Field(
        default="\n",
        description="Line ending used for chunks and the output script",
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

    @field_validator("bgm_folders", mode="before")
    @classmethod
    def expand_folders(cls, v: Any) -> list[Path]:
        """Expand environment variables and ``~`` in every BGM folder.

        A single path is accepted as a one-element list.
        """
        if v is None:
            return []
        if isinstance(v, str | Path):
            v = [v]
        if not isinstance(v, list | tuple):
            raise ValueError(
                f"bgm_folders must be a list of paths, got {type(v).__name__}"
            )
        return [Path(os.path.expandvars(str(p).strip())).expanduser() for p in v]

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path | None:
        """Expand environment variables and resolve the log file path."""
        if v is None:
            return None
        if isinstance(v, str | Path):
            return Path(os.path.expandvars(str(v))).expanduser().resolve()
        raise ValueError(
            f"Path fields must be string or Path, got {type(v).__name__}: {v!r}"
        )

    @field_validator("newline", mode="before")
    @classmethod
    def normalize_newline(cls, v: Any) -> str:
        """Accept a literal line ending or the names ``lf`` / ``crlf``."""
        if isinstance(v, str):
            key = v if v in _NEWLINE_ALIASES else v.strip().lower()
            if key in _NEWLINE_ALIASES:
                return _NEWLINE_ALIASES[key]
        raise ValueError(f"newline must be one of LF or CRLF, got {v!r}")

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

    @classmethod
    def from_env(cls) -> SuiMergerSettings:
        """Create settings from environment variables."""
        return cls()

    @classmethod
    def from_file(cls, config_path: Path | str) -> SuiMergerSettings:
        """Load settings from a configuration file.

        Args:
            config_path: Path to configuration file (YAML, TOML, or JSON).

        Returns:
            Settings loaded from the file.

        Raises:
            ConfigurationError: If file format is not supported.
            FileNotFoundError: If config file doesn't exist.
        """
        data = _read_config_file(Path(config_path))
        return cls(**data)

    @classmethod
    def from_multiple_sources(
        cls,
        config_files: list[Path | str] | None = None,
        cli_args: dict[str, Any] | None = None,
    ) -> SuiMergerSettings:
        """Load settings with proper precedence from multiple sources.

        Precedence (highest to lowest):
        1. CLI arguments
        2. Config files (last file wins)
        3. Environment variables
        4. Default values

        Args:
            config_files: List of config files to load (later files override earlier).
            cli_args: Dictionary of CLI arguments.

        Returns:
            Merged settings from all sources.
        """
        data: dict[str, Any] = {}

        for config_file in config_files or []:
            try:
                data.update(_read_config_file(Path(config_file)))
            except FileNotFoundError:
                from suimerger.config.logging import get_logger as _get_logger

                _get_logger("suimerger.config.settings").warning(
                    "Configuration file not found, using defaults",
                    config_file=str(config_file),
                )

        if cli_args:
            data.update({k: v for k, v in cli_args.items() if v is not None})

        return cls(**data)


def _read_config_file(config_path: Path) -> dict[str, Any]:
    """Read a YAML, TOML or JSON configuration file into a dict."""
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    suffix = config_path.suffix.lower()

    if suffix in {".yml", ".yaml"}:
        with config_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    elif suffix == ".toml":
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    elif suffix == ".json":
        with config_path.open(encoding="utf-8") as f:
            data = json.load(f)
    else:
        raise ConfigurationError(
            message=f"Unsupported configuration file format: {suffix}",
            hint="Use one of the supported formats: .yml, .yaml, .toml, or .json",
            details={
                "file": str(config_path),
                "detected_format": suffix,
                "supported_formats": [".yml", ".yaml", ".toml", ".json"],
            },
        )

    if not isinstance(data, dict):
        raise ConfigurationError(
            message="Configuration file must contain a mapping at the top level",
            details={"file": str(config_path), "found_type": type(data).__name__},
        )

    check_config_keys(data)
    return data


# Global settings instance
_settings: SuiMergerSettings | None = None


def _get_config_paths() -> list[Path | str]:
    """Get list of existing config files, later files override earlier ones."""
    potential_paths = [
        Path.home() / ".config" / "suimerger" / "config.yaml",
        Path.home() / ".config" / "suimerger" / "config.json",
        Path.home() / ".config" / "suimerger" / "config.toml",
        Path.cwd() / "suimerger.yaml",
        Path.cwd() / "suimerger.json",
        Path.cwd() / "suimerger.toml",
    ]

    existing_paths: list[Path | str] = []
    for path in potential_paths:
        try:
            if path.is_file():
                existing_paths.append(path)
        except OSError:
            continue
    return existing_paths


def get_settings() -> SuiMergerSettings:
    """Get the global settings instance.

    Returns:
        Global SuiMergerSettings instance.
    """
    global _settings
    if _settings is None:
        config_paths = _get_config_paths()
        if config_paths:
            _settings = SuiMergerSettings.from_multiple_sources(
                config_files=config_paths
            )
        else:
            _settings = SuiMergerSettings.from_env()
    return _settings


def set_settings(settings: SuiMergerSettings) -> None:
    """Set the global settings instance.

    Args:
        settings: Settings instance to use globally.
    """
    global _settings
    _settings = settings


def clear_settings_cache() -> None:
    """Clear the global settings cache.

    This forces get_settings() to re-read from environment variables
    and configuration files on the next call.
    """
    global _settings
    _settings = None


def get_settings_for_cli(
    config_file: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> SuiMergerSettings:
    """Get settings for CLI commands with consistent precedence.

    Args:
        config_file: Optional specific config file to load. If not provided,
                    uses standard config locations.
        cli_overrides: Dictionary of CLI argument overrides. Only non-None
                      values are applied.

    Returns:
        SuiMergerSettings instance with all sources merged.

    Raises:
        FileNotFoundError: If config_file is specified but doesn't exist.
    """
    if config_file:
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        return SuiMergerSettings.from_multiple_sources(
            config_files=[config_file],
            cli_args=cli_overrides,
        )

    settings = get_settings()
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    if overrides:
        data = settings.model_dump()
        data.update(overrides)
        settings = SuiMergerSettings(**data)
    return settings
