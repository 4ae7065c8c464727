"""
Configuration for notesync.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from notesync.utils.exceptions import ConfigurationError


class ApiConfig(BaseModel):
    """Notes API (content fetch) configuration."""

    base_url: str = "http://localhost:3000"
    timeout: float = 30.0


class StoreConfig(BaseModel):
    """Reducer behaviour switches."""

    # Replace a note's outgoing links on update instead of only adding edges
    replace_links_on_update: bool = False
    # Ignore set-content for notes that are no longer titled or in the graph
    drop_content_for_removed: bool = False
    # Audit dual-index symmetry after every graph-mutating action
    check_invariants: bool = False


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


# Environment variable -> (section, field)
ENV_VARS: dict[str, tuple[str, str]] = {
    "NOTESYNC_API_BASE_URL": ("api", "base_url"),
    "NOTESYNC_API_TIMEOUT": ("api", "timeout"),
    "NOTESYNC_REPLACE_LINKS_ON_UPDATE": ("store", "replace_links_on_update"),
    "NOTESYNC_DROP_CONTENT_FOR_REMOVED": ("store", "drop_content_for_removed"),
    "NOTESYNC_CHECK_INVARIANTS": ("store", "check_invariants"),
    "NOTESYNC_LOG_LEVEL": ("logging", "level"),
    "NOTESYNC_LOG_TO_FILE": ("logging", "log_to_file"),
    "NOTESYNC_LOG_DIR": ("logging", "log_dir"),
    "NOTESYNC_LOG_FILE_ROTATION": ("logging", "file_rotation"),
    "NOTESYNC_LOG_FILE_RETENTION": ("logging", "file_retention"),
    "NOTESYNC_LOG_COMPRESSION": ("logging", "compression"),
    "NOTESYNC_LOG_SERIALIZE": ("logging", "serialize"),
}


class Config(BaseModel):
    """Main configuration."""

    api: ApiConfig = Field(default_factory=ApiConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def env_overrides(cls, env_file: str | Path | None = None) -> dict[str, dict[str, Any]]:
        """
        Collect the settings that are set in the environment.

        Priority: .env file -> system environment variables. Unset and
        empty variables are left out so they do not mask other sources.

        Args:
            env_file: Optional path to .env file (default: .env in working directory)

        Returns:
            Nested dict of section -> field -> typed value

        Raises:
            ConfigurationError: If a variable cannot be converted
        """
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        defaults = cls()

        def get_env(key: str, default: Any) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            try:
                if isinstance(default, bool):
                    return value.lower() in ("true", "1", "yes")
                if isinstance(default, int):
                    return int(value)
                if isinstance(default, float):
                    return float(value)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {key}: {value!r}", context={"key": key, "value": value}
                ) from e
            return value

        overrides: dict[str, dict[str, Any]] = {}
        for key, (section, field) in ENV_VARS.items():
            if os.getenv(key) in (None, ""):
                continue
            default = getattr(getattr(defaults, section), field)
            overrides.setdefault(section, {})[field] = get_env(key, default)
        return overrides

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Args:
            env_file: Optional path to .env file

        Returns:
            Config instance

        Environment variables:
            NOTESYNC_API_BASE_URL: Notes API base URL
            NOTESYNC_API_TIMEOUT: Request timeout in seconds
            NOTESYNC_REPLACE_LINKS_ON_UPDATE: Replace links on update (true/false)
            NOTESYNC_DROP_CONTENT_FOR_REMOVED: Drop content for removed notes (true/false)
            NOTESYNC_CHECK_INVARIANTS: Audit graph symmetry after each action (true/false)
            NOTESYNC_LOG_LEVEL: Log level
            NOTESYNC_LOG_TO_FILE: Also log to rotating files (true/false)
            NOTESYNC_LOG_DIR: Directory for log files
        """
        return cls(**cls.env_overrides(env_file))

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ConfigurationError: If the YAML content does not describe a valid config
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        try:
            return cls(**data)
        except (TypeError, ValidationError) as e:
            raise ConfigurationError(
                f"Invalid config file {yaml_path}: {e}", context={"path": str(yaml_path)}
            ) from e

    @classmethod
    def load(
        cls,
        yaml_path: str | Path | None = None,
        env_file: str | Path | None = None,
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Environment variables override single fields, so YAML settings in
        the same section are kept.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If yaml_path is given but does not exist
            ConfigurationError: If the YAML file or an env variable is invalid
        """
        config_dict = cls.from_yaml(yaml_path).model_dump() if yaml_path else {}

        for section, fields in cls.env_overrides(env_file).items():
            config_dict.setdefault(section, {}).update(fields)

        return cls(**config_dict)
