"""Application settings with Pydantic Settings validation.

Environment variables and the optional .env file take precedence.
Non-sensitive defaults are loaded from config/main.yaml and config/*.yaml,
merged in order and validated against JSON schemas in config/schemas/.
"""

import json
from pathlib import Path
from typing import Any, Literal, cast

import pytz
import yaml
from jsonschema import ValidationError as JSONSchemaValidationError
from jsonschema import validate
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sitterlink.config.logging_config import get_logger
from sitterlink.domain.matching_constants import (
    AGE_CEILING,
    AGE_FLOOR,
    DEFAULT_AGE_MAX,
    DEFAULT_AGE_MIN,
)
from sitterlink.domain.messaging_constants import DEFAULT_SYNC_INTERVAL_SECONDS

logger = cast(Any, get_logger(__name__))

CONFIG_DIR = Path("config")


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge into base (takes precedence)

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_schema(schema_name: str) -> dict[str, Any]:
    """Load JSON Schema from config/schemas/.

    Args:
        schema_name: Schema name without extension (e.g., "main")

    Returns:
        JSON Schema dictionary or empty dict if not found
    """
    schema_path = CONFIG_DIR / "schemas" / f"{schema_name}.schema.json"
    if not schema_path.exists():
        return {}

    try:
        with open(schema_path, encoding="utf-8") as f:
            return cast(dict[str, Any], json.load(f))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(
            "config_schema_load_failed",
            schema=schema_name,
            error=str(e),
        )
        return {}


def validate_config_section(
    config: dict[str, Any], schema_name: str, file_path: str = ""
) -> None:
    """Validate config section against JSON Schema.

    Raises:
        ValueError: If validation fails
    """
    schema = load_schema(schema_name)
    if not schema:
        return

    try:
        validate(instance=config, schema=schema)
        logger.debug("config_validation_succeeded", schema=schema_name)
    except JSONSchemaValidationError as e:
        error_msg = f"Config validation failed for {schema_name}"
        if file_path:
            error_msg += f" (file: {file_path})"
        error_msg += f": {e.message}"
        raise ValueError(error_msg) from e


def _load_yaml_file(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return loaded


def load_all_configs() -> dict[str, Any]:
    """Load and merge all YAML configs from config/ directory.

    Loading order (later overrides earlier):
    1. config/main.yaml
    2. All other config/*.yaml files (sorted alphabetically)

    Each file is validated against the schema named after it, if present.

    Returns:
        Merged configuration dictionary
    """
    merged_config: dict[str, Any] = {}
    if not CONFIG_DIR.is_dir():
        return merged_config

    main_path = CONFIG_DIR / "main.yaml"
    yaml_files = sorted(f for f in CONFIG_DIR.glob("*.yaml") if f.name != "main.yaml")
    if main_path.exists():
        yaml_files.insert(0, main_path)

    for yaml_file in yaml_files:
        schema_name = yaml_file.stem
        try:
            file_config = _load_yaml_file(yaml_file)
        except (yaml.YAMLError, OSError) as e:
            logger.warning(
                "config_file_load_failed",
                path=str(yaml_file),
                error=str(e),
            )
            continue

        try:
            validate_config_section(file_config, schema_name, str(yaml_file))
        except ValueError as e:
            logger.error(
                "config_validation_failed",
                path=str(yaml_file),
                schema=schema_name,
                error=str(e),
            )
            raise

        merged_config = deep_merge(merged_config, file_config)
        logger.debug("config_file_loaded", path=str(yaml_file), schema=schema_name)

    logger.info("config_load_complete", file_count=len(yaml_files))
    return merged_config


class Settings(BaseSettings):
    """Application settings.

    Values from the environment win over YAML defaults, which win over the
    field defaults below.
    """

    model_config = SettingsConfigDict(
        env_file=".env" if Path(".env").exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Entity store
    store_backend: Literal["memory", "sqlite"] = Field(
        default="sqlite", description="Entity store backend: memory or sqlite"
    )
    store_db_path: str = Field(
        default="data/sitterlink.db", description="SQLite entity store path"
    )

    # Identity
    current_user_id: str | None = Field(
        default=None,
        description="User id resolved as the logged-in user by scripts",
    )

    # Messaging
    sync_interval_seconds: float = Field(
        default=DEFAULT_SYNC_INTERVAL_SECONDS,
        gt=0,
        description="Polling interval of the message sync loop",
    )

    # Search
    search_age_floor: int = Field(default=AGE_FLOOR, ge=0)
    search_age_ceiling: int = Field(default=AGE_CEILING, ge=0)
    search_default_age_min: int = Field(default=DEFAULT_AGE_MIN, ge=0)
    search_default_age_max: int = Field(default=DEFAULT_AGE_MAX, ge=0)

    # Processing
    tz_default: str = Field(
        default="UTC", description="Timezone for weekdays and message times"
    )

    # Observability
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit JSON log lines")
    metrics_port: int = Field(default=9000, description="Prometheus exporter port")

    @field_validator("tz_default")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown timezone: {v}") from exc
        return v

    @model_validator(mode="after")
    def validate_age_bounds(self) -> "Settings":
        self._check_age_bounds()
        return self

    def _check_age_bounds(self) -> None:
        if self.search_age_floor > self.search_age_ceiling:
            raise ValueError("search_age_floor must not exceed search_age_ceiling")
        if self.search_default_age_min > self.search_default_age_max:
            raise ValueError(
                "search_default_age_min must not exceed search_default_age_max"
            )

    def __init__(self, **data: Any):
        """Initialize settings with auto-loaded configs from all YAML files."""
        config = load_all_configs()

        super().__init__(**data)
        self._apply_yaml_defaults(config)
        self._check_age_bounds()

    def _apply_yaml_defaults(self, config: dict[str, Any]) -> None:
        """Apply YAML-sourced defaults without overriding env-provided values."""

        fields_from_env = set(self.model_fields_set)

        def _assign(field_name: str, value: Any) -> None:
            if value is None:
                return
            if field_name in fields_from_env:
                return

            object.__setattr__(self, field_name, value)
            self.model_fields_set.add(field_name)

        store_config = config.get("store") or {}
        _assign("store_backend", store_config.get("backend"))
        _assign("store_db_path", store_config.get("path"))

        messaging_config = config.get("messaging") or {}
        _assign("sync_interval_seconds", messaging_config.get("sync_interval_seconds"))

        search_config = config.get("search") or {}
        _assign("search_age_floor", search_config.get("age_floor"))
        _assign("search_age_ceiling", search_config.get("age_ceiling"))
        _assign("search_default_age_min", search_config.get("default_age_min"))
        _assign("search_default_age_max", search_config.get("default_age_max"))

        processing_config = config.get("processing") or {}
        _assign("tz_default", processing_config.get("tz_default"))

        logging_config = config.get("logging") or {}
        _assign("log_level", logging_config.get("level"))
        _assign("json_logs", logging_config.get("json"))

        metrics_config = config.get("metrics") or {}
        _assign("metrics_port", metrics_config.get("port"))


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
