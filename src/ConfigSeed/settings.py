# === NAVMAP v1 ===
# {
#   "module": "ConfigSeed.settings",
#   "purpose": "Define the resolved configuration model, environment overrides, and the profile-aware loader",
#   "sections": [
#     {
#       "id": "loggingsettings",
#       "name": "LoggingSettings",
#       "anchor": "class-loggingsettings",
#       "kind": "class"
#     },
#     {
#       "id": "resolvedconfig",
#       "name": "ResolvedConfig",
#       "anchor": "class-resolvedconfig",
#       "kind": "class"
#     },
#     {
#       "id": "environmentoverrides",
#       "name": "EnvironmentOverrides",
#       "anchor": "class-environmentoverrides",
#       "kind": "class"
#     },
#     {
#       "id": "build-resolved-config",
#       "name": "build_resolved_config",
#       "anchor": "function-build-resolved-config",
#       "kind": "function"
#     },
#     {
#       "id": "load-raw-config",
#       "name": "load_raw_config",
#       "anchor": "function-load-raw-config",
#       "kind": "function"
#     },
#     {
#       "id": "resolve-config-file",
#       "name": "resolve_config_file",
#       "anchor": "function-resolve-config-file",
#       "kind": "function"
#     },
#     {
#       "id": "load-config",
#       "name": "load_config",
#       "anchor": "function-load-config",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Configuration models and loaders for the config-seed service.

A run is driven by a single :class:`ResolvedConfig` value: the directory to
scan, the global key prefix, the Consul location, the reset flag, the health
check retry policy, and the extension lists used to pick a reader for each
file. The value is loaded once (from YAML, JSON, or TOML, optionally selected
by a named profile), overlaid with ``CONFIGSEED_*`` environment overrides, and
never mutated afterwards.

Keys in the configuration file may use either the snake_case field names or
the CamelCase names of the legacy JSON configuration (``ConfigPath``,
``GlobalPrefix``, ``ConsulHost``, ...).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigLoadError

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - exercised on older interpreters
    import tomli as tomllib  # type: ignore[no-redef]

__all__ = [
    "CONFIG_FILE_STEM",
    "DEFAULT_CONFIG_DIR",
    "LoggingSettings",
    "ResolvedConfig",
    "EnvironmentOverrides",
    "build_resolved_config",
    "get_env_overrides",
    "load_config",
    "load_raw_config",
    "normalize_config_path",
    "resolve_config_file",
]

DEFAULT_CONFIG_DIR = Path("res")
CONFIG_FILE_STEM = "configuration"
_CONFIG_SUFFIXES = (".yaml", ".yml", ".json", ".toml")


def _normalize_extensions(value: Optional[Iterable[str]]) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    normalized: List[str] = []
    for item in value:
        text = str(item).strip()
        if not text:
            continue
        if not text.startswith("."):
            text = "." + text
        normalized.append(text)
    return tuple(normalized)


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias=AliasChoices("level", "LogLevel"),
    )
    emit_json_logs: bool = Field(
        default=False,
        description="Also write JSON-lines records to a rotating file under log_dir",
        validation_alias=AliasChoices("emit_json_logs", "EmitJsonLogs"),
    )
    log_dir: Optional[Path] = Field(
        default=None,
        description="Directory for JSON log files; required when emit_json_logs is set",
        validation_alias=AliasChoices("log_dir", "LogDir"),
    )
    max_log_size_mb: int = Field(default=10, gt=0, description="Rotation threshold for log files")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Normalize and validate logging level."""
        upper = str(v).upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if upper not in valid_levels:
            raise ValueError(f"level must be one of {sorted(valid_levels)}, got '{v}'")
        return upper

    def level_int(self) -> int:
        """Convert level string to logging module integer."""
        return logging.getLevelName(self.level)


class ResolvedConfig(BaseModel):
    """Immutable configuration for one seeding run."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    config_path: Path = Field(
        default=Path("./res/properties"),
        description="Root directory scanned for configuration files",
        validation_alias=AliasChoices("config_path", "ConfigPath"),
    )
    global_prefix: str = Field(
        default="config",
        min_length=1,
        description="Namespace under which every seeded key is stored",
        validation_alias=AliasChoices("global_prefix", "GlobalPrefix"),
    )
    consul_protocol: str = Field(
        default="http",
        validation_alias=AliasChoices("consul_protocol", "ConsulProtocol"),
    )
    consul_host: str = Field(
        default="localhost",
        validation_alias=AliasChoices("consul_host", "ConsulHost"),
    )
    consul_port: int = Field(
        default=8500,
        gt=0,
        le=65535,
        validation_alias=AliasChoices("consul_port", "ConsulPort"),
    )
    consul_token: Optional[str] = Field(
        default=None,
        description="Optional ACL token sent as X-Consul-Token",
        validation_alias=AliasChoices("consul_token", "ConsulToken"),
    )
    is_reset: bool = Field(
        default=False,
        description="Delete everything under global_prefix before importing",
        validation_alias=AliasChoices("is_reset", "IsReset"),
    )
    fail_limit: int = Field(
        default=30,
        ge=0,
        description="Maximum number of health check attempts",
        validation_alias=AliasChoices("fail_limit", "FailLimit"),
    )
    fail_wait_time: float = Field(
        default=3,
        ge=0,
        description="Seconds to wait after a failed health check",
        validation_alias=AliasChoices("fail_wait_time", "FailWaitTime", "FailWaittime"),
    )
    request_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Timeout in seconds applied to every store request",
        validation_alias=AliasChoices("request_timeout", "RequestTimeout"),
    )
    continue_on_error: bool = Field(
        default=False,
        description="Keep walking after a file fails to parse or write",
        validation_alias=AliasChoices("continue_on_error", "ContinueOnError"),
    )
    acceptable_property_extensions: Tuple[str, ...] = Field(
        default=(".yaml", ".yml", ".properties"),
        validation_alias=AliasChoices(
            "acceptable_property_extensions", "AcceptablePropertyExtensions"
        ),
    )
    yaml_extensions: Tuple[str, ...] = Field(
        default=(".yaml", ".yml"),
        validation_alias=AliasChoices("yaml_extensions", "YamlExtensions"),
    )
    toml_extensions: Tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("toml_extensions", "TomlExtensions"),
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        validation_alias=AliasChoices("logging", "Logging"),
    )

    @field_validator(
        "acceptable_property_extensions", "yaml_extensions", "toml_extensions", mode="before"
    )
    @classmethod
    def normalize_extensions(cls, value: Any) -> Tuple[str, ...]:
        """Accept a string or list and ensure each extension has a leading dot."""
        return _normalize_extensions(value)

    @field_validator("consul_protocol")
    @classmethod
    def validate_protocol(cls, value: str) -> str:
        lowered = value.lower()
        if lowered not in {"http", "https"}:
            raise ValueError(f"consul_protocol must be 'http' or 'https', got '{value}'")
        return lowered

    @field_validator("global_prefix")
    @classmethod
    def strip_prefix_slashes(cls, value: str) -> str:
        stripped = value.strip("/")
        if not stripped:
            raise ValueError("global_prefix must contain at least one non-slash character")
        return stripped

    @field_validator("config_path")
    @classmethod
    def expand_config_path(cls, value: Path) -> Path:
        return Path(value).expanduser()


class EnvironmentOverrides(BaseSettings):
    """Pydantic settings model exposing environment-derived overrides."""

    config_path: Optional[Path] = None
    global_prefix: Optional[str] = None
    consul_protocol: Optional[str] = None
    consul_host: Optional[str] = None
    consul_port: Optional[int] = None
    consul_token: Optional[str] = None
    is_reset: Optional[bool] = None
    fail_limit: Optional[int] = None
    fail_wait_time: Optional[float] = None
    log_level: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="CONFIGSEED_", case_sensitive=False, extra="ignore"
    )


def get_env_overrides() -> Dict[str, object]:
    """Return the ``CONFIGSEED_*`` overrides that are currently set."""

    try:
        env = EnvironmentOverrides()
    except PydanticValidationError as exc:
        raise ConfigLoadError(_format_validation_error(exc)) from exc
    return env.model_dump(exclude_none=True)


def _format_validation_error(exc: PydanticValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = " -> ".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}")
    return "Configuration validation failed:\n  " + "\n  ".join(messages)


def build_resolved_config(
    raw_config: Mapping[str, object],
    *,
    overrides: Optional[Mapping[str, object]] = None,
) -> ResolvedConfig:
    """Materialise a :class:`ResolvedConfig` from a raw mapping and overrides.

    ``overrides`` defaults to the ``CONFIGSEED_*`` environment. Override keys
    use snake_case field names, which take precedence over CamelCase keys of
    the raw mapping.
    """

    if overrides is None:
        overrides = get_env_overrides()

    data: Dict[str, Any] = dict(raw_config)
    for key, value in overrides.items():
        if key == "log_level":
            logging_section = data.get("logging", data.get("Logging")) or {}
            if not isinstance(logging_section, Mapping):
                raise ConfigLoadError("'logging' section must be a mapping")
            data.pop("Logging", None)
            data["logging"] = {**logging_section, "level": value}
        else:
            field = ResolvedConfig.model_fields.get(key)
            if field is not None and isinstance(field.validation_alias, AliasChoices):
                for choice in field.validation_alias.choices:
                    if isinstance(choice, str):
                        data.pop(choice, None)
            data[key] = value

    try:
        return ResolvedConfig.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigLoadError(_format_validation_error(exc)) from exc


def normalize_config_path(config_path: Path) -> Path:
    """Return a user-supplied configuration path with ``~`` and symlinks resolved."""

    expanded = Path(config_path).expanduser()
    try:
        return expanded.resolve(strict=False)
    except (OSError, RuntimeError):  # pragma: no cover - only triggered on rare filesystems
        return expanded


def load_raw_config(config_path: Path) -> Mapping[str, object]:
    """Read a YAML, JSON, or TOML configuration file and return its top-level mapping."""

    normalized_path = normalize_config_path(config_path)
    suffix = normalized_path.suffix.lower()
    if suffix not in _CONFIG_SUFFIXES:
        raise ConfigLoadError(
            f"Unsupported configuration format '{suffix}' for {normalized_path}; "
            f"expected one of {', '.join(_CONFIG_SUFFIXES)}"
        )

    try:
        text = normalized_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Cannot read configuration file {normalized_path}: {exc}") from exc

    try:
        if suffix == ".json":
            data = json.loads(text)
        elif suffix == ".toml":
            data = tomllib.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise ConfigLoadError(
            f"Configuration file '{normalized_path}' is malformed: {exc}"
        ) from exc

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigLoadError("Configuration file must contain a mapping at the root")
    return data


def resolve_config_file(
    profile: Optional[str] = None, config_dir: Path = DEFAULT_CONFIG_DIR
) -> Path:
    """Locate ``configuration.<ext>`` for ``profile`` under ``config_dir``.

    Without a profile the file is looked up directly in ``config_dir``; with a
    profile it is looked up in ``config_dir/<profile>``.
    """

    base = Path(config_dir).expanduser()
    if profile:
        base = base / profile
    for suffix in _CONFIG_SUFFIXES:
        candidate = base / f"{CONFIG_FILE_STEM}{suffix}"
        if candidate.is_file():
            return candidate
    label = f"profile '{profile}'" if profile else "default profile"
    raise ConfigLoadError(f"No {CONFIG_FILE_STEM} file found for {label} in {base}")


def load_config(
    config_path: Path, *, overrides: Optional[Mapping[str, object]] = None
) -> ResolvedConfig:
    """Load, validate, and resolve configuration suitable for a seeding run."""

    raw = load_raw_config(config_path)
    return build_resolved_config(raw, overrides=overrides)
