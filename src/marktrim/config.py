"""Configuration models and enums for marktrim.

Single source of truth for truncation defaults and their overrides.
"""

from __future__ import annotations

import os
import stat
import tomllib
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator

from marktrim.budget import DEFAULT_BOUNDARY_WINDOW, DEFAULT_MAX_BYTES, DEFAULT_OMISSION, MeasureBy
from marktrim.compose import DEFAULT_ITEM_SEPARATOR, DEFAULT_LEAD_SEPARATOR, DEFAULT_MORE_FORMAT
from marktrim.paths import get_marktrim_home


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Settings(BaseModel):
    """Resolved marktrim settings."""

    model_config = ConfigDict(frozen=True, validate_default=True, extra="forbid")

    max_bytes: int = Field(default=DEFAULT_MAX_BYTES, ge=0)
    omission: str = DEFAULT_OMISSION
    separator: str | None = None
    measure_by: MeasureBy = MeasureBy.SERIALIZED
    boundary_window: int = Field(default=DEFAULT_BOUNDARY_WINDOW, ge=0)
    lead_separator: str = DEFAULT_LEAD_SEPARATOR
    item_separator: str = DEFAULT_ITEM_SEPARATOR
    more_format: str = DEFAULT_MORE_FORMAT
    log_level: LogLevel = LogLevel.INFO

    @field_validator("omission")
    @classmethod
    def _validate_omission(cls, value: str) -> str:
        if not value:
            raise ValueError("omission cannot be empty")
        return value

    @field_validator("separator")
    @classmethod
    def _empty_separator(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("more_format")
    @classmethod
    def _validate_more_format(cls, value: str) -> str:
        if "{count}" not in value:
            raise ValueError("more_format must contain {count}")
        return value


def default_config_path() -> Path:
    return get_marktrim_home() / "config.toml"


EXPECTED_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0o600

# Basic-string escapes; other control characters use \uXXXX.
_TOML_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


def load_settings(
    cli_overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
    config_path: Path | str | None = None,
    *,
    create_if_missing: bool = False,
) -> Settings:
    env = os.environ if env is None else env
    cli_overrides = cli_overrides or {}
    path = Path(config_path) if config_path else default_config_path()

    created_new = False
    if not path.exists() and create_if_missing:
        path.parent.mkdir(parents=True, exist_ok=True)
        write_config(Settings(), path)
        created_new = True

    config_data: dict[str, Any] = {}
    if path.exists():
        _ensure_permissions(path)
        config_data = _read_toml(path)

    defaults = Settings()

    max_bytes = _first_value(
        _coerce_int(cli_overrides.get("max_bytes")),
        _coerce_int(_clean_str(env.get("MARKTRIM_MAX_BYTES"))),
        _coerce_int(_get_config_value(config_data, "truncate", "max_bytes")),
        defaults.max_bytes,
    )

    omission = _first_value(
        cli_overrides.get("omission") or None,
        env.get("MARKTRIM_OMISSION") or None,
        _get_config_value(config_data, "truncate", "omission") or None,
        defaults.omission,
    )

    separator = _first_value(
        cli_overrides.get("separator") or None,
        _get_config_value(config_data, "truncate", "separator") or None,
    )

    measure_by = _first_value(
        _clean_str(cli_overrides.get("measure_by")),
        _clean_str(_get_config_value(config_data, "truncate", "measure_by")),
        defaults.measure_by,
    )

    boundary_window = _first_value(
        _coerce_int(cli_overrides.get("boundary_window")),
        _coerce_int(_get_config_value(config_data, "truncate", "boundary_window")),
        defaults.boundary_window,
    )

    lead_separator = _first_value(
        cli_overrides.get("lead_separator"),
        _get_config_value(config_data, "compose", "lead_separator"),
        defaults.lead_separator,
    )

    item_separator = _first_value(
        cli_overrides.get("item_separator"),
        _get_config_value(config_data, "compose", "item_separator"),
        defaults.item_separator,
    )

    more_format = _first_value(
        _clean_str(cli_overrides.get("more_format")),
        _clean_str(_get_config_value(config_data, "compose", "more_format")),
        defaults.more_format,
    )

    log_level = _first_value(
        _clean_str(cli_overrides.get("log_level")),
        _clean_str(env.get("MARKTRIM_LOG_LEVEL")),
        _clean_str(_get_config_value(config_data, "logging", "log_level")),
        defaults.log_level,
    )

    if max_bytes is not None and max_bytes < 0:
        raise SystemExit(f"max_bytes must not be negative (got {max_bytes})")
    if "{count}" not in str(more_format):
        raise SystemExit(f"more_format '{more_format}' must contain {{count}}")

    measure_by_enum = _coerce_enum(measure_by, MeasureBy, None)
    if measure_by_enum is None:
        raise SystemExit(f"measure_by '{measure_by}' must be one of: {', '.join(e.value for e in MeasureBy)}")
    log_level_enum = _coerce_enum(log_level, LogLevel, LogLevel.INFO)

    settings = Settings(
        max_bytes=max_bytes,
        omission=omission,
        separator=separator,
        measure_by=cast(MeasureBy, measure_by_enum),
        boundary_window=boundary_window,
        lead_separator=lead_separator,
        item_separator=item_separator,
        more_format=more_format,
        log_level=cast(LogLevel, log_level_enum or LogLevel.INFO),
    )

    if created_new:
        write_config(settings, path)
    return settings


def write_config(settings: Settings, config_path: Path | str | None = None) -> Path:
    path = Path(config_path) if config_path else default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    sections: list[str] = []

    truncate_section: dict[str, Any] = {
        "max_bytes": settings.max_bytes,
        "omission": settings.omission,
        "separator": settings.separator,
        "measure_by": settings.measure_by,
        "boundary_window": settings.boundary_window,
    }
    _append_section(sections, "truncate", truncate_section)

    compose_section = {
        "lead_separator": settings.lead_separator,
        "item_separator": settings.item_separator,
        "more_format": settings.more_format,
    }
    _append_section(sections, "compose", compose_section)

    logging_section = {"log_level": settings.log_level}
    _append_section(sections, "logging", logging_section)

    content = "\n\n".join(filter(None, sections)) + "\n"
    path.write_text(content, encoding="utf-8")
    path.chmod(EXPECTED_FILE_MODE)
    return path


def _ensure_permissions(path: Path) -> None:
    current_mode = stat.S_IMODE(path.stat().st_mode)
    if current_mode != EXPECTED_FILE_MODE:
        path.chmod(EXPECTED_FILE_MODE)


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as handle:
        try:
            return tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise SystemExit(f"invalid config file {path}: {exc}") from exc


def _get_config_value(config: Mapping[str, Any], section: str, key: str) -> Any:
    section_data = config.get(section)
    if not isinstance(section_data, dict):
        return None
    return section_data.get(key)


def _clean_str(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    return value


def _first_value(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _coerce_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise SystemExit(f"expected an integer, got '{value}'") from None
    return None


def _coerce_enum(value: Any, enum_cls: type[Enum], default: Enum | None = None) -> Enum | None:
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value)
        except ValueError:
            return default
    return default


def _toml_string(value: str) -> str:
    parts: list[str] = []
    for char in value:
        if char in _TOML_ESCAPES:
            parts.append(_TOML_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            parts.append(f"\\u{ord(char):04X}")
        else:
            parts.append(char)
    return '"' + "".join(parts) + '"'


def _append_section(parts: list[str], name: str, values: Mapping[str, Any]) -> None:
    filtered = {k: v for k, v in values.items() if v is not None}
    if not filtered:
        return
    lines = [f"[{name}]"]
    for key, val in filtered.items():
        if isinstance(val, Enum):
            lines.append(f"{key} = {_toml_string(val.value)}")
        elif isinstance(val, str):
            lines.append(f"{key} = {_toml_string(val)}")
        else:
            lines.append(f"{key} = {val}")
    parts.append("\n".join(lines))


__all__ = [
    "EXPECTED_FILE_MODE",
    "LogLevel",
    "Settings",
    "default_config_path",
    "load_settings",
    "write_config",
]
