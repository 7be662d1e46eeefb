from pathlib import Path

import pytest
from pydantic import ValidationError

from marktrim.budget import MeasureBy
from marktrim.config import (
    EXPECTED_FILE_MODE,
    LogLevel,
    Settings,
    default_config_path,
    load_settings,
    write_config,
)


def test_settings_defaults_seeded() -> None:
    settings = Settings()
    assert settings.max_bytes == 1024
    assert settings.omission == "…"
    assert settings.separator is None
    assert settings.measure_by is MeasureBy.SERIALIZED
    assert settings.more_format == "[{count} more]"
    assert settings.log_level is LogLevel.INFO


def test_settings_validation() -> None:
    with pytest.raises(ValidationError):
        Settings(omission="")
    with pytest.raises(ValidationError):
        Settings(more_format="more")
    with pytest.raises(ValidationError):
        Settings(max_bytes=-1)
    with pytest.raises(ValidationError):
        Settings(unknown=True)  # type: ignore[call-arg]
    assert Settings(separator="").separator is None


def test_default_config_path_honors_home(_isolate_marktrim_home: Path) -> None:
    assert default_config_path() == _isolate_marktrim_home / "config.toml"


def test_load_settings_missing_creates_config(tmp_path: Path) -> None:
    cfg = tmp_path / "nested" / "config.toml"
    settings = load_settings(config_path=cfg, env={}, create_if_missing=True)
    assert cfg.exists()
    assert settings == Settings()
    assert cfg.stat().st_mode & 0o777 == EXPECTED_FILE_MODE


def test_load_settings_without_file_uses_defaults(tmp_path: Path) -> None:
    settings = load_settings(config_path=tmp_path / "absent.toml", env={})
    assert settings == Settings()
    assert not (tmp_path / "absent.toml").exists()


def test_load_settings_uses_config_values(tmp_path: Path) -> None:
    cfg = tmp_path / "config.toml"
    cfg.write_text(
        """
[truncate]
max_bytes = 200
omission = "..."
separator = " "
measure_by = "content"
boundary_window = 4

[compose]
lead_separator = ": "
item_separator = "; "
more_format = "(+{count})"

[logging]
log_level = "debug"
""",
        encoding="utf-8",
    )

    settings = load_settings(config_path=cfg, env={})
    assert settings.max_bytes == 200
    assert settings.omission == "..."
    assert settings.separator == " "
    assert settings.measure_by is MeasureBy.CONTENT
    assert settings.boundary_window == 4
    assert settings.lead_separator == ": "
    assert settings.item_separator == "; "
    assert settings.more_format == "(+{count})"
    assert settings.log_level is LogLevel.DEBUG


def test_precedence_cli_then_env_then_file(tmp_path: Path) -> None:
    cfg = tmp_path / "config.toml"
    cfg.write_text("[truncate]\nmax_bytes = 100\nomission = \"~\"\n", encoding="utf-8")

    env = {"MARKTRIM_MAX_BYTES": "50", "MARKTRIM_OMISSION": "+"}
    settings = load_settings(config_path=cfg, env=env)
    assert settings.max_bytes == 50
    assert settings.omission == "+"

    settings = load_settings(cli_overrides={"max_bytes": 10}, config_path=cfg, env=env)
    assert settings.max_bytes == 10
    assert settings.omission == "+"

    settings = load_settings(config_path=cfg, env={})
    assert settings.max_bytes == 100
    assert settings.omission == "~"


def test_env_log_level(tmp_path: Path) -> None:
    settings = load_settings(config_path=tmp_path / "c.toml", env={"MARKTRIM_LOG_LEVEL": "error"})
    assert settings.log_level is LogLevel.ERROR


def test_unknown_log_level_falls_back_to_info(tmp_path: Path) -> None:
    settings = load_settings(cli_overrides={"log_level": "verbose"}, config_path=tmp_path / "c.toml", env={})
    assert settings.log_level is LogLevel.INFO


def test_bad_values_exit(tmp_path: Path) -> None:
    cfg = tmp_path / "config.toml"
    with pytest.raises(SystemExit):
        load_settings(config_path=cfg, env={"MARKTRIM_MAX_BYTES": "lots"})
    with pytest.raises(SystemExit):
        load_settings(cli_overrides={"max_bytes": -1}, config_path=cfg, env={})
    with pytest.raises(SystemExit):
        load_settings(cli_overrides={"more_format": "more"}, config_path=cfg, env={})

    cfg.write_text("[truncate]\nmeasure_by = \"pixels\"\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        load_settings(config_path=cfg, env={})


def test_invalid_toml_exits(tmp_path: Path) -> None:
    cfg = tmp_path / "config.toml"
    cfg.write_text("[truncate\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        load_settings(config_path=cfg, env={})


def test_write_and_read_round_trip(tmp_path: Path) -> None:
    cfg = tmp_path / "config.toml"
    settings = Settings(
        max_bytes=64,
        omission='"…"',
        separator=" ",
        measure_by=MeasureBy.CONTENT,
        boundary_window=3,
        lead_separator=" - ",
        item_separator=" | ",
        more_format="and {count} more",
        log_level=LogLevel.WARNING,
    )

    write_config(settings, cfg)
    reloaded = load_settings(config_path=cfg, env={})
    assert reloaded == settings


def test_write_config_skips_unset_values(tmp_path: Path) -> None:
    cfg = tmp_path / "config.toml"
    write_config(Settings(), cfg)
    text = cfg.read_text(encoding="utf-8")
    assert "[truncate]" in text and "[compose]" in text and "[logging]" in text
    assert "separator =" not in text.split("[compose]")[0]
    assert 'measure_by = "serialized"' in text


def test_ensure_permissions_sets_mode(tmp_path: Path) -> None:
    from marktrim.config import _ensure_permissions

    cfg = tmp_path / "f"
    cfg.write_text("x", encoding="utf-8")
    cfg.chmod(0o644)
    _ensure_permissions(cfg)
    assert cfg.stat().st_mode & 0o777 == EXPECTED_FILE_MODE


def test_coercion_helpers() -> None:
    from marktrim.config import _clean_str, _coerce_enum, _coerce_int, _first_value

    assert _coerce_enum("unknown", LogLevel, LogLevel.INFO) is LogLevel.INFO
    assert _coerce_enum(LogLevel.DEBUG, LogLevel) is LogLevel.DEBUG
    assert _coerce_int(" 12 ") == 12
    assert _coerce_int(True) is None
    assert _first_value(None, None) is None
    assert _clean_str("  ") is None


def test_append_section_quotes_and_skips_empty() -> None:
    from marktrim.config import _append_section

    parts: list[str] = []
    _append_section(parts, "empty", {"x": None})
    _append_section(parts, "logging", {"log_level": LogLevel.DEBUG})
    _append_section(parts, "truncate", {"omission": 'a"b\\c', "max_bytes": 12})
    text = "\n\n".join(parts)
    assert "[empty]" not in text
    assert 'log_level = "debug"' in text
    assert 'omission = "a\\"b\\\\c"' in text
    assert "max_bytes = 12" in text


def test_toml_string_escapes_control_characters() -> None:
    from marktrim.config import _toml_string

    assert _toml_string("a\nb\tc") == '"a\\nb\\tc"'
    assert _toml_string("\x01\x7f") == '"\\u0001\\u007F"'


def test_write_config_round_trips_control_characters(tmp_path: Path) -> None:
    cfg = tmp_path / "config.toml"
    settings = Settings(omission="\x01end", lead_separator="\t", item_separator="\n")

    write_config(settings, cfg)
    assert load_settings(config_path=cfg, env={}) == settings
