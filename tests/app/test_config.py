from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from pydantic import ValidationError

from app.config import (
    AppSettings,
    ConfigFileNotFoundError,
    EditorSettings,
    load_settings,
    resolve_config_path,
)
from app.wiring import build_session, build_text_measurer


def _write_yaml(path: Path, body: str) -> Path:
    path.write_text(body, encoding="utf-8")
    return path


def test_defaults_without_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    settings = load_settings()

    assert settings.editor.history_limit == 50
    assert settings.editor.default_color == "#000000"
    assert settings.editor.strict_integrity is True


def test_yaml_file_is_loaded(tmp_path: Path) -> None:
    config = _write_yaml(
        tmp_path / "editor.yaml",
        "editor:\n  history_limit: 10\n  default_color: '#ABCDEF'\n  log_level: debug\n",
    )

    settings = load_settings(config)

    assert settings.editor.history_limit == 10
    assert settings.editor.default_color == "#abcdef"
    assert settings.editor.log_level == "DEBUG"


def test_env_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = _write_yaml(tmp_path / "editor.yaml", "editor:\n  history_limit: 10\n")
    monkeypatch.setenv("OVL_CONFIG_PATH", str(config))
    monkeypatch.setenv("OVL_EDITOR__HISTORY_LIMIT", "7")

    assert load_settings().editor.history_limit == 7


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigFileNotFoundError, match="Config file not found") as error:
        load_settings(tmp_path / "absent.yaml")

    assert error.value.path == tmp_path / "absent.yaml"


def test_config_path_resolution_order(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OVL_CONFIG_PATH", raising=False)
    assert resolve_config_path() is None

    default = tmp_path / "config" / "editor.yaml"
    default.parent.mkdir()
    _write_yaml(default, "editor: {}\n")
    assert resolve_config_path() == Path("config/editor.yaml")

    from_env = _write_yaml(tmp_path / "env.yaml", "editor: {}\n")
    monkeypatch.setenv("OVL_CONFIG_PATH", str(from_env))
    assert resolve_config_path() == from_env

    explicit = _write_yaml(tmp_path / "explicit.yaml", "editor: {}\n")
    assert resolve_config_path(explicit) == explicit


@pytest.mark.parametrize(
    "overrides",
    [
        {"history_limit": 0},
        {"default_font_size": 0},
        {"log_level": "chatty"},
        {"default_color": "red"},
    ],
)
def test_invalid_editor_settings(overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        EditorSettings(**overrides)


def test_build_session_applies_settings(
    app_settings_factory: Callable[..., AppSettings],
) -> None:
    settings = app_settings_factory(history_limit=3, duplicate_offset=5, strict_integrity=False)

    session = build_session(settings)

    assert session.history.limit == 3
    assert session.duplicate_offset == 5
    assert session.strict is False
    assert session.measurer is None


def test_font_measurer_is_opt_in(app_settings: AppSettings) -> None:
    assert build_text_measurer(app_settings) is None
    enabled = app_settings.model_copy(
        update={"editor": app_settings.editor.model_copy(update={"measure_text_with_fonts": True})}
    )
    assert build_text_measurer(enabled) is not None
