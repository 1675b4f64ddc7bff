from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from app.config import AppSettings, EditorSettings


def _clear_ovl_env() -> None:
    for key in list(os.environ):
        if key.startswith("OVL_"):
            os.environ.pop(key, None)


_clear_ovl_env()


@pytest.fixture(autouse=True)
def clear_ovl_env() -> Generator[None, None, None]:
    _clear_ovl_env()
    yield
    _clear_ovl_env()


@pytest.fixture
def editor_settings(tmp_path: Path) -> EditorSettings:
    return EditorSettings(
        title="Test Editor",
        data_dir=tmp_path / "templates",
        history_limit=50,
        snap_threshold=5.0,
        duplicate_offset=20,
        default_font_size=20,
        default_color="#000000",
        strict_integrity=True,
        measure_text_with_fonts=False,
        log_level="DEBUG",
    )


@pytest.fixture
def editor_settings_factory(
    editor_settings: EditorSettings,
) -> Callable[..., EditorSettings]:
    def _factory(**overrides: object) -> EditorSettings:
        return editor_settings.model_copy(update=overrides)

    return _factory


@pytest.fixture
def app_settings(editor_settings: EditorSettings) -> AppSettings:
    return AppSettings(editor=editor_settings)


@pytest.fixture
def app_settings_factory(
    editor_settings_factory: Callable[..., EditorSettings],
) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return AppSettings(editor=editor_settings_factory(**overrides))

    return _factory
