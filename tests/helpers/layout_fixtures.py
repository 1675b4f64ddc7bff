from __future__ import annotations

import copy
from functools import cache, lru_cache
from pathlib import Path
from typing import Any

import fitz
import orjson

from domain.models import TextField
from domain.services.editor_session import EditorSession


@lru_cache(maxsize=1)
def repo_root() -> Path:
    for parent in Path(__file__).resolve().parents:
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError("Repository root not found")


def fixture_path(name: str) -> Path:
    return repo_root() / "tests" / "fixtures" / "layouts" / name


@cache
def _load_layout_cached(name: str) -> dict[str, Any]:
    payload = orjson.loads(fixture_path(name).read_bytes())
    if not isinstance(payload, dict):
        raise TypeError(f"Expected dict payload in {name}")
    return payload


def load_layout_payload(name: str) -> dict[str, Any]:
    return copy.deepcopy(_load_layout_cached(name))


def load_layout_text(name: str) -> str:
    return fixture_path(name).read_text(encoding="utf-8")


def make_pdf_bytes(pages: int = 3, width: float = 595, height: float = 842) -> bytes:
    with fitz.open() as document:
        for number in range(1, pages + 1):
            page = document.new_page(width=width, height=height)
            page.insert_text((72, 72), f"Source page {number}", fontsize=12)
        return document.tobytes()


def make_text(field_id: str, page: int = 0, **overrides: Any) -> TextField:
    values: dict[str, Any] = {
        "id": field_id,
        "page": page,
        "content": f"{{{field_id}}}",
        "x": 100,
        "y": 500,
        "size": 12,
    }
    values.update(overrides)
    return TextField(**values)


def session_with_pages(count: int = 3, **options: Any) -> EditorSession:
    session = EditorSession(**options)
    session.init_from_page_count(count)
    return session
