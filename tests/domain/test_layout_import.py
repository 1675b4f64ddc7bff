from __future__ import annotations

import logging

import pytest

from domain.errors import UnrecognizedLayoutError
from domain.services.layout_import import detect_layout_version, import_layout, parse_layout
from tests.helpers.layout_fixtures import load_layout_payload, load_layout_text


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"version": 2, "pages": []}, "v2"),
        ({"texts": [], "images": []}, "legacy"),
        ({"texts": []}, "unknown"),
        ({"version": 3, "texts": [], "images": []}, "legacy"),
        ([], "unknown"),
        ("text", "unknown"),
    ],
)
def test_detect_layout_version(payload: object, expected: str) -> None:
    assert detect_layout_version(payload) == expected


def test_parse_layout_rejects_unknown_payload() -> None:
    with pytest.raises(UnrecognizedLayoutError):
        parse_layout({"pages": []})


def test_import_layout_accepts_both_fixtures() -> None:
    legacy = import_layout(load_layout_text("legacy_offer.json"))
    v2 = import_layout(load_layout_text("v2_offer.json").encode())

    assert legacy is not None and legacy.source_format == "legacy"
    assert v2 is not None and v2.source_format == "v2"
    assert len(legacy.text_fields) == 6
    assert len(v2.text_fields) == 7


def test_missing_payment_plans_pages_is_empty() -> None:
    payload = load_layout_payload("legacy_offer.json")
    del payload["paymentPlansPages"]

    assert parse_layout(payload).payment_plans == []


@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        '{"hello": "world"}',
        '{"texts": [{"content": "x"}], "images": []}',
        '{"version": 2, "pages": [{"page": 0, "texts": [{"var": "a"}]}], "images": []}',
        '{"texts": [{"content": "x", "size": 12, "color": "red"}], "images": []}',
    ],
)
def test_import_layout_returns_none_on_failure(
    text: str, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="domain.services.layout_import"):
        assert import_layout(text) is None

    assert caplog.records
