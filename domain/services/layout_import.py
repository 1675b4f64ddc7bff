from __future__ import annotations

import logging
from typing import Any, Literal, Optional, Union

import orjson
from pydantic import ValidationError

from domain.errors import UnrecognizedLayoutError
from domain.models import ImportedLayout
from domain.services.convert_legacy import LegacyToLayoutConverter
from domain.services.convert_v2 import V2ToLayoutConverter

logger = logging.getLogger(__name__)

LayoutVersion = Literal["legacy", "v2", "unknown"]


def detect_layout_version(payload: Any) -> LayoutVersion:
    if not isinstance(payload, dict):
        return "unknown"
    if payload.get("version") == 2:
        return "v2"
    if isinstance(payload.get("texts"), list) and isinstance(payload.get("images"), list):
        return "legacy"
    return "unknown"


def parse_layout(payload: dict[str, Any]) -> ImportedLayout:
    """Convert an already-decoded layout document, raising on any failure."""
    version = detect_layout_version(payload)
    if version == "v2":
        return V2ToLayoutConverter().convert(payload)
    if version == "legacy":
        return LegacyToLayoutConverter().convert(payload)
    msg = "Layout matches neither the legacy nor the version 2 format"
    raise UnrecognizedLayoutError(msg)


def import_layout(text: Union[str, bytes]) -> Optional[ImportedLayout]:
    """Parse layout JSON text. Returns ``None`` when it cannot be imported."""
    try:
        payload = orjson.loads(text)
    except orjson.JSONDecodeError as exc:
        logger.warning("Failed to parse layout JSON: %s", exc)
        return None
    try:
        return parse_layout(payload)
    except UnrecognizedLayoutError:
        logger.warning("Unknown layout format")
        return None
    except (ValidationError, ValueError) as exc:
        logger.warning("Layout failed validation: %s", exc)
        return None
