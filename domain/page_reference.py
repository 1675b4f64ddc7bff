"""Page-reference expressions.

Internally an element may carry an expression such as ``{length - 1}`` instead
of a static page index. The offer service evaluates these against the final
document length. V2 spells the same expressions with ``last`` instead of
``length`` (``{length - 1}`` becomes ``last``, ``{length - 2}`` becomes
``last - 2``). The conversions below are plain text substitutions and must stay
that way: the service compares the strings, not a parsed form.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

LAST_PAGE_EXPRESSION = "{length - 1}"
V2_LAST_TOKEN = "last"

_RELATIVE_RE = re.compile(r"^\{\s*length\s*(?:([+-])\s*(\d+))?\s*\}$")
_ABSOLUTE_RE = re.compile(r"^\{?\s*(\d+)\s*\}?$")


class ReferenceKind(str, Enum):
    ABSOLUTE = "absolute"
    RELATIVE_TO_END = "relative_to_end"
    RAW = "raw"


@dataclass(frozen=True)
class PageReference:
    kind: ReferenceKind
    raw: str
    value: int = 0

    @classmethod
    def parse(cls, expression: str) -> PageReference:
        text = str(expression or "").strip()
        relative = _RELATIVE_RE.match(text)
        if relative:
            sign, amount = relative.groups()
            offset = int(amount or 0)
            # ``value`` counts pages back from the document length.
            value = offset if sign != "+" else -offset
            return cls(ReferenceKind.RELATIVE_TO_END, expression, value)
        absolute = _ABSOLUTE_RE.match(text)
        if absolute:
            return cls(ReferenceKind.ABSOLUTE, expression, int(absolute.group(1)))
        return cls(ReferenceKind.RAW, expression)

    def resolve(self, length: int) -> Optional[int]:
        """Zero-based page index for a document of ``length`` pages, if computable."""
        if self.kind is ReferenceKind.ABSOLUTE:
            return self.value
        if self.kind is ReferenceKind.RELATIVE_TO_END:
            return length - self.value
        return None


def _strip_and_rename(expression: str) -> str:
    return expression.replace("{", "", 1).replace("}", "", 1).replace("length", V2_LAST_TOKEN, 1)


def text_page_to_v2(page_key: Union[int, str]) -> Union[int, str]:
    if not isinstance(page_key, str):
        return page_key
    if page_key == LAST_PAGE_EXPRESSION:
        return V2_LAST_TOKEN
    if "length" in page_key:
        return _strip_and_rename(page_key)
    return page_key


def text_page_from_v2(token: str) -> str:
    if token == V2_LAST_TOKEN:
        return LAST_PAGE_EXPRESSION
    return "{" + token.replace(V2_LAST_TOKEN, "length", 1) + "}"


def insertion_to_v2(expression: str) -> str:
    """Image ``insertAfter`` and payment-plan ``page`` tokens have no ``last`` shortcut."""
    return _strip_and_rename(expression)


def insertion_from_v2(token: str) -> str:
    return "{" + token.replace(V2_LAST_TOKEN, "length", 1) + "}"
