from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import List, TypeVar, Union

from domain.models import PaymentPlanField, TextField, generate_id

Anchored = TypeVar("Anchored", bound=Union[TextField, PaymentPlanField])


class PageChange(str, Enum):
    INSERT = "insert"
    DELETE = "delete"
    DUPLICATE = "duplicate"


def reindex_anchored(
    elements: Sequence[Anchored],
    index: int,
    change: PageChange,
) -> List[Anchored]:
    """Keep page-anchored elements on the same content after a structural change.

    INSERT: anchors at or after ``index`` move one slot later.
    DELETE: anchors at ``index`` are dropped, later ones move one slot earlier.
    DUPLICATE: anchors after ``index`` move one slot later and each anchor at
    ``index`` gets a fresh-id copy on ``index + 1``.

    Elements without a static anchor (``page is None``) are left alone.
    """
    result: List[Anchored] = []
    for element in elements:
        page = element.page
        if page is None:
            result.append(element)
            continue

        if change is PageChange.INSERT:
            result.append(_with_page(element, page + 1) if page >= index else element)
        elif change is PageChange.DELETE:
            if page == index:
                continue
            result.append(_with_page(element, page - 1) if page > index else element)
        elif change is PageChange.DUPLICATE:
            result.append(_with_page(element, page + 1) if page > index else element)
            if page == index:
                result.append(element.model_copy(update={"id": generate_id(), "page": index + 1}))
    return result


def clamp_page(index: int, page_count: int) -> int:
    if page_count <= 0:
        return 0
    return max(0, min(page_count - 1, index))


def _with_page(element: Anchored, page: int) -> Anchored:
    return element.model_copy(update={"page": page})
