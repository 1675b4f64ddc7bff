from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import List, Optional

from domain.errors import DanglingReferenceError
from domain.models import (
    ImageField,
    ImagePage,
    PaymentPlanField,
    PaymentPlanPage,
    PdfPage,
    TextField,
    VirtualPage,
    generate_id,
)
from domain.services.page_indexing import PageChange, reindex_anchored

logger = logging.getLogger(__name__)


@dataclass
class DocumentState:
    """The four mutable collections of an editing session.

    Virtual pages hold ids only; the image and payment-plan collections own
    the referenced entries.
    """

    text_fields: List[TextField] = field(default_factory=list)
    image_fields: List[ImageField] = field(default_factory=list)
    payment_plans: List[PaymentPlanField] = field(default_factory=list)
    virtual_pages: List[VirtualPage] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.virtual_pages)

    def find_image(self, image_id: str) -> Optional[ImageField]:
        return next((image for image in self.image_fields if image.id == image_id), None)

    def find_plan(self, plan_id: str) -> Optional[PaymentPlanField]:
        return next((plan for plan in self.payment_plans if plan.id == plan_id), None)

    def find_text(self, field_id: str) -> Optional[TextField]:
        return next((text for text in self.text_fields if text.id == field_id), None)

    def init_from_page_count(self, count: int) -> bool:
        if self.virtual_pages:
            return False
        self.virtual_pages = [PdfPage(page_num=number) for number in range(1, count + 1)]
        return True

    def insert_page(self, index: int, page: VirtualPage) -> int:
        index = max(0, min(index, len(self.virtual_pages)))
        self.virtual_pages.insert(index, page)
        self._reindex(index, PageChange.INSERT)
        logger.debug("Inserted %s page at %d", page.type, index)
        return index

    def delete_page(self, index: int) -> Optional[VirtualPage]:
        if not 0 <= index < len(self.virtual_pages):
            return None
        page = self.virtual_pages.pop(index)
        if isinstance(page, ImagePage):
            self.image_fields = [image for image in self.image_fields if image.id != page.image_id]
        self._reindex(index, PageChange.DELETE)
        logger.debug("Deleted %s page at %d", page.type, index)
        return page

    def duplicate_page(self, index: int) -> Optional[VirtualPage]:
        if not 0 <= index < len(self.virtual_pages):
            return None
        source = self.virtual_pages[index]
        duplicate: VirtualPage = source.model_copy()
        if isinstance(source, ImagePage):
            image = self.find_image(source.image_id)
            if image is None:
                raise DanglingReferenceError(index, "image", source.image_id)
            clone = image.model_copy(update={"id": generate_id()})
            self.image_fields.append(clone)
            duplicate = ImagePage(image_id=clone.id)
        self.virtual_pages.insert(index + 1, duplicate)
        self._reindex(index, PageChange.DUPLICATE)
        return duplicate

    def reorder(self, from_index: int, to_index: int) -> bool:
        if not 0 <= from_index < len(self.virtual_pages):
            return False
        moved = self.virtual_pages.pop(from_index)
        to_index = max(0, min(to_index, len(self.virtual_pages)))
        self.virtual_pages.insert(to_index, moved)
        return True

    def remove_pages_referencing(self, *, image_id: str = "", plan_id: str = "") -> int:
        """Delete every virtual page that points at the given image or plan."""
        indices = [
            index
            for index, page in enumerate(self.virtual_pages)
            if (isinstance(page, ImagePage) and page.image_id == image_id)
            or (isinstance(page, PaymentPlanPage) and page.plan_id == plan_id)
        ]
        for index in reversed(indices):
            self.delete_page(index)
        return len(indices)

    def drop_orphan_pages(self) -> int:
        image_ids = {image.id for image in self.image_fields}
        plan_ids = {plan.id for plan in self.payment_plans}
        kept = [
            page
            for page in self.virtual_pages
            if isinstance(page, PdfPage)
            or (isinstance(page, ImagePage) and page.image_id in image_ids)
            or (isinstance(page, PaymentPlanPage) and page.plan_id in plan_ids)
        ]
        removed = len(self.virtual_pages) - len(kept)
        self.virtual_pages = kept
        return removed

    def check_integrity(self) -> None:
        self.check_references(self.virtual_pages)

    def check_references(self, pages: Sequence[VirtualPage], start: int = 0) -> None:
        """Raise for the first page whose image or plan is not in the collections."""
        image_ids = {image.id for image in self.image_fields}
        plan_ids = {plan.id for plan in self.payment_plans}
        for index, page in enumerate(pages, start):
            if isinstance(page, ImagePage) and page.image_id not in image_ids:
                raise DanglingReferenceError(index, "image", page.image_id)
            if isinstance(page, PaymentPlanPage) and page.plan_id not in plan_ids:
                raise DanglingReferenceError(index, "payment plan", page.plan_id)

    def _reindex(self, index: int, change: PageChange) -> None:
        self.text_fields = reindex_anchored(self.text_fields, index, change)
        self.payment_plans = reindex_anchored(self.payment_plans, index, change)
