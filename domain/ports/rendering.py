from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from domain.models import ImageField, PaymentPlanField, TextField, VirtualPage


class TextMeasurer(Protocol):
    def text_width(self, text: str, font_size: float) -> float: ...


class PreviewRenderer(Protocol):
    def page_count(self, source_pdf: bytes) -> int: ...

    def render(
        self,
        source_pdf: bytes,
        virtual_pages: Sequence[VirtualPage],
        text_fields: Sequence[TextField],
        image_fields: Sequence[ImageField],
        payment_plans: Sequence[PaymentPlanField],
    ) -> bytes: ...
