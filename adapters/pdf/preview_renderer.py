from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Optional

import fitz

from domain.colors import hex_to_rgb_floats
from domain.errors import PreviewRenderError
from domain.models import (
    ImageField,
    ImagePage,
    PaymentPlanField,
    PaymentPlanPage,
    PdfPage,
    TextField,
    VirtualPage,
)
from domain.page_reference import PageReference
from domain.placeholders import replace_placeholders

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = (595.28, 841.89)
REGULAR_FONT = "helv"
BOLD_FONT = "hebo"
TEXT_PADDING = 4.0
BASELINE_RATIO = 0.2

IMAGE_KIND_LABELS = {
    "gallery": "Offer Gallery",
    "floorPlan": "Floor Plans",
    "unitLocation": "Unit Location",
}
IMAGE_FALLBACK_LABEL = "Image Placeholder"
PAYMENT_PLAN_LABEL = "Payment Plan"
LABEL_SIZE = 24.0
SUBTITLE_SIZE = 14.0
SUBTITLE_GAP = 30.0
LABEL_COLOR = (0.3, 0.3, 0.3)
SUBTITLE_COLOR = (0.5, 0.5, 0.5)


class PyMuPdfTextMeasurer:
    """Helvetica advance widths, the font the preview is drawn with."""

    def __init__(self, fontname: str = REGULAR_FONT) -> None:
        self.fontname = fontname

    def text_width(self, text: str, font_size: float) -> float:
        return fitz.get_text_length(text, fontname=self.fontname, fontsize=font_size)


class PyMuPdfPreviewRenderer:
    """Assemble a preview PDF in virtual-page order with dummy data filled in.

    PDF pages are copied from the source document and get their text overlays
    drawn; image and payment-plan pages become labelled blank pages sized like
    the first source page.
    """

    def __init__(self, placeholder_data: Optional[dict[str, str]] = None) -> None:
        self.placeholder_data = placeholder_data

    def page_count(self, source_pdf: bytes) -> int:
        try:
            with fitz.open(stream=source_pdf, filetype="pdf") as document:
                return document.page_count
        except (RuntimeError, ValueError) as exc:
            msg = f"Cannot read source PDF: {exc}"
            raise PreviewRenderError(msg) from exc

    def render(
        self,
        source_pdf: bytes,
        virtual_pages: Sequence[VirtualPage],
        text_fields: Sequence[TextField],
        image_fields: Sequence[ImageField],
        payment_plans: Sequence[PaymentPlanField],
    ) -> bytes:
        try:
            source = fitz.open(stream=source_pdf, filetype="pdf")
        except (RuntimeError, ValueError) as exc:
            msg = f"Cannot read source PDF: {exc}"
            raise PreviewRenderError(msg) from exc

        with source, fitz.open() as output:
            width, height = _first_page_size(source)
            images = {image.id: image for image in image_fields}
            length = len(virtual_pages)
            for index, page in enumerate(virtual_pages):
                if isinstance(page, PdfPage):
                    if page.page_num > source.page_count:
                        msg = f"Source PDF has no page {page.page_num}"
                        raise PreviewRenderError(msg)
                    source_index = page.page_num - 1
                    output.insert_pdf(source, from_page=source_index, to_page=source_index)
                    target = output[-1]
                    for field in text_fields:
                        if _lands_on(field, page, index, length):
                            self._draw_text(target, field)
                elif isinstance(page, ImagePage):
                    target = output.new_page(width=width, height=height)
                    image = images.get(page.image_id)
                    if image is None:
                        logger.warning(
                            "Image page %d references missing image %s", index, page.image_id
                        )
                        continue
                    label = IMAGE_KIND_LABELS.get(image.type, IMAGE_FALLBACK_LABEL)
                    _draw_centered_label(target, label, f"Variable: {image.var}")
                elif isinstance(page, PaymentPlanPage):
                    target = output.new_page(width=width, height=height)
                    _draw_centered_label(target, PAYMENT_PLAN_LABEL, None)
            logger.debug("Rendered preview with %d pages", output.page_count)
            return output.tobytes()

    def _draw_text(self, page: fitz.Page, field: TextField) -> None:
        text = replace_placeholders(field.content, self.placeholder_data)
        if not text:
            return
        page_width = page.rect.width
        if field.is_horizontally_centered:
            text_width = fitz.get_text_length(text, fontname=REGULAR_FONT, fontsize=field.size)
            x = page_width / 2 - text_width / 2
        else:
            x = field.x + TEXT_PADDING
        baseline = field.y - field.size - field.size * BASELINE_RATIO
        page.insert_text(
            (x, page.rect.height - baseline),
            text,
            fontsize=field.size,
            fontname=REGULAR_FONT,
            color=hex_to_rgb_floats(field.color),
        )


def _lands_on(field: TextField, page: PdfPage, index: int, length: int) -> bool:
    # Static anchors index source pages, not virtual slots.
    if field.page_reference:
        return PageReference.parse(field.page_reference).resolve(length) == index
    return field.page == page.page_num - 1


def _first_page_size(source: fitz.Document) -> tuple[float, float]:
    if source.page_count == 0:
        return DEFAULT_PAGE_SIZE
    rect = source[0].rect
    return rect.width, rect.height


def _draw_centered_label(page: fitz.Page, label: str, subtitle: Optional[str]) -> None:
    width, height = page.rect.width, page.rect.height
    label_width = fitz.get_text_length(label, fontname=BOLD_FONT, fontsize=LABEL_SIZE)
    # fitz measures y from the top; the label baseline sits at mid-height.
    page.insert_text(
        (width / 2 - label_width / 2, height / 2),
        label,
        fontsize=LABEL_SIZE,
        fontname=BOLD_FONT,
        color=LABEL_COLOR,
    )
    if subtitle is None:
        return
    subtitle_width = fitz.get_text_length(subtitle, fontname=REGULAR_FONT, fontsize=SUBTITLE_SIZE)
    page.insert_text(
        (width / 2 - subtitle_width / 2, height / 2 + SUBTITLE_GAP),
        subtitle,
        fontsize=SUBTITLE_SIZE,
        fontname=REGULAR_FONT,
        color=SUBTITLE_COLOR,
    )
