from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Dict, List, Optional, Union

from domain.colors import js_round
from domain.models import (
    DEFAULT_COLOR,
    DEFAULT_FONT_SIZE,
    DEFAULT_PLAN_PAGE_REFERENCE,
    ImageField,
    ImportedLayout,
    PaymentPlanField,
    TextField,
    V2Document,
    generate_id,
)
from domain.page_reference import (
    V2_LAST_TOKEN,
    insertion_from_v2,
    insertion_to_v2,
    text_page_from_v2,
    text_page_to_v2,
)
from domain.placeholders import infer_image_kind, single_variable, strip_braces
from domain.schemas import V2Group, V2ImageField, V2Layout, V2TextField
from domain.services.convert_legacy import as_number

PageKey = Union[int, str]


class LayoutToV2Converter:
    """Page-grouped V2 export.

    Only the first payment plan is representable in V2; the rest are dropped.
    """

    def __init__(self, font_size: float = DEFAULT_FONT_SIZE, color: str = DEFAULT_COLOR) -> None:
        self.font_size = font_size
        self.color = color

    def convert(
        self,
        text_fields: Sequence[TextField],
        image_fields: Sequence[ImageField],
        payment_plans: Sequence[PaymentPlanField],
    ) -> V2Document:
        grouped: Dict[PageKey, List[Dict[str, Any]]] = {}
        for field in text_fields:
            key: PageKey = field.page_reference or field.page
            grouped.setdefault(key, []).append(self._text(field))

        pages = [
            {"page": text_page_to_v2(key), "texts": texts} for key, texts in grouped.items()
        ]
        # Stable sort: numeric pages ascending, string pages after them in first-seen order.
        pages.sort(key=_page_sort_key)

        return V2Document(
            defaults={"fontSize": as_number(self.font_size), "color": self.color},
            pages=pages,
            images=[self._image(image) for image in image_fields],
            payment_plan=self._plan(payment_plans[0]) if payment_plans else None,
        )

    def _text(self, field: TextField) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"id": field.id, "y": js_round(field.y)}
        variable = single_variable(field.content)
        if variable is not None:
            payload["var"] = variable
        else:
            payload["template"] = field.content
        if field.is_horizontally_centered:
            payload["align"] = "center"
        else:
            payload["x"] = js_round(field.x)
        if field.size != self.font_size:
            payload["fontSize"] = as_number(field.size)
        if field.color and field.color != self.color:
            payload["color"] = field.color
        if field.requires:
            payload["showIf"] = strip_braces(field.requires)
        if field.is_full_number:
            payload["format"] = "number"
        return payload

    def _image(self, image: ImageField) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": image.id,
            "var": strip_braces(image.var),
            "insertAfter": (
                insertion_to_v2(image.page_reference)
                if image.page_reference
                else image.insert_after_page
            ),
            "sizing": image.sizing,
        }
        if image.insert_new_pages:
            payload["newPages"] = True
        return payload

    def _plan(self, plan: PaymentPlanField) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "page": insertion_to_v2(plan.page_reference) if plan.page_reference else V2_LAST_TOKEN,
            "selectedOnly": plan.selected_only,
        }
        if plan.payment_plan_id:
            payload["paymentPlanId"] = plan.payment_plan_id
        return payload


class V2ToLayoutConverter:
    """V2 import. Groups expand into label/value pairs stepping down by ``spacingY``."""

    def convert(self, payload: Dict[str, Any]) -> ImportedLayout:
        layout = V2Layout.model_validate(payload)
        defaults = layout.defaults
        font_size = DEFAULT_FONT_SIZE
        if defaults is not None and defaults.font_size is not None:
            font_size = defaults.font_size
        color = defaults.color if defaults and defaults.color else DEFAULT_COLOR

        text_fields: List[TextField] = []
        for page in layout.pages:
            page_num = page.page if isinstance(page.page, int) else 0
            page_reference = text_page_from_v2(page.page) if isinstance(page.page, str) else None
            for text in page.texts:
                text_fields.append(
                    self._text(text, page_num, page_reference, font_size, color)
                )
            for group in page.groups:
                text_fields.extend(
                    self._group(group, page_num, page_reference, font_size, color)
                )

        plans: List[PaymentPlanField] = []
        if layout.payment_plan is not None:
            token = layout.payment_plan.page
            plans.append(
                PaymentPlanField(
                    id=generate_id(),
                    insert_after_page=0,
                    page_reference=(
                        insertion_from_v2(token)
                        if isinstance(token, str)
                        else DEFAULT_PLAN_PAGE_REFERENCE
                    ),
                    selected_only=bool(layout.payment_plan.selected_only),
                    payment_plan_id=layout.payment_plan.payment_plan_id,
                )
            )

        return ImportedLayout(
            source_format="v2",
            text_fields=text_fields,
            image_fields=[self._image(image) for image in layout.images],
            payment_plans=plans,
        )

    def _text(
        self,
        text: V2TextField,
        page_num: int,
        page_reference: Optional[str],
        font_size: float,
        color: str,
    ) -> TextField:
        return TextField(
            id=text.id or generate_id(),
            page=page_num,
            page_reference=page_reference,
            content=f"{{{text.var}}}" if text.var else (text.template or ""),
            x=text.x if text.x is not None else 0,
            y=text.y,
            size=text.font_size if text.font_size is not None else font_size,
            color=text.color or color,
            is_horizontally_centered=text.align == "center",
            is_full_number=text.format in ("number", "currency"),
            requires=f"{{{text.show_if}}}" if text.show_if else None,
        )

    def _group(
        self,
        group: V2Group,
        page_num: int,
        page_reference: Optional[str],
        font_size: float,
        color: str,
    ) -> List[TextField]:
        fields: List[TextField] = []
        current_y = group.start_y if group.start_y is not None else 0
        size = group.font_size if group.font_size is not None else font_size
        group_color = group.color or color
        for index, item in enumerate(group.items):
            requires = f"{{{item.show_if}}}" if item.show_if else None
            common = {
                "page": page_num,
                "page_reference": page_reference,
                "y": current_y,
                "size": size,
                "color": group_color,
                "requires": requires,
                "group_id": group.id,
            }
            fields.append(
                TextField(
                    id=generate_id(),
                    content=item.label,
                    x=group.label_x,
                    order_in_group=index * 2,
                    **common,
                )
            )
            fields.append(
                TextField(
                    id=generate_id(),
                    content=f"{{{item.var}}}{item.suffix or ''}",
                    x=group.value_x,
                    is_full_number=item.format in ("number", "currency"),
                    order_in_group=index * 2 + 1,
                    **common,
                )
            )
            current_y -= group.spacing_y
        return fields

    def _image(self, image: V2ImageField) -> ImageField:
        token = image.insert_after
        return ImageField(
            id=image.id or generate_id(),
            type=infer_image_kind(image.var),
            var=f"{{{image.var}}}",
            insert_after_page=token if isinstance(token, int) else 0,
            page_reference=insertion_from_v2(token) if isinstance(token, str) else None,
            sizing=image.sizing,
            insert_new_pages=bool(image.new_pages),
        )


def _page_sort_key(page: Dict[str, Any]) -> tuple[int, int]:
    token = page["page"]
    if isinstance(token, int):
        return (0, token)
    return (1, 0)
