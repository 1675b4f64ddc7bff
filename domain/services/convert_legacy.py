from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Dict, List, Union

from domain.colors import hex_to_legacy_color, js_round, legacy_color_to_hex
from domain.models import (
    DEFAULT_COLOR,
    DEFAULT_PLAN_PAGE_REFERENCE,
    ImageField,
    ImportedLayout,
    LegacyDocument,
    PaymentPlanField,
    TextField,
    generate_id,
)
from domain.placeholders import infer_image_kind
from domain.schemas import LegacyImageField, LegacyLayout, LegacyPaymentPlanPage, LegacyTextField


def as_number(value: Union[int, float]) -> Union[int, float]:
    return int(value) if float(value).is_integer() else value


class LayoutToLegacyConverter:
    def convert(
        self,
        text_fields: Sequence[TextField],
        image_fields: Sequence[ImageField],
        payment_plans: Sequence[PaymentPlanField],
    ) -> LegacyDocument:
        return LegacyDocument(
            texts=[self._text(field) for field in text_fields],
            images=[self._image(field) for field in image_fields],
            payment_plans_pages=[self._plan(plan) for plan in payment_plans],
        )

    def _text(self, field: TextField) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "content": field.content,
            "y": js_round(field.y),
            "size": as_number(field.size),
        }
        if field.page_reference:
            payload["pageReference"] = field.page_reference
        else:
            payload["page"] = field.page
        if field.is_horizontally_centered:
            payload["isHorizontallyCentered"] = True
        else:
            payload["x"] = js_round(field.x)
        if field.is_full_number:
            payload["isFullNumber"] = True
        if field.requires:
            payload["requires"] = field.requires
        if field.color and field.color != DEFAULT_COLOR:
            payload["color"] = hex_to_legacy_color(field.color)
        return payload

    def _image(self, field: ImageField) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"content": field.var, "x": 0, "y": 0}
        if field.page_reference:
            payload["pageReference"] = field.page_reference
        else:
            payload["page"] = field.insert_after_page
        if field.sizing == "matchWidth":
            payload["isFullWidth"] = True
        if field.insert_new_pages:
            payload["insertNewpages"] = True
        payload["rotation"] = None
        return payload

    def _plan(self, plan: PaymentPlanField) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "pageReference": plan.page_reference or DEFAULT_PLAN_PAGE_REFERENCE,
        }
        if plan.selected_only:
            payload["selectedPaymentPlan"] = True
        if plan.payment_plan_id:
            payload["paymentPlanId"] = plan.payment_plan_id
        return payload


class LegacyToLayoutConverter:
    """Legacy import. Chained fields are flattened to absolute positions."""

    def convert(self, payload: Dict[str, Any]) -> ImportedLayout:
        layout = LegacyLayout.model_validate(payload)
        text_fields: List[TextField] = []
        chains: Dict[str, List[LegacyTextField]] = {}

        for text in layout.texts:
            if text.chain is not None and text.order is not None:
                anchor_page = text.page if text.page is not None else text.page_reference
                chains.setdefault(f"{anchor_page}-{text.chain}", []).append(text)
                continue
            text_fields.append(
                self._text(
                    text,
                    x=text.x if text.x is not None else 0,
                    y=text.y if text.y is not None else 0,
                )
            )

        for chain_key, members in chains.items():
            text_fields.extend(self._expand_chain(chain_key, members))

        return ImportedLayout(
            source_format="legacy",
            text_fields=text_fields,
            image_fields=[self._image(image) for image in layout.images],
            payment_plans=[self._plan(plan) for plan in layout.payment_plans_pages],
        )

    def _expand_chain(self, chain_key: str, members: List[LegacyTextField]) -> List[TextField]:
        ordered = sorted(members, key=lambda member: member.order or 0)
        anchor = next(
            (member for member in ordered if member.x is not None and member.y is not None),
            None,
        )
        if anchor is None:
            return []

        current_x = float(anchor.x or 0)
        current_y = float(anchor.y or 0)
        expanded: List[TextField] = []
        for index, member in enumerate(ordered):
            if index > 0:
                current_x += member.x_effect or 0
                current_y += member.y_effect or 0
            field = self._text(
                member,
                x=member.x if member.x is not None else current_x,
                y=member.y if member.y is not None else current_y,
            )
            expanded.append(
                field.model_copy(
                    update={"group_id": chain_key, "order_in_group": _as_int(member.order)}
                )
            )
        return expanded

    def _text(self, text: LegacyTextField, *, x: float, y: float) -> TextField:
        return TextField(
            id=generate_id(),
            page=text.page if text.page is not None else 0,
            page_reference=text.page_reference,
            content=text.content,
            x=x,
            y=y,
            size=text.size,
            color=legacy_color_to_hex(text.color.model_dump()) if text.color else DEFAULT_COLOR,
            is_horizontally_centered=bool(text.is_horizontally_centered),
            is_full_number=bool(text.is_full_number),
            requires=text.requires,
        )

    def _image(self, image: LegacyImageField) -> ImageField:
        return ImageField(
            id=generate_id(),
            type=infer_image_kind(image.content),
            var=image.content,
            insert_after_page=image.page if image.page is not None else 0,
            page_reference=image.page_reference,
            sizing="matchWidth" if image.is_full_width else "matchHeight",
            insert_new_pages=bool(image.insert_newpages),
        )

    def _plan(self, plan: LegacyPaymentPlanPage) -> PaymentPlanField:
        return PaymentPlanField(
            id=generate_id(),
            insert_after_page=0,
            page_reference=plan.page_reference,
            selected_only=bool(plan.selected_payment_plan),
            payment_plan_id=plan.payment_plan_id,
        )


def _as_int(value: Any) -> Any:
    if value is None:
        return None
    return int(value)
