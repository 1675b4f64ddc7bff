"""Inbound wire models for the two layout schemas consumed by the offer service.

Only used to validate imports; exports are assembled key by key in the
converters so omission rules and key order stay exact.
"""

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Number = Union[int, float]
PageToken = Union[int, str]


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class LegacyColor(WireModel):
    red: Number = 0
    green: Number = 0
    blue: Number = 0


class LegacyTextField(WireModel):
    page: Optional[int] = None
    page_reference: Optional[str] = None
    content: str
    x: Optional[Number] = None
    y: Optional[Number] = None
    size: Number
    color: Optional[LegacyColor] = None
    is_horizontally_centered: Optional[bool] = None
    is_full_number: Optional[bool] = None
    requires: Optional[str] = None
    chain: Optional[Union[int, str]] = None
    order: Optional[Number] = None
    x_effect: Optional[Number] = None
    y_effect: Optional[Number] = None


class LegacyImageField(WireModel):
    page: Optional[int] = None
    page_reference: Optional[str] = None
    content: str
    x: Number = 0
    y: Number = 0
    is_full_width: Optional[bool] = None
    insert_newpages: Optional[bool] = None
    rotation: Optional[Number] = None
    left_margin_ratio: Optional[Number] = None
    right_margin_ratio: Optional[Number] = None


class LegacyPaymentPlanPage(WireModel):
    page_reference: Optional[str] = None
    selected_payment_plan: Optional[bool] = None
    payment_plan_id: Optional[str] = None


class LegacyLayout(WireModel):
    texts: List[LegacyTextField]
    images: List[LegacyImageField]
    payment_plans_pages: List[LegacyPaymentPlanPage] = Field(default_factory=list)


class V2GroupItem(WireModel):
    label: str
    var: str
    suffix: Optional[str] = None
    format: Optional[Literal["number", "currency"]] = None
    show_if: Optional[str] = None


class V2Group(WireModel):
    id: str
    start_x: Optional[Number] = None
    start_y: Optional[Number] = None
    label_x: Number
    value_x: Number
    spacing_y: Number
    font_size: Optional[Number] = None
    color: Optional[str] = None
    items: List[V2GroupItem] = Field(default_factory=list)


class V2TextField(WireModel):
    id: Optional[str] = None
    var: Optional[str] = None
    template: Optional[str] = None
    x: Optional[Number] = None
    y: Number
    align: Optional[Literal["left", "center", "right"]] = None
    font_size: Optional[Number] = None
    color: Optional[str] = None
    show_if: Optional[str] = None
    format: Optional[Literal["number", "currency"]] = None


class V2Page(WireModel):
    page: PageToken
    texts: List[V2TextField] = Field(default_factory=list)
    groups: List[V2Group] = Field(default_factory=list)


class V2ImageField(WireModel):
    id: Optional[str] = None
    var: str
    insert_after: PageToken
    sizing: Literal["matchWidth", "matchHeight"]
    new_pages: Optional[bool] = None


class V2PaymentPlan(WireModel):
    page: PageToken
    selected_only: Optional[bool] = None
    payment_plan_id: Optional[str] = None


class V2Defaults(WireModel):
    font_size: Optional[Number] = None
    color: Optional[str] = None


class V2Layout(WireModel):
    version: Literal[2]
    defaults: Optional[V2Defaults] = None
    pages: List[V2Page] = Field(default_factory=list)
    images: List[V2ImageField] = Field(default_factory=list)
    payment_plan: Optional[V2PaymentPlan] = None
