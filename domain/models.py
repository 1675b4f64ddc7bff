from __future__ import annotations

import re
import time
import uuid
from dataclasses import dataclass, field
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    TypeAdapter,
    field_validator,
)
from pydantic.alias_generators import to_camel

DEFAULT_FONT_SIZE = 20
DEFAULT_COLOR = "#000000"
DEFAULT_PLAN_PAGE_REFERENCE = "{length}"

_HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")

ImageKind = Literal["gallery", "floorPlan", "unitLocation", "paymentPlan"]
ImageSizing = Literal["matchWidth", "matchHeight"]
GuideOrientation = Literal["horizontal", "vertical"]


def generate_id() -> str:
    return uuid.uuid4().hex[:9]


def normalize_hex_color(value: str) -> str:
    match = _HEX_COLOR_RE.match(str(value or "").strip())
    if not match:
        msg = f"Invalid hex color: {value!r}"
        raise ValueError(msg)
    digits = match.group(1).lower()
    if len(digits) == 3:
        digits = "".join(digit * 2 for digit in digits)
    return f"#{digits}"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class PdfPage(CamelModel):
    type: Literal["pdf"] = "pdf"
    page_num: PositiveInt


class ImagePage(CamelModel):
    type: Literal["image"] = "image"
    image_id: str = Field(..., min_length=1)


class PaymentPlanPage(CamelModel):
    type: Literal["payment-plan"] = "payment-plan"
    plan_id: str = Field(..., min_length=1)


VirtualPage = Annotated[Union[PdfPage, ImagePage, PaymentPlanPage], Field(discriminator="type")]
VIRTUAL_PAGES_ADAPTER: TypeAdapter[List[VirtualPage]] = TypeAdapter(List[VirtualPage])


class TextField(CamelModel):
    id: str = Field(default_factory=generate_id)
    page: NonNegativeInt = 0
    page_reference: Optional[str] = None
    content: str = ""
    x: float = 0
    y: float = 0
    size: float = DEFAULT_FONT_SIZE
    color: str = DEFAULT_COLOR
    is_horizontally_centered: bool = False
    is_full_number: bool = False
    requires: Optional[str] = None
    group_id: Optional[str] = None
    order_in_group: Optional[int] = None
    # Measured extents cached by the viewer; never part of the wire formats.
    width: Optional[float] = None
    height: Optional[float] = None

    @field_validator("color", mode="before")
    @classmethod
    def normalize_color(cls, value: object) -> str:
        if value is None or value == "":
            return DEFAULT_COLOR
        return normalize_hex_color(str(value))


class ImageField(CamelModel):
    id: str = Field(default_factory=generate_id)
    type: ImageKind = "gallery"
    var: str = Field(..., min_length=1)
    insert_after_page: NonNegativeInt = 0
    page_reference: Optional[str] = None
    sizing: ImageSizing = "matchWidth"
    insert_new_pages: bool = False
    width: Optional[float] = None
    height: Optional[float] = None


class PaymentPlanField(CamelModel):
    id: str = Field(default_factory=generate_id)
    insert_after_page: NonNegativeInt = 0
    page_reference: Optional[str] = None
    selected_only: bool = False
    payment_plan_id: Optional[str] = None
    page: Optional[NonNegativeInt] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def effective_page_reference(self) -> str:
        return self.page_reference or DEFAULT_PLAN_PAGE_REFERENCE


OverlayElement = Union[TextField, ImageField, PaymentPlanField]


class Preset(CamelModel):
    id: str = Field(default_factory=generate_id)
    name: str = Field(..., min_length=1)
    fields: List[TextField] = Field(default_factory=list)


class Guide(CamelModel):
    id: str = Field(default_factory=generate_id)
    type: GuideOrientation
    position: float


class StyleClipboard(CamelModel):
    size: float
    color: str
    is_horizontally_centered: bool
    is_full_number: bool

    @classmethod
    def from_field(cls, source: TextField) -> StyleClipboard:
        return cls(
            size=source.size,
            color=source.color,
            is_horizontally_centered=bool(source.is_horizontally_centered),
            is_full_number=bool(source.is_full_number),
        )


class DocumentSnapshot(CamelModel):
    text_fields: List[TextField] = Field(default_factory=list)
    image_fields: List[ImageField] = Field(default_factory=list)
    payment_plans: List[PaymentPlanField] = Field(default_factory=list)
    virtual_pages: List[VirtualPage] = Field(default_factory=list)
    guides: List[Guide] = Field(default_factory=list)
    presets: Optional[List[Preset]] = None
    num_pages: NonNegativeInt = 0


@dataclass(frozen=True)
class HistoryEntry:
    text_fields: tuple[TextField, ...]
    image_fields: tuple[ImageField, ...]
    payment_plans: tuple[PaymentPlanField, ...]
    virtual_pages: tuple[VirtualPage, ...]
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class ImportedLayout:
    source_format: Literal["legacy", "v2"]
    text_fields: List[TextField]
    image_fields: List[ImageField]
    payment_plans: List[PaymentPlanField]


@dataclass(frozen=True)
class OperationResult:
    ok: bool
    message: str = ""
    payload: Any = None


@dataclass(frozen=True)
class LegacyDocument:
    texts: List[dict]
    images: List[dict]
    payment_plans_pages: List[dict]

    def to_dict(self) -> dict:
        return {
            "texts": self.texts,
            "images": self.images,
            "paymentPlansPages": self.payment_plans_pages,
        }


@dataclass(frozen=True)
class V2Document:
    defaults: dict
    pages: List[dict]
    images: List[dict]
    payment_plan: Optional[dict] = None

    def to_dict(self) -> dict:
        payload: dict = {
            "version": 2,
            "defaults": self.defaults,
            "pages": self.pages,
            "images": self.images,
        }
        if self.payment_plan is not None:
            payload["paymentPlan"] = self.payment_plan
        return payload
