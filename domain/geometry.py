from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Literal, Optional

from domain.models import ImageField, OverlayElement, PaymentPlanField, TextField
from domain.ports.rendering import TextMeasurer

AlignAxis = Literal["left", "centerX", "right", "top", "middle", "bottom"]
DistributeAxis = Literal["horizontal", "vertical"]
GuideType = Literal["horizontal", "vertical"]

SNAP_THRESHOLD = 5.0
CHAR_WIDTH_RATIO = 0.6
PAYMENT_PLAN_BOX = (400.0, 200.0)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2


@dataclass(frozen=True)
class Viewport:
    """Maps page-local screen coordinates (Y down) to PDF coordinates (Y up)."""

    zoom: float
    page_width: float
    page_height: float

    def screen_delta(self, pixels: float) -> float:
        return pixels / self.zoom

    def screen_to_pdf(self, left: float, top: float) -> Point:
        return Point(left, self.page_height - top)

    def pdf_to_screen(self, x: float, y: float) -> Point:
        return Point(x, self.page_height - y)


@dataclass(frozen=True)
class SnapGuide:
    type: GuideType
    position: float


@dataclass(frozen=True)
class SnapResult:
    left: float
    top: float
    guides: tuple[SnapGuide, ...] = ()


def estimate_text_width(content: str, size: float) -> float:
    return len(content) * size * CHAR_WIDTH_RATIO


def bounding_box(
    element: OverlayElement,
    measurer: Optional[TextMeasurer] = None,
    page_width: Optional[float] = None,
) -> Box:
    if isinstance(element, TextField):
        size = element.size or 12
        if element.width and element.height:
            width, height = element.width, element.height
        elif measurer is not None:
            width, height = measurer.text_width(element.content, size), size
        else:
            width, height = estimate_text_width(element.content, size), size
        x = element.x
        if element.is_horizontally_centered and page_width:
            x = page_width / 2 - width / 2
        return Box(x, element.y, width, height)
    if isinstance(element, ImageField):
        return Box(0.0, 0.0, element.width or 0.0, element.height or 0.0)
    if isinstance(element, PaymentPlanField):
        default_width, default_height = PAYMENT_PLAN_BOX
        return Box(0.0, 0.0, element.width or default_width, element.height or default_height)
    return Box(0.0, 0.0, 0.0, 0.0)


def screen_box(
    field: TextField,
    viewport: Viewport,
    measurer: Optional[TextMeasurer] = None,
) -> Box:
    box = bounding_box(field, measurer, viewport.page_width)
    top_left = viewport.pdf_to_screen(box.x, field.y)
    return Box(top_left.x, top_left.y, box.width, box.height)


def align_edges(
    fields: Sequence[TextField],
    axis: AlignAxis,
    measurer: Optional[TextMeasurer] = None,
) -> dict[str, dict[str, float]]:
    """New ``x`` or ``y`` per field id so the chosen edge coincides.

    PDF space grows upward, so the top edge is ``y + height`` and the bottom
    edge is ``y``.
    """
    if len(fields) < 2:
        return {}
    boxes = {field.id: bounding_box(field, measurer) for field in fields}

    if axis == "left":
        target = min(box.x for box in boxes.values())
        return {field_id: {"x": target} for field_id in boxes}
    if axis == "right":
        target = max(box.x2 for box in boxes.values())
        return {field_id: {"x": target - box.width} for field_id, box in boxes.items()}
    if axis == "centerX":
        target = _mean(box.center_x for box in boxes.values())
        return {field_id: {"x": target - box.width / 2} for field_id, box in boxes.items()}
    if axis == "top":
        target = max(box.y2 for box in boxes.values())
        return {field_id: {"y": target - box.height} for field_id, box in boxes.items()}
    if axis == "bottom":
        target = min(box.y for box in boxes.values())
        return {field_id: {"y": target} for field_id in boxes}
    if axis == "middle":
        target = _mean(box.center_y for box in boxes.values())
        return {field_id: {"y": target - box.height / 2} for field_id, box in boxes.items()}
    msg = f"Unknown alignment axis: {axis}"
    raise ValueError(msg)


def distribute(fields: Sequence[TextField], axis: DistributeAxis) -> dict[str, dict[str, float]]:
    """Equal spacing by position (not by gap between edges)."""
    if len(fields) < 3:
        return {}
    attr = "x" if axis == "horizontal" else "y"
    ordered = sorted(fields, key=lambda field: getattr(field, attr))
    start = getattr(ordered[0], attr)
    end = getattr(ordered[-1], attr)
    step = (end - start) / (len(ordered) - 1)
    return {field.id: {attr: start + step * index} for index, field in enumerate(ordered)}


_Edge = Callable[[Box], float]
_Offset = Callable[[Box], float]

# (dragged edge, target edge, distance from the dragged box origin to its edge)
_X_RELATIONS: tuple[tuple[_Edge, _Edge, _Offset], ...] = (
    (lambda b: b.x, lambda t: t.x, lambda b: 0.0),
    (lambda b: b.x, lambda t: t.x2, lambda b: 0.0),
    (lambda b: b.x2, lambda t: t.x, lambda b: b.width),
    (lambda b: b.x2, lambda t: t.x2, lambda b: b.width),
    (lambda b: b.center_x, lambda t: t.center_x, lambda b: b.width / 2),
)
_Y_RELATIONS: tuple[tuple[_Edge, _Edge, _Offset], ...] = (
    (lambda b: b.y, lambda t: t.y, lambda b: 0.0),
    (lambda b: b.y, lambda t: t.y2, lambda b: 0.0),
    (lambda b: b.y2, lambda t: t.y, lambda b: b.height),
    (lambda b: b.y2, lambda t: t.y2, lambda b: b.height),
    (lambda b: b.center_y, lambda t: t.center_y, lambda b: b.height / 2),
)


def snap(
    dragged: Box,
    targets: Sequence[Box],
    threshold: float = SNAP_THRESHOLD,
    enabled: bool = True,
) -> SnapResult:
    """Snap a screen-space box (Y down) against other boxes on the same page."""
    if not enabled or not targets:
        return SnapResult(dragged.x, dragged.y)

    guides: list[SnapGuide] = []
    left = dragged.x
    top = dragged.y

    x_match = _first_match(dragged, targets, _X_RELATIONS, threshold)
    if x_match is not None:
        position, offset = x_match
        left = position - offset
        guides.append(SnapGuide("vertical", position))

    y_match = _first_match(dragged, targets, _Y_RELATIONS, threshold)
    if y_match is not None:
        position, offset = y_match
        top = position - offset
        guides.append(SnapGuide("horizontal", position))

    return SnapResult(left, top, tuple(guides))


def _first_match(
    dragged: Box,
    targets: Sequence[Box],
    relations: Sequence[tuple[_Edge, _Edge, _Offset]],
    threshold: float,
) -> Optional[tuple[float, float]]:
    for dragged_edge, target_edge, offset in relations:
        edge = dragged_edge(dragged)
        for target in targets:
            position = target_edge(target)
            if abs(edge - position) < threshold:
                return position, offset(dragged)
    return None


def _mean(values: Iterable[float]) -> float:
    items = list(values)
    return sum(items) / len(items)
