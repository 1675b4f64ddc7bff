from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any, List, Optional, Union

from domain.document import DocumentState
from domain.geometry import (
    SNAP_THRESHOLD,
    AlignAxis,
    Box,
    DistributeAxis,
    SnapGuide,
    Viewport,
    align_edges,
    distribute,
    screen_box,
    snap,
)
from domain.history import HISTORY_LIMIT, Collections, HistoryManager, capture
from domain.models import (
    DEFAULT_COLOR,
    DEFAULT_FONT_SIZE,
    VIRTUAL_PAGES_ADAPTER,
    DocumentSnapshot,
    Guide,
    GuideOrientation,
    HistoryEntry,
    ImageField,
    ImagePage,
    ImportedLayout,
    OperationResult,
    PaymentPlanField,
    PaymentPlanPage,
    Preset,
    StyleClipboard,
    TextField,
    VirtualPage,
    generate_id,
)
from domain.ports.rendering import PreviewRenderer, TextMeasurer
from domain.presets import default_presets
from domain.services.convert_legacy import LayoutToLegacyConverter
from domain.services.convert_v2 import LayoutToV2Converter
from domain.services.layout_import import import_layout
from domain.services.page_indexing import clamp_page

logger = logging.getLogger(__name__)

DUPLICATE_OFFSET = 20.0
# Drag keeps overlays inside the printable area of the page.
DRAG_MIN_X = 3.0
DRAG_MIN_Y = 35.0

_X_AXES = {"left", "centerX", "right"}

AnyField = Union[TextField, ImageField, PaymentPlanField]


class DragGesture:
    """One pointer drag: created by ``EditorSession.begin_drag``.

    ``update`` receives the cumulative screen-pixel offset since the gesture
    began, moves every dragged field without touching history, and returns the
    snap guides that are active for that position.
    """

    def __init__(
        self,
        session: EditorSession,
        field: TextField,
        viewport: Viewport,
        origins: dict[str, tuple[float, float]],
        targets: Sequence[Box],
        measurer: Optional[TextMeasurer],
    ) -> None:
        self._session = session
        self.field_id = field.id
        self.viewport = viewport
        self._origins = origins
        self._targets = tuple(targets)
        self._start = screen_box(field, viewport, measurer)
        self.guides: tuple[SnapGuide, ...] = ()
        self.active = True

    @property
    def targets(self) -> tuple[Box, ...]:
        return self._targets

    def update(self, dx: float, dy: float, snap_disabled: bool = False) -> tuple[SnapGuide, ...]:
        if not self.active:
            return ()
        viewport = self.viewport
        moved = Box(
            self._start.x + viewport.screen_delta(dx),
            self._start.y + viewport.screen_delta(dy),
            self._start.width,
            self._start.height,
        )
        result = snap(
            moved,
            self._targets,
            threshold=self._session.snap_threshold,
            enabled=self._session.snap_enabled and not snap_disabled,
        )
        self.guides = result.guides

        anchor = viewport.screen_to_pdf(result.left, result.top)
        origin_x, origin_y = self._origins[self.field_id]
        delta_x = anchor.x - origin_x
        delta_y = anchor.y - origin_y
        positions = {
            field_id: (
                round(_clamp(start_x + delta_x, DRAG_MIN_X, viewport.page_width)),
                round(_clamp(start_y + delta_y, DRAG_MIN_Y, viewport.page_height)),
            )
            for field_id, (start_x, start_y) in self._origins.items()
        }
        self._session._place_text_fields(positions)
        return self.guides

    def end(self) -> None:
        self.active = False
        self.guides = ()


class EditorSession:
    """Editing state for one template: collections, selection and history.

    Commands that change document structure or content take a history
    snapshot first. Partial updates (``update_*``) and ``move_selected`` do
    not, so callers can stream them without flooding the undo stack.
    """

    def __init__(
        self,
        *,
        history_limit: int = HISTORY_LIMIT,
        snap_threshold: float = SNAP_THRESHOLD,
        duplicate_offset: float = DUPLICATE_OFFSET,
        default_font_size: float = DEFAULT_FONT_SIZE,
        default_color: str = DEFAULT_COLOR,
        strict: bool = True,
        measurer: Optional[TextMeasurer] = None,
    ) -> None:
        self.state = DocumentState()
        self.history = HistoryManager(history_limit)
        self.snap_threshold = snap_threshold
        self.snap_enabled = True
        self.duplicate_offset = duplicate_offset
        self.default_font_size = default_font_size
        self.default_color = default_color
        self.strict = strict
        self.measurer = measurer
        self.num_pages = 0
        self.guides: List[Guide] = []
        self.presets: List[Preset] = default_presets()
        self.copied_styles: Optional[StyleClipboard] = None
        self._selection: List[str] = []

    # Queries

    @property
    def text_fields(self) -> List[TextField]:
        return self.state.text_fields

    @property
    def image_fields(self) -> List[ImageField]:
        return self.state.image_fields

    @property
    def payment_plans(self) -> List[PaymentPlanField]:
        return self.state.payment_plans

    @property
    def virtual_pages(self) -> List[VirtualPage]:
        return self.state.virtual_pages

    @property
    def selected_ids(self) -> tuple[str, ...]:
        return tuple(self._selection)

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def selected_text_fields(self) -> List[TextField]:
        selected = set(self._selection)
        return [field for field in self.state.text_fields if field.id in selected]

    def fields_on_page(self, index: int) -> List[TextField]:
        return [field for field in self.state.text_fields if field.page == index]

    # History

    def snapshot(self) -> None:
        self.history.snapshot(self._capture())

    def undo(self) -> bool:
        restored = self.history.undo(self._capture())
        if restored is None:
            return False
        self._apply(restored)
        return True

    def redo(self) -> bool:
        restored = self.history.redo()
        if restored is None:
            return False
        self._apply(restored)
        return True

    # Text fields

    def add_text_field(self, field: TextField) -> TextField:
        self.snapshot()
        field = _with_id(field)
        self.state.text_fields.append(field)
        return field

    def update_text_field(self, field_id: str, **changes: Any) -> Optional[TextField]:
        return self._update(self.state.text_fields, field_id, changes)

    def delete_text_field(self, field_id: str) -> bool:
        if self.state.find_text(field_id) is None:
            return False
        self.snapshot()
        self.state.text_fields = [field for field in self.state.text_fields if field.id != field_id]
        self._deselect({field_id})
        return True

    # Image fields

    def add_image_field(self, image: ImageField) -> ImageField:
        self.snapshot()
        image = _with_id(image)
        if image.insert_new_pages:
            self.state.insert_page(image.insert_after_page + 1, ImagePage(image_id=image.id))
        self.state.image_fields.append(image)
        self._verify()
        return image

    def update_image_field(self, image_id: str, **changes: Any) -> Optional[ImageField]:
        return self._update(self.state.image_fields, image_id, changes)

    def delete_image_field(self, image_id: str) -> bool:
        if self.state.find_image(image_id) is None:
            return False
        self.snapshot()
        self.state.image_fields = [
            image for image in self.state.image_fields if image.id != image_id
        ]
        self.state.remove_pages_referencing(image_id=image_id)
        self._prune_selection()
        return True

    # Payment plans

    def add_payment_plan(self, plan: PaymentPlanField) -> PaymentPlanField:
        self.snapshot()
        plan = _with_id(plan)
        self.state.insert_page(plan.insert_after_page + 1, PaymentPlanPage(plan_id=plan.id))
        self.state.payment_plans.append(plan)
        self._verify()
        return plan

    def update_payment_plan(self, plan_id: str, **changes: Any) -> Optional[PaymentPlanField]:
        return self._update(self.state.payment_plans, plan_id, changes)

    def delete_payment_plan(self, plan_id: str) -> bool:
        if self.state.find_plan(plan_id) is None:
            return False
        self.snapshot()
        self.state.payment_plans = [plan for plan in self.state.payment_plans if plan.id != plan_id]
        self.state.remove_pages_referencing(plan_id=plan_id)
        self._prune_selection()
        return True

    def clear_all(self) -> None:
        self.snapshot()
        self.state = DocumentState()
        self._selection = []

    # Virtual pages

    def init_from_page_count(self, count: int) -> bool:
        self.num_pages = count
        return self.state.init_from_page_count(count)

    def insert_page(self, index: int, page: VirtualPage) -> int:
        if self.strict:
            self.state.check_references([page], max(0, min(index, self.state.page_count)))
        self.snapshot()
        return self.state.insert_page(index, page)

    def delete_page(self, index: int) -> Optional[VirtualPage]:
        if not 0 <= index < self.state.page_count:
            return None
        self.snapshot()
        page = self.state.delete_page(index)
        self._prune_selection()
        return page

    def duplicate_page(self, index: int) -> Optional[VirtualPage]:
        if not 0 <= index < self.state.page_count:
            return None
        self.state.check_references([self.state.virtual_pages[index]], index)
        self.snapshot()
        return self.state.duplicate_page(index)

    def reorder_pages(self, from_index: int, to_index: int) -> bool:
        if not 0 <= from_index < self.state.page_count:
            return False
        self.snapshot()
        return self.state.reorder(from_index, to_index)

    def set_virtual_pages(self, pages: Sequence[Any]) -> None:
        validated = VIRTUAL_PAGES_ADAPTER.validate_python(list(pages))
        if self.strict:
            self.state.check_references(validated)
        self.snapshot()
        self.state.virtual_pages = validated

    # Selection

    def select_field(self, field_id: str, additive: bool = False) -> None:
        if not additive:
            self._selection = [field_id]
        elif field_id in self._selection:
            self._selection.remove(field_id)
        else:
            self._selection.append(field_id)

    def select_fields(self, field_ids: Iterable[str]) -> None:
        self._selection = list(dict.fromkeys(field_ids))

    def clear_selection(self) -> None:
        self._selection = []

    def select_all_on_page(self, index: int) -> None:
        self._selection = [field.id for field in self.fields_on_page(index)]

    def delete_selected(self) -> int:
        if not self._selection:
            return 0
        self.snapshot()
        selected = set(self._selection)
        state = self.state
        removed_images = [image.id for image in state.image_fields if image.id in selected]
        removed_plans = [plan.id for plan in state.payment_plans if plan.id in selected]
        removed_texts = sum(1 for field in state.text_fields if field.id in selected)
        state.text_fields = [field for field in state.text_fields if field.id not in selected]
        state.image_fields = [image for image in state.image_fields if image.id not in selected]
        state.payment_plans = [plan for plan in state.payment_plans if plan.id not in selected]
        for image_id in removed_images:
            state.remove_pages_referencing(image_id=image_id)
        for plan_id in removed_plans:
            state.remove_pages_referencing(plan_id=plan_id)
        self._selection = []
        return removed_texts + len(removed_images) + len(removed_plans)

    def duplicate_selected(self) -> List[TextField]:
        sources = self.selected_text_fields()
        if not sources:
            return []
        self.snapshot()
        offset = self.duplicate_offset
        copies = [
            field.model_copy(
                update={"id": generate_id(), "x": field.x + offset, "y": field.y + offset}
            )
            for field in sources
        ]
        self.state.text_fields.extend(copies)
        self._selection = [field.id for field in copies]
        return copies

    def move_selected(self, dx: float, dy: float) -> None:
        selected = set(self._selection)
        self.state.text_fields = [
            field.model_copy(update={"x": field.x + dx, "y": field.y + dy})
            if field.id in selected
            else field
            for field in self.state.text_fields
        ]

    def move_selected_to_page(self, page: int) -> int:
        if not self.selected_text_fields():
            return 0
        target = clamp_page(page, self.state.page_count)
        self.snapshot()
        selected = set(self._selection)
        self.state.text_fields = [
            field.model_copy(update={"page": target, "page_reference": None})
            if field.id in selected
            else field
            for field in self.state.text_fields
        ]
        return target

    def copy_styles(self, field_id: Optional[str] = None) -> bool:
        source_id = field_id or (self._selection[0] if self._selection else None)
        source = self.state.find_text(source_id) if source_id else None
        if source is None:
            return False
        self.copied_styles = StyleClipboard.from_field(source)
        return True

    def paste_styles(self) -> int:
        targets = self.selected_text_fields()
        if self.copied_styles is None or not targets:
            return 0
        self.snapshot()
        styles = self.copied_styles.model_dump()
        ids = {field.id for field in targets}
        self.state.text_fields = [
            field.model_copy(update=styles) if field.id in ids else field
            for field in self.state.text_fields
        ]
        return len(ids)

    # Alignment

    def align(self, axis: AlignAxis) -> bool:
        positions = align_edges(self.selected_text_fields(), axis, self.measurer)
        if not positions:
            return False
        self.snapshot()
        clear_centering = axis in _X_AXES
        self.state.text_fields = [
            _positioned(field, positions[field.id], clear_centering)
            if field.id in positions
            else field
            for field in self.state.text_fields
        ]
        return True

    def distribute(self, axis: DistributeAxis) -> bool:
        positions = distribute(self.selected_text_fields(), axis)
        if not positions:
            return False
        self.snapshot()
        clear_centering = axis == "horizontal"
        self.state.text_fields = [
            _positioned(field, positions[field.id], clear_centering)
            if field.id in positions
            else field
            for field in self.state.text_fields
        ]
        return True

    # Drag

    def begin_drag(self, field_id: str, viewport: Viewport) -> DragGesture:
        field = self.state.find_text(field_id)
        if field is None:
            msg = f"Unknown text field: {field_id}"
            raise KeyError(msg)
        self.snapshot()

        dragged = [field]
        if field_id in self._selection and len(self._selection) > 1:
            dragged = self.selected_text_fields()
        start = screen_box(field, viewport, self.measurer)
        origins = {item.id: (item.x, item.y) for item in dragged}
        # The anchor starts from where it is drawn, which differs from ``x`` when centered.
        origins[field.id] = (start.x, field.y)

        excluded = set(self._selection) | {field_id}
        targets = [
            screen_box(other, viewport, self.measurer)
            for other in self.state.text_fields
            if other.page == field.page and other.id not in excluded
        ]
        return DragGesture(self, field, viewport, origins, targets, self.measurer)

    def _place_text_fields(self, positions: dict[str, tuple[float, float]]) -> None:
        self.state.text_fields = [
            field.model_copy(
                update={
                    "x": positions[field.id][0],
                    "y": positions[field.id][1],
                    "is_horizontally_centered": False,
                }
            )
            if field.id in positions
            else field
            for field in self.state.text_fields
        ]

    # Guides

    def add_guide(self, orientation: GuideOrientation, position: float) -> Guide:
        guide = Guide(type=orientation, position=position)
        self.guides.append(guide)
        return guide

    def update_guide(self, guide_id: str, position: float) -> bool:
        for index, guide in enumerate(self.guides):
            if guide.id == guide_id:
                self.guides[index] = guide.model_copy(update={"position": position})
                return True
        return False

    def delete_guide(self, guide_id: str) -> bool:
        remaining = [guide for guide in self.guides if guide.id != guide_id]
        removed = len(remaining) != len(self.guides)
        self.guides = remaining
        return removed

    def clear_guides(self) -> None:
        self.guides = []

    # Presets

    def add_preset(self, preset: Preset) -> Preset:
        self.presets.append(preset)
        return preset

    def update_preset(self, preset_id: str, **changes: Any) -> Optional[Preset]:
        return self._update(self.presets, preset_id, changes)

    def delete_preset(self, preset_id: str) -> bool:
        remaining = [preset for preset in self.presets if preset.id != preset_id]
        removed = len(remaining) != len(self.presets)
        self.presets = remaining
        return removed

    def save_selection_as_preset(self, name: str) -> Optional[Preset]:
        fields = self.selected_text_fields()
        if not fields:
            return None
        preset = Preset(
            name=name,
            fields=[
                field.model_copy(update={"id": generate_id(), "page": 0, "page_reference": None})
                for field in fields
            ],
        )
        self.presets.append(preset)
        return preset

    def apply_preset(self, preset_id: str, page_index: int = 0) -> List[TextField]:
        preset = next((item for item in self.presets if item.id == preset_id), None)
        if preset is None:
            return []
        self.snapshot()
        target = clamp_page(page_index, self.state.page_count)
        created = [
            field.model_copy(update={"id": generate_id(), "page": target}, deep=True)
            for field in preset.fields
        ]
        self.state.text_fields.extend(created)
        self._selection = [field.id for field in created]
        return created

    # Persistence

    def get_snapshot(self) -> DocumentSnapshot:
        return DocumentSnapshot(
            text_fields=list(self.state.text_fields),
            image_fields=list(self.state.image_fields),
            payment_plans=list(self.state.payment_plans),
            virtual_pages=list(self.state.virtual_pages),
            guides=list(self.guides),
            presets=list(self.presets),
            num_pages=self.num_pages,
        )

    def hydrate(self, snapshot: DocumentSnapshot) -> None:
        state = DocumentState(
            text_fields=list(snapshot.text_fields),
            image_fields=list(snapshot.image_fields),
            payment_plans=list(snapshot.payment_plans),
            virtual_pages=list(snapshot.virtual_pages),
        )
        if self.strict:
            state.check_integrity()
        self.state = state
        self.guides = list(snapshot.guides)
        self.presets = list(snapshot.presets) if snapshot.presets is not None else default_presets()
        self.num_pages = snapshot.num_pages
        self._selection = []
        self.copied_styles = None
        self.history.clear()

    # Import and export

    def import_layout(self, text: Union[str, bytes]) -> Optional[ImportedLayout]:
        imported = import_layout(text)
        if imported is None:
            return None
        self.snapshot()
        self.state.text_fields = list(imported.text_fields)
        self.state.image_fields = list(imported.image_fields)
        self.state.payment_plans = list(imported.payment_plans)
        dropped = self.state.drop_orphan_pages()
        if dropped:
            logger.info("Dropped %d virtual pages orphaned by import", dropped)
        self._prune_selection()
        return imported

    def export_legacy(self) -> dict:
        state = self.state
        return (
            LayoutToLegacyConverter()
            .convert(state.text_fields, state.image_fields, state.payment_plans)
            .to_dict()
        )

    def export_v2(self) -> dict:
        state = self.state
        converter = LayoutToV2Converter(self.default_font_size, self.default_color)
        document = converter.convert(state.text_fields, state.image_fields, state.payment_plans)
        return document.to_dict()

    def export_pdf(self, renderer: PreviewRenderer, source_pdf: bytes) -> OperationResult:
        state = self.state
        try:
            payload = renderer.render(
                source_pdf,
                state.virtual_pages,
                state.text_fields,
                state.image_fields,
                state.payment_plans,
            )
        except Exception as exc:
            logger.exception("Failed to render preview PDF")
            return OperationResult(ok=False, message=str(exc))
        return OperationResult(ok=True, message="PDF generated", payload=payload)

    # Internals

    def _capture(self) -> HistoryEntry:
        state = self.state
        return capture(
            state.text_fields, state.image_fields, state.payment_plans, state.virtual_pages
        )

    def _apply(self, collections: Collections) -> None:
        self.state = DocumentState(
            text_fields=collections.text_fields,
            image_fields=collections.image_fields,
            payment_plans=collections.payment_plans,
            virtual_pages=collections.virtual_pages,
        )
        self._prune_selection()

    def _verify(self) -> None:
        if self.strict:
            self.state.check_integrity()

    def _deselect(self, ids: set[str]) -> None:
        self._selection = [field_id for field_id in self._selection if field_id not in ids]

    def _prune_selection(self) -> None:
        state = self.state
        known = {item.id for item in state.text_fields}
        known.update(image.id for image in state.image_fields)
        known.update(plan.id for plan in state.payment_plans)
        self._selection = [field_id for field_id in self._selection if field_id in known]

    def _update(self, items: list, item_id: str, changes: dict[str, Any]) -> Any:
        for index, item in enumerate(items):
            if item.id == item_id:
                merged = type(item).model_validate({**item.model_dump(), **changes})
                items[index] = merged
                return merged
        return None


def _with_id(item: AnyField) -> AnyField:
    if item.id:
        return item
    return item.model_copy(update={"id": generate_id()})


def _positioned(field: TextField, position: dict[str, float], clear_centering: bool) -> TextField:
    update: dict[str, Any] = dict(position)
    if clear_centering:
        update["is_horizontally_centered"] = False
    return field.model_copy(update=update)


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(value, upper))
