from __future__ import annotations

from adapters.filesystem.template_repository import FileSystemTemplateRepository
from adapters.pdf.preview_renderer import PyMuPdfPreviewRenderer, PyMuPdfTextMeasurer
from app.config import AppSettings
from domain.ports.rendering import PreviewRenderer, TextMeasurer
from domain.ports.repositories import TemplateRepository
from domain.services.editor_session import EditorSession


def build_template_repository(settings: AppSettings) -> TemplateRepository:
    return FileSystemTemplateRepository(settings.editor.data_dir)


def build_preview_renderer(settings: AppSettings) -> PreviewRenderer:
    return PyMuPdfPreviewRenderer()


def build_text_measurer(settings: AppSettings) -> TextMeasurer | None:
    if not settings.editor.measure_text_with_fonts:
        return None
    return PyMuPdfTextMeasurer()


def build_session(settings: AppSettings) -> EditorSession:
    editor = settings.editor
    return EditorSession(
        history_limit=editor.history_limit,
        snap_threshold=editor.snap_threshold,
        duplicate_offset=editor.duplicate_offset,
        default_font_size=editor.default_font_size,
        default_color=editor.default_color,
        strict=editor.strict_integrity,
        measurer=build_text_measurer(settings),
    )
