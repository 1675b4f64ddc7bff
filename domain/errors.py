from __future__ import annotations


class DanglingReferenceError(RuntimeError):
    """A virtual page points at an image or payment plan that no longer exists."""

    def __init__(self, page_index: int, kind: str, reference_id: str) -> None:
        self.page_index = page_index
        self.kind = kind
        self.reference_id = reference_id
        super().__init__(
            f"Virtual page {page_index} references missing {kind} {reference_id!r}"
        )


class UnrecognizedLayoutError(ValueError):
    """Raised when a payload matches neither the Legacy nor the V2 signature."""


class PreviewRenderError(RuntimeError):
    """Raised when the preview PDF cannot be produced from the source document."""
