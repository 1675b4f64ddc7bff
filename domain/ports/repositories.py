from __future__ import annotations

from collections.abc import Sequence
from typing import Optional, Protocol

from domain.models import DocumentSnapshot


class TemplateRepository(Protocol):
    def load_snapshot(self, template_id: str) -> DocumentSnapshot: ...

    def save_snapshot(self, template_id: str, snapshot: DocumentSnapshot) -> None: ...

    def load_source_pdf(self, template_id: str) -> Optional[bytes]: ...

    def save_source_pdf(self, template_id: str, payload: bytes) -> None: ...

    def delete(self, template_id: str) -> None: ...

    def list_ids(self) -> Sequence[str]: ...
