from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from filelock import FileLock

from adapters.filesystem.json_io import read_json, write_bytes_atomic, write_json_atomic
from domain.models import DocumentSnapshot
from domain.ports.repositories import TemplateRepository

_TEMPLATE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def validate_template_id(template_id: str) -> str:
    if not _TEMPLATE_ID_RE.match(template_id or ""):
        msg = f"Invalid template id: {template_id!r}"
        raise ValueError(msg)
    return template_id


class FileSystemTemplateRepository(TemplateRepository):
    """Stores ``<id>.json`` (editor snapshot) and ``<id>.pdf`` (source PDF) side by side."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def load_snapshot(self, template_id: str) -> DocumentSnapshot:
        path = self._snapshot_path(template_id)
        if not path.exists():
            msg = f"Template not found: {template_id}"
            raise FileNotFoundError(msg)
        return DocumentSnapshot.model_validate(read_json(path))

    def save_snapshot(self, template_id: str, snapshot: DocumentSnapshot) -> None:
        path = self._snapshot_path(template_id)
        with self._lock(path):
            write_json_atomic(path, snapshot.model_dump(mode="json", by_alias=True))

    def load_source_pdf(self, template_id: str) -> Optional[bytes]:
        path = self._pdf_path(template_id)
        if not path.exists():
            return None
        return path.read_bytes()

    def save_source_pdf(self, template_id: str, payload: bytes) -> None:
        path = self._pdf_path(template_id)
        with self._lock(path):
            write_bytes_atomic(path, payload)

    def delete(self, template_id: str) -> None:
        for path in (self._snapshot_path(template_id), self._pdf_path(template_id)):
            with self._lock(path):
                path.unlink(missing_ok=True)

    def list_ids(self) -> List[str]:
        if not self.root.exists():
            return []
        return sorted(path.stem for path in self.root.glob("*.json"))

    def _snapshot_path(self, template_id: str) -> Path:
        return self.root / f"{validate_template_id(template_id)}.json"

    def _pdf_path(self, template_id: str) -> Path:
        return self.root / f"{validate_template_id(template_id)}.pdf"

    def _lock(self, path: Path) -> FileLock:
        path.parent.mkdir(parents=True, exist_ok=True)
        return FileLock(str(path.with_suffix(f"{path.suffix}.lock")))
