from __future__ import annotations

from pathlib import Path

import pytest

from adapters.filesystem.json_io import read_json, write_json_atomic
from adapters.filesystem.template_repository import (
    FileSystemTemplateRepository,
    validate_template_id,
)
from domain.models import DocumentSnapshot, ImagePage, PdfPage
from tests.helpers.layout_fixtures import make_text


def _snapshot() -> DocumentSnapshot:
    return DocumentSnapshot(
        text_fields=[make_text("a")],
        virtual_pages=[PdfPage(page_num=1)],
        num_pages=1,
    )


def test_save_and_load_snapshot(tmp_path: Path) -> None:
    repository = FileSystemTemplateRepository(tmp_path / "templates")

    repository.save_snapshot("offer-1", _snapshot())

    stored = read_json(tmp_path / "templates" / "offer-1.json")
    assert stored["textFields"][0]["content"] == "{a}"
    assert stored["virtualPages"] == [{"type": "pdf", "pageNum": 1}]
    loaded = repository.load_snapshot("offer-1")
    assert loaded.model_dump() == _snapshot().model_dump()
    assert repository.list_ids() == ["offer-1"]


def test_load_missing_snapshot(tmp_path: Path) -> None:
    repository = FileSystemTemplateRepository(tmp_path)

    with pytest.raises(FileNotFoundError):
        repository.load_snapshot("missing")
    assert repository.load_source_pdf("missing") is None


def test_source_pdf_and_delete(tmp_path: Path) -> None:
    repository = FileSystemTemplateRepository(tmp_path)
    repository.save_snapshot("t", _snapshot())
    repository.save_source_pdf("t", b"%PDF-1.7")

    assert repository.load_source_pdf("t") == b"%PDF-1.7"

    repository.delete("t")
    repository.delete("t")

    assert repository.list_ids() == []
    assert repository.load_source_pdf("t") is None


def test_list_ids_without_root(tmp_path: Path) -> None:
    assert FileSystemTemplateRepository(tmp_path / "absent").list_ids() == []


@pytest.mark.parametrize("template_id", ["", "../etc", "a b", "x" * 65, "ofr/1"])
def test_invalid_template_ids(template_id: str, tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Invalid template id"):
        validate_template_id(template_id)
    with pytest.raises(ValueError):
        FileSystemTemplateRepository(tmp_path).save_source_pdf(template_id, b"")


def test_stored_snapshot_keeps_page_variants(tmp_path: Path) -> None:
    path = tmp_path / "t.json"
    write_json_atomic(
        path,
        {
            "textFields": [],
            "imageFields": [{"id": "img", "var": "{offerGallery}"}],
            "virtualPages": [{"type": "image", "imageId": "img"}],
        },
    )

    loaded = FileSystemTemplateRepository(tmp_path).load_snapshot("t")

    (page,) = loaded.virtual_pages
    assert isinstance(page, ImagePage)
    assert page.image_id == "img"
    assert loaded.presets is None
    assert path.read_bytes().endswith(b"\n")
