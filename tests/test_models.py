"""Unit tests for folio.documents.models — Document, NewDocument, FolderSummary."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from folio.documents.models import (
    Document,
    DocumentChanges,
    FolderSummary,
    NewDocument,
    RecycledDocument,
)


def _document(**overrides):
    fields = dict(
        id="doc-1",
        name="Agenda.pdf",
        file_path="uploads/Board/Agenda.pdf",
        uploaded_by="u-1",
        created_at=datetime(2026, 1, 1),
        updated_at=datetime(2026, 1, 2),
    )
    fields.update(overrides)
    return Document(**fields)


class TestDocument:

    def test_naive_timestamps_become_utc(self):
        doc = _document()
        assert doc.created_at.tzinfo is timezone.utc
        assert doc.updated_at.tzinfo is timezone.utc

    def test_root_document(self):
        assert _document().is_root
        assert not _document(folder="Board").is_root
        assert not _document(folder_id="f-1").is_root

    def test_in_folder_matches_either_reference(self):
        by_name = _document(folder="Board")
        by_id = _document(folder_id="f-1")

        assert by_name.in_folder("Board")
        assert not by_name.in_folder("board")
        assert by_id.in_folder("Board", folder_id="f-1")
        assert not by_id.in_folder("Board")

    def test_frozen(self):
        with pytest.raises(ValidationError):
            _document().name = "other"


class TestNewDocument:

    @pytest.mark.parametrize("field", ["name", "file_path", "uploaded_by"])
    def test_blank_required_field(self, field):
        fields = dict(name="a.pdf", file_path="uploads/a.pdf", uploaded_by="u-1")
        fields[field] = "   "
        with pytest.raises(ValidationError):
            NewDocument(**fields)

    def test_negative_size(self):
        with pytest.raises(ValidationError):
            NewDocument(name="a.pdf", file_path="uploads/a.pdf", uploaded_by="u-1", file_size=-1)


class TestFolderSummary:

    def test_empty_folder_not_representable(self):
        with pytest.raises(ValidationError):
            FolderSummary(name="Board", document_count=0, last_updated=datetime(2026, 1, 1))


class TestDocumentChanges:

    def test_only_given_fields_dumped(self):
        changes = DocumentChanges.model_validate({"folder": None, "folder_id": "f-1"})
        assert changes.model_dump(exclude_unset=True) == {"folder": None, "folder_id": "f-1"}

    @pytest.mark.parametrize("changes", [
        {"file_path": "elsewhere"},
        {"name": None},
        {"name": "x" * 256},
        {"is_important": None},
    ])
    def test_rejected(self, changes):
        with pytest.raises(ValidationError):
            DocumentChanges.model_validate(changes)


class TestRecycledDocument:

    def _entry(self, permanent_delete_at):
        stamp = datetime(2026, 1, 1)
        return RecycledDocument(
            id="r-1", original_document_id="doc-1", name="a.pdf", file_path="uploads/a.pdf",
            uploaded_by="u-1", original_created_at=stamp, original_updated_at=stamp,
            deleted_by="u-2", deleted_at=stamp, permanent_delete_at=permanent_delete_at,
        )

    def test_days_left_rounds_up(self):
        entry = self._entry(datetime(2026, 1, 16))
        now = datetime(2026, 1, 13, 12, tzinfo=timezone.utc)
        assert entry.days_until_permanent_delete(now) == 3

    def test_days_left_never_negative(self):
        entry = self._entry(datetime(2026, 1, 16))
        assert entry.days_until_permanent_delete(datetime(2026, 2, 1)) == 0
