"""Unit tests for folio.documents.service — add, move, delete, flags, copy."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from folio.documents.service import DocumentService
from folio.documents.store import StoreResult
from folio.engine.errors import BackingStoreError
from folio.engine.notifications import NotificationKind


class TestAddDocument:

    @pytest.mark.asyncio
    async def test_defaults_path_and_mime(self, store, notifier):
        service = DocumentService(store, notifier)

        doc = await service.add_document("Budget 2026.pdf", uploaded_by="u-1", folder="Finance")

        assert doc.file_path == "uploads/Finance/Budget 2026.pdf"
        assert doc.mime_type == "application/pdf"
        assert doc.folder == "Finance"
        assert notifier.last.description == 'Document "Budget 2026.pdf" uploaded successfully'

    @pytest.mark.asyncio
    async def test_default_folder_applies(self, store, notifier):
        service = DocumentService(store, notifier, default_folder="general")
        doc = await service.add_document("notes.txt", uploaded_by="u-1")
        assert doc.folder == "general"

    @pytest.mark.asyncio
    async def test_general_folder_by_default(self, store, notifier):
        doc = await DocumentService(store, notifier).add_document("notes.txt", uploaded_by="u-1")
        assert doc.folder == "general"
        assert doc.folder_id is None
        assert doc.file_path == "uploads/general/notes.txt"

    @pytest.mark.asyncio
    async def test_no_default_folder_gives_root_document(self, store, notifier):
        doc = await DocumentService(store, notifier, default_folder=None).add_document(
            "notes.txt", uploaded_by="u-1",
        )
        assert doc.is_root

    @pytest.mark.asyncio
    async def test_folder_id_takes_path_segment(self, store, notifier):
        service = DocumentService(store, notifier, default_folder="general")
        doc = await service.add_document("notes.txt", uploaded_by="u-1", folder_id="f-1")
        assert doc.folder is None
        assert doc.file_path == "uploads/f-1/notes.txt"

    @pytest.mark.asyncio
    async def test_unsafe_name_sanitized_in_path(self, store, notifier):
        doc = await DocumentService(store, notifier).add_document("../..\\evil?.pdf", uploaded_by="u-1")
        assert doc.file_path == "uploads/general/evil.pdf"
        assert doc.name == "../..\\evil?.pdf"

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, store, notifier, fetch_names):
        doc = await DocumentService(store, notifier).add_document("  ", uploaded_by="u-1")
        assert doc is None
        assert fetch_names() == []
        assert notifier.last.title == "Upload Failed"

    @pytest.mark.asyncio
    async def test_store_failure_returns_none(self, store, notifier, monkeypatch):
        monkeypatch.setattr(
            store, "insert",
            AsyncMock(return_value=StoreResult.failed(BackingStoreError("disk full"))),
        )
        doc = await DocumentService(store, notifier).add_document("a.pdf", uploaded_by="u-1")
        assert doc is None
        assert notifier.last.description == "disk full"


class TestMutations:

    @pytest.mark.asyncio
    async def test_move_sets_both_references(self, store, notifier, make_document):
        doc = make_document("a.pdf", folder="Board")

        moved = await DocumentService(store, notifier).move_document(doc.id, folder_id="f-2")

        assert moved.folder is None
        assert moved.folder_id == "f-2"
        assert moved.updated_at > doc.updated_at
        assert notifier.last.description == "Document moved successfully"

    @pytest.mark.asyncio
    async def test_move_without_reference_goes_to_general(self, store, notifier, make_document):
        doc = make_document("a.pdf", folder_id="f-1")
        moved = await DocumentService(store, notifier).move_document(doc.id)
        assert moved.folder == "general"
        assert moved.folder_id is None

    @pytest.mark.asyncio
    async def test_move_to_root_without_default_folder(self, store, notifier, make_document):
        doc = make_document("a.pdf", folder="Board")
        moved = await DocumentService(store, notifier, default_folder=None).move_document(doc.id)
        assert moved.is_root

    @pytest.mark.asyncio
    async def test_move_to_overlong_folder_is_reported(self, store, notifier, make_document):
        doc = make_document("a.pdf", folder="Board")

        moved = await DocumentService(store, notifier).move_document(doc.id, folder="f" * 300)

        assert moved is None
        assert notifier.last.title == "Move Failed"
        assert "folder" in notifier.last.description
        assert (await store.get(doc.id)).unwrap() == doc

    @pytest.mark.asyncio
    async def test_move_missing_document(self, store, notifier):
        assert await DocumentService(store, notifier).move_document("nope", folder="Board") is None
        assert notifier.last.title == "Move Failed"

    @pytest.mark.asyncio
    async def test_toggle_important_flips_only_that_flag(self, store, notifier, make_document):
        doc = make_document("a.pdf", is_hidden=True)
        service = DocumentService(store, notifier)

        updated = await service.toggle_important(doc)

        assert updated.is_important is True
        assert updated.is_hidden is True
        assert updated.updated_at > doc.updated_at
        assert notifier.last.description == "Document marked as important"

        again = await service.toggle_important(updated)
        assert again.is_important is False
        assert notifier.last.description == "Document unmarked as important"

    @pytest.mark.asyncio
    async def test_toggle_hidden_keeps_document(self, store, notifier, make_document, fetch_names):
        doc = make_document("a.pdf")

        updated = await DocumentService(store, notifier).toggle_hidden(doc)

        assert updated.is_hidden is True
        assert fetch_names() == ["a.pdf"]

    @pytest.mark.asyncio
    async def test_delete_moves_to_recycle_bin(self, store, notifier, make_document, fetch_names):
        doc = make_document("a.pdf", folder="Board", is_important=True)
        make_document("b.pdf")
        service = DocumentService(store, notifier, retention_days=15)

        recycled = await service.delete_document(doc.id, deleted_by="u-9")

        assert fetch_names() == ["b.pdf"]
        assert recycled.original_document_id == doc.id
        assert (recycled.name, recycled.folder, recycled.is_important) == ("a.pdf", "Board", True)
        assert recycled.deleted_by == "u-9"
        assert recycled.permanent_delete_at - recycled.deleted_at == timedelta(days=15)
        assert notifier.last.description == '"a.pdf" moved to the recycle bin'
        assert [i.id for i in (await store.list_recycle_bin()).unwrap()] == [recycled.id]

    @pytest.mark.asyncio
    async def test_delete_missing_document(self, store, notifier):
        assert await DocumentService(store, notifier).delete_document("nope", deleted_by="u-1") is None
        assert notifier.last.kind == NotificationKind.FAILURE
        assert notifier.last.title == "Delete Failed"

    @pytest.mark.asyncio
    async def test_copy_document(self, store, notifier, make_document):
        doc = make_document("a.pdf", folder="Board", folder_id="f-1", file_size=10, is_important=True)

        copy = await DocumentService(store, notifier).copy_document(doc, uploaded_by="u-2")

        assert copy.id != doc.id
        assert copy.name == "Copy of a.pdf"
        assert (copy.file_path, copy.file_size, copy.folder, copy.folder_id) == (
            doc.file_path, doc.file_size, doc.folder, doc.folder_id,
        )
        assert copy.uploaded_by == "u-2"
        assert copy.is_important is False

    @pytest.mark.asyncio
    async def test_list_documents_excludes_hidden_on_request(self, store, notifier, make_document):
        make_document("a.pdf")
        make_document("b.pdf", is_hidden=True)
        service = DocumentService(store, notifier)

        assert [d.name for d in await service.list_documents(include_hidden=False)] == ["a.pdf"]
        assert len(await service.list_documents()) == 2
