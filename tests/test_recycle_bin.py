"""Unit tests for folio.documents.recycle_bin — list, restore, purge, cleanup."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from folio.documents.recycle_bin import RecycleBin
from folio.documents.service import DocumentService
from folio.documents.store import StoreResult
from folio.engine.errors import BackingStoreError
from folio.engine.notifications import NotificationKind


@pytest.fixture
def trash(store, notifier, make_document, ticking_clock):
    """Two documents already moved to the recycle bin."""

    async def _fill():
        service = DocumentService(store, notifier, retention_days=15)
        first = await service.delete_document(make_document("a.pdf", folder="Board").id, deleted_by="u-1")
        second = await service.delete_document(make_document("b.pdf").id, deleted_by="u-2")
        notifier.clear()
        return first, second

    return _fill


class TestListItems:

    @pytest.mark.asyncio
    async def test_newest_first(self, store, notifier, trash):
        first, second = await trash()
        items = await RecycleBin(store, notifier).list_items()
        assert [i.id for i in items] == [second.id, first.id]
        assert notifier.notifications == []

    @pytest.mark.asyncio
    async def test_failure_returns_empty(self, store, notifier, monkeypatch):
        monkeypatch.setattr(
            store, "list_recycle_bin",
            AsyncMock(return_value=StoreResult.failed(BackingStoreError("timeout"))),
        )
        assert await RecycleBin(store, notifier).list_items() == []
        assert notifier.last.description == "Failed to load recycle bin items"


class TestRestore:

    @pytest.mark.asyncio
    async def test_restore_returns_document_to_folder(self, store, notifier, trash, fetch_names):
        first, _ = await trash()

        restored = await RecycleBin(store, notifier).restore_document(first.id)

        assert restored.id == first.original_document_id
        assert restored.folder == "Board"
        assert fetch_names() == ["a.pdf"]
        assert notifier.last.kind == NotificationKind.SUCCESS
        assert notifier.last.description == '"a.pdf" has been restored'

    @pytest.mark.asyncio
    async def test_restore_missing_entry(self, store, notifier):
        assert await RecycleBin(store, notifier).restore_document("nope") is None
        assert notifier.last.title == "Restore Failed"
        assert "not found" in notifier.last.description

    @pytest.mark.asyncio
    async def test_restore_store_error_message(self, store, notifier, monkeypatch):
        monkeypatch.setattr(
            store, "restore_from_recycle_bin",
            AsyncMock(return_value=StoreResult.failed(BackingStoreError("UNIQUE constraint failed"))),
        )
        await RecycleBin(store, notifier).restore_document("r-1")
        assert notifier.last.description == "UNIQUE constraint failed"


class TestPermanentDelete:

    @pytest.mark.asyncio
    async def test_purge(self, store, notifier, trash):
        first, second = await trash()
        bin_ = RecycleBin(store, notifier)

        assert await bin_.permanently_delete(first.id, first.name) is True

        assert [i.id for i in await bin_.list_items()] == [second.id]
        assert notifier.last.description == '"a.pdf" has been permanently deleted'

    @pytest.mark.asyncio
    async def test_purge_missing_entry(self, store, notifier):
        assert await RecycleBin(store, notifier).permanently_delete("nope") is False
        assert notifier.last.title == "Delete Failed"


class TestCleanup:

    @pytest.mark.asyncio
    async def test_nothing_expired(self, store, notifier, trash):
        await trash()
        assert await RecycleBin(store, notifier).cleanup_expired() == 0
        assert notifier.last.description == "Expired items have been cleaned up"

    @pytest.mark.asyncio
    async def test_expired_entries_removed(self, store, notifier, trash):
        await trash()
        later = datetime.now(timezone.utc) + timedelta(days=16)

        assert await RecycleBin(store, notifier).cleanup_expired(later) == 2
        assert await RecycleBin(store, notifier).list_items() == []

    @pytest.mark.asyncio
    async def test_failure(self, store, notifier, monkeypatch):
        monkeypatch.setattr(
            store, "purge_expired",
            AsyncMock(return_value=StoreResult.failed(BackingStoreError("locked"))),
        )
        assert await RecycleBin(store, notifier).cleanup_expired() is None
        assert notifier.last.title == "Cleanup Failed"
        assert notifier.last.description == "locked"
