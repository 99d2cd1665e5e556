"""
Folio Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from folio.db.base import engine_registry
from folio.db.document_store import SqlDocumentStore
from folio.db.models import DocumentRow
from folio.db.session import init_db, session_scope
from folio.documents.models import Document
from folio.engine.notifications import RecordingNotifier

TEST_ENGINE = "folio_test"
BASE_TIME = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolate_config():
    """Reset global singletons between tests."""
    import folio.engine.config as cfg_mod
    import folio.engine.logging as log_mod

    cfg_mod._config = None
    log_mod.shutdown_logging()
    yield
    log_mod.shutdown_logging()


@pytest.fixture
def session_factory():
    """In-memory SQLite database with the documents table created."""
    factory = init_db("sqlite://", create_tables=True, name=TEST_ENGINE)
    yield factory
    engine_registry.dispose(TEST_ENGINE)


@pytest.fixture
def store(session_factory):
    return SqlDocumentStore(session_factory)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_document(session_factory):
    """
    Insert a document row directly, bypassing the store.

    Each call gets an updated_at one minute later than the previous one
    unless ``updated_at`` is given.
    """
    counter = itertools.count()

    def _make(
        name: str,
        folder: Optional[str] = None,
        folder_id: Optional[str] = None,
        updated_at: Optional[datetime] = None,
        **fields,
    ) -> Document:
        n = next(counter)
        row = DocumentRow(
            name=name,
            file_path=fields.pop("file_path", f"uploads/{folder or 'general'}/{name}"),
            uploaded_by=fields.pop("uploaded_by", "user-1"),
            folder=folder,
            folder_id=folder_id,
            created_at=fields.pop("created_at", BASE_TIME),
            updated_at=updated_at or BASE_TIME + timedelta(minutes=n + 1),
            **fields,
        )
        with session_scope(session_factory) as session:
            session.add(row)
            session.flush()
            return Document.model_validate(row)

    return _make


@pytest.fixture
def fetch_names(session_factory):
    """Return every stored document name, sorted."""

    def _fetch():
        with session_scope(session_factory) as session:
            return sorted(r.name for r in session.query(DocumentRow).all())

    return _fetch


@pytest.fixture
def ticking_clock(monkeypatch):
    """Make the store's clock advance one second per reading."""
    ticks = itertools.count()
    start = datetime.now(timezone.utc)
    monkeypatch.setattr(
        "folio.db.document_store.utcnow", lambda: start + timedelta(seconds=next(ticks)),
    )
