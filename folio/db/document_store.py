"""
Folio SQL Document Store — DocumentStore over SQLAlchemy.

Each primitive is one transaction (session_scope) executed in a worker
thread via asyncio.to_thread, so callers on the event loop only suspend.
SQLAlchemy errors are caught here and returned as BackingStoreError values;
rows that fail model validation come back as FolioValidationError.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional, TypeVar

from pydantic import ValidationError
from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from folio.db.base import as_utc, utcnow
from folio.db.models import DocumentRow, RecycleBinRow
from folio.db.session import session_scope
from folio.documents.models import (
    Document,
    DocumentChanges,
    FolderSummary,
    NewDocument,
    RecycledDocument,
)
from folio.documents.store import DocumentStore, StoreResult
from folio.engine.errors import BackingStoreError, FolioValidationError

logger = logging.getLogger("folio.db.document_store")

T = TypeVar("T")


def next_timestamp(previous: Optional[datetime]) -> datetime:
    """Current UTC time, forced strictly past ``previous``."""
    now = utcnow()
    previous = as_utc(previous)
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def _summarize(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}" for err in error.errors()
    )


def _membership_clause(folder_name: Optional[str], folder_id: Optional[str]):
    clauses = []
    if folder_name is not None:
        clauses.append(DocumentRow.folder == folder_name)
    if folder_id is not None:
        clauses.append(DocumentRow.folder_id == folder_id)
    return or_(*clauses)


class SqlDocumentStore(DocumentStore):
    """
    Relational backing store.

    Usage:
        factory = init_db("sqlite:///folio.db", create_tables=True)
        store = SqlDocumentStore(factory)
        result = await store.search_by_name("report")
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    async def _run(self, query: str, work: Callable[[Session], T]) -> StoreResult[T]:
        def _unit() -> T:
            with session_scope(self._session_factory) as session:
                return work(session)

        try:
            data = await asyncio.to_thread(_unit)
        except SQLAlchemyError as e:
            logger.error(f"Store query '{query}' failed: {e}")
            return StoreResult.failed(
                BackingStoreError(str(getattr(e, "orig", None) or e), query=query, cause=type(e).__name__)
            )
        except ValidationError as e:
            logger.error(f"Store query '{query}' returned an invalid row: {e}")
            return StoreResult.failed(FolioValidationError(
                f"Stored data failed validation: {_summarize(e)}",
                operation=query,
                validation_errors=e.errors(include_url=False),
            ))
        return StoreResult.success(data)

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------

    async def insert(self, document: NewDocument) -> StoreResult[Document]:
        def work(session: Session) -> Document:
            now = utcnow()
            row = DocumentRow(**document.model_dump(), created_at=now, updated_at=now)
            session.add(row)
            session.flush()
            return Document.model_validate(row)

        return await self._run("insert", work)

    async def update(self, document_id: str, **changes: Any) -> StoreResult[Optional[Document]]:
        try:
            changes = DocumentChanges.model_validate(changes).model_dump(exclude_unset=True)
        except ValidationError as e:
            return StoreResult.failed(FolioValidationError(
                f"Invalid document changes: {_summarize(e)}",
                operation="update",
                object_ref=f"documents.{document_id}",
                validation_errors=e.errors(include_url=False),
            ))

        def work(session: Session) -> Optional[Document]:
            row = session.get(DocumentRow, document_id, with_for_update=True)
            if row is None:
                return None
            for field_name, value in changes.items():
                setattr(row, field_name, value)
            row.updated_at = next_timestamp(row.updated_at)
            session.flush()
            return Document.model_validate(row)

        return await self._run("update", work)

    async def delete_by_folder(
        self, folder_name: str, folder_id: Optional[str] = None
    ) -> StoreResult[int]:
        def work(session: Session) -> int:
            result = session.execute(
                delete(DocumentRow).where(_membership_clause(folder_name, folder_id))
            )
            return result.rowcount or 0

        return await self._run("delete_by_folder", work)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------

    async def get(self, document_id: str) -> StoreResult[Optional[Document]]:
        def work(session: Session) -> Optional[Document]:
            row = session.get(DocumentRow, document_id)
            return Document.model_validate(row) if row is not None else None

        return await self._run("get", work)

    async def search_by_name(self, term: str) -> StoreResult[List[Document]]:
        def work(session: Session) -> List[Document]:
            stmt = (
                select(DocumentRow)
                .where(DocumentRow.name.icontains(term, autoescape=True))
                .order_by(DocumentRow.updated_at.desc(), DocumentRow.id)
            )
            return [Document.model_validate(row) for row in session.scalars(stmt)]

        return await self._run("search_by_name", work)

    async def list_documents(
        self,
        folder_name: Optional[str] = None,
        folder_id: Optional[str] = None,
        include_hidden: bool = True,
    ) -> StoreResult[List[Document]]:
        def work(session: Session) -> List[Document]:
            stmt = select(DocumentRow)
            if folder_name is not None or folder_id is not None:
                stmt = stmt.where(_membership_clause(folder_name, folder_id))
            if not include_hidden:
                stmt = stmt.where(DocumentRow.is_hidden.is_(False))
            stmt = stmt.order_by(DocumentRow.updated_at.desc(), DocumentRow.id)
            return [Document.model_validate(row) for row in session.scalars(stmt)]

        return await self._run("list_documents", work)

    async def count_in_folder(
        self, folder_name: str, folder_id: Optional[str] = None
    ) -> StoreResult[int]:
        def work(session: Session) -> int:
            stmt = (
                select(func.count())
                .select_from(DocumentRow)
                .where(_membership_clause(folder_name, folder_id))
            )
            return session.scalar(stmt) or 0

        return await self._run("count_in_folder", work)

    async def folder_summaries(self) -> StoreResult[List[FolderSummary]]:
        def work(session: Session) -> List[FolderSummary]:
            stmt = (
                select(
                    DocumentRow.folder,
                    func.count(DocumentRow.id),
                    func.max(DocumentRow.updated_at),
                )
                .where(DocumentRow.folder.is_not(None))
                .group_by(DocumentRow.folder)
                .order_by(DocumentRow.folder)
            )
            return [
                FolderSummary(name=name, document_count=count, last_updated=last_updated)
                for name, count, last_updated in session.execute(stmt)
            ]

        return await self._run("folder_summaries", work)

    # -------------------------------------------------------------------
    # Recycle bin
    # -------------------------------------------------------------------

    async def move_to_recycle_bin(
        self, document_id: str, deleted_by: str, retention: timedelta
    ) -> StoreResult[Optional[RecycledDocument]]:
        def work(session: Session) -> Optional[RecycledDocument]:
            row = session.get(DocumentRow, document_id, with_for_update=True)
            if row is None:
                return None
            deleted_at = utcnow()
            entry = RecycleBinRow(
                original_document_id=row.id,
                name=row.name,
                file_path=row.file_path,
                file_size=row.file_size,
                mime_type=row.mime_type,
                folder=row.folder,
                folder_id=row.folder_id,
                uploaded_by=row.uploaded_by,
                is_important=row.is_important,
                is_hidden=row.is_hidden,
                original_created_at=row.created_at,
                original_updated_at=row.updated_at,
                deleted_by=deleted_by,
                deleted_at=deleted_at,
                permanent_delete_at=deleted_at + retention,
            )
            session.add(entry)
            session.delete(row)
            session.flush()
            return RecycledDocument.model_validate(entry)

        return await self._run("move_to_recycle_bin", work)

    async def list_recycle_bin(self) -> StoreResult[List[RecycledDocument]]:
        def work(session: Session) -> List[RecycledDocument]:
            stmt = select(RecycleBinRow).order_by(RecycleBinRow.deleted_at.desc(), RecycleBinRow.id)
            return [RecycledDocument.model_validate(row) for row in session.scalars(stmt)]

        return await self._run("list_recycle_bin", work)

    async def restore_from_recycle_bin(self, recycled_id: str) -> StoreResult[Optional[Document]]:
        def work(session: Session) -> Optional[Document]:
            entry = session.get(RecycleBinRow, recycled_id, with_for_update=True)
            if entry is None:
                return None
            row = DocumentRow(
                id=entry.original_document_id,
                name=entry.name,
                file_path=entry.file_path,
                file_size=entry.file_size,
                mime_type=entry.mime_type,
                folder=entry.folder,
                folder_id=entry.folder_id,
                uploaded_by=entry.uploaded_by,
                is_important=entry.is_important,
                is_hidden=entry.is_hidden,
                created_at=entry.original_created_at,
                updated_at=next_timestamp(entry.original_updated_at),
            )
            session.add(row)
            session.delete(entry)
            session.flush()
            return Document.model_validate(row)

        return await self._run("restore_from_recycle_bin", work)

    async def purge_from_recycle_bin(self, recycled_id: str) -> StoreResult[int]:
        def work(session: Session) -> int:
            result = session.execute(delete(RecycleBinRow).where(RecycleBinRow.id == recycled_id))
            return result.rowcount or 0

        return await self._run("purge_from_recycle_bin", work)

    async def purge_expired(self, now: Optional[datetime] = None) -> StoreResult[int]:
        cutoff = as_utc(now) or utcnow()

        def work(session: Session) -> int:
            result = session.execute(
                delete(RecycleBinRow).where(RecycleBinRow.permanent_delete_at <= cutoff)
            )
            return result.rowcount or 0

        return await self._run("purge_expired", work)
