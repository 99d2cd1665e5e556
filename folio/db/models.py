"""
Folio Table Models — SQLAlchemy models for the documents and recycle_bin tables.

Folders have no table: they are the distinct non-null values of
documents.folder (see folio.db.document_store.SqlDocumentStore.folder_summaries).

Deleting a single document moves its row to recycle_bin, from where it can be
restored until permanent_delete_at passes.
"""

from __future__ import annotations

import uuid

from sqlalchemy import BigInteger, Boolean, CheckConstraint, Column, DateTime, Index, String

from folio.db.base import AuditMixin, Base


def _new_id() -> str:
    return str(uuid.uuid4())


class DocumentRow(Base, AuditMixin):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    file_path = Column(String(1024), nullable=False)
    file_size = Column(BigInteger, nullable=True)
    mime_type = Column(String(100), nullable=True)
    folder = Column(String(255), nullable=True, index=True)
    folder_id = Column(String(36), nullable=True, index=True)
    uploaded_by = Column(String(36), nullable=False, index=True)
    is_important = Column(Boolean, default=False, nullable=False)
    is_hidden = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        CheckConstraint("file_size IS NULL OR file_size >= 0", name="ck_documents_file_size"),
        CheckConstraint("updated_at >= created_at", name="ck_documents_updated_after_created"),
        Index("ix_documents_folder_updated", "folder", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<DocumentRow(id='{self.id}', name='{self.name}', folder='{self.folder}')>"


class RecycleBinRow(Base):
    __tablename__ = "recycle_bin"

    id = Column(String(36), primary_key=True, default=_new_id)
    original_document_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    file_path = Column(String(1024), nullable=False)
    file_size = Column(BigInteger, nullable=True)
    mime_type = Column(String(100), nullable=True)
    folder = Column(String(255), nullable=True)
    folder_id = Column(String(36), nullable=True)
    uploaded_by = Column(String(36), nullable=False)
    is_important = Column(Boolean, default=False, nullable=False)
    is_hidden = Column(Boolean, default=False, nullable=False)
    original_created_at = Column(DateTime(timezone=True), nullable=False)
    original_updated_at = Column(DateTime(timezone=True), nullable=False)
    deleted_by = Column(String(36), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=False, index=True)
    permanent_delete_at = Column(DateTime(timezone=True), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("permanent_delete_at >= deleted_at", name="ck_recycle_bin_expiry"),
    )

    def __repr__(self) -> str:
        return f"<RecycleBinRow(id='{self.id}', name='{self.name}', deleted_at='{self.deleted_at}')>"
