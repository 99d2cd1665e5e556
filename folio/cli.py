"""
Folio CLI — administrative commands over the document store.

Commands:
- folio init            — Create the documents table
- folio add             — Register an uploaded file as a document
- folio search          — Case-insensitive name search, most recent first
- folio folders         — List derived folders (or one folder's documents)
- folio create-folder   — Reserve a folder name
- folio delete-folder   — Delete a folder and every document in it
- folio rename          — Rename a document
- folio move            — Move a document to another folder (or the default folder)
- folio delete          — Move a document to the recycle bin
- folio trash           — List the recycle bin
- folio restore         — Restore a document from the recycle bin
- folio purge           — Permanently delete a recycle bin entry
- folio cleanup         — Permanently delete expired recycle bin entries

Every command is written to the admin/security audit log. A command that
emitted a failure notification exits 1 and is audited as failed.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any, Dict, Optional

from folio.db.base import Base, engine_registry
from folio.db.document_store import SqlDocumentStore
from folio.db.session import CORE_ENGINE, close_all_sessions, init_db_from_config
from folio.documents.folders import FolderOperations
from folio.documents.manager import DocumentManager
from folio.documents.recycle_bin import RecycleBin
from folio.documents.search import DocumentSearch
from folio.documents.service import DocumentService
from folio.engine.config import FolioConfig, load_config
from folio.engine.errors import FolioConfigError, FolioError
from folio.engine.logging import (
    init_logging,
    log,
    log_admin_action,
    log_system_event,
    shutdown_logging,
)
from folio.engine.notifications import (
    ConsoleNotifier,
    FanOutNotifier,
    Notifier,
    RecordingNotifier,
)

logger = logging.getLogger("folio.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="folio",
        description="Folio — Document & Folder Management",
    )
    parser.add_argument("--config", default=None, help="Path to folio.yaml (default: auto-discover)")
    parser.add_argument("--actor", default=None, help="Operator id recorded in the audit log")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="Create the documents table")

    add_parser = subparsers.add_parser("add", help="Register an uploaded file")
    add_parser.add_argument("name", help="Document display name")
    add_parser.add_argument("--uploaded-by", required=True, help="Uploading user id")
    add_parser.add_argument("--path", help="File store location (default: uploads/<folder>/<name>)")
    add_parser.add_argument("--folder", help="Folder name")
    add_parser.add_argument("--folder-id", help="Folder identifier")
    add_parser.add_argument("--size", type=int, help="File size in bytes")
    add_parser.add_argument("--mime-type", help="Content type (default: guessed from name)")

    search_parser = subparsers.add_parser("search", help="Search documents by name")
    search_parser.add_argument("term", nargs="?", default="", help="Substring to look for")

    folders_parser = subparsers.add_parser("folders", help="List folders")
    folders_parser.add_argument("name", nargs="?", help="Show this folder's documents")
    folders_parser.add_argument("--folder-id", help="Also match this folder identifier")
    folders_parser.add_argument("--include-hidden", action="store_true", help="Show hidden documents")

    create_parser = subparsers.add_parser("create-folder", help="Reserve a folder name")
    create_parser.add_argument("name", help="Folder name")

    delete_parser = subparsers.add_parser("delete-folder", help="Delete a folder and its documents")
    delete_parser.add_argument("name", help="Folder name")
    delete_parser.add_argument("--folder-id", help="Also delete documents with this folder id")
    delete_parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    rename_parser = subparsers.add_parser("rename", help="Rename a document")
    rename_parser.add_argument("document_id", help="Document id")
    rename_parser.add_argument("new_name", help="New display name")

    move_parser = subparsers.add_parser("move", help="Move a document")
    move_parser.add_argument("document_id", help="Document id")
    move_parser.add_argument("--folder", help="Target folder name (omit both for the default folder)")
    move_parser.add_argument("--folder-id", help="Target folder identifier")

    delete_doc_parser = subparsers.add_parser("delete", help="Move a document to the recycle bin")
    delete_doc_parser.add_argument("document_id", help="Document id")

    subparsers.add_parser("trash", help="List the recycle bin")

    restore_parser = subparsers.add_parser("restore", help="Restore a recycle bin entry")
    restore_parser.add_argument("recycled_id", help="Recycle bin entry id")

    purge_parser = subparsers.add_parser("purge", help="Permanently delete a recycle bin entry")
    purge_parser.add_argument("recycled_id", help="Recycle bin entry id")
    purge_parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    subparsers.add_parser("cleanup", help="Permanently delete expired recycle bin entries")

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = load_config(args.config)
    except FolioConfigError as e:
        print(f"[ERROR] Failed to load config: {e}")
        return 1

    logging.basicConfig(level=getattr(logging, config.logging.level))
    init_logging(
        log_dir=config.logging.directory,
        flush_interval_ms=config.logging.async_queue.flush_interval_ms,
        flush_batch_size=config.logging.async_queue.flush_batch_size,
        max_queue_size=config.logging.async_queue.max_queue_size,
    )
    try:
        code = run_command(args, config)
    finally:
        close_all_sessions()
        shutdown_logging()
    return code


def run_command(args: argparse.Namespace, config: FolioConfig,
                notifier: Optional[Notifier] = None) -> int:
    """Dispatch a parsed command. Returns the process exit code."""
    recorder = RecordingNotifier()
    notifier = FanOutNotifier(notifier or ConsoleNotifier(), recorder)
    arguments: Dict[str, Any] = {
        k: v for k, v in vars(args).items() if k not in ("command", "config", "actor")
    }

    session_factory = init_db_from_config(config.database)
    store = SqlDocumentStore(session_factory)

    handlers = {
        "init": _cmd_init,
        "add": _cmd_add,
        "search": _cmd_search,
        "folders": _cmd_folders,
        "create-folder": _cmd_create_folder,
        "delete-folder": _cmd_delete_folder,
        "rename": _cmd_rename,
        "move": _cmd_move,
        "delete": _cmd_delete,
        "trash": _cmd_trash,
        "restore": _cmd_restore,
        "purge": _cmd_purge,
        "cleanup": _cmd_cleanup,
    }
    try:
        code = asyncio.run(handlers[args.command](args, config, store, notifier))
    except FolioError as e:
        logger.error(f"Command '{args.command}' failed: {e!r}")
        code = 1

    if code == 0 and recorder.failures:
        code = 1

    log(log_admin_action(args.command, arguments, code == 0, actor=args.actor))
    return code


async def _cmd_init(args, config, store, notifier) -> int:
    if not engine_registry.health_check(CORE_ENGINE):
        print(f"[ERROR] Cannot connect to {config.database.url.split('@')[-1]}")
        return 1
    Base.metadata.create_all(engine_registry.get(CORE_ENGINE))
    log(log_system_event("schema_created", details={"database": config.database.url.split("@")[-1]}))
    print("[OK] Documents table ready")
    return 0


async def _cmd_add(args, config, store, notifier) -> int:
    service = _service(config, store, notifier)
    document = await service.add_document(
        args.name,
        uploaded_by=args.uploaded_by,
        file_path=args.path,
        folder=args.folder,
        folder_id=args.folder_id,
        file_size=args.size,
        mime_type=args.mime_type,
    )
    if document is None:
        return 1
    print(document.id)
    return 0


async def _cmd_search(args, config, store, notifier) -> int:
    for doc in await DocumentSearch(store, notifier).search_documents(args.term):
        _print_document(doc)
    return 0


async def _cmd_folders(args, config, store, notifier) -> int:
    ops = FolderOperations(store, notifier)
    if args.name:
        include_hidden = args.include_hidden or config.documents.include_hidden_in_folder_listing
        for doc in await ops.list_folder_documents(args.name, args.folder_id, include_hidden):
            _print_document(doc)
        return 0
    for folder in await ops.list_folders():
        print(f"{folder.name}\t{folder.document_count}\t{folder.last_updated.isoformat()}")
    return 0


async def _cmd_create_folder(args, config, store, notifier) -> int:
    await FolderOperations(store, notifier).create_folder(args.name)
    return 0


async def _cmd_delete_folder(args, config, store, notifier) -> int:
    if not args.yes:
        answer = input(f"Delete folder '{args.name}' and all its documents? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("[INFO] Aborted")
            return 1
    await FolderOperations(store, notifier).delete_folder(args.name, args.folder_id)
    return 0


async def _cmd_rename(args, config, store, notifier) -> int:
    document = (await store.get(args.document_id)).unwrap()
    if document is None:
        print(f"[ERROR] Document not found: {args.document_id}")
        return 1
    if not args.new_name.strip():
        print("[INFO] New name is blank, nothing changed")
        return 1
    manager = DocumentManager(store, notifier)
    manager.begin_rename(document)
    await manager.handle_rename(args.new_name)
    return 1 if manager.rename_dialog_open else 0


async def _cmd_move(args, config, store, notifier) -> int:
    service = _service(config, store, notifier)
    moved = await service.move_document(args.document_id, args.folder, args.folder_id)
    return 0 if moved is not None else 1


async def _cmd_delete(args, config, store, notifier) -> int:
    recycled = await _service(config, store, notifier).delete_document(
        args.document_id, deleted_by=args.actor or "folio-cli",
    )
    if recycled is None:
        return 1
    print(recycled.id)
    return 0


async def _cmd_trash(args, config, store, notifier) -> int:
    for item in await RecycleBin(store, notifier).list_items():
        print(
            f"{item.id}\t{item.days_until_permanent_delete()}d\t{item.folder or item.folder_id or '/'}"
            f"\t{item.name}\t{item.deleted_by}\t{item.deleted_at.isoformat()}"
        )
    return 0


async def _cmd_restore(args, config, store, notifier) -> int:
    restored = await RecycleBin(store, notifier).restore_document(args.recycled_id)
    return 0 if restored is not None else 1


async def _cmd_purge(args, config, store, notifier) -> int:
    if not args.yes:
        answer = input(f"Permanently delete recycle bin entry '{args.recycled_id}'? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("[INFO] Aborted")
            return 1
    purged = await RecycleBin(store, notifier).permanently_delete(args.recycled_id)
    return 0 if purged else 1


async def _cmd_cleanup(args, config, store, notifier) -> int:
    removed = await RecycleBin(store, notifier).cleanup_expired()
    if removed is None:
        return 1
    print(f"[INFO] {removed} expired entries removed")
    return 0


def _service(config, store, notifier) -> DocumentService:
    return DocumentService(
        store,
        notifier,
        default_folder=config.documents.default_folder,
        retention_days=config.documents.recycle_bin_retention_days,
    )


def _print_document(doc) -> None:
    flags = ("!" if doc.is_important else "-") + ("h" if doc.is_hidden else "-")
    print(f"{doc.id}\t{flags}\t{doc.folder or doc.folder_id or '/'}\t{doc.name}\t{doc.updated_at.isoformat()}")


if __name__ == "__main__":
    sys.exit(main())
