"""
Folio Operation Log — structured JSONL records of every document and folder
operation, plus an audit trail of administrative commands.

Implements:
- LogEntry: one record and the stream it belongs to
- FileLogger: appends records to daily files, one stream per object type/category
- AsyncLogQueue: bounded in-memory buffer drained by a background thread
- Builders: log_document_operation, log_folder_operation, log_admin_action,
  log_system_event

Layout: {log_dir}/{object_type}/{category}/{YYYY-MM-DD}.jsonl

This is separate from the stdlib ``logging`` module, which every Folio module
still uses for diagnostics.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from queue import Empty, Full, Queue
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger("folio.engine.logging")

OBJECT_TYPE_CATEGORIES = {
    "documents": ["execution"],
    "folders": ["execution"],
    "admin": ["security"],
    "system": ["execution"],
}


@dataclass(frozen=True)
class LogEntry:
    """A record plus the stream (object type / category) it is written to."""
    object_type: str
    category: str
    data: Dict[str, Any]

    def __post_init__(self):
        allowed = OBJECT_TYPE_CATEGORIES.get(self.object_type)
        if allowed is None or self.category not in allowed:
            raise ValueError(f"Unknown log stream: {self.object_type}/{self.category}")

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, separators=(",", ":"))


class FileLogger:
    """
    Appends entries to ``{object_type}/{category}/{YYYY-MM-DD}.jsonl``.

    Writers on different threads may share an instance; appends to the same
    file are serialised.
    """

    def __init__(self, log_dir: str = "logs"):
        self._log_dir = Path(log_dir)
        self._locks: Dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        for object_type, categories in OBJECT_TYPE_CATEGORIES.items():
            for category in categories:
                (self._log_dir / object_type / category).mkdir(parents=True, exist_ok=True)

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def path_for(self, object_type: str, category: str, day: Optional[date] = None) -> Path:
        day = day or date.today()
        return self._log_dir / object_type / category / f"{day.isoformat()}.jsonl"

    def write(self, entry: LogEntry) -> None:
        self.write_batch([entry])

    def write_batch(self, entries: Iterable[LogEntry]) -> None:
        """Append entries, opening each target file once."""
        by_path: Dict[Path, List[str]] = {}
        for entry in entries:
            by_path.setdefault(self.path_for(entry.object_type, entry.category), []).append(entry.to_json())

        for path, lines in by_path.items():
            path.parent.mkdir(parents=True, exist_ok=True)
            with self._lock_for(path), open(path, "a", encoding="utf-8") as f:
                f.write("\n".join(lines) + "\n")

    def read(self, object_type: str, category: str, day: Optional[date] = None) -> List[Dict[str, Any]]:
        """Entries of one stream for ``day`` (default today). Unparseable lines are skipped."""
        path = self.path_for(object_type, category, day)
        if not path.exists():
            return []
        records: List[Dict[str, Any]] = []
        with self._lock_for(path), open(path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.warning(f"Skipping malformed log line {path}:{line_no}")
        return records

    def read_today(self, object_type: str, category: str) -> List[Dict[str, Any]]:
        return self.read(object_type, category)

    def _lock_for(self, path: Path) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(path, threading.Lock())


class AsyncLogQueue:
    """
    Bounded buffer in front of a FileLogger.

    ``push`` never blocks: a full buffer drops the entry and counts it. The
    flush thread wakes every ``flush_interval_ms`` and writes in chunks of at
    most ``flush_batch_size``. ``stop`` writes whatever is still buffered.
    """

    def __init__(
        self,
        file_logger: FileLogger,
        flush_interval_ms: int = 100,
        flush_batch_size: int = 50,
        max_queue_size: int = 10000,
    ):
        self._file_logger = file_logger
        self._interval = flush_interval_ms / 1000.0
        self._batch_size = max(1, flush_batch_size)
        self._buffer: Queue[LogEntry] = Queue(maxsize=max_queue_size)
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._dropped = 0

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="folio-log-flush", daemon=True)
        self._thread.start()
        logger.info("Operation log flush thread started")

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        self._flush_pending()
        if self._dropped:
            logger.warning(f"Operation log stopped, {self._dropped} entries dropped")

    def push(self, entry: LogEntry) -> bool:
        try:
            self._buffer.put_nowait(entry)
        except Full:
            self._dropped += 1
            return False
        return True

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            self._flush_pending()

    def _flush_pending(self) -> None:
        while True:
            chunk = self._take(self._batch_size)
            if not chunk:
                return
            try:
                self._file_logger.write_batch(chunk)
            except OSError as e:
                logger.error(f"Could not write {len(chunk)} operation log entries: {e}")
                return

    def _take(self, limit: int) -> List[LogEntry]:
        chunk: List[LogEntry] = []
        while len(chunk) < limit:
            try:
                chunk.append(self._buffer.get_nowait())
            except Empty:
                break
        return chunk

    @property
    def pending_count(self) -> int:
        return self._buffer.qsize()

    @property
    def dropped_count(self) -> int:
        return self._dropped


# ---------------------------------------------------------------------------
# Entry builders
# ---------------------------------------------------------------------------

def _record(event: str, object_ref: str, success: Optional[bool] = None,
            level: Optional[str] = None, **fields: Any) -> Dict[str, Any]:
    """
    Common envelope. ``success`` is recorded only when given and sets the
    default level. Fields passed as None are left out.
    """
    record: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level or ("ERROR" if success is False else "INFO"),
        "event": event,
        "object_ref": object_ref,
    }
    if success is not None:
        record["success"] = success
    record.update({k: v for k, v in fields.items() if v is not None})
    return record


def log_document_operation(
    operation: str,
    document_id: Optional[str],
    success: bool,
    user_id: Optional[Any] = None,
    fields_changed: Optional[List[str]] = None,
    duration_ms: Optional[float] = None,
    error: Optional[str] = None,
) -> LogEntry:
    """One document read or mutation (add, rename, move, delete, search...)."""
    data = _record(
        f"document_{operation}",
        f"documents.{document_id}" if document_id else "documents",
        success,
        operation=operation,
        document_id=document_id,
        user_id=user_id,
        fields_changed=fields_changed or None,
        duration_ms=duration_ms,
        error=error or None,
    )
    return LogEntry("documents", "execution", data)


def log_folder_operation(
    operation: str,
    folder_name: str,
    success: bool,
    folder_id: Optional[str] = None,
    documents_affected: Optional[int] = None,
    duration_ms: Optional[float] = None,
    error: Optional[str] = None,
) -> LogEntry:
    """One folder create / delete / listing."""
    data = _record(
        f"folder_{operation}",
        f"folders.{folder_name}",
        success,
        operation=operation,
        folder_name=folder_name,
        folder_id=folder_id,
        documents_affected=documents_affected,
        duration_ms=duration_ms,
        error=error or None,
    )
    return LogEntry("folders", "execution", data)


def log_admin_action(
    command: str,
    arguments: Dict[str, Any],
    success: bool,
    actor: Optional[str] = None,
) -> LogEntry:
    """Audit record for a CLI command."""
    data = _record(
        "admin_command",
        f"admin.{command}",
        success,
        command=command,
        arguments=arguments,
        user_id=actor,
    )
    return LogEntry("admin", "security", data)


def log_system_event(
    event: str,
    level: str = "INFO",
    details: Optional[Dict[str, Any]] = None,
) -> LogEntry:
    data = _record(event, "system", level=level, details=details or None)
    return LogEntry("system", "execution", data)


# ---------------------------------------------------------------------------
# Process-wide queue
# ---------------------------------------------------------------------------

_global_queue: Optional[AsyncLogQueue] = None


def init_logging(
    log_dir: str = "logs",
    flush_interval_ms: int = 100,
    flush_batch_size: int = 50,
    max_queue_size: int = 10000,
) -> AsyncLogQueue:
    """Start the process-wide queue, replacing (and draining) any previous one."""
    global _global_queue
    if _global_queue is not None:
        _global_queue.stop()
    _global_queue = AsyncLogQueue(
        FileLogger(log_dir=log_dir),
        flush_interval_ms=flush_interval_ms,
        flush_batch_size=flush_batch_size,
        max_queue_size=max_queue_size,
    )
    _global_queue.start()
    return _global_queue


def get_log_queue() -> Optional[AsyncLogQueue]:
    return _global_queue


def log(entry: LogEntry) -> bool:
    """Queue an entry. Returns False when logging is not initialised or the queue is full."""
    if _global_queue is None:
        logger.debug(f"Operation log not initialised, dropping {entry.data.get('event')}")
        return False
    return _global_queue.push(entry)


def shutdown_logging() -> None:
    global _global_queue
    if _global_queue is not None:
        _global_queue.stop()
        _global_queue = None
