"""Privacy-preserving audit log for moderation analyses.

One :class:`AuditRecord` is produced per analysis. Records carry a SHA-256
fingerprint and the length of the comment, never its text. They are handed
to an :class:`AuditDispatcher`, which delivers them to a sink from a
background thread so the caller's decision path never waits on storage.

Sinks:
- :class:`JsonlAuditSink` — daily ``YYYY-MM-DD.jsonl`` files under
  ``~/.sift/audit_logs/`` with filtering, stats and export
- :class:`HttpAuditSink` — inserts rows through the backend's REST API
- :class:`MemoryAuditSink` — keeps records in process
"""

from __future__ import annotations

import hashlib
import json
import logging
import queue
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Protocol

import httpx

if TYPE_CHECKING:
    from sift.moderation.models import AIAnalysisResult

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "ai_analysis_logs"


def content_hash(text: str) -> str:
    """Stable fingerprint of a comment, safe to persist."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class AuditRecord:
    """One redacted analysis row. Contains no raw comment text."""

    content_hash: str
    content_length: int
    sentiment_score: float
    toxicity_score: float
    confidence: float
    language: str
    recommended_action: str
    analyzed_at: str
    topics: list[str] = field(default_factory=list)
    flags: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditRecord:
        return cls(**data)


def build_audit_record(
    text: str, result: AIAnalysisResult, analyzed_at: Optional[datetime] = None
) -> AuditRecord:
    """Build the redacted record for *result*, computed from *text*."""
    when = analyzed_at or datetime.now(timezone.utc)
    return AuditRecord(
        content_hash=content_hash(text),
        content_length=len(text),
        sentiment_score=result.sentiment_score,
        toxicity_score=result.toxicity_score,
        confidence=result.confidence,
        language=result.language,
        recommended_action=result.recommended_action.value,
        analyzed_at=when.isoformat(),
        topics=list(result.topics),
        flags=[f.to_dict() for f in result.flags],
    )


class AuditSink(Protocol):
    """Anything that can persist an audit record."""

    def write(self, record: AuditRecord) -> None: ...


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------


class MemoryAuditSink:
    """Keeps records in a list."""

    def __init__(self) -> None:
        self.records: list[AuditRecord] = []
        self._lock = threading.Lock()

    def write(self, record: AuditRecord) -> None:
        with self._lock:
            self.records.append(record)


class JsonlAuditSink:
    """File-based JSON-lines audit sink.

    Records are appended to one file per UTC day, named after the day the
    analysis ran.
    """

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        self._base_dir = Path(base_dir) if base_dir else Path.home() / ".sift" / "audit_logs"
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    # -- internal helpers ----------------------------------------------------

    def _log_file_for(self, record: AuditRecord) -> Path:
        day = record.analyzed_at[:10] or datetime.now(timezone.utc).strftime("%Y-%m-%d")
        return self._base_dir / f"{day}.jsonl"

    def _read_all_records(self) -> list[AuditRecord]:
        records: list[AuditRecord] = []
        for path in sorted(self._base_dir.glob("*.jsonl")):
            try:
                text = path.read_text(encoding="utf-8")
            except OSError:
                logger.warning("Could not read audit file %s", path, exc_info=True)
                continue
            for line in text.splitlines():
                if not line.strip():
                    continue
                try:
                    records.append(AuditRecord.from_dict(json.loads(line)))
                except (json.JSONDecodeError, TypeError):
                    logger.warning("Skipping malformed audit line in %s", path)
        return records

    # -- public API ----------------------------------------------------------

    def write(self, record: AuditRecord) -> None:
        line = json.dumps(record.to_dict())
        with self._lock:
            with self._log_file_for(record).open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")

    def get_records(
        self,
        *,
        action: Optional[str] = None,
        language: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = 200,
    ) -> list[AuditRecord]:
        """Return filtered records, newest first."""
        records = self._read_all_records()

        if action:
            records = [r for r in records if r.recommended_action == action]
        if language:
            records = [r for r in records if r.language == language]
        if start_date:
            records = [r for r in records if r.analyzed_at >= start_date]
        if end_date:
            if len(end_date) == 10:
                # bare YYYY-MM-DD covers the whole day
                records = [r for r in records if r.analyzed_at[:10] <= end_date]
            else:
                records = [r for r in records if r.analyzed_at <= end_date]

        records.sort(key=lambda r: r.analyzed_at, reverse=True)
        return records[:limit]

    def action_counts(self) -> dict[str, int]:
        """Number of recorded analyses per recommended action."""
        counts: dict[str, int] = {}
        for record in self._read_all_records():
            counts[record.recommended_action] = counts.get(record.recommended_action, 0) + 1
        return counts

    def export_records(
        self,
        fmt: str = "json",
        *,
        action: Optional[str] = None,
        language: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = 10000,
    ) -> str:
        """Export records as ``json`` or ``csv``."""
        records = self.get_records(
            action=action,
            language=language,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
        )

        if fmt == "csv":
            lines = [
                "content_hash,content_length,sentiment_score,toxicity_score,confidence,"
                "language,topics,flags,recommended_action,analyzed_at"
            ]
            for r in records:
                topics = "|".join(r.topics)
                flags = "|".join(f.get("type", "") for f in r.flags)
                lines.append(
                    f"{r.content_hash},{r.content_length},{r.sentiment_score},{r.toxicity_score},"
                    f"{r.confidence},{r.language},{topics},{flags},{r.recommended_action},{r.analyzed_at}"
                )
            return "\n".join(lines)

        return json.dumps([r.to_dict() for r in records], indent=2)


class HttpAuditSink:
    """Inserts records into a REST table endpoint (``POST /rest/v1/<table>``)."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        table: str = DEFAULT_TABLE,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        headers = {"Content-Type": "application/json", "Prefer": "return=minimal"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._client = httpx.Client(headers=headers, timeout=timeout, transport=transport)

    def write(self, record: AuditRecord) -> None:
        response = self._client.post(self._endpoint, json=record.to_dict())
        response.raise_for_status()

    def close(self) -> None:
        self._client.close()


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class AuditDispatcher:
    """Delivers records to a sink from a daemon worker thread.

    ``submit`` never blocks and never raises: when the bounded queue is full
    or the dispatcher is closed the record is dropped and a warning logged.
    Sink errors are logged and discarded.
    """

    def __init__(self, sink: AuditSink, max_queue_size: int = 1000) -> None:
        self._sink = sink
        self._queue: queue.Queue[Optional[AuditRecord]] = queue.Queue(maxsize=max_queue_size)
        self._closed = False
        self._dropped = 0
        self._lock = threading.Lock()
        self._worker = threading.Thread(target=self._run, name="sift-audit", daemon=True)
        self._worker.start()
        logger.debug("Audit dispatcher started (sink=%s)", type(sink).__name__)

    @property
    def sink(self) -> AuditSink:
        return self._sink

    @property
    def dropped(self) -> int:
        """Records discarded because the queue was full or closed."""
        return self._dropped

    def submit(self, record: AuditRecord) -> bool:
        """Queue *record* for delivery. Returns False if it was dropped."""
        with self._lock:
            if self._closed:
                self._dropped += 1
                logger.warning("Audit dispatcher closed; dropped record %s", record.content_hash[:12])
                return False
            try:
                self._queue.put_nowait(record)
            except queue.Full:
                self._dropped += 1
                logger.warning("Audit queue full; dropped record %s", record.content_hash[:12])
                return False
        return True

    def flush(self) -> None:
        """Block until every queued record has been handled."""
        self._queue.join()

    def close(self, timeout: float = 5.0) -> None:
        """Drain the queue, stop the worker and close the sink."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        # no submit can enqueue past this point, so the sentinel is last
        try:
            self._queue.put(None, timeout=timeout)
        except queue.Full:
            logger.warning("Audit queue did not drain within %.1fs", timeout)
        self._worker.join(timeout)
        close = getattr(self._sink, "close", None)
        if callable(close):
            close()
        logger.debug("Audit dispatcher stopped (%d dropped)", self._dropped)

    def _run(self) -> None:
        while True:
            record = self._queue.get()
            try:
                if record is None:
                    return
                self._sink.write(record)
            except Exception:
                logger.warning(
                    "Audit sink write failed for record %s",
                    record.content_hash[:12] if record else "-",
                    exc_info=True,
                )
            finally:
                self._queue.task_done()
