"""Audit router -- read access to the local analysis audit log.

Prefix: ``/api/audit``

Only available when the engine writes to the JSONL sink; other sinks are
write-only from this service's point of view.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from sift.audit.audit_log import JsonlAuditSink
from web.backend.app.models.api import (
    AuditExportResponse,
    AuditRecordResponse,
    AuditStatsResponse,
)

router = APIRouter(prefix="/api/audit", tags=["audit"])

_ACTION_PATTERN = "^(approve|review|auto_hide|reject)$"


def get_audit_sink(request: Request) -> JsonlAuditSink:
    """Return the engine's JSONL sink or 404 when there is none."""
    dispatcher = request.app.state.engine.audit
    sink = dispatcher.sink if dispatcher is not None else None
    if not isinstance(sink, JsonlAuditSink):
        raise HTTPException(status_code=404, detail="No local audit log is configured")
    return sink


@router.get("", response_model=list[AuditRecordResponse])
async def list_audit_records(
    action: Optional[str] = Query(None, pattern=_ACTION_PATTERN),
    language: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    limit: int = Query(200, ge=1, le=10000),
    sink: JsonlAuditSink = Depends(get_audit_sink),
):
    """List audit records with optional filters, newest first."""
    records = sink.get_records(
        action=action,
        language=language,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )
    return [AuditRecordResponse(**r.to_dict()) for r in records]


@router.get("/export", response_model=AuditExportResponse)
async def export_audit_log(
    format: str = Query("json", pattern="^(json|csv)$"),
    action: Optional[str] = Query(None, pattern=_ACTION_PATTERN),
    language: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    sink: JsonlAuditSink = Depends(get_audit_sink),
):
    """Export the audit log in JSON or CSV format."""
    filters = dict(action=action, language=language, start_date=start_date, end_date=end_date)
    content = sink.export_records(format, **filters)
    count = len(sink.get_records(limit=10000, **filters))
    return AuditExportResponse(format=format, count=count, content=content)


@router.get("/stats", response_model=AuditStatsResponse)
async def audit_stats(sink: JsonlAuditSink = Depends(get_audit_sink)):
    """Count recorded analyses per recommended action."""
    counts = sink.action_counts()
    return AuditStatsResponse(total=sum(counts.values()), by_action=counts)
