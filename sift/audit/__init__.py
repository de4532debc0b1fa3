"""Audit trail — redacted per-analysis records and the sinks that store them."""

from sift.audit.audit_log import (
    AuditDispatcher,
    AuditRecord,
    AuditSink,
    HttpAuditSink,
    JsonlAuditSink,
    MemoryAuditSink,
    build_audit_record,
    content_hash,
)

__all__ = [
    "AuditDispatcher",
    "AuditRecord",
    "AuditSink",
    "HttpAuditSink",
    "JsonlAuditSink",
    "MemoryAuditSink",
    "build_audit_record",
    "content_hash",
]
