"""
Debt Ledger for a Small Produce Business

This module provides:
- Debt records with merge-on-create for the same person and product
- Append-only audit log with before/after snapshots
- Request inbox: pending → accepted / declined
- Search, overdue and dashboard views
- JSON and standalone HTML export
"""

from .models import (
    AuditAction,
    AuditLogEntry,
    DebtInput,
    DebtRecord,
    Decision,
    ExportFormat,
    InboxRequest,
    RequestStatus,
)
from .service import LedgerService
from .inbox import RequestInbox
from .session import LedgerSession

__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "DebtInput",
    "DebtRecord",
    "Decision",
    "ExportFormat",
    "InboxRequest",
    "RequestStatus",
    "LedgerService",
    "RequestInbox",
    "LedgerSession",
]
