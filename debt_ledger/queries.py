"""Read-only views derived from the ledger: search, overdue, dashboard."""

from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from .models import AuditLogEntry, DashboardSummary, DebtRecord

RECENT_LIMIT = 5


def matches(record: DebtRecord, term: str) -> bool:
    needle = term.lower()
    return (
        needle in record.person_name.lower()
        or term in str(record.amount)
        or term in record.entry_date.isoformat()
        or needle in record.product.lower()
    )


def filter_records(records: Sequence[DebtRecord], term: str) -> list[DebtRecord]:
    if not term:
        return list(records)
    return [r for r in records if matches(r, term)]


def overdue_records(records: Iterable[DebtRecord], today: date) -> list[DebtRecord]:
    # A missing due date counts as overdue.
    return [r for r in records if r.is_overdue(today)]


def summarize(
    records: Sequence[DebtRecord],
    logs: Sequence[AuditLogEntry],
    limit: int = RECENT_LIMIT,
) -> DashboardSummary:
    return DashboardSummary(
        total_debts=len(records),
        total_amount=sum((r.amount for r in records), Decimal("0")),
        log_count=len(logs),
        recent_debts=list(reversed(records[-limit:])) if limit else [],
        recent_logs=list(reversed(logs[-limit:])) if limit else [],
    )
