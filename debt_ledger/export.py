"""Snapshot export as JSON or as a standalone, styled HTML page.

The HTML page embeds the same data as the JSON document, grouped into
collapsible sections. Due dates earlier than the export date are flagged.
"""

import json
from datetime import date, datetime
from html import escape
from typing import Optional

from .models import (
    AuditLogEntry,
    DebtRecord,
    ExportFormat,
    InboxRequest,
    LedgerSnapshot,
    RenderedExport,
)

HTML_STYLE = """
body { font-family: system-ui, sans-serif; margin: 0; padding: 24px;
       background: linear-gradient(135deg, #0f172a, #1e3a8a 50%, #0f172a); color: #e2e8f0; }
h1 { margin-top: 0; }
.meta { color: #93c5fd; margin-bottom: 24px; }
.panel { background: rgba(30, 41, 59, 0.6); border: 1px solid #334155; border-radius: 8px; margin-bottom: 16px; }
.panel-header { cursor: pointer; padding: 12px 16px; font-weight: 600; display: flex; justify-content: space-between; }
.panel-body { padding: 0 16px 16px; }
.panel.collapsed .panel-body { display: none; }
.card { background: rgba(51, 65, 85, 0.5); border-radius: 6px; padding: 12px; margin-top: 8px; }
.card .row { display: flex; justify-content: space-between; padding: 2px 0; }
.label { color: #94a3b8; }
.badge { background: #2563eb; border-radius: 9999px; padding: 0 8px; font-size: 0.85em; }
.overdue { color: #f87171; font-weight: 700; }
.status-pending { color: #facc15; }
.status-accepted { color: #4ade80; }
.status-declined { color: #f87171; }
"""

HTML_SCRIPT = """
document.querySelectorAll('.panel-header').forEach(function (header) {
  header.addEventListener('click', function () {
    header.parentElement.classList.toggle('collapsed');
  });
});
"""


def build_snapshot(
    records: list[DebtRecord],
    logs: list[AuditLogEntry],
    requests: list[InboxRequest],
    export_date: Optional[datetime] = None,
) -> LedgerSnapshot:
    if export_date is None:
        return LedgerSnapshot(debt_entries=records, logs=logs, requests=requests)
    return LedgerSnapshot(debt_entries=records, logs=logs, requests=requests, export_date=export_date)


def to_json(snapshot: LedgerSnapshot) -> str:
    return json.dumps(snapshot.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)


def from_json(text: str) -> LedgerSnapshot:
    return LedgerSnapshot.model_validate_json(text)


def _row(label: str, value: str, css_class: str = "") -> str:
    cls = f' class="{css_class}"' if css_class else ""
    return f'<div class="row"><span class="label">{escape(label)}</span><span{cls}>{value}</span></div>'


def _record_card(record: DebtRecord, export_day: date, currency: str) -> str:
    rows = [
        _row("ID", escape(record.id)),
        _row("Product", f'<span class="badge">{escape(record.product)}</span>'),
        _row("Quantity", escape(record.quantity)),
        _row("Amount", escape(f"{currency}{record.amount:.2f}")),
        _row("Location", escape(record.location)),
        _row("Date", record.entry_date.isoformat()),
    ]
    if record.due_date:
        overdue = record.due_date.isoformat() < export_day.isoformat()
        rows.append(_row("Due", record.due_date.isoformat(), "overdue" if overdue else ""))
    if record.note:
        rows.append(_row("Note", escape(record.note)))
    return f'<div class="card"><strong>{escape(record.person_name)}</strong>{"".join(rows)}</div>'


def _log_card(entry: AuditLogEntry) -> str:
    rows = [
        _row("Action", escape(entry.action.value)),
        _row("Entry", escape(entry.entry_id)),
        _row("Time", escape(entry.timestamp.isoformat())),
    ]
    return f'<div class="card">{escape(entry.details)}{"".join(rows)}</div>'


def _request_card(request: InboxRequest) -> str:
    rows = [
        _row("ID", escape(request.id)),
        _row("Status", escape(request.status.value), f"status-{request.status.value}"),
        _row("Time", escape(request.timestamp.isoformat())),
    ]
    if request.response:
        rows.append(_row("Response", escape(request.response)))
    if request.admin_notes:
        rows.append(_row("Notes", escape(request.admin_notes)))
    return f'<div class="card">{escape(request.message)}{"".join(rows)}</div>'


def _panel(title: str, cards: list[str]) -> str:
    body = "".join(cards) or '<p class="label">Nothing here yet.</p>'
    return (
        '<section class="panel">'
        f'<div class="panel-header"><span>{escape(title)}</span><span>{len(cards)}</span></div>'
        f'<div class="panel-body">{body}</div>'
        "</section>"
    )


def to_html(snapshot: LedgerSnapshot, title: str = "Debt Tracker", currency: str = "€") -> str:
    export_day = snapshot.export_date.date()
    panels = [
        _panel("Debt Entries", [_record_card(r, export_day, currency) for r in snapshot.debt_entries]),
        _panel("Activity Log", [_log_card(e) for e in snapshot.logs]),
        _panel("Requests", [_request_card(r) for r in snapshot.requests]),
    ]
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        f"<title>{escape(title)} export</title>\n"
        f"<style>{HTML_STYLE}</style>\n</head>\n<body>\n"
        f"<h1>{escape(title)}</h1>\n"
        f'<p class="meta">Exported {escape(snapshot.export_date.isoformat())}</p>\n'
        + "\n".join(panels)
        + f"\n<script>{HTML_SCRIPT}</script>\n</body>\n</html>\n"
    )


def export_snapshot(
    snapshot: LedgerSnapshot,
    fmt: ExportFormat,
    title: Optional[str] = None,
    currency: str = "€",
) -> RenderedExport:
    stamp = snapshot.export_date.date().isoformat()
    if fmt == ExportFormat.JSON:
        return RenderedExport(
            content=to_json(snapshot),
            media_type="application/json",
            filename=f"debt-export-{stamp}.json",
        )
    return RenderedExport(
        content=to_html(snapshot, title=title or "Debt Tracker", currency=currency),
        media_type="text/html",
        filename=f"debt-export-{stamp}.html",
    )
