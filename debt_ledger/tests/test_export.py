"""
Unit Tests for JSON and HTML export
"""

import json
from datetime import date, datetime, timezone
from decimal import Decimal

from debt_ledger.export import build_snapshot, export_snapshot, from_json, to_html
from debt_ledger.inbox import RequestInbox
from debt_ledger.models import DebtInput, Decision, ExportFormat, LedgerSnapshot
from debt_ledger.service import LedgerService

EXPORT_TIME = datetime(2024, 5, 10, 8, 30, tzinfo=timezone.utc)


def populated_snapshot() -> LedgerSnapshot:
    ledger = LedgerService()
    ledger.create(DebtInput(person_name="Anna", product="Fruit", quantity="2kg",
                            amount=Decimal("5.00"), due_date=date(2024, 5, 1)))
    ledger.create(DebtInput(person_name="Bruno", product="Vegetable", quantity="1 crate",
                            amount=Decimal("12.00"), due_date=date(2024, 6, 1), note="<b>cash</b>"))
    inbox = RequestInbox()
    request = inbox.submit("need extension")
    inbox.resolve(request.id, Decision.ACCEPT, "ok")
    snapshot = build_snapshot(ledger.records, ledger.logs, inbox.requests)
    return snapshot.model_copy(update={"export_date": EXPORT_TIME})


class TestJsonExport:
    """Tests for the structured export."""

    def test_document_shape(self):
        rendered = export_snapshot(populated_snapshot(), ExportFormat.JSON)

        assert rendered.media_type == "application/json"
        assert rendered.filename == "debt-export-2024-05-10.json"
        document = json.loads(rendered.content)
        assert set(document) == {"debtEntries", "logs", "requests", "exportDate"}
        assert document["debtEntries"][0]["personName"] == "Anna"
        assert document["logs"][0]["action"] == "create"
        assert document["requests"][0]["status"] == "accepted"
        assert document["debtEntries"][0]["amount"] == 5.0
        assert document["debtEntries"][1]["amount"] == 12.0

    def test_round_trip(self):
        snapshot = populated_snapshot()

        reparsed = from_json(export_snapshot(snapshot, ExportFormat.JSON).content)

        assert reparsed == snapshot


class TestHtmlExport:
    """Tests for the styled standalone export."""

    def test_document_sections(self):
        rendered = export_snapshot(populated_snapshot(), ExportFormat.HTML, title="Produce Debt Tracker")

        assert rendered.media_type == "text/html"
        assert rendered.filename.endswith(".html")
        html = rendered.content
        assert html.startswith("<!DOCTYPE html>")
        assert "Produce Debt Tracker" in html
        for section in ("Debt Entries", "Activity Log", "Requests"):
            assert section in html
        assert "need extension" in html
        assert "panel-header" in html and "<script>" in html

    def test_past_due_dates_flagged(self):
        html = to_html(populated_snapshot())

        assert '<span class="overdue">2024-05-01</span>' in html
        assert '<span>2024-06-01</span>' in html

    def test_user_text_is_escaped(self):
        html = to_html(populated_snapshot())

        assert "<b>cash</b>" not in html
        assert "&lt;b&gt;cash&lt;/b&gt;" in html

    def test_currency_formatting(self):
        html = to_html(populated_snapshot(), currency="$")
        assert "$5.00" in html
