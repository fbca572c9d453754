import logging
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Optional

from .errors import LedgerServiceError, NotFoundError, PersistenceError, ValidationError
from .ids import generate_id
from .models import (
    AuditAction,
    AuditLogEntry,
    DebtInput,
    DebtRecord,
    MutationResponse,
    utcnow,
)
from .storage import DEBT_ENTRIES_KEY, LOGS_KEY, InMemoryMirror

LOGGER = logging.getLogger(__name__)

DEFAULT_PRODUCTS = ("Fruit", "Vegetable")
DEFAULT_CURRENCY = "€"
DEFAULT_LOCATION = "557"

Notifier = Callable[[str, str], None]

__all__ = [
    "LedgerService",
    "LedgerServiceError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
]


def log_notification(title: str, description: str) -> None:
    LOGGER.info("%s: %s", title, description)


def merge_text(old: Optional[str], new: Optional[str], separator: str) -> Optional[str]:
    if old and new:
        return f"{old}{separator}{new}"
    return old or new or None


class LedgerService:
    """Debt records plus the append-only audit log of every change to them."""

    def __init__(
        self,
        mirror=None,
        products: Iterable[str] = DEFAULT_PRODUCTS,
        currency: str = DEFAULT_CURRENCY,
        default_location: str = DEFAULT_LOCATION,
        notify: Optional[Notifier] = None,
    ):
        self.mirror = mirror if mirror is not None else InMemoryMirror()
        self.products = tuple(products)
        self.currency = currency
        self.default_location = default_location
        self.notify = notify or log_notification
        self.records: list[DebtRecord] = [
            DebtRecord.model_validate(r) for r in self.mirror.get(DEBT_ENTRIES_KEY) or []
        ]
        self.logs: list[AuditLogEntry] = [
            AuditLogEntry.model_validate(e) for e in self.mirror.get(LOGS_KEY) or []
        ]

    def create(self, data: DebtInput) -> MutationResponse:
        self._validate(data)

        existing = self._find_same_debtor(data.person_name, data.product)
        if existing:
            merged = existing.model_copy(update={
                "amount": existing.amount + data.amount,
                "quantity": f"{existing.quantity} + {data.quantity}",
                "note": merge_text(existing.note, data.note, "; "),
                "timestamp": utcnow(),
            })
            details = f"Merged debt entry for {merged.person_name} - {self._money(merged.amount)}"
            log = AuditLogEntry(
                action=AuditAction.UPDATE,
                entry_id=merged.id,
                details=details,
                old_state=existing,
                new_state=merged,
            )
            records = [merged if r.id == existing.id else r for r in self.records]
            self._commit(records, log)
            self.notify("Entry merged", details)
            return MutationResponse(entry=merged, log=log, message=details)

        record = DebtRecord(
            id=generate_id(taken={r.id for r in self.records}),
            timestamp=utcnow(),
            **self._fields(data),
        )
        details = f"Created debt entry for {record.person_name} - {self._money(record.amount)}"
        log = AuditLogEntry(
            action=AuditAction.CREATE,
            entry_id=record.id,
            details=details,
            new_state=record,
        )
        self._commit([*self.records, record], log)
        self.notify("Entry created", details)
        return MutationResponse(entry=record, log=log, message=details)

    def update(self, entry_id: str, data: DebtInput) -> MutationResponse:
        existing = self.find_by_id(entry_id)
        self._validate(data)

        fields = self._fields(data)
        if data.location is None:
            fields["location"] = existing.location
        record = DebtRecord(id=existing.id, timestamp=utcnow(), **fields)
        details = f"Updated debt entry for {record.person_name} - {self._money(record.amount)}"
        log = AuditLogEntry(
            action=AuditAction.UPDATE,
            entry_id=record.id,
            details=details,
            old_state=existing,
            new_state=record,
        )
        self._commit([record if r.id == entry_id else r for r in self.records], log)
        self.notify("Entry updated", details)
        return MutationResponse(entry=record, log=log, message=details)

    def delete(self, entry_id: str) -> MutationResponse:
        existing = self.find_by_id(entry_id)
        details = f"Deleted debt entry for {existing.person_name} - {self._money(existing.amount)}"
        log = AuditLogEntry(
            action=AuditAction.DELETE,
            entry_id=existing.id,
            details=details,
            old_state=existing,
        )
        self._commit([r for r in self.records if r.id != entry_id], log)
        self.notify("Entry deleted", details)
        return MutationResponse(entry=None, log=log, message=details)

    def find_by_id(self, entry_id: str) -> DebtRecord:
        for record in self.records:
            if record.id == entry_id:
                return record
        raise NotFoundError(f"Debt entry {entry_id} not found")

    def _find_same_debtor(self, person_name: str, product: str) -> Optional[DebtRecord]:
        for record in self.records:
            if record.same_debtor(person_name, product):
                return record
        return None

    def _validate(self, data: DebtInput) -> None:
        missing = tuple(
            name for name, value in (
                ("personName", data.person_name.strip()),
                ("quantity", data.quantity.strip()),
                ("amount", data.amount),
            )
            if value is None or value == ""
        )
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)
        if data.amount < 0:
            raise ValidationError("Amount must not be negative", fields=("amount",))
        if data.product not in self.products:
            raise ValidationError(
                f"Unknown product {data.product!r}, expected one of {', '.join(self.products)}",
                fields=("product",),
            )

    def _fields(self, data: DebtInput) -> dict:
        return {
            "person_name": data.person_name,
            "product": data.product,
            "quantity": data.quantity,
            "amount": data.amount,
            "location": data.location or self.default_location,
            "note": data.note or None,
            "due_date": data.due_date,
            "entry_date": data.entry_date or date.today(),
        }

    def _commit(self, records: list[DebtRecord], log: AuditLogEntry) -> None:
        logs = [*self.logs, log]
        self.mirror.save_many({
            DEBT_ENTRIES_KEY: [r.model_dump(mode="json", by_alias=True) for r in records],
            LOGS_KEY: [e.model_dump(mode="json", by_alias=True) for e in logs],
        })
        self.records = records
        self.logs = logs
        LOGGER.info("%s %s: %s", log.action.value, log.entry_id, log.details)

    def _money(self, amount: Decimal) -> str:
        return f"{self.currency}{amount:.2f}"
