"""Immutable debt form state and the pure functions that update it.

A form either describes a brand-new entry (``editing_id`` is None, so
submitting may merge into an existing record) or edits an existing record
in place.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .errors import ValidationError
from .models import DebtInput, DebtRecord, MutationResponse
from .service import LedgerService

FORM_FIELDS = ("person_name", "product", "quantity", "amount", "location", "note", "due_date", "entry_date")


class DebtForm(BaseModel):
    person_name: str = ""
    product: str = ""
    quantity: str = ""
    amount: str = ""
    location: str = ""
    note: str = ""
    due_date: str = ""
    entry_date: str = ""
    editing_id: Optional[str] = None

    model_config = ConfigDict(frozen=True)


def blank_form(product: str, location: str, today: Optional[date] = None) -> DebtForm:
    return DebtForm(
        product=product,
        location=location,
        entry_date=(today or date.today()).isoformat(),
    )


def set_field(form: DebtForm, name: str, value: str) -> DebtForm:
    if name not in FORM_FIELDS:
        raise ValueError(f"Unknown form field {name!r}")
    return form.model_copy(update={name: value})


def form_for_edit(record: DebtRecord) -> DebtForm:
    return DebtForm(
        person_name=record.person_name,
        product=record.product,
        quantity=record.quantity,
        amount=str(record.amount),
        location=record.location,
        note=record.note or "",
        due_date=record.due_date.isoformat() if record.due_date else "",
        entry_date=record.entry_date.isoformat(),
        editing_id=record.id,
    )


def _parse_date(value: str, field: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date for {field}: {value!r}", fields=(field,))


def to_input(form: DebtForm) -> DebtInput:
    amount = None
    if form.amount.strip():
        try:
            amount = Decimal(form.amount.strip())
        except InvalidOperation:
            raise ValidationError(f"Invalid amount: {form.amount!r}", fields=("amount",))
        if not amount.is_finite():
            raise ValidationError(f"Amount must be a finite number: {form.amount!r}", fields=("amount",))
    return DebtInput(
        person_name=form.person_name,
        product=form.product,
        quantity=form.quantity,
        amount=amount,
        location=form.location or None,
        note=form.note or None,
        due_date=_parse_date(form.due_date, "dueDate"),
        entry_date=_parse_date(form.entry_date, "date"),
    )


def submit_form(ledger: LedgerService, form: DebtForm, today: Optional[date] = None) -> tuple[MutationResponse, DebtForm]:
    """Create or update from ``form``; return the result and a fresh form.

    The fresh form keeps the location so consecutive entries reuse it.
    """
    data = to_input(form)
    if form.editing_id:
        result = ledger.update(form.editing_id, data)
    else:
        result = ledger.create(data)
    return result, blank_form(ledger.products[0], form.location, today)
