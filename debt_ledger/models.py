from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from pydantic import BaseModel, Field, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Written as a JSON number in mirror and export documents.
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class Decision(str, Enum):
    ACCEPT = "accept"
    DECLINE = "decline"

    @property
    def status(self) -> RequestStatus:
        return RequestStatus.ACCEPTED if self is Decision.ACCEPT else RequestStatus.DECLINED


class ExportFormat(str, Enum):
    JSON = "json"
    HTML = "html"


class DebtInput(CamelModel):
    """Caller-supplied fields for a create or an update.

    Required fields may be blank here; the ledger reports missing ones as a
    ValidationError without touching state.
    """
    person_name: str = ""
    product: str = ""
    quantity: str = ""
    amount: Optional[Decimal] = None
    location: Optional[str] = None
    note: Optional[str] = None
    due_date: Optional[date] = None
    entry_date: Optional[date] = Field(default=None, alias="date")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "personName": "Anna",
            "product": "Fruit",
            "quantity": "2kg",
            "amount": 5.00,
            "note": "pays on friday",
            "dueDate": "2024-06-01",
        }
    })


class DebtRecord(CamelModel):
    id: str
    person_name: str
    product: str
    quantity: str
    amount: Amount
    location: str
    note: Optional[str] = None
    due_date: Optional[date] = None
    entry_date: date = Field(alias="date")
    timestamp: datetime

    model_config = ConfigDict(frozen=True)

    def same_debtor(self, person_name: str, product: str) -> bool:
        return self.person_name.lower() == person_name.lower() and self.product == product

    def is_overdue(self, today: date) -> bool:
        return self.due_date is None or self.due_date < today


class AuditLogEntry(CamelModel):
    timestamp: datetime = Field(default_factory=utcnow)
    action: AuditAction
    entry_id: str
    details: str
    old_state: Optional[DebtRecord] = None
    new_state: Optional[DebtRecord] = None

    model_config = ConfigDict(frozen=True)


class InboxRequest(CamelModel):
    id: str
    message: str
    timestamp: datetime = Field(default_factory=utcnow)
    status: RequestStatus = RequestStatus.PENDING
    response: Optional[str] = None
    admin_notes: Optional[str] = None

    def is_resolved(self) -> bool:
        return self.status != RequestStatus.PENDING


class SubmitRequestBody(CamelModel):
    message: str = Field(..., description="Free-text message for the admin")


class ResolveRequestBody(CamelModel):
    decision: Decision
    response: Optional[str] = None
    admin_notes: Optional[str] = None


class AdminLoginBody(BaseModel):
    password: str


class AdminStatus(CamelModel):
    is_admin: bool


class LedgerSnapshot(CamelModel):
    debt_entries: list[DebtRecord] = Field(default_factory=list)
    logs: list[AuditLogEntry] = Field(default_factory=list)
    requests: list[InboxRequest] = Field(default_factory=list)
    export_date: datetime = Field(default_factory=utcnow)


class RenderedExport(CamelModel):
    content: str
    media_type: str
    filename: str


class DashboardSummary(CamelModel):
    total_debts: int
    total_amount: Amount
    log_count: int
    recent_debts: list[DebtRecord]
    recent_logs: list[AuditLogEntry]


class MutationResponse(CamelModel):
    entry: Optional[DebtRecord] = None
    log: AuditLogEntry
    message: str
