from datetime import date
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Response, status
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, configure_logging
from .models import (
    AdminLoginBody, AdminStatus, AuditLogEntry, DashboardSummary, DebtInput,
    DebtRecord, ExportFormat, InboxRequest, MutationResponse,
    ResolveRequestBody, SubmitRequestBody,
)
from .queries import filter_records, overdue_records
from .service import NotFoundError, PersistenceError, ValidationError
from .session import LedgerSession


def create_app(session: Optional[LedgerSession] = None) -> FastAPI:
    if session is None:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        session = LedgerSession.from_settings(settings)

    app = FastAPI(
        title="Debt Ledger API",
        description="Debt tracking for a small produce business, with audit log and request inbox",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.session = session

    def require_admin() -> LedgerSession:
        if not session.is_admin:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
        return session

    @app.get("/health", tags=["System"])
    def health_check():
        return {"status": "healthy", "service": "debt-ledger"}

    @app.post("/admin/login", response_model=AdminStatus, tags=["Admin"])
    def admin_login(body: AdminLoginBody) -> AdminStatus:
        try:
            granted = session.admin.login(body.password)
        except PersistenceError as e:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
        if not granted:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")
        return AdminStatus(is_admin=True)

    @app.get("/entries", response_model=list[DebtRecord], tags=["Entries"])
    def list_entries(search: str = "", s: LedgerSession = Depends(require_admin)) -> list[DebtRecord]:
        return filter_records(s.ledger.records, search)

    @app.get("/entries/overdue", response_model=list[DebtRecord], tags=["Entries"])
    def list_overdue(today: Optional[date] = None, s: LedgerSession = Depends(require_admin)) -> list[DebtRecord]:
        if today is None:
            return s.overdue()
        return overdue_records(s.ledger.records, today)

    @app.post("/entries", response_model=MutationResponse, status_code=status.HTTP_201_CREATED, tags=["Entries"])
    def create_entry(data: DebtInput, s: LedgerSession = Depends(require_admin)) -> MutationResponse:
        try:
            return s.ledger.create(data)
        except ValidationError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except PersistenceError as e:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    @app.put("/entries/{entry_id}", response_model=MutationResponse, tags=["Entries"])
    def update_entry(entry_id: str, data: DebtInput, s: LedgerSession = Depends(require_admin)) -> MutationResponse:
        try:
            return s.ledger.update(entry_id, data)
        except NotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Debt entry {entry_id} not found")
        except ValidationError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except PersistenceError as e:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    @app.delete("/entries/{entry_id}", response_model=MutationResponse, tags=["Entries"])
    def delete_entry(entry_id: str, s: LedgerSession = Depends(require_admin)) -> MutationResponse:
        try:
            return s.ledger.delete(entry_id)
        except NotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Debt entry {entry_id} not found")
        except PersistenceError as e:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    @app.get("/lookup/{entry_id}", response_model=DebtRecord, tags=["Lookup"])
    def lookup_entry(entry_id: str) -> DebtRecord:
        try:
            return session.ledger.find_by_id(entry_id)
        except NotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No entry found with this ID")

    @app.get("/logs", response_model=list[AuditLogEntry], tags=["Admin"])
    def list_logs(s: LedgerSession = Depends(require_admin)) -> list[AuditLogEntry]:
        return s.ledger.logs

    @app.get("/dashboard", response_model=DashboardSummary, tags=["Admin"])
    def dashboard(s: LedgerSession = Depends(require_admin)) -> DashboardSummary:
        return s.dashboard()

    @app.post("/requests", response_model=InboxRequest, status_code=status.HTTP_201_CREATED, tags=["Requests"])
    def submit_request(body: SubmitRequestBody):
        try:
            request = session.inbox.submit(body.message)
        except PersistenceError as e:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
        if request is None:
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        return request

    @app.get("/requests", response_model=list[InboxRequest], tags=["Requests"])
    def list_requests(s: LedgerSession = Depends(require_admin)) -> list[InboxRequest]:
        return s.inbox.requests

    @app.post("/requests/{request_id}/resolve", response_model=InboxRequest, tags=["Requests"])
    def resolve_request(
        request_id: str, body: ResolveRequestBody, s: LedgerSession = Depends(require_admin)
    ) -> InboxRequest:
        try:
            return s.inbox.resolve(request_id, body.decision, body.response, body.admin_notes)
        except NotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Request {request_id} not found")
        except PersistenceError as e:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    @app.get("/export", tags=["Admin"])
    def export(
        fmt: ExportFormat = Query(ExportFormat.JSON, alias="format"), s: LedgerSession = Depends(require_admin)
    ) -> Response:
        rendered = s.export(fmt)
        return Response(
            content=rendered.content,
            media_type=rendered.media_type,
            headers={"Content-Disposition": f'attachment; filename="{rendered.filename}"'},
        )

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
