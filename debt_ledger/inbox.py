import logging
from typing import Optional

from .errors import NotFoundError
from .ids import generate_id
from .models import Decision, InboxRequest
from .storage import REQUESTS_KEY, InMemoryMirror

LOGGER = logging.getLogger(__name__)


class RequestInbox:
    """Messages left by anonymous users, resolved by the admin."""

    def __init__(self, mirror=None):
        self.mirror = mirror if mirror is not None else InMemoryMirror()
        self.requests: list[InboxRequest] = [
            InboxRequest.model_validate(r) for r in self.mirror.get(REQUESTS_KEY) or []
        ]

    def submit(self, message: str) -> Optional[InboxRequest]:
        if not message or not message.strip():
            return None
        request = InboxRequest(
            id=generate_id(taken={r.id for r in self.requests}),
            message=message,
        )
        self._commit([*self.requests, request])
        LOGGER.info("Request %s submitted", request.id)
        return request

    def resolve(
        self,
        request_id: str,
        decision: Decision,
        response: Optional[str] = None,
        admin_notes: Optional[str] = None,
    ) -> InboxRequest:
        existing = self.get(request_id)
        if existing.is_resolved():
            # No guard against re-resolution; the latest decision wins.
            LOGGER.warning("Request %s already %s, resolving again", request_id, existing.status.value)

        resolved = existing.model_copy(update={
            "status": decision.status,
            "response": response,
            "admin_notes": admin_notes if admin_notes is not None else existing.admin_notes,
        })
        self._commit([resolved if r.id == request_id else r for r in self.requests])
        LOGGER.info("Request %s %s", request_id, resolved.status.value)
        return resolved

    def get(self, request_id: str) -> InboxRequest:
        for request in self.requests:
            if request.id == request_id:
                return request
        raise NotFoundError(f"Request {request_id} not found")

    def pending(self) -> list[InboxRequest]:
        return [r for r in self.requests if not r.is_resolved()]

    def _commit(self, requests: list[InboxRequest]) -> None:
        self.mirror.save(REQUESTS_KEY, [r.model_dump(mode="json", by_alias=True) for r in requests])
        self.requests = requests
