"""Application context: everything one running tracker instance owns.

Loading a session reads the mirror once and replaces all in-memory state.
There is nothing to tear down; every mutation is already flushed.
"""

import hmac
import logging
from datetime import date, datetime
from typing import Callable, Optional

from .config import Settings
from .export import build_snapshot, export_snapshot
from .inbox import RequestInbox
from .location import LocationProvider, resolve_location
from .models import DashboardSummary, DebtRecord, ExportFormat, RenderedExport, utcnow
from .queries import overdue_records, summarize
from .service import LedgerService, Notifier
from .storage import ADMIN_KEY, InMemoryMirror, JsonFileMirror

LOGGER = logging.getLogger(__name__)


class AdminGate:
    def __init__(self, mirror, secret: str):
        self.mirror = mirror
        self.secret = secret
        stored = self.mirror.get(ADMIN_KEY)
        self.is_admin = isinstance(stored, str) and self._matches(stored)

    def _matches(self, candidate: str) -> bool:
        return hmac.compare_digest(candidate.encode("utf-8"), self.secret.encode("utf-8"))

    def login(self, password: str) -> bool:
        if not self._matches(password):
            LOGGER.warning("Admin login rejected")
            return False
        self.mirror.save(ADMIN_KEY, password)
        self.is_admin = True
        LOGGER.info("Admin access granted")
        return True


class LedgerSession:
    def __init__(
        self,
        mirror=None,
        settings: Optional[Settings] = None,
        location_provider: Optional[LocationProvider] = None,
        notify: Optional[Notifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings or Settings()
        self.clock = clock or utcnow
        self.mirror = mirror if mirror is not None else InMemoryMirror()
        self.default_location = resolve_location(location_provider, self.settings.fallback_location)
        self.ledger = LedgerService(
            self.mirror,
            products=self.settings.products,
            currency=self.settings.currency,
            default_location=self.default_location,
            notify=notify,
        )
        self.inbox = RequestInbox(self.mirror)
        self.admin = AdminGate(self.mirror, self.settings.admin_secret)
        LOGGER.info(
            "Session loaded: %d entries, %d log entries, %d requests",
            len(self.ledger.records), len(self.ledger.logs), len(self.inbox.requests),
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        location_provider: Optional[LocationProvider] = None,
    ) -> "LedgerSession":
        return cls(JsonFileMirror(settings.data_dir), settings, location_provider)

    @property
    def is_admin(self) -> bool:
        return self.admin.is_admin

    def today(self) -> date:
        """Calendar date used for every overdue decision, in UTC."""
        return self.clock().date()

    def overdue(self) -> list[DebtRecord]:
        return overdue_records(self.ledger.records, self.today())

    def dashboard(self) -> DashboardSummary:
        return summarize(self.ledger.records, self.ledger.logs)

    def export(self, fmt: ExportFormat) -> RenderedExport:
        snapshot = build_snapshot(
            self.ledger.records, self.ledger.logs, self.inbox.requests, export_date=self.clock()
        )
        return export_snapshot(snapshot, fmt, title=self.settings.title, currency=self.settings.currency)
