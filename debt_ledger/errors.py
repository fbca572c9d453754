class LedgerServiceError(Exception):
    pass


class ValidationError(LedgerServiceError):
    def __init__(self, message: str, fields: tuple[str, ...] = ()):
        super().__init__(message)
        self.fields = fields


class NotFoundError(LedgerServiceError):
    pass


class PersistenceError(LedgerServiceError):
    pass


class LocationUnavailableError(Exception):
    pass
