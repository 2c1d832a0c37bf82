"""Classified resolution failures and their wire shape.

Errors raised while resolving a storage identifier are either thrown
(classification, configuration) or recorded on the resolved record as
``ErrorDetail`` entries, so a failed lookup can be cached and inspected
like any other record.
"""
from pydantic import BaseModel

ERROR_PATH = "storage"

class ErrorDetail(BaseModel):
    message: str
    path: str | None = None
    type: str | None = None
    status_code: int | None = None


class StorageError(Exception):
    type: str | None = None
    status_code: int | None = None
    default_message = "Storage error"

    def __init__(self, message: str | None = None, *, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.path = ERROR_PATH
        super().__init__(self.message)

    def detail(self) -> ErrorDetail:
        return ErrorDetail(
            message=self.message,
            path=self.path,
            type=self.type,
            status_code=self.status_code,
        )

    @classmethod
    def from_detail(cls, detail: ErrorDetail) -> "StorageError":
        """Rebuild the exception a cached ``ErrorDetail`` was recorded from."""
        klass = _BY_TYPE.get(detail.type or "", StorageError)
        err = klass(detail.message, status_code=detail.status_code)
        if klass is StorageError:
            err.type = detail.type
        if detail.path:
            err.path = detail.path
        return err

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, status_code={self.status_code!r})"


class NotFoundError(StorageError):
    type = "not_found"
    status_code = 404
    default_message = "File not found"


class InvalidIdentifierError(NotFoundError):
    """A path-form identifier segment failed validation.

    Reported to callers exactly like a missing file.
    """


class ConfigurationError(StorageError):
    type = "configuration_error"
    default_message = "Storage resolver is not configured"


class ServerError(StorageError):
    type = "server_error"
    default_message = "Storage: Status code error"


class TransportError(StorageError):
    type = "transport_error"
    default_message = "Storage: Request failed"


class ParseError(StorageError):
    type = "parse_error"
    default_message = "Storage: Invalid payload"


class AlreadyExistsError(Exception):
    """Raised by a cache store when an insert hits the unique key."""

    def __init__(self, unique: str):
        self.unique = unique
        super().__init__(f"storage record already exists: {unique}")


_BY_TYPE: dict[str, type[StorageError]] = {
    klass.type: klass
    for klass in (NotFoundError, ConfigurationError, ServerError, TransportError, ParseError)
}
