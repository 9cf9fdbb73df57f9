"""Mapping of rejected service results onto HTTP responses."""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from timeclock_engine.services.results import ActionError, ErrorKind

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.PRECONDITION_VIOLATION: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION_ERROR: 422,
    ErrorKind.NOT_AUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
}


class ActionRejected(Exception):
    """Raised by routes when a service returned a failed result."""

    def __init__(self, error: ActionError):
        self.error = error
        super().__init__(error.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND.get(ErrorKind(self.error.kind), status.HTTP_400_BAD_REQUEST)


async def action_rejected_handler(request: Request, exc: ActionRejected) -> JSONResponse:
    """Render a rejected action as ``{"detail", "code"}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.error.message, "code": exc.error.code.value},
    )
