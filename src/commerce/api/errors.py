"""Maps commerce errors to HTTP responses.

Response body: ``{"error": {<field>: [<message>, ...]}}``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError

from commerce.errors import (
    DuplicatePaymentError,
    EmptyCartError,
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
)

_STATUS_CODES = [
    (NotFoundError, 404),
    (ObjectNotFoundError, 404),
    (InvalidStateError, 409),
    (DuplicatePaymentError, 409),
    (ExpectedVersionError, 409),
    (InsufficientStockError, 400),
    (EmptyCartError, 400),
    (ValidationError, 400),
]


def _error_body(exc) -> dict:
    if isinstance(exc, ExpectedVersionError):
        return {"error": {"_entity": ["The record was changed concurrently, retry the request"]}}
    messages = getattr(exc, "messages", None) or str(exc)
    if isinstance(messages, dict):
        messages = dict(messages)
    return {"error": messages}


def _handler_for(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=_error_body(exc))

    return handler


def register_exception_handlers(app: FastAPI) -> None:
    """Starlette resolves handlers along the exception's MRO, most specific first."""
    for exc_class, status_code in _STATUS_CODES:
        app.add_exception_handler(exc_class, _handler_for(status_code))
