"""
Error responses and exception handlers

Maps domain error kinds to HTTP status codes. Every error body has the
shape {"request_id": ..., "error": {"code": ..., "message": ...}}.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import ErrorKind, TransferSystemError
from .schemas import ErrorObject, ErrorResponse


logger = logging.getLogger("transfer_system.api")

INTERNAL_ERROR_MESSAGE = "Internal Server Error"

STATUS_BY_KIND = {
    ErrorKind.SAME_ACCOUNT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NON_POSITIVE_AMOUNT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_ACCOUNT_ID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NEGATIVE_BALANCE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.ACCOUNT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ACCOUNT_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.INSUFFICIENT_FUNDS: status.HTTP_409_CONFLICT,
    ErrorKind.STORE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or ""


def error_response(request_id: str, status_code: int, code: str, message: str) -> JSONResponse:
    """Build the JSON error response"""
    body = ErrorResponse(request_id=request_id, error=ErrorObject(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def transfer_system_error_handler(request: Request, exc: TransferSystemError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        # Store detail stays in the logs
        return error_response(
            _request_id(request), status_code, ErrorKind.STORE_FAILURE.code, INTERNAL_ERROR_MESSAGE
        )
    return error_response(_request_id(request), status_code, exc.kind.code, exc.message)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{location}: {error.get('msg')}" if location else str(error.get('msg')))
    return error_response(
        _request_id(request), status.HTTP_400_BAD_REQUEST, "invalid_request", "; ".join(details)
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = "not_found" if exc.status_code == status.HTTP_404_NOT_FOUND else "http_error"
    response = error_response(_request_id(request), exc.status_code, code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TransferSystemError, transfer_system_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
