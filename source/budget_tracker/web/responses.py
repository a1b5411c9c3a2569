"""Response envelope and error handlers of the web application.

Every response body is wrapped as `{"status": ..., "data": ...}`, with an
additional `message` for errors. Client errors use the `fail` status and
server errors the `error` status.
"""

from typing import Any

from budget_tracker.exceptions.budgets import (
    AllocationConflictError,
    BudgetNotFoundError,
    BudgetValidationError,
)
from budget_tracker.providers.logging import LoggingProvider
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException


def dump(payload: BaseModel | list[BaseModel]) -> Any:
    """Serializes models with their camelCase names into JSON-ready data."""
    if isinstance(payload, list):
        return [item.model_dump(mode="json", by_alias=True) for item in payload]
    return payload.model_dump(mode="json", by_alias=True)


def success(data: Any) -> dict[str, Any]:
    """Wraps data in the success envelope."""
    return {"status": "success", "data": data}


def failure(status_code: int, message: str, data: Any = None, status_label: str = "fail") -> JSONResponse:
    """Builds an error response in the envelope format."""
    return JSONResponse(
        status_code=status_code,
        content={"status": status_label, "message": message, "data": data},
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Turns the first pydantic error into a message naming its field."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def register_exception_handlers(app: FastAPI) -> None:
    """Maps the engine's exceptions onto HTTP responses.

    Args:
        app: The FastAPI application.
    """
    logger = LoggingProvider().get_logger()

    @app.exception_handler(AllocationConflictError)
    async def allocation_conflict_handler(request: Request, exc: AllocationConflictError) -> JSONResponse:
        return failure(status.HTTP_400_BAD_REQUEST, exc.message, dump(exc.totals))

    @app.exception_handler(BudgetValidationError)
    async def budget_validation_handler(request: Request, exc: BudgetValidationError) -> JSONResponse:
        return failure(status.HTTP_400_BAD_REQUEST, exc.message, {"field": exc.field})

    @app.exception_handler(BudgetNotFoundError)
    async def budget_not_found_handler(request: Request, exc: BudgetNotFoundError) -> JSONResponse:
        return failure(status.HTTP_404_NOT_FOUND, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return failure(status.HTTP_400_BAD_REQUEST, _describe_validation_error(exc))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        status_label = "error" if exc.status_code >= 500 else "fail"
        return failure(exc.status_code, str(exc.detail), status_label=status_label)

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error(f"Storage failure while handling {request.method} {request.url.path}: {exc}", exc_info=exc)
        return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Storage failure", status_label="error")
