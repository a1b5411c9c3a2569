"""Main web application entry point."""

import uuid
from collections.abc import Awaitable, Callable

from budget_tracker.providers.config import ConfigProvider
from budget_tracker.providers.logging import LoggingProvider
from budget_tracker.web.responses import register_exception_handlers
from budget_tracker.web.routers import budgets
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

CORRELATION_HEADER = "X-Request-ID"

app = FastAPI(
    title="Budget Tracker",
    description="Budget allocation and spending aggregation API.",
    version="1.0.0",
)
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ConfigProvider.get_config().CORS_ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Tags every log line of a request with a correlation id.

    Args:
        request: The incoming request.
        call_next: The next handler in the chain.

    Returns:
        The response, carrying the correlation id header.
    """
    correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
    with LoggingProvider().set_correlation_id(correlation_id):
        response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


register_exception_handlers(app)
app.include_router(budgets.router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        Status dictionary.
    """
    return {"status": "ok"}
