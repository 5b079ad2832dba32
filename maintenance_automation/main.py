import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from maintenance_automation.api.main import api_router
from maintenance_automation.core.config import settings
from maintenance_automation.core.db import init_db
from maintenance_automation.core.observability import (
    get_logger,
    set_correlation_id,
    setup_metrics,
    setup_structured_logging,
)

logger = get_logger(__name__)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Correlation id and request timing for every request."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        set_correlation_id(correlation_id)

        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        response.headers["X-Correlation-ID"] = correlation_id
        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_seconds=duration,
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_structured_logging()
    setup_metrics()
    init_db()
    logger.info("Application started", environment=settings.ENVIRONMENT)
    yield


def create_app(with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan if with_lifespan else None,
    )
    app.add_middleware(ObservabilityMiddleware)
    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()
