"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from folio.errors import ApiError
from folio.repositories.base import RelationalStore
from folio.repositories.memory import InMemoryStore
from folio.routes import (
    articles_router,
    courses_router,
    likes_router,
    members_router,
    portfolio_router,
    tags_router,
)

logger = logging.getLogger(__name__)


def create_app(store: RelationalStore | None = None) -> FastAPI:
    app = FastAPI(title="Folio API", version="0.1.0")
    app.state.store = store if store is not None else InMemoryStore()

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "request.failed method=%s path=%s code=%s",
                request.method,
                request.url.path,
                exc.code,
                exc_info=exc.__cause__,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    api_prefix = "/api/v1"
    app.include_router(courses_router, prefix=api_prefix)
    app.include_router(articles_router, prefix=api_prefix)
    app.include_router(portfolio_router, prefix=api_prefix)
    app.include_router(tags_router, prefix=api_prefix)
    app.include_router(members_router, prefix=api_prefix)
    app.include_router(likes_router, prefix=api_prefix)

    return app


app = create_app()
