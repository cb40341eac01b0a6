import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from revalidation_service.api import revalidate
from revalidation_service.core.config import Settings, get_settings
from revalidation_service.core.gate import RevalidationGate
from revalidation_service.core.revalidators import RecordingRevalidator, Revalidator
from revalidation_service.core.security import InvalidSecretError
from revalidation_service.core.upstream import (
    CompositeRevalidator,
    UpstreamInvalidationError,
    UpstreamRevalidator,
)
from revalidation_service.models.schemas import HealthResponse, RevalidationFailure

logging.basicConfig(
    level=get_settings().log_level,
    format='%(asctime)s | %(levelname)8s | %(name)s | %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "revalidation-service"


def build_revalidator(settings: Settings) -> Revalidator:
    local = RecordingRevalidator()
    if not settings.upstream_urls:
        return local
    return CompositeRevalidator(
        local, UpstreamRevalidator(settings.upstream_urls, timeout=settings.upstream_timeout)
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    gate: RevalidationGate = app.state.gate
    settings: Settings = app.state.settings
    if not settings.secret_configured:
        logger.warning("No revalidation secret configured; every webhook call will be rejected")
    logger.info(f"{SERVICE_NAME} ready: invalidates path={gate.path} tag={gate.tag}")
    if settings.upstream_urls:
        logger.info(f"Forwarding invalidations to {len(settings.upstream_urls)} upstream(s)")
    else:
        logger.warning(
            "No upstream URLs configured; invalidations are only recorded locally "
            "and no hosting layer will drop its cached renders"
        )
    yield
    logger.info(f"{SERVICE_NAME} shutting down")


async def invalid_secret_handler(request: Request, exc: InvalidSecretError):
    return PlainTextResponse(exc.reason, status_code=401)


async def upstream_failure_handler(request: Request, exc: UpstreamInvalidationError):
    return JSONResponse(
        status_code=502,
        content=RevalidationFailure(detail=str(exc)).model_dump(),
    )


def create_app(
    settings: Optional[Settings] = None,
    revalidator: Optional[Revalidator] = None,
) -> FastAPI:
    settings = settings or get_settings()
    revalidator = revalidator or build_revalidator(settings)

    app = FastAPI(
        title="Portfolio Revalidation Service",
        version="1.0.0",
        description="Invalidate cached portfolio renders when CMS content changes.",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.revalidator = revalidator
    app.state.gate = RevalidationGate(
        secret=settings.revalidate_secret,
        revalidator=revalidator,
        path=settings.revalidate_path,
        tag=settings.revalidate_tag,
    )

    app.add_exception_handler(InvalidSecretError, invalid_secret_handler)
    app.add_exception_handler(UpstreamInvalidationError, upstream_failure_handler)
    app.include_router(revalidate.router)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="ok", secret_configured=settings.secret_configured)

    @app.get("/")
    async def landing_page():
        return {"message": "Welcome to the Portfolio Revalidation Service"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
