"""
FastAPI Application — Link-Face.

Architecture:
  - SQLite (padrão) via SQLAlchemy para funcionários e submissões
  - Storage plugável: disco local, S3, Vercel Blob, Google Drive
  - Rate limit em memória por token / IP
  - Painel admin com sessões em memória
"""

import asyncio
import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from linkface import __version__
from linkface.api.deps import Services, build_services
from linkface.api.routes.admin import router as admin_router
from linkface.api.routes.health import router as health_router
from linkface.api.routes.submissions import router as submissions_router
from linkface.config.logging_config import configure_logging
from linkface.config.settings import Settings, get_settings
from linkface.infrastructure.db.database import init_db

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS = 300


def create_app(settings: Settings = None, services: Services = None) -> FastAPI:
    """App factory. Testes passam settings/services próprios."""
    settings = settings or (services.settings if services else get_settings())

    app = FastAPI(
        title="Link-Face",
        description="Coleta de nome, CPF e foto com consentimento, via links de indicação.",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.public_app_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.services = services or build_services(settings)
    app.state.background_tasks = []

    app.include_router(health_router, prefix="/api", tags=["Health"])
    app.include_router(submissions_router, prefix="/api", tags=["Submissions"])
    app.include_router(admin_router, prefix="/api/admin", tags=["Admin"])

    # ── Error bodies: {ok: false, error} ──
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Invalid request on {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"ok": False, "error": "Requisição inválida."})

    # ── Startup / Shutdown ──
    @app.on_event("startup")
    async def startup():
        svc: Services = app.state.services
        configure_logging(svc.settings.log_level, svc.settings.log_json)
        init_db(svc.engine)

        for problem in svc.settings.validate_deployment():
            logger.error(f"Configuration problem: {problem}")

        app.state.background_tasks = [
            asyncio.create_task(svc.rate_limiter.run_sweeper()),
            asyncio.create_task(svc.sessions.run_sweeper(SWEEP_INTERVAL_SECONDS)),
        ]
        logger.info(f"Link-Face started (storage={svc.storage.backend.value})")

    @app.on_event("shutdown")
    async def shutdown():
        for task in app.state.background_tasks:
            task.cancel()
        app.state.background_tasks = []
        app.state.services.engine.dispose()
        logger.info("Link-Face stopped")

    return app


def run() -> None:
    """Entry point: linkface-api."""
    settings = get_settings()
    uvicorn.run(
        "linkface.api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug and not settings.is_production,
    )


if __name__ == "__main__":
    run()
