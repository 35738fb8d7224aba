from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from questverify.core.config import settings
from questverify.core.errors import (
    QuestVerifyError,
    domain_exception_handler,
    global_exception_handler,
    http_exception_handler,
)
from questverify.core.sentry import init_sentry

import questverify.models  # noqa: F401  register all models at startup

from questverify.modules.gamification.router import router as gamification_router
from questverify.modules.quests.router import router as quests_router
from questverify.modules.verification.router import router as verification_router
from questverify.services.classifier import get_classifier

# ── Sentry: must be initialised BEFORE FastAPI app is created ────────────────
init_sentry(settings.SENTRY_DSN, settings.SENTRY_ENVIRONMENT, settings.APP_VERSION)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    logger.info(
        "Starting QuestVerify API",
        env=settings.APP_ENV,
        classifier_backend=settings.CLASSIFIER_BACKEND,
    )
    yield
    logger.info("Shutting down QuestVerify API")
    from questverify.core.database import engine

    await engine.dispose()


_is_prod = settings.APP_ENV == "production"

app = FastAPI(
    title="QuestVerify API",
    description="Photo and GPS verification of volunteering quests, with the XP, level and badge economy.",
    version="0.1.0",
    docs_url=None if _is_prod else "/docs",
    redoc_url=None if _is_prod else "/redoc",
    openapi_url=None if _is_prod else "/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
)

app.add_exception_handler(QuestVerifyError, domain_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, global_exception_handler)


# ── X-API-Version response header ────────────────────────────────────────────


@app.middleware("http")
async def add_version_header(request: Request, call_next) -> Response:
    response = await call_next(request)
    response.headers["X-API-Version"] = "v1"
    return response


# ── Health check (root-level, not under /v1) ─────────────────────────────────


@app.get("/health")
async def health_check() -> dict:
    """Probes PostgreSQL and reports which classifier backend is active."""
    checks: dict[str, dict] = {}

    try:
        from sqlalchemy import text
        from questverify.core.database import async_session_factory
        async with async_session_factory() as db:
            await db.execute(text("SELECT 1"))
        checks["postgresql"] = {"status": "healthy"}
    except Exception as exc:
        checks["postgresql"] = {"status": "unhealthy", "error": str(exc)}

    checks["classifier"] = {"status": "healthy", "backend": get_classifier().backend}

    overall = (
        "healthy"
        if all(c["status"] == "healthy" for c in checks.values())
        else "degraded"
    )
    return {"status": overall, "service": "questverify-api", "checks": checks}


# ── /v1 versioned router ──────────────────────────────────────────────────────

api_v1 = APIRouter(prefix="/v1")

api_v1.include_router(verification_router)
api_v1.include_router(gamification_router)
api_v1.include_router(quests_router)

app.include_router(api_v1)
