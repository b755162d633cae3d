"""
IQOL Marketing Dashboard: FastAPI Backend
Brand-scoped metrics, content tracking, action items and user administration.
Access policy runs here, behind the trust boundary; the browser is never trusted
with a role, a brand list or an assignee.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from iqol.auth import get_current_user
from iqol.config import get_settings
from iqol.database import async_session, check_db_connection, dispose_db, init_db
from iqol.errors import DashboardError
from iqol.routers import (
    action_items, auth, blogs, brands, dashboard, metrics, social, users,
)
from iqol.services.bootstrap import ensure_first_admin
from iqol.utils import safe_error_detail

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


async def _bootstrap_first_admin():
    """Create first admin if FIRST_ADMIN_EMAIL and FIRST_ADMIN_PASSWORD are set and no users exist."""
    if not settings.first_admin_email or not settings.first_admin_password:
        return
    async with async_session() as db:
        await ensure_first_admin(
            db, settings.first_admin_email, settings.first_admin_password, settings.first_admin_name,
        )
        await db.commit()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting IQOL Dashboard API...")
    try:
        await init_db()
        await _bootstrap_first_admin()
        logger.info("Startup complete")
    except Exception as e:
        logger.error(f"Startup failed (DB/init): {e}", exc_info=True)
        # Still yield so app can serve /api/health (degraded) and logs are visible
    yield
    logger.info("Shutting down...")
    await dispose_db()


app = FastAPI(
    title="IQOL Dashboard",
    description="Marketing operations dashboard with brand-scoped access control",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error translation ─────────────────────────────────────────────────

@app.exception_handler(DashboardError)
async def dashboard_error_handler(request: Request, exc: DashboardError):
    """Policy, validation and persistence errors become user-facing messages."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=500, content={"detail": safe_error_detail(exc)})


# ── Auth (login public; whoami requires JWT) ──────────────────────────
app.include_router(auth.router, prefix="/api")

# ── Register Routers (all require auth) ──────────────────────────────
_auth = [Depends(get_current_user)]
app.include_router(users.router, prefix="/api", dependencies=_auth)
app.include_router(brands.router, prefix="/api", dependencies=_auth)
app.include_router(metrics.router, prefix="/api/metrics", tags=["Daily Metrics"], dependencies=_auth)
app.include_router(blogs.router, prefix="/api/blogs", tags=["Blogs"], dependencies=_auth)
app.include_router(social.router, prefix="/api/social-posts", tags=["Social Posts"], dependencies=_auth)
app.include_router(action_items.router, prefix="/api/action-items", tags=["Action Items"], dependencies=_auth)
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"], dependencies=_auth)


@app.get("/api/health")
async def health_check():
    db_ok = await check_db_connection()
    return {
        "status": "healthy" if db_ok else "degraded",
        "service": "IQOL Dashboard",
        "database": "connected" if db_ok else "disconnected",
    }
