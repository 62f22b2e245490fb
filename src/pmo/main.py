"""PMO FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from pmo.config import settings

# ── Logging ───────────────────────────────────────────────────────────────────
# Ensure pmo.* loggers are visible in container output.
logging.basicConfig(
    level=logging.DEBUG if settings.pmo_debug else logging.INFO,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
)
# Quiet down noisy third-party loggers
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("apscheduler").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    from pmo.db.session import init_db
    from pmo.tasks.workers import start_scheduler

    await init_db()
    start_scheduler()

    yield

    from pmo.db.session import close_db
    from pmo.tasks.workers import stop_scheduler

    stop_scheduler()
    await close_db()


app = FastAPI(
    title="PMO",
    description="Project portfolio management: scheduling, risk, scope and stage gates",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """Map unique and foreign-key violations to 409."""
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Conflicts with an existing record"})


# Register API routes
from pmo.api.routes import users, projects, tasks, risks  # noqa: E402
from pmo.api.routes import change_requests, stage_gates, baselines  # noqa: E402
from pmo.api.routes import resources, dependencies, analytics  # noqa: E402

app.include_router(users.router, prefix="/api", tags=["Users"])
app.include_router(projects.router, prefix="/api", tags=["Projects"])
app.include_router(tasks.router, prefix="/api", tags=["Tasks"])
app.include_router(risks.router, prefix="/api", tags=["Risks"])
app.include_router(change_requests.router, prefix="/api", tags=["Change Requests"])
app.include_router(stage_gates.router, prefix="/api", tags=["Stage Gates"])
app.include_router(baselines.router, prefix="/api", tags=["Baselines"])
app.include_router(resources.router, prefix="/api", tags=["Resources"])
app.include_router(dependencies.router, prefix="/api", tags=["Dependencies"])
app.include_router(analytics.router, prefix="/api", tags=["Analytics"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": "0.1.0", "env": settings.pmo_env}
