from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from approval_flow.core.logging import configure_logging
from approval_flow.models import approval, org, template  # noqa: F401
from approval_flow.routers.approvals import router as approvals_router
from approval_flow.routers.auth import router as auth_router
from approval_flow.routers.departments import router as departments_router
from approval_flow.routers.templates import router as templates_router
from approval_flow.routers.users import router as users_router

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Approval flow service starting")
    yield


app = FastAPI(
    title="Approval Flow",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def catch_unhandled_exceptions(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled exception", extra={"path": request.url.path})
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


app.include_router(auth_router)
app.include_router(approvals_router)
app.include_router(templates_router)
app.include_router(users_router)
app.include_router(departments_router)


@app.get("/")
def root():
    return {"status": "Approval Flow running"}


@app.get("/health")
def health():
    return {
        "status": "ok",
        "version": "0.1.0",
    }
