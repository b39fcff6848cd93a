"""
FastAPI application entrypoint.

Responsibilities:
- Create DB tables on startup for easy local dev.
- Seed the configured admin profile.
- Configure CORS to the local frontend only.
- Render access-core errors as HTTP responses.
- Register routers.
"""

import logging
import traceback
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from clarity_api import __version__
from clarity_api.api.routes import (
    annotations_router,
    auth_router,
    images_router,
    labels_router,
    profiles_router,
    projects_router,
)
from clarity_api.core.config import settings
from clarity_api.core.errors import (
    EntityNotFound,
    ForeignKeyViolation,
    PolicyDenied,
    Unauthenticated,
    UniqueConstraintViolation,
)
from clarity_api.core.security import hash_password
from clarity_api.db.base import Base
from clarity_api.db.session import SessionLocal, engine
from clarity_api.models import Profile

logging.basicConfig(
    level=settings.LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

REJECTED = {"detail": "Operation rejected"}


def seed_admin() -> None:
    """Create the configured admin profile, or promote it if it exists."""
    if not settings.SEED_ADMIN_EMAIL or not settings.SEED_ADMIN_PASSWORD:
        return
    db = SessionLocal()
    try:
        profile = db.query(Profile).filter(Profile.email == settings.SEED_ADMIN_EMAIL).first()
        if profile is None:
            logger.info("Creating admin profile %s", settings.SEED_ADMIN_EMAIL)
            profile = Profile(
                id=str(uuid4()),
                email=settings.SEED_ADMIN_EMAIL,
                full_name="Administrator",
                password_hash=hash_password(settings.SEED_ADMIN_PASSWORD),
                role="admin",
                active=True,
            )
        elif profile.role != "admin":
            logger.info("Promoting %s to admin", settings.SEED_ADMIN_EMAIL)
            profile.role = "admin"
        db.add(profile)
        db.commit()
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Clarity API starting (access model: %s)", settings.ACCESS_MODEL)
    # For local dev we auto-create tables.
    Base.metadata.create_all(bind=engine)
    seed_admin()
    yield
    logger.info("Clarity API shutting down")


app = FastAPI(title="Clarity Label API", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Unauthenticated)
async def unauthenticated_handler(request: Request, exc: Unauthenticated):
    return JSONResponse(status_code=401, content={"detail": exc.reason})


@app.exception_handler(EntityNotFound)
async def not_found_handler(request: Request, exc: EntityNotFound):
    # same response as a denial so ids cannot be probed
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=403, content=REJECTED)


@app.exception_handler(PolicyDenied)
async def denied_handler(request: Request, exc: PolicyDenied):
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=403, content=REJECTED)


@app.exception_handler(UniqueConstraintViolation)
async def unique_handler(request: Request, exc: UniqueConstraintViolation):
    return JSONResponse(status_code=409, content={"detail": f"{exc.kind} already exists"})


@app.exception_handler(ForeignKeyViolation)
async def foreign_key_handler(request: Request, exc: ForeignKeyViolation):
    return JSONResponse(status_code=400, content={"detail": f"{exc.kind} references a missing row"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log all unhandled exceptions with full traceback."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}:")
    logger.error(traceback.format_exc())
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(auth_router)
app.include_router(profiles_router)
app.include_router(projects_router)
app.include_router(labels_router)
app.include_router(images_router)
app.include_router(annotations_router)


@app.get("/health")
def health():
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
