import os
import time
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from svgshare.core.config import settings
from svgshare.core.database import Base, engine
from svgshare.core.routing import classify_route
from svgshare.models import User, SvgFile, Share  # noqa: F401  registers tables
from svgshare.routes import admin, auth, files, health, pages, shares
from svgshare.routes.pages import STATIC_DIR

logger = logging.getLogger("svgshare")


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    _run_startup()
    yield


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    docs_url="/docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


@app.exception_handler(SQLAlchemyError)
async def _sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    # Database failures become JSON so the UI can show them instead of a bare 500
    logger.exception("Database error on %s %s: %s", request.method, request.url.path, exc)
    detail = "Database error"
    if os.getenv("DEBUG_DB_ERRORS", "false").lower() == "true":
        detail = f"{detail}: {exc}"
    return JSONResponse(status_code=500, content={"detail": detail})


@app.middleware("http")
async def _log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    logger.debug(
        "%s %s [%s] -> %s (%.1f ms)",
        request.method,
        request.url.path,
        classify_route(request.url.path).value,
        response.status_code,
        (time.time() - start) * 1000,
    )
    return response


def _run_startup() -> None:
    """Configure logging and create tables"""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not settings.AUTO_CREATE_TABLES:
        return
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as exc:
        logger.exception("Database initialisation failed (cannot create tables), check DATABASE_URL: %s", exc)
        raise


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_origin_regex=settings.CORS_ALLOW_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api/health", tags=["Health"])
app.include_router(auth.router, prefix="/auth", tags=["Auth"])
app.include_router(files.router, prefix="/api/files", tags=["Files"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(shares.router, prefix="/api/s", tags=["Shares"])
app.include_router(shares.raw_router, prefix="/raw", tags=["Shares"])
app.include_router(pages.router)

# Anything no route claimed falls through to the static assets
app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        log_level="info"
    )
