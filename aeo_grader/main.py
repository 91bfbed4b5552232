import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aeo_grader import __version__
from aeo_grader.api.v1.router import api_v1_router
from aeo_grader.core.config import settings
from aeo_grader.core.exceptions import GraderError
from aeo_grader.core.logging import setup_logging
from aeo_grader.core.sentry import init_sentry

# Configure logging before anything else
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    init_sentry()
    if not settings.perplexity_api_key:
        logger.warning("PERPLEXITY_API_KEY is not set; model calls will fail until it is configured")
    logger.info("Starting AEO Grader...")

    yield

    logger.info("AEO Grader shut down")


app = FastAPI(
    title="AEO Grader",
    description="Brand visibility scoring for AI answer engines",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
)


# Log unhandled exceptions with their traceback
@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled %s on %s %s:\n%s", type(exc).__name__, request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"error": f"{type(exc).__name__}: {exc}"})


# Grader failures that escape an endpoint keep the {error} shape, without a traceback
@app.exception_handler(GraderError)
async def _grader_error_handler(request: Request, exc: GraderError):
    logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=500, content={"error": exc.message})


# Malformed request bodies answer in the same {error} shape as the endpoints
@app.exception_handler(RequestValidationError)
async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg', '')}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {problems}"})


# CORS: allowed_origins is comma-separated
_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(api_v1_router)


@app.get("/api/v1/health")
async def health():
    return {
        "status": "ok",
        "version": __version__,
        "answer_engine_configured": bool(settings.perplexity_api_key),
    }
