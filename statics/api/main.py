from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging

from statics.api.config import get_settings
from statics.api.deps import get_image_storage, shutdown_resize_pool
from statics.api.errors import NotFoundError, StaticsError
from statics.api.schemas import ErrorResponse

settings = get_settings()

# Configure basic logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("statics")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Shut the shared resize pool down with the app"""
    yield
    shutdown_resize_pool()


app = FastAPI(title="Statics", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_allow_origin],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StaticsError)
async def statics_error_handler(request: Request, exc: StaticsError):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.code, detail=str(exc)).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    # Unknown routes and unsupported methods are both "not found"
    if exc.status_code in (404, 405):
        return await statics_error_handler(request, NotFoundError())
    return await http_exception_handler(request, exc)


# ============================================================================
# Route Registration
# ============================================================================
from statics.api.routes import health, images

# Health and metrics routes (root level)
app.include_router(health.router)

# Image routes (/images)
app.include_router(images.router)

# Serve locally stored variants under the same urls the storage hands out
if settings.storage_backend == "local":
    app.mount("/static", StaticFiles(directory=get_image_storage().base_path), name="static")
