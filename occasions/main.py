"""Main FastAPI application."""
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from occasions.config import settings
from occasions.exceptions import OccasionsError
from occasions.routers import health, lookups, metaobjects

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="FastAPI service for customer occasion metaobjects and loyalty rewards on Shopify",
)

# CORS middleware; the storefront form posts cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(OccasionsError)
async def occasions_error_handler(request: Request, exc: OccasionsError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder(
            {"success": False, "error": "Invalid request body", "details": exc.errors()}
        ),
    )


# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(metaobjects.router, prefix="/api", tags=["Metaobjects"])
app.include_router(lookups.router, prefix="/api", tags=["Occasions"])


@app.api_route("/api")
async def api_root():
    """API information endpoint."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.on_event("startup")
async def startup_event():
    if not settings.shopify_configured:
        logger.warning("Shopify credentials not configured; API calls will fail until they are set")
    logger.info("%s %s started", settings.app_name, settings.app_version)
