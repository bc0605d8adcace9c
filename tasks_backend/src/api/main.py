from __future__ import annotations

import logging
import sys
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .container import Container, build_container
from .errors import AppError
from .routers import auth as auth_router
from .routers import tasks as tasks_router
from .schemas import HealthOut
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "auth", "description": "Registration and login; both return a signed bearer token."},
    {"name": "tasks", "description": "CRUD operations on the authenticated user's tasks."},
]


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("httpcore", "httpx", "urllib3"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def _validation_issues(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # Drop the leading 'body'/'path' marker so paths name the field itself.
    issues = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ())]
        if loc and loc[0] in {"body", "path", "query", "header"}:
            loc = loc[1:]
        issues.append({"path": loc, "message": str(err.get("msg", "")), "code": str(err.get("type", ""))})
    return issues


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """
        Render domain errors as {"error": message} with their status code.
        """
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": [{"path": [...], "message": "...", "code": "..."}]
            }
        """
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": _validation_issues(exc.errors()),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, container: Optional[Container] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The signing key pair is loaded here, so a missing key file raises
    KeyMaterialError and the process never starts serving.
    """
    settings = settings or get_settings()
    container = container or build_container(settings)

    app = FastAPI(
        title="Tasks Backend",
        description="Multi-user task tracking API with RS256 token authentication.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.container = container

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"], response_model=HealthOut)
    def health_check() -> HealthOut:
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return HealthOut(message="Healthy", backend=settings.persistence_backend)

    app.include_router(auth_router.router)
    app.include_router(tasks_router.router)
    return app


_settings = get_settings()
configure_logging(_settings.log_level)
app = create_app(_settings)
