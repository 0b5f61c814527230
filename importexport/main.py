"""FastAPI application factory and global exception handling."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from importexport import __version__ as app_version
from importexport.api.routes import router
from importexport.api.schemas import FieldViolationModel
from importexport.config import get_settings
from importexport.exceptions import ProfileLoadError, ProfileValidationError
from importexport.profiles.loader import get_profile_registry


def create_application() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()
    logging.getLogger("importexport").setLevel(settings.log_level.upper())

    registry = get_profile_registry()
    if not registry.is_loaded():
        registry.load_catalog()

    app = FastAPI(
        title=settings.app_name,
        description="Bag profile discovery and metadata validation.",
        version=app_version,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "validation_error", "details": exc.errors()},
        )

    @app.exception_handler(ProfileValidationError)
    async def profile_validation_handler(
        request: Request, exc: ProfileValidationError
    ) -> JSONResponse:
        violations = [
            FieldViolationModel(
                field=v.field,
                kind=v.kind,
                value=v.value,
                allowed=list(v.allowed),
                message=v.describe(),
            ).model_dump()
            for v in exc.violations
        ]
        return JSONResponse(
            status_code=422,
            content={
                "error": "profile_validation_failed",
                "section": exc.section,
                "message": str(exc),
                "violations": violations,
            },
        )

    @app.exception_handler(ProfileLoadError)
    async def profile_load_handler(
        request: Request, exc: ProfileLoadError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"error": "profile_load_error", "details": str(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        detail = exc.detail
        if isinstance(detail, dict) and "error" in detail:
            payload = detail
        elif detail == "There was an error parsing the body":
            payload = {"error": "invalid_json", "details": detail}
        else:
            payload = {"error": "http_error", "details": detail}
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.get("/healthz", tags=["health"])
    async def healthz() -> dict[str, Any]:
        return {
            "status": "ok",
            "version": app_version,
            "profiles": registry.get_available_ids(),
            "max_profile_bytes": settings.max_profile_bytes,
        }

    app.include_router(router)
    return app


app = create_application()
