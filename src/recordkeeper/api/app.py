"""FastAPI application."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from recordkeeper.api.envelope import error_response, internal_error_response
from recordkeeper.api.routes import create_record_router
from recordkeeper.auth import (
    USER,
    AuthMiddleware,
    JWTService,
    PasswordService,
    UserDirectory,
    require_role,
)
from recordkeeper.auth.endpoints import create_auth_router
from recordkeeper.auth.types import CallerContext
from recordkeeper.config import Settings
from recordkeeper.errors import RecordKeeperError
from recordkeeper.metadata.loader import MetadataLoader
from recordkeeper.metadata.validator import validate_metadata_dir
from recordkeeper.persistence import PersistenceAdapter, create_adapter
from recordkeeper.resources import build_handlers

logger = logging.getLogger(__name__)

USER_RECORD_TYPE = "User"


def _report_schema_issues(metadata_path: Path) -> None:
    """Log metadata schema problems without blocking startup."""
    issues = validate_metadata_dir(metadata_path)
    if not issues:
        return

    error_count = sum(1 for i in issues if i.severity == "error")
    warn_count = sum(1 for i in issues if i.severity == "warning")
    for issue in issues:
        if issue.severity == "error":
            logger.error("Metadata schema error: %s", issue)
        else:
            logger.warning("Metadata schema warning: %s", issue)
    logger.warning(
        "Metadata validation: %d error(s), %d warning(s). "
        "Run 'recordkeeper metadata validate' for details.",
        error_count,
        warn_count,
    )


def create_app(
    settings: Settings | None = None,
    store: PersistenceAdapter | None = None,
    password_service: PasswordService | None = None,
) -> FastAPI:
    """Build the API for every record type under the configured metadata path.

    Args:
        settings: Runtime settings; read from the environment when omitted
        store: Record Store to use instead of one built from ``settings.database``
        password_service: Password hasher; tests pass a low-cost one

    Returns:
        A FastAPI app whose lifespan connects the store and creates tables
    """
    settings = settings or Settings.from_env()

    metadata_loader = MetadataLoader(settings.metadata_path)
    metadata_loader.load_all()

    if store is None:
        store = create_adapter(settings.database)

    user_type = metadata_loader.get_record_type(USER_RECORD_TYPE)
    directory = (
        UserDirectory(
            store,
            user_type,
            password_service or PasswordService(),
            settings.admin_emails,
        )
        if user_type
        else None
    )
    jwt_service = JWTService(settings.secret_key, ttl=settings.token_ttl)
    handlers = build_handlers(metadata_loader.exposed_record_types(), store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize on startup, cleanup on shutdown."""
        _report_schema_issues(settings.metadata_path)

        settings.database.prepare()

        if store.conn is None:
            store.connect()
            logger.info("Connected to %s", settings.database.redacted_url)

        # Create tables for all record types, internal ones included
        for name in metadata_loader.list_record_types():
            store.initialize_record_type(metadata_loader.get_record_type(name))

        logger.info(
            "Serving record types: %s",
            ", ".join(sorted(h.display_name for h in handlers.values())),
        )
        yield

        store.close()

    app = FastAPI(title="recordkeeper API", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.metadata_loader = metadata_loader
    app.state.handlers = handlers
    app.state.user_directory = directory
    app.state.jwt_service = jwt_service

    app.add_middleware(AuthMiddleware, jwt_service=jwt_service)

    @app.exception_handler(RecordKeeperError)
    async def record_keeper_error(request: Request, exc: RecordKeeperError) -> JSONResponse:
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {
                "field": str(err["loc"][-1]) if err.get("loc") else "__root__",
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"type": "ValidationFailure", "message": "Invalid request", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return internal_error_response()

    app.include_router(create_auth_router(jwt_service, lambda: directory))

    for handler in handlers.values():
        app.include_router(create_record_router(handler))

    @app.get("/api/recordTypes", tags=["metadata"])
    async def list_record_types(
        caller: CallerContext = Depends(require_role(USER)),
    ) -> list[dict[str, Any]]:
        """Describe every record type that has CRUD routes."""
        return [
            metadata_loader.to_dict(rt) for rt in metadata_loader.exposed_record_types()
        ]

    return app
