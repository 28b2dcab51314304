"""Error Handlers — the single place where failures become HTTP responses.

Invariants:
    - CmasError → problem+json with status from HTTP_STATUS_BY_CATEGORY
    - RequestValidationError → 400 problem with field-level details
    - Exception (catch-all) → 500 problem, never leaks internal details
    - Routes never build error responses themselves

Design Decisions:
    - Three-layer handler: domain (CmasError), validation (Pydantic), catch-all (Exception)
    - application/problem+json media type on every error body
"""

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cmasapp.core.errors import BadRequestError, CmasError, ErrorSeverity, build_problem

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _problem_response(status: HTTPStatus, content: dict) -> JSONResponse:
    return JSONResponse(
        status_code=status.value, content=content, media_type=PROBLEM_MEDIA_TYPE,
    )


def _register_domain_error_handler(app: FastAPI) -> None:
    """Register user-service domain/infrastructure error handler."""

    @app.exception_handler(CmasError)
    async def cmas_error_handler(request: Request, exc: CmasError):
        """Handle all typed service errors."""
        log = logger.error if exc.severity == ErrorSeverity.CRITICAL else logger.warning
        log(
            f"{type(exc).__name__}: {exc.message}",
            extra={
                **exc.log_extra(),
                "path": request.url.path,
                "method": request.method,
            },
        )
        return _problem_response(exc.http_status, exc.to_response())


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle malformed request bodies and path parameters."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"path": request.url.path, "method": request.method, "status": 400},
        )
        problem = _build_validation_error_response(exc)
        return _problem_response(HTTPStatus(problem["status"]), problem)


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return _problem_response(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            build_problem(
                HTTPStatus.INTERNAL_SERVER_ERROR,
                "An unexpected error occurred",
                code="INTERNAL_ERROR",
            ),
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    problem = BadRequestError("Invalid request data").to_response()
    problem["errors"] = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    return problem
