"""
JSON error shapes.

The frontend expects errors as a flat object: { "error": "...", ...extra }.
FastAPI's default { "detail": ... } shape is not used by this API.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error rendered as a JSON response with the given status code."""

    def __init__(self, status_code: int, error: str, **extra: Any) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, **self.extra}


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed input is a client error; keep it in the same flat shape.
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    logger.info("request_validation_failed: path=%s errors=%s", request.url.path, details)
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


# PUBLIC_INTERFACE
def register_error_handlers(app: FastAPI) -> None:
    """Install the ApiError and request-validation handlers on an app."""
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
