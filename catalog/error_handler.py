"""Error taxonomy and request-boundary handlers for the catalog API."""
from typing import Any, Dict, List, Optional
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Framework-raised errors (unknown route, wrong method, ...)
_HTTP_ERROR_CODES = {404: "not_found", 405: "method_not_allowed"}


class CatalogError(Exception):
    """Base class for every error answered at the request boundary."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class PayloadValidationError(CatalogError):
    """Malformed or missing input fields."""

    status_code = 400
    code = "validation_error"

    def __init__(self, errors: List[Dict[str, Any]], message: str = "Invalid request body") -> None:
        super().__init__(message, details=errors)
        self.errors = errors


class InvalidIdentifierError(CatalogError):
    """An identifier (path or reference list) is not in the store's format."""

    status_code = 400
    code = "invalid_identifier"

    def __init__(self, raw: Any, field: Optional[str] = None) -> None:
        where = f" in {field}" if field else ""
        super().__init__(f"Invalid identifier{where}: {raw!r}", details={"value": raw, "field": field})
        self.raw = raw
        self.field = field


class NotFoundError(CatalogError):
    status_code = 404
    code = "not_found"

    def __init__(self, entity: str, identifier: str) -> None:
        super().__init__(f"{entity} not found", details={"id": identifier})
        self.entity = entity
        self.identifier = identifier


class StoreError(CatalogError):
    """Adapter-level failure: connectivity or an unexpected store fault."""

    status_code = 500
    code = "store_error"


class ErrorHandler:
    def to_payload(self, exc: Exception) -> Dict[str, Any]:
        if isinstance(exc, CatalogError):
            payload: Dict[str, Any] = {"error": exc.code, "message": exc.message}
            if exc.details is not None:
                payload["details"] = exc.details
            return payload
        if isinstance(exc, StarletteHTTPException):
            return {"error": _HTTP_ERROR_CODES.get(exc.status_code, "http_error"), "message": exc.detail}
        return {
            "error": "internal_error",
            "message": "An internal error occurred while processing your request.",
            "details": str(exc),
        }

    def to_response(self, exc: Exception, context: Dict[str, Any] = None) -> JSONResponse:
        status_code = exc.status_code if isinstance(exc, (CatalogError, StarletteHTTPException)) else 500
        if status_code >= 500:
            logger.error("Request failed (%s): %s", context or {}, exc, exc_info=True)
        else:
            logger.warning("Request rejected with %d (%s): %s", status_code, context or {}, exc)
        headers = getattr(exc, "headers", None) if isinstance(exc, StarletteHTTPException) else None
        return JSONResponse(status_code=status_code, content=self.to_payload(exc), headers=headers)


def register_error_handlers(app: FastAPI, handler: Optional[ErrorHandler] = None) -> None:
    """Answer every CatalogError (and anything unexpected) with a JSON body carrying ``error``."""
    handler = handler or ErrorHandler()

    async def _handle(request: Request, exc: Exception) -> JSONResponse:
        return handler.to_response(exc, context={"method": request.method, "path": request.url.path})

    app.add_exception_handler(CatalogError, _handle)
    app.add_exception_handler(StarletteHTTPException, _handle)
    app.add_exception_handler(Exception, _handle)
