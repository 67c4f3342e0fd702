"""
ListingHub API Response Utilities
Standardized response envelope and error handling
"""
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, Dict, List, Optional
import math

from .logging_config import api_logger
from .services.exceptions import (
    AssetOwnershipError,
    InvalidStateError,
    PostNotFoundError,
    StorageError,
)


# ============================================================
# SUCCESS RESPONSES
# ============================================================

def success(data: Any = None, message: Optional[str] = None) -> Dict:
    """Create success envelope"""
    response: Dict[str, Any] = {"success": True}

    if data is not None:
        response["data"] = data

    if message:
        response["message"] = message

    return response


def paginated(items: List, total: int, page: int = 1, limit: int = 20) -> Dict:
    """Paginated list envelope"""
    return success({
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit) if limit else 0,
    })


# ============================================================
# ERROR RESPONSES
# ============================================================

class ApiException(HTTPException):
    """API exception carrying a machine-readable error code"""

    def __init__(self, status_code: int, message: str, error_code: Optional[str] = None):
        self.error_code = error_code or f"ERR_{status_code}"
        super().__init__(status_code=status_code, detail=message)


def bad_request(message: str, code: str = "BAD_REQUEST"):
    raise ApiException(400, message, code)

def unauthorized(message: str = "Unauthorized"):
    raise ApiException(401, message, "UNAUTHORIZED")

def not_found(message: str = "Resource not found"):
    raise ApiException(404, message, "NOT_FOUND")

def server_error(message: str = "Internal server error"):
    raise ApiException(500, message, "INTERNAL_ERROR")


def error_envelope(status_code: int, message: str, error_code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "error_code": error_code},
    )


# ============================================================
# EXCEPTION HANDLERS
# ============================================================

async def api_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render ApiException / HTTPException as an error envelope"""
    error_code = getattr(exc, "error_code", f"HTTP_{exc.status_code}")
    api_logger.warning(
        f"API Error: {exc.detail}",
        status_code=exc.status_code,
        error_code=error_code,
        path=request.url.path,
    )
    return error_envelope(exc.status_code, str(exc.detail), error_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request validation failures are plain 400s"""
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query"))
        messages.append(f"{location}: {err.get('msg')}" if location else err.get("msg", "Invalid value"))
    message = "; ".join(messages) or "Invalid request"
    api_logger.warning("Validation error", path=request.url.path, detail=message)
    return error_envelope(400, message, "VALIDATION_ERROR")


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map repository/domain errors to HTTP status codes"""
    if isinstance(exc, PostNotFoundError):
        return error_envelope(404, str(exc), "NOT_FOUND")
    if isinstance(exc, (InvalidStateError, AssetOwnershipError)):
        api_logger.warning(f"State conflict: {exc}", path=request.url.path)
        return error_envelope(400, str(exc), "INVALID_STATE")
    if isinstance(exc, StorageError):
        api_logger.error("Storage failure", error=exc, path=request.url.path)
        return error_envelope(500, "Failed to upload files", "STORAGE_ERROR")
    return await unhandled_exception_handler(request, exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unexpected errors: log everything, leak nothing"""
    api_logger.error(
        f"Unexpected error: {exc}",
        error=exc,
        path=request.url.path,
    )
    return error_envelope(500, "An unexpected error occurred", "INTERNAL_ERROR")
