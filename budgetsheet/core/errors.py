from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

logger = logging.getLogger("budgetsheet.errors")


class BudgetSheetError(Exception):
    """Base class for errors rendered as JSON error payloads."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail


class ValidationError(BudgetSheetError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class UnsupportedCurrencyError(ValidationError):
    code = "unsupported_currency"


class ProtectedCategoryError(ValidationError):
    code = "protected_category"


class AuthError(BudgetSheetError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "auth_required"


class InvalidTokenError(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "invalid_token"


class NotFoundError(BudgetSheetError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class PersistenceError(BudgetSheetError):
    """Upstream spreadsheet store failed. The detail is logged, never returned."""

    code = "persistence_error"


def budgetsheet_error_handler(request: Request, exc: BudgetSheetError):  # type: ignore
    if isinstance(exc, PersistenceError):
        logger.error(
            "persistence failure on %s %s: %s",
            request.method,
            request.url.path,
            exc.detail,
        )
        detail = "The spreadsheet store is unavailable. Please try again later."
    else:
        detail = exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": detail},
    )


def http_error_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "error": "not_found",
                "detail": f"No route for {request.method} {request.url.path}",
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "http_error", "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "validation_error",
            "detail": [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
                for e in exc.errors()
            ],
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
