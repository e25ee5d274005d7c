"""
Error code catalogue.

Codes follow CATEGORY_SUBCATEGORY naming with a numeric code per category.
PAGE (3xxx) covers pages, page templates, block types and content documents.
"""
from dataclasses import dataclass

from fastapi import HTTPException


@dataclass(frozen=True)
class ErrorInfo:
    code: str
    message: str
    status: int


class ErrorCodes:
    PAGE_NOT_FOUND = ErrorInfo("E3001", "Page not found", 404)
    PAGE_SLUG_TAKEN = ErrorInfo("E3002", "Slug is already in use", 409)
    PAGE_TEMPLATE_NOT_FOUND = ErrorInfo("E3007", "Page template not found", 404)
    PAGE_BLOCK_INVALID = ErrorInfo("E3008", "Invalid content block", 400)
    PAGE_CONTENT_TOO_LARGE = ErrorInfo("E3009", "Page content is too large", 413)
    PAGE_BLOCK_TYPE_NOT_FOUND = ErrorInfo("E3010", "Block type not found", 404)


def error_detail(error: ErrorInfo, message: str | None = None, **extra) -> dict:
    """Build the `detail` body returned to API callers for a catalogued error."""
    detail = {"code": error.code, "message": message or error.message}
    detail.update(extra)
    return detail


def http_error(error: ErrorInfo, message: str | None = None, **extra) -> HTTPException:
    return HTTPException(status_code=error.status, detail=error_detail(error, message, **extra))


class ContentValidationError(ValueError):
    """A content document violates the structural rules of the block engine."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")

    def to_http(self) -> HTTPException:
        return http_error(ErrorCodes.PAGE_BLOCK_INVALID, self.message, path=self.path)
