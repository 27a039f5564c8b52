"""HTTP error responses shared by the API and redirect routes."""

from fastapi import HTTPException, status

from tinylink.common.logging_config import get_logger

logger = get_logger("web")

RETRY_AFTER_SECONDS = "1"


def internal_error(action: str, error: Exception) -> HTTPException:
    """Log an unexpected failure and hide its detail from the caller."""
    logger.exception(f"Unexpected error while {action}: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal error",
    )


def unavailable(detail: str = "Storage unavailable") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=detail,
        headers={"Retry-After": RETRY_AFTER_SECONDS},
    )
