import logging
import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from dreampuff.config import get_settings
from dreampuff.exceptions import (
    AuthenticationError,
    DreampuffError,
    InsufficientStockError,
    NotFoundError,
    SaveInProgressError,
    TransportError,
    ValidationError,
)

logger = logging.getLogger(__name__)

UNAUTHORIZED = "Unauthorized: Invalid or missing API Key."


def require_api_key(authorization: Optional[str] = Header(None)) -> None:
    """
    Dependency enforcing ``Authorization: Bearer <API_KEY>``.

    Every request is rejected while the server has no API key configured.
    """
    api_key = get_settings().API_KEY
    if not api_key:
        logger.error("Authentication failed: API_KEY environment variable is not set.")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED)

    parts = (authorization or "").split(" ")
    if (
        len(parts) != 2
        or parts[0].lower() != "bearer"
        or not secrets.compare_digest(parts[1], api_key)
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED)


_STATUS_BY_ERROR = (
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InsufficientStockError, status.HTTP_409_CONFLICT),
    (SaveInProgressError, status.HTTP_409_CONFLICT),
    (TransportError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def to_http_exception(error: DreampuffError) -> HTTPException:
    """Translate a service-layer error into the matching HTTP response."""
    for error_cls, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_cls):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
