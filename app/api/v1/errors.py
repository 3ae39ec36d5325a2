"""Translation of domain errors into HTTP responses."""

import logging

from fastapi import HTTPException

from app.domain.accounting.exceptions import AccountingError

logger = logging.getLogger(__name__)


def http_error(error: AccountingError) -> HTTPException:
    """Build the HTTPException for a rejected domain operation."""
    if error.status_code >= 500:
        logger.error(f"{error.code}: {error.message}")
    return HTTPException(status_code=error.status_code, detail=error.to_dict())
