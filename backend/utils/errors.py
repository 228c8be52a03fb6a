from fastapi import HTTPException, status
from services.record_store import (
    RenewalDeskError, FetchFailed, WriteFailed, OwnerMissingFailure, InvalidReference
)
import logging

logger = logging.getLogger(__name__)


def store_error_response(error: RenewalDeskError, detail: str) -> HTTPException:
    """Map a record/reminder failure onto the HTTP error a route returns.

    ``detail`` is the user-facing message for fetch and write failures;
    the driver error itself only goes to the log.
    """
    if isinstance(error, OwnerMissingFailure):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    if isinstance(error, InvalidReference):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, (FetchFailed, WriteFailed)):
        logger.error(f"{detail}: {error}")
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
    logger.error(f"Unhandled renewal desk error: {error}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
