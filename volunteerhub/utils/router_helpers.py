# volunteerhub/utils/router_helpers.py

from fastapi import HTTPException, status
from typing import Callable, Any
from functools import wraps
import logging

from ..services.recurrence_service import RecurrenceError
from ..services.opportunity_service import (
    OpportunityServiceError,
    OpportunityNotFoundError,
    OpportunityConflictError,
    BatchCreateFailedError,
    TagNotFoundError,
)
from ..services.rsvp_service import (
    RSVPServiceError,
    RSVPNotFoundError,
    VolunteerNotFoundError,
    OpportunityFullError,
    RSVPPersistenceError,
)
from ..services.hours_service import (
    HoursServiceError,
    HoursNotFoundError,
    HoursLockedError,
)
from ..services.catalog_service import (
    CatalogServiceError,
    CatalogEntryNotFoundError,
    CatalogConflictError,
)
from .constants import ResponseMessages

logger = logging.getLogger(__name__)


def handle_service_errors(func: Callable) -> Callable:
    """Decorator to standardize service error handling in routers"""

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except (
            OpportunityNotFoundError,
            RSVPNotFoundError,
            VolunteerNotFoundError,
            TagNotFoundError,
            HoursNotFoundError,
            CatalogEntryNotFoundError,
        ) as e:
            logger.warning(f"Resource not found: {str(e)}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

        # Capacity and uniqueness conflicts -> 409 Conflict
        except (OpportunityFullError, OpportunityConflictError, CatalogConflictError) as e:
            logger.warning(f"Conflict: {str(e)}")
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

        except HoursLockedError as e:
            logger.warning(f"Locked record: {str(e)}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

        # Storage failures -> 500, nothing partial was kept
        except (BatchCreateFailedError, RSVPPersistenceError) as e:
            logger.error(f"Persistence failure in {func.__name__}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
            )

        # Invalid rule/window, closed or past opportunity, bad state -> 400
        except (
            RecurrenceError,
            OpportunityServiceError,
            RSVPServiceError,
            HoursServiceError,
            CatalogServiceError,
        ) as e:
            logger.warning(f"Service error: {str(e)}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        except ValueError as e:
            logger.warning(f"Validation error: {str(e)}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        # Unexpected errors -> 500 Internal Server Error
        except Exception as e:
            logger.error(
                f"Unexpected error in {func.__name__}: {str(e)}", exc_info=True
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An unexpected error occurred",
            )

    return wrapper


class RouterResponse:
    """Helper class for creating standardized API responses"""

    @staticmethod
    def success(data: Any = None, message: str = ResponseMessages.SUCCESS) -> dict:
        response = {"success": True, "message": message}
        if data is not None:
            response["data"] = data
        return response

    @staticmethod
    def created(data: Any, message: str = ResponseMessages.CREATED) -> dict:
        return {"success": True, "message": message, "data": data}

    @staticmethod
    def updated(data: Any = None, message: str = ResponseMessages.UPDATED) -> dict:
        response = {"success": True, "message": message}
        if data is not None:
            response["data"] = data
        return response

    @staticmethod
    def deleted(message: str = ResponseMessages.DELETED) -> dict:
        return {"success": True, "message": message}
