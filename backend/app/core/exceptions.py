"""
Domain errors and safe HTTP error helpers.

Services raise the domain exceptions below; routers translate them with
BusinessError so internal details (SQL errors, stack traces) never reach
the client. Detailed context is logged internally instead.
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class ClinicError(Exception):
    """Base class for domain errors raised by the service layer."""


class InvalidInput(ClinicError, ValueError):
    """Missing or empty required field, or nothing left to prescribe.

    Raised before anything is persisted; safe to show to the caller.
    """


class TransactionFailure(ClinicError):
    """A step inside an atomic save failed and the whole save was rolled back.

    The caller should resubmit the complete operation.
    """


class BusinessError:
    """HTTP exceptions with safe (non-leaky) messages."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        """
        Generic 404.

        Example:
            if not prescription:
                raise BusinessError.not_found("Prescription")
        """
        if reason:
            logger.warning(f"Not found: {resource} - {reason}")

        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """
        400 for input validation errors.

        OK to include specific details here since the caller caused the issue.
        Examples: "name and phone required", "at least one item required"
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """
        Generic 500 - logs actual error internally, hides from user.
        """
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=original_error,
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal error occurred. Please try again later.",
        )
