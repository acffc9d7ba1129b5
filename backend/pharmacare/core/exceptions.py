"""
Domain exceptions and safe HTTP error mapping.

Services raise the domain exceptions below. Routes translate them with
BusinessError, which keeps internal details in the log and out of responses.
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class PharmacyError(Exception):
    """Base class for expected, user-facing failures."""


class ValidationError(PharmacyError):
    """Malformed or missing input detected before touching the store."""


class NotFoundError(PharmacyError):
    def __init__(self, resource: str, resource_id=None):
        self.resource = resource
        self.resource_id = resource_id
        suffix = f" {resource_id}" if resource_id is not None else ""
        super().__init__(f"{resource}{suffix} not found")


class MedicineNotFoundError(NotFoundError):
    def __init__(self, medicine_id):
        super().__init__("Medicine", medicine_id)


class InsufficientStockError(PharmacyError):
    """Business-rule rejection: the requested quantity is not on hand."""

    def __init__(self, medicine_id, requested: int, available: int | None = None):
        self.medicine_id = medicine_id
        self.requested = requested
        self.available = available
        msg = f"Insufficient stock for medicine {medicine_id}: requested {requested}"
        if available is not None:
            msg += f", available {available}"
        super().__init__(msg)


class DuplicateError(PharmacyError):
    """A unique field (barcode, invoice number, email) is already taken."""


class InvalidStatusTransitionError(PharmacyError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change status from '{current}' to '{requested}'")


class BarcodeNotFoundError(NotFoundError):
    def __init__(self, code: str):
        super().__init__("Barcode", code)


class CartStateError(PharmacyError):
    """Cart operation not allowed in the cart's current state."""


class BusinessError:
    """HTTP exceptions with safe (non-leaky) messages."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        if reason:
            logger.warning(f"Not found: {resource} - {reason}")
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )

    @staticmethod
    def unauthorized(reason: str = "") -> HTTPException:
        """
        Generic 401 for all authentication failures.

        Same response for wrong password and unknown user.
        """
        logger.warning(f"Unauthorized access attempt: {reason}")
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    @staticmethod
    def forbidden(reason: str = "") -> HTTPException:
        logger.warning(f"Forbidden access: {reason}")
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """
        400 for input validation errors.

        Safe to include specifics since the caller caused the issue.
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def conflict(detail: str) -> HTTPException:
        """
        409 for business-rule rejections and unique-field clashes.
        Example: "Insufficient stock for medicine 3: requested 5, available 2"
        """
        logger.info(f"Conflict: {detail}")
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """
        Generic 500 - logs the actual error, hides it from the caller.
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

    @staticmethod
    def from_domain(error: PharmacyError) -> HTTPException:
        """Map a domain exception onto its HTTP response."""
        if isinstance(error, NotFoundError):
            return BusinessError.not_found(error.resource, str(error))
        if isinstance(error, ValidationError):
            return BusinessError.bad_request(str(error))
        if isinstance(error, (InsufficientStockError, DuplicateError,
                              InvalidStatusTransitionError, CartStateError)):
            return BusinessError.conflict(str(error))
        return BusinessError.bad_request(str(error))
