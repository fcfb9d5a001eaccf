"""
Custom exceptions and error handling for the bookshop checkout
"""

import logging
from functools import wraps
from typing import Dict

from telegram import Update
from telegram.ext import ContextTypes

from bookshop.infrastructure.utilities.constants import ErrorCodes

logger = logging.getLogger(__name__)


class BookshopError(Exception):
    """Base exception for the bookshop"""

    def __init__(self, message: str, user_message: str = None, error_code: str = None):
        super().__init__(message)
        self.user_message = user_message or ErrorCodes.GENERIC_ERROR_MESSAGE
        self.error_code = error_code or ErrorCodes.GENERAL_ERROR


class DatabaseError(BookshopError):
    """Database-related errors"""

    def __init__(self, message: str, operation: str = None):
        super().__init__(
            message,
            ErrorCodes.DATABASE_ERROR_MESSAGE,
            ErrorCodes.DATABASE_ERROR,
        )
        self.operation = operation


class ValidationError(BookshopError, ValueError):
    """Input validation errors"""

    def __init__(self, message: str, field: str = None):
        super().__init__(
            message, message, ErrorCodes.VALIDATION_ERROR  # Validation errors are user-friendly
        )
        self.field = field


class AddressValidationError(ValidationError):
    """One or more address fields are malformed"""

    def __init__(self, field_errors: Dict[str, str]):
        summary = "; ".join(f"{name}: {msg}" for name, msg in field_errors.items())
        super().__init__(f"Invalid address: {summary}", field=next(iter(field_errors), None))
        self.field_errors = dict(field_errors)
        self.user_message = "Please fix the highlighted address fields."


class BusinessLogicError(BookshopError):
    """Business rule violations"""

    def __init__(self, message: str, user_message: str = None):
        super().__init__(message, user_message or message, ErrorCodes.BUSINESS_ERROR)


class GuardViolationError(BusinessLogicError):
    """A checkout step was left without its required data"""

    def __init__(self, step_name: str, requirement: str):
        super().__init__(
            f"Cannot leave {step_name} step: {requirement} is required",
            f"Please choose a {requirement} to continue.",
        )
        self.step_name = step_name
        self.requirement = requirement


class EmptyCartError(BusinessLogicError):
    """Cart is empty when checkout requires items"""

    def __init__(self):
        super().__init__(
            "Cart is empty", "Your cart is empty. Please add some books first."
        )


class CouponError(BusinessLogicError):
    """Coupon code is unknown or does not apply"""

    def __init__(self, code: str, reason: str):
        super().__init__(f"Coupon {code!r} rejected: {reason}", reason)
        self.code = code


class SubmissionInProgressError(BusinessLogicError):
    """An order submission is already pending for the session"""

    def __init__(self):
        super().__init__(
            "Order submission already in progress",
            "Your order is being placed. Please wait.",
        )


class SubmissionError(BookshopError):
    """Order API rejected the order or could not be reached"""

    def __init__(self, reason: str, status_code: int | None = None):
        super().__init__(
            f"Order submission failed: {reason}",
            ErrorCodes.SUBMISSION_ERROR_MESSAGE,
            ErrorCodes.SUBMISSION_ERROR,
        )
        self.status_code = status_code
        self.retryable = True


async def handle_error(
    update: Update,
    error: Exception,
    operation: str = "unknown",
) -> None:
    """
    Central error handler for all bot operations
    """
    user_id = update.effective_user.id if update.effective_user else "unknown"

    error_context = {
        "operation": operation,
        "user_id": user_id,
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if isinstance(error, BookshopError):
        logger.warning("Business error in %s: %s", operation, error, extra=error_context)
        message = error.user_message
    else:
        logger.error(
            "Unexpected error in %s: %s",
            operation,
            error,
            extra=error_context,
            exc_info=error,
        )
        message = (
            "Sorry, something went wrong. "
            "Please try again in a few minutes."
        )

    try:
        if update.callback_query:
            await update.callback_query.message.reply_text(message)
        elif update.message:
            await update.message.reply_text(message)
    except (IOError, OSError) as reply_error:
        logger.error("Failed to send error message: %s", reply_error)


def error_handler(operation: str = "unknown"):
    """
    Decorator for handling errors in bot handlers
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(self, update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
            try:
                return await func(self, update, context, *args, **kwargs)
            except BookshopError as e:
                await handle_error(update, e, operation)
                return None

        return wrapper

    return decorator
