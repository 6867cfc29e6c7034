"""Domain exceptions for the order workflow.

Every exception carries the HTTP status it maps to; the application's
exception handler renders them as ``{"detail": message}``.
"""

from typing import List, Optional

from storefront_api.core.validation import FieldViolation, render_violations


class StorefrontError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(StorefrontError):
    """Missing, malformed or invalid bearer credential."""

    status_code = 401
    default_message = "Unauthorised"


class PermissionDeniedError(StorefrontError):
    """Authenticated caller lacks the role or resource assignment."""

    status_code = 403
    default_message = "Forbidden"


class RequestValidationFailed(StorefrontError):
    """Request body or parameters failed structural validation."""

    status_code = 400
    default_message = "Invalid request body"

    def __init__(self, violations: List[FieldViolation]):
        self.violations = violations
        super().__init__(render_violations(violations) or None)


class BadRequestError(StorefrontError):
    """Malformed query or path parameter."""

    status_code = 400
    default_message = "Bad request"


class NotFoundError(StorefrontError):
    """Referenced order, product, store or user does not exist."""

    status_code = 404
    default_message = "Not found"


class BusinessRuleViolation(StorefrontError):
    """Request is well formed but breaks a sale rule (stock, eligibility)."""

    status_code = 400


class InvalidStatusTransition(StorefrontError):
    """Order status change not allowed from the current status."""

    status_code = 409

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move order from {current} to {target}")


class OrderNumberError(StorefrontError):
    """Previous order number could not be parsed."""

    default_message = "Failed to create order number"


class PaymentInitiationError(StorefrontError):
    """Payment gateway did not return a checkout session."""

    default_message = "Payment could not be initiated"


class PersistenceError(StorefrontError):
    """Database write failed inside the order transaction."""

    default_message = "Failed to create order"
