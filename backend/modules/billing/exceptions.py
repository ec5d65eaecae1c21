"""
Billing module exceptions.

These exceptions are raised by the billing module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from typing import Optional

from shared.exceptions import ModelCompareError, ValidationError


class BillingError(ModelCompareError):
    """Base exception for billing-related errors."""

    pass


class InsufficientCreditsError(BillingError):
    """
    Raised when a user doesn't have enough credits for an operation.

    The UI handles this by prompting the user to purchase more credits.
    """

    status_code = 402

    def __init__(self, required: int, available: int, user_id: Optional[str] = None):
        super().__init__(
            "You have reached your usage limit. Visit your account page to continue.",
            code="INSUFFICIENT_CREDITS",
            details={
                "required": required,
                "credits": available,
                "requires_payment": True,
            },
        )
        if user_id:
            self.details["user_id"] = user_id


class PackageNotFoundError(ValidationError):
    """Raised when a purchase names an unknown credit package."""

    def __init__(self, package_id: str):
        super().__init__(
            f"Invalid credit package ID: {package_id}",
            code="INVALID_PACKAGE",
            details={"package_id": package_id},
        )


class PaymentFailedError(BillingError):
    """Raised when Stripe rejects a payment request."""

    status_code = 502

    def __init__(self, message: str, stripe_error: Optional[str] = None):
        super().__init__(
            message,
            code="PAYMENT_FAILED",
            details={"stripe_error": stripe_error} if stripe_error else {},
        )


class WebhookVerificationError(BillingError):
    """Raised when Stripe webhook signature verification fails."""

    status_code = 400

    def __init__(self, reason: str = "Webhook signature verification failed"):
        super().__init__(reason, code="WEBHOOK_VERIFICATION_FAILED")


class BillingNotConfiguredError(BillingError):
    """Raised when Stripe keys are missing."""

    status_code = 503

    def __init__(self, errors: list[str]):
        super().__init__(
            "Payments are not configured",
            code="BILLING_NOT_CONFIGURED",
            details={"errors": errors},
        )
