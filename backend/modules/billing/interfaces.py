"""
Billing module interface.

Other modules depend on IBillingService to check and deduct credits
without knowing about Stripe.
"""

from typing import Optional, Protocol, runtime_checkable

from modules.auth.models import User

from .models import (
    CreditPackage,
    PaymentIntentResponse,
    StripeConfigStatus,
    WebhookResult,
)


@runtime_checkable
class IBillingService(Protocol):
    """Interface for credit and payment operations."""

    def get_packages(self) -> list[CreditPackage]:
        ...

    def require_credits(self, user: User, minimum: Optional[int] = None) -> None:
        """
        Fail fast when a user cannot afford one model call.

        Does not reserve anything; deduction happens after the calls succeed.

        Raises:
            InsufficientCreditsError: Balance below ``minimum`` (one call's
                cost by default)
        """
        ...

    def charge_successful_calls(self, user: User, successful_calls: int) -> Optional[User]:
        """
        Deduct the per-call charge for each successful call.

        Returns the updated user, or None when nothing was charged.
        """
        ...

    def add_credits(self, user_id: str, credits: int) -> User:
        ...

    def create_payment_intent(self, user: User, package_id: str) -> PaymentIntentResponse:
        """
        Raises:
            PackageNotFoundError: Unknown package
            BillingNotConfiguredError: Stripe keys missing
            PaymentFailedError: Stripe rejected the request
        """
        ...

    def handle_webhook(self, payload: bytes, signature: str) -> WebhookResult:
        """
        Verify and process one Stripe event.

        Raises:
            WebhookVerificationError: Bad signature or payload
        """
        ...

    def validate_stripe_config(self) -> StripeConfigStatus:
        ...
