"""
Billing service implementation.

Credits live on the user record; Stripe PaymentIntents sell credit
packages and the ``payment_intent.succeeded`` webhook fulfils them.
"""

import logging
from typing import Optional

import stripe

from modules.auth.interfaces import IUserRepository
from modules.auth.models import User
from shared.config import Settings, get_settings

from .exceptions import (
    BillingNotConfiguredError,
    InsufficientCreditsError,
    PackageNotFoundError,
    PaymentFailedError,
    WebhookVerificationError,
)
from .interfaces import IBillingService
from .models import (
    CREDIT_PACKAGES,
    CreditPackage,
    PaymentIntentResponse,
    StripeConfigStatus,
    WebhookResult,
)

logger = logging.getLogger(__name__)


def get_package(package_id: str) -> CreditPackage:
    for package in CREDIT_PACKAGES:
        if package.id == package_id:
            return package
    raise PackageNotFoundError(package_id)


def validate_stripe_config(settings: Optional[Settings] = None) -> StripeConfigStatus:
    """Check that both Stripe secrets are present and look like Stripe keys."""
    settings = settings or get_settings()
    errors: list[str] = []

    if not settings.stripe_secret_key:
        errors.append("STRIPE_SECRET_KEY environment variable is not set")
    elif not settings.stripe_secret_key.startswith("sk_"):
        errors.append("STRIPE_SECRET_KEY does not appear to be a valid Stripe secret key")

    if not settings.stripe_webhook_secret:
        errors.append("STRIPE_WEBHOOK_SECRET environment variable is not set")

    return StripeConfigStatus(is_valid=not errors, errors=errors)


class BillingService(IBillingService):
    """Billing backed by the user repository and the Stripe API."""

    def __init__(self, users: IUserRepository, settings: Optional[Settings] = None):
        self._users = users
        self._settings = settings or get_settings()

    def get_packages(self) -> list[CreditPackage]:
        return list(CREDIT_PACKAGES)

    # ------------------------------------------------------------------
    # Credits
    # ------------------------------------------------------------------

    def require_credits(self, user: User, minimum: Optional[int] = None) -> None:
        if not self._settings.enable_billing:
            return
        required = minimum if minimum is not None else self._settings.credits_per_call
        if user.credits < required:
            logger.info("User %s blocked: %s credits, needs %s", user.id, user.credits, required)
            raise InsufficientCreditsError(required, user.credits, user.id)

    def charge_successful_calls(self, user: User, successful_calls: int) -> Optional[User]:
        if not self._settings.enable_billing or successful_calls <= 0:
            return None
        amount = successful_calls * self._settings.credits_per_call
        updated = self._users.adjust_credits(user.id, -amount)
        logger.info(
            "Deducted %s credits from %s for %s successful calls (balance %s)",
            amount,
            user.id,
            successful_calls,
            updated.credits,
        )
        return updated

    def add_credits(self, user_id: str, credits: int) -> User:
        return self._users.adjust_credits(user_id, credits)

    # ------------------------------------------------------------------
    # Stripe
    # ------------------------------------------------------------------

    def validate_stripe_config(self) -> StripeConfigStatus:
        return validate_stripe_config(self._settings)

    def create_payment_intent(self, user: User, package_id: str) -> PaymentIntentResponse:
        package = get_package(package_id)
        if not self._settings.stripe_secret_key:
            raise BillingNotConfiguredError(["STRIPE_SECRET_KEY environment variable is not set"])

        try:
            intent = stripe.PaymentIntent.create(
                api_key=self._settings.stripe_secret_key,
                amount=package.price,
                currency="usd",
                automatic_payment_methods={"enabled": True},
                metadata={
                    "user_id": user.id,
                    "package_id": package.id,
                    "credits": str(package.credits),
                    "user_email": user.email or "",
                },
                description=f"{package.name} - {package.credits} credits",
            )
        except stripe.StripeError as e:
            logger.error("Failed to create payment intent for %s: %s", user.id, e)
            raise PaymentFailedError("Failed to create payment intent", str(e)) from e

        logger.info("Created payment intent for %s: %s (%s credits)", user.id, package.name, package.credits)
        return PaymentIntentResponse(client_secret=intent["client_secret"], package_info=package)

    def handle_webhook(self, payload: bytes, signature: str) -> WebhookResult:
        if not self._settings.stripe_webhook_secret:
            raise BillingNotConfiguredError(["STRIPE_WEBHOOK_SECRET environment variable is not set"])

        try:
            event = stripe.Webhook.construct_event(
                payload, signature, self._settings.stripe_webhook_secret
            )
        except stripe.SignatureVerificationError as e:
            logger.warning("Rejected Stripe webhook: %s", e)
            raise WebhookVerificationError() from e
        except ValueError as e:
            raise WebhookVerificationError("Invalid webhook payload") from e

        event_type = event["type"]
        logger.info("Received Stripe webhook: %s", event_type)
        intent = event["data"]["object"]
        metadata = dict(intent["metadata"]) if "metadata" in intent and intent["metadata"] else {}

        if event_type == "payment_intent.succeeded":
            user_id = metadata.get("user_id")
            credits = metadata.get("credits")
            if not user_id or not credits:
                raise WebhookVerificationError("Missing required metadata in payment intent")

            intent_id = intent["id"] if "id" in intent else None
            if not intent_id:
                raise WebhookVerificationError("Missing payment intent id")

            user = self._users.grant_purchase_credits(intent_id, user_id, int(credits))
            if user is None:
                logger.info("Payment intent %s already fulfilled, skipping", intent_id)
                return WebhookResult(message="Payment already processed")
            logger.info("Added %s credits to %s (balance %s)", credits, user_id, user.credits)
            return WebhookResult(message=f"Added {credits} credits to user account")

        if event_type == "payment_intent.payment_failed":
            logger.error("Payment failed for user %s", metadata.get("user_id"))
            return WebhookResult(message="Payment failure logged")

        return WebhookResult(message=f"Webhook processed: {event_type}")
