"""
Billing module.

Handles credit balances, Stripe payment intents and webhook fulfilment.

Public API:
- IBillingService: Interface for billing operations
- CreditPackage / CREDIT_PACKAGES: Purchasable credit bundles
- validate_stripe_config: Startup check for Stripe secrets
- Billing exceptions: InsufficientCreditsError, etc.
"""

from .interfaces import IBillingService
from .models import (
    CREDIT_PACKAGES,
    CreditPackage,
    PaymentIntentRequest,
    PaymentIntentResponse,
    StripeConfigStatus,
    WebhookResult,
)
from .exceptions import (
    BillingError,
    BillingNotConfiguredError,
    InsufficientCreditsError,
    PackageNotFoundError,
    PaymentFailedError,
    WebhookVerificationError,
)
from .service import get_package, validate_stripe_config

__all__ = [
    # Interface
    "IBillingService",
    # Models
    "CREDIT_PACKAGES",
    "CreditPackage",
    "PaymentIntentRequest",
    "PaymentIntentResponse",
    "StripeConfigStatus",
    "WebhookResult",
    "get_package",
    "validate_stripe_config",
    # Exceptions
    "BillingError",
    "BillingNotConfiguredError",
    "InsufficientCreditsError",
    "PackageNotFoundError",
    "PaymentFailedError",
    "WebhookVerificationError",
]
