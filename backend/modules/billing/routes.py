"""
Stripe credit purchase endpoints.
"""

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from api.dependencies import get_billing_service
from api.middleware.auth import get_account
from modules.auth.models import User

from .exceptions import (
    BillingNotConfiguredError,
    PackageNotFoundError,
    PaymentFailedError,
    WebhookVerificationError,
)
from .interfaces import IBillingService
from .models import (
    PackagesResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
    WebhookResult,
)

router = APIRouter()


@router.get("/packages", response_model=PackagesResponse)
async def list_packages(
    billing: IBillingService = Depends(get_billing_service),
) -> PackagesResponse:
    """Credit packages available for purchase."""
    return PackagesResponse(packages=billing.get_packages())


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    request: PaymentIntentRequest,
    account: User = Depends(get_account),
    billing: IBillingService = Depends(get_billing_service),
) -> PaymentIntentResponse:
    """Start a Stripe payment for a credit package."""
    if not request.package_id:
        raise HTTPException(status_code=400, detail="Package ID is required")
    try:
        return billing.create_payment_intent(account, request.package_id)
    except PackageNotFoundError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except BillingNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=e.message)
    except PaymentFailedError as e:
        raise HTTPException(status_code=502, detail=e.message)


@router.post("/webhook", response_model=WebhookResult)
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(default=""),
    billing: IBillingService = Depends(get_billing_service),
) -> WebhookResult:
    """Verify a Stripe event against the raw body and fulfil paid intents."""
    if not stripe_signature:
        raise HTTPException(status_code=400, detail="Missing stripe-signature header")

    payload = await request.body()
    try:
        return billing.handle_webhook(payload, stripe_signature)
    except WebhookVerificationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except BillingNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=e.message)
