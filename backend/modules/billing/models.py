"""
Billing module data models.

Credits are whole units; 5 are charged per successful model call.
Package prices are stored in cents, the unit Stripe expects.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, computed_field


class CreditPackage(BaseModel):
    """A purchasable bundle of credits."""

    id: str = Field(..., description="Package ID sent back by the client")
    name: str = Field(..., description="Display name")
    credits: int = Field(..., gt=0, description="Credits granted")
    price: int = Field(..., gt=0, description="Price in US cents")
    description: str = ""
    popular: bool = Field(default=False, description="Whether to highlight this package")

    @computed_field
    @property
    def price_usd(self) -> Decimal:
        return (Decimal(self.price) / 100).quantize(Decimal("0.01"))


CREDIT_PACKAGES: list[CreditPackage] = [
    CreditPackage(
        id="credits_100",
        name="Starter Pack",
        credits=100,
        price=499,
        description="100 credits - Perfect for trying out different models",
    ),
    CreditPackage(
        id="credits_500",
        name="Popular Pack",
        credits=500,
        price=1999,
        description="500 credits - Best value for regular users",
        popular=True,
    ),
    CreditPackage(
        id="credits_1000",
        name="Power Pack",
        credits=1000,
        price=3499,
        description="1000 credits - For heavy users and teams",
    ),
    CreditPackage(
        id="credits_2500",
        name="Enterprise Pack",
        credits=2500,
        price=7999,
        description="2500 credits - Maximum value for enterprises",
    ),
]


class PackagesResponse(BaseModel):
    packages: list[CreditPackage]


class PaymentIntentRequest(BaseModel):
    """Request to start a credit purchase."""

    package_id: Optional[str] = Field(None, description="Credit package ID to purchase")


class PaymentIntentResponse(BaseModel):
    client_secret: str
    package_info: CreditPackage


class WebhookResult(BaseModel):
    """Outcome of processing one Stripe event."""

    received: bool = True
    message: str


class StripeConfigStatus(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
