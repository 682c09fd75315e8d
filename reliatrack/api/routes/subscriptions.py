"""
Subscription checkout routes.
"""

from fastapi import APIRouter
from pydantic import BaseModel, EmailStr

from reliatrack.models.user import SubscriptionTier
from reliatrack.services.billing_service import BillingService

router = APIRouter()


class CheckoutRequest(BaseModel):
    price_id: str
    email: EmailStr
    plan: SubscriptionTier | None = None


class CheckoutResponse(BaseModel):
    url: str


@router.post("/create-checkout-session", response_model=CheckoutResponse)
async def create_checkout_session(body: CheckoutRequest):
    """Start a Stripe Checkout subscription with a free trial."""
    url = await BillingService().create_checkout_session(
        body.price_id,
        body.email,
        plan=body.plan.value if body.plan else None,
    )
    return CheckoutResponse(url=url)
