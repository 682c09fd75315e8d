"""
Stripe webhook receiver.
"""

from fastapi import APIRouter, Header, Request

from reliatrack.api.dependencies import DatabaseDep
from reliatrack.services.billing_service import BillingService

router = APIRouter()


@router.post("")
async def stripe_webhook(
    request: Request,
    db: DatabaseDep,
    stripe_signature: str | None = Header(None, alias="Stripe-Signature"),
):
    """
    Verify and apply a Stripe event.

    The signature is checked against the raw body, so the payload must not be
    parsed before verification.
    """
    payload = await request.body()
    service = BillingService(db)
    event = service.verify_event(payload, stripe_signature)
    handled = await service.handle_event(event)
    return {"received": True, "handled": handled}
