"""
Provider directory: proximity search, listings, claims and paid tiers.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reliatrack.models.provider import Provider, ProviderTier, ServiceCategory
from reliatrack.services.billing_service import BillingService
from reliatrack.services.exceptions import ForbiddenError, NotFoundError, ValidationFailed
from reliatrack.services.geo import filter_within_radius
from reliatrack.utils.logging import ServiceLogger, audit_logger

# Tie-break for providers at the same distance
TIER_RANK = {
    ProviderTier.PROMOTED: 0,
    ProviderTier.CONTACT: 1,
    ProviderTier.VERIFIED: 2,
    ProviderTier.NONE: 3,
}


class ProviderService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.logger = ServiceLogger("providers")

    async def search(
        self,
        lat: float,
        lng: float,
        radius: float,
        service_type: ServiceCategory | None = None,
        limit: int = 10,
    ) -> list[tuple[Provider, float]]:
        """
        Providers that serve (lat, lng), nearest first.

        Every stored provider is scanned; see ``filter_within_radius`` for the
        inclusion rule.
        """
        query = select(Provider)
        if service_type is not None:
            query = query.where(Provider.service_type == service_type)
        providers = (await self.session.execute(query)).scalars().all()

        matches = filter_within_radius(lat, lng, providers, radius)
        matches.sort(key=lambda pair: (pair[1], TIER_RANK[pair[0].subscription_tier]))

        self.logger.log_operation_complete(
            "search",
            lat=lat,
            lng=lng,
            radius=radius,
            scanned=len(providers),
            matched=len(matches),
        )
        return matches[:limit]

    async def get(self, provider_id: str) -> Provider:
        provider = await self.session.get(Provider, provider_id)
        if provider is None:
            raise NotFoundError("Provider not found")
        return provider

    async def register(self, owner_id: str | None, values: dict[str, Any]) -> Provider:
        place_id = values.get("place_id")
        if place_id:
            existing = await self.session.execute(
                select(Provider.id).where(Provider.place_id == place_id)
            )
            if existing.scalar_one_or_none():
                raise ValidationFailed.for_field("place_id", "Provider already listed")

        provider = Provider(owner_id=owner_id, **values)
        self.session.add(provider)
        await self.session.flush()
        return provider

    async def claim(self, user_id: str, provider_id: str, business_license: str) -> Provider:
        """
        Mark a listing verified and hand it to the claiming user.

        Only unowned listings, or the caller's own, can be claimed.
        """
        if not business_license.strip():
            raise ValidationFailed.for_field("business_license", "Business license is required")

        provider = await self.get(provider_id)
        if provider.owner_id is not None and provider.owner_id != user_id:
            raise ForbiddenError("This listing has already been claimed")
        provider.verified = True
        provider.business_license = business_license.strip()
        provider.owner_id = user_id
        if provider.subscription_tier == ProviderTier.NONE:
            provider.subscription_tier = ProviderTier.VERIFIED
        await self.session.flush()

        audit_logger.log_action(
            action="claim",
            user_id=user_id,
            organization_id=None,
            resource_type="provider",
            resource_id=provider.id,
        )
        return provider

    async def subscribe(
        self,
        user_id: str,
        provider_id: str,
        email: str,
        tier: ProviderTier,
    ) -> dict[str, Any]:
        if tier == ProviderTier.NONE:
            raise ValidationFailed.for_field("tier", "Choose verified, contact or promoted")

        provider = await self.get(provider_id)
        if provider.owner_id != user_id:
            raise ForbiddenError("Only the listing owner can subscribe it")
        billing = BillingService(self.session)
        result = await billing.create_provider_subscription(provider, email, tier)

        provider.stripe_customer_id = result["customer_id"]
        provider.stripe_subscription_id = result["subscription_id"]
        provider.subscription_tier = tier
        await self.session.flush()

        audit_logger.log_billing_event(
            "provider_subscription_created",
            None,
            user_id=user_id,
            provider_id=provider.id,
            tier=tier.value,
        )
        return {"provider": provider, **result}
