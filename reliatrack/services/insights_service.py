"""
AI insights service backed by xAI Grok models.

Each request costs credits according to the chosen model. Credits are only
deducted after the provider answers.
"""

import json
import time
from datetime import date
from enum import Enum
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reliatrack.models.analysis import FMEAEntry
from reliatrack.models.maintenance import MaintenanceTask
from reliatrack.models.user import User
from reliatrack.services.exceptions import PaymentRequiredError, UpstreamError, ValidationFailed
from reliatrack.services.permissions import build_asset_query, get_user_or_404
from reliatrack.services.risk import is_high_risk
from reliatrack.utils.ai_client import AIClientError, XAIClient
from reliatrack.utils.logging import ServiceLogger

GROK_MODELS: dict[str, dict[str, Any]] = {
    "grok-3-mini": {
        "name": "Grok 3 Mini",
        "credits": 1,
        "description": "Fast answers for routine questions",
    },
    "grok-3": {
        "name": "Grok 3",
        "credits": 3,
        "description": "Balanced reasoning for maintenance planning",
    },
    "grok-4": {
        "name": "Grok 4",
        "credits": 5,
        "description": "Deep analysis of failure data",
    },
}


class AnalysisType(str, Enum):
    PREDICTIVE = "predictive"
    RISK = "risk"
    OPTIMIZATION = "optimization"
    GENERAL = "general"


SYSTEM_PROMPTS = {
    AnalysisType.PREDICTIVE: (
        "You are a reliability engineer. Predict likely failures from the asset "
        "data and recommend when to intervene."
    ),
    AnalysisType.RISK: (
        "You are a reliability engineer. Rank the risks in the FMEA data and "
        "propose mitigations for the highest RPN items first."
    ),
    AnalysisType.OPTIMIZATION: (
        "You are a maintenance planner. Suggest changes to maintenance intervals "
        "and task mix that reduce downtime and cost."
    ),
    AnalysisType.GENERAL: (
        "You are an expert maintenance and reliability assistant for an "
        "industrial maintenance team. Answer concisely and practically."
    ),
}


def list_models() -> list[dict[str, Any]]:
    return [{"id": model_id, **info} for model_id, info in GROK_MODELS.items()]


class InsightsService:
    def __init__(self, session: AsyncSession, client: XAIClient | None = None):
        self.session = session
        self.client = client or XAIClient()
        self.logger = ServiceLogger("ai")

    async def credits(self, user_id: str) -> dict[str, Any]:
        user = await get_user_or_404(self.session, user_id)
        return {
            "credits": user.ai_credits,
            "subscription_tier": user.subscription_tier.value,
        }

    async def build_context(self, user: User, today: date | None = None) -> dict[str, Any]:
        """Summarize the user's scoped assets for the prompt."""
        today = today or date.today()
        assets = (await self.session.execute(
            await build_asset_query(self.session, user.id)
        )).scalars().all()
        ids = [asset.id for asset in assets]
        names = {asset.id: asset.name for asset in assets}

        fmea: list[FMEAEntry] = []
        tasks: list[MaintenanceTask] = []
        if ids:
            fmea = list((await self.session.execute(
                select(FMEAEntry).where(FMEAEntry.asset_id.in_(ids))
            )).scalars().all())
            tasks = list((await self.session.execute(
                select(MaintenanceTask).where(MaintenanceTask.asset_id.in_(ids))
            )).scalars().all())

        conditions: dict[str, int] = {}
        for asset in assets:
            conditions[asset.condition.value] = conditions.get(asset.condition.value, 0) + 1

        return {
            "asset_count": len(assets),
            "conditions": conditions,
            "assets": [
                {
                    "name": asset.name,
                    "type": asset.type,
                    "status": asset.status.value,
                    "condition": asset.condition.value,
                    "age": asset.age(today),
                }
                for asset in assets[:25]
            ],
            "high_risk_fmea": [
                {
                    "asset": names.get(entry.asset_id),
                    "component": entry.component,
                    "failure_mode": entry.failure_mode,
                    "rpn": entry.rpn,
                }
                for entry in sorted(fmea, key=lambda e: e.rpn, reverse=True)
                if is_high_risk(entry.rpn)
            ][:10],
            "overdue_tasks": [
                {
                    "asset": names.get(task.asset_id),
                    "description": task.description,
                    "next_due": task.next_due.isoformat() if task.next_due else None,
                }
                for task in tasks
                if task.overdue_on(today)
            ][:10],
        }

    async def generate(
        self,
        user_id: str,
        query: str,
        analysis_type: AnalysisType = AnalysisType.GENERAL,
        model: str = "grok-3-mini",
        include_data: bool = True,
    ) -> dict[str, Any]:
        """
        Ask the model and charge the user.

        Raises:
            ValidationFailed: Unknown model
            PaymentRequiredError: Not enough credits
            UpstreamError: Provider failure (no credits charged)
        """
        if model not in GROK_MODELS:
            raise ValidationFailed.for_field("model", f"Unknown model '{model}'")
        cost = GROK_MODELS[model]["credits"]

        user = await get_user_or_404(self.session, user_id)
        if user.ai_credits < cost:
            raise PaymentRequiredError(
                f"Insufficient credits: {model} needs {cost}, you have {user.ai_credits}"
            )

        prompt = query
        if include_data:
            context = await self.build_context(user)
            prompt = (
                f"{query}\n\nMaintenance data (JSON):\n"
                f"{json.dumps(context, indent=2, default=str)}"
            )

        started = time.monotonic()
        self.logger.log_operation_start(
            "generate_insight", user_id=user_id, model=model, analysis_type=analysis_type.value
        )
        try:
            result = await self.client.chat(SYSTEM_PROMPTS[analysis_type], prompt, model=model)
        except AIClientError as exc:
            self.logger.log_operation_failed("generate_insight", exc, user_id=user_id)
            raise UpstreamError("AI service is unavailable, no credits were charged") from exc

        user.ai_credits -= cost
        await self.session.flush()

        self.logger.log_operation_complete(
            "generate_insight",
            user_id=user_id,
            duration_ms=(time.monotonic() - started) * 1000,
            credits_used=cost,
        )
        return {
            "insight": result["content"],
            "model": model,
            "analysis_type": analysis_type.value,
            "credits_used": cost,
            "credits_remaining": user.ai_credits,
            "usage": result.get("usage", {}),
        }
