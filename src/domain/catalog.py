"""
Catalog - subscription plans, feature credit costs and promotion codes.
"""

from dataclasses import dataclass

from .exceptions import InvalidPromotion, UnknownFeature, UnknownPlan
from .models import CreditGrant


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    credits: int
    price: int
    period: str = "month"

    @property
    def entitlement(self) -> CreditGrant:
        """Credits granted when a subscription to this plan is activated or renewed."""
        return CreditGrant(monthly=self.credits)


PLANS: dict[str, Plan] = {
    plan.id: plan
    for plan in (
        Plan(id="inicial", name="Inicial", credits=100, price=29),
        Plan(id="intermediario", name="Intermediário", credits=500, price=99),
        Plan(id="profissional", name="Profissional", credits=1000, price=179),
    )
}

FEATURE_COSTS: dict[str, int] = {
    "AI_CHAT_MESSAGE": 2,
    "CONTENT_GENERATION": 5,
    "PROGRESS_ANALYSIS": 3,
    "DOCUMENT_UPLOAD": 1,
    "VOICE_SYNTHESIS": 4,
    "EXPORT_DOCUMENT": 2,
    "ADVANCED_ANALYTICS": 10,
}

PROMOTIONS: dict[str, int] = {
    "WELCOME50": 50,
    "BONUS25": 25,
    "FRIEND10": 10,
}


def get_plan(plan_id: str) -> Plan:
    try:
        return PLANS[plan_id]
    except KeyError:
        raise UnknownPlan(plan_id) from None


def feature_cost(feature: str) -> int:
    try:
        return FEATURE_COSTS[feature]
    except KeyError:
        raise UnknownFeature(feature) from None


def promotion_bonus(promo_code: str) -> int:
    try:
        return PROMOTIONS[promo_code]
    except KeyError:
        raise InvalidPromotion(promo_code) from None
