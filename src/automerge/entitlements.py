"""Plan entitlements — the narrow capability check the engine is allowed to make.

Subscription state lives behind an injected ``SubscriptionStore``; the
engine only ever asks ``Entitlements.has_feature``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

AI_ANALYSIS = "ai_analysis"


@dataclass(frozen=True)
class Plan:
    name: str
    description: str
    max_repos: int  # -1 = unlimited
    features: FrozenSet[str]


PLANS: Dict[str, Plan] = {
    "free": Plan(
        name="Free",
        description="1 repo, basic automerge rules",
        max_repos=1,
        features=frozenset({"basic_rules", "single_repo"}),
    ),
    "pro": Plan(
        name="Pro",
        description="Unlimited repos, advanced rules, compliance checks",
        max_repos=-1,
        features=frozenset({"unlimited_repos", "advanced_rules", "compliance_checks", AI_ANALYSIS}),
    ),
    "enterprise": Plan(
        name="Enterprise",
        description="Unlimited repos + priority support & custom merge policies",
        max_repos=-1,
        features=frozenset({
            "unlimited_repos", "advanced_rules", "compliance_checks", AI_ANALYSIS,
            "priority_support", "custom_policies",
        }),
    ),
}


@dataclass
class Subscription:
    account_id: str
    plan: str  # key into PLANS
    status: str = "active"  # active | cancelled


class SubscriptionStore(ABC):
    @abstractmethod
    def get(self, account_id: str) -> Optional[Subscription]: ...

    @abstractmethod
    def put(self, subscription: Subscription) -> None: ...


class InMemorySubscriptionStore(SubscriptionStore):
    def __init__(self) -> None:
        self._subscriptions: Dict[str, Subscription] = {}

    def get(self, account_id: str) -> Optional[Subscription]:
        return self._subscriptions.get(str(account_id))

    def put(self, subscription: Subscription) -> None:
        self._subscriptions[str(subscription.account_id)] = subscription


class Entitlements:
    """Answer feature questions for an account from the injected store."""

    def __init__(self, store: SubscriptionStore) -> None:
        self._store = store

    def plan_for(self, account_id: str) -> Plan:
        sub = self._store.get(str(account_id))
        if sub is None or sub.status == "cancelled":
            return PLANS["free"]
        return PLANS.get(sub.plan.lower(), PLANS["free"])

    def has_feature(self, account_id: str, feature: str) -> bool:
        return feature in self.plan_for(account_id).features
