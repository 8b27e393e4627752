"""Default feature gate: every feature enabled for every tenant.

Billing replaces this with a plan-aware IFeatureGate.
"""


class AllowAllFeatureGate:
    async def is_enabled(self, tenant_id: str, feature: str) -> bool:
        return True
