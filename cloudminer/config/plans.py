"""
Single source of truth for mining plan (tier) configuration.

The plan table is static and ordered by level. Level 0 is the free tier
and has no entry in the table.
"""

from decimal import Decimal
from typing import NamedTuple


class PlanConfig(NamedTuple):
    """Configuration of a purchasable mining plan."""

    level: int
    name: str
    cost: Decimal  # Price in primary currency
    daily_return_percent: Decimal  # Percent of cost paid per collection

    @property
    def daily_yield(self) -> Decimal:
        """Primary-currency amount credited per yield collection."""
        return self.cost * self.daily_return_percent / Decimal("100")


FREE_TIER = 0

PLAN_TABLE: tuple[PlanConfig, ...] = (
    PlanConfig(
        level=1,
        name="Starter Node",
        cost=Decimal("10"),
        daily_return_percent=Decimal("10"),
    ),
    PlanConfig(
        level=2,
        name="Advanced Rig",
        cost=Decimal("15"),
        daily_return_percent=Decimal("10"),
    ),
    PlanConfig(
        level=3,
        name="Pro Farm",
        cost=Decimal("30"),
        daily_return_percent=Decimal("10"),
    ),
    PlanConfig(
        level=4,
        name="Enterprise Cluster",
        cost=Decimal("50"),
        daily_return_percent=Decimal("10"),
    ),
    PlanConfig(
        level=5,
        name="Quantum Core",
        cost=Decimal("100"),
        daily_return_percent=Decimal("10"),
    ),
)

_PLANS_BY_LEVEL: dict[int, PlanConfig] = {plan.level: plan for plan in PLAN_TABLE}


def get_plan(level: int) -> PlanConfig | None:
    """
    Get plan configuration by level.

    Args:
        level: Plan level (1-5)

    Returns:
        Plan configuration or None if the level has no table entry
    """
    return _PLANS_BY_LEVEL.get(level)


def is_known_tier(level: int) -> bool:
    """Return True for the free tier or any level present in the table."""
    return level == FREE_TIER or level in _PLANS_BY_LEVEL


def get_max_level() -> int:
    """Get the highest purchasable level."""
    return PLAN_TABLE[-1].level
