"""
Subscription tier entitlements for parents.
"""

from typing import Any, Dict, Optional, Union

from klass_hero.models.base.enums import SubscriptionTier
from klass_hero.models.enrollment.enrollment_policy import UNLIMITED

DEFAULT_TIER = SubscriptionTier.EXPLORER

# None means unlimited
TIER_ENTITLEMENTS: Dict[SubscriptionTier, Dict[str, Any]] = {
    SubscriptionTier.EXPLORER: {
        "monthly_booking_cap": 2,
        "free_cancellations_per_month": 0,
    },
    SubscriptionTier.ACTIVE: {
        "monthly_booking_cap": None,
        "free_cancellations_per_month": 1,
    },
}


def resolve_tier(tier: Optional[Union[SubscriptionTier, str]]) -> SubscriptionTier:
    """Map a stored tier to the enum, defaulting to explorer."""
    if tier is None:
        return DEFAULT_TIER
    return SubscriptionTier(tier)


def booking_cap(tier: Optional[Union[SubscriptionTier, str]]) -> Optional[int]:
    """Monthly cap as an int, None when unlimited."""
    return TIER_ENTITLEMENTS[resolve_tier(tier)]["monthly_booking_cap"]


def monthly_booking_cap(tier: Optional[Union[SubscriptionTier, str]]) -> Union[int, str]:
    cap = booking_cap(tier)
    return UNLIMITED if cap is None else cap


def can_create_booking(tier: Optional[Union[SubscriptionTier, str]], current_count: int) -> bool:
    cap = booking_cap(tier)
    return cap is None or current_count < cap


def free_cancellations_per_month(tier: Optional[Union[SubscriptionTier, str]]) -> int:
    return TIER_ENTITLEMENTS[resolve_tier(tier)]["free_cancellations_per_month"]


def parent_tier_info(tier: Optional[Union[SubscriptionTier, str]]) -> Dict[str, Any]:
    resolved = resolve_tier(tier)
    return {
        "tier": resolved.value,
        "monthly_booking_cap": monthly_booking_cap(resolved),
        "free_cancellations_per_month": free_cancellations_per_month(resolved),
    }
