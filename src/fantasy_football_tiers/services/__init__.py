"""Tier orchestration and the async tier request service."""

from fantasy_football_tiers.services.tier_orchestrator import TierOrchestrator, classify_input, default_strategies
from fantasy_football_tiers.services.tier_service import TierOptions, TierService, validate_tier_options

__all__ = [
    "TierOptions",
    "TierOrchestrator",
    "TierService",
    "classify_input",
    "default_strategies",
    "validate_tier_options",
]
