from fantasy_football_tiers.clustering.gmm import GaussianMixtureModel, GaussianMixtureStrategy
from fantasy_football_tiers.clustering.protocol import TierStrategy
from fantasy_football_tiers.clustering.rank_gap import RankGapStrategy
from fantasy_football_tiers.clustering.value_drop import ValueDropStrategy

__all__ = [
    "GaussianMixtureModel",
    "GaussianMixtureStrategy",
    "RankGapStrategy",
    "TierStrategy",
    "ValueDropStrategy",
]
