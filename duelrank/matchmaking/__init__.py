"""Matchmaking and Glicko-lite rating engine."""

from duelrank.matchmaking.glicko import RatingEngine, conservative_score, expected_score
from duelrank.matchmaking.models import PairProposal, RankerConfig
from duelrank.matchmaking.pairing import BiasedPairing, PairingStrategy, UniformPairing
from duelrank.matchmaking.selector import PairSelector

__all__ = [
    "PairSelector",
    "RatingEngine",
    "RankerConfig",
    "PairProposal",
    "PairingStrategy",
    "BiasedPairing",
    "UniformPairing",
    "conservative_score",
    "expected_score",
]
