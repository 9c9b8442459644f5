"""Pairing strategies for pairwise comparisons."""

import random
from typing import Protocol

from duelrank.matchmaking.models import PairProposal, RankerConfig
from duelrank.stores import CandidateSource


class PairingStrategy(Protocol):
    """Protocol for pairing strategies."""

    async def propose(
        self,
        source: CandidateSource,
        config: RankerConfig,
        rng: random.Random,
    ) -> PairProposal | None:
        """Propose two entity ids to compare.

        Args:
            source: Candidate pools to draw from
            config: Thresholds for the pools
            rng: Random source (seeded in tests)

        Returns:
            A proposal, or None if this strategy cannot form a pair right now
        """
        ...


class BiasedPairing:
    """Newcomer-vs-anchor pairing.

    The left side is a newcomer, preferring entities that have never been
    compared over merely under-sampled or uncertain ones. The right side is
    an established, low-uncertainty anchor that calibrates the newcomer.
    """

    async def propose(
        self,
        source: CandidateSource,
        config: RankerConfig,
        rng: random.Random,
    ) -> PairProposal | None:
        pool = await source.unplayed_ids()
        if not pool:
            pool = await source.newcomer_ids(
                config.newcomer_games_threshold,
                config.newcomer_phi_threshold,
            )
        if not pool:
            return None
        newcomer = rng.choice(pool)

        anchors = [
            entity_id
            for entity_id in await source.anchor_ids(
                config.anchor_phi_threshold,
                config.newcomer_games_threshold,
            )
            if entity_id != newcomer
        ]
        if not anchors:
            return None
        anchor = rng.choice(anchors)

        return PairProposal(left_id=newcomer, right_id=anchor, strategy="biased")


class UniformPairing:
    """Two distinct ids drawn uniformly, without replacement, from the whole population."""

    async def propose(
        self,
        source: CandidateSource,
        config: RankerConfig,
        rng: random.Random,
    ) -> PairProposal | None:
        ids = await source.all_ids()
        if len(ids) < 2:
            return None
        left_id, right_id = rng.sample(ids, 2)
        return PairProposal(left_id=left_id, right_id=right_id, strategy="uniform")


STRATEGIES: dict[str, PairingStrategy] = {
    "biased": BiasedPairing(),
    "uniform": UniformPairing(),
}
