"""PairSelector: chooses the next two entities a voter should compare."""

import random

from duelrank.errors import DuplicatePairError, InsufficientPopulationError
from duelrank.events import EventHandler, NullEventHandler
from duelrank.logging import get_logger
from duelrank.matchmaking.models import PairProposal, RankerConfig, StrategyName
from duelrank.matchmaking.pairing import STRATEGIES, PairingStrategy
from duelrank.models import PendingComparison
from duelrank.stores import CandidateSource, MatchHistoryStore

log = get_logger(__name__)


class PairSelector:
    """Biased, freshness-checked pair selection with a bounded retry loop.

    Each cycle flips a weighted coin between the biased (newcomer vs anchor)
    and uniform strategies, then rejects pairs the voter has already seen.
    After `max_attempts` cycles without a fresh pair it falls back to any two
    distinct entities so a request never spins indefinitely.

    No locking is done across requests: two concurrent calls for the same
    voter can, rarely, both accept the same pair.
    """

    def __init__(
        self,
        candidates: CandidateSource,
        history: MatchHistoryStore,
        config: RankerConfig | None = None,
        event_handler: EventHandler | None = None,
        rng: random.Random | None = None,
        strategies: dict[str, PairingStrategy] | None = None,
    ):
        """Initialize the selector.

        Args:
            candidates: Source of entity-id pools
            history: Store of pairs already issued to voters
            config: Thresholds and loop bounds (uses defaults if None)
            event_handler: Optional event handler (uses NullEventHandler if None)
            rng: Random source, seed it for reproducible selection
            strategies: Strategy table keyed by "biased"/"uniform"
        """
        self.candidates = candidates
        self.history = history
        self.config = config or RankerConfig()
        self.event_handler = event_handler or NullEventHandler()
        self.rng = rng or random.Random()
        self.strategies = strategies or STRATEGIES

    async def select_pair(self, voter_id: str) -> PendingComparison:
        """Select, record and return a pair for this voter.

        Args:
            voter_id: Opaque, non-empty voter/session token

        Returns:
            The recorded PendingComparison

        Raises:
            InsufficientPopulationError: Fewer than two entities exist
        """
        if not voter_id:
            raise ValueError("voter_id must be a non-empty string")

        population = await self.candidates.population_size()
        if population < 2:
            log.warning("insufficient_population", population=population)
            raise InsufficientPopulationError(population)

        max_attempts = self.config.max_attempts
        for attempt in range(1, max_attempts + 1):
            proposal = await self._propose()
            if proposal is None:
                log.debug("pair_rejected", attempt=attempt, reason="no_candidates")
                continue

            if proposal.left_id == proposal.right_id:
                log.debug("pair_rejected", attempt=attempt, reason="self_pair")
                continue

            match = PendingComparison(
                left_id=proposal.left_id,
                right_id=proposal.right_id,
                voter_id=voter_id,
            )
            try:
                await self._claim(match)
            except DuplicatePairError as exc:
                log.debug(
                    "pair_rejected",
                    attempt=attempt,
                    reason="duplicate",
                    pair_key=exc.pair_key,
                    strategy=proposal.strategy,
                )
                continue

            return self._issued(match, proposal.strategy, attempt)

        return await self._fallback(voter_id, max_attempts)

    async def _propose(self) -> PairProposal | None:
        """Run one strategy cycle: coin flip, biased first, uniform as backup."""
        name: StrategyName = "biased" if self.rng.random() < self.config.p_newcomer else "uniform"
        proposal = await self.strategies[name].propose(self.candidates, self.config, self.rng)
        if proposal is None and name == "biased":
            proposal = await self.strategies["uniform"].propose(
                self.candidates, self.config, self.rng
            )
        return proposal

    async def _claim(self, match: PendingComparison) -> None:
        """Record the pair unless the voter has already been shown it."""
        if await self.history.exists(match.voter_id, match.pair_key):
            raise DuplicatePairError(match.voter_id, match.pair_key)
        if not await self.history.insert_if_absent(match):
            # Lost a race with a concurrent request for the same voter
            raise DuplicatePairError(match.voter_id, match.pair_key)

    async def _fallback(self, voter_id: str, attempts: int) -> PendingComparison:
        """Last resort: any two distinct entities, freshness ignored."""
        log.warning("selection_exhausted", voter_id=voter_id, attempts=attempts)
        self.event_handler.on_selection_exhausted(voter_id=voter_id, attempts=attempts)

        proposal = await self.strategies["uniform"].propose(self.candidates, self.config, self.rng)
        if proposal is None:
            # Population shrank below two while we were retrying
            raise InsufficientPopulationError(await self.candidates.population_size())

        match = PendingComparison(
            left_id=proposal.left_id,
            right_id=proposal.right_id,
            voter_id=voter_id,
        )
        await self.history.insert(match)
        return self._issued(match, "fallback", attempts)

    def _issued(self, match: PendingComparison, strategy: StrategyName, attempts: int) -> PendingComparison:
        log.info(
            "match_issued",
            match_id=match.id,
            voter_id=match.voter_id,
            left_id=match.left_id,
            right_id=match.right_id,
            strategy=strategy,
            attempts=attempts,
        )
        self.event_handler.on_match_issued(match=match, strategy=strategy, attempts=attempts)
        return match
