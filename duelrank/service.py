"""Core service layer for the duelrank voting workflow.

This module ties the pair selector, the rating engine and the storage
collaborators together without any presentation dependencies. A web
handler maps its requests onto `request_match` and `submit_vote` and
turns the raised errors into responses.
"""

import asyncio
import random
import uuid
from typing import NoReturn

from duelrank.errors import RatingsNotFoundError, StaleOrMissingMatchError
from duelrank.events import EventHandler, NullEventHandler
from duelrank.logging import get_logger, request_context
from duelrank.matchmaking.glicko import RatingEngine
from duelrank.matchmaking.models import RankerConfig
from duelrank.matchmaking.selector import PairSelector
from duelrank.models import (
    LeaderboardEntry,
    MatchOffer,
    Outcome,
    PendingComparison,
    Rating,
    Vote,
    VoteReceipt,
)
from duelrank.stores import (
    CandidateSource,
    CreditLedger,
    MatchHistoryStore,
    RatingStore,
    VoteStore,
)

log = get_logger(__name__)


class DuelService:
    """Match requests, vote submission, registration and ranking.

    Selection and voting are independent calls that share nothing but the
    stores, so any number of service instances can serve the same voter.
    """

    def __init__(
        self,
        ratings: RatingStore,
        candidates: CandidateSource,
        history: MatchHistoryStore,
        votes: VoteStore,
        credits: CreditLedger | None = None,
        config: RankerConfig | None = None,
        event_handler: EventHandler | None = None,
        rng: random.Random | None = None,
    ):
        self.ratings = ratings
        self.candidates = candidates
        self.history = history
        self.votes = votes
        self.credits = credits
        self.config = config or RankerConfig()
        self.event_handler = event_handler or NullEventHandler()
        self.engine = RatingEngine(self.config)
        self.selector = PairSelector(
            candidates,
            history,
            config=self.config,
            event_handler=self.event_handler,
            rng=rng,
        )

    async def add_entity(self, entity_id: str) -> tuple[Rating, bool]:
        """Register an entity with an initial rating.

        Returns:
            Tuple of (rating, created); an existing entity is returned untouched
            with created=False.
        """
        if not entity_id:
            raise ValueError("entity_id must be a non-empty string")

        existing = await self.ratings.get([entity_id])
        if existing:
            log.info("entity_exists", entity_id=entity_id)
            return existing[0], False

        rating = self.engine.initial_rating(entity_id)
        await self.ratings.put(entity_id, rating)
        log.info("entity_added", entity_id=entity_id, mu=rating.mu, phi=rating.phi)
        return rating, True

    async def request_match(self, voter_id: str | None = None) -> MatchOffer:
        """Issue the next comparison for a voter.

        A voter without a token gets a freshly minted one, returned in the
        offer so the caller can persist it (e.g. as a session cookie).

        Raises:
            InsufficientPopulationError: Fewer than two entities exist
        """
        if not voter_id:
            voter_id = str(uuid.uuid4())
            log.info("voter_created", voter_id=voter_id)

        with request_context(voter_id=voter_id):
            match = await self.selector.select_pair(voter_id)

        return MatchOffer(
            match_id=match.id,
            left_id=match.left_id,
            right_id=match.right_id,
            voter_id=voter_id,
        )

    async def submit_vote(
        self,
        match_id: str,
        choice: Outcome | str,
        voter_id: str | None = None,
    ) -> VoteReceipt:
        """Record the outcome of an issued comparison and update ratings.

        Args:
            match_id: Id returned by request_match
            choice: "left", "right" or "skip"
            voter_id: Token of the submitting voter, if known

        Raises:
            ValueError: choice is not a valid outcome
            StaleOrMissingMatchError: Unknown match, or one that already has an outcome
            RatingsNotFoundError: One or both ratings could not be fetched
        """
        outcome = Outcome(choice)

        with request_context(match_id=match_id, voter_id=voter_id):
            match = await self.history.get(match_id)
            if match is None:
                self._reject(match_id, StaleOrMissingMatchError.MISSING)

            if voter_id and voter_id != match.voter_id:
                log.warning("voter_mismatch", issued_to=match.voter_id)

            if await self.votes.get_vote(match_id) is not None:
                self._reject(match_id, StaleOrMissingMatchError.ALREADY_VOTED)

            if outcome is Outcome.SKIP:
                await self._record(Vote(match_id=match_id, outcome=outcome, voter_id=voter_id))
                return VoteReceipt(match_id=match_id, outcome=outcome)

            left, right = await self._fetch_ratings(match)
            winner_id = match.left_id if outcome is Outcome.LEFT else match.right_id

            await self._record(
                Vote(match_id=match_id, outcome=outcome, winner_id=winner_id, voter_id=voter_id)
            )

            new_left, new_right = self.engine.apply_outcome(left, right, outcome)
            await asyncio.gather(
                self.ratings.put(match.left_id, new_left),
                self.ratings.put(match.right_id, new_right),
            )
            log.info(
                "ratings_updated",
                winner_id=winner_id,
                left_mu=round(new_left.mu, 2),
                right_mu=round(new_right.mu, 2),
            )
            self.event_handler.on_ratings_updated(before=(left, right), after=(new_left, new_right))

            if voter_id and self.credits is not None:
                balance = await self.credits.award(voter_id)
                log.debug("credit_awarded", balance=balance)

        return VoteReceipt(
            match_id=match_id,
            outcome=outcome,
            winner_id=winner_id,
            left=new_left,
            right=new_right,
        )

    async def leaderboard(self, limit: int | None = None) -> list[LeaderboardEntry]:
        """Entities ordered by conservative score, highest first."""
        limit = self.config.leaderboard_limit if limit is None else limit

        ids = await self.candidates.all_ids()
        ratings = await self.ratings.get(ids)
        ranked = sorted(
            ratings,
            key=lambda r: (-self.engine.score(r), -r.games_played, r.entity_id),
        )

        return [
            LeaderboardEntry(
                rank=i,
                entity_id=r.entity_id,
                mu=r.mu,
                phi=r.phi,
                games_played=r.games_played,
                score=self.engine.score(r),
            )
            for i, r in enumerate(ranked[:limit], 1)
        ]

    async def decay_inactive(self, entity_id: str, days_inactive: float) -> Rating:
        """Widen an idle entity's uncertainty and persist it."""
        found = await self.ratings.get([entity_id])
        if not found:
            raise RatingsNotFoundError([entity_id])

        rating = self.engine.apply_decay(found[0], days_inactive)
        await self.ratings.put(entity_id, rating)
        log.info("rating_decayed", entity_id=entity_id, days_inactive=days_inactive, phi=rating.phi)
        return rating

    async def _fetch_ratings(self, match: PendingComparison) -> tuple[Rating, Rating]:
        found = {r.entity_id: r for r in await self.ratings.get([match.left_id, match.right_id])}
        missing = [i for i in (match.left_id, match.right_id) if i not in found]
        if missing:
            log.error("ratings_not_found", missing=missing)
            raise RatingsNotFoundError(missing)
        return found[match.left_id], found[match.right_id]

    async def _record(self, vote: Vote) -> None:
        """Claim the match's single outcome slot."""
        if not await self.votes.record_if_absent(vote):
            self._reject(vote.match_id, StaleOrMissingMatchError.ALREADY_VOTED)
        log.info("vote_recorded", outcome=str(vote.outcome), winner_id=vote.winner_id)
        self.event_handler.on_vote_recorded(vote=vote)

    def _reject(self, match_id: str, reason: str) -> NoReturn:
        log.warning("vote_rejected", reason=reason)
        raise StaleOrMissingMatchError(match_id, reason)
