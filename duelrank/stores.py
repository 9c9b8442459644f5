"""Storage collaborators for matchmaking and voting.

The core only talks to storage through the protocols below. The in-memory
implementations back the tests and serve as a reference adapter; a
database-backed deployment provides its own classes with the same methods.
"""

from typing import Protocol

from duelrank.models import PendingComparison, Rating, Vote


class RatingStore(Protocol):
    """Keyed store mapping entity id -> Rating."""

    async def get(self, ids: list[str]) -> list[Rating]:
        """Fetch ratings for the given ids; unknown ids are omitted."""
        ...

    async def put(self, entity_id: str, rating: Rating) -> None:
        ...


class CandidateSource(Protocol):
    """Supplies entity-id pools filtered by simple predicates."""

    async def population_size(self) -> int:
        ...

    async def all_ids(self) -> list[str]:
        ...

    async def unplayed_ids(self) -> list[str]:
        """Ids with games_played == 0."""
        ...

    async def newcomer_ids(self, games_threshold: int, phi_threshold: float) -> list[str]:
        """Ids with games_played < games_threshold OR phi > phi_threshold."""
        ...

    async def anchor_ids(self, phi_threshold: float, min_games: int) -> list[str]:
        """Ids with phi <= phi_threshold AND games_played >= min_games."""
        ...


class MatchHistoryStore(Protocol):
    """Append-only store of pairs issued to voters."""

    async def exists(self, voter_id: str, pair_key: str) -> bool:
        ...

    async def insert(self, match: PendingComparison) -> None:
        ...

    async def insert_if_absent(self, match: PendingComparison) -> bool:
        """Atomically insert unless (voter_id, pair_key) is already present.

        Returns:
            True if inserted, False if the voter already holds this pair
        """
        ...

    async def get(self, match_id: str) -> PendingComparison | None:
        ...


class VoteStore(Protocol):
    """At most one vote per match."""

    async def get_vote(self, match_id: str) -> Vote | None:
        ...

    async def record_if_absent(self, vote: Vote) -> bool:
        """Atomically record a vote unless the match already has one."""
        ...


class CreditLedger(Protocol):
    """Per-session participation credits."""

    async def award(self, voter_id: str, amount: int = 1) -> int:
        """Add credits and return the new balance."""
        ...

    async def balance(self, voter_id: str) -> int:
        ...


class InMemoryRatingStore:
    """Dict-backed RatingStore that also acts as the CandidateSource."""

    def __init__(self, ratings: list[Rating] | None = None):
        self._ratings: dict[str, Rating] = {}
        for rating in ratings or []:
            self._ratings[rating.entity_id] = rating

    async def get(self, ids: list[str]) -> list[Rating]:
        return [self._ratings[i] for i in ids if i in self._ratings]

    async def put(self, entity_id: str, rating: Rating) -> None:
        if rating.entity_id != entity_id:
            raise ValueError(
                f"Rating belongs to '{rating.entity_id}', cannot store under '{entity_id}'"
            )
        self._ratings[entity_id] = rating

    async def population_size(self) -> int:
        return len(self._ratings)

    async def all_ids(self) -> list[str]:
        return list(self._ratings)

    async def unplayed_ids(self) -> list[str]:
        return [i for i, r in self._ratings.items() if r.games_played == 0]

    async def newcomer_ids(self, games_threshold: int, phi_threshold: float) -> list[str]:
        return [
            i for i, r in self._ratings.items()
            if r.games_played < games_threshold or r.phi > phi_threshold
        ]

    async def anchor_ids(self, phi_threshold: float, min_games: int) -> list[str]:
        return [
            i for i, r in self._ratings.items()
            if r.phi <= phi_threshold and r.games_played >= min_games
        ]


class InMemoryMatchHistory:
    """Dict-backed MatchHistoryStore."""

    def __init__(self):
        self._matches: dict[str, PendingComparison] = {}
        self._issued: set[tuple[str, str]] = set()

    async def exists(self, voter_id: str, pair_key: str) -> bool:
        return (voter_id, pair_key) in self._issued

    async def insert(self, match: PendingComparison) -> None:
        self._matches[match.id] = match
        self._issued.add((match.voter_id, match.pair_key))

    async def insert_if_absent(self, match: PendingComparison) -> bool:
        if (match.voter_id, match.pair_key) in self._issued:
            return False
        await self.insert(match)
        return True

    async def get(self, match_id: str) -> PendingComparison | None:
        return self._matches.get(match_id)

    def __len__(self) -> int:
        return len(self._matches)


class InMemoryVoteStore:
    """Dict-backed VoteStore."""

    def __init__(self):
        self._votes: dict[str, Vote] = {}

    async def get_vote(self, match_id: str) -> Vote | None:
        return self._votes.get(match_id)

    async def record_if_absent(self, vote: Vote) -> bool:
        if vote.match_id in self._votes:
            return False
        self._votes[vote.match_id] = vote
        return True


class InMemoryCreditLedger:
    """Dict-backed CreditLedger."""

    def __init__(self):
        self._credits: dict[str, int] = {}

    async def award(self, voter_id: str, amount: int = 1) -> int:
        self._credits[voter_id] = self._credits.get(voter_id, 0) + amount
        return self._credits[voter_id]

    async def balance(self, voter_id: str) -> int:
        return self._credits.get(voter_id, 0)
