"""Exceptions raised by matchmaking and vote handling."""


class DuelRankError(Exception):
    """Base exception for duelrank errors."""


class InsufficientPopulationError(DuelRankError):
    """Raised when fewer than two entities exist, so no pair can be formed."""

    def __init__(self, population: int) -> None:
        self.population = population
        super().__init__(f"Not enough entities to form a pair (population={population})")


class DuplicatePairError(DuelRankError):
    """Raised inside the selector when a voter has already seen a pair.

    Never escapes PairSelector; the bounded retry loop absorbs it.
    """

    def __init__(self, voter_id: str, pair_key: str) -> None:
        self.voter_id = voter_id
        self.pair_key = pair_key
        super().__init__(f"Pair '{pair_key}' already issued to voter '{voter_id}'")


class StaleOrMissingMatchError(DuelRankError):
    """Raised when a vote references an unknown match or one that already has an outcome."""

    MISSING = "missing"
    ALREADY_VOTED = "already_voted"

    def __init__(self, match_id: str, reason: str) -> None:
        self.match_id = match_id
        self.reason = reason
        if reason == self.MISSING:
            message = f"Match '{match_id}' not found"
        else:
            message = f"Match '{match_id}' already has a recorded outcome"
        super().__init__(message)


class RatingsNotFoundError(DuelRankError):
    """Raised when the ratings needed for an update cannot be fetched."""

    def __init__(self, missing_ids: list[str]) -> None:
        self.missing_ids = missing_ids
        super().__init__(f"Ratings not found for: {', '.join(missing_ids)}")
