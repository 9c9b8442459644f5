import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, computed_field


def make_pair_key(first_id: str, second_id: str) -> str:
    """Order-independent identity of an unordered pair of entity ids."""
    return ":".join(sorted((first_id, second_id)))


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Outcome(str, Enum):
    """Result of a comparison as reported by the voter."""
    LEFT = "left"    # left entity preferred
    RIGHT = "right"  # right entity preferred
    SKIP = "skip"    # no preference, recorded but never rated

    def __str__(self) -> str:
        return self.value

    @property
    def score(self) -> float | None:
        """Result from the left entity's point of view (None for skip)."""
        if self is Outcome.LEFT:
            return 1.0
        if self is Outcome.RIGHT:
            return 0.0
        return None


class Rating(BaseModel):
    """Skill estimate for one entity."""
    entity_id: str
    mu: float = 1500.0               # point estimate of strength
    phi: float = 350.0               # uncertainty of mu
    games_played: int = Field(default=0, ge=0)  # completed (non-skip) comparisons


class PendingComparison(BaseModel):
    """A pair issued to a voter and awaiting (at most) one outcome."""
    id: str = Field(default_factory=_new_id)
    left_id: str
    right_id: str
    voter_id: str
    created_at: datetime = Field(default_factory=_utcnow)

    @computed_field
    @property
    def pair_key(self) -> str:
        return make_pair_key(self.left_id, self.right_id)


class Vote(BaseModel):
    """Outcome recorded against a PendingComparison."""
    match_id: str
    outcome: Outcome
    winner_id: str | None = None  # None for skip
    voter_id: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class MatchOffer(BaseModel):
    """What the caller receives when asking for the next comparison."""
    match_id: str
    left_id: str
    right_id: str
    voter_id: str


class VoteReceipt(BaseModel):
    """Result of submitting a vote."""
    match_id: str
    outcome: Outcome
    winner_id: str | None = None
    left: Rating | None = None   # new ratings, None when skipped
    right: Rating | None = None

    @property
    def message(self) -> str:
        return "Skipped" if self.outcome is Outcome.SKIP else "Voted"


class LeaderboardEntry(BaseModel):
    """One row of the ranking, ordered by conservative score."""
    rank: int
    entity_id: str
    mu: float
    phi: float
    games_played: int
    score: float  # mu - 2*phi, cached at ranking time
