"""Pure Glicko-lite rating calculations.

A simplified Glicko variant without volatility tracking: the step size of
each side scales with its own uncertainty, and every completed comparison
makes both participants slightly more certain.
"""

import math

from duelrank.matchmaking.models import RankerConfig
from duelrank.models import Outcome, Rating


def expected_score(mu_a: float, mu_b: float, scale: float = 400.0) -> float:
    """Calculate expected score for entity A against entity B.

    Uses the logistic formula: E_A = 1 / (1 + 10^((mu_B - mu_A) / scale))

    Args:
        mu_a: Rating estimate of entity A
        mu_b: Rating estimate of entity B
        scale: Rating difference that corresponds to 10:1 odds

    Returns:
        Expected score (0.0 to 1.0) for entity A
    """
    return 1.0 / (1.0 + math.pow(10.0, (mu_b - mu_a) / scale))


def conservative_score(rating: Rating) -> float:
    """Lower-confidence ranking value: mu - 2*phi."""
    return rating.mu - 2 * rating.phi


def _clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


class RatingEngine:
    """Converts two ratings plus an outcome into two new ratings.

    Stateless apart from its configuration; safe to share between tasks
    and threads.
    """

    def __init__(self, config: RankerConfig | None = None):
        self.config = config or RankerConfig()

    def initial_rating(self, entity_id: str) -> Rating:
        """Rating for a freshly added entity (maximal uncertainty)."""
        return Rating(
            entity_id=entity_id,
            mu=self.config.init_mu,
            phi=self.config.init_phi,
            games_played=0,
        )

    def expected_score(self, rating_a: Rating, rating_b: Rating) -> float:
        return expected_score(rating_a.mu, rating_b.mu, self.config.logistic_scale)

    def k_factor(self, phi: float) -> float:
        """Step size for one side; uncertain ratings move faster."""
        cfg = self.config
        return _clamp(cfg.k_base + phi / cfg.k_phi_divisor, cfg.k_min, cfg.k_max)

    def _settle_phi(self, phi: float) -> float:
        cfg = self.config
        return _clamp(phi * cfg.phi_decay, cfg.min_phi, cfg.max_phi)

    def update(
        self,
        rating_a: Rating,
        rating_b: Rating,
        outcome: float,
    ) -> tuple[Rating, Rating]:
        """Update both ratings after a completed comparison.

        Each side uses its own K, so the exchange is not zero-sum when the
        two uncertainties differ: a newcomer swings more than an anchor
        from the same match.

        Args:
            rating_a: Current rating of entity A
            rating_b: Current rating of entity B
            outcome: 1 if A won, 0 if B won, 0.5 for a draw

        Returns:
            Tuple of (new rating A, new rating B)
        """
        expected_a = self.expected_score(rating_a, rating_b)

        k_a = self.k_factor(rating_a.phi)
        k_b = self.k_factor(rating_b.phi)

        new_a = Rating(
            entity_id=rating_a.entity_id,
            mu=rating_a.mu + k_a * (outcome - expected_a),
            phi=self._settle_phi(rating_a.phi),
            games_played=rating_a.games_played + 1,
        )
        new_b = Rating(
            entity_id=rating_b.entity_id,
            mu=rating_b.mu + k_b * ((1 - outcome) - (1 - expected_a)),
            phi=self._settle_phi(rating_b.phi),
            games_played=rating_b.games_played + 1,
        )
        return new_a, new_b

    def apply_outcome(
        self,
        left: Rating,
        right: Rating,
        outcome: Outcome,
    ) -> tuple[Rating, Rating]:
        """Apply a voter's outcome; skips return the inputs untouched."""
        if outcome.score is None:
            return left, right
        return self.update(left, right, outcome.score)

    def score(self, rating: Rating) -> float:
        return conservative_score(rating)

    def apply_decay(self, rating: Rating, days_inactive: float) -> Rating:
        """Grow uncertainty for an entity that has not played for a while.

        This is the only path through which phi increases.
        """
        if days_inactive <= 0:
            return rating
        cfg = self.config
        phi = min(cfg.max_phi, rating.phi + days_inactive * cfg.inactivity_phi_per_day)
        return rating.model_copy(update={"phi": phi})
