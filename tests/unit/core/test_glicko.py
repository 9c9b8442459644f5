"""Unit tests for Glicko-lite rating calculations."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from duelrank.matchmaking.glicko import RatingEngine, conservative_score, expected_score
from duelrank.matchmaking.models import RankerConfig
from duelrank.models import Outcome, Rating

# Mark all tests in this module as unit tests
pytestmark = pytest.mark.unit

mus = st.floats(min_value=500, max_value=2500)
phis = st.floats(min_value=60, max_value=350)
games = st.integers(min_value=0, max_value=500)
outcomes = st.sampled_from([0.0, 0.5, 1.0])


def make_rating(
    mu: float = 1500.0,
    phi: float = 350.0,
    games_played: int = 0,
    entity_id: str = "entity",
) -> Rating:
    """Factory to create a Rating for testing."""
    return Rating(entity_id=entity_id, mu=mu, phi=phi, games_played=games_played)


@pytest.fixture
def engine() -> RatingEngine:
    return RatingEngine(RankerConfig())


class TestExpectedScore:
    """Tests for expected_score function."""

    def test_equal_ratings_gives_half(self):
        """Equal ratings should give expected score of exactly 0.5."""
        assert expected_score(1500, 1500) == 0.5

    def test_higher_rating_gives_higher_expected(self):
        """Higher rated entity has higher expected score."""
        result = expected_score(1600, 1400)
        assert 0.5 < result < 1.0

    def test_400_point_difference(self):
        """400 point difference gives ~0.91 expected score."""
        assert expected_score(1900, 1500) == pytest.approx(0.909, rel=0.01)

    def test_scale_is_configurable(self):
        """A larger scale flattens the curve."""
        assert expected_score(1900, 1500, scale=800) < expected_score(1900, 1500)

    @given(mu_a=mus, mu_b=mus)
    @settings(max_examples=100)
    def test_expected_scores_sum_to_one(self, mu_a, mu_b):
        """Property test: expected scores always sum to 1."""
        assert expected_score(mu_a, mu_b) + expected_score(mu_b, mu_a) == pytest.approx(1.0)


class TestKFactor:
    """Tests for the uncertainty-scaled step size."""

    def test_initial_uncertainty(self, engine):
        """phi=350 gives K = 16 + 350/25 = 30."""
        assert engine.k_factor(350) == pytest.approx(30.0)

    def test_floor_uncertainty(self, engine):
        """phi=60 gives K = 16 + 60/25 = 18.4."""
        assert engine.k_factor(60) == pytest.approx(18.4)

    def test_clamped_to_upper_bound(self, engine):
        """Very large phi is clamped to 64."""
        assert engine.k_factor(5000) == 64

    def test_clamped_to_lower_bound(self):
        """A negative base cannot push K below 16."""
        engine = RatingEngine(RankerConfig(k_base=0))
        assert engine.k_factor(60) == 16


class TestUpdate:
    """Tests for RatingEngine.update."""

    def test_worked_example(self, engine):
        """Two fresh entities, A wins: 1515 / 1485, phi 332.5, one game each."""
        new_a, new_b = engine.update(
            make_rating(entity_id="a"), make_rating(entity_id="b"), 1.0
        )

        assert new_a.mu == pytest.approx(1515.0)
        assert new_b.mu == pytest.approx(1485.0)
        assert new_a.phi == pytest.approx(332.5)
        assert new_b.phi == pytest.approx(332.5)
        assert new_a.games_played == 1
        assert new_b.games_played == 1
        assert (new_a.entity_id, new_b.entity_id) == ("a", "b")

    def test_b_wins(self, engine):
        """outcome=0 moves ratings the other way."""
        new_a, new_b = engine.update(make_rating(), make_rating(), 0.0)
        assert new_a.mu == pytest.approx(1485.0)
        assert new_b.mu == pytest.approx(1515.0)

    def test_draw_between_equals_keeps_mu(self, engine):
        """Draw between equal ratings changes no mu but still settles phi."""
        new_a, new_b = engine.update(make_rating(), make_rating(), 0.5)
        assert new_a.mu == pytest.approx(1500.0)
        assert new_b.mu == pytest.approx(1500.0)
        assert new_a.phi < 350
        assert new_a.games_played == 1

    def test_newcomer_swings_more_than_anchor(self, engine):
        """Asymmetric K: the exchange is not zero-sum."""
        newcomer = make_rating(phi=350, entity_id="new")
        anchor = make_rating(phi=60, games_played=40, entity_id="anchor")

        new_newcomer, new_anchor = engine.update(newcomer, anchor, 1.0)

        gain = new_newcomer.mu - newcomer.mu
        loss = anchor.mu - new_anchor.mu
        assert gain == pytest.approx(15.0)
        assert loss == pytest.approx(9.2)
        assert gain != pytest.approx(loss)

    def test_upset_gives_larger_change(self, engine):
        """Lower rated entity winning moves more than half of K."""
        underdog = make_rating(mu=1400)
        favourite = make_rating(mu=1600)

        new_underdog, _ = engine.update(underdog, favourite, 1.0)
        assert new_underdog.mu - underdog.mu > 15

    def test_phi_never_below_floor(self, engine):
        """phi near the floor settles at MIN_PHI."""
        new_a, new_b = engine.update(make_rating(phi=62), make_rating(phi=60), 1.0)
        assert new_a.phi == 60
        assert new_b.phi == 60

    def test_inputs_not_mutated(self, engine):
        """update returns new ratings and leaves its inputs alone."""
        a = make_rating(entity_id="a")
        b = make_rating(entity_id="b")
        before = (a.model_dump(), b.model_dump())

        engine.update(a, b, 1.0)

        assert (a.model_dump(), b.model_dump()) == before

    def test_custom_decay(self):
        """phi_decay comes from the config."""
        engine = RatingEngine(RankerConfig(phi_decay=0.5))
        new_a, _ = engine.update(make_rating(phi=300), make_rating(), 1.0)
        assert new_a.phi == pytest.approx(150.0)

    @given(mu_a=mus, mu_b=mus, phi_a=phis, phi_b=phis, outcome=outcomes)
    @settings(max_examples=100)
    def test_deterministic(self, mu_a, mu_b, phi_a, phi_b, outcome):
        """Property test: identical inputs give bit-for-bit identical outputs."""
        engine = RatingEngine()
        a = make_rating(mu_a, phi_a, entity_id="a")
        b = make_rating(mu_b, phi_b, entity_id="b")

        first = engine.update(a, b, outcome)
        second = engine.update(a, b, outcome)

        assert [r.model_dump() for r in first] == [r.model_dump() for r in second]

    @given(mu_a=mus, mu_b=mus, phi_a=phis, phi_b=phis, outcome=outcomes)
    @settings(max_examples=100)
    def test_monotonic_certainty(self, mu_a, mu_b, phi_a, phi_b, outcome):
        """Property test: phi never grows and never drops below MIN_PHI."""
        engine = RatingEngine()
        a = make_rating(mu_a, phi_a)
        b = make_rating(mu_b, phi_b)

        new_a, new_b = engine.update(a, b, outcome)

        assert 60 <= new_a.phi <= a.phi
        assert 60 <= new_b.phi <= b.phi

    @given(games_a=games, games_b=games, outcome=outcomes)
    @settings(max_examples=50)
    def test_games_played_increment(self, games_a, games_b, outcome):
        """Property test: both sides gain exactly one game."""
        engine = RatingEngine()
        new_a, new_b = engine.update(
            make_rating(games_played=games_a), make_rating(games_played=games_b), outcome
        )
        assert new_a.games_played == games_a + 1
        assert new_b.games_played == games_b + 1

    @given(mu=mus, phi=phis, outcome=st.sampled_from([0.0, 1.0]))
    @settings(max_examples=100)
    def test_symmetric_for_equal_ratings(self, mu, phi, outcome):
        """Property test: equal ratings move by the same magnitude."""
        engine = RatingEngine()
        a = make_rating(mu, phi)
        b = make_rating(mu, phi)

        new_a, new_b = engine.update(a, b, outcome)

        assert abs(new_a.mu - mu) == pytest.approx(abs(new_b.mu - mu))
        assert abs(new_a.mu - mu) > 0


class TestApplyOutcome:
    """Tests for outcome dispatch."""

    def test_skip_returns_inputs_unchanged(self, engine):
        """Skip never touches either rating."""
        left = make_rating(mu=1610.5, phi=123.4, games_played=7, entity_id="l")
        right = make_rating(mu=1390.25, phi=88.0, games_played=12, entity_id="r")
        before = (left.model_dump_json(), right.model_dump_json())

        new_left, new_right = engine.apply_outcome(left, right, Outcome.SKIP)

        assert new_left is left
        assert new_right is right
        assert (new_left.model_dump_json(), new_right.model_dump_json()) == before

    def test_left_and_right(self, engine):
        """LEFT means the left entity won, RIGHT the right one."""
        left_won, _ = engine.apply_outcome(make_rating(), make_rating(), Outcome.LEFT)
        left_lost, _ = engine.apply_outcome(make_rating(), make_rating(), Outcome.RIGHT)
        assert left_won.mu > 1500 > left_lost.mu


class TestScoreAndDecay:
    """Tests for conservative score, initial ratings and inactivity decay."""

    def test_conservative_score(self, engine):
        """score = mu - 2*phi."""
        rating = make_rating(mu=1600, phi=100)
        assert conservative_score(rating) == 1400
        assert engine.score(rating) == 1400

    def test_initial_rating(self, engine):
        """Fresh entities start at 1500 / 350 with no games."""
        rating = engine.initial_rating("new")
        assert (rating.entity_id, rating.mu, rating.phi, rating.games_played) == ("new", 1500, 350, 0)

    def test_decay_grows_phi(self, engine):
        """Two phi per inactive day, mu and games untouched."""
        rating = make_rating(mu=1700, phi=60, games_played=30)
        decayed = engine.apply_decay(rating, 10)
        assert decayed.phi == pytest.approx(80)
        assert decayed.mu == 1700
        assert decayed.games_played == 30

    def test_decay_capped_at_max_phi(self, engine):
        """phi never exceeds MAX_PHI."""
        assert engine.apply_decay(make_rating(phi=340), 100).phi == 350

    def test_no_decay_without_inactivity(self, engine):
        """Zero days leaves the rating as is."""
        rating = make_rating(phi=100)
        assert engine.apply_decay(rating, 0) is rating
