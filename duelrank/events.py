"""Event system for decoupling matchmaking and voting from presentation.

Core modules emit events without knowing who listens. A web layer can
forward them to a live feed, a CLI can render them, and tests can record
them.
"""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from duelrank.models import PendingComparison, Rating, Vote


class EventHandler(Protocol):
    """Protocol for event handlers that process events from core modules."""

    def on_match_issued(
        self,
        match: "PendingComparison",
        strategy: str,
        attempts: int,
        **kwargs: Any
    ) -> None:
        """Called when a pair has been recorded for a voter.

        Args:
            match: The recorded comparison
            strategy: "biased", "uniform" or "fallback"
            attempts: Selection cycles used (including the accepted one)
            **kwargs: Additional context
        """
        ...

    def on_selection_exhausted(
        self,
        voter_id: str,
        attempts: int,
        **kwargs: Any
    ) -> None:
        """Called when no fresh pair was found and the fallback draw is used."""
        ...

    def on_vote_recorded(
        self,
        vote: "Vote",
        **kwargs: Any
    ) -> None:
        """Called once an outcome has been recorded (including skips)."""
        ...

    def on_ratings_updated(
        self,
        before: tuple["Rating", "Rating"],
        after: tuple["Rating", "Rating"],
        **kwargs: Any
    ) -> None:
        """Called after both new ratings have been persisted.

        Args:
            before: (left, right) ratings prior to the vote
            after: (left, right) ratings after the vote
            **kwargs: Additional context
        """
        ...


class NullEventHandler:
    """Null event handler that does nothing.

    Used as the default when no event handling is needed.
    """

    def on_match_issued(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_selection_exhausted(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_vote_recorded(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_ratings_updated(self, *args: Any, **kwargs: Any) -> None:
        pass
