"""Rich UI components for leaderboard display."""

from rich import box
from rich.console import Console
from rich.table import Table

from duelrank.models import LeaderboardEntry

# Shared console instance
console = Console()


def _rank_label(rank: int) -> str:
    if rank == 1:
        return "[bold gold1]🥇 1[/bold gold1]"
    if rank == 2:
        return "[bold silver]🥈 2[/bold silver]"
    if rank == 3:
        return "[bold orange3]🥉 3[/bold orange3]"
    return f"[dim]{rank}[/dim]"


def create_leaderboard_table(
    entries: list[LeaderboardEntry],
    initial_mu: float = 1500.0,
    top_n: int | None = None,
) -> Table:
    """Create a Rich table of entities ordered by conservative score.

    Args:
        entries: Leaderboard rows, already ranked
        initial_mu: Starting mu, used to colour the change column
        top_n: Show at most this many rows (all if None)
    """
    table = Table(
        title="[bold cyan]Leaderboard[/bold cyan]",
        box=box.ROUNDED,
        show_lines=False,
        header_style="bold magenta",
        title_justify="left",
    )

    table.add_column("Rank", style="dim", width=6, justify="center")
    table.add_column("Score", style="yellow", width=8, justify="right")
    table.add_column("Mu", width=16, justify="right")
    table.add_column("Phi", style="dim", width=7, justify="right")
    table.add_column("Games", style="green", width=6, justify="right")
    table.add_column("Entity", style="cyan", max_width=40, overflow="ellipsis")

    shown = entries if top_n is None else entries[:top_n]

    for entry in shown:
        mu_diff = entry.mu - initial_mu
        if mu_diff > 0:
            mu_str = f"[green]{entry.mu:.0f}[/green] [dim](+{mu_diff:.0f})[/dim]"
        elif mu_diff < 0:
            mu_str = f"[red]{entry.mu:.0f}[/red] [dim]({mu_diff:.0f})[/dim]"
        else:
            mu_str = f"{entry.mu:.0f}"

        table.add_row(
            _rank_label(entry.rank),
            f"{entry.score:.0f}",
            mu_str,
            f"{entry.phi:.0f}",
            str(entry.games_played),
            entry.entity_id,
        )

    if len(entries) > len(shown):
        table.add_row(
            "...",
            "",
            "",
            "",
            "",
            f"[dim]and {len(entries) - len(shown)} more[/dim]",
        )

    return table


def print_leaderboard(
    entries: list[LeaderboardEntry],
    initial_mu: float = 1500.0,
    top_n: int | None = None,
) -> None:
    """Print the leaderboard table to the shared console."""
    console.print(create_leaderboard_table(entries, initial_mu, top_n))
