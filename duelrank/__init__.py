"""duelrank: pairwise-comparison matchmaking and rating."""

__version__ = "0.1.0"
