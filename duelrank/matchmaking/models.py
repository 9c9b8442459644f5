"""Configuration and value types for matchmaking and rating."""

import os
from typing import Literal

from pydantic import BaseModel, Field, model_validator

StrategyName = Literal["biased", "uniform", "fallback"]


class RankerConfig(BaseModel):
    """Tunables shared by the rating engine and the pair selector.

    Passed explicitly at construction time so alternate tunings can be
    tested side by side.
    """
    # Rating engine
    init_mu: float = 1500.0
    init_phi: float = Field(default=350.0, gt=0)
    min_phi: float = Field(default=60.0, gt=0)
    max_phi: float = Field(default=350.0, gt=0)
    logistic_scale: float = Field(default=400.0, gt=0)
    k_base: float = 16.0
    k_phi_divisor: float = Field(default=25.0, gt=0)  # K = k_base + phi / k_phi_divisor
    k_min: float = Field(default=16.0, ge=0)
    k_max: float = Field(default=64.0, ge=0)
    phi_decay: float = Field(default=0.95, gt=0, le=1)
    inactivity_phi_per_day: float = Field(default=2.0, ge=0)

    # Pair selection
    newcomer_games_threshold: int = Field(default=5, ge=0)
    newcomer_phi_threshold: float = 100.0
    anchor_phi_threshold: float = 60.0
    p_newcomer: float = Field(default=0.6, ge=0, le=1)
    max_attempts: int = Field(default=5, ge=1)

    # Ranking
    leaderboard_limit: int = Field(default=200, ge=1)

    @model_validator(mode="after")
    def _check_bounds(self) -> "RankerConfig":
        if self.min_phi > self.max_phi:
            raise ValueError(f"min_phi ({self.min_phi}) exceeds max_phi ({self.max_phi})")
        if self.k_min > self.k_max:
            raise ValueError(f"k_min ({self.k_min}) exceeds k_max ({self.k_max})")
        if not self.min_phi <= self.init_phi <= self.max_phi:
            raise ValueError(
                f"init_phi ({self.init_phi}) outside [{self.min_phi}, {self.max_phi}]"
            )
        return self

    @classmethod
    def from_env(cls, prefix: str = "DUELRANK_") -> "RankerConfig":
        """Build a config from environment variables, e.g. DUELRANK_P_NEWCOMER=0.5.

        Unset variables keep their defaults.
        """
        overrides: dict[str, str] = {}
        for name in cls.model_fields:
            raw = os.getenv(f"{prefix}{name.upper()}")
            if raw is not None:
                overrides[name] = raw
        return cls(**overrides)


class PairProposal(BaseModel):
    """Two entity ids proposed by a pairing strategy (before freshness checks)."""
    left_id: str
    right_id: str
    strategy: StrategyName
