from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .world import DEFAULT_LAYOUT

DEFAULT_HORIZON = 100


@dataclass
class RewardConfig:
    step_cost: float = -0.1
    win_reward: float = 100.0
    bump_penalty: float = 0.0  # charged per failed MOVE_FORWARD


@dataclass
class EnvConfig:
    horizon: int = DEFAULT_HORIZON
    layout: Tuple[str, ...] = DEFAULT_LAYOUT
    view_radius: int = 1  # observation window is (2*view_radius + 1) squared
    seed: Optional[int] = None
    reward: RewardConfig = field(default_factory=lambda: RewardConfig())

    def __post_init__(self) -> None:
        if isinstance(self.horizon, bool) or not isinstance(self.horizon, int) or self.horizon <= 0:
            raise ValueError(f"horizon must be a positive integer, got {self.horizon!r}")
        if self.view_radius < 0:
            raise ValueError(f"view_radius must be non-negative, got {self.view_radius}")
        self.layout = tuple(self.layout)

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> "EnvConfig":
        """Build a config from game parameters; ``horizon`` is the only one recognized."""
        unknown = set(params) - {"horizon"}
        if unknown:
            raise ValueError(f"Unknown game parameters: {sorted(unknown)}")
        return cls(horizon=params.get("horizon", DEFAULT_HORIZON))
