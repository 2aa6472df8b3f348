from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum, auto
from numbers import Integral
from typing import List, Optional, Union

from .errors import InvalidActionError
from .objects import AgentState, MovableObject
from .world import GridLayout

NUM_AGENTS = 2


class Action(Enum):
    TURN_LEFT = 0
    TURN_RIGHT = 1
    MOVE_FORWARD = 2
    STAY = 3


class ActionStatus(Enum):
    UNRESOLVED = auto()
    SUCCESS = auto()
    FAIL = auto()


def to_action(value: Union[Action, int]) -> Action:
    """Accept an ``Action`` or its integer id; anything else is a contract violation."""
    if isinstance(value, Action):
        return value
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidActionError(f"Expected an Action or integer action id, got {value!r}")
    try:
        return Action(int(value))
    except ValueError:
        raise InvalidActionError(f"Action id {value} is outside 0..{len(Action) - 1}") from None


def check_agent_index(agent: int) -> int:
    if isinstance(agent, bool) or not isinstance(agent, Integral) or not 0 <= agent < NUM_AGENTS:
        raise InvalidActionError(f"Agent index must be 0 or 1, got {agent!r}")
    return agent


@dataclass
class EpisodeState:
    """Mutable per-episode data; the layout is shared and never copied."""

    layout: GridLayout
    horizon: int
    agents: List[AgentState]
    small: MovableObject
    large: MovableObject
    step_count: int = 0
    initiative: Optional[int] = None
    chance_resolved: bool = False
    pending_actions: List[Optional[Action]] = field(default_factory=lambda: [None] * NUM_AGENTS)
    last_status: List[ActionStatus] = field(default_factory=lambda: [ActionStatus.UNRESOLVED] * NUM_AGENTS)
    last_reward: float = 0.0
    total_reward: float = 0.0
    won: bool = False

    @classmethod
    def create(cls, layout: GridLayout, horizon: int) -> "EpisodeState":
        if horizon <= 0:
            raise ValueError(f"horizon must be a positive integer, got {horizon}")
        agents = [AgentState(index=idx, row=r, col=c) for idx, (r, c) in enumerate(layout.agent_starts)]
        small = MovableObject(*layout.small_start)
        large = MovableObject(*layout.large_start, shape=layout.large_shape)
        return cls(layout=layout, horizon=horizon, agents=agents, small=small, large=large)

    @property
    def is_terminal(self) -> bool:
        return self.won or self.step_count >= self.horizon

    @property
    def steps_remaining(self) -> int:
        return self.horizon - self.step_count

    def clone(self) -> "EpisodeState":
        """Independent copy; only the immutable layout is shared."""
        return copy.deepcopy(self, memo={id(self.layout): self.layout})
