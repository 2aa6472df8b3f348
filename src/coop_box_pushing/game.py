"""Episode controller exposing the chance / simultaneous / terminal alternation."""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import List, Optional, Tuple, Union

import numpy as np

from .config import EnvConfig
from .errors import InvalidActionError, StaleStateAccessError
from .initiative import NUM_CHANCE_OUTCOMES, apply_chance_outcome, decode_outcome
from .initiative import chance_outcomes as _chance_outcomes
from .observation import encode_observation, information_state_string, observation_shape, observation_size
from .renderer import render_state
from .resolver import resolve_actions
from .state import NUM_AGENTS, Action, ActionStatus, EpisodeState, check_agent_index, to_action
from .world import GridLayout

logger = logging.getLogger(__name__)

ActionLike = Union[Action, int]


class Mover(Enum):
    CHANCE = auto()
    SIMULTANEOUS = auto()
    TERMINAL = auto()


class BoxPushingGame:
    """Factory holding the shared layout and settings for many episodes."""

    def __init__(self, config: Optional[EnvConfig] = None):
        self.config = config or EnvConfig()
        self.layout = GridLayout(self.config.layout)

    def new_initial_state(self) -> "BoxPushingEpisode":
        return BoxPushingEpisode(self)

    def num_players(self) -> int:
        return NUM_AGENTS

    def num_distinct_actions(self) -> int:
        return len(Action)

    def max_chance_outcomes(self) -> int:
        return NUM_CHANCE_OUTCOMES

    def max_game_length(self) -> int:
        return self.config.horizon

    def min_utility(self) -> float:
        reward = self.config.reward
        worst_turn = reward.step_cost + NUM_AGENTS * min(reward.bump_penalty, 0.0)
        return self.config.horizon * min(worst_turn, 0.0)

    def max_utility(self) -> float:
        reward = self.config.reward
        best_turn = reward.step_cost + NUM_AGENTS * max(reward.bump_penalty, 0.0)
        # Winning takes at least one turn.
        turns = self.config.horizon if best_turn > 0 else 1
        return reward.win_reward + turns * best_turn

    def observation_size(self) -> int:
        return observation_size(self.config.view_radius)

    def observation_shape(self) -> Tuple[int, int, int]:
        return observation_shape(self.config.view_radius)


class BoxPushingEpisode:
    """One episode: a chance draw followed by simultaneous turns until terminal."""

    def __init__(self, game: BoxPushingGame, state: Optional[EpisodeState] = None):
        self.game = game
        self.state = state or EpisodeState.create(game.layout, game.config.horizon)

    def current_mover(self) -> Mover:
        if not self.state.chance_resolved:
            return Mover.CHANCE
        if self.state.is_terminal:
            return Mover.TERMINAL
        return Mover.SIMULTANEOUS

    def legal_actions(self, agent: int) -> List[Action]:
        check_agent_index(agent)
        return list(Action)

    def chance_outcomes(self) -> List[Tuple[int, float]]:
        if self.current_mover() != Mover.CHANCE:
            return []
        return _chance_outcomes()

    def apply_chance_outcome(self, outcome: int) -> None:
        if self.current_mover() != Mover.CHANCE:
            raise InvalidActionError("No chance draw is pending")
        decoded = apply_chance_outcome(self.state, outcome)
        logger.debug(
            "Chance outcome %d: priority agent %d, orientations %s",
            outcome,
            decoded.priority,
            [o.name for o in decoded.orientations],
        )

    def apply_simultaneous_actions(self, action0: ActionLike, action1: ActionLike) -> Tuple[ActionStatus, ...]:
        if self.current_mover() != Mover.SIMULTANEOUS:
            raise InvalidActionError(f"Cannot apply agent actions while the mover is {self.current_mover().name}")
        status = resolve_actions(self.state, (action0, action1), self.game.config.reward)
        return tuple(status)

    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def step_reward(self) -> List[float]:
        self._require_started()
        return [self.state.last_reward] * NUM_AGENTS

    def total_return(self) -> List[float]:
        return [self.state.total_reward] * NUM_AGENTS

    @property
    def last_status(self) -> Tuple[ActionStatus, ...]:
        return tuple(self.state.last_status)

    def observation_vector(self, agent: int) -> np.ndarray:
        return encode_observation(self.state, agent, self.game.config.view_radius)

    def information_state_string(self, agent: int) -> str:
        return information_state_string(self.state, agent)

    def action_to_string(self, agent: int, action: ActionLike) -> str:
        check_agent_index(agent)
        if self.current_mover() == Mover.CHANCE:
            decoded = decode_outcome(action)
            facing = "/".join(o.name.lower() for o in decoded.orientations)
            return f"priority agent {decoded.priority}, facing {facing}"
        return to_action(action).name.lower()

    def clone(self) -> "BoxPushingEpisode":
        return BoxPushingEpisode(self.game, self.state.clone())

    def _require_started(self) -> None:
        if not self.state.chance_resolved:
            raise StaleStateAccessError("No rewards before the initiative draw")

    def __str__(self) -> str:
        return render_state(self.state)
