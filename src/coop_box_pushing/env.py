from __future__ import annotations

from typing import Dict, Optional, Tuple

import numpy as np

from .config import EnvConfig, RewardConfig  # noqa: F401
from .errors import InvalidActionError, StaleStateAccessError
from .game import ActionLike, BoxPushingEpisode, BoxPushingGame, Mover
from .initiative import chance_outcomes
from .state import NUM_AGENTS

AGENT_IDS: Tuple[str, ...] = tuple(f"agent_{idx}" for idx in range(NUM_AGENTS))


class BoxPushingEnv:
    """PettingZoo/Gymnasium-style wrapper that samples the chance draw itself."""

    def __init__(self, config: Optional[EnvConfig] = None):
        self.config = config or EnvConfig()
        self.rng = np.random.default_rng(self.config.seed)
        self.game = BoxPushingGame(self.config)
        self.episode: Optional[BoxPushingEpisode] = None

    def reset(self) -> Dict[str, np.ndarray]:
        self.episode = self.game.new_initial_state()
        outcomes, probs = zip(*chance_outcomes())
        outcome = int(self.rng.choice(outcomes, p=probs))
        self.episode.apply_chance_outcome(outcome)
        return self._build_observations()

    def step(
        self, actions: Dict[str, ActionLike]
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, float], Dict[str, bool], Dict[str, Dict]]:
        if self.episode is None:
            raise StaleStateAccessError("Environment not reset.")
        if self.episode.current_mover() != Mover.SIMULTANEOUS:
            raise StaleStateAccessError("Episode is over; call reset() first.")
        if set(actions) != set(AGENT_IDS):
            raise InvalidActionError(f"Expected actions for {list(AGENT_IDS)}, got {sorted(actions)}")

        status = self.episode.apply_simultaneous_actions(*(actions[aid] for aid in AGENT_IDS))
        observations = self._build_observations()
        step_rewards = self.episode.step_reward()
        rewards = {aid: step_rewards[idx] for idx, aid in enumerate(AGENT_IDS)}
        done = self.episode.is_terminal()
        dones = {aid: done for aid in AGENT_IDS}
        dones["__all__"] = done
        infos = {
            aid: {
                "status": status[idx],
                "won": self.episode.state.won,
                "step_count": self.episode.state.step_count,
            }
            for idx, aid in enumerate(AGENT_IDS)
        }
        return observations, rewards, dones, infos

    def render(self) -> str:
        if self.episode is None:
            raise StaleStateAccessError("Environment not reset.")
        return str(self.episode)

    def _build_observations(self) -> Dict[str, np.ndarray]:
        assert self.episode is not None
        return {aid: self.episode.observation_vector(idx) for idx, aid in enumerate(AGENT_IDS)}
