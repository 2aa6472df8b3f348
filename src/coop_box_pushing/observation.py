"""Egocentric, partially observable view of the field for one agent."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .errors import StaleStateAccessError
from .renderer import render_state
from .state import EpisodeState, check_agent_index
from .world import COMPASS, CellKind, Orientation

# Plane order inside the window block of the vector.
PLANES: Tuple[str, ...] = ("open", "wall", "goal", "small_box", "large_box", "other_agent", "self")
NUM_SCALARS = len(COMPASS) + 2  # orientation one-hot, steps remaining, won


def observation_shape(view_radius: int = 1) -> Tuple[int, int, int]:
    size = 2 * view_radius + 1
    return (len(PLANES), size, size)


def observation_size(view_radius: int = 1) -> int:
    """Length of the flat observation vector; known without building a state."""
    channels, h, w = observation_shape(view_radius)
    return channels * h * w + NUM_SCALARS


def _rotation_k(orientation: Orientation) -> int:
    """Return k for np.rot90 to align agent forward to the top of the window."""
    if orientation == Orientation.NORTH:
        return 0
    if orientation == Orientation.EAST:
        return 1
    if orientation == Orientation.SOUTH:
        return 2
    return -1  # WEST


def _window(state: EpisodeState, agent_idx: int, view_radius: int) -> np.ndarray:
    r = view_radius
    planes = np.zeros(observation_shape(r), dtype=np.float32)
    agent = state.agents[agent_idx]
    other = state.agents[1 - agent_idx]

    for dr in range(-r, r + 1):
        for dc in range(-r, r + 1):
            cell = (agent.row + dr, agent.col + dc)
            wr, wc = r + dr, r + dc
            if state.layout.is_wall(cell):
                planes[PLANES.index("wall"), wr, wc] = 1.0
            elif cell == agent.position():
                planes[PLANES.index("self"), wr, wc] = 1.0
            elif cell == other.position():
                planes[PLANES.index("other_agent"), wr, wc] = 1.0
            elif state.small.occupies(cell):
                planes[PLANES.index("small_box"), wr, wc] = 1.0
            elif state.large.occupies(cell):
                planes[PLANES.index("large_box"), wr, wc] = 1.0
            elif state.layout.cell_kind(cell) == CellKind.GOAL:
                planes[PLANES.index("goal"), wr, wc] = 1.0
            else:
                planes[PLANES.index("open"), wr, wc] = 1.0

    return np.rot90(planes, k=_rotation_k(agent.orientation), axes=(1, 2))


def encode_observation(state: EpisodeState, agent_idx: int, view_radius: int = 1) -> np.ndarray:
    """
    Flat float32 vector for one agent:
      - 7 one-hot planes over the rotated window (forward is up), see PLANES
      - own orientation one-hot (4)
      - steps remaining / horizon
      - won flag
    The other agent's orientation is never part of it.
    """
    check_agent_index(agent_idx)
    if not state.chance_resolved:
        raise StaleStateAccessError("No observation before the initiative draw")

    planes = _window(state, agent_idx, view_radius)
    orientation = np.zeros(len(COMPASS), dtype=np.float32)
    orientation[state.agents[agent_idx].orientation.value] = 1.0
    scalars = np.array(
        [state.steps_remaining / state.horizon, 1.0 if state.won else 0.0],
        dtype=np.float32,
    )
    vector = np.concatenate([planes.reshape(-1), orientation, scalars]).astype(np.float32)
    vector.setflags(write=False)
    return vector


def information_state_string(state: EpisodeState, agent_idx: int) -> str:
    check_agent_index(agent_idx)
    if not state.chance_resolved:
        raise StaleStateAccessError("No information state before the initiative draw")
    return f"Observing player: {agent_idx}\n{render_state(state)}"
