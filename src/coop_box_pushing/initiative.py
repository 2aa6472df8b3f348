from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral
from typing import List, Tuple

from .errors import InvalidActionError
from .state import EpisodeState
from .world import Orientation

NUM_CHANCE_OUTCOMES = 4


@dataclass(frozen=True)
class InitiativeOutcome:
    """Decoded chance draw: who wins ties, and how the agents start out facing."""

    priority: int
    orientations: Tuple[Orientation, Orientation]


def chance_outcomes() -> List[Tuple[int, float]]:
    """The four equally likely outcomes of the episode-opening draw."""
    prob = 1.0 / NUM_CHANCE_OUTCOMES
    return [(outcome, prob) for outcome in range(NUM_CHANCE_OUTCOMES)]


def decode_outcome(outcome: int) -> InitiativeOutcome:
    """Bit 0 picks the priority agent, bit 1 picks facing inward or outward."""
    if isinstance(outcome, bool) or not isinstance(outcome, Integral) or not 0 <= outcome < NUM_CHANCE_OUTCOMES:
        raise InvalidActionError(f"Chance outcome must be in 0..{NUM_CHANCE_OUTCOMES - 1}, got {outcome!r}")
    outcome = int(outcome)
    priority = outcome & 1
    if outcome >> 1 == 0:
        orientations = (Orientation.EAST, Orientation.WEST)
    else:
        orientations = (Orientation.WEST, Orientation.EAST)
    return InitiativeOutcome(priority=priority, orientations=orientations)


def apply_chance_outcome(state: EpisodeState, outcome: int) -> InitiativeOutcome:
    """Start the episode: fix initiative and starting orientations exactly once."""
    if state.chance_resolved:
        raise InvalidActionError("The initiative draw has already been made for this episode")
    decoded = decode_outcome(outcome)
    for agent, start, orientation in zip(state.agents, state.layout.agent_starts, decoded.orientations):
        agent.row, agent.col = start
        agent.orientation = orientation
    state.initiative = decoded.priority
    state.chance_resolved = True
    return decoded
