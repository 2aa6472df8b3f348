"""Simultaneous resolution of one turn of the box-pushing game.

Every decision below is taken from the state as it was before the turn. Agent
order only matters through ``state.initiative``, which settles two agents
claiming the same cell. Updates are written back in one go at the end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Sequence, Tuple, Union

from .config import RewardConfig
from .errors import InvalidActionError, OutOfBoundsError
from .state import NUM_AGENTS, Action, ActionStatus, EpisodeState, to_action
from .world import Coord, offset

logger = logging.getLogger(__name__)


class Intent(Enum):
    IDLE = auto()  # turn or stay
    BLOCKED = auto()  # wall, edge, or a box that cannot move
    MOVE = auto()
    FOLLOW = auto()  # step into the cell the other agent stands on
    PUSH_SMALL = auto()
    PUSH_LARGE = auto()


@dataclass(frozen=True)
class Proposal:
    intent: Intent
    target: Optional[Coord] = None
    claims: Tuple[Coord, ...] = ()


def propose(state: EpisodeState, agent_idx: int, action: Action) -> Proposal:
    """What the agent would do if the other agent did not get in the way."""
    if action in (Action.TURN_LEFT, Action.TURN_RIGHT, Action.STAY):
        return Proposal(Intent.IDLE)
    if action != Action.MOVE_FORWARD:
        raise InvalidActionError(f"Unhandled action {action!r}")

    agent = state.agents[agent_idx]
    other = state.agents[1 - agent_idx]
    delta = agent.orientation.forward_delta
    target = offset(agent.position(), delta)

    if state.layout.is_wall(target):
        return Proposal(Intent.BLOCKED, target)
    if state.large.occupies(target):
        return Proposal(Intent.PUSH_LARGE, target)
    if target == other.position():
        return Proposal(Intent.FOLLOW, target, claims=(target,))
    if state.small.occupies(target):
        beyond = offset(target, delta)
        if state.layout.is_wall(beyond) or beyond == other.position() or state.large.occupies(beyond):
            return Proposal(Intent.BLOCKED, target)
        return Proposal(Intent.PUSH_SMALL, target, claims=(target, beyond))
    return Proposal(Intent.MOVE, target, claims=(target,))


def joint_large_push_ok(state: EpisodeState, proposals: Sequence[Proposal]) -> bool:
    """Both agents face the same way and each walks into its own cell of the large box."""
    if any(p.intent != Intent.PUSH_LARGE for p in proposals):
        return False
    orientations = {agent.orientation for agent in state.agents}
    if len(orientations) != 1:
        return False
    targets = {p.target for p in proposals}
    if len(targets) != NUM_AGENTS:
        return False

    shifted = state.large.moved(orientations.pop().forward_delta)
    for cell in shifted.cells():
        if state.layout.is_wall(cell) or state.small.occupies(cell) or cell in targets:
            return False
    return True


def resolve_actions(
    state: EpisodeState,
    actions: Sequence[Union[Action, int]],
    rewards: RewardConfig,
) -> List[ActionStatus]:
    """Resolve one simultaneous turn in place and return each agent's status."""
    if not state.chance_resolved:
        raise InvalidActionError("Agents cannot act before the initiative draw")
    if state.is_terminal:
        raise InvalidActionError("Episode is over; no further actions are accepted")
    if len(actions) != NUM_AGENTS:
        raise InvalidActionError(f"Expected {NUM_AGENTS} actions, got {len(actions)}")
    moves = [to_action(a) for a in actions]
    state.pending_actions = list(moves)

    proposals = [propose(state, idx, moves[idx]) for idx in range(NUM_AGENTS)]
    status = [ActionStatus.UNRESOLVED] * NUM_AGENTS
    for idx, proposal in enumerate(proposals):
        if proposal.intent == Intent.IDLE:
            status[idx] = ActionStatus.SUCCESS
        elif proposal.intent == Intent.BLOCKED:
            status[idx] = ActionStatus.FAIL

    # The large box only moves when both agents push it together.
    large_moves = joint_large_push_ok(state, proposals)
    for idx, proposal in enumerate(proposals):
        if proposal.intent == Intent.PUSH_LARGE:
            status[idx] = ActionStatus.SUCCESS if large_moves else ActionStatus.FAIL

    # Head-on swap: each agent targets the other's cell.
    if all(p.intent == Intent.FOLLOW for p in proposals):
        status = [ActionStatus.FAIL] * NUM_AGENTS

    # Two independent moves claiming a common cell: initiative decides.
    contenders = [idx for idx, p in enumerate(proposals) if p.intent in (Intent.MOVE, Intent.PUSH_SMALL)]
    if len(contenders) == NUM_AGENTS and set(proposals[0].claims) & set(proposals[1].claims):
        winner = state.initiative
        status[winner] = ActionStatus.SUCCESS
        status[1 - winner] = ActionStatus.FAIL
    for idx in contenders:
        if status[idx] == ActionStatus.UNRESOLVED:
            status[idx] = ActionStatus.SUCCESS

    # Following succeeds only behind an agent that actually left its cell.
    for idx, proposal in enumerate(proposals):
        if proposal.intent != Intent.FOLLOW or status[idx] != ActionStatus.UNRESOLVED:
            continue
        other = 1 - idx
        moved = proposals[other].intent in (Intent.MOVE, Intent.PUSH_SMALL)
        vacated = moved and status[other] == ActionStatus.SUCCESS
        status[idx] = ActionStatus.SUCCESS if vacated else ActionStatus.FAIL

    won_now = _apply(state, moves, proposals, status, large_moves)

    reward = rewards.step_cost
    reward += rewards.bump_penalty * sum(1 for s in status if s == ActionStatus.FAIL)
    if won_now:
        reward += rewards.win_reward
    state.last_reward = reward
    state.total_reward += reward
    state.last_status = status
    state.step_count += 1
    state.pending_actions = [None] * NUM_AGENTS

    logger.debug(
        "Turn %d: actions=%s status=%s reward=%.3f",
        state.step_count,
        [m.name for m in moves],
        [s.name for s in status],
        reward,
    )
    if state.is_terminal:
        logger.info(
            "Episode finished after %d turns (won=%s, return=%.3f)",
            state.step_count,
            state.won,
            state.total_reward,
        )
    return status


def _apply(
    state: EpisodeState,
    moves: Sequence[Action],
    proposals: Sequence[Proposal],
    status: Sequence[ActionStatus],
    large_moves: bool,
) -> bool:
    """Write every decided change back at once; returns True on the winning turn."""
    new_small = state.small
    new_large = state.large
    for idx, proposal in enumerate(proposals):
        if status[idx] != ActionStatus.SUCCESS:
            continue
        if proposal.intent == Intent.PUSH_SMALL:
            new_small = state.small.moved(state.agents[idx].orientation.forward_delta)
        elif proposal.intent == Intent.PUSH_LARGE and large_moves:
            new_large = state.large.moved(state.agents[idx].orientation.forward_delta)

    for idx, (action, proposal) in enumerate(zip(moves, proposals)):
        agent = state.agents[idx]
        if action == Action.TURN_LEFT:
            agent.orientation = agent.orientation.turn_left()
        elif action == Action.TURN_RIGHT:
            agent.orientation = agent.orientation.turn_right()
        elif action == Action.MOVE_FORWARD and status[idx] == ActionStatus.SUCCESS:
            agent.row, agent.col = _checked_cell(state, proposal.target)

    for cell in new_small.cells() + new_large.cells():
        _checked_cell(state, cell)
    state.small = new_small
    state.large = new_large

    if large_moves and not state.won and new_large.occupies(state.layout.goal):
        state.won = True
        return True
    return False


def _checked_cell(state: EpisodeState, coord: Optional[Coord]) -> Coord:
    if coord is None or state.layout.is_wall(coord):
        raise OutOfBoundsError(f"Resolution produced an illegal cell {coord}")
    return coord
