import pathlib
import sys

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT / "src"))

from coop_box_pushing import (  # noqa: E402
    Action,
    ActionStatus,
    BoxPushingGame,
    EnvConfig,
    InvalidActionError,
    Orientation,
    RewardConfig,
    task_presets,
)

N, E, S, W = Orientation.NORTH, Orientation.EAST, Orientation.SOUTH, Orientation.WEST
OK, FAIL = ActionStatus.SUCCESS, ActionStatus.FAIL
FWD = Action.MOVE_FORWARD


def make_episode(rows, orientations, priority=0, horizon=100, reward=None):
    config = EnvConfig(horizon=horizon, layout=tuple(rows), reward=reward or RewardConfig())
    episode = BoxPushingGame(config).new_initial_state()
    episode.apply_chance_outcome(priority)
    for agent, orientation in zip(episode.state.agents, orientations):
        agent.orientation = orientation
    return episode


def positions(episode):
    return [agent.position() for agent in episode.state.agents]


def test_turns_and_stay_always_succeed():
    ep = make_episode(["G......", "..01...", "b....BB"], (N, N))
    status = ep.apply_simultaneous_actions(Action.TURN_LEFT, Action.TURN_RIGHT)
    assert status == (OK, OK)
    assert [a.orientation for a in ep.state.agents] == [W, E]
    status = ep.apply_simultaneous_actions(Action.STAY, Action.TURN_RIGHT)
    assert status == (OK, OK)
    assert [a.orientation for a in ep.state.agents] == [W, S]
    assert positions(ep) == [(1, 2), (1, 3)]


def test_head_on_collision_fails_both():
    ep = make_episode(["G......", ".......", "..01...", ".......", "b....BB"], (E, W))
    status = ep.apply_simultaneous_actions(FWD, FWD)
    assert status == (FAIL, FAIL)
    assert positions(ep) == [(2, 2), (2, 3)]
    assert ep.step_reward() == [pytest.approx(-0.1)] * 2


@pytest.mark.parametrize("priority", [0, 1])
def test_contested_open_cell_goes_to_priority_agent(priority):
    ep = make_episode(["G......", ".......", "..0.1..", ".......", "b....BB"], (E, W), priority=priority)
    status = ep.apply_simultaneous_actions(FWD, FWD)
    winner, loser = priority, 1 - priority
    assert status[winner] == OK
    assert status[loser] == FAIL
    assert ep.state.agents[winner].position() == (2, 3)
    assert ep.state.agents[loser].position() == ((2, 2), (2, 4))[loser]


def test_agent_follows_one_that_moves_away():
    ep = make_episode(["G......", ".......", "..01...", ".......", "b....BB"], (E, E))
    status = ep.apply_simultaneous_actions(FWD, FWD)
    assert status == (OK, OK)
    assert positions(ep) == [(2, 3), (2, 4)]


def test_follower_fails_when_leader_is_blocked():
    ep = make_episode(["G......", ".......", ".....01", ".......", "b....BB"], (E, E))
    status = ep.apply_simultaneous_actions(FWD, FWD)
    assert status == (FAIL, FAIL)
    assert positions(ep) == [(2, 5), (2, 6)]


def test_follower_fails_when_leader_only_turns():
    ep = make_episode(["G......", ".......", "..01...", ".......", "b....BB"], (E, E))
    status = ep.apply_simultaneous_actions(FWD, Action.TURN_LEFT)
    assert status == (FAIL, OK)
    assert positions(ep) == [(2, 2), (2, 3)]
    assert ep.state.agents[1].orientation == N


def test_wall_and_edge_block_movement():
    ep = make_episode(["G......", ".0#...1", "b....BB"], (E, E))
    status = ep.apply_simultaneous_actions(FWD, FWD)
    assert status == (FAIL, FAIL)
    assert positions(ep) == [(1, 1), (1, 6)]


def test_single_agent_pushes_small_box():
    ep = make_episode(["G......", ".......", ".0b....", ".......", ".1...BB"], (E, N))
    status = ep.apply_simultaneous_actions(FWD, Action.STAY)
    assert status == (OK, OK)
    assert ep.state.agents[0].position() == (2, 2)
    assert ep.state.small.position() == (2, 3)
    assert ep.step_reward() == [pytest.approx(-0.1)] * 2
    assert not ep.state.won


@pytest.mark.parametrize("action1", [Action.STAY, FWD])
def test_small_box_blocked_by_other_agent_snapshot(action1):
    # The other agent counts as an obstacle even when it leaves this turn.
    ep = make_episode(["G......", ".......", ".0b1...", ".......", ".....BB"], (E, E))
    status = ep.apply_simultaneous_actions(FWD, action1)
    assert status[0] == FAIL
    assert status[1] == OK
    assert ep.state.agents[0].position() == (2, 1)
    assert ep.state.small.position() == (2, 2)


@pytest.mark.parametrize(
    "rows",
    [
        ["G......", ".......", ".0bBB..", ".......", ".1....."],
        ["G......", ".......", ".0b#...", ".......", ".1...BB"],
        ["G......", ".......", ".....0b", ".......", ".1...BB"],
    ],
)
def test_small_box_blocked_by_obstacle(rows):
    ep = make_episode(rows, (E, N))
    before = ep.state.small.position()
    status = ep.apply_simultaneous_actions(FWD, Action.STAY)
    assert status == (FAIL, OK)
    assert ep.state.small.position() == before


@pytest.mark.parametrize("priority", [0, 1])
def test_small_box_destination_contested(priority):
    ep = make_episode(["G......", "...1...", ".0b....", ".......", ".....BB"], (E, S), priority=priority)
    status = ep.apply_simultaneous_actions(FWD, FWD)
    if priority == 0:
        assert status == (OK, FAIL)
        assert positions(ep) == [(2, 2), (1, 3)]
        assert ep.state.small.position() == (2, 3)
    else:
        assert status == (FAIL, OK)
        assert positions(ep) == [(2, 1), (2, 3)]
        assert ep.state.small.position() == (2, 2)


LARGE = ["...G...", ".......", "..BB...", "..01...", "b......"]


def test_joint_push_moves_large_box_and_wins():
    ep = make_episode(LARGE, (N, N))
    status = ep.apply_simultaneous_actions(FWD, FWD)
    assert status == (OK, OK)
    assert positions(ep) == [(2, 2), (2, 3)]
    assert ep.state.large.cells() == ((1, 2), (1, 3))
    assert not ep.is_terminal()

    status = ep.apply_simultaneous_actions(FWD, FWD)
    assert status == (OK, OK)
    assert ep.state.large.cells() == ((0, 2), (0, 3))
    assert ep.state.won
    assert ep.is_terminal()
    assert ep.state.step_count == 2
    assert ep.step_reward() == [pytest.approx(100.0 - 0.1)] * 2
    assert ep.total_return() == [pytest.approx(100.0 - 0.2)] * 2
    with pytest.raises(InvalidActionError):
        ep.apply_simultaneous_actions(Action.STAY, Action.STAY)


@pytest.mark.parametrize("other", [Action.STAY, Action.TURN_LEFT])
def test_lone_push_never_moves_large_box(other):
    ep = make_episode(LARGE, (N, N))
    status = ep.apply_simultaneous_actions(FWD, other)
    assert status == (FAIL, OK)
    assert ep.state.large.cells() == ((2, 2), (2, 3))
    assert ep.state.agents[0].position() == (3, 2)


def test_large_push_needs_matching_orientation():
    ep = make_episode(["...G...", ".......", "..BB1..", "..0....", "b......"], (N, W))
    status = ep.apply_simultaneous_actions(FWD, FWD)
    assert status == (FAIL, FAIL)
    assert ep.state.large.cells() == ((2, 2), (2, 3))


@pytest.mark.parametrize(
    "rows",
    [
        ["...G...", "..##...", "..BB...", "..01...", "b......"],
        ["...G...", "..b....", "..BB...", "..01...", "......."],
        ["..BB...", "..01...", "......G", ".......", "b......"],
    ],
)
def test_large_push_blocked(rows):
    ep = make_episode(rows, (N, N))
    before = ep.state.large.cells()
    status = ep.apply_simultaneous_actions(FWD, FWD)
    assert status == (FAIL, FAIL)
    assert ep.state.large.cells() == before
    assert not ep.state.won


def test_bump_penalty_charged_per_failed_move():
    reward = RewardConfig(step_cost=-0.1, win_reward=100.0, bump_penalty=-5.0)
    ep = make_episode(["G......", ".......", "..01...", ".......", "b....BB"], (E, W), reward=reward)
    ep.apply_simultaneous_actions(FWD, FWD)
    assert ep.step_reward() == [pytest.approx(-10.1)] * 2


def test_episode_ends_at_horizon_without_win():
    ep = make_episode(LARGE, (N, N), horizon=3)
    for step in range(3):
        assert not ep.is_terminal()
        ep.apply_simultaneous_actions(Action.STAY, Action.STAY)
        assert ep.state.step_count == step + 1
    assert ep.is_terminal()
    assert not ep.state.won
    assert ep.total_return() == [pytest.approx(-0.3)] * 2


def test_pending_actions_cleared_and_statuses_recorded():
    ep = make_episode(LARGE, (N, N))
    ep.apply_simultaneous_actions(FWD, Action.STAY)
    assert ep.state.pending_actions == [None, None]
    assert ep.last_status == (FAIL, OK)


@pytest.mark.parametrize("bad", [7, -1, "forward", None, True])
def test_invalid_actions_rejected(bad):
    ep = make_episode(LARGE, (N, N))
    with pytest.raises(InvalidActionError):
        ep.apply_simultaneous_actions(bad, Action.STAY)
    assert ep.state.step_count == 0


def test_integer_action_ids_accepted():
    ep = make_episode(LARGE, (N, N))
    status = ep.apply_simultaneous_actions(2, 2)
    assert status == (OK, OK)


def test_resolution_is_deterministic():
    ep = make_episode(["G......", "...1...", ".0b....", ".......", ".....BB"], (E, S), priority=1)
    first, second = ep.clone(), ep.clone()
    s1 = first.apply_simultaneous_actions(FWD, FWD)
    s2 = second.apply_simultaneous_actions(FWD, FWD)
    assert s1 == s2
    assert str(first) == str(second)
    assert first.state.step_count == 1
    assert ep.state.step_count == 0


def _check_invariants(state):
    layout = state.layout
    occupied = [a.position() for a in state.agents] + list(state.small.cells()) + list(state.large.cells())
    assert len(occupied) == len(set(occupied))
    for cell in occupied:
        assert layout.in_bounds(cell)
        assert not layout.is_wall(cell)


@pytest.mark.parametrize("task", ["classic", "corridor"])
def test_random_rollouts_keep_invariants(task):
    game = BoxPushingGame(task_presets()[task].env_config)
    rng = np.random.default_rng(0)
    for _ in range(30):
        ep = game.new_initial_state()
        ep.apply_chance_outcome(int(rng.integers(0, 4)))
        rewards = []
        was_won = False
        while not ep.is_terminal():
            before = [a.position() for a in ep.state.agents]
            action0, action1 = (Action(int(a)) for a in rng.integers(0, 4, size=2))
            ep.apply_simultaneous_actions(action0, action1)
            after = [a.position() for a in ep.state.agents]
            # No swap.
            assert not (after[0] == before[1] and after[1] == before[0])
            rewards.append(ep.step_reward()[0])
            _check_invariants(ep.state)
            was_won = was_won or ep.state.won
            assert ep.state.won == was_won
        assert ep.state.step_count <= game.config.horizon
        assert ep.total_return()[0] == pytest.approx(sum(rewards))
