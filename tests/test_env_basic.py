import pathlib
import sys

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT / "src"))

from coop_box_pushing import (  # noqa: E402
    Action,
    ActionStatus,
    BoxPushingEnv,
    EnvConfig,
    InvalidActionError,
    StaleStateAccessError,
    observation_size,
    task_presets,
)


def test_env_reset_and_step_shapes():
    cfg = EnvConfig(horizon=10, view_radius=2, seed=3)
    env = BoxPushingEnv(config=cfg)
    obs = env.reset()
    assert set(obs) == {"agent_0", "agent_1"}
    for agent_obs in obs.values():
        assert agent_obs.shape == (observation_size(cfg.view_radius),)

    actions = {aid: Action.STAY for aid in obs}
    next_obs, rewards, dones, infos = env.step(actions)
    assert set(next_obs.keys()) == set(obs.keys())
    assert set(rewards.keys()) == set(obs.keys())
    assert rewards["agent_0"] == rewards["agent_1"] == pytest.approx(-0.1)
    assert "__all__" in dones and not dones["__all__"]
    assert infos["agent_0"]["status"] == ActionStatus.SUCCESS
    assert infos["agent_1"]["step_count"] == 1


def test_env_runs_to_horizon():
    env = BoxPushingEnv(config=EnvConfig(horizon=5, seed=0))
    obs = env.reset()
    done = False
    steps = 0
    while not done:
        _, _, dones, _ = env.step({aid: Action.TURN_LEFT for aid in obs})
        done = dones["__all__"]
        steps += 1
    assert steps == 5
    with pytest.raises(StaleStateAccessError):
        env.step({aid: Action.STAY for aid in obs})


def test_env_seed_fixes_initiative():
    draws = []
    for _ in range(2):
        env = BoxPushingEnv(config=EnvConfig(seed=11))
        initiatives = []
        for _ in range(8):
            env.reset()
            initiatives.append(env.episode.state.initiative)
        draws.append(initiatives)
    assert draws[0] == draws[1]


def test_env_errors():
    env = BoxPushingEnv()
    with pytest.raises(StaleStateAccessError):
        env.step({"agent_0": Action.STAY, "agent_1": Action.STAY})
    with pytest.raises(StaleStateAccessError):
        env.render()
    env.reset()
    with pytest.raises(InvalidActionError):
        env.step({"agent_0": Action.STAY})
    with pytest.raises(InvalidActionError):
        env.step({"agent_0": Action.STAY, "agent_1": 12})


@pytest.mark.parametrize("name", sorted(task_presets()))
def test_presets_build_and_step(name):
    preset = task_presets()[name]
    assert preset.name == name
    env = BoxPushingEnv(config=preset.env_config)
    obs = env.reset()
    assert all(o.dtype == np.float32 for o in obs.values())
    env.step({aid: Action.MOVE_FORWARD for aid in obs})
    assert "G" in env.render()
