from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .config import EnvConfig, RewardConfig
from .world import DEFAULT_LAYOUT


@dataclass
class TaskSpec:
    name: str
    description: str
    env_config: EnvConfig


def task_presets() -> Dict[str, TaskSpec]:
    """Return predefined fields with tuned configs."""
    return {
        "classic": TaskSpec(
            name="classic",
            description="Open 8x8 field; heavy box two cells wide under a goal on the top row.",
            env_config=EnvConfig(horizon=100, layout=DEFAULT_LAYOUT, view_radius=1),
        ),
        "corridor": TaskSpec(
            name="corridor",
            description="Walled corridor; the light box sits in the way and has to be cleared first.",
            env_config=EnvConfig(
                horizon=60,
                layout=(
                    "#######",
                    "##.G.##",
                    "##...##",
                    "##.BB.#",
                    "##.b..#",
                    "##...##",
                    "#0...1#",
                    "#######",
                ),
                view_radius=1,
                reward=RewardConfig(step_cost=-0.1, win_reward=100.0, bump_penalty=-1.0),
            ),
        ),
        "wide_view": TaskSpec(
            name="wide_view",
            description="Classic field with a larger observation window and a shorter horizon.",
            env_config=EnvConfig(
                horizon=50,
                layout=DEFAULT_LAYOUT,
                view_radius=2,
                reward=RewardConfig(step_cost=-0.2, win_reward=100.0, bump_penalty=0.0),
            ),
        ),
    }
