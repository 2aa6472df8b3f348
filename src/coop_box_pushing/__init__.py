"""Cooperative two-agent box-pushing simulator with simultaneous-move resolution."""

from .config import EnvConfig, RewardConfig  # noqa: F401
from .env import BoxPushingEnv  # noqa: F401
from .errors import BoxPushingError, InvalidActionError, OutOfBoundsError, StaleStateAccessError  # noqa: F401
from .game import BoxPushingEpisode, BoxPushingGame, Mover  # noqa: F401
from .observation import encode_observation, observation_size  # noqa: F401
from .state import Action, ActionStatus, EpisodeState  # noqa: F401
from .tasks import TaskSpec, task_presets  # noqa: F401
from .world import CellKind, GridLayout, Orientation  # noqa: F401
