from __future__ import annotations


class BoxPushingError(Exception):
    """Base class for caller-contract violations in the box-pushing simulator."""


class InvalidActionError(BoxPushingError, ValueError):
    """An action outside the legal set, or submitted for a bad agent index or at the wrong time."""


class OutOfBoundsError(BoxPushingError, IndexError):
    """A coordinate outside the grid reached code that assumed it was in bounds."""


class StaleStateAccessError(BoxPushingError, RuntimeError):
    """Rewards or observations requested from a state that has not been initialized yet."""
