from __future__ import annotations

from .state import EpisodeState
from .world import CellKind, Orientation

_AGENT_CHARS = {
    Orientation.NORTH: "^",
    Orientation.EAST: ">",
    Orientation.SOUTH: "v",
    Orientation.WEST: "<",
}


def render_state(state: EpisodeState) -> str:
    """Return an ASCII rendering of the field followed by a short status block."""
    layout = state.layout
    display = [["." for _ in range(layout.width)] for _ in range(layout.height)]
    for r in range(layout.height):
        for c in range(layout.width):
            kind = layout.cell_kind((r, c))
            if kind == CellKind.WALL:
                display[r][c] = "#"
            elif kind == CellKind.GOAL:
                display[r][c] = "G"

    r, c = state.small.position()
    display[r][c] = "b"
    for r, c in state.large.cells():
        display[r][c] = "B"

    for agent in state.agents:
        char = _AGENT_CHARS.get(agent.orientation, str(agent.index))
        display[agent.row][agent.col] = char

    lines = ["".join(row) for row in display]
    lines.append(f"total moves: {state.step_count}")
    lines.append(f"total rewards: {state.total_reward:g}")
    lines.append(f"initiative: {state.initiative}")
    lines.append("status: " + ", ".join(s.name for s in state.last_status))
    return "\n".join(lines)
