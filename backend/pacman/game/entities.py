from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, NamedTuple, Optional, Tuple


class Position(NamedTuple):
    x: int
    y: int

    def to_dict(self) -> Dict[str, int]:
        return {'x': self.x, 'y': self.y}


class Direction(str, Enum):
    UP = 'UP'
    DOWN = 'DOWN'
    LEFT = 'LEFT'
    RIGHT = 'RIGHT'

    @property
    def delta(self) -> Tuple[int, int]:
        return _DELTAS[self]

    @property
    def reverse(self) -> 'Direction':
        return _REVERSE[self]


_DELTAS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

_REVERSE = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

# Candidate order for ghost decisions
ALL_DIRECTIONS = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)


@dataclass
class Player:
    """A human-controlled avatar inside one session.

    - pending_direction: latest input, overwritten (never queued) by new input
      and only consumed by the tick
    - detached: set when the owning connection closes; the next tick turns it
      into alive=False
    """
    nickname: str
    pos: Position
    direction: Optional[Direction] = None
    pending_direction: Optional[Direction] = None
    alive: bool = True
    detached: bool = False
    last_pos: Optional[Position] = None

    def __post_init__(self):
        if self.last_pos is None:
            self.last_pos = self.pos


@dataclass
class Ghost:
    id: int
    pos: Position
    home: Position
    direction: Optional[Direction]
    color: str
    last_pos: Optional[Position] = None

    def __post_init__(self):
        if self.last_pos is None:
            self.last_pos = self.pos

    def send_home(self) -> None:
        self.pos = self.home
        self.last_pos = self.home


@dataclass(frozen=True)
class PlayerView:
    nickname: str
    pos: Position
    direction: Optional[Direction]
    alive: bool


@dataclass(frozen=True)
class GhostView:
    id: int
    pos: Position
    direction: Optional[Direction]
    color: str


@dataclass(frozen=True)
class Snapshot:
    """Immutable state published after every tick."""
    tick: int
    grid: Tuple[Tuple[int, ...], ...]
    players: Tuple[PlayerView, ...]
    ghosts: Tuple[GhostView, ...]
    score: int
    power_mode_ms: int
    game_over: bool
    session_id: Optional[str] = None
    mode: Optional[str] = None
    state: Optional[str] = None

    def player(self, nickname: str) -> Optional[PlayerView]:
        for view in self.players:
            if view.nickname == nickname:
                return view
        return None
