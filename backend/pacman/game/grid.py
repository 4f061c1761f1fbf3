"""Maze definition: cell taxonomy, the immutable template and per-session grid."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List, Sequence, Tuple

from .entities import Direction, Position


class CellType(IntEnum):
    EMPTY = 0
    WALL = 1
    DOT = 2
    PELLET = 3
    DOOR = 9


# ASCII legend accepted by GridTemplate.from_strings
_ASCII_CELLS = {
    ' ': CellType.EMPTY,
    '#': CellType.WALL,
    '.': CellType.DOT,
    'o': CellType.PELLET,
    '-': CellType.DOOR,
}

CONSUMABLE = (CellType.DOT, CellType.PELLET)


class Grid:
    """Mutable cell arena owned by a single session."""

    def __init__(self, rows: Iterable[Iterable[int]]):
        self._cells: List[List[CellType]] = [[CellType(c) for c in row] for row in rows]
        self.height = len(self._cells)
        self.width = len(self._cells[0]) if self._cells else 0

    def cell(self, pos: Position) -> CellType:
        return self._cells[pos.y][pos.x]

    def is_wall(self, pos: Position) -> bool:
        return self.cell(pos) == CellType.WALL

    def consume(self, pos: Position) -> CellType:
        """Clear a DOT or PELLET at pos and return what was there.

        Any other cell is left untouched and reported as EMPTY, so a cell
        yields its bonus exactly once.
        """
        current = self.cell(pos)
        if current in CONSUMABLE:
            self._cells[pos.y][pos.x] = CellType.EMPTY
            return current
        return CellType.EMPTY

    def remaining(self, kind: CellType) -> int:
        return sum(row.count(kind) for row in self._cells)

    def rows(self) -> Tuple[Tuple[int, ...], ...]:
        return tuple(tuple(int(c) for c in row) for row in self._cells)


@dataclass(frozen=True)
class GridTemplate:
    """Read-only maze, cloned into a fresh Grid for every session."""

    cells: Tuple[Tuple[int, ...], ...]

    def __post_init__(self):
        widths = {len(row) for row in self.cells}
        if not self.cells or len(widths) != 1:
            raise ValueError('grid template must be a non-empty rectangle')

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> 'GridTemplate':
        return cls(tuple(tuple(int(CellType(c)) for c in row) for row in rows))

    @classmethod
    def from_strings(cls, lines: Sequence[str]) -> 'GridTemplate':
        try:
            return cls(tuple(tuple(int(_ASCII_CELLS[ch]) for ch in line) for line in lines))
        except KeyError as exc:
            raise ValueError(f'unknown maze character {exc.args[0]!r}') from None

    @property
    def width(self) -> int:
        return len(self.cells[0])

    @property
    def height(self) -> int:
        return len(self.cells)

    def instantiate(self) -> Grid:
        return Grid(self.cells)


@dataclass(frozen=True)
class GhostSpawn:
    id: int
    home: Position
    direction: Direction
    color: str


@dataclass(frozen=True)
class MazeLayout:
    """A template plus where players and ghosts start."""

    template: GridTemplate
    player_spawns: Tuple[Position, ...]
    ghost_spawns: Tuple[GhostSpawn, ...]

    @property
    def max_ghosts(self) -> int:
        return len(self.ghost_spawns)


CLASSIC_MAZE = GridTemplate.from_strings([
    "###################",
    "#........#........#",
    "#o##.###.#.###.##o#",
    "#.##.###.#.###.##.#",
    "#.................#",
    "#.##.#.#####.#.##.#",
    "#....#...#...#....#",
    "####.### # ###.####",
    "   #.#       #.#   ",
    "####.# ##-## #.####",
    " ....  #   #  .... ",
    "####.# ##### #.####",
    "   #.#       #.#   ",
    "####.#.#####.#.####",
    "#........#........#",
    "#.##.###.#.###.##.#",
    "#o.#..... .....#.o#",
    "##.#.#.#####.#.#.##",
    "#....#...#...#....#",
    "###################",
    "###################",
])

CLASSIC_LAYOUT = MazeLayout(
    template=CLASSIC_MAZE,
    player_spawns=(Position(9, 16), Position(9, 12)),
    ghost_spawns=(
        GhostSpawn(1, Position(9, 8), Direction.LEFT, 'red'),
        GhostSpawn(2, Position(8, 10), Direction.RIGHT, 'pink'),
        GhostSpawn(3, Position(9, 10), Direction.UP, 'cyan'),
        GhostSpawn(4, Position(10, 10), Direction.DOWN, 'orange'),
    ),
)
