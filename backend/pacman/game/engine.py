"""Per-tick transition for a playing session.

The engine owns no clock and no randomness of its own: callers pass the
tick interval and a ``random.Random`` so runs are reproducible under a fixed
seed. ``step`` mutates the session's World in place and returns an immutable
Snapshot of the result.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .entities import (
    ALL_DIRECTIONS,
    Direction,
    Ghost,
    GhostView,
    Player,
    PlayerView,
    Position,
    Snapshot,
)
from .grid import CellType, Grid, MazeLayout

DOT_POINTS = 10
PELLET_POINTS = 50
GHOST_POINTS = 200
POWER_MODE_MS = 5000
TICK_MS = 150
# Chance a ghost re-rolls its heading even when it could keep going
GHOST_TURN_CHANCE = 0.2


@dataclass
class World:
    grid: Grid
    players: Dict[str, Player]
    ghosts: List[Ghost]
    score: int = 0
    power_mode_ms: int = 0
    tick: int = 0
    game_over: bool = False
    power_mode_duration_ms: int = POWER_MODE_MS

    @classmethod
    def from_layout(cls, layout: MazeLayout, nicknames: Sequence[str] = (), ghost_count: Optional[int] = None,
                    power_mode_duration_ms: int = POWER_MODE_MS) -> 'World':
        count = layout.max_ghosts if ghost_count is None else ghost_count
        ghosts = [
            Ghost(id=s.id, pos=s.home, home=s.home, direction=s.direction, color=s.color)
            for s in layout.ghost_spawns[:count]
        ]
        world = cls(grid=layout.template.instantiate(), players={}, ghosts=ghosts,
                    power_mode_duration_ms=power_mode_duration_ms)
        for nickname in nicknames:
            world.add_player(nickname, layout.player_spawns[len(world.players)])
        return world

    def add_player(self, nickname: str, spawn: Position) -> Player:
        if nickname in self.players:
            raise ValueError(f'nickname {nickname!r} already in this world')
        player = Player(nickname=nickname, pos=spawn)
        self.players[nickname] = player
        return player

    def alive_players(self) -> List[Player]:
        return [p for p in self.players.values() if p.alive]


def target_cell(grid: Grid, pos: Position, direction: Direction) -> Optional[Position]:
    """Destination of one step from pos, or None when the move is illegal.

    Leaving through the top or bottom edge is never allowed; leaving through
    a side wraps to the opposite column. Walls block, every other cell is open.
    """
    dx, dy = direction.delta
    x, y = pos.x + dx, pos.y + dy
    if y < 0 or y >= grid.height:
        return None
    if x < 0:
        x = grid.width - 1
    elif x >= grid.width:
        x = 0
    dest = Position(x, y)
    if grid.is_wall(dest):
        return None
    return dest


def legal_directions(grid: Grid, pos: Position) -> List[Direction]:
    return [d for d in ALL_DIRECTIONS if target_cell(grid, pos, d) is not None]


def resolve_direction(grid: Grid, player: Player) -> Optional[Direction]:
    pending = player.pending_direction
    if pending is not None and target_cell(grid, player.pos, pending) is not None:
        player.direction = pending
        # Input written by a connection meanwhile must survive
        if player.pending_direction is pending:
            player.pending_direction = None
        return pending
    if player.direction is not None and target_cell(grid, player.pos, player.direction) is not None:
        return player.direction
    return None


def move_player(world: World, player: Player) -> CellType:
    """Move one player and apply consumption. Returns the cell type eaten."""
    player.last_pos = player.pos
    direction = resolve_direction(world.grid, player)
    if direction is None:
        return CellType.EMPTY
    player.pos = target_cell(world.grid, player.pos, direction)
    eaten = world.grid.consume(player.pos)
    if eaten == CellType.DOT:
        world.score += DOT_POINTS
    elif eaten == CellType.PELLET:
        world.score += PELLET_POINTS
        world.power_mode_ms = world.power_mode_duration_ms
    return eaten


def choose_ghost_direction(grid: Grid, ghost: Ghost, rng: random.Random) -> Optional[Direction]:
    legal = legal_directions(grid, ghost.pos)
    if not legal:
        return None
    candidates = legal
    if ghost.direction is not None:
        # Reversing is a last resort
        forward = [d for d in legal if d is not ghost.direction.reverse]
        if forward:
            candidates = forward
    if ghost.direction in legal and rng.random() > GHOST_TURN_CHANCE:
        return ghost.direction
    return rng.choice(candidates)


def move_ghost(world: World, ghost: Ghost, rng: random.Random) -> None:
    ghost.last_pos = ghost.pos
    direction = choose_ghost_direction(world.grid, ghost, rng)
    if direction is None:
        return
    ghost.direction = direction
    ghost.pos = target_cell(world.grid, ghost.pos, direction)


def collides(player: Player, ghost: Ghost) -> bool:
    if player.pos == ghost.pos:
        return True
    # Swapped cells during the same tick
    return player.pos == ghost.last_pos and ghost.pos == player.last_pos


def resolve_collisions(world: World) -> None:
    for ghost in world.ghosts:
        for player in world.players.values():
            if not player.alive or not collides(player, ghost):
                continue
            if world.power_mode_ms > 0:
                world.score += GHOST_POINTS
                ghost.send_home()
                break
            player.alive = False


def take_snapshot(world: World) -> Snapshot:
    return Snapshot(
        tick=world.tick,
        grid=world.grid.rows(),
        players=tuple(
            PlayerView(nickname=p.nickname, pos=p.pos, direction=p.direction, alive=p.alive)
            for p in world.players.values()
        ),
        ghosts=tuple(
            GhostView(id=g.id, pos=g.pos, direction=g.direction, color=g.color)
            for g in world.ghosts
        ),
        score=world.score,
        power_mode_ms=world.power_mode_ms,
        game_over=world.game_over,
    )


def step(world: World, rng: random.Random, tick_ms: int = TICK_MS) -> Snapshot:
    if world.game_over:
        return take_snapshot(world)

    for player in world.players.values():
        if player.detached:
            player.alive = False

    armed = False
    for player in world.alive_players():
        if move_player(world, player) == CellType.PELLET:
            armed = True

    for ghost in world.ghosts:
        move_ghost(world, ghost, rng)

    resolve_collisions(world)
    if not world.alive_players():
        world.game_over = True

    # A timer armed during this tick starts counting down on the next one
    if not armed:
        world.power_mode_ms = max(0, world.power_mode_ms - tick_ms)

    world.tick += 1
    return take_snapshot(world)
