from __future__ import annotations

import random
import string
import threading
from dataclasses import replace
from enum import Enum
from typing import Dict, List, Optional

from .engine import POWER_MODE_MS, TICK_MS, World, step, take_snapshot
from .entities import Direction, Snapshot
from .grid import CLASSIC_LAYOUT, MazeLayout


class SessionMode(str, Enum):
    SINGLE = 'single'
    PAIR = 'pair'


class SessionState(str, Enum):
    WAITING = 'waiting'
    PLAYING = 'playing'
    GAME_OVER = 'game_over'


CAPACITY = {SessionMode.SINGLE: 1, SessionMode.PAIR: 2}


class SessionError(Exception):
    pass


def generate_session_code(length=6):
    """Generate a short, human-readable session id."""
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))


class GameSession:
    """One game instance and its state machine: WAITING -> PLAYING -> GAME_OVER.

    Entity and grid state change only inside ``tick``, which runs on the
    session's own loop. Connection handlers talk to the session through
    ``request_direction`` and ``detach``, which touch nothing but the
    per-player pending/detached slots.
    """

    def __init__(self, mode: SessionMode, layout: MazeLayout = CLASSIC_LAYOUT, ghost_count: Optional[int] = None,
                 rng: Optional[random.Random] = None, tick_ms: int = TICK_MS,
                 power_mode_duration_ms: int = POWER_MODE_MS, session_id: Optional[str] = None):
        if ghost_count is not None and not 0 <= ghost_count <= layout.max_ghosts:
            raise SessionError(f'ghost_count must be between 0 and {layout.max_ghosts}')
        self.id = session_id or generate_session_code()
        self.mode = mode
        self.layout = layout
        self.capacity = CAPACITY[mode]
        self.tick_ms = tick_ms
        self.rng = rng or random.Random()
        self.world = World.from_layout(layout, ghost_count=ghost_count,
                                       power_mode_duration_ms=power_mode_duration_ms)
        self.ghost_count = len(self.world.ghosts)
        self.state = SessionState.WAITING
        # sid -> player name inside this session
        self.members: Dict[str, str] = {}
        # player name -> account nickname
        self.accounts: Dict[str, str] = {}
        self._stopped = threading.Event()

    @classmethod
    def single(cls, sid: str, nickname: str, **kwargs) -> 'GameSession':
        session = cls(SessionMode.SINGLE, **kwargs)
        session.add_member(sid, nickname)
        session.begin()
        return session

    @classmethod
    def waiting_pair(cls, sid: str, nickname: str, **kwargs) -> 'GameSession':
        session = cls(SessionMode.PAIR, **kwargs)
        session.add_member(sid, nickname)
        return session

    def __repr__(self):
        return f'<GameSession {self.id} {self.mode.value} {self.state.value}>'

    @property
    def is_full(self) -> bool:
        return len(self.members) >= self.capacity

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.PLAYING and not self._stopped.is_set()

    @property
    def is_stopped(self) -> bool:
        return self._stopped.is_set()

    @property
    def score(self) -> int:
        return self.world.score

    @property
    def nicknames(self) -> List[str]:
        return list(self.world.players)

    @property
    def account_names(self) -> List[str]:
        return [self.accounts[name] for name in self.world.players]

    def add_member(self, sid: str, nickname: str) -> str:
        if self.state is not SessionState.WAITING:
            raise SessionError(f'session {self.id} is no longer accepting players')
        if self.is_full:
            raise SessionError(f'session {self.id} is full')
        name = nickname
        suffix = 2
        while name in self.world.players:
            name = f'{nickname}#{suffix}'
            suffix += 1
        self.world.add_player(name, self.layout.player_spawns[len(self.world.players)])
        self.members[sid] = name
        self.accounts[name] = nickname
        return name

    def begin(self) -> None:
        if self.state is not SessionState.WAITING:
            raise SessionError(f'session {self.id} already started')
        if not self.is_full:
            raise SessionError(f'session {self.id} needs {self.capacity} players to start')
        self.state = SessionState.PLAYING

    def request_direction(self, sid: str, direction: Direction) -> bool:
        name = self.members.get(sid)
        if name is None or self.state is not SessionState.PLAYING:
            return False
        self.world.players[name].pending_direction = direction
        return True

    def detach(self, sid: str) -> int:
        """Drop a connection from the session; returns how many remain."""
        name = self.members.pop(sid, None)
        if name is not None:
            self.world.players[name].detached = True
        return len(self.members)

    def tick(self) -> Snapshot:
        if self.state is not SessionState.PLAYING:
            return self.snapshot()
        snapshot = step(self.world, self.rng, self.tick_ms)
        if self.world.game_over:
            self.state = SessionState.GAME_OVER
        return self._annotate(snapshot)

    def snapshot(self) -> Snapshot:
        return self._annotate(take_snapshot(self.world))

    def stop(self) -> None:
        self._stopped.set()

    def _annotate(self, snapshot: Snapshot) -> Snapshot:
        return replace(snapshot, session_id=self.id, mode=self.mode.value, state=self.state.value)
