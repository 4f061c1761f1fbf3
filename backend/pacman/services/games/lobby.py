"""Process-wide lobby: online connections, the pairing queue and live sessions.

A single ``Lobby`` is created next to the other extensions and bound to the
app with ``init_app``; tests build isolated instances with a recording
transport. All registry mutation happens under one lock, and messages are
sent only after the lock is released.
"""

import logging
import random
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Protocol, Tuple

from pacman.game.engine import POWER_MODE_MS, TICK_MS
from pacman.game.entities import Direction
from pacman.game.grid import CLASSIC_LAYOUT, MazeLayout
from pacman.game.protocol import (
    GAME_START,
    LOBBY_STATS,
    STATE,
    WAITING,
    encode_game_start,
    encode_lobby_stats,
    encode_snapshot,
    encode_waiting,
)
from pacman.game.session import GameSession, SessionMode
from .scheduler import run_session_loop, run_stats_loop

logger = logging.getLogger(__name__)

NAMESPACE = '/ws'

# (sid or None for everyone, event, payload)
Outgoing = Tuple[Optional[str], str, dict]


class LobbyError(Exception):
    pass


@dataclass(frozen=True)
class Connection:
    sid: str
    nickname: str


class Transport(Protocol):
    def send(self, sid: str, event: str, payload: dict) -> None:
        ...

    def broadcast(self, event: str, payload: dict) -> None:
        ...


class Scoreboard(Protocol):
    def submit_score(self, nickname: str, score: int, ghost_count: int) -> None:
        ...

    def submit_pair_score(self, player1: str, player2: str, score: int) -> None:
        ...


class SocketIOTransport:
    def __init__(self, socketio, namespace: str = NAMESPACE):
        self.socketio = socketio
        self.namespace = namespace

    def send(self, sid: str, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, to=sid, namespace=self.namespace)

    def broadcast(self, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, namespace=self.namespace)


def _run_inline(fn, *args, **kwargs):
    fn(*args, **kwargs)


class Lobby:
    def __init__(self, app=None, socketio=None, scoreboard: Optional[Scoreboard] = None,
                 transport: Optional[Transport] = None, layout: MazeLayout = CLASSIC_LAYOUT,
                 seed: Optional[int] = None):
        self._lock = threading.Lock()
        self.transport = transport
        self.scoreboard = scoreboard
        self.layout = layout
        self.tick_ms = TICK_MS
        self.power_mode_duration_ms = POWER_MODE_MS
        self.default_ghost_count = layout.max_ghosts
        self.stats_interval_sec = 0
        self.run_loops = False
        self.spawn = _run_inline
        self.sleep = time.sleep
        self.clock = time.monotonic
        self._seeds = random.Random(seed)
        self._reset()
        if app is not None:
            self.init_app(app, socketio, scoreboard)

    def _reset(self) -> None:
        self._connections: Dict[str, Connection] = {}
        self._waiting: Deque[Connection] = deque()
        self._by_sid: Dict[str, GameSession] = {}
        self._sessions: Dict[str, GameSession] = {}
        self._stats_loop_started = False
        self.closed = False

    def init_app(self, app, socketio, scoreboard: Optional[Scoreboard] = None) -> None:
        # Rebinding (e.g. one app per test) starts from an empty lobby
        self.shutdown()
        self._reset()
        cfg = app.config
        self.transport = SocketIOTransport(socketio)
        self.scoreboard = scoreboard
        self.tick_ms = int(cfg.get('TICK_INTERVAL_MS', TICK_MS))
        self.power_mode_duration_ms = int(cfg.get('POWER_MODE_DURATION_MS', POWER_MODE_MS))
        self.default_ghost_count = int(cfg.get('DEFAULT_GHOST_COUNT', self.layout.max_ghosts))
        self.stats_interval_sec = int(cfg.get('LOBBY_STATS_INTERVAL_SEC', 0))
        seed = cfg.get('GHOST_RNG_SEED')
        self._seeds = random.Random(int(seed) if seed not in (None, '') else None)
        # No background loops under test unless asked for
        self.run_loops = not (cfg.get('TESTING') and not cfg.get('ENABLE_SCHEDULER_IN_TESTS'))
        self.spawn = socketio.start_background_task if self.run_loops else _run_inline
        self.sleep = socketio.sleep
        app.extensions['pacman_lobby'] = self

    # ---- Queries ----

    @property
    def online_count(self) -> int:
        with self._lock:
            return len(self._connections)

    @property
    def waiting_count(self) -> int:
        with self._lock:
            return len(self._waiting)

    def session_for(self, sid: str) -> Optional[GameSession]:
        with self._lock:
            return self._by_sid.get(sid)

    def find_session(self, nickname: str) -> Optional[GameSession]:
        with self._lock:
            for sid, session in self._by_sid.items():
                conn = self._connections.get(sid)
                if conn and conn.nickname == nickname:
                    return session
        return None

    def sessions(self) -> List[GameSession]:
        with self._lock:
            return list(self._sessions.values())

    # ---- Connection lifecycle ----

    def connect(self, sid: str, nickname: str) -> Connection:
        conn = Connection(sid, nickname)
        with self._lock:
            self._connections[sid] = conn
            count = len(self._connections)
        logger.info(f"[connect] sid={sid} nickname={nickname} online={count}")
        self._flush([(None, LOBBY_STATS, encode_lobby_stats(count))])
        self._ensure_stats_loop()
        return conn

    def disconnect(self, sid: str) -> None:
        with self._lock:
            conn = self._connections.pop(sid, None)
            if conn is None:
                return
            self._dequeue(sid)
            self._leave_session(sid)
            count = len(self._connections)
        logger.info(f"[disconnect] sid={sid} nickname={conn.nickname} online={count}")
        self._flush([(None, LOBBY_STATS, encode_lobby_stats(count))])

    # ---- Intents ----

    def start_single(self, sid: str, ghost_count: Optional[int] = None) -> GameSession:
        with self._lock:
            conn = self._require(sid)
            count = self.default_ghost_count if ghost_count is None else ghost_count
            if not 1 <= count <= self.layout.max_ghosts:
                raise LobbyError(f'ghostCount must be between 1 and {self.layout.max_ghosts}')
            session = GameSession.single(sid, conn.nickname, **self._session_options(count))
            self._dequeue(sid)
            self._leave_session(sid)
            self._register(session)
            self._by_sid[sid] = session
        logger.info(f"[start-single] session={session.id} nickname={conn.nickname} ghosts={session.ghost_count}")
        self._flush([(sid, GAME_START, encode_game_start(session))])
        self._start_loop(session)
        return session

    def join_pair(self, sid: str) -> GameSession:
        outbox: List[Outgoing] = []
        with self._lock:
            conn = self._require(sid)
            if any(c.sid == sid for c in self._waiting):
                return self._by_sid[sid]
            self._leave_session(sid)
            if self._waiting:
                partner = self._waiting.popleft()
                session = self._by_sid[partner.sid]
                session.add_member(sid, conn.nickname)
                session.begin()
                self._by_sid[sid] = session
                start = encode_game_start(session)
                outbox.append((partner.sid, GAME_START, start))
                outbox.append((sid, GAME_START, start))
                matched = partner
            else:
                session = GameSession.waiting_pair(sid, conn.nickname,
                                                   **self._session_options(self.layout.max_ghosts))
                self._register(session)
                self._by_sid[sid] = session
                self._waiting.append(conn)
                outbox.append((sid, WAITING, encode_waiting()))
                matched = None
            queue_len = len(self._waiting)
        if matched is not None:
            logger.info(f"[pair-match] session={session.id} p1={matched.nickname} p2={conn.nickname}")
        else:
            logger.info(f"[pair-wait] session={session.id} nickname={conn.nickname} queue={queue_len}")
        self._flush(outbox)
        if matched is not None:
            self._start_loop(session)
        return session

    def submit_input(self, sid: str, direction: Direction) -> bool:
        session = self.session_for(sid)
        if session is None:
            return False
        return session.request_direction(sid, direction)

    # ---- Session lifecycle (called from the tick loop) ----

    def publish(self, session: GameSession, snapshot) -> None:
        payload = encode_snapshot(snapshot)
        with self._lock:
            sids = list(session.members)
        self._flush([(sid, STATE, payload) for sid in sids])

    def finish_session(self, session: GameSession) -> None:
        # Stopped already means every member left or the lobby shut down
        abandoned = session.is_stopped
        self._unbind(session)
        logger.info(f"[game-over] session={session.id} mode={session.mode.value} score={session.score} abandoned={abandoned}")
        if not abandoned:
            self._submit_scores(session)

    def discard_session(self, session: GameSession) -> None:
        self._unbind(session)
        logger.warning(f"[session-discard] session={session.id}")

    def broadcast_stats(self) -> None:
        self._flush([(None, LOBBY_STATS, encode_lobby_stats(self.online_count))])

    def shutdown(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
            self._by_sid.clear()
            self._waiting.clear()
            self.closed = True
        for session in sessions:
            session.stop()
        if sessions:
            logger.info(f"[shutdown] stopped {len(sessions)} session(s)")

    # ---- Internals (caller holds the lock unless noted) ----

    def _require(self, sid: str) -> Connection:
        conn = self._connections.get(sid)
        if conn is None:
            raise LobbyError(f'unknown connection {sid}')
        return conn

    def _session_options(self, ghost_count: int) -> dict:
        return {
            'layout': self.layout,
            'ghost_count': ghost_count,
            'rng': random.Random(self._seeds.getrandbits(64)),
            'tick_ms': self.tick_ms,
            'power_mode_duration_ms': self.power_mode_duration_ms,
        }

    def _register(self, session: GameSession) -> None:
        self._sessions[session.id] = session

    def _dequeue(self, sid: str) -> bool:
        for conn in self._waiting:
            if conn.sid == sid:
                self._waiting.remove(conn)
                return True
        return False

    def _leave_session(self, sid: str) -> None:
        session = self._by_sid.pop(sid, None)
        if session is None:
            return
        remaining = session.detach(sid)
        if remaining == 0:
            session.stop()
            self._sessions.pop(session.id, None)
            logger.info(f"[session-empty] session={session.id} discarded")

    def _unbind(self, session: GameSession) -> None:
        # Takes the lock itself
        with self._lock:
            for sid in list(session.members):
                if self._by_sid.get(sid) is session:
                    del self._by_sid[sid]
            self._sessions.pop(session.id, None)
        session.stop()

    def _submit_scores(self, session: GameSession) -> None:
        if self.scoreboard is None or session.score <= 0:
            return
        accounts = session.account_names
        if session.mode is SessionMode.SINGLE:
            self.spawn(self._submit, self.scoreboard.submit_score, accounts[0], session.score, session.ghost_count)
        elif len(accounts) == 2:
            self.spawn(self._submit, self.scoreboard.submit_pair_score, accounts[0], accounts[1], session.score)

    @staticmethod
    def _submit(fn, *args) -> None:
        try:
            fn(*args)
        except Exception:
            logger.exception(f"[score-submit-failed] args={args}")

    def _start_loop(self, session: GameSession) -> None:
        if self.run_loops:
            self.spawn(run_session_loop, self, session)

    def _ensure_stats_loop(self) -> None:
        if not self.run_loops or self.stats_interval_sec <= 0:
            return
        with self._lock:
            if self._stats_loop_started:
                return
            self._stats_loop_started = True
        self.spawn(run_stats_loop, self, self.stats_interval_sec)

    def _flush(self, outbox: List[Outgoing]) -> None:
        if self.transport is None:
            return
        for sid, event, payload in outbox:
            try:
                if sid is None:
                    self.transport.broadcast(event, payload)
                else:
                    self.transport.send(sid, event, payload)
            except Exception:
                logger.exception(f"[emit-failed] event={event} sid={sid}")
