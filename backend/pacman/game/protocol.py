"""Wire codec for the realtime channel.

Every message, in both directions, carries an explicit ``type``. Outbound
messages are emitted under an event of the same name, so Socket.IO clients
can either listen per event or switch on ``type``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .entities import Direction, Snapshot

START_SINGLE = 'start_single'
JOIN_PAIR = 'join_pair'
INPUT = 'input'
INTENT_TYPES = (START_SINGLE, JOIN_PAIR, INPUT)

LOBBY_STATS = 'lobby_stats'
WAITING = 'waiting'
GAME_START = 'game_start'
STATE = 'state'


class ProtocolError(ValueError):
    """Inbound message that cannot be decoded into an intent."""


@dataclass(frozen=True)
class Intent:
    type: str
    direction: Optional[Direction] = None
    ghost_count: Optional[int] = None


def decode_intent(data: Any, event: Optional[str] = None) -> Intent:
    """Decode a client message.

    ``event`` is the Socket.IO event name when the client used a dedicated
    event; for the generic ``message`` event the type comes from the payload.
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except ValueError:
            raise ProtocolError('message is not valid JSON') from None
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ProtocolError('message must be a JSON object')

    kind = event if event in INTENT_TYPES else data.get('type')
    if kind not in INTENT_TYPES:
        raise ProtocolError(f'unknown message type {kind!r}')

    if kind == INPUT:
        raw = data.get('direction')
        try:
            direction = Direction(str(raw).upper())
        except ValueError:
            raise ProtocolError(f'invalid direction {raw!r}') from None
        return Intent(INPUT, direction=direction)

    if kind == START_SINGLE:
        count = data.get('ghostCount')
        if count is not None and (isinstance(count, bool) or not isinstance(count, int)):
            raise ProtocolError(f'ghostCount must be an integer, got {count!r}')
        return Intent(START_SINGLE, ghost_count=count)

    return Intent(JOIN_PAIR)


def encode_lobby_stats(online_count: int) -> Dict[str, Any]:
    return {'type': LOBBY_STATS, 'online_count': online_count}


def encode_waiting() -> Dict[str, Any]:
    return {'type': WAITING}


def encode_game_start(session) -> Dict[str, Any]:
    return {
        'type': GAME_START,
        'mode': session.mode.value,
        'sessionId': session.id,
        'players': session.nicknames,
        'ghostCount': session.ghost_count,
    }


def encode_snapshot(snapshot: Snapshot) -> Dict[str, Any]:
    return {
        'type': STATE,
        'sessionId': snapshot.session_id,
        'mode': snapshot.mode,
        'state': snapshot.state,
        'tick': snapshot.tick,
        'grid': [list(row) for row in snapshot.grid],
        'players': {
            p.nickname: {
                'pos': p.pos.to_dict(),
                'dir': p.direction.value if p.direction else None,
                'alive': p.alive,
            }
            for p in snapshot.players
        },
        'ghosts': [
            {
                'id': g.id,
                'pos': g.pos.to_dict(),
                'dir': g.direction.value if g.direction else None,
                'color': g.color,
            }
            for g in snapshot.ghosts
        ],
        'score': snapshot.score,
        'gameOver': snapshot.game_over,
        'powerModeTime': snapshot.power_mode_ms,
    }
