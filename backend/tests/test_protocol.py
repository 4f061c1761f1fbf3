import pytest

from pacman.game.entities import Direction, Position
from pacman.game.protocol import (
    ProtocolError,
    decode_intent,
    encode_game_start,
    encode_lobby_stats,
    encode_snapshot,
    encode_waiting,
)
from pacman.game.session import GameSession
from conftest import CORRIDOR_LAYOUT


def test_decode_input_from_json_text():
    intent = decode_intent('{"type": "input", "direction": "left"}')
    assert intent.type == 'input'
    assert intent.direction is Direction.LEFT


def test_event_name_wins_over_payload_type():
    intent = decode_intent({'direction': 'UP'}, event='input')
    assert intent.direction is Direction.UP
    assert decode_intent(None, event='join_pair').type == 'join_pair'


def test_decode_start_single_ghost_count():
    assert decode_intent({'type': 'start_single'}).ghost_count is None
    assert decode_intent({'type': 'start_single', 'ghostCount': 2}).ghost_count == 2


@pytest.mark.parametrize('payload', [
    'not json',
    '[1, 2]',
    {'type': 'teleport'},
    {'type': 'input', 'direction': 'diagonal'},
    {'type': 'input'},
    {'type': 'start_single', 'ghostCount': '3'},
    {'type': 'start_single', 'ghostCount': True},
])
def test_malformed_messages_raise(payload):
    with pytest.raises(ProtocolError):
        decode_intent(payload)


def test_control_messages_are_tagged():
    assert encode_lobby_stats(3) == {'type': 'lobby_stats', 'online_count': 3}
    assert encode_waiting() == {'type': 'waiting'}
    session = GameSession.single('sid-a', 'alice', layout=CORRIDOR_LAYOUT)
    start = encode_game_start(session)
    assert start['type'] == 'game_start'
    assert start['mode'] == 'single'
    assert start['players'] == ['alice']
    assert start['sessionId'] == session.id


def test_snapshot_encoding():
    session = GameSession.single('sid-a', 'alice', layout=CORRIDOR_LAYOUT)
    payload = encode_snapshot(session.snapshot())
    assert payload['type'] == 'state'
    assert payload['grid'][1][3] == 3
    assert payload['players'] == {'alice': {'pos': {'x': 1, 'y': 1}, 'dir': None, 'alive': True}}
    assert payload['ghosts'] == [{'id': 1, 'pos': Position(9, 1).to_dict(), 'dir': 'LEFT', 'color': 'red'}]
    assert payload['score'] == 0
    assert payload['gameOver'] is False
    assert payload['powerModeTime'] == 0
    assert payload['state'] == 'playing'
