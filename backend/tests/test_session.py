import random

import pytest

from conftest import CORRIDOR_LAYOUT
from pacman.game.entities import Direction, Position
from pacman.game.session import GameSession, SessionError, SessionMode, SessionState


def single(**kwargs):
    return GameSession.single('sid-a', 'alice', layout=CORRIDOR_LAYOUT, rng=random.Random(0), **kwargs)


def test_single_session_starts_playing():
    session = single()
    assert session.mode is SessionMode.SINGLE
    assert session.state is SessionState.PLAYING
    assert session.nicknames == ['alice']
    assert session.ghost_count == 1
    assert len(session.id) == 6


def test_corridor_run():
    session = single()
    assert session.request_direction('sid-a', Direction.RIGHT)

    first = session.tick()
    assert first.score == 10
    assert first.player('alice').pos == Position(2, 1)

    second = session.tick()
    assert second.score == 60
    assert second.power_mode_ms == 5000

    third = session.tick()
    assert third.power_mode_ms == 4850
    assert third.ghosts[0].pos == Position(6, 1)

    fourth = session.tick()
    assert fourth.player('alice').pos == Position(5, 1)
    assert fourth.score == 260
    assert fourth.ghosts[0].pos == Position(9, 1)
    assert fourth.state == 'playing'
    assert fourth.session_id == session.id
    assert fourth.mode == 'single'


def test_pair_waits_for_second_player():
    session = GameSession.waiting_pair('sid-a', 'alice', layout=CORRIDOR_LAYOUT)
    assert session.state is SessionState.WAITING
    assert not session.is_active
    # ticks are no-ops until the pair is complete
    assert session.tick().tick == 0
    with pytest.raises(SessionError):
        session.begin()

    name = session.add_member('sid-b', 'bob')
    session.begin()
    assert name == 'bob'
    assert session.state is SessionState.PLAYING
    assert session.nicknames == ['alice', 'bob']
    with pytest.raises(SessionError):
        session.add_member('sid-c', 'carol')


def test_pair_with_same_account_gets_distinct_names():
    session = GameSession.waiting_pair('sid-a', 'alice', layout=CORRIDOR_LAYOUT)
    assert session.add_member('sid-b', 'alice') == 'alice#2'
    assert session.account_names == ['alice', 'alice']


def test_ghost_count_bounds():
    with pytest.raises(SessionError):
        GameSession(SessionMode.SINGLE, layout=CORRIDOR_LAYOUT, ghost_count=2)
    assert GameSession(SessionMode.SINGLE, layout=CORRIDOR_LAYOUT, ghost_count=0).ghost_count == 0


def test_input_ignored_for_unknown_connection_or_idle_session():
    session = GameSession.waiting_pair('sid-a', 'alice', layout=CORRIDOR_LAYOUT)
    assert not session.request_direction('sid-a', Direction.UP)
    assert not single().request_direction('sid-x', Direction.UP)


def test_detach_keeps_pair_running():
    session = GameSession.waiting_pair('sid-a', 'alice', layout=CORRIDOR_LAYOUT, rng=random.Random(0))
    session.add_member('sid-b', 'bob')
    session.begin()
    assert session.detach('sid-a') == 1
    snap = session.tick()
    assert snap.player('alice').alive is False
    assert snap.player('bob').alive is True
    assert session.state is SessionState.PLAYING


def test_single_ends_when_player_leaves():
    session = single()
    assert session.detach('sid-a') == 0
    snap = session.tick()
    assert snap.game_over
    assert session.state is SessionState.GAME_OVER
    assert not session.is_active


def test_stop_deactivates():
    session = single()
    session.stop()
    assert not session.is_active
