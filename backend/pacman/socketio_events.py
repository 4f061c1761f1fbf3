from flask import current_app, request
from flask_socketio import ConnectionRefusedError

from pacman import socketio, lobby, tokens
from pacman.game.protocol import (
    INPUT,
    JOIN_PAIR,
    START_SINGLE,
    ProtocolError,
    decode_intent,
)
from pacman.game.session import SessionError
from pacman.services.games.lobby import NAMESPACE, LobbyError


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _token_from(auth):
    if isinstance(auth, dict) and auth.get('token'):
        return auth['token']
    return request.args.get('token')


def handle_connect(auth=None):
    nickname = tokens.validate(_token_from(auth))
    if nickname is None:
        current_app.logger.info(f"[connect-refused] sid={_get_sid()}")
        raise ConnectionRefusedError('invalid or missing token')
    lobby.connect(_get_sid(), nickname)


def handle_disconnect(*args):
    lobby.disconnect(_get_sid())


def _dispatch(data, event=None) -> None:
    sid = _get_sid()
    try:
        intent = decode_intent(data, event)
        if intent.type == START_SINGLE:
            lobby.start_single(sid, intent.ghost_count)
        elif intent.type == JOIN_PAIR:
            lobby.join_pair(sid)
        elif intent.type == INPUT:
            lobby.submit_input(sid, intent.direction)
    except ProtocolError as exc:
        current_app.logger.warning(f"[protocol-error] sid={sid} event={event} error={exc}")
    except (SessionError, LobbyError) as exc:
        current_app.logger.warning(f"[intent-rejected] sid={sid} event={event} error={exc}")


def handle_start_single(data=None):
    _dispatch(data, START_SINGLE)


def handle_join_pair(data=None):
    _dispatch(data, JOIN_PAIR)


def handle_input(data=None):
    _dispatch(data, INPUT)


def handle_message(data=None):
    _dispatch(data)


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event(START_SINGLE, handle_start_single, namespace=NAMESPACE)
    socketio.on_event(JOIN_PAIR, handle_join_pair, namespace=NAMESPACE)
    socketio.on_event(INPUT, handle_input, namespace=NAMESPACE)
    socketio.on_event('message', handle_message, namespace=NAMESPACE)
