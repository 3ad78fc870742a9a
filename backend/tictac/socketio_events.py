import functools
import time

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from tictac import socketio
from tictac.models import MARK_O, MARK_X
from tictac.services.matches.errors import MatchError, NotAParticipant, NotFound


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _registry():
    return current_app.extensions['match_registry']


def _directory():
    return current_app.extensions['participant_directory']


def _namespace() -> str:
    return current_app.config.get('SOCKETIO_NAMESPACE', '/')


def _room(match_id: str) -> str:
    return f"match:{match_id}"


def _field(data, key):
    # Older clients send the bare value instead of an object
    if isinstance(data, dict):
        return data.get(key)
    return data


def _match_id(data) -> str:
    match_id = _field(data, 'match_id')
    if not isinstance(match_id, str) or not match_id.strip():
        raise NotFound('match_id is required')
    return match_id.strip().upper()


def _broadcast_joinable() -> None:
    socketio.emit('joinable_matches', _registry().list_joinable(), namespace=_namespace())


def reports_errors(handler):
    """Turn registry errors into a request_error for the requesting socket only."""
    @functools.wraps(handler)
    def wrapper(*args, **kwargs):
        try:
            return handler(*args, **kwargs)
        except MatchError as exc:
            current_app.logger.info(f"[reject] sid={_get_sid()} event={handler.__name__} code={exc.code}")
            emit('request_error', exc.to_dict())
    return wrapper


def _depart(sid: str, match_id: str) -> bool:
    """Leave a match on behalf of sid and tell whoever is still in it.

    Returns True when the registry actually changed.
    """
    directory = _directory()
    directory.release(sid, match_id)
    leave_room(_room(match_id))

    match = _registry().leave_match(match_id, sid)
    if match is None:
        return False
    if match.participants:
        emit('participant_left', {'name': directory.name_of(sid)}, to=match.room, include_self=False)
    current_app.logger.info(f"[leave] sid={sid} match={match_id} remaining={len(match.participants)}")
    return True


def _leave_current(sid: str) -> bool:
    participant = _directory().lookup(sid)
    if not participant or not participant.active_match_id:
        return False
    return _depart(sid, participant.active_match_id)


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected'})


def handle_disconnect(reason=None):
    # A dropped connection leaves its match exactly like an explicit leave
    sid = _get_sid()
    left = _leave_current(sid)
    _directory().forget(sid)
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    if left:
        _broadcast_joinable()


@reports_errors
def handle_identify(data=None):
    participant = _directory().identify(_get_sid(), _field(data, 'name'))
    current_app.logger.info(f"[identify] sid={participant.connection_id} name={participant.display_name}")
    emit('joinable_matches', _registry().list_joinable())


@reports_errors
def handle_create_match(data=None):
    sid = _get_sid()
    directory = _directory()
    previous = directory.ensure(sid).active_match_id

    match = _registry().create_match(sid)
    if previous:
        _depart(sid, previous)
    directory.assign(sid, match.id, MARK_X)
    join_room(match.room)

    emit('match_created', {
        'match_id': match.id,
        'mark': MARK_X,
        'participants': directory.names_for(match.participants),
    })
    current_app.logger.info(f"[create] sid={sid} match={match.id}")
    _broadcast_joinable()


@reports_errors
def handle_join_match(data=None):
    sid = _get_sid()
    match_id = _match_id(data)
    directory = _directory()
    previous = directory.ensure(sid).active_match_id

    match = _registry().join_match(match_id, sid)
    if previous and previous != match.id:
        _depart(sid, previous)
    directory.assign(sid, match.id, MARK_O)
    join_room(match.room)

    state = match.to_dict(directory.names_for(match.participants))
    emit('match_started', {
        'match_id': match.id,
        'board': state['board'],
        'current_mark': state['current_mark'],
        'participants': state['participants'],
        'marks': state['marks'],
    }, to=match.room)
    current_app.logger.info(f"[join] sid={sid} match={match.id}")
    _broadcast_joinable()


@reports_errors
def handle_make_move(data=None):
    sid = _get_sid()
    match_id = _match_id(data)
    cell_index = data.get('cell_index') if isinstance(data, dict) else None

    match = _registry().apply_move(match_id, sid, cell_index)
    state = match.to_dict(_directory().names_for(match.participants))
    emit('match_updated', {
        'match_id': match.id,
        'board': state['board'],
        'current_mark': state['current_mark'],
        'status': state['status'],
        'winner': state['winner'],
        'participants': state['participants'],
    }, to=match.room)
    current_app.logger.info(f"[move] sid={sid} match={match.id} cell={cell_index} status={match.status}")


@reports_errors
def handle_send_chat(data=None):
    sid = _get_sid()
    match_id = _match_id(data)
    match = _registry().get(match_id)
    if match is None:
        raise NotFound()
    if sid not in match.participants:
        raise NotAParticipant()

    message = data.get('message') if isinstance(data, dict) else None
    message = message.strip() if isinstance(message, str) else ''
    if not message:
        return
    message = message[:current_app.config.get('CHAT_MAX_LENGTH', 500)]

    emit('chat_message', {
        'name': _directory().name_of(sid),
        'message': message,
        'timestamp': time.strftime('%H:%M:%S'),
    }, to=match.room)


@reports_errors
def handle_leave_match(data=None):
    sid = _get_sid()
    match_id = _field(data, 'match_id')
    if isinstance(match_id, str) and match_id.strip():
        match_id = match_id.strip().upper()
    else:
        participant = _directory().lookup(sid)
        match_id = participant.active_match_id if participant else None

    left = _depart(sid, match_id) if match_id else False
    emit('left_match', {'match_id': match_id})
    if left:
        _broadcast_joinable()


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the configured namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('identify', handle_identify, namespace=namespace)
    socketio.on_event('create_match', handle_create_match, namespace=namespace)
    socketio.on_event('join_match', handle_join_match, namespace=namespace)
    socketio.on_event('make_move', handle_make_move, namespace=namespace)
    socketio.on_event('send_chat', handle_send_chat, namespace=namespace)
    socketio.on_event('leave_match', handle_leave_match, namespace=namespace)
