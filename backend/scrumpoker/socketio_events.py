import threading
from typing import Dict, Optional

from flask import current_app, request
from flask_socketio import ConnectionRefusedError, disconnect, emit, join_room, leave_room

from scrumpoker import get_connections, get_rooms, socketio
from scrumpoker.errors import RoomError
from scrumpoker.models import User
from scrumpoker.services.rooms import normalize_room_id
from scrumpoker.services.rooms.broadcast import SocketIOBroadcaster


class ConnectionTracker:
    """Maps socket ids to users and each user to their active socket."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sid_to_user: Dict[str, User] = {}
        self._user_to_sid: Dict[str, str] = {}

    def register(self, sid: str, user: User) -> Optional[str]:
        """Track ``sid`` for ``user``; returns the user's previous socket id, if any."""
        with self._lock:
            previous = self._user_to_sid.get(user.id)
            self._sid_to_user[sid] = user
            self._user_to_sid[user.id] = sid
            return previous if previous != sid else None

    def unregister(self, sid: str) -> Optional[User]:
        with self._lock:
            user = self._sid_to_user.pop(sid, None)
            if user and self._user_to_sid.get(user.id) == sid:
                del self._user_to_sid[user.id]
            return user

    def user_for(self, sid: str) -> Optional[User]:
        with self._lock:
            return self._sid_to_user.get(sid)

    def is_active(self, sid: str) -> bool:
        with self._lock:
            user = self._sid_to_user.get(sid)
            return user is not None and self._user_to_sid.get(user.id) == sid


def _namespace() -> str:
    return current_app.config.get('SOCKETIO_NAMESPACE', '/poker')


def _broadcaster() -> SocketIOBroadcaster:
    return SocketIOBroadcaster(socketio, _namespace())


def _current_user() -> Optional[User]:
    return get_connections().user_for(request.sid)  # type: ignore


def _broadcast_state(room_id: str) -> None:
    state = get_rooms().get_state(room_id)
    if state:
        _broadcaster().to(state['id']).emit('room:state', state)


def handle_connect(auth=None):
    auth = auth or {}
    user_id, name = auth.get('userId'), auth.get('name')
    if not user_id or not name:
        current_app.logger.warning('[auth-failed] no credentials provided')
        raise ConnectionRefusedError('No auth')

    user = User(id=str(user_id), name=str(name))
    sid = request.sid  # type: ignore
    previous_sid = get_connections().register(sid, user)
    current_app.logger.info(f"[connect] user={user.id} name={user.name!r} sid={sid}")

    if previous_sid and current_app.config.get('ENFORCE_SINGLE_CONNECTION', True):
        socketio.emit(
            'force:disconnect',
            {'reason': 'Another session connected with your account'},
            to=previous_sid,
            namespace=_namespace(),
        )
        disconnect(sid=previous_sid, namespace=_namespace())
        current_app.logger.info(f"[connect-kick] user={user.id} kicked_sid={previous_sid}")

    emit('connected', {'userId': user.id})


def handle_disconnect(reason=None):
    sid = request.sid  # type: ignore
    connections = get_connections()
    if not connections.is_active(sid):
        # Superseded sockets must not pull the user out of their room
        connections.unregister(sid)
        return
    user = connections.unregister(sid)
    current_app.logger.info(f"[disconnect] user={user.id} sid={sid} reason={reason}")

    rooms = get_rooms()
    room_id = rooms.find_user_room(user.id)
    if room_id:
        result = rooms.leave_room(room_id, user.id)
        if result and not result.room_deleted:
            _broadcast_state(room_id)


def handle_room_exists(data):
    room_id = (data or {}).get('roomId')
    return {'exists': get_rooms().room_exists(room_id)}


def handle_room_join(data):
    user = _current_user()
    if user is None:
        return {'error': 'Not authenticated'}
    data = data or {}
    try:
        room = get_rooms().join_or_create_room(data.get('roomId'), user, data.get('role'))
    except RoomError as exc:
        current_app.logger.warning(f"[room-join-failed] user={user.id} error={exc.message!r}")
        return {'error': exc.message}

    join_room(room.id)
    state = get_rooms().get_state(room.id)
    if not state:
        return {'error': 'Room not found'}
    _broadcaster().to(room.id).emit('room:state', state)
    return {'state': state}


def handle_room_leave(data):
    user = _current_user()
    room_id = (data or {}).get('roomId')
    if user is None or not room_id:
        return {'success': False}
    result = get_rooms().leave_room(room_id, user.id)
    if not result or not result.was_in_room:
        current_app.logger.warning(f"[room-leave-failed] user={user.id} room={room_id}")
        return {'success': False}
    leave_room(normalize_room_id(room_id))
    _broadcast_state(room_id)
    return {'success': True}


def handle_update_name(data):
    user = _current_user()
    if user is None:
        return {'error': 'Not authenticated'}
    data = data or {}
    room_id = data.get('roomId')
    new_name = str(data.get('newName') or '').strip()
    if not new_name:
        return {'error': 'Name is required'}

    # Later rooms joined on this socket use the new name too
    user.name = new_name
    if not get_rooms().update_participant_name(room_id, user.id, new_name):
        return {'error': 'User not found in room'}
    _broadcast_state(room_id)
    return {'success': True}


def handle_vote_cast(data):
    user = _current_user()
    if user is None:
        return
    data = data or {}
    room_id = data.get('roomId')
    if get_rooms().cast_vote(room_id, user.id, data.get('value')):
        _broadcast_state(room_id)


def handle_reveal_start(data):
    user = _current_user()
    if user is None:
        return
    get_rooms().start_reveal((data or {}).get('roomId'), user.id, _broadcaster())


def handle_vote_clear(data):
    user = _current_user()
    if user is None:
        return
    room_id = (data or {}).get('roomId')
    if get_rooms().clear_votes(room_id, user.id):
        _broadcaster().to(normalize_room_id(room_id)).emit('votes:cleared')
        _broadcast_state(room_id)


def register_socketio_handlers(namespace: str = '/poker') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('room:exists', handle_room_exists, namespace=namespace)
    socketio.on_event('room:join', handle_room_join, namespace=namespace)
    socketio.on_event('room:leave', handle_room_leave, namespace=namespace)
    socketio.on_event('user:updateName', handle_update_name, namespace=namespace)
    socketio.on_event('vote:cast', handle_vote_cast, namespace=namespace)
    socketio.on_event('reveal:start', handle_reveal_start, namespace=namespace)
    socketio.on_event('vote:clear', handle_vote_clear, namespace=namespace)
