class SocketIOBroadcaster:
    """Adapts ``socketio.emit(..., to=room)`` to ``to(room).emit(event, payload)``."""

    def __init__(self, socketio, namespace: str):
        self.socketio = socketio
        self.namespace = namespace

    def to(self, room_id: str) -> '_RoomChannel':
        return _RoomChannel(self, room_id)


class _RoomChannel:
    def __init__(self, broadcaster: SocketIOBroadcaster, room_id: str):
        self._broadcaster = broadcaster
        self.room_id = room_id

    def emit(self, event: str, payload=None) -> None:
        args = () if payload is None else (payload,)
        self._broadcaster.socketio.emit(
            event, *args, to=self.room_id, namespace=self._broadcaster.namespace
        )
