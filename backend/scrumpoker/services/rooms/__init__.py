"""Room domain services: registry, rooms, rounds, stats and permissions.

This package holds the session state engine. It knows nothing about
Flask or Socket.IO; transport code hands it a broadcaster and reads back
plain dict snapshots.
"""
from .registry import RoomRegistry, normalize_room_id, validate_room_id
from .results import ActionResult, DenyReason, LeaveResult

__all__ = [
    'RoomRegistry',
    'normalize_room_id',
    'validate_room_id',
    'ActionResult',
    'DenyReason',
    'LeaveResult',
]
