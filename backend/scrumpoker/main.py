from flask import Blueprint, jsonify

from scrumpoker import get_rooms

main = Blueprint('main', __name__)


@main.route('/health')
def health():
    return jsonify({'ok': True})


@main.route('/api/rooms/stats')
def room_stats():
    rooms = get_rooms()
    return jsonify({
        'rooms': rooms.rooms_count(),
        'activeUsers': rooms.active_users_count(),
    })


@main.route('/api/rooms/<string:room_id>/exists')
def room_exists(room_id):
    return jsonify({'exists': get_rooms().room_exists(room_id)})


@main.route('/api/rooms/<string:room_id>/state')
def room_state(room_id):
    """
    Returns the read-only snapshot of a room, as broadcast over Socket.IO.
    """
    state = get_rooms().get_state(room_id)
    if state is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(state), 200
