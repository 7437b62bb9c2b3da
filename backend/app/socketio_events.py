from flask_socketio import join_room, leave_room, emit
from app import socketio
from app.api.leaderboard import LEADERBOARD_ROOM
from app.services.leaderboard import get_engine


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected to /ws'})


def handle_watch_leaderboard(data=None):
    """Subscribe to live updates and send the current top list right away."""
    limit = (data or {}).get('limit')
    try:
        limit = int(limit) if limit is not None else None
    except (TypeError, ValueError):
        limit = None
    join_room(LEADERBOARD_ROOM)
    entries = get_engine().get_top_scores(limit)
    emit('leaderboard', {'room': LEADERBOARD_ROOM, 'leaderboard': [e.to_dict() for e in entries]})


def handle_unwatch_leaderboard(data=None):
    leave_room(LEADERBOARD_ROOM)
    emit('left', {'room': LEADERBOARD_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('watch_leaderboard', handle_watch_leaderboard, namespace=namespace)
        socketio.on_event('unwatch_leaderboard', handle_unwatch_leaderboard, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
