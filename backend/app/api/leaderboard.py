from flask import Blueprint, jsonify, request, current_app
from sqlalchemy.exc import SQLAlchemyError
from app import db, socketio
from app.models import Score
from app.services.leaderboard import ValidationError, get_engine, validate_submission


leaderboard = Blueprint('leaderboard', __name__)

LEADERBOARD_ROOM = 'leaderboard'


def _serialize_top(limit=None):
    return [entry.to_dict() for entry in get_engine().get_top_scores(limit)]


def broadcast_leaderboard() -> None:
    """Push the current top list to every socket watching the leaderboard."""
    socketio.emit('leaderboard_update', {'leaderboard': _serialize_top()}, to=LEADERBOARD_ROOM, namespace='/ws')


@leaderboard.route('/save-score', methods=['POST'])
def save_score():
    data = request.get_json(silent=True)
    max_len = int(current_app.config.get('PLAYER_NAME_MAX_LENGTH', 255))
    max_score = get_engine().max_score
    try:
        player, value = validate_submission(data, max_name_length=max_len, max_score=max_score)
    except ValidationError as exc:
        return jsonify({'success': False, 'message': str(exc)}), 400

    # History row first; the leaderboard is best effort on top of it
    score = Score(player=player, score=value)
    try:
        db.session.add(score)
        db.session.commit()
    except (SQLAlchemyError, OverflowError) as exc:
        db.session.rollback()
        current_app.logger.error(f"[score-save-failed] player={player!r} score={value}: {exc}")
        return jsonify({'success': False, 'message': 'Could not save score'}), 500

    if get_engine().add_score(player, value):
        broadcast_leaderboard()
    else:
        current_app.logger.warning(f"[leaderboard-skip] score id={score.id} saved but not ranked")

    current_app.logger.info(f"[score-saved] id={score.id} player={player!r} score={value}")
    return jsonify({
        'success': True,
        'message': 'Score saved successfully',
        'score': score.id,
    }), 201


@leaderboard.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    limit = request.args.get('limit', type=int)
    engine = get_engine()
    entries = engine.get_top_scores(limit)
    payload = {
        'success': True,
        'leaderboard': [e.to_dict() for e in entries],
    }
    # An empty list is ambiguous; tell the client when the backend is down
    if not entries and not engine.is_available():
        payload['message'] = 'Leaderboard temporarily unavailable'
    return jsonify(payload)


@leaderboard.route('/leaderboard/rank/<path:player>', methods=['GET'])
def get_player_rank(player):
    rank = get_engine().get_player_rank(player)
    if rank is None:
        return jsonify({'success': False, 'message': 'Player not found'}), 404
    return jsonify({'success': True, 'player': player, 'rank': rank})


@leaderboard.route('/leaderboard/stats', methods=['GET'])
def get_leaderboard_stats():
    engine = get_engine()
    return jsonify({
        'success': True,
        'total_scores': engine.total_scores(),
        'max_size': engine.max_size,
    })
