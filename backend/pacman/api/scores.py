from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user

from pacman.services.games.scoring import save_score, top_scores, top_pair_scores

scores = Blueprint('scores', __name__)


def _ghost_count(raw, default):
    if raw is None:
        return default
    if isinstance(raw, bool):
        raise ValueError(raw)
    count = int(raw)
    if not 1 <= count <= 4:
        raise ValueError(raw)
    return count


@scores.route('/score', methods=['POST'])
@login_required
def submit_score():
    data = request.get_json(silent=True) or {}
    score = data.get('score')
    if isinstance(score, bool) or not isinstance(score, int) or score < 0:
        return jsonify({'error': 'score must be a non-negative integer'}), 400
    try:
        ghost_count = _ghost_count(data.get('ghostCount'), current_app.config.get('DEFAULT_GHOST_COUNT', 4))
    except (TypeError, ValueError):
        return jsonify({'error': 'ghostCount must be an integer between 1 and 4'}), 400

    stored = save_score(current_user.nickname, score, ghost_count)
    current_app.logger.info(f"[score-api] nickname={current_user.nickname} score={score} ghosts={ghost_count} stored={stored}")
    return jsonify({'message': 'Score saved' if stored else 'Score not higher than best', 'stored': stored})


@scores.route('/scoreboard', methods=['GET'])
def scoreboard():
    try:
        ghost_count = _ghost_count(request.args.get('ghosts'), current_app.config.get('DEFAULT_GHOST_COUNT', 4))
    except (TypeError, ValueError):
        return jsonify({'error': 'ghosts must be an integer between 1 and 4'}), 400
    limit = current_app.config.get('SCOREBOARD_LIMIT', 10)
    return jsonify([entry.to_dict() for entry in top_scores(ghost_count, limit)])


@scores.route('/scoreboard/pair', methods=['GET'])
def pair_scoreboard():
    limit = current_app.config.get('SCOREBOARD_LIMIT', 10)
    return jsonify([entry.to_dict() for entry in top_pair_scores(limit)])
