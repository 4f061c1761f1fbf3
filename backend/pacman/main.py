from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, logout_user, current_user

from pacman import db, tokens, bearer_token
from pacman.models import User

main = Blueprint('main', __name__)


def _credentials():
    data = request.get_json(silent=True) or {}
    nickname = (data.get('nickname') or '').strip()
    password = data.get('password') or ''
    return nickname, password


@main.route('/signup', methods=['POST'])
def signup():
    nickname, password = _credentials()
    if not nickname or not password:
        return jsonify({'error': 'nickname and password are required'}), 400
    if len(nickname) > 64:
        return jsonify({'error': 'nickname must be at most 64 characters'}), 400
    if User.query.filter_by(nickname=nickname).first():
        return jsonify({'error': 'nickname already taken'}), 409

    user = User(nickname=nickname)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f"[signup] nickname={nickname}")
    return jsonify({
        'message': 'Account created',
        'nickname': nickname,
        'token': tokens.issue(nickname),
    }), 201


@main.route('/login', methods=['POST'])
def login():
    nickname, password = _credentials()
    user = User.query.filter_by(nickname=nickname).first() if nickname else None
    if user is None or not user.check_password(password):
        current_app.logger.info(f"[login-failed] nickname={nickname}")
        return jsonify({'error': 'invalid credentials'}), 401
    current_app.logger.info(f"[login] nickname={nickname}")
    return jsonify({
        'message': 'Logged in',
        'nickname': user.nickname,
        'token': tokens.issue(user.nickname),
    })


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    nickname = current_user.nickname
    tokens.revoke(bearer_token(request))
    logout_user()
    current_app.logger.info(f"[logout] nickname={nickname}")
    return jsonify({'message': 'Logged out'})
