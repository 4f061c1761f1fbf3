from conftest import signup
from pacman import tokens
from pacman.models import PairScore, Score
from pacman.services.games.scoring import DatabaseScoreboard, save_pair_score, save_score


def auth(token):
    return {'Authorization': f'Bearer {token}'}


def test_signup_returns_token(client):
    res = client.post('/api/signup', json={'nickname': 'alice', 'password': 'pw'})
    assert res.status_code == 201
    data = res.get_json()
    assert data['nickname'] == 'alice'
    assert tokens.validate(data['token']) == 'alice'


def test_signup_rejects_duplicates_and_missing_fields(client):
    signup(client, 'alice')
    res = client.post('/api/signup', json={'nickname': 'alice', 'password': 'other'})
    assert res.status_code == 409
    res = client.post('/api/signup', json={'nickname': 'bob'})
    assert res.status_code == 400
    res = client.post('/api/signup')
    assert res.status_code == 400


def test_login(client):
    signup(client, 'alice', 'secret')
    res = client.post('/api/login', json={'nickname': 'alice', 'password': 'secret'})
    assert res.status_code == 200
    assert tokens.validate(res.get_json()['token']) == 'alice'

    res = client.post('/api/login', json={'nickname': 'alice', 'password': 'wrong'})
    assert res.status_code == 401
    res = client.post('/api/login', json={'nickname': 'nobody', 'password': 'secret'})
    assert res.status_code == 401


def test_logout_revokes_token(client):
    token = signup(client, 'alice')
    res = client.post('/api/logout', headers=auth(token))
    assert res.status_code == 200
    assert tokens.validate(token) is None
    res = client.post('/api/logout', headers=auth(token))
    assert res.status_code == 401


def test_submit_score_requires_token(client):
    res = client.post('/api/score', json={'score': 100})
    assert res.status_code == 401
    res = client.post('/api/score', json={'score': 100}, headers=auth('bogus'))
    assert res.status_code == 401


def test_submit_score_keeps_best(client):
    token = signup(client, 'alice')
    res = client.post('/api/score', json={'score': 300, 'ghostCount': 2}, headers=auth(token))
    assert res.status_code == 200
    assert res.get_json()['stored'] is True
    res = client.post('/api/score', json={'score': 100, 'ghostCount': 2}, headers=auth(token))
    assert res.get_json()['stored'] is False
    assert Score.query.filter_by(nickname='alice', ghost_count=2).one().score == 300


def test_submit_score_validation(client):
    token = signup(client, 'alice')
    for body in ({'score': -5}, {'score': 'lots'}, {'score': True}, {'score': 10, 'ghostCount': 9}):
        res = client.post('/api/score', json=body, headers=auth(token))
        assert res.status_code == 400, body


def test_scoreboard_orders_by_score(client):
    save_score('alice', 300, 4)
    save_score('bob', 900, 4)
    save_score('carol', 500, 4)
    save_score('dave', 5000, 1)
    res = client.get('/api/scoreboard?ghosts=4')
    assert res.status_code == 200
    assert [row['nickname'] for row in res.get_json()] == ['bob', 'carol', 'alice']
    assert client.get('/api/scoreboard?ghosts=1').get_json() == [{'nickname': 'dave', 'score': 5000}]
    assert client.get('/api/scoreboard?ghosts=zero').status_code == 400


def test_scoreboard_limit(flask_app, client):
    flask_app.config['SCOREBOARD_LIMIT'] = 3
    for i in range(5):
        save_score(f'player{i}', 100 + i, 4)
    rows = client.get('/api/scoreboard').get_json()
    assert [row['score'] for row in rows] == [104, 103, 102]


def test_pair_scores_ignore_join_order(client):
    assert save_pair_score('zoe', 'adam', 400)
    assert not save_pair_score('adam', 'zoe', 300)
    assert save_pair_score('adam', 'zoe', 700)
    assert PairScore.query.count() == 1
    rows = client.get('/api/scoreboard/pair').get_json()
    assert rows == [{'player1': 'adam', 'player2': 'zoe', 'score': 700}]


def test_database_scoreboard(flask_app):
    board = DatabaseScoreboard(flask_app)
    board.submit_score('alice', 250, 3)
    board.submit_pair_score('bob', 'alice', 90)
    assert Score.query.filter_by(nickname='alice').one().ghost_count == 3
    assert PairScore.query.one().player1 == 'alice'


def test_security_headers(client):
    res = client.get('/api/scoreboard/pair')
    assert res.headers['X-Content-Type-Options'] == 'nosniff'
    assert res.headers['X-Frame-Options'] == 'DENY'
