from datetime import datetime

from pacman import db, bcrypt
from flask_login import UserMixin


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    nickname = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(128), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'nickname': self.nickname,
        }


class Score(db.Model):
    """Best single-player score per nickname and ghost count."""
    __tablename__ = 'score'
    __table_args__ = (db.UniqueConstraint('nickname', 'ghost_count', name='uq_score_nickname_ghost_count'),)
    id = db.Column(db.Integer, primary_key=True)
    nickname = db.Column(db.String(64), nullable=False, index=True)
    ghost_count = db.Column(db.Integer, nullable=False, default=4)
    score = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'nickname': self.nickname,
            'score': self.score,
        }


class PairScore(db.Model):
    """Best pair score; player1/player2 stored in alphabetical order."""
    __tablename__ = 'pair_score'
    __table_args__ = (db.UniqueConstraint('player1', 'player2', name='uq_pair_score_players'),)
    id = db.Column(db.Integer, primary_key=True)
    player1 = db.Column(db.String(64), nullable=False)
    player2 = db.Column(db.String(64), nullable=False)
    score = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'player1': self.player1,
            'player2': self.player2,
            'score': self.score,
        }
