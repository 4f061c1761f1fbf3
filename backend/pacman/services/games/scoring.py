from pacman import db
from pacman.models import Score, PairScore


def save_score(nickname: str, score: int, ghost_count: int) -> bool:
    """Keep the best single-player score for (nickname, ghost_count).

    Returns True when the stored value changed; a lower or equal score is
    ignored.
    """
    if score < 0:
        raise ValueError('score must be non-negative')
    entry = Score.query.filter_by(nickname=nickname, ghost_count=ghost_count).first()
    if entry is not None and entry.score >= score:
        return False
    if entry is None:
        entry = Score(nickname=nickname, ghost_count=ghost_count, score=score)
    else:
        entry.score = score
    db.session.add(entry)
    db.session.commit()
    return True


def save_pair_score(player1: str, player2: str, score: int) -> bool:
    """Keep the best score for a pair, regardless of who joined first."""
    if score < 0:
        raise ValueError('score must be non-negative')
    player1, player2 = sorted((player1, player2))
    entry = PairScore.query.filter_by(player1=player1, player2=player2).first()
    if entry is not None and entry.score >= score:
        return False
    if entry is None:
        entry = PairScore(player1=player1, player2=player2, score=score)
    else:
        entry.score = score
    db.session.add(entry)
    db.session.commit()
    return True


def top_scores(ghost_count: int, limit: int = 10):
    return (Score.query.filter_by(ghost_count=ghost_count)
            .order_by(Score.score.desc(), Score.updated_at.asc())
            .limit(limit).all())


def top_pair_scores(limit: int = 10):
    return (PairScore.query
            .order_by(PairScore.score.desc(), PairScore.updated_at.asc())
            .limit(limit).all())


class DatabaseScoreboard:
    """Scoreboard backed by the app database.

    Called from the session loop as fire-and-forget work, so every call opens
    its own app context and rolls back on failure.
    """

    def __init__(self, app):
        self.app = app

    def submit_score(self, nickname: str, score: int, ghost_count: int) -> None:
        with self.app.app_context():
            try:
                stored = save_score(nickname, score, ghost_count)
            except Exception:
                db.session.rollback()
                raise
            self.app.logger.info(f"[score] nickname={nickname} score={score} ghosts={ghost_count} stored={stored}")

    def submit_pair_score(self, player1: str, player2: str, score: int) -> None:
        with self.app.app_context():
            try:
                stored = save_pair_score(player1, player2, score)
            except Exception:
                db.session.rollback()
                raise
            self.app.logger.info(f"[pair-score] players={player1},{player2} score={score} stored={stored}")
