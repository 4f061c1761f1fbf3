from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

from pacman.services.auth.tokens import TokenStore
from pacman.services.games.lobby import Lobby

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
tokens = TokenStore()
lobby = Lobby()
default_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8080",
    "http://127.0.0.1:8080",
]
socketio = SocketIO(cors_allowed_origins=default_origins, async_mode=None)


def parse_origins(value):
    origins = [o.strip() for o in (value or '').split(',') if o.strip()]
    return origins or list(default_origins)


def bearer_token(req):
    header = req.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):].strip() or None
    return None


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = parse_origins(flask_app.config.get('ALLOWED_ORIGINS'))

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    tokens.init_app(flask_app)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from pacman.services.games.scoring import DatabaseScoreboard
    lobby.init_app(flask_app, socketio, DatabaseScoreboard(flask_app))

    from pacman.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from pacman.api.scores import scores
    flask_app.register_blueprint(scores, url_prefix='/api')

    from pacman.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    from pacman.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # API clients authenticate with the bearer token from signup/login
    @login_manager.request_loader
    def load_user_from_request(req):
        nickname = tokens.validate(bearer_token(req))
        if nickname is None:
            return None
        return User.query.filter_by(nickname=nickname).first()

    @login_manager.unauthorized_handler
    def unauthorized():
        return {"error": "authentication required"}, 401

    @flask_app.after_request
    def set_security_headers(response):
        response.headers.setdefault('X-Content-Type-Options', 'nosniff')
        response.headers.setdefault('X-Frame-Options', 'DENY')
        response.headers.setdefault('X-XSS-Protection', '1; mode=block')
        response.headers.setdefault('Referrer-Policy', 'no-referrer')
        response.headers.setdefault('Cache-Control', 'no-store')
        return response

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users
            users = ['player1', 'player2', 'player3']
            for u in users:
                user = User(nickname=u)
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    flask_app.logger.info(f"[app-ready] tick={lobby.tick_ms}ms loops={lobby.run_loops} origins={len(allowed_origins)}")
    return flask_app
