import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///pacman.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Comma-separated list of origins allowed for CORS and Socket.IO
    ALLOWED_ORIGINS = os.environ.get('ALLOWED_ORIGINS', '')
    # Simulation clock (milliseconds)
    TICK_INTERVAL_MS = int(os.environ.get('TICK_INTERVAL_MS', '150'))
    POWER_MODE_DURATION_MS = int(os.environ.get('POWER_MODE_DURATION_MS', '5000'))
    # Ghosts per single-player session when the client does not ask for a count
    DEFAULT_GHOST_COUNT = int(os.environ.get('DEFAULT_GHOST_COUNT', '4'))
    # Fixed seed for ghost movement (unset = seeded from OS entropy)
    GHOST_RNG_SEED = os.environ.get('GHOST_RNG_SEED')
    # Periodic lobby_stats broadcast (sec). 0 disables.
    LOBBY_STATS_INTERVAL_SEC = int(os.environ.get('LOBBY_STATS_INTERVAL_SEC', '5'))
    # Lifetime of tokens issued at signup/login (hours)
    SESSION_TOKEN_TTL_HOURS = int(os.environ.get('SESSION_TOKEN_TTL_HOURS', '24'))
    # Rows returned by the leaderboard endpoints
    SCOREBOARD_LIMIT = int(os.environ.get('SCOREBOARD_LIMIT', '10'))
