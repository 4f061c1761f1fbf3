import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass(frozen=True)
class IssuedToken:
    token: str
    nickname: str
    created_at: float
    expires_at: float


class TokenStore:
    """In-process registry of bearer tokens issued at signup/login.

    Tokens are opaque random hex strings that expire after a fixed TTL. Expired
    tokens are dropped lazily on lookup and swept whenever a new token is
    issued.
    """

    def __init__(self, app=None, ttl_hours: int = 24, clock: Callable[[], float] = time.time):
        self._lock = threading.Lock()
        self._tokens: Dict[str, IssuedToken] = {}
        self.ttl_sec = ttl_hours * 3600
        self.clock = clock
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self.ttl_sec = int(app.config.get('SESSION_TOKEN_TTL_HOURS', 24)) * 3600
        with self._lock:
            self._tokens.clear()
        app.extensions['pacman_tokens'] = self

    def __len__(self):
        with self._lock:
            return len(self._tokens)

    def issue(self, nickname: str) -> str:
        now = self.clock()
        issued = IssuedToken(secrets.token_hex(32), nickname, now, now + self.ttl_sec)
        with self._lock:
            self._purge(now)
            self._tokens[issued.token] = issued
        return issued.token

    def validate(self, token: Optional[str]) -> Optional[str]:
        """Return the nickname behind a token, or None if unknown/expired."""
        if not token:
            return None
        with self._lock:
            issued = self._tokens.get(token)
            if issued is None:
                return None
            if self.clock() >= issued.expires_at:
                del self._tokens[token]
                return None
            return issued.nickname

    def revoke(self, token: str) -> bool:
        with self._lock:
            return self._tokens.pop(token, None) is not None

    def purge_expired(self) -> int:
        with self._lock:
            return self._purge(self.clock())

    def _purge(self, now: float) -> int:
        expired = [t for t, issued in self._tokens.items() if now >= issued.expires_at]
        for token in expired:
            del self._tokens[token]
        return len(expired)
