"""
Client-side auth gate.

A single static credential pair unlocks the UI; the logged-in user is kept
in a small key/value SessionStorage so a restart stays logged in.  This is
a UI gate only: the Trip API does not check it.

    ctx = AuthContext(StaticCredentialVerifier("admin", "password"),
                      JsonFileStorage(Path("~/.trip_planner/session.json")))
    ctx.init()                 # restore persisted user, is_loading -> False
    ctx.login("admin", "password")
    ctx.user                   # User(username='admin')
    ctx.logout()
"""

import hmac
import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from utils.config import AppConfig

logger = logging.getLogger(__name__)

USER_KEY = "user"


@dataclass(frozen=True)
class User:
    username: str


# ── Credential verification ───────────────────────────────────────────────────

class CredentialVerifier(Protocol):
    def verify(self, username: str, password: str) -> bool: ...


class StaticCredentialVerifier:
    """Accepts exactly one username / password pair."""

    def __init__(self, username: str, password: str) -> None:
        self._username = username.encode("utf-8")
        self._password = password.encode("utf-8")

    @classmethod
    def from_config(cls, cfg: AppConfig | None = None) -> "StaticCredentialVerifier":
        cfg = cfg or AppConfig.from_env()
        return cls(cfg.auth_username, cfg.auth_password)

    def verify(self, username: str, password: str) -> bool:
        # Evaluate both comparisons so timing does not reveal which one failed.
        user_ok = hmac.compare_digest(username.encode("utf-8"), self._username)
        pass_ok = hmac.compare_digest(password.encode("utf-8"), self._password)
        return user_ok and pass_ok


# ── Session storage ───────────────────────────────────────────────────────────

class SessionStorage(Protocol):
    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage; forgets everything on exit."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """Persistent string key/value storage backed by one JSON object file.

    A missing file reads as empty.  An unreadable file is logged and also
    treated as empty; the next write replaces it.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _load(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable session file %s", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring session file %s: not a JSON object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)


# ── Auth context ──────────────────────────────────────────────────────────────

class AuthContext:
    """Holds the logged-in user and keeps the persisted marker in sync."""

    def __init__(self, verifier: CredentialVerifier, storage: SessionStorage) -> None:
        self._verifier = verifier
        self._storage = storage
        self._user: User | None = None
        self._loading = True

    @classmethod
    def from_config(cls, cfg: AppConfig | None = None) -> "AuthContext":
        cfg = cfg or AppConfig.from_env()
        return cls(StaticCredentialVerifier.from_config(cfg), JsonFileStorage(cfg.session_file))

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def is_loading(self) -> bool:
        """True until init() has run."""
        return self._loading

    def init(self) -> None:
        """Restore the persisted user, discarding a corrupt marker."""
        try:
            raw = self._storage.get(USER_KEY)
            if raw is not None:
                self._user = _parse_user(raw)
                if self._user is None:
                    logger.error("Discarding corrupt stored user: %r", raw)
                    self._storage.remove(USER_KEY)
        finally:
            self._loading = False

    def login(self, username: str, password: str) -> bool:
        if not self._verifier.verify(username, password):
            logger.info("Login rejected for %r", username)
            return False
        self._user = User(username=username)
        self._storage.set(USER_KEY, json.dumps({"username": username}))
        logger.info("Logged in as %r", username)
        return True

    def logout(self) -> None:
        self._user = None
        self._storage.remove(USER_KEY)

    clear = logout


def _parse_user(raw: str) -> User | None:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    username = data.get("username")
    if not isinstance(username, str) or not username:
        return None
    return User(username=username)
