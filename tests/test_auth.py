"""
Tests for the client auth gate — client/auth.py
"""
import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from client.auth import (
    USER_KEY,
    AuthContext,
    JsonFileStorage,
    MemoryStorage,
    StaticCredentialVerifier,
    User,
)
from utils.config import AppConfig


@pytest.fixture()
def verifier():
    return StaticCredentialVerifier("admin", "password")


class TestStaticCredentialVerifier:
    def test_accepts_configured_pair(self, verifier):
        assert verifier.verify("admin", "password") is True

    @pytest.mark.parametrize("username, password", [
        ("admin", "wrong"), ("root", "password"), ("", ""), ("Admin", "password"),
    ])
    def test_rejects_others(self, verifier, username, password):
        assert verifier.verify(username, password) is False

    def test_from_config(self, monkeypatch):
        monkeypatch.setenv("APP_AUTH_USERNAME", "alice")
        monkeypatch.setenv("APP_AUTH_PASSWORD", "s3cret")
        v = StaticCredentialVerifier.from_config(AppConfig.from_env())
        assert v.verify("alice", "s3cret")
        assert not v.verify("admin", "password")


class TestJsonFileStorage:
    def test_missing_file_reads_empty(self, tmp_path):
        assert JsonFileStorage(tmp_path / "none.json").get("user") is None

    def test_set_get_remove(self, tmp_path):
        path = tmp_path / "sub" / "session.json"
        storage = JsonFileStorage(path)
        storage.set("user", '{"username": "admin"}')
        assert json.loads(path.read_text()) == {"user": '{"username": "admin"}'}
        assert JsonFileStorage(path).get("user") == '{"username": "admin"}'
        storage.remove("user")
        assert storage.get("user") is None

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json")
        storage = JsonFileStorage(path)
        assert storage.get("user") is None
        storage.set("user", "x")
        assert storage.get("user") == "x"


class TestAuthContext:
    def test_loading_until_init(self, verifier):
        ctx = AuthContext(verifier, MemoryStorage())
        assert ctx.is_loading is True
        ctx.init()
        assert ctx.is_loading is False
        assert ctx.is_authenticated is False

    def test_login_success_persists(self, verifier):
        storage = MemoryStorage()
        ctx = AuthContext(verifier, storage)
        ctx.init()
        assert ctx.login("admin", "password") is True
        assert ctx.user == User("admin")
        assert json.loads(storage.get(USER_KEY)) == {"username": "admin"}

    def test_login_failure(self, verifier):
        storage = MemoryStorage()
        ctx = AuthContext(verifier, storage)
        assert ctx.login("admin", "nope") is False
        assert ctx.user is None
        assert storage.get(USER_KEY) is None

    def test_init_restores_user(self, verifier):
        storage = MemoryStorage({USER_KEY: '{"username": "admin"}'})
        ctx = AuthContext(verifier, storage)
        ctx.init()
        assert ctx.is_authenticated
        assert ctx.user.username == "admin"

    @pytest.mark.parametrize("raw", ["{broken", "[]", '{"name": "x"}', '{"username": ""}'])
    def test_corrupt_marker_removed(self, verifier, raw, caplog):
        storage = MemoryStorage({USER_KEY: raw})
        ctx = AuthContext(verifier, storage)
        ctx.init()
        assert ctx.user is None
        assert storage.get(USER_KEY) is None
        assert ctx.is_loading is False
        assert "corrupt" in caplog.text

    def test_logout_clears_memory_and_storage(self, verifier):
        storage = MemoryStorage()
        ctx = AuthContext(verifier, storage)
        ctx.login("admin", "password")
        ctx.logout()
        assert ctx.user is None
        assert storage.get(USER_KEY) is None

    def test_clear_is_logout(self, verifier):
        ctx = AuthContext(verifier, MemoryStorage())
        ctx.login("admin", "password")
        ctx.clear()
        assert not ctx.is_authenticated

    def test_survives_restart_with_file_storage(self, verifier, tmp_path):
        path = tmp_path / "session.json"
        AuthContext(verifier, JsonFileStorage(path)).login("admin", "password")
        ctx = AuthContext(verifier, JsonFileStorage(path))
        ctx.init()
        assert ctx.user == User("admin")
