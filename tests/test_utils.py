"""
Unit tests for utils/strings.py, utils/config.py and utils/http.py.

No database or network required.
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.config import AppConfig, Config
from utils.http import DEFAULT_HEADERS, SessionManager
from utils.strings import clean_text, safe_float, safe_int


# ── safe_int ──────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("val, expected", [
    (None,   7),
    ("",     7),
    ("12",   12),
    (" 3 ",  3),
    ("+4",   4),
    ("-2",   -2),
    (5,      5),
    ("2.5",  7),
    ("two",  7),
    ("1e3",  7),
    (True,   7),   # bool is not a page number
])
def test_safe_int(val, expected):
    assert safe_int(val, 7) == expected


# ── safe_float ────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("val, expected", [
    (None,     None),
    ("",       None),
    ("abc",    None),
    ("nan",    None),
    ("-inf",   None),
    (True,     None),
    (0,        0.0),
    ("12.34",  12.34),
    (" 5 ",    5.0),
    (-5.5,     -5.5),
])
def test_safe_float(val, expected):
    assert safe_float(val) == expected


def test_safe_float_custom_default():
    assert safe_float("bad", default=99.9) == 99.9


# ── clean_text ────────────────────────────────────────────────────────────────

def test_clean_text_strips():
    assert clean_text("  Paris ") == "Paris"


def test_clean_text_blank_is_none():
    assert clean_text("   ") is None
    assert clean_text(None) is None


# ── Config ────────────────────────────────────────────────────────────────────

class TestAppConfig:
    @pytest.fixture(autouse=True)
    def _clear_env(self, monkeypatch):
        for var in ("APP_DB_PATH", "APP_PORT", "APP_HOST", "APP_LOG_FORMAT",
                    "APP_CORS_ORIGINS", "TRIP_API_URL", "APP_AUTH_USERNAME",
                    "APP_AUTH_PASSWORD", "APP_SESSION_FILE"):
            monkeypatch.delenv(var, raising=False)

    def test_defaults(self):
        cfg = AppConfig.from_env()
        assert cfg.db_path == Path("trips.sqlite")
        assert cfg.api_port == 3001
        assert cfg.api_host == "0.0.0.0"
        assert cfg.log_format == "text"
        assert cfg.cors_origins == ["http://localhost:3000"]
        assert cfg.api_base_url == "http://localhost:3001"
        assert (cfg.auth_username, cfg.auth_password) == ("admin", "password")
        assert cfg.session_file.name == "session.json"

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("APP_DB_PATH", str(tmp_path / "x.sqlite"))
        monkeypatch.setenv("APP_PORT", "9000")
        monkeypatch.setenv("TRIP_API_URL", "http://api.example:9000/")
        monkeypatch.setenv("APP_CORS_ORIGINS", "http://a.example, http://b.example")
        cfg = AppConfig.from_env()
        assert cfg.db_path == tmp_path / "x.sqlite"
        assert cfg.api_port == 9000
        assert cfg.api_base_url == "http://api.example:9000"
        assert cfg.cors_origins == ["http://a.example", "http://b.example"]

    def test_wildcard_origin(self, monkeypatch):
        monkeypatch.setenv("APP_CORS_ORIGINS", "*")
        assert AppConfig.from_env().cors_origins == ["*"]

    def test_to_dict_lists_settings(self):
        data = AppConfig.from_env().to_dict()
        assert data["api_port"] == 3001
        assert data["api_base_url"] == "http://localhost:3001"
        assert data["auth_username"] == "admin"

    def test_to_dict_masks_password(self, monkeypatch):
        monkeypatch.setenv("APP_AUTH_PASSWORD", "s3cret")
        cfg = AppConfig.from_env()
        assert cfg.auth_password == "s3cret"
        assert cfg.to_dict()["auth_password"] == "***"
        assert "s3cret" not in str(cfg.to_dict())

    def test_base_to_dict_skips_private_attributes(self):
        cfg = Config()
        cfg.a = 1
        cfg._hidden = 2
        assert cfg.to_dict() == {"a": 1}


# ── SessionManager ────────────────────────────────────────────────────────────

class TestSessionManager:
    def test_session_created_lazily(self):
        sm = SessionManager()
        assert sm._session is None
        session = sm.session
        assert session is sm.session
        sm.close()

    def test_json_headers(self):
        with SessionManager() as sm:
            for key, value in DEFAULT_HEADERS.items():
                assert sm.session.headers[key] == value

    def test_extra_headers_merged(self):
        with SessionManager(headers={"X-Client": "gui"}) as sm:
            assert sm.session.headers["X-Client"] == "gui"
            assert sm.session.headers["Accept"] == "application/json"

    def test_no_retries(self):
        with SessionManager() as sm:
            adapter = sm.session.get_adapter("http://localhost")
            assert adapter.max_retries.total == 0

    def test_close_resets(self):
        sm = SessionManager()
        _ = sm.session
        sm.close()
        assert sm._session is None
