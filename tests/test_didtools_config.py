"""Tests for didtools.config: environment-driven settings."""

import pytest

from didtools.config import get_settings
from didtools.multibase import KeyType


def test_defaults(monkeypatch):
    for name in ("DIDTOOLS_HOST", "DIDTOOLS_PORT", "DIDTOOLS_LOG_LEVEL", "DIDTOOLS_RELOAD", "DIDTOOLS_DEFAULT_KEY_TYPE"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.host == "0.0.0.0"
    assert settings.port == 8002
    assert settings.log_level == "info"
    assert settings.reload is False
    assert settings.default_key_type is KeyType.ED25519


def test_overrides(monkeypatch):
    monkeypatch.setenv("DIDTOOLS_HOST", "127.0.0.1")
    monkeypatch.setenv("DIDTOOLS_PORT", "9000")
    monkeypatch.setenv("DIDTOOLS_RELOAD", "TRUE")
    monkeypatch.setenv("DIDTOOLS_DEFAULT_KEY_TYPE", "secp256k1-pub")
    settings = get_settings()
    assert settings.host == "127.0.0.1"
    assert settings.port == 9000
    assert settings.reload is True
    assert settings.default_key_type is KeyType.SECP256K1


def test_invalid_port(monkeypatch):
    monkeypatch.setenv("DIDTOOLS_PORT", "eighty")
    with pytest.raises(ValueError, match="DIDTOOLS_PORT must be a valid integer"):
        get_settings()


def test_invalid_default_key_type(monkeypatch):
    monkeypatch.setenv("DIDTOOLS_DEFAULT_KEY_TYPE", "rsa")
    with pytest.raises(ValueError, match="DIDTOOLS_DEFAULT_KEY_TYPE"):
        get_settings()
