"""Tests for signing key resolution and config selection."""

from __future__ import annotations

import logging

import pytest
from flask import Flask

from samplecat.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    get_config,
)
from samplecat.core.extensions import resolve_signing_key

STRONG = "k" * 32


def _app(**config) -> Flask:
    app = Flask(__name__)
    app.config.update(config)
    return app


def test_strong_key_is_used_verbatim():
    assert resolve_signing_key(_app(JWT_SECRET_KEY=STRONG)) == STRONG


def test_key_length_counts_bytes_not_characters():
    # 16 two-byte characters encode to 32 bytes.
    key = "é" * 16
    assert resolve_signing_key(_app(JWT_SECRET_KEY=key)) == key


@pytest.mark.parametrize("key", ["", None, "short", "k" * 31])
def test_weak_key_refused_without_opt_in(key):
    with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
        resolve_signing_key(_app(JWT_SECRET_KEY=key, JWT_ALLOW_EPHEMERAL_SECRET=False))


def test_ephemeral_key_generated_with_warning(caplog):
    app = _app(JWT_SECRET_KEY="short", JWT_ALLOW_EPHEMERAL_SECRET=True)
    with caplog.at_level(logging.WARNING):
        first = resolve_signing_key(app)
        second = resolve_signing_key(app)

    assert len(first.encode()) >= 32
    assert first != second
    assert "ephemeral signing key" in caplog.text


def test_ephemeral_opt_in_per_environment():
    assert DevelopmentConfig.JWT_ALLOW_EPHEMERAL_SECRET is True
    assert TestingConfig.JWT_ALLOW_EPHEMERAL_SECRET is True
    assert ProductionConfig.JWT_ALLOW_EPHEMERAL_SECRET is False


@pytest.mark.parametrize(
    ("value", "expected"),
    [("1", True), ("Yes", True), ("on", True), ("0", False), ("nope", False)],
)
def test_env_bool(monkeypatch, value, expected):
    monkeypatch.setenv("SAMPLECAT_FLAG", value)
    assert env_bool("SAMPLECAT_FLAG") is expected


def test_env_bool_default(monkeypatch):
    monkeypatch.delenv("SAMPLECAT_FLAG", raising=False)
    assert env_bool("SAMPLECAT_FLAG", True) is True


@pytest.mark.parametrize(
    ("env", "expected"),
    [("production", ProductionConfig), ("TESTING", TestingConfig), ("bogus", DevelopmentConfig)],
)
def test_get_config(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)
    assert get_config() is expected
