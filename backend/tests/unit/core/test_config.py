"""Unit tests for environment-driven configuration helpers."""

import pytest
from authflow.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    get_config,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("production", ProductionConfig),
        ("Testing", TestingConfig),
        ("development", DevelopmentConfig),
        ("unknown", DevelopmentConfig),
    ],
)
def test_get_config_by_name(name, expected):
    assert get_config(name) is expected


def test_get_config_reads_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")

    assert get_config() is ProductionConfig


@pytest.mark.parametrize(("raw", "expected"), [("1", True), ("yes", True), ("off", False), ("0", False)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("SOME_FLAG", raw)

    assert env_bool("SOME_FLAG", not expected) is expected


def test_production_cookies_are_secure():
    assert ProductionConfig.JWT_COOKIE_SECURE is True
