"""Tests for configuration classes."""

import os
from dataclasses import FrozenInstanceError
from decimal import Decimal
from unittest.mock import patch

import pytest

from config import (
    AppConfig,
    CORSConfig,
    GameConfig,
    RateLimitConfig,
    RedisConfig,
    SecurityConfig,
    _parse_cors_origins,
)


class TestCORSConfig:
    def test_default_origin(self):
        with patch.dict(os.environ, {}, clear=True):
            assert CORSConfig().allowed_origins == ["http://localhost:8000"]

    def test_origins_parsed_and_stripped(self):
        with patch.dict(os.environ, {"CORS_ORIGINS": " http://a.test , http://b.test ,"}):
            assert _parse_cors_origins() == ["http://a.test", "http://b.test"]


class TestRateLimitConfig:
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = RateLimitConfig()
        assert config.enabled is True
        assert config.requests_per_minute == 60

    @pytest.mark.parametrize("value", ["false", "FALSE", "no", "0"])
    def test_disabled_values(self, value):
        with patch.dict(os.environ, {"RATE_LIMIT_ENABLED": value}):
            assert RateLimitConfig().enabled is False

    def test_rpm_from_env(self):
        with patch.dict(os.environ, {"RATE_LIMIT_RPM": "5"}):
            assert RateLimitConfig().requests_per_minute == 5


class TestSecurityConfig:
    def test_secret_key_from_env(self):
        with patch.dict(os.environ, {"SECRET_KEY": "shh"}):
            assert SecurityConfig().secret_key == "shh"

    def test_generated_keys_differ(self):
        with patch.dict(os.environ, {}, clear=True):
            assert SecurityConfig().secret_key != SecurityConfig().secret_key


class TestRedisConfig:
    def test_url_without_password(self):
        with patch.dict(os.environ, {}, clear=True):
            assert RedisConfig().url == "redis://localhost:6379/0"

    def test_url_with_password(self):
        env = {"REDIS_HOST": "cache", "REDIS_PORT": "6380", "REDIS_DB": "2", "REDIS_PASSWORD": "pw"}
        with patch.dict(os.environ, env, clear=True):
            assert RedisConfig().url == "redis://:pw@cache:6380/2"

    def test_can_be_disabled(self):
        with patch.dict(os.environ, {"REDIS_ENABLED": "false"}):
            assert RedisConfig().enabled is False


class TestAppConfig:
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = AppConfig()
        assert config.debug is False
        assert config.port == 8000
        assert config.log_level == "INFO"
        assert config.session_ttl == 3600

    def test_log_level_from_env(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}):
            assert AppConfig().log_level == "DEBUG"


class TestGameConfig:
    def test_defaults_match_house_stake(self):
        config = GameConfig()
        assert config.starting_bankroll == Decimal("500")
        assert config.default_bet == 100
        assert config.min_bet == 1

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            GameConfig().default_bet = 5  # type: ignore[misc]
