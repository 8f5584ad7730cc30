import logging

import pytest
from sprinkle.env import (
	ENV_SPRINKLE_HOST,
	ENV_SPRINKLE_LOG_LEVEL,
	ENV_SPRINKLE_PORT,
	Env,
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Env:
	for key in (ENV_SPRINKLE_HOST, ENV_SPRINKLE_PORT, ENV_SPRINKLE_LOG_LEVEL):
		monkeypatch.delenv(key, raising=False)
	return Env()


def test_defaults(clean_env: Env):
	assert clean_env.host == "localhost"
	assert clean_env.port == 3000
	assert clean_env.log_level == logging.INFO


def test_overrides(clean_env: Env, monkeypatch: pytest.MonkeyPatch):
	monkeypatch.setenv(ENV_SPRINKLE_HOST, "0.0.0.0")
	monkeypatch.setenv(ENV_SPRINKLE_PORT, "8080")
	monkeypatch.setenv(ENV_SPRINKLE_LOG_LEVEL, "debug")
	assert clean_env.host == "0.0.0.0"
	assert clean_env.port == 8080
	assert clean_env.log_level == logging.DEBUG


def test_blank_values_fall_back(clean_env: Env, monkeypatch: pytest.MonkeyPatch):
	monkeypatch.setenv(ENV_SPRINKLE_PORT, "  ")
	assert clean_env.port == 3000


@pytest.mark.parametrize("raw", ["abc", "0", "70000"])
def test_invalid_port(clean_env: Env, monkeypatch: pytest.MonkeyPatch, raw: str):
	monkeypatch.setenv(ENV_SPRINKLE_PORT, raw)
	with pytest.raises(ValueError, match=ENV_SPRINKLE_PORT):
		_ = clean_env.port


def test_invalid_log_level(clean_env: Env, monkeypatch: pytest.MonkeyPatch):
	monkeypatch.setenv(ENV_SPRINKLE_LOG_LEVEL, "loud")
	with pytest.raises(ValueError, match=ENV_SPRINKLE_LOG_LEVEL):
		_ = clean_env.log_level


def test_setters(clean_env: Env, monkeypatch: pytest.MonkeyPatch):
	# Setters write through to os.environ; monkeypatch restores it afterwards
	monkeypatch.setenv(ENV_SPRINKLE_PORT, "1")
	clean_env.port = 4000
	assert clean_env.port == 4000
	clean_env.port = None
	assert clean_env.port == 3000
