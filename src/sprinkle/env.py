"""
Environment configuration.

Every setting is read from the process environment on access, so values set by
the CLI (or by tests through monkeypatch) are picked up without a reload.
"""

import logging
import os

ENV_SPRINKLE_HOST = "SPRINKLE_HOST"
ENV_SPRINKLE_PORT = "SPRINKLE_PORT"
ENV_SPRINKLE_LOG_LEVEL = "SPRINKLE_LOG_LEVEL"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 3000
DEFAULT_LOG_LEVEL = "INFO"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Env:
	def _get(self, key: str) -> str | None:
		value = os.environ.get(key)
		if value is None or not value.strip():
			return None
		return value.strip()

	def _set(self, key: str, value: str | None) -> None:
		if value is None:
			os.environ.pop(key, None)
		else:
			os.environ[key] = value

	@property
	def host(self) -> str:
		return self._get(ENV_SPRINKLE_HOST) or DEFAULT_HOST

	@host.setter
	def host(self, value: str | None) -> None:
		self._set(ENV_SPRINKLE_HOST, value)

	@property
	def port(self) -> int:
		raw = self._get(ENV_SPRINKLE_PORT)
		if raw is None:
			return DEFAULT_PORT
		try:
			port = int(raw)
		except ValueError:
			raise ValueError(f"Invalid {ENV_SPRINKLE_PORT}: {raw!r}") from None
		if not 0 < port < 65536:
			raise ValueError(f"{ENV_SPRINKLE_PORT} out of range: {port}")
		return port

	@port.setter
	def port(self, value: int | None) -> None:
		self._set(ENV_SPRINKLE_PORT, None if value is None else str(value))

	@property
	def log_level(self) -> int:
		"""Numeric logging level, from a level name (`DEBUG`, `info`, ...)."""
		raw = (self._get(ENV_SPRINKLE_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()
		if raw not in _LOG_LEVELS:
			raise ValueError(
				f"Invalid {ENV_SPRINKLE_LOG_LEVEL}: {raw!r}. Expected one of {', '.join(_LOG_LEVELS)}"
			)
		return logging.getLevelNamesMapping()[raw]

	@log_level.setter
	def log_level(self, value: str | None) -> None:
		self._set(ENV_SPRINKLE_LOG_LEVEL, value)


# Singleton
env = Env()
