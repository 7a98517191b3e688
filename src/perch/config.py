"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, login_url="/signin")
    """

    # Show tracebacks on 500 pages
    debug: bool = False

    # Access control redirects (used by AuthMiddleware when configured by App)
    login_url: str = "/login"
    home_url: str = "/dashboard"

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppConfig:
        """Build a config from ``APP_*`` environment variables.

        Recognized: ``APP_DEBUG``, ``APP_LOGIN_URL``, ``APP_HOME_URL``
        and ``APP_MAX_CONTENT_LENGTH``. Unset variables keep
        their defaults.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        max_length = env.get("APP_MAX_CONTENT_LENGTH")
        return cls(
            debug=env.get("APP_DEBUG", "false").strip().lower() in _TRUTHY,
            login_url=env.get("APP_LOGIN_URL", defaults.login_url),
            home_url=env.get("APP_HOME_URL", defaults.home_url),
            max_content_length=int(max_length) if max_length else defaults.max_content_length,
        )
