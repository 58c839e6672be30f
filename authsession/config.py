"""Configuration system for authsession using pydantic-settings.

Supports layered configuration:
1. Built-in defaults (lowest priority)
2. pyproject.toml [tool.authsession] section (project-level)
3. ./authsession.toml (project-level, explicit)
4. ~/.config/authsession/config.toml (user-level, overrides project)
5. File named by AUTHSESSION_CONFIG_FILE (overrides the files above)
6. Environment variables (highest priority)

Environment variables use AUTHSESSION_ prefix with nested delimiter __.
Example: AUTHSESSION_REDIRECT__HOME, AUTHSESSION_TOKEN__PREFIX
"""

from __future__ import annotations

import logging
import os
import sys

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib  # type: ignore[import-not-found]
    except ImportError:
        tomllib = None


logger = logging.getLogger("authsession.config")

#: Event names a redirect destination can be configured for.
REDIRECT_EVENTS: tuple[str, ...] = ("login", "logout", "home", "callback")


def _find_config_files() -> list[Path]:
    """Find all configuration files in order of precedence (lowest first)."""
    files = []

    pyproject = Path("pyproject.toml")
    if pyproject.exists():
        files.append(pyproject)

    explicit = Path("authsession.toml")
    if explicit.exists():
        files.append(explicit)

    if sys.platform == "win32":
        user_config = Path(os.environ.get("APPDATA", "~")) / "authsession" / "config.toml"
    else:
        user_config = Path("~/.config/authsession/config.toml")
    user_config = user_config.expanduser()
    if user_config.exists():
        files.append(user_config)

    env_config = os.environ.get("AUTHSESSION_CONFIG_FILE")
    if env_config:
        env_path = Path(env_config)
        if env_path.exists():
            files.append(env_path)

    return files


def _load_toml_config() -> dict[str, Any]:
    """Load and merge all TOML configuration files."""
    if tomllib is None:
        return {}

    merged: dict[str, Any] = {}

    for config_file in _find_config_files():
        try:
            data = tomllib.loads(config_file.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            logger.warning("Ignoring unreadable config file %s: %s", config_file, exc)
            continue

        if config_file.name == "pyproject.toml":
            data = data.get("tool", {}).get("authsession", {})

        merged = _deep_merge(merged, data)

    return merged


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class TokenSettings(BaseSettings):
    """Token key-space and header settings.

    Environment prefix: AUTHSESSION_TOKEN__
    Example: AUTHSESSION_TOKEN__PREFIX=_token.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTHSESSION_TOKEN__",
        extra="ignore",
    )

    prefix: str = Field(
        default="_token.",
        description="Prefix prepended to the strategy name to build the token storage key",
    )
    name: str = Field(
        default="Authorization",
        min_length=1,
        description="Request header the token is injected under",
    )


class RedirectSettings(BaseSettings):
    """Redirect policy settings.

    Environment prefix: AUTHSESSION_REDIRECT__
    Example: AUTHSESSION_REDIRECT__HOME=/dashboard

    Set a destination to an empty string to disable redirects for that event.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTHSESSION_REDIRECT__",
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Master switch for all redirects")
    login: str | None = "/login"
    logout: str | None = "/"
    home: str | None = "/"
    callback: str | None = "/login"
    rewrite: bool = Field(
        default=True,
        description="Remember the page that triggered a login redirect and return to it on home",
    )
    full_path: bool = Field(
        default=False,
        description="Compare and remember the route's full path (with query) instead of its path",
    )

    def destinations(self) -> dict[str, str]:
        """Return the configured, non-empty redirect destinations by event name."""
        result: dict[str, str] = {}
        for event in REDIRECT_EVENTS:
            target = getattr(self, event)
            if target:
                result[event] = target
        return result


class LogSettings(BaseSettings):
    """Logging settings.

    Environment prefix: AUTHSESSION_LOG__
    Example: AUTHSESSION_LOG__LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTHSESSION_LOG__",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: str = "%(name)s - %(levelname)s - %(message)s"


class AuthSettings(BaseSettings):
    """Main settings aggregating all configuration sections.

    Environment prefix: AUTHSESSION__

    Configuration sources (in order of precedence):
    1. Built-in defaults
    2. pyproject.toml [tool.authsession] section
    3. ./authsession.toml (project-level)
    4. ~/.config/authsession/config.toml (user-level, overrides project)
    5. File named by AUTHSESSION_CONFIG_FILE
    6. Environment variables (highest priority)
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTHSESSION__",
        env_nested_delimiter="__",
        extra="ignore",
    )

    default_strategy: str | None = Field(
        default=None,
        description="Strategy used when none has been persisted yet",
    )
    scope_key: str = Field(
        default="scope",
        description="Dotted path of the scope claim on the user record",
    )

    token: TokenSettings = Field(default_factory=TokenSettings)
    redirect: RedirectSettings = Field(default_factory=RedirectSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    @field_validator("scope_key")
    @classmethod
    def _validate_scope_key(cls, v: str) -> str:
        """Reject empty or dot-only claim paths."""
        if not v.strip(".").strip():
            msg = "scope_key must name a claim"
            raise ValueError(msg)
        return v

    def __init__(self, **data: Any) -> None:
        # Explicit keyword arguments take precedence over TOML files
        merged = _deep_merge(_load_toml_config(), data)
        super().__init__(**merged)


@lru_cache(maxsize=1)
def get_settings() -> AuthSettings:
    """Get the global settings instance (cached).

    Call clear_settings() to reload configuration.
    """
    return AuthSettings()


def clear_settings() -> None:
    """Clear the cached settings to force reload."""
    get_settings.cache_clear()


def reload_settings() -> AuthSettings:
    """Reload settings from all sources."""
    clear_settings()
    return get_settings()
