from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from shared.protocol.constants import VERSION, VERSION_FOR_GAME_OPTIONS

ERROR_POLICIES = ("last", "first", "all")
TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


class ConfigError(Exception):
    """Raised when configuration values are invalid."""


@dataclass
class Settings:
    """Shared baseline settings (both client/server build on top)."""

    version: int = VERSION
    # Oldest client the server still admits; options needing more trigger a confirmation
    baseline_version: int = VERSION_FOR_GAME_OPTIONS - 1
    log_level: str = "INFO"
    options_file: Optional[Path] = None
    error_policy: str = "last"
    confirm_practice_games: bool = False


SETTINGS = Settings()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    text = value.strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def load_settings(env_path: str = ".env") -> Settings:
    """Load shared settings from env/.env. SETTINGS is only updated once every value validates."""
    if Path(env_path).exists():
        load_dotenv(env_path)
    options_file = os.getenv("GAMEOPTS_OPTIONS_FILE")
    candidate = replace(
        SETTINGS,
        version=_env_int("GAMEOPTS_VERSION", SETTINGS.version),
        baseline_version=_env_int("GAMEOPTS_BASELINE_VERSION", SETTINGS.baseline_version),
        log_level=os.getenv("GAMEOPTS_LOG_LEVEL", SETTINGS.log_level).upper(),
        error_policy=os.getenv("GAMEOPTS_ERROR_POLICY", SETTINGS.error_policy).lower(),
        confirm_practice_games=_env_bool("GAMEOPTS_CONFIRM_PRACTICE", SETTINGS.confirm_practice_games),
        options_file=Path(options_file) if options_file else SETTINGS.options_file,
    )
    _validate_settings(candidate)
    for item in fields(Settings):
        setattr(SETTINGS, item.name, getattr(candidate, item.name))
    return SETTINGS


def _validate_settings(settings: Settings) -> None:
    if settings.version <= 0:
        raise ConfigError("version must be positive")
    if settings.baseline_version > settings.version:
        raise ConfigError("baseline_version cannot exceed the local version")
    if settings.error_policy not in ERROR_POLICIES:
        raise ConfigError(f"error_policy must be one of {', '.join(ERROR_POLICIES)}")
    if not isinstance(logging.getLevelName(settings.log_level), int):
        raise ConfigError(f"Invalid log level: {settings.log_level}")
    if settings.options_file is not None and not settings.options_file.exists():
        raise ConfigError(f"Options file not found: {settings.options_file}")


def setup_logging(settings: Optional[Settings] = None) -> None:
    logging.basicConfig(
        level=(settings or SETTINGS).log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


__all__ = ["ConfigError", "Settings", "SETTINGS", "load_settings", "setup_logging"]
