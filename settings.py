from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from services.normalizer import SYSTEM_ID_MIN, normalize, parse_number


_DEFAULT_SYSTEM_ID_ENV = "SETPOINT_DEFAULT_SYSTEM_ID"
_COMPACT_DEFAULT_ENV = "SETPOINT_COMPACT_DEFAULT"
_DOWNLOAD_ROOT_ENV = "SETPOINT_DOWNLOAD_ROOT"
_SELF_CHECKS_ENV = "SETPOINT_SELF_CHECKS_ON_STARTUP"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    default_system_id: str
    compact_default: bool
    download_root_path: Optional[str]
    self_checks_on_startup: bool
    log_level: str


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUE_VALUES:
        return True
    if candidate in _FALSE_VALUES:
        return False
    return default


def _read_system_id(default: str) -> str:
    value = os.getenv(_DEFAULT_SYSTEM_ID_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if parse_number(candidate) is None:
        return default
    return normalize(candidate, minimum=SYSTEM_ID_MIN)


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        default_system_id=_read_system_id("1"),
        compact_default=_read_bool_env(_COMPACT_DEFAULT_ENV, True),
        download_root_path=_read_optional_env(_DOWNLOAD_ROOT_ENV, "./tmp/downloads"),
        self_checks_on_startup=_read_bool_env(_SELF_CHECKS_ENV, True),
        log_level=_read_log_level("INFO"),
    )
