"""Runtime limits and naming constants, with environment overrides."""

import os as _os_module
import typing


def _env_int(name: str) -> "typing.Optional[int]":
    value = _os_module.getenv(name)
    if not value:
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    if parsed <= 0:
        return None
    return parsed


MAX_INPUT_BYTES = 1024 * 1024 * 1024  # 1 GiB per file, policy not protocol
_MAX_INPUT_BYTES_ENV = _env_int("AGVAULT_MAX_INPUT_BYTES")
if _MAX_INPUT_BYTES_ENV is not None:
    MAX_INPUT_BYTES = _MAX_INPUT_BYTES_ENV

MIN_PASSWORD_LENGTH = 8
_MIN_PASSWORD_LENGTH_ENV = _env_int("AGVAULT_MIN_PASSWORD_LENGTH")
if _MIN_PASSWORD_LENGTH_ENV is not None:
    MIN_PASSWORD_LENGTH = _MIN_PASSWORD_LENGTH_ENV

RECOMMENDED_PASSWORD_LENGTH = 12
ENCRYPTED_SUFFIX = ".ag"
DEFAULT_GROUP_NAME = "encrypted_files"
DEFAULT_MIME_TYPE = "application/octet-stream"
PROGRESS_BAR_WIDTH = 30
