"""Filename helpers for encrypted artifacts."""

import re
import typing

from .config import DEFAULT_GROUP_NAME, ENCRYPTED_SUFFIX

_INVALID_CHARS = re.compile(r'[<>:"/\\|?*]')
MAX_FILENAME_LENGTH = 255


def human_readable_size(num_bytes: int) -> str:
    units = ["B", "KiB", "MiB", "GiB"]
    value = float(num_bytes)
    for unit in units:
        if value < 1024.0 or unit == units[-1]:
            return f"{value:.2f} {unit}"
        value /= 1024.0
    return f"{value:.2f} TiB"


def format_file_size(num_bytes: int) -> str:
    """Short display size: ``0 Bytes``, ``1.5 KB``, ``2 GB``."""
    if num_bytes <= 0:
        return "0 Bytes"
    sizes = ["Bytes", "KB", "MB", "GB"]
    i = 0
    while i < len(sizes) - 1 and num_bytes >= 1024 ** (i + 1):
        i += 1
    value = round(num_bytes / (1024 ** i), 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {sizes[i]}"


def format_gigabytes(num_bytes: int) -> str:
    """Compact GiB label used in rejection messages: ``1GB``, ``1.5GB``."""
    text = f"{num_bytes / (1024 ** 3):.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return f"{text}GB"


def encrypted_name(name: str) -> str:
    return f"{name}{ENCRYPTED_SUFFIX}"


def is_encrypted_name(name: str) -> bool:
    return name.endswith(ENCRYPTED_SUFFIX)


def original_name(name: str) -> str:
    if is_encrypted_name(name):
        return name[: -len(ENCRYPTED_SUFFIX)]
    return name


def numbered_name(name: str, counter: int) -> str:
    """``x.txt`` -> ``x (1).txt``; only the last suffix stays after the number."""
    stem, dot, suffix = name.rpartition(".")
    if not stem:
        return f"{name} ({counter})"
    return f"{stem} ({counter}){dot}{suffix}"


def validate_filename(name: str) -> "typing.Optional[str]":
    if _INVALID_CHARS.search(name):
        return "Filename contains invalid characters"
    if len(name) > MAX_FILENAME_LENGTH:
        return f"Filename is too long (max {MAX_FILENAME_LENGTH} characters)"
    if not name.strip():
        return "Filename cannot be empty"
    return None


def sanitize_filename(name: str) -> str:
    return _INVALID_CHARS.sub("_", name).strip()


def sanitize_group_name(name: "typing.Optional[str]") -> str:
    cleaned = sanitize_filename(name or "")
    return cleaned or DEFAULT_GROUP_NAME
