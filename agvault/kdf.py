"""Password based key derivation.

The iteration count and hash are part of the container contract: changing
either makes every existing container undecryptable, so they are fixed here
rather than read from the environment.
"""

from __future__ import annotations

import os
from typing import Callable, Optional, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .container import IV_LENGTH, SALT_LENGTH
from .errors import KeyDerivationError

KDF_ITERATIONS = 100_000
KEY_LENGTH = 32

RandomSource = Callable[[int], bytes]


def system_random(length: int) -> bytes:
    return os.urandom(length)


def _draw(rng: Optional[RandomSource], length: int) -> bytes:
    source = rng or system_random
    value = bytes(source(length))
    if len(value) != length:
        raise KeyDerivationError(
            f"Random source returned {len(value)} bytes, expected {length}"
        )
    return value


def generate_salt(rng: Optional[RandomSource] = None) -> bytes:
    return _draw(rng, SALT_LENGTH)


def generate_iv(rng: Optional[RandomSource] = None) -> bytes:
    return _draw(rng, IV_LENGTH)


def _coerce_password_bytes(password: Union[str, bytes, bytearray, memoryview]) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    if isinstance(password, (bytes, bytearray, memoryview)):
        return bytes(password)
    raise TypeError(f"Unsupported password type: {type(password)!r}")


def derive_key(password: Union[str, bytes], salt: bytes) -> bytes:
    """Stretch ``password`` into a 256-bit AES-GCM key with PBKDF2-HMAC-SHA256."""
    pw = _coerce_password_bytes(password)
    try:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=bytes(salt),
            iterations=KDF_ITERATIONS,
        )
        return kdf.derive(pw)
    except Exception as exc:
        raise KeyDerivationError(f"Failed to derive encryption key: {exc}") from exc
