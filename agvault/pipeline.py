"""Single-file encrypt/decrypt pipeline.

Both directions hold the whole file in memory; the size ceiling in
:mod:`agvault.config` keeps that bounded. Nothing here touches the disk
except through :meth:`SourceFile.read`, and nothing is printed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from . import config
from .container import EncryptedContainer, decode, encode
from .errors import AuthenticationError, FormatError, ValidationError
from .kdf import RandomSource, derive_key, generate_iv, generate_salt
from .naming import encrypted_name, human_readable_size, is_encrypted_name
from .sources import SourceFile

ProgressCallback = Callable[[float], None]

ENCRYPT_MILESTONES = (20, 30, 50, 70, 90, 100)
DECRYPT_MILESTONES = (20, 40, 60, 80, 95, 100)


@dataclass(frozen=True)
class EncryptionResult:
    data: bytes
    filename: str
    original_filename: str
    mime_type: str


@dataclass(frozen=True)
class DecryptionResult:
    data: bytes
    filename: str
    mime_type: str


class _Milestones:
    """Emits a fixed milestone sequence to an optional callback, one step per call."""

    def __init__(self, callback: Optional[ProgressCallback], steps):
        self._callback = callback
        self._steps = iter(steps)

    def advance(self) -> None:
        value = next(self._steps)
        if self._callback is not None:
            self._callback(value)


def _ensure_password(password: Union[str, bytes]) -> None:
    if password is None or len(password) == 0:
        raise ValidationError("Password is required")


def ensure_size_limit(source: SourceFile, max_bytes: Optional[int] = None) -> None:
    limit = max_bytes or config.MAX_INPUT_BYTES
    if source.size == 0:
        raise ValidationError(f"File {source.name} is empty and cannot be encrypted")
    if source.size > limit:
        raise ValidationError(
            f"{source.name} is {human_readable_size(source.size)}, "
            f"exceeding the {human_readable_size(limit)} limit"
        )


def encrypt_file(
    source: SourceFile,
    password: Union[str, bytes],
    *,
    progress: Optional[ProgressCallback] = None,
    rng: Optional[RandomSource] = None,
    max_bytes: Optional[int] = None,
) -> EncryptionResult:
    """Encrypt ``source`` into a serialized container named ``<name>.ag``."""
    _ensure_password(password)
    ensure_size_limit(source, max_bytes)
    steps = _Milestones(progress, ENCRYPT_MILESTONES)
    steps.advance()

    salt = generate_salt(rng)
    iv = generate_iv(rng)
    steps.advance()

    key = derive_key(password, salt)
    steps.advance()

    plaintext = source.read()
    if len(plaintext) != source.size:
        raise ValidationError(
            f"File {source.name} changed while reading ({len(plaintext)} of {source.size} bytes)"
        )
    steps.advance()

    ciphertext = AESGCM(key).encrypt(iv, plaintext, None)
    steps.advance()

    container = EncryptedContainer.create(
        original_filename=source.name,
        original_mime_type=source.effective_mime_type,
        salt=salt,
        iv=iv,
        encrypted_content=ciphertext,
    )
    blob = encode(container)
    steps.advance()
    return EncryptionResult(
        data=blob,
        filename=encrypted_name(source.name),
        original_filename=source.name,
        mime_type=container.original_mime_type,
    )


def _decrypt_blob(
    blob: bytes,
    password: Union[str, bytes],
    steps: _Milestones,
) -> DecryptionResult:
    try:
        container = decode(blob)
    except FormatError as exc:
        raise FormatError("Invalid file format: File is not a valid encrypted file") from exc
    steps.advance()

    key = derive_key(password, container.salt)
    steps.advance()

    try:
        plaintext = AESGCM(key).decrypt(container.iv, container.encrypted_content, None)
    except (InvalidTag, ValueError) as exc:
        raise AuthenticationError("Invalid password or corrupted file: Decryption failed") from exc
    steps.advance()

    result = DecryptionResult(
        data=plaintext,
        filename=container.original_filename,
        mime_type=container.original_mime_type,
    )
    steps.advance()
    return result


def decrypt_file(
    source: SourceFile,
    password: Union[str, bytes],
    *,
    progress: Optional[ProgressCallback] = None,
) -> DecryptionResult:
    """Decrypt a ``.ag`` container, restoring the name and mime type stored inside it."""
    _ensure_password(password)
    if not is_encrypted_name(source.name):
        raise ValidationError("Selected file does not appear to be encrypted")
    steps = _Milestones(progress, DECRYPT_MILESTONES)
    steps.advance()

    blob = source.read()
    steps.advance()
    return _decrypt_blob(blob, password, steps)


def encrypt_bytes(
    data: bytes,
    name: str,
    password: Union[str, bytes],
    *,
    mime_type: Optional[str] = None,
    progress: Optional[ProgressCallback] = None,
    rng: Optional[RandomSource] = None,
    max_bytes: Optional[int] = None,
) -> EncryptionResult:
    source = SourceFile.from_bytes(name, data, mime_type=mime_type)
    return encrypt_file(source, password, progress=progress, rng=rng, max_bytes=max_bytes)


def decrypt_bytes(
    blob: bytes,
    password: Union[str, bytes],
    *,
    progress: Optional[ProgressCallback] = None,
) -> DecryptionResult:
    # In-memory blobs carry no file name, so the ``.ag`` marker check is skipped.
    _ensure_password(password)
    steps = _Milestones(progress, DECRYPT_MILESTONES)
    steps.advance()
    steps.advance()
    return _decrypt_blob(bytes(blob), password, steps)
