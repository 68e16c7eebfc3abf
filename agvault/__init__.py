"""
AGVAULT - password protected file containers

Encrypt a file (or an ordered batch of files) into a self-contained ``.ag``
container with AES-256-GCM under a PBKDF2-HMAC-SHA256 key, and get the
original bytes, filename and mime type back with the same password.
"""

from .batch import (
    BatchItem,
    BatchOrchestrator,
    BatchResult,
    BatchStatus,
    FailurePolicy,
    ItemStatus,
)
from .container import CONTAINER_VERSION, EncryptedContainer, decode, encode
from .errors import (
    AgVaultError,
    AuthenticationError,
    BatchError,
    ErrorKind,
    FormatError,
    KeyDerivationError,
    SourceReadError,
    ValidationError,
)
from .inputs import AddResult, InputSet
from .password import PasswordPolicy, evaluate_password
from .pipeline import DecryptionResult, EncryptionResult
from .sources import SourceFile
from .version import __version__

from . import batch as _batch
from . import pipeline as _pipeline


def encrypt(path, password: str, *, progress=None):
    """
    Encrypt a single file into container bytes.

    Args:
        path: File path or :class:`SourceFile`
        password: Password for key derivation (must not be empty)
        progress: Optional ``callback(percent)``

    Returns:
        :class:`EncryptionResult` with the container bytes and ``<name>.ag``
    """
    source = path if isinstance(path, SourceFile) else SourceFile.from_path(path)
    return _pipeline.encrypt_file(source, password, progress=progress)


def decrypt(path, password: str, *, progress=None):
    """
    Decrypt a ``.ag`` container.

    Returns:
        :class:`DecryptionResult` with plaintext, original filename and mime type

    Raises:
        AuthenticationError: wrong password or tampered container
        FormatError: not a well-formed container
    """
    source = path if isinstance(path, SourceFile) else SourceFile.from_path(path)
    return _pipeline.decrypt_file(source, password, progress=progress)


def encrypt_bytes(data: bytes, name: str, password: str, mime_type: str = None):
    return _pipeline.encrypt_bytes(data, name, password, mime_type=mime_type)


def decrypt_bytes(blob: bytes, password: str):
    return _pipeline.decrypt_bytes(blob, password)


def encrypt_many(files, password: str, group_name: str = "", *, strict: bool = False, on_progress=None):
    """
    Encrypt several files in order under one password.

    Files that fail are skipped and reported on :attr:`BatchResult.items`
    unless ``strict`` is set, in which case any failure aborts the batch.
    """
    policy = FailurePolicy.STRICT if strict else FailurePolicy.SKIP
    return _batch.encrypt_batch(files, password, group_name, policy=policy, on_progress=on_progress)


__all__ = [
    "AddResult",
    "AgVaultError",
    "AuthenticationError",
    "BatchError",
    "BatchItem",
    "BatchOrchestrator",
    "BatchResult",
    "BatchStatus",
    "CONTAINER_VERSION",
    "DecryptionResult",
    "EncryptedContainer",
    "EncryptionResult",
    "ErrorKind",
    "FailurePolicy",
    "FormatError",
    "InputSet",
    "ItemStatus",
    "KeyDerivationError",
    "PasswordPolicy",
    "SourceFile",
    "SourceReadError",
    "ValidationError",
    "__version__",
    "decode",
    "decrypt",
    "decrypt_bytes",
    "encode",
    "encrypt",
    "encrypt_bytes",
    "encrypt_many",
    "evaluate_password",
]
