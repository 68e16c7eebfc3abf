"""Exception taxonomy shared by the codec, the pipeline and the batch runner."""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from .batch import BatchItem


class AgVaultError(Exception):
    """Base class for every failure raised by agvault."""


class ValidationError(AgVaultError, ValueError):
    """A precondition failed before any cryptographic work started."""


class SourceReadError(ValidationError):
    """The source file could not be read in full."""


class FormatError(AgVaultError, ValueError):
    """Bytes do not parse as a well-formed container."""


class AuthenticationError(AgVaultError):
    """AES-GCM tag verification failed.

    A wrong password and a tampered container look identical to the cipher,
    so callers only ever get this one condition.
    """


class KeyDerivationError(AgVaultError, RuntimeError):
    """The PBKDF2 primitive failed or is unavailable."""


class BatchError(AgVaultError):
    """A batch produced no output, or a strict batch hit a failing file."""

    def __init__(self, message: str, items: Optional[Sequence["BatchItem"]] = None):
        super().__init__(message)
        self.items = list(items or [])


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    FORMAT = "format"
    AUTHENTICATION = "authentication"
    KEY_DERIVATION = "key-derivation"
    BATCH = "batch"
    UNEXPECTED = "unexpected"


def error_kind(exc: BaseException) -> ErrorKind:
    if isinstance(exc, ValidationError):
        return ErrorKind.VALIDATION
    if isinstance(exc, FormatError):
        return ErrorKind.FORMAT
    if isinstance(exc, AuthenticationError):
        return ErrorKind.AUTHENTICATION
    if isinstance(exc, KeyDerivationError):
        return ErrorKind.KEY_DERIVATION
    if isinstance(exc, BatchError):
        return ErrorKind.BATCH
    return ErrorKind.UNEXPECTED
