"""User facing wording for pipeline failures.

Decrypt failures are matched on their message text. This is guidance only:
the cipher cannot tell a wrong password from a damaged file, so neither can
anything here.
"""

from __future__ import annotations

from typing import Optional


INVALID_PASSWORD = "Invalid password - The password you entered is incorrect"
CORRUPTED_FILE = "Corrupted file - The encrypted file appears to be damaged"
NOT_ENCRYPTED = "Invalid file format - This file doesn't appear to be properly encrypted"
UNKNOWN_FAILURE = "Decryption failed - An unknown error occurred"

_PASSWORD_HINTS = ("invalid password", "wrong password", "authentication failed", "decryption failed")
_CORRUPTION_HINTS = ("corrupted", "invalid file format", "malformed")
_FORMAT_HINTS = ("not encrypted", "invalid header")


def describe_decrypt_failure(exc: Optional[BaseException]) -> str:
    if exc is None:
        return UNKNOWN_FAILURE
    message = str(exc)
    lowered = message.lower()
    if any(hint in lowered for hint in _PASSWORD_HINTS):
        return INVALID_PASSWORD
    if any(hint in lowered for hint in _CORRUPTION_HINTS):
        return CORRUPTED_FILE
    if any(hint in lowered for hint in _FORMAT_HINTS):
        return NOT_ENCRYPTED
    return message or UNKNOWN_FAILURE
