"""Password strength assessment for user feedback.

Only ``min_length_ok`` gates anything (the batch runner requires it); the
rest is advice. Recomputed from scratch for every password.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List

from . import config

_LOWER = re.compile(r"[a-z]")
_UPPER = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile(r"[^a-zA-Z0-9]")

WEAK = "weak"
MEDIUM = "medium"
STRONG = "strong"


@dataclass(frozen=True)
class PasswordPolicy:
    min_length_ok: bool
    recommended_length_ok: bool
    has_lower: bool
    has_upper: bool
    has_digit: bool
    has_special: bool
    strength: str
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.min_length_ok


def evaluate_password(password: str) -> PasswordPolicy:
    if not password:
        return PasswordPolicy(
            min_length_ok=False,
            recommended_length_ok=False,
            has_lower=False,
            has_upper=False,
            has_digit=False,
            has_special=False,
            strength=WEAK,
            errors=["Password is required"],
        )

    length = len(password)
    min_ok = length >= config.MIN_PASSWORD_LENGTH
    long_enough = length >= config.RECOMMENDED_PASSWORD_LENGTH
    has_lower = bool(_LOWER.search(password))
    has_upper = bool(_UPPER.search(password))
    has_digit = bool(_DIGIT.search(password))
    has_special = bool(_SPECIAL.search(password))

    errors: List[str] = []
    if not min_ok:
        errors.append(f"Password must be at least {config.MIN_PASSWORD_LENGTH} characters long")
    if not long_enough:
        errors.append(
            f"Consider using at least {config.RECOMMENDED_PASSWORD_LENGTH} characters for better security"
        )
    if not has_lower:
        errors.append("Password should contain lowercase letters")
    if not has_upper:
        errors.append("Password should contain uppercase letters")
    if not has_digit:
        errors.append("Password should contain numbers")
    if not has_special:
        errors.append("Password should contain special characters")

    criteria = sum([has_lower, has_upper, has_digit, has_special, long_enough])
    if criteria >= 4 and long_enough:
        strength = STRONG
    elif criteria >= 3 and min_ok:
        strength = MEDIUM
    else:
        strength = WEAK

    return PasswordPolicy(
        min_length_ok=min_ok,
        recommended_length_ok=long_enough,
        has_lower=has_lower,
        has_upper=has_upper,
        has_digit=has_digit,
        has_special=has_special,
        strength=strength,
        errors=errors,
    )
