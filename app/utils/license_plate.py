# app/utils/license_plate.py
"""
License plate normalization and format checks.
The rule engines only ever see normalized plates; routers normalize on the way in.
"""

import re
from typing import Optional, Tuple

PLATE_MIN_LENGTH = 2
PLATE_MAX_LENGTH = 10
_NON_ALNUM = re.compile(r"[^A-Z0-9]")
_LETTERS_THEN_DIGITS = re.compile(r"^([A-Z]{2,4})([0-9]{2,6})$")

MSG_REQUIRED = "License plate is required"
MSG_MIN_LENGTH = f"License plate must be at least {PLATE_MIN_LENGTH} characters"
MSG_MAX_LENGTH = f"License plate must not exceed {PLATE_MAX_LENGTH} characters"


def normalize_license_plate(plate: str) -> str:
    """'abc-123 ' → 'ABC123'"""
    return _NON_ALNUM.sub("", plate.strip().upper())


def validate_license_plate(plate: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Returns (is_valid, error_message)."""
    if not plate or not plate.strip():
        return False, MSG_REQUIRED

    normalized = normalize_license_plate(plate)
    if len(normalized) < PLATE_MIN_LENGTH:
        return False, MSG_MIN_LENGTH
    if len(normalized) > PLATE_MAX_LENGTH:
        return False, MSG_MAX_LENGTH
    return True, None


def _spaced(chars: str) -> str:
    if len(chars) <= 3:
        return chars

    match = _LETTERS_THEN_DIGITS.match(chars)
    if match:
        return f"{match.group(1)} {match.group(2)}"

    mid = len(chars) // 2
    return f"{chars[:mid]} {chars[mid:]}"


def format_license_plate(plate: str) -> str:
    """Display form: 'ABC123' → 'ABC 123'. Falls back to splitting in the middle."""
    return _spaced(normalize_license_plate(plate))


def mask_license_plate(plate: str, reveal_chars: int = 3) -> str:
    normalized = normalize_license_plate(plate)
    if len(normalized) <= reveal_chars:
        return format_license_plate(plate)
    return _spaced(normalized[:reveal_chars] + "*" * (len(normalized) - reveal_chars))
