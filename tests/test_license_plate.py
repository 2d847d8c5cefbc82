"""Unit tests for license plate normalization."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.utils.license_plate import (
    MSG_MAX_LENGTH, MSG_MIN_LENGTH, MSG_REQUIRED,
    format_license_plate, mask_license_plate, normalize_license_plate, validate_license_plate,
)


class TestNormalize:
    def test_strips_spaces_dashes_and_uppercases(self):
        assert normalize_license_plate("  abc-123 ") == "ABC123"
        assert normalize_license_plate("7 XYZ.99") == "7XYZ99"


class TestValidate:
    def test_valid_plate(self):
        assert validate_license_plate("ABC 123") == (True, None)

    def test_empty(self):
        assert validate_license_plate("   ") == (False, MSG_REQUIRED)
        assert validate_license_plate(None) == (False, MSG_REQUIRED)

    def test_too_short(self):
        assert validate_license_plate("A-") == (False, MSG_MIN_LENGTH)

    def test_too_long(self):
        assert validate_license_plate("ABCDEFGHIJK") == (False, MSG_MAX_LENGTH)

    def test_only_symbols(self):
        assert validate_license_plate("!!") == (False, MSG_MIN_LENGTH)


class TestFormat:
    def test_letters_then_digits(self):
        assert format_license_plate("abc123") == "ABC 123"

    def test_mixed_splits_in_middle(self):
        assert format_license_plate("7XYZ99") == "7XY Z99"

    def test_short_plate_unchanged(self):
        assert format_license_plate("ab1") == "AB1"

    def test_mask(self):
        assert mask_license_plate("ABC-1234") == "ABC ****"
        assert mask_license_plate("AB") == "AB"
