"""
Unit tests for phone number canonicalization.

Phone numbers are the trainee identity, so every format a trainee might
type has to land on the same normalized value.
"""

import pytest

from fitbook.core.booking.phones import (
    is_valid_login_phone,
    normalize_phone,
    same_phone,
    to_dialable,
    whatsapp_link,
)


class TestNormalizePhone:
    """Tests for normalize_phone."""

    @pytest.mark.parametrize("raw", [
        "050-123-4567",
        "050 123 4567",
        "+972 50 123 4567",
        "972501234567",
        "(050) 1234567",
    ])
    def test_common_formats_normalize_to_local_form(self, raw):
        """Separators go, and the country prefix becomes a leading 0."""
        assert normalize_phone(raw) == "0501234567"

    def test_empty_and_none_normalize_to_empty(self):
        assert normalize_phone("") == ""
        assert normalize_phone(None) == ""

    def test_letters_only_normalize_to_empty(self):
        assert normalize_phone("abc") == ""

    def test_prefix_is_only_replaced_at_the_start(self):
        """A 972 in the middle of the number is just digits."""
        assert normalize_phone("0509721234") == "0509721234"

    def test_normalizing_twice_changes_nothing(self):
        once = normalize_phone("+972-50-123-4567")
        assert normalize_phone(once) == once


class TestToDialable:
    """Tests for the international form used in messaging links."""

    def test_leading_zero_becomes_country_prefix(self):
        assert to_dialable("0501234567") == "972501234567"

    def test_international_input_round_trips(self):
        assert to_dialable("+972 50 123 4567") == "972501234567"

    def test_number_without_leading_zero_is_left_alone(self):
        assert to_dialable("12345") == "12345"


class TestPhoneHelpers:
    """Tests for login validation, comparison and WhatsApp links."""

    def test_login_phone_needs_nine_digits(self):
        assert is_valid_login_phone("050123456")
        assert not is_valid_login_phone("05012345")
        assert not is_valid_login_phone("")

    def test_same_phone_compares_normalized(self):
        assert same_phone("050-1234567", "+972501234567")
        assert not same_phone("0501234567", "0501234568")

    def test_same_phone_never_matches_empty(self):
        """Two missing phones are not the same trainee."""
        assert not same_phone("", "")
        assert not same_phone(None, "abc")

    def test_whatsapp_link_uses_dialable_number(self):
        assert whatsapp_link("050-1234567") == "https://wa.me/972501234567"

    def test_whatsapp_link_encodes_text(self):
        link = whatsapp_link("0501234567", "see you at 18:00?")
        assert link == "https://wa.me/972501234567?text=see%20you%20at%2018%3A00%3F"
