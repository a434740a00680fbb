"""Tests for email and mobile number helpers."""

import pytest
from identity.shared.email import is_valid_email, normalize_email
from identity.shared.phone import is_valid_mobile, normalize_mobile


class TestEmail:
    @pytest.mark.parametrize(
        "email",
        ["user@example.com", "first.last@sub.example.co.in", "user+tag@example.org"],
    )
    def test_valid(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize(
        "email",
        [
            "",
            "plain",
            "a@b",
            "a@@example.com",
            "a b@example.com",
            "a..b@example.com",
            "a@-example.com",
            "a@example.com.",
        ],
    )
    def test_invalid(self, email):
        assert not is_valid_email(email)

    def test_normalize(self):
        assert normalize_email("  Jane@Example.COM ") == "jane@example.com"


class TestMobile:
    @pytest.mark.parametrize("number", ["9876543210", "+91 98765 43210", "(080) 2345-6789"])
    def test_valid(self, number):
        assert is_valid_mobile(number)

    @pytest.mark.parametrize("number", ["", "phone", "+-()", "98765x43210"])
    def test_invalid(self, number):
        assert not is_valid_mobile(number)

    def test_normalize_strips_whitespace(self):
        assert normalize_mobile("  9876543210 ") == "9876543210"
