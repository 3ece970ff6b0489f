"""Unit tests for the auth payloads: identity normalization and password rules."""

import pytest
from pydantic import ValidationError

from src.mb_common.principal import normalize_identity
from src.mb_gateway.user.schemas import LoginRequest, RegisterRequest

GOOD = "Wallet-pass-42"


class TestRegisterEmail:
    def test_email_is_trimmed_and_lower_cased(self) -> None:
        req = RegisterRequest(email="  Bob.Smith@Example.COM ", password=GOOD)
        assert req.email == "bob.smith@example.com"

    def test_stored_email_matches_transfer_identity_rule(self) -> None:
        raw = "Carol@Example.com"
        assert RegisterRequest(email=raw, password=GOOD).email == normalize_identity(raw)

    def test_invalid_email(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(email="not-an-email", password=GOOD)


class TestRegisterDisplayName:
    def test_optional(self) -> None:
        assert RegisterRequest(email="a@example.com", password=GOOD).display_name is None

    def test_blank_becomes_none(self) -> None:
        req = RegisterRequest(email="a@example.com", password=GOOD, display_name="   ")
        assert req.display_name is None

    def test_trimmed(self) -> None:
        req = RegisterRequest(email="a@example.com", password=GOOD, display_name=" Bob ")
        assert req.display_name == "Bob"

    def test_too_long(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(email="a@example.com", password=GOOD, display_name="x" * 81)


class TestRegisterPassword:
    @pytest.mark.parametrize(
        "pw",
        [
            "short1",  # under 10 characters
            "lettersonlypassword",
            "12345678901234",
            "ñ" * 37 + "1",  # 75 bytes in utf-8
        ],
    )
    def test_rejected(self, pw: str) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(email="a@example.com", password=pw)

    def test_must_not_contain_email_name(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(email="Dana@example.com", password="my-dana-pass-1")

    def test_short_email_name_not_checked(self) -> None:
        assert RegisterRequest(email="a@example.com", password="alpha-beta-99")


class TestLoginRequest:
    def test_email_normalized_without_format_check(self) -> None:
        assert LoginRequest(email=" Bob@Example.com", password="x").email == "bob@example.com"
