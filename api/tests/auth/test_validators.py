"""Tests for auth validators."""

import pytest

from gittrainer.auth.validators import (
    PASSWORD_MIN_LENGTH,
    normalize_username,
    validate_password,
    validate_username,
)


class TestValidateUsername:
    @pytest.mark.parametrize(
        "username,formatted",
        [
            ("octocat", "octocat"),
            ("  Linus_T ", "linus_t"),
            ("git.user-42", "git.user-42"),
        ],
    )
    def test_valid(self, username: str, formatted: str) -> None:
        result = validate_username(username)
        assert result.valid is True
        assert result.formatted == formatted

    @pytest.mark.parametrize(
        "username",
        ["ab", "x" * 31, "_leading", "has space", "emoji🙂"],
    )
    def test_invalid(self, username: str) -> None:
        result = validate_username(username)
        assert result.valid is False
        assert result.message

    def test_normalize(self) -> None:
        assert normalize_username("  MiXeD ") == "mixed"


class TestValidatePassword:
    def test_valid_password(self) -> None:
        assert validate_password("Str0ng!pass").valid is True

    @pytest.mark.parametrize(
        "password,expected_message",
        [
            ("Ab1!", f"Password must be at least {PASSWORD_MIN_LENGTH} characters"),
            ("lowercase1!", "Password needs an uppercase letter"),
            ("UPPERCASE1!", "Password needs a lowercase letter"),
            ("NoDigits!!", "Password needs a digit"),
            ("NoSpecial123", "Password needs a special character"),
        ],
    )
    def test_invalid_password(self, password: str, expected_message: str) -> None:
        result = validate_password(password)
        assert result.valid is False
        assert result.message == expected_message
