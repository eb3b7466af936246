"""
Tests for account form validation helpers
"""
import pytest

from agriportal.core.validation import (
    get_password_strength,
    normalize_phone_number,
    validate_password,
    validate_phone_number,
    validate_sign_up_data,
    validate_username,
)


@pytest.mark.unit
class TestValidation:

    @pytest.mark.parametrize("raw,expected", [
        ("0912345678", "+84912345678"),
        ("84912345678", "+84912345678"),
        ("+84912345678", "+84912345678"),
        ("091 234-5678", "+84912345678"),
    ])
    def test_normalize_phone_number(self, raw, expected):
        assert normalize_phone_number(raw) == expected

    def test_phone_number_rules(self):
        assert validate_phone_number("0912345678") is None
        assert validate_phone_number("0112345678").field == "phone_number"
        assert validate_phone_number("  ").message == "Số điện thoại không được để trống"

    def test_username_rules(self):
        assert validate_username("nongdan_1") is None
        assert validate_username("1nongdan") is not None
        assert validate_username("a" * 21).message == "Tên đăng nhập không được quá 20 ký tự"

    def test_password_rules(self):
        assert validate_password("matkhau123") is None
        assert validate_password("12345678").message == "Mật khẩu phải chứa ít nhất một chữ cái"
        assert validate_password("matkhaumoi").message == "Mật khẩu phải chứa ít nhất một chữ số"

    def test_password_strength(self):
        assert get_password_strength("abc") == ("weak", 1)
        assert get_password_strength("matkhau123") == ("medium", 3)
        assert get_password_strength("MatKhau123!@#") == ("strong", 6)

    def test_sign_up_collects_every_error(self):
        errors = validate_sign_up_data("ab", "short", "123", confirm_password="khac")
        assert [e.field for e in errors] == ["username", "password", "confirm_password", "phone_number"]
