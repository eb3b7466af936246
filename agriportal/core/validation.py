"""
Input validation for account forms.

Every validator returns a FieldError (field name + Vietnamese message) or None,
so callers can either collect all errors or stop at the first one.
"""
import re
from dataclasses import dataclass

USERNAME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")
VN_PHONE_RE = re.compile(r"^(\+84|84|0)(3|5|7|8|9)[0-9]{8}$")


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


def validate_username(username: str | None) -> FieldError | None:
    if not username or not username.strip():
        return FieldError("username", "Tên đăng nhập không được để trống")
    if len(username) < 3:
        return FieldError("username", "Tên đăng nhập phải có ít nhất 3 ký tự")
    if len(username) > 20:
        return FieldError("username", "Tên đăng nhập không được quá 20 ký tự")
    if not USERNAME_RE.match(username):
        return FieldError(
            "username",
            "Tên đăng nhập chỉ được chứa chữ cái, số và gạch dưới, phải bắt đầu bằng chữ cái",
        )
    return None


def validate_password(password: str | None) -> FieldError | None:
    if not password:
        return FieldError("password", "Mật khẩu không được để trống")
    if len(password) < 8:
        return FieldError("password", "Mật khẩu phải có ít nhất 8 ký tự")
    if not re.search(r"[a-zA-Z]", password):
        return FieldError("password", "Mật khẩu phải chứa ít nhất một chữ cái")
    if not re.search(r"[0-9]", password):
        return FieldError("password", "Mật khẩu phải chứa ít nhất một chữ số")
    return None


def validate_confirm_password(password: str, confirm_password: str | None) -> FieldError | None:
    if not confirm_password:
        return FieldError("confirm_password", "Xác nhận mật khẩu không được để trống")
    if password != confirm_password:
        return FieldError("confirm_password", "Mật khẩu xác nhận không khớp")
    return None


def _clean_phone(phone_number: str) -> str:
    return re.sub(r"[\s-]", "", phone_number)


def validate_phone_number(phone_number: str | None) -> FieldError | None:
    if not phone_number or not phone_number.strip():
        return FieldError("phone_number", "Số điện thoại không được để trống")
    if not VN_PHONE_RE.match(_clean_phone(phone_number)):
        return FieldError(
            "phone_number",
            "Số điện thoại không hợp lệ. Vui lòng nhập số điện thoại Việt Nam",
        )
    return None


def normalize_phone_number(phone_number: str) -> str:
    """Convert 0xxxxxxxxx / 84xxxxxxxxx to +84xxxxxxxxx"""
    cleaned = _clean_phone(phone_number)
    if cleaned.startswith("+84"):
        return cleaned
    if cleaned.startswith("0"):
        return "+84" + cleaned[1:]
    if cleaned.startswith("84"):
        return "+" + cleaned
    return phone_number


def get_password_strength(password: str) -> tuple[str, int]:
    score = 0
    if len(password) >= 8:
        score += 1
    if len(password) >= 12:
        score += 1
    if re.search(r"[a-z]", password):
        score += 1
    if re.search(r"[A-Z]", password):
        score += 1
    if re.search(r"[0-9]", password):
        score += 1
    if re.search(r"[^a-zA-Z0-9]", password):
        score += 1

    if score <= 2:
        return "weak", score
    if score <= 4:
        return "medium", score
    return "strong", score


def validate_sign_up_data(
    username: str,
    password: str,
    phone_number: str,
    confirm_password: str | None = None,
) -> list[FieldError]:
    checks = [
        validate_username(username),
        validate_password(password),
    ]
    if confirm_password is not None:
        checks.append(validate_confirm_password(password, confirm_password))
    checks.append(validate_phone_number(phone_number))
    return [error for error in checks if error]


def validate_sign_in_data(username: str, password: str) -> list[FieldError]:
    errors = []
    if not username or not username.strip():
        errors.append(FieldError("username", "Tên đăng nhập không được để trống"))
    if not password:
        errors.append(FieldError("password", "Mật khẩu không được để trống"))
    return errors

