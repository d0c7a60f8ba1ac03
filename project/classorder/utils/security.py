# classorder/utils/security.py

"""
Токен администратора.

Токен детерминирован: HMAC-SHA256 пароля с самим паролем в качестве ключа.
Пока ADMIN_PASSWORD не меняется, токен один и тот же, отозвать отдельную
сессию нельзя, только сменить пароль.
"""

import hashlib
import hmac

from classorder.config import settings

COOKIE_NAME = "admin_auth"
COOKIE_MAX_AGE = 60 * 60 * 12  # 12 часов


def admin_token(password: str | None = None) -> str:
    """
    Возвращает токен для пароля (по умолчанию ADMIN_PASSWORD).

    :param password: пароль, из которого строится токен
    :return: hex-строка или "" при пустом пароле
    """
    password = settings.ADMIN_PASSWORD if password is None else password
    if not password:
        return ""
    return hmac.new(password.encode(), password.encode(), hashlib.sha256).hexdigest()


def ct_equal(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode(), b.encode())


def verify_admin_password(password: str | None) -> bool:
    """Сравнивает пароль с ADMIN_PASSWORD. Пустой секрет не пускает никого."""
    secret = settings.ADMIN_PASSWORD
    if not secret or not password:
        return False
    return ct_equal(password, secret)


def is_admin_token_valid(cookie_value: str | None) -> bool:
    """
    Проверяет значение cookie.

    :param cookie_value: значение admin_auth из запроса
    :return: True, если совпадает с текущим токеном
    """
    token = admin_token()
    # разная длина сразу False, без сравнения за постоянное время
    if not token or not cookie_value or len(token) != len(cookie_value):
        return False
    return ct_equal(token, cookie_value)
