# tests/test_security.py

import hashlib
import hmac

from classorder.config import settings
from classorder.utils.security import admin_token, is_admin_token_valid, verify_admin_password


def test_token_is_hmac_of_password_with_itself():
    expected = hmac.new(b"pw", b"pw", hashlib.sha256).hexdigest()

    assert admin_token("pw") == expected
    assert admin_token("pw") == admin_token("pw")


def test_empty_password_has_no_token():
    assert admin_token("") == ""


def test_token_validation(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "pw")
    token = admin_token("pw")

    assert is_admin_token_valid(token) is True
    assert is_admin_token_valid(token[:-1]) is False
    assert is_admin_token_valid(token[:-1] + ("0" if token[-1] != "0" else "1")) is False
    assert is_admin_token_valid(None) is False


def test_rotating_secret_invalidates_old_token(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "old")
    token = admin_token()
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "new")

    assert is_admin_token_valid(token) is False


def test_unset_secret_authorizes_nothing(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "")

    assert is_admin_token_valid("") is False
    assert verify_admin_password("") is False
