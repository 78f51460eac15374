import pytest

from rentdesk.config import build_settings


BASE = {
    "JWT_SECRET": "s3cret",
    "BCRYPT_ROUNDS": 4,
    "UPLOAD_FOLDER": "uploads",
    "ALLOWED_DOCUMENT_EXTENSIONS": [".PDF", "txt"],
}


def test_settings_are_immutable():
    settings = build_settings(BASE)
    with pytest.raises(AttributeError):
        settings.jwt_secret = "changed"


def test_extensions_normalized():
    assert build_settings(BASE).allowed_extensions == frozenset({"pdf", "txt"})


def test_role_permissions_declared():
    settings = build_settings(BASE)
    assert settings.permissions_for("admin") == ["create:any", "read:any", "update:any", "delete:any"]
    assert settings.permissions_for("user") == ["read:own", "update:own"]
    assert settings.permissions_for("ghost") == []


def test_missing_secret_in_production_is_fatal():
    with pytest.raises(RuntimeError):
        build_settings({**BASE, "JWT_SECRET": None, "APP_ENV": "production"})


def test_missing_secret_in_development_warns():
    with pytest.warns(RuntimeWarning):
        settings = build_settings({**BASE, "JWT_SECRET": None})
    assert settings.jwt_secret


def test_bcrypt_rounds_bounds():
    with pytest.raises(RuntimeError):
        build_settings({**BASE, "BCRYPT_ROUNDS": 3})
