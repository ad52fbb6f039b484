"""Shared fixtures for imgtourl tests."""

import logging

import pytest

from imgtourl.config import ENV_VARS


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Clear uploader env vars and point the config dir at a temp location."""
    for names in ENV_VARS.values():
        for name in names:
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by the CLI so tests don't leak them."""
    yield
    logger = logging.getLogger("imgtourl")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def r2_env(monkeypatch):
    """Set every required uploader environment variable."""
    monkeypatch.setenv("R2_ACCOUNT_ID", "acct123")
    monkeypatch.setenv("R2_ACCESS_KEY_ID", "test-access-key")
    monkeypatch.setenv("R2_SECRET_ACCESS_KEY", "test-secret-key")
    monkeypatch.setenv("R2_BUCKET_NAME", "test-bucket")
    monkeypatch.setenv("R2_PUBLIC_URL", "https://cdn.example.com/")


@pytest.fixture
def png_bytes():
    """A few bytes starting with the PNG signature."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 24
