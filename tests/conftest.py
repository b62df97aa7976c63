"""Shared fixtures for streamknobs tests."""

import os

import pytest

from streamknobs import StreamSettings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep STREAMKNOBS_ overrides from the outer environment out of tests."""
    for key in list(os.environ):
        if key.startswith(StreamSettings.ENV_PREFIX):
            monkeypatch.delenv(key)


@pytest.fixture
def settings():
    return StreamSettings()


@pytest.fixture
def write_text(tmp_path):
    """Factory writing raw text to a file under tmp_path."""

    def _write(name: str, text: str):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8", newline="")
        return path

    return _write
