"""Shared fixtures for the emulator tests."""

import pytest
from fastapi.testclient import TestClient

from emulator.config import Settings
from emulator.main import create_app


@pytest.fixture
def settings():
    return Settings(debug=False)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
