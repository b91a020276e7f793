"""Fixtures for endpoint tests.

Each test app mounts a single router with the current user and database
session overridden, so services are patched and no database is needed.
"""

from typing import Callable
from unittest.mock import Mock

import pytest
from fastapi import APIRouter, FastAPI
from fastapi.testclient import TestClient

from core.database import get_db
from core.dependencies import get_current_user


@pytest.fixture
def current_user() -> Mock:
    user = Mock()
    user.id = 1
    user.email = "cook@example.com"
    return user


@pytest.fixture
def fake_db() -> Mock:
    return Mock()


@pytest.fixture
def make_client(current_user, fake_db) -> Callable[[APIRouter, str], TestClient]:
    def _make_client(router: APIRouter, prefix: str) -> TestClient:
        test_app = FastAPI()
        test_app.dependency_overrides[get_current_user] = lambda: current_user
        test_app.dependency_overrides[get_db] = lambda: fake_db
        test_app.include_router(router, prefix=prefix)
        return TestClient(test_app)

    return _make_client
