"""Shared test fixtures for the Mealwise backend tests.

Environment overrides are applied before any application module is imported,
so settings pick them up: trusted hosts accept the TestClient host and video
processing steps do not sleep.
"""

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ["ALLOWED_HOSTS"] = "localhost,127.0.0.1,testserver"
os.environ["VIDEO_STEP_TIME_SCALE"] = "0"
os.environ["SPOONACULAR_API_KEY"] = "demo-key"

from datetime import date  # noqa: E402
from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import models  # noqa: E402,F401
from core.database import Base  # noqa: E402
from models.users import User  # noqa: E402
from services.recipe_service import recipe_service  # noqa: E402


@pytest.fixture
async def db_engine():
    """In-memory SQLite engine with every table created"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with session_factory() as session:
        yield session
        await session.rollback()


async def make_user(db: AsyncSession, auth_provider_id: str, email: str, **fields) -> User:
    user = User(auth_provider_id=auth_provider_id, email=email, **fields)
    db.add(user)
    await db.flush()
    return user


@pytest.fixture
async def user(db_session) -> User:
    return await make_user(db_session, "user_test_1", "cook@example.com", first_name="Casey", last_name="Cook")


@pytest.fixture
async def other_user(db_session) -> User:
    return await make_user(db_session, "user_test_2", "other@example.com", first_name="Olive")


@pytest.fixture
def pasta_recipe_data() -> dict:
    return {
        "title": "Weeknight Pasta",
        "description": "Quick tomato pasta",
        "prep_time": 10,
        "cook_time": 20,
        "servings": 2,
        "tags": ["pasta", "quick"],
        "instructions": ["Boil pasta", "Simmer sauce", "Combine"],
        "ingredients": [
            {"name": "Pasta", "quantity": 200, "unit": "gram"},
            {"name": "Tomato", "quantity": 3, "unit": "piece", "notes": "ripe"},
            {"name": "Olive Oil", "quantity": 1, "unit": "tablespoon"},
        ],
    }


@pytest.fixture
async def pasta_recipe(db_session, user, pasta_recipe_data):
    return await recipe_service.create_recipe(user, pasta_recipe_data, db_session)


@pytest.fixture
def week() -> tuple:
    return date(2024, 3, 4), date(2024, 3, 10)
