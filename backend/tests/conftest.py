"""
Pytest configuration and shared fixtures for Skintelect tests.

This module provides:
- Test database setup (SQLite in-memory)
- FastAPI TestClient configuration
- Reference table fixtures (built-in and a small hand-made table)
- Rate limiter reset between tests
"""

import pytest
import os
import sys
from typing import Generator

# =============================================================================
# ENABLE TEST MODE BEFORE ANY IMPORTS
# =============================================================================
os.environ["TESTING"] = "1"
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("REFERENCE_SOURCE", "builtin")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from database import Base
from ingredient_reference import (
    IngredientFunction,
    IngredientRecord,
    ReferenceTable,
    build_default_table,
)
from rate_limit import rate_limiters


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine using SQLite in-memory."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_db(test_engine) -> Generator[Session, None, None]:
    """Create a test database session with automatic rollback."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def override_get_db(test_db):
    """Override the get_db dependency to use test database."""
    def _override_get_db():
        try:
            yield test_db
        finally:
            pass
    return _override_get_db


# =============================================================================
# REFERENCE TABLE FIXTURES
# =============================================================================

@pytest.fixture(scope="session")
def reference_table() -> ReferenceTable:
    """The built-in reference table."""
    return build_default_table()


@pytest.fixture(scope="function")
def small_records():
    """A hand-made set of records for tests that need exact control."""
    return [
        IngredientRecord(
            slug="water",
            name="Water",
            inci_name="Aqua",
            aliases=("Eau",),
            functions=(IngredientFunction.SOLVENT.value,),
        ),
        IngredientRecord(
            slug="coconut-oil",
            name="Coconut Oil",
            inci_name="Cocos Nucifera Oil",
            functions=(IngredientFunction.EMOLLIENT.value,),
            comedogenic_rating=4,
            is_fungal_acne_trigger=True,
        ),
        IngredientRecord(
            slug="fragrance",
            name="Fragrance",
            inci_name="Parfum",
            functions=(IngredientFunction.FRAGRANCE.value,),
            irritation_level=3,
            is_allergen=True,
        ),
    ]


@pytest.fixture(scope="function")
def small_table(small_records) -> ReferenceTable:
    return ReferenceTable(small_records)


# =============================================================================
# RATE LIMIT FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def reset_rate_limiters():
    """Every test starts with empty rate limit windows."""
    for limiter in rate_limiters.values():
        limiter.clear()
    yield
    for limiter in rate_limiters.values():
        limiter.clear()


# =============================================================================
# APPLICATION FIXTURES
# =============================================================================

@pytest.fixture(scope="session")
def app_instance():
    """Create a FastAPI app instance ONCE per test session."""
    from main import app as fastapi_app
    return fastapi_app


@pytest.fixture(scope="function")
def app(app_instance, override_get_db, reference_table):
    """Configure the app with the test database and reference table."""
    from database import get_db
    from shared import get_reference_table

    app_instance.dependency_overrides[get_db] = override_get_db
    app_instance.dependency_overrides[get_reference_table] = lambda: reference_table
    yield app_instance
    app_instance.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a TestClient for making requests to the app."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def rate_limit_disabled(monkeypatch):
    """Turn rate limiting off for tests that send many requests."""
    import config
    monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", False)
