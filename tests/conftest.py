"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import sys
import os

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Test configuration must be in place before config is imported
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")
os.environ.setdefault("DB_NAME", "test_minipreorder.db")
os.environ.setdefault("LANGUAGE", "vi")
os.environ.setdefault("COMBO_SEARCH_MAX_TUPLES", "20000")
os.environ.setdefault("COMBO_ALLOCATION_ORDER", "INPUT")
os.environ.setdefault("CORS_ALLOWED_ORIGINS", "")


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine (in-memory SQLite)."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool
    )

    # Import and create all tables
    from db import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine):
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# Catalog Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def seeded_catalog(test_session):
    """
    Seed a small storefront catalog:

    Products:
        banh-mi   Đồ ăn     25.000 ₫
        xoi       Đồ ăn     30.000 ₫
        tra-sua   Đồ uống   20.000 ₫
        che       Tráng miệng 15.000 ₫ (unavailable)

    Combos:
        Combo no bụng   2 × Đồ ăn + 1 × Đồ uống   60.000 ₫  priority 10
        Combo cũ        1 × Đồ ăn                 10.000 ₫  inactive
    """
    from models.combo import CategoryRequirementDTO, ComboDTO
    from models.product import ProductDTO
    from repositories.combo import ComboRepository
    from repositories.product import ProductRepository

    products = [
        ProductDTO(id="banh-mi", name="Bánh mì", category="Đồ ăn", price=25000),
        ProductDTO(id="xoi", name="Xôi", category="Đồ ăn", price=30000),
        ProductDTO(id="tra-sua", name="Trà sữa", category="Đồ uống", price=20000),
        ProductDTO(id="che", name="Chè", category="Tráng miệng", price=15000, available=False),
    ]
    for product in products:
        await ProductRepository.add(product, test_session)

    meal = await ComboRepository.add(ComboDTO(
        id="combo-no-bung",
        name="Combo no bụng",
        price=60000,
        priority=10,
        category_requirements=[
            CategoryRequirementDTO(category="Đồ ăn", quantity=2),
            CategoryRequirementDTO(category="Đồ uống", quantity=1),
        ],
    ), test_session)
    retired = await ComboRepository.add(ComboDTO(
        id="combo-cu",
        name="Combo cũ",
        price=10000,
        is_active=False,
        category_requirements=[CategoryRequirementDTO(category="Đồ ăn", quantity=1)],
    ), test_session)

    return {"products": products, "combos": [meal, retired]}


# ============================================================================
# HTTP Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def api_client(test_session):
    """HTTP client bound to the FastAPI app, sharing the test session."""
    from server import app
    from web.api_router import db_session

    async def override_db_session():
        yield test_session

    app.dependency_overrides[db_session] = override_db_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
