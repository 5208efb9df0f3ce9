"""
Test configuration and shared fixtures for the grid engine test suite.
Provides database setup, cache isolation, services and sample entities.
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from typing import List

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from gridengine.app import create_app
from gridengine.cache.store import MemoryCache, get_cache
from gridengine.cache.view_cache import ViewCacheService
from gridengine.catalog.service import FieldCatalogService
from gridengine.core.config import Settings, get_settings
from gridengine.core.database import create_all_tables, drop_all_tables, get_db, seed_field_catalog
from gridengine.entities.models import Acquisition, Buyer, Operator
from gridengine.entities.service import EntityService
from gridengine.filters.service import SavedFilterService
from gridengine.query.composer import GridQueryService
from gridengine.views.service import ViewConfigurationService


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ===== DATABASE SETUP =====

@pytest.fixture(scope="session")
def engine():
    """Create in-memory SQLite engine"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all_tables(bind=engine)
    return engine


@pytest.fixture(scope="function")
def db_session(engine):
    """Database session with the field catalog seeded"""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    seed_field_catalog(session)
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        # Clean up all data after each test
        drop_all_tables(bind=engine)
        create_all_tables(bind=engine)


# ===== CACHE AND SERVICES =====

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """Fresh cache per test so no state leaks between tests"""
    return MemoryCache(clock=clock)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def view_cache(db_session, cache, settings):
    return ViewCacheService(db_session, cache=cache, settings=settings)


@pytest.fixture
def catalog(view_cache):
    return FieldCatalogService(view_cache)


@pytest.fixture
def saved_filter_service(db_session, catalog, cache, settings):
    return SavedFilterService(db_session, catalog, cache=cache, settings=settings)


@pytest.fixture
def view_service(db_session, catalog, view_cache):
    return ViewConfigurationService(db_session, catalog, view_cache)


@pytest.fixture
def grid_service(db_session, catalog, saved_filter_service, cache, settings):
    return GridQueryService(db_session, catalog, saved_filter_service, cache=cache, settings=settings)


@pytest.fixture
def entity_service(db_session, catalog, cache, settings):
    return EntityService(db_session, catalog, cache=cache, settings=settings)


@pytest.fixture
def client(db_session, cache, settings):
    """Create FastAPI test client with database and cache overrides"""
    app = create_app(initialize_database=False)

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_settings] = lambda: settings

    # Not used as a context manager: the lifespan would warm up against the real database
    yield TestClient(app)

    app.dependency_overrides.clear()


# ===== SAMPLE DATA FIXTURES =====

@pytest.fixture
def sample_buyers(db_session) -> List[Buyer]:
    """Buyers where four names contain "oil" and have a commission of at least 2.5"""
    buyers = [
        Buyer(buyer_name="Permian Oil Partners", default_commission=Decimal("3.0000"), city="Midland"),
        Buyer(buyer_name="Red River Royalties", default_commission=Decimal("2.0000"), city="Shreveport"),
        Buyer(buyer_name="Boiling Springs Oil Co", default_commission=Decimal("2.5000"), city="Tulsa"),
        Buyer(buyer_name="oil & gas holdings", default_commission=Decimal("5.0000"), city=None),
        Buyer(buyer_name="Anadarko Basin Oil Trust", default_commission=None, city="Oklahoma City"),
        Buyer(buyer_name="Spoilers Inc", default_commission=Decimal("2.5000"), city="Austin"),
        Buyer(buyer_name="Gulf Coast Oil", default_commission=Decimal("1.0000"), city="Houston"),
    ]
    db_session.add_all(buyers)
    db_session.commit()
    return buyers


@pytest.fixture
def sample_operators(db_session) -> List[Operator]:
    operators = [
        Operator(operator_id=index, operator_name=name, city=city)
        for index, (name, city) in enumerate(
            [
                ("Pioneer Natural Resources", "Irving"),
                ("Devon Energy", "Oklahoma City"),
                ("Continental Resources", "Oklahoma City"),
                ("EOG Resources", "Houston"),
                ("Diamondback Energy", "Midland"),
                ("Coterra Energy", "Houston"),
                ("Ovintiv", "Denver"),
            ],
            start=1,
        )
    ]
    db_session.add_all(operators)
    db_session.commit()
    return operators


@pytest.fixture
def sample_acquisitions(db_session) -> List[Acquisition]:
    acquisitions = [
        Acquisition(
            acquisition_number="ACQ-1",
            buyer="Permian Oil Partners",
            deal_status="Open",
            total_bonus=Decimal("150000.00"),
            effective_date=date(2024, 1, 15),
            closing_days=30,
            liens=False,
        ),
        Acquisition(
            acquisition_number="ACQ-2",
            buyer="Red River Royalties",
            deal_status="Closed",
            total_bonus=Decimal("50000.00"),
            effective_date=date(2024, 3, 1),
            closing_days=45,
            liens=True,
        ),
        Acquisition(
            acquisition_number="ACQ-3",
            buyer="Permian Oil Partners",
            deal_status="Open",
            total_bonus=Decimal("250000.00"),
            effective_date=None,
            closing_days=None,
            liens=None,
        ),
        Acquisition(
            acquisition_number="ACQ-4",
            buyer=None,
            deal_status="Pending",
            total_bonus=Decimal("100000.00"),
            effective_date=date(2024, 6, 30),
            closing_days=30,
            liens=False,
        ),
    ]
    db_session.add_all(acquisitions)
    db_session.commit()
    return acquisitions


# ===== UTILITY FIXTURES =====

@pytest.fixture
def api_headers():
    """Standard API headers for testing"""
    return {
        "Content-Type": "application/json",
        "Accept": "application/json"
    }


@pytest.fixture
def fixed_today() -> date:
    return date(2024, 7, 1)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 7, 1, 9, 30)
