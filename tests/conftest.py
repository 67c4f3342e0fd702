"""
Pytest configuration and fixtures for ListingHub API tests.
"""
import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings
from app.database import Base, get_db, get_session_factory
from app.dependencies import get_automation_client, get_storage_service
from app.limiter import limiter
from app.main import app
from app.models.enums import AssetSource, AssetType
from app.services import asset_service, post_service
from app.services.automation import AutomationClient
from app.services.storage import StorageService

# Disable rate limiting for tests
limiter.enabled = False

# Use in-memory SQLite for tests with shared connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

STORAGE_URL = "https://storage.test"
MANUAL_PUBLIC_PREFIX = f"{STORAGE_URL}/storage/v1/object/public/manual-uploads/"


@event.listens_for(engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Global session for sharing across requests
_test_session = None


def get_test_db():
    """Get the shared test database session."""
    global _test_session
    try:
        yield _test_session
    finally:
        pass


def get_test_session_factory():
    """Background tasks open their own sessions on the same in-memory database."""
    return TestingSessionLocal


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    global _test_session

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create a session
    _test_session = TestingSessionLocal()

    # Override the database dependencies
    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_session_factory] = get_test_session_factory

    yield _test_session

    # Cleanup
    app.dependency_overrides.clear()
    _test_session.close()
    _test_session = None

    # Drop all tables
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def automation(db):
    """Workflow client that accepts every trigger."""
    fake = MagicMock(spec=AutomationClient)
    fake.trigger.return_value = True
    app.dependency_overrides[get_automation_client] = lambda: fake
    return fake


@pytest.fixture(scope="function")
def supabase_client():
    """Stand-in for the supabase Client; public URLs mimic Supabase's layout."""
    client = MagicMock()
    bucket = client.storage.from_.return_value
    bucket.get_public_url.side_effect = lambda path: f"{MANUAL_PUBLIC_PREFIX}{path}"
    bucket.list.return_value = []
    return client


@pytest.fixture(scope="function")
def storage(db, supabase_client):
    """Real StorageService wired to the fake supabase client."""
    settings = Settings(supabase_url=STORAGE_URL, supabase_service_role_key="service-role-key")
    service = StorageService(settings, client=supabase_client)
    app.dependency_overrides[get_storage_service] = lambda: service
    return service


@pytest.fixture(scope="function")
def client(db, automation, storage):
    """Create a test client."""
    with TestClient(app) as c:
        yield c


# ============================================================
# DATA HELPERS
# ============================================================

def project_details(**overrides):
    details = {
        "name": "Sunset Residences",
        "price": 450000,
        "location": "District 2, Ho Chi Minh City",
        "features": ["pool", "gym"],
    }
    details.update(overrides)
    return details


@pytest.fixture
def make_post(db):
    """Insert a post directly through the repository."""
    def _make(title="Sunset Villa", status=None, **fields):
        data = {"title": title, "project_details": project_details()}
        data.update(fields)
        post = post_service.create_post(db, data)
        if status is not None:
            post = post_service.set_status(db, post, status)
        return post
    return _make


@pytest.fixture
def make_asset(db):
    def _make(post, url, type=AssetType.IMG, source=AssetSource.MANUAL, order=0):
        return asset_service.create_asset(
            db,
            post.id,
            {"url": url, "type": type, "source": source, "order": order},
        )
    return _make
