import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from secret_sharing.database import Base, build_engine, get_db
from secret_sharing.main import app
from secret_sharing.middleware.rate_limit import limiter
from secret_sharing.services.secret_sharing_service import SecretSharingService
from secret_sharing.services.secret_store import SecretStore
from tests.test_utils import ORG_ID, OTHER_ORG_ID, USER_ID, FakeAccessGate, FakeOrgDirectory


@pytest.fixture
def db_session():
    """Create a fresh in-memory database for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessionmaker over a file-backed SQLite database, for multi-threaded tests."""
    engine = build_engine(f"sqlite:///{tmp_path / 'race.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


@pytest.fixture
def access_gate():
    return FakeAccessGate({(ORG_ID, USER_ID), (OTHER_ORG_ID, "user-2")})


@pytest.fixture
def org_directory():
    return FakeOrgDirectory({ORG_ID: "Acme", OTHER_ORG_ID: "Globex"})


@pytest.fixture
def service(db_session, access_gate, org_directory):
    return SecretSharingService(
        store=SecretStore(db_session),
        access_gate=access_gate,
        org_directory=org_directory,
    )


@pytest.fixture
def client(db_session):
    """Create a test client with the test database and disabled rate limiting."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    # Disable rate limiting for tests
    limiter.enabled = False

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    limiter.enabled = True
