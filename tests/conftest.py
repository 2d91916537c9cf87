import os
import tempfile

# Settings are read at import time, so the environment is prepared first.
_tmp_root = tempfile.mkdtemp(prefix="rentclub-tests-")
os.environ["DATABASE_PATH"] = ":memory:"
os.environ["RENTCLUB_LOG_DIR"] = os.path.join(_tmp_root, "logs")
os.environ["UPLOAD_DIR"] = os.path.join(_tmp_root, "uploads")
os.environ["ADMIN_USER_IDS"] = "admin-user"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["STRIPE_SECRET_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rentclub.core.config import settings
from rentclub.core.database import Base, get_db
from rentclub.main import app
from rentclub.services.payment_service import get_payment_gateway
from rentclub.services.stats_service import reset_stats_cache
from rentclub.services.storage_service import ImageStorage, get_image_storage
import rentclub.models  # noqa: F401

from tests.helpers import FakePaymentGateway


# ---------- TEST FIXTURES ----------

@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory SQLite per test; handlers commit, so nothing is shared between tests."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture(scope="function")
def gateway():
    return FakePaymentGateway()


@pytest.fixture(scope="function")
def storage(tmp_path):
    return ImageStorage(str(tmp_path / "uploads"), settings.MAX_UPLOAD_SIZE)


@pytest.fixture(scope="function")
def client(db_session, gateway, storage):
    """Override get_db and the external collaborators for FastAPI TestClient."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_image_storage] = lambda: storage
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clear_stats_cache():
    reset_stats_cache()
    yield
    reset_stats_cache()
