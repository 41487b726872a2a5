import pytest
import io
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from PIL import Image

from image_service.config import Settings
from image_service.database import init_db
from image_service.main import create_app
from image_service.storage import ObjectStore

# Test fixtures and utilities

TEST_BUCKET = "test-bucket"


@pytest.fixture
def settings():
    """Settings backed by an in-memory database."""
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        s3_bucket_name=TEST_BUCKET,
        aws_region="us-east-1",
        aws_access_key_id="test-access-key",
        aws_secret_access_key="test-secret-key",
        log_level="DEBUG"
    )


@pytest.fixture
def mock_minio():
    """Mock S3 client; every call succeeds unless a test says otherwise."""
    client = MagicMock()
    client.bucket_exists.return_value = True
    return client


@pytest.fixture
def object_store(settings, mock_minio):
    return ObjectStore(settings, client=mock_minio)


@pytest.fixture
def app(settings, object_store):
    return create_app(settings, object_store=object_store)


@pytest.fixture
def client(app):
    """Test client with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(app):
    """Create a database session for testing."""
    init_db(app.state.engine)
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def make_image_bytes(image_format="JPEG", size=(100, 100), color="red"):
    img = Image.new("RGB", size, color=color)
    img_bytes = io.BytesIO()
    img.save(img_bytes, format=image_format)
    return img_bytes.getvalue()


@pytest.fixture
def test_image_file():
    """Create a test image file."""
    return {
        "filename": "My Photo!!.JPG",
        "content": make_image_bytes("JPEG"),
        "content_type": "image/jpeg"
    }


@pytest.fixture
def test_png_file():
    return {
        "filename": "  multi   space.png",
        "content": make_image_bytes("PNG", color="blue"),
        "content_type": "image/png"
    }


@pytest.fixture
def invalid_image_file():
    """Create an invalid image file."""
    return {
        "filename": "invalid.txt",
        "content": b"This is not an image",
        "content_type": "text/plain"
    }


@pytest.fixture
def oversized_image_file():
    """An 11MB payload declared as JPEG."""
    return {
        "filename": "huge.jpg",
        "content": b"\xff" * (11 * 1024 * 1024),
        "content_type": "image/jpeg"
    }


# Test markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
