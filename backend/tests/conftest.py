"""
Pytest configuration and shared fixtures.

Fixtures defined here are available to all tests.
"""

import os
import sys
import tempfile
import pytest
from datetime import date
from pathlib import Path

# Add backend to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment before settings are cached
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="shelfscan-test-")
os.environ["FEATURE_AI_CATEGORIZATION"] = "false"
os.environ["OPENAI_API_KEY"] = ""


# =============================================================================
# App Fixtures
# =============================================================================


@pytest.fixture
def app():
    """FastAPI test application."""
    from shelfscan.main import app
    return app


@pytest.fixture
def client(app):
    """Sync test client for API tests."""
    from fastapi.testclient import TestClient
    return TestClient(app)


# =============================================================================
# Storage / Service Fixtures
# =============================================================================


@pytest.fixture
def memory_store():
    """Empty in-memory key-value store."""
    from shelfscan.services.storage import MemoryKeyValueStore
    return MemoryKeyValueStore()


@pytest.fixture
def failing_store():
    """Key-value store whose every call fails."""
    from shelfscan.services.storage import StorageError

    class FailingStore:
        async def get(self, key):
            raise StorageError("disk unavailable")

        async def set(self, key, value):
            raise StorageError("disk unavailable")

    return FailingStore()


@pytest.fixture
def learner(memory_store):
    """Offset learner over an in-memory store."""
    from shelfscan.services.expiry_offsets import ExpiryOffsetLearner
    return ExpiryOffsetLearner(memory_store, max_offset_days=120)


@pytest.fixture
def expiration_service(learner):
    """Expiration service over the in-memory learner."""
    from shelfscan.services.expiration import ExpirationService
    return ExpirationService(learner)


@pytest.fixture
def today():
    """Fixed reference date for date scoring and predictions."""
    return date(2025, 6, 1)


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def sample_receipt_text():
    """Sample OCR text from a UK supermarket receipt."""
    return """MORRISONS
Store 0123 Tel: 01482 000000
12/03/25 14:02
MILK 2PT
1 £1.20
2 BANANAS LOOSE £0.90
GREEK YOGURT £1.75
TOTAL £3.85
VISA £3.85
THANK YOU FOR SHOPPING
"""


@pytest.fixture
def sample_off_product():
    """Sample product record from Open Food Facts."""
    return {
        "code": "5000128104517",
        "product_name": "Semi Skimmed Milk",
        "brands": "Tesco, Tesco Finest",
        "categories_tags": ["en:dairies", "en:milks"],
        "ingredients_text": "Pasteurised semi skimmed milk",
        "conservation_conditions": "Keep refrigerated. Once opened consume within 3 days.",
        "image_url": "https://images.openfoodfacts.org/milk.jpg",
    }


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def temp_image(tmp_path):
    """Create a temporary test image."""
    from PIL import Image

    img = Image.new("RGB", (100, 100), color="white")
    img_path = tmp_path / "test_receipt.png"
    img.save(img_path)

    return img_path


@pytest.fixture
def image_bytes(temp_image):
    """Get image as bytes."""
    return temp_image.read_bytes()
