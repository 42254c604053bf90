"""
Pytest configuration and fixtures for Printly tests.

Provides shared records, collaborators, image factories and a
Flask test application wired with in-memory collaborators.
"""

import io
import pytest
from datetime import datetime, timedelta, timezone
from PIL import Image

from printly import create_app
from printly.cache import InMemoryMockupCache
from printly.models import Asset, Placement, Position, Product, Variant
from printly.print_areas import PrintAreaCatalog
from printly.storage import InMemoryRecordStore


@pytest.fixture
def catalog():
    """Catalogue with only the built-in print areas."""
    return PrintAreaCatalog()


@pytest.fixture
def sample_products():
    return [
        Product(template_id="printful-mug-001", name="Classic Mug 11oz", category="MUG"),
        Product(template_id="printful-tshirt-001", name="Unisex T-Shirt", category="APPAREL"),
        Product(template_id="printful-poster-001", name="A3 Poster", category="PRINT"),
    ]


@pytest.fixture
def sample_variants():
    return [
        Variant(id="var-mug-white", template_id="printful-mug-001", name="White / 11oz"),
        Variant(id="var-tshirt-black-m", template_id="printful-tshirt-001", name="Black / M"),
        Variant(id="var-poster-a3", template_id="printful-poster-001", name="A3"),
    ]


@pytest.fixture
def sample_assets():
    return [
        Asset(id="asset-hires", width=3000, height=3000,
              storage_url="https://cdn.example.com/uploads/hires.png"),
        Asset(id="asset-lowres", width=300, height=1500,
              storage_url="https://cdn.example.com/uploads/lowres.png"),
        Asset(id="asset-keyed", width=2048, height=2048,
              storage_key="generated/session-1/dragon.png"),
    ]


@pytest.fixture
def record_store(sample_products, sample_variants, sample_assets):
    return InMemoryRecordStore(
        products=sample_products,
        variants=sample_variants,
        assets=sample_assets,
    )


@pytest.fixture
def centred_placement():
    return Placement(position=Position(x=450, y=190), scale=1, rotation=0)


class StepClock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start=None):
        self.current = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.calls = 0

    def __call__(self):
        value = self.current
        self.current += timedelta(minutes=1)
        self.calls += 1
        return value


@pytest.fixture
def step_clock():
    return StepClock()


class FakeMonotonic:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def fake_monotonic():
    return FakeMonotonic()


def encode_image(size, color, mode='RGBA', fmt='PNG'):
    img = Image.new(mode, size, color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_factory():
    """Create encoded test images: image_factory((w, h), color, mode, fmt)."""
    return encode_image


@pytest.fixture
def white_png():
    return encode_image((800, 600), (255, 255, 255, 255))


@pytest.fixture
def app(record_store):
    """Create a Flask application with in-memory collaborators."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-key',
        'LOG_FILE': '',
        'RECORDS_FILE': None,
        'PRINT_AREAS_FILE': None,
        'MAX_UPLOAD_SIZE': 2 * 1024 * 1024,
    }, records=record_store, cache=InMemoryMockupCache(default_ttl=3600))

    yield app


@pytest.fixture
def client(app):
    """Create a test client for the Flask application."""
    return app.test_client()
