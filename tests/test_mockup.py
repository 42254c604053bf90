"""
Unit tests for mockup composition.

Covers cache key derivation, preview URL building, not-found handling
and the cache collaborator contract.
"""

import pytest
from datetime import datetime, timezone
from urllib.parse import parse_qs, urlsplit

from printly.cache import InMemoryMockupCache, MockupCache, NullMockupCache
from printly.errors import (
    AssetNotFoundError, NotFoundError, ProductNotFoundError, VariantNotFoundError
)
from printly.mockup import MockupComposer, generate_cache_key, placement_fingerprint
from printly.models import MockupProvider, MockupRequest, Placement, Position
from printly.storage import ObjectStoreUrlResolver


def make_request(template_id='printful-mug-001', variant_id='var-mug-white',
                 asset_id='asset-hires', x=450, y=190, scale=1, rotation=0):
    return MockupRequest(
        template_id=template_id,
        variant_id=variant_id,
        asset_id=asset_id,
        placement=Placement(position=Position(x=x, y=y), scale=scale, rotation=rotation),
    )


class BrokenCache(MockupCache):
    """Cache whose backend is unreachable."""

    def __init__(self, fail_reads=True, fail_writes=True):
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.writes = 0

    def get(self, key):
        if self.fail_reads:
            raise ConnectionError("cache unavailable")
        return None

    def set(self, key, value, ttl=None):
        self.writes += 1
        if self.fail_writes:
            raise ConnectionError("cache unavailable")


@pytest.fixture
def composer(record_store, step_clock):
    return MockupComposer(record_store, cache=InMemoryMockupCache(), clock=step_clock)


class TestCacheKey:
    """Test deterministic cache keys."""

    def test_key_format(self):
        request = make_request()

        key = generate_cache_key('printful-mug-001', 'var-mug-white', 'asset-hires', request.placement)

        assert key == 'mockup:printful-mug-001:var-mug-white:asset-hires:450-190-1-0'

    @pytest.mark.parametrize('values, expected', [
        ((450, 190, 1, 0), '450-190-1-0'),
        ((450.0, 190.0, 1.0, 0.0), '450-190-1-0'),
        ((10.5, 0.25, 1.5, 90), '10.5-0.25-1.5-90'),
        ((0, 0, 0.1, 0.001), '0-0-0.1-0.001'),
    ])
    def test_placement_fingerprint(self, values, expected):
        x, y, scale, rotation = values
        placement = Placement(position=Position(x=x, y=y), scale=scale, rotation=rotation)

        assert placement_fingerprint(placement) == expected

    def test_identical_requests_share_key(self, composer):
        first = composer.compose(make_request())
        second = composer.compose(make_request())

        assert first.cache_key == second.cache_key

    @pytest.mark.parametrize('change', [
        {'template_id': 'printful-tshirt-001', 'variant_id': 'var-tshirt-black-m'},
        {'variant_id': 'var-poster-a3'},
        {'asset_id': 'asset-lowres'},
        {'x': 451},
        {'y': 189.5},
        {'scale': 1.01},
        {'rotation': 0.001},
    ])
    def test_any_field_change_changes_key(self, composer, change):
        baseline = composer.compose(make_request())
        changed = composer.compose(make_request(**change))

        assert changed.cache_key != baseline.cache_key


class TestCompose:
    """Test mockup reference generation."""

    def test_result_fields(self, composer, step_clock):
        result = composer.compose(make_request())

        assert result.provider is MockupProvider.CLIENT
        assert result.cache_key == 'mockup:printful-mug-001:var-mug-white:asset-hires:450-190-1-0'
        assert result.generated_at.year == 2026
        assert step_clock.calls == 1

    def test_preview_url_parameters(self, composer):
        result = composer.compose(make_request(x=12.5, y=-4, scale=0.75, rotation=45))

        parts = urlsplit(result.mockup_url)
        params = parse_qs(parts.query)

        assert parts.path == '/api/mockups/preview'
        assert params == {
            'product': ['printful-mug-001'],
            'asset': ['https://cdn.example.com/uploads/hires.png'],
            'x': ['12.5'],
            'y': ['-4'],
            'scale': ['0.75'],
            'rotation': ['45'],
        }

    def test_custom_preview_endpoint(self, record_store):
        composer = MockupComposer(record_store, preview_endpoint='https://render.example.com/preview')

        result = composer.compose(make_request())

        assert result.mockup_url.startswith('https://render.example.com/preview?product=printful-mug-001&')

    def test_storage_key_resolved_to_public_url(self, record_store):
        resolver = ObjectStoreUrlResolver(public_url='https://images.example.com/')
        composer = MockupComposer(record_store, url_resolver=resolver)

        result = composer.compose(make_request(asset_id='asset-keyed'))

        params = parse_qs(urlsplit(result.mockup_url).query)
        assert params['asset'] == ['https://images.example.com/generated/session-1/dragon.png']

    def test_to_dict(self, composer):
        data = composer.compose(make_request()).to_dict()

        assert set(data) == {'mockupUrl', 'cacheKey', 'provider', 'generatedAt'}
        assert data['provider'] == 'client'
        assert data['generatedAt'] == '2026-01-01T12:00:00+00:00'


class TestNotFound:
    """Test missing collaborator records."""

    def test_missing_product(self, composer):
        with pytest.raises(ProductNotFoundError) as exc_info:
            composer.compose(make_request(template_id='printful-hoodie-001'))

        assert exc_info.value.details['template_id'] == 'printful-hoodie-001'

    def test_missing_variant(self, composer):
        with pytest.raises(VariantNotFoundError):
            composer.compose(make_request(variant_id='var-gone'))

    def test_missing_asset(self, composer):
        with pytest.raises(AssetNotFoundError) as exc_info:
            composer.compose(make_request(asset_id='asset-expired'))

        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.status_code == 404
        assert 'not found' in str(exc_info.value)

    def test_missing_records_are_not_cached(self, record_store):
        cache = InMemoryMockupCache()
        composer = MockupComposer(record_store, cache=cache)

        with pytest.raises(NotFoundError):
            composer.compose(make_request(asset_id='asset-expired'))

        assert len(cache) == 0


class TestCaching:
    """Test the cache collaborator contract."""

    def test_cache_hit_preserves_original_generated_at(self, composer, step_clock):
        first = composer.compose(make_request())
        second = composer.compose(make_request())

        assert second.mockup_url == first.mockup_url
        assert second.provider is first.provider
        assert second.generated_at == first.generated_at
        assert step_clock.calls == 1

    def test_empty_cache_is_kept(self, record_store):
        cache = InMemoryMockupCache()
        resolver = ObjectStoreUrlResolver()

        composer = MockupComposer(record_store, cache=cache, url_resolver=resolver)

        assert composer.cache is cache
        assert composer.url_resolver is resolver

    def test_cache_hit_keeps_stored_provider(self, record_store):
        cache = InMemoryMockupCache()
        key = 'mockup:printful-mug-001:var-mug-white:asset-hires:450-190-1-0'
        stored_at = datetime(2025, 12, 30, 9, 15, tzinfo=timezone.utc)
        cache.set(key, {
            'mockup_url': 'https://printful.example.com/mockups/1.png',
            'provider': 'printful',
            'generated_at': stored_at,
        })
        composer = MockupComposer(record_store, cache=cache)

        result = composer.compose(make_request())

        assert result.provider is MockupProvider.PRINTFUL
        assert result.mockup_url == 'https://printful.example.com/mockups/1.png'
        assert result.generated_at == stored_at
        assert result.to_dict()['generatedAt'] == '2025-12-30T09:15:00+00:00'

    def test_cache_hit_without_timestamp_uses_clock(self, record_store, step_clock):
        cache = InMemoryMockupCache()
        key = 'mockup:printful-mug-001:var-mug-white:asset-hires:450-190-1-0'
        cache.set(key, {'mockup_url': '/m.png', 'provider': 'client'})
        composer = MockupComposer(record_store, cache=cache, clock=step_clock)

        result = composer.compose(make_request())

        assert result.to_dict()['generatedAt'] == '2026-01-01T12:00:00+00:00'
        assert len(cache) == 1

    def test_null_cache_recomputes(self, record_store, step_clock):
        composer = MockupComposer(record_store, cache=NullMockupCache(), clock=step_clock)

        first = composer.compose(make_request())
        second = composer.compose(make_request())

        assert first.mockup_url == second.mockup_url
        assert second.generated_at > first.generated_at

    def test_write_uses_configured_ttl(self, record_store, fake_monotonic):
        cache = InMemoryMockupCache(clock=fake_monotonic)
        composer = MockupComposer(record_store, cache=cache, cache_ttl=30)

        result = composer.compose(make_request())
        assert cache.get(result.cache_key) is not None

        fake_monotonic.advance(30)
        assert cache.get(result.cache_key) is None

    def test_cache_write_failure_does_not_fail_request(self, record_store):
        cache = BrokenCache(fail_reads=False, fail_writes=True)
        composer = MockupComposer(record_store, cache=cache)

        result = composer.compose(make_request())

        assert result.mockup_url.startswith('/api/mockups/preview?')
        assert cache.writes == 1

    def test_cache_read_failure_treated_as_miss(self, record_store):
        composer = MockupComposer(record_store, cache=BrokenCache())

        result = composer.compose(make_request())

        assert result.provider is MockupProvider.CLIENT


class TestMockupTemplates:

    def test_templates_for_product(self, composer):
        assert composer.mockup_templates('printful-mug-001') == [
            'printful-mug-001-front',
            'printful-mug-001-angle',
        ]
