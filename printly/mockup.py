"""
Mockup composition for the Printly product builder.

This module handles:
- Resolving the product, variant and asset behind a mockup request
- Deriving a deterministic cache key from the request
- Building a preview reference the client (or a remote renderer) composites
- Memoising references through the mockup cache collaborator

Pixel compositing itself happens in the browser; the server only decides
what goes where.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode
from loguru import logger

from .cache import MockupCache, NullMockupCache
from .errors import AssetNotFoundError, ProductNotFoundError, VariantNotFoundError
from .models import MockupProvider, MockupRequest, MockupResult, Placement
from .storage import ObjectStoreUrlResolver, RecordStore


def _format_number(value: float) -> str:
    """Shortest text form of a number: 1 -> '1', 1.5 -> '1.5'"""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def placement_fingerprint(placement: Placement) -> str:
    return '-'.join(_format_number(v) for v in (
        placement.position.x,
        placement.position.y,
        placement.scale,
        placement.rotation,
    ))


def generate_cache_key(template_id: str, variant_id: str, asset_id: str, placement: Placement) -> str:
    """Deterministic cache key for a mockup request"""
    return f"mockup:{template_id}:{variant_id}:{asset_id}:{placement_fingerprint(placement)}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MockupComposer:
    """Builds mockup references for design placements"""

    def __init__(self,
                 records: RecordStore,
                 cache: Optional[MockupCache] = None,
                 url_resolver: Optional[ObjectStoreUrlResolver] = None,
                 preview_endpoint: str = "/api/mockups/preview",
                 cache_ttl: Optional[float] = None,
                 clock: Callable[[], datetime] = _utcnow):
        self.records = records
        self.cache = cache if cache is not None else NullMockupCache()
        self.url_resolver = url_resolver if url_resolver is not None else ObjectStoreUrlResolver()
        self.preview_endpoint = preview_endpoint
        self.cache_ttl = cache_ttl
        self._clock = clock

    def compose(self, request: MockupRequest) -> MockupResult:
        """
        Produce a mockup reference for a placement request.

        Raises a NotFoundError subclass when the product, variant or asset
        is missing. Cache failures never fail the request.
        """
        product = self.records.get_product(request.template_id)
        if product is None:
            raise ProductNotFoundError(request.template_id)

        variant = self.records.get_variant(request.variant_id)
        if variant is None:
            raise VariantNotFoundError(request.variant_id)

        asset = self.records.get_asset(request.asset_id)
        if asset is None:
            raise AssetNotFoundError(request.asset_id)

        cache_key = generate_cache_key(product.template_id, variant.id, asset.id, request.placement)

        cached = self._read_cache(cache_key)
        if cached is not None:
            logger.debug(f"Mockup cache hit: {cache_key}")
            generated_at = cached.get('generated_at')
            if not isinstance(generated_at, datetime):
                # Entries written by other producers may lack a timestamp
                generated_at = self._clock()
            return MockupResult(
                mockup_url=cached['mockup_url'],
                cache_key=cache_key,
                provider=MockupProvider(cached['provider']),
                generated_at=generated_at,
            )

        asset_url = self.url_resolver.asset_url(asset)
        mockup_url = self.build_preview_url(product.template_id, asset_url, request.placement)

        result = MockupResult(
            mockup_url=mockup_url,
            cache_key=cache_key,
            provider=MockupProvider.CLIENT,
            generated_at=self._clock(),
        )
        self._write_cache(cache_key, result)

        logger.info(f"Generated mockup for {product.template_id} / {variant.id} / {asset.id}")
        return result

    def build_preview_url(self, template_id: str, asset_url: str, placement: Placement) -> str:
        """Preview endpoint reference understood by the client mockup renderer"""
        params = urlencode({
            'product': template_id,
            'asset': asset_url,
            'x': _format_number(placement.position.x),
            'y': _format_number(placement.position.y),
            'scale': _format_number(placement.scale),
            'rotation': _format_number(placement.rotation),
        })
        return f"{self.preview_endpoint}?{params}"

    def mockup_templates(self, template_id: str) -> List[str]:
        """Remote-provider mockup templates available for a product"""
        return [f"{template_id}-front", f"{template_id}-angle"]

    def _read_cache(self, cache_key: str) -> Optional[Dict[str, Any]]:
        try:
            return self.cache.get(cache_key)
        except Exception as e:
            logger.warning(f"Mockup cache read failed for {cache_key}: {e}")
            return None

    def _write_cache(self, cache_key: str, result: MockupResult) -> None:
        entry = {
            'mockup_url': result.mockup_url,
            'provider': result.provider.value,
            'generated_at': result.generated_at,
        }
        try:
            self.cache.set(cache_key, entry, self.cache_ttl)
        except Exception as e:
            logger.warning(f"Mockup cache write failed for {cache_key}: {e}")
