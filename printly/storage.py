"""
Collaborators owned by the surrounding storefront.

Product, variant and asset records live in the storefront database and
image bytes live in object storage. The mockup pipeline only reads them,
through the small interfaces defined here.
"""

from typing import Dict, Iterable, Optional
from loguru import logger

from .config import load_yaml_config
from .models import Asset, Product, Variant


class RecordStore:
    """Read-only lookup of storefront records; every getter returns None on a miss"""

    def get_product(self, template_id: str) -> Optional[Product]:
        raise NotImplementedError

    def get_variant(self, variant_id: str) -> Optional[Variant]:
        raise NotImplementedError

    def get_asset(self, asset_id: str) -> Optional[Asset]:
        raise NotImplementedError


class InMemoryRecordStore(RecordStore):
    """Record store backed by dictionaries, for development and tests"""

    def __init__(self,
                 products: Iterable[Product] = (),
                 variants: Iterable[Variant] = (),
                 assets: Iterable[Asset] = ()):
        self.products: Dict[str, Product] = {p.template_id: p for p in products}
        self.variants: Dict[str, Variant] = {v.id: v for v in variants}
        self.assets: Dict[str, Asset] = {a.id: a for a in assets}

    @classmethod
    def from_yaml(cls, file_path: str) -> "InMemoryRecordStore":
        """Seed records from a fixtures file with products/variants/assets lists"""
        data = load_yaml_config(file_path)
        store = cls(
            products=[Product(**item) for item in data.get('products', [])],
            variants=[Variant(**item) for item in data.get('variants', [])],
            assets=[Asset(**item) for item in data.get('assets', [])],
        )
        logger.info(f"Loaded {len(store.products)} products, {len(store.variants)} variants, "
                    f"{len(store.assets)} assets from {file_path}")
        return store

    def add_product(self, product: Product) -> None:
        self.products[product.template_id] = product

    def add_variant(self, variant: Variant) -> None:
        self.variants[variant.id] = variant

    def add_asset(self, asset: Asset) -> None:
        self.assets[asset.id] = asset

    def get_product(self, template_id: str) -> Optional[Product]:
        return self.products.get(template_id)

    def get_variant(self, variant_id: str) -> Optional[Variant]:
        return self.variants.get(variant_id)

    def get_asset(self, asset_id: str) -> Optional[Asset]:
        return self.assets.get(asset_id)


class ObjectStoreUrlResolver:
    """Turns object storage keys into fetchable URLs"""

    def __init__(self, public_url: Optional[str] = None, bucket_name: str = "aiprintly",
                 account_id: str = "local", app_url: str = "http://localhost:5173"):
        self.public_url = public_url.rstrip('/') if public_url else None
        self.bucket_name = bucket_name
        self.account_id = account_id
        self.app_url = app_url.rstrip('/')

    def resolve(self, key: str) -> str:
        """Public CDN URL for a storage key"""
        key = key.lstrip('/')
        if self.public_url:
            return f"{self.public_url}/{key}"
        return f"https://{self.bucket_name}.{self.account_id}.r2.dev/{key}"

    def proxy_url(self, asset_id: str) -> str:
        """URL of the authenticated asset proxy endpoint"""
        return f"{self.app_url}/api/assets/{asset_id}/image"

    def asset_url(self, asset: Asset) -> str:
        """Stored URL of an asset, falling back to its storage key"""
        if asset.storage_url:
            return asset.storage_url
        if asset.storage_key:
            return self.resolve(asset.storage_key)
        return self.proxy_url(asset.id)
