"""
Wiring of the mockup pipeline components and their collaborators.

Collaborators are constructed once per application and handed to each
component explicitly.
"""

from dataclasses import dataclass
from typing import Optional
from loguru import logger

from .cache import MockupCache, create_mockup_cache
from .config import AppConfig
from .mockup import MockupComposer
from .print_areas import PrintAreaCatalog
from .quality import QualityValidator
from .storage import InMemoryRecordStore, ObjectStoreUrlResolver, RecordStore
from .watermark import WatermarkStamper


@dataclass
class PrintlyServices:
    config: AppConfig
    catalog: PrintAreaCatalog
    records: RecordStore
    cache: MockupCache
    url_resolver: ObjectStoreUrlResolver
    validator: QualityValidator
    composer: MockupComposer
    stamper: WatermarkStamper


def build_services(config: AppConfig,
                   records: Optional[RecordStore] = None,
                   cache: Optional[MockupCache] = None,
                   catalog: Optional[PrintAreaCatalog] = None) -> PrintlyServices:
    """Construct every component from configuration, accepting injected collaborators"""
    if catalog is None:
        catalog = PrintAreaCatalog.from_config(config.PRINT_AREAS_FILE)

    if records is None:
        if config.RECORDS_FILE:
            records = InMemoryRecordStore.from_yaml(config.RECORDS_FILE)
        else:
            logger.warning("No record store configured, using an empty in-memory store")
            records = InMemoryRecordStore()

    if cache is None:
        cache = create_mockup_cache(config)

    url_resolver = ObjectStoreUrlResolver(
        public_url=config.STORAGE_PUBLIC_URL,
        bucket_name=config.STORAGE_BUCKET_NAME,
        account_id=config.STORAGE_ACCOUNT_ID,
        app_url=config.APP_URL,
    )

    return PrintlyServices(
        config=config,
        catalog=catalog,
        records=records,
        cache=cache,
        url_resolver=url_resolver,
        validator=QualityValidator(catalog, records),
        composer=MockupComposer(
            records,
            cache=cache,
            url_resolver=url_resolver,
            preview_endpoint=config.MOCKUP_PREVIEW_ENDPOINT,
            cache_ttl=config.MOCKUP_CACHE_TTL_SECONDS,
        ),
        stamper=WatermarkStamper(
            text=config.WATERMARK_TEXT,
            opacity=config.WATERMARK_OPACITY,
            font_path=config.WATERMARK_FONT_PATH,
        ),
    )
