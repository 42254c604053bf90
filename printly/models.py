"""
Domain records for the mockup and print-quality pipeline.

Records owned by other systems (products, variants, assets) are read-only
here; computed records (quality validation, mockup result) serialize to the
camelCase JSON shape the storefront client expects.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class MockupProvider(str, Enum):
    """Who renders the final mockup pixels"""
    CLIENT = "client"
    PRINTFUL = "printful"
    BLURB = "blurb"


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True)
class Placement:
    """Where and how a design sits on the product canvas"""
    position: Position
    scale: float
    rotation: float = 0.0


@dataclass(frozen=True)
class Asset:
    """An uploaded or AI-generated image"""
    id: str
    width: int
    height: int
    storage_url: str = ""
    storage_key: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Product:
    """A print product, identified by its fulfilment template id"""
    template_id: str
    name: str = ""
    category: Optional[str] = None


@dataclass(frozen=True)
class Variant:
    id: str
    template_id: str
    name: str = ""


@dataclass(frozen=True)
class MockupRequest:
    template_id: str
    variant_id: str
    asset_id: str
    placement: Placement


@dataclass
class QualityValidation:
    """Outcome of a print-quality check; a failed check is not an error"""
    is_valid: bool
    effective_dpi: int
    min_required_dpi: int
    overlap_percentage: float
    min_required_overlap: float
    issues: List[str] = field(default_factory=list)
    quality_level: str = "poor"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'isValid': self.is_valid,
            'effectiveDpi': self.effective_dpi,
            'minRequiredDpi': self.min_required_dpi,
            'overlapPercentage': self.overlap_percentage,
            'minRequiredOverlap': self.min_required_overlap,
            'issues': list(self.issues),
            'qualityLevel': self.quality_level,
        }


@dataclass
class MockupResult:
    mockup_url: str
    cache_key: str
    provider: MockupProvider
    generated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mockupUrl': self.mockup_url,
            'cacheKey': self.cache_key,
            'provider': self.provider.value,
            'generatedAt': self.generated_at.isoformat(),
        }
