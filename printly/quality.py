"""
Print quality validation for design placements.

Checks two things before a design goes to print:
- effective DPI of the placed design across the template's print area
- how much of the print area the scaled design covers

Coverage is an area ratio of the scaled design to the print area. It does
not account for the placement offset or rotation, so a design pushed
entirely off the print area still reads as covered.
"""

import math
from typing import Optional
from loguru import logger

from .models import Asset, Placement, QualityValidation
from .print_areas import PrintAreaCatalog, ProductClass, classify_template
from .storage import RecordStore


REFERENCE_PRINT_DPI = 300

DEFAULT_MIN_DPI = 150
FINE_ART_MIN_DPI = 300
DEFAULT_MIN_OVERLAP = 0.3
POSTER_MIN_OVERLAP = 0.9

_FINE_ART_CLASSES = (ProductClass.POSTER, ProductClass.CANVAS, ProductClass.STORYBOOK)

# (minimum DPI, level), checked top down
QUALITY_LEVELS = (
    (300, 'excellent'),
    (200, 'good'),
    (150, 'acceptable'),
    (0, 'poor'),
)


def quality_level(dpi: float) -> str:
    """Map an effective DPI onto the builder's quality levels"""
    for min_dpi, level in QUALITY_LEVELS:
        if dpi >= min_dpi:
            return level
    return 'poor'


def min_required_dpi(template_id: str) -> int:
    if classify_template(template_id) in _FINE_ART_CLASSES:
        return FINE_ART_MIN_DPI
    return DEFAULT_MIN_DPI


def min_required_overlap(template_id: str) -> float:
    if classify_template(template_id) is ProductClass.POSTER:
        return POSTER_MIN_OVERLAP
    return DEFAULT_MIN_OVERLAP


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class QualityValidator:
    """Validates a design placement against a product template's print area"""

    def __init__(self, catalog: PrintAreaCatalog, records: Optional[RecordStore] = None):
        self.catalog = catalog
        self.records = records

    def validate(self, asset: Optional[Asset], placement: Placement, template_id: str) -> QualityValidation:
        """
        Compute effective DPI and coverage for an asset placed on a template.

        A missing asset yields an invalid result rather than an error.
        """
        if asset is None:
            return QualityValidation(
                is_valid=False,
                effective_dpi=0,
                min_required_dpi=DEFAULT_MIN_DPI,
                overlap_percentage=0.0,
                min_required_overlap=DEFAULT_MIN_OVERLAP,
                issues=['Asset not found'],
                quality_level='poor',
            )

        print_area = self.catalog.lookup(template_id)
        issues = []

        scaled_width = asset.width * placement.scale
        scaled_height = asset.height * placement.scale
        print_width_inches = print_area.width / REFERENCE_PRINT_DPI
        effective_dpi = scaled_width / print_width_inches

        required_dpi = min_required_dpi(template_id)
        if effective_dpi < required_dpi:
            issues.append(
                f"Image resolution too low ({_round_half_up(effective_dpi)} DPI, "
                f"minimum {required_dpi} DPI required)"
            )

        overlap_percentage = min(
            (scaled_width / print_area.width) * (scaled_height / print_area.height),
            1.0
        )

        required_overlap = min_required_overlap(template_id)
        if overlap_percentage < required_overlap:
            issues.append('Design should cover more of the print area')

        result = QualityValidation(
            is_valid=not issues,
            effective_dpi=_round_half_up(effective_dpi),
            min_required_dpi=required_dpi,
            overlap_percentage=overlap_percentage,
            min_required_overlap=required_overlap,
            issues=issues,
            quality_level=quality_level(effective_dpi),
        )

        logger.debug(f"Quality check {asset.id} on {template_id}: "
                     f"{result.effective_dpi} DPI, {overlap_percentage:.2f} coverage, valid={result.is_valid}")
        return result

    def validate_asset_id(self, asset_id: str, placement: Placement, template_id: str) -> QualityValidation:
        """Resolve the asset through the record store, then validate"""
        asset = self.records.get_asset(asset_id) if self.records else None
        if asset is None:
            logger.info(f"Quality check requested for unknown asset {asset_id}")
        return self.validate(asset, placement, template_id)
