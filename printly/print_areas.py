"""
Print area catalogue for product templates.

Each product template has a fixed region, in pixels at 300 DPI, that a
design must fall within to print cleanly. The region is positioned inside
the product's backing image so mockups can place the design correctly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional
from loguru import logger

from .config import PrintAreaEntry, load_print_area_config


class ProductClass(str, Enum):
    """Print quality class of a product template"""
    STANDARD = "standard"
    POSTER = "poster"
    CANVAS = "canvas"
    STORYBOOK = "storybook"


def classify_template(template_id: str) -> ProductClass:
    """
    Classify a template by the product class named in its id.

    Matching is a case-sensitive substring test, and "poster" takes
    precedence over every other class.
    """
    if 'poster' in template_id:
        return ProductClass.POSTER
    if 'canvas' in template_id:
        return ProductClass.CANVAS
    if 'storybook' in template_id:
        return ProductClass.STORYBOOK
    return ProductClass.STANDARD


@dataclass(frozen=True)
class PrintAreaSpec:
    width: int
    height: int
    offset_x: int
    offset_y: int
    product_image_width: int
    product_image_height: int
    product_class: ProductClass = ProductClass.STANDARD

    def check_bounds(self) -> bool:
        """True when the print area fits inside the backing image"""
        return (self.offset_x + self.width <= self.product_image_width
                and self.offset_y + self.height <= self.product_image_height)

    def to_dict(self) -> Dict[str, object]:
        return {
            'width': self.width,
            'height': self.height,
            'offsetX': self.offset_x,
            'offsetY': self.offset_y,
            'productImageWidth': self.product_image_width,
            'productImageHeight': self.product_image_height,
            'productClass': self.product_class.value,
        }


_MUG_AREA = PrintAreaSpec(900, 380, 50, 60, 1000, 500)

PRINT_AREAS: Dict[str, PrintAreaSpec] = {
    # Mugs - wrap around
    'printful-mug-001': _MUG_AREA,
    'printful-mug-002': _MUG_AREA,
    'printful-mug-003': _MUG_AREA,
    # Apparel - chest print
    'printful-tshirt-001': PrintAreaSpec(1200, 1400, 400, 150, 2000, 2400),
    'printful-hoodie-001': PrintAreaSpec(1200, 1200, 400, 250, 2000, 2400),
    # Wall art - full bleed
    'printful-poster-001': PrintAreaSpec(3508, 4961, 0, 0, 3508, 4961, ProductClass.POSTER),
    'printful-canvas-001': PrintAreaSpec(2400, 3200, 100, 100, 2600, 3400, ProductClass.CANVAS),
    'printful-framed-001': PrintAreaSpec(2400, 3200, 150, 150, 2700, 3500),
}

DEFAULT_PRINT_AREA = PrintAreaSpec(
    width=1200,
    height=1200,
    offset_x=0,
    offset_y=0,
    product_image_width=1200,
    product_image_height=1200,
)


def _spec_from_entry(entry: PrintAreaEntry) -> PrintAreaSpec:
    if entry.product_class:
        product_class = ProductClass(entry.product_class)
    else:
        product_class = classify_template(entry.template_id)

    return PrintAreaSpec(
        width=entry.width,
        height=entry.height,
        offset_x=entry.offset_x,
        offset_y=entry.offset_y,
        product_image_width=entry.product_image_width,
        product_image_height=entry.product_image_height,
        product_class=product_class,
    )


class PrintAreaCatalog:
    """Static lookup of print area geometry by template id"""

    def __init__(self, areas: Optional[Dict[str, PrintAreaSpec]] = None,
                 default: PrintAreaSpec = DEFAULT_PRINT_AREA):
        self._areas = dict(PRINT_AREAS if areas is None else areas)
        self.default = default

        for template_id, spec in self._areas.items():
            if not spec.check_bounds():
                logger.warning(f"Print area for {template_id} extends beyond its product image")

    @classmethod
    def from_config(cls, file_path: Optional[str]) -> "PrintAreaCatalog":
        """Built-in areas extended (or overridden) by a print_areas.yaml file"""
        areas = dict(PRINT_AREAS)
        for template_id, entry in load_print_area_config(file_path).items():
            areas[template_id] = _spec_from_entry(entry)
        return cls(areas)

    def lookup(self, template_id: str) -> PrintAreaSpec:
        """Print area for a template; unknown templates get the default area"""
        return self._areas.get(template_id, self.default)

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._areas

    def template_ids(self) -> List[str]:
        return sorted(self._areas)
