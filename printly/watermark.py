"""
Watermarking for preview-only raster exports (e.g. storybook pages).

Lays a tiled, diagonal, semi-transparent label across the whole image.
Each line is drawn twice, a dark shadow and a light copy offset up and
left, so the mark stays readable on light and dark artwork alike.
"""

import io
import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError
from loguru import logger

from .errors import InvalidImageError


WATERMARK_TEXT = 'PREVIEW - AIPrintly'
WATERMARK_OPACITY = 0.3
WATERMARK_ANGLE = -45

SHADOW_FILL = (0, 0, 0, 0.4)
MAIN_FILL = (255, 255, 255, 0.9)
MAIN_OFFSET = (-2, -2)

MIN_FONT_SIZE = 30
MAX_FONT_SIZE = 80

_BOLD_FONT_CANDIDATES = ("arialbd.ttf", "Arial Bold.ttf", "DejaVuSans-Bold.ttf")


def calculate_font_size(width: int, height: int) -> float:
    base_size = min(width, height) / 15
    return max(MIN_FONT_SIZE, min(base_size, MAX_FONT_SIZE))


def calculate_spacing(width: int, height: int) -> float:
    """Distance between diagonal watermark lines"""
    return math.sqrt(width ** 2 + height ** 2) / 4


def _load_font(size: int, font_path: Optional[str] = None) -> ImageFont.ImageFont:
    candidates = ((font_path,) if font_path else ()) + _BOLD_FONT_CANDIDATES
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue

    logger.debug(f"No bold TrueType font found, using Pillow default at {size}px")
    return ImageFont.load_default(size=size)


def _rgba(fill: Tuple[int, int, int, float], opacity: float) -> Tuple[int, int, int, int]:
    r, g, b, alpha = fill
    return r, g, b, int(round(255 * alpha * opacity))


class WatermarkStamper:
    """Stamps a diagonal preview watermark onto raster images"""

    def __init__(self, text: str = WATERMARK_TEXT, opacity: float = WATERMARK_OPACITY,
                 font_path: Optional[str] = None):
        self.text = text
        self.opacity = opacity
        self.font_path = font_path

    def create_overlay(self, width: int, height: int) -> Image.Image:
        """Transparent RGBA layer, same size as the image, holding the watermark"""
        font_size = int(round(calculate_font_size(width, height)))
        spacing = calculate_spacing(width, height)
        diagonal = math.sqrt(width ** 2 + height ** 2)
        repetitions = math.ceil(diagonal / spacing) + 2

        # Draw unrotated on a square canvas big enough that rotating about
        # the image centre never clips the lines that end up in view.
        side = int(math.ceil(diagonal)) + 2 * font_size
        pad_x = (side - width) / 2
        pad_y = (side - height) / 2

        font = _load_font(font_size, self.font_path)
        shadow = Image.new('RGBA', (side, side), (0, 0, 0, 0))
        main = Image.new('RGBA', (side, side), (0, 0, 0, 0))
        shadow_draw = ImageDraw.Draw(shadow)
        main_draw = ImageDraw.Draw(main)

        left, top, right, bottom = shadow_draw.textbbox((0, 0), self.text, font=font)
        text_width = right - left

        shadow_fill = _rgba(SHADOW_FILL, self.opacity)
        main_fill = _rgba(MAIN_FILL, self.opacity)

        for i in range(-1, repetitions):
            # Text is centred on x and sits on the line y = i * spacing
            x = pad_x + width / 2 - text_width / 2 - left
            y = pad_y + i * spacing - bottom
            shadow_draw.text((x, y), self.text, font=font, fill=shadow_fill)
            main_draw.text((x + MAIN_OFFSET[0], y + MAIN_OFFSET[1]), self.text, font=font, fill=main_fill)

        layer = Image.alpha_composite(shadow, main)
        # PIL rotates counter-clockwise for positive angles
        layer = layer.rotate(-WATERMARK_ANGLE, resample=Image.Resampling.BICUBIC,
                             center=(pad_x + width / 2, pad_y + height / 2))

        crop_left = int(round(pad_x))
        crop_top = int(round(pad_y))
        return layer.crop((crop_left, crop_top, crop_left + width, crop_top + height))

    def stamp(self, image_bytes: bytes) -> bytes:
        """
        Watermark an encoded image.

        Args:
            image_bytes: PNG, JPEG, WebP or any format Pillow can decode

        Returns:
            PNG-encoded watermarked image

        Raises:
            InvalidImageError: the bytes are not a decodable image with dimensions
        """
        if not image_bytes:
            raise InvalidImageError("empty image data")

        try:
            source = Image.open(io.BytesIO(image_bytes))
            source.load()
        except (UnidentifiedImageError, OSError) as e:
            raise InvalidImageError(f"could not decode image ({e})")

        width, height = source.size
        if not width or not height:
            raise InvalidImageError("missing dimensions", width=width, height=height)

        overlay = self.create_overlay(width, height)
        watermarked = Image.alpha_composite(source.convert('RGBA'), overlay)

        output = io.BytesIO()
        watermarked.save(output, format='PNG')

        logger.info(f"Watermarked {source.format or 'unknown'} image {width}x{height}")
        return output.getvalue()


def is_watermarked(metadata: Any) -> bool:
    """True only when asset metadata carries isWatermarked=True"""
    if not isinstance(metadata, dict):
        return False
    return metadata.get('isWatermarked') is True


def create_watermarked_metadata(original_metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        **(original_metadata or {}),
        'isWatermarked': True,
        'watermarkedAt': datetime.now(timezone.utc).isoformat(),
    }


def remove_watermark_metadata(metadata: Any) -> Dict[str, Any]:
    if not isinstance(metadata, dict):
        return {}

    cleaned = dict(metadata)
    cleaned.pop('isWatermarked', None)
    cleaned.pop('watermarkedAt', None)
    return cleaned
