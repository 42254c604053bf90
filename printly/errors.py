"""
Error handling for the Printly mockup service.

Provides specific exception types for the failure modes of the mockup,
quality and watermark pipelines, with enough context for the HTTP
boundary to build a useful JSON error response.
"""

from typing import Dict, List, Any


class PrintlyError(Exception):
    """Base exception for all Printly errors."""

    status_code = 500

    def __init__(self, message: str, details: Dict[str, Any] = None, suggestions: List[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestions = suggestions or []

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'details': self.details,
            'suggestions': self.suggestions
        }


class ConfigurationError(PrintlyError):
    """Raised when configuration is invalid or missing."""
    pass


class NotFoundError(PrintlyError):
    """Raised when a referenced product, variant or asset does not exist."""

    status_code = 404


class InvalidInputError(PrintlyError):
    """Raised when caller-supplied data is malformed."""

    status_code = 400


class ProductNotFoundError(NotFoundError):
    """Raised when no product exists for a template id."""

    def __init__(self, template_id: str):
        super().__init__(
            f"Product not found: {template_id}",
            details={'template_id': template_id},
            suggestions=[
                "Check the product template id",
                "Reload the product catalogue and try again"
            ]
        )


class VariantNotFoundError(NotFoundError):
    """Raised when a product variant cannot be resolved."""

    def __init__(self, variant_id: str):
        super().__init__(
            f"Variant not found: {variant_id}",
            details={'variant_id': variant_id},
            suggestions=["Select a size or colour that is still available"]
        )


class AssetNotFoundError(NotFoundError):
    """Raised when an uploaded or generated asset cannot be resolved."""

    def __init__(self, asset_id: str):
        super().__init__(
            f"Asset not found: {asset_id}",
            details={'asset_id': asset_id},
            suggestions=[
                "Upload the image again",
                "Guest uploads expire after 24 hours"
            ]
        )


class InvalidImageError(InvalidInputError):
    """Raised when an image cannot be decoded or has no usable dimensions."""

    def __init__(self, reason: str, width: int = None, height: int = None):
        super().__init__(
            f"Invalid image: {reason}",
            details={
                'width': width,
                'height': height
            },
            suggestions=[
                "Use a PNG, JPEG or WebP image",
                "Ensure the file is not corrupted or empty"
            ]
        )


class ImageTooLargeError(InvalidInputError):
    """Raised when an uploaded image exceeds the configured size limit."""

    def __init__(self, size_mb: float, limit_mb: float):
        super().__init__(
            f"Image too large ({size_mb:.1f}MB exceeds {limit_mb:.1f}MB limit)",
            details={
                'size_mb': size_mb,
                'limit_mb': limit_mb
            },
            suggestions=[f"Reduce file size to under {limit_mb:.1f}MB"]
        )
