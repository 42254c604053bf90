"""
Flask routes for Printly
JSON API for mockup generation, quality validation and watermarking
"""

from typing import Literal, Optional
from flask import Blueprint, Response, current_app, jsonify, request
from loguru import logger
from pydantic import BaseModel, Field, ValidationError
from werkzeug.exceptions import HTTPException

from .errors import ImageTooLargeError, InvalidInputError, NotFoundError, PrintlyError
from .models import MockupRequest, Placement, Position


bp = Blueprint('api', __name__, url_prefix='/api')


class PositionBody(BaseModel):
    x: float
    y: float


class CustomisationBody(BaseModel):
    position: PositionBody
    scale: float = Field(gt=0, le=10)
    rotation: float = Field(ge=0, le=360)

    def to_placement(self) -> Placement:
        return Placement(
            position=Position(x=self.position.x, y=self.position.y),
            scale=self.scale,
            rotation=self.rotation,
        )


class MockupOptionsBody(BaseModel):
    highResolution: Optional[bool] = None
    view: Optional[Literal['front', 'back', 'side', 'all']] = None
    backgroundColor: Optional[str] = None
    validateQuality: Optional[bool] = None


class MockupRequestBody(BaseModel):
    templateId: str = Field(min_length=1)
    variantId: str = Field(min_length=1)
    assetId: str = Field(min_length=1)
    customisation: CustomisationBody
    options: Optional[MockupOptionsBody] = None


class QualityRequestBody(BaseModel):
    templateId: str = Field(min_length=1)
    assetId: str = Field(min_length=1)
    customisation: CustomisationBody


def get_services():
    return current_app.extensions['printly']


def error_response(error: PrintlyError, status: int):
    return jsonify({'error': error.message, **error.to_dict()}), status


def invalid_body_response(error: ValidationError):
    return jsonify({
        'error': 'Invalid request body',
        'details': error.errors(include_url=False, include_context=False),
    }), 400


@bp.route('/mockups', methods=['POST'])
def create_mockup():
    """Generate a mockup reference for a design placement"""
    try:
        body = MockupRequestBody.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        logger.warning(f"Invalid mockup request: {e.error_count()} errors")
        return invalid_body_response(e)

    services = get_services()
    placement = body.customisation.to_placement()

    try:
        if body.options and body.options.validateQuality:
            validation = services.validator.validate_asset_id(body.assetId, placement, body.templateId)
            if not validation.is_valid:
                logger.info(f"Quality gate rejected mockup for {body.assetId} on {body.templateId}")
                return jsonify({
                    'error': 'Quality validation failed',
                    'validation': validation.to_dict(),
                }), 400

        result = services.composer.compose(MockupRequest(
            template_id=body.templateId,
            variant_id=body.variantId,
            asset_id=body.assetId,
            placement=placement,
        ))

    except NotFoundError as e:
        logger.warning(f"Mockup resource missing: {e}")
        return error_response(e, 404)

    except PrintlyError as e:
        logger.error(f"Error generating mockup: {e}")
        return error_response(e, e.status_code)

    response = jsonify(result.to_dict())
    response.headers['Cache-Control'] = 'private, max-age=3600'
    return response


@bp.route('/mockups', methods=['GET'])
def mockups_method_not_allowed():
    return jsonify({'error': 'Method not allowed. Use POST to generate mockups.'}), 405


@bp.route('/mockups/validate', methods=['POST'])
def validate_mockup():
    """Print quality check for a design placement"""
    try:
        body = QualityRequestBody.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return invalid_body_response(e)

    validation = get_services().validator.validate_asset_id(
        body.assetId, body.customisation.to_placement(), body.templateId
    )
    return jsonify(validation.to_dict())


@bp.route('/mockups/templates/<template_id>', methods=['GET'])
def mockup_templates(template_id):
    """Print area geometry and remote mockup templates for a product template"""
    services = get_services()
    return jsonify({
        'templateId': template_id,
        'known': template_id in services.catalog,
        'printArea': services.catalog.lookup(template_id).to_dict(),
        'templates': services.composer.mockup_templates(template_id),
    })


@bp.route('/watermark', methods=['POST'])
def watermark():
    """Watermark a raw image body, responding with PNG bytes"""
    services = get_services()
    image_bytes = request.get_data(cache=False)

    try:
        limit = services.config.MAX_UPLOAD_SIZE
        if len(image_bytes) > limit:
            raise ImageTooLargeError(
                size_mb=len(image_bytes) / (1024 * 1024),
                limit_mb=limit / (1024 * 1024)
            )

        watermarked = services.stamper.stamp(image_bytes)

    except InvalidInputError as e:
        logger.warning(f"Watermark rejected: {e}")
        return error_response(e, 400)

    return Response(watermarked, mimetype='image/png')


@bp.errorhandler(Exception)
def handle_unexpected_error(e):
    if isinstance(e, HTTPException):
        return e
    logger.exception(f"Unexpected error on {request.path}: {e}")
    return jsonify({'error': 'Internal server error', 'message': str(e)}), 500
