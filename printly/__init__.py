"""
Printly - Flask Application Factory
Mockup placement, print quality validation and preview watermarking
for the AIPrintly storefront
"""

import os
from pathlib import Path
from flask import Flask
from loguru import logger
from dotenv import load_dotenv

from .config import load_config
from .services import build_services


def create_app(config_name=None, records=None, cache=None):
    """
    Flask application factory

    config_name is either an environment name or a dict of config
    overrides. records and cache replace the configured collaborators.
    """

    # Load environment variables
    load_dotenv()

    if isinstance(config_name, dict):
        environment = os.getenv('FLASK_ENV', 'development')
        overrides = config_name
    else:
        environment = config_name or os.getenv('FLASK_ENV', 'development')
        overrides = None

    app = Flask(__name__)

    # Load configuration
    config = load_config(environment, overrides)
    app.config.update(config.model_dump())

    # Configure logging
    setup_logging(app)

    # Build components with their collaborators
    app.extensions['printly'] = build_services(config, records=records, cache=cache)

    # Register blueprints
    from . import routes
    app.register_blueprint(routes.bp)

    logger.info(f"Printly initialized in {environment} mode")

    return app


def setup_logging(app):
    """Configure loguru logging"""
    log_level = app.config.get('LOG_LEVEL', 'INFO')
    log_file = app.config.get('LOG_FILE', 'logs/app.log')

    if not log_file:
        return

    # Ensure logs directory exists
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        rotation="1 day",
        retention="30 days",
        level=log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
    )
