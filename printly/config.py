"""
Configuration management for the Printly mockup service
Loads settings from YAML files with environment variable overrides
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field, ValidationError
from loguru import logger


class AppConfig(BaseModel):
    """Main application configuration"""

    # Flask settings
    SECRET_KEY: str = Field(default_factory=lambda: os.urandom(24).hex())
    FLASK_ENV: str = "development"
    DEBUG: bool = True
    TESTING: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # Print areas
    PRINT_AREAS_FILE: Optional[str] = "config/print_areas.yaml"
    RECORDS_FILE: Optional[str] = None  # seed records for the in-memory store

    # Mockups
    MOCKUP_PREVIEW_ENDPOINT: str = "/api/mockups/preview"
    MOCKUP_CACHE_BACKEND: str = "memory"  # or "none"
    MOCKUP_CACHE_TTL_SECONDS: int = 3 * 24 * 60 * 60  # guest mockup retention
    MOCKUP_CACHE_MAX_ENTRIES: int = 1024

    # Watermark
    WATERMARK_TEXT: str = "PREVIEW - AIPrintly"
    WATERMARK_OPACITY: float = 0.3
    WATERMARK_FONT_PATH: Optional[str] = None  # Bundled default font if None
    MAX_UPLOAD_SIZE: int = 20 * 1024 * 1024  # 20MB

    # Object storage
    STORAGE_PUBLIC_URL: Optional[str] = None
    STORAGE_BUCKET_NAME: str = "aiprintly"
    STORAGE_ACCOUNT_ID: str = "local"
    APP_URL: str = "http://localhost:5173"


class PrintAreaEntry(BaseModel):
    """Print area definition as written in print_areas.yaml"""
    template_id: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    offset_x: int = Field(default=0, ge=0)
    offset_y: int = Field(default=0, ge=0)
    product_image_width: int = Field(gt=0)
    product_image_height: int = Field(gt=0)
    product_class: Optional[Literal['standard', 'poster', 'canvas', 'storybook']] = None  # inferred from the template id if omitted


def load_yaml_config(file_path: str) -> Dict:
    """Load configuration from YAML file"""
    path = Path(file_path)
    if not path.exists():
        logger.warning(f"Config file not found: {file_path}")
        return {}

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading config file {file_path}: {e}")
        return {}


def load_config(environment: str = "development", overrides: Dict[str, Any] = None,
                config_dir: str = "config") -> AppConfig:
    """Load configuration with environment-specific overrides"""

    # Load base settings
    base_config = load_yaml_config(f"{config_dir}/settings.yaml")

    # Load environment-specific settings
    env_config = load_yaml_config(f"{config_dir}/settings_{environment}.yaml")

    # Merge configurations (env overrides base)
    config_dict = {**base_config, **env_config}

    # Apply environment variable overrides
    env_overrides = {
        'FLASK_ENV': os.getenv('FLASK_ENV', environment),
        'LOG_LEVEL': os.getenv('LOG_LEVEL'),
        'SECRET_KEY': os.getenv('SECRET_KEY'),
        'MOCKUP_CACHE_BACKEND': os.getenv('MOCKUP_CACHE_BACKEND'),
        'MOCKUP_CACHE_TTL_SECONDS': os.getenv('MOCKUP_CACHE_TTL_SECONDS'),
        'STORAGE_PUBLIC_URL': os.getenv('R2_PUBLIC_URL'),
        'STORAGE_BUCKET_NAME': os.getenv('R2_BUCKET_NAME'),
        'STORAGE_ACCOUNT_ID': os.getenv('R2_ACCOUNT_ID'),
        'APP_URL': os.getenv('APP_URL'),
    }

    # Only include non-None values
    env_overrides = {k: v for k, v in env_overrides.items() if v is not None}
    config_dict.update(env_overrides)

    # Special handling for boolean DEBUG flag
    if 'FLASK_ENV' in config_dict:
        config_dict['DEBUG'] = config_dict['FLASK_ENV'] == 'development'

    # Explicit overrides (tests, production runner) win over everything
    if overrides:
        config_dict.update(overrides)

    try:
        return AppConfig(**config_dict)
    except ValidationError as e:
        logger.error(f"Configuration validation error: {e}")
        # Return default config on validation error
        return AppConfig()


def load_print_area_config(file_path: Optional[str]) -> Dict[str, PrintAreaEntry]:
    """Load extra print area definitions from YAML"""
    if not file_path:
        return {}

    config_data = load_yaml_config(file_path)
    entries = {}

    for item in config_data.get("print_areas", []):
        try:
            entry = PrintAreaEntry(**item)
            entries[entry.template_id] = entry
        except ValidationError as e:
            logger.error(f"Error loading print area {item.get('template_id', 'unknown')}: {e}")

    logger.info(f"Loaded {len(entries)} print area configurations from {file_path}")
    return entries
