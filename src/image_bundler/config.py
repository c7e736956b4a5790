"""
Image Bundler Configuration
===========================

This module handles configuration loading for the image bundler.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    BUNDLER_STORAGE_BACKEND    -> storage.backend
    BUNDLER_PHOTO_BUCKET       -> storage.photo_bucket
    BUNDLER_OUTPUT_BUCKET      -> storage.output_bucket
    BUNDLER_LOCAL_ROOT         -> storage.local_root
    AWS_REGION                 -> storage.region
    BUNDLER_MAX_CONCURRENCY    -> retrieval.max_concurrency
    BUNDLER_RENDER_STRATEGY    -> render.strategy
    BUNDLER_RENDER_URL         -> render.url
    BUNDLER_RENDER_AUTH_TOKEN  -> render.auth_token
    HTTP_TIMEOUT               -> render.timeout_seconds
    BUNDLER_FONT_KEY           -> render.font_key
    BUNDLER_STAGING            -> archive.staging
    BUNDLER_SCRATCH_DIR        -> archive.scratch_dir
    BUNDLER_NUMBERING          -> archive.numbering
    BUNDLER_LOG_LEVEL          -> logging.level
    PORT                       -> server.port

Example:
    from image_bundler.config import settings

    print(settings.storage.photo_bucket)
    print(settings.render.strategy)
"""

import os
import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="image-bundler", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")


class StorageConfig(BaseModel):
    """Object storage configuration."""

    backend: Literal["s3", "local"] = Field(
        default="s3",
        description="Object store backend: 's3' or 'local'",
    )
    photo_bucket: str = Field(
        default="phitemspics",
        min_length=1,
        description="Bucket holding '{item_code}_{n}.jpeg' photos",
    )
    output_bucket: str = Field(
        default="phbundledimages",
        min_length=1,
        description="Bucket receiving '{item_code}.zip' bundles",
    )
    region: Optional[str] = Field(default=None, description="AWS region")
    endpoint_url: Optional[str] = Field(
        default=None,
        description="Custom S3 endpoint (S3-compatible stores)",
    )
    local_root: str = Field(
        default="./data/storage",
        description="Root directory for the 'local' backend (one subdir per bucket)",
    )


class RetrievalConfig(BaseModel):
    """Photo retrieval configuration."""

    max_concurrency: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Concurrent photo fetches (1 = sequential)",
    )


class RenderConfig(BaseModel):
    """Size image rendering configuration."""

    strategy: Literal["remote", "local"] = Field(
        default="remote",
        description="Renderer: 'remote' HTTP service or 'local' Pillow rasterization",
    )
    url: str = Field(
        default="http://localhost:8787/image",
        description="Remote render endpoint",
    )
    auth_token: str = Field(default="", description="Bearer token for the render endpoint")
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Render call timeout in seconds (None = no timeout)",
    )
    table_title: str = Field(default="尺码表", description="Title of table size images")
    one_line_title: str = Field(default="关于尺码", description="Title of one-line size images")
    font_bucket: Optional[str] = Field(
        default=None,
        description="Bucket of the font asset (defaults to storage.photo_bucket)",
    )
    font_key: Optional[str] = Field(
        default=None,
        description="Key of the TrueType/OpenType font asset for local rendering",
    )
    font_size: int = Field(default=28, ge=8, le=128, description="Local render font size")


class ArchiveConfig(BaseModel):
    """Archive building configuration."""

    staging: Literal["memory", "file"] = Field(
        default="memory",
        description="Scratch staging: in-memory buffer or temporary file",
    )
    scratch_dir: Optional[str] = Field(
        default=None,
        description="Directory for file staging (None = system temp dir)",
    )
    numbering: Literal["dense", "slot"] = Field(
        default="dense",
        description="Photo entry numbering: dense emission order or original slot",
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the image bundler.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path("/app/config.yaml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Storage settings
    if env_backend := os.environ.get("BUNDLER_STORAGE_BACKEND"):
        config_data.setdefault("storage", {})["backend"] = env_backend
    if env_photo := os.environ.get("BUNDLER_PHOTO_BUCKET"):
        config_data.setdefault("storage", {})["photo_bucket"] = env_photo
    if env_output := os.environ.get("BUNDLER_OUTPUT_BUCKET"):
        config_data.setdefault("storage", {})["output_bucket"] = env_output
    if env_root := os.environ.get("BUNDLER_LOCAL_ROOT"):
        config_data.setdefault("storage", {})["local_root"] = env_root
    if env_region := os.environ.get("AWS_REGION"):
        config_data.setdefault("storage", {})["region"] = env_region

    # Retrieval settings
    if env_conc := os.environ.get("BUNDLER_MAX_CONCURRENCY"):
        config_data.setdefault("retrieval", {})["max_concurrency"] = int(env_conc)

    # Render settings
    if env_strategy := os.environ.get("BUNDLER_RENDER_STRATEGY"):
        config_data.setdefault("render", {})["strategy"] = env_strategy
    if env_url := os.environ.get("BUNDLER_RENDER_URL"):
        config_data.setdefault("render", {})["url"] = env_url
    if env_token := os.environ.get("BUNDLER_RENDER_AUTH_TOKEN"):
        config_data.setdefault("render", {})["auth_token"] = env_token
    if env_timeout := os.environ.get("HTTP_TIMEOUT"):
        config_data.setdefault("render", {})["timeout_seconds"] = float(env_timeout)
    if env_font := os.environ.get("BUNDLER_FONT_KEY"):
        config_data.setdefault("render", {})["font_key"] = env_font

    # Archive settings
    if env_staging := os.environ.get("BUNDLER_STAGING"):
        config_data.setdefault("archive", {})["staging"] = env_staging
    if env_scratch := os.environ.get("BUNDLER_SCRATCH_DIR"):
        config_data.setdefault("archive", {})["scratch_dir"] = env_scratch
    if env_numbering := os.environ.get("BUNDLER_NUMBERING"):
        config_data.setdefault("archive", {})["numbering"] = env_numbering

    # Server settings (container platforms use PORT)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("BUNDLER_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
