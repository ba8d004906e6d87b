"""Runtime configuration for the overlay service.

Settings are read from environment variables once at startup and frozen
into a :class:`Settings` instance that is handed to ``create_app``.

Environment variables:
    PORT: Listening port (default 3000).
    HOST: Bind address (default '0.0.0.0').
    RENDER_EXTERNAL_URL: Externally reachable base URL used to build the
        returned links (default 'http://localhost:<PORT>').
    UPLOAD_DIR: Directory for transient uploads (default './uploads').
    OUTPUT_DIR: Directory for generated GIFs (default './outputs').
    GIF_QUALITY: Palette quantization setting for the encoder (default 50).
    FONT_PATH: Optional TrueType font file used for the overlay text.
    CLEANUP_ON_FAILURE: Delete the upload when processing fails
        (default 'false').
    LOG_LEVEL: Logging level name (default 'INFO').
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PORT = 3000
DEFAULT_QUALITY = 50


class Settings(BaseModel):
    """Immutable service configuration."""

    model_config = ConfigDict(frozen=True)

    port: int = Field(default=DEFAULT_PORT, gt=0, lt=65536)
    host: str = "0.0.0.0"
    base_url: str = f"http://localhost:{DEFAULT_PORT}"
    upload_dir: str = "./uploads"
    output_dir: str = "./outputs"
    quality: int = Field(default=DEFAULT_QUALITY, ge=1, le=100)
    font_path: Optional[str] = None
    cleanup_on_failure: bool = False
    log_level: str = "INFO"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> Settings:
    """Build :class:`Settings` from the current environment."""
    port = int(os.getenv("PORT", str(DEFAULT_PORT)))
    base_url = os.getenv("RENDER_EXTERNAL_URL") or f"http://localhost:{port}"
    return Settings(
        port=port,
        host=os.getenv("HOST", "0.0.0.0"),
        base_url=base_url.rstrip("/"),
        upload_dir=os.getenv("UPLOAD_DIR", "./uploads"),
        output_dir=os.getenv("OUTPUT_DIR", "./outputs"),
        quality=int(os.getenv("GIF_QUALITY", str(DEFAULT_QUALITY))),
        font_path=os.getenv("FONT_PATH") or None,
        cleanup_on_failure=_env_flag("CLEANUP_ON_FAILURE"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
