"""Decode → render → encode pipeline for a single upload."""

from __future__ import annotations

import logging
import time
from typing import Optional

from gif_overlay.encoder import DEFAULT_QUALITY, encode_frames
from gif_overlay.frames import extract_frames
from gif_overlay.image_ops import render_overlay
from gif_overlay.models import OverlaySpec

logger = logging.getLogger(__name__)


def process_gif(
    input_path: str,
    spec: OverlaySpec,
    quality: int = DEFAULT_QUALITY,
    font_path: Optional[str] = None,
) -> bytes:
    """Draw ``spec`` onto every frame of the GIF at ``input_path``.

    Frames are handled one after another in playback order. The first
    failure aborts the whole run with a ``ProcessingError`` subclass and no
    partial output is returned.

    Args:
        input_path: Path of the uploaded GIF.
        spec: Overlay parameters applied to every frame.
        quality: Palette quantization setting passed to the encoder.
        font_path: Optional TrueType font file for the overlay text.

    Returns:
        The encoded output GIF.
    """
    started = time.monotonic()
    frames = extract_frames(input_path)
    width, height = frames[0].width, frames[0].height
    logger.info("Extracted %d frames (%dx%d) from %s", len(frames), width, height, input_path)

    rendered = [render_overlay(frame, spec, font_path) for frame in frames]
    data = encode_frames(rendered, width, height, quality=quality)
    logger.info(
        "Encoded %d frames into %d bytes in %.2fs",
        len(rendered),
        len(data),
        time.monotonic() - started,
    )
    return data
