"""Image manipulation utilities.

This module wraps the per-frame drawing work using Pillow: it pastes a
decoded frame onto a fresh surface and draws the overlay text through an
affine transform (translate to the anchor, then rotate). These helpers are
used by :mod:`gif_overlay.pipeline` for every frame of an upload.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont, UnidentifiedImageError  # type: ignore[import]

from gif_overlay.errors import RenderError
from gif_overlay.frames import Frame
from gif_overlay.models import OverlaySpec

# Fallback chain for the fixed font family.
FONT_CANDIDATES = ("arial.ttf", "DejaVuSans.ttf")

_WHITESPACE = re.compile(r"[\t\n\f\r\v]")


@dataclass(frozen=True)
class RenderedFrame:
    """A frame after the overlay has been drawn.

    Attributes:
        index: Position of the frame in the playback sequence.
        delay: Display delay in hundredths of a second, copied from the
            source frame.
        image: The composited RGBA image.
    """

    index: int
    delay: int
    image: Image.Image

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size


def _open_image(data: bytes) -> Image.Image:
    """Open raw image bytes with Pillow and convert to RGBA."""
    img = Image.open(BytesIO(data))
    img.load()
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return img


@lru_cache(maxsize=32)
def load_font(size: float, font_path: Optional[str] = None) -> ImageFont.FreeTypeFont:
    """Return the overlay font at ``size`` pixels.

    ``font_path`` is tried first when given, then the system fonts in
    ``FONT_CANDIDATES``. If none of them is installed Pillow's bundled
    scalable font is used.
    """
    candidates = ((font_path,) if font_path else ()) + FONT_CANDIDATES
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size=size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def overlay_matrix(
    x: float, y: float, angle: float, cx: float, cy: float
) -> Tuple[float, float, float, float, float, float]:
    """Affine coefficients mapping frame pixels into the text layer.

    The text layer is drawn with its anchor at ``(cx, cy)``. On the frame,
    that anchor is translated to ``(x, y)`` and the layer is rotated by
    ``angle`` degrees clockwise (y axis pointing down). Pillow's
    ``Image.transform`` wants the inverse mapping, which is what is returned.
    """
    theta = angle * math.pi / 180
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    return (
        cos_t,
        sin_t,
        cx - cos_t * x - sin_t * y,
        -sin_t,
        cos_t,
        cy + sin_t * x - cos_t * y,
    )


def single_line(text: str) -> str:
    """Replace line breaks and tabs with spaces; the overlay is always one line."""
    return _WHITESPACE.sub(" ", text)


def _text_layer(spec: OverlaySpec, font: ImageFont.FreeTypeFont) -> Tuple[Image.Image, int, int]:
    """Draw the text centered on a transparent layer.

    Returns the layer together with the anchor point inside it.
    """
    text = single_line(spec.text)
    left, top, right, bottom = font.getbbox(text, anchor="mm")
    half_w = int(math.ceil(max(-left, right))) + 1
    half_h = int(math.ceil(max(-top, bottom))) + 1
    layer = Image.new("RGBA", (2 * half_w, 2 * half_h), (0, 0, 0, 0))
    fill = ImageColor.getcolor(spec.color, "RGBA")
    ImageDraw.Draw(layer).text((half_w, half_h), text, font=font, fill=fill, anchor="mm")
    return layer, half_w, half_h


def draw_overlay(surface: Image.Image, spec: OverlaySpec, font_path: Optional[str] = None) -> None:
    """Draw the overlay text onto ``surface`` in place.

    Args:
        surface: RGBA image to draw on.
        spec: Overlay parameters.
        font_path: Optional TrueType font file overriding the default family.
    """
    font = load_font(spec.font_size, font_path)
    layer, cx, cy = _text_layer(spec, font)
    matrix = overlay_matrix(spec.x, spec.y, spec.angle, cx, cy)
    placed = layer.transform(
        surface.size,
        Image.Transform.AFFINE,
        matrix,
        resample=Image.Resampling.BILINEAR,
    )
    surface.alpha_composite(placed)


def render_overlay(frame: Frame, spec: OverlaySpec, font_path: Optional[str] = None) -> RenderedFrame:
    """Composite ``frame`` onto a fresh surface and draw the overlay.

    Args:
        frame: Decoded source frame.
        spec: Overlay parameters applied to the frame.
        font_path: Optional TrueType font file overriding the default family.

    Returns:
        The rendered frame, with the same dimensions as ``frame``.

    Raises:
        RenderError: If the frame's pixel buffer cannot be decoded.
    """
    try:
        base = _open_image(frame.data)
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise RenderError(f"Cannot decode frame {frame.index}: {exc}") from exc

    surface = Image.new("RGBA", (frame.width, frame.height), (0, 0, 0, 0))
    surface.paste(base, (0, 0))
    draw_overlay(surface, spec, font_path)
    return RenderedFrame(index=frame.index, delay=frame.delay, image=surface)
