"""Frame extraction for animated GIFs.

This module decodes an animated GIF into a list of :class:`Frame` records.
Pillow applies each frame's disposal method while seeking, so converting a
frame to RGBA yields the full composited picture rather than the raw delta
stored in the file. Each frame is kept as PNG bytes so it can be decoded on
its own later in the pipeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import List

from PIL import Image, ImageSequence, UnidentifiedImageError  # type: ignore[import]

from gif_overlay.errors import DecodeError

logger = logging.getLogger(__name__)

# GIF delays are stored in hundredths of a second; the encoder works in ms.
DELAY_SCALE_MS = 10


@dataclass(frozen=True)
class Frame:
    """One decoded frame of an animated GIF.

    Attributes:
        index: Position of the frame in the playback sequence.
        width: Frame width in pixels.
        height: Frame height in pixels.
        delay: Display delay in hundredths of a second.
        data: PNG-encoded RGBA raster of the composited frame.
    """

    index: int
    width: int
    height: int
    delay: int
    data: bytes


def _to_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.convert("RGBA").save(buffer, format="PNG")
    return buffer.getvalue()


def extract_frames(path: str) -> List[Frame]:
    """Decode every frame of the GIF at ``path``.

    Args:
        path: Filesystem path of the animated GIF.

    Returns:
        The frames in playback order. Width and height are taken from the
        first frame and shared by all of them.

    Raises:
        DecodeError: If the file is missing, unreadable, not a GIF or
            truncated part way through.
    """
    try:
        with Image.open(path) as img:
            if img.format != "GIF":
                raise DecodeError(f"{path} is not a GIF (format={img.format})")
            width, height = img.size
            frames: List[Frame] = []
            for index, frame in enumerate(ImageSequence.Iterator(img)):
                # Pillow reports the delay in ms, already scaled from the file.
                duration = frame.info.get("duration", 0) or 0
                frames.append(
                    Frame(
                        index=index,
                        width=width,
                        height=height,
                        delay=int(round(duration / DELAY_SCALE_MS)),
                        data=_to_png(frame),
                    )
                )
    except DecodeError:
        raise
    except FileNotFoundError as exc:
        raise DecodeError(f"Input file not found: {path}") from exc
    except UnidentifiedImageError as exc:
        raise DecodeError(f"Unrecognised image data in {path}") from exc
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Failed to decode {path}: {exc}") from exc

    if not frames:
        raise DecodeError(f"No frames found in {path}")
    logger.debug("Decoded %d frames (%dx%d) from %s", len(frames), width, height, path)
    return frames
