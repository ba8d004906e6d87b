"""Animated GIF encoding.

:class:`GifEncoder` collects frames with per-frame delays and writes them out
as one GIF, one image block per frame, using the block writers in Pillow's
``GifImagePlugin``. Each RGBA frame is reduced to a 256-color palette first;
the quality setting controls how many k-means refinement passes the
quantizer makes.
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Iterable, List, Optional

from PIL import GifImagePlugin, Image  # type: ignore[import]

from gif_overlay.errors import EncodeError
from gif_overlay.frames import DELAY_SCALE_MS
from gif_overlay.image_ops import RenderedFrame

logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 50
LOOP_FOREVER = 0


class GifEncoder:
    """Accumulates frames and encodes them as an animated GIF.

    The width and height are fixed when the encoder is created; every frame
    added must match them. Delays are set per frame with :meth:`set_delay`
    before the matching :meth:`add_frame` call.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.repeat: Optional[int] = LOOP_FOREVER
        self.quality = DEFAULT_QUALITY
        self._delay = 0
        self._frames: List[Image.Image] = []
        self._delays: List[int] = []

    def set_repeat(self, count: Optional[int]) -> None:
        """Set the loop count. 0 loops forever, ``None`` plays once."""
        self.repeat = count

    def set_quality(self, quality: int) -> None:
        self.quality = max(1, min(100, int(quality)))

    def set_delay(self, milliseconds: int) -> None:
        self._delay = max(0, int(milliseconds))

    def add_frame(self, image: Image.Image) -> None:
        if image.size != (self.width, self.height):
            raise EncodeError(
                f"Frame size {image.size} does not match encoder size {(self.width, self.height)}"
            )
        self._frames.append(self._quantize(image))
        self._delays.append(self._delay)

    def _quantize(self, image: Image.Image) -> Image.Image:
        rgb = image.convert("RGB")
        return rgb.quantize(
            colors=256,
            method=Image.Quantize.MEDIANCUT,
            kmeans=self.quality // 10,
        )

    def finish(self) -> bytes:
        """Encode the accumulated frames and return the GIF bytes.

        Every added frame becomes its own image block with its own delay and
        local color table. ``save_all`` is not used because it folds identical
        consecutive frames into one.

        Raises:
            EncodeError: If no frames were added or Pillow fails to produce
                any output.
        """
        if not self._frames:
            raise EncodeError("No frames to encode")
        header_info = {"optimize": False, "duration": list(self._delays)}
        if self.repeat is not None:
            header_info["loop"] = self.repeat

        buffer = BytesIO()
        try:
            header, _ = GifImagePlugin.getheader(self._frames[0], info=header_info)
            for chunk in header:
                buffer.write(chunk)
            for image, delay in zip(self._frames, self._delays):
                for chunk in GifImagePlugin.getdata(image, include_color_table=True, duration=delay):
                    buffer.write(chunk)
            buffer.write(b";")
        except (OSError, ValueError) as exc:
            raise EncodeError(f"GIF encoding failed: {exc}") from exc
        data = buffer.getvalue()
        if not data:
            raise EncodeError("GIF encoder produced an empty buffer")
        return data


def encode_frames(
    frames: Iterable[RenderedFrame],
    width: int,
    height: int,
    quality: int = DEFAULT_QUALITY,
    repeat: Optional[int] = LOOP_FOREVER,
) -> bytes:
    """Encode rendered frames, in order, into a looping GIF.

    Args:
        frames: Rendered frames in playback order.
        width: Width shared by every frame.
        height: Height shared by every frame.
        quality: Palette quantization setting (1-100).
        repeat: Loop count; 0 loops forever.

    Returns:
        The encoded GIF bytes.
    """
    encoder = GifEncoder(width, height)
    encoder.set_repeat(repeat)
    encoder.set_quality(quality)
    count = 0
    for frame in frames:
        encoder.set_delay(frame.delay * DELAY_SCALE_MS)
        encoder.add_frame(frame.image)
        count += 1
    data = encoder.finish()
    logger.debug("Encoded %d frames into %d bytes", count, len(data))
    return data
