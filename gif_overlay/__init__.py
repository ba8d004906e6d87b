"""Package for the GIF text overlay pipeline.

This package contains modules for decoding animated GIFs into frames,
drawing rotated text onto each frame, re-encoding the frames into a new
GIF and storing the results. The FastAPI endpoints in ``main.py`` call
into :func:`gif_overlay.pipeline.process_gif` for each upload. See
individual modules for details.
"""

from gif_overlay.errors import DecodeError, EncodeError, ProcessingError, RenderError
from gif_overlay.models import OverlaySpec
from gif_overlay.pipeline import process_gif

__all__ = [
    "DecodeError",
    "EncodeError",
    "OverlaySpec",
    "ProcessingError",
    "RenderError",
    "process_gif",
]
