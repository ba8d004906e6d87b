"""Pydantic models and data schemas for the overlay endpoint.

:class:`OverlaySpec` carries the text-overlay parameters of one request.
It is frozen, so the same instance is applied unchanged to every frame.
The response models describe the JSON bodies returned by ``/overlay``.
"""

from __future__ import annotations

from typing import Optional

from PIL import ImageColor  # type: ignore[import]
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_FONT_SIZE = 32.0
DEFAULT_X = 100.0
DEFAULT_Y = 100.0
DEFAULT_ANGLE = 0.0
DEFAULT_COLOR = "#000000"


class OverlaySpec(BaseModel):
    """Text overlay parameters shared by every frame of a request.

    Attributes:
        text: The string to draw. Must not be empty.
        font_size: Font size in pixels.
        x: Horizontal anchor position, measured from the left edge.
        y: Vertical anchor position, measured from the top edge.
        angle: Rotation in degrees; positive values rotate clockwise.
        color: CSS-style fill color such as ``#ff0000`` or ``red``.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    text: str = Field(min_length=1)
    font_size: float = Field(default=DEFAULT_FONT_SIZE, gt=0)
    x: float = DEFAULT_X
    y: float = DEFAULT_Y
    angle: float = DEFAULT_ANGLE
    color: str = DEFAULT_COLOR

    @field_validator("color")
    @classmethod
    def _check_color(cls, value: str) -> str:
        value = value.strip()
        # Raises ValueError for anything Pillow cannot parse.
        ImageColor.getrgb(value)
        return value

    @classmethod
    def from_form(
        cls,
        text: str,
        font_size: Optional[str] = None,
        x: Optional[str] = None,
        y: Optional[str] = None,
        angle: Optional[str] = None,
        color: Optional[str] = None,
    ) -> "OverlaySpec":
        """Build a spec from raw multipart form values.

        Missing or blank values fall back to the field defaults. Numeric
        strings are coerced by pydantic; a ``ValidationError`` is raised for
        anything malformed.
        """
        raw = {
            "font_size": font_size,
            "x": x,
            "y": y,
            "angle": angle,
            "color": color,
        }
        values = {k: v for k, v in raw.items() if v is not None and v.strip() != ""}
        return cls(text=text, **values)


class OverlayResponse(BaseModel):
    """Response returned after a GIF has been processed.

    Attributes:
        outputUrl: Absolute URL of the generated GIF.
    """

    outputUrl: str


class ErrorResponse(BaseModel):
    error: str
