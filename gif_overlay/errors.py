"""Exception types raised by the overlay pipeline.

Every failure inside the pipeline is reported as a :class:`ProcessingError`
tagged with the stage it came from. The HTTP layer collapses all of them
into a single generic 500 response, so the stage only shows up in the
server-side logs.
"""

from __future__ import annotations

from enum import Enum


class PipelineStage(str, Enum):
    DECODE = "decode"
    RENDER = "render"
    ENCODE = "encode"


class ProcessingError(Exception):
    """Base exception for pipeline failures."""

    stage: PipelineStage

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def label(self) -> str:
        return f"{self.stage.value} error"


class DecodeError(ProcessingError):
    """Raised when the input file is missing, unreadable or not a GIF."""

    stage = PipelineStage.DECODE


class RenderError(ProcessingError):
    """Raised when a frame buffer cannot be decoded into a drawable image."""

    stage = PipelineStage.RENDER


class EncodeError(ProcessingError):
    """Raised when the frame sequence cannot be encoded into a GIF."""

    stage = PipelineStage.ENCODE
