"""Shared fixtures for the overlay tests.

GIF inputs are generated in memory with Pillow so the tests do not depend
on binary fixtures. The ``client`` fixture builds a fresh app whose upload
and output directories live under ``tmp_path``.
"""

import io
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from gif_overlay.config import Settings
from gif_overlay.frames import Frame

COLORS = [(220, 30, 30), (30, 200, 40), (40, 60, 230), (240, 220, 20)]


def make_gif_bytes(colors=COLORS, size=(120, 90), duration=100):
    """Return an animated GIF with one solid frame per color."""
    frames = [Image.new("RGB", size, color) for color in colors]
    buf = io.BytesIO()
    frames[0].save(
        buf,
        format="GIF",
        save_all=True,
        append_images=frames[1:],
        duration=duration,
        loop=0,
    )
    return buf.getvalue()


def make_repeating_gif_bytes(colors, size=(120, 90), delay=10):
    """Return a GIF that keeps identical consecutive frames as separate blocks."""
    from gif_overlay.encoder import GifEncoder

    encoder = GifEncoder(*size)
    encoder.set_delay(delay * 10)
    for color in colors:
        encoder.add_frame(Image.new("RGBA", size, color + (255,)))
    return encoder.finish()


def make_frame(image, index=0, delay=10):
    buf = io.BytesIO()
    image.convert("RGBA").save(buf, format="PNG")
    width, height = image.size
    return Frame(index=index, width=width, height=height, delay=delay, data=buf.getvalue())


def glyph_bbox(image, threshold=128):
    """Bounding box of the dark pixels of ``image`` (text drawn on white)."""
    gray = image.convert("L")
    mask = gray.point(lambda p: 255 if p < threshold else 0)
    return mask.getbbox()


@pytest.fixture
def gif_path(tmp_path):
    path = tmp_path / "input.gif"
    path.write_bytes(make_gif_bytes())
    return path


@pytest.fixture
def settings(tmp_path):
    return Settings(
        base_url="http://testserver",
        upload_dir=str(tmp_path / "uploads"),
        output_dir=str(tmp_path / "outputs"),
    )


@pytest.fixture
def client(settings):
    from main import create_app

    return TestClient(create_app(settings))


def files_in(directory):
    path = Path(directory)
    if not path.exists():
        return []
    return sorted(p.name for p in path.iterdir())
