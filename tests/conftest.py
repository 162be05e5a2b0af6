import io

import numpy as np
import pytest
from PIL import Image, ImageDraw

from footprint.models import RawImage

WIDTH, HEIGHT = 200, 400
FOOT_CENTER = (100, 80)


def draw_footprint(foot: int, background: int, mode: str = "RGB") -> Image.Image:
    """Toes-up footprint: forefoot blob, narrow isthmus, heel blob."""

    fill = foot if mode == "L" else (foot, foot, foot)
    bg = background if mode == "L" else (background, background, background)
    img = Image.new(mode, (WIDTH, HEIGHT), bg)
    draw = ImageDraw.Draw(img)
    draw.ellipse((50, 20, 150, 150), fill=fill)
    draw.rectangle((80, 150, 120, 260), fill=fill)
    draw.ellipse((60, 250, 140, 380), fill=fill)
    return img


def png_bytes(img: Image.Image) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def dark_glass_photo():
    return draw_footprint(foot=220, background=40)


@pytest.fixture
def light_glass_photo():
    return draw_footprint(foot=40, background=220)


@pytest.fixture
def raw_photo(dark_glass_photo):
    return RawImage(data=png_bytes(dark_glass_photo), filename="footprint.png")


@pytest.fixture
def banded_pressure():
    """100x10 pressure image: forefoot and rearfoot fully loaded, midfoot empty."""

    arr = np.full((100, 10), 255, dtype=np.uint8)
    arr[:35, :] = 0
    arr[65:, :] = 0
    return Image.fromarray(arr)
