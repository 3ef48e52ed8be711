"""Shared pytest fixtures for Grid Sheet Maker tests."""
import os

os.environ['QT_QPA_PLATFORM'] = 'offscreen'  # must be set before QApplication import

import io
import pytest
from PIL import Image, ImageDraw

from models import LoadedImage


@pytest.fixture(scope='session')
def qapp():
    """Create a single QApplication for all tests."""
    from grid_app import GridApp
    app = GridApp([])
    yield app


@pytest.fixture
def make_image_bytes():
    """Factory fixture: make_image_bytes(width, height, color, fmt) -> encoded bytes."""
    def _make(width, height, color='red', fmt='PNG'):
        img = Image.new('RGB', (width, height), color)
        buf = io.BytesIO()
        img.save(buf, format=fmt)
        return buf.getvalue()
    return _make


@pytest.fixture
def circle_png():
    """A single 800x600 ellipse-on-white image as PNG bytes."""
    img = Image.new('RGB', (800, 600), 'white')
    draw = ImageDraw.Draw(img)
    draw.ellipse([40, 40, 760, 560], fill='red', outline='black')
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()


@pytest.fixture
def loaded_image(circle_png):
    """A LoadedImage wrapping the 800x600 circle PNG."""
    return LoadedImage(name='circle.png', data=circle_png, pixel_width=800,
                       pixel_height=600, format='PNG', media_type='image/png')


@pytest.fixture
def image_file(tmp_path, circle_png):
    """The circle PNG written to disk."""
    path = tmp_path / 'circle.png'
    path.write_bytes(circle_png)
    return str(path)
