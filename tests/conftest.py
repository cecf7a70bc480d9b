"""Общие фикстуры тестов: приложение на SQLite в памяти и генерация изображений."""

import io
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")

import numpy as np  # noqa: E402
import pytest  # noqa: E402
from PIL import Image  # noqa: E402

from app import create_app  # noqa: E402
from extensions import db  # noqa: E402


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "RATE_LIMIT_ENABLED": False,
        }
    )
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def encode_image(image: Image.Image, fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def solid_png():
    """PNG заданного цвета и размера в виде байтов."""

    def _make(color=(255, 0, 0, 255), size=(40, 40)) -> bytes:
        return encode_image(Image.new("RGBA", size, color))

    return _make


@pytest.fixture
def two_tone_png():
    """Левая половина – красноватая, правая – синеватая, 100x50."""
    pixels = np.zeros((50, 100, 4), dtype=np.uint8)
    pixels[:, :50] = (200, 30, 30, 255)
    pixels[:, 50:] = (30, 30, 200, 255)
    return encode_image(Image.fromarray(pixels))
