"""
Программа: «Swatchbook» – веб-сервис для извлечения и экспорта цветовых палитр.
Модуль: utils/image_processor.py – обработка изображений.

Назначение модуля:
- Открытие изображения и подготовка уменьшенного RGBA-буфера пикселей.
- Разреженная выборка пикселей с отсевом прозрачных, почти чёрных и почти белых.
- Выделение доминирующих цветов (k-средние или подсчёт частот) и выбор цвета в точке.
"""

import logging
from collections import Counter
from contextlib import contextmanager

import numpy as np
from PIL import Image, UnidentifiedImageError

from utils.colors import rgb_to_hex
from utils.kmeans import DEFAULT_MAX_ITERATIONS, cluster_colors

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 200
FREQUENCY_MAX_SIZE = 100
DEFAULT_SAMPLE_STRIDE = 4

# Пороги отсева: прозрачный фон, почти чёрные и почти белые пиксели
ALPHA_THRESHOLD = 128
DARK_SUM_THRESHOLD = 30
LIGHT_SUM_THRESHOLD = 735

FALLBACK_COLOR = "#000000"
EXTRACTION_MODES = ("kmeans", "frequency")


class ImageDecodeError(ValueError):
    """Файл не удалось прочитать как изображение."""


class PixelSurfaceError(RuntimeError):
    """Не удалось получить растровый буфер пикселей из изображения."""


@contextmanager
def open_image(source):
    """Открывает изображение (путь или файловый объект) и гарантированно закрывает его."""
    try:
        image = Image.open(source)
        image.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(f"Не удалось декодировать изображение: {exc}") from exc

    try:
        yield image
    finally:
        image.close()


def scaled_dimensions(width: int, height: int, max_size: int = DEFAULT_MAX_SIZE) -> tuple[int, int]:
    """Размер рабочего буфера: большая сторона не превышает max_size.

    Маленькие изображения не увеличиваются.
    """
    if width <= 0 or height <= 0:
        raise PixelSurfaceError(f"Недопустимый размер изображения: {width}x{height}")
    scale = min(1.0, max_size / width, max_size / height)
    return max(1, int(width * scale)), max(1, int(height * scale))


def render_pixel_buffer(image: Image.Image, max_size: int | None = DEFAULT_MAX_SIZE) -> np.ndarray:
    """Растеризует изображение в RGBA-массив формы (высота, ширина, 4).

    При max_size=None изображение берётся в исходном разрешении.
    Масштабирование выполняется в исходном режиме изображения, в RGBA
    переводится уже уменьшенная копия.
    """
    try:
        surface = image
        if max_size is not None:
            target = scaled_dimensions(image.width, image.height, max_size)
            if target != image.size:
                # Для режимов "P" и "1" Pillow сам переключается на NEAREST
                surface = image.resize(target, Image.Resampling.BILINEAR)
        buffer = np.asarray(surface.convert("RGBA"), dtype=np.uint8)
    except (OSError, ValueError) as exc:
        raise PixelSurfaceError(f"Не удалось подготовить буфер пикселей: {exc}") from exc

    if buffer.ndim != 3 or buffer.shape[2] != 4:
        raise PixelSurfaceError(f"Неожиданная форма буфера пикселей: {buffer.shape}")
    return buffer


def sample_pixels(buffer: np.ndarray, stride: int = DEFAULT_SAMPLE_STRIDE) -> np.ndarray:
    """Берёт каждый stride-й пиксель и отбрасывает неинформативные.

    Возвращает массив (N, 3) в порядке обхода буфера; N может быть равно нулю.
    """
    flat = buffer.reshape(-1, 4)[::stride].astype(np.int32)
    brightness = flat[:, :3].sum(axis=1)
    keep = (
        (flat[:, 3] > ALPHA_THRESHOLD)
        & (brightness > DARK_SUM_THRESHOLD)
        & (brightness < LIGHT_SUM_THRESHOLD)
    )
    return flat[keep, :3]


def frequent_colors(buffer: np.ndarray, num_colors: int) -> list[str]:
    """Самые частые точные цвета буфера (без выборки и фильтрации)."""
    counter = Counter(map(tuple, buffer.reshape(-1, 4)[:, :3].tolist()))
    return [rgb_to_hex(color) for color, _ in counter.most_common(num_colors)]


def extract_colors_from_image(
    source,
    num_colors: int = 5,
    *,
    mode: str = "kmeans",
    max_size: int | None = None,
    stride: int = DEFAULT_SAMPLE_STRIDE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    rng=None,
) -> list[str]:
    """Извлекает доминирующие цвета изображения в виде HEX-строк."""
    if mode not in EXTRACTION_MODES:
        raise ValueError(f"Неизвестный режим извлечения: {mode}")

    if max_size is None:
        max_size = FREQUENCY_MAX_SIZE if mode == "frequency" else DEFAULT_MAX_SIZE

    with open_image(source) as image:
        logger.info("Извлечение цветов: режим %s, размер %s, цветов %s", mode, image.size, num_colors)
        buffer = render_pixel_buffer(image, max_size)

    if mode == "frequency":
        return frequent_colors(buffer, num_colors)

    samples = sample_pixels(buffer, stride)
    logger.debug("Буфер %sx%s, в выборке %s пикселей", buffer.shape[1], buffer.shape[0], len(samples))
    if len(samples) == 0:
        logger.info("После фильтрации не осталось пикселей, возвращаем %s", FALLBACK_COLOR)
        return [FALLBACK_COLOR]

    centroids = cluster_colors(samples, num_colors, max_iterations=max_iterations, rng=rng)
    return [rgb_to_hex(centroid) for centroid in centroids]


def extract_color_at_point(source, x: int, y: int) -> str:
    """Цвет конкретного пикселя исходного изображения в HEX."""
    with open_image(source) as image:
        buffer = render_pixel_buffer(image, max_size=None)

    height, width = buffer.shape[:2]
    if not (0 <= x < width and 0 <= y < height):
        raise ValueError(f"Точка ({x}, {y}) вне изображения {width}x{height}")
    return rgb_to_hex(buffer[y, x, :3])
