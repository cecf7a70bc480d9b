"""
Программа: «Swatchbook» – веб-сервис для извлечения и экспорта цветовых палитр.
Модуль: config.py – конфигурация приложения.

Назначение модуля:
- Определение базовых параметров приложения Flask (секретный ключ, строка подключения к БД).
- Настройка загрузки изображений и параметров извлечения цветов.
- Лимиты частоты запросов и уровень логирования.
"""

import os
import warnings


def _get_env_bool(name: str, default: bool = False) -> bool:
    """Преобразует переменную окружения в bool."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_int(name: str, default: int) -> int:
    """Преобразует переменную окружения в int."""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str] | None = None) -> list[str]:
    """Преобразует переменную окружения вида 'a,b,c' в список."""
    value = os.environ.get(name)
    if value is None:
        return list(default or [])
    return [item.strip() for item in value.split(",") if item.strip()]


def _is_production() -> bool:
    """Определяет production-режим по FLASK_ENV."""
    return os.environ.get("FLASK_ENV", "").strip().lower() == "production"


class Config:
    """Базовая конфигурация приложения."""

    _PRODUCTION = _is_production()

    SECRET_KEY = os.environ.get("SECRET_KEY")
    if not SECRET_KEY:
        if _PRODUCTION:
            raise RuntimeError(
                "SECRET_KEY environment variable is required in production. "
                "Set a strong random value before starting the app."
            )
        SECRET_KEY = "dev-insecure-secret-key"
        warnings.warn(
            "SECRET_KEY is not set. Using insecure development fallback key.",
            RuntimeWarning,
            stacklevel=1,
        )

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///swatchbook.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    CORS_ENABLED = _get_env_bool("CORS_ENABLED", default=False)
    CORS_ORIGINS = _get_env_list(
        "CORS_ORIGINS",
        default=["http://127.0.0.1:5000", "http://localhost:5000"],
    )

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"

    MAX_CONTENT_LENGTH = 16 * 1024 * 1024
    ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "webp", "gif", "bmp"}
    ALLOWED_IMAGE_FORMATS = {"png", "jpeg", "webp", "gif", "bmp"}
    MAX_IMAGE_PIXELS = _get_env_int("MAX_IMAGE_PIXELS", 20_000_000)

    MIN_COLOR_COUNT = 1
    MAX_COLOR_COUNT = 10
    DEFAULT_COLOR_COUNT = _get_env_int("DEFAULT_COLOR_COUNT", 5)

    DEFAULT_EXTRACTION_MODE = os.environ.get("EXTRACTION_MODE", "kmeans").strip().lower() or "kmeans"
    EXTRACTION_MAX_SIZE = _get_env_int("EXTRACTION_MAX_SIZE", 200)
    EXTRACTION_SAMPLE_STRIDE = _get_env_int("EXTRACTION_SAMPLE_STRIDE", 4)
    KMEANS_MAX_ITERATIONS = _get_env_int("KMEANS_MAX_ITERATIONS", 20)
    FREQUENCY_MAX_SIZE = _get_env_int("FREQUENCY_MAX_SIZE", 100)

    RATE_LIMIT_ENABLED = _get_env_bool("RATE_LIMIT_ENABLED", default=True)
    # (лимит, окно в секундах) для каждой группы запросов
    RATE_LIMITS = {
        "extract": (40, 10 * 60),
        "pick": (200, 10 * 60),
        "export": (120, 10 * 60),
        "colors": (600, 10 * 60),
        "palette_write": (60, 10 * 60),
        "share": (120, 10 * 60),
    }

    @staticmethod
    def allowed_file(filename: str) -> bool:
        """Проверяет расширение загружаемого файла."""
        return (
            "." in filename
            and filename.rsplit(".", 1)[1].lower() in Config.ALLOWED_EXTENSIONS
        )
