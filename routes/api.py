"""
Программа: «Swatchbook» – веб-сервис для извлечения и экспорта цветовых палитр.
Модуль: routes/api.py – REST-подобные API-маршруты.

Назначение модуля:
- Загрузка изображений, извлечение доминирующих цветов и выбор цвета в точке.
- Преобразование цвета между форматами.
- Экспорт палитр в различные форматы (JSON, CSS, GPL, CSV, ASE, ACO, PNG).
- Управление сохранёнными палитрами и ссылками для обмена.
"""

import io

from PIL import Image, UnidentifiedImageError
from flask import current_app, jsonify, request, send_file

from extensions import db
from models.palette import Palette
from utils.colors import SUPPORTED_FORMATS, convert_to_all_formats, normalize_hex, parse_color
from utils.export_handler import EXPORT_FORMATS, export_palette_data
from utils.image_processor import (
    EXTRACTION_MODES,
    ImageDecodeError,
    PixelSurfaceError,
    extract_color_at_point,
    extract_colors_from_image,
)
from utils.rate_limit import is_rate_limited
from utils.share import PALETTE_PARAM, encode_palette_param, parse_palette_param
from config import Config

Image.MAX_IMAGE_PIXELS = Config.MAX_IMAGE_PIXELS

DEFAULT_PALETTE_NAME = "Моя палитра"
DEFAULT_NAMES = {DEFAULT_PALETTE_NAME, "Без названия", "Untitled Palette", "Random Palette", ""}


def _api_error(message: str, status: int = 400):
    return jsonify({"success": False, "error": message}), status


def _too_many_requests():
    return _api_error("Слишком много запросов. Попробуйте позже.", 429)


def _json_object():
    """Тело запроса как словарь; пустое тело – {}, JSON не-объект – None."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _bad_json():
    return _api_error("Ожидался JSON-объект", 400)


def _clamp_color_count(raw_value: int | None) -> int:
    config = current_app.config
    if raw_value is None:
        return config["DEFAULT_COLOR_COUNT"]
    return max(config["MIN_COLOR_COUNT"], min(config["MAX_COLOR_COUNT"], raw_value))


def _validate_uploaded_image(file_storage):
    """Проверяет, что загружен допустимый файл изображения; возвращает ошибку или None."""
    if file_storage.filename == "":
        return _api_error("Файл не выбран", 400)

    if not Config.allowed_file(file_storage.filename):
        return _api_error("Недопустимый тип файла", 400)

    file_storage.stream.seek(0)
    try:
        with Image.open(file_storage.stream) as image:
            image_format = (image.format or "").lower()
            width, height = image.size
            image.verify()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError):
        return _api_error("Файл не является корректным изображением", 400)
    finally:
        file_storage.stream.seek(0)

    if image_format not in current_app.config["ALLOWED_IMAGE_FORMATS"]:
        return _api_error("Недопустимый формат изображения", 400)

    if width * height > current_app.config["MAX_IMAGE_PIXELS"]:
        return _api_error("Изображение слишком большое по разрешению", 400)

    return None


def _normalize_palette_colors(colors):
    if not isinstance(colors, list):
        return None

    if not (Config.MIN_COLOR_COUNT <= len(colors) <= Config.MAX_COLOR_COUNT):
        return None

    normalized = []
    for raw_color in colors:
        color = normalize_hex(raw_color)
        if color is None:
            return None
        normalized.append(color)

    return normalized


def _next_default_name() -> str:
    """Первое свободное имя вида «Моя палитра», «Моя палитра 1», …"""
    if not Palette.query.filter_by(name=DEFAULT_PALETTE_NAME).first():
        return DEFAULT_PALETTE_NAME

    counter = 1
    while Palette.query.filter_by(name=f"{DEFAULT_PALETTE_NAME} {counter}").first():
        counter += 1
    return f"{DEFAULT_PALETTE_NAME} {counter}"


def register_routes(app):
    @app.route("/api/extract", methods=["POST"])
    def extract_palette():
        """Обработчик загрузки изображения и извлечения палитры."""
        if is_rate_limited("extract"):
            return _too_many_requests()

        if "image" not in request.files:
            return _api_error("Файл не был загружен", 400)

        file = request.files["image"]
        validation_error = _validate_uploaded_image(file)
        if validation_error is not None:
            return validation_error

        color_count = _clamp_color_count(request.form.get("color_count", type=int))
        mode = (request.form.get("mode") or app.config["DEFAULT_EXTRACTION_MODE"]).lower()
        if mode not in EXTRACTION_MODES:
            return _api_error("Неизвестный режим извлечения цветов", 400)

        max_size = app.config["FREQUENCY_MAX_SIZE"] if mode == "frequency" else app.config["EXTRACTION_MAX_SIZE"]

        try:
            palette = extract_colors_from_image(
                file.stream,
                color_count,
                mode=mode,
                max_size=max_size,
                stride=app.config["EXTRACTION_SAMPLE_STRIDE"],
                max_iterations=app.config["KMEANS_MAX_ITERATIONS"],
            )
        except ImageDecodeError:
            current_app.logger.warning("Не удалось декодировать загруженное изображение")
            return _api_error("Файл не является корректным изображением", 400)
        except PixelSurfaceError:
            current_app.logger.exception("Ошибка подготовки буфера пикселей")
            return _api_error("Не удалось извлечь цвета из изображения", 500)

        return jsonify({"success": True, "palette": palette, "mode": mode})

    @app.route("/api/pick", methods=["POST"])
    def pick_color():
        """Цвет пикселя загруженного изображения в указанной точке."""
        if is_rate_limited("pick"):
            return _too_many_requests()

        if "image" not in request.files:
            return _api_error("Файл не был загружен", 400)

        file = request.files["image"]
        validation_error = _validate_uploaded_image(file)
        if validation_error is not None:
            return validation_error

        x = request.form.get("x", type=int)
        y = request.form.get("y", type=int)
        if x is None or y is None:
            return _api_error("Не указаны координаты точки", 400)

        try:
            color = extract_color_at_point(file.stream, x, y)
        except ImageDecodeError:
            return _api_error("Файл не является корректным изображением", 400)
        except PixelSurfaceError:
            current_app.logger.exception("Ошибка подготовки буфера пикселей")
            return _api_error("Не удалось прочитать пиксель изображения", 500)
        except ValueError:
            return _api_error("Точка находится за пределами изображения", 400)

        return jsonify({"success": True, "color": color})

    @app.get("/api/colors/<color>")
    def color_formats(color: str):
        """Все представления цвета (HEX, RGB, HSL, HSB, CMYK, Lab)."""
        if is_rate_limited("colors"):
            return _too_many_requests()

        normalized = normalize_hex(color)
        if normalized is None:
            return _api_error("Некорректный HEX-цвет", 400)
        return jsonify({"success": True, "formats": convert_to_all_formats(normalized)})

    @app.post("/api/colors/parse")
    def parse_color_value():
        if is_rate_limited("colors"):
            return _too_many_requests()

        data = _json_object()
        if data is None:
            return _bad_json()
        color_format = str(data.get("format") or "HEX").upper()
        if color_format not in SUPPORTED_FORMATS:
            return _api_error("Неподдерживаемый формат цвета", 400)

        color = parse_color(data.get("value"), color_format)
        if color is None:
            return _api_error("Не удалось распознать цвет", 400)
        return jsonify({"success": True, "hex": color})

    @app.route("/api/export", methods=["POST"])
    def export_palette():
        try:
            if is_rate_limited("export"):
                return _too_many_requests()

            data = _json_object()
            if data is None:
                return _bad_json()
            colors = _normalize_palette_colors(data.get("colors", []))
            format_type = request.args.get("format", "json").lower()

            if not colors:
                return _api_error("Не переданы корректные цвета палитры", 400)

            if format_type not in EXPORT_FORMATS:
                return _api_error("Неподдерживаемый формат экспорта", 400)

            direction = data.get("direction") or "to right"
            name = data.get("name") or ""
            if not isinstance(direction, str) or not isinstance(name, str):
                return _api_error("Поля name и direction должны быть строками", 400)

            options = {"direction": direction}
            name = name.strip()
            if name:
                options["name"] = name

            content, filename, mimetype = export_palette_data(colors, format_type, **options)
            return send_file(
                io.BytesIO(content),
                mimetype=mimetype,
                as_attachment=True,
                download_name=filename,
            )

        except Exception:
            current_app.logger.exception("Ошибка экспорта палитры")
            return _api_error("Внутренняя ошибка сервера", 500)

    @app.get("/api/palettes")
    def list_palettes():
        palettes = Palette.query.order_by(Palette.created_at.desc(), Palette.id.desc()).all()
        return jsonify({"success": True, "palettes": [palette.to_dict() for palette in palettes]})

    @app.route("/api/palettes/save", methods=["POST"])
    def save_palette():
        try:
            if is_rate_limited("palette_write"):
                return _too_many_requests()

            data = _json_object()
            if data is None:
                return _bad_json()
            colors = _normalize_palette_colors(data.get("colors", []))
            if not colors:
                return _api_error("Палитра должна содержать корректные HEX-цвета", 400)

            # Явно переданное название из одних пробелов – ошибка
            original_name = data.get("name")
            if original_name is not None and not isinstance(original_name, str):
                return _api_error("Название палитры должно быть строкой", 400)
            if original_name and not original_name.strip():
                return _api_error("Название палитры не может быть пустым или состоять только из пробелов", 400)

            palette_name = (original_name or "").strip()
            if palette_name in DEFAULT_NAMES:
                palette_name = _next_default_name()
            elif Palette.query.filter_by(name=palette_name).first():
                return _api_error("Палитра с таким названием уже существует", 400)

            new_palette = Palette(name=palette_name, colors=colors)
            db.session.add(new_palette)
            db.session.commit()

            return jsonify({"success": True, "palette_id": new_palette.id, "name": new_palette.name})

        except Exception:
            db.session.rollback()
            current_app.logger.exception("Ошибка сохранения палитры")
            return _api_error("Внутренняя ошибка сервера", 500)

    @app.route("/api/palettes/rename/<int:palette_id>", methods=["POST"])
    def rename_palette(palette_id: int):
        """Переименовать существующую палитру."""
        try:
            if is_rate_limited("palette_write"):
                return _too_many_requests()

            data = _json_object()
            if data is None:
                return _bad_json()
            new_name = data.get("name") or ""
            if not isinstance(new_name, str):
                return _api_error("Название палитры должно быть строкой", 400)
            new_name = new_name.strip()
            if not new_name:
                return _api_error("Название палитры не может быть пустым", 400)

            palette = db.session.get(Palette, palette_id)
            if palette is None:
                return _api_error("Палитра не найдена", 404)

            existing = Palette.query.filter_by(name=new_name).first()
            if existing and existing.id != palette.id:
                return _api_error("Палитра с таким названием уже существует", 400)

            palette.name = new_name
            db.session.commit()

            return jsonify({"success": True})

        except Exception:
            db.session.rollback()
            current_app.logger.exception("Ошибка переименования палитры")
            return _api_error("Внутренняя ошибка сервера", 500)

    @app.route("/api/palettes/delete/<int:palette_id>", methods=["DELETE"])
    def delete_palette(palette_id: int):
        try:
            if is_rate_limited("palette_write"):
                return _too_many_requests()

            palette = db.session.get(Palette, palette_id)
            if palette is None:
                return _api_error("Палитра не найдена", 404)

            db.session.delete(palette)
            db.session.commit()

            return jsonify({"success": True})

        except Exception:
            db.session.rollback()
            current_app.logger.exception("Ошибка удаления палитры")
            return _api_error("Внутренняя ошибка сервера", 500)

    @app.post("/api/share")
    def share_palette():
        """Ссылка вида https://host/?palette=aabbcc-112233."""
        if is_rate_limited("share"):
            return _too_many_requests()

        data = _json_object()
        if data is None:
            return _bad_json()
        colors = _normalize_palette_colors(data.get("colors", []))
        if not colors:
            return _api_error("Не переданы корректные цвета палитры", 400)

        url = f"{request.url_root}?{PALETTE_PARAM}={encode_palette_param(colors)}"
        return jsonify({"success": True, "url": url})

    @app.get("/api/shared")
    def shared_palette():
        colors = parse_palette_param(request.args.get(PALETTE_PARAM))
        if colors is None:
            return _api_error("Ссылка не содержит корректных цветов", 400)
        return jsonify({"success": True, "colors": colors})
