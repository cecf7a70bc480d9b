"""
Программа: «Swatchbook» – веб-сервис для извлечения и экспорта цветовых палитр.
Модуль: utils/export_handler.py – формирование данных для экспорта палитр.

Назначение модуля:
- Подготовка содержимого палитры в форматах JSON, CSS, GPL, CSV, ASE, ACO и PNG.
- Возврат бинарных данных, имени файла и MIME-типа для отправки пользователю.
"""

import io
import json
import struct
from datetime import datetime
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw

from utils.colors import hex_to_rgb

DEFAULT_PALETTE_NAME = "Цветовая палитра"
PNG_WIDTH = 1920
PNG_HEIGHT = 1080

ExportResult = Tuple[Optional[bytes], Optional[str], Optional[str]]


def _export_json(colors: List[str], name: str) -> str:
    return json.dumps(
        {
            "name": name,
            "colors": colors,
            "generated": datetime.now().isoformat(),
        },
        ensure_ascii=False,
        indent=2,
    )


def _export_css(colors: List[str]) -> str:
    """CSS-переменные --color-1 … --color-N внутри :root."""
    variables = "\n".join(f"  --color-{index}: {color};" for index, color in enumerate(colors, start=1))
    return f":root {{\n{variables}\n}}"


def _export_gradient(colors: List[str], direction: str) -> str:
    return f"background: linear-gradient({direction}, {', '.join(colors)});"


def _export_gpl(colors: List[str], name: str) -> str:
    lines = ["GIMP Palette", f"Name: {name}", f"Columns: {min(len(colors), 5)}", "#"]
    for color in colors:
        r, g, b = hex_to_rgb(color)
        lines.append(f"{r:3d} {g:3d} {b:3d} {color.lstrip('#').upper()}")
    return "\n".join(lines) + "\n"


def _export_csv(colors: List[str]) -> str:
    rows = ["hex,r,g,b"]
    for color in colors:
        r, g, b = hex_to_rgb(color)
        rows.append(f"{color},{r},{g},{b}")
    return "\n".join(rows) + "\n"


def _export_ase(colors: List[str]) -> bytes:
    """Adobe Swatch Exchange 1.0: по одному блоку RGB на цвет."""
    content = b"ASEF" + struct.pack(">HH", 1, 0) + struct.pack(">I", len(colors))
    for index, color in enumerate(colors, start=1):
        r, g, b = (channel / 255.0 for channel in hex_to_rgb(color))
        # Имя – UTF-16BE с завершающим нулём, длина в символах с учётом нуля
        name_bytes = f"Цвет {index}".encode("utf-16-be") + b"\x00\x00"
        block = struct.pack(">H", len(name_bytes) // 2) + name_bytes
        block += b"RGB " + struct.pack(">fff", r, g, b)
        block += struct.pack(">H", 2)  # тип цвета: normal
        content += struct.pack(">HI", 0x0001, len(block)) + block
    return content


def _export_aco(colors: List[str]) -> bytes:
    """Палитра Photoshop, версия 1 (каналы 16-битные)."""
    content = struct.pack(">HH", 1, len(colors))
    for color in colors:
        r, g, b = hex_to_rgb(color)
        content += struct.pack(">HHHHH", 0, r * 257, g * 257, b * 257, 0)
    return content


def _render_palette_png(colors: List[str], width: int = PNG_WIDTH, height: int = PNG_HEIGHT) -> bytes:
    """Рендерит PNG из вертикальных полос цветов на всю высоту."""
    image = Image.new("RGB", (width, height))
    draw = ImageDraw.Draw(image)
    column_width = width / len(colors)

    for index, color in enumerate(colors):
        x1 = round(index * column_width)
        x2 = round((index + 1) * column_width) - 1
        draw.rectangle((x1, 0, x2, height - 1), fill=hex_to_rgb(color))

    buffer = io.BytesIO()
    image.save(buffer, format="PNG", optimize=True)
    return buffer.getvalue()


EXPORT_FORMATS = ("json", "css", "gradient", "gpl", "csv", "ase", "aco", "png")


def export_palette_data(
    colors: List[str],
    format_type: str = "json",
    name: str = DEFAULT_PALETTE_NAME,
    direction: str = "to right",
    width: int = PNG_WIDTH,
    height: int = PNG_HEIGHT,
) -> ExportResult:
    """Генерирует данные для экспорта палитры в различных форматах.

    Возвращает кортеж (content, filename, mimetype), где:
    - content — содержимое файла (bytes),
    - filename — имя файла для скачивания,
    - mimetype — MIME-тип ответа.
    Для неизвестного формата или пустой палитры возвращается (None, None, None).
    """
    if not colors:
        return None, None, None

    if format_type == "json":
        text, filename, mimetype = _export_json(colors, name), "palette.json", "application/json"
    elif format_type == "css":
        text, filename, mimetype = _export_css(colors), "palette.css", "text/css"
    elif format_type == "gradient":
        text, filename, mimetype = _export_gradient(colors, direction), "gradient.css", "text/css"
    elif format_type == "gpl":
        text, filename, mimetype = _export_gpl(colors, name), "palette.gpl", "text/plain"
    elif format_type == "csv":
        text, filename, mimetype = _export_csv(colors), "palette.csv", "text/csv"
    elif format_type == "ase":
        return _export_ase(colors), "palette.ase", "application/octet-stream"
    elif format_type == "aco":
        return _export_aco(colors), "palette.aco", "application/octet-stream"
    elif format_type == "png":
        return _render_palette_png(colors, width, height), "palette.png", "image/png"
    else:
        return None, None, None

    return text.encode("utf-8"), filename, mimetype
