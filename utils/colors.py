"""
Программа: «Swatchbook» – веб-сервис для извлечения и экспорта цветовых палитр.
Модуль: utils/colors.py – представления цвета и преобразования между ними.

Назначение модуля:
- Перевод между HEX и RGB, нормализация HEX-строк.
- Расчёт HSL, HSB, CMYK и CIE Lab для выбранного цвета.
- Разбор цвета, введённого пользователем в одном из поддерживаемых форматов.
"""

import colorsys
import math
import re

from coloraide import Color

HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")

# Lab с белой точкой D65, как в браузерных библиотеках цвета
LAB_SPACE = "lab-d65"


def _round(value: float) -> int:
    """Округление «половина вверх», как в браузерном Math.round."""
    return int(math.floor(value + 0.5))


def rgb_to_hex(rgb) -> str:
    """Преобразует RGB-тройку в строку вида #rrggbb (нижний регистр)."""
    r, g, b = (_round(channel) for channel in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def normalize_hex(value: str | None) -> str | None:
    """Приводит #rgb / rrggbb / #RRGGBB к виду #rrggbb; None, если строка не цвет."""
    if not isinstance(value, str):
        return None
    match = HEX_RE.match(value.strip())
    if not match:
        return None
    digits = match.group(1).lower()
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return f"#{digits}"


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    """Преобразует HEX-цвет в RGB-кортеж."""
    normalized = normalize_hex(color)
    if normalized is None:
        raise ValueError(f"Некорректный HEX-цвет: {color!r}")
    return (
        int(normalized[1:3], 16),
        int(normalized[3:5], 16),
        int(normalized[5:7], 16),
    )


def rgb_to_hsl(r: int, g: int, b: int) -> tuple[float, float, float]:
    """HSL: тон в градусах, насыщенность и светлота в долях 0–1."""
    h, l, s = colorsys.rgb_to_hls(r / 255, g / 255, b / 255)
    return h * 360, s, l


def hsl_to_rgb(h: float, s: float, l: float) -> tuple[int, int, int]:
    """Обратное преобразование; s и l – в долях 0–1."""
    r, g, b = colorsys.hls_to_rgb((h % 360) / 360, l, s)
    return _round(r * 255), _round(g * 255), _round(b * 255)


def rgb_to_hsb(r: int, g: int, b: int) -> tuple[int, int, int]:
    h, s, v = colorsys.rgb_to_hsv(r / 255, g / 255, b / 255)
    return _round(h * 360), _round(s * 100), _round(v * 100)


def hsb_to_rgb(h: float, s: float, v: float) -> tuple[int, int, int]:
    """s и v задаются в процентах, как их вводит пользователь."""
    r, g, b = colorsys.hsv_to_rgb((h % 360) / 360, s / 100, v / 100)
    return _round(r * 255), _round(g * 255), _round(b * 255)


def rgb_to_cmyk(r: int, g: int, b: int) -> tuple[int, int, int, int]:
    rn, gn, bn = r / 255, g / 255, b / 255
    k = 1 - max(rn, gn, bn)
    if k == 1:
        return 0, 0, 0, 100
    c = (1 - rn - k) / (1 - k)
    m = (1 - gn - k) / (1 - k)
    y = (1 - bn - k) / (1 - k)
    return _round(c * 100), _round(m * 100), _round(y * 100), _round(k * 100)


def cmyk_to_rgb(c: float, m: float, y: float, k: float) -> tuple[int, int, int]:
    kn = 1 - k / 100
    return (
        _round(255 * (1 - c / 100) * kn),
        _round(255 * (1 - m / 100) * kn),
        _round(255 * (1 - y / 100) * kn),
    )


def rgb_to_lab(r: int, g: int, b: int) -> tuple[float, float, float]:
    """CIE Lab (D65) из sRGB."""
    lab = Color("srgb", [r / 255, g / 255, b / 255]).convert(LAB_SPACE)
    lightness, a, b_axis = lab.coords()
    return lightness, a, b_axis


def lab_to_rgb(l: float, a: float, b: float) -> tuple[int, int, int]:
    # Цвета вне охвата sRGB обрезаются по каналам
    srgb = Color(LAB_SPACE, [l, a, b]).convert("srgb").clip()
    red, green, blue = srgb.coords()
    return _round(red * 255), _round(green * 255), _round(blue * 255)


def convert_to_all_formats(color: str) -> dict:
    """Возвращает цвет во всех поддерживаемых представлениях (целые значения)."""
    r, g, b = hex_to_rgb(color)
    h, s, l = rgb_to_hsl(r, g, b)
    hsb_h, hsb_s, hsb_b = rgb_to_hsb(r, g, b)
    c, m, y, k = rgb_to_cmyk(r, g, b)
    lab_l, lab_a, lab_b = rgb_to_lab(r, g, b)
    return {
        "hex": rgb_to_hex((r, g, b)),
        "rgb": {"r": r, "g": g, "b": b},
        "hsl": {"h": _round(h), "s": _round(s * 100), "l": _round(l * 100)},
        "hsb": {"h": hsb_h, "s": hsb_s, "b": hsb_b},
        "cmyk": {"c": c, "m": m, "y": y, "k": k},
        "lab": {"l": _round(lab_l), "a": _round(lab_a), "b": _round(lab_b)},
    }


_NUMBER_PATTERNS = {
    "RGB": re.compile(r"(\d+),?\s*(\d+),?\s*(\d+)"),
    "HSL": re.compile(r"(\d+),?\s*(\d+)%?,?\s*(\d+)%?"),
    "HSB": re.compile(r"(\d+),?\s*(\d+)%?,?\s*(\d+)%?"),
    "CMYK": re.compile(r"(\d+)%?,?\s*(\d+)%?,?\s*(\d+)%?,?\s*(\d+)%?"),
    "LAB": re.compile(r"(-?\d+),?\s*(-?\d+),?\s*(-?\d+)"),
}

SUPPORTED_FORMATS = ("HEX", *_NUMBER_PATTERNS)


def parse_color(value: str, color_format: str = "HEX") -> str | None:
    """Разбирает строку в заданном формате и возвращает #rrggbb или None."""
    if not isinstance(value, str):
        return None

    color_format = (color_format or "HEX").upper()
    if color_format == "HEX":
        return normalize_hex(value)

    pattern = _NUMBER_PATTERNS.get(color_format)
    if pattern is None:
        return None
    match = pattern.search(value)
    if not match:
        return None
    numbers = [int(group) for group in match.groups()]

    if color_format == "RGB":
        if any(n > 255 for n in numbers):
            return None
        rgb = tuple(numbers)
    elif color_format == "HSL":
        h, s, l = numbers
        rgb = hsl_to_rgb(h, min(s, 100) / 100, min(l, 100) / 100)
    elif color_format == "HSB":
        rgb = hsb_to_rgb(*(min(n, limit) for n, limit in zip(numbers, (360, 100, 100))))
    elif color_format == "CMYK":
        rgb = cmyk_to_rgb(*(min(n, 100) for n in numbers))
    else:
        rgb = lab_to_rgb(*numbers)

    return rgb_to_hex(rgb)
