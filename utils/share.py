"""
Модуль: `utils/share.py`.
Назначение: Кодирование палитры в параметр ссылки и обратный разбор.
"""

from utils.colors import normalize_hex

PALETTE_PARAM = "palette"


def encode_palette_param(colors: list[str]) -> str:
    """Выполняет кодирование ['#aabbcc', '#112233'] -> 'aabbcc-112233'."""
    return "-".join(color.lstrip("#").lower() for color in colors)


def parse_palette_param(value: str | None) -> list[str] | None:
    """Возвращает корректные цвета из параметра или None, если таких нет."""
    if not value:
        return None

    colors = []
    for chunk in value.split("-"):
        chunk = chunk.strip()
        # Сокращённая форма #rgb в ссылках не используется
        if len(chunk) != 6:
            continue
        color = normalize_hex(chunk)
        if color is not None:
            colors.append(color)
    return colors or None
