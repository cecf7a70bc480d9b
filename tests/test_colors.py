"""Тесты преобразования цветов между форматами."""

import pytest

from utils.colors import (
    convert_to_all_formats,
    hex_to_rgb,
    hsb_to_rgb,
    hsl_to_rgb,
    lab_to_rgb,
    normalize_hex,
    parse_color,
    rgb_to_hex,
)


def test_rgb_to_hex_is_lowercase_and_zero_padded():
    assert rgb_to_hex((255, 0, 128)) == "#ff0080"
    assert rgb_to_hex((1, 2, 3)) == "#010203"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("#AABBCC", "#aabbcc"),
        ("aabbcc", "#aabbcc"),
        ("#abc", "#aabbcc"),
        ("  #123456 ", "#123456"),
        ("#12345", None),
        ("zzzzzz", None),
        (None, None),
    ],
)
def test_normalize_hex(value, expected):
    assert normalize_hex(value) == expected


def test_hex_to_rgb():
    assert hex_to_rgb("#123456") == (18, 52, 86)
    with pytest.raises(ValueError):
        hex_to_rgb("not-a-color")


def test_all_formats_for_pure_red():
    formats = convert_to_all_formats("#FF0000")

    assert formats["hex"] == "#ff0000"
    assert formats["rgb"] == {"r": 255, "g": 0, "b": 0}
    assert formats["hsl"] == {"h": 0, "s": 100, "l": 50}
    assert formats["hsb"] == {"h": 0, "s": 100, "b": 100}
    assert formats["cmyk"] == {"c": 0, "m": 100, "y": 100, "k": 0}
    assert formats["lab"] == {"l": 53, "a": 80, "b": 67}


def test_all_formats_for_black_and_white():
    black = convert_to_all_formats("#000000")
    white = convert_to_all_formats("#ffffff")

    assert black["cmyk"] == {"c": 0, "m": 0, "y": 0, "k": 100}
    assert black["hsl"] == {"h": 0, "s": 0, "l": 0}
    assert white["lab"] == {"l": 100, "a": 0, "b": 0}
    assert white["hsb"] == {"h": 0, "s": 0, "b": 100}


def test_hue_of_blue():
    assert convert_to_all_formats("#0000ff")["hsl"]["h"] == 240


@pytest.mark.parametrize(
    "value, color_format, expected",
    [
        ("#123456", "HEX", "#123456"),
        ("rgb(18, 52, 86)", "RGB", "#123456"),
        ("0, 100%, 50%", "HSL", "#ff0000"),
        ("0, 100, 100", "HSB", "#ff0000"),
        ("0%, 100%, 100%, 0%", "CMYK", "#ff0000"),
        ("0 0 0 100", "cmyk", "#000000"),
    ],
)
def test_parse_color(value, color_format, expected):
    assert parse_color(value, color_format) == expected


def test_parse_lab_lands_near_source_color():
    r, g, b = hex_to_rgb(parse_color("53, 80, 67", "LAB"))

    assert abs(r - 255) <= 3
    assert g <= 3
    assert b <= 3


@pytest.mark.parametrize(
    "value, color_format",
    [
        ("garbage", "RGB"),
        ("300, 0, 0", "RGB"),
        ("#12", "HEX"),
        ("1, 2, 3", "XYZ"),
    ],
)
def test_parse_color_rejects_bad_input(value, color_format):
    assert parse_color(value, color_format) is None


def test_hue_wraps_around_full_turn():
    assert hsl_to_rgb(360, 1.0, 0.5) == (255, 0, 0)
    assert hsb_to_rgb(480, 100, 100) == (0, 255, 0)


def test_out_of_gamut_lab_is_clipped_to_srgb():
    assert lab_to_rgb(100, 0, 0) == (255, 255, 255)

    rgb = lab_to_rgb(50, 200, -200)
    assert all(0 <= channel <= 255 for channel in rgb)
