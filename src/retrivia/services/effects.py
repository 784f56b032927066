"""Palette filters applied to photos at render time.

Each filter is a chain of 3x4 colour matrices (the CSS filter-effects
definitions). Every matrix is applied with ``Image.convert("RGB", matrix)``,
which rounds and clamps each channel to 0..255 between steps, so the output
only depends on the input pixels and the filter type.
"""

import math

from PIL import Image

from retrivia.domain.styles import FilterType

Matrix = tuple[float, ...]

_LUMA = (0.2126, 0.7152, 0.0722)


def _sepia(amount: float) -> Matrix:
    keep = 1 - amount
    return (
        0.393 + 0.607 * keep, 0.769 - 0.769 * keep, 0.189 - 0.189 * keep, 0.0,
        0.349 - 0.349 * keep, 0.686 + 0.314 * keep, 0.168 - 0.168 * keep, 0.0,
        0.272 - 0.272 * keep, 0.534 - 0.534 * keep, 0.131 + 0.869 * keep, 0.0,
    )  # fmt: skip


def _grayscale(amount: float) -> Matrix:
    keep = 1 - amount
    r, g, b = _LUMA
    return (
        r + (1 - r) * keep, g - g * keep, b - b * keep, 0.0,
        r - r * keep, g + (1 - g) * keep, b - b * keep, 0.0,
        r - r * keep, g - g * keep, b + (1 - b) * keep, 0.0,
    )  # fmt: skip


def _saturate(amount: float) -> Matrix:
    return (
        0.213 + 0.787 * amount, 0.715 - 0.715 * amount, 0.072 - 0.072 * amount, 0.0,
        0.213 - 0.213 * amount, 0.715 + 0.285 * amount, 0.072 - 0.072 * amount, 0.0,
        0.213 - 0.213 * amount, 0.715 - 0.715 * amount, 0.072 + 0.928 * amount, 0.0,
    )  # fmt: skip


def _hue_rotate(degrees: float) -> Matrix:
    cos = math.cos(math.radians(degrees))
    sin = math.sin(math.radians(degrees))
    return (
        0.213 + cos * 0.787 - sin * 0.213,
        0.715 - cos * 0.715 - sin * 0.715,
        0.072 - cos * 0.072 + sin * 0.928,
        0.0,
        0.213 - cos * 0.213 + sin * 0.143,
        0.715 + cos * 0.285 + sin * 0.140,
        0.072 - cos * 0.072 - sin * 0.283,
        0.0,
        0.213 - cos * 0.213 - sin * 0.787,
        0.715 - cos * 0.715 + sin * 0.715,
        0.072 + cos * 0.928 + sin * 0.072,
        0.0,
    )


def _brightness(amount: float) -> Matrix:
    return (
        amount, 0.0, 0.0, 0.0,
        0.0, amount, 0.0, 0.0,
        0.0, 0.0, amount, 0.0,
    )  # fmt: skip


def _contrast(amount: float) -> Matrix:
    offset = (0.5 - 0.5 * amount) * 255
    return (
        amount, 0.0, 0.0, offset,
        0.0, amount, 0.0, offset,
        0.0, 0.0, amount, offset,
    )  # fmt: skip


FILTER_CHAINS: dict[FilterType, tuple[Matrix, ...]] = {
    FilterType.none: (),
    FilterType.sepia: (_sepia(0.8),),
    FilterType.grayscale: (_grayscale(1.0),),
    FilterType.vintage_warm: (
        _sepia(0.5),
        _contrast(1.1),
        _brightness(0.9),
        _saturate(0.8),
    ),
    FilterType.vintage_cool: (_sepia(0.2), _hue_rotate(340), _saturate(1.3)),
}


def apply_filter(image: Image.Image, filter_type: FilterType) -> Image.Image:
    """Return a filtered RGB copy of the image; ``none`` is the identity."""
    result = image.convert("RGB")
    for matrix in FILTER_CHAINS[FilterType(filter_type)]:
        result = result.convert("RGB", matrix)
    return result
