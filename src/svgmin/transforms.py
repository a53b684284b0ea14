# src/svgmin/transforms.py
"""
Transform lists: parsing, affine matrices and decimal-exact arithmetic.

Matrices are 2x3 affine matrices stored as ``[a, b, c, d, e, f]``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import List, Optional

MAX_EXACT_DIGITS = 12

TRANSFORM_NAMES = ('matrix', 'translate', 'scale', 'rotate', 'skewX', 'skewY')

_TRANSFORM_TYPES = re.compile(r'matrix|translate|scale|rotate|skewX|skewY')
_TRANSFORM_SPLIT = re.compile(
    r'\s*(matrix|translate|scale|rotate|skewX|skewY)\s*\(\s*(.+?)\s*\)[\s,]*'
)
_NUMERIC_VALUES = re.compile(r'[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?')


@dataclass
class TransformItem:
    name: str
    data: List[float] = field(default_factory=list)

    def copy(self):
        return TransformItem(self.name, list(self.data))


def transform2js(transform_string) -> List[TransformItem]:
    """Parse a transform attribute value into a list of transform items.

    An unparseable string yields an empty list.
    """
    transforms = []
    current = None
    for item in _TRANSFORM_SPLIT.split(transform_string):
        if not item:
            continue
        if _TRANSFORM_TYPES.fullmatch(item):
            current = TransformItem(item)
            transforms.append(current)
        elif current is not None:
            current.data.extend(float(n) for n in _NUMERIC_VALUES.findall(item))
    if current is None or not current.data:
        return []
    return transforms


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

def to_fixed(n, digits):
    """Round half up to ``digits`` decimal places."""
    power = 10 ** digits
    return math.floor(n * power + 0.5) / power


def get_number_of_decimal_digits(n):
    """Return the count of decimal places needed to write ``n`` exactly."""
    if float(n).is_integer():
        return 0
    text = repr(float(n))
    if 'e' in text:
        mantissa, exponent = text.split('e')
        return max(len(mantissa) - ('.' in mantissa) - int(exponent) - 1, 0)
    return len(text) - text.index('.') - 1


def exact_multiply(n, m) -> Optional[float]:
    """Multiply without binary noise, or return None if too many digits are needed."""
    digits = get_number_of_decimal_digits(n) + get_number_of_decimal_digits(m)
    if digits > MAX_EXACT_DIGITS:
        return None
    return to_fixed(n * m, digits)


def exact_add(n, m) -> Optional[float]:
    """Add without binary noise, or return None if too many digits are needed."""
    digits = max(get_number_of_decimal_digits(n), get_number_of_decimal_digits(m))
    if digits > MAX_EXACT_DIGITS:
        return None
    return to_fixed(n + m, digits)


def _multiply(n, m):
    product = exact_multiply(n, m)
    return n * m if product is None else product


def _add(*terms):
    total = terms[0]
    for term in terms[1:]:
        exact = exact_add(total, term)
        total = total + term if exact is None else exact
    return total


# ---------------------------------------------------------------------------
# Matrices
# ---------------------------------------------------------------------------

def _radians(degrees):
    return degrees * math.pi / 180


def transform_to_matrix(transform: TransformItem) -> List[float]:
    """Return the affine matrix of a single transform item."""
    data = transform.data
    if transform.name == 'matrix':
        return list(data)
    if transform.name == 'translate':
        return [1, 0, 0, 1, data[0], data[1] if len(data) > 1 else 0]
    if transform.name == 'scale':
        return [data[0], 0, 0, data[1] if len(data) > 1 else data[0], 0, 0]
    if transform.name == 'rotate':
        cos = math.cos(_radians(data[0]))
        sin = math.sin(_radians(data[0]))
        cx = data[1] if len(data) > 1 else 0
        cy = data[2] if len(data) > 2 else 0
        return [cos, sin, -sin, cos, (1 - cos) * cx + sin * cy, (1 - cos) * cy - sin * cx]
    if transform.name == 'skewX':
        return [1, 0, math.tan(_radians(data[0])), 1, 0, 0]
    if transform.name == 'skewY':
        return [1, math.tan(_radians(data[0])), 0, 1, 0, 0]
    raise ValueError(f"Unknown transform {transform.name!r}")


def multiply_transform_matrices(a, b) -> List[float]:
    """Return the product ``a * b`` of two affine matrices."""
    return [
        _add(_multiply(a[0], b[0]), _multiply(a[2], b[1])),
        _add(_multiply(a[1], b[0]), _multiply(a[3], b[1])),
        _add(_multiply(a[0], b[2]), _multiply(a[2], b[3])),
        _add(_multiply(a[1], b[2]), _multiply(a[3], b[3])),
        _add(_multiply(a[0], b[4]), _multiply(a[2], b[5]), a[4]),
        _add(_multiply(a[1], b[4]), _multiply(a[3], b[5]), a[5]),
    ]


def _exact_sum_of_products(pairs, offset=0):
    total = offset
    for n, m in pairs:
        product = exact_multiply(n, m)
        if product is None:
            return None
        total = exact_add(total, product)
        if total is None:
            return None
    return total


def exact_multiply_transform_matrices(a, b) -> Optional[List[float]]:
    """Return ``a * b``, or None if any step needs more than MAX_EXACT_DIGITS."""
    entries = [
        _exact_sum_of_products([(a[0], b[0]), (a[2], b[1])]),
        _exact_sum_of_products([(a[1], b[0]), (a[3], b[1])]),
        _exact_sum_of_products([(a[0], b[2]), (a[2], b[3])]),
        _exact_sum_of_products([(a[1], b[2]), (a[3], b[3])]),
        _exact_sum_of_products([(a[0], b[4]), (a[2], b[5])], a[4]),
        _exact_sum_of_products([(a[1], b[4]), (a[3], b[5])], a[5]),
    ]
    return None if any(n is None for n in entries) else entries


IDENTITY_MATRIX = (1, 0, 0, 1, 0, 0)


def transforms_multiply(transforms) -> TransformItem:
    """Compose a transform list left to right into a single matrix item."""
    matrix = list(IDENTITY_MATRIX)
    for i, transform in enumerate(transforms):
        item_matrix = transform_to_matrix(transform)
        matrix = item_matrix if i == 0 else multiply_transform_matrices(matrix, item_matrix)
    return TransformItem('matrix', [float(n) for n in matrix])


def merge_translate_and_rotate(tx, ty, degrees) -> Optional[TransformItem]:
    """Rewrite ``translate(tx ty) rotate(degrees)`` as ``rotate(degrees cx cy)``.

    Returns None when the rotation is a multiple of 360 degrees, since no
    center can then absorb a translation.
    """
    cos = math.cos(_radians(degrees))
    sin = math.sin(_radians(degrees))
    det = 2 * (1 - cos)
    if det == 0:
        return None
    cx = ((1 - cos) * tx - sin * ty) / det
    cy = (sin * tx + (1 - cos) * ty) / det
    return TransformItem('rotate', [degrees, cx, cy])
