# src/svgmin/decompose.py
"""
Matrix decomposition and adaptive rounding.

``decompose()`` rewrites one affine matrix as short sequences of primitive
transforms. Every sequence it returns has been rounded by the digit search
in ``adaptive_round()``, so multiplying it back and rounding the product at
the same precision gives exactly the rounded target matrix.
"""

from __future__ import annotations

import math
from typing import List, Optional

from .transforms import (
    MAX_EXACT_DIGITS,
    TransformItem,
    get_number_of_decimal_digits,
    merge_translate_and_rotate,
    to_fixed,
    transforms_multiply,
)

MAX_GROW_ROUNDS = 10


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------

def round_transform(transform: TransformItem, float_precision, matrix_precision) -> TransformItem:
    """Round a transform item.

    The linear part of a matrix and scale factors are multiplied into other
    values, so they keep ``matrix_precision`` digits.
    """
    if transform.name == 'matrix':
        data = [
            to_fixed(n, matrix_precision if i < 4 else float_precision)
            for i, n in enumerate(transform.data)
        ]
    elif transform.name == 'scale':
        data = [to_fixed(n, matrix_precision) for n in transform.data]
    else:
        data = [to_fixed(n, float_precision) for n in transform.data]
    return TransformItem(transform.name, data)


def rounded_matches_target(rounded, target_matrix, float_precision, matrix_precision):
    multiplied = round_transform(transforms_multiply(rounded), float_precision, matrix_precision)
    return all(m == t for m, t in zip(multiplied.data, target_matrix.data))


def add_a_digit_to_number(rounded, original):
    """Return ``original`` rounded to the first precision finer than ``rounded``'s
    that changes the value, or ``rounded`` if none does within the digit limit."""
    r = rounded
    n = get_number_of_decimal_digits(rounded) + 1
    while r == rounded and r != original and n <= MAX_EXACT_DIGITS:
        r = to_fixed(original, n)
        n += 1
    return r


def _add_a_digit_to_all_transforms(rounded, original):
    any_changed = False
    for rounded_item, original_item in zip(rounded, original):
        for i, (r, o) in enumerate(zip(rounded_item.data, original_item.data)):
            if r != o:
                rounded_item.data[i] = add_a_digit_to_number(r, o)
                any_changed = True
    return any_changed


def _remove_a_digit(n):
    if float(n).is_integer():
        return n
    return to_fixed(n, get_number_of_decimal_digits(n) - 1)


def _remove_a_digit_from_all_transforms(rounded, target_matrix, float_precision, matrix_precision):
    changed = False
    for item in rounded:
        for i, value in enumerate(item.data):
            trial = _remove_a_digit(value)
            if trial == value:
                continue
            item.data[i] = trial
            if rounded_matches_target(rounded, target_matrix, float_precision, matrix_precision):
                changed = True
            else:
                item.data[i] = value
    return changed


def _search_rounding(transforms, target_matrix, float_precision, matrix_precision,
                     compare_float_precision, compare_matrix_precision):
    rounded = [round_transform(t, float_precision, matrix_precision) for t in transforms]

    rounds = 0
    while not rounded_matches_target(
            rounded, target_matrix, compare_float_precision, compare_matrix_precision):
        if not _add_a_digit_to_all_transforms(rounded, transforms):
            return None
        rounds += 1
        if rounds > MAX_GROW_ROUNDS:
            return None

    while _remove_a_digit_from_all_transforms(
            rounded, target_matrix, compare_float_precision, compare_matrix_precision):
        pass

    return rounded


def adaptive_round(transforms, target_matrix, float_precision, matrix_precision
                   ) -> Optional[List[TransformItem]]:
    """Round ``transforms`` as coarsely as possible while their product, rounded
    at the given precision, still equals ``target_matrix``.

    ``transforms`` is left untouched. Returns None if no rounding matches.
    """
    return _search_rounding(transforms, target_matrix, float_precision, matrix_precision,
                            float_precision, matrix_precision)


def _target_precision(values, nominal):
    digits = max((get_number_of_decimal_digits(n) for n in values), default=0)
    return min(nominal, digits) if digits > 0 else nominal


def round_to_matrix(transforms, target_matrix, float_precision, matrix_precision
                    ) -> Optional[List[TransformItem]]:
    """Like ``adaptive_round()``, for a target that may be written with fewer
    digits than the nominal precision.

    Products are compared at the precision the target actually shows: the
    linear part and the translation are inspected separately.
    """
    return _search_rounding(
        transforms, target_matrix, float_precision, matrix_precision,
        _target_precision(target_matrix.data[4:], float_precision),
        _target_precision(target_matrix.data[:4], matrix_precision),
    )


# ---------------------------------------------------------------------------
# Decomposition
# ---------------------------------------------------------------------------

def find_rotation(cos, sin, cos2, float_precision) -> Optional[float]:
    """Return the rotation angle in degrees for a cosine/sine pair.

    ``cos2`` is a second estimate of the cosine. Returns None if the two
    estimates disagree or the values are not a cosine and sine.
    """
    if to_fixed(cos - cos2, float_precision) != 0:
        return None
    if not (-1 <= cos <= 1 and -1 <= sin <= 1):
        return None

    # acos() covers [0, pi] and asin() covers [-pi/2, pi/2]; move both into
    # the quadrant given by the signs, then average them.
    acos = math.acos(cos)
    asin = math.asin(sin)
    if sin < 0:
        acos = -acos
        if cos < 0:
            asin = -math.pi - asin
    elif cos < 0:
        asin = math.pi - asin

    return (acos + asin) * 90 / math.pi


def _opposite_signs(cos, cos2, float_precision):
    # Near a quarter turn both cosines are about 0 and need no flip.
    return (to_fixed(cos - cos2, float_precision) != 0
            and to_fixed(cos + cos2, float_precision) == 0)


def get_rotate_scale(data, float_precision) -> Optional[List[TransformItem]]:
    """Factor the linear part ``[a, b, c, d]`` as ``rotate() scale()``."""
    a, b, c, d = data[:4]
    sx = math.hypot(a, b)
    sy = math.hypot(c, d)
    if sx == 0 or sy == 0:
        return None
    cos = a / sx
    sin = b / sx
    cos2 = d / sy

    if _opposite_signs(cos, cos2, float_precision):
        # Scale factors of opposite sign.
        sx = -sx
        cos = -cos
        sin = -sin

    degrees = find_rotation(cos, sin, cos2, float_precision)
    if degrees is None:
        return None
    return [TransformItem('rotate', [degrees, 0, 0]), TransformItem('scale', [sx, sy])]


def _round_and_find_variants(result, target_matrix, float_precision, matrix_precision):
    variants = []
    rounded = adaptive_round(result, target_matrix, float_precision, matrix_precision)
    if rounded:
        variants.append(rounded)

    translate = result[0] if result and result[0].name == 'translate' else None
    degrees = result[1].data[0] if len(result) > 1 and result[1].name == 'rotate' else 0

    if translate is not None and degrees % 360 != 0:
        merged = merge_translate_and_rotate(translate.data[0], translate.data[1], degrees)
        if merged is not None:
            rounded = adaptive_round([merged] + result[2:], target_matrix,
                                     float_precision, matrix_precision)
            if rounded:
                variants.append(rounded)

    return variants


def _with_translate(translate, transforms):
    return ([translate] if translate is not None else []) + transforms


def decompose_rotate_scale(translate, original_matrix, rounded_matrix, float_precision, matrix_precision):
    rotate_scale = get_rotate_scale(original_matrix.data, float_precision)
    if rotate_scale is None:
        return []
    return _round_and_find_variants(
        _with_translate(translate, rotate_scale), rounded_matrix, float_precision, matrix_precision)


def decompose_scale_rotate(translate, original_matrix, rounded_matrix, float_precision, matrix_precision):
    a, b, c, d = original_matrix.data[:4]
    sx = math.hypot(a, c)
    sy = math.hypot(b, d)
    if sx == 0 or sy == 0:
        return []
    cos = a / sx
    sin = b / sy
    cos2 = d / sy

    if _opposite_signs(cos, cos2, float_precision):
        sx = -sx
        cos = -cos

    degrees = find_rotation(cos, sin, cos2, float_precision)
    if degrees is None:
        return []

    result = _with_translate(translate, [
        TransformItem('scale', [sx, sy]),
        TransformItem('rotate', [degrees, 0, 0]),
    ])
    rounded = adaptive_round(result, rounded_matrix, float_precision, matrix_precision)
    return [rounded] if rounded else []


def decompose_rotate_skew(translate, original_matrix, rounded_matrix, float_precision, matrix_precision):
    def get_skew(name, tan_a, tan_b):
        if to_fixed(tan_a - tan_b, float_precision) != 0:
            return None
        degrees = (math.atan(tan_a) + math.atan(tan_b)) * 90 / math.pi
        return TransformItem(name, [degrees])

    a, b, c, d = original_matrix.data[:4]
    skew = None
    rotate_scale = None

    if a != 0 and b != 0:
        skew = get_skew('skewX', (c + b) / a, (d - a) / b)
        # What is left is a rotation, possibly with a small scale.
        rotate_scale = get_rotate_scale([a, b, -b, a], float_precision)
    if skew is None and c != 0 and d != 0:
        skew = get_skew('skewY', (b + c) / d, (a - d) / c)
        rotate_scale = get_rotate_scale([d, -c, c, d], float_precision)

    if skew is None or rotate_scale is None:
        return []
    return _round_and_find_variants(
        _with_translate(translate, rotate_scale + [skew]), rounded_matrix, float_precision, matrix_precision)


def decompose_scale_skew(translate, original_matrix, rounded_matrix, float_precision, matrix_precision):
    a, b, c, d = original_matrix.data[:4]
    if rounded_matrix.data[1] == 0 and a != 0 and c != 0 and d != 0:
        skew = TransformItem('skewX', [math.atan(c / a) * 180 / math.pi])
    elif rounded_matrix.data[2] == 0 and a != 0 and b != 0 and d != 0:
        skew = TransformItem('skewY', [math.atan(b / d) * 180 / math.pi])
    else:
        return []
    result = _with_translate(translate, [TransformItem('scale', [a, d]), skew])
    rounded = adaptive_round(result, rounded_matrix, float_precision, matrix_precision)
    return [rounded] if rounded else []


DECOMPOSITIONS = (
    decompose_rotate_scale,
    decompose_scale_rotate,
    decompose_rotate_skew,
    decompose_scale_skew,
)


def decompose(original_matrix, rounded_matrix, float_precision, matrix_precision
              ) -> List[List[TransformItem]]:
    """Return every primitive-transform rewrite of ``original_matrix`` that
    rounds back to ``rounded_matrix``.
    """
    e, f = original_matrix.data[4:6]
    translate = TransformItem('translate', [e, f]) if e != 0 or f != 0 else None

    decompositions = []
    for decomposition in DECOMPOSITIONS:
        decompositions.extend(
            decomposition(translate, original_matrix, rounded_matrix, float_precision, matrix_precision))
    return decompositions
