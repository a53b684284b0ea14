# src/svgmin/minify_transforms.py
"""
Make transform expressions as short as possible.

``minify_transforms()`` builds several equivalent rewrites of a transform
list and keeps the shortest one whose product, rounded at the configured
precision, equals the rounded product of the input.
"""

from __future__ import annotations

import re
from collections import namedtuple
from typing import Any, Dict, List, Optional

import numpy as np

from .decompose import adaptive_round, decompose, round_transform, rounded_matches_target
from .transforms import (
    TransformItem,
    exact_add,
    exact_multiply,
    exact_multiply_transform_matrices,
    to_fixed,
    transform2js,
    transforms_multiply,
)

DEFAULT_PARAMS = dict(
    float_precision=3,
    matrix_precision=None,  # float_precision + 2
    round09=6,
    round_to_zero=None,
)

MAX_SETTLE_ROUNDS = 5

RoundingInfo = namedtuple('RoundingInfo', ['round09', 'round_to_zero'])

_ARITY = {
    'matrix': (6,),
    'translate': (1, 2),
    'scale': (1, 2),
    'rotate': (1, 3),
    'skewX': (1,),
    'skewY': (1,),
}


def resolve_params(params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    cfg = DEFAULT_PARAMS.copy()
    cfg.update({k: v for k, v in (params or {}).items() if k in DEFAULT_PARAMS})
    if cfg['matrix_precision'] is None:
        cfg['matrix_precision'] = cfg['float_precision'] + 2
    return cfg


def get_rounding_info(params) -> RoundingInfo:
    return RoundingInfo(params.get('round09'), params.get('round_to_zero'))


def round09(n, rounding_info: RoundingInfo):
    """Snap ``n`` where its decimals hold a run of 0s or 9s.

    Runs count only after the first significant digit, so 1e-7 is kept while
    1.2999999 becomes 1.3. Magnitudes below ``round_to_zero`` become 0.
    """
    if rounding_info.round_to_zero and abs(n) < rounding_info.round_to_zero:
        return 0
    if not rounding_info.round09:
        return n

    text = np.format_float_positional(float(n), trim='-')
    if '.' not in text:
        return n
    fraction = text.split('.')[1]
    start = 0
    if abs(n) < 1:
        start = len(fraction) - len(fraction.lstrip('0'))
    run = re.search(f"0{{{rounding_info.round09},}}|9{{{rounding_info.round09},}}", fraction[start:])
    if run is None:
        return n
    return to_fixed(n, start + run.start())


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _number_to_string(n):
    if n == 0:
        return '0'
    if abs(n) < 0.001:
        return np.format_float_scientific(float(n), trim='-', exp_digits=1)
    text = np.format_float_positional(float(n), trim='-')
    if text.startswith('0.'):
        return text[1:]
    if text.startswith('-0.'):
        return '-' + text[2:]
    return text


def _shortened_data(transform):
    data = list(transform.data)
    if transform.name == 'translate' and len(data) == 2 and data[1] == 0:
        data = data[:1]
    elif transform.name == 'scale' and len(data) == 2 and data[0] == data[1]:
        data = data[:1]
    elif transform.name == 'rotate' and len(data) == 3 and data[1] == 0 and data[2] == 0:
        data = data[:1]
    return data


def js_to_string(transforms) -> str:
    return ''.join(
        f"{t.name}({' '.join(_number_to_string(n) for n in _shortened_data(t))})"
        for t in transforms
    )


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def _canonical(transform: TransformItem) -> TransformItem:
    data = list(transform.data)
    if len(data) not in _ARITY[transform.name]:
        raise ValueError(f"{transform.name}() takes {_ARITY[transform.name]} values, got {len(data)}")
    if transform.name == 'translate' and len(data) == 1:
        data.append(0.0)
    elif transform.name == 'scale' and len(data) == 1:
        data.append(data[0])
    elif transform.name == 'rotate' and len(data) == 1:
        data.extend([0.0, 0.0])
    return TransformItem(transform.name, data)


def is_identity(transform: TransformItem):
    data = transform.data
    if transform.name == 'matrix':
        return list(data) == [1, 0, 0, 1, 0, 0]
    if transform.name == 'translate':
        return all(n == 0 for n in data)
    if transform.name == 'scale':
        return all(n == 1 for n in data)
    if transform.name == 'rotate':
        return data[0] % 360 == 0
    return data[0] == 0


def _exact_pairwise(op, data1, data2):
    values = [op(n, m) for n, m in zip(data1, data2)]
    return None if any(v is None for v in values) else values


def _merge(t1: TransformItem, t2: TransformItem) -> Optional[TransformItem]:
    """Return a single item equivalent to ``t1`` followed by ``t2``, or None."""
    if t1.name != t2.name:
        return None
    if t1.name == 'matrix':
        data = exact_multiply_transform_matrices(t1.data, t2.data)
    elif t1.name == 'translate':
        data = _exact_pairwise(exact_add, t1.data, t2.data)
    elif t1.name == 'scale':
        data = _exact_pairwise(exact_multiply, t1.data, t2.data)
    elif t1.name == 'rotate' and t1.data[1:] == t2.data[1:]:
        angle = exact_add(t1.data[0], t2.data[0])
        data = None if angle is None else [angle] + t1.data[1:]
    else:
        return None
    return None if data is None else TransformItem(t1.name, data)


def expand_matrix(matrix: TransformItem) -> List[TransformItem]:
    """Rewrite a matrix as translate, scale, quarter-turn rotate or 45 degree
    skew where its entries allow, or return it unchanged."""
    a, b, c, d, e, f = matrix.data
    prefix = [TransformItem('translate', [e, f])] if e != 0 or f != 0 else []
    if b == 0 and c == 0:
        if a == 1 and d == 1:
            return prefix
        return prefix + [TransformItem('scale', [a, d])]
    if a == 0 and d == 0 and b == -c and abs(b) == 1:
        return prefix + [TransformItem('rotate', [90.0 * b, 0.0, 0.0])]
    if a == 1 and d == 1:
        if b == 0 and abs(c) == 1:
            return prefix + [TransformItem('skewX', [45.0 * c])]
        if c == 0 and abs(b) == 1:
            return prefix + [TransformItem('skewY', [45.0 * b])]
    return [matrix]


def normalize(transforms) -> List[TransformItem]:
    """Merge adjacent items, expand matrices and drop identities until nothing changes.

    Raises ValueError if an item has the wrong number of values.
    """
    items = [_canonical(t) for t in transforms]
    changed = True
    while changed:
        changed = False
        merged = []
        for item in items:
            combined = _merge(merged[-1], item) if merged else None
            if combined is not None:
                merged[-1] = combined
                changed = True
            else:
                merged.append(item)

        expanded = []
        for item in merged:
            if item.name == 'matrix':
                replacement = expand_matrix(item)
                if replacement != [item]:
                    changed = True
                expanded.extend(replacement)
            elif is_identity(item):
                changed = True
            else:
                expanded.append(item)
        items = expanded
    return items


# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------

def _swap_rotate_and_scale(rotate, scale):
    """Return ``(rotate, scale)`` with the angle turned by 180 degrees and the
    scale negated, or None if that can't be done exactly."""
    if rotate.data[1:] != [0, 0]:
        return None
    angle = exact_add(rotate.data[0], -180 if rotate.data[0] > 0 else 180)
    factors = [exact_multiply(n, -1) for n in scale.data]
    if angle is None or None in factors:
        return None
    return TransformItem('rotate', [angle, 0.0, 0.0]), TransformItem('scale', factors)


def swap_rotate_scale_pairs(transforms, target_matrix, float_precision, matrix_precision):
    """Flip each adjacent rotate/scale pair where that shortens the string."""
    best = [t.copy() for t in transforms]
    for i in range(len(best) - 1):
        first, second = best[i], best[i + 1]
        if {first.name, second.name} != {'rotate', 'scale'}:
            continue
        rotate, scale = (first, second) if first.name == 'rotate' else (second, first)
        swapped = _swap_rotate_and_scale(rotate, scale)
        if swapped is None:
            continue
        pair = list(swapped) if first.name == 'rotate' else list(reversed(swapped))
        trial = best[:i] + pair + best[i + 2:]
        if (len(js_to_string(trial)) < len(js_to_string(best))
                and rounded_matches_target(trial, target_matrix, float_precision, matrix_precision)):
            best = trial
    return best


def _candidates(normalized, original_matrix, rounded_matrix, float_precision, matrix_precision):
    rounded = adaptive_round(normalized, rounded_matrix, float_precision, matrix_precision)
    yield rounded if rounded is not None else [t.copy() for t in normalized]
    yield from decompose(original_matrix, rounded_matrix, float_precision, matrix_precision)
    yield expand_matrix(rounded_matrix.copy())


def _minify(transform_string, cfg):
    """Run the candidate search once. Returns the result and the rounded
    matrix it was verified against."""
    float_precision = cfg['float_precision']
    matrix_precision = cfg['matrix_precision']
    rounding_info = get_rounding_info(cfg)

    transforms = transform2js(transform_string)
    for transform in transforms:
        transform.data = [round09(n, rounding_info) for n in transform.data]

    normalized = normalize(transforms)
    if not normalized:
        return '', None

    original_matrix = transforms_multiply(normalized)
    rounded_matrix = round_transform(original_matrix, float_precision, matrix_precision)

    best = None
    for candidate in _candidates(normalized, original_matrix, rounded_matrix,
                                 float_precision, matrix_precision):
        candidate = [t for t in candidate if not is_identity(t)]
        candidate = swap_rotate_scale_pairs(candidate, rounded_matrix, float_precision, matrix_precision)
        if not rounded_matches_target(candidate, rounded_matrix, float_precision, matrix_precision):
            continue
        text = js_to_string(candidate)
        if best is None or len(text) < len(best):
            best = text

    if best is None:
        best = js_to_string([rounded_matrix])
    return best, rounded_matrix


def minify_transforms(transform_string, params=None) -> str:
    """Return the shortest transform list equivalent to ``transform_string``.

    The result is a fixed point: minifying it again gives the same string.

    Raises ValueError if an item has the wrong number of values.
    """
    cfg = resolve_params(params)
    best, rounded_matrix = _minify(transform_string, cfg)
    if rounded_matrix is None:
        return best

    # Numbers found by the search, such as a merged rotation center, may
    # carry digits that a search starting from the shorter text drops.
    for _ in range(MAX_SETTLE_ROUNDS):
        again = _minify(best, cfg)[0]
        if again == best:
            break
        if not rounded_matches_target(transform2js(again), rounded_matrix,
                                      cfg['float_precision'], cfg['matrix_precision']):
            break
        best = again
    return best
