"""Tests for matrix decomposition and adaptive rounding."""

import math

import pytest

from svgmin.decompose import (
    add_a_digit_to_number,
    adaptive_round,
    decompose,
    find_rotation,
    get_rotate_scale,
    round_to_matrix,
    round_transform,
    rounded_matches_target,
)
from svgmin.minify_transforms import js_to_string
from svgmin.transforms import TransformItem, transform2js, transforms_multiply


# Each case: transform, target matrix, expected result, float precision, matrix precision.
ROUNDING_CASES = [
    ("rotate(-23.7001)", "matrix(0.91566,-0.40195,0.40195,0.91566,0,0)", "rotate(-23.7)", 3, 5),
    ("rotate(-23.789)", "matrix(0.91566,-0.40195,0.40195,0.91566,0,0)", None, 3, 5),
    ("rotate(-23.7001)", "matrix(0.91566,-0.40195,0.40195,0.91566,0,0)", "rotate(-23.7)", 4, 5),
    ("rotate(.01234567)", "matrix(1,0.00022,-0.00022,1,0,0)", "rotate(.0124)", 3, 5),
    ("rotate(31.00049)", "matrix(0.85716,0.51505,-0.51505,0.85716,0,0)", "rotate(31.001)", 3, 5),
    (
        "translate(32.1234)rotate(15.7)",
        "matrix(0.96269,0.2706,-0.2706,0.96269,32.123,0)",
        "translate(32.123)rotate(15.7)",
        3,
        5,
    ),
    (
        "scale(1.234567)rotate(1.3)",
        "matrix(1.23425,0.02801,-0.02801,1.23425,0,0)",
        "scale(1.23457)rotate(1.3)",
        3,
        5,
    ),
    ("scale(1.234567)rotate(1.3)", "matrix(1.234,0.028,-0.028,1.234,0,0)", "scale(1.2346)rotate(1.3)", 3, 3),
]


def _result_string(result):
    return js_to_string(result) if result else result


# ---------------------------------------------------------------------------
# Adaptive rounding
# ---------------------------------------------------------------------------


class TestAdaptiveRound:
    @pytest.mark.parametrize("transform, target, expected, fp, mp", ROUNDING_CASES)
    def test_rounding(self, transform, target, expected, fp, mp):
        result = adaptive_round(transform2js(transform), transform2js(target)[0], fp, mp)
        assert _result_string(result) == expected

    def test_input_is_not_modified(self):
        transforms = transform2js("rotate(31.00049)")
        adaptive_round(transforms, transform2js("matrix(0.85716,0.51505,-0.51505,0.85716,0,0)")[0], 3, 5)
        assert transforms[0].data == [31.00049]


class TestRoundToMatrix:
    @pytest.mark.parametrize("transform, target, expected, fp, mp", ROUNDING_CASES + [
        (
            "translate(5,70)rotate(0,0,0)scale(.4,.4)",
            "matrix(.4 0 0 .4 5 70)",
            "translate(5 70)rotate(0)scale(.4)",
            3,
            5,
        ),
        (
            "rotate(-45 261.757 -252.243)skewX(45)",
            "matrix(.707 -.707 1.414 0 255.03 111.21)",
            "rotate(-45 261.76 -252.24)skewX(45)",
            3,
            5,
        ),
    ])
    def test_rounding(self, transform, target, expected, fp, mp):
        result = round_to_matrix(transform2js(transform), transform2js(target)[0], fp, mp)
        assert _result_string(result) == expected

    def test_low_precision_target_needs_inferred_precision(self):
        target = transform2js("matrix(.707 -.707 1.414 0 255.03 111.21)")[0]
        assert adaptive_round(transform2js("rotate(-45 261.757 -252.243)skewX(45)"), target, 3, 5) is None


class TestAddADigitToNumber:
    @pytest.mark.parametrize(
        "rounded, original, expected",
        [
            (1.23, 1.234, 1.234),
            (1e-7, 1.1597407e-7, 1.2e-7),
            (1.2, 1.2, 1.2),
            (0.012, 0.01234567, 0.0123),
        ],
    )
    def test_add_a_digit(self, rounded, original, expected):
        assert add_a_digit_to_number(rounded, original) == expected

    def test_skips_digits_that_do_not_change_the_value(self):
        assert add_a_digit_to_number(1.2, 1.2003) == 1.2003


class TestRoundTransform:
    def test_matrix_uses_both_precisions(self):
        rounded = round_transform(TransformItem("matrix", [0.123456, 0, 0, 1, 1.23456, 0]), 2, 4)
        assert rounded.data == [0.1235, 0, 0, 1, 1.23, 0]

    def test_scale_uses_matrix_precision(self):
        assert round_transform(TransformItem("scale", [1.234567]), 3, 5).data == [1.23457]

    def test_others_use_float_precision(self):
        assert round_transform(TransformItem("rotate", [1.234567, 1.5556, 0]), 3, 5).data == [1.235, 1.556, 0]


# ---------------------------------------------------------------------------
# Decomposition
# ---------------------------------------------------------------------------


class TestFindRotation:
    @pytest.mark.parametrize("degrees", [0, 30, 120, -45, -150, 90, 180])
    def test_angles(self, degrees):
        radians = degrees * math.pi / 180
        cos, sin = math.cos(radians), math.sin(radians)
        assert find_rotation(cos, sin, cos, 3) == pytest.approx(degrees)

    def test_disagreeing_cosines(self):
        assert find_rotation(0.5, 0.866, 0.6, 3) is None

    def test_out_of_domain(self):
        assert find_rotation(1.5, 0, 1.5, 3) is None


class TestGetRotateScale:
    def test_rotate_and_scale(self):
        matrix = transforms_multiply(transform2js("rotate(30)scale(2 3)")).data
        rotate, scale = get_rotate_scale(matrix, 3)
        assert rotate.data == pytest.approx([30, 0, 0])
        assert scale.data == pytest.approx([2, 3])

    def test_opposite_scale_signs(self):
        matrix = transforms_multiply(transform2js("rotate(30)scale(2 -3)")).data
        result = get_rotate_scale(matrix, 3)
        assert transforms_multiply(result).data == pytest.approx(matrix)

    def test_quarter_turn(self):
        rotate, scale = get_rotate_scale([0, 2, -2, 0], 3)
        assert rotate.data == pytest.approx([90, 0, 0])
        assert scale.data == pytest.approx([2, 2])

    def test_singular(self):
        assert get_rotate_scale([0, 0, 1, 1], 3) is None


class TestDecompose:
    @pytest.mark.parametrize(
        "transform",
        [
            "translate(10 20)rotate(30)scale(2)",
            "rotate(45 100 100)",
            "scale(2 3)skewX(30)",
            "matrix(1 .5 -.5 1 10 10)",
            "rotate(-120)skewY(20)",
        ],
    )
    def test_results_round_to_target(self, transform):
        original = transforms_multiply(transform2js(transform))
        rounded = round_transform(original, 3, 5)
        for result in decompose(original, rounded, 3, 5):
            assert rounded_matches_target(result, rounded, 3, 5)

    def test_rotate_scale(self):
        original = transforms_multiply(transform2js("translate(10 20)rotate(30)scale(2)"))
        rounded = round_transform(original, 3, 5)
        results = [js_to_string(r) for r in decompose(original, rounded, 3, 5)]
        assert "translate(10 20)rotate(30)scale(2)" in results

    def test_scale_skew(self):
        original = transforms_multiply(transform2js("scale(2 3)skewX(30)"))
        rounded = round_transform(original, 3, 5)
        results = [js_to_string(r) for r in decompose(original, rounded, 3, 5)]
        assert "scale(2 3)skewX(30)" in results

    def test_translate_merged_into_rotation_center(self):
        original = transforms_multiply(transform2js("rotate(90 10 10)"))
        rounded = round_transform(original, 3, 5)
        results = [js_to_string(r) for r in decompose(original, rounded, 3, 5)]
        assert any(r.startswith("rotate(90 10 10)") for r in results)

    def test_quarter_turn_with_scale(self):
        original = TransformItem("matrix", [0, 2, -2, 0, 0, 0])
        results = [js_to_string(r) for r in decompose(original, original, 3, 5)]
        assert "rotate(90)scale(2)" in results
        assert "scale(2)rotate(90)" in results

    def test_nothing_for_singular_matrix(self):
        original = TransformItem("matrix", [0, 0, 0, 0, 0, 0])
        assert decompose(original, original, 3, 5) == []
