"""Tests for transform minification."""

import numpy as np
import pytest
from svgpathtools.parser import parse_transform

from svgmin.minify_transforms import (
    get_rounding_info,
    js_to_string,
    minify_transforms,
    normalize,
    resolve_params,
    round09,
    swap_rotate_scale_pairs,
)
from svgmin.decompose import round_transform
from svgmin.transforms import TransformItem, transform2js, transforms_multiply


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


class TestParams:
    def test_defaults(self):
        assert resolve_params() == {
            "float_precision": 3,
            "matrix_precision": 5,
            "round09": 6,
            "round_to_zero": None,
        }

    def test_matrix_precision_follows_float_precision(self):
        assert resolve_params({"float_precision": 1})["matrix_precision"] == 3

    def test_explicit_matrix_precision(self):
        assert resolve_params({"float_precision": 1, "matrix_precision": 2})["matrix_precision"] == 2

    def test_unknown_keys_are_ignored(self):
        assert "quiet" not in resolve_params({"quiet": True})


class TestRound09:
    @pytest.mark.parametrize(
        "n, setting, expected",
        [
            (1.29994, 3, 1.3),
            (1.29994, 4, 1.29994),
            (1.0001, 4, 1.0001),
            (1.0001, 3, 1),
            (1e-10, 3, 1e-10),
            (1e-3, 3, 0.001),
            (1e-4, 3, 1e-4),
            (0.0000001, 6, 1e-7),
            (0.0000001, (6, 1e-6), 0),
            (0.0000001, 7, 1e-7),
        ],
    )
    def test_round09(self, n, setting, expected):
        round09_digits, round_to_zero = setting if isinstance(setting, tuple) else (setting, 0)
        info = get_rounding_info({"round09": round09_digits, "round_to_zero": round_to_zero})
        assert round09(n, info) == expected

    def test_runs_after_first_significant_digit(self):
        info = get_rounding_info({"round09": 3})
        assert round09(0.00129999, info) == 0.0013

    def test_disabled(self):
        info = get_rounding_info({"round09": False})
        assert round09(1.2999999999, info) == 1.2999999999

    def test_integers_are_unchanged(self):
        assert round09(10.0, get_rounding_info({"round09": 3})) == 10.0


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


class TestJsToString:
    @pytest.mark.parametrize(
        "items, expected",
        [
            ([TransformItem("translate", [5, 0])], "translate(5)"),
            ([TransformItem("translate", [5, 70])], "translate(5 70)"),
            ([TransformItem("scale", [0.4, 0.4])], "scale(.4)"),
            ([TransformItem("scale", [-0.5, 2])], "scale(-.5 2)"),
            ([TransformItem("rotate", [-45, 0, 0])], "rotate(-45)"),
            ([TransformItem("rotate", [-45, 261.76, -252.24])], "rotate(-45 261.76 -252.24)"),
            ([TransformItem("translate", [1e-4])], "translate(1e-4)"),
            ([TransformItem("translate", [0.001])], "translate(.001)"),
            ([TransformItem("matrix", [1, 0, 0, 1, 5, 70])], "matrix(1 0 0 1 5 70)"),
            ([TransformItem("translate", [5]), TransformItem("skewX", [45])], "translate(5)skewX(45)"),
            ([], ""),
        ],
    )
    def test_serialization(self, items, expected):
        assert js_to_string(items) == expected

    def test_negative_zero(self):
        assert js_to_string([TransformItem("rotate", [-0.0])]) == "rotate(0)"


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


class TestNormalize:
    def test_canonical_arity(self):
        assert normalize(transform2js("translate(5) scale(2) rotate(30)")) == [
            TransformItem("translate", [5, 0]),
            TransformItem("scale", [2, 2]),
            TransformItem("rotate", [30, 0, 0]),
        ]

    @pytest.mark.parametrize("text", ["rotate(1 2)", "matrix(1 2 3)", "skewX(1 2)", "translate(1 2 3)"])
    def test_wrong_arity(self, text):
        with pytest.raises(ValueError):
            normalize(transform2js(text))

    def test_merges_translates(self):
        assert normalize(transform2js("translate(.1 2)translate(.2 3)")) == [TransformItem("translate", [0.3, 5])]

    def test_merges_scales(self):
        assert normalize(transform2js("scale(2)scale(.1 3)")) == [TransformItem("scale", [0.2, 6])]

    def test_merges_rotations_about_same_center(self):
        assert normalize(transform2js("rotate(10 5 5)rotate(20 5 5)")) == [TransformItem("rotate", [30, 5, 5])]

    def test_keeps_rotations_about_different_centers(self):
        assert len(normalize(transform2js("rotate(10 5 5)rotate(20)"))) == 2

    def test_expands_matrices(self):
        assert normalize(transform2js("matrix(1 0 0 1 10 20)matrix(2 0 0 2 0 0)")) == [
            TransformItem("translate", [10, 20]),
            TransformItem("scale", [2, 2]),
        ]

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("matrix(0 1 -1 0 0 0)", TransformItem("rotate", [90, 0, 0])),
            ("matrix(0 -1 1 0 0 0)", TransformItem("rotate", [-90, 0, 0])),
            ("matrix(1 0 1 1 0 0)", TransformItem("skewX", [45])),
            ("matrix(1 -1 0 1 0 0)", TransformItem("skewY", [-45])),
        ],
    )
    def test_expands_special_matrices(self, text, expected):
        assert normalize(transform2js(text)) == [expected]

    def test_merges_matrices_exactly(self):
        assert normalize(transform2js("matrix(1 .5 0 1 0 0)matrix(1 .5 0 1 0 0)")) == [TransformItem("skewY", [45])]

    def test_keeps_matrices_needing_too_many_digits(self):
        items = normalize(transform2js("matrix(1.123456789 .5 0 1 0 0)matrix(1.23456 .5 0 1 0 0)"))
        assert [t.name for t in items] == ["matrix", "matrix"]

    def test_removes_identities(self):
        assert normalize(transform2js("translate(0)scale(1)rotate(360 4 4)skewX(0)matrix(1 0 0 1 0 0)")) == []

    def test_merge_then_drop(self):
        assert normalize(transform2js("rotate(10)rotate(-10)")) == []


class TestSwapRotateScale:
    def test_swap_when_shorter(self):
        items = [TransformItem("rotate", [-170, 0, 0]), TransformItem("scale", [-2, -2])]
        target = round_transform(transforms_multiply(items), 3, 5)
        assert js_to_string(swap_rotate_scale_pairs(items, target, 3, 5)) == "rotate(10)scale(2)"

    def test_swap_scale_first(self):
        items = [TransformItem("scale", [-2, -2]), TransformItem("rotate", [-170, 0, 0])]
        target = round_transform(transforms_multiply(items), 3, 5)
        assert js_to_string(swap_rotate_scale_pairs(items, target, 3, 5)) == "scale(2)rotate(10)"

    def test_no_swap_when_longer(self):
        items = [TransformItem("rotate", [10, 0, 0]), TransformItem("scale", [2, 2])]
        target = round_transform(transforms_multiply(items), 3, 5)
        assert swap_rotate_scale_pairs(items, target, 3, 5) == items

    def test_rotation_with_center_is_kept(self):
        items = [TransformItem("rotate", [-170, 5, 5]), TransformItem("scale", [-2, -2])]
        target = round_transform(transforms_multiply(items), 3, 5)
        assert swap_rotate_scale_pairs(items, target, 3, 5) == items


# ---------------------------------------------------------------------------
# Minification
# ---------------------------------------------------------------------------


class TestMinifyTransforms:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("translate(0,0)scale(1,1)", ""),
            ("", ""),
            ("translate(10,20)", "translate(10 20)"),
            ("translate(10 0)", "translate(10)"),
            ("scale(2,2)", "scale(2)"),
            ("translate(1,2)translate(3,4)", "translate(4 6)"),
            ("rotate(360)", ""),
            ("rotate(10)rotate(-10)", ""),
            ("matrix(1 0 0 1 10 20)", "translate(10 20)"),
            ("matrix(2 0 0 2 0 0)", "scale(2)"),
            ("matrix(0 1 -1 0 0 0)", "rotate(90)"),
            ("rotate(29.9999999)", "rotate(30)"),
            ("rotate(-170)scale(-2)", "rotate(10)scale(2)"),
            ("matrix(0 2 -2 0 0 0)", "rotate(90)scale(2)"),
            ("translate(20)rotate(90)", "rotate(90 10 10)"),
        ],
    )
    def test_minify(self, text, expected):
        assert minify_transforms(text) == expected

    def test_float_precision(self):
        assert minify_transforms("translate(10.12345 20)", {"float_precision": 2}) == "translate(10.12 20)"

    def test_round_to_zero(self):
        assert minify_transforms("translate(10 1e-7)", {"round_to_zero": 1e-6}) == "translate(10)"

    @pytest.mark.parametrize("text", ["rotate(1 2)", "matrix(1 2 3)"])
    def test_wrong_arity_raises(self, text):
        with pytest.raises(ValueError):
            minify_transforms(text)

    @pytest.mark.parametrize(
        "text",
        [
            "translate(1,2)translate(3,4)",
            "rotate(-170)scale(-2)",
            "matrix(0 1 -1 0 0 0)",
            "rotate(29.9999999)",
            "translate(10 0)",
            "rotate(-119.2782)translate(-125.5416 -90.13)",
            "matrix(0 2 -2 0 0 0)",
        ],
    )
    def test_idempotent(self, text):
        once = minify_transforms(text)
        assert minify_transforms(once) == once

    def test_settles_merged_rotation_center(self):
        once = minify_transforms("rotate(-119.2782)translate(-125.5416 -90.13)")
        assert once.startswith("rotate(-119.278 ")
        assert minify_transforms(once) == once

    @pytest.mark.parametrize(
        "text",
        [
            "translate(10 20)rotate(30)scale(2)",
            "rotate(45 100 100)",
            "matrix(1 .5 -.5 1 10 10)",
            "skewX(30)scale(2 3)",
            "translate(32.1234)rotate(15.7)",
            "scale(1.234567)rotate(1.3)",
            "matrix(.70711 -.70711 1.41421 0 255.03 111.21)",
            "rotate(-23.7001) translate(-3.5 .25) scale(1.5 -2)",
        ],
    )
    def test_same_matrix(self, text):
        minified = minify_transforms(text)
        assert len(minified) <= len(text)
        assert np.allclose(parse_transform(text), parse_transform(minified), atol=2e-3)

    def test_unrounded_normalized_form_round_trips(self):
        text = "translate(10 20) rotate(33.3 4 5) skewY(12) scale(1.5)"
        normalized = normalize(transform2js(text))
        reparsed = transform2js(js_to_string(normalized))
        assert transforms_multiply(reparsed).data == pytest.approx(transforms_multiply(transform2js(text)).data)
