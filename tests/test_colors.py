"""Tests for color parsing, differences, gradient names and color scales."""

import pytest

from vismap.colors import (
    COLOR_SCHEMES, build_color_scale, delta_e, dissimilar_colors, gradient_name, parse_color,
)


class TestParseColor:
    def test_named_and_hex(self):
        assert parse_color("red") == (1.0, 0.0, 0.0)
        assert parse_color("#00ff00") == (0.0, 1.0, 0.0)

    def test_css_rgb_and_rgba(self):
        assert parse_color("rgb(255, 0, 0)") == (1.0, 0.0, 0.0)
        assert parse_color("rgba(0,0,255,0.25)") == (0.0, 0.0, 1.0)

    @pytest.mark.parametrize("color", ["rgb(1, 2)", "rgb(a, b, c)", "not-a-color"])
    def test_invalid_colors_raise(self, color):
        with pytest.raises(ValueError):
            parse_color(color)


class TestDissimilarColors:
    def test_identical_colors_are_similar(self):
        assert not dissimilar_colors("red", "red", 1000, 5)

    def test_missing_color_is_dissimilar(self):
        assert dissimilar_colors(None, "red", 1, 5)

    def test_difference_is_weighted_by_distance(self):
        assert not dissimilar_colors("#000000", "#010101", 10, 5)
        assert dissimilar_colors("#000000", "#010101", 1000, 5)
        assert not dissimilar_colors("red", "blue", 0, 5)

    def test_css_and_named_forms_agree(self):
        assert delta_e("rgb(255,0,0)", "red") == pytest.approx(0, abs=1e-6)


class TestGradientName:
    def test_simple_names(self):
        assert gradient_name("red", "blue") == "gradient-red-blue"

    def test_unsafe_characters_are_replaced(self):
        assert gradient_name("rgb(1, 2, 3)", "#fff") == "gradient-rgb-1-2-3---fff"

    def test_order_matters(self):
        assert gradient_name("red", "blue") != gradient_name("blue", "red")


class TestColorScale:
    DATA = [{"v": 0}, {"v": 5}, {"v": 10}, {"v": None}]

    def test_extremes_follow_the_colormap(self):
        scale = build_color_scale(self.DATA, "v", scheme="viridis")
        assert scale({"v": 0}) == "#440154"
        assert scale({"v": 10}) == "#fde725"

    def test_missing_value_uses_null_color(self):
        scale = build_color_scale(self.DATA, "v", null_color="rgba(200,200,200,0.25)")
        assert scale({"v": None}) == "rgba(200,200,200,0.25)"

    def test_override_pins_range(self):
        scale = build_color_scale(self.DATA, "v", scheme="viridis", override={"max": 20})
        assert scale({"v": 20}) == "#fde725"
        assert scale({"v": 10}) != "#fde725"

    def test_unknown_scheme_raises(self):
        with pytest.raises(ValueError):
            build_color_scale(self.DATA, "v", scheme="nope")

    @pytest.mark.parametrize("scheme", sorted(COLOR_SCHEMES))
    def test_every_scheme_is_available(self, scheme):
        scale = build_color_scale(self.DATA, "v", scheme=scheme)
        assert scale({"v": 5}).startswith("#")
