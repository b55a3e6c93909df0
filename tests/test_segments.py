"""Tests for line compression and segmentation."""

import pytest

from vismap.colors import gradient_name
from vismap.scales import attr_scale, build_scale
from vismap.segments import (
    CompressedLine, GradientDescriptor, SegmentPoint, SegmentRun, compress_line,
)


def px(record):
    return record["x"]


def py(record):
    return record["y"]


def straight_line(n, spacing=10, color="black"):
    return [{"x": i * spacing, "y": 0, "c": color} for i in range(n)]


def kept_indices(line: CompressedLine):
    return [p.index for p in line.points]


class TestColorTransitions:
    def test_uniform_pair_merges_and_color_change_breaks_out(self):
        data = [
            {"x": 0, "y": 0, "c": "red"},
            {"x": 1, "y": 0, "c": "red"},
            {"x": 2, "y": 0, "c": "blue"},
        ]
        xs = build_scale(attr_scale(data, "x"), 2)
        ys = build_scale(attr_scale(data, "y"), 2)
        line = compress_line(data, xs, ys, color="c", stroke_width=1, color_resolution=5)

        assert len(line.runs) == 1
        run = line.runs[0]
        assert [p.index for p in run.points] == [0, 1]
        assert run.color == "red"
        assert all(not p.has_gradient for p in run.points)

        joint = line.units[-1]
        assert isinstance(joint, SegmentPoint)
        assert joint.index == 2
        assert (joint.color1, joint.color2) == ("red", "blue")
        assert line.gradients == [GradientDescriptor("gradient-red-blue", "red", "blue")]

    def test_gradients_are_deduplicated(self):
        colors = ["red", "blue", "red", "blue", "red"]
        data = [{"x": i * 10, "y": 0, "c": c} for i, c in enumerate(colors)]
        line = compress_line(data, px, py, color="c", stroke_width=1)

        assert len(line.joints) == 5
        assert [g.id for g in line.gradients] == [
            gradient_name("red", "blue"), gradient_name("blue", "red"),
        ]

    def test_near_identical_colors_stay_in_one_run(self):
        colors = ["#000000", "#010101"] * 5
        data = [{"x": i * 10, "y": 0, "c": c} for i, c in enumerate(colors)]
        line = compress_line(data, px, py, color="c", stroke_width=1)

        assert line.gradients == []
        assert len(line.runs) == 1
        assert len(line.runs[0]) == len(data)

    def test_color_scale_callable(self):
        data = straight_line(5)
        line = compress_line(data, px, py, color=lambda d: "green" if d["x"] < 20 else "orange",
                             stroke_width=1)
        assert line.gradients == [GradientDescriptor(gradient_name("green", "orange"), "green", "orange")]


class TestPointRetention:
    def test_zero_resolution_keeps_every_point(self):
        data = straight_line(50)
        xs = build_scale(attr_scale(data, "x"), 490)
        ys = build_scale(attr_scale(data, "y"), 100, invert=True)
        line = compress_line(data, xs, ys, color="c", resolution=0, stroke_width=5)

        assert kept_indices(line) == list(range(50))
        assert isinstance(line.units[0], SegmentPoint)
        assert isinstance(line.units[1], SegmentRun)
        assert len(line.units) == 2

    def test_kept_count_non_increasing_with_resolution(self):
        data = straight_line(200, spacing=3)
        counts = [
            len(compress_line(data, px, py, resolution=r, stroke_width=1).points)
            for r in (0, 2, 5, 9, 20, 50, 150, 1000)
        ]
        assert counts == sorted(counts, reverse=True)
        assert counts[0] == 200
        assert counts[-1] < counts[0]

    def test_points_closer_than_stroke_width_are_dropped(self):
        data = straight_line(21, spacing=1)
        line = compress_line(data, px, py, stroke_width=5)
        assert kept_indices(line) == [0, 5, 10, 15, 20]

    def test_continuity_change_keeps_point(self):
        data = straight_line(10)
        for d in data:
            d["on"] = d["x"] != 50
        line = compress_line(data, px, py, continuity="on", resolution=1000, stroke_width=1)
        assert kept_indices(line) == [0, 1, 5, 6]

    def test_direction_change_keeps_point(self):
        data = [{"x": 0, "y": 0}, {"x": 10, "y": 0}, {"x": 20, "y": 0},
                {"x": 20, "y": 10}, {"x": 20, "y": 20}]
        line = compress_line(data, px, py, resolution=1000, stroke_width=1)
        assert kept_indices(line) == [0, 1, 3, 4]
        assert line.points[2].angle == pytest.approx(45)
        assert line.points[3].angle == pytest.approx(90)

    def test_off_screen_points_use_coarser_resolution(self):
        data = straight_line(31)
        line = compress_line(data, px, py, resolution=10, stroke_width=1, width=100, height=100)
        kept_x = [p.x for p in line.points]
        assert kept_x == [float(x) for x in range(0, 101, 10)] + [200.0, 300.0]


class TestMissingData:
    def test_non_finite_projections_are_dropped(self):
        data = [{"x": 0, "y": 0}, {"x": None, "y": 5}, {"x": 10, "y": float("nan")},
                {"x": 20, "y": 0}]
        line = compress_line(data, px, py, stroke_width=1)
        assert kept_indices(line) == [0, 3]

    def test_all_missing_gives_empty_result(self):
        data = [{"x": None, "y": None}] * 5
        xs = build_scale(attr_scale(data, "x"), 100)
        ys = build_scale(attr_scale(data, "y"), 100)
        line = compress_line(data, xs, ys)
        assert line.units == []
        assert line.gradients == []
        assert line.points == []


class TestValidation:
    @pytest.mark.parametrize("kwargs", [
        {"stroke_width": -1},
        {"resolution": float("inf")},
        {"color_resolution": "5"},
    ])
    def test_invalid_options_raise(self, kwargs):
        with pytest.raises(ValueError):
            compress_line(straight_line(3), px, py, **kwargs)
