import numpy as np
import pytest

from stratflow.params import PipeGeometry
from stratflow.renderer import render_frame

GEOM = PipeGeometry(length=10.0, radius=1.0)
COLORS = {"upper": (250, 200, 40), "lower": (30, 90, 220)}
BG = (12, 14, 18)


def _flat(*points):
    return np.asarray(points, dtype=np.float64).reshape(-1)


@pytest.mark.parametrize("view", ["side", "section"])
def test_frame_shape_and_alpha(view):
    img = render_frame({}, COLORS, GEOM, 120, 50, view=view, background=BG)
    assert img.shape == (50, 120, 4)
    assert img.dtype == np.uint8
    assert np.all(img[..., 3] == 255)


def test_background_fill():
    img = render_frame({}, COLORS, GEOM, 101, 41, background=BG)
    assert tuple(img[0, 0, :3]) == BG


def test_point_drawn_in_layer_colour():
    # Axis centre, nearest depth → full brightness
    img = render_frame({"upper": _flat((0.0, 0.0, 1.0))}, COLORS, GEOM, 101, 41)
    assert tuple(img[20, 50, :3]) == COLORS["upper"]


def test_upper_layer_drawn_over_lower():
    pts = _flat((0.0, 0.0, 1.0))
    img = render_frame({"upper": pts, "lower": pts.copy()}, COLORS, GEOM, 101, 41)
    assert tuple(img[20, 50, :3]) == COLORS["upper"]


def test_far_points_are_darker():
    img = render_frame({"lower": _flat((0.0, 0.0, -1.0))}, COLORS, GEOM, 101, 41)
    assert img[20, 50, 2] < COLORS["lower"][2]


def test_out_of_frame_points_are_ignored():
    pts = _flat((50.0, 0.0, 0.0), (0.0, 30.0, 0.0), (-50.0, -30.0, 0.0))
    img = render_frame({"upper": pts}, COLORS, GEOM, 60, 30, view="side")
    assert img.shape == (30, 60, 4)
    img = render_frame({"upper": pts}, COLORS, GEOM, 60, 30, view="section")
    assert img.shape == (30, 60, 4)


def test_read_only_buffers_accepted():
    pts = _flat((0.0, 0.2, 0.1), (1.0, -0.3, 0.0))
    pts.flags.writeable = False
    render_frame({"upper": pts}, COLORS, GEOM, 80, 40, view="section")


def test_unknown_view():
    with pytest.raises(ValueError):
        render_frame({}, COLORS, GEOM, view="top")
