import math

import numpy as np
import pytest

from engine.core.geometry_math import (
    TOP_CORNERS,
    clamp_ratio,
    corners_of,
    ellipse_points,
    identity_pose,
    quaternion_from_matrix,
    wireframe_edge_pairs,
    z_offset,
)
from graph import BoundingBox
from visual.config import LayerConfig, VisualizerConfig


def test_clamp_ratio_basic_and_clamped():
    assert clamp_ratio(0.0, 2.0, 1.0) == pytest.approx(0.5)
    assert clamp_ratio(0.0, 2.0, -5.0) == 0.0
    assert clamp_ratio(0.0, 2.0, 10.0) == 1.0


def test_clamp_ratio_non_finite_is_zero():
    assert clamp_ratio(1.0, 1.0, 1.0) == 0.0
    assert clamp_ratio(1.0, 1.0, 3.0) == 0.0
    assert clamp_ratio(0.0, 1.0, math.nan) == 0.0


def test_corners_of_bit_order():
    bbox = BoundingBox((1.0, 2.0, 3.0), (2.0, 4.0, 6.0))
    c = corners_of(bbox)
    assert c.shape == (8, 3)
    center = np.array([1.0, 2.0, 3.0])
    for i in range(8):
        signs = np.array([1 if i & 1 else -1, 1 if i & 2 else -1, 1 if i & 4 else -1])
        np.testing.assert_allclose(c[i], center + signs * np.array([1.0, 2.0, 3.0]))


def test_top_corners_stay_on_top_under_yaw():
    yaw = np.deg2rad(30.0)
    rot = np.array(
        [[np.cos(yaw), -np.sin(yaw), 0.0], [np.sin(yaw), np.cos(yaw), 0.0], [0.0, 0.0, 1.0]]
    )
    c = corners_of(BoundingBox((0.0, 0.0, 0.0), (1.0, 1.0, 2.0), rot))
    assert np.all(c[list(TOP_CORNERS), 2] > 0.0)
    assert np.all(c[:4, 2] < 0.0)


def test_wireframe_pairs_are_twelve_unique_axis_edges():
    pairs = wireframe_edge_pairs()
    assert len(pairs) == 12
    assert len({frozenset(p) for p in pairs}) == 12
    for a, b in pairs:
        assert bin(a ^ b).count("1") == 1


def test_z_offset_respects_collapse():
    cfg = LayerConfig(z_offset_scale=2.0)
    assert z_offset(cfg, VisualizerConfig(layer_z_step=3.0)) == pytest.approx(6.0)
    assert z_offset(1.5, VisualizerConfig(layer_z_step=2.0)) == pytest.approx(3.0)
    assert z_offset(cfg, VisualizerConfig(layer_z_step=3.0, collapse_layers=True)) == 0.0


def test_identity_pose():
    pose = identity_pose()
    assert pose.position == (0.0, 0.0, 0.0)
    assert pose.orientation == (0.0, 0.0, 0.0, 1.0)


def test_quaternion_from_matrix_identity_and_yaw():
    assert quaternion_from_matrix(np.eye(3)) == pytest.approx((0.0, 0.0, 0.0, 1.0))
    rot_z_180 = np.diag([-1.0, -1.0, 1.0])
    q = quaternion_from_matrix(rot_z_180)
    assert abs(q[2]) == pytest.approx(1.0)
    assert q[3] == pytest.approx(0.0, abs=1e-9)


def test_ellipse_points_closed_loop():
    pts = ellipse_points(np.diag([2.0, 1.0]), np.array([1.0, 1.0]), 0.5, samples=20)
    assert pts.shape == (21, 3)
    np.testing.assert_allclose(pts[0], [3.0, 1.0, 0.5])
    np.testing.assert_allclose(pts[-1], pts[0], atol=1e-9)
    np.testing.assert_allclose(pts[5], [1.0, 2.0, 0.5], atol=1e-9)
