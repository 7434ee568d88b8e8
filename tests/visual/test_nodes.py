import numpy as np
import pytest

from engine.core.primitive import PrimitiveKind
from graph import NodeSymbol, SceneGraphNode, SemanticNodeAttributes, layer_from_nodes
from tests._utils.graphs import unit_box
from util.color import Color
from visual.colors import SemanticColor, UniformColor
from visual.config import LayerConfig, VisualizerConfig
from visual.nodes import (
    make_bounding_box_primitive,
    make_centroid_primitive,
    make_edges_to_bounding_boxes,
    make_ellipsoid_primitives,
    make_layer_bounding_box_primitives,
    make_layer_label_primitives,
    make_layer_wireframe_bounding_boxes,
    make_place_centroid_primitive,
    make_text_primitive,
    make_text_primitive_no_height,
    node_display_name,
)


def test_centroids_raised_by_layer_offset(object_layer, layer_config, vis_config):
    p = make_centroid_primitive(layer_config, object_layer, vis_config, "objects", SemanticColor())
    assert p.kind is PrimitiveKind.SPHERE_LIST
    assert p.n_points == 3
    assert p.colors.shape == (3, 4)
    np.testing.assert_allclose(p.points[:, 2], 5.0)
    np.testing.assert_allclose(p.colors[0], [1.0, 0.0, 0.0, 1.0])
    assert p.scale == (layer_config.marker_scale,) * 3


def test_centroid_filter_and_cube_marker(object_layer, vis_config):
    cfg = LayerConfig(use_sphere_marker=False)
    p = make_centroid_primitive(
        cfg, object_layer, vis_config, "objects", SemanticColor(), filter=lambda n: n.id != 2
    )
    assert p.kind is PrimitiveKind.CUBE_LIST
    assert p.n_points == 2


def test_place_centroids_split_real_and_frontier(place_layer, layer_config, vis_config):
    real = make_place_centroid_primitive(layer_config, place_layer, vis_config, "p", UniformColor())
    frontier = make_place_centroid_primitive(
        layer_config, place_layer, vis_config, "f", UniformColor(), real_place=False
    )
    assert real.n_points == 2
    assert frontier.n_points == 1


def test_ellipsoids_for_frontiers_only(place_layer, layer_config, vis_config):
    prims = make_ellipsoid_primitives(layer_config, place_layer, vis_config, "frontiers", UniformColor())
    assert len(prims) == 1
    p = prims[0]
    assert p.kind is PrimitiveKind.SPHERE
    assert p.id == 0
    assert p.scale == (1.0, 2.0, 3.0)
    assert p.pose.position == pytest.approx((2.0, 0.0, 5.0))


def test_bounding_box_solid(object_layer, layer_config, vis_config):
    node = object_layer.get_node(2)
    p = make_bounding_box_primitive(layer_config, node, vis_config, "boxes", SemanticColor())
    assert p is not None
    assert p.kind is PrimitiveKind.CUBE
    assert p.id == 2
    assert p.scale == (1.0, 2.0, 3.0)
    assert p.pose.position == pytest.approx((5.0, 0.0, 5.0))
    assert p.color == pytest.approx((0.0, 1.0, 0.0, layer_config.bounding_box_alpha))

    collapsed = LayerConfig(z_offset_scale=1.0, collapse_bounding_box=True)
    q = make_bounding_box_primitive(collapsed, node, vis_config, "boxes", SemanticColor())
    assert q is not None and q.pose.position[2] == pytest.approx(0.0)


def test_bounding_box_missing_is_none(object_layer, layer_config, vis_config):
    node = object_layer.get_node(3)
    assert make_bounding_box_primitive(layer_config, node, vis_config, "b", SemanticColor()) is None
    prims = make_layer_bounding_box_primitives(layer_config, object_layer, vis_config, "b", SemanticColor())
    assert [p.id for p in prims] == [1, 2]


def test_wireframe_two_of_three_nodes(object_layer, layer_config, vis_config):
    p = make_layer_wireframe_bounding_boxes(
        layer_config, object_layer, vis_config, "wire", SemanticColor()
    )
    assert p.kind is PrimitiveKind.LINE_LIST
    assert p.n_segments == 24
    assert p.colors.shape[0] == p.n_points
    assert p.pose.position == pytest.approx((0.0, 0.0, 5.0))

    # 最初のノード（2x2x2 の立方体）: 12 辺すべて長さ 2、重複なし
    segs = p.segments()[:12]
    lengths = np.linalg.norm(segs[:, 1] - segs[:, 0], axis=1)
    np.testing.assert_allclose(lengths, 2.0)
    keys = {frozenset(map(tuple, np.round(s, 6))) for s in segs}
    assert len(keys) == 12


def test_edges_to_bounding_boxes(object_layer, vis_config):
    cfg = LayerConfig(z_offset_scale=1.0, collapse_bounding_box=True)
    p = make_edges_to_bounding_boxes(cfg, object_layer, vis_config, "struts", SemanticColor())
    # 箱のある 2 ノード x (1 + 4) 線分
    assert p.n_segments == 10
    assert p.n_points == p.colors.shape[0] == 20
    first = p.segments()[:5]
    np.testing.assert_allclose(first[0, 0], [0.0, 0.0, 5.0])
    np.testing.assert_allclose(first[0, 1], [0.0, 0.0, 2.5])
    # 残りの 4 本は折れ点から上面（z = +1）の 4 隅へ
    np.testing.assert_allclose(first[1:, 0], np.tile([0.0, 0.0, 2.5], (4, 1)))
    np.testing.assert_allclose(first[1:, 1, 2], 1.0)


def test_label_uses_name_or_id(object_layer, layer_config, vis_config):
    named = make_text_primitive(layer_config, object_layer.get_node(1), vis_config, "labels")
    unnamed = make_text_primitive(layer_config, object_layer.get_node(2), vis_config, "labels")
    assert named.text == "chair"
    assert unnamed.text == "2"
    assert named.kind is PrimitiveKind.TEXT
    assert named.pose.position == pytest.approx((0.0, 0.0, 5.0 + layer_config.label_height))


def test_label_symbol_fallback_is_deterministic():
    node_id = NodeSymbol("R", 4).value
    node = SceneGraphNode(node_id, 4, SemanticNodeAttributes())
    assert node_display_name(node) == "R(4)"
    assert node_display_name(node) == node_display_name(node)


def test_label_jitter_bounded_and_injectable(object_layer, vis_config):
    cfg = LayerConfig(z_offset_scale=1.0, add_label_jitter=True, label_jitter_scale=0.3)
    node = object_layer.get_node(1)
    base = 5.0 + cfg.label_height
    zs = [
        make_text_primitive(cfg, node, vis_config, "l", rng=np.random.default_rng(seed)).pose.position[2]
        for seed in range(20)
    ]
    assert all(base - 0.3 <= z <= base + 0.3 for z in zs)
    a = make_text_primitive(cfg, node, vis_config, "l", rng=np.random.default_rng(7))
    b = make_text_primitive(cfg, node, vis_config, "l", rng=np.random.default_rng(7))
    assert a.pose == b.pose


def test_layer_labels(object_layer, layer_config, vis_config):
    prims = make_layer_label_primitives(layer_config, object_layer, vis_config, "l", filter=lambda n: n.id > 1)
    assert [p.id for p in prims] == [2, 3]


def test_label_no_height_uses_label_names(vis_config):
    layer = layer_from_nodes(
        2,
        {
            5: SemanticNodeAttributes(position=(1, 1, 1), name="O(42)", semantic_label=3),
            6: SemanticNodeAttributes(position=(1, 1, 1), name="lamp", semantic_label=9),
        },
    )
    cfg = LayerConfig(z_offset_scale=4.0, label_height=0.5)
    p = make_text_primitive_no_height(cfg, layer.get_node(5), vis_config, "l", {3: "table"})
    assert p is not None
    assert p.text == "table(42)"
    assert p.pose.position == pytest.approx((1.0, 1.0, 1.5))
    q = make_text_primitive_no_height(cfg, layer.get_node(6), vis_config, "l", {3: "table"})
    assert q is not None and q.text == "Unknown(lamp)"


def test_builders_return_fresh_primitives(object_layer, layer_config, vis_config):
    a = make_centroid_primitive(layer_config, object_layer, vis_config, "o", UniformColor(Color(1, 1, 1)))
    b = make_centroid_primitive(layer_config, object_layer, vis_config, "o", UniformColor(Color(1, 1, 1)))
    assert a is not b
    np.testing.assert_array_equal(a.points, b.points)


def test_wireframe_rotated_box_has_axis_aligned_edges_in_box_frame(vis_config):
    yaw = np.deg2rad(45.0)
    rot = np.array([[np.cos(yaw), -np.sin(yaw), 0], [np.sin(yaw), np.cos(yaw), 0], [0, 0, 1]])
    layer = layer_from_nodes(
        1, {1: SemanticNodeAttributes(bounding_box=unit_box((0, 0, 0), (2.0, 4.0, 6.0), rot))}
    )
    p = make_layer_wireframe_bounding_boxes(LayerConfig(), layer, vis_config, "w", SemanticColor())
    lengths = sorted(np.round(np.linalg.norm(np.diff(p.segments(), axis=1)[:, 0], axis=1), 4))
    assert lengths == [2.0] * 4 + [4.0] * 4 + [6.0] * 4
