import numpy as np
import pytest

from engine.core.primitive import PrimitiveKind
from graph import DynamicSceneGraphLayer, SceneGraphEdge, SceneGraphNode, SemanticNodeAttributes
from util.color import Color
from visual.config import DynamicLayerConfig, VisualizerConfig
from visual.dynamic import (
    AGENT_LABEL,
    make_dynamic_centroid_primitive,
    make_dynamic_edge_primitive,
    make_dynamic_label_primitive,
)

# What this tests
# - 欠番スロットは重心/エッジから除外される。
# - ラベルは末尾スロットの位置 + 層オフセット + label_height。空/末尾欠番は None。


def test_centroids_skip_retired_slots(agent_layer):
    cfg = DynamicLayerConfig(z_offset_scale=1.0, node_alpha=0.5)
    vis = VisualizerConfig(layer_z_step=2.0)
    p = make_dynamic_centroid_primitive(cfg, agent_layer, vis, "agent", Color(0, 0, 255), marker_id=4)
    assert p.kind is PrimitiveKind.CUBE_LIST
    assert p.id == 4
    np.testing.assert_allclose(p.points[:, 0], [0.0, 2.0, 3.0])
    np.testing.assert_allclose(p.points[:, 2], 2.0)
    np.testing.assert_allclose(p.colors, np.tile([0.0, 0.0, 1.0, 0.5], (3, 1)))


def test_centroid_offset_override_and_sphere(agent_layer):
    cfg = DynamicLayerConfig(z_offset_scale=1.0, node_use_sphere=True)
    vis = VisualizerConfig(layer_z_step=2.0)
    p = make_dynamic_centroid_primitive(
        cfg, agent_layer, vis, "agent", lambda n: Color(n.id % 256, 0, 0), layer_offset_scale=3.0
    )
    assert p.kind is PrimitiveKind.SPHERE_LIST
    np.testing.assert_allclose(p.points[:, 2], 6.0)
    np.testing.assert_allclose(p.colors[0, 0], (1000 % 256) / 255, rtol=1e-6)


def test_trajectory_edges_skip_retired(agent_layer):
    cfg = DynamicLayerConfig(z_offset_scale=1.0, edge_alpha=0.7, edge_scale=0.2)
    vis = VisualizerConfig(layer_z_step=1.0)
    p = make_dynamic_edge_primitive(cfg, agent_layer, vis, Color(255, 0, 0), "traj", marker_id=1)
    assert p.n_segments == 1
    np.testing.assert_allclose(p.segments()[0], [[2.0, 0.0, 1.0], [3.0, 0.0, 1.0]])
    assert not p.has_element_colors
    assert p.color == pytest.approx((1.0, 0.0, 0.0, 0.7))
    assert p.scale[0] == pytest.approx(0.2)


def test_label_on_latest_node(agent_layer):
    cfg = DynamicLayerConfig(z_offset_scale=1.0, label_height=0.5, label_scale=0.3)
    vis = VisualizerConfig(layer_z_step=2.0)
    p = make_dynamic_label_primitive(cfg, agent_layer, vis, "label", marker_id=2)
    assert p is not None
    assert p.kind is PrimitiveKind.TEXT
    assert p.text == AGENT_LABEL
    assert p.pose.position == pytest.approx((3.0, 0.0, 2.5))
    assert p.scale == pytest.approx((0.0, 0.0, 0.3))


def test_label_absent_for_empty_or_retired_tail():
    cfg, vis = DynamicLayerConfig(), VisualizerConfig()
    assert make_dynamic_label_primitive(cfg, DynamicSceneGraphLayer(2), vis, "l") is None
    node = SceneGraphNode(1, 2, SemanticNodeAttributes())
    layer = DynamicSceneGraphLayer(2, "a", [node, None])
    assert make_dynamic_label_primitive(cfg, layer, vis, "l") is None


def test_trajectory_edges_follow_appended_nodes():
    layer = DynamicSceneGraphLayer(
        2, "a", [SceneGraphNode(10, 2, SemanticNodeAttributes(position=(0.0, 0.0, 0.0)))]
    )
    layer.nodes.append(SceneGraphNode(11, 2, SemanticNodeAttributes(position=(1.0, 0.0, 0.0))))
    layer.edges[0] = SceneGraphEdge(10, 11)
    p = make_dynamic_edge_primitive(DynamicLayerConfig(), layer, VisualizerConfig(), Color(), "traj")
    assert p.n_points == 2
    np.testing.assert_allclose(p.segments()[0], [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
