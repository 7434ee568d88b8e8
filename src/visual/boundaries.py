"""
どこで: `visual.boundaries`。
何を: 2D place の境界表現（当てはめ楕円、境界 → 重心の扇、境界の外周）を LINE_LIST で構築する。
なぜ: 同じ境界データから用途別に 3 種の線表現を作るが、退化境界（点数 <= 1）の扱いと
      高さの約束（境界点はノード Z、層オフセットは姿勢か重心側）を揃えるため。
"""

from __future__ import annotations

import logging

from engine.core.geometry_math import ELLIPSE_SAMPLES, ellipse_points, identity_pose, z_offset
from engine.core.primitive import Primitive, PrimitiveBuffer, PrimitiveKind
from graph.attributes import AttributeKind, Place2dNodeAttributes
from graph.scene_graph import SceneGraphLayer
from util.color import Color, to_rgba

from .config import LayerConfig, VisualizerConfig
from .skips import log_skip

logger = logging.getLogger(__name__)


def _boundary_attrs(layer: SceneGraphLayer):
    """境界を持つ（2 点以上の）2D place 属性を順に返す。"""
    for node in layer.nodes.values():
        attrs = node.attributes.as_kind(AttributeKind.PLACE_2D)
        if attrs is None:
            log_skip(logger, "node %s is not a 2D place", node.id)
            continue
        if attrs.boundary.shape[0] <= 1:
            log_skip(logger, "node %s has a degenerate boundary", node.id)
            continue
        yield attrs


def _at_node_height(point, attrs: Place2dNodeAttributes) -> tuple[float, float, float]:
    return (float(point[0]), float(point[1]), float(attrs.position[2]))


def make_layer_ellipse_boundaries(
    config: LayerConfig,
    layer: SceneGraphLayer,
    visualizer_config: VisualizerConfig,
    ns: str,
) -> Primitive:
    """当てはめ楕円を 20 分割の閉ループで描く（ノードあたり 20 線分）。"""
    dz = 0.0 if config.collapse_boundary else z_offset(config, visualizer_config)
    buf = PrimitiveBuffer()
    for attrs in _boundary_attrs(layer):
        color = to_rgba(attrs.color, config.boundary_ellipse_alpha)
        pts = ellipse_points(
            attrs.ellipse_matrix_expand,
            attrs.ellipse_centroid,
            attrs.position[2],
            ELLIPSE_SAMPLES,
        )
        for last, cur in zip(pts[:-1], pts[1:]):
            buf.add_segment(last, cur, color)
    return buf.build(
        PrimitiveKind.LINE_LIST,
        ns=ns,
        id=0,
        pose=identity_pose().raised(dz),
        scale=config.boundary_wireframe_scale,
    )


def make_layer_polygon_edges(
    config: LayerConfig,
    layer: SceneGraphLayer,
    visualizer_config: VisualizerConfig,
    ns: str,
) -> Primitive:
    """境界の各頂点からノード重心（層オフセット込み）への扇。"""
    dz = z_offset(config, visualizer_config)
    buf = PrimitiveBuffer()
    for attrs in _boundary_attrs(layer):
        color = to_rgba(attrs.color, config.boundary_alpha)
        p = attrs.position
        centroid = (float(p[0]), float(p[1]), float(p[2]) + dz)
        for vertex in attrs.boundary:
            buf.add_segment(_at_node_height(vertex, attrs), centroid, color)
    return buf.build(
        PrimitiveKind.LINE_LIST,
        ns=ns,
        id=0,
        pose=identity_pose(),
        scale=config.boundary_wireframe_scale,
    )


def make_layer_polygon_boundaries(
    config: LayerConfig,
    layer: SceneGraphLayer,
    visualizer_config: VisualizerConfig,
    ns: str,
) -> Primitive:
    """境界の外周（末尾 → 先頭の折り返しを含む K 線分）。

    色は `boundary_use_node_color` ならノードの意味色、そうでなければ既定色。
    """
    dz = 0.0 if config.collapse_boundary else z_offset(config, visualizer_config)
    buf = PrimitiveBuffer()
    for attrs in _boundary_attrs(layer):
        base = attrs.color if config.boundary_use_node_color else Color()
        color = to_rgba(base, config.boundary_alpha)
        last = _at_node_height(attrs.boundary[-1], attrs)
        for vertex in attrs.boundary:
            cur = _at_node_height(vertex, attrs)
            buf.add_segment(last, cur, color)
            last = cur
    return buf.build(
        PrimitiveKind.LINE_LIST,
        ns=ns,
        id=0,
        pose=identity_pose().raised(dz),
        scale=config.boundary_wireframe_scale,
    )


__all__ = [
    "make_layer_ellipse_boundaries",
    "make_layer_polygon_edges",
    "make_layer_polygon_boundaries",
]
