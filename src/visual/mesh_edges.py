"""
どこで: `visual.mesh_edges`。
何を: 2D place の重心と、対応するメッシュ頂点を結ぶ折れ線（places ↔ mesh 対応の可視化）。
なぜ: 重心から折れ点までの 1 本と、折れ点から間引いた対応頂点への線で、層とメッシュの
      対応を太い束にせず見せるため。
"""

from __future__ import annotations

import logging

from engine.core.geometry_math import identity_pose, z_offset
from engine.core.primitive import Primitive, PrimitiveBuffer, PrimitiveKind
from graph.attributes import AttributeKind
from graph.scene_graph import DynamicSceneGraph, SceneGraphLayer
from util.color import Color, to_rgba

from .config import LayerConfig, VisualizerConfig
from .skips import log_skip

logger = logging.getLogger(__name__)


def make_mesh_edges_primitive(
    config: LayerConfig,
    visualizer_config: VisualizerConfig,
    graph: DynamicSceneGraph,
    layer: SceneGraphLayer,
    ns: str,
) -> Primitive:
    """ノード重心 → 折れ点 → メッシュ頂点 の LINE_LIST。

    - 折れ点は重心の真下、Z は `mesh_edge_break_ratio * 層オフセット`。
    - 対応 index は `interlayer_edge_insertion_skip + 1` ごとに間引き、範囲外は捨てる。
    - メッシュ頂点は `collapse_layers` でなければ `mesh_layer_offset` だけ持ち上げる。
    - メッシュが無ければ空のプリミティブ。
    """
    buf = PrimitiveBuffer()
    mesh = graph.mesh
    if mesh is None:
        return buf.build(
            PrimitiveKind.LINE_LIST, ns=ns, id=0, pose=identity_pose(), scale=config.interlayer_edge_scale
        )

    dz = z_offset(config, visualizer_config)
    break_dz = visualizer_config.mesh_edge_break_ratio * dz
    mesh_dz = 0.0 if visualizer_config.collapse_layers else visualizer_config.mesh_layer_offset
    stride = max(0, int(config.interlayer_edge_insertion_skip)) + 1
    n_vertices = mesh.num_vertices()

    for node in layer.nodes.values():
        attrs = node.attributes.as_kind(AttributeKind.PLACE_2D)
        if attrs is None or not attrs.mesh_connections:
            continue

        base = attrs.color if config.interlayer_edge_use_color else Color()
        color = to_rgba(base, config.interlayer_edge_alpha)
        x, y, z = (float(v) for v in attrs.position)
        break_point = (x, y, z + break_dz)
        buf.add_segment((x, y, z + dz), break_point, color)

        for midx in attrs.mesh_connections[::stride]:
            if not 0 <= midx < n_vertices:
                log_skip(logger, "node %s: mesh index %s out of range (%s)", node.id, midx, n_vertices)
                continue
            vx, vy, vz = (float(v) for v in mesh.pos(midx))
            buf.add_segment(break_point, (vx, vy, vz + mesh_dz), color)

    return buf.build(
        PrimitiveKind.LINE_LIST,
        ns=ns,
        id=0,
        pose=identity_pose(),
        scale=config.interlayer_edge_scale,
    )


__all__ = ["make_mesh_edges_primitive"]
