"""
どこで: `visual.dynamic`。
何を: 動的層（エージェント軌跡）の重心列、軌跡エッジ、末尾ラベル。
なぜ: 動的層は時系列のスロット列で欠番を含み得るため、汎用ビルダとは別に
      スロット走査と位置引きで構築する。
"""

from __future__ import annotations

import logging

from engine.core.geometry_math import identity_pose, z_offset
from engine.core.primitive import Pose, Primitive, PrimitiveBuffer, PrimitiveKind
from graph.scene_graph import DynamicSceneGraphLayer
from util.color import Color, to_rgba

from .colors import ColorFunction, UniformColor
from .config import DynamicLayerConfig, VisualizerConfig
from .skips import log_skip

logger = logging.getLogger(__name__)

AGENT_LABEL = "Agent"


def make_dynamic_centroid_primitive(
    config: DynamicLayerConfig,
    layer: DynamicSceneGraphLayer,
    visualizer_config: VisualizerConfig,
    ns: str,
    color_func: ColorFunction | Color,
    marker_id: int = 0,
    layer_offset_scale: float | None = None,
) -> Primitive:
    """軌跡ノードの重心列（欠番スロットは飛ばす）。

    `layer_offset_scale` 未指定時は `config.z_offset_scale` で持ち上げる。
    """
    func = UniformColor(color_func) if isinstance(color_func, Color) else color_func
    scale = config.z_offset_scale if layer_offset_scale is None else layer_offset_scale
    dz = z_offset(scale, visualizer_config)
    buf = PrimitiveBuffer()
    for node in layer.nodes:
        if node is None:
            continue
        p = node.position
        buf.add_point(
            (float(p[0]), float(p[1]), float(p[2]) + dz),
            to_rgba(func(node), config.node_alpha),
        )
    return buf.build(
        PrimitiveKind.SPHERE_LIST if config.node_use_sphere else PrimitiveKind.CUBE_LIST,
        ns=ns,
        id=marker_id,
        pose=identity_pose(),
        scale=config.node_scale,
    )


def make_dynamic_edge_primitive(
    config: DynamicLayerConfig,
    layer: DynamicSceneGraphLayer,
    visualizer_config: VisualizerConfig,
    color: Color,
    ns: str,
    marker_id: int = 0,
) -> Primitive:
    """軌跡エッジ（位置引きで端点を得る、一様色）。"""
    dz = z_offset(config, visualizer_config)
    buf = PrimitiveBuffer()
    for edge in layer.edges.values():
        if not (layer.has_node(edge.source) and layer.has_node(edge.target)):
            log_skip(logger, "trajectory edge %s -> %s references a retired slot", edge.source, edge.target)
            continue
        s = layer.get_position(edge.source)
        t = layer.get_position(edge.target)
        buf.add_segment(
            (float(s[0]), float(s[1]), float(s[2]) + dz),
            (float(t[0]), float(t[1]), float(t[2]) + dz),
        )
    return buf.build(
        PrimitiveKind.LINE_LIST,
        ns=ns,
        id=marker_id,
        pose=identity_pose(),
        scale=config.edge_scale,
        color=to_rgba(color, config.edge_alpha),
    )


def make_dynamic_label_primitive(
    config: DynamicLayerConfig,
    layer: DynamicSceneGraphLayer,
    visualizer_config: VisualizerConfig,
    ns: str,
    marker_id: int = 0,
) -> Primitive | None:
    """最新の軌跡ノード上の ``"Agent"`` ラベル。空の層（末尾スロットが欠番）は None。"""
    if layer.num_nodes() == 0 or layer.nodes[-1] is None:
        return None
    latest = layer.get_position_by_index(layer.num_nodes() - 1)
    dz = z_offset(config, visualizer_config) + config.label_height
    return Primitive(
        PrimitiveKind.TEXT,
        ns=ns,
        id=marker_id,
        pose=Pose((float(latest[0]), float(latest[1]), float(latest[2]) + dz)),
        scale=(0.0, 0.0, config.label_scale),
        color=to_rgba(Color()),
        text=AGENT_LABEL,
    )


__all__ = [
    "AGENT_LABEL",
    "make_dynamic_centroid_primitive",
    "make_dynamic_edge_primitive",
    "make_dynamic_label_primitive",
]
