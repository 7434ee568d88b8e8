"""
どこで: `visual.edges`。
何を: 層内エッジ（間引きストライド付き）、静的/動的な層間エッジ（層ペアごとの集約と
      最小描画保証つきの間引き）、GVD ワイヤーフレームを LINE_LIST で構築する。
なぜ: 大規模なエッジ集合の描画密度を抑えつつ、層ペアごとに少なくとも 1 本は必ず描くため。

間引きの約束:
- 層内: `s = intralayer_edge_insertion_skip` のとき、反復順で 0, s+1, 2(s+1), ... 番目の
  エッジだけを訪れる（フィルタで落ちたエッジも枠は消費する）。
- 層間: 層ペアごとのカウンタを閾値 `s` で初期化するので、最初のエッジは必ず描かれる。
  以後はカウンタが `s` に達したエッジだけを描いて 0 に戻す。k 本なら ceil(k / (s+1)) 本。
  カウンタは 1 回の呼び出し内だけの一時状態。
"""

from __future__ import annotations

import logging
from collections.abc import Hashable
from typing import Mapping

from engine.core.geometry_math import identity_pose, z_offset
from engine.core.primitive import Primitive, PrimitiveBuffer, PrimitiveKind
from graph.scene_graph import DynamicSceneGraph, SceneGraphLayer, SceneGraphNode
from util.color import Color, to_rgba

from .colors import (
    ColorFunction,
    DistanceColor,
    EdgeColorFunction,
    EdgeWeightColor,
    FilterFunction,
    InheritEndpointColor,
    UniformColor,
    as_edge_color_function,
)
from .config import ColormapConfig, DynamicLayerConfig, LayerConfig, VisualizerConfig
from .skips import log_skip

logger = logging.getLogger(__name__)


class InsertionThrottle:
    """グループごとの「前回描画からの本数」カウンタ（1 回の集約呼び出しに閉じる）。"""

    __slots__ = ("_since_last",)

    def __init__(self) -> None:
        self._since_last: dict[Hashable, int] = {}

    def admit(self, key: Hashable, threshold: int) -> bool:
        """`key` のグループで今回のエッジを描くなら True。"""
        since = self._since_last.setdefault(key, threshold)
        if since >= threshold:
            self._since_last[key] = 0
            return True
        self._since_last[key] = since + 1
        return False


def _raised(node: SceneGraphNode, dz: float) -> tuple[float, float, float]:
    p = node.position
    return (float(p[0]), float(p[1]), float(p[2]) + dz)


# ── 層内エッジ ────────────────────────────────────────────────────────


def make_layer_edge_primitive(
    config: LayerConfig,
    layer: SceneGraphLayer,
    visualizer_config: VisualizerConfig,
    ns: str,
    color_func: EdgeColorFunction | UniformColor | Color,
    filter: FilterFunction | None = None,
) -> Primitive:
    """層内エッジを 2 色（source 側/target 側）の線分で描く。"""
    func = as_edge_color_function(color_func)
    dz = z_offset(config, visualizer_config)
    stride = max(0, int(config.intralayer_edge_insertion_skip)) + 1
    edges = list(layer.edges.values())
    buf = PrimitiveBuffer()
    for edge in edges[::stride]:
        if not (layer.has_node(edge.source) and layer.has_node(edge.target)):
            log_skip(logger, "edge %s -> %s references a missing node", edge.source, edge.target)
            continue
        source = layer.get_node(edge.source)
        target = layer.get_node(edge.target)
        if filter is not None and (not filter(source) or not filter(target)):
            continue
        buf.add_segment(
            _raised(source, dz),
            _raised(target, dz),
            to_rgba(func(source, target, edge, True), config.intralayer_edge_alpha),
            to_rgba(func(source, target, edge, False), config.intralayer_edge_alpha),
        )
    return buf.build(
        PrimitiveKind.LINE_LIST,
        ns=ns,
        id=0,
        pose=identity_pose(),
        scale=config.intralayer_edge_scale,
    )


def make_layer_edge_primitive_by_weight(
    config: LayerConfig,
    layer: SceneGraphLayer,
    visualizer_config: VisualizerConfig,
    colormap: ColormapConfig,
    ns: str,
    filter: FilterFunction | None = None,
) -> Primitive:
    """エッジ重みをカラーマップで塗る層内エッジ。"""
    return make_layer_edge_primitive(
        config, layer, visualizer_config, ns, EdgeWeightColor(colormap), filter
    )


# ── 層間エッジ ────────────────────────────────────────────────────────


def should_visualize(
    graph: DynamicSceneGraph,
    node: SceneGraphNode,
    configs: Mapping[int, LayerConfig],
    dynamic_configs: Mapping[int, DynamicLayerConfig],
) -> bool:
    """ノードの層が描画対象か。動的ノードは層間エッジ描画も有効である必要がある。"""
    if graph.is_dynamic(node.id):
        dcfg = dynamic_configs.get(node.layer)
        return dcfg is not None and dcfg.visualize and dcfg.visualize_interlayer_edges
    cfg = configs.get(node.layer)
    return cfg is not None and cfg.visualize


def get_config_layer(
    graph: DynamicSceneGraph, source: SceneGraphNode, target: SceneGraphNode
) -> int:
    """動的層間エッジの設定を引く層（動的側の端点の層）。"""
    return source.layer if graph.is_dynamic(source.id) else target.layer


def _group_ns(ns_prefix: str, key: tuple[int, int]) -> str:
    return f"{ns_prefix}{key[0]}_{key[1]}"


def make_graph_edge_primitives(
    graph: DynamicSceneGraph,
    configs: Mapping[int, LayerConfig],
    visualizer_config: VisualizerConfig,
    ns_prefix: str,
    filter: FilterFunction | None = None,
) -> list[Primitive]:
    """静的層間エッジを (source 層, target 層) ごとの LINE_LIST に集約する。

    間引き閾値・線幅・色方針は source（親）層の設定を使う。どちらかの層が
    未設定/非表示のエッジは間引きの勘定より前に捨てる。
    """
    buffers: dict[tuple[int, int], PrimitiveBuffer] = {}
    throttle = InsertionThrottle()
    for edge in graph.interlayer_edges.values():
        if not (graph.has_node(edge.source) and graph.has_node(edge.target)):
            log_skip(logger, "interlayer edge %s -> %s references a missing node", edge.source, edge.target)
            continue
        source = graph.get_node(edge.source)
        target = graph.get_node(edge.target)
        if filter is not None and (not filter(source) or not filter(target)):
            continue
        src_cfg = configs.get(source.layer)
        tgt_cfg = configs.get(target.layer)
        if src_cfg is None or tgt_cfg is None:
            continue
        if not src_cfg.visualize or not tgt_cfg.visualize:
            continue

        key = (source.layer, target.layer)
        buf = buffers.setdefault(key, PrimitiveBuffer())
        if not throttle.admit(key, src_cfg.interlayer_edge_insertion_skip):
            continue

        if src_cfg.interlayer_edge_use_color:
            color = InheritEndpointColor(src_cfg.use_edge_source)(source, target, edge, True)
        else:
            color = Color()
        rgba = to_rgba(color, src_cfg.interlayer_edge_alpha)
        buf.add_segment(
            _raised(source, z_offset(src_cfg, visualizer_config)),
            _raised(target, z_offset(tgt_cfg, visualizer_config)),
            rgba,
            rgba,
        )

    return [
        buffers[key].build(
            PrimitiveKind.LINE_LIST,
            ns=_group_ns(ns_prefix, key),
            id=0,
            pose=identity_pose(),
            scale=configs[key[0]].interlayer_edge_scale,
        )
        for key in sorted(buffers)
    ]


def _node_z_offset(
    graph: DynamicSceneGraph,
    node: SceneGraphNode,
    configs: Mapping[int, LayerConfig],
    dynamic_configs: Mapping[int, DynamicLayerConfig],
    visualizer_config: VisualizerConfig,
) -> float:
    if graph.is_dynamic(node.id):
        return z_offset(dynamic_configs[node.layer], visualizer_config)
    return z_offset(configs[node.layer], visualizer_config)


def make_dynamic_graph_edge_primitives(
    graph: DynamicSceneGraph,
    configs: Mapping[int, LayerConfig],
    dynamic_configs: Mapping[int, DynamicLayerConfig],
    visualizer_config: VisualizerConfig,
    ns_prefix: str,
) -> list[Primitive]:
    """動的層間エッジを層ペアごとに集約する（一様色、閾値は動的層の設定）。"""
    buffers: dict[tuple[int, int], PrimitiveBuffer] = {}
    styles: dict[tuple[int, int], DynamicLayerConfig] = {}
    throttle = InsertionThrottle()
    for edge in graph.dynamic_interlayer_edges.values():
        if not (graph.has_node(edge.source) and graph.has_node(edge.target)):
            log_skip(logger, "dynamic edge %s -> %s references a missing node", edge.source, edge.target)
            continue
        source = graph.get_node(edge.source)
        target = graph.get_node(edge.target)
        if not should_visualize(graph, source, configs, dynamic_configs):
            continue
        if not should_visualize(graph, target, configs, dynamic_configs):
            continue

        dcfg = dynamic_configs[get_config_layer(graph, source, target)]
        key = (source.layer, target.layer)
        buf = buffers.setdefault(key, PrimitiveBuffer())
        styles.setdefault(key, dcfg)
        if not throttle.admit(key, dcfg.interlayer_edge_insertion_skip):
            continue

        buf.add_segment(
            _raised(source, _node_z_offset(graph, source, configs, dynamic_configs, visualizer_config)),
            _raised(target, _node_z_offset(graph, target, configs, dynamic_configs, visualizer_config)),
        )

    return [
        buffers[key].build(
            PrimitiveKind.LINE_LIST,
            ns=_group_ns(ns_prefix, key),
            id=0,
            pose=identity_pose(),
            scale=styles[key].interlayer_edge_scale,
            color=to_rgba(Color(), styles[key].interlayer_edge_alpha),
        )
        for key in sorted(buffers)
    ]


# ── GVD ───────────────────────────────────────────────────────────────


def make_gvd_wireframe(
    config: LayerConfig,
    layer: SceneGraphLayer,
    ns: str,
    color_func: ColorFunction,
    marker_id: int = 0,
) -> list[Primitive]:
    """GVD の節点（`ns + "_nodes"`）と辺（`ns + "_edges"`）。層オフセットは付けない。

    ノードが無ければ空リスト、エッジが無ければ節点のみを返す。
    """
    if layer.num_nodes() == 0:
        return []

    nodes = PrimitiveBuffer()
    for node in layer.nodes.values():
        nodes.add_point(node.position, to_rgba(color_func(node), config.marker_alpha))
    out = [
        nodes.build(
            PrimitiveKind.SPHERE_LIST,
            ns=f"{ns}_nodes",
            id=marker_id,
            pose=identity_pose(),
            scale=config.intralayer_edge_scale,
        )
    ]
    if layer.num_edges() == 0:
        return out

    edges = PrimitiveBuffer()
    for edge in layer.edges.values():
        if not (layer.has_node(edge.source) and layer.has_node(edge.target)):
            log_skip(logger, "gvd edge %s -> %s references a missing node", edge.source, edge.target)
            continue
        source = layer.get_node(edge.source)
        target = layer.get_node(edge.target)
        edges.add_segment(
            source.position,
            target.position,
            to_rgba(color_func(source), config.marker_alpha),
            to_rgba(color_func(target), config.marker_alpha),
        )
    out.append(
        edges.build(
            PrimitiveKind.LINE_LIST,
            ns=f"{ns}_edges",
            id=marker_id,
            pose=identity_pose(),
            scale=config.intralayer_edge_scale,
        )
    )
    return out


def make_gvd_wireframe_by_distance(
    config: LayerConfig,
    layer: SceneGraphLayer,
    ns: str,
    colormap: ColormapConfig,
    marker_id: int = 0,
) -> list[Primitive]:
    """障害物距離で塗る GVD ワイヤーフレーム。"""
    return make_gvd_wireframe(config, layer, ns, DistanceColor(colormap), marker_id)


__all__ = [
    "InsertionThrottle",
    "make_layer_edge_primitive",
    "make_layer_edge_primitive_by_weight",
    "should_visualize",
    "get_config_layer",
    "make_graph_edge_primitives",
    "make_dynamic_graph_edge_primitives",
    "make_gvd_wireframe",
    "make_gvd_wireframe_by_distance",
]
