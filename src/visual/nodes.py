"""
どこで: `visual.nodes`。
何を: ノード種別ごとのプリミティブ構築（重心、フロンティア楕円体、有向箱、箱ワイヤーフレーム、
      箱への支柱、テキストラベル）。
なぜ: 各ビルダは対象ノード集合を 1 パスで走査し、不変の `Primitive` を返す純関数として揃えるため。

共通の約束:
- `filter` は「ノード → bool」。False のノードは何も寄与しない。
- 必要な属性種別を持たないノードは、そのプリミティブにだけ寄与しない（例外にしない）。
- 層の Z オフセットは点列に焼き込むか、`collapse_*` を見て姿勢側に載せる。保存データは変えない。
"""

from __future__ import annotations

import logging
import re
from typing import Mapping

import numpy as np

from common import settings
from engine.core.geometry_math import (
    TOP_CORNERS,
    corners_of,
    identity_pose,
    quaternion_from_matrix,
    wireframe_edge_pairs,
    z_offset,
)
from engine.core.primitive import Pose, Primitive, PrimitiveBuffer, PrimitiveKind
from graph.attributes import AttributeKind
from graph.node_symbol import node_label
from graph.scene_graph import SceneGraphLayer, SceneGraphNode
from util.color import Color, to_rgba

from .colors import ColorFunction, FilterFunction
from .config import LayerConfig, VisualizerConfig
from .skips import log_skip

logger = logging.getLogger(__name__)

_INSTANCE_NUMBER = re.compile(r"[A-Za-z]\((\d+)\)")

_jitter_rng: np.random.Generator | None = None


def shared_jitter_rng() -> np.random.Generator:
    """ラベル jitter 用のプロセス共有乱数（`DSGV_LABEL_JITTER_SEED` で種を固定可能）。"""
    global _jitter_rng
    if _jitter_rng is None:
        _jitter_rng = np.random.default_rng(settings.get().LABEL_JITTER_SEED)
    return _jitter_rng


def _raised(position: np.ndarray, dz: float) -> tuple[float, float, float]:
    return (float(position[0]), float(position[1]), float(position[2]) + dz)


def _centroid_kind(use_sphere: bool) -> PrimitiveKind:
    return PrimitiveKind.SPHERE_LIST if use_sphere else PrimitiveKind.CUBE_LIST


# ── 重心 ──────────────────────────────────────────────────────────────


def make_centroid_primitive(
    config: LayerConfig,
    layer: SceneGraphLayer,
    visualizer_config: VisualizerConfig,
    ns: str,
    color_func: ColorFunction,
    filter: FilterFunction | None = None,
) -> Primitive:
    """ノード 1 つにつき 1 点の重心リスト。"""
    dz = z_offset(config, visualizer_config)
    buf = PrimitiveBuffer()
    for node in layer.nodes.values():
        if filter is not None and not filter(node):
            continue
        buf.add_point(_raised(node.position, dz), to_rgba(color_func(node), config.marker_alpha))
    return buf.build(
        _centroid_kind(config.use_sphere_marker),
        ns=ns,
        id=0,
        pose=identity_pose(),
        scale=config.marker_scale,
    )


def make_place_centroid_primitive(
    config: LayerConfig,
    layer: SceneGraphLayer,
    visualizer_config: VisualizerConfig,
    ns: str,
    color_func: ColorFunction,
    real_place: bool = True,
) -> Primitive:
    """place 層の重心。`real_place` と一致するノードだけを描く（place 以外は寄与なし）。"""

    def _matches(node: SceneGraphNode) -> bool:
        attrs = node.attributes.as_kind(AttributeKind.PLACE)
        return attrs is not None and attrs.real_place == real_place

    return make_centroid_primitive(config, layer, visualizer_config, ns, color_func, _matches)


def make_ellipsoid_primitives(
    config: LayerConfig,
    layer: SceneGraphLayer,
    visualizer_config: VisualizerConfig,
    ns: str,
    color_func: ColorFunction,
) -> list[Primitive]:
    """フロンティア（非 real place）ごとに 1 つの楕円体。id は 0 からの連番。"""
    dz = z_offset(config, visualizer_config)
    out: list[Primitive] = []
    for node in layer.nodes.values():
        attrs = node.attributes.as_kind(AttributeKind.PLACE)
        if attrs is None or attrs.real_place:
            continue
        pose = Pose(_raised(attrs.position, dz), tuple(float(v) for v in attrs.orientation))
        out.append(
            Primitive(
                PrimitiveKind.SPHERE,
                ns=ns,
                id=len(out),
                pose=pose,
                scale=tuple(float(v) for v in attrs.frontier_scale),
                color=to_rgba(color_func(node), config.marker_alpha),
            )
        )
    return out


# ── バウンディングボックス ─────────────────────────────────────────────


def make_bounding_box_primitive(
    config: LayerConfig,
    node: SceneGraphNode,
    visualizer_config: VisualizerConfig,
    ns: str,
    color_func: ColorFunction,
) -> Primitive | None:
    """ノードの有向箱（ソリッド）。id はノード ID。箱を持たないノードは None。"""
    attrs = node.attributes.as_kind(AttributeKind.SEMANTIC)
    if attrs is None or attrs.bounding_box is None:
        log_skip(logger, "node %s has no bounding box", node.id)
        return None
    bbox = attrs.bounding_box
    dz = 0.0 if config.collapse_bounding_box else z_offset(config, visualizer_config)
    pose = Pose(_raised(bbox.world_P_center, dz), quaternion_from_matrix(bbox.world_R_center))
    return Primitive(
        PrimitiveKind.CUBE,
        ns=ns,
        id=node.id,
        pose=pose,
        scale=tuple(float(v) for v in bbox.dimensions),
        color=to_rgba(color_func(node), config.bounding_box_alpha),
    )


def make_layer_bounding_box_primitives(
    config: LayerConfig,
    layer: SceneGraphLayer,
    visualizer_config: VisualizerConfig,
    ns: str,
    color_func: ColorFunction,
    filter: FilterFunction | None = None,
) -> list[Primitive]:
    out: list[Primitive] = []
    for node in layer.nodes.values():
        if filter is not None and not filter(node):
            continue
        prim = make_bounding_box_primitive(config, node, visualizer_config, ns, color_func)
        if prim is not None:
            out.append(prim)
    return out


def _node_corners(node: SceneGraphNode) -> np.ndarray | None:
    attrs = node.attributes.as_kind(AttributeKind.SEMANTIC)
    if attrs is None or attrs.bounding_box is None:
        log_skip(logger, "node %s has no bounding box", node.id)
        return None
    return corners_of(attrs.bounding_box)


def make_layer_wireframe_bounding_boxes(
    config: LayerConfig,
    layer: SceneGraphLayer,
    visualizer_config: VisualizerConfig,
    ns: str,
    color_func: ColorFunction,
    filter: FilterFunction | None = None,
) -> Primitive:
    """各ノードの箱の 12 辺（1bit 反転の頂点組）を 1 つの LINE_LIST にまとめる。"""
    dz = 0.0 if config.collapse_bounding_box else z_offset(config, visualizer_config)
    pairs = wireframe_edge_pairs()
    buf = PrimitiveBuffer()
    for node in layer.nodes.values():
        if filter is not None and not filter(node):
            continue
        corners = _node_corners(node)
        if corners is None:
            continue
        color = to_rgba(color_func(node), config.bounding_box_alpha)
        for a, b in pairs:
            buf.add_segment(corners[a], corners[b], color)
    return buf.build(
        PrimitiveKind.LINE_LIST,
        ns=ns,
        id=0,
        pose=identity_pose().raised(dz),
        scale=config.bbox_wireframe_scale,
    )


def make_edges_to_bounding_boxes(
    config: LayerConfig,
    layer: SceneGraphLayer,
    visualizer_config: VisualizerConfig,
    ns: str,
    color_func: ColorFunction,
    filter: FilterFunction | None = None,
) -> Primitive:
    """重心 → 折れ点の 1 本と、折れ点 → 箱上面 4 隅の 4 本（ノードあたり 10 点）。

    折れ点は重心の真下で、Z は `mesh_edge_break_ratio * 層オフセット`。
    """
    dz = z_offset(config, visualizer_config)
    box_dz = 0.0 if config.collapse_bounding_box else dz
    break_dz = visualizer_config.mesh_edge_break_ratio * dz
    buf = PrimitiveBuffer()
    for node in layer.nodes.values():
        if filter is not None and not filter(node):
            continue
        corners = _node_corners(node)
        if corners is None:
            continue
        color = to_rgba(color_func(node), config.bounding_box_alpha)
        centroid = _raised(node.position, dz)
        break_point = _raised(node.position, break_dz)
        buf.add_segment(centroid, break_point, color)
        for c in TOP_CORNERS:
            buf.add_segment(break_point, _raised(corners[c], box_dz), color)
    return buf.build(
        PrimitiveKind.LINE_LIST,
        ns=ns,
        id=0,
        pose=identity_pose(),
        scale=config.bbox_wireframe_edge_scale,
    )


# ── ラベル ────────────────────────────────────────────────────────────


def node_display_name(node: SceneGraphNode) -> str:
    """保存名があればそれ、無ければ ID の決定的な表示文字列。"""
    attrs = node.attributes.as_kind(AttributeKind.SEMANTIC)
    if attrs is not None and attrs.name:
        return attrs.name
    return node_label(node.id)


def make_text_primitive(
    config: LayerConfig,
    node: SceneGraphNode,
    visualizer_config: VisualizerConfig,
    ns: str,
    rng: np.random.Generator | None = None,
) -> Primitive:
    """ノード上方のテキストラベル。

    位置 = ノード位置 + 層オフセット + `label_height`。`add_label_jitter` 有効時は
    `[-label_jitter_scale, label_jitter_scale]` の一様乱数を Z に加える
    （`rng` 未指定ならプロセス共有の乱数を使う）。
    """
    dz = z_offset(config, visualizer_config) + config.label_height
    if config.add_label_jitter:
        gen = rng if rng is not None else shared_jitter_rng()
        dz += config.label_jitter_scale * float(gen.uniform(-1.0, 1.0))
    return Primitive(
        PrimitiveKind.TEXT,
        ns=ns,
        id=node.id,
        pose=Pose(_raised(node.position, dz)),
        scale=(0.0, 0.0, config.label_scale),
        color=to_rgba(Color()),
        text=node_display_name(node),
    )


def make_layer_label_primitives(
    config: LayerConfig,
    layer: SceneGraphLayer,
    visualizer_config: VisualizerConfig,
    ns: str,
    filter: FilterFunction | None = None,
    rng: np.random.Generator | None = None,
) -> list[Primitive]:
    return [
        make_text_primitive(config, node, visualizer_config, ns, rng)
        for node in layer.nodes.values()
        if filter is None or filter(node)
    ]


def make_text_primitive_no_height(
    config: LayerConfig,
    node: SceneGraphNode,
    visualizer_config: VisualizerConfig,
    ns: str,
    label_names: Mapping[int, str] | None = None,
) -> Primitive | None:
    """``"<ラベル名>(<インスタンス番号>)"`` の平置きラベル（層オフセットなし）。

    - ラベル名は `label_names[semantic_label]`、無ければ ``"Unknown"``。
    - インスタンス番号は ``"O(12)"`` 形式の名前から取り出す。取り出せなければ名前そのもの。
    - 意味属性を持たないノードは None。
    """
    attrs = node.attributes.as_kind(AttributeKind.SEMANTIC)
    if attrs is None:
        log_skip(logger, "node %s has no semantic attributes", node.id)
        return None

    unique_id = attrs.name
    match = _INSTANCE_NUMBER.search(unique_id)
    if match is not None:
        unique_id = match.group(1)
    else:
        logger.warning("could not extract instance number from name: %r", attrs.name)

    if label_names is None:
        logger.warning("no label names available; labelling node %s as Unknown", node.id)
        label_text = "Unknown"
    else:
        label_text = label_names.get(attrs.semantic_label, "Unknown")

    return Primitive(
        PrimitiveKind.TEXT,
        ns=ns,
        id=node.id,
        pose=Pose(_raised(node.position, config.label_height)),
        scale=(0.0, 0.0, config.label_scale),
        color=to_rgba(Color()),
        text=f"{label_text}({unique_id})",
    )


__all__ = [
    "shared_jitter_rng",
    "make_centroid_primitive",
    "make_place_centroid_primitive",
    "make_ellipsoid_primitives",
    "make_bounding_box_primitive",
    "make_layer_bounding_box_primitives",
    "make_layer_wireframe_bounding_boxes",
    "make_edges_to_bounding_boxes",
    "node_display_name",
    "make_text_primitive",
    "make_layer_label_primitives",
    "make_text_primitive_no_height",
]
