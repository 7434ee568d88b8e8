"""
どこで: `visual.colors`。
何を: ノード/エッジ/距離から色を決める純関数と、ビルダへ渡す色ポリシー。
なぜ: 一様色・意味色・距離カラーマップ・端点継承という競合する方針を、
      ビルダ側からは同じ「色関数」として扱えるようにするため。

ポリシーは凍結 dataclass で、呼び出すとそのまま色関数になる:

    UniformColor(Color(255, 0, 0))(node)              -> Color
    SemanticColor()(node)                             -> node の意味色（無ければ既定色）
    DistanceColor(cmap)(node)                         -> place の距離で補間
    InheritEndpointColor(use_source=True)(s, t, e, b) -> 端点の意味色
    EdgeWeightColor(cmap)(s, t, e, b)                 -> エッジ重みで補間

いずれも副作用なし（可変状態を捕捉しない）。
"""

from __future__ import annotations

import colorsys
import logging
from dataclasses import dataclass, field
from typing import Callable, Union

from engine.core.geometry_math import clamp_ratio
from graph.attributes import AttributeKind
from graph.scene_graph import SceneGraphEdge, SceneGraphNode
from util.color import Color

from .config import ColormapConfig

logger = logging.getLogger(__name__)

ColorFunction = Callable[[SceneGraphNode], Color]
EdgeColorFunction = Callable[[SceneGraphNode, SceneGraphNode, SceneGraphEdge, bool], Color]
FilterFunction = Callable[[SceneGraphNode], bool]


def interpolate_colormap(colormap: ColormapConfig, ratio: float) -> Color:
    """`ratio` ∈ [0, 1] を HLS の min→max 直線補間で色にする（範囲外は丸める）。"""
    t = min(1.0, max(0.0, float(ratio)))
    h = colormap.min_hue + t * (colormap.max_hue - colormap.min_hue)
    l = colormap.min_luminance + t * (colormap.max_luminance - colormap.min_luminance)
    s = colormap.min_saturation + t * (colormap.max_saturation - colormap.min_saturation)
    r, g, b = colorsys.hls_to_rgb(h, l, s)
    return Color(int(round(r * 255)), int(round(g * 255)), int(round(b * 255)))


def resolve_distance_color(colormap: ColormapConfig, value: float) -> Color:
    """定義域で正規化した値をカラーマップで色にする。

    定義域が退化（`max <= min`）していれば既定色を返す（例外にはしない）。
    """
    if colormap.is_degenerate:
        logger.debug(
            "degenerate colormap domain [%s, %s]; using default color",
            colormap.min_value,
            colormap.max_value,
        )
        return Color()
    ratio = clamp_ratio(colormap.min_value, colormap.max_value, value)
    return interpolate_colormap(colormap, ratio)


def semantic_color(node: SceneGraphNode) -> Color | None:
    attrs = node.attributes.as_kind(AttributeKind.SEMANTIC)
    return None if attrs is None else attrs.color


@dataclass(frozen=True)
class UniformColor:
    """入力に依らず固定色。"""

    color: Color = field(default_factory=Color)

    def __call__(self, node: SceneGraphNode) -> Color:
        return self.color

    def edge(
        self, source: SceneGraphNode, target: SceneGraphNode, edge: SceneGraphEdge, is_source: bool
    ) -> Color:
        return self.color


@dataclass(frozen=True)
class SemanticColor:
    """ノードの意味色。意味属性の無いノードは `fallback`。"""

    fallback: Color = field(default_factory=Color)

    def __call__(self, node: SceneGraphNode) -> Color:
        color = semantic_color(node)
        return self.fallback if color is None else color


@dataclass(frozen=True)
class DistanceColor:
    """place ノードの障害物距離をカラーマップで色にする。place 以外は既定色。"""

    colormap: ColormapConfig

    def __call__(self, node: SceneGraphNode) -> Color:
        attrs = node.attributes.as_kind(AttributeKind.PLACE)
        if attrs is None:
            return Color()
        return resolve_distance_color(self.colormap, attrs.distance)


@dataclass(frozen=True)
class InheritEndpointColor:
    """エッジ色を source / target どちらかの意味色から継承する。"""

    use_source: bool = True
    fallback: Color = field(default_factory=Color)

    def __call__(
        self, source: SceneGraphNode, target: SceneGraphNode, edge: SceneGraphEdge, is_source: bool
    ) -> Color:
        color = semantic_color(source if self.use_source else target)
        return self.fallback if color is None else color


@dataclass(frozen=True)
class EdgeWeightColor:
    """エッジ重みをカラーマップで色にする（両端点同色）。"""

    colormap: ColormapConfig

    def __call__(
        self, source: SceneGraphNode, target: SceneGraphNode, edge: SceneGraphEdge, is_source: bool
    ) -> Color:
        return resolve_distance_color(self.colormap, edge.weight)


@dataclass(frozen=True)
class EndpointNodeColor:
    """各端点を自身のノード色関数で塗る（2 色グラデーションの線分になる）。"""

    node_color: ColorFunction

    def __call__(
        self, source: SceneGraphNode, target: SceneGraphNode, edge: SceneGraphEdge, is_source: bool
    ) -> Color:
        return self.node_color(source if is_source else target)


NodeColorPolicy = Union[UniformColor, SemanticColor, DistanceColor, ColorFunction]
EdgeColorPolicy = Union[InheritEndpointColor, EdgeWeightColor, EndpointNodeColor, EdgeColorFunction]


def resolve_node_color(node: SceneGraphNode, policy: NodeColorPolicy) -> Color:
    return policy(node)


def resolve_edge_color(
    source: SceneGraphNode,
    target: SceneGraphNode,
    edge: SceneGraphEdge,
    is_source: bool,
    policy: EdgeColorPolicy | UniformColor,
) -> Color:
    if isinstance(policy, UniformColor):
        return policy.edge(source, target, edge, is_source)
    return policy(source, target, edge, is_source)


def as_edge_color_function(policy: EdgeColorPolicy | UniformColor | Color) -> EdgeColorFunction:
    """`Color` / `UniformColor` / 4 引数の色関数を 4 引数の色関数へそろえる。"""
    if isinstance(policy, Color):
        policy = UniformColor(policy)
    if isinstance(policy, UniformColor):
        return policy.edge
    return policy


__all__ = [
    "ColorFunction",
    "EdgeColorFunction",
    "FilterFunction",
    "interpolate_colormap",
    "resolve_distance_color",
    "resolve_node_color",
    "resolve_edge_color",
    "semantic_color",
    "as_edge_color_function",
    "UniformColor",
    "SemanticColor",
    "DistanceColor",
    "InheritEndpointColor",
    "EdgeWeightColor",
    "EndpointNodeColor",
]
