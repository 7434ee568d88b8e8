"""
どこで: `graph.scene_graph`。
何を: 可視化が読むシーングラフの最小データモデル（層・動的層・層間エッジ・メッシュ）。
なぜ: グラフの保存/更新は外部の責務。本パッケージは読み取り専用ビューとしてのみ扱い、
      ビルダはここに定義された読み出し面（列挙/ID 引き/位置引き）だけに依存する。

不変条件:
- 静的層間エッジの `source` は常に親（上位）層側のノード。
- 動的層の `nodes` は時系列順で、退役したスロットは `None` を取り得る。
- 動的層/グラフの ID 引きは呼び出しごとに現在の `nodes` を走査する（構築後の追記も見える）。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping

import numpy as np

from .attributes import NodeAttributes


@dataclass(frozen=True)
class SceneGraphNode:
    id: int
    layer: int
    attributes: NodeAttributes

    @property
    def position(self) -> np.ndarray:
        return self.attributes.position


@dataclass(frozen=True)
class SceneGraphEdge:
    source: int
    target: int
    weight: float = 1.0


@dataclass
class SceneGraphLayer:
    """静的層。`nodes`/`edges` は ID → 要素の辞書（挿入順で反復）。"""

    id: int
    nodes: dict[int, SceneGraphNode] = field(default_factory=dict)
    edges: dict[int, SceneGraphEdge] = field(default_factory=dict)

    def get_node(self, node_id: int) -> SceneGraphNode:
        return self.nodes[node_id]

    def has_node(self, node_id: int) -> bool:
        return node_id in self.nodes

    def num_nodes(self) -> int:
        return len(self.nodes)

    def num_edges(self) -> int:
        return len(self.edges)


@dataclass
class DynamicSceneGraphLayer:
    """動的層（エージェント軌跡）。

    `nodes` は時系列順のリスト（`None` は欠番）。`edges` は通常連続ノード間を結ぶ。
    """

    id: int
    prefix: str = "a"
    nodes: list[SceneGraphNode | None] = field(default_factory=list)
    edges: dict[int, SceneGraphEdge] = field(default_factory=dict)

    def iter_nodes(self) -> Iterator[SceneGraphNode]:
        return (n for n in self.nodes if n is not None)

    def _find(self, node_id: int) -> SceneGraphNode | None:
        for node in self.iter_nodes():
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: int) -> bool:
        return self._find(node_id) is not None

    def get_node(self, node_id: int) -> SceneGraphNode:
        """ID でノードを引く。欠番/未登録は `KeyError`。"""
        node = self._find(node_id)
        if node is None:
            raise KeyError(f"unknown dynamic node id: {node_id}")
        return node

    def get_position(self, node_id: int) -> np.ndarray:
        return self.get_node(node_id).attributes.position

    def get_position_by_index(self, index: int) -> np.ndarray:
        """時系列 index の位置。欠番スロットは `KeyError`。"""
        node = self.nodes[index]
        if node is None:
            raise KeyError(f"dynamic node slot {index} is empty")
        return node.attributes.position

    def num_nodes(self) -> int:
        return len(self.nodes)


class Mesh:
    """頂点 index で引けるメッシュ（面情報は可視化に不要なので持たない）。"""

    __slots__ = ("vertices",)

    def __init__(self, vertices) -> None:
        v = np.asarray(vertices, dtype=np.float64)
        if v.size == 0:
            v = np.zeros((0, 3), dtype=np.float64)
        if v.ndim != 2 or v.shape[1] != 3:
            raise ValueError(f"vertices must be (N, 3): {v.shape}")
        self.vertices = v

    def num_vertices(self) -> int:
        return int(self.vertices.shape[0])

    def pos(self, index: int) -> np.ndarray:
        return self.vertices[index]


@dataclass
class DynamicSceneGraph:
    """層と動的層、層間エッジ、任意のメッシュをまとめたグラフ。"""

    layers: dict[int, SceneGraphLayer] = field(default_factory=dict)
    dynamic_layers: dict[int, DynamicSceneGraphLayer] = field(default_factory=dict)
    interlayer_edges: dict[int, SceneGraphEdge] = field(default_factory=dict)
    dynamic_interlayer_edges: dict[int, SceneGraphEdge] = field(default_factory=dict)
    mesh: Mesh | None = None

    def is_dynamic(self, node_id: int) -> bool:
        return any(layer.has_node(node_id) for layer in self.dynamic_layers.values())

    def has_node(self, node_id: int) -> bool:
        if self.is_dynamic(node_id):
            return True
        return any(layer.has_node(node_id) for layer in self.layers.values())

    def get_node(self, node_id: int) -> SceneGraphNode:
        for layer in self.layers.values():
            if layer.has_node(node_id):
                return layer.get_node(node_id)
        for dlayer in self.dynamic_layers.values():
            if dlayer.has_node(node_id):
                return dlayer.get_node(node_id)
        raise KeyError(f"unknown node id: {node_id}")


def layer_from_nodes(
    layer_id: int,
    nodes: Mapping[int, NodeAttributes] | list[tuple[int, NodeAttributes]],
    edges: list[tuple[int, int] | tuple[int, int, float]] | None = None,
) -> SceneGraphLayer:
    """属性辞書とエッジ組から `SceneGraphLayer` を組み立てる小道具。"""
    items = nodes.items() if isinstance(nodes, Mapping) else nodes
    layer = SceneGraphLayer(layer_id)
    for node_id, attrs in items:
        layer.nodes[int(node_id)] = SceneGraphNode(int(node_id), layer_id, attrs)
    for i, e in enumerate(edges or []):
        layer.edges[i] = SceneGraphEdge(*e)
    return layer


__all__ = [
    "SceneGraphNode",
    "SceneGraphEdge",
    "SceneGraphLayer",
    "DynamicSceneGraphLayer",
    "Mesh",
    "DynamicSceneGraph",
    "layer_from_nodes",
]
