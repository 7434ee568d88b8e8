"""
どこで: `graph` パッケージ。
何を: 可視化が読み取るシーングラフのデータモデル（属性バリアント/箱/層/メッシュ/ノード記号）。
なぜ: ビルダ群が外部グラフ実装の詳細に依存せず、狭い読み出し面だけに依存するため。
"""

from .attributes import (
    AttributeKind,
    NodeAttributes,
    Place2dNodeAttributes,
    PlaceNodeAttributes,
    SemanticNodeAttributes,
)
from .bounding_box import BoundingBox
from .node_symbol import NodeSymbol, node_label
from .scene_graph import (
    DynamicSceneGraph,
    DynamicSceneGraphLayer,
    Mesh,
    SceneGraphEdge,
    SceneGraphLayer,
    SceneGraphNode,
    layer_from_nodes,
)

__all__ = [
    "AttributeKind",
    "NodeAttributes",
    "SemanticNodeAttributes",
    "PlaceNodeAttributes",
    "Place2dNodeAttributes",
    "BoundingBox",
    "NodeSymbol",
    "node_label",
    "SceneGraphNode",
    "SceneGraphEdge",
    "SceneGraphLayer",
    "DynamicSceneGraphLayer",
    "Mesh",
    "DynamicSceneGraph",
    "layer_from_nodes",
]
