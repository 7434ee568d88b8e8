"""
どこで: `graph.attributes`。
何を: ノード属性のタグ付きバリアント（BASE / SEMANTIC / PLACE / PLACE_2D）と能力クエリ。
なぜ: 属性種別の不一致を例外ではなく「属性なし（None）」として扱い、
      ビルダ側で該当ノードの寄与だけを安全に省けるようにするため。

種別の包含関係:

    BASE ── SEMANTIC ─┬─ PLACE
                      └─ PLACE_2D

`attrs.as_kind(kind)` は `attrs` が `kind` を提供する（同じか子の種別である）ときに
自身を返し、そうでなければ `None` を返す。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, TypeVar

import numpy as np

from util.color import Color

from .bounding_box import BoundingBox

_A = TypeVar("_A", bound="NodeAttributes")


class AttributeKind(Enum):
    BASE = "base"
    SEMANTIC = "semantic"
    PLACE = "place"
    PLACE_2D = "place_2d"


def _vec(value, n: int = 3) -> np.ndarray:
    return np.asarray(value, dtype=np.float64).reshape(n)


@dataclass
class NodeAttributes:
    """全ノード共通の属性（位置と姿勢）。姿勢は (x, y, z, w) の四元数。"""

    KIND: ClassVar[AttributeKind] = AttributeKind.BASE
    PROVIDES: ClassVar[frozenset[AttributeKind]] = frozenset({AttributeKind.BASE})

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    orientation: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)

    def __post_init__(self) -> None:
        self.position = _vec(self.position)

    @property
    def kind(self) -> AttributeKind:
        return self.KIND

    def has_kind(self, kind: AttributeKind) -> bool:
        return kind in self.PROVIDES

    def as_kind(self: _A, kind: AttributeKind) -> _A | None:
        return self if kind in self.PROVIDES else None


@dataclass
class SemanticNodeAttributes(NodeAttributes):
    """意味付きノード（物体/部屋など）。`bounding_box` は未推定なら None。"""

    KIND: ClassVar[AttributeKind] = AttributeKind.SEMANTIC
    PROVIDES: ClassVar[frozenset[AttributeKind]] = frozenset(
        {AttributeKind.BASE, AttributeKind.SEMANTIC}
    )

    color: Color = field(default_factory=Color)
    name: str = ""
    semantic_label: int = 0
    bounding_box: BoundingBox | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        self.color = Color.from_value(self.color)


@dataclass
class PlaceNodeAttributes(SemanticNodeAttributes):
    """3D の場所ノード。`real_place=False` はフロンティア（仮想）ノード。"""

    KIND: ClassVar[AttributeKind] = AttributeKind.PLACE
    PROVIDES: ClassVar[frozenset[AttributeKind]] = frozenset(
        {AttributeKind.BASE, AttributeKind.SEMANTIC, AttributeKind.PLACE}
    )

    distance: float = 0.0
    real_place: bool = True
    frontier_scale: np.ndarray = field(default_factory=lambda: np.ones(3))

    def __post_init__(self) -> None:
        super().__post_init__()
        self.distance = float(self.distance)
        self.frontier_scale = _vec(self.frontier_scale)


@dataclass
class Place2dNodeAttributes(SemanticNodeAttributes):
    """2D の場所ノード。境界多角形・境界楕円・メッシュ対応頂点を持つ。

    - `boundary (K, 3)`: 境界頂点列（K<=1 は退化扱いで描画しない）。
    - `ellipse_matrix_expand (2, 2)`: 単位円 → 楕円の展開行列。
    - `ellipse_centroid (2,)` もしくは `(3,)`: 楕円中心（XY のみ使用）。
    - `mesh_connections`: 対応するメッシュ頂点 index。
    """

    KIND: ClassVar[AttributeKind] = AttributeKind.PLACE_2D
    PROVIDES: ClassVar[frozenset[AttributeKind]] = frozenset(
        {AttributeKind.BASE, AttributeKind.SEMANTIC, AttributeKind.PLACE_2D}
    )

    boundary: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    ellipse_matrix_expand: np.ndarray = field(default_factory=lambda: np.zeros((2, 2)))
    ellipse_centroid: np.ndarray = field(default_factory=lambda: np.zeros(2))
    mesh_connections: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__post_init__()
        b = np.asarray(self.boundary, dtype=np.float64)
        if b.size == 0:
            b = np.zeros((0, 3), dtype=np.float64)
        elif b.ndim == 2 and b.shape[1] == 2:
            b = np.hstack([b, np.zeros((b.shape[0], 1))])
        elif b.ndim != 2 or b.shape[1] != 3:
            raise ValueError(f"boundary must be (K, 2) or (K, 3): {b.shape}")
        self.boundary = b
        self.ellipse_matrix_expand = np.asarray(
            self.ellipse_matrix_expand, dtype=np.float64
        ).reshape(2, 2)
        self.ellipse_centroid = np.asarray(self.ellipse_centroid, dtype=np.float64).ravel()
        self.mesh_connections = [int(i) for i in self.mesh_connections]


__all__ = [
    "AttributeKind",
    "NodeAttributes",
    "SemanticNodeAttributes",
    "PlaceNodeAttributes",
    "Place2dNodeAttributes",
]
