"""
描画プリミティブ（可視化出力の唯一の表現）

本モジュールは、ビルダ群が外部レンダラへ渡す不変の描画単位 `Primitive` を提供する。
1 回のビルダ呼び出しは 1 パスで点/色を `PrimitiveBuffer` に積み、最後に `Primitive`
へ確定させる。確定後の配列は読み取り専用であり、呼び出し間で状態は残らない。

データモデル（不変条件）:
- `points: float32 ndarray (N, 3)`: 点列（LINE_LIST では 2 点で 1 線分）。
- `colors: float32 ndarray (N, 4) | (0, 4)`: 要素色。空でなければ `points` と 1:1。
- `color: RGBA`: 一様色（要素色が空のときにレンダラが使う）。
- `pose`: プリミティブ自身の局所姿勢。世界座標を点列に焼き込んだ場合は恒等姿勢。
- `(ns, id)`: レンダラ側での置換/削除に使う識別子。

直感図（LINE_LIST の格納）:

    # 2 本の線分 A→B (赤→青), C→D (一様灰)
    #   points: [A, B, C, D]
    #   colors: [red, blue, gray, gray]
    # 線分 i は points[2i], points[2i+1]

補足:
- 空プリミティブは `points.shape==(0,3)`, `colors.shape==(0,4)`。
- DELETE プリミティブは `(ns, id)` のみ意味を持つ（`make_delete_primitive`）。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import numpy as np

from common.types import RGBA, Quat, Vec3

_BLACK: RGBA = (0.0, 0.0, 0.0, 1.0)


class PrimitiveKind(Enum):
    CUBE_LIST = "cube_list"
    SPHERE_LIST = "sphere_list"
    LINE_LIST = "line_list"
    CUBE = "cube"
    SPHERE = "sphere"
    TEXT = "text"


class PrimitiveAction(Enum):
    ADD = "add"
    DELETE = "delete"


@dataclass(frozen=True)
class Pose:
    """位置 + 姿勢（四元数 (x, y, z, w)）。"""

    position: Vec3 = (0.0, 0.0, 0.0)
    orientation: Quat = (0.0, 0.0, 0.0, 1.0)

    def raised(self, dz: float) -> "Pose":
        """Z 方向に `dz` だけ持ち上げた姿勢を返す。"""
        x, y, z = self.position
        return Pose((x, y, z + float(dz)), self.orientation)


def _readonly(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.setflags(write=False)
    return view


def _normalize_buffers(points, colors) -> tuple[np.ndarray, np.ndarray]:
    """`Primitive` 生成時の内部正規化ヘルパ。"""
    pts = np.asarray(points, dtype=np.float32)
    if pts.size == 0:
        pts = np.empty((0, 3), dtype=np.float32)
    if pts.ndim != 2 or pts.shape[1] != 3:
        raise ValueError(f"points must be (N, 3): {pts.shape}")

    if colors is None:
        cols = np.empty((0, 4), dtype=np.float32)
    else:
        cols = np.asarray(colors, dtype=np.float32)
        if cols.size == 0:
            cols = np.empty((0, 4), dtype=np.float32)
        if cols.ndim != 2 or cols.shape[1] != 4:
            raise ValueError(f"colors must be (N, 4): {cols.shape}")
    if cols.shape[0] != 0 and cols.shape[0] != pts.shape[0]:
        raise ValueError(
            f"colors must match points 1:1: {cols.shape[0]} != {pts.shape[0]}"
        )
    return np.ascontiguousarray(pts), np.ascontiguousarray(cols)


class Primitive:
    """不変の描画プリミティブ。

    フィールド:
    - `kind`, `action`: 種別と操作（ADD/DELETE）。
    - `ns`, `id`: レンダラ側の識別子。
    - `pose`, `scale`: 局所姿勢とスケール（LINE_LIST は `scale[0]` が線幅）。
    - `points`, `colors`, `color`: 上記データモデル参照。
    - `text`: TEXT 用の表示文字列。
    """

    __slots__ = ("kind", "action", "ns", "id", "pose", "scale", "points", "colors", "color", "text")

    kind: PrimitiveKind
    action: PrimitiveAction
    ns: str
    id: int
    pose: Pose
    scale: Vec3
    points: np.ndarray
    colors: np.ndarray
    color: RGBA
    text: str

    def __init__(
        self,
        kind: PrimitiveKind,
        *,
        ns: str = "",
        id: int = 0,
        action: PrimitiveAction = PrimitiveAction.ADD,
        pose: Pose | None = None,
        scale: float | Sequence[float] = (1.0, 1.0, 1.0),
        points=None,
        colors=None,
        color: RGBA = _BLACK,
        text: str = "",
    ) -> None:
        pts, cols = _normalize_buffers(points if points is not None else [], colors)
        if isinstance(scale, (int, float)):
            sc = (float(scale), float(scale), float(scale))
        else:
            sx, sy, sz = (float(v) for v in scale)
            sc = (sx, sy, sz)
        r, g, b, a = (float(v) for v in color)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "action", action)
        object.__setattr__(self, "ns", str(ns))
        object.__setattr__(self, "id", int(id))
        object.__setattr__(self, "pose", pose if pose is not None else Pose())
        object.__setattr__(self, "scale", sc)
        object.__setattr__(self, "points", _readonly(pts))
        object.__setattr__(self, "colors", _readonly(cols))
        object.__setattr__(self, "color", (r, g, b, a))
        object.__setattr__(self, "text", str(text))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Primitive is immutable")

    # ---- 参照用の小道具 -------------------------------------------------
    @property
    def n_points(self) -> int:
        return int(self.points.shape[0])

    @property
    def n_segments(self) -> int:
        """LINE_LIST の線分数（他種別では 0）。"""
        if self.kind is not PrimitiveKind.LINE_LIST:
            return 0
        return self.n_points // 2

    @property
    def is_empty(self) -> bool:
        return self.points.shape[0] == 0

    @property
    def has_element_colors(self) -> bool:
        return self.colors.shape[0] != 0

    def segments(self) -> np.ndarray:
        """LINE_LIST の線分を `(S, 2, 3)` で返す。"""
        n = self.n_segments * 2
        return self.points[:n].reshape(-1, 2, 3)

    def with_pose(self, pose: Pose) -> "Primitive":
        return Primitive(
            self.kind,
            ns=self.ns,
            id=self.id,
            action=self.action,
            pose=pose,
            scale=self.scale,
            points=self.points,
            colors=self.colors if self.has_element_colors else None,
            color=self.color,
            text=self.text,
        )

    def __repr__(self) -> str:  # pragma: no cover - 表示用
        return (
            f"Primitive({self.kind.value}, ns={self.ns!r}, id={self.id}, "
            f"N={self.n_points}, action={self.action.value})"
        )


class PrimitiveBuffer:
    """1 回のビルダ呼び出し内だけで使う点/色の蓄積器。

    `build()` で `Primitive` に確定する。要素色を一度も積まなければ一様色扱い。
    """

    __slots__ = ("_points", "_colors")

    def __init__(self) -> None:
        self._points: list[Sequence[float]] = []
        self._colors: list[RGBA] = []

    def __len__(self) -> int:
        return len(self._points)

    def add_point(self, point: Sequence[float], color: RGBA | None = None) -> None:
        self._points.append((float(point[0]), float(point[1]), float(point[2])))
        if color is not None:
            self._colors.append(color)

    def add_segment(
        self,
        start: Sequence[float],
        end: Sequence[float],
        start_color: RGBA | None = None,
        end_color: RGBA | None = None,
    ) -> None:
        """線分 1 本（2 点）を積む。`end_color` 省略時は `start_color` を使う。"""
        if start_color is not None and end_color is None:
            end_color = start_color
        self.add_point(start, start_color)
        self.add_point(end, end_color)

    def build(self, kind: PrimitiveKind, **kwargs) -> Primitive:
        points = np.asarray(self._points, dtype=np.float32).reshape(-1, 3)
        colors = np.asarray(self._colors, dtype=np.float32).reshape(-1, 4) if self._colors else None
        return Primitive(kind, points=points, colors=colors, **kwargs)


def make_delete_primitive(id: int, ns: str) -> Primitive:
    """`(ns, id)` の既出プリミティブを削除させる DELETE プリミティブ。"""
    return Primitive(PrimitiveKind.LINE_LIST, ns=ns, id=id, action=PrimitiveAction.DELETE)


__all__ = [
    "PrimitiveKind",
    "PrimitiveAction",
    "Pose",
    "Primitive",
    "PrimitiveBuffer",
    "make_delete_primitive",
]
