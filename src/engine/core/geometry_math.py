"""
どこで: `engine.core.geometry_math`。
何を: 比率の正規化、箱の頂点順序、層の Z オフセット、恒等姿勢、回転行列→四元数、楕円サンプル。
なぜ: プリミティブ生成側が共有する幾何の約束事（特に頂点の bit 順序）を一箇所に固定するため。

頂点の bit 順序:
- `corners_of` の index `c` は bit0=X, bit1=Y, bit2=Z（箱ローカル）。
- 隣接頂点は 1bit 反転で得られ、index 4..7 は常に上面（+Z）。
"""

from __future__ import annotations

import math
from typing import Protocol

import numpy as np

from common.types import Quat

from .primitive import Pose

# 自然順（下面 CCW → 上面 CCW）を bit 順に並べ替える置換。
CORNER_REMAPPING: tuple[int, ...] = (0, 1, 3, 2, 4, 5, 7, 6)
TOP_CORNERS: tuple[int, int, int, int] = (4, 5, 6, 7)
ELLIPSE_SAMPLES = 20


class _HasCorners(Protocol):
    def corners(self) -> np.ndarray: ...


class _HasZOffsetScale(Protocol):
    z_offset_scale: float


class _LayerStacking(Protocol):
    collapse_layers: bool
    layer_z_step: float


def clamp_ratio(min_value: float, max_value: float, value: float) -> float:
    """`(value - min) / (max - min)` を [0, 1] に収める。非有限（幅 0 等）は 0。"""
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = np.float64(value - min_value) / np.float64(max_value - min_value)
    if not math.isfinite(float(ratio)):
        return 0.0
    return min(1.0, max(0.0, float(ratio)))


def corners_of(bbox: _HasCorners) -> np.ndarray:
    """bit 順に並べた 8 頂点 `(8, 3)` を返す。"""
    natural = np.asarray(bbox.corners(), dtype=np.float64)
    return natural[list(CORNER_REMAPPING)]


def wireframe_edge_pairs() -> list[tuple[int, int]]:
    """直方体の 12 辺を `(c, c | bit)` の組で返す（対角線・重複なし）。"""
    pairs: list[tuple[int, int]] = []
    for c in range(8):
        for bit in (0x01, 0x02, 0x04):
            neighbor = c | bit
            if neighbor != c:
                pairs.append((c, neighbor))
    return pairs


def z_offset(config: _HasZOffsetScale | float, visualizer_config: _LayerStacking) -> float:
    """層を縦に積むための追加 Z 変位。

    `config` は `z_offset_scale` を持つ層設定か、スケール値そのもの。
    `collapse_layers` が有効なら常に 0（保存データには焼き込まない）。
    """
    if visualizer_config.collapse_layers:
        return 0.0
    scale = config if isinstance(config, (int, float)) else config.z_offset_scale
    return float(scale) * float(visualizer_config.layer_z_step)


def identity_pose() -> Pose:
    """原点・恒等回転の姿勢。点列に世界座標を焼き込むプリミティブで使う。"""
    return Pose()


def quaternion_from_matrix(rotation: np.ndarray) -> Quat:
    """3x3 回転行列を四元数 (x, y, z, w) に変換する（w >= 0 に正規化）。"""
    m = np.asarray(rotation, dtype=np.float64)
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    if trace > 0.0:
        s = math.sqrt(trace + 1.0) * 2.0
        w = 0.25 * s
        x = (m[2, 1] - m[1, 2]) / s
        y = (m[0, 2] - m[2, 0]) / s
        z = (m[1, 0] - m[0, 1]) / s
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = math.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2]) * 2.0
        w = (m[2, 1] - m[1, 2]) / s
        x = 0.25 * s
        y = (m[0, 1] + m[1, 0]) / s
        z = (m[0, 2] + m[2, 0]) / s
    elif m[1, 1] > m[2, 2]:
        s = math.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2]) * 2.0
        w = (m[0, 2] - m[2, 0]) / s
        x = (m[0, 1] + m[1, 0]) / s
        y = 0.25 * s
        z = (m[1, 2] + m[2, 1]) / s
    else:
        s = math.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1]) * 2.0
        w = (m[1, 0] - m[0, 1]) / s
        x = (m[0, 2] + m[2, 0]) / s
        y = (m[1, 2] + m[2, 1]) / s
        z = 0.25 * s
    q = np.array([x, y, z, w], dtype=np.float64)
    q /= np.linalg.norm(q)
    if q[3] < 0.0:
        q = -q
    return (float(q[0]), float(q[1]), float(q[2]), float(q[3]))


def ellipse_points(
    expand: np.ndarray,
    centroid: np.ndarray,
    z: float,
    samples: int = ELLIPSE_SAMPLES,
) -> np.ndarray:
    """単位円上の等間隔 `samples + 1` 点を展開行列で写した楕円点列 `(samples+1, 3)`。

    先頭は角度 0（= 展開行列の第 1 列）、末尾は 2π で先頭と一致する閉ループ。
    """
    t = np.arange(samples + 1, dtype=np.float64) * (2.0 * np.pi / samples)
    unit = np.stack([np.cos(t), np.sin(t)], axis=0)  # (2, S+1)
    xy = (np.asarray(expand, dtype=np.float64) @ unit).T
    c = np.asarray(centroid, dtype=np.float64).ravel()[:2]
    out = np.empty((samples + 1, 3), dtype=np.float64)
    out[:, :2] = xy + c
    out[:, 2] = float(z)
    return out


__all__ = [
    "CORNER_REMAPPING",
    "TOP_CORNERS",
    "ELLIPSE_SAMPLES",
    "clamp_ratio",
    "corners_of",
    "wireframe_edge_pairs",
    "z_offset",
    "identity_pose",
    "quaternion_from_matrix",
    "ellipse_points",
]
