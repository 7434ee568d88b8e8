"""
どこで: `graph.bounding_box`。
何を: 中心・回転・各軸寸法で表す有向バウンディングボックス。
なぜ: ソリッド箱/ワイヤーフレーム/支柱の各プリミティブが同じ 8 頂点定義を共有するため。
"""

from __future__ import annotations

import numpy as np

# 自然順（下面を反時計回り → 上面を反時計回り）の単位頂点。
_UNIT_CORNERS = np.array(
    [
        [-1.0, -1.0, -1.0],
        [1.0, -1.0, -1.0],
        [1.0, 1.0, -1.0],
        [-1.0, 1.0, -1.0],
        [-1.0, -1.0, 1.0],
        [1.0, -1.0, 1.0],
        [1.0, 1.0, 1.0],
        [-1.0, 1.0, 1.0],
    ],
    dtype=np.float64,
)


class BoundingBox:
    """有向バウンディングボックス。

    フィールド:
    - `world_P_center (3,)`: 世界座標での中心。
    - `world_R_center (3,3)`: 箱ローカル → 世界の回転行列。
    - `dimensions (3,)`: 各軸の全長（描画側の箱スケールと同じ単位）。
    """

    __slots__ = ("world_P_center", "world_R_center", "dimensions")

    def __init__(self, world_P_center, dimensions, world_R_center=None) -> None:
        center = np.asarray(world_P_center, dtype=np.float64).reshape(3)
        dims = np.asarray(dimensions, dtype=np.float64).reshape(3)
        if world_R_center is None:
            rot = np.eye(3, dtype=np.float64)
        else:
            rot = np.asarray(world_R_center, dtype=np.float64)
            if rot.shape != (3, 3):
                raise ValueError(f"world_R_center must be (3, 3): {rot.shape}")
        self.world_P_center = center
        self.world_R_center = rot
        self.dimensions = dims

    @property
    def half_extents(self) -> np.ndarray:
        return self.dimensions / 2.0

    def corners(self) -> np.ndarray:
        """自然順の 8 頂点 `(8, 3)` を返す。"""
        local = _UNIT_CORNERS * self.half_extents
        return local @ self.world_R_center.T + self.world_P_center

    def __repr__(self) -> str:  # pragma: no cover - 表示用
        c = np.round(self.world_P_center, 3).tolist()
        d = np.round(self.dimensions, 3).tolist()
        return f"BoundingBox(center={c}, dimensions={d})"


__all__ = ["BoundingBox"]
