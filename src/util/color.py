"""
どこで: `util.color`。
何を: 色指定の正規化/変換（Hex, RGBA 0–1, RGBA 0–255）と、グラフが保持する 8bit 色 `Color`。
なぜ: 設定ファイル/ノード属性/プリミティブ出力で同一の受理仕様とエラーメッセージを提供するため。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from common.types import RGBA


def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else 1.0 if x > 1.0 else float(x)


def _clamp_u8(x: float) -> int:
    return max(0, min(255, int(round(float(x)))))


def parse_hex_color_str(s: str) -> RGBA:
    """Hex 文字列から RGBA(0–1) を返す。

    受理形式: "#RRGGBB", "#RRGGBBAA", "0xRRGGBB", "0xRRGGBBAA", "RRGGBB", "RRGGBBAA"。
    大文字/小文字は不問。
    """
    t = s.strip()
    if t.startswith("#"):
        t = t[1:]
    elif t.lower().startswith("0x"):
        t = t[2:]
    if len(t) not in (6, 8):
        raise ValueError(f"invalid hex color length: '{s}' (expected RRGGBB or RRGGBBAA)")
    try:
        r = int(t[0:2], 16)
        g = int(t[2:4], 16)
        b = int(t[4:6], 16)
        a = int(t[6:8], 16) if len(t) == 8 else 255
    except ValueError as e:
        raise ValueError(f"invalid hex color: '{s}'") from e
    return (r / 255.0, g / 255.0, b / 255.0, a / 255.0)


def _as_sequence(value: object) -> Sequence[float | int] | None:
    if isinstance(value, (list, tuple)):
        return value  # type: ignore[return-value]
    return None


def normalize_color(value: object) -> RGBA:
    """色を RGBA(0–1) へ正規化する。

    - 受理: Hex 文字列, `Color`, (r,g,b[,a]) （0–1 または 0–255）
    - 返値: (r,g,b,a) （0–1）
    """
    if isinstance(value, Color):
        return value.to_rgba()
    if isinstance(value, str):
        return parse_hex_color_str(value)
    seq = _as_sequence(value)
    if seq is None:
        raise ValueError(f"unsupported color type: {type(value)!r}")
    if len(seq) not in (3, 4):
        raise ValueError("color tuple/list must be length 3 or 4")
    try:
        fseq = [float(v) for v in seq]
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid color tuple/list: {value!r}") from e
    if len(fseq) == 3:
        fseq.append(1.0)
    # 全要素が 0..1 ならそのまま、そうでなければ 0–255 とみなす
    if all(0.0 <= x <= 1.0 for x in fseq):
        r, g, b, a = fseq
        return (_clamp01(r), _clamp01(g), _clamp01(b), _clamp01(a))
    if len(seq) == 3:
        fseq[3] = 255.0
    r8, g8, b8, a8 = (_clamp_u8(x) for x in fseq)
    return (r8 / 255.0, g8 / 255.0, b8 / 255.0, a8 / 255.0)


def to_u8_rgba(value: object) -> tuple[int, int, int, int]:
    """色を RGBA(0–255) へ変換する。"""
    r, g, b, a = normalize_color(value)
    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)), int(round(a * 255)))


@dataclass(frozen=True)
class Color:
    """ノード属性が保持する 8bit 色。既定値は不透明の黒。

    出力用の RGBA(0–1) へは :meth:`to_rgba` で変換する。アルファは描画設定側
    （レイヤーの alpha）で上書きするのが通例。
    """

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 255

    @classmethod
    def from_value(cls, value: object) -> "Color":
        """Hex/タプル/`Color` から生成する（受理仕様は `normalize_color` と同一）。"""
        if isinstance(value, Color):
            return value
        r, g, b, a = to_u8_rgba(value)
        return cls(r, g, b, a)

    def to_rgba(self, alpha: float | None = None) -> RGBA:
        """RGBA(0–1) を返す。`alpha` 指定時はアルファのみ置き換える。"""
        a = self.a / 255.0 if alpha is None else _clamp01(alpha)
        return (self.r / 255.0, self.g / 255.0, self.b / 255.0, a)


def to_rgba(color: Color, alpha: float = 1.0) -> RGBA:
    """`Color` を描画用 RGBA(0–1) へ変換する（アルファは常に `alpha`）。"""
    return color.to_rgba(alpha)


__all__ = [
    "Color",
    "parse_hex_color_str",
    "normalize_color",
    "to_u8_rgba",
    "to_rgba",
]
