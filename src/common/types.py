"""
どこで: `common` の型定義。
何を: Vec3/RGBA/Quat などの軽量エイリアス（組込みジェネリックで記述）。
なぜ: 依存の少ない場所に配置して循環と分散定義を避けるため。
"""

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]
# (x, y, z, w) の順。描画側のメッセージ形式に合わせる。
Quat = tuple[float, float, float, float]
# 0–1 の浮動小数 RGBA。
RGBA = tuple[float, float, float, float]


__all__ = ["Vec2", "Vec3", "Quat", "RGBA"]
