"""
どこで: `common` パッケージ。
何を: 環境変数/設定/ロギング/型エイリアスなど、graph と visual の双方で使う軽量基盤。
なぜ: 上位の可視化層から再利用する共通部分を分離し、依存の向きを単純化するため。
"""

from .logging import setup_default_logging
from .types import RGBA, Vec3

__all__ = [
    "RGBA",
    "Vec3",
    "setup_default_logging",
]
