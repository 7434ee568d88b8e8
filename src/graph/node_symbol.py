"""
どこで: `graph.node_symbol`。
何を: 64bit ノード ID（上位 8bit がカテゴリ文字、下位 56bit が通し番号）の分解と表示。
なぜ: 名前を持たないノードのラベルを ID から決定的に作るため（例: ``O(12)``）。
"""

from __future__ import annotations

from dataclasses import dataclass

_INDEX_BITS = 56
_INDEX_MASK = (1 << _INDEX_BITS) - 1


@dataclass(frozen=True)
class NodeSymbol:
    """カテゴリ文字 + 通し番号で表すノード ID。"""

    category: str
    index: int

    def __post_init__(self) -> None:
        if len(self.category) != 1:
            raise ValueError(f"category must be a single character: {self.category!r}")
        if not 0 <= self.index <= _INDEX_MASK:
            raise ValueError(f"index out of range: {self.index}")

    @classmethod
    def from_id(cls, node_id: int) -> "NodeSymbol":
        code = (int(node_id) >> _INDEX_BITS) & 0xFF
        return cls(chr(code), int(node_id) & _INDEX_MASK)

    @property
    def value(self) -> int:
        return (ord(self.category) << _INDEX_BITS) | self.index

    @property
    def label(self) -> str:
        return f"{self.category}({self.index})"

    def __int__(self) -> int:
        return self.value


def node_label(node_id: int) -> str:
    """ノード ID の表示文字列。

    上位 8bit が印字可能な英字なら ``"<c>(<index>)"``、そうでなければ 10 進表記。
    """
    sym = NodeSymbol.from_id(node_id)
    if sym.category.isascii() and sym.category.isalpha():
        return sym.label
    return str(int(node_id))


__all__ = ["NodeSymbol", "node_label"]
