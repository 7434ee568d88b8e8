import pytest

from graph import NodeSymbol, node_label


def test_symbol_roundtrip_label():
    sym = NodeSymbol("O", 12)
    assert NodeSymbol.from_id(sym.value) == sym
    assert node_label(sym.value) == "O(12)"


def test_plain_integer_ids_render_as_decimal():
    assert node_label(5) == "5"
    assert node_label(0) == "0"


def test_invalid_symbol():
    with pytest.raises(ValueError):
        NodeSymbol("AB", 1)
    with pytest.raises(ValueError):
        NodeSymbol("A", -1)
