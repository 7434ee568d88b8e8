from __future__ import annotations

import pytest

from util.utils import load_config
from visual.config import load_visualizer_settings


@pytest.mark.integration
# What this tests
# - load_config は configs/default.yaml（ベース）とルート config.yaml（上書き）を読む。
# - 既定設定から層スタイルが組み立てられる。
def test_load_config_reads_default_yaml():
    cfg = load_config()
    assert "visualizer" in cfg
    assert isinstance(cfg.get("layers"), dict)


@pytest.mark.integration
def test_default_settings_build_layer_styles():
    s = load_visualizer_settings()
    assert s.visualizer.layer_z_step > 0
    assert 2 in s.layers
    assert s.layer(3).interlayer_edge_insertion_skip >= 0
