"""
どこで: `visual.config`。
何を: 層ごとの描画スタイル、動的層スタイル、全体設定、カラーマップ設定の不変レコードと読み込み。
なぜ: ビルダは 1 回の呼び出しの間だけ設定を読み取り専用スナップショットとして参照するため、
      dict ではなく型付きの凍結 dataclass で受け渡す。

読み込み:
- 各レコードは `from_mapping(dict)` を持つ。未知キーは WARNING を出して無視する。
- 値の型が合わない場合は `ValueError`（設定ミスは早期に知らせる）。
- `load_visualizer_settings(path=None)` は `util.utils.load_config` 経由で YAML を読む
  （ファイルが無い/壊れている場合は既定値）。

YAML 例:

    visualizer:
      layer_z_step: 5.0
      collapse_layers: false
    places_colormap: {min_value: 0.0, max_value: 2.0}
    layers:
      2: {z_offset_scale: 1.0, marker_scale: 0.2, use_label: true}
      3: {z_offset_scale: 2.0, interlayer_edge_insertion_skip: 2}
    dynamic_layers:
      2: {z_offset_scale: 0.0, node_scale: 0.1}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, TypeVar

from util.color import Color
from util.utils import load_config

logger = logging.getLogger(__name__)

_C = TypeVar("_C")


def _coerce(name: str, current: object, raw: object) -> object:
    """既定値の型に合わせて値を変換する（bool/int/float/str/Color）。"""
    try:
        if isinstance(current, bool):
            if isinstance(raw, str):
                s = raw.strip().lower()
                if s in {"true", "yes", "on", "1"}:
                    return True
                if s in {"false", "no", "off", "0"}:
                    return False
                raise ValueError(raw)
            return bool(raw)
        if isinstance(current, int):
            val = int(raw)  # type: ignore[arg-type]
            if isinstance(raw, float) and raw != val:
                raise ValueError(raw)
            return val
        if isinstance(current, float):
            return float(raw)  # type: ignore[arg-type]
        if isinstance(current, Color):
            return Color.from_value(raw)
        if isinstance(current, str):
            return str(raw)
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid value for '{name}': {raw!r}") from e
    return raw


def _from_mapping(cls: type[_C], data: Mapping[str, Any] | None) -> _C:
    if not data:
        return cls()
    defaults = cls()
    known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
    kwargs: dict[str, Any] = {}
    for key, raw in data.items():
        if key not in known:
            logger.warning("%s: unknown key '%s' ignored", cls.__name__, key)
            continue
        kwargs[key] = _coerce(key, getattr(defaults, key), raw)
    return cls(**kwargs)


@dataclass(frozen=True)
class ColormapConfig:
    """距離カラーマップ。定義域 `[min_value, max_value]` を HLS の直線補間に写す。

    `max_value <= min_value` は退化設定で、色解決は既定色（黒）を返す。
    """

    min_value: float = 0.0
    max_value: float = 1.0
    min_hue: float = 0.0
    max_hue: float = 0.7
    min_luminance: float = 0.5
    max_luminance: float = 0.5
    min_saturation: float = 0.7
    max_saturation: float = 0.7

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "ColormapConfig":
        return _from_mapping(cls, data)

    @property
    def is_degenerate(self) -> bool:
        return self.max_value <= self.min_value


@dataclass(frozen=True)
class LayerConfig:
    """静的層 1 つぶんの描画スタイル。"""

    visualize: bool = True
    z_offset_scale: float = 0.0

    # 重心
    marker_scale: float = 0.1
    marker_alpha: float = 1.0
    use_sphere_marker: bool = True

    # ラベル
    use_label: bool = False
    label_height: float = 1.0
    label_scale: float = 0.5
    add_label_jitter: bool = False
    label_jitter_scale: float = 0.2

    # バウンディングボックス
    use_bounding_box: bool = False
    collapse_bounding_box: bool = False
    bounding_box_alpha: float = 0.5
    bbox_wireframe_scale: float = 0.1
    bbox_wireframe_edge_scale: float = 0.01

    # 境界
    draw_boundaries: bool = False
    collapse_boundary: bool = False
    boundary_wireframe_scale: float = 0.1
    boundary_use_node_color: bool = True
    boundary_alpha: float = 1.0
    draw_boundary_ellipse: bool = False
    boundary_ellipse_alpha: float = 0.5

    # 層内エッジ
    intralayer_edge_scale: float = 0.03
    intralayer_edge_alpha: float = 1.0
    intralayer_edge_use_color: bool = True
    intralayer_edge_insertion_skip: int = 0

    # 層間エッジ（この層を source とするもの）
    interlayer_edge_scale: float = 0.03
    interlayer_edge_alpha: float = 1.0
    interlayer_edge_use_color: bool = True
    use_edge_source: bool = True
    interlayer_edge_insertion_skip: int = 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "LayerConfig":
        return _from_mapping(cls, data)


@dataclass(frozen=True)
class DynamicLayerConfig:
    """動的層（エージェント軌跡）の描画スタイル。"""

    visualize: bool = True
    z_offset_scale: float = 0.0

    node_scale: float = 0.1
    node_alpha: float = 1.0
    node_use_sphere: bool = False

    edge_scale: float = 0.05
    edge_alpha: float = 1.0

    label_scale: float = 0.5
    label_height: float = 1.0

    visualize_interlayer_edges: bool = False
    interlayer_edge_scale: float = 0.03
    interlayer_edge_alpha: float = 0.3
    interlayer_edge_insertion_skip: int = 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "DynamicLayerConfig":
        return _from_mapping(cls, data)


@dataclass(frozen=True)
class VisualizerConfig:
    """全体設定（層の積み上げ、メッシュ接続線の折れ位置など）。"""

    layer_z_step: float = 5.0
    collapse_layers: bool = False
    mesh_edge_break_ratio: float = 0.5
    mesh_layer_offset: float = 0.0
    color_places_by_distance: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "VisualizerConfig":
        return _from_mapping(cls, data)


def _layer_map(cls: type[_C], data: object) -> dict[int, _C]:
    if not data:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"layer configs must be a mapping: {type(data)!r}")
    out: dict[int, _C] = {}
    for key, value in data.items():
        try:
            layer_id = int(key)
        except (TypeError, ValueError) as e:
            raise ValueError(f"layer id must be an integer: {key!r}") from e
        out[layer_id] = cls.from_mapping(value)  # type: ignore[attr-defined]
    return out


@dataclass(frozen=True)
class VisualizerSettings:
    """1 回の可視化 tick で使う設定一式。"""

    visualizer: VisualizerConfig = field(default_factory=VisualizerConfig)
    places_colormap: ColormapConfig = field(default_factory=ColormapConfig)
    edge_colormap: ColormapConfig = field(default_factory=ColormapConfig)
    layers: dict[int, LayerConfig] = field(default_factory=dict)
    dynamic_layers: dict[int, DynamicLayerConfig] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "VisualizerSettings":
        data = dict(data or {})
        known = {"visualizer", "places_colormap", "edge_colormap", "layers", "dynamic_layers"}
        for key in sorted(set(data) - known):
            logger.warning("VisualizerSettings: unknown section '%s' ignored", key)
        return cls(
            visualizer=VisualizerConfig.from_mapping(data.get("visualizer")),
            places_colormap=ColormapConfig.from_mapping(data.get("places_colormap")),
            edge_colormap=ColormapConfig.from_mapping(data.get("edge_colormap")),
            layers=_layer_map(LayerConfig, data.get("layers")),
            dynamic_layers=_layer_map(DynamicLayerConfig, data.get("dynamic_layers")),
        )

    def layer(self, layer_id: int) -> LayerConfig:
        """層設定（未設定の層は既定値）。"""
        return self.layers.get(layer_id, LayerConfig())


def load_visualizer_settings(path: str | Path | None = None) -> VisualizerSettings:
    """YAML から `VisualizerSettings` を読み込む（フェイルソフト）。"""
    return VisualizerSettings.from_mapping(load_config(path))


__all__ = [
    "ColormapConfig",
    "LayerConfig",
    "DynamicLayerConfig",
    "VisualizerConfig",
    "VisualizerSettings",
    "load_visualizer_settings",
]
