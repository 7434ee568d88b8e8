"""
どこで: `visual` パッケージ。
何を: シーングラフ → 描画プリミティブの変換（色解決、ノード/境界/エッジ/メッシュ/動的層ビルダ）。
なぜ: 外部のオーケストレータが tick ごとに必要なビルダだけを呼び、毎回新しい不変出力を得るため。

使用例:
    from visual import LayerConfig, VisualizerConfig, SemanticColor, make_centroid_primitive
    prim = make_centroid_primitive(LayerConfig(), layer, VisualizerConfig(), "objects", SemanticColor())
"""

from engine.core.primitive import make_delete_primitive

from .boundaries import (
    make_layer_ellipse_boundaries,
    make_layer_polygon_boundaries,
    make_layer_polygon_edges,
)
from .colors import (
    DistanceColor,
    EdgeWeightColor,
    EndpointNodeColor,
    InheritEndpointColor,
    SemanticColor,
    UniformColor,
    interpolate_colormap,
    resolve_distance_color,
    resolve_edge_color,
    resolve_node_color,
)
from .config import (
    ColormapConfig,
    DynamicLayerConfig,
    LayerConfig,
    VisualizerConfig,
    VisualizerSettings,
    load_visualizer_settings,
)
from .dynamic import (
    make_dynamic_centroid_primitive,
    make_dynamic_edge_primitive,
    make_dynamic_label_primitive,
)
from .edges import (
    get_config_layer,
    make_dynamic_graph_edge_primitives,
    make_graph_edge_primitives,
    make_gvd_wireframe,
    make_gvd_wireframe_by_distance,
    make_layer_edge_primitive,
    make_layer_edge_primitive_by_weight,
    should_visualize,
)
from .mesh_edges import make_mesh_edges_primitive
from .nodes import (
    make_bounding_box_primitive,
    make_centroid_primitive,
    make_edges_to_bounding_boxes,
    make_ellipsoid_primitives,
    make_layer_bounding_box_primitives,
    make_layer_label_primitives,
    make_layer_wireframe_bounding_boxes,
    make_place_centroid_primitive,
    make_text_primitive,
    make_text_primitive_no_height,
)

__all__ = [
    # config
    "ColormapConfig",
    "LayerConfig",
    "DynamicLayerConfig",
    "VisualizerConfig",
    "VisualizerSettings",
    "load_visualizer_settings",
    # colors
    "UniformColor",
    "SemanticColor",
    "DistanceColor",
    "InheritEndpointColor",
    "EdgeWeightColor",
    "EndpointNodeColor",
    "interpolate_colormap",
    "resolve_distance_color",
    "resolve_node_color",
    "resolve_edge_color",
    # nodes
    "make_centroid_primitive",
    "make_place_centroid_primitive",
    "make_ellipsoid_primitives",
    "make_bounding_box_primitive",
    "make_layer_bounding_box_primitives",
    "make_layer_wireframe_bounding_boxes",
    "make_edges_to_bounding_boxes",
    "make_text_primitive",
    "make_layer_label_primitives",
    "make_text_primitive_no_height",
    "make_delete_primitive",
    # boundaries
    "make_layer_ellipse_boundaries",
    "make_layer_polygon_edges",
    "make_layer_polygon_boundaries",
    # edges
    "make_layer_edge_primitive",
    "make_layer_edge_primitive_by_weight",
    "make_graph_edge_primitives",
    "make_dynamic_graph_edge_primitives",
    "should_visualize",
    "get_config_layer",
    "make_gvd_wireframe",
    "make_gvd_wireframe_by_distance",
    # mesh / dynamic
    "make_mesh_edges_primitive",
    "make_dynamic_centroid_primitive",
    "make_dynamic_edge_primitive",
    "make_dynamic_label_primitive",
]
