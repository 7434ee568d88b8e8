"""共通フィクスチャ。

- 乱数シード固定
- 小さな層/グラフ試料（意味ノード、2D place、place、動的層、メッシュ）
"""

from __future__ import annotations

import numpy as np
import pytest

from graph import (
    DynamicSceneGraphLayer,
    Mesh,
    Place2dNodeAttributes,
    PlaceNodeAttributes,
    SceneGraphEdge,
    SceneGraphNode,
    SemanticNodeAttributes,
    layer_from_nodes,
)
from tests._utils.graphs import square_boundary, unit_box
from util.color import Color
from visual.config import LayerConfig, VisualizerConfig


@pytest.fixture(scope="session", autouse=True)
def np_seed() -> None:
    """NumPy の乱数を固定。"""
    np.random.seed(12345)


@pytest.fixture()
def vis_config() -> VisualizerConfig:
    return VisualizerConfig(layer_z_step=5.0, collapse_layers=False, mesh_edge_break_ratio=0.5)


@pytest.fixture()
def layer_config() -> LayerConfig:
    return LayerConfig(z_offset_scale=1.0)


@pytest.fixture()
def object_layer():
    """3 ノード（うち 1 つは箱なし）の意味層。"""
    return layer_from_nodes(
        2,
        {
            1: SemanticNodeAttributes(
                position=(0.0, 0.0, 0.0),
                color=Color(255, 0, 0),
                name="chair",
                bounding_box=unit_box((0.0, 0.0, 0.0)),
            ),
            2: SemanticNodeAttributes(
                position=(5.0, 0.0, 0.0),
                color=Color(0, 255, 0),
                bounding_box=unit_box((5.0, 0.0, 0.0), (1.0, 2.0, 3.0)),
            ),
            3: SemanticNodeAttributes(position=(10.0, 0.0, 0.0), color=Color(0, 0, 255)),
        },
        edges=[(1, 2), (2, 3)],
    )


@pytest.fixture()
def place2d_layer():
    """0 点境界のノードと 4 点境界のノードからなる 2D place 層。"""
    return layer_from_nodes(
        3,
        {
            10: Place2dNodeAttributes(position=(0.0, 0.0, 1.0), color=Color(10, 20, 30)),
            11: Place2dNodeAttributes(
                position=(4.0, 0.0, 1.0),
                color=Color(200, 100, 50),
                boundary=square_boundary(4.0, 0.0),
                ellipse_matrix_expand=np.eye(2),
                ellipse_centroid=(4.0, 0.0),
                mesh_connections=[0, 1, 2, 3, 99],
            ),
        },
    )


@pytest.fixture()
def place_layer():
    """real place 2 つとフロンティア 1 つの place 層。"""
    return layer_from_nodes(
        3,
        {
            20: PlaceNodeAttributes(position=(0.0, 0.0, 0.0), distance=0.5, real_place=True),
            21: PlaceNodeAttributes(position=(1.0, 0.0, 0.0), distance=1.5, real_place=True),
            22: PlaceNodeAttributes(
                position=(2.0, 0.0, 0.0),
                real_place=False,
                frontier_scale=(1.0, 2.0, 3.0),
            ),
        },
        edges=[(20, 21, 0.25), (21, 22, 0.75)],
    )


@pytest.fixture()
def agent_layer() -> DynamicSceneGraphLayer:
    """4 スロット（スロット 1 は退役）の軌跡。"""
    nodes: list[SceneGraphNode | None] = [
        SceneGraphNode(1000 + i, 2, SemanticNodeAttributes(position=(float(i), 0.0, 0.0)))
        for i in range(4)
    ]
    nodes[1] = None
    edges = {0: SceneGraphEdge(1002, 1003), 1: SceneGraphEdge(1000, 1001)}
    return DynamicSceneGraphLayer(2, "a", nodes, edges)


@pytest.fixture()
def mesh() -> Mesh:
    return Mesh([[0.0, 0.0, -1.0], [1.0, 0.0, -1.0], [1.0, 1.0, -1.0], [0.0, 1.0, -1.0]])
