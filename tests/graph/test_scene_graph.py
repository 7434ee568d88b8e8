import numpy as np
import pytest

from graph import (
    DynamicSceneGraph,
    DynamicSceneGraphLayer,
    Mesh,
    SceneGraphNode,
    SemanticNodeAttributes,
    layer_from_nodes,
)


def test_layer_from_nodes_builds_edges_with_weights():
    layer = layer_from_nodes(
        1,
        {1: SemanticNodeAttributes(), 2: SemanticNodeAttributes()},
        edges=[(1, 2, 0.5)],
    )
    assert layer.num_nodes() == 2
    assert layer.edges[0].weight == 0.5
    assert layer.get_node(2).layer == 1


def test_graph_lookup_and_dynamic_membership(agent_layer):
    static = layer_from_nodes(3, {7: SemanticNodeAttributes(position=(1, 1, 1))})
    graph = DynamicSceneGraph(layers={3: static}, dynamic_layers={2: agent_layer})

    assert graph.get_node(7).layer == 3
    assert graph.is_dynamic(1000)
    assert not graph.is_dynamic(7)
    assert not graph.has_node(1001)  # 退役スロット
    with pytest.raises(KeyError):
        graph.get_node(424242)


def test_dynamic_layer_positions(agent_layer):
    np.testing.assert_allclose(agent_layer.get_position(1003), [3.0, 0.0, 0.0])
    np.testing.assert_allclose(agent_layer.get_position_by_index(2), [2.0, 0.0, 0.0])
    with pytest.raises(KeyError):
        agent_layer.get_position_by_index(1)
    assert len(list(agent_layer.iter_nodes())) == 3


def test_mesh_accessors(mesh):
    assert mesh.num_vertices() == 4
    np.testing.assert_allclose(mesh.pos(2), [1.0, 1.0, -1.0])
    assert Mesh([]).num_vertices() == 0


def test_appended_trajectory_nodes_are_visible():
    first = SceneGraphNode(10, 2, SemanticNodeAttributes(position=(0, 0, 0)))
    layer = DynamicSceneGraphLayer(2, "a", [first])
    graph = DynamicSceneGraph(dynamic_layers={2: layer})

    layer.nodes.append(SceneGraphNode(11, 2, SemanticNodeAttributes(position=(1, 0, 0))))
    assert layer.has_node(11)
    np.testing.assert_allclose(layer.get_position(11), [1.0, 0.0, 0.0])
    assert graph.is_dynamic(11)
    assert graph.has_node(11)
    assert graph.get_node(11).id == 11


def test_dynamic_get_node_raises_for_retired_slot(agent_layer):
    with pytest.raises(KeyError):
        agent_layer.get_node(1001)


def test_graph_public_surface():
    public = {n for n in dir(DynamicSceneGraph) if not n.startswith("_")}
    assert {"is_dynamic", "has_node", "get_node"} <= public
    assert "layer_ids" not in public
