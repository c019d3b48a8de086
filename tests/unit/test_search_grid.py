"""Unit tests for the search node grid"""

import math

import pytest

from simple_planner.planning.global_planner.occupancy_grid import MapIndex
from simple_planner.planning.global_planner.search_grid import (
    SearchNodeGrid, NodeState, NO_PREDECESSOR
)


class TestSearchNodeGrid:
    """Unit tests for SearchNodeGrid"""

    def test_initial_state(self):
        nodes = SearchNodeGrid(4, 3)

        assert nodes.size == 12
        assert nodes.count_state(NodeState.UNDEFINED) == 12
        node = nodes.node(MapIndex(3, 2))
        assert math.isinf(node.g)
        assert node.h == 0.0
        assert node.predecessor is None

    def test_flat_indexing(self):
        nodes = SearchNodeGrid(4, 3)

        assert nodes.flat(MapIndex(1, 2)) == 9
        assert nodes.unflat(9) == MapIndex(1, 2)

    def test_predecessor_links(self):
        nodes = SearchNodeGrid(4, 3)
        nodes.set_predecessor(MapIndex(2, 1), MapIndex(1, 1))

        assert nodes.get_predecessor(MapIndex(2, 1)) == MapIndex(1, 1)
        assert nodes.predecessor[nodes.flat(MapIndex(2, 1))] == 5

    def test_reset_clears_everything(self):
        nodes = SearchNodeGrid(3, 3)
        index = MapIndex(1, 1)
        k = nodes.flat(index)
        nodes.g[k] = 4.0
        nodes.h[k] = 2.0
        nodes.state[k] = NodeState.CLOSED
        nodes.set_predecessor(index, MapIndex(0, 1))

        nodes.reset()

        node = nodes.node(index)
        assert math.isinf(node.g)
        assert node.h == 0.0
        assert node.state == NodeState.UNDEFINED
        assert nodes.predecessor[k] == NO_PREDECESSOR

    def test_node_snapshot_f(self):
        nodes = SearchNodeGrid(2, 2)
        k = nodes.flat(MapIndex(1, 0))
        nodes.g[k] = 3.0
        nodes.h[k] = 1.5
        nodes.state[k] = NodeState.OPEN

        node = nodes.node(MapIndex(1, 0))

        assert node.f == 4.5
        assert node.state == NodeState.OPEN

    def test_release(self):
        nodes = SearchNodeGrid(2, 2)
        assert not nodes.released

        nodes.release()

        assert nodes.released
        assert nodes.g is None

    def test_invalid_dimensions(self):
        with pytest.raises(ValueError):
            SearchNodeGrid(0, 5)
