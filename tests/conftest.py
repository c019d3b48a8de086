"""Shared fixtures for planner tests"""

import numpy as np
import pytest

from simple_planner.planning.global_planner.occupancy_grid import (
    OccupancyGrid, FREE_VALUE, OBSTACLE_VALUE
)
from simple_planner.planning.global_planner.search_grid import SearchNodeGrid


def make_grid(rows, resolution=1.0, origin=(0.0, 0.0)):
    """Build a grid from rows listed bottom (j = 0) first."""
    data = np.array(rows, dtype=np.int8)
    height, width = data.shape
    return OccupancyGrid(width, height, resolution, origin, data)


@pytest.fixture
def free_grid_5x5():
    return OccupancyGrid(5, 5, 1.0, (0.0, 0.0), np.full((5, 5), FREE_VALUE))


@pytest.fixture
def free_grid_10x8():
    return OccupancyGrid(10, 8, 1.0, (0.0, 0.0), np.full((8, 10), FREE_VALUE))


@pytest.fixture
def enclosed_goal_grid():
    """7x7 grid whose cell (4, 4) is walled in by a closed ring of obstacles."""
    data = np.full((7, 7), FREE_VALUE)
    data[3:6, 3:6] = OBSTACLE_VALUE
    data[4, 4] = FREE_VALUE
    return OccupancyGrid(7, 7, 1.0, (0.0, 0.0), data)


@pytest.fixture
def wall_grid():
    """10x10 grid with a vertical wall at i = 5 and a single gap at j = 8."""
    data = np.full((10, 10), FREE_VALUE)
    data[:, 5] = OBSTACLE_VALUE
    data[8, 5] = FREE_VALUE
    return OccupancyGrid(10, 10, 1.0, (0.0, 0.0), data)


@pytest.fixture
def random_grid():
    rng = np.random.default_rng(7)
    data = np.where(rng.random((15, 20)) < 0.25, OBSTACLE_VALUE, FREE_VALUE)
    data[0, 0] = FREE_VALUE
    data[14, 19] = FREE_VALUE
    return OccupancyGrid(20, 15, 1.0, (0.0, 0.0), data)


@pytest.fixture
def node_grid_factory():
    def factory(grid):
        return SearchNodeGrid(grid.width, grid.height)
    return factory
