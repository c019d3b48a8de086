"""
Grid Search Engine
Four interchangeable search strategies over one node model:
breadth-first wavefront, Dijkstra, A* and an exhaustive
Bellman-Ford style relaxation sweep.
"""

import heapq
import logging
import time
from collections import deque
from enum import Enum
from typing import Dict, List, Tuple, Any, Iterator
from dataclasses import dataclass

import numpy as np

from simple_planner.planning.global_planner.heuristics import GridHeuristics
from simple_planner.planning.global_planner.inflation import NEIGHBORS_8
from simple_planner.planning.global_planner.occupancy_grid import OccupancyGrid, MapIndex
from simple_planner.planning.global_planner.search_grid import (
    SearchNodeGrid, NodeState, NO_PREDECESSOR
)

NEIGHBORS_4 = [(-1, 0), (0, -1), (1, 0), (0, 1)]

DEFAULT_RELAX_ITERATIONS = 2500
DEFAULT_UNREACHED_THRESHOLD = 300000.0


class PlanningStatus(Enum):
    SUCCESS = "success"
    MAP_UNAVAILABLE = "map_unavailable"
    START_BLOCKED = "start_blocked"
    GOAL_UNREACHABLE = "goal_unreachable"
    OUT_OF_BOUNDS = "out_of_bounds"


class SearchStrategyType(Enum):
    WAVEFRONT = "wavefront"
    DIJKSTRA = "dijkstra"
    ASTAR = "astar"
    EXHAUSTIVE_RELAX = "exhaustive_relax"


@dataclass
class SearchOutcome:
    """Result of one search run."""
    success: bool
    status: PlanningStatus
    strategy: SearchStrategyType
    goal_cost: float = float('inf')
    nodes_expanded: int = 0
    iterations: int = 0
    search_time: float = 0.0


class SearchStrategy:
    """
    Base class for grid search strategies.

    Subclasses implement search() and share neighbour iteration: every
    move costs 1 and only in-bounds, non-obstacle cells are yielded.
    """

    strategy_type: SearchStrategyType = None
    default_connectivity = 4

    def __init__(self, config: Dict[str, Any] = None):
        config = config or {}
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.connectivity = config.get('connectivity', self.default_connectivity)
        if self.connectivity not in (4, 8):
            raise ValueError(f"connectivity must be 4 or 8, got {self.connectivity}")

        self.shifts = NEIGHBORS_4 if self.connectivity == 4 else NEIGHBORS_8

    def search(self, grid: OccupancyGrid, nodes: SearchNodeGrid,
               start: MapIndex, goal: MapIndex) -> SearchOutcome:
        raise NotImplementedError

    def _neighbors(self, blocked: np.ndarray, index: MapIndex) -> Iterator[MapIndex]:
        height, width = blocked.shape
        i, j = index
        for di, dj in self.shifts:
            ni, nj = i + di, j + dj
            if 0 <= ni < width and 0 <= nj < height and not blocked[nj, ni]:
                yield MapIndex(ni, nj)

    def _outcome(self, success: bool, goal_cost: float = float('inf'),
                 nodes_expanded: int = 0, iterations: int = 0) -> SearchOutcome:
        return SearchOutcome(
            success=success,
            status=PlanningStatus.SUCCESS if success else PlanningStatus.GOAL_UNREACHABLE,
            strategy=self.strategy_type,
            goal_cost=goal_cost,
            nodes_expanded=nodes_expanded,
            iterations=iterations
        )


class WavefrontSearch(SearchStrategy):
    """
    Breadth-first expansion with a FIFO queue.

    FIFO order pops nodes with non-decreasing hop count, so the first time
    the goal is popped its cost is minimal and no relaxation is needed.
    """

    strategy_type = SearchStrategyType.WAVEFRONT

    def search(self, grid: OccupancyGrid, nodes: SearchNodeGrid,
               start: MapIndex, goal: MapIndex) -> SearchOutcome:
        blocked = grid.obstacle_mask()

        start_k = nodes.flat(start)
        nodes.g[start_k] = 0.0
        nodes.state[start_k] = NodeState.OPEN

        queue = deque([start])
        nodes_expanded = 0

        while queue:
            index = queue.popleft()
            k = nodes.flat(index)

            nodes.state[k] = NodeState.CLOSED
            previous = nodes.predecessor[k]
            if previous != NO_PREDECESSOR:
                nodes.g[k] = nodes.g[previous] + 1
            nodes_expanded += 1

            if index == goal:
                return self._outcome(True, float(nodes.g[k]), nodes_expanded)

            for neighbor in self._neighbors(blocked, index):
                nk = nodes.flat(neighbor)
                if nodes.state[nk] == NodeState.UNDEFINED:
                    nodes.state[nk] = NodeState.OPEN
                    nodes.predecessor[nk] = k
                    queue.append(neighbor)

        return self._outcome(False, nodes_expanded=nodes_expanded)


class DijkstraSearch(SearchStrategy):
    """
    Uniform-cost search ordered by (g, i, j).

    Decrease-key is done by pushing a fresh heap entry; entries whose key no
    longer matches the node's current cost, or whose node is already closed,
    are skipped when popped.
    """

    strategy_type = SearchStrategyType.DIJKSTRA

    def _heuristic(self, index: MapIndex, goal: MapIndex) -> float:
        return 0.0

    def search(self, grid: OccupancyGrid, nodes: SearchNodeGrid,
               start: MapIndex, goal: MapIndex) -> SearchOutcome:
        blocked = grid.obstacle_mask()

        start_k = nodes.flat(start)
        nodes.g[start_k] = 0.0
        nodes.h[start_k] = self._heuristic(start, goal)
        nodes.state[start_k] = NodeState.OPEN

        open_set: List[Tuple[float, int, int]] = []
        heapq.heappush(open_set, (float(nodes.h[start_k]), start.i, start.j))
        nodes_expanded = 0

        while open_set:
            key, i, j = heapq.heappop(open_set)
            index = MapIndex(i, j)
            k = nodes.flat(index)

            if nodes.state[k] == NodeState.CLOSED:
                continue
            if key != float(nodes.g[k] + nodes.h[k]):
                continue

            nodes.state[k] = NodeState.CLOSED
            nodes_expanded += 1

            if index == goal:
                return self._outcome(True, float(nodes.g[k]), nodes_expanded)

            new_g = float(nodes.g[k]) + 1.0
            for neighbor in self._neighbors(blocked, index):
                nk = nodes.flat(neighbor)
                state = nodes.state[nk]

                if state == NodeState.OPEN and new_g < nodes.g[nk]:
                    nodes.g[nk] = new_g
                    nodes.predecessor[nk] = k
                    heapq.heappush(open_set, (float(new_g + nodes.h[nk]), neighbor.i, neighbor.j))
                elif state == NodeState.UNDEFINED:
                    nodes.h[nk] = self._heuristic(neighbor, goal)
                    nodes.g[nk] = new_g
                    nodes.state[nk] = NodeState.OPEN
                    nodes.predecessor[nk] = k
                    heapq.heappush(open_set, (float(new_g + nodes.h[nk]), neighbor.i, neighbor.j))

        return self._outcome(False, nodes_expanded=nodes_expanded)


class AStarSearch(DijkstraSearch):
    """Dijkstra ordered by (g + h, i, j), h computed when a node is first opened."""

    strategy_type = SearchStrategyType.ASTAR

    def __init__(self, config: Dict[str, Any] = None):
        super().__init__(config)
        self.heuristics = GridHeuristics(self.config.get('heuristics', {}), self.connectivity)

    def _heuristic(self, index: MapIndex, goal: MapIndex) -> float:
        return self.heuristics.compute_heuristic(index, goal)


class ExhaustiveRelaxSearch(SearchStrategy):
    """
    Repeated full-grid relaxation over 8-connected neighbours.

    Each pass visits every cell in row-major order and lowers its cost to
    neighbour cost + 1 where that is cheaper. There is no queue and no early
    exit on reaching the goal; success is decided afterwards by comparing the
    goal cost with the unreached threshold.

    The pass cap is fixed (2500) by default and does not scale with the map,
    so on large maps the sweep may stop before costs converge and report a
    longer path or none at all. Set max_iterations to None to use the
    W*H - 1 Bellman-Ford bound instead.

    stop_when_stable ends the sweep after a pass that changes no cost. It only
    saves time: the cap above still bounds the pass count either way.
    """

    strategy_type = SearchStrategyType.EXHAUSTIVE_RELAX
    default_connectivity = 8

    def __init__(self, config: Dict[str, Any] = None):
        super().__init__(config)
        relax_config = self.config.get('relax', {})

        self.max_iterations = relax_config.get('max_iterations', DEFAULT_RELAX_ITERATIONS)
        self.unreached_threshold = relax_config.get('unreached_threshold', DEFAULT_UNREACHED_THRESHOLD)
        self.stop_when_stable = relax_config.get('stop_when_stable', True)
        self.progress_interval = relax_config.get('progress_interval', 1000)

        if self.max_iterations is not None and self.max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")

    def search(self, grid: OccupancyGrid, nodes: SearchNodeGrid,
               start: MapIndex, goal: MapIndex) -> SearchOutcome:
        width, height = grid.width, grid.height
        blocked = grid.obstacle_mask().tolist()

        max_iterations = self.max_iterations
        if max_iterations is None:
            max_iterations = max(1, width * height - 1)

        # Plain lists keep the inner loop fast; copied back after the sweep
        g = nodes.g.tolist()
        predecessor = nodes.predecessor.tolist()
        g[nodes.flat(start)] = 0.0

        iterations = 0
        changed = False
        for iteration in range(max_iterations):
            if iteration % self.progress_interval == 0:
                self.logger.debug(f"Relaxation pass {iteration}/{max_iterations}")

            changed = False
            for j in range(height):
                row_blocked = blocked[j]
                for i in range(width):
                    if row_blocked[i]:
                        continue
                    k = j * width + i
                    for di, dj in self.shifts:
                        ni, nj = i + di, j + dj
                        if not (0 <= ni < width and 0 <= nj < height) or blocked[nj][ni]:
                            continue
                        nk = nj * width + ni
                        if g[nk] + 1 < g[k]:
                            g[k] = g[nk] + 1
                            predecessor[k] = nk
                            changed = True

            iterations += 1
            if self.stop_when_stable and not changed:
                break

        if changed:
            self.logger.warning(f"Relaxation hit the pass cap ({max_iterations}) before converging")

        nodes.g[:] = g
        nodes.predecessor[:] = predecessor

        goal_cost = float(nodes.g[nodes.flat(goal)])
        success = goal_cost < self.unreached_threshold
        reached = int(np.count_nonzero(np.isfinite(nodes.g)))

        self.logger.info(f"Relaxation done after {iterations} passes")
        return self._outcome(success, goal_cost if success else float('inf'), reached, iterations)


STRATEGIES = {
    SearchStrategyType.WAVEFRONT: WavefrontSearch,
    SearchStrategyType.DIJKSTRA: DijkstraSearch,
    SearchStrategyType.ASTAR: AStarSearch,
    SearchStrategyType.EXHAUSTIVE_RELAX: ExhaustiveRelaxSearch,
}


def create_search_strategy(strategy: Any, config: Dict[str, Any] = None) -> SearchStrategy:
    """Instantiate a strategy from its enum member or name ('astar', 'dijkstra', ...)."""
    try:
        strategy_type = SearchStrategyType(strategy)
    except ValueError:
        valid = ", ".join(s.value for s in SearchStrategyType)
        raise ValueError(f"Unknown search strategy: {strategy} (expected one of {valid})")

    return STRATEGIES[strategy_type](config)


class PathSearchEngine:
    """
    Runs the configured strategy with the common setup: reset the node grid
    and refuse to search when the start cell is an obstacle.
    """

    def __init__(self, config: Dict[str, Any] = None):
        config = config or {}
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.strategy = create_search_strategy(config.get('strategy', 'astar'), config)

        self.logger.info(f"Search engine: {self.strategy.strategy_type.value}, "
                         f"{self.strategy.connectivity}-connected")

    @property
    def strategy_type(self) -> SearchStrategyType:
        return self.strategy.strategy_type

    def search(self, grid: OccupancyGrid, nodes: SearchNodeGrid,
               start: MapIndex, goal: MapIndex) -> SearchOutcome:
        """
        Search from start to goal over an inflated grid.

        Args:
            grid: Inflated occupancy grid
            nodes: Scratch node grid with the same dimensions
            start: Start cell, must be in bounds
            goal: Goal cell, must be in bounds

        Returns:
            Search outcome; nodes holds the predecessor links on success
        """
        if (nodes.width, nodes.height) != (grid.width, grid.height):
            raise ValueError(f"Search grid {nodes.width}x{nodes.height} does not match "
                             f"map {grid.width}x{grid.height}")
        if not grid.in_bounds(*start) or not grid.in_bounds(*goal):
            raise ValueError(f"Start {tuple(start)} or goal {tuple(goal)} outside the map")

        search_start = time.time()
        nodes.reset()

        if grid.is_obstacle(*start):
            self.logger.warning("Start is in obstacle!")
            return SearchOutcome(
                success=False,
                status=PlanningStatus.START_BLOCKED,
                strategy=self.strategy_type,
                search_time=time.time() - search_start
            )

        outcome = self.strategy.search(grid, nodes, MapIndex(*start), MapIndex(*goal))
        outcome.search_time = time.time() - search_start

        self.logger.info(f"{self.strategy_type.value} search finished in {outcome.search_time:.3f}s: "
                         f"success={outcome.success}, cost={outcome.goal_cost}, "
                         f"expanded={outcome.nodes_expanded}")
        return outcome
