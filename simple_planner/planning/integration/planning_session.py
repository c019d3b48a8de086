"""
Planning Session
One goal request processed to completion: fetch map, inflate by the
robot radius, search, extract and emit the path.
"""

import logging
import time
from enum import Enum
from typing import Dict, Optional, Any, Callable
from dataclasses import dataclass, field

from simple_planner.bridges.map_bridge import MapProvider, MapUnavailableError
from simple_planner.planning.global_planner.inflation import ObstacleInflator
from simple_planner.planning.global_planner.occupancy_grid import OccupancyGrid, radius_to_cells
from simple_planner.planning.global_planner.path_extractor import Path, PathExtractor
from simple_planner.planning.global_planner.search_engine import (
    PathSearchEngine, PlanningStatus, SearchOutcome
)
from simple_planner.planning.global_planner.search_grid import SearchNodeGrid
from simple_planner.utils.coordinate_utils import Pose2D


class SessionState(Enum):
    IDLE = "idle"
    MAP_FETCHED = "map_fetched"
    INFLATED = "inflated"
    SEARCHED = "searched"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SessionResult:
    """Everything one session produced."""
    success: bool
    status: PlanningStatus
    state: SessionState
    path: Path = field(default_factory=Path)
    inflated_grid: Optional[OccupancyGrid] = None
    outcome: Optional[SearchOutcome] = None
    timings: Dict[str, float] = field(default_factory=dict)


class PlanningSession:
    """
    Single-use orchestration of one planning request.

    The session owns its SearchNodeGrid: it is allocated for the fetched
    map, reset by the search and released when run() returns. Results are
    published through the optional callbacks; a path is only emitted when
    it is non-empty.
    """

    def __init__(self, config: Dict[str, Any], map_provider: MapProvider,
                 on_inflated_grid: Optional[Callable[[OccupancyGrid], None]] = None,
                 on_path: Optional[Callable[[Path], None]] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.map_provider = map_provider
        self.on_inflated_grid = on_inflated_grid
        self.on_path = on_path

        planner_config = config.get('planner', {})
        self.robot_radius = planner_config.get('robot_radius', 0.3)
        self.default_frame_id = planner_config.get('frame_id', 'map')

        self.inflator = ObstacleInflator(config.get('inflation', {}))
        self.search_engine = PathSearchEngine(config.get('search', {}))
        self.extractor = PathExtractor()

        self.state = SessionState.IDLE
        self.nodes: Optional[SearchNodeGrid] = None

    def run(self, start_pose: Pose2D, goal_pose: Pose2D,
            frame_id: Optional[str] = None) -> SessionResult:
        """
        Plan from start_pose to goal_pose.

        Args:
            start_pose: Robot pose read at session start
            goal_pose: Requested goal
            frame_id: Frame of the goal request, stamped on the output path

        Returns:
            Session result; failures are reported through its status
        """
        if self.state != SessionState.IDLE:
            raise RuntimeError("PlanningSession can only be run once")

        frame_id = frame_id or self.default_frame_id
        timings = {}

        try:
            # Map
            fetch_start = time.time()
            try:
                grid = self.map_provider.get_map()
            except MapUnavailableError as e:
                self.logger.error(f"Map unavailable: {e}")
                return self._finish(False, PlanningStatus.MAP_UNAVAILABLE, SessionState.FAILED,
                                    timings=timings)
            timings['map_fetch'] = time.time() - fetch_start
            self.state = SessionState.MAP_FETCHED
            self.logger.debug(f"Map fetched: {grid.width}x{grid.height}, resolution {grid.resolution}")

            # Inflation
            inflate_start = time.time()
            radius_cells = radius_to_cells(self.robot_radius, grid.resolution)
            inflated = self.inflator.inflate(grid, radius_cells)
            timings['inflation'] = time.time() - inflate_start
            self.state = SessionState.INFLATED

            if self.on_inflated_grid is not None:
                self.on_inflated_grid(inflated)

            start = inflated.to_index(start_pose.x, start_pose.y)
            goal = inflated.to_index(goal_pose.x, goal_pose.y)
            if not inflated.in_bounds(*start) or not inflated.in_bounds(*goal):
                self.logger.warning(f"Start {tuple(start)} or goal {tuple(goal)} is outside the map")
                return self._finish(False, PlanningStatus.OUT_OF_BOUNDS, SessionState.FAILED,
                                    inflated=inflated, timings=timings)

            # Search
            self.nodes = SearchNodeGrid(inflated.width, inflated.height)
            outcome = self.search_engine.search(inflated, self.nodes, start, goal)
            timings['search'] = outcome.search_time
            self.state = SessionState.SEARCHED

            if not outcome.success:
                if outcome.status == PlanningStatus.GOAL_UNREACHABLE:
                    self.logger.warning("Path not found!")
                return self._finish(False, outcome.status, SessionState.FAILED,
                                    inflated=inflated, outcome=outcome, timings=timings)

            # Extraction
            path = self.extractor.extract(inflated, self.nodes, start, goal, outcome.success)
            path.frame_id = frame_id

            if path.empty:
                if start != goal:
                    self.logger.warning("Path not found!")
                    return self._finish(False, PlanningStatus.GOAL_UNREACHABLE, SessionState.FAILED,
                                        inflated=inflated, outcome=outcome, timings=timings)
                self.logger.info("Start and goal share a cell, nothing to publish")
            elif self.on_path is not None:
                self.on_path(path)

            self.logger.info(f"Path planned: {len(path)} points, cost {outcome.goal_cost}")
            return self._finish(True, PlanningStatus.SUCCESS, SessionState.DONE, path=path,
                                inflated=inflated, outcome=outcome, timings=timings)
        finally:
            if self.nodes is not None:
                self.nodes.release()

    def _finish(self, success: bool, status: PlanningStatus, state: SessionState,
                path: Optional[Path] = None, inflated: Optional[OccupancyGrid] = None,
                outcome: Optional[SearchOutcome] = None,
                timings: Optional[Dict[str, float]] = None) -> SessionResult:
        self.state = state
        return SessionResult(
            success=success,
            status=status,
            state=state,
            path=path if path is not None else Path(),
            inflated_grid=inflated,
            outcome=outcome,
            timings=timings or {}
        )
