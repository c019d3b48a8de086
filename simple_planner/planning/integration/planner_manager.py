"""
Planner Manager
Event shell around planning sessions: keeps the last robot pose, runs one
session per goal request and publishes results to subscribers.
"""

import logging
import time
from typing import Dict, List, Optional, Any, Callable, Union

from simple_planner.bridges.map_bridge import MapProvider, wait_for_map_provider
from simple_planner.planning.global_planner.occupancy_grid import OccupancyGrid
from simple_planner.planning.global_planner.path_extractor import Path
from simple_planner.planning.global_planner.search_engine import PlanningStatus
from simple_planner.planning.integration.planning_session import PlanningSession, SessionResult
from simple_planner.utils.coordinate_utils import Pose2D, GoalRequest


class PlannerManager:
    """
    Goal-driven planner.
    Goals are processed one at a time on the calling thread; pose updates
    only affect the next goal.
    """

    def __init__(self, config: Dict[str, Any], map_provider: MapProvider,
                 wait_for_map: bool = True):
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.map_provider = map_provider

        map_config = config.get('map', {})
        self.poll_interval = map_config.get('poll_interval', 1.0)
        self.wait_timeout = map_config.get('wait_timeout')
        if self.poll_interval <= 0:
            raise ValueError(f"map poll_interval must be positive, got {self.poll_interval}")

        self.current_pose = Pose2D(0.0, 0.0)
        self.last_result: Optional[SessionResult] = None

        self.path_callbacks: List[Callable[[Path], None]] = []
        self.inflated_grid_callbacks: List[Callable[[OccupancyGrid], None]] = []

        self.planning_statistics = {
            'goals_received': 0,
            'paths_published': 0,
            'total_planning_time': 0.0,
            'average_planning_time': 0.0,
            'failures': {status.value: 0 for status in PlanningStatus if status != PlanningStatus.SUCCESS}
        }

        self.map_connected = False
        if wait_for_map:
            self.wait_for_map_provider()

        self.logger.info("Planner Manager initialized")
        self.logger.info(f"Search strategy: {config.get('search', {}).get('strategy', 'astar')}")
        self.logger.info(f"Robot radius: {config.get('planner', {}).get('robot_radius', 0.3)}m")

    def wait_for_map_provider(self, sleep: Callable[[float], None] = time.sleep) -> bool:
        """Poll the map provider until it is available (or the wait times out)."""
        self.map_connected = wait_for_map_provider(
            self.map_provider, self.poll_interval, self.wait_timeout, sleep
        )
        return self.map_connected

    def add_path_callback(self, callback: Callable[[Path], None]):
        self.path_callbacks.append(callback)

    def add_inflated_grid_callback(self, callback: Callable[[OccupancyGrid], None]):
        self.inflated_grid_callbacks.append(callback)

    def on_pose(self, pose: Pose2D):
        """Store the latest robot pose as the start of the next session."""
        self.current_pose = pose
        self.logger.debug(f"Pose update: ({pose.x:.2f}, {pose.y:.2f}, {pose.yaw:.2f})")

    def on_goal(self, goal: Union[Pose2D, GoalRequest],
                frame_id: Optional[str] = None) -> SessionResult:
        """
        Run a fresh planning session towards goal.

        Args:
            goal: Goal pose, or a GoalRequest carrying its own frame
            frame_id: Frame of a bare goal pose

        Returns:
            Result of the session
        """
        if isinstance(goal, GoalRequest):
            frame_id = frame_id or goal.frame_id
            goal = goal.pose

        start_pose = self.current_pose
        self.planning_statistics['goals_received'] += 1
        self.logger.info(f"Goal received: ({goal.x:.2f}, {goal.y:.2f}) from "
                         f"({start_pose.x:.2f}, {start_pose.y:.2f})")

        planning_start = time.time()
        session = PlanningSession(
            self.config,
            self.map_provider,
            on_inflated_grid=self._publish_inflated_grid,
            on_path=self._publish_path
        )
        result = session.run(start_pose, goal, frame_id)
        planning_time = time.time() - planning_start

        self._update_statistics(result, planning_time)
        self.last_result = result

        return result

    def _publish_path(self, path: Path):
        for callback in self.path_callbacks:
            callback(path)
        self.planning_statistics['paths_published'] += 1

    def _publish_inflated_grid(self, grid: OccupancyGrid):
        for callback in self.inflated_grid_callbacks:
            callback(grid)

    def _update_statistics(self, result: SessionResult, planning_time: float):
        stats = self.planning_statistics
        stats['total_planning_time'] += planning_time
        stats['average_planning_time'] = stats['total_planning_time'] / stats['goals_received']

        if not result.success:
            stats['failures'][result.status.value] += 1
            self.logger.warning(f"Planning failed: {result.status.value}")
        else:
            self.logger.info(f"Planning finished in {planning_time:.3f}s")

    def get_statistics(self) -> Dict[str, Any]:
        """Get planning statistics."""
        stats = self.planning_statistics.copy()
        stats['failures'] = dict(self.planning_statistics['failures'])
        stats.update({
            'map_connected': self.map_connected,
            'last_status': self.last_result.status.value if self.last_result else None,
            'last_path_length': len(self.last_result.path) if self.last_result else 0
        })
        return stats

    def reset(self):
        """Forget the stored pose, last result and statistics."""
        self.current_pose = Pose2D(0.0, 0.0)
        self.last_result = None
        self.planning_statistics['goals_received'] = 0
        self.planning_statistics['paths_published'] = 0
        self.planning_statistics['total_planning_time'] = 0.0
        self.planning_statistics['average_planning_time'] = 0.0
        for status in self.planning_statistics['failures']:
            self.planning_statistics['failures'][status] = 0

        self.logger.info("Planner Manager reset")
