import logging
import time
from typing import List, Tuple
from dataclasses import dataclass, field

from simple_planner.planning.global_planner.occupancy_grid import OccupancyGrid, MapIndex
from simple_planner.planning.global_planner.search_grid import SearchNodeGrid

GOAL_TO_START = "goal_to_start"


@dataclass
class Path:
    """
    Planned polyline in world coordinates.

    Points run from the goal back towards the start: the goal cell is the
    first point and the start cell itself is not included. Use
    start_to_goal() for the driving order.
    """
    points: List[Tuple[float, float]] = field(default_factory=list)
    grid_path: List[MapIndex] = field(default_factory=list)
    frame_id: str = "map"
    stamp: float = 0.0
    order: str = GOAL_TO_START

    def __len__(self) -> int:
        return len(self.points)

    @property
    def empty(self) -> bool:
        return not self.points

    def start_to_goal(self) -> List[Tuple[float, float]]:
        return list(reversed(self.points))


class PathExtractor:

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def extract(self, grid: OccupancyGrid, nodes: SearchNodeGrid,
                start: MapIndex, goal: MapIndex, success: bool) -> Path:
        """
        Walk predecessor links from goal to start.

        Args:
            grid: Grid used for the search (for world conversion and frame)
            nodes: Node grid populated by the search
            start: Start cell
            goal: Goal cell
            success: Whether the search reached the goal

        Returns:
            Path in goal-to-start order, empty if the goal was not reached
            or the predecessor chain is broken
        """
        path = Path(frame_id=grid.frame_id, stamp=time.time())

        if not success:
            return path

        start = MapIndex(*start)
        current = MapIndex(*goal)
        max_steps = nodes.size

        points = []
        grid_path = []
        while current != start:
            if len(grid_path) >= max_steps:
                self.logger.warning("Predecessor chain longer than the map, discarding path")
                return path

            points.append(grid.to_world(current.i, current.j))
            grid_path.append(current)
            self.logger.debug(f"i = {current.i} j = {current.j} g = {nodes.g[nodes.flat(current)]}")

            previous = nodes.get_predecessor(current)
            if previous is None:
                self.logger.warning(f"Cell {tuple(current)} has no predecessor, discarding path")
                return path
            current = previous

        path.points = points
        path.grid_path = grid_path
        return path
