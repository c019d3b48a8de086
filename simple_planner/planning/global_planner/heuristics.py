import math
import logging
from typing import Tuple, Dict, Any

# Heuristics that never overestimate the hop count for each connectivity
ADMISSIBLE_HEURISTICS = {
    4: ("euclidean", "manhattan", "chebyshev"),
    8: ("chebyshev",),
}


class GridHeuristics:

    def __init__(self, config: Dict[str, Any] = None, connectivity: int = 4):
        config = config or {}
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.heuristic_type = config.get("heuristic_type", "euclidean")
        self.weight = config.get("weight", 1.0)
        if not 0.0 <= self.weight <= 1.0:
            raise ValueError(f"Heuristic weight must be in [0, 1] to keep A* optimal, got {self.weight}")

        self.heuristic_functions = {
            "euclidean": self._euclidean_distance,
            "manhattan": self._manhattan_distance,
            "chebyshev": self._chebyshev_distance,
        }

        if self.heuristic_type not in self.heuristic_functions:
            self.logger.warning(
                f"Unknown heuristic type: {self.heuristic_type}, using euclidean"
            )
            self.heuristic_type = "euclidean"

        if self.heuristic_type not in ADMISSIBLE_HEURISTICS.get(connectivity, ()):
            self.logger.warning(
                f"Heuristic {self.heuristic_type} overestimates on a "
                f"{connectivity}-connected grid, using chebyshev"
            )
            self.heuristic_type = "chebyshev"

        self.heuristic_func = self.heuristic_functions[self.heuristic_type]

        self.logger.debug(f"Grid heuristic: {self.heuristic_type} (weight {self.weight})")

    def compute_heuristic(self, current: Tuple[int, int], goal: Tuple[int, int]) -> float:
        return self.weight * self.heuristic_func(current, goal)

    def _euclidean_distance(self, current: Tuple[int, int], goal: Tuple[int, int]) -> float:
        return math.sqrt((goal[0] - current[0]) ** 2 + (goal[1] - current[1]) ** 2)

    def _manhattan_distance(self, current: Tuple[int, int], goal: Tuple[int, int]) -> float:
        return float(abs(goal[0] - current[0]) + abs(goal[1] - current[1]))

    def _chebyshev_distance(self, current: Tuple[int, int], goal: Tuple[int, int]) -> float:
        return float(max(abs(goal[0] - current[0]), abs(goal[1] - current[1])))
