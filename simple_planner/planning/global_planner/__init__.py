"""
Global planning module.
Occupancy grid model, inflation and the four grid search strategies.
"""

from .occupancy_grid import OccupancyGrid, MapIndex, radius_to_cells
from .inflation import ObstacleInflator
from .search_grid import SearchNodeGrid, NodeState
from .heuristics import GridHeuristics
from .search_engine import PathSearchEngine, PlanningStatus, SearchStrategyType, SearchOutcome
from .path_extractor import Path, PathExtractor

__all__ = [
    'OccupancyGrid', 'MapIndex', 'radius_to_cells', 'ObstacleInflator',
    'SearchNodeGrid', 'NodeState', 'GridHeuristics', 'PathSearchEngine',
    'PlanningStatus', 'SearchStrategyType', 'SearchOutcome', 'Path', 'PathExtractor'
]
