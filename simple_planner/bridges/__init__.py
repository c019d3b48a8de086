"""
Map bridges.
Collaborators that serve occupancy grids to the planner.
"""

from simple_planner.bridges.map_bridge import (
    MapProvider,
    MapUnavailableError,
    StaticMapProvider,
    CallableMapProvider,
    FileMapProvider,
    save_map,
    wait_for_map_provider,
)

__all__ = [
    'MapProvider',
    'MapUnavailableError',
    'StaticMapProvider',
    'CallableMapProvider',
    'FileMapProvider',
    'save_map',
    'wait_for_map_provider',
]
