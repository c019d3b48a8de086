"""
Map Bridge
Map-providing collaborators queried with a blocking request/response call.
Each call returns a full occupancy grid snapshot.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Any, Callable, Union

import numpy as np
import yaml

from simple_planner.planning.global_planner.occupancy_grid import OccupancyGrid

logger = logging.getLogger(__name__)


class MapUnavailableError(RuntimeError):
    """The map provider could not deliver a map."""


class MapProvider(ABC):

    @abstractmethod
    def is_available(self) -> bool:
        """Whether a get_map() call can currently be served."""

    @abstractmethod
    def get_map(self) -> OccupancyGrid:
        """Fetch a fresh grid snapshot; raises MapUnavailableError on failure."""


class StaticMapProvider(MapProvider):
    """Serves one in-memory grid."""

    def __init__(self, grid: Optional[OccupancyGrid] = None):
        self.grid = grid

    def is_available(self) -> bool:
        return self.grid is not None

    def get_map(self) -> OccupancyGrid:
        if self.grid is None:
            raise MapUnavailableError("No map loaded")
        return self.grid


class CallableMapProvider(MapProvider):
    """
    Wraps a blocking fetch function, e.g. a service client call.

    The function may return an OccupancyGrid or a dict in the
    OccupancyGrid.export_grid() layout. Any exception it raises, and any
    response that does not describe a valid grid, is reported
    as MapUnavailableError.
    """

    def __init__(self, fetch: Callable[[], Any],
                 availability: Optional[Callable[[], bool]] = None):
        self.fetch = fetch
        self.availability = availability

    def is_available(self) -> bool:
        if self.availability is None:
            return True
        return bool(self.availability())

    def get_map(self) -> OccupancyGrid:
        try:
            response = self.fetch()
        except Exception as e:
            raise MapUnavailableError(f"Map request failed: {e}") from e

        if response is None:
            raise MapUnavailableError("Map request returned no map")
        if isinstance(response, OccupancyGrid):
            return response
        if not isinstance(response, dict):
            raise MapUnavailableError(
                f"Malformed map response: unexpected type {type(response).__name__}"
            )

        try:
            return OccupancyGrid.load_grid(response)
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise MapUnavailableError(f"Malformed map response: {e!r}") from e


class FileMapProvider(MapProvider):
    """
    Loads a map description from YAML or JSON.

    Expected keys: width, height, resolution, origin [x, y], optional
    frame_id, and either inline row-major `data` or `data_file` pointing at
    a .npy array (relative paths resolve against the description file).
    """

    def __init__(self, map_path: Union[str, Path]):
        self.map_path = Path(map_path)

    def is_available(self) -> bool:
        return self.map_path.exists()

    def get_map(self) -> OccupancyGrid:
        if not self.map_path.exists():
            raise MapUnavailableError(f"Map file not found: {self.map_path}")

        try:
            description = self._load_description()
            if 'data' not in description and 'data_file' in description:
                data_path = Path(description['data_file'])
                if not data_path.is_absolute():
                    data_path = self.map_path.parent / data_path
                description['data'] = np.load(data_path).reshape(-1)
            return OccupancyGrid.load_grid(description)
        except (OSError, KeyError, TypeError, ValueError, OverflowError, yaml.YAMLError) as e:
            raise MapUnavailableError(f"Invalid map file {self.map_path}: {e}") from e

    def _load_description(self) -> Dict[str, Any]:
        with open(self.map_path, 'r') as f:
            if self.map_path.suffix.lower() in ['.yaml', '.yml']:
                description = yaml.safe_load(f)
            elif self.map_path.suffix.lower() == '.json':
                description = json.load(f)
            else:
                raise ValueError(f"Unsupported map format: {self.map_path.suffix}")

        if not isinstance(description, dict):
            raise ValueError("Map description must be a mapping")
        return description


def save_map(grid: OccupancyGrid, output_path: Union[str, Path]):
    """Write a grid in the layout FileMapProvider reads."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        if output_path.suffix.lower() in ['.yaml', '.yml']:
            yaml.dump(grid.export_grid(), f, default_flow_style=None)
        else:
            json.dump(grid.export_grid(), f)

    logger.info(f"Map saved to {output_path}")


def wait_for_map_provider(provider: MapProvider, poll_interval: float = 1.0,
                          timeout: Optional[float] = None,
                          sleep: Callable[[float], None] = time.sleep) -> bool:
    """
    Block until the provider reports it is available.

    Args:
        provider: Map provider to poll
        poll_interval: Seconds between polls
        timeout: Give up after this many seconds (None waits forever)
        sleep: Sleep function, replaceable in tests

    Returns:
        True once available, False if the timeout expired
    """
    if poll_interval <= 0:
        raise ValueError(f"poll_interval must be positive, got {poll_interval}")

    waited = 0.0
    while not provider.is_available():
        if timeout is not None and waited >= timeout:
            logger.error(f"Map provider not available after {waited:.1f}s")
            return False
        logger.info("Wait map server")
        sleep(poll_interval)
        waited += poll_interval

    logger.info("Map provider connected")
    return True
