"""
2-D Occupancy Grid
Row-major occupancy map with world/grid index conversions.
Cells hold free (0), unknown (-1) or obstacle (100) values.
"""

import math
from typing import Dict, List, Tuple, Any, NamedTuple, Sequence
from dataclasses import dataclass, field

import numpy as np

FREE_VALUE = 0
UNKNOWN_VALUE = -1
OBSTACLE_VALUE = 100


class MapIndex(NamedTuple):
    """Grid cell index: column i (x axis), row j (y axis)."""
    i: int
    j: int


@dataclass
class GridInfo:
    """Summary of an occupancy grid."""
    width: int
    height: int
    resolution: float
    origin: Tuple[float, float]
    total_cells: int
    occupied_cells: int
    free_cells: int
    unknown_cells: int


@dataclass(frozen=True, eq=False)
class OccupancyGrid:
    """
    Occupancy grid snapshot.

    The cell array has shape (height, width) and is indexed [j, i], which
    matches the row-major layout of flat map messages (index j * W + i).
    Data is read-only once the grid is constructed.
    """
    width: int
    height: int
    resolution: float
    origin: Tuple[float, float]
    data: np.ndarray = field(repr=False)
    frame_id: str = "map"

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {self.width}x{self.height}")
        if self.resolution <= 0:
            raise ValueError(f"Grid resolution must be positive, got {self.resolution}")

        data = np.array(self.data, dtype=np.int8)
        if data.ndim == 1:
            if data.size != self.width * self.height:
                raise ValueError(
                    f"Flat grid data has {data.size} cells, expected {self.width * self.height}"
                )
            data = data.reshape((self.height, self.width))
        elif data.shape != (self.height, self.width):
            raise ValueError(f"Grid shape mismatch: {data.shape} vs {(self.height, self.width)}")

        data.flags.writeable = False
        object.__setattr__(self, 'data', data)
        object.__setattr__(self, 'origin', (float(self.origin[0]), float(self.origin[1])))

    @classmethod
    def from_flat(cls, width: int, height: int, resolution: float,
                  origin: Tuple[float, float], data: Sequence[int],
                  frame_id: str = "map") -> 'OccupancyGrid':
        """Build a grid from a row-major flat cell list."""
        return cls(width=width, height=height, resolution=resolution,
                   origin=origin, data=np.asarray(data, dtype=np.int8), frame_id=frame_id)

    def with_data(self, data: np.ndarray) -> 'OccupancyGrid':
        """Return a grid with the same geometry and new cell values."""
        return OccupancyGrid(width=self.width, height=self.height,
                             resolution=self.resolution, origin=self.origin,
                             data=data, frame_id=self.frame_id)

    def to_index(self, x: float, y: float) -> MapIndex:
        """
        Convert world coordinates to a cell index.

        No clamping is applied: positions outside the map give
        out-of-range indices, callers must check in_bounds().
        """
        i = int(math.floor((x - self.origin[0]) / self.resolution))
        j = int(math.floor((y - self.origin[1]) / self.resolution))
        return MapIndex(i, j)

    def to_world(self, i: int, j: int) -> Tuple[float, float]:
        """Convert a cell index to the world coordinates of its corner."""
        x = i * self.resolution + self.origin[0]
        y = j * self.resolution + self.origin[1]
        return (x, y)

    def in_bounds(self, i: int, j: int) -> bool:
        return 0 <= i < self.width and 0 <= j < self.height

    def value(self, i: int, j: int) -> int:
        return int(self.data[j, i])

    def is_obstacle(self, i: int, j: int) -> bool:
        return self.data[j, i] == OBSTACLE_VALUE

    def obstacle_mask(self) -> np.ndarray:
        """Boolean (height, width) array, True where the cell is an obstacle."""
        return self.data == OBSTACLE_VALUE

    def to_flat(self) -> List[int]:
        """Row-major cell list, as carried by map messages."""
        return self.data.reshape(-1).tolist()

    def get_info(self) -> GridInfo:
        occupied_cells = int(np.sum(self.data == OBSTACLE_VALUE))
        free_cells = int(np.sum(self.data == FREE_VALUE))
        unknown_cells = int(np.sum(self.data == UNKNOWN_VALUE))

        return GridInfo(
            width=self.width,
            height=self.height,
            resolution=self.resolution,
            origin=self.origin,
            total_cells=self.width * self.height,
            occupied_cells=occupied_cells,
            free_cells=free_cells,
            unknown_cells=unknown_cells
        )

    def export_grid(self) -> Dict[str, Any]:
        """Serialisable snapshot of the grid."""
        return {
            'width': self.width,
            'height': self.height,
            'resolution': self.resolution,
            'origin': list(self.origin),
            'frame_id': self.frame_id,
            'data': self.to_flat()
        }

    @classmethod
    def load_grid(cls, grid_data: Dict[str, Any]) -> 'OccupancyGrid':
        """Inverse of export_grid()."""
        origin = grid_data.get('origin', (0.0, 0.0))
        return cls.from_flat(
            width=int(grid_data['width']),
            height=int(grid_data['height']),
            resolution=float(grid_data['resolution']),
            origin=(origin[0], origin[1]),
            data=grid_data['data'],
            frame_id=grid_data.get('frame_id', 'map')
        )


def radius_to_cells(radius: float, resolution: float) -> int:
    """Number of cells covering a metric radius (rounded up)."""
    if radius < 0:
        raise ValueError(f"Radius must be non-negative, got {radius}")
    return int(math.ceil(radius / resolution))
