import logging
from enum import IntEnum
from typing import Optional
from dataclasses import dataclass

import numpy as np

from simple_planner.planning.global_planner.occupancy_grid import MapIndex

NO_PREDECESSOR = -1


class NodeState(IntEnum):
    UNDEFINED = 0
    OPEN = 1
    CLOSED = 2


@dataclass
class SearchNode:
    """Snapshot of one cell's search state."""
    index: MapIndex
    g: float = float('inf')
    h: float = 0.0
    state: NodeState = NodeState.UNDEFINED
    predecessor: Optional[MapIndex] = None

    @property
    def f(self) -> float:
        return self.g + self.h


class SearchNodeGrid:
    """
    Per-cell search scratch state sized to one map.

    Cost, heuristic, state and predecessor live in flat arrays addressed by
    j * width + i. Predecessors are stored as flat indices into the same
    arrays, so they stay valid however the grid is used.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Search grid dimensions must be positive, got {width}x{height}")

        self.width = width
        self.height = height
        self.size = width * height
        self.logger = logging.getLogger(__name__)

        self.g = np.full(self.size, np.inf, dtype=np.float64)
        self.h = np.zeros(self.size, dtype=np.float64)
        self.state = np.full(self.size, NodeState.UNDEFINED, dtype=np.int8)
        self.predecessor = np.full(self.size, NO_PREDECESSOR, dtype=np.int64)

    def reset(self):
        """Return every node to UNDEFINED with no cost and no predecessor."""
        self.g.fill(np.inf)
        self.h.fill(0.0)
        self.state.fill(NodeState.UNDEFINED)
        self.predecessor.fill(NO_PREDECESSOR)

    def flat(self, index: MapIndex) -> int:
        return index[1] * self.width + index[0]

    def unflat(self, k: int) -> MapIndex:
        return MapIndex(int(k % self.width), int(k // self.width))

    def get_predecessor(self, index: MapIndex) -> Optional[MapIndex]:
        k = self.predecessor[self.flat(index)]
        if k == NO_PREDECESSOR:
            return None
        return self.unflat(k)

    def set_predecessor(self, index: MapIndex, predecessor: MapIndex):
        self.predecessor[self.flat(index)] = self.flat(predecessor)

    def node(self, index: MapIndex) -> SearchNode:
        k = self.flat(index)
        return SearchNode(
            index=MapIndex(index[0], index[1]),
            g=float(self.g[k]),
            h=float(self.h[k]),
            state=NodeState(int(self.state[k])),
            predecessor=self.get_predecessor(index)
        )

    def count_state(self, state: NodeState) -> int:
        return int(np.count_nonzero(self.state == state))

    def release(self):
        """Drop the buffers once the owning session has finished."""
        self.g = self.h = self.state = self.predecessor = None
        self.logger.debug("Search grid released")

    @property
    def released(self) -> bool:
        return self.g is None
