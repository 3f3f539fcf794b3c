"""
Pathfinding utilities: implements grid-based A* search over a Grid.
"""

from __future__ import annotations
import logging
import math
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from .config import STRAIGHT_COST
from .grid import Direction

if TYPE_CHECKING:
    from .grid import Grid, Walkable

logger = logging.getLogger(__name__)

# Expansion order for adjacent nodes; ties in F cost resolve by this order
NEIGHBOUR_ORDER = (Direction.LEFT, Direction.DOWN, Direction.UP, Direction.RIGHT)


class PathEndpointError(ValueError):
    """Start or end cell is outside the grid or not walkable."""


class PathNode:
    """Search wrapper around one walkable grid cell."""

    def __init__(self, x: int, y: int, cell: Walkable) -> None:
        self.x = x
        self.y = y
        self.cell = cell
        # Cumulative cost from the start; infinite until reached
        self.g: float = math.inf
        # Heuristic estimate to the goal
        self.h: float = 0
        self.previous: Optional[PathNode] = None

    @property
    def f(self) -> float:
        return self.g + self.h

    def __repr__(self):
        return f"<PathNode x={self.x} y={self.y} g={self.g} h={self.h}>"


def heuristic(a, b) -> int:
    """Manhattan distance between two (x, y) cells, scaled by STRAIGHT_COST."""
    return (abs(a[0] - b[0]) + abs(a[1] - b[1])) * STRAIGHT_COST


def move_cost(a, b) -> int:
    """Cost of moving between two cells with axis-aligned steps only."""
    return (abs(a[0] - b[0]) + abs(a[1] - b[1])) * STRAIGHT_COST


class Pathfinder:
    """
    A* search over a Grid whose cells expose a `walkable` flag.

    The grid is read fresh on every query; no search state is kept between
    calls, so the grid may change freely between queries.
    """

    def __init__(self, grid: Grid) -> None:
        self.grid = grid

    def path_exists(self, start_x: int, start_y: int, end_x: int, end_y: int) -> bool:
        """Return True if end is reachable from start."""
        # TODO: stop at the first sighting of the end node instead of building the path
        return bool(self.find_path(start_x, start_y, end_x, end_y))

    def find_path_at(self, start_pos, end_pos) -> List:
        """find_path() between the cells containing two world positions."""
        start = self.grid.world_to_grid(start_pos)
        end = self.grid.world_to_grid(end_pos)
        return self.find_path(start[0], start[1], end[0], end[1])

    def find_path(self, start_x: int, start_y: int, end_x: int, end_y: int) -> List:
        """
        Find a shortest 4-directional path from (start_x, start_y) to
        (end_x, end_y).
        Returns the cell values from start to end inclusive, or an empty list
        if the end cannot be reached.
        Raises PathEndpointError if either endpoint is out of bounds or not
        walkable.
        """
        nodes = self._build_nodes()

        start_node = nodes.get((start_x, start_y))
        end_node = nodes.get((end_x, end_y))
        if start_node is None or end_node is None:
            logger.error(
                "Invalid path endpoints (%s, %s) -> (%s, %s) on %r",
                start_x, start_y, end_x, end_y, self.grid,
            )
            raise PathEndpointError(
                f"Path endpoints must be walkable cells inside the grid: "
                f"({start_x}, {start_y}) -> ({end_x}, {end_y})"
            )

        start_node.g = 0
        start_node.h = heuristic((start_x, start_y), (end_x, end_y))
        # Open list keeps insertion order for the first-found tie-break
        open_list: List[PathNode] = [start_node]
        closed = set()

        while open_list:
            current = self._lowest_f(open_list)
            if current is end_node:
                path = self._reconstruct(current)
                logger.debug(
                    "Path (%s, %s) -> (%s, %s): %d cells, %d expanded",
                    start_x, start_y, end_x, end_y, len(path), len(closed),
                )
                return path

            open_list.remove(current)
            closed.add((current.x, current.y))

            for direction in NEIGHBOUR_ORDER:
                dx, dy = direction.offset
                neighbour = nodes.get((current.x + dx, current.y + dy))
                # Skip non-walkable cells and already expanded nodes
                if neighbour is None or (neighbour.x, neighbour.y) in closed:
                    continue
                tentative_g = current.g + move_cost(
                    (current.x, current.y), (neighbour.x, neighbour.y)
                )
                if tentative_g < neighbour.g:
                    neighbour.previous = current
                    neighbour.g = tentative_g
                    neighbour.h = heuristic(
                        (neighbour.x, neighbour.y), (end_x, end_y)
                    )
                    if neighbour not in open_list:
                        open_list.append(neighbour)

        logger.debug(
            "No path (%s, %s) -> (%s, %s) after expanding %d nodes",
            start_x, start_y, end_x, end_y, len(closed),
        )
        return []

    def _build_nodes(self) -> Dict[Tuple[int, int], PathNode]:
        # Snapshot of walkability taken once per query
        nodes = {}
        for x, y, cell in self.grid.cells():
            if cell is None or not cell.walkable:
                continue
            nodes[(x, y)] = PathNode(x, y, cell)
        return nodes

    @staticmethod
    def _lowest_f(open_list: List[PathNode]) -> PathNode:
        lowest = open_list[0]
        for node in open_list:
            if node.f < lowest.f:
                lowest = node
        return lowest

    @staticmethod
    def _reconstruct(end: PathNode) -> List:
        path = []
        node = end
        while node is not None:
            path.append(node.cell)
            node = node.previous
        path.reverse()
        return path
