"""
Generic 2-D grid container with grid/world coordinate conversion.
"""

from __future__ import annotations
import logging
import math
from enum import Enum
from typing import (
    Any,
    Callable,
    Iterator,
    List,
    Optional,
    Protocol,
    Tuple,
)

import numpy as np
import pygame
from pygame.math import Vector3

from .config import DEFAULT_CELL_SIZE, DEFAULT_ORIGIN
from .visual import CellVisual

logger = logging.getLogger(__name__)

CellChangedCallback = Callable[[int, int, Any], None]
CellFactory = Callable[[int, int], Any]
PrefabHook = Callable[[Any], Optional[pygame.Surface]]
PlaceHook = Callable[[Any, Vector3], None]


class Pivot(Enum):
    """Where grid cell (0, 0) sits relative to the world origin."""

    CENTER = "center"
    LOWER_LEFT = "lower_left"


class DrawPlane(Enum):
    """World axes the grid's X and Y axes are laid onto."""

    XY = "xy"
    XZ = "xz"


class Direction(Enum):
    """Neighbour slots, in neighbour-table order."""

    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    @property
    def offset(self) -> Tuple[int, int]:
        return _OFFSETS[self]

    @property
    def opposite(self) -> Direction:
        return Direction((self.value + 2) % 4)


_OFFSETS = {
    Direction.UP: (0, 1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
}


class Walkable(Protocol):
    """Cell capability read by the pathfinder."""

    walkable: bool


class Positioned(Protocol):
    """Cell capability for values that track their own world position."""

    world_pos: Vector3


class Grid:
    """
    Fixed-size 2-D array of cell values with world-space conversion.

    Cells are indexed [0, width) x [0, height); unset cells hold None.
    Subscribers registered with subscribe() are called synchronously with
    (x, y, value) whenever set_value() stores a value.
    """

    def __init__(
        self,
        width: int,
        height: int,
        cell_size: float = DEFAULT_CELL_SIZE,
        origin=DEFAULT_ORIGIN,
        pivot: Pivot = Pivot.CENTER,
        draw_plane: DrawPlane = DrawPlane.XY,
        factory: Optional[CellFactory] = None,
        link_neighbours: bool = False,
        prefab: Optional[PrefabHook] = None,
        place: Optional[PlaceHook] = None,
    ) -> None:
        if width <= 0 or height <= 0:
            logger.error("Invalid grid size: %sx%s", width, height)
            raise ValueError(
                f"Grid dimensions must be positive, got {width}x{height}"
            )
        if cell_size <= 0:
            logger.error("Invalid cell size: %s", cell_size)
            raise ValueError(f"Cell size must be positive, got {cell_size}")
        self._width = int(width)
        self._height = int(height)
        self.cell_size = float(cell_size)
        self.origin = Vector3(origin)
        self.pivot = pivot
        self.draw_plane = draw_plane
        self._cells = np.empty((self._width, self._height), dtype=object)
        # Flat index (x * height + y) per direction, -1 when unlinked
        self._neighbours = np.full(
            (self._width, self._height, len(Direction)), -1, dtype=np.int64
        )
        self._subscribers: List[CellChangedCallback] = []
        # Visual instances; created by populate()
        self.container: Optional[pygame.sprite.Group] = None

        if factory is not None:
            self.populate(
                factory,
                link_neighbours=link_neighbours,
                prefab=prefab,
                place=place,
            )

    def __repr__(self):
        return (
            f"<Grid {self._width}x{self._height} cell_size={self.cell_size} "
            f"pivot={self.pivot.name} plane={self.draw_plane.name}>"
        )

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    # --- Population ---

    def populate(
        self,
        factory: CellFactory,
        link_neighbours: bool = False,
        prefab: Optional[PrefabHook] = None,
        place: Optional[PlaceHook] = None,
    ) -> None:
        """
        Fill every cell with factory(x, y), x outer and y inner, so the left
        and lower neighbours of a cell always exist before the cell itself.
        link_neighbours: record Left/Right and Down/Up links between cells.
        prefab: returns a template surface for a value (or None for no
            visual); an instance is placed at the cell's world center.
        place: receives each value with its cell's world center.
        """
        self.destroy()
        self.container = pygame.sprite.Group()
        self._neighbours.fill(-1)

        for x in range(self._width):
            for y in range(self._height):
                value = factory(x, y)
                self._cells[x, y] = value
                if value is None:
                    continue

                if link_neighbours:
                    self._link(x, y)

                if prefab is not None:
                    surface = prefab(value)
                    if surface is not None:
                        pos = self.grid_to_world(x, y)
                        visual = CellVisual(
                            surface, (x, y), pos, anchor=self._planar(pos)
                        )
                        self.container.add(visual)

                if place is not None:
                    place(value, self.grid_to_world(x, y))

        logger.debug(
            "Populated %r (%d visuals)", self, len(self.container)
        )

    def _link(self, x: int, y: int) -> None:
        # Only left and lower neighbours exist at placement time
        if x > 0 and self._cells[x - 1, y] is not None:
            self._set_link(x, y, Direction.LEFT, x - 1, y)
        if y > 0 and self._cells[x, y - 1] is not None:
            self._set_link(x, y, Direction.DOWN, x, y - 1)

    def _set_link(
        self, x: int, y: int, direction: Direction, nx: int, ny: int
    ) -> None:
        self._neighbours[x, y, direction.value] = nx * self._height + ny
        self._neighbours[nx, ny, direction.opposite.value] = (
            x * self._height + y
        )

    def neighbour_coords(
        self, x: int, y: int, direction: Direction
    ) -> Optional[Tuple[int, int]]:
        """Return the linked neighbour's (x, y), or None if unlinked."""
        if not self.in_bounds(x, y):
            return None
        index = int(self._neighbours[x, y, direction.value])
        if index < 0:
            return None
        return divmod(index, self._height)

    def get_neighbour(self, x: int, y: int, direction: Direction):
        """Return the linked neighbour's value, or None if unlinked."""
        coords = self.neighbour_coords(x, y, direction)
        if coords is None:
            return None
        return self._cells[coords]

    def destroy(self) -> None:
        """Release the visual container, if one was created."""
        if self.container is None:
            return
        for visual in self.container.sprites():
            visual.kill()
        self.container = None

    # --- Cell access ---

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def set_value(self, x: int, y: int, value) -> None:
        """Store value at (x, y) and notify subscribers; ignored if out of bounds."""
        if not self.in_bounds(x, y):
            logger.debug("Ignoring set_value outside %r at (%s, %s)", self, x, y)
            return
        self._cells[x, y] = value
        # Snapshot so callbacks may (un)subscribe during delivery
        for callback in list(self._subscribers):
            callback(x, y, value)

    def set_value_at(self, world_pos, value) -> None:
        """Store value in the cell containing world_pos."""
        x, y = self.world_to_grid(world_pos)
        self.set_value(x, y, value)

    def get_value(self, x: int, y: int):
        """Return the value at (x, y), or None if unset or out of bounds."""
        if not self.in_bounds(x, y):
            return None
        return self._cells[x, y]

    def get_value_at(self, world_pos):
        """Return the value of the cell containing world_pos."""
        x, y = self.world_to_grid(world_pos)
        return self.get_value(x, y)

    def cells(self) -> Iterator[Tuple[int, int, Any]]:
        """Yield (x, y, value) for every cell, x outer and y inner."""
        for x in range(self._width):
            for y in range(self._height):
                yield x, y, self._cells[x, y]

    # --- Notifications ---

    def subscribe(self, callback: CellChangedCallback) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: CellChangedCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    # --- Coordinate conversion ---

    def world_to_grid(self, world_pos) -> Tuple[int, int]:
        """Return the (x, y) cell enclosing world_pos; not clamped to bounds."""
        # Positions are relative to the origin
        wx, wy = self._planar(Vector3(world_pos) - self.origin)

        if self.pivot == Pivot.CENTER:
            wx += self._width * self.cell_size * 0.5
            wy += self._height * self.cell_size * 0.5

        return (
            math.floor(wx / self.cell_size),
            math.floor(wy / self.cell_size),
        )

    def grid_to_world(self, x: int, y: int, centered: bool = True) -> Vector3:
        """
        Return the world position of cell (x, y): its center by default, or
        its lower-left corner when centered is False.
        """
        px = x * self.cell_size
        py = y * self.cell_size
        if self.pivot == Pivot.CENTER:
            px -= self._width * self.cell_size * 0.5
            py -= self._height * self.cell_size * 0.5

        if centered:
            px += self.cell_size * 0.5
            py += self.cell_size * 0.5

        if self.draw_plane == DrawPlane.XZ:
            return Vector3(px, 0.0, py) + self.origin
        return Vector3(px, py, 0.0) + self.origin

    def _planar(self, world_pos: Vector3) -> Tuple[float, float]:
        if self.draw_plane == DrawPlane.XZ:
            return (world_pos.x, world_pos.z)
        return (world_pos.x, world_pos.y)

    def grid_lines(self) -> List[Tuple[Vector3, Vector3]]:
        """
        World-space segments outlining every cell: the left and bottom edge
        of each cell, then the top and right border of the whole grid.
        """
        lines = []
        for x in range(self._width):
            for y in range(self._height):
                start = self.grid_to_world(x, y, centered=False)
                lines.append((start, self.grid_to_world(x, y + 1, centered=False)))
                lines.append((start, self.grid_to_world(x + 1, y, centered=False)))

        upper_left = self.grid_to_world(0, self._height, centered=False)
        upper_right = self.grid_to_world(self._width, self._height, centered=False)
        lower_right = self.grid_to_world(self._width, 0, centered=False)
        lines.append((upper_left, upper_right))
        lines.append((upper_right, lower_right))
        return lines
