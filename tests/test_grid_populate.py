import pygame
import pytest

from tilegrid.grid import Direction, Grid, Pivot
from tilegrid.visual import CellVisual


class Cell:
    def __init__(self, x, y):
        self.x = x
        self.y = y
        self.world_pos = None

    def __repr__(self):
        return f"<Cell {self.x},{self.y}>"


def test_factory_called_once_per_cell_in_order():
    calls = []

    def factory(x, y):
        calls.append((x, y))
        return Cell(x, y)

    grid = Grid(3, 2, factory=factory)
    assert calls == [(x, y) for x in range(3) for y in range(2)]
    assert grid.get_value(2, 1).x == 2


def test_deferred_populate_matches_constructor():
    grid = Grid(2, 2)
    assert grid.get_value(1, 1) is None
    grid.populate(Cell, link_neighbours=True)
    assert grid.get_value(1, 1).y == 1
    assert grid.get_neighbour(1, 1, Direction.LEFT) is grid.get_value(0, 1)


def test_neighbour_links():
    grid = Grid(3, 3, factory=Cell, link_neighbours=True)
    centre = grid.get_value(1, 1)
    assert grid.get_neighbour(1, 1, Direction.LEFT) is grid.get_value(0, 1)
    assert grid.get_neighbour(1, 1, Direction.RIGHT) is grid.get_value(2, 1)
    assert grid.get_neighbour(1, 1, Direction.UP) is grid.get_value(1, 2)
    assert grid.get_neighbour(1, 1, Direction.DOWN) is grid.get_value(1, 0)
    # Links are symmetric
    assert grid.get_neighbour(0, 1, Direction.RIGHT) is centre
    assert grid.neighbour_coords(1, 0, Direction.UP) == (1, 1)
    # Edges have no neighbours outside the grid
    assert grid.get_neighbour(0, 0, Direction.LEFT) is None
    assert grid.get_neighbour(0, 0, Direction.DOWN) is None
    assert grid.get_neighbour(2, 2, Direction.RIGHT) is None
    assert grid.get_neighbour(2, 2, Direction.UP) is None
    assert grid.neighbour_coords(-1, 0, Direction.RIGHT) is None


def test_no_links_unless_requested():
    grid = Grid(3, 3, factory=Cell)
    for direction in Direction:
        assert grid.get_neighbour(1, 1, direction) is None


def test_empty_cells_are_not_linked():
    def factory(x, y):
        return None if (x, y) == (1, 1) else Cell(x, y)

    grid = Grid(3, 3, factory=factory, link_neighbours=True)
    assert grid.get_neighbour(0, 1, Direction.RIGHT) is None
    assert grid.get_neighbour(2, 1, Direction.LEFT) is None
    assert grid.get_neighbour(1, 0, Direction.UP) is None
    assert grid.get_neighbour(1, 2, Direction.DOWN) is None
    assert grid.get_neighbour(0, 0, Direction.RIGHT) is grid.get_value(1, 0)


def test_direction_opposites():
    assert Direction.UP.opposite is Direction.DOWN
    assert Direction.LEFT.opposite is Direction.RIGHT
    assert Direction.RIGHT.offset == (1, 0)


def test_place_hook_receives_cell_centres():
    placed = {}

    def place(cell, pos):
        cell.world_pos = pos
        placed[(cell.x, cell.y)] = pos

    grid = Grid(2, 2, cell_size=2.0, pivot=Pivot.LOWER_LEFT, factory=Cell, place=place)
    assert len(placed) == 4
    assert tuple(grid.get_value(1, 0).world_pos) == pytest.approx((3.0, 1.0, 0.0))
    for (x, y), pos in placed.items():
        assert pos == grid.grid_to_world(x, y)


def test_prefab_hook_spawns_visuals():
    template = pygame.Surface((2, 2))

    def prefab(cell):
        # Only even columns are drawn
        return template if cell.x % 2 == 0 else None

    grid = Grid(3, 2, pivot=Pivot.LOWER_LEFT, factory=Cell, prefab=prefab)
    visuals = grid.container.sprites()
    assert len(visuals) == 4
    for visual in visuals:
        assert isinstance(visual, CellVisual)
        assert visual.cell[0] % 2 == 0
        assert visual.world_pos == grid.grid_to_world(*visual.cell)
        # Each instance owns a copy of the template
        assert visual.image is not template


def test_destroy_releases_visuals():
    grid = Grid(2, 2, factory=Cell, prefab=lambda cell: pygame.Surface((1, 1)))
    visuals = grid.container.sprites()
    grid.destroy()
    assert grid.container is None
    assert not any(visual.alive() for visual in visuals)
    # Destroying again is a no-op
    grid.destroy()


def test_destroy_without_container_is_noop():
    grid = Grid(2, 2)
    grid.destroy()
    assert grid.container is None


def test_repopulate_replaces_visuals():
    grid = Grid(2, 1, factory=Cell, prefab=lambda cell: pygame.Surface((1, 1)))
    old = grid.container.sprites()
    grid.populate(Cell, prefab=lambda cell: pygame.Surface((1, 1)))
    assert len(grid.container) == 2
    assert not any(visual.alive() for visual in old)
