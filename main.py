import sys
import argparse
import logging

from pygame.math import Vector3

from tilegrid.config import DEMO_MAP, LOG_FORMAT, WALL_CHAR
from tilegrid.grid import Grid, Pivot, Positioned
from tilegrid.pathfinding import Pathfinder, PathEndpointError


class Tile:
    """Demo cell: a walkability flag plus the world position set by the grid."""

    def __init__(self, x, y, walkable=True):
        self.x = x
        self.y = y
        self.walkable = walkable
        self.world_pos = Vector3()

    def __repr__(self):
        return f"<Tile ({self.x}, {self.y}) walkable={self.walkable}>"


def place_tile(tile: Positioned, world_pos: Vector3) -> None:
    tile.world_pos = world_pos


def build_grid(rows, cell_size=1.0):
    """Build a lower-left pivot grid from ASCII rows (first row is the top)."""
    height = len(rows)
    width = len(rows[0]) if height > 0 else 0

    def factory(x, y):
        char = rows[height - 1 - y][x]
        return Tile(x, y, walkable=char != WALL_CHAR)

    return Grid(
        width,
        height,
        cell_size=cell_size,
        pivot=Pivot.LOWER_LEFT,
        factory=factory,
        link_neighbours=True,
        place=place_tile,
    )


def render_path(grid, path):
    """Return the map as text with the path drawn in '*'."""
    on_path = {(t.x, t.y) for t in path}
    lines = []
    for y in reversed(range(grid.height)):
        row = []
        for x in range(grid.width):
            tile = grid.get_value(x, y)
            if (x, y) in on_path:
                row.append("*")
            elif not tile.walkable:
                row.append(WALL_CHAR)
            else:
                row.append(".")
        lines.append("".join(row))
    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(description="Grid A* pathfinding demo")
    parser.add_argument("start", nargs=2, type=int, metavar=("SX", "SY"))
    parser.add_argument("end", nargs=2, type=int, metavar=("EX", "EY"))
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    grid = build_grid(DEMO_MAP)
    pathfinder = Pathfinder(grid)
    try:
        path = pathfinder.find_path(*args.start, *args.end)
    except PathEndpointError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    if not path:
        print("No path found")
        sys.exit(1)
    print(render_path(grid, path))
    print(f"{len(path)} cells, ends at world {tuple(path[-1].world_pos)}")


if __name__ == "__main__":
    main()
