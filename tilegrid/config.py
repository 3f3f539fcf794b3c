# Pathfinding settings
# Cost of one axis-aligned step (scaled so diagonal costs stay integral)
STRAIGHT_COST = 10
# Cost of one diagonal step (~10 * sqrt(2)); diagonal movement is disabled
DIAGONAL_COST = 14

# Grid settings
# Edge length of one cell in world units
DEFAULT_CELL_SIZE = 1.0
# World-space offset added to every converted position
DEFAULT_ORIGIN = (0.0, 0.0, 0.0)

# Logging settings
# Format used by the console demo when configuring the root logger
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Demo settings
# Character marking a non-walkable cell in an ASCII map
WALL_CHAR = "#"
# Default ASCII map for the console demo; the first line is the top row
DEMO_MAP = (
    "..........",
    ".####.###.",
    ".#......#.",
    ".#.####.#.",
    "...#..#...",
    "####..###.",
    "..........",
)
