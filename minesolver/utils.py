"""Grid geometry helpers shared by the board, the engine and the solver."""

from typing import Dict, Iterable, List, Tuple

# (x, y): column then row.
Point = Tuple[int, int]

# Module-level cache: (width, height) -> (row-major points, {point: neighbours})
_GEOMETRY_CACHE: Dict[
    Tuple[int, int],
    Tuple[Tuple[Point, ...], Dict[Point, Tuple[Point, ...]]],
] = {}


def _geometry(
    width: int, height: int
) -> Tuple[Tuple[Point, ...], Dict[Point, Tuple[Point, ...]]]:
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive.")

    key = (width, height)
    cached = _GEOMETRY_CACHE.get(key)
    if cached is not None:
        return cached

    points: List[Point] = [(x, y) for y in range(height) for x in range(width)]
    neighbourhoods: Dict[Point, Tuple[Point, ...]] = {}
    for x, y in points:
        nbrs: List[Point] = []
        for ny in range(max(0, y - 1), min(height - 1, y + 1) + 1):
            for nx in range(max(0, x - 1), min(width - 1, x + 1) + 1):
                if (nx, ny) != (x, y):
                    nbrs.append((nx, ny))
        neighbourhoods[(x, y)] = tuple(nbrs)

    geometry = (tuple(points), neighbourhoods)
    _GEOMETRY_CACHE[key] = geometry
    return geometry


def get_points(width: int, height: int) -> Tuple[Point, ...]:
    """
    Return every point of a width x height grid in canonical scan order.

    Row-major: row 0 left to right, then row 1, and so on. Every rule that
    has to pick "the first" match walks the board in this order.
    """
    return _geometry(width, height)[0]


def get_neighborhoods(width: int, height: int) -> Dict[Point, Tuple[Point, ...]]:
    """
    Precompute and cache 8-connected neighbour coordinates for every cell.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.

    Returns:
        Mapping from each point (x, y) to its edge-clipped neighbours, listed
        in row-major order.

    Raises:
        ValueError: If width or height is non-positive.
    """
    return _geometry(width, height)[1]


def row_major_key(point: Point) -> Tuple[int, int]:
    """Sort key placing points in canonical scan order."""
    return point[1], point[0]


def sort_points(points: Iterable[Point]) -> List[Point]:
    return sorted(points, key=row_major_key)
