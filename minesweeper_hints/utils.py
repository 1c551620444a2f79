"""Utility functions shared by the hint engine modules."""

from typing import Dict, Iterable, List, Tuple

from .models import Coordinate

# Module-level cache: (width, height) -> {Coordinate: (Coordinate, ...), ...}
# Entries are built once per board size and never mutated afterwards, so
# concurrent readers can share them.
_NEIGHBORHOODS_CACHE: Dict[
    Tuple[int, int],
    Dict[Coordinate, Tuple[Coordinate, ...]]
] = {}


def get_neighborhoods(
    width: int, height: int
) -> Dict[Coordinate, Tuple[Coordinate, ...]]:
    """
    Precompute and cache 8-connected neighbor coordinates for every cell in a grid.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.

    Returns:
        Mapping from each cell to a tuple of its neighbors under
        8-connectivity, clipped at the board edges (3, 5 or 8 entries).

    Raises:
        ValueError: If width or height is non-positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive.")

    key = (width, height)
    cached = _NEIGHBORHOODS_CACHE.get(key)
    if cached is not None:
        return cached

    neighborhoods: Dict[Coordinate, Tuple[Coordinate, ...]] = {}
    for y in range(height):
        for x in range(width):
            nbrs: List[Coordinate] = []
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    if dx == 0 and dy == 0:
                        continue
                    nx, ny = x + dx, y + dy
                    if 0 <= nx < width and 0 <= ny < height:
                        nbrs.append(Coordinate(nx, ny))
            neighborhoods[Coordinate(x, y)] = tuple(nbrs)

    _NEIGHBORHOODS_CACHE[key] = neighborhoods
    return neighborhoods


def row_major(coords: Iterable[Tuple[int, int]]) -> List[Coordinate]:
    """Return coordinates sorted top-to-bottom, then left-to-right."""
    return sorted((Coordinate(*c) for c in coords), key=lambda c: (c.y, c.x))


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp a value into [low, high]."""
    return max(low, min(high, value))
