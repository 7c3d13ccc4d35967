"""
Region matching for the paint bucket, magic wand and gradient fill.
"""

from typing import TYPE_CHECKING, Set

from .models import Cell, MatchCriteria, Point

if TYPE_CHECKING:
    from .grid import Grid

NEIGHBOURS = [(1, 0), (-1, 0), (0, 1), (0, -1)]


def cells_match(a: Cell, b: Cell, criteria: MatchCriteria) -> bool:
    """AND of every enabled criterion, with special handling for empty cells.

    Two empty cells only match when char matching is enabled, and an empty
    cell never matches a non-empty one. With no criterion enabled nothing
    matches.
    """
    if not criteria.any_enabled():
        return False

    a_empty, b_empty = a.is_empty(), b.is_empty()
    if a_empty and b_empty:
        return criteria.char
    if a_empty != b_empty:
        return False

    if criteria.char and a.char != b.char:
        return False
    if criteria.color and a.color != b.color:
        return False
    if criteria.bg_color and a.bg_color != b.bg_color:
        return False
    return True


def find_fill_area(
    grid: "Grid", x: int, y: int, criteria: MatchCriteria, contiguous: bool = True
) -> Set[Point]:
    if not grid.in_bounds(x, y) or not criteria.any_enabled():
        return set()

    target = grid.get_cell(x, y)

    if not contiguous:
        return {
            (cx, cy)
            for cy in range(grid.height)
            for cx in range(grid.width)
            if cells_match(grid.get_cell(cx, cy), target, criteria)
        }

    if not cells_match(target, target, criteria):
        return set()

    stack = [(x, y)]
    visited = {(x, y)}
    while stack:
        cx, cy = stack.pop()
        for dx, dy in NEIGHBOURS:
            nx, ny = cx + dx, cy + dy
            if (nx, ny) in visited or not grid.in_bounds(nx, ny):
                continue
            if cells_match(grid.get_cell(nx, ny), target, criteria):
                visited.add((nx, ny))
                stack.append((nx, ny))
    return visited
