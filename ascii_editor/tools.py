"""
Drawing tools that write to a grid.
History is handled by the caller; these functions only mutate cells.
"""

from typing import TYPE_CHECKING, Iterable, Optional, Set

from .flood_fill import find_fill_area
from .models import EMPTY_CHAR, Cell, Point, ToolSettings
from .raster import ellipse_points, line_points, rectangle_points

if TYPE_CHECKING:
    from .grid import Grid


def cell_with_toggles(existing: Cell, settings: ToolSettings) -> Cell:
    """Blend the brush into an existing cell according to the "affects" toggles.

    Colours are only written when the result has a glyph.
    """
    char = settings.selected_char if settings.affects_char else existing.char
    if char == EMPTY_CHAR:
        return Cell()
    color = settings.selected_color if settings.affects_color else existing.color
    bg = settings.selected_bg_color if settings.affects_bg_color else existing.bg_color
    return Cell(char, color, bg)


def paint_cells(grid: "Grid", settings: ToolSettings, points: Iterable[Point]) -> Set[Point]:
    changed = set()
    for x, y in points:
        if not grid.in_bounds(x, y):
            continue
        old = grid.get_cell(x, y)
        new = cell_with_toggles(old, settings)
        if new != old:
            grid.set_cell(x, y, new)
            changed.add((x, y))
    return changed


def brush_points(x: int, y: int, size: int) -> Set[Point]:
    h = size // 2
    return {(x + dx, y + dy) for dy in range(-h, size - h) for dx in range(-h, size - h)}


def draw_pencil(grid: "Grid", settings: ToolSettings, x: int, y: int) -> Set[Point]:
    return paint_cells(grid, settings, brush_points(x, y, max(1, settings.brush_size)))


def draw_line(grid: "Grid", settings: ToolSettings, start: Point, end: Point) -> Set[Point]:
    points = set()
    for x, y in line_points(start, end):
        points |= brush_points(x, y, max(1, settings.brush_size))
    return paint_cells(grid, settings, points)


def erase(grid: "Grid", start: Point, end: Optional[Point] = None) -> Set[Point]:
    """Clear one cell, or every cell on the line between two positions."""
    points = line_points(start, end) if end is not None else [start]
    changed = set()
    for x, y in points:
        if grid.has_cell(x, y):
            grid.clear_cell(x, y)
            changed.add((x, y))
    return changed


def draw_rectangle(grid: "Grid", settings: ToolSettings, start: Point, end: Point, filled: bool = False) -> Set[Point]:
    return paint_cells(grid, settings, rectangle_points(start, end, filled))


def draw_ellipse(grid: "Grid", settings: ToolSettings, start: Point, end: Point, filled: bool = False) -> Set[Point]:
    return paint_cells(grid, settings, ellipse_points(start, end, filled))


def paint_bucket(grid: "Grid", settings: ToolSettings, x: int, y: int) -> Set[Point]:
    if settings.affects_char and settings.affects_color and settings.affects_bg_color:
        return grid.fill_area(
            x, y, settings.brush_cell(), settings.paint_bucket_contiguous, settings.fill_match
        )
    area = find_fill_area(grid, x, y, settings.fill_match, settings.paint_bucket_contiguous)
    return paint_cells(grid, settings, area)


def pick_from_cell(settings: ToolSettings, cell: Cell) -> bool:
    """Copy attributes of `cell` into the brush. Empty cells only give up their glyph."""
    changed = False
    if settings.eyedropper_picks_char:
        settings.selected_char = cell.char
        changed = True
    if cell.is_empty():
        return changed
    if settings.eyedropper_picks_color:
        settings.selected_color = cell.color
        changed = True
    if settings.eyedropper_picks_bg_color:
        settings.selected_bg_color = cell.bg_color
        changed = True
    return changed


def preview_shape(settings: ToolSettings, kind: str, start: Point, end: Point) -> Set[Point]:
    if kind == "line":
        return set(line_points(start, end))
    if kind == "rectangle":
        return rectangle_points(start, end, settings.rectangle_filled)
    return ellipse_points(start, end, settings.rectangle_filled)

