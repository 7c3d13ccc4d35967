"""
Point-set producers for lines, rectangles, ellipses and freeform polygons.

Every function here is pure: it returns coordinates and never touches a grid.
"""

import math
from typing import List, Optional, Sequence, Set, Tuple

import numpy as np

from .models import Point

FloatPoint = Tuple[float, float]

MIN_ELLIPSE_SAMPLES = 20


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _bresenham(x0: int, y0: int, x1: int, y1: int) -> List[Point]:
    points = []
    dx, dy = abs(x1 - x0), -abs(y1 - y0)
    sx, sy = (1 if x0 < x1 else -1), (1 if y0 < y1 else -1)
    err = dx + dy
    while True:
        points.append((x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy
    return points


def line_points(start: Point, end: Point) -> List[Point]:
    """Cells on the line from start to end, in drawing order.

    The path is always traced from the lexicographically smaller endpoint so
    that line(a, b) and line(b, a) cover the same cells.
    """
    if start <= end:
        return _bresenham(start[0], start[1], end[0], end[1])
    points = _bresenham(end[0], end[1], start[0], start[1])
    points.reverse()
    return points


def rectangle_points(start: Point, end: Point, filled: bool = False) -> Set[Point]:
    x_min, x_max = min(start[0], end[0]), max(start[0], end[0])
    y_min, y_max = min(start[1], end[1]), max(start[1], end[1])

    points = set()
    for y in range(y_min, y_max + 1):
        for x in range(x_min, x_max + 1):
            if filled or x in (x_min, x_max) or y in (y_min, y_max):
                points.add((x, y))
    return points


def ellipse_points(start: Point, end: Point, filled: bool = False) -> Set[Point]:
    """Ellipse inscribed in the box spanned by two corners."""
    cx = (start[0] + end[0]) / 2
    cy = (start[1] + end[1]) / 2
    rx = abs(end[0] - start[0]) / 2
    ry = abs(end[1] - start[1]) / 2

    if rx == 0 or ry == 0:
        return set(line_points(start, end))

    points = set()
    if filled:
        for y in range(math.floor(cy - ry), math.ceil(cy + ry) + 1):
            for x in range(math.floor(cx - rx), math.ceil(cx + rx) + 1):
                dx = (x - cx) / rx
                dy = (y - cy) / ry
                if dx * dx + dy * dy <= 1:
                    points.add((x, y))
        return points

    samples = max(math.ceil(2 * math.pi * max(rx, ry)), MIN_ELLIPSE_SAMPLES)
    for i in range(samples):
        angle = 2 * math.pi * i / samples
        x = round_half_up(cx + rx * math.cos(angle))
        y = round_half_up(cy + ry * math.sin(angle))
        points.add((x, y))
    return points


def constrain_to_square(start: Point, end: Point) -> Point:
    """Snap `end` so the box from `start` is square, keeping each axis's direction."""
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    size = max(abs(dx), abs(dy))
    sx = 1 if dx >= 0 else -1
    sy = 1 if dy >= 0 else -1
    return (start[0] + sx * size, start[1] + sy * size)


def point_in_polygon(point: FloatPoint, polygon: Sequence[FloatPoint]) -> bool:
    """Even-odd ray casting test."""
    x, y = point
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def polygon_cells(
    polygon: Sequence[FloatPoint], width: int, height: int
) -> Set[Point]:
    """Cells whose centre (x + 0.5, y + 0.5) lies inside the polygon, within bounds."""
    if len(polygon) < 3:
        return set()

    poly = np.asarray(polygon, dtype=float)
    min_x = max(0, int(math.floor(poly[:, 0].min())))
    max_x = min(width - 1, int(math.ceil(poly[:, 0].max())))
    min_y = max(0, int(math.floor(poly[:, 1].min())))
    max_y = min(height - 1, int(math.ceil(poly[:, 1].max())))
    if min_x > max_x or min_y > max_y:
        return set()

    xs = np.arange(min_x, max_x + 1)
    ys = np.arange(min_y, max_y + 1)
    gx, gy = np.meshgrid(xs + 0.5, ys + 0.5)
    inside = np.zeros(gx.shape, dtype=bool)

    j = len(poly) - 1
    for i in range(len(poly)):
        xi, yi = poly[i]
        xj, yj = poly[j]
        j = i
        if yi == yj:
            # Horizontal edges never straddle a cell centre row.
            continue
        crosses = (yi > gy) != (yj > gy)
        x_cross = (xj - xi) * (gy - yi) / (yj - yi) + xi
        inside ^= crosses & (gx < x_cross)

    rows, cols = np.nonzero(inside)
    return {(int(xs[c]), int(ys[r])) for r, c in zip(rows, cols)}


def smooth_path(points: Sequence[Point], tolerance: float) -> List[Point]:
    """Drop interior points closer than `tolerance` to the last kept point."""
    if len(points) <= 2:
        return list(points)

    smoothed = [points[0]]
    for curr in points[1:-1]:
        prev = smoothed[-1]
        if math.hypot(curr[0] - prev[0], curr[1] - prev[1]) >= tolerance:
            smoothed.append(curr)
    smoothed.append(points[-1])
    return smoothed


def close_path(points: Sequence[Point]) -> List[Point]:
    closed = list(points)
    if len(closed) > 2 and closed[0] != closed[-1]:
        closed.append(closed[0])
    return closed


def lasso_cells(
    path: Sequence[Point], width: int, height: int, tolerance: float
) -> Optional[Set[Point]]:
    """Smooth, close and fill a freeform path. None when the path has too few points."""
    if len(path) < 3:
        return None
    return polygon_cells(close_path(smooth_path(path, tolerance)), width, height)
