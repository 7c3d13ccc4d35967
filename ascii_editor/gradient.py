"""
Gradient fill: per-cell interpolation of character, text colour and
background colour over a fill area.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .errors import GradientError
from .flood_fill import find_fill_area
from .models import Cell, MatchCriteria, Point, Snapshot

if TYPE_CHECKING:
    from .grid import Grid

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)

BAYER_2X2 = [
    [0, 2],
    [3, 1],
]

BAYER_4X4 = [
    [0, 8, 2, 10],
    [12, 4, 14, 6],
    [3, 11, 1, 9],
    [15, 7, 13, 5],
]


class GradientType(Enum):
    LINEAR = "linear"
    RADIAL = "radial"


class Interpolation(Enum):
    CONSTANT = "constant"
    LINEAR = "linear"
    BAYER_2X2 = "bayer2x2"
    BAYER_4X4 = "bayer4x4"
    NOISE = "noise"


@dataclass(frozen=True)
class GradientStop:
    position: float
    value: str

    def __post_init__(self):
        if not 0.0 <= self.position <= 1.0:
            raise GradientError(f"Stop position must be within [0, 1], got {self.position}")


@dataclass
class GradientProperty:
    enabled: bool = False
    stops: List[GradientStop] = field(default_factory=list)
    interpolation: Interpolation = Interpolation.LINEAR
    dither_strength: int = 50  # 0..100
    quantize_steps: Optional[int] = None  # None means continuous

    def __post_init__(self):
        if not 0 <= self.dither_strength <= 100:
            raise GradientError(f"dither_strength must be within [0, 100], got {self.dither_strength}")
        if self.quantize_steps is not None and self.quantize_steps < 1:
            raise GradientError(f"quantize_steps must be positive, got {self.quantize_steps}")


@dataclass
class GradientDefinition:
    type: GradientType = GradientType.LINEAR
    character: GradientProperty = field(default_factory=GradientProperty)
    text_color: GradientProperty = field(default_factory=GradientProperty)
    background_color: GradientProperty = field(default_factory=GradientProperty)

    def enabled_properties(self) -> List[GradientProperty]:
        return [p for p in (self.character, self.text_color, self.background_color) if p.enabled]


# --- Colour helpers ---


def hex_to_rgb(value: str) -> Optional[Tuple[int, int, int]]:
    match = HEX_COLOR.match(value)
    if not match:
        return None
    return tuple(int(part, 16) for part in match.groups())


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return "#{:02X}{:02X}{:02X}".format(r, g, b)


def interpolate_color(color1: str, color2: str, t: float) -> str:
    """Per-channel blend; non-hex values (e.g. "transparent") step at t = 0.5."""
    rgb1 = hex_to_rgb(color1)
    rgb2 = hex_to_rgb(color2)
    if rgb1 is None or rgb2 is None:
        return color1 if t < 0.5 else color2
    channels = [int(math.floor(lo + t * (hi - lo) + 0.5)) for lo, hi in zip(rgb1, rgb2)]
    return rgb_to_hex(*channels)


# --- Position along the gradient ---


def gradient_positions(
    points: Sequence[Point],
    start: Point,
    end: Point,
    gradient_type: GradientType = GradientType.LINEAR,
    shape_point: Optional[Point] = None,
    cell_aspect_ratio: float = 1.0,
) -> np.ndarray:
    """Vectorised t in [0, 1] for every point."""
    if not points:
        return np.zeros(0)

    pts = np.asarray(points, dtype=float)
    px = pts[:, 0] - start[0]
    py = pts[:, 1] - start[1]

    if gradient_type is GradientType.LINEAR:
        dx = end[0] - start[0]
        dy = end[1] - start[1]
        length_sq = dx * dx + dy * dy
        if length_sq == 0:
            return np.zeros(len(pts))
        return np.clip((px * dx + py * dy) / length_sq, 0.0, 1.0)

    px = px * cell_aspect_ratio

    if shape_point is not None:
        a1 = np.array([(end[0] - start[0]) * cell_aspect_ratio, end[1] - start[1]], dtype=float)
        a2 = np.array(
            [(shape_point[0] - start[0]) * cell_aspect_ratio, shape_point[1] - start[1]], dtype=float
        )
        len1 = float(np.hypot(*a1))
        len2 = float(np.hypot(*a2))
        if len1 == 0 or len2 == 0:
            return np.zeros(len(pts))
        n1 = a1 / len1
        n2 = a2 / len2
        c1 = px * n1[0] + py * n1[1]
        c2 = px * n2[0] + py * n2[1]
        dist = np.sqrt((c1 * c1) / (len1 * len1) + (c2 * c2) / (len2 * len2))
        return np.minimum(1.0, dist)

    radius = math.hypot((end[0] - start[0]) * cell_aspect_ratio, end[1] - start[1])
    if radius == 0:
        return np.zeros(len(pts))
    return np.minimum(1.0, np.hypot(px, py) / radius)


def gradient_position(x: int, y: int, start: Point, end: Point, **kwargs) -> float:
    return float(gradient_positions([(x, y)], start, end, **kwargs)[0])


# --- Sampling ---


def _quantize(t: float, steps: Optional[int]) -> float:
    t = max(0.0, min(1.0, t))
    if steps is None:
        return t
    return max(0.0, min(1.0, math.floor(t * steps + 0.5) / steps))


def _blend(t: float, left: GradientStop, right: GradientStop) -> str:
    if left.position == right.position:
        return left.value
    # Single glyphs are not blended numerically; pick the nearer stop.
    if len(left.value) == 1 and len(right.value) == 1:
        return left.value if t < 0.5 else right.value
    return interpolate_color(left.value, right.value, t)


def _ordered_threshold(matrix: List[List[int]], x: int, y: int) -> float:
    size = len(matrix)
    return matrix[abs(y) % size][abs(x) % size] / (size * size)


def _noise_threshold(x: int, y: int) -> float:
    n1 = math.sin(x * 12.9898 + y * 78.233) * 43758.5453
    n2 = math.sin(x * 93.9898 + y * 47.233) * 25643.2831
    return ((n1 - math.floor(n1)) + (n2 - math.floor(n2))) / 2


def sample_property(t: float, prop: GradientProperty, x: int = 0, y: int = 0) -> Optional[str]:
    """Value of a gradient property at position t, or None when it has no stops."""
    stops = prop.stops
    if not stops:
        return None
    if len(stops) == 1:
        return stops[0].value

    ordered = sorted(stops, key=lambda s: s.position)
    if t <= ordered[0].position:
        return ordered[0].value
    if t >= ordered[-1].position:
        return ordered[-1].value

    left, right = ordered[0], ordered[-1]
    for a, b in zip(ordered, ordered[1:]):
        if a.position <= t <= b.position:
            left, right = a, b
            break

    local_t = 0.0 if left.position == right.position else (t - left.position) / (right.position - left.position)

    mode = prop.interpolation
    if mode is Interpolation.CONSTANT:
        return left.value
    if mode is Interpolation.LINEAR:
        return _blend(_quantize(local_t, prop.quantize_steps), left, right)

    if mode is Interpolation.NOISE:
        threshold = _noise_threshold(x, y)
    else:
        matrix = BAYER_2X2 if mode is Interpolation.BAYER_2X2 else BAYER_4X4
        threshold = _ordered_threshold(matrix, x, y)
    strength = prop.dither_strength / 100
    effective = 0.5 + (threshold - 0.5) * strength
    return left.value if local_t < effective else right.value


def calculate_gradient_cells(
    grid: "Grid",
    fill_area: Iterable[Point],
    start: Point,
    end: Point,
    definition: GradientDefinition,
    shape_point: Optional[Point] = None,
    cell_aspect_ratio: float = 1.0,
) -> Snapshot:
    """Compute the new cell for every point of the fill area.

    Disabled properties, and enabled ones without stops, keep the existing
    cell's value. Returns an empty map when nothing is enabled.
    """
    points = sorted(fill_area)
    if not points or not definition.enabled_properties():
        return {}

    ts = gradient_positions(
        points,
        start,
        end,
        gradient_type=definition.type,
        shape_point=shape_point if definition.type is GradientType.RADIAL else None,
        cell_aspect_ratio=cell_aspect_ratio,
    )

    result: Snapshot = {}
    for (x, y), t in zip(points, ts):
        prior = grid.get_cell(x, y)
        values = []
        for prop, current in (
            (definition.character, prior.char),
            (definition.text_color, prior.color),
            (definition.background_color, prior.bg_color),
        ):
            sampled = sample_property(float(t), prop, x, y) if prop.enabled else None
            values.append(current if sampled is None else sampled)
        result[(x, y)] = Cell(*values)
    return result


def apply_gradient_cells(grid: "Grid", cells: Snapshot) -> int:
    """Write a computed gradient into the grid. Default cells are pruned by the grid."""
    for (x, y), cell in cells.items():
        grid.set_cell(x, y, cell)
    return len(cells)


class GradientSession:
    """Interactive gradient placement: start, end, optional shape point, apply or cancel."""

    def __init__(
        self,
        grid: "Grid",
        definition: GradientDefinition,
        criteria: Optional[MatchCriteria] = None,
        contiguous: bool = True,
        cell_aspect_ratio: float = 1.0,
    ):
        self.grid = grid
        self.definition = definition
        self.criteria = criteria or MatchCriteria()
        self.contiguous = contiguous
        self.cell_aspect_ratio = cell_aspect_ratio

        self.start: Optional[Point] = None
        self.end: Optional[Point] = None
        self.shape_point: Optional[Point] = None
        self.fill_area = set()
        self.preview: Snapshot = {}

    @property
    def is_active(self) -> bool:
        return self.start is not None

    def begin(self, x: int, y: int) -> None:
        self.start = (x, y)
        self.end = None
        self.shape_point = None
        self.fill_area = find_fill_area(self.grid, x, y, self.criteria, self.contiguous)
        self.preview = {}
        logger.debug("Gradient started at %s over %d cells", self.start, len(self.fill_area))

    def set_end(self, x: int, y: int) -> Snapshot:
        if self.start is None:
            return {}
        self.end = (x, y)
        return self._regenerate()

    def set_shape_point(self, x: int, y: int) -> Snapshot:
        if self.start is None or self.end is None:
            return {}
        self.shape_point = (x, y)
        return self._regenerate()

    def _regenerate(self) -> Snapshot:
        self.preview = calculate_gradient_cells(
            self.grid,
            self.fill_area,
            self.start,
            self.end,
            self.definition,
            shape_point=self.shape_point,
            cell_aspect_ratio=self.cell_aspect_ratio,
        )
        return self.preview

    def apply(self) -> bool:
        """Write the preview into the grid. False when there was nothing to apply."""
        if not self.preview:
            self.cancel()
            return False
        apply_gradient_cells(self.grid, self.preview)
        logger.debug("Applied gradient to %d cells", len(self.preview))
        self.cancel()
        return True

    def cancel(self) -> None:
        self.start = None
        self.end = None
        self.shape_point = None
        self.fill_area = set()
        self.preview = {}
