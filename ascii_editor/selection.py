"""
Selection variants and the single slot that holds the active one.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Set, Tuple, Union

from .flood_fill import find_fill_area
from .models import Bounds, Cell, MatchCriteria, Point, bounds_of
from .raster import close_path, constrain_to_square, lasso_cells, smooth_path

if TYPE_CHECKING:
    from .grid import Grid

logger = logging.getLogger(__name__)


class SelectionKind(Enum):
    RECTANGULAR = "rectangular"
    FREEFORM = "freeform"
    FLOOD_MATCHED = "flood_matched"


@dataclass
class RectangularSelection:
    start: Point
    end: Point
    kind = SelectionKind.RECTANGULAR

    def bounds(self) -> Bounds:
        return Bounds(
            min(self.start[0], self.end[0]),
            min(self.start[1], self.end[1]),
            max(self.start[0], self.end[0]),
            max(self.start[1], self.end[1]),
        )

    def contains(self, x: int, y: int) -> bool:
        return self.bounds().contains(x, y)

    def cells(self) -> Set[Point]:
        b = self.bounds()
        return {
            (x, y)
            for y in range(b.min_y, b.max_y + 1)
            for x in range(b.min_x, b.max_x + 1)
        }

    def translate(self, dx: int, dy: int) -> None:
        self.start = (self.start[0] + dx, self.start[1] + dy)
        self.end = (self.end[0] + dx, self.end[1] + dy)


@dataclass
class FreeformSelection:
    path: List[Point] = field(default_factory=list)
    selected: Set[Point] = field(default_factory=set)
    is_drawing: bool = True
    kind = SelectionKind.FREEFORM

    def bounds(self) -> Optional[Bounds]:
        return bounds_of(self.selected)

    def contains(self, x: int, y: int) -> bool:
        return (x, y) in self.selected

    def cells(self) -> Set[Point]:
        return set(self.selected)

    def translate(self, dx: int, dy: int) -> None:
        self.path = [(x + dx, y + dy) for x, y in self.path]
        self.selected = {(x + dx, y + dy) for x, y in self.selected}


@dataclass
class FloodMatchedSelection:
    anchor: Point
    anchor_cell: Cell
    selected: Set[Point]
    criteria: MatchCriteria
    contiguous: bool = True
    kind = SelectionKind.FLOOD_MATCHED

    def bounds(self) -> Optional[Bounds]:
        return bounds_of(self.selected)

    def contains(self, x: int, y: int) -> bool:
        return (x, y) in self.selected

    def cells(self) -> Set[Point]:
        return set(self.selected)

    def translate(self, dx: int, dy: int) -> None:
        self.anchor = (self.anchor[0] + dx, self.anchor[1] + dy)
        self.selected = {(x + dx, y + dy) for x, y in self.selected}


Selection = Union[RectangularSelection, FreeformSelection, FloodMatchedSelection]


class SelectionModel:
    """Holds at most one active selection of any kind."""

    def __init__(
        self,
        grid: "Grid",
        preview_tolerance: float = 0.2,
        finalize_tolerance: float = 0.5,
    ):
        self.grid = grid
        self.preview_tolerance = preview_tolerance
        self.finalize_tolerance = finalize_tolerance
        self.active: Optional[Selection] = None

    @property
    def kind(self) -> Optional[SelectionKind]:
        return self.active.kind if self.active is not None else None

    @property
    def is_active(self) -> bool:
        if self.active is None:
            return False
        if isinstance(self.active, FreeformSelection):
            return not self.active.is_drawing and bool(self.active.selected)
        return True

    def _clamp(self, x: int, y: int) -> Point:
        return (
            max(0, min(self.grid.width - 1, x)),
            max(0, min(self.grid.height - 1, y)),
        )

    # --- Rectangular ---

    def start_rectangle(self, x: int, y: int) -> RectangularSelection:
        point = self._clamp(x, y)
        self.active = RectangularSelection(point, point)
        return self.active

    def update_rectangle(self, x: int, y: int, constrain: bool = False) -> None:
        if not isinstance(self.active, RectangularSelection):
            return
        end = (x, y)
        if constrain:
            end = constrain_to_square(self.active.start, end)
        self.active.end = self._clamp(*end)

    # --- Freeform ---

    def start_freeform(self, x: int, y: int) -> FreeformSelection:
        self.active = FreeformSelection(path=[self._clamp(x, y)])
        return self.active

    def add_freeform_point(self, x: int, y: int) -> List[Point]:
        """Append a point and return the smoothed, closed preview outline."""
        sel = self.active
        if not isinstance(sel, FreeformSelection) or not sel.is_drawing:
            return []
        point = self._clamp(x, y)
        if not sel.path or sel.path[-1] != point:
            sel.path.append(point)
        preview = close_path(smooth_path(sel.path, self.preview_tolerance))
        if len(sel.path) >= 3:
            sel.selected = lasso_cells(
                sel.path, self.grid.width, self.grid.height, self.preview_tolerance
            ) or set()
        return preview

    def finalize_freeform(self) -> bool:
        """Finish a lasso. Paths with fewer than three points clear the selection."""
        sel = self.active
        if not isinstance(sel, FreeformSelection):
            return False
        cells = lasso_cells(sel.path, self.grid.width, self.grid.height, self.finalize_tolerance)
        if not cells:
            self.clear()
            return False
        sel.path = close_path(smooth_path(sel.path, self.finalize_tolerance))
        sel.selected = cells
        sel.is_drawing = False
        logger.debug("Lasso selected %d cells", len(cells))
        return True

    # --- Flood matched ---

    def select_matching(
        self, x: int, y: int, criteria: MatchCriteria, contiguous: bool = True
    ) -> bool:
        cells = find_fill_area(self.grid, x, y, criteria, contiguous)
        if not cells:
            self.clear()
            return False
        self.active = FloodMatchedSelection(
            anchor=(x, y),
            anchor_cell=self.grid.get_cell(x, y),
            selected=cells,
            criteria=criteria,
            contiguous=contiguous,
        )
        return True

    def select_all(self) -> None:
        self.active = RectangularSelection((0, 0), (self.grid.width - 1, self.grid.height - 1))

    # --- Dispatch ---

    def contains(self, x: int, y: int, offset: Tuple[int, int] = (0, 0)) -> bool:
        """Membership at the selection's effective position after `offset`."""
        if not self.is_active:
            return False
        return self.active.contains(x - offset[0], y - offset[1])

    def bounds(self) -> Optional[Bounds]:
        if self.active is None:
            return None
        return self.active.bounds()

    def effective_bounds(self, offset: Tuple[int, int] = (0, 0)) -> Optional[Bounds]:
        b = self.bounds()
        return b.shifted(*offset) if b is not None else None

    def cells(self) -> Set[Point]:
        if not self.is_active:
            return set()
        return self.active.cells()

    def translate(self, dx: int, dy: int) -> None:
        if self.active is not None:
            self.active.translate(dx, dy)

    def clear(self) -> None:
        self.active = None
