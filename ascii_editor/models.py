"""
Core models and data structures for the ASCII editor.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from .errors import InvalidCellError

Point = Tuple[int, int]

EMPTY_CHAR = " "
DEFAULT_COLOR = "#FFFFFF"
TRANSPARENT = "transparent"

DEFAULT_FRAME_DURATION = 100  # ms
MIN_FRAME_DURATION = 50  # ms
MAX_FRAME_DURATION = 10000  # ms


@dataclass(frozen=True)
class Cell:
    char: str = EMPTY_CHAR
    color: str = DEFAULT_COLOR
    bg_color: str = TRANSPARENT

    def __post_init__(self):
        if not isinstance(self.char, str) or len(self.char) != 1:
            raise InvalidCellError(f"Cell char must be a single glyph, got {self.char!r}")

    def is_empty(self) -> bool:
        return self.char == EMPTY_CHAR

    def is_default(self) -> bool:
        return self == DEFAULT_CELL

    def to_dict(self) -> Dict[str, str]:
        return {"char": self.char, "color": self.color, "bgColor": self.bg_color}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "Cell":
        return cls(
            char=data.get("char", EMPTY_CHAR),
            color=data.get("color", DEFAULT_COLOR),
            bg_color=data.get("bgColor", TRANSPARENT),
        )


DEFAULT_CELL = Cell()

# A plain coordinate -> Cell copy of one frame, no further semantics.
Snapshot = Dict[Point, Cell]


class Tool(Enum):
    PENCIL = "pencil"
    ERASER = "eraser"
    PAINT_BUCKET = "paintbucket"
    SELECT = "select"
    LASSO = "lasso"
    MAGIC_WAND = "magicwand"
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    EYEDROPPER = "eyedropper"
    LINE = "line"
    TEXT = "text"
    GRADIENT_FILL = "gradientfill"


SELECTION_TOOLS = (Tool.SELECT, Tool.LASSO, Tool.MAGIC_WAND)


class EditMode(Enum):
    """Where keyboard input is currently directed."""

    CANVAS = "CANVAS"
    TEXT_FIELD = "TEXT_FIELD"


@dataclass(frozen=True)
class MatchCriteria:
    char: bool = True
    color: bool = True
    bg_color: bool = True

    def any_enabled(self) -> bool:
        return self.char or self.color or self.bg_color


@dataclass
class ToolSettings:
    active_tool: Tool = Tool.PENCIL
    selected_char: str = "@"
    selected_color: str = DEFAULT_COLOR
    selected_bg_color: str = TRANSPARENT
    brush_size: int = 1
    rectangle_filled: bool = False
    paint_bucket_contiguous: bool = True
    magic_wand_contiguous: bool = True

    # Which attributes pencil/bucket write
    affects_char: bool = True
    affects_color: bool = True
    affects_bg_color: bool = True

    fill_match: MatchCriteria = field(default_factory=MatchCriteria)
    magic_match: MatchCriteria = field(default_factory=MatchCriteria)

    eyedropper_picks_char: bool = True
    eyedropper_picks_color: bool = True
    eyedropper_picks_bg_color: bool = True

    def brush_cell(self) -> Cell:
        return Cell(self.selected_char, self.selected_color, self.selected_bg_color)


@dataclass
class Frame:
    id: str
    name: str
    duration: int = DEFAULT_FRAME_DURATION
    data: Snapshot = field(default_factory=dict)

    def copy(self, **changes) -> "Frame":
        values = {
            "id": self.id,
            "name": self.name,
            "duration": self.duration,
            "data": dict(self.data),
        }
        values.update(changes)
        return Frame(**values)


@dataclass(frozen=True)
class Bounds:
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    def contains(self, x: int, y: int) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def shifted(self, dx: int, dy: int) -> "Bounds":
        return Bounds(self.min_x + dx, self.min_y + dy, self.max_x + dx, self.max_y + dy)


def clamp_duration(duration: int) -> int:
    return max(MIN_FRAME_DURATION, min(MAX_FRAME_DURATION, int(duration)))


def bounds_of(points) -> Optional[Bounds]:
    points = list(points)
    if not points:
        return None
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return Bounds(min(xs), min(ys), max(xs), max(ys))
