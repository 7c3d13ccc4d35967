"""
Terminal preview of the editor canvas using rich.
Read-only: nothing here mutates editor state.
"""

from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .gradient import hex_to_rgb
from .models import Cell, Snapshot

if TYPE_CHECKING:
    from .editor import Editor


def cell_style(cell: Cell, selected: bool = False) -> str:
    parts = []
    fg = hex_to_rgb(cell.color)
    if fg is not None:
        parts.append(f"rgb({fg[0]},{fg[1]},{fg[2]})")
    bg = hex_to_rgb(cell.bg_color)
    if bg is not None:
        parts.append(f"on rgb({bg[0]},{bg[1]},{bg[2]})")
    if selected:
        parts.append("reverse")
    return " ".join(parts)


def compose(editor: "Editor") -> Snapshot:
    """The cells as the user currently sees them, previews included."""
    cells = editor.grid.snapshot()
    for point in editor.hidden_cells():
        cells.pop(point, None)
    cells.update(editor.overlay())
    return cells


class Renderer:
    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render_text(self, editor: "Editor") -> Text:
        cells = compose(editor)
        offset = editor.move.total_offset
        text = Text()

        for y in range(editor.grid.height):
            for x in range(editor.grid.width):
                cell = cells.get((x, y), Cell())
                selected = editor.selection.contains(x, y, offset)
                text.append(cell.char, style=cell_style(cell, selected))
            text.append("\n")

        if editor.text_tool.is_typing and editor.text_tool.cursor is not None:
            cx, cy = editor.text_tool.cursor
            text.stylize("blink reverse", cy * (editor.grid.width + 1) + cx, cy * (editor.grid.width + 1) + cx + 1)
        return text

    def render(self, editor: "Editor") -> None:
        frame = editor.frames.current_frame
        title = f"{frame.name} ({editor.frames.current_index + 1}/{editor.frames.frame_count}, {frame.duration}ms)"
        panel = Panel(
            self.render_text(editor),
            title=title,
            subtitle=editor.status_message or None,
            border_style="blue",
            expand=False,
        )
        self.console.print(panel)
