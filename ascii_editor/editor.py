"""
ASCII Editor - owns all editing state and routes pointer gestures,
key commands and frame operations to the tools that implement them.
"""

import logging
import time
from typing import Callable, Optional, Set

from . import tools
from .actions import (
    Action,
    AddFrame,
    DeleteFrame,
    DuplicateFrame,
    GridEdit,
    NavigateFrame,
    ReorderFrames,
    UpdateDuration,
    UpdateName,
)
from .clipboard import Clipboard, ClipboardWriter, delete_selection
from .clock import PlaybackScheduler, Scheduler
from .config import EditorConfig
from .frame_manager import FrameManager
from .frame_sync import FrameSynchronizer
from .gradient import (
    GradientDefinition,
    GradientProperty,
    GradientSession,
    GradientStop,
)
from .grid import Grid
from .models import (
    SELECTION_TOOLS,
    EditMode,
    MatchCriteria,
    Point,
    Snapshot,
    Tool,
    ToolSettings,
)
from .move import MoveController, MoveState
from .raster import constrain_to_square
from .selection import FreeformSelection, SelectionModel
from .text_tool import TextTool
from .undo_manager import UndoManager

logger = logging.getLogger(__name__)

SHAPE_TOOLS = (Tool.LINE, Tool.RECTANGLE, Tool.ELLIPSE)
STROKE_TOOLS = (Tool.PENCIL, Tool.ERASER)


def default_gradient() -> GradientDefinition:
    return GradientDefinition(
        text_color=GradientProperty(
            enabled=True,
            stops=[GradientStop(0.0, "#FFFFFF"), GradientStop(1.0, "#000000")],
        )
    )


class Editor:
    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        clipboard_writer: Optional[ClipboardWriter] = None,
        time_source: Callable[[], float] = time.monotonic,
    ):
        self.config = config or EditorConfig()
        width, height = self.config.canvas_width, self.config.canvas_height

        self.grid = Grid(width, height)
        self.frames = FrameManager(width, height, self.config.default_frame_duration)
        self.history = UndoManager(self.config.max_history)
        self.settings = ToolSettings(
            selected_char=self.config.default_char,
            selected_color=self.config.default_color,
            selected_bg_color=self.config.default_bg_color,
        )
        self.selection = SelectionModel(
            self.grid,
            preview_tolerance=self.config.lasso_preview_tolerance,
            finalize_tolerance=self.config.lasso_finalize_tolerance,
        )
        self.move = MoveController(self.grid, self.selection, self.history, self._current_index)

        self.scheduler = Scheduler(time_source)
        self.sync = FrameSynchronizer(self.grid, self.frames, self.scheduler, self.config.sync_debounce_ms)
        self.playback = PlaybackScheduler(self.frames, self.scheduler, self._show_playback_frame)

        self.text_tool = TextTool(
            self.grid, self.history, self.settings, self._current_index, on_change=self.sync.notify_change
        )
        self.clipboard = Clipboard(clipboard_writer)

        self.gradient_definition = default_gradient()
        self.gradient_match = MatchCriteria()
        self.gradient_contiguous = True
        self.gradient: Optional[GradientSession] = None

        self.edit_mode = EditMode.CANVAS
        self.status_message = ""

        # Gesture state
        self._stroke_last: Optional[Point] = None
        self._pencil_last: Optional[Point] = None
        self._shape_start: Optional[Point] = None
        self._shape_end: Optional[Point] = None
        self._selecting = False

    # --- Target interface for history replay ---

    def _current_index(self) -> int:
        return self.frames.current_index

    def persist_grid(self) -> None:
        self.sync.flush()

    def load_frame(self, index: int) -> int:
        clamped = self.frames.clamp_index(index)
        if clamped != index:
            logger.warning("Frame index %d out of range, using %d", index, clamped)
        self.frames.go_to(clamped)
        self.sync.discard()
        self.grid.set_canvas_data(self.frames.get_frame_data(clamped) or {})
        return clamped

    # --- State helpers ---

    @property
    def text_input_focused(self) -> bool:
        return self.edit_mode is EditMode.TEXT_FIELD

    def set_text_input_focus(self, focused: bool) -> None:
        self.edit_mode = EditMode.TEXT_FIELD if focused else EditMode.CANVAS

    @property
    def can_edit(self) -> bool:
        return not self.playback.is_playing

    def _changed(self) -> None:
        self.sync.notify_change()

    def _record(self, before: Snapshot, description: str) -> bool:
        """Push a GridEdit if the canvas differs from `before`."""
        if before == self.grid.snapshot():
            return False
        self.history.push(GridEdit(snapshot=before, frame_index=self.frames.current_index, description=description))
        self._changed()
        return True

    def _begin_stroke(self, description: str) -> None:
        self.history.start_batch(self.grid.snapshot(), self.frames.current_index, description)

    def _end_stroke(self) -> None:
        if self.history.end_batch(self.grid.snapshot()):
            self._changed()

    def _settle(self) -> None:
        """Close every in-flight interaction before a structural change."""
        self.commit_move(keep_selection=False)
        self.text_tool.stop()
        self.cancel_gradient()
        self._end_stroke()
        self._shape_start = self._shape_end = None
        self._stroke_last = None
        self._selecting = False

    def _leave_frame(self) -> None:
        self._settle()
        self.selection.clear()
        self.sync.flush()

    # --- Tools ---

    def set_tool(self, tool: Tool) -> None:
        if tool is self.settings.active_tool:
            return
        self._settle()
        self.selection.clear()
        self._pencil_last = None
        self.settings.active_tool = tool
        self.status_message = f"Tool: {tool.value}"
        logger.debug("Switched to %s", tool.value)

    def pointer_down(self, x: int, y: int, shift: bool = False) -> None:
        if not self.can_edit:
            return
        tool = self.settings.active_tool

        if tool in SELECTION_TOOLS:
            self._selection_down(tool, x, y)
        elif tool is Tool.PENCIL:
            self._begin_stroke("Pencil")
            if shift and self._pencil_last is not None:
                tools.draw_line(self.grid, self.settings, self._pencil_last, (x, y))
            else:
                tools.draw_pencil(self.grid, self.settings, x, y)
            self._stroke_last = self._pencil_last = (x, y)
        elif tool is Tool.ERASER:
            self._begin_stroke("Erase")
            tools.erase(self.grid, (x, y))
            self._stroke_last = (x, y)
        elif tool is Tool.PAINT_BUCKET:
            before = self.grid.snapshot()
            tools.paint_bucket(self.grid, self.settings, x, y)
            self._record(before, "Paint bucket")
        elif tool is Tool.EYEDROPPER:
            tools.pick_from_cell(self.settings, self.grid.get_cell(x, y))
        elif tool in SHAPE_TOOLS:
            self._shape_start = self._shape_end = (x, y)
        elif tool is Tool.TEXT:
            self.text_tool.start(x, y)
        elif tool is Tool.GRADIENT_FILL:
            self.begin_gradient(x, y)

    def pointer_move(self, x: int, y: int, shift: bool = False) -> None:
        if not self.can_edit:
            return
        tool = self.settings.active_tool

        if tool in SELECTION_TOOLS:
            self._selection_move(tool, x, y, shift)
        elif tool in STROKE_TOOLS and self._stroke_last is not None:
            if tool is Tool.PENCIL:
                tools.draw_line(self.grid, self.settings, self._stroke_last, (x, y))
                self._pencil_last = (x, y)
            else:
                tools.erase(self.grid, self._stroke_last, (x, y))
            self._stroke_last = (x, y)
        elif tool in SHAPE_TOOLS and self._shape_start is not None:
            end = (x, y)
            if shift and tool is not Tool.LINE:
                end = constrain_to_square(self._shape_start, end)
            self._shape_end = end
        elif tool is Tool.GRADIENT_FILL and self.gradient is not None and self.gradient.end is None:
            self.gradient.set_end(x, y)

    def pointer_up(self, x: int, y: int, shift: bool = False) -> None:
        if not self.can_edit:
            return
        tool = self.settings.active_tool

        if tool in SELECTION_TOOLS:
            self._selection_up(tool, x, y, shift)
        elif tool in STROKE_TOOLS:
            self._stroke_last = None
            self._end_stroke()
        elif tool in SHAPE_TOOLS and self._shape_start is not None:
            self.pointer_move(x, y, shift)
            self._draw_shape(tool, self._shape_start, self._shape_end)
            self._shape_start = self._shape_end = None
        elif tool is Tool.GRADIENT_FILL and self.gradient is not None and self.gradient.end is None:
            self.gradient.set_end(x, y)

    def _draw_shape(self, tool: Tool, start: Point, end: Point) -> None:
        before = self.grid.snapshot()
        filled = self.settings.rectangle_filled
        if tool is Tool.LINE:
            tools.draw_line(self.grid, self.settings, start, end)
        elif tool is Tool.RECTANGLE:
            tools.draw_rectangle(self.grid, self.settings, start, end, filled)
        else:
            tools.draw_ellipse(self.grid, self.settings, start, end, filled)
        self._record(before, tool.value.capitalize())

    def shape_preview(self) -> Set[Point]:
        if self._shape_start is None:
            return set()
        kind = self.settings.active_tool.value
        return tools.preview_shape(self.settings, kind, self._shape_start, self._shape_end)

    # --- Selection gestures ---

    def _selection_down(self, tool: Tool, x: int, y: int) -> None:
        if self.selection.is_active and self.move.contains(x, y):
            self.move.begin_drag(x, y)
            return

        # Clicking outside the selection finishes any staged move first.
        self.commit_move(keep_selection=False)
        self.selection.clear()

        if tool is Tool.SELECT:
            self.selection.start_rectangle(x, y)
            self._selecting = True
        elif tool is Tool.LASSO:
            self.selection.start_freeform(x, y)
            self._selecting = True
        else:
            self.selection.select_matching(
                x, y, self.settings.magic_match, self.settings.magic_wand_contiguous
            )

    def _selection_move(self, tool: Tool, x: int, y: int, shift: bool) -> None:
        if self.move.state is MoveState.DRAGGING:
            self.move.drag_to(x, y)
        elif self._selecting and tool is Tool.SELECT:
            self.selection.update_rectangle(x, y, constrain=shift)
        elif self._selecting and tool is Tool.LASSO:
            self.selection.add_freeform_point(x, y)

    def _selection_up(self, tool: Tool, x: int, y: int, shift: bool) -> None:
        if self.move.state is MoveState.DRAGGING:
            self.move.drag_to(x, y)
            self.move.end_drag()
            return
        if not self._selecting:
            return
        self._selecting = False
        if tool is Tool.SELECT:
            self.selection.update_rectangle(x, y, constrain=shift)
        elif tool is Tool.LASSO:
            self.selection.add_freeform_point(x, y)
            self.selection.finalize_freeform()

    def select_all(self) -> None:
        if not self.can_edit:
            return
        self.commit_move(keep_selection=False)
        self.selection.select_all()

    # --- Move ---

    def step_selection(self, dx: int, dy: int) -> bool:
        if not self.can_edit:
            return False
        return self.move.step(dx, dy)

    def commit_move(self, keep_selection: bool = True) -> bool:
        offset = self.move.total_offset
        if not self.move.commit():
            return False
        if keep_selection:
            self.selection.translate(*offset)
        self._changed()
        return True

    def cancel_move(self) -> bool:
        return self.move.cancel()

    # --- Clipboard ---

    def copy_selection(self) -> int:
        # The grid is untouched while a move is staged, so this copies the original cells.
        return self.clipboard.copy(self.grid, self.selection)

    def cut_selection(self) -> int:
        copied = self.copy_selection()
        self.delete_selection()
        return copied

    def paste_preview(self, x: int, y: int) -> Snapshot:
        return self.clipboard.paste_preview(x, y)

    def paste_at(self, x: int, y: int) -> bool:
        if not self.can_edit or not self.clipboard.has_data:
            return False
        self.commit_move(keep_selection=False)
        before = self.grid.snapshot()
        self.clipboard.paste(self.grid, x, y)
        bounds = self.clipboard.pasted_bounds(x, y)
        self.selection.start_rectangle(bounds.min_x, bounds.min_y)
        self.selection.update_rectangle(bounds.max_x, bounds.max_y)
        return self._record(before, "Paste")

    def delete_selection(self) -> bool:
        if not self.can_edit or not self.selection.is_active:
            return False
        self.commit_move()
        before = self.grid.snapshot()
        delete_selection(self.grid, self.selection)
        self.selection.clear()
        return self._record(before, "Delete selection")

    # --- Text ---

    def type_char(self, char: str) -> None:
        if self.can_edit:
            self.text_tool.insert(char)

    def press_enter(self) -> None:
        if self.can_edit:
            self.text_tool.enter()

    def press_backspace(self) -> None:
        if self.can_edit:
            self.text_tool.backspace()

    def paste_text(self, reader: Callable[[], str]) -> bool:
        """Paste text read from the system clipboard at the text cursor."""
        if not self.can_edit or not self.text_tool.is_typing:
            return False
        try:
            text = reader()
        except Exception as e:
            logger.warning("Failed to read from system clipboard: %s", e)
            return False
        self.text_tool.paste(text)
        return True

    # --- Gradient ---

    def begin_gradient(self, x: int, y: int) -> GradientSession:
        self.cancel_gradient()
        self.gradient = GradientSession(
            self.grid,
            self.gradient_definition,
            criteria=self.gradient_match,
            contiguous=self.gradient_contiguous,
            cell_aspect_ratio=self.config.cell_aspect_ratio,
        )
        self.gradient.begin(x, y)
        return self.gradient

    def set_gradient_shape_point(self, x: int, y: int) -> Snapshot:
        if self.gradient is None:
            return {}
        return self.gradient.set_shape_point(x, y)

    def apply_gradient(self) -> bool:
        if self.gradient is None or not self.can_edit:
            return False
        before = self.grid.snapshot()
        self.gradient.apply()
        self.gradient = None
        return self._record(before, "Gradient fill")

    def cancel_gradient(self) -> bool:
        if self.gradient is None:
            return False
        self.gradient.cancel()
        self.gradient = None
        return True

    # --- Commands ---

    def cancel(self) -> bool:
        """Escape: abort the innermost in-progress interaction."""
        if self.text_input_focused:
            return False
        if self.move.is_active:
            return self.cancel_move()
        if self.gradient is not None:
            return self.cancel_gradient()
        if self._shape_start is not None:
            self._shape_start = self._shape_end = None
            return True
        if self.text_tool.is_typing:
            self.text_tool.stop()
            return True
        if isinstance(self.selection.active, FreeformSelection) and self.selection.active.is_drawing:
            self._selecting = False
            self.selection.clear()
            return True
        if self.selection.active is not None:
            self.selection.clear()
            return True
        return False

    def confirm(self) -> bool:
        """Enter: apply a pending gradient or commit a staged move."""
        if self.text_input_focused:
            return False
        if self.gradient is not None and self.gradient.preview:
            return self.apply_gradient()
        if self.move.is_active:
            return self.commit_move()
        return False

    def _replay(self, step: Callable[["Editor"], Optional[Action]], label: str) -> bool:
        if not self.can_edit:
            return False
        self._settle()
        frame_id = self.frames.current_frame.id
        action = step(self)
        if action is None:
            return False
        # A selection belongs to the frame it was made on.
        if self.frames.current_frame.id != frame_id:
            self.selection.clear()
        self.status_message = f"{label}: {action.description}"
        return True

    def undo(self) -> bool:
        return self._replay(self.history.undo, "Undo")

    def redo(self) -> bool:
        return self._replay(self.history.redo, "Redo")

    # --- Frames ---

    def add_frame(self) -> int:
        self._leave_frame()
        previous = self.frames.current_index
        index = self.frames.add_frame()
        self.load_frame(index)
        self.history.push(AddFrame(index=index, frame=self.frames.get_frame(index).copy(), previous_index=previous))
        return index

    def duplicate_frame(self, index: Optional[int] = None) -> Optional[int]:
        self._leave_frame()
        previous = self.frames.current_index
        source = previous if index is None else index
        new_index = self.frames.duplicate_frame(source)
        if new_index is None:
            return None
        self.load_frame(new_index)
        self.history.push(
            DuplicateFrame(
                index=new_index,
                frame=self.frames.get_frame(new_index).copy(),
                previous_index=previous,
                source_index=source,
            )
        )
        return new_index

    def delete_frame(self, index: Optional[int] = None) -> bool:
        index = self.frames.current_index if index is None else index
        if self.frames.frame_count <= 1 or not self.frames.is_valid_index(index):
            return False
        self._leave_frame()
        previous = self.frames.current_index
        frame = self.frames.get_frame(index).copy()
        self.frames.remove_frame(index)
        new_index = self.load_frame(self.frames.current_index)
        self.history.push(DeleteFrame(index=index, frame=frame, previous_index=previous, new_index=new_index))
        return True

    def reorder_frames(self, from_index: int, to_index: int) -> bool:
        if not self.frames.is_valid_index(from_index):
            return False
        self._leave_frame()
        previous = self.frames.current_index
        final = self.frames.move_frame(from_index, to_index)
        if final == from_index:
            return False
        new_index = self.load_frame(self.frames.current_index)
        self.history.push(
            ReorderFrames(
                from_index=from_index,
                to_index=to_index,
                final_index=final,
                previous_index=previous,
                new_index=new_index,
            )
        )
        return True

    def set_frame_duration(self, index: int, duration: int) -> bool:
        frame = self.frames.get_frame(index)
        if frame is None:
            return False
        old = frame.duration
        new = self.frames.set_duration(index, duration)
        if new == old:
            return False
        self.history.push(UpdateDuration(index=index, old_duration=old, new_duration=new))
        return True

    def set_frame_name(self, index: int, name: str) -> bool:
        frame = self.frames.get_frame(index)
        if frame is None or frame.name == name:
            return False
        old = frame.name
        self.frames.set_name(index, name)
        self.history.push(UpdateName(index=index, old_name=old, new_name=name))
        return True

    def go_to_frame(self, index: int) -> bool:
        if not self.can_edit or not self.frames.is_valid_index(index):
            return False
        if index == self.frames.current_index:
            return False
        self._leave_frame()
        previous = self.frames.current_index
        self.load_frame(index)
        self.history.push(NavigateFrame(previous_index=previous, new_index=index))
        logger.debug("Frame %d -> %d", previous, index)
        return True

    def next_frame(self) -> bool:
        return self.go_to_frame((self.frames.current_index + 1) % self.frames.frame_count)

    def prev_frame(self) -> bool:
        return self.go_to_frame((self.frames.current_index - 1) % self.frames.frame_count)

    # --- Playback ---

    def play(self) -> None:
        if self.playback.is_playing:
            return
        self._leave_frame()
        self.sync.suspended = True
        self.playback.play()

    def pause(self) -> None:
        self.playback.pause()
        self.sync.suspended = False

    def stop(self) -> None:
        self.playback.stop()
        self.sync.suspended = False

    def _show_playback_frame(self, index: int) -> None:
        self.frames.go_to(index)
        self.grid.set_canvas_data(self.frames.get_frame_data(index) or {})

    def tick(self) -> int:
        """Run due scheduled work (debounced saves, playback)."""
        return self.scheduler.process_due()

    # --- Rendering support ---

    def overlay(self) -> Snapshot:
        """Cells drawn on top of the canvas: moved content, gradient or shape preview."""
        cells: Snapshot = {}
        if self.gradient is not None:
            cells.update(self.gradient.preview)
        if self.move.transaction is not None:
            for (x, y), cell in self.move.transaction.moved_cells().items():
                if self.grid.in_bounds(x, y):
                    cells[(x, y)] = cell
        for x, y in self.shape_preview():
            if self.grid.in_bounds(x, y):
                cells[(x, y)] = tools.cell_with_toggles(self.grid.get_cell(x, y), self.settings)
        return cells

    def hidden_cells(self) -> Set[Point]:
        """Canvas cells lifted out by a staged move."""
        if self.move.transaction is None:
            return set()
        return set(self.move.transaction.original_data)
