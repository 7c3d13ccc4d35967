"""
Key handling for the ASCII editor.
Translates abstract key events into editor commands.
"""

from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from .editor import Editor

ARROWS = {
    "ArrowUp": (0, -1),
    "ArrowDown": (0, 1),
    "ArrowLeft": (-1, 0),
    "ArrowRight": (1, 0),
}


class InputHandler:
    def __init__(self, editor: "Editor", clipboard_reader: Optional[Callable[[], str]] = None):
        self.editor = editor
        self.clipboard_reader = clipboard_reader

    def handle_key(self, key: str, ctrl: bool = False, shift: bool = False) -> bool:
        """
        Process a single key press.
        Returns True when the key was consumed.
        """
        ed = self.editor
        if not key or ed.text_input_focused:
            return False

        if ctrl:
            return self._handle_shortcut(key.lower(), shift)

        if ed.text_tool.is_typing:
            return self._handle_typing(key)

        if key == "Escape":
            return ed.cancel()
        if key == "Enter":
            return ed.confirm()
        if key in ("Delete", "Backspace"):
            return ed.delete_selection()
        if key in ARROWS:
            return ed.step_selection(*ARROWS[key])
        return False

    def _handle_shortcut(self, key: str, shift: bool) -> bool:
        ed = self.editor
        if key == "z":
            return ed.redo() if shift else ed.undo()
        if key == "y":
            return ed.redo()
        if key == "c":
            return ed.copy_selection() > 0
        if key == "x":
            return ed.cut_selection() > 0
        if key == "a":
            ed.select_all()
            return True
        if key == "v" and ed.text_tool.is_typing and self.clipboard_reader is not None:
            return ed.paste_text(self.clipboard_reader)
        return False

    def _handle_typing(self, key: str) -> bool:
        ed = self.editor
        if key == "Escape":
            return ed.cancel()
        if key == "Enter":
            ed.press_enter()
        elif key == "Backspace":
            ed.press_backspace()
        elif key in ARROWS:
            ed.text_tool.move_cursor(*ARROWS[key])
        elif len(key) == 1:
            ed.type_char(key)
        else:
            return False
        return True
