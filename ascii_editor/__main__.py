#!/usr/bin/env python3
"""
ASCII Editor launcher: previews a saved session in the terminal.
"""

import argparse
import logging
import sys

from .config import EditorConfig
from .editor import Editor
from .frame_manager import FrameManager
from .log import setup_logging
from .models import Tool
from .renderer import Renderer


def draw_demo(editor: Editor) -> None:
    w, h = editor.grid.width, editor.grid.height
    editor.set_tool(Tool.RECTANGLE)
    editor.pointer_down(0, 0)
    editor.pointer_up(w - 1, h - 1)

    editor.set_tool(Tool.TEXT)
    editor.pointer_down(2, 1)
    for char in "hello":
        editor.type_char(char)
    editor.set_tool(Tool.PENCIL)


def main(argv=None) -> int:
    p = argparse.ArgumentParser(prog="ascii_editor")
    p.add_argument("file", nargs="?", help="session file to preview")
    p.add_argument("-c", "--config", default="editor.toml")
    p.add_argument("-w", "--width", type=int)
    p.add_argument("-H", "--height", type=int)
    p.add_argument("-v", "--verbose", action="store_true")
    args = p.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    config = EditorConfig.load_from_toml(args.config)
    overrides = {}
    if args.width:
        overrides["canvas_width"] = args.width
    if args.height:
        overrides["canvas_height"] = args.height

    if args.file:
        session = FrameManager()
        if not session.load(args.file):
            return 1
        overrides = {"canvas_width": session.width, "canvas_height": session.height}

    editor = Editor(EditorConfig(**{**config.model_dump(), **overrides}))
    if args.file:
        editor.frames.load(args.file)
        editor.load_frame(0)
    else:
        draw_demo(editor)
        editor.persist_grid()

    renderer = Renderer()
    for index in range(editor.frames.frame_count):
        editor.load_frame(index)
        renderer.render(editor)
    return 0


if __name__ == "__main__":
    sys.exit(main())
