"""
Pytest configuration and shared fixtures for ASCII editor tests.
"""

import os
import sys

import pytest

# Allow running the suite from a source checkout without installing.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from ascii_editor.config import EditorConfig
from ascii_editor.editor import Editor
from ascii_editor.grid import Grid
from ascii_editor.models import Cell


class FakeClock:
    """Manually advanced time source (seconds)."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def grid():
    """An empty 10x10 grid."""
    return Grid(10, 10)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def small_config():
    return EditorConfig(canvas_width=10, canvas_height=10)


@pytest.fixture
def editor(small_config, clock):
    """A 10x10 editor driven by a fake clock."""
    return Editor(small_config, time_source=clock)


def fill_block(target, x0, y0, x1, y1, char="#", color="#FFFFFF", bg="transparent"):
    """Write a solid block of cells into a Grid."""
    for y in range(y0, y1 + 1):
        for x in range(x0, x1 + 1):
            target.set_cell(x, y, Cell(char, color, bg))
