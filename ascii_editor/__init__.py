"""
ASCII art and animation editing engine.
"""

from .config import EditorConfig
from .editor import Editor
from .grid import Grid
from .models import Cell, MatchCriteria, Tool

__version__ = "0.1.0"
