"""
Tests for gradient sampling and application.
"""

import pytest

from ascii_editor.errors import GradientError
from ascii_editor.gradient import (
    GradientDefinition,
    GradientProperty,
    GradientSession,
    GradientStop,
    GradientType,
    Interpolation,
    calculate_gradient_cells,
    gradient_position,
    interpolate_color,
    sample_property,
)
from ascii_editor.models import Cell, MatchCriteria

from conftest import fill_block


def two_stop(v0, v1, interpolation=Interpolation.LINEAR, **kwargs):
    return GradientProperty(
        enabled=True,
        stops=[GradientStop(0.0, v0), GradientStop(1.0, v1)],
        interpolation=interpolation,
        **kwargs,
    )


class TestPosition:
    """Test t along linear and radial gradients."""

    def test_linear_projection_clamped(self):
        """Test linear t is clamped to [0, 1] beyond either end."""
        assert gradient_position(0, 0, (0, 0), (0, 9)) == 0.0
        assert gradient_position(0, 9, (0, 0), (0, 9)) == 1.0
        assert gradient_position(5, 20, (0, 0), (0, 9)) == 1.0
        assert gradient_position(3, -4, (0, 0), (0, 9)) == 0.0

    def test_linear_zero_length(self):
        """Test a zero-length linear gradient gives t of 0."""
        assert gradient_position(4, 4, (2, 2), (2, 2)) == 0.0

    def test_radial_distance(self):
        """Test radial t is distance over radius, capped at 1."""
        kwargs = {"gradient_type": GradientType.RADIAL}
        assert gradient_position(2, 0, (0, 0), (4, 0), **kwargs) == pytest.approx(0.5)
        assert gradient_position(0, 9, (0, 0), (4, 0), **kwargs) == 1.0

    def test_radial_aspect_correction(self):
        """Test x distances are scaled by the cell aspect ratio."""
        t = gradient_position(4, 0, (0, 0), (0, 2), gradient_type=GradientType.RADIAL, cell_aspect_ratio=0.5)
        assert t == pytest.approx(1.0)

    def test_elliptical_radial(self):
        """Test a shape point gives the radial gradient a second radius."""
        kwargs = {"gradient_type": GradientType.RADIAL, "shape_point": (0, 2)}
        assert gradient_position(0, 2, (0, 0), (4, 0), **kwargs) == pytest.approx(1.0)
        assert gradient_position(2, 0, (0, 0), (4, 0), **kwargs) == pytest.approx(0.5)
        assert gradient_position(0, 1, (0, 0), (4, 0), **kwargs) == pytest.approx(0.5)

    def test_radial_zero_radius(self):
        """Test a zero-radius radial gradient gives t of 0."""
        assert gradient_position(3, 3, (1, 1), (1, 1), gradient_type=GradientType.RADIAL) == 0.0


class TestSampling:
    """Test property sampling."""

    def test_no_stops(self):
        """Test a property with no stops samples to nothing."""
        assert sample_property(0.5, GradientProperty(enabled=True)) is None

    def test_single_stop_is_constant(self):
        """Test a single stop gives its value everywhere."""
        prop = GradientProperty(enabled=True, stops=[GradientStop(0.3, "#123456")])
        assert sample_property(0.0, prop) == "#123456"
        assert sample_property(1.0, prop) == "#123456"

    def test_endpoints_exact(self):
        """Test stops at 0 and 1 give their values at the ends."""
        prop = two_stop("#000000", "#FFFFFF")
        assert sample_property(0.0, prop) == "#000000"
        assert sample_property(1.0, prop) == "#FFFFFF"

    def test_colour_midpoint(self):
        """Test black to white is mid grey halfway."""
        assert sample_property(0.5, two_stop("#000000", "#FFFFFF")) == "#808080"

    def test_unsorted_stops(self):
        """Test stops are sorted by position before sampling."""
        prop = GradientProperty(
            enabled=True,
            stops=[GradientStop(1.0, "#FFFFFF"), GradientStop(0.0, "#000000")],
        )
        assert sample_property(0.0, prop) == "#000000"

    def test_characters_step_to_nearer_stop(self):
        """Test glyphs cannot blend and take the nearer stop."""
        prop = two_stop("@", ".")
        assert sample_property(0.3, prop) == "@"
        assert sample_property(0.7, prop) == "."

    def test_constant_takes_left_stop(self):
        """Test constant interpolation holds the left stop."""
        prop = two_stop("#000000", "#FFFFFF", Interpolation.CONSTANT)
        assert sample_property(0.9, prop) == "#000000"

    def test_quantized(self):
        """Test quantizing snaps t to fixed steps."""
        prop = two_stop("#000000", "#FFFFFF", quantize_steps=2)
        assert sample_property(0.2, prop) == "#000000"
        assert sample_property(0.4, prop) == "#808080"

    def test_bayer_deterministic(self):
        """Test ordered dithering gives the same pattern every time."""
        prop = two_stop("a", "b", Interpolation.BAYER_4X4, dither_strength=100)
        first = [sample_property(0.5, prop, x, y) for x in range(4) for y in range(4)]
        second = [sample_property(0.5, prop, x, y) for x in range(4) for y in range(4)]
        assert first == second
        assert set(first) == {"a", "b"}

    def test_bayer_zero_strength_is_step(self):
        """Test zero dither strength falls back to a plain step."""
        prop = two_stop("a", "b", Interpolation.BAYER_2X2, dither_strength=0)
        assert sample_property(0.4, prop, 1, 1) == "a"
        assert sample_property(0.6, prop, 0, 0) == "b"

    def test_noise_deterministic(self):
        """Test noise dithering depends only on the cell position."""
        prop = two_stop("a", "b", Interpolation.NOISE, dither_strength=100)
        assert sample_property(0.5, prop, 3, 7) == sample_property(0.5, prop, 3, 7)

    def test_invalid_stop_position(self):
        """Test stop positions outside [0, 1] are rejected."""
        with pytest.raises(GradientError):
            GradientStop(1.5, "#000000")

    def test_transparent_steps(self):
        """Test transparent does not blend with a colour."""
        assert interpolate_color("transparent", "#FFFFFF", 0.2) == "transparent"
        assert interpolate_color("transparent", "#FFFFFF", 0.8) == "#FFFFFF"


class TestApply:
    """Test computing and applying gradients over a fill area."""

    def test_background_column(self, grid):
        """Test a vertical black-to-white background over a filled column."""
        fill_block(grid, 0, 0, 0, 9, "#", "#FF0000")
        definition = GradientDefinition(background_color=two_stop("#000000", "#FFFFFF"))

        session = GradientSession(grid, definition, MatchCriteria(char=True, color=False, bg_color=False))
        session.begin(0, 0)
        session.set_end(0, 9)
        assert session.apply()

        assert grid.get_cell(0, 0).bg_color == "#000000"
        assert grid.get_cell(0, 9).bg_color == "#FFFFFF"
        mid_low = int(grid.get_cell(0, 4).bg_color[1:3], 16)
        mid_high = int(grid.get_cell(0, 5).bg_color[1:3], 16)
        assert 0 < mid_low < mid_high < 255
        assert mid_low + mid_high == 255
        # Disabled properties keep their prior values
        assert all(grid.get_cell(0, y).char == "#" for y in range(10))
        assert all(grid.get_cell(0, y).color == "#FF0000" for y in range(10))
        # Cells outside the fill area are untouched
        assert not grid.has_cell(1, 0)

    def test_zero_stops_leave_cells_untouched(self, grid):
        """Test an enabled property with no stops changes nothing."""
        fill_block(grid, 0, 0, 3, 0, "x", "#00FF00")
        definition = GradientDefinition(text_color=GradientProperty(enabled=True))
        cells = calculate_gradient_cells(grid, {(x, 0) for x in range(4)}, (0, 0), (3, 0), definition)
        assert all(cell == Cell("x", "#00FF00") for cell in cells.values())

    def test_nothing_enabled_is_noop(self, grid):
        """Test a definition with nothing enabled produces no cells."""
        cells = calculate_gradient_cells(grid, {(0, 0)}, (0, 0), (3, 0), GradientDefinition())
        assert cells == {}

    def test_default_results_are_pruned(self, grid):
        """Test cells that end up empty are removed from the grid."""
        fill_block(grid, 0, 0, 9, 0, "#")
        definition = GradientDefinition(character=two_stop("#", " "))
        session = GradientSession(grid, definition)
        session.begin(0, 0)
        session.set_end(9, 0)
        session.apply()

        assert grid.get_cell(0, 0).char == "#"
        assert not grid.has_cell(9, 0)

    def test_cancel_leaves_grid(self, grid):
        """Test cancelling a session leaves the grid as it was."""
        fill_block(grid, 0, 0, 9, 9, "#")
        before = grid.snapshot()
        session = GradientSession(grid, GradientDefinition(text_color=two_stop("#000000", "#FFFFFF")))
        session.begin(0, 0)
        assert session.set_end(9, 9)
        session.cancel()
        assert grid.snapshot() == before
        assert not session.is_active
