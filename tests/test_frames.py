"""
Tests for frame storage, session files, debounced sync and playback.
"""

import logging

from ascii_editor.clock import CancellationToken, PlaybackState, Scheduler
from ascii_editor.frame_manager import FrameManager
from ascii_editor.models import MAX_FRAME_DURATION, MIN_FRAME_DURATION, Cell


class TestFrameManager:
    """Test frame list structure operations."""

    def test_starts_with_one_frame(self):
        """Test a new manager holds a single named frame."""
        frames = FrameManager(10, 10)
        assert frames.frame_count == 1
        assert frames.current_frame.name == "Frame 1"

    def test_add_inserts_after_current(self):
        """Test a new frame goes right after the current one."""
        frames = FrameManager(10, 10)
        frames.add_frame()
        frames.go_to(0)
        index = frames.add_frame()
        assert index == 1
        assert [f.name for f in frames.frames] == ["Frame 1", "Frame 3", "Frame 2"]

    def test_insert_before_current_shifts_current(self):
        """Test inserting before the current frame keeps it current."""
        frames = FrameManager(10, 10)
        frames.add_frame()
        frames.go_to(1)
        current_id = frames.current_frame.id
        frames.add_frame(index=-1)
        assert frames.current_frame.id == current_id

    def test_duplicate_copies_data(self):
        """Test a duplicate gets its own id and its own copy of the cells."""
        frames = FrameManager(10, 10)
        frames.set_frame_data(0, {(1, 1): Cell("a")})
        index = frames.duplicate_frame(0)
        copy = frames.get_frame(index)
        assert copy.name == "Frame 1 (Copy)"
        assert copy.data == {(1, 1): Cell("a")}
        assert copy.id != frames.frames[0].id

        copy.data[(2, 2)] = Cell("b")
        assert (2, 2) not in frames.frames[0].data

    def test_last_frame_is_never_removed(self):
        """Test the only frame cannot be removed."""
        frames = FrameManager(10, 10)
        assert frames.remove_frame(0) is None
        assert frames.frame_count == 1

    def test_remove_current_moves_back(self):
        """Test removing the last frame while on it selects the one before."""
        frames = FrameManager(10, 10)
        frames.add_frame()
        frames.add_frame()
        frames.go_to(2)
        frames.remove_frame(2)
        assert frames.current_index == 1

    def test_move_keeps_current_frame(self):
        """Test the current frame follows its identity when the list is reordered."""
        frames = FrameManager(10, 10)
        frames.add_frame()
        frames.add_frame()
        frames.go_to(1)
        current_id = frames.current_frame.id
        assert frames.move_frame(0, 2) == 2
        assert frames.current_frame.id == current_id
        assert frames.current_index == 0

    def test_duration_clamped(self):
        """Test durations are clamped to the allowed range."""
        frames = FrameManager(10, 10)
        assert frames.set_duration(0, 1) == MIN_FRAME_DURATION
        assert frames.set_duration(0, 10 ** 6) == MAX_FRAME_DURATION

    def test_frame_at_time_loops(self):
        """Test playback time wraps around the total duration."""
        frames = FrameManager(10, 10, default_duration=100)
        frames.add_frame()
        frames.set_duration(1, 200)
        assert frames.total_duration() == 300
        assert frames.frame_at_time(50) == 0
        assert frames.frame_at_time(150) == 1
        assert frames.frame_at_time(350) == 0

    def test_write_to_missing_frame(self, caplog):
        """Test writing to an unknown frame index is logged and refused."""
        frames = FrameManager(10, 10)
        assert not frames.set_frame_data(4, {})
        assert "missing frame" in caplog.text


class TestSessionFile:
    """Test saving and loading sessions as TOML."""

    def test_round_trip(self, tmp_path):
        """Test a saved session loads back with the same frames and cells."""
        frames = FrameManager(12, 6)
        frames.set_frame_data(0, {(0, 0): Cell("a", "#FF0000", "#000000"), (11, 5): Cell("z")})
        frames.add_frame()
        frames.set_name(1, "second")
        frames.set_duration(1, 250)

        path = str(tmp_path / "session.toml")
        assert frames.save(path)

        loaded = FrameManager()
        assert loaded.load(path)
        assert (loaded.width, loaded.height) == (12, 6)
        assert [(f.name, f.duration) for f in loaded.frames] == [("Frame 1", 100), ("second", 250)]
        assert loaded.get_frame_data(0) == frames.get_frame_data(0)
        assert loaded.get_frame_data(1) == {}

    def test_bad_cells_are_skipped(self, tmp_path, caplog):
        """Test invalid or out-of-bounds cells are skipped with a warning."""
        path = tmp_path / "session.toml"
        path.write_text(
            "[canvas]\nwidth = 4\nheight = 4\n\n"
            "[[frames]]\n"
            'name = "A"\n'
            "duration = 20\n\n"
            "[[frames.cells]]\n"
            'x = 0\ny = 0\nchar = "ab"\n\n'
            "[[frames.cells]]\n"
            'x = 9\ny = 9\nchar = "x"\n\n'
            "[[frames.cells]]\n"
            'x = 1\ny = 1\nchar = "y"\ncolor = "#00FF00"\n'
        )
        frames = FrameManager()
        with caplog.at_level(logging.WARNING, logger="ascii_editor"):
            assert frames.load(str(path))
        assert frames.get_frame_data(0) == {(1, 1): Cell("y", "#00FF00")}
        assert frames.current_frame.duration == MIN_FRAME_DURATION
        assert "Skipping cell" in caplog.text

    def test_missing_file(self, tmp_path, caplog):
        """Test loading a missing session keeps the current frames."""
        frames = FrameManager()
        assert not frames.load(str(tmp_path / "nope.toml"))
        assert "not found" in caplog.text
        assert frames.frame_count == 1

    def test_malformed_file(self, tmp_path, caplog):
        """Test a TOML syntax error is logged and loading fails."""
        path = tmp_path / "broken.toml"
        path.write_text("[canvas\nwidth = ")
        frames = FrameManager()
        assert not frames.load(str(path))
        assert "Error parsing" in caplog.text


class TestScheduler:
    """Test delayed callbacks and cancellation."""

    def test_runs_when_due(self, clock):
        """Test a callback runs only after its delay."""
        scheduler = Scheduler(clock)
        ran = []
        scheduler.schedule(lambda: ran.append(1), 0.1)
        assert scheduler.process_due() == 0
        clock.advance(150)
        assert scheduler.process_due() == 1
        assert ran == [1]
        assert scheduler.pending == 0

    def test_cancelled_never_runs(self, clock):
        """Test a cancelled callback is dropped."""
        scheduler = Scheduler(clock)
        ran = []
        token = scheduler.schedule(lambda: ran.append(1), 0.0)
        token.cancel()
        assert scheduler.process_due() == 0
        assert ran == []

    def test_shared_token(self, clock):
        """Test one token can guard several callbacks."""
        scheduler = Scheduler(clock)
        token = CancellationToken()
        scheduler.schedule(lambda: None, 0.0, token)
        scheduler.schedule(lambda: None, 0.0, token)
        assert scheduler.pending == 2
        scheduler.clear()
        assert scheduler.pending == 0


class TestFrameSync:
    """Test debounced writes of the canvas into the current frame."""

    def _dot(self, editor, x, y):
        editor.pointer_down(x, y)
        editor.pointer_up(x, y)

    def test_write_waits_for_quiet_period(self, editor, clock):
        """Test each edit pushes the frame write back."""
        self._dot(editor, 0, 0)
        assert editor.sync.has_pending
        assert editor.frames.get_frame_data(0) == {}

        clock.advance(100)
        editor.tick()
        self._dot(editor, 1, 0)
        clock.advance(100)
        editor.tick()
        assert editor.frames.get_frame_data(0) == {}

        clock.advance(60)
        editor.tick()
        assert set(editor.frames.get_frame_data(0)) == {(0, 0), (1, 0)}
        assert not editor.sync.has_pending

    def test_frame_switch_flushes_immediately(self, editor):
        """Test leaving a frame writes pending edits at once."""
        self._dot(editor, 4, 4)
        editor.add_frame()
        assert (4, 4) in editor.frames.get_frame_data(0)
        assert not editor.sync.has_pending

    def test_pending_write_dropped_on_load(self, editor, clock):
        """Test undo leaves no pending write that could resurrect the edit."""
        editor.add_frame()
        self._dot(editor, 2, 2)
        editor.undo()
        clock.advance(500)
        editor.tick()
        assert editor.frames.get_frame_data(1) == {}


class TestPlayback:
    """Test frame playback timing."""

    def _three_frames(self, editor):
        editor.grid.set_cell(0, 0, Cell("1"))
        editor.add_frame()
        editor.grid.set_cell(0, 0, Cell("2"))
        editor.add_frame()
        editor.grid.set_cell(0, 0, Cell("3"))
        editor.go_to_frame(0)

    def test_advances_by_duration(self, editor, clock):
        """Test playback moves on once the frame duration has passed."""
        self._three_frames(editor)
        editor.play()
        clock.advance(50)
        editor.tick()
        assert editor.frames.current_index == 0

        clock.advance(60)
        editor.tick()
        assert editor.frames.current_index == 1
        assert editor.grid.get_cell(0, 0).char == "2"

    def test_loops_to_first_frame(self, editor, clock):
        """Test looping playback wraps to the first frame."""
        self._three_frames(editor)
        editor.play()
        for _ in range(3):
            clock.advance(110)
            editor.tick()
        assert editor.frames.current_index == 0
        assert editor.playback.is_playing

    def test_stops_at_end_without_loop(self, editor, clock):
        """Test playback without looping stops on the last frame."""
        self._three_frames(editor)
        editor.playback.loop = False
        editor.play()
        for _ in range(3):
            clock.advance(110)
            editor.tick()
        assert editor.frames.current_index == 2
        assert editor.playback.state is PlaybackState.STOPPED

    def test_editing_disabled_while_playing(self, editor, clock):
        """Test pointer edits and undo are ignored during playback."""
        self._three_frames(editor)
        editor.play()
        editor.pointer_down(5, 5)
        editor.pointer_up(5, 5)
        assert not editor.grid.has_cell(5, 5)
        assert not editor.undo()

        editor.pause()
        assert editor.playback.state is PlaybackState.PAUSED
        assert editor.can_edit

    def test_playback_does_not_write_frames(self, editor, clock):
        """Test playing through frames leaves their stored data alone."""
        self._three_frames(editor)
        before = [f.data for f in editor.frames.frames]
        editor.play()
        for _ in range(5):
            clock.advance(110)
            editor.tick()
        editor.stop()
        assert [f.data for f in editor.frames.frames] == before

    def test_paused_playback_ignores_ticks(self, editor, clock):
        """Test a paused player does not advance."""
        self._three_frames(editor)
        editor.play()
        editor.pause()
        clock.advance(500)
        assert editor.tick() == 0
        assert editor.frames.current_index == 0
