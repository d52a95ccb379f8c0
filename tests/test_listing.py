"""Tests for the in-memory listing host."""

from pathlib import Path

import pytest

from dirsigns.host import BufferEvent, Marker
from dirsigns.listing import (
    ListingEntry,
    ListingError,
    ListingHost,
    buffer_name_for_path,
    signcolumn_width,
)
from dirsigns.loader import resolve_buffer_path


def _make_tree(root: Path) -> None:
    (root / "b_dir").mkdir()
    (root / "A_dir").mkdir()
    (root / "z.txt").write_text("z\n", encoding="utf-8")
    (root / "a.txt").write_text("a\n", encoding="utf-8")
    (root / ".hidden").write_text("h\n", encoding="utf-8")


def test_entry_names():
    """Display names mark directories; git names do not."""
    entry = ListingEntry(path=Path("/tmp/mydir"), is_dir=True)
    assert entry.name == "mydir"
    assert entry.display_name == "mydir/"

    parent = ListingEntry(path=Path("/"), is_dir=True, is_parent=True)
    assert parent.name == ".."
    assert parent.display_name == ".."


def test_open_directory_lists_directories_first(tmp_path):
    """Entries are sorted like the browser: parent, directories, files."""
    _make_tree(tmp_path)
    host = ListingHost()
    buffer = host.open_directory(tmp_path)

    names = [entry.display_name for entry in host.get(buffer).entries]
    assert names == ["..", "A_dir/", "b_dir/", "a.txt", "z.txt"]
    assert host.line_count(buffer) == 5
    assert host.entry_on_line(buffer, 2).name == "A_dir"
    assert host.entry_on_line(buffer, 0) is None
    assert host.entry_on_line(buffer, 6) is None


def test_hidden_files_toggle_fires_text_changed(tmp_path):
    """Showing dotfiles only changes the text of the buffer."""
    _make_tree(tmp_path)
    host = ListingHost()
    buffer = host.open_directory(tmp_path)
    fired = []
    host.subscribe(buffer, [BufferEvent.TEXT_CHANGED, BufferEvent.READ], lambda: fired.append(1))

    host.set_show_hidden(buffer, True)

    assert ".hidden" in [entry.name for entry in host.get(buffer).entries]
    assert fired == [1]


def test_open_missing_directory_raises(tmp_path):
    """Listing a missing directory is reported as ListingError."""
    host = ListingHost()
    with pytest.raises(ListingError):
        host.open_directory(tmp_path / "missing")
    assert host.buffers == {}


def test_listing_callbacks_run_before_enter(tmp_path):
    """Listing buffer callbacks can subscribe to the first enter event."""
    host = ListingHost()
    events = []

    def on_listing(buffer):
        events.append(("listing", buffer))
        host.subscribe(buffer, [BufferEvent.ENTER], lambda: events.append(("enter", buffer)))

    host.on_listing_buffer(on_listing)
    buffer = host.open_directory(tmp_path)

    assert events == [("listing", buffer), ("enter", buffer)]


def test_close_emits_and_forgets(tmp_path):
    """Closing a buffer notifies subscribers and drops it."""
    host = ListingHost()
    buffer = host.open_directory(tmp_path)
    closed = []
    host.subscribe(buffer, [BufferEvent.CLOSE], lambda: closed.append(buffer))

    host.close(buffer)

    assert closed == [buffer]
    with pytest.raises(ListingError):
        host.line_count(buffer)


def test_buffer_name_round_trip(tmp_path):
    """Buffer names resolve back to the listed directory."""
    directory = tmp_path / "with space"
    directory.mkdir()
    name = buffer_name_for_path(directory)

    assert name.startswith("listing:///")
    assert name.endswith("/")
    assert "%20" in name
    assert Path(resolve_buffer_path(name)) == directory.resolve()


def test_resolve_buffer_path_passes_plain_paths_through():
    """Names without the listing scheme are already paths."""
    assert resolve_buffer_path("/tmp/plain") == "/tmp/plain"
    assert resolve_buffer_path("listing:///tmp/a%20b/") == "/tmp/a b/"
    assert resolve_buffer_path("oil:///tmp/x/", scheme="oil") == "/tmp/x/"


def test_signcolumn_width():
    """Widths follow the editor sign column syntax."""
    assert signcolumn_width("yes:2") == 2
    assert signcolumn_width("yes") == 1
    assert signcolumn_width("auto:1-3") == 3
    assert signcolumn_width("auto:x") == 1
    assert signcolumn_width("no") == 0
    assert signcolumn_width("number") == 0


def test_signs_keep_highest_priorities(tmp_path):
    """A narrow sign column shows the highest priority marker."""
    host = ListingHost(signcolumn="yes:1")
    buffer = host.open_directory(tmp_path)
    host.set_marker(buffer, "ns", 0, Marker("A", "Index", 1))
    host.set_marker(buffer, "ns", 0, Marker("M", "WorkingTree", 2))

    assert [marker.text for marker in host.markers_on_line(buffer, 0)] == ["A", "M"]
    assert [marker.text for marker in host.signs_for_line(buffer, 0)] == ["M"]

    host.clear_markers(buffer, "ns")
    assert host.markers_on_line(buffer, 0) == []


def test_reread_drops_markers_before_read(tmp_path):
    """Markers from the old text are gone by the time READ fires."""
    (tmp_path / "b.txt").write_text("b\n", encoding="utf-8")
    host = ListingHost()
    buffer = host.open_directory(tmp_path)
    host.set_marker(buffer, "dirsigns", 1, Marker("M", "Index", 1))
    seen = []
    host.subscribe(buffer, (BufferEvent.READ,), lambda: seen.append(host.markers_on_line(buffer, 1)))

    (tmp_path / "a.txt").write_text("a\n", encoding="utf-8")
    host.reread(buffer)

    assert [entry.name for entry in host.get(buffer).entries] == ["..", "a.txt", "b.txt"]
    assert seen == [[]]


def test_define_style_keeps_existing_links():
    """Style links behave like default highlight links."""
    host = ListingHost()
    host.define_style("Group", "info")
    host.define_style("Group", "warn")
    assert host.styles["Group"] == "info"


def test_notify_records_messages():
    """Notifications are kept for the UI."""
    host = ListingHost()
    host.notify("careful", 30)
    assert host.notifications == [("careful", 30)]
