"""Tests for the per-buffer status lifecycle."""

import asyncio
import logging
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from dirsigns.config import Options
from dirsigns.controller import SIGNCOLUMN_WARNING, StatusController
from dirsigns.git_status import StatusEntry
from dirsigns.host import BufferEvent
from dirsigns.listing import ListingHost
from dirsigns.markers import NAMESPACE
from dirsigns.status_codes import STYLE_GROUPS


class _FakeLoader:
    """Stand-in for ``load_git_status`` that completes only when told to."""

    def __init__(self):
        self.calls = []

    def __call__(self, path, callback, *, show_ignored, loop):
        self.calls.append(SimpleNamespace(path=path, callback=callback, show_ignored=show_ignored))

    def complete(self, index, status):
        self.calls[index].callback(status)


@pytest.fixture
def loop():
    event_loop = asyncio.new_event_loop()
    yield event_loop
    event_loop.close()


@pytest.fixture
def loader():
    fake = _FakeLoader()
    with patch("dirsigns.controller.load_git_status", fake):
        yield fake


def _setup(tmp_path, loop, **options):
    (tmp_path / "a.txt").write_text("a\n", encoding="utf-8")
    (tmp_path / "src").mkdir()
    host = ListingHost()
    controller = StatusController(host, loop=loop, options=Options(**options))
    controller.setup()
    buffer = host.open_directory(tmp_path)
    return host, controller, buffer


def _signs(host, buffer):
    return {
        host.entry_on_line(buffer, line + 1).name: "".join(m.text for m in host.markers_on_line(buffer, line))
        for line in range(host.line_count(buffer))
        if host.markers_on_line(buffer, line)
    }


def test_setup_defines_styles_and_accepts_sign_column(loop):
    """Style groups are linked and a two-cell sign column raises no warning."""
    host = ListingHost(signcolumn="yes:2")
    StatusController(host, loop=loop).setup()

    assert len(host.styles) == len(STYLE_GROUPS)
    assert host.styles["DirSignsIndexModified"] == "info"
    assert host.styles["DirSignsWorkingTreeModified"] == "warn"
    assert host.notifications == []


def test_setup_warns_without_sign_column(loop):
    """A host without sign column space gets one warning."""
    host = ListingHost(signcolumn="no")
    StatusController(host, loop=loop).setup()

    assert host.notifications == [(SIGNCOLUMN_WARNING, logging.WARNING)]


def test_enter_loads_and_draws(tmp_path, loop, loader):
    """Entering a listing queries git in its directory and draws the result."""
    host, controller, buffer = _setup(tmp_path, loop)

    assert len(loader.calls) == 1
    assert loader.calls[0].path.rstrip("/") == str(tmp_path.resolve())
    assert loader.calls[0].show_ignored is True

    loader.complete(0, {"a.txt": StatusEntry("M", " ")})

    assert controller.status_for(buffer) == {"a.txt": StatusEntry("M", " ")}
    assert _signs(host, buffer) == {"a.txt": "M "}


def test_show_ignored_option_is_passed(tmp_path, loop, loader):
    """The configured option reaches the loader."""
    _setup(tmp_path, loop, show_ignored=False)
    assert loader.calls[0].show_ignored is False


def test_attach_is_idempotent(tmp_path, loop, loader):
    """Attaching twice does not double the subscriptions."""
    host, controller, buffer = _setup(tmp_path, loop)
    controller.attach(buffer)

    host.emit(buffer, BufferEvent.WRITE)

    assert controller.is_attached(buffer)
    assert len(loader.calls) == 2


def test_reload_events(tmp_path, loop, loader):
    """Read, write and enter each trigger a reload."""
    host, _controller, buffer = _setup(tmp_path, loop)
    for event in (BufferEvent.READ, BufferEvent.WRITE, BufferEvent.ENTER):
        host.emit(buffer, event)
    assert len(loader.calls) == 4


def test_edit_events_redraw_from_cache(tmp_path, loop, loader):
    """Text changes redraw the cached status without querying git."""
    host, _controller, buffer = _setup(tmp_path, loop)
    loader.complete(0, {"src": StatusEntry("A", "M")})
    host.clear_markers(buffer, NAMESPACE)

    host.emit(buffer, BufferEvent.TEXT_CHANGED)
    assert _signs(host, buffer) == {"src": "AM"}

    host.clear_markers(buffer, NAMESPACE)
    host.emit(buffer, BufferEvent.INSERT_LEAVE)
    assert _signs(host, buffer) == {"src": "AM"}
    assert len(loader.calls) == 1


def test_edit_events_without_cache_do_nothing(tmp_path, loop, loader):
    """Before the first load there is nothing to redraw."""
    host, _controller, buffer = _setup(tmp_path, loop)
    host.emit(buffer, BufferEvent.TEXT_CHANGED)
    assert _signs(host, buffer) == {}


def test_failed_reload_keeps_previous_cache(tmp_path, loop, loader):
    """A failed query leaves the last good status in place."""
    host, controller, buffer = _setup(tmp_path, loop)
    loader.complete(0, {"a.txt": StatusEntry("M", " ")})

    host.emit(buffer, BufferEvent.READ)
    loader.complete(1, None)
    assert controller.status_for(buffer) == {"a.txt": StatusEntry("M", " ")}
    assert _signs(host, buffer) == {}

    host.emit(buffer, BufferEvent.TEXT_CHANGED)
    assert _signs(host, buffer) == {"a.txt": "M "}


def test_failed_reload_after_reread_leaves_no_signs(tmp_path, loop, loader):
    """Signs never move onto entries that shifted during a failed reload."""
    (tmp_path / "b.txt").write_text("b\n", encoding="utf-8")
    host, _controller, buffer = _setup(tmp_path, loop)
    loader.complete(0, {"b.txt": StatusEntry("M", " ")})
    assert _signs(host, buffer) == {"b.txt": "M "}

    (tmp_path / "a0.txt").write_text("a\n", encoding="utf-8")
    host.reread(buffer)
    loader.complete(1, None)

    assert _signs(host, buffer) == {}


def test_stale_failure_keeps_newer_signs(tmp_path, loop, loader):
    """A failed query older than the applied one does not clear signs."""
    host, _controller, buffer = _setup(tmp_path, loop)
    host.emit(buffer, BufferEvent.READ)

    loader.complete(1, {"src": StatusEntry(" ", "?")})
    loader.complete(0, None)

    assert _signs(host, buffer) == {"src": " ?"}


def test_stale_completion_is_dropped(tmp_path, loop, loader):
    """An older query finishing after a newer one does not roll back."""
    host, controller, buffer = _setup(tmp_path, loop)
    host.emit(buffer, BufferEvent.READ)

    loader.complete(1, {"src": StatusEntry(" ", "?")})
    loader.complete(0, {"a.txt": StatusEntry("M", " ")})

    assert controller.status_for(buffer) == {"src": StatusEntry(" ", "?")}
    assert _signs(host, buffer) == {"src": " ?"}


def test_in_order_completions_replace_cache(tmp_path, loop, loader):
    """Each newer status replaces the previous one as a whole."""
    host, controller, buffer = _setup(tmp_path, loop)
    loader.complete(0, {"a.txt": StatusEntry("M", " "), "src": StatusEntry("A", " ")})
    host.emit(buffer, BufferEvent.WRITE)
    loader.complete(1, {"src": StatusEntry("A", " ")})

    assert controller.status_for(buffer) == {"src": StatusEntry("A", " ")}
    assert _signs(host, buffer) == {"src": "A "}


def test_close_drops_state(tmp_path, loop, loader):
    """Closing the buffer forgets its state and ignores late results."""
    host, controller, buffer = _setup(tmp_path, loop)
    host.close(buffer)

    assert not controller.is_attached(buffer)
    loader.complete(0, {"a.txt": StatusEntry("M", " ")})
    assert controller.status_for(buffer) is None


def test_buffers_are_independent(tmp_path, loop, loader):
    """Each buffer has its own cache."""
    other = tmp_path / "other"
    other.mkdir()
    host, controller, first = _setup(tmp_path, loop)
    second = host.open_directory(other)

    loader.complete(1, {"x": StatusEntry("A", " ")})

    assert controller.status_for(first) is None
    assert controller.status_for(second) == {"x": StatusEntry("A", " ")}
