from __future__ import annotations

import pytest

from vnspreview.preview.position import arrived, matches, reached, same_file
from vnspreview.preview.types import Cursor, DebugLocation


def test_cursor_lines_are_one_based():
    with pytest.raises(ValueError):
        Cursor(0)


@pytest.mark.parametrize(
    "location_file, cursor_file, expected",
    [
        (None, "main.vns", True),
        ("main.vns", None, True),
        ("main.vns", "main.vns", True),
        ("chapters/one.vns", "/home/me/story/chapters/one.vns", True),
        ("chapters\\one.vns", "one.vns", True),
        ("main.vns", "other.vns", False),
    ],
)
def test_matches_compares_file_identity(location_file, cursor_file, expected):
    assert matches(DebugLocation(3, 3, location_file), Cursor(3, cursor_file)) is expected


def test_reached_is_at_or_past_the_cursor_line():
    cursor = Cursor(5)
    assert not reached(DebugLocation(4, 4), cursor)
    assert reached(DebugLocation(5, 5), cursor)
    assert reached(DebugLocation(9, 9), cursor)


def test_arrived_needs_a_location_in_the_cursor_file():
    cursor = Cursor(2, "main.vns")
    assert not arrived(None, cursor)
    assert not arrived(DebugLocation(7, 7, "other.vns"), cursor)
    assert arrived(DebugLocation(7, 7, "main.vns"), cursor)


def test_same_file_ignores_directories():
    assert same_file("a/b/c.vns", "c.vns")
    assert not same_file("a/b.vns", "a/c.vns")
