from __future__ import annotations

import re

from .types import Cursor, DebugLocation

_SEP_RE = re.compile(r"[/\\]")


def basename(path: str) -> str:
    return _SEP_RE.split(path)[-1]


def same_file(a: str, b: str) -> bool:
    # compiler ids and editor paths may differ in being absolute or relative
    return a == b or basename(a) == basename(b)


def matches(location: DebugLocation, cursor: Cursor) -> bool:
    """True when the location belongs to the cursor's file.

    No file on the location means a single-file story, and no file on the
    cursor means any file will do.
    """
    if not location.file_identity:
        return True
    if not cursor.file_path:
        return True
    return same_file(location.file_identity, cursor.file_path)


def reached(location: DebugLocation, cursor: Cursor) -> bool:
    """True once execution is at or past the cursor line.

    A multi-line statement or a cursor on a blank line has no debug point of
    its own, so this is ">=" rather than an exact match.
    """
    return location.start_line >= cursor.line


def arrived(location: DebugLocation | None, cursor: Cursor) -> bool:
    return location is not None and matches(location, cursor) and reached(location, cursor)
