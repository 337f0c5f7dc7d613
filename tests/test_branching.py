from __future__ import annotations

import math

import pytest

from vnspreview.preview.branching import StoryProbe, choose_branch_index, pick_branch, select_branch
from vnspreview.preview.snapshot import snapshot_variables
from vnspreview.preview.types import Cursor, DebugLocation
from vnspreview.script.compiler import compile_story

BRANCHY = """
> SET bg = "a"
开场
? 去X -> x
? 去Y -> y
? 去Z -> z
*x
X
*y
Y
*z
Z
""".strip("\n")


def _parked_story():
    story = compile_story(BRANCHY, "main.vns")
    story.continue_()
    assert story.current_choices
    return story


@pytest.mark.parametrize(
    "cursor_line, expected",
    [(1, 0), (6, 0), (7, 0), (8, 1), (9, 1), (10, 2), (99, 2)],
)
def test_pick_branch_takes_the_last_start_before_the_cursor(cursor_line, expected):
    assert pick_branch([6, 8, 10], cursor_line) == expected


def test_pick_branch_ignores_branches_without_location():
    assert pick_branch([math.inf, 8, math.inf], 50) == 1
    assert pick_branch([], 3) == 0


def test_select_branch_does_not_probe_a_single_choice():
    def probe(index):
        raise AssertionError("should not probe")

    assert select_branch(["only"], Cursor(4), probe) == 0


def test_select_branch_uses_probed_start_lines():
    locations = {0: DebugLocation(10, 10), 1: None, 2: DebugLocation(20, 20)}
    assert select_branch([0, 1, 2], Cursor(25), locations.get) == 2
    assert select_branch([0, 1, 2], Cursor(12), locations.get) == 0


def test_choose_branch_index_leaves_the_story_untouched():
    story = _parked_story()
    before = story.state.to_json()
    assert choose_branch_index(story, Cursor(9, "main.vns")) == 1
    assert story.state.to_json() == before
    assert len(story.current_choices) == 3


def test_probe_restores_state_when_a_probe_fails():
    story = _parked_story()
    before = story.state.to_json()
    with pytest.raises(Exception):
        with StoryProbe(story) as probe:
            probe(0)
            probe(7)
    assert story.state.to_json() == before


def test_probe_outside_with_block_is_rejected():
    story = _parked_story()
    with pytest.raises(RuntimeError):
        StoryProbe(story)(0)


def test_choosing_a_branch_keeps_script_values_intact():
    src = """
> SCRIPT x = range(3)
开场
? A -> a
? B -> b
*a
A
*b
B
""".strip("\n")
    story = compile_story(src, "main.vns")
    story.continue_()
    before = dict(snapshot_variables(story))
    assert before == {"x": [0, 1, 2]}
    choose_branch_index(story, Cursor(8))
    assert dict(snapshot_variables(story)) == before
