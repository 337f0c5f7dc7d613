from __future__ import annotations

import pytest

from vnspreview.preview.driver import EXHAUSTED, REACHED, STEP_LIMIT, CursorDriver, run_to_cursor
from vnspreview.preview.notices import SilentNoticeObserver
from vnspreview.preview.types import Cursor
from vnspreview.script.compiler import JsonFileHandler, compile_story

SCENE = """
> SET bg = "a"
开场
? 去X -> x
? 去Y -> y
*x
> SET bg = "b"
在X
> END
*y
> SET bg = "c"
在Y
> END
""".strip("\n")


def _run(src, line, file_path=None, max_steps=10000):
    story = compile_story(src, "main.vns")
    return CursorDriver(max_steps).run(story, Cursor(line, file_path))


@pytest.mark.parametrize(
    "line, expected",
    [(1, "a"), (2, "a"), (6, "b"), (7, "b"), (10, "c"), (11, "c")],
)
def test_cursor_selects_the_branch_it_sits_in(line, expected):
    outcome = _run(SCENE, line, "main.vns")
    assert outcome.reason == REACHED
    assert outcome.variables["bg"] == expected


def test_cursor_past_the_end_runs_to_completion():
    outcome = _run(SCENE, 40)
    assert outcome.reason == EXHAUSTED
    assert outcome.variables["bg"] == "c"


def test_evaluation_is_repeatable():
    first = _run(SCENE, 7)
    second = _run(SCENE, 7)
    assert dict(first.variables) == dict(second.variables)
    assert first.steps == second.steps


def test_story_without_choices():
    src = "> SET n = 1\n一\n> SET n = n + 1\n二\n> SET n = n + 1\n三"
    assert run_to_cursor(compile_story(src, "main.vns"), Cursor(4))["n"] == 2


def test_step_limit_returns_last_snapshot():
    src = "> SET n = 0\n*loop\n> SET n = n + 1\n> GOTO loop"
    outcome = _run(src, 10, max_steps=5)
    assert outcome.reason == STEP_LIMIT
    assert outcome.steps == 5
    assert outcome.variables["n"] == 5


def test_cursor_in_an_included_file():
    files = {
        "main.vns": '> SET bg = "a"\n> INCLUDE ch1.vns\n> SET bg = "z"\n尾声',
        "ch1.vns": '第一章\n> SET bg = "b"\n章末',
    }
    story = compile_story(files["main.vns"], "main.vns", JsonFileHandler(files))
    outcome = CursorDriver().run(story, Cursor(3, "ch1.vns"))
    assert outcome.reason == REACHED
    assert outcome.variables["bg"] == "b"


def test_runtime_errors_are_absorbed_by_an_observer():
    src = "> SET hp = oops + 1\n> SET bg = \"a\"\n文字"
    story = compile_story(src, "main.vns")
    observer = SilentNoticeObserver()
    observer.attach(story)
    outcome = CursorDriver().run(story, Cursor(3))
    assert outcome.variables["bg"] == "a"
    assert "hp" not in outcome.variables
    assert observer.absorbed == 1


def test_max_steps_must_be_positive():
    with pytest.raises(ValueError):
        CursorDriver(0)


def test_endless_script_loop_ends_within_the_step():
    src = "> SET n = 1\n> SCRIPT while True: n = n\n文"
    story = compile_story(src, "main.vns")
    observer = SilentNoticeObserver()
    observer.attach(story)
    outcome = CursorDriver(10).run(story, Cursor(3))
    assert outcome.reason == REACHED
    assert outcome.variables["n"] == 1
    assert observer.absorbed == 1
