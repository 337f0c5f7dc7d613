from __future__ import annotations

import pytest

from vnspreview.script.compiler import compile_story
from vnspreview.script.errors import StoryRuntimeError


def _story(src: str):
    return compile_story(src.strip("\n"), "main.vns")


def test_continue_stops_at_each_text_line():
    story = _story("""
> SET name = "小明"
你好，{name}
> BG school.png
第二行
""")
    assert story.continue_() == "你好，小明"
    assert story.current_debug_metadata.start_line_number == 2
    assert story.continue_() == "第二行"
    assert story.current_debug_metadata.start_line_number == 4
    assert not story.can_continue


def test_choices_park_the_story_until_chosen():
    story = _story("""
开场
? 左 -> left
? 右 -> right
*left
左边
> END
*right
右边
""")
    story.continue_()
    assert not story.can_continue
    assert [c.text for c in story.current_choices] == ["左", "右"]
    story.choose_choice_index(1)
    # debug metadata points at the target label
    assert story.current_debug_metadata.start_line_number == 7
    assert story.continue_maximally() == "右边"
    assert story.state.choice_trace == [1]


def test_choice_index_out_of_range_raises():
    story = _story("? a -> a\n*a\n完")
    with pytest.raises(StoryRuntimeError):
        story.choose_choice_index(3)


def test_if_else_and_switch_branches():
    story = _story("""
> SET hp = 3
> IF hp > 5 -> strong
> ELSEIF hp > 1 -> ok
> ELSE weak
*strong
强
> END
*ok
> SWITCH hp
> CASE 2 -> two
> CASE 3 -> three
> DEFAULT other
*two
二
> END
*three
三
> END
*other
其他
*weak
弱
""")
    assert story.continue_maximally() == "三"


def test_call_returns_after_the_call_site():
    story = _story("""
> CALL sub
回来了
> END
*sub
> SET visited = true
> RETURN
""")
    assert story.continue_maximally() == "回来了"
    assert story.variables_state["visited"] is True


def test_diverts_end_a_step_without_text():
    story = _story("""
*loop
> GOTO loop
""")
    assert story.continue_() == ""
    assert story.can_continue
    assert story.current_debug_metadata.start_line_number == 2


def test_runtime_errors_raise_without_a_handler():
    story = _story("> SET n = missing + 1\n后面")
    with pytest.raises(StoryRuntimeError):
        story.continue_()


def test_runtime_errors_go_to_the_notice_handler():
    story = _story("> SET n = missing + 1\n后面")
    seen = []
    story.on_error = lambda msg, kind: seen.append(kind)
    assert story.continue_() == "后面"
    assert seen == ["error"]
    assert "n" not in story.variables_state


def test_script_block_updates_variables():
    story = _story("""
> SCRIPT
    total = 0
    for i in range(4):
        total += i
完
""")
    story.continue_()
    assert story.variables_state.get_variable_with_name("total").value == 6
    with pytest.raises(KeyError):
        story.variables_state.get_variable_with_name("nope")


def test_state_round_trip_restores_position_and_variables():
    story = _story("""
> SET a = 1
一
> SET a = 2
二
""")
    story.continue_()
    saved = story.state.to_json()
    story.continue_()
    assert story.variables_state["a"] == 2
    story.state.load_json(saved)
    assert story.variables_state["a"] == 1
    assert story.current_debug_metadata.start_line_number == 2
    assert story.continue_() == "二"
