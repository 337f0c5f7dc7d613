from __future__ import annotations

import pytest

from vnspreview.runtime.sandbox import compile_block, safe_exec
from vnspreview.runtime.state import StoryState, to_json_value


def test_loops_within_budget_run_normally():
    vars = {}
    safe_exec("total = 0\nfor i in range(5):\n    total += i", vars, max_iterations=5)
    assert vars["total"] == 10


def test_endless_loop_hits_the_budget():
    vars = {"n": 0}
    with pytest.raises(ValueError, match="exceeded 50 iterations"):
        safe_exec("while True:\n    n += 1", vars, max_iterations=50)
    assert vars["n"] == 50


def test_budget_is_shared_by_nested_loops():
    with pytest.raises(ValueError):
        safe_exec("for i in range(10):\n    for j in range(10):\n        pass", {}, max_iterations=50)


def test_reserved_names_are_rejected():
    with pytest.raises(ValueError):
        compile_block("__loop_tick__ = int")


def test_disallowed_constructs_are_rejected():
    with pytest.raises(ValueError):
        compile_block("import os")
    with pytest.raises(ValueError):
        compile_block("open('x')")


def test_to_json_value_matches_a_json_round_trip():
    value = {"r": range(3), "t": (1, "a"), 2: {"s": None}}
    converted = to_json_value(value)
    assert converted == {"r": [0, 1, 2], "t": [1, "a"], "2": {"s": None}}
    st = StoryState()
    st.vars = {"v": converted}
    restored = StoryState()
    restored.load_json(st.to_json())
    assert restored.vars == st.vars
