from __future__ import annotations

import pytest

from vnspreview.script.compiler import (
    Compiler,
    CompilerOptions,
    FileSystemHandler,
    JsonFileHandler,
    compile_story,
)
from vnspreview.script.errors import CompileError


def test_include_splices_ops_with_their_own_file():
    files = {
        "main.vns": "> SET bg = \"a\"\n> INCLUDE chapters/one.vns\n结束",
        "chapters/one.vns": "\n第一章\n*one",
    }
    story = compile_story(files["main.vns"], "main.vns", JsonFileHandler(files))
    ops = story.program.ops
    assert [op.kind for op in ops] == ["command", "narration", "label", "narration"]
    assert (ops[1].file, ops[1].line) == ("chapters/one.vns", 2)
    assert (ops[3].file, ops[3].line) == ("main.vns", 3)
    assert story.program.labels == {"one": 2}


def test_include_cycle_is_fatal():
    files = {"a.vns": "> INCLUDE b.vns", "b.vns": "> INCLUDE a.vns"}
    with pytest.raises(CompileError) as ei:
        compile_story(files["a.vns"], "a.vns", JsonFileHandler(files))
    assert "Include cycle" in ei.value.message


def test_missing_include_and_missing_handler():
    with pytest.raises(CompileError) as ei:
        compile_story("> INCLUDE nope.vns", "main.vns", JsonFileHandler({}))
    assert "nope.vns" in ei.value.message
    assert ei.value.line == 1
    with pytest.raises(CompileError):
        compile_story("> INCLUDE other.vns", "main.vns")


def test_filesystem_handler_reads_relative_to_base(tmp_path):
    (tmp_path / "part.vns").write_text("*part\n你好", encoding="utf-8")
    story = compile_story("> INCLUDE part.vns\n> GOTO part", "main.vns", FileSystemHandler(tmp_path))
    assert "part" in story.program.labels


def test_errors_are_collected_before_raising():
    src = "\n".join([
        "? 去 -> nowhere",
        "> SET broken",
        "> IF x > 1",
        "> GOTO missing",
        "> SCRIPT import os",
    ])
    compiler = Compiler(src, CompilerOptions("main.vns"))
    with pytest.raises(CompileError):
        compiler.compile()
    assert len(compiler.errors) == 5
    assert compiler.errors[0] == "ERROR: 'main.vns' line 1: Choice target label not found: 'nowhere'"
    assert "SET missing '='" in compiler.errors[1]
    assert "IF missing '->'" in compiler.errors[2]
    assert "Unknown target label: 'missing'" in compiler.errors[3]
    assert "SCRIPT error" in compiler.errors[4]


def test_warnings_do_not_stop_compilation():
    src = "*a\n>\n: 旁白\n*a\n"
    compiler = Compiler(src, CompilerOptions("main.vns"))
    story = compiler.compile()
    assert any("Duplicate label 'a'" in w for w in compiler.warnings)
    assert any("Empty command name" in w for w in compiler.warnings)
    # first definition wins
    assert story.program.labels["a"] == 0
    assert story.warnings == compiler.warnings
