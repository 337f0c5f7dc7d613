from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import load_config
from .preview.presenter import ConsolePresenter
from .preview.project import ScriptProject
from .preview.service import SceneEvaluator
from .preview.types import Cursor
from .script.compiler import Compiler, CompilerOptions, FileSystemHandler
from .script.errors import CompileError


def _load_project(script_path: Path) -> ScriptProject:
    """Main script plus every .vns file beside it (INCLUDE targets)."""
    base = script_path.parent
    files = {}
    for p in sorted(base.rglob("*.vns")):
        try:
            files[p.relative_to(base).as_posix()] = p.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logging.getLogger(__name__).warning("Skipping %s: %s", p, e)
    main = script_path.name
    files[main] = script_path.read_text(encoding="utf-8")
    return ScriptProject(main, files)


def _cmd_eval(args: argparse.Namespace) -> int:
    script_path = Path(args.script)
    if not script_path.exists():
        print(f"Script not found: {script_path}")
        return 2
    cfg = load_config(Path(args.config) if args.config else None)
    if args.max_steps is not None:
        cfg.max_steps = max(1, int(args.max_steps))
    presenter = ConsolePresenter(as_json=bool(args.json))
    evaluator = SceneEvaluator(presenter, config=cfg)
    project = _load_project(script_path)
    cursor = Cursor(max(1, int(args.line)), args.file or project.main_path)
    result = evaluator.evaluate_and_present(cursor, project)
    return 1 if result.is_error else 0


def _cmd_check(args: argparse.Namespace) -> int:
    script_path = Path(args.script)
    if not script_path.exists():
        print(f"Script not found: {script_path}")
        return 2
    source = script_path.read_text(encoding="utf-8")
    options = CompilerOptions(script_path.name, FileSystemHandler(script_path.parent))
    compiler = Compiler(source, options)
    try:
        compiler.compile()
    except CompileError as e:
        for msg in compiler.errors or [str(e)]:
            print(msg)
        for msg in compiler.warnings:
            print(msg)
        return 1
    for msg in compiler.warnings:
        print(msg)
    print(f"OK: {script_path}")
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="vnspreview", description="Preview VNS story state at a source line")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd")

    p_eval = sub.add_parser("eval", help="Print the variables a script holds when execution reaches a line")
    p_eval.add_argument("script", type=str, help="Path to the main .vns script")
    p_eval.add_argument("--line", type=int, required=True, help="1-based cursor line")
    p_eval.add_argument("--file", type=str, default=None, help="File the cursor is in (defaults to the main script)")
    p_eval.add_argument("--max-steps", type=int, default=None, help="Step ceiling for the run")
    p_eval.add_argument("--config", type=str, default=None, help="Preview config or project JSON")
    p_eval.add_argument("--json", action="store_true", help="Print variables as JSON")

    p_check = sub.add_parser("check", help="Compile a script and print diagnostics")
    p_check.add_argument("script", type=str, help="Path to the main .vns script")

    argv_list = list(argv) if argv is not None else sys.argv[1:]
    args = parser.parse_args(argv_list)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.cmd == "eval":
        return _cmd_eval(args)
    if args.cmd == "check":
        return _cmd_check(args)
    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
