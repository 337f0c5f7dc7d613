from __future__ import annotations

import ast
from typing import Any, Dict, Set

from .expr import normalize_quotes


# Whitelisted builtins for SCRIPT blocks
ALLOWED_BUILTINS: Dict[str, Any] = {
    "abs": abs,
    "min": min,
    "max": max,
    "int": int,
    "float": float,
    "str": str,
    "len": len,
    "range": range,
    "round": round,
    "bool": bool,
}

# iterations one SCRIPT block may run across all of its loops
MAX_LOOP_ITERATIONS = 100_000

_TICK = "__loop_tick__"

_ALLOWED_NODES: Set[type] = {
    ast.Module, ast.Expr, ast.Assign, ast.AugAssign,
    ast.Name, ast.Load, ast.Store, ast.Constant,
    ast.BinOp, ast.UnaryOp, ast.BoolOp, ast.Compare, ast.IfExp,
    ast.If, ast.While, ast.For, ast.Call,
    ast.Pass, ast.Break, ast.Continue,
    # operators
    ast.Add, ast.Sub, ast.Mult, ast.Div, ast.FloorDiv, ast.Mod, ast.Pow,
    ast.UAdd, ast.USub, ast.Not,
    ast.And, ast.Or,
    ast.Eq, ast.NotEq, ast.Lt, ast.LtE, ast.Gt, ast.GtE,
}


def _validate_node(node: ast.AST) -> None:
    if type(node) not in _ALLOWED_NODES:
        raise ValueError(f"Disallowed construct: {type(node).__name__}")
    if isinstance(node, ast.Name) and node.id.startswith("__"):
        raise ValueError(f"Reserved name: {node.id}")
    # Calls only to whitelisted builtin names
    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name) or node.func.id not in ALLOWED_BUILTINS:
            raise ValueError("Only simple calls to allowed builtins are permitted")
    for child in ast.iter_child_nodes(node):
        _validate_node(child)


class _LoopBudget(ast.NodeTransformer):
    """Prepends a budget check to every loop body."""

    def _tick(self, node: Any) -> Any:
        self.generic_visit(node)
        call = ast.Expr(ast.Call(func=ast.Name(id=_TICK, ctx=ast.Load()), args=[], keywords=[]))
        node.body.insert(0, call)
        return node

    visit_While = _tick
    visit_For = _tick


def _loop_counter(limit: int) -> Any:
    count = 0

    def tick() -> None:
        nonlocal count
        count += 1
        if count > limit:
            raise ValueError(f"SCRIPT loop exceeded {limit} iterations")
    return tick


def compile_block(code: str) -> Any:
    """Parse and validate a SCRIPT block, returning a code object.

    Raises SyntaxError or ValueError when the block is outside the allowed
    subset, so the compiler can report it before the story runs.
    """
    code_str = normalize_quotes(str(code or "")).replace("\r\n", "\n").replace("\r", "\n")
    tree = ast.parse(code_str, mode="exec")
    _validate_node(tree)
    tree = ast.fix_missing_locations(_LoopBudget().visit(tree))
    return compile(tree, filename="<script>", mode="exec")


def safe_exec(code: str, vars: Dict[str, Any], max_iterations: int = MAX_LOOP_ITERATIONS) -> None:
    """Execute a tiny, safe subset of Python statements on ``vars``.

    Assignments, if/while, for over range(...) and calls to a small builtin
    whitelist are allowed. Side effects are limited to the vars dict. Loops
    stop with ValueError after ``max_iterations`` passes in total.
    """
    env = {"__builtins__": ALLOWED_BUILTINS, _TICK: _loop_counter(max_iterations)}
    exec(compile_block(code), env, vars)
