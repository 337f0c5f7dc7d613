from __future__ import annotations

import ast
import operator
from typing import Any, Callable, Dict, Mapping


_BIN_OPS: Dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

_UNARY_OPS: Dict[type, Callable[[Any], Any]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
    ast.Not: operator.not_,
}

_COMPARE_OPS: Dict[type, Callable[[Any, Any], Any]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}

_NAME_ALIASES = {"true": True, "false": False, "none": None, "null": None}


def normalize_quotes(expr: str) -> str:
    """Turn CJK/smart quotes into plain double quotes."""
    return (
        expr.replace('“', '"').replace('”', '"')
        .replace('「', '"').replace('」', '"')
    )


class SafeEval(ast.NodeVisitor):
    """Tiny safe expression evaluator for SET/IF/SWITCH/CASE.

    Supported: literals, variable names (missing -> None), unary + - not,
    binary + - * / // %, and/or, chained comparisons and ``a if c else b``.
    Anything else raises ValueError.
    """

    def __init__(self, vars: Mapping[str, Any]):
        self.vars = vars

    def evaluate(self, expr: str) -> Any:
        tree = ast.parse(normalize_quotes(expr).strip(), mode="eval")
        return self.visit(tree.body)

    def visit_Constant(self, node: ast.Constant) -> Any:
        return node.value

    def visit_Name(self, node: ast.Name) -> Any:
        key = node.id
        if key.lower() in _NAME_ALIASES:
            return _NAME_ALIASES[key.lower()]
        return self.vars.get(key, None)

    def visit_UnaryOp(self, node: ast.UnaryOp) -> Any:
        fn = _UNARY_OPS.get(type(node.op))
        if fn is None:
            raise ValueError("Unsupported unary operator")
        return fn(self.visit(node.operand))

    def visit_BoolOp(self, node: ast.BoolOp) -> Any:
        values = (self.visit(v) for v in node.values)
        if isinstance(node.op, ast.And):
            return all(bool(v) for v in values)
        if isinstance(node.op, ast.Or):
            return any(bool(v) for v in values)
        raise ValueError("Unsupported boolean operator")

    def visit_BinOp(self, node: ast.BinOp) -> Any:
        fn = _BIN_OPS.get(type(node.op))
        if fn is None:
            raise ValueError("Unsupported binary operator")
        return fn(self.visit(node.left), self.visit(node.right))

    def visit_Compare(self, node: ast.Compare) -> Any:
        left = self.visit(node.left)
        for op, comparator in zip(node.ops, node.comparators):
            fn = _COMPARE_OPS.get(type(op))
            if fn is None:
                raise ValueError("Unsupported comparison")
            right = self.visit(comparator)
            if not fn(left, right):
                return False
            left = right
        return True

    def visit_IfExp(self, node: ast.IfExp) -> Any:
        return self.visit(node.body) if self.visit(node.test) else self.visit(node.orelse)

    def generic_visit(self, node: ast.AST) -> Any:
        raise ValueError(f"Unsupported expression element: {type(node).__name__}")


def safe_eval(expr: str, vars: Mapping[str, Any]) -> Any:
    return SafeEval(vars).evaluate(expr)
