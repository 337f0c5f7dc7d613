from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional

from ..runtime.sandbox import compile_block
from ..runtime.story import Story
from .errors import CompileError
from .model import Op, Program
from .parser import parse_script

logger = logging.getLogger(__name__)

# commands whose argument (after '->' when present) names a label
_JUMP_COMMANDS = {"GOTO", "CALL", "IF", "ELSEIF", "ELSE", "CASE", "DEFAULT"}


class IFileHandler(ABC):
    """Resolves and loads the files an INCLUDE directive refers to."""

    @abstractmethod
    def resolve_filename(self, name: str) -> str:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    def load_file_contents(self, full_name: str) -> str:  # pragma: no cover - interface
        raise NotImplementedError


class JsonFileHandler(IFileHandler):
    """In-memory handler over ``{relative_path: source}`` (unsaved editor buffers)."""

    def __init__(self, file_hierarchy: Dict[str, str]) -> None:
        self.file_hierarchy = dict(file_hierarchy)

    def resolve_filename(self, name: str) -> str:
        return str(PurePosixPath(name.replace("\\", "/")))

    def load_file_contents(self, full_name: str) -> str:
        if full_name not in self.file_hierarchy:
            raise FileNotFoundError(full_name)
        return self.file_hierarchy[full_name]


class FileSystemHandler(IFileHandler):
    """Loads included files relative to a base directory."""

    def __init__(self, base: Path) -> None:
        self.base = Path(base)

    def resolve_filename(self, name: str) -> str:
        return name.replace("\\", "/")

    def load_file_contents(self, full_name: str) -> str:
        return (self.base / full_name).read_text(encoding="utf-8")


@dataclass
class CompilerOptions:
    source_filename: Optional[str] = None
    file_handler: Optional[IFileHandler] = None


def _format(kind: str, message: str, op: Optional[Op]) -> str:
    if op is None:
        return f"{kind}: {message}"
    where = f"'{op.file}' " if op.file else ""
    return f"{kind}: {where}line {op.line}: {message}"


def _label_target(name: str, args: str) -> str:
    if '->' in args:
        return args.split('->', 1)[1].strip()
    if name in ("GOTO", "CALL", "ELSE", "DEFAULT"):
        return args.strip()
    return ""


class Compiler:
    """Builds a runnable Story from VNS source.

    Fatal problems (an include that cannot be loaded, an include cycle)
    raise CompileError at once. Other problems are collected in
    ``errors``/``warnings``; when any error was collected ``compile()``
    raises CompileError after validation finished, leaving the list in place.
    """

    def __init__(self, source: str, options: Optional[CompilerOptions] = None) -> None:
        self.source = source
        self.options = options or CompilerOptions()
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def compile(self) -> Story:
        self.errors = []
        self.warnings = []
        main = self.options.source_filename
        ops = self._expand(self.source, main, [main] if main else [])
        program = Program(ops, self._collect_labels(ops))
        self._validate(program)
        if self.errors:
            raise CompileError("\n".join(self.errors), file=main)
        logger.debug("Compiled %s: %d ops, %d labels", main or "<source>", len(ops), len(program.labels))
        return Story(program, warnings=self.warnings)

    def _expand(self, source: str, filename: Optional[str], stack: List[str]) -> List[Op]:
        out: List[Op] = []
        for op in parse_script(source).ops:
            op.payload["file"] = filename
            if op.kind == "command" and str(op.payload.get("name", "")).upper() == "INCLUDE":
                out.extend(self._include(str(op.payload.get("args", "")).strip(), op, stack))
                continue
            out.append(op)
        return out

    def _include(self, name: str, op: Op, stack: List[str]) -> List[Op]:
        handler = self.options.file_handler
        if not name:
            raise CompileError("INCLUDE without a file name", op.line, file=op.file)
        if handler is None:
            raise CompileError(f"Cannot include '{name}': no file handler", op.line, file=op.file)
        full = handler.resolve_filename(name)
        if full in stack:
            chain = " -> ".join(stack + [full])
            raise CompileError(f"Include cycle: {chain}", op.line, file=op.file)
        try:
            text = handler.load_file_contents(full)
        except Exception as e:
            raise CompileError(f"Failed to load included file '{name}': {e}", op.line, file=op.file) from e
        return self._expand(text, full, stack + [full])

    def _collect_labels(self, ops: List[Op]) -> Dict[str, int]:
        labels: Dict[str, int] = {}
        for ip, op in enumerate(ops):
            if op.kind != "label":
                continue
            name = str(op.payload.get("name", ""))
            if name in labels:
                first = ops[labels[name]]
                self.warnings.append(_format("WARNING", f"Duplicate label '{name}' (first defined at line {first.line})", op))
                continue
            labels[name] = ip
        return labels

    def _validate(self, program: Program) -> None:
        labels = program.labels
        for op in program.ops:
            kind = op.kind
            p = op.payload
            if kind == "choice":
                target = str(p.get("target", "")).strip()
                if target not in labels:
                    self.errors.append(_format("ERROR", f"Choice target label not found: '{target}'", op))
            elif kind == "script":
                self._check_script(str(p.get("code") or ""), op)
            elif kind == "command":
                name = str(p.get("name", "")).strip().upper()
                args = str(p.get("args", ""))
                if not name:
                    self.warnings.append(_format("WARNING", "Empty command name", op))
                elif name == "SET" and '=' not in args:
                    self.errors.append(_format("ERROR", "SET missing '='", op))
                elif name in ("IF", "ELSEIF", "CASE") and '->' not in args:
                    self.errors.append(_format("ERROR", f"{name} missing '->'", op))
                elif name == "SCRIPT":
                    self._check_script(args, op)
                elif name in _JUMP_COMMANDS:
                    target = _label_target(name, args)
                    if target and target not in labels:
                        self.errors.append(_format("ERROR", f"Unknown target label: '{target}'", op))
            elif kind == "dialogue":
                if not str(p.get("actor", "")).strip():
                    self.warnings.append(_format("WARNING", "Dialogue missing actor", op))

    def _check_script(self, code: str, op: Op) -> None:
        try:
            compile_block(code)
        except (SyntaxError, ValueError) as e:
            self.errors.append(_format("ERROR", f"SCRIPT error: {e}", op))


def compile_story(source: str, source_filename: Optional[str] = None,
                  file_handler: Optional[IFileHandler] = None) -> Story:
    return Compiler(source, CompilerOptions(source_filename, file_handler)).compile()
