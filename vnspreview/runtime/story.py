from __future__ import annotations

import logging
import re
from typing import Any, Callable, List, Optional

from ..script.errors import StoryRuntimeError
from ..script.model import Op, Program
from .expr import safe_eval
from .sandbox import safe_exec
from .state import Choice, DebugMetadata, StoryState, VariablesState, to_json_value

logger = logging.getLogger(__name__)

# Handler signature: (message, kind) where kind is "error" or "warning"
NoticeHandler = Callable[[str, str], None]

_PLACEHOLDER_RE = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")
_COND_COMMANDS = {"IF", "ELSEIF", "ELSE"}
_SWITCH_COMMANDS = {"SWITCH", "CASE", "DEFAULT", "ENDSWITCH"}


class Story:
    """Step-wise interpreter for a compiled VNS program.

    ``continue_()`` runs one unit of linear content: ops execute until a text
    line is emitted, control flow is diverted, a choice point is reached or
    the story ends. At a choice point ``can_continue`` is False and
    ``current_choices`` lists the options until ``choose_choice_index`` is
    called.
    """

    def __init__(self, program: Program, warnings: Optional[List[str]] = None) -> None:
        self.program = program
        self.warnings = list(warnings or [])
        self.state = StoryState()
        self.variables_state = VariablesState(lambda: self.state)
        # runtime notice channel; when unset, error notices raise
        self.on_error: Optional[NoticeHandler] = None
        self.current_text = ""
        self._settle()

    # --- public stepping API ---
    @property
    def can_continue(self) -> bool:
        st = self.state
        return not st.ended and not st.choices and st.ip < len(self.program.ops)

    @property
    def current_choices(self) -> List[Choice]:
        return list(self.state.choices)

    @property
    def current_debug_metadata(self) -> Optional[DebugMetadata]:
        return self.state.debug

    def continue_(self) -> str:
        if not self.can_continue:
            raise StoryRuntimeError("Can't continue - check can_continue before calling continue_")
        ops = self.program.ops
        st = self.state
        last: Optional[Op] = None
        text: Optional[str] = None
        diverted = False
        while st.ip < len(ops) and not st.ended:
            op = ops[st.ip]
            if op.kind == "choice":
                break
            last = op
            before = st.ip
            text = self._execute(op)
            st.ip += 1
            diverted = st.ip != before + 1
            if text is not None or diverted:
                break
        if last is not None:
            st.debug = _location(last)
        self.current_text = text or ""
        self._settle()
        return self.current_text

    def continue_maximally(self) -> str:
        lines = []
        while self.can_continue:
            line = self.continue_()
            if line:
                lines.append(line)
        return "\n".join(lines)

    def choose_choice_index(self, index: int) -> None:
        st = self.state
        choices = st.choices
        if not 0 <= index < len(choices):
            raise StoryRuntimeError(f"Choice out of range: {index} (have {len(choices)})")
        choice = choices[index]
        st.choices = []
        st.choice_trace.append(int(index))
        labels = self.program.labels
        if choice.target in labels:
            st.ip = labels[choice.target]
            st.debug = _location(self.program.ops[st.ip])
        else:
            self._notice(f"Unknown target label: {choice.target}", "warning", line=choice.source_line)
            st.ip = self._end_of_choice_block(st.ip)
            st.debug = None
        self._settle()

    # --- helpers ---
    def _settle(self) -> None:
        # Gather the options of a choice block the story is parked on
        st = self.state
        ops = self.program.ops
        if st.ended or st.choices or st.ip >= len(ops) or ops[st.ip].kind != "choice":
            return
        i = st.ip
        while i < len(ops) and ops[i].kind == "choice":
            p = ops[i].payload
            st.choices.append(Choice(len(st.choices), str(p.get("text", "")), str(p.get("target", "")), ops[i].line))
            i += 1

    def _end_of_choice_block(self, start: int) -> int:
        ops = self.program.ops
        i = start
        while i < len(ops) and ops[i].kind == "choice":
            i += 1
        return i

    def _notice(self, message: str, kind: str, line: Optional[int] = None, file: Optional[str] = None) -> None:
        if self.on_error is not None:
            self.on_error(message, kind)
            return
        if kind == "error":
            raise StoryRuntimeError(message, line, file=file)
        logger.warning("%s (line %s)", message, line)

    def _interp(self, txt: Any) -> str:
        if not isinstance(txt, str):
            return ""
        vars = self.state.vars

        def repl(m: re.Match[str]) -> str:
            return str(vars.get(m.group(1), m.group(0)))
        return _PLACEHOLDER_RE.sub(repl, txt)

    def _jump(self, target: str, op: Op) -> bool:
        labels = self.program.labels
        if target in labels:
            # step loop adds one after the op
            self.state.ip = labels[target] - 1
            return True
        self._notice(f"Unknown target label: {target}", "error", op.line, op.file)
        return False

    def _execute(self, op: Op) -> Optional[str]:
        st = self.state
        k = op.kind
        p = op.payload
        name = str(p.get("name", "")).upper() if k == "command" else ""
        # Conditional and switch chains end at the first unrelated op
        if name not in _COND_COMMANDS and name not in _SWITCH_COMMANDS:
            st.cond_active = False
            st.cond_taken = False
            st.switch_active = False
            st.switch_value = None
            st.switch_matched = False
        if k == "narration":
            return self._interp(p.get("text"))
        if k == "dialogue":
            who = p.get("alias") or p.get("actor") or "?"
            return f"{who}: {self._interp(p.get('text'))}"
        if k == "script":
            try:
                self._run_script(str(p.get("code") or ""))
            except Exception as e:
                self._notice(f"SCRIPT error: {e}", "error", op.line, op.file)
            return None
        if k == "command":
            self._execute_command(name, str(p.get("args") or ""), op)
        return None

    def _run_script(self, code: str) -> None:
        vars = self.state.vars
        try:
            safe_exec(code, vars)
        finally:
            # keep vars JSON-native so save/restore round-trips exactly
            for key, value in list(vars.items()):
                vars[key] = to_json_value(value)

    def _execute_command(self, name: str, args: str, op: Op) -> None:
        st = self.state
        line = op.line
        try:
            if name == "SET":
                left, right = args.split('=', 1)
                st.vars[left.strip()] = safe_eval(right, st.vars)
            elif name in ("IF", "ELSEIF"):
                if name == "ELSEIF" and (not st.cond_active or st.cond_taken):
                    return
                cond, target = args.split('->', 1)
                st.cond_active = True
                if name == "IF":
                    st.cond_taken = False
                if bool(safe_eval(cond, st.vars)):
                    st.cond_taken = self._jump(target.strip(), op)
            elif name == "ELSE":
                if not st.cond_active or st.cond_taken:
                    return
                target = args.split('->', 1)[1] if '->' in args else args
                st.cond_taken = self._jump(target.strip(), op)
            elif name == "SWITCH":
                st.switch_value = safe_eval(args, st.vars)
                st.switch_active = True
                st.switch_matched = False
            elif name == "CASE":
                if not st.switch_active or st.switch_matched:
                    return
                val_s, target = args.split('->', 1)
                if safe_eval(val_s, st.vars) == st.switch_value:
                    st.switch_matched = self._jump(target.strip(), op)
            elif name == "DEFAULT":
                if not st.switch_active or st.switch_matched:
                    return
                target = args.split('->', 1)[1] if '->' in args else args
                st.switch_matched = self._jump(target.strip(), op)
            elif name == "ENDSWITCH":
                st.switch_active = False
                st.switch_value = None
                st.switch_matched = False
            elif name == "GOTO":
                self._jump(args.strip(), op)
            elif name == "CALL":
                st.call_stack.append(st.ip)
                if not self._jump(args.strip(), op):
                    st.call_stack.pop()
            elif name == "RETURN":
                if not st.call_stack:
                    self._notice("RETURN with empty call stack", "warning", line, op.file)
                    return
                # resume at the op after the CALL
                st.ip = st.call_stack.pop()
            elif name == "SCRIPT":
                self._run_script(args)
            elif name == "END":
                st.ended = True
            else:
                # presentation commands (BG, BGM, SE, ...) carry no state here
                logger.debug("Ignoring command %s %s (line %s)", name, args, line)
        except StoryRuntimeError:
            raise
        except Exception as e:
            self._notice(f"{name} error: {e}", "error", line, op.file)


def _location(op: Op) -> Optional[DebugMetadata]:
    line = op.line
    if line is None:
        return None
    end = op.end_line or line
    return DebugMetadata(line, end, op.file)
