from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional


@dataclass(frozen=True)
class DebugMetadata:
    """Source span of the content the story executed last."""

    start_line_number: int
    end_line_number: int
    file_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "start": self.start_line_number,
            "end": self.end_line_number,
            "file": self.file_name,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["DebugMetadata"]:
        if not data:
            return None
        return cls(int(data["start"]), int(data["end"]), data.get("file"))


@dataclass(frozen=True)
class Choice:
    index: int
    text: str
    target: str
    source_line: Optional[int] = None


@dataclass(frozen=True)
class Value:
    """Boxed variable value handed out by VariablesState."""

    value: Any


def to_json_value(value: Any) -> Any:
    """Convert a SCRIPT-produced value to what a JSON round trip gives back.

    Iterables such as range() or tuples become lists, mapping keys become
    strings and anything else unknown becomes its str().
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, dict):
        return {str(k): to_json_value(v) for k, v in value.items()}
    try:
        return [to_json_value(v) for v in value]
    except TypeError:
        return str(value)


class StoryState:
    """Everything a story needs to resume: position, variables and flow state."""

    def __init__(self) -> None:
        self.ip = 0
        self.vars: Dict[str, Any] = {}
        self.call_stack: List[int] = []
        self.choices: List[Choice] = []
        self.choice_trace: List[int] = []
        self.ended = False
        self.debug: Optional[DebugMetadata] = None
        # conditional chain state for IF/ELSEIF/ELSE
        self.cond_active = False
        self.cond_taken = False
        # switch-case state
        self.switch_active = False
        self.switch_value: Any = None
        self.switch_matched = False

    def to_json(self) -> str:
        payload = {
            "ip": self.ip,
            "vars": self.vars,
            "call_stack": list(self.call_stack),
            "choices": [
                {"index": c.index, "text": c.text, "target": c.target, "line": c.source_line}
                for c in self.choices
            ],
            "choice_trace": list(self.choice_trace),
            "ended": self.ended,
            "debug": self.debug.to_dict() if self.debug else None,
            "cond": [self.cond_active, self.cond_taken],
            "switch": [self.switch_active, self.switch_value, self.switch_matched],
            "version": 1,
        }
        return json.dumps(payload, ensure_ascii=False)

    def load_json(self, blob: str) -> None:
        data = json.loads(blob)
        self.ip = int(data.get("ip", 0))
        self.vars = dict(data.get("vars") or {})
        self.call_stack = [int(x) for x in data.get("call_stack") or []]
        self.choices = [
            Choice(int(c["index"]), str(c.get("text", "")), str(c.get("target", "")), c.get("line"))
            for c in data.get("choices") or []
        ]
        self.choice_trace = [int(x) for x in data.get("choice_trace") or []]
        self.ended = bool(data.get("ended", False))
        self.debug = DebugMetadata.from_dict(data.get("debug"))
        self.cond_active, self.cond_taken = (bool(x) for x in data.get("cond") or [False, False])
        sw = data.get("switch") or [False, None, False]
        self.switch_active, self.switch_value, self.switch_matched = bool(sw[0]), sw[1], bool(sw[2])


class VariablesState:
    """Named-variable view over a story's live state.

    Reads go through the owning story so the view stays valid after
    ``StoryState.load_json`` replaces the underlying dict.
    """

    def __init__(self, get_state) -> None:
        self._get_state = get_state

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._get_state().vars.keys()))

    def __len__(self) -> int:
        return len(self._get_state().vars)

    def __contains__(self, name: object) -> bool:
        return name in self._get_state().vars

    def __getitem__(self, name: str) -> Any:
        return self._get_state().vars[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._get_state().vars[name] = value

    def get_variable_with_name(self, name: str) -> Value:
        vars = self._get_state().vars
        if name not in vars:
            raise KeyError(name)
        return Value(vars[name])
