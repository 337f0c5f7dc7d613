from __future__ import annotations

import json
import sys
from abc import ABC, abstractmethod
from typing import TextIO

from .types import VariableSnapshot


class IScenePresenter(ABC):
    """Where evaluation results end up (editor panel, console...)."""

    @abstractmethod
    def display(self, variables: VariableSnapshot) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    def display_error(self, message: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class ConsolePresenter(IScenePresenter):
    """Headless presenter: prints variables one per line, or as JSON."""

    def __init__(self, stream: TextIO | None = None, as_json: bool = False) -> None:
        self.stream = stream or sys.stdout
        self.as_json = as_json

    def display(self, variables: VariableSnapshot) -> None:
        if self.as_json:
            print(json.dumps(dict(variables), ensure_ascii=False, default=str), file=self.stream)
            return
        if not variables:
            print("No variables", file=self.stream)
            return
        for name, value in variables.items():
            shown = "null" if value is None else str(value)
            print(f"{name}: {shown}", file=self.stream)

    def display_error(self, message: str) -> None:
        print(f"[ERROR] {message}", file=self.stream)

    def clear(self) -> None:
        print("Move cursor to evaluate", file=self.stream)
