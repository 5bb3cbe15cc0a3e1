"""Pipeline stages.

A stage is a single transformation step: it takes the current text and the
environment's SharedMemory and returns new text. Stages may read and write
shared memory but hold no per-call state of their own, so an agent can run
its pipeline round after round without resetting anything.

Built-in variants cover the simple preprocessing/reasoning/postprocessing
steps (lowercase, keyword rules, echo prefix). Any callable can be used via
``FunctionStage``.
"""

from __future__ import annotations

import inspect
from typing import Callable, Dict, Mapping, Optional, Protocol, Union, runtime_checkable

from .errors import InvalidArgumentError
from .memory import SharedMemory
from .schemas import StageSpec


@runtime_checkable
class Stage(Protocol):
    """Protocol for pipeline stages.

    Only ``process`` is required. A ``name`` attribute, when present, is used
    in error reports; otherwise the class name is.
    """

    def process(self, text: str, memory: SharedMemory) -> str:
        """Transform ``text``; may read/write ``memory`` as a side effect."""
        ...


class FunctionStage:
    """Adapt a plain callable into a stage.

    Accepts ``func(text)`` or ``func(text, memory)``.
    """

    def __init__(self, func: Callable[..., str], name: Optional[str] = None):
        if not callable(func):
            raise InvalidArgumentError(f"FunctionStage needs a callable, got {func!r}")
        self.func = func
        self.name = name or getattr(func, "__name__", type(func).__name__)
        self._takes_memory = self._accepts_memory(func)

    @staticmethod
    def _accepts_memory(func: Callable[..., str]) -> bool:
        try:
            params = inspect.signature(func).parameters.values()
        except (TypeError, ValueError):  # builtins without signatures
            return False
        required = 0
        for param in params:
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                return True
            if (
                param.kind
                in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
                and param.default is inspect.Parameter.empty
            ):
                required += 1
        return required >= 2

    def process(self, text: str, memory: SharedMemory) -> str:
        if self._takes_memory:
            return self.func(text, memory)
        return self.func(text)

    def __repr__(self) -> str:
        return f"FunctionStage({self.name})"


class LowercaseStage:
    """Preprocessing: lower-case the input."""

    name = "lowercase"

    def process(self, text: str, memory: SharedMemory) -> str:
        return text.lower()


class KeywordStage:
    """Reasoning: answer with the response of the first matching keyword rule.

    Rules are checked in the order they were first added; re-adding a keyword
    replaces its response but keeps its position. Keywords are stored
    lower-cased and matched as substrings, so put a LowercaseStage in front
    for case-insensitive matching.
    """

    name = "keyword"

    def __init__(self, rules: Optional[Mapping[str, str]] = None, default: str = "No action"):
        self.default = default
        self._rules: Dict[str, str] = {}
        for keyword, response in (rules or {}).items():
            self.add_rule(keyword, response)

    def add_rule(self, keyword: str, response: str) -> None:
        if not keyword:
            raise InvalidArgumentError("Keyword rules need a non-empty keyword")
        self._rules[keyword.lower()] = response

    @property
    def rules(self) -> Dict[str, str]:
        return dict(self._rules)

    def process(self, text: str, memory: SharedMemory) -> str:
        for keyword, response in self._rules.items():
            if keyword in text:
                return response
        return self.default


class EchoStage:
    """Postprocessing: prefix the input."""

    name = "echo"

    def __init__(self, prefix: str = "Agent says: "):
        self.prefix = prefix

    def process(self, text: str, memory: SharedMemory) -> str:
        return f"{self.prefix}{text}"


StageLike = Union[Stage, Callable[..., str]]


def as_stage(stage: StageLike) -> Stage:
    """Return ``stage`` unchanged if it already is a stage, else wrap the callable."""
    if callable(getattr(stage, "process", None)):
        return stage
    if callable(stage):
        return FunctionStage(stage)
    raise InvalidArgumentError(f"Not a stage or callable: {stage!r}")


def build_stage(spec: StageSpec) -> Stage:
    """Construct a built-in stage from its declarative spec."""
    if spec.type == "lowercase":
        return LowercaseStage()
    if spec.type == "keyword":
        if spec.default is None:
            return KeywordStage(spec.rules)
        return KeywordStage(spec.rules, default=spec.default)
    if spec.type == "echo":
        if spec.prefix is None:
            return EchoStage()
        return EchoStage(prefix=spec.prefix)
    raise InvalidArgumentError(f"Unknown stage type '{spec.type}'")
