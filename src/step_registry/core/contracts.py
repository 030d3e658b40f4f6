"""Core contracts used across the registry.

This module defines the small dataclasses shared by the step table, the
hook table and the scenario runner. They are kept intentionally
lightweight so they can be logged or compared in tests with minimal effort.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol, Sequence


class TagPredicate(Protocol):
    def evaluate(self, values: Sequence[str]) -> bool:
        ...


@dataclass(frozen=True)
class SourceLocation:
    """File and line a definition was registered from."""

    file: str = "unknown"
    line: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


UNKNOWN_LOCATION = SourceLocation()


@dataclass(frozen=True)
class StepDefinition:
    """A compiled step pattern bound to its implementation.

    Attributes
    ----------
    pattern: The templated string or the regular expression source.
    location: Where the definition was registered.
    expression: ``CucumberExpression`` or ``RegularExpression``.
    implementation: Called as ``implementation(context, *args)``.
    """
    pattern: str
    location: SourceLocation
    expression: Any
    implementation: Callable[..., Any]

    @property
    def file(self) -> str:
        return self.location.file

    @property
    def line(self) -> int:
        return self.location.line

    def describe(self) -> str:
        return f"{self.pattern} - {self.location}"


@dataclass
class ParameterTypeDefinition:
    """Named conversion rule for ``{name}`` placeholders.

    ``use_for_snippets`` and ``prefer_for_regexp_match`` fall back to their
    defaults when given anything other than a bool. With ``use_context`` the
    transformer is called as ``transformer(context, *groups)``.
    """
    name: str
    regexp: Any
    transformer: Optional[Callable[..., Any]] = None
    use_for_snippets: Any = True
    prefer_for_regexp_match: Any = False
    type: Any = object
    use_context: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.use_for_snippets, bool):
            self.use_for_snippets = True
        if not isinstance(self.prefer_for_regexp_match, bool):
            self.prefer_for_regexp_match = False


@dataclass(frozen=True)
class HookOptions:
    tags: Optional[str] = None


class _Always:
    """Tag predicate that accepts every tag set."""

    def evaluate(self, values: Sequence[str]) -> bool:
        return True

    def __repr__(self) -> str:
        return "ALWAYS"


ALWAYS: TagPredicate = _Always()


@dataclass(frozen=True)
class Hook:
    predicate: TagPredicate
    implementation: Callable[..., Any]
    tags: Optional[str] = None

    def applies_to(self, tags: Sequence[str]) -> bool:
        return bool(self.predicate.evaluate(list(tags)))


@dataclass
class StepLog:
    """Structured record of one step executed by the runner."""
    text: str
    status: str
    message: str = ""
    started_at: str = ""
    finished_at: str = ""


@dataclass
class ScenarioLog:
    """Outcome of a scenario: overall status plus one entry per step.

    ``messages`` collects hook failures, which have no step entry.
    """
    name: str
    tags: List[str]
    status: str
    steps: List[StepLog] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "passed"


class Context:
    """Attribute bag handed to steps and hooks of one scenario."""

    def __init__(self, **attrs: Any) -> None:
        self.__dict__.update(attrs)

    def __repr__(self) -> str:
        return f"Context({self.__dict__!r})"
