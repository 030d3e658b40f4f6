"""Exceptions raised by the step registry."""

from __future__ import annotations

from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .contracts import StepDefinition


class StepRegistryError(Exception):
    """Base class for every error raised by the registry itself."""


class InvalidArgumentError(StepRegistryError):
    """Registration-time misuse of the registry API."""


class InvalidStepPatternError(InvalidArgumentError):
    pass


class InvalidHookArgumentsError(InvalidArgumentError):
    pass


class DuplicateParameterTypeError(InvalidArgumentError):
    def __init__(self, name: str) -> None:
        super().__init__(f"There is already a parameter type with name {name!r}")
        self.name = name


class UndefinedStepError(StepRegistryError):
    def __init__(self, text: str) -> None:
        super().__init__(f"Step implementation missing for: {text}")
        self.text = text


class AmbiguousStepError(StepRegistryError):
    """Raised when more than one definition matches a step line.

    The message lists every colliding definition as
    ``<pattern> - <file>:<line>`` so the author can disambiguate.
    """

    def __init__(self, text: str, definitions: Sequence["StepDefinition"]) -> None:
        lines = [f"Multiple matching step definitions for: {text}"]
        lines.extend(f" {definition.describe()}" for definition in definitions)
        super().__init__("\n".join(lines))
        self.text = text
        self.definitions = tuple(definitions)
