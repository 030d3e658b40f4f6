"""Catalog of parameter types available to templated step patterns.

The catalog wraps a :class:`cucumber_expressions.parameter_type_registry.ParameterTypeRegistry`.
Every expression compiled after :meth:`ParameterTypeCatalog.define` can use
the new ``{name}`` placeholder; expressions compiled before it cannot.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Dict, Iterator, List, Mapping, Union

from cucumber_expressions.errors import CucumberExpressionError
from cucumber_expressions.parameter_type import ParameterType
from cucumber_expressions.parameter_type_registry import ParameterTypeRegistry

from .contracts import ParameterTypeDefinition
from .errors import DuplicateParameterTypeError, InvalidArgumentError

logger = logging.getLogger(__name__)

_CURRENT_CONTEXT: ContextVar[Any] = ContextVar("step_registry_context")


@contextmanager
def bound_context(context: Any) -> Iterator[Any]:
    """Expose ``context`` to context-aware transformers for the block."""
    token = _CURRENT_CONTEXT.set(context)
    try:
        yield context
    finally:
        _CURRENT_CONTEXT.reset(token)


def _captured_text(*groups: Any) -> Any:
    return groups[0] if len(groups) == 1 else list(groups)


def _with_context(transformer: Callable[..., Any]) -> Callable[..., Any]:
    def transform(*groups: Any) -> Any:
        return transformer(_CURRENT_CONTEXT.get(None), *groups)

    return transform


class ParameterTypeCatalog:
    def __init__(self) -> None:
        self.registry = ParameterTypeRegistry()
        self._definitions: Dict[str, ParameterTypeDefinition] = {}

    def define(
        self, definition: Union[ParameterTypeDefinition, Mapping[str, Any]]
    ) -> ParameterTypeDefinition:
        """Register ``definition`` and return the normalised record.

        Raises
        ------
        DuplicateParameterTypeError
            If the name is already known, built-in types included.
        """
        if isinstance(definition, Mapping):
            try:
                definition = ParameterTypeDefinition(**definition)
            except TypeError as exc:
                raise InvalidArgumentError(f"Invalid parameter type definition: {exc}") from exc
        if not isinstance(definition.name, str):
            raise InvalidArgumentError("Parameter type name must be a string")
        if self.registry.lookup_by_type_name(definition.name) is not None:
            raise DuplicateParameterTypeError(definition.name)

        transformer = definition.transformer or _captured_text
        if definition.transformer is not None and definition.use_context:
            transformer = _with_context(transformer)

        try:
            self.registry.define_parameter_type(
                ParameterType(
                    definition.name,
                    definition.regexp,
                    definition.type,
                    transformer,
                    definition.use_for_snippets,
                    definition.prefer_for_regexp_match,
                )
            )
        except CucumberExpressionError as exc:
            raise InvalidArgumentError(f"Invalid parameter type {definition.name!r}: {exc}") from exc
        self._definitions[definition.name] = definition
        logger.debug("Defined parameter type {%s}", definition.name)
        return definition

    def get(self, name: str) -> ParameterTypeDefinition:
        try:
            return self._definitions[name]
        except KeyError as e:
            raise KeyError(
                f"Parameter type '{name}' is not defined. "
                f"Defined types: {', '.join(self._definitions) or '(none)'}"
            ) from e

    def names(self) -> List[str]:
        return list(self._definitions)

    def __contains__(self, name: object) -> bool:
        return self.registry.lookup_by_type_name(name) is not None
