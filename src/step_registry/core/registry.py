"""Registry of step definitions, parameter types and lifecycle hooks.

Registration happens once during a load phase, before any scenario runs.
At run time :meth:`Registry.run` resolves a literal step line to exactly one
definition and calls it, while :meth:`Registry.run_before_hooks` and
:meth:`Registry.run_after_hooks` call the hooks whose tag expression matches
the scenario's tags. The registry never catches errors raised by step or hook
implementations.

There is no module-level instance: construct one :class:`Registry` and pass
it to the step modules and to the runner.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import re
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union

from cucumber_expressions.errors import CucumberExpressionError, UndefinedParameterTypeError
from cucumber_expressions.expression import CucumberExpression
from cucumber_expressions.regular_expression import RegularExpression

from .contracts import Hook, ParameterTypeDefinition, SourceLocation, StepDefinition
from .errors import AmbiguousStepError, InvalidStepPatternError, UndefinedStepError
from .hooks import HookArgument, HookTable, parse_hook_arguments
from .location import LocationProvider, caller_location
from .parameter_types import ParameterTypeCatalog, bound_context

logger = logging.getLogger(__name__)

Pattern = Union[str, "re.Pattern[str]"]
Implementation = Callable[..., Any]


_INLINE_FLAGS = (
    (re.IGNORECASE, "i"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
    (re.VERBOSE, "x"),
    (re.ASCII, "a"),
)


def _regexp_source(pattern: "re.Pattern[str]") -> str:
    """Source for ``RegularExpression``, which recompiles from text.

    Flags become an inline group, and a pattern not anchored with ``^`` or
    ``\\A`` may match anywhere in the line.
    """
    source = pattern.pattern
    if not source.startswith(("^", "\\A")):
        source = "(?s:.*?)" + source
    flags = "".join(letter for flag, letter in _INLINE_FLAGS if pattern.flags & flag)
    return f"(?{flags}){source}" if flags else source


def _complete(result: Any) -> None:
    # Coroutine implementations finish before the next step or hook starts.
    if inspect.iscoroutine(result):
        asyncio.run(result)


class Registry:
    def __init__(self, location_provider: LocationProvider = caller_location) -> None:
        self.parameter_types = ParameterTypeCatalog()
        self.hooks = HookTable()
        self._steps: List[StepDefinition] = []
        self._location_provider = location_provider

    # Registration -------------------------------------------------------

    def define_parameter_type(
        self,
        definition: Union[ParameterTypeDefinition, Mapping[str, Any], None] = None,
        **fields: Any,
    ) -> ParameterTypeDefinition:
        """Make ``{name}`` available to every pattern registered afterwards.

        Accepts a :class:`ParameterTypeDefinition`, a mapping, or keyword
        fields (``name``, ``regexp``, ``transformer``, ``use_for_snippets``,
        ``prefer_for_regexp_match``, ``type``, ``use_context``).
        """
        return self.parameter_types.define(definition if definition is not None else fields)

    def _compile(self, pattern: Pattern) -> Tuple[str, Any]:
        try:
            if isinstance(pattern, str):
                return pattern, CucumberExpression(pattern, self.parameter_types.registry)
            if isinstance(pattern, re.Pattern):
                return pattern.pattern, RegularExpression(
                    _regexp_source(pattern), self.parameter_types.registry
                )
        except (CucumberExpressionError, UndefinedParameterTypeError) as exc:
            raise InvalidStepPatternError(f"Cannot compile step pattern {pattern!r}: {exc}") from exc
        raise InvalidStepPatternError(
            f"Unexpected argument for step definition: {pattern!r} "
            "(expected a string or a compiled regular expression)"
        )

    def define_step(
        self,
        pattern: Pattern,
        implementation: Optional[Implementation] = None,
        *,
        location: Optional[SourceLocation] = None,
    ) -> Any:
        """Register ``implementation`` for ``pattern``.

        Without ``implementation`` a decorator is returned, so both
        ``registry.given("...", fn)`` and ``@registry.given("...")`` work.
        The source location is captured here, before the decorator is
        applied, so it points at the decorated definition.
        """
        if location is None:
            location = self._location_provider()
        source, expression = self._compile(pattern)

        if implementation is None:
            def _wrap(fn: Implementation) -> Implementation:
                self._add_step(source, expression, fn, location)
                return fn

            return _wrap

        self._add_step(source, expression, implementation, location)
        return implementation

    def _add_step(
        self, source: str, expression: Any, implementation: Any, location: SourceLocation
    ) -> StepDefinition:
        if not callable(implementation):
            raise InvalidStepPatternError(f"Step implementation for {source!r} is not callable")
        definition = StepDefinition(source, location, expression, implementation)
        self._steps.append(definition)
        logger.debug("Registered step %r at %s", source, location)
        return definition

    given = define_step
    when = define_step
    then = define_step

    def before(self, options_or_fn: HookArgument, fn: Optional[Implementation] = None) -> Hook:
        return self.hooks.add_before(parse_hook_arguments(options_or_fn, fn))

    def after(self, options_or_fn: HookArgument, fn: Optional[Implementation] = None) -> Hook:
        return self.hooks.add_after(parse_hook_arguments(options_or_fn, fn))

    define_before = before
    define_after = after

    @property
    def step_definitions(self) -> Tuple[StepDefinition, ...]:
        return tuple(self._steps)

    # Execution ----------------------------------------------------------

    def resolve(self, text: str) -> StepDefinition:
        """Return the single definition matching ``text``.

        Raises
        ------
        UndefinedStepError
            If no definition matches.
        AmbiguousStepError
            If more than one definition matches.
        """
        matching = [d for d in self._steps if d.expression.match(text) is not None]
        if not matching:
            raise UndefinedStepError(text)
        if len(matching) > 1:
            raise AmbiguousStepError(text, matching)
        logger.debug("Resolved %r to %s", text, matching[0].location)
        return matching[0]

    def arguments(self, definition: StepDefinition, context: Any, text: str) -> List[Any]:
        """Transformed capture values of ``text`` in pattern order."""
        with bound_context(context):
            return [argument.value for argument in definition.expression.match(text) or []]

    def run(self, context: Any, text: str, argument: Any = None) -> None:
        """Resolve ``text`` and call the implementation.

        The implementation receives ``context`` first, then one value per
        placeholder or capture group, then ``argument`` (a
        :class:`~step_registry.core.data_table.DataTable` or doc string) when
        it is not ``None``.
        """
        definition = self.resolve(text)
        args = self.arguments(definition, context, text)
        if argument is not None:
            args.append(argument)
        _complete(definition.implementation(context, *args))

    step = run

    def _run_hooks(self, hooks: Sequence[Hook], context: Any, tags: Sequence[str]) -> None:
        for hook in HookTable.matching(hooks, tags):
            _complete(hook.implementation(context))

    def run_before_hooks(self, context: Any, tags: Sequence[str]) -> None:
        self._run_hooks(self.hooks.before, context, tags)

    def run_after_hooks(self, context: Any, tags: Sequence[str]) -> None:
        self._run_hooks(self.hooks.after, context, tags)
