from __future__ import annotations

import logging
import re
import sys
from pathlib import Path

import pytest

from step_registry.core.contracts import SourceLocation
from step_registry.core.data_table import DataTable
from step_registry.core.errors import (
    AmbiguousStepError,
    InvalidArgumentError,
    InvalidStepPatternError,
    UndefinedStepError,
)
from step_registry.core.registry import Registry


def test_run_passes_typed_arguments_in_pattern_order(registry, context):
    registry.given(
        "I add {int} and {float} to {string}",
        lambda ctx, *args: ctx.calls.append(args),
    )

    registry.run(context, 'I add 5 and 2.5 to "total"')

    assert context.calls == [(5, 2.5, "total")]
    assert isinstance(context.calls[0][0], int)


def test_string_placeholder_extracts_unquoted_value(registry, context):
    registry.given("a {string} step", lambda ctx, value: ctx.calls.append(value))

    registry.run(context, 'a "foo" step')

    assert context.calls == ["foo"]


def test_context_is_first_argument(registry, context):
    def impl(ctx):
        ctx.seen = ctx

    registry.when("nothing happens", impl)
    registry.run(context, "nothing happens")

    assert context.seen is context


def test_regular_expression_pattern(registry, context):
    registry.then(re.compile(r"^I have ([a-z]+) in my basket$"), lambda ctx, fruit: ctx.calls.append(fruit))

    registry.run(context, "I have apples in my basket")

    assert context.calls == ["apples"]


def test_regular_expression_flags_are_honoured(registry, context):
    registry.then(re.compile(r"^i see (\w+)$", re.IGNORECASE), lambda ctx, thing: ctx.calls.append(thing))

    registry.run(context, "I SEE apples")

    assert context.calls == ["apples"]


def test_dotall_flag_reaches_the_matcher(registry, context):
    registry.then(re.compile(r"^note: (.+)$", re.DOTALL), lambda ctx, note: ctx.calls.append(note))

    registry.run(context, "note: two\nlines")

    assert context.calls == ["two\nlines"]


def test_unanchored_regular_expression_matches_anywhere(registry, context):
    registry.given(re.compile(r"([a-z]+) cukes"), lambda ctx, kind: ctx.calls.append(kind))

    registry.run(context, "I have green cukes")

    assert context.calls == ["green"]
    assert registry.step_definitions[0].pattern == "([a-z]+) cukes"


def test_unanchored_overlap_is_ambiguous(registry):
    registry.given(re.compile(r"cukes"), lambda ctx: None)
    registry.given("I have some cukes", lambda ctx: None)

    with pytest.raises(AmbiguousStepError):
        registry.resolve("I have some cukes")


def test_anchored_regular_expression_matches_from_the_start(registry):
    registry.given(re.compile(r"^cukes"), lambda ctx: None)

    with pytest.raises(UndefinedStepError):
        registry.resolve("I have some cukes")


def test_trailing_argument_is_appended_last(registry, context):
    table = DataTable([["name"], ["apple"]])
    registry.given("{int} items", lambda ctx, count, arg: ctx.calls.append((count, arg)))

    registry.run(context, "3 items", table)
    registry.run(context, "4 items", "doc string")

    assert context.calls == [(3, table), (4, "doc string")]


def test_empty_doc_string_is_still_passed(registry, context):
    registry.given("a note", lambda ctx, note: ctx.calls.append(note))

    registry.run(context, "a note", "")

    assert context.calls == [""]


def test_undefined_step(registry, context):
    registry.given("something else", lambda ctx: None)

    with pytest.raises(UndefinedStepError, match="Step implementation missing for: unknown step") as info:
        registry.run(context, "unknown step")

    assert info.value.text == "unknown step"


def test_ambiguous_step_lists_every_definition():
    registry = Registry(location_provider=lambda: SourceLocation("steps.py", 7))
    registry.given("a {string} step", lambda ctx, value: None)
    registry.when(re.compile(r'^a "(.*)" step$'), lambda ctx, value: None)
    registry.then("an unrelated step", lambda ctx: None)

    with pytest.raises(AmbiguousStepError) as info:
        registry.resolve('a "foo" step')

    assert str(info.value).splitlines() == [
        'Multiple matching step definitions for: a "foo" step',
        " a {string} step - steps.py:7",
        ' ^a "(.*)" step$ - steps.py:7',
    ]
    assert len(info.value.definitions) == 2


def test_ambiguous_step_is_not_invoked(registry, context):
    registry.given("a step", lambda ctx: ctx.calls.append("first"))
    registry.given("a step", lambda ctx: ctx.calls.append("second"))

    with pytest.raises(AmbiguousStepError):
        registry.run(context, "a step")

    assert context.calls == []


def test_resolve_returns_the_single_match(registry):
    registry.given("one", lambda ctx: None)
    registry.given("two", lambda ctx: None)

    definition = registry.resolve("two")

    assert definition.pattern == "two"
    assert definition is registry.step_definitions[1]


@pytest.mark.parametrize("pattern", [42, None, b"bytes", ["list"]])
def test_invalid_pattern(registry, pattern):
    with pytest.raises(InvalidStepPatternError):
        registry.given(pattern, lambda ctx: None)

    assert registry.step_definitions == ()


def test_non_callable_implementation(registry):
    with pytest.raises(InvalidArgumentError):
        registry.given("a step", "not callable")


def test_decorator_registration(registry, context):
    @registry.given("I have {int} cukes")
    def have_cukes(ctx, count):
        ctx.calls.append(count)

    registry.run(context, "I have 7 cukes")

    assert context.calls == [7]
    assert have_cukes.__name__ == "have_cukes"


def test_location_points_at_caller(registry):
    line = sys._getframe().f_lineno + 1
    registry.given("located step", lambda ctx: None)

    definition = registry.step_definitions[0]
    assert Path(definition.file).resolve() == Path(__file__).resolve()
    assert definition.line == line


def test_explicit_location_wins(registry):
    registry.given("located step", lambda ctx: None, location=SourceLocation("features/steps.py", 12))

    assert str(registry.step_definitions[0].location) == "features/steps.py:12"


def test_step_alias_lets_steps_call_steps(registry, context):
    registry.given("the inner step", lambda ctx: ctx.calls.append("inner"))
    registry.given("the outer step", lambda ctx: registry.step(ctx, "the inner step"))

    registry.run(context, "the outer step")

    assert context.calls == ["inner"]


def test_implementation_errors_propagate_unmodified(registry, context):
    error = AssertionError("boom")

    def failing(ctx):
        raise error

    registry.given("it fails", failing)

    with pytest.raises(AssertionError) as info:
        registry.run(context, "it fails")

    assert info.value is error


def test_coroutine_implementation_completes_before_run_returns(registry, context):
    async def slow(ctx, count):
        ctx.calls.append(count)

    registry.given("wait {int} ticks", slow)
    registry.run(context, "wait 3 ticks")

    assert context.calls == [3]


def test_registration_is_logged(registry, caplog):
    with caplog.at_level(logging.DEBUG, logger="step_registry"):
        registry.given("logged step", lambda ctx: None)

    assert "Registered step 'logged step'" in caplog.text
