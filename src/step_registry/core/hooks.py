"""Before/after hook registration and tag filtering."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from cucumber_tag_expressions import parse

from .contracts import ALWAYS, Hook, HookOptions, TagPredicate
from .errors import InvalidHookArgumentsError

logger = logging.getLogger(__name__)

HookArgument = Union[Callable[..., Any], Mapping[str, Any], HookOptions]

_OPTION_KEYS = {"tags"}


def _options(value: Union[Mapping[str, Any], HookOptions]) -> HookOptions:
    if isinstance(value, HookOptions):
        options = value
    else:
        unknown = set(value) - _OPTION_KEYS
        if unknown:
            raise InvalidHookArgumentsError(
                f"Unexpected hook options: {', '.join(sorted(map(str, unknown)))}"
            )
        options = HookOptions(tags=value.get("tags"))
    if options.tags is not None and not isinstance(options.tags, str):
        raise InvalidHookArgumentsError("Hook tags must be a tag expression string")
    return options


def compile_tags(tags: Optional[str]) -> TagPredicate:
    """Compile a tag expression once; empty or missing means always."""
    return parse(tags) if tags else ALWAYS


def parse_hook_arguments(options_or_fn: HookArgument, maybe_fn: Any = None) -> Hook:
    """Validate one of the two accepted call shapes and build a :class:`Hook`.

    ``(fn)`` registers an unconditional hook, ``(options, fn)`` a hook gated
    by ``options["tags"]``. Every other shape is rejected.
    """
    if callable(options_or_fn) and not isinstance(options_or_fn, HookOptions):
        if maybe_fn is not None:
            raise InvalidHookArgumentsError("Unexpected argument for hook")
        return Hook(predicate=ALWAYS, implementation=options_or_fn)

    if isinstance(options_or_fn, (Mapping, HookOptions)):
        if not callable(maybe_fn):
            raise InvalidHookArgumentsError("Unexpected argument for hook")
        options = _options(options_or_fn)
        return Hook(
            predicate=compile_tags(options.tags),
            implementation=maybe_fn,
            tags=options.tags,
        )

    raise InvalidHookArgumentsError("Unexpected argument for hook")


class HookTable:
    """Before and after hooks in registration order."""

    def __init__(self) -> None:
        self.before: List[Hook] = []
        self.after: List[Hook] = []

    def add_before(self, hook: Hook) -> Hook:
        self.before.append(hook)
        logger.debug("Registered before hook %r (tags=%s)", hook.implementation, hook.tags)
        return hook

    def add_after(self, hook: Hook) -> Hook:
        self.after.append(hook)
        logger.debug("Registered after hook %r (tags=%s)", hook.implementation, hook.tags)
        return hook

    @staticmethod
    def matching(hooks: Sequence[Hook], tags: Sequence[str]) -> List[Hook]:
        return [hook for hook in hooks if hook.applies_to(tags)]
