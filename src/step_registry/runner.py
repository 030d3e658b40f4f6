"""Simple in-process scenario runner.

The runner loads scenario plans, runs the matching before hooks, each step
and the matching after hooks through a :class:`~step_registry.core.registry.Registry`,
and returns a :class:`ScenarioLog` per scenario. The registry propagates every
failure; this module is the caller that turns them into log entries.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from .core.contracts import Context, ScenarioLog, StepLog
from .core.data_table import DataTable
from .core.errors import AmbiguousStepError, UndefinedStepError
from .core.logging_utils import now_ts
from .core.registry import Registry

logger = logging.getLogger(__name__)


def load_plan(cfg: str | Path | Mapping[str, Any]) -> Dict[str, Any]:
    """Load a scenario plan from ``cfg``.

    ``cfg`` may be a mapping already or a path/str to a YAML file. The YAML
    import is performed lazily, only when a file needs to be parsed.
    """

    if isinstance(cfg, Mapping):
        return dict(cfg)

    import yaml

    path = Path(cfg)
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, Mapping):
        raise ValueError(f"Scenario plan {path} must contain a mapping")
    return dict(data)


def _step_argument(item: Mapping[str, Any]) -> Any:
    if "table" in item and "doc_string" in item:
        raise ValueError(f"Step {item.get('text')!r} has both a table and a doc string")
    if "table" in item:
        return DataTable(item["table"])
    return item.get("doc_string")


def _status_for(exc: Exception) -> str:
    if isinstance(exc, UndefinedStepError):
        return "undefined"
    if isinstance(exc, AmbiguousStepError):
        return "ambiguous"
    return "failed"


def run_scenario(
    registry: Registry,
    scenario: Mapping[str, Any],
    context: Optional[Any] = None,
) -> ScenarioLog:
    """Run one scenario and return its log.

    A before hook failure skips every step; a step failure skips the
    remaining steps. After hooks run in all cases.
    """

    name = scenario.get("name", "")
    tags = list(scenario.get("tags", []))
    context = Context() if context is None else context
    log = ScenarioLog(name=name, tags=tags, status="passed")
    logger.info("Running scenario %r (tags: %s)", name, ", ".join(tags) or "none")

    failed = False
    try:
        registry.run_before_hooks(context, tags)
    except Exception as exc:
        failed = True
        log.messages.append(f"Before hook failed: {exc}")
        logger.warning("Before hook failed in %r: %s", name, exc)

    for item in scenario.get("steps", []):
        if isinstance(item, str):
            item = {"text": item}
        text = item["text"]
        if failed:
            log.steps.append(StepLog(text=text, status="skipped"))
            continue

        started = now_ts()
        try:
            registry.run(context, text, _step_argument(item))
        except Exception as exc:
            failed = True
            log.steps.append(StepLog(text, _status_for(exc), str(exc), started, now_ts()))
            logger.warning("Step %r %s: %s", text, _status_for(exc), exc)
        else:
            log.steps.append(StepLog(text, "passed", "", started, now_ts()))

    try:
        registry.run_after_hooks(context, tags)
    except Exception as exc:
        failed = True
        log.messages.append(f"After hook failed: {exc}")
        logger.warning("After hook failed in %r: %s", name, exc)

    if failed:
        log.status = "failed"
    logger.info("Scenario %r %s", name, log.status)
    return log


def run_scenarios(
    registry: Registry,
    cfg: str | Path | Mapping[str, Any],
    context_factory: Callable[[], Any] = Context,
) -> List[ScenarioLog]:
    """Execute every scenario of a plan, each with a fresh context.

    Parameters
    ----------
    cfg:
        Either a mapping or a path to a YAML file. A plan without a
        ``scenarios`` key is a single scenario.
    """

    plan = load_plan(cfg)
    scenarios = plan["scenarios"] if "scenarios" in plan else [plan]
    return [run_scenario(registry, scenario, context_factory()) for scenario in scenarios]


__all__ = ["load_plan", "run_scenario", "run_scenarios"]
