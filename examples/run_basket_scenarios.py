#!/usr/bin/env python3
"""Example scenario run against a small set of basket steps."""

from __future__ import annotations

import re
import sys
from pathlib import Path

import yaml


REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(REPO_ROOT / "src"))

from step_registry.core.logging_utils import configure_logging  # noqa: E402
from step_registry.core.registry import Registry  # noqa: E402
from step_registry.runner import run_scenarios  # noqa: E402


def define_steps(registry: Registry) -> None:
    registry.define_parameter_type(
        name="fruit",
        regexp="apples?|pears?|plums?",
        transformer=lambda name: name.rstrip("s"),
    )

    registry.before(lambda ctx: setattr(ctx, "basket", []))
    registry.after({"tags": "@report"}, lambda ctx: print(f"  basket: {ctx.basket}"))

    @registry.given("I add {int} {fruit}")
    def add(ctx, count, fruit):
        ctx.basket.extend([fruit] * count)

    @registry.when("I add the following")
    def add_table(ctx, table):
        for row in table.hashes():
            ctx.basket.extend([row["fruit"]] * int(row["count"]))

    @registry.then(re.compile(r"^the basket holds (\d+) items?$"))
    def holds(ctx, count):
        assert len(ctx.basket) == int(count), f"expected {count}, got {len(ctx.basket)}"


def main() -> None:
    configure_logging("INFO")

    registry = Registry()
    define_steps(registry)

    plan = {
        "scenarios": [
            {
                "name": "single fruit",
                "tags": ["@report"],
                "steps": ["I add 2 apples", "the basket holds 2 items"],
            },
            {
                "name": "from a table",
                "steps": [
                    {"text": "I add the following", "table": [["fruit", "count"], ["pear", "1"], ["plum", "3"]]},
                    "the basket holds 5 items",
                ],
            },
            {
                "name": "miscounted",
                "steps": ["I add 1 pear", "the basket holds 3 items", "I add 1 plum"],
            },
        ]
    }

    config_dir = REPO_ROOT / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    plan_path = config_dir / "basket_scenarios.yaml"
    plan_path.write_text(yaml.safe_dump(plan, sort_keys=False), encoding="utf-8")

    for log in run_scenarios(registry, plan_path):
        print(f"{log.name}: {log.status}")
        for step in log.steps:
            print(f"  - {step.text}: {step.status} {step.message}".rstrip())
        for message in log.messages:
            print(f"  ! {message}")


if __name__ == "__main__":
    main()
