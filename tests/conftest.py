from __future__ import annotations

import pytest

from step_registry.core.contracts import Context
from step_registry.core.registry import Registry


@pytest.fixture
def registry():
    return Registry()


@pytest.fixture
def context():
    return Context(calls=[])
