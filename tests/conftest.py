from __future__ import annotations

from collections.abc import Iterator

import pytest

from streamlet_testkit.config.models import HarnessSettings
from streamlet_testkit.testkit.harness import TestHarness
from streamlet_testkit.testkit.runtime import ExecutionRuntime, scoped_runtime

# Short timeouts keep failing tests fast; passing runs finish well inside them.
_SETTINGS = HarnessSettings(probe_timeout=2.0, run_timeout=10.0, workers=4)


@pytest.fixture(scope="session")
def runtime() -> Iterator[ExecutionRuntime]:
    # One runtime per test session, shut down once every test is done.
    with scoped_runtime(_SETTINGS, name="test-runtime") as rt:
        yield rt


@pytest.fixture
def settings() -> HarnessSettings:
    return _SETTINGS


@pytest.fixture
def harness(runtime: ExecutionRuntime, settings: HarnessSettings) -> Iterator[TestHarness]:
    with TestHarness(runtime, settings=settings) as h:
        yield h
