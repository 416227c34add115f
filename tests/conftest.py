"""Pytest fixtures for the hash harness and response fixture collection."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from acvp_hash.capabilities import CapabilityRegistry
from acvp_hash.config import HarnessConfig
from acvp_hash.crypto.hashlib_module import HashlibModule, default_registry
from acvp_hash.runner import HashHarness
from acvp_hash.state import HashTestCase
from acvp_hash.types import HashAlgorithm

_RESPONSES: dict[str, list[Any]] = {}


class CountingModule:
    """Hashlib module that records every call it receives."""

    def __init__(self, fail_on_call: Optional[int] = None) -> None:
        self.inner = HashlibModule()
        self.calls = 0
        self.xof_lens: list[int] = []
        self.msg_lens: list[int] = []
        self.fail_on_call = fail_on_call
        self.last_state: Optional[HashTestCase] = None

    def compute(self, tc: HashTestCase) -> bool:
        self.calls += 1
        self.xof_lens.append(tc.xof_len)
        self.msg_lens.append(tc.msg_len)
        # Kept only so tests can inspect the state after release.
        self.last_state = tc
        if self.fail_on_call is not None and self.calls >= self.fail_on_call:
            return False
        return self.inner.compute(tc)


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--output",
        action="store",
        default=None,
        help="Output directory for generated response fixtures",
    )


@pytest.fixture
def registry() -> CapabilityRegistry:
    return default_registry()


@pytest.fixture
def harness(registry: CapabilityRegistry) -> HashHarness:
    """Harness with shortened MCT outer loops."""
    return HashHarness(registry, HarnessConfig(mct_outer=3, mct_inner=1000))


@pytest.fixture
def counting_harness() -> Callable[..., tuple[HashHarness, CountingModule]]:
    """Build a harness whose only capability is a CountingModule."""

    def _counting_harness(
        algorithm: HashAlgorithm,
        mct_outer: int = 1,
        mct_inner: int = 1000,
        fail_on_call: Optional[int] = None,
    ) -> tuple[HashHarness, CountingModule]:
        module = CountingModule(fail_on_call=fail_on_call)
        reg = CapabilityRegistry()
        reg.register(algorithm, module)
        return HashHarness(reg, HarnessConfig(mct_outer=mct_outer, mct_inner=mct_inner)), module

    return _counting_harness


@pytest.fixture
def response_fixture() -> Callable[[str, Any], None]:
    """Collect a response document under a specific fixture path."""

    def _response_fixture(rel_path: str, response: Any) -> None:
        _RESPONSES.setdefault(rel_path, []).append(response)

    return _response_fixture


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    output_dir = session.config.getoption("--output")
    if not output_dir:
        return

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    for rel_path, responses in _RESPONSES.items():
        if not responses:
            continue
        target = out / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps({"responses": responses}, indent=2))
