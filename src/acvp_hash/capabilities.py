"""Module-under-test contract and capability registration.

A hash module is registered per algorithm. The harness only ever talks to the
`HashModule` protocol, never to a concrete hash implementation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Protocol

from .errors import ErrorCode, err
from .types import HashAlgorithm

if TYPE_CHECKING:
    from .state import HashTestCase

logger = logging.getLogger(__name__)


class HashModule(Protocol):
    """Hash module under test.

    `compute` reads the message (or rolling buffers) and requested output
    length from `tc`, writes the digest into `tc.md` and returns True on
    success. It must not keep a reference to `tc` after returning.
    """

    def compute(self, tc: "HashTestCase") -> bool: ...


class CapabilityRegistry:
    """Maps ACVP algorithm names to the module that implements them."""

    def __init__(self) -> None:
        self._modules: Dict[HashAlgorithm, HashModule] = {}

    def register(self, algorithm: HashAlgorithm, module: HashModule) -> None:
        self._modules[algorithm] = module
        logger.debug(f"Registered capability {algorithm.value}")

    def register_all(self, algorithms: Iterable[HashAlgorithm], module: HashModule) -> None:
        for algorithm in algorithms:
            self.register(algorithm, module)

    def get(self, algorithm: HashAlgorithm) -> Optional[HashModule]:
        return self._modules.get(algorithm)

    def resolve(self, name: str) -> tuple[HashAlgorithm, HashModule]:
        """Look up the algorithm named by a vector set and its module."""
        algorithm = HashAlgorithm.lookup(name)
        if algorithm is None:
            logger.error(f"Unsupported algorithm ({name})")
            raise err(ErrorCode.UNSUPPORTED_OPERATION, f"unsupported algorithm '{name}'")
        module = self._modules.get(algorithm)
        if module is None:
            logger.error(f"No registered capability for {name}")
            raise err(
                ErrorCode.UNSUPPORTED_OPERATION,
                f"requested capability '{name}' is not registered",
            )
        return algorithm, module


def invoke_module(module: HashModule, tc: "HashTestCase") -> None:
    """Run one digest computation, raising CRYPTO_MODULE_FAILURE on failure."""
    try:
        ok = module.compute(tc)
    except Exception as exc:
        logger.error(f"Crypto module raised during tcId {tc.tc_id}: {exc}")
        raise err(ErrorCode.CRYPTO_MODULE_FAILURE, f"tcId {tc.tc_id}: {exc}") from exc
    if not ok:
        logger.error("Crypto module failed the operation")
        raise err(ErrorCode.CRYPTO_MODULE_FAILURE, f"tcId {tc.tc_id}: crypto module failed the operation")
