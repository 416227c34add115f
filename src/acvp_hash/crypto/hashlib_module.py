"""Reference module under test backed by hashlib."""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Iterator

from ..capabilities import CapabilityRegistry
from ..config import LDT_CHUNK_BYTES
from ..state import HashTestCase
from ..types import ExpansionMethod, HashAlgorithm, HashFamily, TestType

logger = logging.getLogger(__name__)


HASHLIB_NAMES = {
    HashAlgorithm.SHA1: "sha1",
    HashAlgorithm.SHA2_224: "sha224",
    HashAlgorithm.SHA2_256: "sha256",
    HashAlgorithm.SHA2_384: "sha384",
    HashAlgorithm.SHA2_512: "sha512",
    HashAlgorithm.SHA2_512_224: "sha512_224",
    HashAlgorithm.SHA2_512_256: "sha512_256",
    HashAlgorithm.SHA3_224: "sha3_224",
    HashAlgorithm.SHA3_256: "sha3_256",
    HashAlgorithm.SHA3_384: "sha3_384",
    HashAlgorithm.SHA3_512: "sha3_512",
    HashAlgorithm.SHAKE_128: "shake_128",
    HashAlgorithm.SHAKE_256: "shake_256",
}


def repeating_expansion(content: bytes, full_len: int, chunk_size: int = LDT_CHUNK_BYTES) -> Iterator[bytes]:
    """Yield `content` repeated and cut to `full_len` bytes, in chunks."""
    if full_len and not content:
        raise ValueError("cannot expand an empty message")
    if not full_len:
        return
    reps = max(1, chunk_size // len(content))
    block = content * reps
    remaining = full_len
    while remaining >= len(block):
        yield block
        remaining -= len(block)
    if remaining:
        yield block[:remaining]


def _new_hasher(algorithm: HashAlgorithm) -> Any:
    return hashlib.new(HASHLIB_NAMES[algorithm])


class HashlibModule:
    """Implements every ACVP hash algorithm with the standard library.

    Only byte-aligned messages are supported; a bit-oriented message makes
    `compute` report failure.
    """

    def compute(self, tc: HashTestCase) -> bool:
        if tc.test_type is TestType.MCT and tc.cipher.family is HashFamily.LEGACY:
            message = tc.mct_message()
        elif tc.msg_bit_len % 8:
            logger.error(f"tcId {tc.tc_id}: {tc.msg_bit_len}-bit message is not byte aligned")
            return False
        else:
            message = tc.msg.value

        hasher = _new_hasher(tc.cipher)
        if tc.test_type is TestType.LDT:
            if tc.exp_method is not ExpansionMethod.REPEATING:
                logger.error(f"tcId {tc.tc_id}: unsupported expansion {tc.exp_method}")
                return False
            for chunk in repeating_expansion(message, tc.exp_len):
                hasher.update(chunk)
        else:
            hasher.update(message)

        if tc.cipher.is_xof:
            tc.md.load(hasher.digest(tc.xof_len))
        else:
            tc.md.load(hasher.digest())
        return True


def default_registry() -> CapabilityRegistry:
    """Registry with the hashlib module registered for every algorithm."""
    registry = CapabilityRegistry()
    registry.register_all(HashAlgorithm, HashlibModule())
    return registry
