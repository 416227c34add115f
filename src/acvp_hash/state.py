"""Per test case working state handed to the module under test."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from .buffers import BoundedBuffer
from .codec import hex_to_bin
from .config import (
    HASH_MD_BYTE_MAX,
    HASH_MSG_BYTE_MAX,
    SHAKE_MSG_BYTE_MAX,
    XOF_MD_BYTE_MAX,
)
from .errors import ErrorCode, err
from .types import (
    ExpansionMethod,
    HashAlgorithm,
    HashFamily,
    MctVersion,
    TestCase,
    TestGroup,
    TestType,
)

logger = logging.getLogger(__name__)


def message_capacity(algorithm: HashAlgorithm) -> int:
    if algorithm.family is HashFamily.SHAKE:
        return SHAKE_MSG_BYTE_MAX
    return HASH_MSG_BYTE_MAX


def legacy_mct_capacity(version: Optional[MctVersion]) -> int:
    """Capacity of the digest and each rolling buffer for legacy MCT.

    Standard seeds are one digest long; alternate seeds may be any message
    length, so the rolling buffers need message capacity.
    """
    if version is MctVersion.ALTERNATE:
        return HASH_MSG_BYTE_MAX
    return HASH_MD_BYTE_MAX


def digest_capacity(
    algorithm: HashAlgorithm, test_type: TestType, version: Optional[MctVersion]
) -> int:
    if test_type is TestType.VOT or algorithm.family is HashFamily.SHAKE:
        return XOF_MD_BYTE_MAX
    if test_type is TestType.MCT and algorithm.family is HashFamily.LEGACY:
        return legacy_mct_capacity(version)
    return HASH_MD_BYTE_MAX


@dataclass
class HashTestCase:
    """Mutable buffers and parameters for one test case.

    Message and digest lengths are byte counts. `msg_bit_len` keeps the
    declared bit length for modules that hash bit-oriented messages.
    """

    tc_id: int
    cipher: HashAlgorithm
    test_type: TestType
    msg: BoundedBuffer
    md: BoundedBuffer
    msg_bit_len: int = 0
    mct_version: Optional[MctVersion] = None
    m1: Optional[BoundedBuffer] = None
    m2: Optional[BoundedBuffer] = None
    m3: Optional[BoundedBuffer] = None
    xof_len: int = 0  # bytes
    xof_bit_len: int = 0
    exp_len: int = 0  # LDT expanded message length, bytes
    exp_method: Optional[ExpansionMethod] = None
    released: bool = False

    @property
    def msg_len(self) -> int:
        return len(self.msg)

    @property
    def md_len(self) -> int:
        return len(self.md)

    def set_xof_len(self, nbytes: int) -> None:
        self.xof_len = nbytes
        self.xof_bit_len = nbytes * 8

    def mct_message(self) -> bytes:
        """Legacy MCT message: m1 || m2 || m3.

        For the alternate MCT version the concatenation is truncated or
        zero-padded to the length of the original seed message.
        """
        if self.m1 is None or self.m2 is None or self.m3 is None:
            raise err(ErrorCode.INTERNAL_ERROR, "rolling buffers are only set up for legacy MCT")
        out = BoundedBuffer(capacity=self.m1.capacity * 3)
        out.append(self.m1.buf)
        out.append(self.m2.buf)
        out.append(self.m3.buf)
        if self.mct_version is MctVersion.ALTERNATE:
            out.fit(self.msg_len)
        return out.value

    def release(self) -> None:
        """Zero every buffer and drop them."""
        for buf in (self.msg, self.md, self.m1, self.m2, self.m3):
            if buf is not None:
                buf.clear()
        self.m1 = self.m2 = self.m3 = None
        self.xof_len = self.xof_bit_len = self.exp_len = 0
        self.exp_method = None
        self.released = True


def init_test_case(algorithm: HashAlgorithm, group: TestGroup, case: TestCase) -> HashTestCase:
    """Allocate and populate the working state for one test case."""
    test_type = group.test_type
    version = group.mct_version if test_type is TestType.MCT else None
    try:
        tc = HashTestCase(
            tc_id=case.tc_id,
            cipher=algorithm,
            test_type=test_type,
            msg=BoundedBuffer(capacity=message_capacity(algorithm)),
            md=BoundedBuffer(capacity=digest_capacity(algorithm, test_type, version)),
            mct_version=version,
        )
    except MemoryError as exc:
        raise err(ErrorCode.ALLOCATION_FAILURE, f"tcId {case.tc_id}: buffer allocation failed") from exc

    if test_type is TestType.LDT:
        if case.large_msg is None:
            raise err(ErrorCode.INTERNAL_ERROR, f"tcId {case.tc_id}: LDT case without largeMsg")
        msg = hex_to_bin(case.large_msg.content_hex, tc.msg.capacity)
        tc.msg.load(msg)
        tc.msg_bit_len = case.large_msg.content_bit_len
        tc.exp_len = case.large_msg.full_byte_len
        tc.exp_method = case.large_msg.expansion
    else:
        msg = hex_to_bin(case.msg_hex, tc.msg.capacity)
        tc.msg.load(msg[: case.msg_byte_len])
        tc.msg_bit_len = case.msg_bit_len

    if algorithm.family is HashFamily.SHAKE and case.out_len is not None:
        tc.xof_len = (case.out_len + 7) // 8
        tc.xof_bit_len = case.out_len

    if test_type is TestType.MCT and algorithm.family is HashFamily.LEGACY:
        capacity = legacy_mct_capacity(version)
        try:
            tc.m1 = BoundedBuffer(capacity=capacity)
            tc.m2 = BoundedBuffer(capacity=capacity)
            tc.m3 = BoundedBuffer(capacity=capacity)
        except MemoryError as exc:
            raise err(ErrorCode.ALLOCATION_FAILURE, f"tcId {case.tc_id}: rolling buffer allocation failed") from exc
        for buf in (tc.m1, tc.m2, tc.m3):
            buf.copy_from(tc.msg)

    return tc


@contextmanager
def case_scope(
    algorithm: HashAlgorithm, group: TestGroup, case: TestCase
) -> Iterator[HashTestCase]:
    """Yield fresh working state and release it on every exit path."""
    tc = init_test_case(algorithm, group, case)
    try:
        yield tc
    finally:
        tc.release()
        logger.debug(f"Released state for tcId {case.tc_id}")

