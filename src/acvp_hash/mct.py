"""Monte Carlo Test engines for the legacy, SHA-3 and SHAKE hash families.

Each engine drives the module under test through OUTER iterations of INNER
chained digests and returns one response record per outer iteration. Every
round depends on the previous digest, so the loops are strictly sequential.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from .buffers import BoundedBuffer
from .capabilities import HashModule, invoke_module
from .config import MCT_INNER, MCT_OUTER, SHAKE_MCT_MSG_BYTES
from .errors import AcvpError, ErrorCode, err
from .results import md_record
from .state import HashTestCase
from .types import MctVersion

logger = logging.getLogger(__name__)


def _transfer(dst: BoundedBuffer, data: bytes, what: str) -> None:
    try:
        dst.load(data)
    except AcvpError as exc:
        logger.error(f"Failed the MCT iteration changes ({what})")
        raise err(ErrorCode.INTERNAL_ERROR, f"MCT {what}: {exc.message}") from exc


def _fit(dst: BoundedBuffer, length: int, what: str) -> None:
    try:
        dst.fit(length)
    except AcvpError as exc:
        logger.error(f"Failed the MCT iteration changes ({what})")
        raise err(ErrorCode.INTERNAL_ERROR, f"MCT {what}: {exc.message}") from exc


# --- SHA-1 / SHA-2 ---


def _window(tc: HashTestCase) -> tuple[BoundedBuffer, BoundedBuffer, BoundedBuffer]:
    m1, m2, m3 = tc.m1, tc.m2, tc.m3
    if m1 is None or m2 is None or m3 is None:
        logger.error(f"tcId {tc.tc_id}: MCT rolling buffers missing")
        raise err(ErrorCode.INTERNAL_ERROR, f"tcId {tc.tc_id}: rolling buffers missing")
    return m1, m2, m3


def _seed_window(tc: HashTestCase, seed: bytes) -> None:
    # A = B = C = SEED
    for name, buf in zip(("m1", "m2", "m3"), _window(tc)):
        _transfer(buf, seed, f"seed {name}")


def _advance_window(tc: HashTestCase) -> None:
    # A = B, B = C, C = MD
    m1, m2, m3 = _window(tc)
    _transfer(m1, m2.value, "m1 <- m2")
    _transfer(m2, m3.value, "m2 <- m3")
    _transfer(m3, tc.md.value, "m3 <- md")


def legacy_mct(
    module: HashModule,
    tc: HashTestCase,
    outer: int = MCT_OUTER,
    inner: int = MCT_INNER,
) -> List[Dict[str, Any]]:
    """SHA-1 / SHA-2 Monte Carlo Test.

    The module builds MSG = m1 || m2 || m3 itself (see
    `HashTestCase.mct_message`); this engine only maintains the window.
    """
    results: List[Dict[str, Any]] = []
    seed = tc.msg.value

    for j in range(outer):
        _seed_window(tc, seed)
        for _ in range(inner):
            invoke_module(module, tc)
            _advance_window(tc)

        results.append(md_record(tc))
        logger.debug(f"tcId {tc.tc_id} MCT outer {j}: md_len={tc.md_len}")
        seed = tc.md.value

    return results


# --- SHA-3 ---


def _sha3_next_message(tc: HashTestCase, seed_len: int) -> None:
    md = tc.md.value
    tc.msg.clear()
    if tc.mct_version is MctVersion.ALTERNATE:
        # Truncate or zero-pad to the initial seed length
        _transfer(tc.msg, md[:seed_len], "msg <- md")
        _fit(tc.msg, seed_len, "msg fit")
    else:
        _transfer(tc.msg, md, "msg <- md")
    tc.msg_bit_len = tc.msg_len * 8


def sha3_mct(
    module: HashModule,
    tc: HashTestCase,
    outer: int = MCT_OUTER,
    inner: int = MCT_INNER,
) -> List[Dict[str, Any]]:
    """SHA-3 Monte Carlo Test.

    MD[i-1] becomes the message for round i. The message update after the
    last digest of an outer iteration seeds the next outer iteration.
    """
    results: List[Dict[str, Any]] = []
    seed_len = tc.msg_len

    for j in range(outer):
        for i in range(inner):
            if i:
                _sha3_next_message(tc, seed_len)
            tc.md.clear()
            invoke_module(module, tc)

        results.append(md_record(tc))
        logger.debug(f"tcId {tc.tc_id} MCT outer {j}: md_len={tc.md_len}")
        _sha3_next_message(tc, seed_len)

    return results


# --- SHAKE ---


def rightmost_output_bits(md: bytes) -> int:
    """Last two digest bytes as a big-endian unsigned 16-bit integer."""
    if len(md) < 2:
        raise err(
            ErrorCode.CRYPTO_MODULE_FAILURE,
            f"SHAKE digest of {len(md)} bytes is too short for output length selection",
        )
    return (md[-2] << 8) | md[-1]


def next_xof_len(md: bytes, min_xof_bytes: int, max_xof_bytes: int) -> int:
    """OutputLen = minOutBytes + (Rightmost_Output_bits mod Range)."""
    span = max_xof_bytes - min_xof_bytes + 1
    return min_xof_bytes + rightmost_output_bits(md) % span


def _shake_next_message(tc: HashTestCase) -> None:
    # Leftmost 128 bits of the previous digest
    md = tc.md.value
    tc.msg.clear()
    _transfer(tc.msg, md[:SHAKE_MCT_MSG_BYTES], "msg <- md")
    _fit(tc.msg, SHAKE_MCT_MSG_BYTES, "msg fit")
    tc.msg_bit_len = tc.msg_len * 8


def shake_mct(
    module: HashModule,
    tc: HashTestCase,
    min_out_len: int,
    max_out_len: int,
    outer: int = MCT_OUTER,
    inner: int = MCT_INNER,
) -> List[Dict[str, Any]]:
    """SHAKE Monte Carlo Test.

    `min_out_len` and `max_out_len` are in bits. Each record carries the digest
    and length of the last digest computed in its outer iteration.
    """
    results: List[Dict[str, Any]] = []
    min_xof_bytes = min_out_len // 8
    max_xof_bytes = max_out_len // 8

    tc.set_xof_len(max_out_len // 8)
    _fit(tc.msg, SHAKE_MCT_MSG_BYTES, "msg fit")
    tc.msg_bit_len = tc.msg_len * 8

    for j in range(outer):
        for i in range(inner):
            if i:
                _shake_next_message(tc)
            tc.md.clear()
            invoke_module(module, tc)
            tc.set_xof_len(next_xof_len(tc.md.value, min_xof_bytes, max_xof_bytes))

        results.append(md_record(tc))
        logger.debug(f"tcId {tc.tc_id} MCT outer {j}: outLen={tc.md_len * 8} next={tc.xof_bit_len}")
        _shake_next_message(tc)

    return results
