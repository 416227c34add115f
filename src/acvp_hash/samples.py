"""Sample request vector sets for local runs and fixtures."""

from __future__ import annotations

from typing import Any, Dict, List

from .config import ACV_VERSION, SHAKE_MCT_MSG_BYTES
from .types import HashAlgorithm, HashFamily

SAMPLE_MESSAGES = [
    b"abc",
    b"",
    b"abcdbcdecdefdefgefghfghighijhijkijkljklmklmnlmnomnopnopq",
    bytes(range(0, 256)),
]

LDT_CONTENT = b"abcdefghbcdefghicdefghijdefghijkefghijklfghijklmghijklmn"
LDT_FULL_BYTES = 1 << 16

# Digest sizes in bytes, used as standard MCT seed length
DIGEST_BYTES = {
    HashAlgorithm.SHA1: 20,
    HashAlgorithm.SHA2_224: 28,
    HashAlgorithm.SHA2_256: 32,
    HashAlgorithm.SHA2_384: 48,
    HashAlgorithm.SHA2_512: 64,
    HashAlgorithm.SHA2_512_224: 28,
    HashAlgorithm.SHA2_512_256: 32,
    HashAlgorithm.SHA3_224: 28,
    HashAlgorithm.SHA3_256: 32,
    HashAlgorithm.SHA3_384: 48,
    HashAlgorithm.SHA3_512: 64,
    HashAlgorithm.SHAKE_128: 16,
    HashAlgorithm.SHAKE_256: 32,
}


def _msg_test(tc_id: int, msg: bytes) -> Dict[str, Any]:
    # ACVP sends the empty message as "00" with len 0
    return {"tcId": tc_id, "msg": msg.hex() or "00", "len": len(msg) * 8}


def _aft_group(tg_id: int, algorithm: HashAlgorithm, tc_id: int) -> Dict[str, Any]:
    tests = []
    for msg in SAMPLE_MESSAGES:
        test = _msg_test(tc_id, msg)
        if algorithm.family is HashFamily.SHAKE:
            test["outLen"] = DIGEST_BYTES[algorithm] * 8
        tests.append(test)
        tc_id += 1
    return {"tgId": tg_id, "testType": "AFT", "tests": tests}


def _mct_group(tg_id: int, algorithm: HashAlgorithm, tc_id: int) -> Dict[str, Any]:
    if algorithm.family is HashFamily.SHAKE:
        seed = bytes(range(SHAKE_MCT_MSG_BYTES))
    else:
        seed = bytes(range(DIGEST_BYTES[algorithm]))
    group: Dict[str, Any] = {
        "tgId": tg_id,
        "testType": "MCT",
        "tests": [_msg_test(tc_id, seed)],
    }
    if algorithm.family is HashFamily.SHAKE:
        group["minOutLen"] = 128
        group["maxOutLen"] = 1120
    else:
        group["mctVersion"] = "standard"
    return group


def _vot_group(tg_id: int, tc_id: int) -> Dict[str, Any]:
    tests = []
    for out_len in (16, 128, 1000, 4096):
        test = _msg_test(tc_id, b"abc")
        test["outLen"] = out_len
        tests.append(test)
        tc_id += 1
    return {"tgId": tg_id, "testType": "VOT", "tests": tests}


def _ldt_group(tg_id: int, tc_id: int) -> Dict[str, Any]:
    return {
        "tgId": tg_id,
        "testType": "LDT",
        "tests": [
            {
                "tcId": tc_id,
                "largeMsg": {
                    "content": LDT_CONTENT.hex(),
                    "contentLength": len(LDT_CONTENT) * 8,
                    "fullLength": LDT_FULL_BYTES * 8,
                    "expansionTechnique": "repeating",
                },
            }
        ],
    }


def sample_vector_set(algorithm: HashAlgorithm, vs_id: int = 0, envelope: bool = True) -> Any:
    """One AFT and one MCT group, plus VOT (SHAKE) or LDT (SHA-1/SHA-2)."""
    groups: List[Dict[str, Any]] = [
        _aft_group(1, algorithm, 1),
        _mct_group(2, algorithm, 100),
    ]
    if algorithm.family is HashFamily.SHAKE:
        groups.append(_vot_group(3, 200))
    elif algorithm.family is HashFamily.LEGACY:
        groups.append(_ldt_group(3, 200))

    body = {
        "vsId": vs_id,
        "algorithm": algorithm.value,
        "revision": "1.0",
        "isSample": True,
        "testGroups": groups,
    }
    if envelope:
        return [{"acvVersion": ACV_VERSION}, body]
    return body
