"""Response records for processed test cases."""

from __future__ import annotations

from typing import Any, Dict, List, Union

from .codec import bin_to_hex
from .config import HASH_MD_STR_MAX, XOF_MD_STR_MAX
from .state import HashTestCase
from .types import TestType, VectorSet


def md_str_capacity(tc: HashTestCase) -> int:
    if tc.cipher.is_xof or tc.test_type is TestType.VOT:
        return XOF_MD_STR_MAX
    return HASH_MD_STR_MAX


def md_record(tc: HashTestCase) -> Dict[str, Any]:
    """`md` (lowercase hex), plus `outLen` in bits for SHAKE ciphers."""
    record: Dict[str, Any] = {"md": bin_to_hex(tc.md.buf, md_str_capacity(tc))}
    if tc.cipher.is_xof:
        record["outLen"] = tc.md_len * 8
    return record


def case_response(tc_id: int) -> Dict[str, Any]:
    return {"tcId": tc_id}


def group_response(tg_id: int) -> Dict[str, Any]:
    return {"tgId": tg_id, "tests": []}


def vector_set_response(vector_set: VectorSet) -> Dict[str, Any]:
    body: Dict[str, Any] = {}
    if vector_set.vs_id is not None:
        body["vsId"] = vector_set.vs_id
    body["algorithm"] = vector_set.algorithm.value
    body["testGroups"] = []
    return body


def wrap_response(
    vector_set: VectorSet, body: Dict[str, Any]
) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
    """Mirror the request envelope: bare object or `[{"acvVersion"}, body]`."""
    if vector_set.acv_version is None:
        return body
    return [{"acvVersion": vector_set.acv_version}, body]
