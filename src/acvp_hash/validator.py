"""Vector set validation: request document -> VectorSet."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional

from .capabilities import CapabilityRegistry
from .codec import hex_to_bin
from .config import (
    HASH_MD_BYTE_MAX,
    HASH_MSG_BYTE_MAX,
    SHAKE_MSG_BYTE_MAX,
    XOF_MD_BIT_MAX,
    XOF_MD_BIT_MIN,
)
from .errors import AcvpError, ErrorCode, err
from .types import (
    ExpansionMethod,
    HashAlgorithm,
    HashFamily,
    LargeMessage,
    MctVersion,
    TestCase,
    TestGroup,
    TestType,
    VectorSet,
)

logger = logging.getLogger(__name__)


def _malformed(message: str) -> AcvpError:
    logger.error(f"Server JSON {message}")
    return err(ErrorCode.MALFORMED_INPUT, message)


def _invalid(message: str) -> AcvpError:
    logger.error(f"Server JSON {message}")
    return err(ErrorCode.INVALID_ARGUMENT, message)


def _require(obj: Mapping[str, Any], key: str, where: str) -> Any:
    value = obj.get(key)
    if value is None:
        raise _malformed(f"{where}: missing '{key}'")
    return value


def _as_int(value: Any, key: str, where: str) -> int:
    if isinstance(value, bool):
        raise _invalid(f"{where}: '{key}' must be an integer")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise _invalid(f"{where}: '{key}' must be an integer")
    return value


def _as_str(value: Any, key: str, where: str) -> str:
    if not isinstance(value, str):
        raise _invalid(f"{where}: '{key}' must be a string")
    return value


def _as_mapping(value: Any, key: str, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise _malformed(f"{where}: '{key}' must be an object")
    return value


def unwrap_envelope(document: Any) -> tuple[Optional[str], Mapping[str, Any]]:
    """Split an ACVP `[{"acvVersion"}, {...}]` envelope from the vector set body."""
    if isinstance(document, Mapping):
        return None, document
    if isinstance(document, list) and len(document) == 2:
        header, body = document
        if isinstance(header, Mapping) and isinstance(body, Mapping):
            version = header.get("acvVersion")
            if version is None:
                raise _malformed("envelope: missing 'acvVersion'")
            return str(version), body
    raise _malformed("document must be a vector set object or an ACVP envelope")


def read_test_type(name: str) -> Optional[TestType]:
    try:
        return TestType(name)
    except ValueError:
        return None


def read_mct_version(name: str) -> Optional[MctVersion]:
    try:
        return MctVersion(name)
    except ValueError:
        return None


def read_expansion_method(name: Any) -> Optional[ExpansionMethod]:
    try:
        return ExpansionMethod(name)
    except ValueError:
        return None


def _check_test_type(algorithm: HashAlgorithm, test_type: TestType, where: str) -> None:
    family = algorithm.family
    if test_type is TestType.VOT and family is not HashFamily.SHAKE:
        raise _invalid(f"{where}: 'testType' == VOT, not valid for cipher '{algorithm.value}'")
    if test_type is TestType.LDT and family is not HashFamily.LEGACY:
        raise _invalid(f"{where}: 'testType' == LDT, not valid for cipher '{algorithm.value}'")


def _check_out_len(value: int, key: str, where: str) -> None:
    if not XOF_MD_BIT_MIN <= value <= XOF_MD_BIT_MAX:
        raise _invalid(
            f"{where}: invalid '{key}' ({value}), must be in "
            f"[{XOF_MD_BIT_MIN}, {XOF_MD_BIT_MAX}]"
        )


def max_message_bytes(algorithm: HashAlgorithm, test_type: TestType, version: Optional[MctVersion]) -> int:
    if algorithm.family is HashFamily.SHAKE:
        return SHAKE_MSG_BYTE_MAX
    if (
        test_type is TestType.MCT
        and algorithm.family is HashFamily.LEGACY
        and version is MctVersion.STANDARD
    ):
        return HASH_MD_BYTE_MAX
    return HASH_MSG_BYTE_MAX


def _parse_hex(value: Any, key: str, where: str, max_bytes: int) -> str:
    text = _as_str(value, key, where)
    if len(text) % 2:
        raise _invalid(f"{where}: '{key}' has odd hex length ({len(text)})")
    if len(text) // 2 > max_bytes:
        raise _invalid(f"{where}: '{key}' too long, max allowed=({max_bytes}) bytes")
    try:
        decoded = hex_to_bin(text, max_bytes)
    except AcvpError as exc:
        raise _invalid(f"{where}: '{key}' is not valid hex ({exc.message})") from exc
    if len(decoded) * 2 != len(text):
        raise _invalid(f"{where}: '{key}' contains whitespace")
    return text


def _parse_large_message(raw: Mapping[str, Any], where: str) -> LargeMessage:
    ldt = _as_mapping(_require(raw, "largeMsg", where), "largeMsg", where)
    content = _parse_hex(
        _require(ldt, "content", where), "content", where, HASH_MSG_BYTE_MAX
    )
    content_bits = _as_int(_require(ldt, "contentLength", where), "contentLength", where)
    if len(content) // 2 != content_bits // 8:
        raise _invalid(
            f"{where}: length of content ({len(content) // 2}) does not match "
            f"stated length ({content_bits // 8})"
        )
    full_bits = _as_int(_require(ldt, "fullLength", where), "fullLength", where)
    if full_bits < 0:
        raise _invalid(f"{where}: 'fullLength' must not be negative")
    expansion = read_expansion_method(ldt.get("expansionTechnique"))
    if expansion is not ExpansionMethod.REPEATING:
        raise _invalid(
            f"{where}: invalid LDT expansion technique "
            f"(only 'repeating' is allowed for Hash/SHA)"
        )
    return LargeMessage(
        content_hex=content,
        content_bit_len=content_bits,
        full_bit_len=full_bits,
        expansion=expansion,
    )


def parse_test_case(
    raw: Any, algorithm: HashAlgorithm, group: TestGroup
) -> TestCase:
    where = f"tgId {group.tg_id}"
    raw = _as_mapping(raw, "tests[]", where)
    tc_id = _as_int(_require(raw, "tcId", where), "tcId", where)
    where = f"tgId {group.tg_id} tcId {tc_id}"

    if group.test_type is TestType.LDT:
        large = _parse_large_message(raw, where)
        case = TestCase(
            tc_id=tc_id,
            msg_hex=large.content_hex,
            msg_bit_len=len(large.content_hex) * 4,
            large_msg=large,
        )
        logger.debug(f"{where}: msg={large.content_hex} fullLength={large.full_bit_len}")
        return case

    max_bytes = max_message_bytes(algorithm, group.test_type, group.mct_version)
    msg = _parse_hex(_require(raw, "msg", where), "msg", where, max_bytes)
    msg_bits = len(msg) * 4
    if raw.get("len") is not None:
        declared = _as_int(raw["len"], "len", where)
        if not 0 <= declared <= msg_bits:
            raise _invalid(f"{where}: 'len' ({declared}) is inconsistent with 'msg' ({msg_bits} bits)")
        msg_bits = declared

    out_len: Optional[int] = None
    if algorithm.family is HashFamily.SHAKE and group.test_type is not TestType.MCT:
        out_len = _as_int(_require(raw, "outLen", where), "outLen", where)
        _check_out_len(out_len, "outLen", where)

    logger.debug(
        f"{where}: len={msg_bits} msg={msg} testType={group.test_type.value}"
        + (f" outLen={out_len}" if out_len is not None else "")
    )
    return TestCase(tc_id=tc_id, msg_hex=msg, msg_bit_len=msg_bits, out_len=out_len)


def parse_test_group(raw: Any, algorithm: HashAlgorithm) -> TestGroup:
    raw = _as_mapping(raw, "testGroups[]", "vector set")
    tg_id = _as_int(_require(raw, "tgId", "test group"), "tgId", "test group")
    where = f"tgId {tg_id}"

    test_type_str = _as_str(_require(raw, "testType", where), "testType", where)
    test_type = read_test_type(test_type_str)
    if test_type is None:
        raise _invalid(f"{where}: invalid 'testType' ({test_type_str})")
    _check_test_type(algorithm, test_type, where)

    mct_version: Optional[MctVersion] = None
    min_out_len: Optional[int] = None
    max_out_len: Optional[int] = None
    if test_type is TestType.MCT:
        if algorithm.family is HashFamily.SHAKE:
            min_out_len = _as_int(_require(raw, "minOutLen", where), "minOutLen", where)
            max_out_len = _as_int(_require(raw, "maxOutLen", where), "maxOutLen", where)
            _check_out_len(min_out_len, "minOutLen", where)
            _check_out_len(max_out_len, "maxOutLen", where)
            if min_out_len > max_out_len:
                raise _invalid(f"{where}: 'minOutLen' ({min_out_len}) > 'maxOutLen' ({max_out_len})")
        elif algorithm.family is HashFamily.LEGACY or raw.get("mctVersion") is not None:
            version_str = _as_str(_require(raw, "mctVersion", where), "mctVersion", where)
            mct_version = read_mct_version(version_str)
            if mct_version is None:
                raise _invalid(f"{where}: invalid 'mctVersion' ({version_str})")
        else:
            mct_version = MctVersion.STANDARD

    tests = _require(raw, "tests", where)
    if not isinstance(tests, list):
        raise _malformed(f"{where}: 'tests' must be an array")

    group = TestGroup(
        tg_id=tg_id,
        test_type=test_type,
        mct_version=mct_version,
        min_out_len=min_out_len,
        max_out_len=max_out_len,
    )
    logger.debug(f"Test group {tg_id}: testType={test_type.value} tests={len(tests)}")
    cases = tuple(parse_test_case(item, algorithm, group) for item in tests)
    return replace(group, tests=cases)


def parse_vector_set(document: Any, registry: CapabilityRegistry) -> VectorSet:
    """Validate a hash request document and build its VectorSet."""
    acv_version, body = unwrap_envelope(document)

    alg_str = body.get("algorithm")
    if not alg_str:
        raise _malformed("unable to parse 'algorithm'")
    algorithm, _ = registry.resolve(_as_str(alg_str, "algorithm", "vector set"))

    groups = _require(body, "testGroups", "vector set")
    if not isinstance(groups, list):
        raise _malformed("'testGroups' must be an array")

    vs_id = body.get("vsId")
    return VectorSet(
        algorithm=algorithm,
        groups=tuple(parse_test_group(g, algorithm) for g in groups),
        vs_id=_as_int(vs_id, "vsId", "vector set") if vs_id is not None else None,
        acv_version=acv_version,
    )
