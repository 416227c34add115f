"""Hash vector set processing: validation, dispatch and response assembly."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Union

from .capabilities import CapabilityRegistry, HashModule, invoke_module
from .config import HarnessConfig
from .errors import ErrorCode, err
from .mct import legacy_mct, sha3_mct, shake_mct
from .results import case_response, group_response, md_record, vector_set_response, wrap_response
from .state import HashTestCase, case_scope
from .types import HashFamily, TestCase, TestGroup, TestType, VectorSet
from .validator import parse_vector_set

logger = logging.getLogger(__name__)

Handler = Callable[[HashModule, HashTestCase, TestGroup, HarnessConfig], Dict[str, Any]]


def run_single_shot(
    module: HashModule, tc: HashTestCase, group: TestGroup, config: HarnessConfig
) -> Dict[str, Any]:
    """AFT / VOT / LDT: one digest per test case."""
    invoke_module(module, tc)
    return md_record(tc)


def run_legacy_mct(
    module: HashModule, tc: HashTestCase, group: TestGroup, config: HarnessConfig
) -> Dict[str, Any]:
    return {"resultsArray": legacy_mct(module, tc, config.mct_outer, config.mct_inner)}


def run_sha3_mct(
    module: HashModule, tc: HashTestCase, group: TestGroup, config: HarnessConfig
) -> Dict[str, Any]:
    return {"resultsArray": sha3_mct(module, tc, config.mct_outer, config.mct_inner)}


def run_shake_mct(
    module: HashModule, tc: HashTestCase, group: TestGroup, config: HarnessConfig
) -> Dict[str, Any]:
    if group.min_out_len is None or group.max_out_len is None:
        raise err(ErrorCode.INTERNAL_ERROR, f"tgId {group.tg_id}: SHAKE MCT without output bounds")
    results = shake_mct(
        module,
        tc,
        group.min_out_len,
        group.max_out_len,
        config.mct_outer,
        config.mct_inner,
    )
    return {"resultsArray": results}


# Every (family, test type) pair the validator admits.
DISPATCH: Dict[tuple[HashFamily, TestType], Handler] = {
    (HashFamily.LEGACY, TestType.AFT): run_single_shot,
    (HashFamily.LEGACY, TestType.LDT): run_single_shot,
    (HashFamily.LEGACY, TestType.MCT): run_legacy_mct,
    (HashFamily.SHA3, TestType.AFT): run_single_shot,
    (HashFamily.SHA3, TestType.MCT): run_sha3_mct,
    (HashFamily.SHAKE, TestType.AFT): run_single_shot,
    (HashFamily.SHAKE, TestType.VOT): run_single_shot,
    (HashFamily.SHAKE, TestType.MCT): run_shake_mct,
}


def handler_for(family: HashFamily, test_type: TestType) -> Handler:
    handler = DISPATCH.get((family, test_type))
    if handler is None:
        raise err(
            ErrorCode.INTERNAL_ERROR,
            f"no handler for {family.value} {test_type.value}",
        )
    return handler


class HashHarness:
    """Runs ACVP hash vector sets against registered modules under test."""

    def __init__(self, registry: CapabilityRegistry, config: Optional[HarnessConfig] = None):
        self.registry = registry
        self.config = config or HarnessConfig()

    def run_test_case(
        self, vector_set: VectorSet, group: TestGroup, case: TestCase
    ) -> Dict[str, Any]:
        module = self.registry.get(vector_set.algorithm)
        if module is None:
            raise err(
                ErrorCode.UNSUPPORTED_OPERATION,
                f"requested capability '{vector_set.algorithm.value}' is not registered",
            )
        handler = handler_for(vector_set.family, group.test_type)

        response = case_response(case.tc_id)
        with case_scope(vector_set.algorithm, group, case) as tc:
            response.update(handler(module, tc, group, self.config))
        return response

    def run_vector_set(self, vector_set: VectorSet) -> Dict[str, Any]:
        body = vector_set_response(vector_set)
        for group in vector_set.groups:
            logger.debug(f"Test group {group.tg_id}: {group.test_type.value}")
            group_rsp = group_response(group.tg_id)
            for case in group.tests:
                group_rsp["tests"].append(self.run_test_case(vector_set, group, case))
            body["testGroups"].append(group_rsp)
        return body

    def process(self, document: Any) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        """Validate `document`, run every test case and return the response.

        Any AcvpError aborts the whole vector set; no partial response is
        produced.
        """
        start_time = time.time()
        vector_set = parse_vector_set(document, self.registry)
        body = self.run_vector_set(vector_set)
        logger.info(
            f"Processed {vector_set.algorithm.value} vector set"
            f" ({sum(len(g.tests) for g in vector_set.groups)} tests,"
            f" {(time.time() - start_time) * 1000:.1f} ms)"
        )
        return wrap_response(vector_set, body)
