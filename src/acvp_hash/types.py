"""Core types for ACVP hash vector sets.

A vector set is parsed once into these frozen records and is read-only
afterwards. Mutable per-case working state lives in `acvp_hash.state`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class HashFamily(Enum):
    LEGACY = "legacy"  # SHA-1, SHA-2
    SHA3 = "sha3"
    SHAKE = "shake"


class HashAlgorithm(Enum):
    SHA1 = "SHA-1"
    SHA2_224 = "SHA2-224"
    SHA2_256 = "SHA2-256"
    SHA2_384 = "SHA2-384"
    SHA2_512 = "SHA2-512"
    SHA2_512_224 = "SHA2-512/224"
    SHA2_512_256 = "SHA2-512/256"
    SHA3_224 = "SHA3-224"
    SHA3_256 = "SHA3-256"
    SHA3_384 = "SHA3-384"
    SHA3_512 = "SHA3-512"
    SHAKE_128 = "SHAKE-128"
    SHAKE_256 = "SHAKE-256"

    @property
    def family(self) -> HashFamily:
        if self.value.startswith("SHAKE-"):
            return HashFamily.SHAKE
        if self.value.startswith("SHA3-"):
            return HashFamily.SHA3
        return HashFamily.LEGACY

    @property
    def is_xof(self) -> bool:
        return self.family is HashFamily.SHAKE

    @classmethod
    def lookup(cls, name: str) -> Optional["HashAlgorithm"]:
        for alg in cls:
            if alg.value == name:
                return alg
        return None


class TestType(Enum):
    __test__ = False  # not a pytest class

    AFT = "AFT"
    MCT = "MCT"
    VOT = "VOT"
    LDT = "LDT"


class MctVersion(Enum):
    STANDARD = "standard"
    ALTERNATE = "alternate"


class ExpansionMethod(Enum):
    REPEATING = "repeating"


@dataclass(frozen=True)
class LargeMessage:
    content_hex: str
    content_bit_len: int
    full_bit_len: int
    expansion: ExpansionMethod

    @property
    def full_byte_len(self) -> int:
        return self.full_bit_len // 8


@dataclass(frozen=True)
class TestCase:
    __test__ = False

    tc_id: int
    msg_hex: str
    msg_bit_len: int
    out_len: Optional[int] = None  # bits, SHAKE AFT/VOT
    large_msg: Optional[LargeMessage] = None  # LDT

    @property
    def msg_byte_len(self) -> int:
        return (self.msg_bit_len + 7) // 8


@dataclass(frozen=True)
class TestGroup:
    __test__ = False

    tg_id: int
    test_type: TestType
    tests: tuple[TestCase, ...] = field(default_factory=tuple)
    mct_version: Optional[MctVersion] = None
    min_out_len: Optional[int] = None  # bits, SHAKE MCT
    max_out_len: Optional[int] = None  # bits, SHAKE MCT


@dataclass(frozen=True)
class VectorSet:
    algorithm: HashAlgorithm
    groups: tuple[TestGroup, ...] = field(default_factory=tuple)
    vs_id: Optional[int] = None
    acv_version: Optional[str] = None  # set when the request used the ACVP envelope

    @property
    def family(self) -> HashFamily:
        return self.algorithm.family
