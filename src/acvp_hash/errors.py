"""ACVP hash harness error codes and exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ErrorCategory(IntEnum):
    SUCCESS = 0x00
    VALIDATION = 0x01
    CAPABILITY = 0x02
    RESOURCE = 0x03
    CRYPTO = 0x04
    INTERNAL = 0xFF


class ErrorCode(IntEnum):
    # Success
    SUCCESS = 0x0000

    # Validation
    MALFORMED_INPUT = 0x0100
    INVALID_ARGUMENT = 0x0101

    # Capability
    UNSUPPORTED_OPERATION = 0x0200

    # Resource
    ALLOCATION_FAILURE = 0x0300
    DATA_TOO_LARGE = 0x0301

    # Crypto
    CRYPTO_MODULE_FAILURE = 0x0400

    # Internal
    INTERNAL_ERROR = 0xFF00

    @property
    def category(self) -> ErrorCategory:
        return ErrorCategory(self.value >> 8)


@dataclass(frozen=True)
class AcvpError(Exception):
    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.name}({self.code:#06x}): {self.message}"

    @property
    def category(self) -> ErrorCategory:
        return self.code.category


# Allow Python's Exception machinery to set __traceback__/__context__/__cause__
# while keeping dataclass fields frozen (Python 3.13 contextlib compat).
_EXCEPTION_ATTRS = frozenset(("__traceback__", "__context__", "__cause__", "__suppress_context__"))
_frozen_setattr = AcvpError.__setattr__


def _acvp_error_setattr(self: AcvpError, name: str, value: object) -> None:
    if name in _EXCEPTION_ATTRS:
        object.__setattr__(self, name, value)
    else:
        _frozen_setattr(self, name, value)


AcvpError.__setattr__ = _acvp_error_setattr  # type: ignore[method-assign]


def err(code: ErrorCode, message: str) -> AcvpError:
    return AcvpError(code=code, message=message)
