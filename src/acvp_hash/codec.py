"""Hexadecimal <-> binary conversion with fixed capacities."""

from __future__ import annotations

from .errors import ErrorCode, err


def hex_to_bin(text: str, capacity: int) -> bytes:
    """Decode `text` into at most `capacity` bytes."""
    if len(text) % 2:
        raise err(ErrorCode.INVALID_ARGUMENT, f"hex string has odd length ({len(text)})")
    if len(text) // 2 > capacity:
        raise err(
            ErrorCode.DATA_TOO_LARGE,
            f"hex string decodes to {len(text) // 2} bytes, capacity is {capacity}",
        )
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise err(ErrorCode.INVALID_ARGUMENT, f"invalid hex string: {exc}") from exc


def bin_to_hex(data: bytes, capacity: int) -> str:
    """Encode `data` as lowercase hex of at most `capacity` characters."""
    if len(data) * 2 > capacity:
        raise err(
            ErrorCode.DATA_TOO_LARGE,
            f"{len(data)} bytes need {len(data) * 2} hex characters, capacity is {capacity}",
        )
    return bytes(data).hex()
