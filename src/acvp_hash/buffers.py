"""Capacity-checked byte buffers for test case working state."""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import ErrorCode, err


@dataclass
class BoundedBuffer:
    """Owned byte storage that never grows past `capacity`.

    Every transfer into the buffer is checked; an overflow raises
    DATA_TOO_LARGE instead of truncating.
    """

    capacity: int
    buf: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        if len(self.buf) > self.capacity:
            raise err(
                ErrorCode.DATA_TOO_LARGE,
                f"initial contents ({len(self.buf)} bytes) exceed capacity {self.capacity}",
            )

    def __len__(self) -> int:
        return len(self.buf)

    def __bytes__(self) -> bytes:
        return bytes(self.buf)

    @property
    def value(self) -> bytes:
        return bytes(self.buf)

    def _check(self, size: int) -> None:
        if size > self.capacity:
            raise err(
                ErrorCode.DATA_TOO_LARGE,
                f"{size} bytes do not fit in buffer of capacity {self.capacity}",
            )

    def load(self, data: bytes) -> None:
        """Replace the contents with `data`."""
        self._check(len(data))
        self.buf[:] = data

    def copy_from(self, other: "BoundedBuffer") -> None:
        self.load(other.buf)

    def append(self, data: bytes) -> None:
        self._check(len(self.buf) + len(data))
        self.buf.extend(data)

    def fit(self, length: int) -> None:
        """Truncate or zero-pad the contents to exactly `length` bytes."""
        self._check(length)
        if len(self.buf) > length:
            del self.buf[length:]
        else:
            self.buf.extend(b"\x00" * (length - len(self.buf)))

    def clear(self) -> None:
        """Zero the contents and reset the length."""
        self.buf[:] = bytes(len(self.buf))
        del self.buf[:]
