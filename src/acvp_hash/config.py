"""ACVP hash harness configuration.

Protocol constants are kept aligned with the ACVP hash (SHA-1, SHA-2, SHA-3,
SHAKE) test procedures. Runtime settings live on `HarnessConfig`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

ACV_VERSION = "1.0"

# Message capacities
HASH_MSG_BYTE_MAX = 102_400 // 8
SHAKE_MSG_BYTE_MAX = 140_000 // 8

# Digest capacities
HASH_MD_BYTE_MAX = 512 // 8
HASH_MD_STR_MAX = HASH_MD_BYTE_MAX * 2

# Extendable output (SHAKE)
XOF_MD_BIT_MIN = 16
XOF_MD_BIT_MAX = 65_536
XOF_MD_BYTE_MAX = XOF_MD_BIT_MAX // 8
XOF_MD_STR_MAX = XOF_MD_BYTE_MAX * 2

# Monte Carlo
MCT_OUTER = 100
MCT_INNER = 1000
SHAKE_MCT_MSG_BYTES = 16  # leftmost 128 bits of the previous digest

# Large data test streaming
LDT_CHUNK_BYTES = 1 << 20


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("true", "1", "yes")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    return int(raw)


@dataclass
class HarnessConfig:
    """Runtime settings for processing vector sets."""
    # Monte Carlo iteration counts (protocol fixed, overridable for local runs)
    mct_outer: int = MCT_OUTER
    mct_inner: int = MCT_INNER

    # Output
    result_dir: Optional[str] = None
    pretty: bool = True
    verbose: bool = False

    @classmethod
    def from_env(cls) -> "HarnessConfig":
        """Load configuration from environment variables."""
        config = cls()

        config.mct_outer = _env_int("ACVP_HASH_MCT_OUTER", MCT_OUTER)
        config.mct_inner = _env_int("ACVP_HASH_MCT_INNER", MCT_INNER)
        config.result_dir = os.environ.get("ACVP_HASH_RESULT_DIR") or None
        config.verbose = _env_flag("ACVP_HASH_VERBOSE")

        return config
