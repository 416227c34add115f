"""Monte Carlo Test engines checked against direct renditions of the
published MCT pseudocode and against known answers."""

from __future__ import annotations

import hashlib
import struct
from typing import Any

import pytest

from acvp_hash.buffers import BoundedBuffer
from acvp_hash.crypto.hashlib_module import HashlibModule
from acvp_hash.errors import AcvpError, ErrorCode
from acvp_hash.mct import legacy_mct, next_xof_len, rightmost_output_bits, sha3_mct, shake_mct
from acvp_hash.state import init_test_case
from acvp_hash.types import HashAlgorithm, MctVersion, TestCase, TestGroup, TestType


def _state(algorithm: HashAlgorithm, seed: bytes, version: MctVersion | None = MctVersion.STANDARD):
    group = TestGroup(tg_id=1, test_type=TestType.MCT, mct_version=version)
    case = TestCase(tc_id=1, msg_hex=seed.hex(), msg_bit_len=len(seed) * 8)
    return init_test_case(algorithm, group, case)


def _legacy_reference(name: str, seed: bytes, outer: int, inner: int, alternate: bool) -> list[str]:
    seed_len = len(seed)
    out = []
    for _ in range(outer):
        a = b = c = seed
        for _ in range(inner):
            msg = a + b + c
            if alternate:
                msg = msg[:seed_len].ljust(seed_len, b"\x00")
            md = hashlib.new(name, msg).digest()
            a, b, c = b, c, md
        out.append(md.hex())
        seed = md
    return out


def _sha3_reference(name: str, seed: bytes, outer: int, inner: int, alternate: bool) -> list[str]:
    seed_len = len(seed)
    msg = seed
    out = []
    for _ in range(outer):
        for _ in range(inner):
            md = hashlib.new(name, msg).digest()
            msg = md[:seed_len].ljust(seed_len, b"\x00") if alternate else md
        out.append(md.hex())
    return out


def _shake_reference(name: str, seed: bytes, min_bits: int, max_bits: int, outer: int, inner: int) -> list[dict[str, Any]]:
    min_bytes, max_bytes = min_bits // 8, max_bits // 8
    span = max_bytes - min_bytes + 1
    out_len = max_bytes
    msg = seed[:16].ljust(16, b"\x00")
    out = []
    for _ in range(outer):
        for _ in range(inner):
            md = hashlib.new(name, msg).digest(out_len)
            msg = md[:16].ljust(16, b"\x00")
            out_len = min_bytes + struct.unpack(">H", md[-2:])[0] % span
        out.append({"md": md.hex(), "outLen": len(md) * 8})
    return out


class Counter:
    def __init__(self) -> None:
        self.module = HashlibModule()
        self.calls = 0
        self.window_lens: list[tuple[int, int, int]] = []
        self.message_lens: list[int] = []

    def compute(self, tc) -> bool:
        self.calls += 1
        if tc.m1 is not None:
            self.window_lens.append((len(tc.m1), len(tc.m2), len(tc.m3)))
            self.message_lens.append(len(tc.mct_message()))
        return self.module.compute(tc)


def test_legacy_standard_matches_reference() -> None:
    seed = bytes.fromhex("f41ece2613e4573915696b5adcd51ca328be3bf566a9ca99c9ceb0279c1cb0a7")
    tc = _state(HashAlgorithm.SHA2_256, seed)
    counter = Counter()
    results = legacy_mct(counter, tc, outer=3, inner=1000)
    assert [r["md"] for r in results] == _legacy_reference("sha256", seed, 3, 1000, False)
    assert counter.calls == 3000
    assert all("outLen" not in r for r in results)
    # Rolling buffers never exceed the digest capacity
    assert max(max(lens) for lens in counter.window_lens) <= tc.m1.capacity


def test_legacy_alternate_matches_reference() -> None:
    seed = bytes(range(7))
    tc = _state(HashAlgorithm.SHA1, seed, MctVersion.ALTERNATE)
    counter = Counter()
    results = legacy_mct(counter, tc, outer=2, inner=1000)
    assert [r["md"] for r in results] == _legacy_reference("sha1", seed, 2, 1000, True)
    assert set(counter.message_lens) == {len(seed)}


def test_legacy_alternate_long_seed() -> None:
    seed = bytes(range(200))
    tc = _state(HashAlgorithm.SHA2_384, seed, MctVersion.ALTERNATE)
    counter = Counter()
    results = legacy_mct(counter, tc, outer=2, inner=50)
    assert [r["md"] for r in results] == _legacy_reference("sha384", seed, 2, 50, True)
    assert set(counter.message_lens) == {200}


def test_sha3_standard_matches_reference() -> None:
    seed = bytes.fromhex("aa" * 32)
    tc = _state(HashAlgorithm.SHA3_256, seed)
    counter = Counter()
    results = sha3_mct(counter, tc, outer=3, inner=1000)
    assert [r["md"] for r in results] == _sha3_reference("sha3_256", seed, 3, 1000, False)
    assert counter.calls == 3 * 1000
    assert len(results) == 3


def test_sha3_alternate_matches_reference() -> None:
    for seed in (b"\x01" * 5, bytes(range(100))):
        tc = _state(HashAlgorithm.SHA3_512, seed, MctVersion.ALTERNATE)
        results = sha3_mct(HashlibModule(), tc, outer=2, inner=100)
        assert [r["md"] for r in results] == _sha3_reference("sha3_512", seed, 2, 100, True)


def test_shake_matches_reference() -> None:
    seed = bytes.fromhex("c8b310cb97efa3855434998fa81c7674")
    tc = _state(HashAlgorithm.SHAKE_128, seed, None)
    results = shake_mct(HashlibModule(), tc, 128, 1120, outer=3, inner=1000)
    assert results == _shake_reference("shake_128", seed, 128, 1120, 3, 1000)


def test_shake_fits_seed_to_sixteen_bytes() -> None:
    for seed in (b"\x05" * 4, bytes(range(40))):
        tc = _state(HashAlgorithm.SHAKE_256, seed, None)
        results = shake_mct(HashlibModule(), tc, 16, 65536, outer=2, inner=20)
        assert results == _shake_reference("shake_256", seed, 16, 65536, 2, 20)


def test_shake_requested_lengths_in_range() -> None:
    tc = _state(HashAlgorithm.SHAKE_128, bytes(16), None)

    class Recorder:
        def __init__(self) -> None:
            self.lens: list[int] = []
            self.msg_lens: list[int] = []

        def compute(self, tc) -> bool:
            self.lens.append(tc.xof_len)
            self.msg_lens.append(tc.msg_len)
            return HashlibModule().compute(tc)

    rec = Recorder()
    results = shake_mct(rec, tc, 128, 1120, outer=1, inner=1000)
    assert len(rec.lens) == 1000
    assert rec.lens[0] == 1120 // 8
    assert all(16 <= n <= 140 for n in rec.lens)
    assert set(rec.msg_lens) == {16}
    assert 128 <= results[0]["outLen"] <= 1120
    assert 16 <= tc.xof_len <= 140


def test_rightmost_bits_big_endian() -> None:
    md = b"\xff" * 10 + b"\x01\x02"
    assert rightmost_output_bits(md) == 0x0102
    assert rightmost_output_bits(md) == struct.unpack(">H", md[-2:])[0]
    # Little-endian reading would give 0x0201
    swapped = b"\xff" * 10 + b"\x02\x01"
    assert rightmost_output_bits(swapped) == 0x0201
    assert next_xof_len(md, 2, 140) == 2 + 0x0102 % 139
    assert next_xof_len(swapped, 2, 140) == 2 + 0x0201 % 139


@pytest.mark.parametrize("tail", [b"\x00\x00", b"\xff\xff", b"\x12\x34", b"\x80\x01"])
def test_next_xof_len_bounds(tail: bytes) -> None:
    for min_bytes, max_bytes in ((2, 2), (16, 140), (2, 8192)):
        n = next_xof_len(b"\xaa" + tail, min_bytes, max_bytes)
        assert min_bytes <= n <= max_bytes


def test_short_shake_digest_is_module_failure() -> None:
    with pytest.raises(AcvpError) as exc:
        rightmost_output_bits(b"\x01")
    assert exc.value.code == ErrorCode.CRYPTO_MODULE_FAILURE


def test_module_failure_aborts_mct() -> None:
    class Failing:
        calls = 0

        def compute(self, tc) -> bool:
            self.calls += 1
            return self.calls < 5

    module = Failing()
    tc = _state(HashAlgorithm.SHA3_224, bytes(28))
    with pytest.raises(AcvpError) as exc:
        sha3_mct(module, tc, outer=2, inner=10)
    assert exc.value.code == ErrorCode.CRYPTO_MODULE_FAILURE
    assert module.calls == 5


def test_module_exception_is_module_failure() -> None:
    class Raising:
        def compute(self, tc) -> bool:
            raise ValueError("device error")

    tc = _state(HashAlgorithm.SHA2_224, bytes(28))
    with pytest.raises(AcvpError) as exc:
        legacy_mct(Raising(), tc, outer=1, inner=1)
    assert exc.value.code == ErrorCode.CRYPTO_MODULE_FAILURE
    assert isinstance(exc.value.__cause__, ValueError)


def test_window_overflow_is_internal_error() -> None:
    class Oversized:
        def compute(self, tc) -> bool:
            tc.md.load(b"\x00" * 100)
            return True

    tc = _state(HashAlgorithm.SHA2_512, bytes(64))
    tc.md = BoundedBuffer(capacity=128)
    with pytest.raises(AcvpError) as exc:
        legacy_mct(Oversized(), tc, outer=1, inner=2)
    assert exc.value.code == ErrorCode.INTERNAL_ERROR


def test_missing_rolling_buffer_is_internal_error() -> None:
    class DropsWindow:
        def compute(self, tc) -> bool:
            tc.md.load(hashlib.sha1(tc.mct_message()).digest())
            tc.m2 = None
            return True

    tc = _state(HashAlgorithm.SHA1, bytes(20))
    with pytest.raises(AcvpError) as exc:
        legacy_mct(DropsWindow(), tc, outer=1, inner=2)
    assert exc.value.code == ErrorCode.INTERNAL_ERROR


# Known answers. SHA-1 is checkpoint COUNT = 0 of the SHAVS SHA1Monte.rsp
# file. SHA3-256 and SHAKE-128 were produced with OpenSSL 3.0 following the
# SHA3VS Monte Carlo procedure; the SHAKE seed and bounds are the ones in
# SHAKE128Monte.rsp.


def test_sha1_monte_known_answer() -> None:
    seed = bytes.fromhex("dd4df644eaf3d85bace2b21accaa22b28821f5cd")
    tc = _state(HashAlgorithm.SHA1, seed)
    results = legacy_mct(HashlibModule(), tc, outer=1, inner=1000)
    assert results == [{"md": "11f5c38b4479d4ad55cb69fadf62de0b036d5163"}]


def test_sha3_256_monte_known_answer() -> None:
    tc = _state(HashAlgorithm.SHA3_256, bytes.fromhex("aa" * 32))
    results = sha3_mct(HashlibModule(), tc, outer=2, inner=1000)
    assert [r["md"] for r in results] == [
        "b87e7de20d99538c945c39cf3a540bb0c438fbee4cf71788a94677e9a1f5be2d",
        "b32831a72a6ce101ee6c289def17803737d727cff7d296fcd076ae491710f79a",
    ]


def test_shake_128_monte_known_answer() -> None:
    tc = _state(HashAlgorithm.SHAKE_128, bytes.fromhex("c8b310cb97efa3855434998fa81c7674"), None)
    results = shake_mct(HashlibModule(), tc, 128, 1120, outer=2, inner=1000)
    assert results == [
        {
            "md": "fe8c476993b47b10c98303a04c6212dfb341426d748d3926140aee0a151fc80fa1",
            "outLen": 264,
        },
        {
            "md": "0ed1e47c5a33592d182ccb6a28cac9b11d23d8038ddebbdd4ae6c584d7ec14269810b082"
            "a27655d073ac9bfda81650e18d972e5e96cf1b4279af91cf0bf61156ebf6f042fb70ba6f"
            "25be976880c257405e759e71790c5218d05985f5ffff05f9eb2da24053cb7df667",
            "outLen": 840,
        },
    ]
