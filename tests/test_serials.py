# tests/test_serials.py
"""
Tests for serial number allocation
"""

import random

import pytest

from dc_certificates.certificates.exceptions import CryptoProviderError
from dc_certificates.certificates.serials import SerialAllocator, serial_upper_bound
from dc_certificates.certificates.types import CertificateRole, IssuerOrder


class ScriptedRandom(random.Random):
    """randrange replays a fixed sequence of draws"""

    def __init__(self, values):
        super().__init__()
        self.values = list(values)
        self.calls = []

    def randrange(self, start, stop=None, step=1):
        self.calls.append((start, stop))
        return self.values.pop(0)


class TestSerialAllocator:
    """Test suite for SerialAllocator"""

    def test_upper_bound_for_32_bit_hardware(self):
        assert serial_upper_bound() == 2147483647
        assert serial_upper_bound(2 ** 32 - 1) == (2 ** 32 - 2) // 2

    def test_allocates_one_serial_per_role(self):
        serials = SerialAllocator().allocate()

        assert set(serials) == set(CertificateRole)
        assert len(set(serials.values())) == 4

    def test_serials_within_bounds(self):
        allocator = SerialAllocator()
        for _ in range(20):
            for serial in allocator.allocate().values():
                assert 0 < serial < allocator.upper_bound

    def test_serials_ascend_in_issuance_order(self):
        serials = SerialAllocator().allocate()
        values = [serials[role] for role in IssuerOrder.ISSUANCE_ORDER]

        assert values == sorted(values)

    def test_draw_range(self):
        rng = ScriptedRandom([10, 20, 30, 40])
        SerialAllocator(rng=rng).allocate()

        assert rng.calls == [(1, 2147483647)] * 4

    def test_collision_is_redrawn(self):
        """Duplicates are discarded, not passed on to issuance"""
        rng = ScriptedRandom([5, 5, 7, 7, 3, 9])

        serials = SerialAllocator(rng=rng).allocate()

        assert serials == {
            CertificateRole.ROOT: 3,
            CertificateRole.INTERMEDIATE: 5,
            CertificateRole.SIGNER: 7,
            CertificateRole.TARGET: 9,
        }
        assert rng.values == []

    def test_exhausted_draws_raise(self):
        rng = ScriptedRandom([1] * 100)

        with pytest.raises(CryptoProviderError) as exc_info:
            SerialAllocator(rng=rng, max_attempts=2).allocate()

        assert exc_info.value.step == "serial allocation"
        assert len(rng.calls) == 8

    def test_small_hardware_range(self):
        """With exactly four admissible values every one of them is used"""
        allocator = SerialAllocator(hardware_max=11)

        assert allocator.upper_bound == 5
        assert sorted(allocator.allocate().values()) == [1, 2, 3, 4]

    def test_allocators_do_not_share_random_source(self):
        first, second = SerialAllocator(), SerialAllocator()

        assert isinstance(first._rng, random.SystemRandom)
        assert first._rng is not second._rng
