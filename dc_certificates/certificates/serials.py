# dc_certificates/certificates/serials.py
# Serial number allocation bounded for legacy playback hardware

import logging
import random
from typing import Dict, Optional

from ..config import settings
from .exceptions import CryptoProviderError
from .types import CertificateRole, IssuerOrder

logger = logging.getLogger(__name__)

def serial_upper_bound(hardware_max: int = None) -> int:
    """Exclusive upper bound: half the decoder's range, keeping one reserved high bit"""
    hardware_max = hardware_max or settings.HARDWARE_SERIAL_MAX
    return (hardware_max - 1) // 2

class SerialAllocator:
    """
    Draws one unique serial per certificate role.

    Every allocator owns its random source so independent chain builds never
    share or correlate their draws.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        hardware_max: int = None,
        max_attempts: int = None
    ):
        self._rng = rng or random.SystemRandom()
        self.upper_bound = serial_upper_bound(hardware_max)
        self.max_attempts = max_attempts or settings.SERIAL_DRAW_ATTEMPTS

    def _draw(self) -> int:
        # X.509 serials must be positive
        return self._rng.randrange(1, self.upper_bound)

    def allocate(self) -> Dict[CertificateRole, int]:
        """Return {role: serial} with distinct values, ascending in issuance order"""
        roles = IssuerOrder.ISSUANCE_ORDER
        drawn = set()
        attempts = 0

        while len(drawn) < len(roles):
            if attempts >= self.max_attempts * len(roles):
                raise CryptoProviderError(
                    f"Could not draw {len(roles)} distinct serials below {self.upper_bound} "
                    f"after {attempts} attempts",
                    step="serial allocation"
                )
            value = self._draw()
            attempts += 1
            if value in drawn:
                logger.warning(f"Serial collision on {value}, re-drawing")
                continue
            drawn.add(value)

        serials = dict(zip(roles, sorted(drawn)))
        for role, serial in serials.items():
            logger.debug(f"Serial for {role.label}: {serial}")

        return serials
