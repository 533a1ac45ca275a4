"""Public parameters for a domain of 2^k rows.

The reference argument needs no structured reference string: setup only
fixes k and a digest bound to it, which both sides absorb into the
transcript so that a proof made for one k never verifies under another.
The setup is deterministic so that benchmark runs are reproducible.
"""

import hashlib
from dataclasses import dataclass

from ..errors import ConfigurationError
from ..primitives.field import TWO_ADICITY

SETUP_SEED = b"poseidon-bench unsafe setup"

MIN_K = 4


def _setup_digest(k: int) -> bytes:
    return hashlib.blake2b(SETUP_SEED + bytes([k]), digest_size=32).digest()


@dataclass(frozen=True)
class ParamsVerifier:
    k: int
    digest: bytes


@dataclass(frozen=True)
class Params:
    k: int
    digest: bytes

    @classmethod
    def unsafe_setup(cls, k: int) -> "Params":
        """Derive parameters for 2^k rows.

        Raises:
            ConfigurationError: If k is outside [MIN_K, TWO_ADICITY].
        """
        if not MIN_K <= k <= TWO_ADICITY:
            raise ConfigurationError(f"k must be in [{MIN_K}, {TWO_ADICITY}], got {k}")
        return cls(k=k, digest=_setup_digest(k))

    def verifier_params(self) -> ParamsVerifier:
        return ParamsVerifier(k=self.k, digest=self.digest)
