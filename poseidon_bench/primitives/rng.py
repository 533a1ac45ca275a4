"""Seeded pseudorandom source consumed by proof creation."""

import numpy as np

from .field import from_uniform_bytes

SEED_BYTES = 32


class ProverRng:
    """Deterministic, counted randomness for blinding values.

    Two instances built from the same seed yield the same sequence, which
    keeps benchmark proofs byte-reproducible. Not suitable for production
    proving, where blinding must come from a fresh entropy source.
    """

    def __init__(self, seed: bytes):
        if len(seed) != SEED_BYTES:
            raise ValueError(f"seed must have {SEED_BYTES} bytes, got {len(seed)}")
        self.seed = bytes(seed)
        self.draws = 0
        entropy = np.random.SeedSequence(int.from_bytes(self.seed, "little"))
        self._generator = np.random.Generator(np.random.PCG64(entropy))

    @classmethod
    def from_seed(cls, seed: bytes) -> "ProverRng":
        return cls(seed)

    def field_element(self) -> int:
        """Uniform field element from 64 random bytes."""
        self.draws += 1
        return from_uniform_bytes(self._generator.bytes(64))
