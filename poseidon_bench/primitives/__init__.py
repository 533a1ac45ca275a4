"""Primitives - field, hashing, commitments and randomness."""

from .field import (
    FF,
    GENERATOR,
    MODULUS,
    SCALAR_BYTES,
    TWO_ADICITY,
    from_bytes,
    is_canonical,
    to_bytes,
)
from .merkle_tree import (
    HASH_SIZE,
    MerkleRoot,
    MerkleTree,
    hash_leaf,
)
from .poseidon import (
    PoseidonParams,
    get_params,
    hash_pair,
    poseidon_permutation,
)
from .rng import ProverRng
from .transcript import (
    Transcript,
    TranscriptReader,
    TranscriptWriter,
)

__all__ = [
    # Field
    "FF",
    "MODULUS",
    "GENERATOR",
    "TWO_ADICITY",
    "SCALAR_BYTES",
    "is_canonical",
    "to_bytes",
    "from_bytes",
    # Poseidon
    "PoseidonParams",
    "get_params",
    "poseidon_permutation",
    "hash_pair",
    # Merkle Tree
    "MerkleTree",
    "MerkleRoot",
    "HASH_SIZE",
    "hash_leaf",
    # Transcript
    "Transcript",
    "TranscriptWriter",
    "TranscriptReader",
    # Randomness
    "ProverRng",
]
