"""BN254 scalar field GF(r).

Uses galois for field construction and the handful of inversions needed
when deriving Poseidon parameters. Hot loops (the permutation, witness
generation) work on plain ints reduced modulo ``MODULUS``.
"""

from typing import List

import galois

# --- Field Construction ---

MODULUS = 0x30644E72E131A029B85045B68181585D2833E84879B9709143E1F593F0000001

# Multiplicative generator and 2-adicity of r - 1
GENERATOR = 7
TWO_ADICITY = 28

FF = galois.GF(MODULUS, primitive_element=GENERATOR, verify=False)
"""Scalar field of BN254."""

# Canonical little-endian encoding width
SCALAR_BYTES = 32


# --- Encoding ---

def is_canonical(value: int) -> bool:
    """True if ``value`` is a reduced field element."""
    return 0 <= value < MODULUS


def to_bytes(value: int) -> bytes:
    """Encode a reduced field element as 32 little-endian bytes."""
    if not is_canonical(value):
        raise ValueError(f"{value} is not a canonical field element")
    return value.to_bytes(SCALAR_BYTES, "little")


def from_bytes(data: bytes) -> int:
    """Decode 32 little-endian bytes, rejecting non-canonical encodings."""
    if len(data) != SCALAR_BYTES:
        raise ValueError(f"expected {SCALAR_BYTES} bytes, got {len(data)}")
    value = int.from_bytes(data, "little")
    if not is_canonical(value):
        raise ValueError("non-canonical field element encoding")
    return value


def from_uniform_bytes(data: bytes) -> int:
    """Reduce a wide (e.g. 64-byte) digest into the field."""
    return int.from_bytes(data, "little") % MODULUS


# --- Matrices ---

def cauchy_matrix(xs: List[int], ys: List[int]) -> List[List[int]]:
    """Cauchy matrix M[i][j] = 1 / (x_i + y_j) over the field."""
    x = FF(xs)
    y = FF(ys)
    return [[int((x[i] + y[j]) ** -1) for j in range(len(ys))] for i in range(len(xs))]
