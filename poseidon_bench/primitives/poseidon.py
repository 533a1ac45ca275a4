"""
Poseidon permutation over the BN254 scalar field.

Width 3 (rate 2, capacity 1), S-box x^5, 8 full and 57 partial rounds:
the x5_254_3 instance of the Poseidon paper, the one circomlib uses.
Round constants and then the Cauchy MDS matrix 1 / (x_i + y_j) are drawn
from one Grain LFSR stream seeded with the instance description. The
paper's generator also screens candidate matrices for invariant subspace
trails; the first draw passes for this instance, and the known-answer
tests pin the resulting permutation.

The state layout is [capacity, left, right]; the digest of one block is
state[0] after the permutation.
"""

from collections import deque
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator, List, Optional, Sequence

from .field import MODULUS, cauchy_matrix

# --- Constants ---

WIDTH = 3
RATE = 2
ALPHA = 5
ROUNDS_F = 8
ROUNDS_P = 57
FIELD_BITS = MODULUS.bit_length()

# --- Type Aliases ---

State = List[int]


@dataclass(frozen=True)
class PoseidonParams:
    """Round structure and constants for one Poseidon instance."""
    width: int
    rounds_f: int
    rounds_p: int
    round_constants: List[List[int]]
    mds: List[List[int]]

    @property
    def n_rounds(self) -> int:
        return self.rounds_f + self.rounds_p

    def is_full_round(self, r: int) -> bool:
        half = self.rounds_f // 2
        return r < half or r >= half + self.rounds_p


# --- Parameter Generation ---

def _grain_bits(width: int, rounds_f: int, rounds_p: int) -> Iterator[int]:
    """Self-shrinking Grain LFSR seeded with the instance description."""
    seed: List[int] = []

    def push(value: int, n_bits: int) -> None:
        seed.extend(int(b) for b in format(value, f"0{n_bits}b"))

    push(1, 2)            # prime field
    push(0, 4)            # x^alpha S-box
    push(FIELD_BITS, 12)
    push(width, 12)
    push(rounds_f, 10)
    push(rounds_p, 10)
    push((1 << 30) - 1, 30)

    bits = deque(seed, maxlen=80)

    def step() -> int:
        new_bit = bits[62] ^ bits[51] ^ bits[38] ^ bits[23] ^ bits[13] ^ bits[0]
        bits.append(new_bit)
        return new_bit

    for _ in range(160):
        step()

    while True:
        if step():
            yield step()
        else:
            step()


def _next_int(source: Iterator[int]) -> int:
    value = 0
    for _ in range(FIELD_BITS):
        value = (value << 1) | next(source)
    return value


def _round_constants(source: Iterator[int], width: int, n_rounds: int) -> List[List[int]]:
    """Sample n_rounds * width constants by rejection."""
    flat: List[int] = []
    while len(flat) < n_rounds * width:
        value = _next_int(source)
        if value < MODULUS:
            flat.append(value)
    return [flat[r * width:(r + 1) * width] for r in range(n_rounds)]


def _mds(source: Iterator[int], width: int) -> List[List[int]]:
    """Cauchy matrix from 2 * width distinct reduced draws with no zero sum."""
    while True:
        points = [_next_int(source) % MODULUS for _ in range(2 * width)]
        if len(set(points)) < len(points):
            continue
        xs, ys = points[:width], points[width:]
        if all((x + y) % MODULUS for x in xs for y in ys):
            return cauchy_matrix(xs, ys)


def generate_params(width: int, rounds_f: int, rounds_p: int) -> PoseidonParams:
    """Round constants, then the MDS matrix, from one LFSR stream."""
    source = _grain_bits(width, rounds_f, rounds_p)
    round_constants = _round_constants(source, width, rounds_f + rounds_p)
    return PoseidonParams(
        width=width,
        rounds_f=rounds_f,
        rounds_p=rounds_p,
        round_constants=round_constants,
        mds=_mds(source, width),
    )


@lru_cache(maxsize=None)
def get_params() -> PoseidonParams:
    """Default width-3 parameter set (computed once per process)."""
    return generate_params(WIDTH, ROUNDS_F, ROUNDS_P)


# --- Round Functions ---

def sbox(x: int) -> int:
    """Compute x^5."""
    x2 = (x * x) % MODULUS
    x4 = (x2 * x2) % MODULUS
    return (x4 * x) % MODULUS


def add_round_constants(state: Sequence[int], r: int, params: PoseidonParams) -> State:
    rc = params.round_constants[r]
    return [(state[i] + rc[i]) % MODULUS for i in range(params.width)]


def mix(state: Sequence[int], params: PoseidonParams) -> State:
    """Multiply the state by the MDS matrix."""
    return [
        sum(m * s for m, s in zip(row, state)) % MODULUS
        for row in params.mds
    ]


def full_round(state: Sequence[int], r: int, params: PoseidonParams) -> State:
    return mix([sbox(x) for x in add_round_constants(state, r, params)], params)


def partial_round(state: Sequence[int], r: int, params: PoseidonParams) -> State:
    u = add_round_constants(state, r, params)
    u[0] = sbox(u[0])
    return mix(u, params)


# --- Permutation ---

def poseidon_permutation(state: Sequence[int], params: Optional[PoseidonParams] = None) -> State:
    """Apply the full permutation to a width-sized state.

    Raises:
        ValueError: If the state does not have ``params.width`` elements.
    """
    if params is None:
        params = get_params()
    if len(state) != params.width:
        raise ValueError(f"state must have {params.width} elements, got {len(state)}")

    current = [x % MODULUS for x in state]
    for r in range(params.n_rounds):
        if params.is_full_round(r):
            current = full_round(current, r, params)
        else:
            current = partial_round(current, r, params)
    return current


def hash_pair(left: int, right: int, capacity: int = 0) -> int:
    """Digest of one [left, right] block under the given capacity element."""
    return poseidon_permutation([capacity, left, right])[0]
