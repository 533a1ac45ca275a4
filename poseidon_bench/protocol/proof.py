"""
Proof layout.

A proof is the raw transcript. For each circuit: the advice Merkle root
(one leaf per region plus one leaf of blinding rows), then the advice
values of every region row by row, then the blinding leaf digest. A
closing transcript tag follows the last circuit. Scalars are 32-byte
little-endian field elements, digests 32 bytes.

The argument opens every region, so the verifier checks every gate and
equality constraint of the circuit. It is neither succinct nor
zero-knowledge; the Merkle root commits the prover to the witness before
any of it is revealed.
"""

from typing import List, Sequence

from ..primitives.transcript import TranscriptReader, TranscriptWriter

MERKLE_ARITY = 4


def write_region(writer: TranscriptWriter, advice: Sequence[Sequence[int]]) -> None:
    for row in advice:
        for value in row:
            writer.write_scalar(value)


def read_region(reader: TranscriptReader, n_rows: int, n_advice: int) -> List[List[int]]:
    """Read one region's advice; raises ValueError on malformed bytes."""
    return [[reader.read_scalar() for _ in range(n_advice)] for _ in range(n_rows)]
