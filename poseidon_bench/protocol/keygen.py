"""
Key generation.

Keys depend only on the circuit shape: the key-generation layouter drops
advice values and keeps fixed columns and equality constraints. Fixed
blocks repeat from one hash step to the next, so the key stores each
distinct block once and maps every region to one of them; the verifier
reads selectors and round indices from the key, never from the proof.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ..arithmetization.constraint_system import ConstraintSystem
from ..arithmetization.layouter import CopyConstraint, Layouter, Region
from ..errors import ConfigurationError
from ..primitives.field import to_bytes
from .params import Params

logger = logging.getLogger(__name__)

# Row-major fixed values of one region
FixedBlock = Tuple[Tuple[int, ...], ...]


class KeygenLayouter(Layouter):
    """Keeps per-region fixed blocks and equality constraints only."""

    def __init__(self, cs: ConstraintSystem, row_limit: int):
        super().__init__(cs, row_limit)
        self.blocks: Dict[FixedBlock, int] = {}
        self.region_blocks: List[int] = []
        self.copies: List[CopyConstraint] = []

    def on_region(self, region: Region) -> None:
        block = tuple(tuple(row) for row in region.fixed)
        self.region_blocks.append(self.blocks.setdefault(block, len(self.blocks)))
        self.copies.extend(region.copies)


@dataclass(frozen=True, eq=False)
class VerifyingKey:
    """Circuit shape commitment. Two keys are equal when their digests are."""
    k: int
    cs: ConstraintSystem = field(repr=False)
    regions: Tuple[Tuple[int, int], ...] = field(repr=False)
    fixed_blocks: Tuple[FixedBlock, ...] = field(repr=False)
    region_blocks: Tuple[int, ...] = field(repr=False)
    copies: Tuple[CopyConstraint, ...] = field(repr=False)
    digest: bytes = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "digest", self._compute_digest())

    def _compute_digest(self) -> bytes:
        h = hashlib.blake2b(digest_size=32, person=b"pb-vk")
        h.update(self.k.to_bytes(1, "little"))
        for line in self.cs.describe():
            h.update(line.encode() + b"\n")
        for start, n_rows in self.regions:
            h.update(start.to_bytes(8, "little") + n_rows.to_bytes(8, "little"))
        for block in self.fixed_blocks:
            h.update(len(block).to_bytes(8, "little"))
            for row in block:
                for value in row:
                    h.update(to_bytes(value))
        for index in self.region_blocks:
            h.update(index.to_bytes(4, "little"))
        for a, b in self.copies:
            h.update(f"{a.column}@{a.row}={b.column}@{b.row};".encode())
        return h.digest()

    def fixed_block(self, region: int) -> FixedBlock:
        return self.fixed_blocks[self.region_blocks[region]]

    def __eq__(self, other: object) -> bool:
        return isinstance(other, VerifyingKey) and self.digest == other.digest

    def __hash__(self) -> int:
        return hash(self.digest)


@dataclass(frozen=True)
class ProvingKey:
    vk: VerifyingKey
    config: Any = field(repr=False)


def _synthesize_shape(k: int, circuit) -> Tuple[VerifyingKey, Any, int]:
    cs = ConstraintSystem()
    config = circuit.configure(cs)
    if (1 << k) < cs.minimum_rows():
        raise ConfigurationError(f"k={k} is below the minimum of {cs.minimum_rows()} rows")

    layouter = KeygenLayouter(cs, cs.usable_rows(k))
    circuit.synthesize(config, layouter)
    if not layouter.regions:
        raise ConfigurationError("circuit assigned no regions")

    vk = VerifyingKey(
        k=k,
        cs=cs,
        regions=tuple((r.start, r.n_rows) for r in layouter.regions),
        fixed_blocks=tuple(layouter.blocks),
        region_blocks=tuple(layouter.region_blocks),
        copies=tuple(layouter.copies),
    )
    return vk, config, layouter.next_row


def keygen_vk(params: Params, circuit) -> VerifyingKey:
    """Verifying key for the circuit's shape.

    Raises:
        ConfigurationError: If the layout exceeds the usable rows at params.k.
    """
    vk, _, rows_used = _synthesize_shape(params.k, circuit)
    logger.info("verifying key: %d regions, %d rows, %d fixed blocks, digest %s",
                len(vk.regions), rows_used, len(vk.fixed_blocks), vk.digest.hex()[:16])
    return vk


def keygen_pk(params: Params, vk: VerifyingKey, circuit) -> ProvingKey:
    """Proving key embedding ``vk``.

    Raises:
        ConfigurationError: If the circuit's shape does not match ``vk``.
    """
    if vk.k != params.k:
        raise ConfigurationError(f"verifying key is for k={vk.k}, params have k={params.k}")
    shape, config, _ = _synthesize_shape(params.k, circuit)
    if shape != vk:
        raise ConfigurationError("circuit shape does not match the verifying key")
    return ProvingKey(vk=vk, config=config)
