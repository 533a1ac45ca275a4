"""
Prover: check and commit to the witness region by region, then open it.

Synthesis runs twice. The first pass checks every region against the
constraint system and streams one advice digest per region into the
commitment; the second pass, after the root is in the transcript, writes
the advice values themselves. Neither pass holds the full grid.
"""

import logging
from typing import Callable, List, Sequence

from ..arithmetization.constraint_system import ConstraintSystem
from ..arithmetization.layouter import Layouter, Region
from ..errors import ProofGenerationError
from ..primitives.merkle_tree import MerkleTree, hash_leaf
from ..primitives.rng import ProverRng
from ..primitives.transcript import TranscriptWriter
from .checker import RegionChecker
from .keygen import ProvingKey, VerifyingKey
from .params import Params
from .proof import MERKLE_ARITY, write_region

logger = logging.getLogger(__name__)


class CommitLayouter(Layouter):
    """Keeps one advice digest per region and hands the region to ``consume``."""

    def __init__(self, cs: ConstraintSystem, row_limit: int, consume: Callable[[Region], None]):
        super().__init__(cs, row_limit)
        self.consume = consume
        self.advice_leaves: List[bytes] = []

    def on_region(self, region: Region) -> None:
        self.advice_leaves.append(hash_leaf(region.advice_values()))
        self.consume(region)


def blinding_leaf(rng: ProverRng, cs: ConstraintSystem) -> bytes:
    """Digest of the random rows appended after the last region."""
    n_values = cs.blinding_factors() * cs.num_advice_columns
    return hash_leaf([rng.field_element() for _ in range(n_values)])


def _absorb_instances(writer: TranscriptWriter, cs: ConstraintSystem, instances: Sequence[Sequence[Sequence[int]]]) -> None:
    for columns in instances:
        if len(columns) != cs.num_instance_columns:
            raise ProofGenerationError(
                f"circuit has {cs.num_instance_columns} instance columns, got {len(columns)}"
            )
        for column in columns:
            for value in column:
                writer.common_scalar(value)


def _region_checker(vk: VerifyingKey) -> Callable[[Region], None]:
    checker = RegionChecker(vk.cs, vk.copies)

    def check(region: Region) -> None:
        info = region.info
        if (info.index >= len(vk.regions)
                or (info.start, info.n_rows) != vk.regions[info.index]
                or tuple(map(tuple, region.fixed)) != vk.fixed_block(info.index)):
            raise ProofGenerationError(f"region {info.index} does not match the proving key")
        try:
            checker.check(info.start, region.advice, region.fixed)
        except ValueError as exc:
            raise ProofGenerationError(f"witness does not satisfy the circuit: {exc}") from exc

    return check


def create_proof(
    params: Params,
    pk: ProvingKey,
    circuits: Sequence,
    instances: Sequence[Sequence[Sequence[int]]],
    rng: ProverRng
) -> bytes:
    """Prove a batch of circuits sharing ``pk``; returns the transcript bytes.

    Raises:
        ProofGenerationError: On mismatched inputs, a witness that violates
            a constraint, or inconsistent synthesis.
        SynthesisError: If a circuit cannot lay out its witness.
    """
    vk = pk.vk
    cs = vk.cs
    if params.k != vk.k:
        raise ProofGenerationError(f"proving key is for k={vk.k}, params have k={params.k}")
    if len(circuits) != len(instances):
        raise ProofGenerationError(f"{len(circuits)} circuits but {len(instances)} instance sets")
    row_limit = cs.usable_rows(params.k)

    writer = TranscriptWriter()
    writer.common_digest(params.digest)
    writer.common_digest(vk.digest)
    _absorb_instances(writer, cs, instances)

    for circuit in circuits:
        # --- Commit ---
        committed = CommitLayouter(cs, row_limit, _region_checker(vk))
        circuit.synthesize(pk.config, committed)
        if len(committed.regions) != len(vk.regions):
            raise ProofGenerationError(
                f"circuit has {len(committed.regions)} regions, proving key has {len(vk.regions)}"
            )

        blinding = blinding_leaf(rng, cs)
        tree = MerkleTree(MERKLE_ARITY)
        tree.merkelize(committed.advice_leaves + [blinding])
        writer.write_digest(tree.get_root())
        logger.debug("committed %d regions, root %s", len(committed.regions), tree.get_root().hex()[:16])

        # --- Open ---
        opened = CommitLayouter(cs, row_limit, lambda region: write_region(writer, region.advice))
        circuit.synthesize(pk.config, opened)
        if opened.advice_leaves != committed.advice_leaves:
            raise ProofGenerationError("witness changed between commitment and opening")
        writer.write_digest(blinding)

    proof = writer.finalize()
    logger.info("proof created: %d bytes, %d circuit(s)", len(proof), len(circuits))
    return proof
