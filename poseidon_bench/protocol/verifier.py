"""
Verifier: replay the transcript and check every region.

All failures, including malformed bytes, surface as VerificationFailure.
"""

import logging
from typing import Sequence

from ..errors import VerificationFailure
from ..primitives.merkle_tree import MerkleTree, hash_leaf
from ..primitives.transcript import TranscriptReader
from .checker import RegionChecker
from .keygen import VerifyingKey
from .params import ParamsVerifier
from .proof import MERKLE_ARITY, read_region

logger = logging.getLogger(__name__)


def _reject(reason: str) -> VerificationFailure:
    logger.warning("proof rejected: %s", reason)
    return VerificationFailure(reason)


def _verify_circuit(reader: TranscriptReader, vk: VerifyingKey, index: int) -> None:
    cs = vk.cs
    root = reader.read_digest()
    checker = RegionChecker(cs, vk.copies)
    leaves = []
    for region, (start, n_rows) in enumerate(vk.regions):
        advice = read_region(reader, n_rows, cs.num_advice_columns)
        leaves.append(hash_leaf([v for row in advice for v in row]))
        try:
            checker.check(start, advice, vk.fixed_block(region))
        except ValueError as exc:
            raise _reject(f"circuit {index}, region {region}: {exc}") from exc
    leaves.append(reader.read_digest())

    tree = MerkleTree(MERKLE_ARITY)
    tree.merkelize(leaves)
    if tree.get_root() != root:
        raise _reject(f"circuit {index}: advice does not match its commitment")


def verify_proof(
    params: ParamsVerifier,
    vk: VerifyingKey,
    instances: Sequence[Sequence[Sequence[int]]],
    reader: TranscriptReader
) -> None:
    """Check one proof transcript.

    Raises:
        VerificationFailure: If the proof is malformed or any check fails.
    """
    cs = vk.cs
    if params.k != vk.k:
        raise _reject(f"verifying key is for k={vk.k}, params have k={params.k}")
    if not instances:
        raise _reject("no proof instances given")
    for columns in instances:
        if len(columns) != cs.num_instance_columns:
            raise _reject(f"expected {cs.num_instance_columns} instance columns, got {len(columns)}")

    try:
        reader.common_digest(params.digest)
        reader.common_digest(vk.digest)
        for columns in instances:
            for column in columns:
                for value in column:
                    reader.common_scalar(value)
        for index in range(len(instances)):
            _verify_circuit(reader, vk, index)
        reader.finalize()
    except ValueError as exc:
        raise _reject(f"malformed proof: {exc}") from exc

    logger.info("proof verified: %d circuit(s), %d regions each", len(instances), len(vk.regions))
