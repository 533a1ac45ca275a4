"""End-to-end tests for the reference prover and verifier."""

import random

import pytest

from poseidon_bench.bench import DEFAULT_SEED
from poseidon_bench.circuit import HashCircuit
from poseidon_bench.errors import (
    ProofGenerationError,
    SimulationFailure,
    SynthesisError,
    VerificationFailure,
)
from poseidon_bench.pipeline import (
    check_constraints,
    create_proof,
    derive_verification_key,
    generate_keys,
    setup_params,
    verify_proof,
)
from poseidon_bench.primitives.merkle_tree import MerkleTree
from poseidon_bench.primitives.rng import ProverRng
from poseidon_bench.primitives.transcript import TranscriptWriter
from poseidon_bench.protocol.proof import MERKLE_ARITY, write_region
from poseidon_bench.protocol.prover import CommitLayouter, blinding_leaf
from poseidon_bench.table import HashTable

BAD_STEP = 30


def _flip(proof: bytes, position: int) -> bytes:
    tampered = bytearray(proof)
    tampered[position] ^= 0x01
    return bytes(tampered)


def _unchecked_proof(artifacts, circuit, seed: bytes) -> bytes:
    """Transcript in the prover's layout, written without its constraint check."""
    params, pk = artifacts.params, artifacts.proving_key
    cs = pk.vk.cs
    row_limit = cs.usable_rows(params.k)

    writer = TranscriptWriter()
    writer.common_digest(params.digest)
    writer.common_digest(pk.vk.digest)

    committed = CommitLayouter(cs, row_limit, lambda region: None)
    circuit.synthesize(pk.config, committed)
    blinding = blinding_leaf(ProverRng.from_seed(seed), cs)
    tree = MerkleTree(MERKLE_ARITY)
    tree.merkelize(committed.advice_leaves + [blinding])
    writer.write_digest(tree.get_root())

    opened = CommitLayouter(cs, row_limit, lambda region: write_region(writer, region.advice))
    circuit.synthesize(pk.config, opened)
    writer.write_digest(blinding)
    return writer.finalize()


@pytest.fixture(scope="module")
def wrong_check_circuit() -> HashCircuit:
    """Sixty rows whose expected digest at one step is wrong."""
    rows = [(i, i + 1, 0) for i in range(60)]
    checks = [None] * 60
    checks[BAD_STEP] = 12345
    return HashCircuit(HashTable.literal(rows, checks), 60)


@pytest.fixture(scope="module")
def wrong_check_artifacts(backend, wrong_check_circuit):
    params, vp = setup_params(backend, 11)
    return generate_keys(backend, params, vp, wrong_check_circuit)


class TestRoundTrip:
    """Honest proofs verify."""

    def test_scenario_a(self, backend, scenario_a_artifacts, scenario_a_proof) -> None:
        """Literal rows at k=8, capacity 4."""
        verify_proof(backend, scenario_a_artifacts, scenario_a_proof)

    def test_scenario_b(self, backend, scenario_b_circuit) -> None:
        """One generated row at k=11, capacity 2."""
        params, vp = setup_params(backend, 11)
        artifacts = generate_keys(backend, params, vp, scenario_b_circuit)
        proof = create_proof(backend, artifacts, scenario_b_circuit, DEFAULT_SEED)
        verify_proof(backend, artifacts, proof)

    def test_fresh_verification_key(self, backend, scenario_a_artifacts, scenario_a_circuit, scenario_a_proof) -> None:
        """A key re-derived for the verifier alone is interchangeable."""
        vk = derive_verification_key(backend, scenario_a_artifacts.params, scenario_a_circuit)
        assert vk == scenario_a_artifacts.verification_key
        verify_proof(backend, scenario_a_artifacts, scenario_a_proof, verification_key=vk)

    def test_repeat_verification(self, backend, scenario_a_artifacts, scenario_a_proof) -> None:
        """Each verification reads the proof with a fresh cursor."""
        verify_proof(backend, scenario_a_artifacts, scenario_a_proof)
        verify_proof(backend, scenario_a_artifacts, scenario_a_proof)


class TestDeterminism:

    def test_same_seed_same_bytes(self, backend, scenario_a_artifacts, scenario_a_circuit, scenario_a_proof) -> None:
        """Proving is byte-reproducible for a fixed seed."""
        assert create_proof(backend, scenario_a_artifacts, scenario_a_circuit, DEFAULT_SEED) == scenario_a_proof

    def test_seed_changes_proof(self, backend, scenario_a_artifacts, scenario_a_circuit, scenario_a_proof) -> None:
        """Blinding depends on the seed."""
        other = create_proof(backend, scenario_a_artifacts, scenario_a_circuit, bytes(32))
        assert other != scenario_a_proof
        verify_proof(backend, scenario_a_artifacts, other)

    def test_proof_size(self, scenario_a_proof) -> None:
        """Root, every region's advice, blinding digest and closing tag."""
        # 4 regions of 29 rows x 6 advice columns
        assert len(scenario_a_proof) == 32 + 4 * 29 * 6 * 32 + 32 + 32


class TestTampering:
    """Any modification of the proof is rejected."""

    def test_flipped_bytes(self, backend, scenario_a_artifacts, scenario_a_proof) -> None:
        """Single bit flips anywhere in the proof."""
        rng = random.Random(0)
        positions = [0, 31, 32, len(scenario_a_proof) - 33, len(scenario_a_proof) - 1]
        positions += rng.sample(range(len(scenario_a_proof)), 24)
        for position in positions:
            with pytest.raises(VerificationFailure):
                verify_proof(backend, scenario_a_artifacts, _flip(scenario_a_proof, position))

    def test_truncated(self, backend, scenario_a_artifacts, scenario_a_proof) -> None:
        """A proof missing its last byte is rejected."""
        with pytest.raises(VerificationFailure):
            verify_proof(backend, scenario_a_artifacts, scenario_a_proof[:-1])

    def test_trailing_bytes(self, backend, scenario_a_artifacts, scenario_a_proof) -> None:
        """Extra bytes after the proof are rejected."""
        with pytest.raises(VerificationFailure):
            verify_proof(backend, scenario_a_artifacts, scenario_a_proof + b"\x00")

    def test_empty(self, backend, scenario_a_artifacts) -> None:
        """An empty transcript is rejected."""
        with pytest.raises(VerificationFailure):
            verify_proof(backend, scenario_a_artifacts, b"")

    def test_wrong_key(self, backend, scenario_a_artifacts, scenario_a_proof) -> None:
        """A key for another capacity rejects the proof."""
        other = derive_verification_key(backend, scenario_a_artifacts.params, HashCircuit(HashTable.empty(), 3))
        with pytest.raises(VerificationFailure):
            verify_proof(backend, scenario_a_artifacts, scenario_a_proof, verification_key=other)

    def test_wrong_params(self, backend, scenario_a_circuit, scenario_a_artifacts, scenario_a_proof) -> None:
        """Verifier parameters for another k reject the proof."""
        params, vp = setup_params(backend, 9)
        artifacts = generate_keys(backend, params, vp, scenario_a_circuit)
        with pytest.raises(VerificationFailure):
            verify_proof(backend, artifacts, scenario_a_proof)


class TestUnsatisfiedWitness:
    """A witness that fails the constraint check never verifies."""

    def test_simulation_fails(self, backend, wrong_check_circuit) -> None:
        """The wrong expected digest is caught by simulation."""
        with pytest.raises(SimulationFailure):
            check_constraints(backend, 11, wrong_check_circuit)

    def test_prover_refuses(self, backend, wrong_check_artifacts, wrong_check_circuit) -> None:
        """create_proof checks every region before committing."""
        with pytest.raises(ProofGenerationError, match=f"@{BAD_STEP * 29}"):
            create_proof(backend, wrong_check_artifacts, wrong_check_circuit, DEFAULT_SEED)

    def test_unchecked_layout_matches_prover(self, scenario_a_artifacts, scenario_a_circuit, scenario_a_proof) -> None:
        """For a satisfied witness the unchecked writer reproduces the real proof."""
        assert _unchecked_proof(scenario_a_artifacts, scenario_a_circuit, DEFAULT_SEED) == scenario_a_proof

    @pytest.mark.parametrize("seed", [bytes([s] * 32) for s in range(6)])
    def test_verifier_rejects_any_seed(self, backend, wrong_check_artifacts, wrong_check_circuit, seed: bytes) -> None:
        """The bad step is found whatever the blinding, far from the first region."""
        proof = _unchecked_proof(wrong_check_artifacts, wrong_check_circuit, seed)
        with pytest.raises(VerificationFailure, match=f"region {BAD_STEP}:"):
            verify_proof(backend, wrong_check_artifacts, proof)


class TestProverErrors:

    def test_oversized_table(self, backend, scenario_a_artifacts) -> None:
        """Synthesis failures surface before any proof bytes exist."""
        circuit = HashCircuit(HashTable.generated(5, 0), 4)
        with pytest.raises(SynthesisError):
            create_proof(backend, scenario_a_artifacts, circuit, DEFAULT_SEED)

    def test_mismatched_circuit(self, backend, scenario_a_artifacts) -> None:
        """A circuit of another capacity does not match the proving key."""
        circuit = HashCircuit(HashTable.empty(), 3)
        with pytest.raises(ProofGenerationError):
            create_proof(backend, scenario_a_artifacts, circuit, DEFAULT_SEED)
