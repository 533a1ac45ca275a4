"""
Pipeline drivers: parameters, keys, proof, verification.

Each driver wraps one backend phase and translates failures that are not
already part of the error taxonomy into that phase's error.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from .backend import CircuitBackend, ProvingBackend, SingleStrategy
from .circuit import HashCircuit
from .errors import (
    ConfigurationError,
    PipelineError,
    ProofGenerationError,
    SimulationFailure,
    VerificationFailure,
)

logger = logging.getLogger(__name__)

# The circuit exposes no public inputs: one proof, zero instance columns
NO_INSTANCES = [[]]


@dataclass(frozen=True)
class ProvingArtifacts:
    """Everything produced before proving; immutable once built."""
    params: Any = field(repr=False)
    verifier_params: Any = field(repr=False)
    proving_key: Any = field(repr=False)
    verification_key: Any


# --- Parameter Manager ---

def setup_params(backend: ProvingBackend, k: int) -> Tuple[Any, Any]:
    """Public parameters for 2^k rows and their verifier-side view."""
    try:
        params = backend.setup(k)
        return params, backend.verifier_params(params)
    except PipelineError:
        raise
    except Exception as exc:
        raise ConfigurationError(f"parameter setup failed for k={k}: {exc}") from exc


# --- Constraint Simulation ---

def check_constraints(backend: CircuitBackend, k: int, circuit: HashCircuit) -> None:
    """Run the constraint simulator; raise SimulationFailure if unsatisfied."""
    failures = backend.simulate(k, circuit, NO_INSTANCES[0])
    if failures:
        raise SimulationFailure(failures)
    logger.info("constraint simulation passed at k=%d", k)


# --- Key Generator ---

def generate_keys(backend: ProvingBackend, params: Any, verifier_params: Any, circuit: HashCircuit) -> ProvingArtifacts:
    """Keys from the shape-only twin of ``circuit``; never sees the witness."""
    shape = circuit.without_witnesses()
    try:
        vk = backend.keygen_vk(params, shape)
        pk = backend.keygen_pk(params, vk, shape)
    except PipelineError:
        raise
    except Exception as exc:
        raise ConfigurationError(f"key generation failed: {exc}") from exc
    logger.info("keys generated for capacity %d", circuit.capacity)
    return ProvingArtifacts(params, verifier_params, pk, vk)


def derive_verification_key(backend: ProvingBackend, params: Any, circuit: HashCircuit) -> Any:
    """Fresh verification key for the verifier side only."""
    try:
        return backend.keygen_vk(params, circuit.without_witnesses())
    except PipelineError:
        raise
    except Exception as exc:
        raise ConfigurationError(f"key generation failed: {exc}") from exc


# --- Prover ---

def create_proof(backend: ProvingBackend, artifacts: ProvingArtifacts, circuit: HashCircuit, seed: bytes) -> bytes:
    """Proof bytes for one circuit, deterministic in ``seed``."""
    try:
        proof = backend.create_proof(
            artifacts.params, artifacts.proving_key, [circuit], NO_INSTANCES, seed
        )
    except PipelineError:
        raise
    except Exception as exc:
        raise ProofGenerationError(f"proof creation failed: {exc}") from exc
    logger.info("proof created: %d bytes", len(proof))
    return proof


# --- Verifier ---

def verify_proof(
    backend: ProvingBackend,
    artifacts: ProvingArtifacts,
    proof: bytes,
    verification_key: Optional[Any] = None
) -> None:
    """Verify ``proof`` with a fresh transcript and single-proof strategy.

    Uses the key from key generation unless ``verification_key`` is given.
    """
    vk = verification_key if verification_key is not None else artifacts.verification_key
    strategy = SingleStrategy(artifacts.verifier_params)
    try:
        transcript = backend.transcript_reader(proof)
        backend.verify_proof(artifacts.verifier_params, vk, strategy, NO_INSTANCES, transcript)
    except PipelineError:
        raise
    except Exception as exc:
        raise VerificationFailure(f"verification failed: {exc}") from exc
    logger.info("proof verified")
