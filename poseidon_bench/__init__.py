"""
poseidon_bench - benchmark harness for a Poseidon hash-table circuit.

Builds a circuit that proves a table of Poseidon hashes, then drives it
through parameter setup, key generation, proving and verification while
timing each phase.

Example:
    from poseidon_bench import SCENARIOS, run_benchmark
    result = run_benchmark(SCENARIOS["correctness"])
"""

from .backend import CircuitBackend, ProvingBackend, SingleStrategy
from .bench import (
    SCENARIOS,
    BenchmarkConfig,
    BenchmarkResult,
    BenchmarkRun,
    GeneratedRows,
    Instrumentation,
    LiteralRows,
    RunState,
    run_benchmark,
    run_scenarios,
)
from .circuit import HashCircuit
from .errors import (
    ConfigurationError,
    PipelineError,
    ProofGenerationError,
    SimulationFailure,
    SynthesisError,
    VerificationFailure,
)
from .pipeline import (
    ProvingArtifacts,
    check_constraints,
    create_proof,
    derive_verification_key,
    generate_keys,
    setup_params,
    verify_proof,
)
from .protocol.backend import ReferenceBackend
from .table import HashTable, HashTableRow

__version__ = "0.1.0"

__all__ = [
    # Table and Circuit
    "HashTable",
    "HashTableRow",
    "HashCircuit",
    # Backends
    "CircuitBackend",
    "ProvingBackend",
    "ReferenceBackend",
    "SingleStrategy",
    # Pipeline
    "ProvingArtifacts",
    "setup_params",
    "check_constraints",
    "generate_keys",
    "derive_verification_key",
    "create_proof",
    "verify_proof",
    # Orchestrator
    "BenchmarkConfig",
    "BenchmarkResult",
    "BenchmarkRun",
    "RunState",
    "Instrumentation",
    "LiteralRows",
    "GeneratedRows",
    "SCENARIOS",
    "run_benchmark",
    "run_scenarios",
    # Errors
    "PipelineError",
    "ConfigurationError",
    "SynthesisError",
    "ProofGenerationError",
    "VerificationFailure",
    "SimulationFailure",
]
