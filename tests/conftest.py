"""
Pytest configuration and shared fixtures.

Proving artifacts for the small scenarios are session-scoped: key
generation and proving run once and are shared by the tests that only
read them.
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, List, Optional, Tuple

import pytest

# Make the package importable without installation
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from poseidon_bench.backend import CircuitBackend, ProvingBackend  # noqa: E402
from poseidon_bench.bench import DEFAULT_SEED  # noqa: E402
from poseidon_bench.circuit import HashCircuit  # noqa: E402
from poseidon_bench.errors import PipelineError  # noqa: E402
from poseidon_bench.pipeline import create_proof, generate_keys, setup_params  # noqa: E402
from poseidon_bench.protocol.backend import ReferenceBackend  # noqa: E402
from poseidon_bench.table import HashTable  # noqa: E402

SCENARIO_A_ROWS = ((1, 2, 0), (30, 1, 46), (65536, 0, 14))


# --- Scenario Fixtures ---

@pytest.fixture(scope="session")
def backend() -> ReferenceBackend:
    return ReferenceBackend()


@pytest.fixture(scope="session")
def scenario_a_circuit() -> HashCircuit:
    """Three rows (one chained pair) in four steps, proved at k=8."""
    return HashCircuit(HashTable.literal(SCENARIO_A_ROWS), 4)


@pytest.fixture(scope="session")
def scenario_b_circuit() -> HashCircuit:
    """One generated row with control 54 in two steps, proved at k=11."""
    return HashCircuit(HashTable.generated(1, 54), 2)


@pytest.fixture(scope="session")
def scenario_a_artifacts(backend, scenario_a_circuit):
    params, verifier_params = setup_params(backend, 8)
    return generate_keys(backend, params, verifier_params, scenario_a_circuit)


@pytest.fixture(scope="session")
def scenario_a_proof(backend, scenario_a_artifacts, scenario_a_circuit) -> bytes:
    return create_proof(backend, scenario_a_artifacts, scenario_a_circuit, DEFAULT_SEED)


# --- Fake Backend ---

class FakeBackend(CircuitBackend, ProvingBackend):
    """Records every call; optionally fails one phase.

    Args:
        fail_at: Method name that should raise
        error: Exception instance raised there
        failures: Simulator failures returned by ``simulate``
    """

    def __init__(self, fail_at: Optional[str] = None, error: Optional[Exception] = None,
                 failures: Optional[List[Any]] = None):
        self.fail_at = fail_at
        self.error = error
        self.failures = failures or []
        self.calls: List[Tuple[str, tuple]] = []

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))
        if name == self.fail_at:
            raise self.error or PipelineError(f"{name} failed")

    @property
    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def args_of(self, name: str) -> tuple:
        return next(args for n, args in self.calls if n == name)

    def simulate(self, k, circuit, instances):
        self._record("simulate", k, circuit, instances)
        return list(self.failures)

    def circuit_stats(self, k, circuit):
        from poseidon_bench.arithmetization.constraint_system import ConstraintSystem
        self._record("circuit_stats", k, circuit)
        cs = ConstraintSystem()
        circuit.configure(cs)
        return cs.stats(k, circuit.rows_required, circuit.rows_per_step)

    def render_layout(self, k, circuit, path, view):
        self._record("render_layout", k, circuit, path, view)
        return path

    def setup(self, k):
        self._record("setup", k)
        return SimpleNamespace(k=k)

    def verifier_params(self, params):
        self._record("verifier_params", params)
        return SimpleNamespace(k=params.k, verifier=True)

    def keygen_vk(self, params, circuit):
        self._record("keygen_vk", params, circuit)
        return "vk"

    def keygen_pk(self, params, vk, circuit):
        self._record("keygen_pk", params, vk, circuit)
        return SimpleNamespace(vk=vk)

    def create_proof(self, params, pk, circuits, instances, seed):
        self._record("create_proof", params, pk, circuits, instances, seed)
        return b"fake-proof"

    def transcript_reader(self, proof):
        self._record("transcript_reader", proof)
        return iter(proof)

    def verify_proof(self, params, vk, strategy, instances, transcript):
        strategy.process(lambda: self._record("verify_proof", params, vk, instances))


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_backend():
    """Factory for fake backends configured to fail or report failures."""
    return FakeBackend
