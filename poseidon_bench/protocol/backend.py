"""In-process reference backend implementing both capability interfaces."""

from pathlib import Path
from typing import List, Optional, Sequence

from ..arithmetization.constraint_system import CircuitStats, ConstraintSystem
from ..arithmetization.layout import CircuitLayout, LayoutView
from ..arithmetization.mock_prover import MockProver, VerifyFailure
from ..backend import CircuitBackend, Instances, ProvingBackend, SingleStrategy
from ..primitives.rng import ProverRng
from ..primitives.transcript import TranscriptReader
from .keygen import ProvingKey, VerifyingKey, keygen_pk, keygen_vk
from .params import Params, ParamsVerifier
from .prover import create_proof
from .verifier import verify_proof


class ReferenceBackend(CircuitBackend, ProvingBackend):

    # --- Circuit Backend ---

    def simulate(self, k: int, circuit, instances: Instances = ()) -> List[VerifyFailure]:
        return MockProver.run(k, circuit, instances).verify()

    def circuit_stats(self, k: int, circuit) -> CircuitStats:
        cs = ConstraintSystem()
        circuit.configure(cs)
        return cs.stats(k, rows_used=circuit.rows_required, rows_per_region=circuit.rows_per_step)

    def render_layout(self, k: int, circuit, path: Path, view: Optional[LayoutView] = None) -> Path:
        return CircuitLayout(view).render(k, circuit, path)

    # --- Proving Backend ---

    def setup(self, k: int) -> Params:
        return Params.unsafe_setup(k)

    def verifier_params(self, params: Params) -> ParamsVerifier:
        return params.verifier_params()

    def keygen_vk(self, params: Params, circuit) -> VerifyingKey:
        return keygen_vk(params, circuit)

    def keygen_pk(self, params: Params, vk: VerifyingKey, circuit) -> ProvingKey:
        return keygen_pk(params, vk, circuit)

    def create_proof(self, params: Params, pk: ProvingKey, circuits: Sequence,
                     instances: Instances, seed: bytes) -> bytes:
        return create_proof(params, pk, circuits, instances, ProverRng.from_seed(seed))

    def transcript_reader(self, proof: bytes) -> TranscriptReader:
        return TranscriptReader(proof)

    def verify_proof(self, params: ParamsVerifier, vk: VerifyingKey, strategy: SingleStrategy,
                     instances: Instances, transcript: TranscriptReader) -> None:
        strategy.process(lambda: verify_proof(params, vk, instances, transcript))
