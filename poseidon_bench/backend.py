"""
Capability interfaces for the circuit layer and the proving system.

Pipeline drivers only talk to these interfaces, so a native proving
library can stand in for the in-process reference backend.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, List, Sequence

from .errors import VerificationFailure

# --- Type Aliases ---

Instances = Sequence[Sequence[Sequence[int]]]


class SingleStrategy:
    """Verification strategy that accepts exactly one proof per instance."""

    def __init__(self, params: Any):
        self.params = params
        self.used = False

    def process(self, check: Callable[[], None]) -> None:
        """Run ``check`` once; a second call is a usage error."""
        if self.used:
            raise VerificationFailure("single-proof strategy already used")
        self.used = True
        check()


class CircuitBackend(ABC):
    """Constraint simulation and circuit inspection."""

    @abstractmethod
    def simulate(self, k: int, circuit, instances: Instances) -> List[Any]:
        """Failures found by the constraint simulator (empty when satisfied)."""

    @abstractmethod
    def circuit_stats(self, k: int, circuit) -> Any:
        """Statistics of the configured constraint system."""

    @abstractmethod
    def render_layout(self, k: int, circuit, path: Path, view: Any) -> Path:
        """Render a layout image, returning the written path."""


class ProvingBackend(ABC):
    """Parameter setup, key generation, proving and verification."""

    @abstractmethod
    def setup(self, k: int) -> Any:
        pass

    @abstractmethod
    def verifier_params(self, params: Any) -> Any:
        pass

    @abstractmethod
    def keygen_vk(self, params: Any, circuit) -> Any:
        pass

    @abstractmethod
    def keygen_pk(self, params: Any, vk: Any, circuit) -> Any:
        pass

    @abstractmethod
    def create_proof(self, params: Any, pk: Any, circuits: Sequence, instances: Instances, seed: bytes) -> bytes:
        pass

    @abstractmethod
    def transcript_reader(self, proof: bytes) -> Any:
        """Fresh read cursor over proof bytes."""

    @abstractmethod
    def verify_proof(self, params: Any, vk: Any, strategy: SingleStrategy, instances: Instances, transcript: Any) -> None:
        """Raise VerificationFailure unless the proof is accepted."""
