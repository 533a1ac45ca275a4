"""
Benchmark orchestrator.

One parameterized run drives the pipeline through its phases:

    Init -> ParamsReady -> KeysReady -> ProofReady -> Verified

Any error moves the run to Failed and is re-raised unchanged. Each phase
is timed with ``time.perf_counter``.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, Flag, auto
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from .arithmetization.layout import LayoutView
from .circuit import HashCircuit
from .pipeline import check_constraints, create_proof, generate_keys, setup_params, verify_proof
from .report import print_circuit_stats, print_timings
from .table import HashTable

logger = logging.getLogger(__name__)

DEFAULT_SEED = bytes([101] * 32)


class RunState(Enum):
    INIT = "Init"
    PARAMS_READY = "ParamsReady"
    KEYS_READY = "KeysReady"
    PROOF_READY = "ProofReady"
    VERIFIED = "Verified"
    FAILED = "Failed"


# Legal forward transitions; FAILED is reachable from any non-final state
TRANSITIONS = {
    RunState.INIT: RunState.PARAMS_READY,
    RunState.PARAMS_READY: RunState.KEYS_READY,
    RunState.KEYS_READY: RunState.PROOF_READY,
    RunState.PROOF_READY: RunState.VERIFIED,
}


class Instrumentation(Flag):
    NONE = 0
    DIAGNOSTICS = auto()
    LAYOUT_RENDER = auto()


# --- Table Sources ---

@dataclass(frozen=True)
class LiteralRows:
    rows: Tuple[Tuple[int, ...], ...]
    checks: Tuple[Optional[int], ...] = ()

    def build(self) -> HashTable:
        return HashTable.literal(self.rows, self.checks)


@dataclass(frozen=True)
class GeneratedRows:
    count: int
    control: int = 0

    def build(self) -> HashTable:
        return HashTable.generated(self.count, self.control)


TableSource = Union[LiteralRows, GeneratedRows]


# --- Configuration ---

@dataclass(frozen=True)
class BenchmarkConfig:
    name: str
    k: int
    capacity: int
    table_source: TableSource
    instrumentation: Instrumentation = Instrumentation.NONE
    simulate: bool = False
    seed: bytes = DEFAULT_SEED
    layout_path: str = "layout.png"
    layout_view: LayoutView = field(default_factory=LayoutView)

    def build_circuit(self) -> HashCircuit:
        return HashCircuit(self.table_source.build(), self.capacity)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BenchmarkConfig":
        """Build a config from JSON-like data.

        Tables are given either as ``{"rows": [[l, r, c], ...], "checks": [...]}``
        or as ``{"generated": {"count": n, "control": c}}``; instrumentation as
        a list of flag names; the seed as a hex string.

        Raises:
            ValueError: On missing keys or unknown values.
        """
        try:
            table = data["table"]
            if "generated" in table:
                gen = table["generated"]
                source: TableSource = GeneratedRows(int(gen["count"]), int(gen.get("control", 0)))
            else:
                source = LiteralRows(
                    tuple(tuple(int(v) for v in row) for row in table["rows"]),
                    tuple(None if c is None else int(c) for c in table.get("checks", ())),
                )

            flags = Instrumentation.NONE
            for flag in data.get("instrumentation", ()):
                flags |= Instrumentation[flag.upper()]

            view = data.get("layout_view", {})
            return cls(
                name=str(data["name"]),
                k=int(data["k"]),
                capacity=int(data["capacity"]),
                table_source=source,
                instrumentation=flags,
                simulate=bool(data.get("simulate", False)),
                seed=bytes.fromhex(data["seed"]) if "seed" in data else DEFAULT_SEED,
                layout_path=str(data.get("layout_path", "layout.png")),
                layout_view=LayoutView(
                    rows=tuple(view["rows"]) if "rows" in view else None,
                    columns=tuple(view["columns"]) if "columns" in view else None,
                ),
            )
        except KeyError as exc:
            raise ValueError(f"invalid benchmark config: missing or unknown {exc}") from exc


SCENARIOS: Dict[str, BenchmarkConfig] = {
    "correctness": BenchmarkConfig(
        name="correctness",
        k=8,
        capacity=4,
        table_source=LiteralRows(((1, 2, 0), (30, 1, 46), (65536, 0, 14))),
        simulate=True,
    ),
    "instrumented": BenchmarkConfig(
        name="instrumented",
        k=11,
        capacity=2,
        table_source=GeneratedRows(count=1, control=54),
        instrumentation=Instrumentation.DIAGNOSTICS | Instrumentation.LAYOUT_RENDER,
        layout_path="layout.png",
        layout_view=LayoutView(rows=(0, 64)),
    ),
    "stress": BenchmarkConfig(
        name="stress",
        k=22,
        capacity=143361,
        table_source=GeneratedRows(count=143360, control=13),
    ),
}


# --- Run ---

@dataclass
class BenchmarkResult:
    name: str
    state: RunState
    timings: Dict[str, float]
    proof_size: int
    layout_path: Optional[Path] = None


class BenchmarkRun:
    """A single pass of one configuration through the pipeline."""

    def __init__(self, config: BenchmarkConfig, backend=None):
        if backend is None:
            from .protocol.backend import ReferenceBackend
            backend = ReferenceBackend()
        self.config = config
        self.backend = backend
        self.state = RunState.INIT
        self.history = [RunState.INIT]
        self.timings: Dict[str, float] = {}
        self.layout_path: Optional[Path] = None

    def _advance(self, state: RunState) -> None:
        if TRANSITIONS.get(self.state) is not state:
            raise RuntimeError(f"illegal transition {self.state.value} -> {state.value}")
        logger.info("[%s] %s -> %s", self.config.name, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    @contextmanager
    def _timed(self, phase: str):
        start = time.perf_counter()
        try:
            yield
        finally:
            self.timings[phase] = time.perf_counter() - start

    def run(self) -> BenchmarkResult:
        """Execute every phase; marks the run Failed and re-raises on error."""
        if self.state is not RunState.INIT:
            raise RuntimeError(f"run already executed (state {self.state.value})")
        try:
            return self._run()
        except Exception as exc:
            logger.error("[%s] failed in state %s: %s", self.config.name, self.state.value, exc)
            self.state = RunState.FAILED
            self.history.append(RunState.FAILED)
            raise

    def _run(self) -> BenchmarkResult:
        config = self.config
        backend = self.backend
        circuit = config.build_circuit()
        logger.info("[%s] k=%d capacity=%d rows=%d", config.name, config.k, config.capacity, len(circuit.table))

        with self._timed("setup"):
            params, verifier_params = setup_params(backend, config.k)
        self._advance(RunState.PARAMS_READY)

        self._instrument(circuit)

        if config.simulate:
            with self._timed("simulate"):
                check_constraints(backend, config.k, circuit)

        with self._timed("keygen"):
            artifacts = generate_keys(backend, params, verifier_params, circuit)
        self._advance(RunState.KEYS_READY)

        with self._timed("prove"):
            proof = create_proof(backend, artifacts, circuit, config.seed)
        self._advance(RunState.PROOF_READY)

        with self._timed("verify"):
            verify_proof(backend, artifacts, proof)
        self._advance(RunState.VERIFIED)

        print_timings(config.name, self.timings, len(proof))
        return BenchmarkResult(
            name=config.name,
            state=self.state,
            timings=dict(self.timings),
            proof_size=len(proof),
            layout_path=self.layout_path,
        )

    def _instrument(self, circuit: HashCircuit) -> None:
        flags = self.config.instrumentation
        if flags & (Instrumentation.DIAGNOSTICS | Instrumentation.LAYOUT_RENDER):
            print_circuit_stats(self.backend.circuit_stats(self.config.k, circuit))
        if flags & Instrumentation.LAYOUT_RENDER:
            self.layout_path = self.backend.render_layout(
                self.config.k, circuit, Path(self.config.layout_path), self.config.layout_view
            )
            logger.info("[%s] layout written to %s", self.config.name, self.layout_path)


def run_benchmark(config: BenchmarkConfig, backend=None) -> BenchmarkResult:
    return BenchmarkRun(config, backend).run()


def run_scenarios(names: Sequence[str], backend=None) -> Dict[str, BenchmarkResult]:
    """Run named scenarios in order, stopping at the first failure.

    Raises:
        KeyError: If a name is not in SCENARIOS; nothing runs in that case.
    """
    configs = [SCENARIOS[name] for name in names]
    return {name: run_benchmark(config, backend) for name, config in zip(names, configs)}
