"""Tests for the benchmark orchestrator."""

from dataclasses import replace

import pytest

from poseidon_bench.__main__ import main
from poseidon_bench.bench import (
    DEFAULT_SEED,
    SCENARIOS,
    BenchmarkConfig,
    BenchmarkRun,
    GeneratedRows,
    Instrumentation,
    LiteralRows,
    RunState,
    run_benchmark,
    run_scenarios,
)
from poseidon_bench.errors import ProofGenerationError, SimulationFailure, VerificationFailure

HAPPY_PATH = [
    RunState.INIT,
    RunState.PARAMS_READY,
    RunState.KEYS_READY,
    RunState.PROOF_READY,
    RunState.VERIFIED,
]


class TestScenarios:
    """The built-in configurations."""

    def test_correctness(self) -> None:
        config = SCENARIOS["correctness"]
        assert (config.k, config.capacity, config.simulate) == (8, 4, True)
        assert config.table_source == LiteralRows(((1, 2, 0), (30, 1, 46), (65536, 0, 14)))
        assert config.seed == bytes([101] * 32)

    def test_instrumented(self) -> None:
        config = SCENARIOS["instrumented"]
        assert (config.k, config.capacity) == (11, 2)
        assert config.table_source == GeneratedRows(count=1, control=54)
        assert Instrumentation.LAYOUT_RENDER in config.instrumentation

    def test_stress(self) -> None:
        config = SCENARIOS["stress"]
        assert (config.k, config.capacity) == (22, 143361)
        assert config.table_source == GeneratedRows(count=143360, control=13)
        assert config.build_circuit().rows_required <= (1 << 22) - 6

    def test_from_dict(self) -> None:
        """JSON-like data maps onto the config record."""
        config = BenchmarkConfig.from_dict({
            "name": "custom",
            "k": 9,
            "capacity": 3,
            "table": {"rows": [[1, 2, 0], [3, 4]], "checks": [None, 7]},
            "instrumentation": ["diagnostics"],
            "seed": "00" * 32,
            "layout_view": {"rows": [0, 10]},
        })
        assert config.k == 9
        assert config.table_source == LiteralRows(((1, 2, 0), (3, 4)), (None, 7))
        assert config.instrumentation == Instrumentation.DIAGNOSTICS
        assert config.seed == bytes(32)
        assert config.layout_view.rows == (0, 10)

        generated = BenchmarkConfig.from_dict({
            "name": "gen", "k": 8, "capacity": 4, "table": {"generated": {"count": 2}},
        })
        assert generated.table_source == GeneratedRows(2, 0)
        assert generated.seed == DEFAULT_SEED

    def test_from_dict_errors(self) -> None:
        """Missing keys and unknown flags are reported."""
        with pytest.raises(ValueError):
            BenchmarkConfig.from_dict({"name": "x", "k": 8, "table": {"rows": []}})
        with pytest.raises(ValueError):
            BenchmarkConfig.from_dict({
                "name": "x", "k": 8, "capacity": 1, "table": {"rows": []}, "instrumentation": ["metrics"],
            })


class TestStateMachine:
    """Orchestrator transitions, driven by a fake backend."""

    def test_happy_path(self, fake_backend) -> None:
        run = BenchmarkRun(SCENARIOS["correctness"], fake_backend)
        result = run.run()
        assert result.state is RunState.VERIFIED
        assert run.history == HAPPY_PATH
        assert fake_backend.call_names == [
            "setup", "verifier_params", "simulate", "keygen_vk", "keygen_pk",
            "create_proof", "transcript_reader", "verify_proof",
        ]
        assert set(result.timings) == {"setup", "simulate", "keygen", "prove", "verify"}
        assert result.proof_size == len(b"fake-proof")

    def test_prover_gets_witness_and_seed(self, fake_backend) -> None:
        run_benchmark(SCENARIOS["correctness"], fake_backend)
        _, _, circuits, instances, seed = fake_backend.args_of("create_proof")
        assert len(circuits[0].table) == 3
        assert instances == [[]]
        assert seed == bytes([101] * 32)

    def test_verifies_with_keygen_key(self, fake_backend) -> None:
        run_benchmark(SCENARIOS["correctness"], fake_backend)
        assert fake_backend.args_of("verify_proof")[1] == "vk"

    def test_no_simulation_by_default(self, fake_backend) -> None:
        run_benchmark(SCENARIOS["stress"], fake_backend)
        assert "simulate" not in fake_backend.call_names

    def test_simulation_failure_stops_before_keygen(self, make_backend) -> None:
        backend = make_backend(failures=["broken"])
        run = BenchmarkRun(SCENARIOS["correctness"], backend)
        with pytest.raises(SimulationFailure):
            run.run()
        assert run.state is RunState.FAILED
        assert run.history == [RunState.INIT, RunState.PARAMS_READY, RunState.FAILED]
        assert "keygen_vk" not in backend.call_names

    def test_prove_failure(self, make_backend) -> None:
        backend = make_backend(fail_at="create_proof", error=RuntimeError("boom"))
        run = BenchmarkRun(SCENARIOS["correctness"], backend)
        with pytest.raises(ProofGenerationError):
            run.run()
        assert run.history[-2:] == [RunState.KEYS_READY, RunState.FAILED]

    def test_verify_failure(self, make_backend) -> None:
        backend = make_backend(fail_at="verify_proof", error=VerificationFailure("rejected"))
        run = BenchmarkRun(SCENARIOS["correctness"], backend)
        with pytest.raises(VerificationFailure):
            run.run()
        assert run.history[-2:] == [RunState.PROOF_READY, RunState.FAILED]
        assert "verify" in run.timings

    def test_single_use(self, fake_backend) -> None:
        run = BenchmarkRun(SCENARIOS["correctness"], fake_backend)
        run.run()
        with pytest.raises(RuntimeError):
            run.run()

    def test_instrumentation(self, fake_backend, tmp_path) -> None:
        config = replace(SCENARIOS["instrumented"], layout_path=str(tmp_path / "layout.png"))
        result = run_benchmark(config, fake_backend)
        assert "circuit_stats" in fake_backend.call_names
        assert "render_layout" in fake_backend.call_names
        assert result.layout_path == tmp_path / "layout.png"

    def test_diagnostics_only(self, fake_backend) -> None:
        config = replace(SCENARIOS["correctness"], instrumentation=Instrumentation.DIAGNOSTICS)
        run_benchmark(config, fake_backend)
        assert "circuit_stats" in fake_backend.call_names
        assert "render_layout" not in fake_backend.call_names

    def test_run_scenarios_in_order(self, fake_backend) -> None:
        results = run_scenarios(["instrumented", "correctness"], fake_backend)
        assert list(results) == ["instrumented", "correctness"]
        assert all(r.state is RunState.VERIFIED for r in results.values())

    def test_unknown_scenario_runs_nothing(self, fake_backend) -> None:
        with pytest.raises(KeyError):
            run_scenarios(["correctness", "nope"], fake_backend)
        assert fake_backend.call_names == []


class TestEndToEnd:
    """Real runs through the reference backend."""

    def test_correctness(self, capsys) -> None:
        result = run_benchmark(SCENARIOS["correctness"])
        assert result.state is RunState.VERIFIED
        assert result.proof_size > 0
        assert "BENCHMARK: correctness" in capsys.readouterr().out

    def test_instrumented(self, tmp_path, capsys) -> None:
        config = replace(SCENARIOS["instrumented"], layout_path=str(tmp_path / "layout.png"))
        result = run_benchmark(config)
        assert result.state is RunState.VERIFIED
        assert result.layout_path.exists()
        assert "CIRCUIT STATISTICS" in capsys.readouterr().out

    def test_bad_check_fails_simulation(self) -> None:
        config = replace(
            SCENARIOS["correctness"],
            table_source=LiteralRows(((1, 2, 0),), checks=(1,)),
        )
        with pytest.raises(SimulationFailure):
            run_benchmark(config)

    def test_main_rejects_unknown(self, capsys) -> None:
        assert main(["nope"]) == 2
        assert "unknown scenario" in capsys.readouterr().err

    @pytest.mark.slow
    def test_stress(self) -> None:
        small = run_benchmark(SCENARIOS["correctness"])
        result = run_benchmark(SCENARIOS["stress"])
        assert result.state is RunState.VERIFIED
        for phase in ("keygen", "prove"):
            assert result.timings[phase] > small.timings[phase]
