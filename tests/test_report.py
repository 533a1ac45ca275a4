"""Tests for the console report."""

from poseidon_bench.report import format_circuit_stats, format_timings, print_timings


class TestReport:

    def test_circuit_stats(self, backend, scenario_b_circuit) -> None:
        """Statistics table lists the configured shape."""
        stats = backend.circuit_stats(11, scenario_b_circuit)
        assert stats.num_advice_columns == 6
        assert stats.num_fixed_columns == 5
        assert stats.num_instance_columns == 0
        assert stats.num_gates == 4
        assert stats.degree == 6
        assert stats.num_phases == 1
        assert stats.advice_queries == 15
        assert stats.fixed_queries == 5
        assert stats.permutation_columns == 2
        assert stats.rows_per_region == 29
        assert stats.rows_used == 58
        assert stats.usable_rows == 2048 - 6

        text = format_circuit_stats(stats)
        assert "CIRCUIT STATISTICS" in text
        assert "advice columns" in text
        assert "permutation columns" in text

    def test_timings(self) -> None:
        """Phases stay in execution order with a total."""
        text = format_timings("demo", {"setup": 1.0, "keygen": 3.0}, proof_size=1234)
        lines = text.splitlines()
        assert "BENCHMARK: demo" in text
        assert lines.index(next(l for l in lines if l.startswith("setup"))) < \
            lines.index(next(l for l in lines if l.startswith("keygen")))
        assert "75.0" in text
        assert "4.000" in text
        assert "1234" in text

    def test_print(self, capsys) -> None:
        """print_timings writes the formatted table."""
        print_timings("demo", {"prove": 0.5})
        assert "prove" in capsys.readouterr().out
