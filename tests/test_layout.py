"""Tests for layout rendering."""

import matplotlib.pyplot as plt
import pytest

from poseidon_bench.arithmetization.layout import CircuitLayout, LayoutView


class TestLayout:

    def test_render_viewport(self, backend, scenario_b_circuit, tmp_path) -> None:
        """The instrumented viewport renders to a PNG."""
        path = backend.render_layout(11, scenario_b_circuit, tmp_path / "layout.png", LayoutView(rows=(0, 64)))
        assert path.exists()
        assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

    def test_column_window(self, scenario_b_circuit, tmp_path) -> None:
        """A column window limits what is drawn."""
        view = LayoutView(rows=(0, 32), columns=(0, 6), show_labels=False, show_equality=False)
        path = CircuitLayout(view).render(11, scenario_b_circuit, tmp_path / "advice.png")
        assert path.exists()

    def test_empty_viewport(self, scenario_b_circuit, tmp_path) -> None:
        """Degenerate windows are rejected."""
        with pytest.raises(ValueError):
            CircuitLayout(LayoutView(rows=(10, 10))).render(11, scenario_b_circuit, tmp_path / "x.png")

    def test_failed_write_closes_figure(self, scenario_b_circuit, tmp_path) -> None:
        """A path that cannot be written leaves no open figure behind."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        before = plt.get_fignums()
        with pytest.raises(OSError):
            CircuitLayout(LayoutView(rows=(0, 32))).render(11, scenario_b_circuit, blocker / "layout.png")
        assert plt.get_fignums() == before
