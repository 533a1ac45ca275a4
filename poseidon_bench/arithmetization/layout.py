"""Circuit layout rendering with matplotlib.

Draws the row/column grid of a synthesized circuit: region extents,
nonzero cells, equality-constrained cells and the blinding rows at the
end of the domain. Purely diagnostic.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.colors import ListedColormap  # noqa: E402

from .constraint_system import Column, ColumnType, ConstraintSystem  # noqa: E402
from .layouter import DenseLayouter  # noqa: E402

# Cell classes, in colormap order
UNUSED, REGION, NONZERO, BLINDING = range(4)
COLORS = ["#ffffff", "#dbe9f6", "#3c78b4", "#bbbbbb"]

# Region labels beyond this many are omitted to keep the plot legible
MAX_REGION_LABELS = 40


@dataclass(frozen=True)
class LayoutView:
    """Viewport over the grid; ranges are half-open, None means everything."""
    rows: Optional[Tuple[int, int]] = None
    columns: Optional[Tuple[int, int]] = None
    show_labels: bool = True
    show_equality: bool = True


def _all_columns(cs: ConstraintSystem) -> List[Column]:
    columns = []
    for kind, count in cs.column_counts().items():
        columns.extend(Column(kind, i) for i in range(count))
    return columns


class CircuitLayout:
    """Renders one circuit at a given k to an image file."""

    def __init__(self, view: Optional[LayoutView] = None):
        self.view = view or LayoutView()

    def render(self, k: int, circuit, path: Union[str, Path]) -> Path:
        cs = ConstraintSystem()
        config = circuit.configure(cs)
        layouter = DenseLayouter(cs, k)
        circuit.synthesize(config, layouter)
        return self.draw(cs, layouter, Path(path))

    def draw(self, cs: ConstraintSystem, grid: DenseLayouter, path: Path) -> Path:
        columns = _all_columns(cs)
        row_lo, row_hi = self.view.rows or (0, grid.n)
        col_lo, col_hi = self.view.columns or (0, len(columns))
        row_hi = min(row_hi, grid.n)
        col_hi = min(col_hi, len(columns))
        if row_lo >= row_hi or col_lo >= col_hi:
            raise ValueError(f"empty viewport rows={self.view.rows} columns={self.view.columns}")
        shown = columns[col_lo:col_hi]

        cells = np.full((row_hi - row_lo, len(shown)), UNUSED, dtype=np.int8)
        for region in grid.regions:
            lo, hi = max(region.start, row_lo), min(region.end, row_hi)
            if lo < hi:
                cells[lo - row_lo:hi - row_lo, :] = REGION
        usable = cs.usable_rows(grid.k)
        if usable < row_hi:
            cells[max(usable, row_lo) - row_lo:, :] = BLINDING
        for j, column in enumerate(shown):
            if column.kind is ColumnType.INSTANCE:
                continue
            for row in range(row_lo, min(row_hi, usable)):
                if grid.value(column, row):
                    cells[row - row_lo, j] = NONZERO

        height = min(max(4.0, (row_hi - row_lo) * 0.08), 60.0)
        fig, ax = plt.subplots(figsize=(max(4.0, len(shown) * 0.6), height))
        try:
            ax.imshow(
                cells,
                aspect="auto",
                interpolation="nearest",
                cmap=ListedColormap(COLORS),
                vmin=0,
                vmax=len(COLORS) - 1,
                extent=(-0.5, len(shown) - 0.5, row_hi - 0.5, row_lo - 0.5),
            )

            for region in grid.regions:
                if row_lo <= region.start < row_hi:
                    ax.axhline(region.start - 0.5, color="black", linewidth=0.6)
            for j in range(1, len(shown)):
                if shown[j].kind is not shown[j - 1].kind:
                    ax.axvline(j - 0.5, color="red", linewidth=1.0)

            if self.view.show_labels:
                visible = [r for r in grid.regions if row_lo <= r.start < row_hi]
                for region in visible[:MAX_REGION_LABELS]:
                    ax.text(-0.6, region.start, region.name, ha="right", va="top", fontsize=6)

            if self.view.show_equality:
                index = {column: j for j, column in enumerate(shown)}
                xs, ys = [], []
                for a, b in grid.copies:
                    for cell in (a, b):
                        if cell.column in index and row_lo <= cell.row < row_hi:
                            xs.append(index[cell.column])
                            ys.append(cell.row)
                if xs:
                    ax.scatter(xs, ys, marker="x", color="orange", s=12, label="equality")
                    ax.legend(loc="upper right", fontsize=6)

            ax.set_xticks(range(len(shown)))
            ax.set_xticklabels([str(c) for c in shown], rotation=90, fontsize=7)
            ax.set_ylabel("row")
            ax.set_title(f"Circuit layout (k={grid.k}, rows {row_lo}..{row_hi - 1})")
            fig.tight_layout()

            path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(path, dpi=120)
        finally:
            plt.close(fig)
        return path
