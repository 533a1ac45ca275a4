"""
Streaming constraint check, one region at a time.

Gates read at most one row before or after the current row, and equality
constraints join cells of the same or adjacent regions. The checker
therefore only keeps the previous region and the current one in memory,
which lets the prover and the verifier check every region of a
stress-sized circuit without a full grid.
"""

from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

from ..arithmetization.constraint_system import Column, ColumnType, ConstraintSystem, Query
from ..arithmetization.layouter import CopyConstraint

# Window rows: absolute row -> (advice row, fixed row)
Rows = Dict[int, Tuple[Sequence[int], Sequence[int]]]


def _index_copies(copies: Sequence[CopyConstraint]) -> Dict[int, List[CopyConstraint]]:
    """Group copies by their later row, which is checked last."""
    by_row: Dict[int, List[CopyConstraint]] = defaultdict(list)
    for copy in copies:
        a, b = copy
        by_row[max(a.row, b.row)].append(copy)
    return by_row


class RegionChecker:
    """Checks gates and equality constraints region by region, in order.

    ``check`` raises ValueError naming the first failing constraint.
    """

    def __init__(self, cs: ConstraintSystem, copies: Sequence[CopyConstraint]):
        self.cs = cs
        self.regions_checked = 0
        self._copies_by_row = _index_copies(copies)
        self._previous: Rows = {}

    def check(self, start: int, advice: Sequence[Sequence[int]], fixed: Sequence[Sequence[int]]) -> None:
        current: Rows = {start + offset: (advice[offset], fixed[offset]) for offset in range(len(advice))}
        window = dict(self._previous)
        window.update(current)

        def value(column: Column, row: int) -> int:
            if row not in window:
                raise ValueError(f"row {row} is outside the regions being checked")
            advice_row, fixed_row = window[row]
            if column.kind is ColumnType.ADVICE:
                return advice_row[column.index]
            if column.kind is ColumnType.FIXED:
                return fixed_row[column.index]
            raise ValueError(f"unexpected query on {column}")

        for row in current:
            def cell(q: Query, row=row) -> int:
                return value(q.column, row + q.rotation)

            for gate in self.cs.gates:
                for name, result in zip(gate.constraint_names, gate.evaluate(cell)):
                    if result:
                        raise ValueError(f"gate '{gate.name}' constraint '{name}' fails at row {row}")

            for a, b in self._copies_by_row.get(row, ()):
                if value(a.column, a.row) != value(b.column, b.row):
                    raise ValueError(f"equality {a.column}@{a.row} = {b.column}@{b.row} fails")

        self._previous = current
        self.regions_checked += 1
