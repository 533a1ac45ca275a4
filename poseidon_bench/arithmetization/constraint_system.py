"""Constraint system: columns, queries, gates and circuit statistics.

A gate is a selector column plus a polynomial callback. The callback
receives a ``cell`` function resolving a ``Query`` (column, rotation) to
a field element at the row being checked, so the same gate code serves
the constraint simulator (dense grid) and the region checker the prover
and verifier share (two-region window).

Example:
    s = cs.fixed_column()
    a = cs.query_advice(col_a, 0)
    b = cs.query_advice(col_a, 1)
    cs.create_gate("double", s, 2, ["next is double"],
                   lambda cell: [cell(b) - 2 * cell(a)])
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Sequence, Set

from ..primitives.field import MODULUS

# --- Constants ---

# Rows at the end of the domain reserved for blinding values
BLINDING_FACTORS = 5

# Degree of the equality (permutation) argument
PERMUTATION_DEGREE = 3


class ColumnType(Enum):
    ADVICE = "advice"
    FIXED = "fixed"
    INSTANCE = "instance"


@dataclass(frozen=True)
class Column:
    kind: ColumnType
    index: int

    def __str__(self) -> str:
        return f"{self.kind.value}[{self.index}]"


@dataclass(frozen=True)
class Query:
    column: Column
    rotation: int


@dataclass(frozen=True)
class Cell:
    """Absolute grid position."""
    column: Column
    row: int


# --- Type Aliases ---

CellResolver = Callable[[Query], int]
GatePoly = Callable[[CellResolver], Sequence[int]]


@dataclass
class Gate:
    """Selector-gated group of constraints sharing one callback."""
    name: str
    selector: Column
    degree: int
    constraint_names: List[str]
    poly: GatePoly

    @property
    def selector_query(self) -> Query:
        return Query(self.selector, 0)

    def evaluate(self, cell: CellResolver) -> List[int]:
        """Constraint values at one row; all zero when satisfied.

        The callback is not invoked on rows where the selector is off,
        so it may query rotations that fall outside the active region.
        """
        selector = cell(self.selector_query)
        if selector == 0:
            return [0] * len(self.constraint_names)
        values = list(self.poly(cell))
        if len(values) != len(self.constraint_names):
            raise ValueError(
                f"gate '{self.name}' produced {len(values)} values, "
                f"declared {len(self.constraint_names)}"
            )
        return [(selector * v) % MODULUS for v in values]


@dataclass(frozen=True)
class CircuitStats:
    """Summary of a configured constraint system."""
    num_gates: int
    num_constraints: int
    num_advice_columns: int
    num_fixed_columns: int
    num_instance_columns: int
    num_phases: int
    degree: int
    minimum_rows: int
    blinding_factors: int
    usable_rows: int
    rows_used: int
    rows_per_region: int
    advice_queries: int
    fixed_queries: int
    instance_queries: int
    permutation_columns: int


class ConstraintSystem:
    """Column allocator and gate registry for one circuit shape."""

    def __init__(self):
        self.num_advice_columns = 0
        self.num_fixed_columns = 0
        self.num_instance_columns = 0
        self.gates: List[Gate] = []
        self.queries: Set[Query] = set()
        self.equality_columns: List[Column] = []

    # --- Columns ---

    def advice_column(self) -> Column:
        column = Column(ColumnType.ADVICE, self.num_advice_columns)
        self.num_advice_columns += 1
        return column

    def fixed_column(self) -> Column:
        column = Column(ColumnType.FIXED, self.num_fixed_columns)
        self.num_fixed_columns += 1
        return column

    def enable_equality(self, column: Column) -> None:
        if column not in self.equality_columns:
            self.equality_columns.append(column)

    # --- Queries and Gates ---

    def query_advice(self, column: Column, rotation: int = 0) -> Query:
        return self._query(column, ColumnType.ADVICE, rotation)

    def query_fixed(self, column: Column, rotation: int = 0) -> Query:
        return self._query(column, ColumnType.FIXED, rotation)

    def _query(self, column: Column, kind: ColumnType, rotation: int) -> Query:
        if column.kind is not kind:
            raise ValueError(f"{column} is not a {kind.value} column")
        query = Query(column, rotation)
        self.queries.add(query)
        return query

    def create_gate(
        self,
        name: str,
        selector: Column,
        degree: int,
        constraint_names: Sequence[str],
        poly: GatePoly
    ) -> Gate:
        """Register a gate. ``degree`` includes the selector."""
        gate = Gate(name, self.query_fixed(selector).column, degree, list(constraint_names), poly)
        self.gates.append(gate)
        return gate

    # --- Sizing ---

    def blinding_factors(self) -> int:
        return BLINDING_FACTORS

    def usable_rows(self, k: int) -> int:
        """Rows available to regions in a domain of 2^k rows."""
        return (1 << k) - self.blinding_factors() - 1

    def minimum_rows(self) -> int:
        return self.blinding_factors() + 3

    def degree(self) -> int:
        return max([PERMUTATION_DEGREE] + [gate.degree for gate in self.gates])

    def column_counts(self) -> Dict[ColumnType, int]:
        return {
            ColumnType.ADVICE: self.num_advice_columns,
            ColumnType.FIXED: self.num_fixed_columns,
            ColumnType.INSTANCE: self.num_instance_columns,
        }

    def describe(self) -> List[str]:
        """Stable textual description of the shape (used in key digests)."""
        lines = [
            f"advice={self.num_advice_columns}",
            f"fixed={self.num_fixed_columns}",
            f"instance={self.num_instance_columns}",
            "equality=" + ",".join(str(c) for c in self.equality_columns),
        ]
        for gate in self.gates:
            lines.append(
                f"gate {gate.name} sel={gate.selector} deg={gate.degree} "
                f"constraints={'|'.join(gate.constraint_names)}"
            )
        for query in sorted(self.queries, key=lambda q: (q.column.kind.value, q.column.index, q.rotation)):
            lines.append(f"query {query.column}@{query.rotation}")
        return lines

    def stats(self, k: int, rows_used: int, rows_per_region: int = 0) -> CircuitStats:
        def count_queries(kind: ColumnType) -> int:
            return sum(1 for q in self.queries if q.column.kind is kind)

        return CircuitStats(
            num_gates=len(self.gates),
            num_constraints=sum(len(g.constraint_names) for g in self.gates),
            num_advice_columns=self.num_advice_columns,
            num_fixed_columns=self.num_fixed_columns,
            num_instance_columns=self.num_instance_columns,
            num_phases=1,
            degree=self.degree(),
            minimum_rows=self.minimum_rows(),
            blinding_factors=self.blinding_factors(),
            usable_rows=self.usable_rows(k),
            rows_used=rows_used,
            rows_per_region=rows_per_region,
            advice_queries=count_queries(ColumnType.ADVICE),
            fixed_queries=count_queries(ColumnType.FIXED),
            instance_queries=count_queries(ColumnType.INSTANCE),
            permutation_columns=len(self.equality_columns),
        )
