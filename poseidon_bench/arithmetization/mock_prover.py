"""
Constraint simulator.

Runs the circuit's synthesis into a dense grid and checks every gate on
every row plus every copy constraint, without producing a proof. Failures
carry enough context (gate, region, row, cell values) to debug a witness.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from ..errors import ConfigurationError, SimulationFailure
from .constraint_system import Cell, ConstraintSystem, Query
from .layouter import DenseLayouter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConstraintNotSatisfied:
    """A gate constraint evaluated to a nonzero value."""
    gate: str
    constraint: str
    row: int
    region: Optional[str]
    offset: Optional[int]
    cell_values: Dict[str, int] = field(default_factory=dict, compare=False)

    def __str__(self) -> str:
        where = f"region '{self.region}' offset {self.offset}" if self.region else "outside regions"
        values = ", ".join(f"{name}={value:#x}" for name, value in sorted(self.cell_values.items()))
        return (
            f"constraint '{self.constraint}' of gate '{self.gate}' not satisfied "
            f"at row {self.row} ({where}); cells: {values}"
        )


@dataclass(frozen=True)
class EqualityNotSatisfied:
    """Two copy-constrained cells hold different values."""
    left: Cell
    right: Cell
    left_value: int
    right_value: int
    region: Optional[str]

    def __str__(self) -> str:
        return (
            f"equality {self.left.column}@{self.left.row} = {self.right.column}@{self.right.row} "
            f"not satisfied in region '{self.region}' ({self.left_value:#x} != {self.right_value:#x})"
        )


VerifyFailure = Union[ConstraintNotSatisfied, EqualityNotSatisfied]


class MockProver:
    """Dense evaluation of one circuit at a given k."""

    def __init__(self, k: int, cs: ConstraintSystem, layouter: DenseLayouter):
        self.k = k
        self.cs = cs
        self.layouter = layouter

    @classmethod
    def run(cls, k: int, circuit, instances: Sequence[Sequence[int]] = ()) -> "MockProver":
        """Configure and synthesize ``circuit`` into a 2^k grid.

        Raises:
            ConfigurationError: If the circuit does not fit, or the instance
                columns do not match.
            SynthesisError: If the circuit cannot lay out its witness.
        """
        cs = ConstraintSystem()
        config = circuit.configure(cs)
        if len(instances) != cs.num_instance_columns:
            raise ConfigurationError(
                f"circuit has {cs.num_instance_columns} instance columns, got {len(instances)}"
            )
        if (1 << k) < cs.minimum_rows():
            raise ConfigurationError(f"k={k} is below the minimum of {cs.minimum_rows()} rows")

        layouter = DenseLayouter(cs, k)
        circuit.synthesize(config, layouter)
        logger.debug("mock prover synthesized %d regions into %d rows", len(layouter.regions), layouter.next_row)
        return cls(k, cs, layouter)

    def verify(self) -> List[VerifyFailure]:
        """All violated constraints; empty when the witness is satisfying."""
        failures: List[VerifyFailure] = []
        grid = self.layouter

        for gate in self.cs.gates:
            selector = grid.fixed[gate.selector.index]
            for row in range(grid.n):
                if selector[row] == 0:
                    continue

                def cell(query: Query, row=row) -> int:
                    return grid.value(query.column, row + query.rotation)

                for name, value in zip(gate.constraint_names, gate.evaluate(cell)):
                    if value:
                        failures.append(self._constraint_failure(gate.name, name, row))

        for left, right in grid.copies:
            a = grid.value(left.column, left.row)
            b = grid.value(right.column, right.row)
            if a != b:
                region = grid.region_at(left.row)
                failures.append(EqualityNotSatisfied(
                    left, right, a, b, region.name if region else None
                ))

        logger.debug("mock prover found %d failure(s)", len(failures))
        return failures

    def assert_satisfied(self) -> None:
        """Raise SimulationFailure listing every violation."""
        failures = self.verify()
        if failures:
            raise SimulationFailure(failures)

    def _constraint_failure(self, gate: str, constraint: str, row: int) -> ConstraintNotSatisfied:
        grid = self.layouter
        region = grid.region_at(row)
        values = {
            f"{q.column}@{q.rotation}": grid.value(q.column, row + q.rotation)
            for q in self.cs.queries
        }
        return ConstraintNotSatisfied(
            gate=gate,
            constraint=constraint,
            row=row,
            region=region.name if region else None,
            offset=row - region.start if region else None,
            cell_values=values,
        )
