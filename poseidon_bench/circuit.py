"""Circuit adapter binding a HashTable and a capacity to the sponge chip."""

import logging
from dataclasses import dataclass

from .arithmetization.constraint_system import ConstraintSystem
from .arithmetization.layouter import Layouter
from .arithmetization.sponge import (
    DEFAULT_STEP,
    NUM_HASH_COLUMNS,
    ROWS_PER_STEP,
    SpongeChip,
    SpongeConfig,
    rows_required,
)
from .errors import SynthesisError
from .table import HashTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HashCircuit:
    """Proves every row of ``table`` inside a circuit of ``capacity`` steps.

    Both the concrete instance and its shape-only twin (empty table, same
    capacity) produce the same layout, which is what lets key generation
    run without a witness.
    """
    table: HashTable
    capacity: int

    def __post_init__(self):
        if self.capacity < 1:
            raise ValueError(f"capacity must be positive, got {self.capacity}")

    def without_witnesses(self) -> "HashCircuit":
        return HashCircuit(HashTable.empty(), self.capacity)

    @property
    def rows_required(self) -> int:
        return rows_required(self.capacity)

    @property
    def rows_per_step(self) -> int:
        return ROWS_PER_STEP

    @staticmethod
    def configure(cs: ConstraintSystem) -> SpongeConfig:
        """Six advice columns shared by the table and the permutation state."""
        hash_table = tuple(cs.advice_column() for _ in range(NUM_HASH_COLUMNS))
        q_enable = cs.fixed_column()
        return SpongeConfig.configure_sub(cs, (q_enable, hash_table), DEFAULT_STEP)

    def synthesize(self, config: SpongeConfig, layouter: Layouter) -> None:
        """Load the table into the chip.

        Raises:
            SynthesisError: If the table exceeds the capacity or is malformed.
        """
        if len(self.table) > self.capacity:
            raise SynthesisError(
                f"hash table has {len(self.table)} rows, circuit capacity is {self.capacity}"
            )
        logger.debug("synthesizing %d rows into %d steps", len(self.table), self.capacity)
        chip = SpongeChip.construct(
            config,
            self.table.inputs,
            self.table.controls,
            self.table.checks,
            self.capacity,
        )
        chip.load(layouter)
