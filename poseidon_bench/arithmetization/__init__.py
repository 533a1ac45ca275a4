"""Arithmetization - constraint system, layouters, sponge chip, simulator."""

from .constraint_system import (
    BLINDING_FACTORS,
    Cell,
    CircuitStats,
    Column,
    ColumnType,
    ConstraintSystem,
    Gate,
    Query,
)
from .layout import CircuitLayout, LayoutView
from .layouter import DenseLayouter, Layouter, Region, RegionInfo
from .mock_prover import (
    ConstraintNotSatisfied,
    EqualityNotSatisfied,
    MockProver,
)
from .sponge import (
    DEFAULT_STEP,
    DOMAIN_SHIFT,
    NUM_HASH_COLUMNS,
    ROWS_PER_STEP,
    SpongeChip,
    SpongeConfig,
    permutation_trace,
)

__all__ = [
    # Constraint System
    "ConstraintSystem",
    "Column",
    "ColumnType",
    "Query",
    "Cell",
    "Gate",
    "CircuitStats",
    "BLINDING_FACTORS",
    # Layouters
    "Layouter",
    "DenseLayouter",
    "Region",
    "RegionInfo",
    # Sponge Chip
    "SpongeConfig",
    "SpongeChip",
    "permutation_trace",
    "DEFAULT_STEP",
    "DOMAIN_SHIFT",
    "ROWS_PER_STEP",
    "NUM_HASH_COLUMNS",
    # Simulator
    "MockProver",
    "ConstraintNotSatisfied",
    "EqualityNotSatisfied",
    # Rendering
    "CircuitLayout",
    "LayoutView",
]
