"""Region-based layouter.

Chips describe their witness as regions: contiguous blocks of rows that
are assigned in one callback. The base ``Layouter`` places regions one
after another and hands each completed ``Region`` to ``on_region``;
subclasses decide what to keep. ``DenseLayouter`` keeps the whole grid
(constraint simulation, layout rendering); the proving system keeps only
digests so that large circuits never materialize a full grid.
"""

from abc import ABC, abstractmethod
from bisect import bisect_right
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..errors import ConfigurationError
from ..primitives.field import MODULUS
from .constraint_system import Cell, Column, ColumnType, ConstraintSystem

# --- Type Aliases ---

CopyConstraint = Tuple[Cell, Cell]


@dataclass(frozen=True)
class RegionInfo:
    """Placement of one region in the grid."""
    index: int
    name: str
    start: int
    n_rows: int

    @property
    def end(self) -> int:
        return self.start + self.n_rows


class Region:
    """Assignment buffer for one region.

    Offsets are relative to the region start; returned cells are absolute.
    """

    def __init__(self, info: RegionInfo, n_advice: int, n_fixed: int):
        self.info = info
        self.advice = [[0] * n_advice for _ in range(info.n_rows)]
        self.fixed = [[0] * n_fixed for _ in range(info.n_rows)]
        self.copies: List[CopyConstraint] = []

    def _check_offset(self, offset: int) -> None:
        if not 0 <= offset < self.info.n_rows:
            raise ValueError(
                f"offset {offset} outside region '{self.info.name}' of {self.info.n_rows} rows"
            )

    def assign_advice(self, column: Column, offset: int, value: int) -> Cell:
        if column.kind is not ColumnType.ADVICE:
            raise ValueError(f"{column} is not an advice column")
        self._check_offset(offset)
        self.advice[offset][column.index] = value % MODULUS
        return Cell(column, self.info.start + offset)

    def assign_fixed(self, column: Column, offset: int, value: int) -> Cell:
        if column.kind is not ColumnType.FIXED:
            raise ValueError(f"{column} is not a fixed column")
        self._check_offset(offset)
        self.fixed[offset][column.index] = value % MODULUS
        return Cell(column, self.info.start + offset)

    def constrain_equal(self, a: Cell, b: Cell) -> None:
        self.copies.append((a, b))

    def advice_values(self) -> List[int]:
        """Row-major flattening of the advice block."""
        return [v for row in self.advice for v in row]

    def fixed_values(self) -> List[int]:
        return [v for row in self.fixed for v in row]


class Layouter(ABC):
    """Places regions sequentially below ``row_limit``."""

    def __init__(self, cs: ConstraintSystem, row_limit: int):
        self.cs = cs
        self.row_limit = row_limit
        self.next_row = 0
        self.regions: List[RegionInfo] = []

    def assign_region(self, name: str, n_rows: int, assignment: Callable[[Region], None]) -> RegionInfo:
        """Allocate ``n_rows`` rows and fill them with ``assignment``.

        Raises:
            ConfigurationError: If the region does not fit below the row limit.
        """
        if self.next_row + n_rows > self.row_limit:
            raise ConfigurationError(
                f"not enough rows available: region '{name}' needs rows "
                f"[{self.next_row}, {self.next_row + n_rows}) but only {self.row_limit} are usable"
            )
        info = RegionInfo(len(self.regions), name, self.next_row, n_rows)
        region = Region(info, self.cs.num_advice_columns, self.cs.num_fixed_columns)
        assignment(region)

        self.regions.append(info)
        self.next_row += n_rows
        self.on_region(region)
        return info

    @abstractmethod
    def on_region(self, region: Region) -> None:
        """Consume a completed region."""


class DenseLayouter(Layouter):
    """Keeps the full 2^k grid, column-major."""

    def __init__(self, cs: ConstraintSystem, k: int):
        super().__init__(cs, cs.usable_rows(k))
        self.k = k
        self.n = 1 << k
        self.advice = [[0] * self.n for _ in range(cs.num_advice_columns)]
        self.fixed = [[0] * self.n for _ in range(cs.num_fixed_columns)]
        self.copies: List[CopyConstraint] = []
        self._starts: List[int] = []

    def on_region(self, region: Region) -> None:
        start = region.info.start
        for offset in range(region.info.n_rows):
            for col, value in enumerate(region.advice[offset]):
                self.advice[col][start + offset] = value
            for col, value in enumerate(region.fixed[offset]):
                self.fixed[col][start + offset] = value
        self.copies.extend(region.copies)
        self._starts.append(start)

    def value(self, column: Column, row: int) -> int:
        """Cell value; rows wrap around the domain."""
        row %= self.n
        if column.kind is ColumnType.ADVICE:
            return self.advice[column.index][row]
        if column.kind is ColumnType.FIXED:
            return self.fixed[column.index][row]
        raise ValueError(f"no assignments kept for {column}")

    def region_at(self, row: int) -> Optional[RegionInfo]:
        """Region containing ``row``, or None outside all regions."""
        idx = bisect_right(self._starts, row) - 1
        if idx < 0:
            return None
        info = self.regions[idx]
        return info if row < info.end else None
