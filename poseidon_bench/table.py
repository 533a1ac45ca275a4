"""
Hash table model: the ordered list of hash inputs a circuit instance proves.

Each row is a pair of field elements to hash plus a control code; an
optional expected digest per row (``checks``) is placed in the circuit
instead of the computed one, so a wrong expectation fails simulation.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class HashTableRow:
    left: int
    right: int
    control: int = 0


@dataclass(frozen=True)
class HashTable:
    """Immutable hash table; build with the classmethods."""
    rows: Tuple[HashTableRow, ...] = ()
    checks: Tuple[Optional[int], ...] = ()

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[HashTableRow]:
        return iter(self.rows)

    @property
    def inputs(self) -> List[Tuple[int, int]]:
        return [(row.left, row.right) for row in self.rows]

    @property
    def controls(self) -> List[int]:
        return [row.control for row in self.rows]

    # --- Constructors ---

    @classmethod
    def empty(cls) -> "HashTable":
        return cls()

    @classmethod
    def literal(
        cls,
        rows: Iterable[Sequence[int]],
        checks: Sequence[Optional[int]] = ()
    ) -> "HashTable":
        """Table from (left, right) or (left, right, control) tuples.

        Raises:
            ValueError: If a row has the wrong arity.
        """
        parsed = []
        for i, row in enumerate(rows):
            if len(row) not in (2, 3):
                raise ValueError(f"row {i}: expected (left, right[, control]), got {len(row)} values")
            parsed.append(HashTableRow(*row))
        return cls(tuple(parsed), tuple(checks))

    @classmethod
    def from_inputs(
        cls,
        inputs: Sequence[Tuple[int, int]],
        controls: Sequence[int],
        checks: Sequence[Optional[int]] = ()
    ) -> "HashTable":
        if len(inputs) != len(controls):
            raise ValueError(f"{len(inputs)} inputs but {len(controls)} controls")
        rows = tuple(HashTableRow(l, r, c) for (l, r), c in zip(inputs, controls))
        return cls(rows, tuple(checks))

    @classmethod
    def generated(cls, count: int, control: int) -> "HashTable":
        """Row i hashes (i, i + 1); every row uses the same control."""
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        return cls(tuple(HashTableRow(i, i + 1, control) for i in range(count)))
