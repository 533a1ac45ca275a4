"""
Poseidon sponge chip: one hash step per region.

Each step occupies ``ROWS_PER_STEP`` rows of six advice columns:

    offset 0        table row  (hash, left, right, control, capacity, head)
    offsets 1..27   permutation trace; state [capacity, left, right] in
                    columns 0-2, partial-round S-box outputs in columns
                    3-5 (three partial rounds per row)
    offset 28       output state in columns 0-2, copy of control in column 3

The table hash and control cells are copy-constrained to the output row,
so a wrong expected digest shows up as an equality failure. Steps are
chained through rotation -1 from a step's table row into the previous
step's output row.

Control semantics: a row is the head of a message if it is the first row
or the previous row's control is at most ``step``; a head's capacity is
``control * 2^64``. Otherwise the row continues the previous message: its
capacity is the previous digest and its control must be the previous
control minus ``step``.
"""

from dataclasses import dataclass
from functools import partial
from typing import List, Optional, Sequence, Tuple

from ..errors import SynthesisError
from ..primitives.field import MODULUS, is_canonical
from ..primitives.poseidon import (
    PoseidonParams,
    State,
    add_round_constants,
    full_round,
    get_params,
    mix,
    sbox,
)
from .constraint_system import Column, ConstraintSystem
from .layouter import Layouter, Region

# --- Constants ---

DEFAULT_STEP = 32
DOMAIN_SHIFT = 1 << 64
PARTIAL_ROUNDS_PER_ROW = 3
NUM_HASH_COLUMNS = 6

FULL = "full"
PARTIAL = "partial"

# Column roles within the hash table
HASH, LEFT, RIGHT, CONTROL, CAPACITY, HEAD = range(NUM_HASH_COLUMNS)


def round_schedule(params: PoseidonParams) -> List[Tuple[str, int]]:
    """(kind, first round) for each permutation row of a step."""
    if params.rounds_p % PARTIAL_ROUNDS_PER_ROW:
        raise ValueError(
            f"partial rounds ({params.rounds_p}) must be a multiple of {PARTIAL_ROUNDS_PER_ROW}"
        )
    half = params.rounds_f // 2
    schedule = [(FULL, r) for r in range(half)]
    schedule += [
        (PARTIAL, half + PARTIAL_ROUNDS_PER_ROW * j)
        for j in range(params.rounds_p // PARTIAL_ROUNDS_PER_ROW)
    ]
    schedule += [(FULL, r) for r in range(half + params.rounds_p, params.n_rounds)]
    return schedule


SCHEDULE = round_schedule(get_params())

TABLE_ROW = 0
STATE_ROW = 1
OUTPUT_ROW = STATE_ROW + len(SCHEDULE)
ROWS_PER_STEP = OUTPUT_ROW + 1


def partial_rounds(state: Sequence[int], r: int, params: PoseidonParams) -> Tuple[State, List[int]]:
    """Apply the partial rounds of one row, returning the S-box outputs too."""
    x = list(state)
    sboxed = []
    for t in range(PARTIAL_ROUNDS_PER_ROW):
        u = add_round_constants(x, r + t, params)
        u[0] = sbox(u[0])
        sboxed.append(u[0])
        x = mix(u, params)
    return x, sboxed


@dataclass
class StepTrace:
    """Per-row permutation states and partial S-box outputs for one step."""
    states: List[State]
    sboxed: List[List[int]]

    @property
    def digest(self) -> int:
        return self.states[-1][0]


def permutation_trace(state: Sequence[int], params: PoseidonParams) -> StepTrace:
    states = [list(state)]
    sboxed = []
    for kind, r in SCHEDULE:
        if kind == FULL:
            states.append(full_round(states[-1], r, params))
            sboxed.append([0] * PARTIAL_ROUNDS_PER_ROW)
        else:
            nxt, outputs = partial_rounds(states[-1], r, params)
            states.append(nxt)
            sboxed.append(outputs)
    return StepTrace(states, sboxed)


def rows_required(capacity: int) -> int:
    return capacity * ROWS_PER_STEP


# --- Configuration ---

@dataclass(frozen=True)
class SpongeConfig:
    """Columns owned by the chip plus the chaining step."""
    q_enable: Column
    hash_table: Tuple[Column, ...]
    q_chain: Column
    s_full: Column
    s_partial: Column
    round_index: Column
    step: int

    @property
    def state(self) -> Tuple[Column, ...]:
        return self.hash_table[:3]

    @property
    def sbox_columns(self) -> Tuple[Column, ...]:
        return self.hash_table[3:]

    @classmethod
    def configure_sub(
        cls,
        cs: ConstraintSystem,
        columns: Tuple[Column, Sequence[Column]],
        step: int = DEFAULT_STEP
    ) -> "SpongeConfig":
        """Attach the sponge gates to caller-provided table columns.

        Args:
            cs: Constraint system being configured
            columns: (q_enable fixed column, six hash table advice columns)
            step: Control decrement between chained rows
        """
        q_enable, hash_table = columns
        hash_table = tuple(hash_table)
        if len(hash_table) != NUM_HASH_COLUMNS:
            raise ValueError(f"expected {NUM_HASH_COLUMNS} hash table columns, got {len(hash_table)}")

        config = cls(
            q_enable=q_enable,
            hash_table=hash_table,
            q_chain=cs.fixed_column(),
            s_full=cs.fixed_column(),
            s_partial=cs.fixed_column(),
            round_index=cs.fixed_column(),
            step=step,
        )
        cs.enable_equality(hash_table[HASH])
        cs.enable_equality(hash_table[CONTROL])

        params = get_params()
        cur = [cs.query_advice(c, 0) for c in hash_table]
        nxt = [cs.query_advice(c, 1) for c in config.state]
        prev = [cs.query_advice(c, -1) for c in hash_table]
        round_q = cs.query_fixed(config.round_index, 0)

        def table_gate(cell):
            head = cell(cur[HEAD])
            return [
                head * (1 - head),
                cell(nxt[0]) - cell(cur[CAPACITY]),
                cell(nxt[1]) - cell(cur[LEFT]),
                cell(nxt[2]) - cell(cur[RIGHT]),
                head * (cell(cur[CAPACITY]) - cell(cur[CONTROL]) * DOMAIN_SHIFT),
            ]

        def chain_gate(cell):
            not_head = 1 - cell(cur[HEAD])
            return [
                not_head * (cell(cur[CAPACITY]) - cell(prev[HASH])),
                not_head * (cell(prev[CONTROL]) - cell(cur[CONTROL]) - step),
            ]

        def full_round_gate(cell):
            state = [cell(cur[i]) for i in range(3)]
            expected = full_round(state, cell(round_q), params)
            return [cell(nxt[i]) - expected[i] for i in range(3)]

        def partial_round_gate(cell):
            r = cell(round_q)
            x = [cell(cur[i]) for i in range(3)]
            out = []
            for t in range(PARTIAL_ROUNDS_PER_ROW):
                u = add_round_constants(x, r + t, params)
                witnessed = cell(cur[3 + t])
                out.append(witnessed - sbox(u[0]))
                u[0] = witnessed
                x = mix(u, params)
            return out + [cell(nxt[i]) - x[i] for i in range(3)]

        cs.create_gate(
            "hash table", q_enable, 3,
            ["head is boolean", "capacity enters state", "left enters state",
             "right enters state", "head capacity is domain"],
            table_gate,
        )
        cs.create_gate(
            "hash chain", config.q_chain, 3,
            ["capacity is previous digest", "control decreases by step"],
            chain_gate,
        )
        cs.create_gate(
            "full round", config.s_full, 6,
            [f"state[{i}]" for i in range(3)],
            full_round_gate,
        )
        cs.create_gate(
            "partial rounds", config.s_partial, 6,
            [f"sbox[{t}]" for t in range(PARTIAL_ROUNDS_PER_ROW)] + [f"state[{i}]" for i in range(3)],
            partial_round_gate,
        )
        return config


# --- Chip ---

@dataclass(frozen=True)
class StepRow:
    """Values of one table row."""
    hash: int
    left: int
    right: int
    control: int
    capacity: int
    head: int

    def values(self) -> List[int]:
        return [self.hash, self.left, self.right, self.control, self.capacity, self.head]


class SpongeChip:
    """Lays out a hash table of fixed capacity, padding unused steps."""

    def __init__(
        self,
        config: SpongeConfig,
        inputs: Sequence[Tuple[int, int]],
        controls: Sequence[int],
        checks: Sequence[Optional[int]],
        capacity: int
    ):
        self.config = config
        self.inputs = inputs
        self.controls = controls
        self.checks = checks
        self.capacity = capacity
        self.params = get_params()
        self._padding: Optional[StepTrace] = None

    @classmethod
    def construct(cls, config, inputs, controls, checks, capacity) -> "SpongeChip":
        return cls(config, inputs, controls, checks, capacity)

    def _trace(self, left: int, right: int, capacity: int) -> StepTrace:
        if left == right == capacity == 0:
            if self._padding is None:
                self._padding = permutation_trace([0, 0, 0], self.params)
            return self._padding
        return permutation_trace([capacity, left, right], self.params)

    def _validate(self) -> None:
        n_rows = len(self.inputs)
        if n_rows > self.capacity:
            raise SynthesisError(f"hash table has {n_rows} rows but capacity is {self.capacity}")
        if len(self.controls) != n_rows:
            raise SynthesisError(f"{len(self.controls)} controls for {n_rows} input rows")
        if len(self.checks) > n_rows:
            raise SynthesisError(f"{len(self.checks)} checks for {n_rows} input rows")
        for i, (left, right) in enumerate(self.inputs):
            if not (is_canonical(left) and is_canonical(right) and is_canonical(self.controls[i])):
                raise SynthesisError(f"row {i}: inputs and control must be canonical field elements")
        for i, check in enumerate(self.checks):
            if check is not None and not is_canonical(check):
                raise SynthesisError(f"row {i}: check {check} is not a canonical field element")

    def load(self, layouter: Layouter) -> None:
        """Assign every step of the table, then padding up to capacity.

        Raises:
            SynthesisError: On non-canonical values, too many rows, or a
                control that does not continue the open message.
        """
        self._validate()
        step = self.config.step
        n_rows = len(self.inputs)
        prev_digest = 0
        prev_control = 0

        for i in range(self.capacity):
            if i < n_rows:
                left, right = self.inputs[i]
                control = self.controls[i]
                check = self.checks[i] if i < len(self.checks) else None
            else:
                left = right = control = 0
                check = None

            if i < n_rows and i > 0 and prev_control > step:
                if control != prev_control - step:
                    raise SynthesisError(
                        f"row {i}: control {control} does not continue the previous "
                        f"row (expected {prev_control - step})"
                    )
                head, capacity = 0, prev_digest
            else:
                head, capacity = 1, (control * DOMAIN_SHIFT) % MODULUS

            trace = self._trace(left, right, capacity)
            row = StepRow(
                hash=trace.digest if check is None else check,
                left=left,
                right=right,
                control=control,
                capacity=capacity,
                head=head,
            )
            layouter.assign_region(
                f"hash step {i}", ROWS_PER_STEP,
                partial(self._assign_step, index=i, row=row, trace=trace),
            )
            prev_digest, prev_control = trace.digest, control

    def _assign_step(self, region: Region, index: int, row: StepRow, trace: StepTrace) -> None:
        config = self.config
        cols = config.hash_table

        table_cells = [
            region.assign_advice(col, TABLE_ROW, value)
            for col, value in zip(cols, row.values())
        ]
        region.assign_fixed(config.q_enable, TABLE_ROW, 1)
        if index > 0:
            region.assign_fixed(config.q_chain, TABLE_ROW, 1)

        for j, (kind, r) in enumerate(SCHEDULE):
            offset = STATE_ROW + j
            for col, value in zip(config.state, trace.states[j]):
                region.assign_advice(col, offset, value)
            for col, value in zip(config.sbox_columns, trace.sboxed[j]):
                region.assign_advice(col, offset, value)
            region.assign_fixed(config.s_full if kind == FULL else config.s_partial, offset, 1)
            region.assign_fixed(config.round_index, offset, r)

        output_cells = [
            region.assign_advice(col, OUTPUT_ROW, value)
            for col, value in zip(config.state, trace.states[-1])
        ]
        control_copy = region.assign_advice(cols[CONTROL], OUTPUT_ROW, row.control)

        region.constrain_equal(table_cells[HASH], output_cells[0])
        region.constrain_equal(table_cells[CONTROL], control_copy)
