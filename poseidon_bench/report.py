"""Console report: circuit statistics and per-phase timings."""

from typing import Dict, List

from .arithmetization.constraint_system import CircuitStats


def format_circuit_stats(stats: CircuitStats) -> str:
    """Fixed-width table of constraint-system statistics."""
    rows = [
        ("gates", stats.num_gates),
        ("constraints", stats.num_constraints),
        ("advice columns", stats.num_advice_columns),
        ("fixed columns", stats.num_fixed_columns),
        ("instance columns", stats.num_instance_columns),
        ("phases", stats.num_phases),
        ("degree", stats.degree),
        ("minimum rows", stats.minimum_rows),
        ("blinding factors", stats.blinding_factors),
        ("rows per step", stats.rows_per_region),
        ("rows used", stats.rows_used),
        ("usable rows", stats.usable_rows),
        ("advice queries", stats.advice_queries),
        ("fixed queries", stats.fixed_queries),
        ("instance queries", stats.instance_queries),
        ("permutation columns", stats.permutation_columns),
    ]
    lines = ["=" * 50, "CIRCUIT STATISTICS", "=" * 50]
    lines.extend(f"{name:<30} {value:>12}" for name, value in rows)
    lines.append("=" * 50)
    return "\n".join(lines)


def format_timings(name: str, timings: Dict[str, float], proof_size: int = 0) -> str:
    """Per-phase wall-clock table, in execution order, with percentages."""
    total = sum(timings.values())
    lines: List[str] = [
        "=" * 70,
        f"BENCHMARK: {name}",
        "=" * 70,
        f"{'Phase':<20} {'Time (s)':<12} {'%':<8}",
        "-" * 42,
    ]
    for phase, elapsed in timings.items():
        pct = (elapsed / total * 100) if total > 0 else 0
        lines.append(f"{phase:<20} {elapsed:<12.3f} {pct:<8.1f}")
    lines.append("-" * 42)
    lines.append(f"{'TOTAL':<20} {total:<12.3f}")
    if proof_size:
        lines.append(f"{'proof size (bytes)':<20} {proof_size:<12}")
    lines.append("=" * 70)
    return "\n".join(lines)


def print_circuit_stats(stats: CircuitStats) -> None:
    print("\n" + format_circuit_stats(stats))


def print_timings(name: str, timings: Dict[str, float], proof_size: int = 0) -> None:
    print("\n" + format_timings(name, timings, proof_size))
