"""Run benchmark scenarios: ``python -m poseidon_bench [scenario ...]``."""

import logging
import sys

from .bench import SCENARIOS, run_scenarios
from .errors import PipelineError

DEFAULT_SCENARIOS = ["correctness", "instrumented"]


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    names = list(argv if argv is not None else sys.argv[1:]) or DEFAULT_SCENARIOS
    unknown = [n for n in names if n not in SCENARIOS]
    if unknown:
        print(f"unknown scenario(s): {', '.join(unknown)}", file=sys.stderr)
        print(f"available scenarios: {', '.join(SCENARIOS)}", file=sys.stderr)
        return 2

    try:
        results = run_scenarios(names)
    except PipelineError as exc:
        print(f"benchmark failed: {exc}", file=sys.stderr)
        return 1

    for name, result in results.items():
        print(f"{name}: {result.state.value}, proof {result.proof_size} bytes")
    return 0


if __name__ == "__main__":
    sys.exit(main())
