"""Error taxonomy for the proof pipeline.

None of these are recovered inside the pipeline: every one is fatal to a
benchmark run.
"""

from typing import Sequence


class PipelineError(Exception):
    """Base class for all pipeline failures."""


class ConfigurationError(PipelineError):
    """Circuit shape does not fit the rows available for the declared k."""


class SynthesisError(PipelineError):
    """Witness cannot be placed into the declared layout."""


class ProofGenerationError(PipelineError):
    """Proof creation failed inside the proving system."""


class VerificationFailure(PipelineError):
    """The verifier rejected a proof transcript."""


class SimulationFailure(PipelineError):
    """The constraint simulator found unsatisfied constraints.

    Attributes:
        failures: Diagnostics reported by the simulator, one per violation.
    """

    def __init__(self, failures: Sequence[object]):
        self.failures = list(failures)
        lines = [f"{len(self.failures)} constraint(s) not satisfied:"]
        lines.extend(f"  {failure}" for failure in self.failures)
        super().__init__("\n".join(lines))
