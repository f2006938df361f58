"""Execution identifier value object."""

import itertools
import time
from dataclasses import dataclass

_sequence = itertools.count(1)


@dataclass(frozen=True)
class ExecutionID:
    """
    Unique identifier for one workflow execution.
    
    Built from the workflow id, the monotonic clock and a process-wide
    sequence number, so two executions started in the same clock tick
    still get distinct identifiers.
    """

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value:
            raise ValueError(f"ExecutionID must be a non-empty string, got: {self.value!r}")

    @classmethod
    def generate(cls, workflow_id: str) -> "ExecutionID":
        """Generate a new ExecutionID for a run of `workflow_id`."""
        return cls(value=f"exec-{workflow_id}-{time.monotonic_ns()}-{next(_sequence)}")

    def __str__(self) -> str:
        """Return string representation."""
        return self.value
