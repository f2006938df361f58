"""Input composition - last-write-wins merging of step records."""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any


def merge_outputs(records: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Merge records left to right; a later record's value wins on a shared key."""
    merged: dict[str, Any] = {}
    for record in records:
        merged.update(record)
    return merged


def compose_input(
    initial: Mapping[str, Any],
    dependencies: Sequence[str],
    outputs: Mapping[str, Mapping[str, Any]],
) -> dict[str, Any]:
    """Build a step's input from the execution input and its dependencies' outputs.

    Args:
        initial: Initial execution input
        dependencies: Dependency ids in declared order
        outputs: Outputs of completed steps, by step id

    Returns:
        New record: `initial` overlaid with each dependency output in
        declared order. Arguments are not modified.
    """
    return merge_outputs(
        [initial, *(outputs[dep] for dep in dependencies if dep in outputs)]
    )
