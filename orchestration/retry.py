"""Retry policy - linear backoff around a step action."""

import asyncio
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager, nullcontext
from dataclasses import dataclass
from typing import Any

from core.infrastructure.logging import get_logger

from .errors import StepFailure
from .workflow import StepInput, WorkflowStep, invoke_action

# Called before each backoff wait with (attempt, delay, error)
RetryHook = Callable[[int, float, BaseException], Awaitable[None]]


def linear_backoff(attempt: int, backoff_seconds: float) -> float:
    """Delay before retry number `attempt` (1-based): proportional to the attempt."""
    return backoff_seconds * attempt


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy for one workflow step."""

    max_retries: int = 0
    retryable: bool = False
    backoff_seconds: float = 1.0

    @classmethod
    def for_step(cls, step: WorkflowStep, backoff_seconds: float = 1.0) -> "RetryPolicy":
        return cls(
            max_retries=step.max_retries,
            retryable=step.retryable,
            backoff_seconds=backoff_seconds,
        )

    def should_retry(self, attempts: int) -> bool:
        """Whether another attempt is allowed after `attempts` failed ones."""
        return self.retryable and attempts <= self.max_retries


async def run_with_retry(
    step: WorkflowStep,
    input_: StepInput,
    policy: RetryPolicy,
    on_retry: RetryHook | None = None,
    attempt_slot: AbstractAsyncContextManager | None = None,
) -> dict[str, Any]:
    """Run a step action, retrying failed attempts per `policy`.

    Args:
        step: WorkflowStep to run
        input_: Composed input record
        policy: RetryPolicy for the step
        on_retry: Optional hook awaited before each backoff wait
        attempt_slot: Optional reusable async context manager entered around
            each attempt only, never around the backoff wait

    Returns:
        Output record of the first successful attempt

    Raises:
        StepFailure: When the last allowed attempt fails
    """
    attempts = 0
    while True:
        try:
            async with attempt_slot if attempt_slot is not None else nullcontext():
                return await invoke_action(step.action, input_)
        except Exception as exc:
            attempts += 1
            if not policy.should_retry(attempts):
                raise StepFailure(step.id, attempts, exc) from exc

            delay = linear_backoff(attempts, policy.backoff_seconds)
            get_logger("orchestration.retry").warning(
                "step_attempt_failed step=%s attempt=%d max_retries=%d retry_in=%.3fs error=%s",
                step.id,
                attempts,
                policy.max_retries,
                delay,
                exc,
            )
            if on_retry is not None:
                await on_retry(attempts, delay, exc)
            await asyncio.sleep(delay)
