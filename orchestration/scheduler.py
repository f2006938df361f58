"""Scheduler - runs a workflow's steps in dependency order with retries."""

import asyncio
from collections.abc import Mapping
from typing import Any

from core.domain.enums.execution_status import ExecutionStatus, StepStatus
from core.domain.value_objects.execution_id import ExecutionID
from core.infrastructure.clock import utc_now
from core.infrastructure.logging import get_logger

from . import events
from .bus import EventBusProtocol
from .composition import compose_input, merge_outputs
from .errors import CircularDependencyError, StepFailure
from .events import Event, EventMetadata
from .graph import ReadyQueue
from .models import StepResult, WorkflowExecution
from .planner import plan_execution_order
from .retry import RetryPolicy, run_with_retry
from .workflow import StepInput, WorkflowDefinition, WorkflowStep


class Scheduler:
    """Drives one workflow execution at a time to completion or first failure.

    With max_concurrency == 1 steps run one after another in the order of a
    repeated declared-order scan. With a higher limit, independent steps run
    as concurrent tasks; outputs are still merged in the serial order so the
    aggregate output does not depend on timing.
    """

    def __init__(
        self,
        event_bus: EventBusProtocol,
        backoff_seconds: float = 1.0,
        max_concurrency: int = 1,
    ) -> None:
        """Initialize scheduler.

        Args:
            event_bus: EventBusProtocol for lifecycle events
            backoff_seconds: Linear backoff unit for step retries
            max_concurrency: Most steps allowed to run at once
        """
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got: {max_concurrency}")
        self._event_bus = event_bus
        self._backoff_seconds = backoff_seconds
        self._max_concurrency = max_concurrency
        self._logger = get_logger("orchestration.scheduler")

    async def run(
        self, workflow: WorkflowDefinition, initial_input: Mapping[str, Any] | None = None
    ) -> WorkflowExecution:
        """Run a workflow.

        Args:
            workflow: WorkflowDefinition to run; assumed already validated
            initial_input: Initial input record shared by every step

        Returns:
            WorkflowExecution; a step failure is reported through its status

        Raises:
            CircularDependencyError: If some steps can never become runnable
        """
        execution = WorkflowExecution(
            id=ExecutionID.generate(workflow.id),
            workflow_id=workflow.id,
            status=ExecutionStatus.RUNNING,
            started_at=utc_now(),
            input=dict(initial_input or {}),
        )

        plan: dict[str, int] | None = None
        if self._max_concurrency > 1:
            try:
                order = plan_execution_order(workflow)
            except CircularDependencyError as exc:
                self._logger.error(
                    "workflow_stalled execution_id=%s pending=%s", execution.id, exc.pending
                )
                raise
            plan = {step_id: index for index, step_id in enumerate(order)}

        self._logger.info(
            "workflow_starting execution_id=%s workflow_id=%s step_count=%d",
            execution.id,
            workflow.id,
            len(workflow.steps),
        )
        await self._publish_event(
            events.WORKFLOW_STARTED,
            execution,
            {"workflow_name": workflow.name, "step_count": len(workflow.steps)},
        )

        outputs: dict[str, dict[str, Any]] = {}
        try:
            if plan is None:
                completed = await self._run_serial(workflow, execution, outputs)
            else:
                completed = await self._run_concurrent(workflow, execution, outputs, plan)
        except CircularDependencyError as exc:
            execution.status = ExecutionStatus.FAILED
            await self._finish(workflow, execution, error=str(exc))
            raise

        if completed is None:
            execution.status = ExecutionStatus.FAILED
        else:
            execution.output = merge_outputs(outputs[step_id] for step_id in completed)
            execution.status = ExecutionStatus.COMPLETED
        await self._finish(workflow, execution)
        return execution

    async def _finish(
        self, workflow: WorkflowDefinition, execution: WorkflowExecution, error: str | None = None
    ) -> None:
        """Stamp the end time and announce the execution's final status."""
        execution.finished_at = utc_now()

        payload: dict[str, object] = {
            "workflow_name": workflow.name,
            "status": execution.status.value,
            "step_count": len(execution.step_results),
            "success_count": sum(
                1 for r in execution.step_results.values() if r.status == StepStatus.COMPLETED
            ),
        }
        if error is not None:
            payload["error"] = error

        await self._publish_event(events.WORKFLOW_FINISHED, execution, payload)
        self._logger.info(
            "workflow_finished execution_id=%s workflow_id=%s status=%s duration_ms=%s",
            execution.id,
            workflow.id,
            execution.status.value,
            execution.duration_ms,
        )

    async def _run_serial(
        self,
        workflow: WorkflowDefinition,
        execution: WorkflowExecution,
        outputs: dict[str, dict[str, Any]],
    ) -> list[str] | None:
        """Run runnable steps one at a time.

        Returns:
            Completed step ids in completion order, or None if a step failed
        """
        queue = ReadyQueue(workflow.steps)
        completed: list[str] = []

        while len(completed) < len(workflow.steps):
            step = queue.pop()
            if step is None:
                self._logger.error(
                    "workflow_stalled execution_id=%s pending=%s", execution.id, queue.pending
                )
                raise CircularDependencyError(queue.pending, workflow.id)

            input_ = compose_input(execution.input, step.dependencies, outputs)
            result = await self._execute_step(execution, step, input_)
            execution.step_results[step.id] = result

            if result.status == StepStatus.FAILED:
                return None

            outputs[step.id] = result.output or {}
            completed.append(step.id)
            queue.complete(step.id)

        return completed

    async def _run_concurrent(
        self,
        workflow: WorkflowDefinition,
        execution: WorkflowExecution,
        outputs: dict[str, dict[str, Any]],
        plan: dict[str, int],
    ) -> list[str] | None:
        """Run every runnable step as a task, at most max_concurrency attempts at once.

        A step holds a slot only while an attempt runs, so steps waiting out a
        retry backoff leave room for other runnable steps.

        Args:
            plan: Serial plan position of each step id

        Returns:
            Completed step ids in serial plan order, or None if a step failed
        """
        queue = ReadyQueue(workflow.steps)
        semaphore = asyncio.Semaphore(self._max_concurrency)
        running: dict[asyncio.Task[StepResult], WorkflowStep] = {}
        completed: list[str] = []

        try:
            while True:
                while (step := queue.pop()) is not None:
                    input_ = compose_input(execution.input, step.dependencies, outputs)
                    task = asyncio.create_task(
                        self._execute_step(execution, step, input_, attempt_slot=semaphore),
                        name=f"step:{step.id}",
                    )
                    running[task] = step

                if not running:
                    break

                done, _ = await asyncio.wait(running, return_when=asyncio.FIRST_COMPLETED)
                # Same-round finishers are handled in plan order
                for task in sorted(done, key=lambda t: plan[running[t].id]):
                    step = running.pop(task)
                    result = task.result()
                    execution.step_results[step.id] = result

                    if result.status == StepStatus.FAILED:
                        return None

                    outputs[step.id] = result.output or {}
                    completed.append(step.id)
                    queue.complete(step.id)
        finally:
            # Siblings still in flight after a failure are dropped
            for task in running:
                task.cancel()
            if running:
                await asyncio.gather(*running, return_exceptions=True)

        if len(completed) < len(workflow.steps):
            raise CircularDependencyError(queue.pending, workflow.id)
        return sorted(completed, key=plan.__getitem__)

    async def _execute_step(
        self,
        execution: WorkflowExecution,
        step: WorkflowStep,
        input_: StepInput,
        attempt_slot: asyncio.Semaphore | None = None,
    ) -> StepResult:
        """Execute a single workflow step with retry logic.

        Args:
            execution: WorkflowExecution the step belongs to
            step: WorkflowStep to execute
            input_: Composed input record
            attempt_slot: Semaphore held around each attempt, if any

        Returns:
            StepResult, completed or failed
        """
        result = StepResult(step_id=step.id, status=StepStatus.RUNNING, started_at=utc_now())
        policy = RetryPolicy.for_step(step, self._backoff_seconds)

        await self._publish_event(events.STEP_STARTED, execution, {"step_id": step.id})

        async def on_retry(attempt: int, delay: float, error: BaseException) -> None:
            await self._publish_event(
                events.STEP_RETRYING,
                execution,
                {"step_id": step.id, "attempt": attempt, "delay_seconds": delay, "error": str(error)},
            )

        try:
            output = await run_with_retry(
                step, input_, policy, on_retry=on_retry, attempt_slot=attempt_slot
            )
        except StepFailure as failure:
            result.status = StepStatus.FAILED
            result.error = failure.message
            result.finished_at = utc_now()

            self._logger.warning(
                "workflow_step_failed execution_id=%s step=%s attempts=%d error=%s",
                execution.id,
                step.id,
                failure.attempts,
                failure.message,
            )
            await self._publish_event(
                events.STEP_FAILED,
                execution,
                {"step_id": step.id, "attempts": failure.attempts, "error": failure.message},
            )
            return result

        result.status = StepStatus.COMPLETED
        result.output = output
        result.finished_at = utc_now()

        await self._publish_event(events.STEP_SUCCEEDED, execution, {"step_id": step.id})
        return result

    async def _publish_event(
        self, name: str, execution: WorkflowExecution, payload: dict[str, object]
    ) -> None:
        """Publish an event.

        Args:
            name: Event name
            execution: WorkflowExecution the event is about
            payload: Event payload
        """
        metadata = EventMetadata(
            execution_id=str(execution.id),
            workflow_id=execution.workflow_id,
            timestamp=utc_now(),
        )
        await self._event_bus.publish(Event(name=name, payload=payload, metadata=metadata))
