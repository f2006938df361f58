"""Tests for WorkflowEngine - registration and basic execution."""

import pytest

from core.domain.enums.execution_status import ExecutionStatus, StepStatus
from orchestration.engine import WorkflowEngine
from orchestration.errors import CycleError, WorkflowNotFoundError
from orchestration.workflow import WorkflowDefinition, WorkflowStep


def returning(output: dict):
    """Build a step action that records its inputs and returns `output`."""

    async def action(input_: dict) -> dict:
        action.calls.append(dict(input_))
        return output

    action.calls = []
    return action


def make_step(step_id: str, output: dict | None = None, deps=(), **kwargs) -> WorkflowStep:
    return WorkflowStep(
        id=step_id,
        name=step_id.title(),
        action=returning(output if output is not None else {}),
        dependencies=tuple(deps),
        **kwargs,
    )


def diamond_workflow() -> WorkflowDefinition:
    return WorkflowDefinition(
        id="W1",
        name="Diamond",
        steps=[
            make_step("A", {"x": 1}),
            make_step("B", {"y": 2}, deps=["A"]),
            make_step("C", {"x": 99}, deps=["A"]),
            make_step("D", {"done": True}, deps=["B", "C"]),
        ],
    )


@pytest.fixture
def engine(engine_settings, fake_event_bus) -> WorkflowEngine:
    return WorkflowEngine(event_bus=fake_event_bus, settings=engine_settings)


@pytest.mark.asyncio
async def test_engine_diamond_workflow(engine):
    """Every step completes and later-completed outputs win in the aggregate."""
    workflow = diamond_workflow()
    engine.register_workflow(workflow)

    execution = await engine.execute("W1", {})

    assert execution.status == ExecutionStatus.COMPLETED
    assert execution.workflow_id == "W1"
    assert set(execution.step_results) == {"A", "B", "C", "D"}
    assert all(r.status == StepStatus.COMPLETED for r in execution.step_results.values())
    assert execution.output == {"x": 99, "y": 2, "done": True}
    assert execution.finished_at is not None
    assert execution.finished_at >= execution.started_at

    # Composed inputs only see direct dependencies
    steps = {step.id: step for step in workflow.steps}
    assert steps["A"].action.calls == [{}]
    assert steps["B"].action.calls == [{"x": 1}]
    assert steps["C"].action.calls == [{"x": 1}]
    assert steps["D"].action.calls == [{"y": 2, "x": 99}]


@pytest.mark.asyncio
async def test_engine_initial_input_reaches_every_step(engine):
    workflow = WorkflowDefinition(
        id="w",
        name="W",
        steps=[make_step("a", {"a": 1}), make_step("b", {"b": 2}, deps=["a"])],
    )
    engine.register_workflow(workflow)

    execution = await engine.execute("w", {"tenant": "acme", "a": 0})

    assert workflow.steps[0].action.calls == [{"tenant": "acme", "a": 0}]
    assert workflow.steps[1].action.calls == [{"tenant": "acme", "a": 1}]
    assert execution.output == {"a": 1, "b": 2}
    assert execution.input == {"tenant": "acme", "a": 0}


@pytest.mark.asyncio
async def test_engine_copies_initial_input(engine):
    engine.register_workflow(WorkflowDefinition(id="w", name="W", steps=[make_step("a")]))
    initial = {"k": 1}

    execution = await engine.execute("w", initial)
    initial["k"] = 2

    assert execution.input == {"k": 1}


@pytest.mark.asyncio
async def test_engine_unknown_workflow(engine, fake_event_bus):
    with pytest.raises(WorkflowNotFoundError):
        await engine.execute("missing", {})

    assert fake_event_bus.events == []


@pytest.mark.asyncio
async def test_engine_empty_workflow(engine):
    engine.register_workflow(WorkflowDefinition(id="empty", name="Empty", steps=[]))

    execution = await engine.execute("empty")

    assert execution.status == ExecutionStatus.COMPLETED
    assert execution.step_results == {}
    assert execution.output == {}


@pytest.mark.asyncio
async def test_engine_step_runner_object(engine):
    class Doubler:
        async def run(self, input_: dict) -> dict:
            return {"value": input_["value"] * 2}

    engine.register_workflow(
        WorkflowDefinition(
            id="w", name="W", steps=[WorkflowStep(id="double", name="Double", action=Doubler())]
        )
    )

    execution = await engine.execute("w", {"value": 21})

    assert execution.output == {"value": 42}


@pytest.mark.asyncio
async def test_engine_none_output_counts_as_empty(engine):
    async def side_effect_only(input_: dict) -> None:
        return None

    engine.register_workflow(
        WorkflowDefinition(
            id="w", name="W", steps=[WorkflowStep(id="a", name="A", action=side_effect_only)]
        )
    )

    execution = await engine.execute("w", {"x": 1})

    assert execution.step_results["a"].status == StepStatus.COMPLETED
    assert execution.step_results["a"].output == {}
    assert execution.output == {}


@pytest.mark.asyncio
async def test_engine_publishes_lifecycle_events(engine, fake_event_bus):
    engine.register_workflow(
        WorkflowDefinition(
            id="w", name="W", steps=[make_step("a"), make_step("b", deps=["a"])]
        )
    )

    execution = await engine.execute("w")

    assert fake_event_bus.names() == [
        "workflow.started",
        "workflow.step.started",
        "workflow.step.succeeded",
        "workflow.step.started",
        "workflow.step.succeeded",
        "workflow.finished",
    ]
    assert all(e.metadata.execution_id == str(execution.id) for e in fake_event_bus.events)
    assert fake_event_bus.events[-1].payload["status"] == "completed"


@pytest.mark.asyncio
async def test_engine_execution_ids_are_unique(engine):
    engine.register_workflow(WorkflowDefinition(id="w", name="W", steps=[make_step("a")]))

    first = await engine.execute("w")
    second = await engine.execute("w")

    assert first.id != second.id
    assert first.step_results["a"] is not second.step_results["a"]


def test_engine_rejects_cyclic_workflow(engine):
    workflow = WorkflowDefinition(
        id="G1", name="Cyclic", steps=[make_step("X", deps=["Y"]), make_step("Y", deps=["X"])]
    )

    with pytest.raises(CycleError):
        engine.register_workflow(workflow)

    assert "G1" not in engine.list_workflows()
    assert engine.get_workflow("G1") is None


def test_engine_lookup_and_listing(engine):
    first = diamond_workflow()
    second = WorkflowDefinition(id="other", name="Other", steps=[make_step("a")])
    engine.register_workflow(first)
    engine.register_workflow(second)

    assert engine.get_workflow("W1") is first
    assert engine.list_workflows() == ["W1", "other"]
    assert engine.plan("W1") == ["A", "B", "C", "D"]


@pytest.mark.asyncio
async def test_execution_to_dict(engine):
    engine.register_workflow(
        WorkflowDefinition(id="w", name="W", steps=[WorkflowStep("a", "A", returning({"k": "v"}))])
    )

    execution = await engine.execute("w", {"in": 1})
    data = execution.to_dict()

    assert data["status"] == "completed"
    assert data["input"] == {"in": 1}
    assert data["output"] == {"k": "v"}
    assert data["step_results"]["a"]["status"] == "completed"
    assert data["step_results"]["a"]["error"] is None
