"""
Unit tests for the step/undo orchestrator behind the bundle checkout.
"""
import pytest

from services.credit_service.saga import SagaOrchestrator


def recorder(log, label, fail=False):
    async def step(ctx):
        log.append(label)
        if fail:
            raise RuntimeError(f"{label} broke")
    return step


@pytest.mark.unit
class TestSagaOrchestrator:

    @pytest.mark.asyncio
    async def test_runs_steps_in_order_and_returns_context(self) -> None:
        log = []
        saga = (
            SagaOrchestrator()
            .add_step("a", recorder(log, "a"), recorder(log, "undo a"))
            .add_step("b", recorder(log, "b"))
        )

        ctx = await saga.execute({"job": 1})

        assert ctx == {"job": 1}
        assert log == ["a", "b"]

    @pytest.mark.asyncio
    async def test_failure_undoes_completed_steps_newest_first(self) -> None:
        log = []
        saga = (
            SagaOrchestrator()
            .add_step("a", recorder(log, "a"), recorder(log, "undo a"))
            .add_step("b", recorder(log, "b"), recorder(log, "undo b"))
            .add_step("c", recorder(log, "c", fail=True), recorder(log, "undo c"))
        )

        with pytest.raises(RuntimeError, match="c broke"):
            await saga.execute({})

        assert log == ["a", "b", "c", "undo b", "undo a"]

    @pytest.mark.asyncio
    async def test_failing_undo_does_not_stop_the_rest(self) -> None:
        log = []
        saga = (
            SagaOrchestrator()
            .add_step("a", recorder(log, "a"), recorder(log, "undo a"))
            .add_step("b", recorder(log, "b"), recorder(log, "undo b", fail=True))
            .add_step("c", recorder(log, "c", fail=True))
        )

        with pytest.raises(RuntimeError, match="c broke"):
            await saga.execute({})

        assert log == ["a", "b", "c", "undo b", "undo a"]
