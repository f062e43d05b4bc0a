"""
Ordered async steps with undo actions.

Each step receives the same mutable context dict. When a step raises, the
undo actions of the steps that already completed run newest first, and the
original exception is re-raised to the caller.
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

import structlog

from shared.observability import upsell_saga_compensation_total

logger = structlog.get_logger(__name__)

StepFn = Callable[[Dict[str, Any]], Awaitable[Any]]


@dataclass
class SagaStep:
    name: str
    action: StepFn
    compensation: Optional[StepFn] = None


class SagaOrchestrator:

    def __init__(self):
        self.steps: List[SagaStep] = []

    def add_step(self, name: str, action: StepFn, compensation: Optional[StepFn] = None) -> "SagaOrchestrator":
        self.steps.append(SagaStep(name, action, compensation))
        return self

    async def execute(self, ctx: Dict[str, Any]) -> Dict[str, Any]:
        completed: List[SagaStep] = []
        for step in self.steps:
            try:
                await step.action(ctx)
            except Exception as e:
                logger.error("saga_step_failed", step=step.name, error=str(e))
                await self._compensate(completed, ctx)
                raise
            completed.append(step)
        return ctx

    async def _compensate(self, completed: List[SagaStep], ctx: Dict[str, Any]) -> None:
        undoable = [step for step in reversed(completed) if step.compensation]
        logger.info("saga_rollback_started", steps=[step.name for step in undoable])
        for step in undoable:
            try:
                await step.compensation(ctx)
            except Exception as ce:
                # Keep undoing the remaining steps; this one is left for an operator
                logger.critical(
                    "saga_compensation_failed",
                    step=step.name,
                    error=str(ce),
                    coupon_id=ctx.get("coupon_id"),
                    promotion_code_id=ctx.get("promotion_code_id"),
                )
                continue
            upsell_saga_compensation_total.labels(step_name=step.name).inc()
            logger.info("saga_compensation_succeeded", step=step.name)
