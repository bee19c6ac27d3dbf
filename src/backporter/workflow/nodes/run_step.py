"""RunStep node - execute the next planned step."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from backporter.backport.execute import execute_step
from backporter.core.config import State
from backporter.core.log import logger


def describe(step) -> str:
    """Title of step, qualified by its group if it has one."""
    if step.group:
        return f"{step.group} > {step.title}"
    return step.title


@dataclass
class RunStep(BaseNode[State]):
    """Execute one step, then loop until the plan is exhausted.

    A failing step stops the run where it is. Nothing is rolled
    back; the error propagates with the step recorded in runtime
    state so the caller can report it.
    """

    async def run(self, ctx: GraphRunContext[State]) -> RunStep | Finalize:
        backport = ctx.state.runtime.backport

        if backport.step_index >= len(backport.steps):
            from backporter.workflow.nodes.finalize import Finalize
            return Finalize()

        step = backport.steps[backport.step_index]
        title = describe(step)
        logger.info(
            f"[{backport.step_index + 1}/{len(backport.steps)}] {title}"
        )

        try:
            with logger.span(title):
                await execute_step(step, backport.run)
        except Exception:
            backport.status = "failed"
            backport.failed_step = title
            raise

        backport.step_index += 1
        return RunStep()
