"""CheckOptions node - pre-flight confirmation."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from backporter.backport.plan import check_options
from backporter.core import prompt
from backporter.core.config import State
from backporter.core.log import logger

CANCELLED = "cancelled"


@dataclass
class CheckOptions(BaseNode[State, None, str]):
    """Confirm risky options before anything is generated or applied."""

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> PlanSteps | End[str]:
        """Cancel the run if the operator declines.

        Returns:
            PlanSteps to continue, or End("cancelled")
        """
        backport = ctx.state.runtime.backport
        confirm = backport.confirm or prompt.confirm

        if not check_options(backport.options, confirm):
            backport.status = CANCELLED
            logger.warn("Backport cancelled, nothing was changed")
            return End(CANCELLED)

        from backporter.workflow.nodes.plan_steps import PlanSteps
        return PlanSteps()
