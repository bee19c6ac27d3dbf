"""Finalize node - report the outcome of the run."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from backporter.core.config import State
from backporter.core.log import logger

COMPLETE = "complete"


@dataclass
class Finalize(BaseNode[State, None, str]):
    """Mark the run complete."""

    async def run(self, ctx: GraphRunContext[State]) -> End[str]:
        backport = ctx.state.runtime.backport
        backport.status = COMPLETE

        run = backport.run
        conflicted = [p.sha[:7] for p in run.patches if p.had_conflicts]
        logger.info(
            f"Backport complete: {len(run.patches)} patch(es), "
            f"{run.commits} commit(s)"
        )
        if conflicted:
            logger.info(
                f"Needed manual resolution: {', '.join(conflicted)}"
            )
        return End(COMPLETE)
