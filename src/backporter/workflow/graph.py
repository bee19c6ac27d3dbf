"""Graph workflow definition."""

from pydantic_graph import Graph

from backporter.core.config import State
from backporter.core.log import logger


def create_workflow():
    """Create the backport workflow graph.

    CheckOptions -> PlanSteps -> RunStep (once per step) -> Finalize

    CheckOptions ends the run early when the operator declines the
    squash confirmation.
    """
    logger.debug("Building workflow graph")

    from backporter.workflow.nodes.check_options import CheckOptions
    from backporter.workflow.nodes.finalize import Finalize
    from backporter.workflow.nodes.plan_steps import PlanSteps
    from backporter.workflow.nodes.run_step import RunStep

    return Graph(
        nodes=(CheckOptions, PlanSteps, RunStep, Finalize),
        state_type=State,
    )
