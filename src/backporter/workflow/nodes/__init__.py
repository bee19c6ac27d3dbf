"""Workflow nodes for the backport state machine."""

from backporter.workflow.nodes.check_options import CheckOptions
from backporter.workflow.nodes.finalize import Finalize
from backporter.workflow.nodes.plan_steps import PlanSteps
from backporter.workflow.nodes.run_step import RunStep

__all__ = ["CheckOptions", "PlanSteps", "RunStep", "Finalize"]
