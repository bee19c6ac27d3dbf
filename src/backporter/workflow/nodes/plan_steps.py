"""PlanSteps node - build the run context and the step list."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from backporter.backport.apply import PromptConflictResolver
from backporter.backport.execute import RunContext
from backporter.backport.plan import plan
from backporter.backport.version import read_node_major_version
from backporter.core.config import State
from backporter.core.log import logger
from backporter.git.repository import GitRepository


@dataclass
class PlanSteps(BaseNode[State]):
    """Assemble the steps for the selected strategy."""

    async def run(self, ctx: GraphRunContext[State]) -> RunStep:
        config = ctx.state.config
        backport = ctx.state.runtime.backport
        options = backport.options

        if options.bump and options.node_major_version is None:
            options.node_major_version = read_node_major_version(
                config.git.node_dir / config.version.node_version_header
            )
            logger.info(
                f"Detected Node.js major version {options.node_major_version}"
            )

        backport.run = RunContext(
            options=options,
            upstream=GitRepository(config.git.v8_dir, name="v8"),
            downstream=GitRepository(
                config.git.node_dir,
                gpg_sign=config.git.gpg_sign,
                name="node",
            ),
            resolver=backport.resolver or PromptConflictResolver(),
            vendored_dir=config.git.vendored_dir,
            version_header=config.version.version_header,
            common_gypi=config.version.common_gypi,
            embedder_key=config.version.embedder_key,
            embedder_platform=config.version.embedder_platform,
            title_prefix=config.message.title_prefix,
            commit_url=config.message.commit_url,
        )
        backport.steps = plan(options)
        backport.step_index = 0
        backport.status = "running"

        logger.info(
            f"Planned {len(backport.steps)} steps "
            f"({options.strategy}, {len(options.sha)} commit(s))"
        )

        from backporter.workflow.nodes.run_step import RunStep
        return RunStep()
