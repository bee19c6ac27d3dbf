"""Backport command - carry upstream V8 commits into deps/v8."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from backporter.backport.plan import BackportOptions
from backporter.core.errors import BackportError
from backporter.core.log import logger

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 2


class BackportCommand(BaseModel):
    """Backport one or more upstream V8 commits into deps/v8.

    Each commit is turned into a patch in the V8 clone and applied
    to the vendored copy with a three-way merge. Conflicts pause the
    run until they have been resolved by hand. By default every
    commit becomes its own commit in the Node.js tree.
    """

    sha: list[str] = Field(
        description=(
            "Upstream commit (SHA, tag or branch) to backport. "
            "Repeat for several commits; order is preserved"
        ),
    )
    squash: bool = Field(
        default=False,
        description=(
            "Squash all commits into one. Only do this if they would "
            "break the build when applied individually"
        ),
    )
    preserve_original_author: bool = Field(
        default=False,
        alias="preserve-original-author",
        description=(
            "Cherry-pick with git am so each commit keeps its upstream "
            "author. Ignored with --squash"
        ),
    )
    bump: bool = Field(
        default=True,
        description="Bump the V8 patch level or embedder string",
    )
    node_major_version: int | None = Field(
        default=None,
        alias="node-major-version",
        description=(
            "Node.js major version of the target tree. Read from "
            "src/node_version.h if not given"
        ),
    )

    model_config = ConfigDict(populate_by_name=True)

    def options(self) -> BackportOptions:
        return BackportOptions(
            sha=self.sha,
            squash=self.squash,
            preserve_original_author=self.preserve_original_author,
            bump=self.bump,
            node_major_version=self.node_major_version,
        )

    async def run_workflow(self, state: "State") -> int:
        """Run the backport workflow.

        Returns:
            Exit code: 0 done, 1 failed, 2 cancelled
        """
        from backporter.workflow.graph import create_workflow
        from backporter.workflow.nodes.check_options import (
            CANCELLED,
            CheckOptions,
        )

        backport = state.runtime.backport
        backport.options = self.options()

        workflow = create_workflow()
        try:
            result = await workflow.run(CheckOptions(), state=state)
        except Exception as e:
            # Steps record where they failed; anything earlier failed
            # while planning
            backport.status = "failed"
            where = backport.failed_step or "planning"
            if isinstance(e, BackportError):
                logger.error(f"Backport failed at '{where}': {e}")
            else:
                logger.error(
                    f"Backport failed at '{where}': "
                    f"{type(e).__name__}: {e}"
                )
            return EXIT_FAILED

        if result.output == CANCELLED:
            return EXIT_CANCELLED
        return EXIT_OK
