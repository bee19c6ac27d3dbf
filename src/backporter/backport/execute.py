"""Execute planned steps against a run context."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from backporter.backport import message
from backporter.backport.apply import ConflictResolver, apply_patch
from backporter.backport.patches import PatchRecord, generate_patches
from backporter.backport.plan import (
    Amend,
    ApplyPatch,
    BackportOptions,
    BumpVersion,
    Commit,
    GeneratePatches,
    ReadVersion,
    Step,
)
from backporter.backport.version import (
    PATCH_LEVEL,
    VersionState,
    bump_embedder_string,
    bump_patch_level,
    read_current_version,
)
from backporter.core.log import logger


@dataclass
class RunContext:
    """Everything the steps of one run share.

    Steps run strictly one after another, each mutating the
    downstream working tree, the patch list or the version, so the
    context is never touched concurrently.
    """

    options: BackportOptions
    upstream: object
    downstream: object
    resolver: ConflictResolver
    vendored_dir: str = "deps/v8"
    version_header: str = "deps/v8/include/v8-version.h"
    common_gypi: str = "common.gypi"
    embedder_key: str = "v8_embedder_string"
    embedder_platform: str = "node"
    title_prefix: str = message.DEFAULT_PREFIX
    commit_url: str = message.DEFAULT_COMMIT_URL
    patches: list[PatchRecord] = field(default_factory=list)
    version: VersionState | None = None
    commits: int = 0

    def node_path(self, relative: str) -> Path:
        return Path(self.downstream.workdir) / relative


async def execute_step(step: Step, run: RunContext) -> None:
    """Run one step. Errors propagate to the caller unchanged."""
    if isinstance(step, ReadVersion):
        run.version = read_current_version(run.node_path(run.version_header))
        logger.info(f"Current V8 version: {run.version}")

    elif isinstance(step, GeneratePatches):
        run.patches = await generate_patches(run.upstream, run.options.sha)

    elif isinstance(step, ApplyPatch):
        apply_patch(
            run.downstream,
            run.patches[step.index],
            run.resolver,
            method=step.method,
            directory=run.vendored_dir,
        )

    elif isinstance(step, BumpVersion):
        if step.strategy == PATCH_LEVEL:
            bump_patch_level(run.node_path(run.version_header), run.version)
        else:
            bump_embedder_string(
                run.node_path(run.common_gypi),
                run.downstream,
                key=run.embedder_key,
                platform=run.embedder_platform,
            )

    elif isinstance(step, Commit):
        _commit(run, [run.patches[i] for i in step.indices])

    elif isinstance(step, Amend):
        _amend(run, run.patches[step.index])

    else:
        raise TypeError(f"Unknown step: {step!r}")


def _commit(
    run: RunContext,
    patches: list[PatchRecord],
    extra_args: tuple[str, ...] = (),
    trailers: str = "",
) -> None:
    """Stage the vendored tree and commit with a synthesized message."""
    title = message.format_title(patches, prefix=run.title_prefix)
    if len(patches) == 1:
        body = message.format_body(
            patches[0], trailers=trailers, commit_url=run.commit_url
        )
    else:
        body = message.format_squashed_body(patches, commit_url=run.commit_url)

    run.downstream.run("add", run.vendored_dir)
    run.downstream.run(
        "commit",
        *run.downstream.gpg_sign_args,
        *extra_args,
        "-m", title,
        "-m", body,
    )
    if "--amend" not in extra_args:
        run.commits += 1
    logger.info(f"Committed: {title}")


def _amend(run: RunContext, patch: PatchRecord) -> None:
    """Finish a `git am` commit and rewrite its message.

    A conflicted am is still in progress at this point, so it is
    continued first, and the operator who resolved it is credited
    with a Co-authored-by trailer.
    """
    trailers = ""
    if patch.had_conflicts:
        run.downstream.run("am", *run.downstream.gpg_sign_args, "--continue")
        name = run.downstream.config_value("user.name")
        email = run.downstream.config_value("user.email")
        trailers = f"\nCo-authored-by: {name} <{email}>"
    _commit(run, [patch], extra_args=("--amend",), trailers=trailers)
    run.commits += 1
