"""Assemble the ordered step list for a backport run.

plan() is a pure function of BackportOptions. It picks one of three
strategies up front and never revisits the choice:

- squash: every patch is applied to the working tree, the version is
  bumped once and a single commit covers all of them
- preserve-author: each patch goes through `git am`, which commits
  with the upstream author; the version bump is folded in by amending
- patch-then-commit (default): each patch is applied to the working
  tree, the version bumped and a fresh commit created

Squash wins if both squash and preserve_original_author are set.
Executing the steps is execute.py's job.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel, Field, field_validator

from backporter.backport.apply import AM, APPLY
from backporter.backport.version import EMBEDDER, bump_strategy

SQUASH_WARNING = (
    "Squashing commits should be avoided if possible, because it "
    "can make git bisection difficult. Only squash commits if they would "
    "break the build when applied individually. Are you sure?"
)


class BackportOptions(BaseModel):
    """What to backport and how."""

    sha: list[str] = Field(
        description="Upstream commit references, in commit order",
    )
    squash: bool = Field(
        default=False,
        description="Collapse all patches into a single commit",
    )
    preserve_original_author: bool = Field(
        default=False,
        description="Cherry-pick with git am to keep upstream authorship",
    )
    bump: bool = Field(
        default=True,
        description="Bump the V8 version metadata",
    )
    node_major_version: int | None = Field(
        default=None,
        description="Node.js major version of the downstream tree",
    )

    @field_validator("sha")
    @classmethod
    def _require_sha(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("At least one upstream commit is required")
        return value

    @property
    def strategy(self) -> str:
        if self.squash:
            return "squash"
        if self.preserve_original_author:
            return "preserve-author"
        return "patch-then-commit"


@dataclass(frozen=True)
class ReadVersion:
    group: str | None = None
    title = "Read current V8 version"


@dataclass(frozen=True)
class GeneratePatches:
    group: str | None = None
    title = "Generate patches"


@dataclass(frozen=True)
class ApplyPatch:
    index: int
    method: str = APPLY
    group: str | None = None

    @property
    def title(self) -> str:
        return "Cherry-pick" if self.method == AM else "Apply patch"


@dataclass(frozen=True)
class BumpVersion:
    strategy: str
    group: str | None = None

    @property
    def title(self) -> str:
        if self.strategy == EMBEDDER:
            return "Increment embedder version number"
        return "Increment V8 version"


@dataclass(frozen=True)
class Commit:
    indices: tuple[int, ...]
    group: str | None = None

    @property
    def title(self) -> str:
        return "Commit backport" if self.group is None else "Commit patch"


@dataclass(frozen=True)
class Amend:
    index: int
    group: str | None = None
    title = "Amend/commit"


Step = ReadVersion | GeneratePatches | ApplyPatch | BumpVersion | Commit | Amend


def check_options(
    options: BackportOptions, confirm: Callable[[str, bool], bool]
) -> bool:
    """Pre-flight check, run before any step.

    Squashing several commits needs explicit confirmation from the
    operator.

    Returns:
        False if the operator declined and the run must be cancelled
    """
    if len(options.sha) > 1 and options.squash:
        return confirm(SQUASH_WARNING, False)
    return True


def plan(options: BackportOptions) -> list[Step]:
    """Build the ordered steps for options."""
    bump = None
    if options.bump:
        if options.node_major_version is None:
            raise ValueError(
                "node_major_version is required to bump the version"
            )
        bump = bump_strategy(options.node_major_version)

    steps: list[Step] = [ReadVersion(), GeneratePatches()]
    count = len(options.sha)

    if options.squash:
        group = "Apply patches to deps/v8"
        steps.extend(ApplyPatch(i, APPLY, group) for i in range(count))
        if bump:
            steps.append(BumpVersion(bump))
        steps.append(Commit(tuple(range(count))))
        return steps

    method = AM if options.preserve_original_author else APPLY
    # Refs may be branches or tags, so groups are numbered rather than
    # named after the ref
    for i in range(count):
        group = f"Commit {i + 1}/{count}"
        steps.append(ApplyPatch(i, method, group))
        if bump:
            steps.append(BumpVersion(bump, group))
        if method == AM:
            steps.append(Amend(i, group))
        else:
            steps.append(Commit((i,), group))
    return steps
