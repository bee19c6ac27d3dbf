"""Apply a patch to the vendored V8 tree."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from backporter.backport.patches import PatchRecord
from backporter.core import prompt as prompts
from backporter.core.errors import GitCommandError
from backporter.core.log import logger

APPLY = "apply"
AM = "am"

RESOLVED_TOKEN = "RESOLVED"


@runtime_checkable
class ConflictResolver(Protocol):
    """Blocks until a conflicted patch has been resolved by hand."""

    def resolve(self, patch: PatchRecord) -> None:
        ...


class PromptConflictResolver:
    """Ask the operator to fix the tree and type RESOLVED."""

    def __init__(self, ask=None):
        self.ask = ask or prompts.prompt

    def resolve(self, patch: PatchRecord) -> None:
        self.ask(
            f"Resolve merge conflicts and enter '{RESOLVED_TOKEN}'",
            lambda value: value.upper() == RESOLVED_TOKEN,
        )


class AutoResolver:
    """Acknowledge every conflict immediately.

    For tests and for callers that resolve conflicts out of band.
    """

    def __init__(self):
        self.resolved: list[str] = []

    def resolve(self, patch: PatchRecord) -> None:
        self.resolved.append(patch.sha)


def apply_patch(
    downstream,
    patch: PatchRecord,
    resolver: ConflictResolver,
    method: str = APPLY,
    directory: str = "deps/v8",
) -> bool:
    """Apply patch to the vendored tree in the downstream repository.

    `apply` leaves the change in the working tree for a later commit;
    `am` creates a commit that keeps the upstream authorship. Both use
    a three-way merge. When git cannot apply the patch the record is
    marked as conflicted and the resolver blocks until the conflict
    has been fixed by hand; nothing is resolved automatically.

    Returns:
        True if the patch applied cleanly
    """
    if method not in (APPLY, AM):
        raise ValueError(f"Unknown apply method: {method}")

    args = ["-p1", "--3way", f"--directory={directory}"]
    if method == AM:
        args = downstream.gpg_sign_args + args

    try:
        downstream.run(method, *args, stdin=patch.data)
    except GitCommandError as e:
        patch.had_conflicts = True
        logger.warn(
            f"Patch {patch.sha[:7]} did not apply cleanly",
            method=method,
            stderr=e.stderr.strip(),
        )
        resolver.resolve(patch)
        logger.info(f"Conflicts in {patch.sha[:7]} resolved")
        return False

    logger.debug(f"Patch {patch.sha[:7]} applied cleanly", method=method)
    return True
