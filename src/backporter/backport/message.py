"""Commit message synthesis for backported patches."""

from __future__ import annotations

from collections.abc import Sequence

from backporter.backport.patches import PatchRecord

DEFAULT_PREFIX = "deps: V8:"
DEFAULT_COMMIT_URL = "https://github.com/v8/v8/commit"


def short_sha(sha: str) -> str:
    return sha[:7]


def action_word(patches: Sequence[PatchRecord]) -> str:
    """'backport' if any patch needed manual resolution, else 'cherry-pick'."""
    if any(patch.had_conflicts for patch in patches):
        return "backport"
    return "cherry-pick"


def format_title(
    patches: Sequence[PatchRecord], prefix: str = DEFAULT_PREFIX
) -> str:
    """Build the commit title covering all patches.

    Up to three short SHAs are listed; beyond that only a count.
    """
    action = action_word(patches)
    shas = [short_sha(patch.sha) for patch in patches]
    if len(shas) == 1:
        subject = shas[0]
    elif len(shas) == 2:
        subject = f"{shas[0]} and {shas[1]}"
    elif len(shas) == 3:
        subject = f"{shas[0]}, {shas[1]} and {shas[2]}"
    else:
        subject = f"{len(shas)} commits"
    return f"{prefix} {action} {subject}"


def format_body(
    patch: PatchRecord,
    prefix_title: bool = False,
    trailers: str = "",
    commit_url: str = DEFAULT_COMMIT_URL,
) -> str:
    """Build the commit body for one patch.

    The original message is indented four spaces under a fixed header
    and followed by a Refs: line with the full upstream SHA. trailers
    is appended verbatim. With prefix_title the body starts with a
    per-patch action line, for use inside a squashed commit.
    """
    indented = patch.message.replace("\n", "\n    ")
    body = (
        "Original commit message:\n\n"
        f"    {indented}\n\n"
        f"Refs: {commit_url.rstrip('/')}/{patch.sha}{trailers}"
    )
    if prefix_title:
        action = "Backport" if patch.had_conflicts else "Cherry-pick"
        return f"{action} {short_sha(patch.sha)}.\n" + body
    return body


def format_squashed_body(
    patches: Sequence[PatchRecord], commit_url: str = DEFAULT_COMMIT_URL
) -> str:
    """Build the body of a single commit covering all patches."""
    if len(patches) == 1:
        return format_body(patches[0], commit_url=commit_url)
    return "".join(
        format_body(patch, True, commit_url=commit_url) + "\n\n"
        for patch in patches
    )
