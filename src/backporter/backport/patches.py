"""Generate patches from upstream commits."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from pydantic import BaseModel, Field

from backporter.core.errors import GitCommandError, ResolutionError
from backporter.core.log import logger


class PatchRecord(BaseModel):
    """One upstream commit being backported."""

    sha: str = Field(description="Full upstream commit SHA")
    data: str = Field(
        repr=False,
        description="format-patch output for sha^..sha",
    )
    message: str = Field(description="Verbatim upstream commit message")
    had_conflicts: bool = Field(
        default=False,
        description="Set once applying the patch needed manual resolution",
    )


async def resolve_ref(upstream, ref: str) -> str:
    """Resolve a short SHA, tag or branch to a full commit SHA."""
    try:
        stdout = await asyncio.to_thread(
            upstream.run, "rev-parse", "--verify", f"{ref}^{{commit}}"
        )
    except GitCommandError as e:
        raise ResolutionError(ref, e.stderr.strip()) from e
    return stdout.strip()


async def fetch_patch(upstream, sha: str) -> PatchRecord:
    """Fetch the diff and original message of one commit."""
    data, message = await asyncio.gather(
        asyncio.to_thread(
            upstream.run, "format-patch", "--stdout", f"{sha}^..{sha}"
        ),
        asyncio.to_thread(upstream.run, "log", "--format=%B", "-n", "1", sha),
    )
    return PatchRecord(sha=sha, data=data, message=message)


async def generate_patches(
    upstream, refs: Sequence[str]
) -> list[PatchRecord]:
    """Resolve refs and fetch a PatchRecord for each, in input order.

    All references are resolved before anything is fetched, so an
    unresolvable one fails the whole call without touching the rest.
    gather() returns results positionally, which keeps the output
    aligned with refs however the fetches interleave.

    Raises:
        ResolutionError: If any reference does not name a commit
        GitCommandError: If fetching a diff or message fails
    """
    shas = await asyncio.gather(*(resolve_ref(upstream, ref) for ref in refs))
    for ref, sha in zip(refs, shas):
        logger.debug(f"Resolved {ref} to {sha}")

    patches = await asyncio.gather(*(fetch_patch(upstream, sha) for sha in shas))
    logger.info(f"Generated {len(patches)} patch(es)")
    return list(patches)
