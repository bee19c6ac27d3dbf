"""Read and bump the V8 version metadata in a Node.js tree.

Two bump strategies exist. Node.js majors before 9 bump V8's own
patch level in deps/v8/include/v8-version.h; later majors leave V8's
version alone and bump the embedder string in common.gypi instead.
Both are whole-file read, substitute, write operations on a single
fixed pattern, and both fail hard when the pattern is missing.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel

from backporter.core.errors import MalformedVersionError
from backporter.core.log import logger

PATCH_LEVEL = "patch-level"
EMBEDDER = "embedder"

# Node.js majors below this bump V8_PATCH_LEVEL
EMBEDDER_STRING_SINCE = 9

PATCH_LEVEL_PATTERN = re.compile(r"V8_PATCH_LEVEL (\d+)")

_VERSION_FIELDS = {
    "major": "V8_MAJOR_VERSION",
    "minor": "V8_MINOR_VERSION",
    "build": "V8_BUILD_NUMBER",
    "patch": "V8_PATCH_LEVEL",
}


class VersionState(BaseModel):
    """V8 version as major.minor.build.patch."""

    major: int
    minor: int
    build: int
    patch: int

    def __str__(self):
        return f"{self.major}.{self.minor}.{self.build}.{self.patch}"


def read_current_version(version_header: Path) -> VersionState:
    """Parse the V8 version out of v8-version.h.

    Raises:
        MalformedVersionError: If any of the four fields is missing
    """
    text = Path(version_header).read_text(encoding="utf-8")
    values = {}
    for attr, define in _VERSION_FIELDS.items():
        pattern = rf"#define {define} (\d+)"
        match = re.search(pattern, text)
        if match is None:
            raise MalformedVersionError(version_header, pattern)
        values[attr] = int(match.group(1))
    return VersionState(**values)


def read_node_major_version(node_version_header: Path) -> int:
    """Parse NODE_MAJOR_VERSION out of src/node_version.h."""
    pattern = r"#define NODE_MAJOR_VERSION (\d+)"
    text = Path(node_version_header).read_text(encoding="utf-8")
    match = re.search(pattern, text)
    if match is None:
        raise MalformedVersionError(node_version_header, pattern)
    return int(match.group(1))


def bump_strategy(node_major_version: int) -> str:
    """Select the bump strategy for a Node.js major version."""
    if node_major_version < EMBEDDER_STRING_SINCE:
        return PATCH_LEVEL
    return EMBEDDER


def bump_patch_level(version_header: Path, version: VersionState) -> int:
    """Increment version.patch and write it to V8_PATCH_LEVEL.

    The file is not staged; the commit that follows stages the whole
    vendored directory.

    Returns:
        The new patch level
    """
    path = Path(version_header)
    text = path.read_text(encoding="utf-8")
    if PATCH_LEVEL_PATTERN.search(text) is None:
        raise MalformedVersionError(path, PATCH_LEVEL_PATTERN.pattern)

    version.patch += 1
    text = PATCH_LEVEL_PATTERN.sub(
        f"V8_PATCH_LEVEL {version.patch}", text, count=1
    )
    path.write_text(text, encoding="utf-8")
    logger.info(f"V8 version bumped to {version}")
    return version.patch


def embedder_pattern(key: str, platform: str) -> re.Pattern:
    """Pattern for `'<key>': '-<platform>.<N>'`."""
    return re.compile(
        rf"'{re.escape(key)}': '-{re.escape(platform)}\.(\d+)'"
    )


def bump_embedder_string(
    common_gypi: Path,
    repo=None,
    key: str = "v8_embedder_string",
    platform: str = "node",
) -> int:
    """Increment the embedder string number in common.gypi.

    Unlike the patch-level bump this stages the file itself, since
    nothing else in the commit step touches common.gypi.

    Args:
        common_gypi: Path to the build configuration file
        repo: Downstream GitRepository to stage the file in, or None
            to leave it unstaged
        key: Embedder key name
        platform: Embedder platform suffix

    Returns:
        The new embedder number
    """
    path = Path(common_gypi)
    pattern = embedder_pattern(key, platform)
    text = path.read_text(encoding="utf-8")
    match = pattern.search(text)
    if match is None:
        raise MalformedVersionError(path, pattern.pattern)

    value = int(match.group(1)) + 1
    replacement = f"'{key}': '-{platform}.{value}'"
    path.write_text(pattern.sub(replacement, text, count=1), encoding="utf-8")
    logger.info(f"Embedder string bumped to -{platform}.{value}")

    if repo is not None:
        repo.run("add", str(path.relative_to(repo.workdir)))
    return value
