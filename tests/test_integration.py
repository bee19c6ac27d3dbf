"""End-to-end backports between two real temporary git repositories."""

import asyncio
import shutil
import subprocess

import pytest

from backporter.backport.apply import AutoResolver
from backporter.command.backport import (
    EXIT_CANCELLED,
    EXIT_FAILED,
    EXIT_OK,
    BackportCommand,
)
from backporter.core.config import Config, GitConfig, State

pytestmark = pytest.mark.skipif(
    shutil.which("git") is None, reason="git not installed"
)

VERSION_H = (
    "#define V8_MAJOR_VERSION 6\n"
    "#define V8_MINOR_VERSION 2\n"
    "#define V8_BUILD_NUMBER 414\n"
    "#define V8_PATCH_LEVEL 12\n"
)


def git(cwd, *args):
    return subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    ).stdout


def commit_all(cwd, message):
    git(cwd, "add", "-A")
    git(cwd, "commit", "-q", "-m", message)
    return git(cwd, "rev-parse", "HEAD").strip()


def init_repo(path, name, email):
    path.mkdir()
    git(path, "init", "-q")
    git(path, "config", "user.name", name)
    git(path, "config", "user.email", email)
    git(path, "config", "commit.gpgsign", "false")


@pytest.fixture
def repos(tmp_path):
    """A V8 clone with two new commits and a Node tree vendoring its base."""
    v8 = tmp_path / "v8"
    init_repo(v8, "V8 Author", "v8@example.com")
    (v8 / "include").mkdir()
    (v8 / "include/v8-version.h").write_text(VERSION_H)
    (v8 / "src").mkdir()
    (v8 / "src/a.cc").write_text("int a = 1;\n")
    (v8 / "src/b.cc").write_text("int b = 1;\n")
    commit_all(v8, "Initial V8")

    node = tmp_path / "node"
    init_repo(node, "Node Operator", "op@example.com")
    shutil.copytree(v8, node / "deps/v8", ignore=shutil.ignore_patterns(".git"))
    (node / "src").mkdir()
    (node / "src/node_version.h").write_text("#define NODE_MAJOR_VERSION 10\n")
    (node / "common.gypi").write_text(
        "{\n  'variables': {\n    'v8_embedder_string': '-node.5',\n  }\n}\n"
    )
    commit_all(node, "Initial Node")

    (v8 / "src/a.cc").write_text("int a = 2;\n")
    first = commit_all(v8, "[api] Change a\n\nBug: v8:1234")
    (v8 / "src/b.cc").write_text("int b = 2;\n")
    second = commit_all(v8, "[api] Change b")
    return v8, node, first, second


def run_backport(v8, node, resolver=None, confirm=None, **kwargs):
    state = State(config=Config(git=GitConfig(node_dir=node, v8_dir=v8)))
    state.runtime.backport.resolver = resolver or AutoResolver()
    state.runtime.backport.confirm = confirm or (lambda message, default: True)
    command = BackportCommand(**kwargs)
    return asyncio.run(command.run_workflow(state)), state


def log(node, fmt, count):
    return git(node, "log", f"--format={fmt}", "-n", str(count)).splitlines()


def commit_count(node):
    return int(git(node, "rev-list", "--count", "HEAD").strip())


def test_patch_then_commit(repos):
    v8, node, first, second = repos
    code, state = run_backport(v8, node, sha=[first[:8], second])

    assert code == EXIT_OK
    assert state.runtime.backport.status == "complete"
    assert commit_count(node) == 3
    assert log(node, "%an|%s", 2) == [
        f"Node Operator|deps: V8: cherry-pick {second[:7]}",
        f"Node Operator|deps: V8: cherry-pick {first[:7]}",
    ]
    assert (node / "deps/v8/src/a.cc").read_text() == "int a = 2;\n"
    assert (node / "deps/v8/src/b.cc").read_text() == "int b = 2;\n"
    assert "'-node.7'" in (node / "common.gypi").read_text()
    assert git(node, "status", "--porcelain") == ""

    body = git(node, "log", "--format=%B", "-n", "1", "HEAD~1")
    assert "Original commit message:\n\n    [api] Change a\n" in body
    assert "    Bug: v8:1234" in body
    assert f"Refs: https://github.com/v8/v8/commit/{first}" in body


def test_preserve_original_author(repos):
    v8, node, first, second = repos
    code, _ = run_backport(
        v8, node, sha=[first, second], preserve_original_author=True
    )

    assert code == EXIT_OK
    assert commit_count(node) == 3
    assert log(node, "%an|%cn|%s", 2) == [
        f"V8 Author|Node Operator|deps: V8: cherry-pick {second[:7]}",
        f"V8 Author|Node Operator|deps: V8: cherry-pick {first[:7]}",
    ]
    assert "'-node.7'" in (node / "common.gypi").read_text()
    assert git(node, "status", "--porcelain") == ""


def test_squash(repos):
    v8, node, first, second = repos
    asked = []

    def confirm(message, default):
        asked.append(default)
        return True

    code, _ = run_backport(
        v8, node, confirm=confirm, sha=[first, second], squash=True
    )

    assert code == EXIT_OK
    assert asked == [False]
    assert commit_count(node) == 2
    assert log(node, "%an|%s", 1) == [
        f"Node Operator|deps: V8: cherry-pick {first[:7]} and {second[:7]}"
    ]
    assert "'-node.6'" in (node / "common.gypi").read_text()


def test_declined_squash_changes_nothing(repos):
    v8, node, first, second = repos
    head = git(node, "rev-parse", "HEAD")

    code, state = run_backport(
        v8, node,
        confirm=lambda message, default: False,
        sha=[first, "does-not-exist"],
        squash=True,
    )

    assert code == EXIT_CANCELLED
    assert state.runtime.backport.status == "cancelled"
    assert state.runtime.backport.steps == []
    assert git(node, "rev-parse", "HEAD") == head


def test_conflict_waits_for_resolution(repos):
    v8, node, first, _ = repos
    (node / "deps/v8/src/a.cc").unlink()
    commit_all(node, "Drop a.cc")

    class WriteResolution:
        def __init__(self):
            self.calls = 0

        def resolve(self, patch):
            self.calls += 1
            (node / "deps/v8/src/a.cc").write_text("int a = 2;\n")

    resolver = WriteResolution()
    code, _ = run_backport(v8, node, resolver=resolver, sha=[first])

    assert code == EXIT_OK
    assert resolver.calls == 1
    assert log(node, "%s", 1) == [f"deps: V8: backport {first[:7]}"]
    assert (node / "deps/v8/src/a.cc").read_text() == "int a = 2;\n"


def test_unresolvable_sha_fails_before_changes(repos):
    v8, node, first, _ = repos
    head = git(node, "rev-parse", "HEAD")

    code, state = run_backport(v8, node, sha=[first, "does-not-exist"])

    assert code == EXIT_FAILED
    assert state.runtime.backport.status == "failed"
    assert state.runtime.backport.failed_step == "Generate patches"
    assert git(node, "rev-parse", "HEAD") == head
    assert git(node, "status", "--porcelain") == ""


def test_missing_version_header_fails_the_run(repos):
    v8, node, first, _ = repos
    (node / "deps/v8/include/v8-version.h").unlink()
    commit_all(node, "Drop version header")
    head = git(node, "rev-parse", "HEAD")

    code, state = run_backport(v8, node, sha=[first])

    assert code == EXIT_FAILED
    assert state.runtime.backport.status == "failed"
    assert state.runtime.backport.failed_step == "Read current V8 version"
    assert git(node, "rev-parse", "HEAD") == head


def test_missing_node_version_header_fails_while_planning(repos):
    v8, node, first, _ = repos
    (node / "src/node_version.h").unlink()
    commit_all(node, "Drop node version header")

    code, state = run_backport(v8, node, sha=[first])

    assert code == EXIT_FAILED
    assert state.runtime.backport.status == "failed"
    assert state.runtime.backport.failed_step is None
    assert state.runtime.backport.steps == []
