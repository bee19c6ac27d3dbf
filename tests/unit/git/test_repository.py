"""Tests for GitRepository against a real temporary repository."""

import asyncio
import shutil
import subprocess

import pytest

from backporter.backport.patches import generate_patches
from backporter.core.errors import GitCommandError
from backporter.core.runner import Runner
from backporter.git.repository import GitRepository

pytestmark = pytest.mark.skipif(
    shutil.which("git") is None, reason="git not installed"
)


@pytest.fixture
def repo(tmp_path):
    subprocess.run(["git", "init", "-q"], cwd=tmp_path, check=True)
    subprocess.run(
        ["git", "config", "user.name", "Test User"], cwd=tmp_path, check=True
    )
    subprocess.run(
        ["git", "config", "user.email", "test@example.com"],
        cwd=tmp_path,
        check=True,
    )
    return GitRepository(tmp_path, name="test")


def test_run_returns_stdout(repo):
    assert repo.run("rev-parse", "--is-inside-work-tree").strip() == "true"


def test_nonzero_exit_raises(repo):
    with pytest.raises(GitCommandError) as excinfo:
        repo.run("rev-parse", "--verify", "no-such-ref")
    assert excinfo.value.exit_code != 0
    assert "rev-parse" in excinfo.value.command


def test_stdin_is_forwarded(repo):
    sha = repo.run("hash-object", "--stdin", stdin="hello\n").strip()
    assert sha == "ce013625030ba8dba906f756967f9e9ca394464a"


def test_arguments_are_quoted(repo, tmp_path):
    (tmp_path / "a file.txt").write_text("x\n")
    repo.run("add", "a file.txt")
    repo.run("commit", "-q", "-m", "message with spaces; and $symbols")
    assert repo.run("log", "--format=%s", "-n", "1").strip() == (
        "message with spaces; and $symbols"
    )


def test_config_value(repo):
    assert repo.config_value("user.email") == "test@example.com"


def test_gpg_sign_args():
    assert GitRepository(".", gpg_sign=True).gpg_sign_args == ["-S"]
    assert GitRepository(".").gpg_sign_args == []


def test_runner_without_check_returns_result(tmp_path):
    result = Runner().execute("exit 3", cwd=tmp_path, check=False)
    assert result.exited == 3


def test_relative_workdir_is_resolved(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert GitRepository("sub").workdir == tmp_path.resolve() / "sub"


def test_concurrent_generation_through_relative_workdir(
    tmp_path, monkeypatch
):
    v8 = tmp_path / "v8"
    v8.mkdir()
    for args in (
        ["init", "-q"],
        ["config", "user.name", "Test User"],
        ["config", "user.email", "test@example.com"],
        ["config", "commit.gpgsign", "false"],
    ):
        subprocess.run(["git", *args], cwd=v8, check=True)

    shas = []
    for i in range(6):
        (v8 / "file.txt").write_text(f"revision {i}\n")
        subprocess.run(["git", "add", "-A"], cwd=v8, check=True)
        subprocess.run(
            ["git", "commit", "-q", "-m", f"Change {i}"], cwd=v8, check=True
        )
        shas.append(subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=v8,
            check=True,
            capture_output=True,
            text=True,
        ).stdout.strip())

    monkeypatch.chdir(tmp_path)
    upstream = GitRepository("v8", name="v8")
    refs = [sha[:8] for sha in shas[1:]]

    for _ in range(3):
        patches = asyncio.run(generate_patches(upstream, refs))
        assert [patch.sha for patch in patches] == shas[1:]
        assert all("file.txt" in patch.data for patch in patches)
