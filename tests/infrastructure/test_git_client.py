from __future__ import annotations

import subprocess
from typing import Any

import pytest

from watchgit.errors import GitError
from watchgit.infrastructure import git_client
from watchgit.infrastructure.git_client import GitClient, GitStatus, parse_porcelain


def test_parse_clean_tracking_branch() -> None:
    st = parse_porcelain("## main...origin/main\n")
    assert st == GitStatus(branch="main", upstream="origin/main")
    assert st.is_clean
    assert st.summary() == "main, clean"


def test_parse_ahead_behind_and_changes() -> None:
    out = (
        "## feature/x...origin/feature/x [ahead 2, behind 1]\n"
        " M src/app.py\n"
        "A  new.py\n"
        "R  old.py -> renamed.py\n"
        "?? scratch.txt\n"
        "?? notes/\n"
    )
    st = parse_porcelain(out)
    assert st.branch == "feature/x"
    assert st.upstream == "origin/feature/x"
    assert (st.ahead, st.behind) == (2, 1)
    assert st.changed == 3
    assert st.untracked == 2
    assert not st.is_clean
    assert st.summary() == "feature/x, ahead 2, behind 1, 3 changed, 2 untracked"


def test_parse_gone_upstream_and_no_upstream() -> None:
    assert parse_porcelain("## main...origin/main [gone]").ahead == 0
    st = parse_porcelain("## topic")
    assert st.branch == "topic"
    assert st.upstream is None


def test_parse_detached_and_unborn() -> None:
    assert parse_porcelain("## HEAD (no branch)\n").branch is None
    assert parse_porcelain("## HEAD (no branch)\n").summary() == "(detached), clean"
    assert parse_porcelain("## No commits yet on main\n").branch == "main"


class _Completed:
    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def test_status_runs_git_in_repository(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []

    def _run(cmd: list[str], **kw: Any) -> _Completed:
        calls.append({"cmd": cmd, **kw})
        return _Completed(stdout="## main\n M a.py\n")

    monkeypatch.setattr(git_client.subprocess, "run", _run)
    st = GitClient(binary="mygit", timeout=3).status("/repos/alpha")

    assert st.changed == 1
    assert calls[0]["cmd"] == [
        "mygit",
        "-C",
        "/repos/alpha",
        "status",
        "--porcelain=v1",
        "--branch",
    ]
    assert calls[0]["timeout"] == 3.0


def test_nonzero_exit_raises_git_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        git_client.subprocess,
        "run",
        lambda *a, **k: _Completed(128, stderr="fatal: not a git repository\n"),
    )
    with pytest.raises(GitError) as excinfo:
        GitClient().status("/tmp")
    assert excinfo.value.returncode == 128
    assert "not a git repository" in str(excinfo.value)


@pytest.mark.parametrize(
    "exc",
    [
        FileNotFoundError("git"),
        subprocess.TimeoutExpired(cmd="git", timeout=1),
        PermissionError("denied"),
    ],
)
def test_run_failures_raise_git_error(monkeypatch: pytest.MonkeyPatch, exc: Exception) -> None:
    def _run(*_a: Any, **_k: Any) -> _Completed:
        raise exc

    monkeypatch.setattr(git_client.subprocess, "run", _run)
    with pytest.raises(GitError):
        GitClient().status("/repos/alpha")
