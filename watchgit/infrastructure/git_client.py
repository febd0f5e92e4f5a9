from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

from watchgit.errors import GitError

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 10.0  # seconds

# "## main...origin/main [ahead 1, behind 2]", "## HEAD (no branch)", "## No commits yet on main"
_BRANCH_RE = re.compile(
    r"^## (?:No commits yet on |Initial commit on )?(?P<branch>.+?)"
    r"(?:\.\.\.(?P<upstream>\S+))?(?: \[(?P<track>[^\]]*)\])?$"
)
_TRACK_RE = re.compile(r"(ahead|behind) (\d+)")


@dataclass(frozen=True)
class GitStatus:
    branch: Optional[str]
    upstream: Optional[str] = None
    ahead: int = 0
    behind: int = 0
    changed: int = 0
    untracked: int = 0

    @property
    def is_clean(self) -> bool:
        return self.changed == 0 and self.untracked == 0 and self.ahead == 0 and self.behind == 0

    def summary(self) -> str:
        parts: list[str] = [self.branch or "(detached)"]
        if self.ahead:
            parts.append(f"ahead {self.ahead}")
        if self.behind:
            parts.append(f"behind {self.behind}")
        if self.changed:
            parts.append(f"{self.changed} changed")
        if self.untracked:
            parts.append(f"{self.untracked} untracked")
        if self.is_clean:
            parts.append("clean")
        return ", ".join(parts)


def parse_porcelain(output: str) -> GitStatus:
    """Parse ``git status --porcelain=v1 --branch`` output."""

    branch: Optional[str] = None
    upstream: Optional[str] = None
    ahead = behind = changed = untracked = 0

    for line in output.splitlines():
        if not line:
            continue
        if line.startswith("## "):
            match = _BRANCH_RE.match(line)
            if match is None:
                continue
            name = match.group("branch")
            branch = None if name.startswith("HEAD (") else name
            upstream = match.group("upstream")
            for kind, count in _TRACK_RE.findall(match.group("track") or ""):
                if kind == "ahead":
                    ahead = int(count)
                else:
                    behind = int(count)
        elif line.startswith("?? "):
            untracked += 1
        elif line.startswith("!! "):
            continue
        else:
            changed += 1

    return GitStatus(
        branch=branch,
        upstream=upstream,
        ahead=ahead,
        behind=behind,
        changed=changed,
        untracked=untracked,
    )


class GitClient:
    """Runs ``git`` against tracked repositories."""

    def __init__(self, binary: str = "git", timeout: float = GIT_TIMEOUT) -> None:
        self.binary = binary
        self.timeout = float(timeout)

    def status(self, path: str) -> GitStatus:
        output = self._run(path, ["status", "--porcelain=v1", "--branch"])
        return parse_porcelain(output)

    def _run(self, path: str, args: Sequence[str]) -> str:
        cmd = [self.binary, "-C", path, *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise GitError(f"git executable not found: {self.binary}") from exc
        except subprocess.TimeoutExpired as exc:
            raise GitError(f"git timed out after {self.timeout:g}s in {path}") from exc
        except OSError as exc:
            raise GitError(f"Cannot run git in {path}: {exc}") from exc

        if result.returncode != 0:
            message = result.stderr.strip() or f"git exited with {result.returncode}"
            logger.debug(
                "git failed", extra={"path": path, "returncode": result.returncode, "stderr": message}
            )
            raise GitError(message, returncode=result.returncode)
        return result.stdout
