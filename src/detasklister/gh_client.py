"""GitHub issue access through the ``gh`` command-line client.

Commands are run as argument lists (never through a shell); JSON output is
decoded with orjson. The runner is injectable so tests can stand in for
``gh``.
"""

from __future__ import annotations

import logging
import os
import re
import shlex
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

import orjson

log = logging.getLogger(__name__)

IssueState: TypeAlias = Literal["open", "closed", "all"]
Runner: TypeAlias = Callable[..., subprocess.CompletedProcess[str]]

ISSUE_STATES: tuple[IssueState, ...] = ("open", "closed", "all")
LIST_LIMIT = 2147483647

_REPO_RE = re.compile(r"(?:(?P<host>[^/]+)/)?(?P<owner>[^/]+)/(?P<repo>[^/]+)")
_ISSUE_REF_RE = re.compile(r"#?\d+|https?://.+?/.+?/.+?/issues/\d+")


class GhCommandError(RuntimeError):
    """Raised when a ``gh`` invocation fails or returns unusable output."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit status {returncode}"
        super().__init__(f"{shlex.join(self.command)}: {detail}")


@dataclass(frozen=True, slots=True)
class RepoSelector:
    host: str | None
    owner: str
    repo: str

    @classmethod
    def parse(cls, raw: str) -> RepoSelector:
        """Parse ``[HOST/]OWNER/REPO``.

        Raises:
            ValueError: If ``raw`` is not in that format.
        """
        match = _REPO_RE.fullmatch(raw)
        if match is None:
            raise ValueError(f"Expected the '[HOST/]OWNER/REPO' format, got '{raw}'")
        return cls(host=match["host"], owner=match["owner"], repo=match["repo"])

    @property
    def slug(self) -> str:
        return "/".join(p for p in (self.host, self.owner, self.repo) if p)


@dataclass(frozen=True, slots=True)
class Issue:
    url: str
    body: str


def validate_issue_ref(ref: str) -> str:
    """Return ``ref`` if it is an issue number or issue URL.

    Raises:
        ValueError: For anything else.
    """
    if not _ISSUE_REF_RE.fullmatch(ref):
        raise ValueError(f"Invalid issue format '{ref}'")
    return ref


def default_gh_executable() -> str:
    return os.environ.get("DETASKLISTER_GH") or "gh"


class GhClient:
    """Thin wrapper over ``gh issue`` subcommands."""

    def __init__(
        self,
        repo: RepoSelector | None = None,
        *,
        executable: str | None = None,
        runner: Runner = subprocess.run,
    ) -> None:
        self.repo = repo
        self.executable = executable or default_gh_executable()
        self._runner = runner

    def _repo_args(self) -> list[str]:
        return ["--repo", self.repo.slug] if self.repo is not None else []

    def _run(self, args: Sequence[str], *, input_text: str | None = None) -> str:
        cmd = [self.executable, *args]
        log.info(">>> %s", shlex.join(cmd))
        try:
            proc = self._runner(
                cmd,
                input=input_text,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise GhCommandError(cmd, 127, f"{self.executable}: not found") from exc
        if proc.stdout:
            log.debug("%s", proc.stdout.rstrip("\n"))
        if proc.returncode != 0:
            raise GhCommandError(cmd, proc.returncode, proc.stderr or "")
        return proc.stdout or ""

    def _run_json(self, args: Sequence[str]) -> Any:
        out = self._run(args)
        try:
            return orjson.loads(out)
        except orjson.JSONDecodeError as exc:
            raise GhCommandError(
                [self.executable, *args], 0, f"invalid JSON output: {exc}",
            ) from exc

    def view_issue(self, ref: str) -> Issue:
        payload = self._run_json(
            ["issue", "view", "--json", "url,body", *self._repo_args(), ref],
        )
        if not isinstance(payload, dict):
            raise GhCommandError(["issue", "view", ref], 0, "expected a JSON object")
        return Issue(url=str(payload.get("url", "")), body=str(payload.get("body") or ""))

    def list_issue_urls(self, state: IssueState = "open") -> list[str]:
        if state not in ISSUE_STATES:
            raise ValueError(f"issue state must be one of {', '.join(ISSUE_STATES)}")
        payload = self._run_json(
            [
                "issue", "list", *self._repo_args(),
                "--json", "url",
                "--state", state,
                "--limit", str(LIST_LIMIT),
            ],
        )
        if not isinstance(payload, list):
            raise GhCommandError(["issue", "list"], 0, "expected a JSON array")
        return [str(row["url"]) for row in payload if isinstance(row, dict) and row.get("url")]

    def edit_command(self, ref: str) -> list[str]:
        return [self.executable, "issue", "edit", *self._repo_args(), ref, "--body-file", "-"]

    def edit_issue_body(self, ref: str, body: str) -> None:
        self._run(self.edit_command(ref)[1:], input_text=body)
