#!/usr/bin/env python3
"""Remove tasklist blocks from GitHub issues.

Finds ```` ```[tasklist] ```` fenced blocks in issue bodies and strips the
fences, keeping the task lines. Issues are fetched and updated through the
``gh`` CLI, which must already be authenticated.

Usage::

    python3 scripts/detasklister.py [options] <issue number or url> ...
    python3 scripts/detasklister.py -R OWNER/REPO --all-issues [--issue-state all]
    python3 scripts/detasklister.py -R OWNER/REPO -i -n 12 14

In interactive mode (``-i``) every block is shown as a diff with the
surrounding lines and the operator answers::

    y  remove this block          n  keep this block
    a  remove all remaining       d  keep all remaining
    q  quit without touching this or later issues
"""
from __future__ import annotations

import argparse
import logging
import shlex
import sys
from pathlib import Path
from typing import TextIO

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from detasklister.context_window import DEFAULT_CONTEXT_LINES
from detasklister.diff_render import color_enabled
from detasklister.gh_client import (
    ISSUE_STATES,
    GhClient,
    GhCommandError,
    RepoSelector,
    validate_issue_ref,
)
from detasklister.prompt import DecisionPrompt, TerminalPrompt
from detasklister.session import run_edit_session
from detasklister.types import EditOutcome, UserAbort

log = logging.getLogger("detasklister")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Remove tasklist blocks from GitHub issues.",
    )
    parser.add_argument(
        "issues", nargs="*", metavar="ISSUE",
        help="Issue number (12, #12) or issue URL",
    )
    parser.add_argument(
        "--repo", "-R", metavar="[HOST/]OWNER/REPO",
        help="GitHub repository to change",
    )
    parser.add_argument(
        "--interactive", "-i", action="store_true",
        help="Prompt for each tasklist block",
    )
    parser.add_argument(
        "--all-issues", "-A", action="store_true",
        help="Modify all issues in the repository (requires --repo)",
    )
    parser.add_argument(
        "--issue-state", "-s", choices=ISSUE_STATES, default=None,
        help="Filter by issue state with --all-issues (default: open)",
    )
    parser.add_argument(
        "--context", "-C", type=int, default=DEFAULT_CONTEXT_LINES, metavar="N",
        help=f"Lines of context shown around each block (default: {DEFAULT_CONTEXT_LINES})",
    )
    parser.add_argument(
        "--dry-run", "-n", action="store_true",
        help="Show changes without performing them",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    parser.add_argument("--debug", action="store_true", help="Debugging output")
    return parser


def parse_args(argv: list[str] | None = None) -> tuple[argparse.Namespace, RepoSelector | None]:
    """Parse and cross-validate command-line options."""
    parser = build_parser()
    args = parser.parse_args(argv)

    repo: RepoSelector | None = None
    if args.repo is not None:
        try:
            repo = RepoSelector.parse(args.repo)
        except ValueError as exc:
            parser.error(str(exc))

    if args.all_issues:
        if args.issues:
            parser.error("Cannot combine positional arguments with --all-issues (-A)")
        if repo is None:
            parser.error("--repo (-R) is required when using --all-issues (-A)")
        if args.issue_state is None:
            args.issue_state = "open"
    else:
        if args.issue_state is not None:
            parser.error("--issue-state (-s) requires --all-issues (-A)")
        if not args.issues:
            parser.error("at least one issue is required unless --all-issues (-A) is given")

    if args.context < 0:
        parser.error("--context (-C) must be >= 0")

    for ref in args.issues:
        try:
            validate_issue_ref(ref)
        except ValueError as exc:
            parser.error(str(exc))

    return args, repo


def process_issue(
    client: GhClient,
    ref: str,
    *,
    interactive: bool,
    context_lines: int,
    dry_run: bool,
    prompt: DecisionPrompt | None,
    color: bool,
    out: TextIO,
) -> EditOutcome:
    """Fetch one issue, run an edit session over it and persist the result."""
    issue = client.view_issue(ref)
    outcome = run_edit_session(
        issue.body,
        interactive=interactive,
        context_lines=context_lines,
        prompt=prompt,
        item_label=ref,
    )
    log.debug("%s", outcome.summary(ref))
    if not outcome.changed:
        print(f"No changes to make for {ref}", file=out)
        return outcome

    if dry_run:
        print(f">>> {shlex.join(client.edit_command(ref))}", file=out)
        out.write(
            outcome.unified_diff(
                fromfile=f"{ref} (current)",
                tofile=f"{ref} (updated)",
                color=color,
            ),
        )
        return outcome

    print(f"Updating {ref}...", file=out)
    client.edit_issue_body(ref, outcome.new_body)
    print(f"Updated {ref}\n", file=out)
    return outcome


def run(
    args: argparse.Namespace,
    client: GhClient,
    *,
    prompt: DecisionPrompt | None = None,
    out: TextIO | None = None,
) -> int:
    out = out if out is not None else sys.stdout
    color = color_enabled(out)
    if args.interactive and prompt is None:
        prompt = TerminalPrompt(stdout=out, color=color)

    try:
        if args.all_issues:
            refs = client.list_issue_urls(args.issue_state)
            log.info("Found %d %s issue(s)", len(refs), args.issue_state)
        else:
            refs = list(args.issues)

        for ref in refs:
            process_issue(
                client,
                ref,
                interactive=args.interactive,
                context_lines=args.context,
                dry_run=args.dry_run,
                prompt=prompt,
                color=color,
                out=out,
            )
    except UserAbort as exc:
        print(str(exc) or "Quit", file=sys.stderr)
        return 1
    except GhCommandError as exc:
        log.error("%s", exc)
        return exc.returncode or 1
    return 0


def main(argv: list[str] | None = None) -> int:
    args, repo = parse_args(argv)

    level = logging.WARNING
    if args.verbose:
        level = logging.INFO
    if args.debug:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    return run(args, GhClient(repo))


if __name__ == "__main__":
    raise SystemExit(main())
