"""Remove ``[tasklist]`` fences from GitHub issue bodies."""

from detasklister.context_window import DEFAULT_CONTEXT_LINES, build_context_window
from detasklister.diff_render import color_enabled, render_unified_diff
from detasklister.gh_client import (
    GhClient,
    GhCommandError,
    Issue,
    RepoSelector,
    validate_issue_ref,
)
from detasklister.prompt import (
    DECISION_LEGEND,
    DecisionPrompt,
    TerminalPrompt,
    parse_decision,
)
from detasklister.scanner import (
    find_next_block,
    iter_tasklist_blocks,
    scan_tasklist_blocks,
    strip_tasklist_fences,
)
from detasklister.session import (
    EditSession,
    SessionState,
    apply_decision,
    finish_session,
    next_pending_block,
    run_edit_session,
    start_session,
)
from detasklister.types import (
    BlockReview,
    ContextWindow,
    Decision,
    EditOutcome,
    Resolution,
    SessionMode,
    SourceSpan,
    TasklistBlock,
    UserAbort,
)

__all__ = [
    "BlockReview",
    "ContextWindow",
    "DECISION_LEGEND",
    "DEFAULT_CONTEXT_LINES",
    "Decision",
    "DecisionPrompt",
    "EditOutcome",
    "EditSession",
    "GhClient",
    "GhCommandError",
    "Issue",
    "RepoSelector",
    "Resolution",
    "SessionMode",
    "SessionState",
    "SourceSpan",
    "TasklistBlock",
    "TerminalPrompt",
    "UserAbort",
    "apply_decision",
    "build_context_window",
    "color_enabled",
    "find_next_block",
    "finish_session",
    "iter_tasklist_blocks",
    "next_pending_block",
    "parse_decision",
    "render_unified_diff",
    "run_edit_session",
    "scan_tasklist_blocks",
    "start_session",
    "strip_tasklist_fences",
    "validate_issue_ref",
]
