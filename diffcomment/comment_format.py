"""Build and recognize the diff comments posted by this action."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from diffcomment.constants import (
    AUTOMATION_LOGIN,
    DIFF_FENCE_CLOSE,
    DIFF_FENCE_OPEN,
    HEADER_MARKER,
    RUN_MARKER_TEMPLATE,
)
from diffcomment.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Comment:
    """Snapshot of a pull request comment as returned by the GraphQL API."""

    id: str
    body: str
    is_minimized: bool
    author_login: Optional[str] = None
    author_id: Optional[str] = None

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "Comment":
        # author is null for deleted accounts and {} for non-bot authors
        author = node.get('author') or {}
        return cls(
            id=node['id'],
            body=node.get('body') or '',
            is_minimized=bool(node.get('isMinimized')),
            author_login=author.get('login'),
            author_id=author.get('id'),
        )


def run_marker(run_id: str) -> str:
    """Return the marker line identifying comments from a given workflow run."""
    return RUN_MARKER_TEMPLATE.format(run_id=run_id)


def build_comment_body(diff: str, run_id: str) -> str:
    """Compose the comment body for a diff.

    Args:
        diff: Raw diff text. Surrounding whitespace is stripped.
        run_id: Workflow run identifier embedded in the run marker.

    Returns:
        Header marker, run marker and the diff in a ``diff`` code fence.
    """
    return (
        HEADER_MARKER
        + run_marker(run_id)
        + DIFF_FENCE_OPEN
        + diff.strip()
        + DIFF_FENCE_CLOSE
    )


def parse_comment_body(body: str) -> Optional[Dict[str, str]]:
    """Split a comment body produced by build_comment_body.

    Returns:
        Dict with 'run_id' and 'diff', or None if the body was not
        written by this action.
    """
    if not body.startswith(HEADER_MARKER):
        return None

    rest = body[len(HEADER_MARKER):]
    prefix, _, suffix = RUN_MARKER_TEMPLATE.partition('{run_id}')
    if not rest.startswith(prefix):
        return None
    end = rest.find(suffix, len(prefix))
    if end < 0:
        return None
    run_id = rest[len(prefix):end]

    rest = rest[end + len(suffix):]
    if not rest.startswith(DIFF_FENCE_OPEN) or not rest.endswith(DIFF_FENCE_CLOSE):
        return None
    diff = rest[len(DIFF_FENCE_OPEN):len(rest) - len(DIFF_FENCE_CLOSE)]

    return {'run_id': run_id, 'diff': diff}


def is_outdated_diff_comment(comment: Comment, current_run_marker: str,
                             header: str = HEADER_MARKER) -> bool:
    """Check if a comment is an earlier diff comment that should be minimized.

    A comment qualifies when it is still expanded, was authored by the
    automation bot, starts with the header marker and does not carry the
    marker of the current run.
    """
    if comment.is_minimized:
        return False

    if comment.author_login != AUTOMATION_LOGIN:
        return False

    if not comment.body.startswith(header):
        return False

    if comment.body.find(current_run_marker, len(header)) >= 0:
        return False

    return True


def select_outdated_comments(comments: Sequence[Comment], current_run_marker: str) -> List[Comment]:
    """Filter comments down to the outdated diff comments, keeping order."""
    outdated = [c for c in comments if is_outdated_diff_comment(c, current_run_marker)]
    logger.info(f"Selected {len(outdated)} outdated diff comment(s) out of {len(comments)}")
    return outdated
