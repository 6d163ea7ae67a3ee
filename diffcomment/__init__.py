"""
DiffComment - Pull Request Diff Comment Action

Posts a diff as a pull request comment and minimizes the diff
comments left by earlier workflow runs on the same pull request.
"""

__version__ = "1.0.0"

# Import main components for easier access
from diffcomment.comment_format import (
    Comment,
    build_comment_body,
    is_outdated_diff_comment,
    select_outdated_comments
)
from diffcomment.github_action_comment import (
    GitHubActionClient,
    RunContext,
    run,
    main
)

__all__ = [
    "Comment",
    "GitHubActionClient",
    "RunContext",
    "build_comment_body",
    "is_outdated_diff_comment",
    "select_outdated_comments",
    "run",
    "main"
]
