"""
Constants and configuration values for the diff comment action.
"""

# API endpoints (overridden by GITHUB_API_URL / GITHUB_GRAPHQL_URL on the runner)
DEFAULT_API_URL = 'https://api.github.com'
DEFAULT_GRAPHQL_URL = 'https://api.github.com/graphql'
GITHUB_API_VERSION = '2022-11-28'

# Login of the bot that owns comments created with the workflow token
AUTOMATION_LOGIN = 'github-actions'

# Comment markers
HEADER_MARKER = '<!-- ActionId: pull-request-diff-comment-action -->\n'
RUN_MARKER_TEMPLATE = '<!-- RunId: {run_id} -->\n'
DIFF_FENCE_OPEN = '```diff\n'
DIFF_FENCE_CLOSE = '\n```'

# Number of most recent PR comments inspected for outdated diffs
RECENT_COMMENTS_LIMIT = 10

# Exit codes
EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1

# Action inputs
INPUT_DIFF_PATH = 'diff-path'
INPUT_GITHUB_TOKEN = 'github-token'
