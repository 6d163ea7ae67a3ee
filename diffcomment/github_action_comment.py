#!/usr/bin/env python3
"""
Pull Request Diff Comment for GitHub Actions
Posts a diff file as a PR comment and minimizes the diff comments left by earlier runs
"""

import os
import sys
import json
import requests
from dataclasses import asdict, dataclass, field
from typing import Dict, Any, List, Optional
from pathlib import Path

from diffcomment.comment_format import (
    Comment,
    build_comment_body,
    run_marker,
    select_outdated_comments,
)
from diffcomment.constants import (
    DEFAULT_API_URL,
    DEFAULT_GRAPHQL_URL,
    EXIT_GENERAL_ERROR,
    EXIT_SUCCESS,
    GITHUB_API_VERSION,
    INPUT_DIFF_PATH,
    INPUT_GITHUB_TOKEN,
    RECENT_COMMENTS_LIMIT,
)
from diffcomment.graphql_queries import MINIMIZE_COMMENT_MUTATION, PULL_REQUEST_COMMENTS_QUERY
from diffcomment.logger import get_logger

logger = get_logger(__name__)

class ConfigurationError(ValueError):
    """Raised when configuration is invalid or missing."""
    pass

class GitHubAPIError(RuntimeError):
    """Raised when the GitHub API answers with an error payload."""
    pass


def detailed_info(msg: str, params: Any) -> None:
    """Log a message followed by its parameters as indented JSON."""
    logger.info(f"{msg}: {json.dumps(params, indent=2)}")


class GitHubActionClient:
    """Minimal GitHub REST and GraphQL client for the Actions environment."""

    def __init__(self, github_token: str, api_url: str = DEFAULT_API_URL,
                 graphql_url: str = DEFAULT_GRAPHQL_URL):
        if not github_token:
            raise ValueError("GitHub token required")

        self.github_token = github_token
        self.api_url = api_url.rstrip('/')
        self.graphql_url = graphql_url
        self.headers = {
            'Authorization': f'Bearer {self.github_token}',
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': GITHUB_API_VERSION
        }

    def graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Run a GraphQL document and return its ``data`` member.

        Raises:
            requests.HTTPError: On a non-2xx response
            GitHubAPIError: If the response carries GraphQL errors
        """
        response = requests.post(
            self.graphql_url,
            headers=self.headers,
            json={'query': query, 'variables': variables}
        )
        response.raise_for_status()
        result = response.json()

        errors = result.get('errors')
        if errors:
            messages = '; '.join(
                e.get('message', str(e)) if isinstance(e, dict) else str(e)
                for e in errors
            )
            raise GitHubAPIError(f"GraphQL request failed: {messages}")

        return result.get('data') or {}

    def get_pull_request_comments(self, owner: str, repo: str, number: int) -> List[Comment]:
        """Get the most recent comments on a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Pull request number

        Returns:
            Up to RECENT_COMMENTS_LIMIT comments, oldest first
        """
        variables = {'owner': owner, 'repo': repo, 'number': number}
        detailed_info("Querying pull request comments", variables)

        data = self.graphql(PULL_REQUEST_COMMENTS_QUERY, {**variables, 'last': RECENT_COMMENTS_LIMIT})

        pull_request = (data.get('repository') or {}).get('pullRequest')
        if pull_request is None:
            raise GitHubAPIError(f"Pull request {owner}/{repo}#{number} not found")

        nodes = pull_request['comments']['nodes']
        return [Comment.from_node(node) for node in nodes if node]

    def minimize_comment(self, comment_id: str) -> None:
        """Minimize a comment with the OUTDATED classifier."""
        args = {'subjectId': comment_id}
        detailed_info("Minimizing comment", args)
        self.graphql(MINIMIZE_COMMENT_MUTATION, args)

    def create_comment(self, owner: str, repo: str, issue_number: int, body: str) -> Dict[str, Any]:
        """Create a comment on a pull request.

        Returns:
            The created comment as returned by the REST API
        """
        comment_args = {
            'owner': owner,
            'repo': repo,
            'issue_number': issue_number,
            'body': body
        }
        detailed_info("Creating comment", comment_args)

        url = f"{self.api_url}/repos/{owner}/{repo}/issues/{issue_number}/comments"
        response = requests.post(url, headers=self.headers, json={'body': body})
        response.raise_for_status()
        return response.json()


@dataclass(frozen=True)
class RunContext:
    """Repository, pull request and run the action executes for."""

    owner: str
    repo: str
    issue_number: int
    run_id: str

    @classmethod
    def from_env(cls, env: Dict[str, str]) -> "RunContext":
        repository = (env.get('GITHUB_REPOSITORY') or '').strip()
        if not repository:
            raise ConfigurationError('GITHUB_REPOSITORY environment variable required')

        owner, _, repo = repository.partition('/')
        if not owner or not repo:
            raise ConfigurationError(f'Invalid GITHUB_REPOSITORY: {repository}')

        run_id = (env.get('GITHUB_RUN_ID') or '').strip()
        if not run_id:
            raise ConfigurationError('GITHUB_RUN_ID environment variable required')

        return cls(
            owner=owner,
            repo=repo,
            issue_number=_get_issue_number(env),
            run_id=run_id,
        )


@dataclass
class MinimizeResult:
    """Outcome of the best-effort minimize loop."""

    minimized: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def _get_issue_number(env: Dict[str, str]) -> int:
    """Resolve the pull request number from PR_NUMBER or the event payload."""
    pr_number_str = (env.get('PR_NUMBER') or '').strip()
    if pr_number_str:
        try:
            return int(pr_number_str)
        except ValueError as e:
            raise ConfigurationError(f'Invalid PR_NUMBER: {pr_number_str}') from e

    event_path = env.get('GITHUB_EVENT_PATH')
    if not event_path:
        raise ConfigurationError('PR_NUMBER or GITHUB_EVENT_PATH environment variable required')

    try:
        event = json.loads(Path(event_path).read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        raise ConfigurationError(f'Failed to read event payload {event_path}: {e}') from e

    if not isinstance(event, dict):
        raise ConfigurationError(f'Event payload {event_path} is not a JSON object')

    for key in ('pull_request', 'issue'):
        payload = event.get(key)
        if isinstance(payload, dict) and payload.get('number') is not None:
            number = payload['number']
            break
    else:
        number = event.get('number')

    if number is not None:
        try:
            return int(number)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f'Invalid pull request number in event payload: {number!r}') from e

    raise ConfigurationError('Event payload does not reference a pull request')


def get_input(name: str, env: Dict[str, str], required: bool = False) -> str:
    """Read an action input the way the Actions runner exposes it.

    The runner sets INPUT_<NAME> with spaces replaced by underscores and
    hyphens kept. INPUT_<NAME> with hyphens replaced is accepted as well.
    """
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    value = env.get(key)
    if value is None:
        value = env.get(key.replace('-', '_'), '')
    value = value.strip()

    if required and not value:
        raise ConfigurationError(f'Input required and not supplied: {name}')
    return value


def read_diff(diff_path: str) -> str:
    """Read the diff file as UTF-8 text."""
    logger.info(f"Reading diff: {diff_path}")
    return Path(diff_path).read_text(encoding='utf-8')


def minimize_outdated_comments(github_client: GitHubActionClient, comments: List[Comment]) -> MinimizeResult:
    """Minimize each comment in turn, logging failures without stopping.

    Args:
        github_client: Client used for the minimize mutation
        comments: Outdated comments to minimize

    Returns:
        MinimizeResult with the ids that were and were not minimized
    """
    result = MinimizeResult()
    for comment in comments:
        try:
            github_client.minimize_comment(comment.id)
        except Exception as e:
            logger.error(f"Failed to minimize comment: {e}")
            result.failed.append(comment.id)
            continue
        result.minimized.append(comment.id)
    return result


def _escape_command_data(value: str) -> str:
    """Escape a message for use in a workflow command such as ::error::."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def write_outputs(outputs: Dict[str, Any], env: Dict[str, str]) -> None:
    """Append step outputs to the GITHUB_OUTPUT file when the runner provides one."""
    output_path = env.get('GITHUB_OUTPUT')
    if not output_path:
        return
    with open(output_path, 'a', encoding='utf-8') as f:
        for name, value in outputs.items():
            f.write(f"{name}={value}\n")


def run(env: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Post the diff comment and minimize the outdated ones.

    Args:
        env: Environment mapping, defaults to os.environ

    Returns:
        Summary of the run

    Raises:
        Exception: Any input, fetch or post failure. Minimize failures are
            logged and reported in the summary instead.
    """
    if env is None:
        env = dict(os.environ)

    diff_path = get_input(INPUT_DIFF_PATH, env, required=True)
    token = get_input(INPUT_GITHUB_TOKEN, env, required=True)
    context = RunContext.from_env(env)

    diff = read_diff(diff_path)

    github_client = GitHubActionClient(
        token,
        api_url=env.get('GITHUB_API_URL') or DEFAULT_API_URL,
        graphql_url=env.get('GITHUB_GRAPHQL_URL') or DEFAULT_GRAPHQL_URL
    )

    comments = github_client.get_pull_request_comments(context.owner, context.repo, context.issue_number)
    detailed_info("Fetched comments", [asdict(c) for c in comments])

    outdated_comments = select_outdated_comments(comments, run_marker(context.run_id))
    minimize_result = minimize_outdated_comments(github_client, outdated_comments)

    body = build_comment_body(diff, context.run_id)
    created = github_client.create_comment(context.owner, context.repo, context.issue_number, body)

    # The comment is already posted, so an unwritable output file only warns
    try:
        write_outputs({
            'comment-id': created.get('id', ''),
            'minimized-count': len(minimize_result.minimized)
        }, env)
    except OSError as e:
        logger.warning(f"Failed to write step outputs: {e}")

    return {
        'repo': f"{context.owner}/{context.repo}",
        'pr_number': context.issue_number,
        'run_id': context.run_id,
        'comment_id': created.get('id'),
        'comment_url': created.get('html_url'),
        'minimized_comments': minimize_result.minimized,
        'failed_minimizations': minimize_result.failed
    }


def main():
    """Main execution function for GitHub Action."""
    try:
        output = run()
    except Exception as e:
        print(f"::error::{_escape_command_data(str(e))}")
        print(json.dumps({'error': str(e)}))
        sys.exit(EXIT_GENERAL_ERROR)

    print(json.dumps(output, indent=2))
    sys.exit(EXIT_SUCCESS)


if __name__ == '__main__':
    main()
