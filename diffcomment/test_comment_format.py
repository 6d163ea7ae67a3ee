"""Unit tests for comment_format module."""

import pytest

from diffcomment.comment_format import (
    Comment,
    build_comment_body,
    is_outdated_diff_comment,
    parse_comment_body,
    run_marker,
    select_outdated_comments,
)
from diffcomment.constants import AUTOMATION_LOGIN, HEADER_MARKER


CURRENT_RUN = '42'


def _diff_comment(comment_id='IC_1', run_id='41', is_minimized=False, login=AUTOMATION_LOGIN, body=None):
    return Comment(
        id=comment_id,
        body=body if body is not None else build_comment_body('+added\n-removed', run_id),
        is_minimized=is_minimized,
        author_login=login,
        author_id='BOT_1' if login else None,
    )


class TestBuildCommentBody:
    """Test comment body composition."""

    def test_exact_layout(self):
        body = build_comment_body('+a\n-b', '42')
        assert body == (
            '<!-- ActionId: pull-request-diff-comment-action -->\n'
            '<!-- RunId: 42 -->\n'
            '```diff\n'
            '+a\n-b'
            '\n```'
        )

    def test_diff_is_trimmed(self):
        body = build_comment_body('\n\n  +a\n-b  \n\n', '7')
        assert '```diff\n+a\n-b\n```' in body

    def test_empty_diff(self):
        body = build_comment_body('   \n', '7')
        assert body.endswith('```diff\n\n```')

    def test_parse_round_trip(self):
        diff = '\ndiff --git a/x b/x\n--- a/x\n+++ b/x\n@@ -1 +1 @@\n-old\n+new\n\n'
        parsed = parse_comment_body(build_comment_body(diff, '123456'))
        assert parsed == {'run_id': '123456', 'diff': diff.strip()}

    def test_parse_rejects_foreign_body(self):
        assert parse_comment_body('LGTM') is None
        assert parse_comment_body(HEADER_MARKER + 'no run marker') is None
        assert parse_comment_body(HEADER_MARKER + run_marker('1') + 'not fenced') is None


class TestCommentFromNode:
    """Test building Comment records from GraphQL nodes."""

    def test_bot_author(self):
        comment = Comment.from_node({
            'id': 'IC_kw1',
            'body': 'text',
            'isMinimized': True,
            'author': {'id': 'BOT_kw1', 'login': 'github-actions'}
        })
        assert comment.id == 'IC_kw1'
        assert comment.is_minimized is True
        assert comment.author_login == 'github-actions'
        assert comment.author_id == 'BOT_kw1'

    @pytest.mark.parametrize('author', [None, {}])
    def test_missing_author(self, author):
        comment = Comment.from_node({'id': 'IC_kw2', 'body': None, 'isMinimized': False, 'author': author})
        assert comment.author_login is None
        assert comment.body == ''


class TestIsOutdatedDiffComment:
    """Test the outdated diff comment predicate."""

    def test_previous_run_comment_selected(self):
        assert is_outdated_diff_comment(_diff_comment(run_id='41'), run_marker(CURRENT_RUN))

    def test_minimized_never_selected(self):
        comment = _diff_comment(is_minimized=True)
        assert not is_outdated_diff_comment(comment, run_marker(CURRENT_RUN))

    @pytest.mark.parametrize('login', [None, 'octocat', 'dependabot', 'github-actions[bot]'])
    def test_other_authors_never_selected(self, login):
        comment = _diff_comment(login=login)
        assert not is_outdated_diff_comment(comment, run_marker(CURRENT_RUN))

    def test_body_without_header_prefix_not_selected(self):
        body = 'Quoting the bot:\n' + build_comment_body('+a', '41')
        comment = _diff_comment(body=body)
        assert not is_outdated_diff_comment(comment, run_marker(CURRENT_RUN))

    def test_run_marker_elsewhere_without_header_not_selected(self):
        comment = _diff_comment(body=run_marker(CURRENT_RUN) + 'something')
        assert not is_outdated_diff_comment(comment, run_marker('99'))

    def test_current_run_comment_not_selected(self):
        comment = _diff_comment(run_id=CURRENT_RUN)
        assert not is_outdated_diff_comment(comment, run_marker(CURRENT_RUN))

    def test_current_run_marker_later_in_body_not_selected(self):
        body = HEADER_MARKER + 'preamble\n' + run_marker(CURRENT_RUN) + '```diff\n+a\n```'
        comment = _diff_comment(body=body)
        assert not is_outdated_diff_comment(comment, run_marker(CURRENT_RUN))

    def test_run_id_prefix_does_not_match(self):
        # RunId: 4 must not be mistaken for RunId: 42
        comment = _diff_comment(run_id='42')
        assert is_outdated_diff_comment(comment, run_marker('4'))

    def test_pure(self):
        comment = _diff_comment()
        marker = run_marker(CURRENT_RUN)
        assert is_outdated_diff_comment(comment, marker) == is_outdated_diff_comment(comment, marker)


class TestSelectOutdatedComments:
    """Test filtering a fetched comment list."""

    def test_empty(self):
        assert select_outdated_comments([], run_marker(CURRENT_RUN)) == []

    def test_keeps_order_and_filters(self):
        comments = [
            _diff_comment('IC_1', run_id='39'),
            _diff_comment('IC_2', run_id='40', is_minimized=True),
            _diff_comment('IC_3', login=None, body='human comment'),
            _diff_comment('IC_4', run_id='41'),
            _diff_comment('IC_5', run_id=CURRENT_RUN),
        ]

        selected = select_outdated_comments(comments, run_marker(CURRENT_RUN))
        assert [c.id for c in selected] == ['IC_1', 'IC_4']
