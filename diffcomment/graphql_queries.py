"""GraphQL documents used against the GitHub API.

Kept apart from the client so the queries stay readable.
"""

# Last comments on a pull request. Author identity is only selected for bots;
# for any other author the node comes back as an empty object.
PULL_REQUEST_COMMENTS_QUERY = """query comments($owner: String!, $repo: String!, $number: Int!, $last: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      id
      comments(last: $last) {
        nodes {
          id
          body
          isMinimized
          author {
            ... on Bot {
              id
              login
            }
          }
        }
      }
    }
  }
}"""

MINIMIZE_COMMENT_MUTATION = """mutation commentMutation($subjectId: ID!) {
  minimizeComment(input: {subjectId: $subjectId, classifier: OUTDATED}) {
    clientMutationId
  }
}"""
