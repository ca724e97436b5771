"""
GraphQL documents for the GitHub v4 API.
"""

# Nested connections are fetched in a single page of this size; a larger one is reported, not truncated.
MEMBERS_PAGE_SIZE = 100
TIMELINE_PAGE_SIZE = 200

TEAMS_QUERY = """
query Teams($org: String!, $teamFilter: String, $first: Int!, $after: String) {
  organization(login: $org) {
    teams(first: $first, after: $after, query: $teamFilter) {
      pageInfo {
        endCursor
        hasNextPage
      }
      nodes {
        name
        members(first: 100) {
          pageInfo {
            hasNextPage
          }
          nodes {
            login
          }
        }
      }
    }
  }
}
"""

# Timeline item kinds here must stay in sync with normalize.events.SUPPORTED_KINDS.
PULL_REQUESTS_QUERY = """
query PullRequests($owner: String!, $repo: String!, $first: Int!, $after: String) {
  repository(owner: $owner, name: $repo) {
    pullRequests(orderBy: {field: CREATED_AT, direction: DESC}, first: $first, after: $after) {
      pageInfo {
        endCursor
        hasNextPage
      }
      nodes {
        number
        title
        additions
        deletions
        createdAt
        author {
          login
        }
        timelineItems(itemTypes: [PULL_REQUEST_COMMIT, PULL_REQUEST_REVIEW, MERGED_EVENT, CLOSED_EVENT], first: 200) {
          pageInfo {
            hasNextPage
          }
          nodes {
            __typename
            ... on PullRequestCommit {
              commit {
                oid
                committedDate
                author {
                  user {
                    login
                  }
                }
              }
            }
            ... on PullRequestReview {
              publishedAt
              state
              author {
                login
              }
              comments {
                totalCount
              }
            }
            ... on MergedEvent {
              createdAt
              actor {
                login
              }
            }
            ... on ClosedEvent {
              createdAt
              actor {
                login
              }
            }
          }
        }
      }
    }
  }
}
"""
