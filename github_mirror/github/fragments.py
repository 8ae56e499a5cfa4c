"""GraphQL fragments for every entity kind and every update stage."""

from github_mirror.github.graphql import Field, Fragment, Group

AUTHOR = Group("author", (Field("login"),))
REACTION_COUNT = Group("reactions", (Field("totalCount"),))

USER = Fragment("User", (Field("login"), Field("avatarUrl"), Field("isViewer")))
ORG = Fragment("Organization", (Field("login"), Field("name")))
REPO = Fragment("Repository", (Field("nameWithOwner"), Field("url"), Field("isFork"), Field("isArchived")))
ORG_WITH_REPOS = ORG.extend(Group("repositories", (REPO,), paging=True))

LABEL = Fragment("Label", (Field("name"), Field("color")))
MILESTONE = Fragment("Milestone", (Field("title"), Field("number"), Field("state")))
STATUS = Fragment("StatusContext", (Field("context"), Field("state"), Field("description"), Field("targetUrl"), Field("createdAt")))
REACTION = Fragment("Reaction", (Field("content"), Field("createdAt"), Group("user", (Field("login"),))))
REVIEW_REQUEST = Fragment(
    "ReviewRequest",
    (Group("requestedReviewer", (Field("... on User { login }"), Field("... on Team { slug }"))),),
)
REVIEW = Fragment("PullRequestReview", (Field("state"), Field("body"), Field("submittedAt"), Field("updatedAt"), AUTHOR))

_ITEM_FIELDS = (
    Field("number"),
    Field("title"),
    Field("body"),
    Field("state"),
    Field("url"),
    Field("createdAt"),
    Field("updatedAt"),
    AUTHOR,
    REACTION_COUNT,
    Group("milestone", (MILESTONE,)),
    Group("labels", (LABEL,), paging=True),
)

PULL_REQUEST = Fragment(
    "PullRequest",
    _ITEM_FIELDS
    + (
        Field("headRefName"),
        Field("isDraft"),
        Field("mergeable"),
        Group("reviewRequests", (REVIEW_REQUEST,), paging=True),
        Group("reviews", (REVIEW,), paging=True),
        Group("commits", (Group("nodes", (Group("commit", (Group("status", (Group("contexts", (STATUS,)),)),)),)),), arguments="last: 1"),
    ),
)
ISSUE = Fragment("Issue", _ITEM_FIELDS)

_COMMENT_FIELDS = (Field("body"), Field("url"), Field("createdAt"), Field("updatedAt"), AUTHOR, REACTION_COUNT)
ISSUE_COMMENT = Fragment("IssueComment", _COMMENT_FIELDS)
REVIEW_COMMENT = Fragment("PullRequestReviewComment", _COMMENT_FIELDS)

# Repository discovery
VIEWER_WITH_ORGS = Group("viewer", (USER.extend(Group("organizations", (ORG_WITH_REPOS,), paging=True)),))
VIEWER_REPOSITORIES = Group("viewer", (USER.extend(Group("repositories", (REPO,), paging=True, arguments="affiliations: [OWNER]")),))
VIEWER_WATCHING = Group("viewer", (USER.extend(Group("watching", (REPO,), paging=True)),))

# ID discovery
REPO_PR_AND_ISSUE_IDS = Fragment(
    "Repository",
    (
        Group("pullRequests", (Field("id"),), paging=True, arguments="states: OPEN"),
        Group("issues", (Field("id"),), paging=True, arguments="states: OPEN"),
    ),
)

# Comments
PULL_REQUEST_COMMENTS = Fragment("PullRequest", (Group("comments", (ISSUE_COMMENT,), paging=True),))
ISSUE_COMMENTS = Fragment("Issue", (Group("comments", (ISSUE_COMMENT,), paging=True),))
REVIEW_COMMENTS = Fragment("PullRequestReview", (Group("comments", (REVIEW_COMMENT,), paging=True),))

# Reactions
_REACTIONS = Group("reactions", (REACTION,), paging=True)
PULL_REQUEST_REACTIONS = Fragment("PullRequest", (_REACTIONS,))
ISSUE_REACTIONS = Fragment("Issue", (_REACTIONS,))
ISSUE_COMMENT_REACTIONS = Fragment("IssueComment", (_REACTIONS,))
REVIEW_COMMENT_REACTIONS = Fragment("PullRequestReviewComment", (_REACTIONS,))
