"""Unit tests for rendering GraphQL selections."""

from github_mirror.github import fragments
from github_mirror.github.graphql import Field, Fragment, Group, fragments_in


def test_plain_group_render() -> None:
    group = Group("author", (Field("login"),))

    assert group.render(50) == "author { login }"


def test_paging_group_render() -> None:
    """Connections request a page, wrap nodes in edges and ask for pageInfo."""
    group = Group("issues", (Field("id"),), paging=True, arguments="states: OPEN")

    rendered = group.render(25)

    assert rendered == "issues(first: 25, states: OPEN) { edges { node { id } } pageInfo { hasNextPage endCursor } }"


def test_paging_group_render_after_cursor() -> None:
    group = Group("comments", (Field("id"),), paging=True)

    assert 'comments(first: 10, after: "Y3Vyc29y")' in group.render(10, after="Y3Vyc29y")


def test_fragment_render_includes_typename_and_id() -> None:
    fragment = Fragment("Label", (Field("name"),))

    assert fragment.render(10) == "... on Label { __typename id name }"


def test_fragment_render_page() -> None:
    """A follow-up page selects only the requested connection of the fragment."""
    group = fragments.ISSUE_COMMENTS.paging_group("comments")
    assert group is not None

    rendered = fragments.ISSUE_COMMENTS.render_page(group, 10, "abc")

    assert rendered.startswith('... on Issue { __typename id comments(first: 10, after: "abc")')


def test_paging_group_lookup() -> None:
    assert fragments.PULL_REQUEST.paging_group("reviews") is not None
    assert fragments.PULL_REQUEST.paging_group("commits") is None
    assert fragments.PULL_REQUEST.paging_group("unknown") is None


def test_extend_keeps_type_and_appends_fields() -> None:
    extended = fragments.USER.extend(Field("company"))

    assert extended.on_type == "User"
    assert extended.fields[-1] == Field("company")
    assert len(extended.fields) == len(fragments.USER.fields) + 1


def test_fragments_in_finds_nested_fragments() -> None:
    """Fragments nested inside groups and other fragments are all collected."""
    found = fragments_in((fragments.VIEWER_WITH_ORGS,))

    assert [fragment.on_type for fragment in found] == ["User", "Organization", "Repository"]
