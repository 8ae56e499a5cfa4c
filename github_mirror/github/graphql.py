"""Building blocks for rendering GitHub GraphQL selections."""

import json
from dataclasses import dataclass
from typing import Union

Element = Union["Field", "Group", "Fragment"]


def render_elements(elements: tuple[Element, ...], page_size: int) -> str:
    """Render a selection set body."""
    return " ".join(element.render(page_size) for element in elements)


@dataclass(frozen=True)
class Field:
    """A scalar field, or any raw selection text."""

    name: str

    def render(self, page_size: int) -> str:
        return self.name


@dataclass(frozen=True)
class Group:
    """An object field with a nested selection.

    A paging group is a connection: it is rendered with ``first``/``after``
    arguments, an ``edges { node }`` wrapper and ``pageInfo``, so that further
    pages can be requested with a follow-up query.
    """

    name: str
    fields: tuple[Element, ...]
    paging: bool = False
    arguments: str | None = None

    def render(self, page_size: int, after: str | None = None) -> str:
        args: list[str] = []
        if self.paging:
            args.append(f"first: {page_size}")
            if after is not None:
                args.append(f"after: {json.dumps(after)}")
        if self.arguments:
            args.append(self.arguments)
        argument_text = f"({', '.join(args)})" if args else ""

        body = render_elements(self.fields, page_size)
        if self.paging:
            body = f"edges {{ node {{ {body} }} }} pageInfo {{ hasNextPage endCursor }}"
        return f"{self.name}{argument_text} {{ {body} }}"


@dataclass(frozen=True)
class Fragment:
    """An inline fragment selecting an entity type, always including its typename and id."""

    on_type: str
    fields: tuple[Element, ...]

    def render(self, page_size: int) -> str:
        return f"... on {self.on_type} {{ __typename id {render_elements(self.fields, page_size)} }}"

    def render_page(self, group: Group, page_size: int, after: str) -> str:
        """Render this fragment restricted to the next page of one of its connections."""
        return f"... on {self.on_type} {{ __typename id {group.render(page_size, after=after)} }}"

    def extend(self, *fields: Element) -> "Fragment":
        """Return a fragment on the same type with additional fields."""
        return Fragment(self.on_type, self.fields + fields)

    def paging_group(self, name: str) -> Group | None:
        """Return the connection with the given name, if this fragment selects one."""
        for element in self.fields:
            if isinstance(element, Group) and element.paging and element.name == name:
                return element
        return None


def fragments_in(elements: tuple[Element, ...]) -> list[Fragment]:
    """Collect every fragment reachable from a selection, depth first."""
    found: list[Fragment] = []
    for element in elements:
        if isinstance(element, Fragment):
            found.append(element)
            found.extend(fragments_in(element.fields))
        elif isinstance(element, Group):
            found.extend(fragments_in(element.fields))
    return found
