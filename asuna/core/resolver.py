# Maps free-text references from the user onto exactly one panel entity.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar, Union

from asuna.models.panel import Category, ServerSummary, ServerType

T = TypeVar("T")


@dataclass(frozen=True)
class Resolved(Generic[T]):
    match: T


@dataclass(frozen=True)
class Ambiguous:
    query: str
    candidates: List[str] = field(default_factory=list)
    entity: str = ""


@dataclass(frozen=True)
class NotFound:
    query: str
    entity: str = ""


Resolution = Union[Resolved[T], Ambiguous, NotFound]


def resolve(query: str,
            candidates: Sequence[T],
            identifiers: Callable[[T], Sequence[str]],
            name: Callable[[T], str],
            label: Optional[Callable[[T], str]] = None,
            entity: str = "") -> "Resolution[T]":
    """
    Resolves a query against candidates.

    An exact identifier match wins outright. Otherwise the query is matched as a
    case-insensitive substring of each candidate's name: one hit resolves, none
    is NotFound, several are Ambiguous (with candidate labels for the user).
    """
    query = (query or "").strip()
    if not query:
        return NotFound(query, entity)

    for candidate in candidates:
        if query in identifiers(candidate):
            return Resolved(candidate)

    needle = query.casefold()
    matches = [c for c in candidates if needle in name(c).casefold()]
    if not matches:
        return NotFound(query, entity)
    if len(matches) == 1:
        return Resolved(matches[0])
    label = label or name
    return Ambiguous(query, [label(m) for m in matches], entity)


def resolve_server(query: str, servers: Sequence[ServerSummary]) -> "Resolution[ServerSummary]":
    return resolve(
        query,
        servers,
        identifiers=lambda s: (s.identifier, s.uuid),
        name=lambda s: s.name,
        label=lambda s: f"{s.name} ({s.identifier})",
        entity="server",
    )


def resolve_category(query: str, categories: Sequence[Category]) -> "Resolution[Category]":
    return resolve(query, categories, identifiers=lambda c: (str(c.id),), name=lambda c: c.name,
                   entity="category")


def resolve_server_type(query: str,
                        categories: Sequence[Category],
                        category_query: Optional[str] = None) -> "Resolution[Tuple[Category, ServerType]]":
    """
    Resolves a server type, optionally scoped to one category.
    The scoping category is resolved first; its failure is returned as is.
    """
    if category_query:
        scope = resolve_category(category_query, categories)
        if not isinstance(scope, Resolved):
            return scope
        categories = [scope.match]

    pairs = [(category, server_type) for category in categories for server_type in category.types]
    return resolve(
        query,
        pairs,
        identifiers=lambda pair: (str(pair[1].id),),
        name=lambda pair: pair[1].name,
        label=lambda pair: f"{pair[1].name} ({pair[0].name})",
        entity="server type",
    )
