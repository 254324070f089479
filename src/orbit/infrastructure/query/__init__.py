"""Filter building and marker based pagination."""

from .filter import Query, Sort, SortDirection
from .resource_query import ResourceIterator, ResourceQuery

__all__: list[str] = ["Query", "ResourceIterator", "ResourceQuery", "Sort", "SortDirection"]
