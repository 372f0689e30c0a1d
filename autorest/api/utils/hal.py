"""Builders for HAL (Hypertext Application Language) documents.

A HAL document carries its data, an ``_links`` object mapping relation names
to ``{"href": ...}`` objects and, for collections, an ``_embedded`` object.
Paged collections add a ``page`` object.
"""

import math
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import urlencode

from starlette.requests import Request

type Link = dict[str, Any]
type Links = dict[str, Link]


def base_url(request: Request) -> str:
    """Return the scheme, host and root path of the request without a trailing slash."""
    return str(request.base_url).rstrip("/")


def link(href: str, *, templated: bool = False) -> Link:
    """Build a single HAL link object."""
    if templated:
        return {"href": href, "templated": True}
    return {"href": href}


def with_query(href: str, params: Iterable[tuple[str, object]]) -> str:
    """Append query parameters to ``href``, keeping repeated keys."""
    query = urlencode([(key, str(value)) for key, value in params])
    return f"{href}?{query}" if query else href


def page_metadata(size: int, total_elements: int, number: int) -> dict[str, int]:
    """Build the ``page`` object of a paged collection."""
    total_pages = math.ceil(total_elements / size) if size else 0
    return {
        "size": size,
        "totalElements": total_elements,
        "totalPages": total_pages,
        "number": number,
    }


def page_links(
    collection_href: str,
    page: Mapping[str, int],
    sort: Iterable[str] = (),
) -> Links:
    """Build navigation links for one page of a collection.

    ``self`` is always present; ``first``/``last`` appear when there is more
    than one page, ``prev``/``next`` when the neighbouring page exists.
    """
    sort_params = [("sort", value) for value in sort]

    def page_href(number: int) -> str:
        return with_query(
            collection_href, [("page", number), ("size", page["size"]), *sort_params]
        )

    number = page["number"]
    total_pages = page["totalPages"]

    links: Links = {}
    if total_pages > 1:
        links["first"] = link(page_href(0))
    if number > 0:
        links["prev"] = link(page_href(number - 1))
    links["self"] = link(page_href(number))
    if number + 1 < total_pages:
        links["next"] = link(page_href(number + 1))
    if total_pages > 1:
        links["last"] = link(page_href(total_pages - 1))
    return links
