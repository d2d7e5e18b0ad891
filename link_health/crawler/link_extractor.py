# link_health/crawler/link_extractor.py
"""
Hyperlink extraction for fetched documents.
"""
from __future__ import annotations

from typing import Iterator, Union

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__ = ("extract_links",)


def extract_links(body: Union[str, bytes]) -> Iterator[str]:
    """
    Yield raw ``href`` values of ``<a>`` elements in document order.

    Values are returned as written (possibly relative); resolving them is the
    normalizer's job. Empty or malformed attributes are skipped.
    """
    if not body:
        return
    soup = BeautifulSoup(body, "html.parser")
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if raw:
            yield raw
