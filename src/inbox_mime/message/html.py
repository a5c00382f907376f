"""Merging of several HTML body parts into a single document."""

from __future__ import annotations

import logging
import warnings
from collections.abc import Sequence

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning
from bs4.element import Tag

LOGGER = logging.getLogger(__name__)


def _parse(markup: str, parser: str) -> BeautifulSoup:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        return BeautifulSoup(markup, parser)


def _body_containers(document: BeautifulSoup) -> list[Tag]:
    containers: list[Tag] = [
        body for body in document.find_all("body") if body.find_parent("body") is None
    ]
    if not containers:
        LOGGER.debug("No body element found, merging the whole document")
        containers = [document]
    for container in containers:
        for head in container.find_all("head"):
            head.decompose()
        for wrapper in container.find_all(["html", "body"]):
            wrapper.unwrap()
    return containers


def merge_html_documents(fragments: Sequence[str], parser: str = "html.parser") -> str:
    """Join HTML documents into one, keeping only the content of their bodies.

    The fragments are concatenated and parsed as one document, so a
    fragment that leaves its body open still merges. Markup problems never
    raise; markup without any body element is merged as a whole.
    """
    document = _parse("".join(fragments), parser)
    body_markup = "".join(
        str(node) for container in _body_containers(document) for node in container.contents
    )
    return str(_parse(f"<html><body>{body_markup}</body></html>", parser))


__all__ = ["merge_html_documents"]
