"""Message retrieval and search on top of a transport collaborator."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from ..core.config import AppSettings
from ..core.interfaces import MessageTransport
from ..message.headers import Headers
from ..message.message import Message
from ..search.conditions import SearchCondition, serialize
from ..search.expression import SearchExpression

LOGGER = logging.getLogger(__name__)

SearchQuery = SearchCondition | SearchExpression


def render_query(query: SearchQuery | None) -> str:
    """Serialize a condition or expression; ``None`` matches everything."""
    if query is None:
        return "ALL"
    if isinstance(query, SearchExpression):
        return query.serialize()
    return serialize(query)


class MessageFetcher:
    """Build :class:`Message` models for one mailbox of a transport."""

    def __init__(
        self,
        transport: MessageTransport,
        mailbox: str,
        *,
        settings: AppSettings | None = None,
    ) -> None:
        """Initialise the fetcher with a transport and mailbox name."""
        self._transport = transport
        self._settings = settings or AppSettings()
        self.mailbox = mailbox

    def get_message(self, number: int) -> Message:
        """Fetch structure and headers of ``number`` and build its model.

        Section contents are only fetched when a part is read.
        """
        LOGGER.debug("Fetching structure of message %s in %s", number, self.mailbox)
        structure = self._transport.fetch_structure(self.mailbox, number)
        headers = Headers(self._transport.fetch_header_blob(self.mailbox, number))
        return Message(
            self._transport,
            self.mailbox,
            number,
            structure,
            headers,
            self._settings.decoding,
        )

    def search(
        self,
        query: SearchQuery | None = None,
        *,
        sort_criteria: str | None = None,
        descending: bool = False,
        charset: str | None = None,
    ) -> list[int]:
        """Return the message numbers matching ``query`` on the server.

        Queries with non-ASCII values are announced as ``UTF-8`` unless a
        charset is given or configured.
        """
        rendered = render_query(query)
        effective_charset = charset or self._settings.search.charset
        if effective_charset is None and not rendered.isascii():
            effective_charset = "UTF-8"
        LOGGER.debug("Searching %s with %s", self.mailbox, rendered)
        numbers = self._transport.run_search(
            self.mailbox,
            rendered,
            sort_criteria,
            descending,
            effective_charset,
        )
        return [int(number) for number in numbers]

    def iter_messages(self, query: SearchQuery | None = None) -> Iterator[Message]:
        """Yield a model for every message matching ``query``."""
        for number in self.search(query):
            yield self.get_message(number)


__all__ = ["MessageFetcher", "SearchQuery", "render_query"]
