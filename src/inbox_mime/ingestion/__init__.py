"""Retrieval of message models through a transport."""

from .fetcher import MessageFetcher, SearchQuery, render_query

__all__ = ["MessageFetcher", "SearchQuery", "render_query"]
