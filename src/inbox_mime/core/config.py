"""Application configuration models and loader utilities."""

from __future__ import annotations

import codecs
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, cast

from dotenv import dotenv_values
from pydantic import BaseModel, Field, field_validator


class DecodingSettings(BaseModel):
    """Settings controlling how part contents and HTML bodies are decoded."""

    fallback_charset: str = Field(
        default="utf-8",
        description="Charset assumed when a text part declares none or an unknown one",
    )
    errors: str = Field(
        default="replace",
        description="Codec error handler used when transcoding text parts",
    )
    html_parser: str = Field(
        default="html.parser",
        description="BeautifulSoup tree builder used to merge HTML bodies",
    )

    @field_validator("fallback_charset")
    @classmethod
    def _known_charset(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"Unknown charset {value!r}") from exc
        return value

    @field_validator("errors")
    @classmethod
    def _known_error_handler(cls, value: str) -> str:
        try:
            codecs.lookup_error(value)
        except LookupError as exc:
            raise ValueError(f"Unknown codec error handler {value!r}") from exc
        return value


class SearchSettings(BaseModel):
    """Settings applied to serialized search queries."""

    charset: str | None = Field(
        default=None, description="Charset announced with SEARCH commands"
    )


class LoggingSettings(BaseModel):
    """Logging preferences."""

    level: str = Field(default="INFO", description="Root logging level")
    structured: bool = Field(
        default=False, description="Use the brace-style structured log format"
    )
    trace_decoding: bool = Field(
        default=False,
        description="Log header, charset and section decisions at DEBUG",
    )


class AppSettings(BaseModel):
    """Aggregated application configuration."""

    decoding: DecodingSettings = Field(default_factory=DecodingSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


ENV_PREFIX = "INBOX_MIME_"


def _normalize_key(raw_key: str) -> list[str]:
    """Convert an environment variable key into a nested attribute path."""
    trimmed = raw_key.removeprefix(ENV_PREFIX)
    return [segment.lower() for segment in trimmed.split("__") if segment]


def _merge_into_tree(tree: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a value to a nested dictionary given a path."""
    cursor = tree
    for segment in path[:-1]:
        next_node = cursor.setdefault(segment, {})
        cursor = cast(dict[str, Any], next_node)
    cursor[path[-1]] = value


def _coerce_value(value: str | None) -> Any:
    if value is None or value == "":
        return None
    lowercase_value = value.lower()
    if lowercase_value == "true":
        return True
    if lowercase_value == "false":
        return False
    return value


def _collect_env_values(
    env_file: Path | str | None, include_environment: bool
) -> dict[str, Any]:
    """Load configuration values from environment variables and optional file."""
    collected: dict[str, Any] = {}

    file_values: dict[str, str | None] = {}
    if env_file:
        env_path = Path(env_file)
        if env_path.is_file():
            file_values = {
                key: value
                for key, value in dotenv_values(env_path).items()
                if key and key.startswith(ENV_PREFIX)
            }

    env_values: dict[str, str | None] = {}
    if include_environment:
        env_values = {
            key: value
            for key, value in os.environ.items()
            if key.startswith(ENV_PREFIX)
        }

    combined = {**file_values, **env_values}

    for key, value in combined.items():
        path = _normalize_key(key)
        if not path:
            continue
        _merge_into_tree(collected, path, _coerce_value(value))

    return collected


@lru_cache(maxsize=1)
def load_app_settings(
    env_file: Path | str | None = None,
    include_environment: bool = True,
    **overrides: Any,
) -> AppSettings:
    """Load application settings, applying env files and overrides."""
    collected = _collect_env_values(env_file, include_environment)
    if overrides:
        collected.update(overrides)
    return AppSettings.model_validate(collected)


__all__ = [
    "AppSettings",
    "DecodingSettings",
    "LoggingSettings",
    "SearchSettings",
    "load_app_settings",
]
