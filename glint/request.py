"""HTTP request model used by the crawler and its filters."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any

from glint.urls import URL, _parse_query

_SUPPORTED_CONTENT_TYPES = ("application/json", "application/x-www-form-urlencoded")


@dataclass
class Filter:
    """Marks and identifiers computed while de-duplicating a request."""

    fragment_id: str = ""
    marked_query_map: dict[str, Any] = field(default_factory=dict)
    query_keys_id: str = ""
    query_map_id: str = ""
    marked_post_data_map: dict[str, Any] = field(default_factory=dict)
    post_data_id: str = ""
    marked_path: str = ""
    path_id: str = ""
    unique_id: str = ""


@dataclass
class Request:
    """A single HTTP request found by the crawler."""

    url: URL
    method: str = ""
    headers: dict[str, Any] = field(default_factory=dict)
    post_data: str = ""
    domain_id: int = 0
    filter: Filter = field(default_factory=Filter)
    source: str = ""
    redirection_flag: bool = False
    fasthttp_proxy: str = ""
    groups_id: str = ""

    def full_format(self) -> str:
        """The request as raw HTTP text."""
        lines = [f"{self.method} {self.url} HTTP/1.1\r\n"]
        lines.extend(f"{key}: {value}\r\n" for key, value in self.headers.items())
        lines.append("\r\n")
        if self.method == "POST":
            lines.append(self.post_data)
        return "".join(lines)

    def simple_format(self) -> str:
        text = f"{self.method} {self.url} "
        if self.method == "POST":
            text += self.post_data
        return text

    def no_header_id(self) -> str:
        """MD5 of method, URL and body, ignoring headers."""
        data = self.method + str(self.url) + self.post_data
        return hashlib.md5(data.encode("utf-8")).hexdigest()

    def unique_id(self) -> str:
        if self.redirection_flag:
            data = self.no_header_id() + "Redirection"
            return hashlib.md5(data.encode("utf-8")).hexdigest()
        return self.no_header_id()

    def _content_type(self) -> str:
        for name in ("Content-Type", "Content-type", "content-type"):
            if name in self.headers:
                content_type = str(self.headers[name])
                break
        else:
            raise ValueError("no content-type")
        if content_type.startswith(_SUPPORTED_CONTENT_TYPES):
            return content_type
        raise ValueError("dont support such content-type:" + content_type)

    def post_data_map(self) -> dict[str, Any]:
        """Decode the body as JSON or a form; fall back to ``{"key": body}``."""
        fallback = {"key": self.post_data}
        try:
            content_type = self._content_type()
        except ValueError:
            return fallback

        if content_type.startswith("application/json"):
            try:
                result = json.loads(self.post_data)
            except ValueError:
                return fallback
            if result is None:
                return {}
            return result if isinstance(result, dict) else fallback

        values, error = _parse_query(self.post_data)
        if error is not None:
            return fallback
        return {key: items[0] if len(items) == 1 else items for key, items in values.items()}

    def query_map(self) -> dict[str, list[str]]:
        return self.url.query()


def get_request(
    method: str,
    url: URL,
    headers: dict[str, Any] | None = None,
    post_data: str = "",
) -> Request:
    """Build a request with an upper-cased method."""
    return Request(
        url=url,
        method=method.upper(),
        headers={} if headers is None else headers,
        post_data=post_data,
    )