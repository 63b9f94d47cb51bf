"""Small HTTP client with scanner-friendly defaults: capped ranges, retries, proxies."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, replace
from typing import Mapping

import requests

from glint import logger

DEFAULT_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/96.0.4664.45 Safari/537.36"
)
DEFAULT_RESPONSE_LENGTH = 10240
DEFAULT_RETRY = 0
MAX_REDIRECTS = 5
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"


class RequestError(Exception):
    """Raised when a request could not be completed."""


@dataclass
class ReqOptions:
    """Client settings; ``timeout`` is in seconds, 0 meaning no limit.

    ``retry`` of 0 uses the default retry count, -1 disables retries.
    """

    timeout: float = 0.0
    retry: int = 0
    verify_ssl: bool = False
    allow_redirect: bool = False
    proxy: str = ""
    cert: str = ""
    private_key: str = ""


def _proxy_url(proxy: str) -> str:
    return proxy if "://" in proxy else "http://" + proxy


class Session:
    """A reusable client configured from :class:`ReqOptions`."""

    def __init__(self, options: ReqOptions | None = None) -> None:
        self.options = replace(options) if options is not None else ReqOptions()
        client = requests.Session()
        client.trust_env = False
        client.headers.clear()
        client.verify = self.options.verify_ssl
        client.max_redirects = MAX_REDIRECTS
        if self.options.cert and self.options.private_key:
            for path in (self.options.cert, self.options.private_key):
                if not os.path.isfile(path):
                    raise FileNotFoundError(f"certificate file not found: {path}")
            client.cert = (self.options.cert, self.options.private_key)
        if self.options.proxy:
            proxy = _proxy_url(self.options.proxy)
            client.proxies = {"http": proxy, "https": proxy}
        self._client = client

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _attempts(self) -> int:
        retry = self.options.retry
        if retry == 0:
            retry = DEFAULT_RETRY
        elif retry < 0:
            retry = 0
        return retry + 1

    def _do_request(
        self,
        verb: str,
        url: str,
        headers: Mapping[str, str] | None,
        body: bytes | str | None,
    ) -> requests.Response:
        verb = verb.upper()
        given = dict(headers or {})
        if body is None:
            body = b""
        elif isinstance(body, str):
            body = body.encode("utf-8")

        sent = dict(given)
        defaults = {
            "User-Agent": DEFAULT_UA,
            "Range": f"bytes=0-{DEFAULT_RESPONSE_LENGTH}",
            "Connection": "close",
        }
        for key, value in defaults.items():
            sent.setdefault(key, value)
        if verb == "POST" and not given.get("Content-Type"):
            sent["Content-Type"] = FORM_CONTENT_TYPE

        method = "POST" if verb == "POST" else "GET"
        sent["Content-Length"] = str(len(body))
        sent["Connection"] = "close"
        timeout = self.options.timeout or None

        last_error: Exception | None = None
        for _ in range(self._attempts()):
            try:
                response = self._client.request(
                    method,
                    url,
                    headers=sent,
                    data=body if method == "POST" else None,
                    timeout=timeout,
                    allow_redirects=self.options.allow_redirect,
                )
            except requests.RequestException as exc:
                last_error = exc
                time.sleep(0.0001)
                continue
            break
        else:
            logger.error("fastreq %s", last_error)
            raise RequestError(f"error occurred during request: {last_error}") from last_error

        # A Range header usually yields 206 Partial Content; report it as 200 OK.
        if response.status_code == 206:
            response.status_code = 200
        return response

    def get(self, url: str, headers: Mapping[str, str] | None = None) -> requests.Response:
        return self._do_request("GET", url, headers, None)

    def post(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | str | None = None,
    ) -> requests.Response:
        return self._do_request("POST", url, headers, body)

    def request(
        self,
        verb: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | str | None = None,
    ) -> requests.Response:
        """Send ``verb``; anything other than POST goes out as GET."""
        return self._do_request(verb, url, headers, body)


def get_session_by_options(options: ReqOptions | None = None) -> Session:
    """Build a session from ``options`` (defaults when ``None``)."""
    return Session(options)


def get(
    url: str,
    headers: Mapping[str, str] | None = None,
    options: ReqOptions | None = None,
) -> requests.Response:
    with get_session_by_options(options) as session:
        return session.get(url, headers)


def post(
    url: str,
    headers: Mapping[str, str] | None = None,
    options: ReqOptions | None = None,
    body: bytes | str | None = None,
) -> requests.Response:
    with get_session_by_options(options) as session:
        return session.post(url, headers, body)


def request(
    verb: str,
    url: str,
    headers: Mapping[str, str] | None = None,
    body: bytes | str | None = None,
    options: ReqOptions | None = None,
) -> requests.Response:
    with get_session_by_options(options) as session:
        return session.request(verb, url, headers, body)