"""URL model with lenient parsing and path/extension helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from urllib.parse import quote, unquote

from glint import logger

_PATH_SAFE = "$&+,/:;=@"
_FRAGMENT_SAFE = "$&+,/:;=?@!()*"
_HEX = frozenset("0123456789abcdefABCDEF")
_BAD_HOST_CHARS = frozenset(' <>"{}|\\^`')
_MULTI_HASH = re.compile(r"#+")
_WHITESPACE = re.compile(r"(\r|\n|\s+)")
_MULTI_SLASH = re.compile(r"^/{2,}")


def _check_escapes(text: str, where: str) -> None:
    index = text.find("%")
    while index != -1:
        chunk = text[index:index + 3]
        if len(chunk) < 3 or chunk[1] not in _HEX or chunk[2] not in _HEX:
            raise ValueError(f"invalid URL escape {chunk!r} in {where}")
        index = text.find("%", index + 3)


def _unescape(text: str, plus: bool = False) -> str:
    _check_escapes(text, "url")
    if plus:
        text = text.replace("+", " ")
    return unquote(text)


def _parse_query(raw: str) -> tuple[dict[str, list[str]], ValueError | None]:
    """Split a query string into lists of values, noting the first bad pair."""
    values: dict[str, list[str]] = {}
    first_error = None
    for part in raw.split("&"):
        if not part:
            continue
        key, _, value = part.partition("=")
        try:
            key = _unescape(key, plus=True)
            value = _unescape(value, plus=True)
        except ValueError as exc:
            first_error = first_error or exc
            continue
        values.setdefault(key, []).append(value)
    return values, first_error


def _valid_optional_port(port: str) -> bool:
    if not port:
        return True
    return port[0] == ":" and all(ch in "0123456789" for ch in port[1:])


def _split_host_port(host: str) -> tuple[str, str]:
    colon = host.rfind(":")
    port = ""
    if colon != -1 and _valid_optional_port(host[colon:]):
        host, port = host[:colon], host[colon + 1:]
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, port


def _parse_host(host: str) -> str:
    if host.startswith("["):
        end = host.rfind("]")
        if end < 0:
            raise ValueError("missing ']' in host")
        port = host[end + 1:]
        if not _valid_optional_port(port):
            raise ValueError(f"invalid port {port!r} after host")
    else:
        colon = host.rfind(":")
        if colon != -1 and not _valid_optional_port(host[colon:]):
            raise ValueError(f"invalid port {host[colon:]!r} after host")
    if any(ch in _BAD_HOST_CHARS for ch in host):
        raise ValueError(f"invalid character in host name {host!r}")
    _check_escapes(host, "host")
    return unquote(host)


def _get_scheme(raw: str) -> tuple[str, str]:
    for index, ch in enumerate(raw):
        if ch.isascii() and ch.isalpha():
            continue
        if ch.isascii() and (ch.isdigit() or ch in "+-."):
            if index == 0:
                return "", raw
            continue
        if ch == ":":
            if index == 0:
                raise ValueError("missing protocol scheme")
            return raw[:index], raw[index + 1:]
        return "", raw
    return "", raw


def _resolve_path(base: str, ref: str) -> str:
    if not ref:
        full = base
    elif not ref.startswith("/"):
        full = base[: base.rfind("/") + 1] + ref
    else:
        full = ref
    if not full:
        return ""
    parts = full.split("/")
    out = "/"
    first = True
    for elem in parts:
        if elem == ".":
            first = False
        elif elem == "..":
            tail = out[1:]
            cut = tail.rfind("/")
            if cut == -1:
                out = "/"
                first = True
            else:
                out = "/" + tail[:cut]
        else:
            if not first:
                out += "/"
            out += elem
            first = False
    if parts[-1] in (".", ".."):
        out += "/"
    if len(out) > 1 and out[1] == "/":
        out = out[1:]
    return out


@dataclass
class URL:
    """A parsed URL; ``path`` and ``fragment`` hold unescaped text."""

    scheme: str = ""
    opaque: str = ""
    user: str | None = None
    host: str = ""
    path: str = ""
    raw_path: str = ""
    force_query: bool = False
    raw_query: str = ""
    fragment: str = ""
    raw_fragment: str = ""

    def _set_path(self, escaped: str) -> None:
        self.path = _unescape(escaped)
        self.raw_path = "" if escaped == quote(self.path, safe=_PATH_SAFE) else escaped

    def _set_fragment(self, escaped: str) -> None:
        self.fragment = _unescape(escaped)
        default = quote(self.fragment, safe=_FRAGMENT_SAFE)
        self.raw_fragment = "" if escaped == default else escaped

    def _escaped_path(self) -> str:
        if self.raw_path:
            try:
                if _unescape(self.raw_path) == self.path:
                    return self.raw_path
            except ValueError:
                pass
        if self.path == "*":
            return "*"
        return quote(self.path, safe=_PATH_SAFE)

    def _escaped_fragment(self) -> str:
        if self.raw_fragment:
            try:
                if _unescape(self.raw_fragment) == self.fragment:
                    return self.raw_fragment
            except ValueError:
                pass
        return quote(self.fragment, safe=_FRAGMENT_SAFE)

    def __str__(self) -> str:
        parts: list[str] = []
        if self.scheme:
            parts.append(self.scheme + ":")
        if self.opaque:
            parts.append(self.opaque)
        else:
            if self.scheme or self.host or self.user is not None:
                if self.host or self.path or self.user is not None:
                    parts.append("//")
                if self.user is not None:
                    parts.append(self.user + "@")
                parts.append(self.host)
            path = self._escaped_path()
            if path and not path.startswith("/") and self.host:
                parts.append("/")
            if not parts and ":" in path.split("/", 1)[0]:
                parts.append("./")
            parts.append(path)
        if self.force_query or self.raw_query:
            parts.append("?" + self.raw_query)
        if self.fragment:
            parts.append("#" + self._escaped_fragment())
        return "".join(parts)

    def hostname(self) -> str:
        return _split_host_port(self.host)[0]

    def port(self) -> str:
        return _split_host_port(self.host)[1]

    def query(self) -> dict[str, list[str]]:
        """Query parameters, each mapped to all its values."""
        return _parse_query(self.raw_query)[0]

    def query_map(self) -> dict[str, str | list[str]]:
        """Query parameters; a single value stays a string, several become a list."""
        return {
            key: values[0] if len(values) == 1 else values
            for key, values in self.query().items()
        }

    def request_uri(self) -> str:
        result = self.opaque
        if not result:
            result = self._escaped_path() or "/"
        elif result.startswith("//"):
            result = self.scheme + ":" + result
        if self.force_query or self.raw_query:
            result += "?" + self.raw_query
        return result

    def no_query_url(self) -> str:
        return f"{self.scheme}://{self.host}{self.path}"

    def no_fragment_url(self) -> str:
        return str(self).replace(self.fragment, "")

    def no_scheme_fragment_url(self) -> str:
        return f"://{self.host}{self.path}"

    def navigation_url(self) -> str:
        return self.no_scheme_fragment_url()

    def file_name(self) -> str:
        last = self.path.split("/")[-1]
        return last if "." in last else ""

    def file_ext(self) -> str:
        last = self.path[self.path.rfind("/") + 1:]
        dot = last.rfind(".")
        return last[dot + 1:].lower() if dot != -1 else ""

    def parent_path(self) -> str:
        path = self.path
        if path == "/":
            return ""
        if path.endswith("/"):
            if path.count("/") == 2:
                return "/"
            return "/".join(path.split("/")[:-2])
        if path.count("/") == 1:
            return "/"
        return "/".join(path.split("/")[:-1])


def _parse_reference(raw: str) -> URL:
    url = URL()
    scheme, rest = _get_scheme(raw)
    url.scheme = scheme.lower()
    if rest.endswith("?") and rest.count("?") == 1:
        url.force_query = True
        rest = rest[:-1]
    else:
        rest, _, url.raw_query = rest.partition("?")
    if not rest.startswith("/"):
        if url.scheme:
            url.opaque = rest
            return url
        if ":" in rest.split("/", 1)[0]:
            raise ValueError("first path segment in URL cannot contain colon")
    if (url.scheme or not rest.startswith("///")) and rest.startswith("//"):
        authority, slash, tail = rest[2:].partition("/")
        rest = slash + tail
        userinfo, at, host = authority.rpartition("@")
        if at:
            _check_escapes(userinfo, "user info")
            url.user = userinfo
        else:
            host = authority
        url.host = _parse_host(host)
    url._set_path(rest)
    return url


def _parse(raw: str) -> URL:
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in raw):
        raise ValueError("invalid control character in URL")
    rest, has_fragment, fragment = raw.partition("#")
    url = _parse_reference(rest)
    if has_fragment:
        url._set_fragment(fragment)
    return url


def _resolve(base: URL, ref: URL) -> URL:
    result = replace(ref)
    if not ref.scheme:
        result.scheme = base.scheme
    if ref.scheme or ref.host or ref.user is not None:
        result._set_path(_resolve_path(ref._escaped_path(), ""))
        return result
    if ref.opaque:
        result.user = None
        result.host = ""
        result.path = ""
        result.raw_path = ""
        return result
    if not ref.path and not ref.force_query and not ref.raw_query:
        result.raw_query = base.raw_query
        if not ref.fragment:
            result.fragment = base.fragment
            result.raw_fragment = base.raw_fragment
    result.host = base.host
    result.user = base.user
    result._set_path(_resolve_path(base._escaped_path(), ref._escaped_path()))
    return result


def url_parse(source_url: str) -> URL:
    """Parse a URL, retrying with ``%`` escaped if the first attempt fails."""
    try:
        return _parse(source_url)
    except ValueError:
        return _parse(source_url.replace("%", "%25"))


def get_url(raw: str, parent: URL | None = None) -> URL:
    """Parse ``raw`` into a complete URL, resolving it against ``parent`` if given."""
    logger.debug("url %s", raw)
    raw = raw.strip(" ")
    if not raw:
        raise ValueError("invalid url, length 0")
    if raw.count("#") > 1:
        raw = _MULTI_HASH.sub("#", raw)

    if parent is None:
        url = url_parse(raw)
    else:
        if raw.startswith("javascript:"):
            raise ValueError("invalid url, javascript protocol")
        if raw.startswith("mailto:"):
            raise ValueError("invalid url, mailto protocol")
        if raw.startswith("/"):
            raw = _WHITESPACE.sub("", raw)
        url = _resolve(parent, _parse(raw))

    if not url.path:
        url.path = "/"
    if _MULTI_SLASH.match(url.path):
        url.path = _MULTI_SLASH.sub("/", url.path)
    return url