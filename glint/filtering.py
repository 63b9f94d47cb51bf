"""Request filtering: marks, identifiers and the basic duplicate/static/host filter."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from glint.request import Request

FORBIDDEN_KEYS = ("css", "js", "ico", "woff2", "woff")

STATIC_SUFFIX = (
    "png", "gif", "jpg", "mp4", "mp3", "mng", "pct", "bmp", "jpeg", "pst", "psp", "ttf",
    "tif", "tiff", "ai", "drw", "wma", "ogg", "wav", "ra", "aac", "mid", "au", "aiff",
    "dxf", "eps", "ps", "svg", "3gp", "asf", "asx", "avi", "mov", "mpg", "qt", "rm",
    "wmv", "m4a", "bin", "xls", "xlsx", "ppt", "pptx", "doc", "docx", "odt", "ods", "odg",
    "odp", "exe", "zip", "rar", "tar", "gz", "iso", "rss", "pdf", "txt", "dll", "ico",
    "gz2", "apk", "crt", "woff", "map", "woff2", "webp", "less", "dmg", "bz2", "otf", "swf",
    "flv", "mpeg", "dat", "xsl", "csv", "cab", "exif", "wps", "m4v", "rmvb",
)

SCRIPT_SUFFIX = ("php", "asp", "jsp", "asa")

_STATIC_EXTENSIONS = frozenset(STATIC_SUFFIX) | {"js", "css", "json"}

MAX_PARENT_PATH_COUNT = 32
MAX_PARAM_KEY_SINGLE_COUNT = 8
MAX_PARAM_KEY_ALL_COUNT = 10
MAX_PATH_PARAM_EMPTY_COUNT = 10
MAX_PATH_PARAM_KEY_SYMBOL_COUNT = 5

CUSTOM_VALUE_MARK = "{{Crawlergo}}"
FIX_PARAM_REPEAT_MARK = "{{fix_param}}"
FIX_PATH_MARK = "{{fix_path}}"
TOO_LONG_MARK = "{{long}}"
NUMBER_MARK = "{{number}}"
CHINESE_MARK = "{{chinese}}"
UPPER_MARK = "{{upper}}"
LOWER_MARK = "{{lower}}"
URL_ENCODE_MARK = "{{urlencode}}"
UNICODE_MARK = "{{unicode}}"
BOOL_MARK = "{{bool}}"
LIST_MARK = "{{list}}"
TIME_MARK = "{{time}}"
MIX_ALPHA_NUM_MARK = "{{mix_alpha_num}}"
MIX_SYMBOL_MARK = "{{mix_symbol}}"
MIX_NUM_MARK = "{{mix_num}}"
NO_LOWER_ALPHA_MARK = "{{no_lower}}"
MIX_STRING_MARK = "{{mix_str}}"

CHINESE_RE = re.compile("[\u4e00-\u9fa5]+")
URLENCODE_RE = re.compile(r"(?:%[A-Fa-f0-9]{2,6})+")
UNICODE_RE = re.compile(r"(?:\\u\w{4})+", re.ASCII)
ONLY_ALPHA_RE = re.compile(r"[a-zA-Z]+")
ONLY_ALPHA_UPPER_RE = re.compile(r"[A-Z]+")
ALPHA_UPPER_RE = re.compile(r"[A-Z]+")
ALPHA_LOWER_RE = re.compile(r"[a-z]+")
REPLACE_NUM_RE = re.compile(r"[0-9]+\.[0-9]+|[0-9]+")
ONLY_NUMBER_RE = re.compile(r"[0-9]+")
NUMBER_RE = re.compile(r"[0-9]+")
ONE_NUMBER_RE = re.compile(r"[0-9]")
NUM_SYMBOL_RE = re.compile(r"\.|_|-")
TIME_SYMBOL_RE = re.compile(r"-|:|\s", re.ASCII)
ONLY_ALPHA_NUM_RE = re.compile(r"[0-9a-zA-Z]+")
MARKED_STRING_RE = re.compile(r"\{\{.+\}\}")
HTML_REPLACE_RE = re.compile(r"\.shtml|\.html|\.htm")
_MARK_REPLACE_RE = re.compile(r"\{\{.+\}\}")

_SPECIAL_SYMBOLS = ("{", "}", " ", "|", "#", "@", "$", "*", ",", "<", ">", "/", "?", "\\", "+", "=")


def str_md5(text: str) -> str:
    """Hex MD5 digest of ``text`` encoded as UTF-8."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def filter_key(url: str, forbidden: Iterable[str]) -> bool:
    """True if any of the forbidden keywords occurs in ``url``."""
    return any(key in url for key in forbidden)


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _only_number(text: str) -> bool:
    return ONLY_NUMBER_RE.fullmatch(text) is not None


def mark_param_name(param_map: dict[str, Any]) -> dict[str, Any]:
    """Replace digits and over-long names in parameter names with marks."""
    marked: dict[str, Any] = {}
    for key, value in param_map.items():
        if ONLY_ALPHA_RE.fullmatch(key):
            marked[key] = value
        elif _byte_len(key) >= 32:
            marked[TOO_LONG_MARK] = value
        else:
            marked[REPLACE_NUM_RE.sub(NUMBER_MARK, key)] = value
    return marked


def _mark_path_part(part: str) -> str:
    if _byte_len(part) >= 32:
        return TOO_LONG_MARK
    if _only_number(NUM_SYMBOL_RE.sub("", part)):
        return NUMBER_MARK
    if part.endswith((".html", ".htm", ".shtml")):
        stem = HTML_REPLACE_RE.sub("", part)
        if NUMBER_RE.search(stem) and ALPHA_UPPER_RE.search(stem) and ALPHA_LOWER_RE.search(stem):
            return MIX_ALPHA_NUM_MARK
        if _only_number(NUM_SYMBOL_RE.sub("", stem)):
            return NUMBER_MARK
        return part
    if has_special_symbol(part):
        return MIX_SYMBOL_MARK
    if CHINESE_RE.search(part):
        return CHINESE_MARK
    if UNICODE_RE.search(part):
        return UNICODE_MARK
    if ONLY_ALPHA_UPPER_RE.fullmatch(part):
        return UPPER_MARK
    if ONE_NUMBER_RE.sub("0", part).count("0") > 3:
        return MIX_NUM_MARK
    return part


def mark_path(path: str) -> str:
    """Replace numeric, long and pseudo-static path segments with marks."""
    return "/".join(_mark_path_part(part) for part in path.split("/"))


def has_special_symbol(value: str) -> bool:
    return any(symbol in value for symbol in _SPECIAL_SYMBOLS)


def in_common_script_suffix(suffix: str) -> bool:
    return suffix in SCRIPT_SUFFIX


def get_keys_id(data_map: dict[str, Any]) -> str:
    """MD5 of the sorted parameter names."""
    return str_md5("".join(sorted(data_map)))


def get_param_map_id(data_map: dict[str, Any]) -> str:
    """MD5 of sorted names and their string values, with marks unified."""
    parts = []
    for key in sorted(data_map):
        parts.append(key)
        value = data_map[key]
        if isinstance(value, str):
            parts.append(_MARK_REPLACE_RE.sub("{{mark}}", value))
    return str_md5("".join(parts))


def get_path_id(path: str) -> str:
    return str_md5(path)


@dataclass
class SimpleFilter:
    """Drops duplicates, static resources and requests to other hosts."""

    host_limit: str = ""
    unique_set: set[str] = field(default_factory=set)

    def do_filter(self, req: Request) -> bool:
        """True if the request should be filtered out."""
        if self.host_limit and self.domain_filter(req):
            return True
        if self.unique_filter(req):
            return True
        return self.static_filter(req)

    def unique_filter(self, req: Request) -> bool:
        uid = req.unique_id()
        if uid in self.unique_set:
            return True
        self.unique_set.add(uid)
        return False

    def static_filter(self, req: Request) -> bool:
        ext = req.url.file_ext()
        return bool(ext) and ext in _STATIC_EXTENSIONS

    def domain_filter(self, req: Request) -> bool:
        url = req.url
        hostname = url.hostname()
        if url.host == self.host_limit or hostname == self.host_limit:
            return False
        if self.host_limit.endswith(":80") and not url.port() and url.scheme == "http":
            if hostname + ":80" == self.host_limit:
                return False
        if self.host_limit.endswith(":443") and not url.port() and url.scheme == "https":
            if hostname + ":443" == self.host_limit:
                return False
        return True