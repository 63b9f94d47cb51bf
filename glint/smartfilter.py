"""Smart de-duplication of crawled requests by marking parameters and paths."""

from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Any

from glint import logger
from glint.filtering import (
    ALPHA_LOWER_RE,
    ALPHA_UPPER_RE,
    BOOL_MARK,
    CHINESE_MARK,
    CHINESE_RE,
    CUSTOM_VALUE_MARK,
    FIX_PARAM_REPEAT_MARK,
    FIX_PATH_MARK,
    MARKED_STRING_RE,
    MAX_PARAM_KEY_ALL_COUNT,
    MAX_PARAM_KEY_SINGLE_COUNT,
    MAX_PARENT_PATH_COUNT,
    MAX_PATH_PARAM_EMPTY_COUNT,
    MAX_PATH_PARAM_KEY_SYMBOL_COUNT,
    MIX_ALPHA_NUM_MARK,
    MIX_NUM_MARK,
    MIX_STRING_MARK,
    MIX_SYMBOL_MARK,
    NO_LOWER_ALPHA_MARK,
    NUM_SYMBOL_RE,
    NUMBER_MARK,
    NUMBER_RE,
    ONE_NUMBER_RE,
    ONLY_ALPHA_NUM_RE,
    ONLY_ALPHA_UPPER_RE,
    ONLY_NUMBER_RE,
    TIME_MARK,
    TIME_SYMBOL_RE,
    TOO_LONG_MARK,
    UNICODE_MARK,
    UNICODE_RE,
    UPPER_MARK,
    URL_ENCODE_MARK,
    URLENCODE_RE,
    SimpleFilter,
    get_keys_id,
    get_param_map_id,
    get_path_id,
    has_special_symbol,
    in_common_script_suffix,
    mark_param_name,
    mark_path,
    str_md5,
)
from glint.request import Request, get_request
from glint.urls import get_url

GET = "GET"
POST = "POST"
PUT = "PUT"
DELETE = "DELETE"
HEAD = "HEAD"
OPTIONS = "OPTIONS"

_QUERY_METHODS = frozenset({GET, DELETE, HEAD, OPTIONS})
_BODY_METHODS = frozenset({POST, PUT})


def _only_number(text: str) -> bool:
    return ONLY_NUMBER_RE.fullmatch(text) is not None


def get_marked_unique_id(req: Request) -> str:
    """MD5 identifying a request after its parameters and path were marked."""
    if req.method in _QUERY_METHODS:
        param_id = req.filter.query_map_id
    else:
        param_id = req.filter.post_data_id
    unique = req.method + param_id + req.filter.path_id + req.url.host + req.filter.fragment_id
    if req.redirection_flag:
        unique += "Redirection"
    if req.url.path == "/" and req.url.raw_query == "" and req.url.scheme == "https":
        unique += "https"
    return str_md5(unique)


@dataclass
class SmartFilter:
    """Filters requests that differ only in values of the same shape.

    ``do_filter`` returns True when a request should be dropped.
    """

    strict_mode: bool = False
    simple_filter: SimpleFilter = field(default_factory=SimpleFilter)
    _location_set: set[str] = field(default_factory=set, repr=False)
    _param_key_repeat_count: dict[str, int] = field(
        default_factory=lambda: defaultdict(int), repr=False
    )
    _param_key_single_values: dict[str, set] = field(
        default_factory=lambda: defaultdict(set), repr=False
    )
    _path_param_key_symbol: dict[str, int] = field(default_factory=dict, repr=False)
    _param_key_all_values: dict[str, set] = field(
        default_factory=lambda: defaultdict(set), repr=False
    )
    _path_param_empty_values: dict[str, set] = field(
        default_factory=lambda: defaultdict(set), repr=False
    )
    _parent_path_values: dict[str, set] = field(
        default_factory=lambda: defaultdict(set), repr=False
    )
    _unique_marked_ids: set[str] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def do_filter(self, req: Request) -> bool:
        """Mark ``req`` and report whether an equivalent request was already seen."""
        with self._lock:
            if self.simple_filter.do_filter(req):
                return True

            req.filter.fragment_id = self.calc_fragment_id(req.url.fragment)

            if req.method in _QUERY_METHODS:
                self.get_mark(req)
                self._repeat_count_statistic(req)
            elif req.method in _BODY_METHODS:
                self.post_mark(req)
            else:
                logger.debug("dont support such method: " + req.method)

            if req.filter.unique_id in self._unique_marked_ids:
                logger.debug("filter req by uniqueMarkedIds 1: %s", req.url.request_uri())
                return True

            self._global_filter_location_mark(req)

            if req.method in _QUERY_METHODS:
                self._over_count_mark(req)
                req.filter.query_map_id = get_param_map_id(req.filter.marked_query_map)
                req.filter.path_id = get_path_id(req.filter.marked_path)
            else:
                req.filter.post_data_id = get_param_map_id(req.filter.marked_post_data_map)

            req.filter.unique_id = get_marked_unique_id(req)
            if req.filter.unique_id in self._unique_marked_ids:
                logger.debug("filter req by uniqueMarkedIds 2: %s", req.url.request_uri())
                return True

            self._unique_marked_ids.add(req.filter.unique_id)
            return False

    @staticmethod
    def _pre_query_mark(raw_query: str) -> str:
        """Mark encoded text in the raw query before it is decoded."""
        if CHINESE_RE.search(raw_query):
            return CHINESE_RE.sub(CHINESE_MARK, raw_query)
        if URLENCODE_RE.search(raw_query):
            return URLENCODE_RE.sub(URL_ENCODE_MARK, raw_query)
        if UNICODE_RE.search(raw_query):
            return UNICODE_RE.sub(UNICODE_MARK, raw_query)
        return raw_query

    def get_mark(self, req: Request) -> None:
        """Mark the query parameters and path of a query-style request."""
        todo_url = replace(req.url)
        todo_url.raw_query = self._pre_query_mark(todo_url.raw_query)

        query_map: dict[str, Any] = todo_url.query_map()
        query_map = mark_param_name(query_map)
        query_map = self.mark_param_value(query_map, req)
        marked_path = mark_path(todo_url.path)

        if query_map:
            query_keys_id = get_keys_id(query_map)
            query_map_id = get_param_map_id(query_map)
        else:
            query_keys_id = ""
            query_map_id = ""

        req.filter.marked_query_map = query_map
        req.filter.query_keys_id = query_keys_id
        req.filter.query_map_id = query_map_id
        req.filter.marked_path = marked_path
        req.filter.path_id = get_path_id(marked_path)
        req.filter.unique_id = get_marked_unique_id(req)

    def post_mark(self, req: Request) -> None:
        """Mark the body parameters and path of a body-carrying request."""
        post_data_map = req.post_data_map()
        post_data_map = mark_param_name(post_data_map)
        post_data_map = self.mark_param_value(post_data_map, req)
        marked_path = mark_path(req.url.path)

        req.filter.marked_post_data_map = post_data_map
        req.filter.post_data_id = get_param_map_id(post_data_map) if post_data_map else ""
        req.filter.marked_path = marked_path
        req.filter.path_id = get_path_id(marked_path)
        req.filter.unique_id = get_marked_unique_id(req)

    def _mark_string(self, key: str, value: str, req: Request) -> str | None:
        if "Crawlergo" in value:
            self._location_set.add(req.url.hostname() + req.url.path + req.method + key)
            return CUSTOM_VALUE_MARK
        if ONLY_ALPHA_UPPER_RE.fullmatch(value):
            return UPPER_MARK
        if len(value.encode("utf-8")) >= 16:
            return TOO_LONG_MARK
        if _only_number(value) or _only_number(NUM_SYMBOL_RE.sub("", value)):
            return NUMBER_MARK
        if CHINESE_RE.search(value):
            return CHINESE_MARK
        if URLENCODE_RE.search(value):
            return URL_ENCODE_MARK
        if UNICODE_RE.search(value):
            return UNICODE_MARK
        if _only_number(TIME_SYMBOL_RE.sub("", value)):
            return TIME_MARK
        if ONLY_ALPHA_NUM_RE.fullmatch(value) and NUMBER_RE.search(value):
            return MIX_ALPHA_NUM_MARK
        if has_special_symbol(value):
            return MIX_SYMBOL_MARK
        if ONE_NUMBER_RE.sub("0", value).count("0") >= 3:
            return MIX_NUM_MARK
        if not self.strict_mode:
            return value
        if not ALPHA_LOWER_RE.search(value):
            return NO_LOWER_ALPHA_MARK
        kinds = sum((
            bool(ALPHA_LOWER_RE.search(value)),
            bool(ALPHA_UPPER_RE.search(value)),
            bool(NUMBER_RE.search(value)),
            "_" in value or "-" in value,
        ))
        return MIX_STRING_MARK if kinds >= 3 else None

    def mark_param_value(self, param_map: dict[str, Any], req: Request) -> dict[str, Any]:
        """Replace parameter values with marks describing their shape.

        Values that are neither strings, booleans nor numbers are dropped, as are
        strict-mode strings with fewer than three kinds of character.
        """
        marked: dict[str, Any] = {}
        for key, value in param_map.items():
            if isinstance(value, bool):
                marked[key] = BOOL_MARK
            elif isinstance(value, (int, float)):
                marked[key] = NUMBER_MARK
            elif isinstance(value, str):
                result = self._mark_string(key, value, req)
                if result is not None:
                    marked[key] = result
        return marked

    def calc_fragment_id(self, fragment: str) -> str:
        """Unique id of a fragment that looks like a URL path, else an empty string."""
        if not fragment or not fragment.startswith("/"):
            return ""
        try:
            fake_url = get_url(fragment)
        except ValueError as exc:
            logger.error("cannot calculate url fragment: %s", exc)
            return ""
        fake_req = get_request(GET, fake_url)
        self.get_mark(fake_req)
        return fake_req.filter.unique_id

    def _global_filter_location_mark(self, req: Request) -> None:
        name = req.url.hostname() + req.url.path + req.method
        if req.method in _QUERY_METHODS:
            marked = req.filter.marked_query_map
        elif req.method in _BODY_METHODS:
            marked = req.filter.marked_post_data_map
        else:
            return
        for key in list(marked):
            name += key
            if name in self._location_set:
                marked[key] = CUSTOM_VALUE_MARK

    def _repeat_count_statistic(self, req: Request) -> None:
        query_keys_id = req.filter.query_keys_id
        path_id = req.filter.path_id
        if query_keys_id:
            self._param_key_repeat_count[query_keys_id] += 1
            for key, value in req.filter.marked_query_map.items():
                self._param_key_single_values[query_keys_id + key].add(value)
                self._param_key_all_values[key].add(value)
                if value == "":
                    self._path_param_empty_values[path_id].add(key)
                path_id_key = path_id + key
                if path_id_key in self._path_param_key_symbol:
                    if isinstance(value, str) and MARKED_STRING_RE.fullmatch(value):
                        self._path_param_key_symbol[path_id_key] += 1
                else:
                    self._path_param_key_symbol[path_id_key] = 1

        parent = req.url.parent_path()
        if not parent or in_common_script_suffix(req.url.file_ext()):
            return
        current = req.filter.marked_path.replace(parent, "")
        self._parent_path_values[str_md5(parent)].add(current)

    def _over_count_mark(self, req: Request) -> None:
        query_keys_id = req.filter.query_keys_id
        path_id = req.filter.path_id
        if query_keys_id:
            marked = req.filter.marked_query_map
            if self._param_key_repeat_count.get(query_keys_id, 0) > MAX_PARAM_KEY_SINGLE_COUNT:
                for key in list(marked):
                    values = self._param_key_single_values.get(query_keys_id + key)
                    if values is not None and len(values) > 3:
                        marked[key] = FIX_PARAM_REPEAT_MARK

            for key in list(marked):
                values = self._param_key_all_values.get(key)
                if values is not None and len(values) > MAX_PARAM_KEY_ALL_COUNT:
                    marked[key] = FIX_PARAM_REPEAT_MARK
                if self._path_param_key_symbol.get(path_id + key, 0) > MAX_PATH_PARAM_KEY_SYMBOL_COUNT:
                    marked[key] = FIX_PARAM_REPEAT_MARK

            empty = self._path_param_empty_values.get(path_id)
            if empty is not None and len(empty) > MAX_PATH_PARAM_EMPTY_COUNT:
                rebuilt: dict[str, Any] = {}
                for key, value in marked.items():
                    if value == "":
                        rebuilt[FIX_PARAM_REPEAT_MARK] = ""
                    else:
                        rebuilt[key] = value
                req.filter.marked_query_map = rebuilt

        parent = req.url.parent_path()
        if not parent or in_common_script_suffix(req.url.file_ext()):
            return
        values = self._parent_path_values.get(str_md5(parent))
        if values is not None and len(values) > MAX_PARENT_PATH_COUNT:
            if parent.endswith("/"):
                req.filter.marked_path = parent + FIX_PATH_MARK
            else:
                req.filter.marked_path = parent + "/" + FIX_PATH_MARK