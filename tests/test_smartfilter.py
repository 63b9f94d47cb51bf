import pytest

from glint.filtering import (
    BOOL_MARK,
    CUSTOM_VALUE_MARK,
    MIX_ALPHA_NUM_MARK,
    MIX_STRING_MARK,
    MIX_SYMBOL_MARK,
    NO_LOWER_ALPHA_MARK,
    NUMBER_MARK,
    SimpleFilter,
    TIME_MARK,
    TOO_LONG_MARK,
    UPPER_MARK,
    URL_ENCODE_MARK,
    get_keys_id,
    get_param_map_id,
    get_path_id,
)
from glint.request import get_request
from glint.smartfilter import SmartFilter, get_marked_unique_id
from glint.urls import get_url


def make_req(url, method="GET", headers=None, post_data=""):
    return get_request(method, get_url(url), headers, post_data)


def test_exact_duplicate_filtered():
    sf = SmartFilter()
    assert sf.do_filter(make_req("http://example.com/a?id=1")) is False
    assert sf.do_filter(make_req("http://example.com/a?id=1")) is True


def test_numeric_values_collapse():
    sf = SmartFilter()
    assert sf.do_filter(make_req("http://example.com/a?id=1")) is False
    assert sf.do_filter(make_req("http://example.com/a?id=2")) is True


def test_different_param_names_kept():
    sf = SmartFilter()
    assert sf.do_filter(make_req("http://example.com/a?id=1")) is False
    assert sf.do_filter(make_req("http://example.com/a?name=1")) is False


def test_static_resource_filtered():
    sf = SmartFilter()
    assert sf.do_filter(make_req("http://example.com/logo.png")) is True


def test_other_host_filtered():
    sf = SmartFilter(simple_filter=SimpleFilter(host_limit="example.com"))
    assert sf.do_filter(make_req("http://other.example.org/")) is True
    assert sf.do_filter(make_req("http://example.com/")) is False


@pytest.mark.parametrize(
    "value, expected",
    [
        ("ABC", UPPER_MARK),
        ("12345", NUMBER_MARK),
        ("1.2-3", NUMBER_MARK),
        (True, BOOL_MARK),
        (3.5, NUMBER_MARK),
        (7, NUMBER_MARK),
        ("abcdefghijklmnopq", TOO_LONG_MARK),
        ("10:00:01", TIME_MARK),
        ("abc123", MIX_ALPHA_NUM_MARK),
        ("a b", MIX_SYMBOL_MARK),
        ("%E4%B8%AD", URL_ENCODE_MARK),
        ("hello", "hello"),
        ("", ""),
    ],
)
def test_mark_param_value(value, expected):
    sf = SmartFilter()
    req = make_req("http://example.com/")
    assert sf.mark_param_value({"k": value}, req) == {"k": expected}


def test_mark_param_value_drops_lists():
    sf = SmartFilter()
    req = make_req("http://example.com/")
    assert sf.mark_param_value({"k": ["a", "b"], "x": "ABC"}, req) == {"x": UPPER_MARK}


def test_strict_mode_marks():
    strict = SmartFilter(strict_mode=True)
    req = make_req("http://example.com/")
    assert strict.mark_param_value({"k": "Ab_c1"}, req) == {"k": MIX_STRING_MARK}
    assert strict.mark_param_value({"k": "A_B"}, req) == {"k": NO_LOWER_ALPHA_MARK}
    assert strict.mark_param_value({"k": "ABc"}, req) == {}
    loose = SmartFilter()
    assert loose.mark_param_value({"k": "Ab_c1"}, req) == {"k": "Ab_c1"}


def test_custom_value_marked():
    sf = SmartFilter()
    req = make_req("http://example.com/")
    assert sf.mark_param_value({"k": "xCrawlergo"}, req) == {"k": CUSTOM_VALUE_MARK}


def test_get_mark_sets_ids():
    sf = SmartFilter()
    req = make_req("http://example.com/a/123?id=5")
    sf.get_mark(req)
    assert req.filter.marked_query_map == {"id": NUMBER_MARK}
    assert req.filter.marked_path == "/a/" + NUMBER_MARK
    assert req.filter.query_keys_id == get_keys_id({"id": NUMBER_MARK})
    assert req.filter.query_map_id == get_param_map_id({"id": NUMBER_MARK})
    assert req.filter.path_id == get_path_id(req.filter.marked_path)
    assert req.filter.unique_id == get_marked_unique_id(req)


def test_get_mark_without_query():
    sf = SmartFilter()
    req = make_req("http://example.com/about")
    sf.get_mark(req)
    assert req.filter.marked_query_map == {}
    assert req.filter.query_keys_id == ""
    assert req.filter.query_map_id == ""


def test_post_mark_form():
    sf = SmartFilter()
    req = make_req(
        "http://example.com/login",
        method="POST",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        post_data="user=abc&age=20",
    )
    sf.post_mark(req)
    assert req.filter.marked_post_data_map == {"user": "abc", "age": NUMBER_MARK}
    assert req.filter.post_data_id == get_param_map_id(req.filter.marked_post_data_map)
    assert req.filter.unique_id == get_marked_unique_id(req)


def test_post_requests_deduplicated():
    sf = SmartFilter()
    headers = {"Content-Type": "application/x-www-form-urlencoded"}
    first = make_req("http://example.com/f", "POST", dict(headers), "age=20")
    second = make_req("http://example.com/f", "POST", dict(headers), "age=31")
    assert sf.do_filter(first) is False
    assert sf.do_filter(second) is True


def test_calc_fragment_id():
    sf = SmartFilter()
    assert sf.calc_fragment_id("") == ""
    assert sf.calc_fragment_id("section") == ""
    one = sf.calc_fragment_id("/page?id=1")
    two = SmartFilter().calc_fragment_id("/page?id=2")
    assert one and one == two
    assert sf.calc_fragment_id("/other?id=1") != one


def test_unique_id_scheme_and_redirection():
    sf = SmartFilter()
    root_https = make_req("https://example.com/")
    root_http = make_req("http://example.com/")
    page_https = make_req("https://example.com/a")
    page_http = make_req("http://example.com/a")
    for req in (root_https, root_http, page_https, page_http):
        sf.get_mark(req)
    assert root_https.filter.unique_id != root_http.filter.unique_id
    assert page_https.filter.unique_id == page_http.filter.unique_id
    before = get_marked_unique_id(page_http)
    page_http.redirection_flag = True
    assert get_marked_unique_id(page_http) != before


def test_global_location_mark():
    sf = SmartFilter()
    assert sf.do_filter(make_req("http://example.com/p?id=Crawlergo")) is False
    req = make_req("http://example.com/p?id=abc")
    assert sf.do_filter(req) is True
    assert req.filter.marked_query_map == {"id": CUSTOM_VALUE_MARK}


def test_repeated_parameter_values_fixed():
    sf = SmartFilter()
    results = [
        sf.do_filter(make_req(f"http://example.com/?q={letter}"))
        for letter in "abcdefghij"
    ]
    assert results == [False] * 9 + [True]