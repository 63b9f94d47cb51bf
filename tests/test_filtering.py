import pytest

from glint import filtering
from glint.filtering import (
    SimpleFilter,
    filter_key,
    get_keys_id,
    get_param_map_id,
    get_path_id,
    has_special_symbol,
    in_common_script_suffix,
    mark_param_name,
    mark_path,
    str_md5,
)
from glint.request import get_request
from glint.urls import get_url


def make_req(url, method="GET"):
    return get_request(method, get_url(url))


def test_str_md5_empty():
    assert str_md5("") == "d41d8cd98f00b204e9800998ecf8427e"


def test_filter_key():
    assert filter_key("http://example.com/a.css", filtering.FORBIDDEN_KEYS)
    assert not filter_key("http://example.com/index.php", filtering.FORBIDDEN_KEYS)
    assert not filter_key("anything", [])


def test_mark_param_name():
    marked = mark_param_name({"name": "v", "id1": "w", "k" * 40: "z"})
    assert marked["name"] == "v"
    assert marked["id" + filtering.NUMBER_MARK] == "w"
    assert marked[filtering.TOO_LONG_MARK] == "z"
    assert len(marked) == 3


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/123/abc", "/{{number}}/abc"),
        ("/news/2020-01-01.html", "/news/{{number}}"),
        ("/ABC", "/{{upper}}"),
        ("/a b", "/{{mix_symbol}}"),
        ("/ab1234cd", "/{{mix_num}}"),
        ("/" + "x" * 40, "/{{long}}"),
        ("/a/b.html", "/a/b.html"),
    ],
)
def test_mark_path(path, expected):
    assert mark_path(path) == expected


def test_mark_path_keeps_segment_count():
    path = "/a/1/B/c.html/"
    assert mark_path(path).count("/") == path.count("/")


def test_has_special_symbol():
    assert has_special_symbol("a=b")
    assert has_special_symbol("x y")
    assert not has_special_symbol("plain_value")


def test_in_common_script_suffix():
    assert in_common_script_suffix("php")
    assert in_common_script_suffix("jsp")
    assert not in_common_script_suffix("html")


def test_get_keys_id_is_order_independent():
    assert get_keys_id({"b": 1, "a": 2}) == get_keys_id({"a": 3, "b": 4})
    assert get_keys_id({"b": 1, "a": 2}) == str_md5("ab")


def test_get_param_map_id_unifies_marks():
    assert get_param_map_id({"a": "{{number}}"}) == get_param_map_id({"a": "{{long}}"})
    assert get_param_map_id({"a": "{{number}}"}) == str_md5("a{{mark}}")
    assert get_param_map_id({"a": "x"}) != get_param_map_id({"a": "y"})


def test_get_param_map_id_ignores_non_string_values():
    assert get_param_map_id({"a": True}) == str_md5("a")


def test_get_path_id():
    assert get_path_id("/a/b") == str_md5("/a/b")


def test_simple_filter_duplicates():
    f = SimpleFilter(host_limit="example.com")
    assert f.do_filter(make_req("http://example.com/index.php")) is False
    assert f.do_filter(make_req("http://example.com/index.php")) is True


def test_simple_filter_static():
    f = SimpleFilter()
    assert f.do_filter(make_req("http://example.com/logo.png")) is True
    assert f.static_filter(make_req("http://example.com/app.JS")) is True
    assert f.static_filter(make_req("http://example.com/page")) is False


def test_simple_filter_other_host():
    f = SimpleFilter(host_limit="example.com")
    assert f.do_filter(make_req("http://other.example.org/")) is True


def test_domain_filter_default_ports():
    assert SimpleFilter(host_limit="example.com:80").domain_filter(make_req("http://example.com/")) is False
    assert SimpleFilter(host_limit="example.com:443").domain_filter(make_req("https://example.com/")) is False
    assert SimpleFilter(host_limit="example.com:443").domain_filter(make_req("http://example.com/")) is True


def test_unique_filter_records_ids():
    f = SimpleFilter()
    req = make_req("http://example.com/a")
    assert f.unique_filter(req) is False
    assert req.unique_id() in f.unique_set
    assert f.unique_filter(req) is True