import pytest

from glint.request import Filter, get_request
from glint.urls import get_url

FORM = "application/x-www-form-urlencoded"


def make_post(body, content_type=FORM, header="Content-Type"):
    headers = {} if content_type is None else {header: content_type}
    return get_request("post", get_url("http://example.com/login"), headers, body)


def test_get_request_defaults():
    req = get_request("get", get_url("http://example.com/"))
    assert req.method == "GET"
    assert req.headers == {}
    assert req.post_data == ""
    assert req.filter == Filter()


def test_filter_defaults_empty():
    assert Filter().unique_id == ""
    assert Filter().marked_query_map == {}


def test_simple_format_post():
    assert make_post("a=1").simple_format() == "POST http://example.com/login a=1"


def test_simple_format_get_has_no_body():
    req = get_request("GET", get_url("http://example.com/"), post_data="ignored")
    assert req.simple_format() == "GET http://example.com/ "


def test_full_format_post():
    text = make_post("a=1").full_format()
    assert text.startswith("POST http://example.com/login HTTP/1.1\r\n")
    assert f"Content-Type: {FORM}\r\n" in text
    assert text.endswith("\r\n\r\na=1")


def test_full_format_get_ends_with_blank_line():
    req = get_request("GET", get_url("http://example.com/"), post_data="body")
    assert req.full_format().endswith("\r\n\r\n")


def test_no_header_id_ignores_headers():
    first = make_post("a=1")
    second = make_post("a=1", content_type="application/json")
    assert first.no_header_id() == second.no_header_id()
    assert len(first.no_header_id()) == 32
    assert int(first.no_header_id(), 16) >= 0


def test_no_header_id_depends_on_body():
    assert make_post("a=1").no_header_id() != make_post("a=2").no_header_id()
    assert len(make_post("a=2").no_header_id()) == 32


def test_unique_id_redirection():
    req = make_post("a=1")
    assert req.unique_id() == req.no_header_id()
    req.redirection_flag = True
    assert req.unique_id() != req.no_header_id()
    assert len(req.unique_id()) == 32


def test_post_data_map_json():
    body = '{"a": 1, "b": "x"}'
    assert make_post(body, "application/json").post_data_map() == {"a": 1, "b": "x"}


def test_post_data_map_form():
    req = make_post("a=1&b=2&b=3&c=hello+world")
    assert req.post_data_map() == {"a": "1", "b": ["2", "3"], "c": "hello world"}


def test_post_data_map_lowercase_header():
    req = make_post("a=1", header="content-type")
    assert req.post_data_map() == {"a": "1"}


@pytest.mark.parametrize(
    "body, content_type",
    [
        ("a=1", None),
        ("a=1", "text/plain"),
        ("{not json", "application/json"),
        ("[1, 2]", "application/json"),
        ("a=%zz", FORM),
    ],
)
def test_post_data_map_fallback(body, content_type):
    assert make_post(body, content_type).post_data_map() == {"key": body}


def test_query_map_delegates_to_url():
    req = get_request("GET", get_url("http://example.com/?a=1&a=2"))
    assert req.query_map() == {"a": ["1", "2"]}