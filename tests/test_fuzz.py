import socket
import threading
from contextlib import contextmanager
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from glint.fuzz import get_paths_by_fuzz, get_paths_by_fuzz_dict, get_paths_from_robots
from glint.request import get_request
from glint.urls import get_url


class _Handler(BaseHTTPRequestHandler):
    def do_GET(self):
        status, body = self.server.routes.get(self.path, (404, b""))
        self.send_response(status)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, *args):
        pass


@contextmanager
def _serve(routes):
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    server.routes = routes
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()


def _nav(host, path="/"):
    return get_request("GET", get_url(f"http://{host}{path}"))


def test_robots_paths_are_collected():
    robots = b"User-agent: *\nDisallow: /admin/\nAllow: /public/page?x=1\n"
    with _serve({"/robots.txt": (200, robots)}) as host:
        nav = _nav(host, "/start")
        result = get_paths_from_robots(nav)
    assert [req.url.path for req in result] == ["/admin/", "/public/page"]
    assert result[1].url.raw_query == "x=1"
    assert {req.source for req in result} == {"robots.txt"}
    assert {req.url.host for req in result} == {host}
    assert nav.url.path == "/start"


def test_robots_missing_gives_nothing():
    with _serve({}) as host:
        assert get_paths_from_robots(_nav(host)) == []


def test_robots_unreachable_gives_nothing():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    assert get_paths_from_robots(_nav(f"127.0.0.1:{port}")) == []


def test_fuzz_dict_keeps_answering_paths(tmp_path):
    words = tmp_path / "dict.txt"
    words.write_text("/admin\nmissing\nstatic/\nadmin\n", encoding="utf-8")
    routes = {"/admin": (200, b"ok"), "/static/": (301, b"")}
    with _serve(routes) as host:
        result = get_paths_by_fuzz_dict(_nav(host), str(words))
    assert sorted(req.url.path for req in result) == ["/admin", "/static/"]
    assert {req.source for req in result} == {"PathFuzz"}
    assert {req.method for req in result} == {"GET"}


def test_fuzz_stops_when_cancelled(tmp_path):
    words = tmp_path / "dict.txt"
    words.write_text("admin\n", encoding="utf-8")
    cancel = threading.Event()
    cancel.set()
    with _serve({"/admin": (200, b"ok")}) as host:
        assert get_paths_by_fuzz_dict(_nav(host), words, cancel) == []


def test_builtin_fuzz_list_finds_login():
    with _serve({"/login": (200, b"ok")}) as host:
        result = get_paths_by_fuzz(_nav(host))
    assert [req.url.path for req in result] == ["/login"]
    assert str(result[0].url) == f"http://{host}/login"