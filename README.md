# glint

Building blocks for a web vulnerability scanner. The package holds the
pieces that sit between a crawler and the vulnerability checks:

- `glint.urls`: a `URL` dataclass with helpers for host names, ports,
  query maps, file names and extensions and parent paths; `url_parse`
  for lenient parsing and `get_url` for resolving links found on a page
  against the page they came from. `get_url` raises `ValueError` for
  empty input and, when a parent is given, for `javascript:` and
  `mailto:` links.
- `glint.request`: the `Request` and `Filter` dataclasses used everywhere
  else, `get_request` to build one with an upper-cased method, stable
  identifiers (`no_header_id`, `unique_id`), text renderings
  (`full_format`, `simple_format`) and parsing of form and JSON POST
  bodies (`post_data_map`).
- `glint.filtering`: `SimpleFilter`, which drops requests to other hosts,
  exact duplicates and static resources, plus the path and parameter
  marking helpers it is built on (`mark_path`, `mark_param_name`,
  `get_keys_id`, `get_param_map_id`, `filter_key`, ...).
- `glint.smartfilter`: `SmartFilter`, which goes further and treats
  requests as duplicates when they differ only in values that look like
  numbers, timestamps, long tokens, encoded strings and the like; set
  `strict_mode=True` for more aggressive marking.
- `glint.domains`: `all_domain_collect` and `sub_domain_collect` list the
  distinct host names seen in a crawl, in first-seen order.
- `glint.fastreq`: a small HTTP `Session` configured by `ReqOptions`
  (range-limited responses, `Connection: close`, retries, optional proxy
  and client certificate), and module-level `get`, `post` and `request`.
  Any verb other than POST is sent as GET. Failures raise `RequestError`;
  a 206 answer is reported as 200.
- `glint.fuzz`: path discovery from `robots.txt` (`get_paths_from_robots`)
  and by probing a built-in word list (`get_paths_by_fuzz`) or one read
  from a file (`get_paths_by_fuzz_dict`). Probing can be stopped early
  with a `threading.Event`.
- `glint.msocket`: length-prefixed JSON messaging over stream sockets
  (`MConn`, `encode_message`).
- `glint.payload`: loading the `xss` payload mapping from YAML
  (`load_payload_data`, `PayloadData`).
- `glint.error_messages`: spotting database, framework and server error
  messages in response bodies (`find_error_messages`,
  `error_message_patterns`).
- `glint.logger`: coloured, levelled, thread-safe console output
  (`info`, `warning`, `error`, `debug`, ...; `set_output` redirects it,
  `debug_enable` switches debug lines).

## Installing

Install the package with your usual tool from a checkout of this
repository; the `test` extra adds pytest.

## Resolving and de-duplicating links

```python
from glint.urls import get_url
from glint.request import get_request
from glint.smartfilter import SmartFilter

page = get_url("http://shop.example.com/catalog/")
links = ["/item?id=1", "/item?id=2", "/item?id=3", "/static/logo.png"]

smart = SmartFilter()
kept = []
for link in links:
    req = get_request("GET", get_url(link, page), {}, "")
    if not smart.do_filter(req):  # True means "drop this one"
        kept.append(req)

for req in kept:
    print(req.simple_format())
```

Requests whose query values only differ by a number collapse into one,
and static files such as images, scripts and style sheets are dropped.
To also drop other hosts, give the filter a host limit:
`SmartFilter(simple_filter=SimpleFilter(host_limit="shop.example.com"))`.

## Looking for error messages

```python
from glint.error_messages import find_error_messages

body = "<b>Warning</b>: You have an error in your SQL syntax near ''"
for hit in find_error_messages(body):
    print(hit)
```

Plain-text signatures are reported first, then regular-expression
matches; each distinct finding appears once.

## Framed socket messages

Each message is a four-byte big-endian length followed by a JSON object:

```python
from glint.msocket import encode_message

frame = encode_message(1, "scan started", 42)
```

`MConn` keeps a list of connected peers (`add`), broadcasts status frames
with `send_all` (dropping peers whose send fails and returning how many
were reached), and reads incoming frames with `listen`, passing each
decoded JSON object to its callback in a separate thread.

## What this package does not do

It provides no command-line program, no browser-driven crawler, no
vulnerability checks, no listening server and no database storage of
results. It supplies the models, filters, HTTP helpers and message
framing such a scanner would be built from; running the crawl, opening
sockets and storing findings are left to the code that uses it.