"""Discover paths from robots.txt and by probing common directory names."""

from __future__ import annotations

import re
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, Mapping

from glint import fastreq, logger
from glint.request import Request, get_request
from glint.urls import get_url

PATH_STR = (
    "dfish_sso/11/123/2017/2018/message/mis/model/abstract/account/act/action"
    "/activity/ad/address/ajax/alarm/api/app/ar/attachment/auth/authority/award/back/backup/bak/base"
    "/bbs/bbs1/cms/bd/gallery/game/gift/gold/bg/bin/blacklist/blog/bootstrap/brand/build/cache/caches"
    "/caching/cacti/cake/captcha/category/cdn/ch/check/city/class/classes/classic/client/cluster"
    "/collection/comment/commit/common/commons/components/conf/config/mysite/confs/console/consumer"
    "/content/control/controllers/core/crontab/crud/css/daily/dashboard/data/database/db/default/demo"
    "/dev/doc/download/duty/es/eva/examples/excel/export/ext/fe/feature/file/files/finance/flashchart"
    "/follow/forum/frame/framework/ft/group/gss/hello/helper/helpers/history/home/hr/htdocs/html/hunter"
    "/image/img11/import/improve/inc/include/includes/index/info/install/interface/item/jobconsume/jobs"
    "/json/kindeditor/l/languages/lib/libraries/libs/link/lite/local/log/login/logs/mail/main"
    "/maintenance/manage/manager/manufacturer/menus/models/modules/monitor/movie/mysql/n/nav/network"
    "/news/notice/nw/oauth/other/page/pages/passport/pay/pcheck/people/person/php/phprpc"
    "/phptest/picture/pl/platform/pm/portal/post/product/project/protected/proxy/ps/public/qq/question"
    "/quote/redirect/redisclient/report/resource/resources/s/save/schedule/schema/script/scripts/search"
    "/security/server/service/shell/show/simple/site/sites/skin/sms/soap/sola/sort/spider/sql/stat"
    "/static/statistics/stats/submit/subways/survey/sv/syslog/system/tag/task/tasks/tcpdf/template"
    "/templates/test/tests/ticket/tmp/token/tool/tools/top/tpl/txt/upload/uploadify/uploads/url/user"
    "/util/v1/v2/vendor/view/views/web/weixin/widgets/wm/wordpress/workspace/ws/www/www2/wwwroot/zone"
    "/admin/admin_bak/mobile/m/js"
)

FUZZ_WORKERS = 20

_ROBOTS_RULE_RE = re.compile(r"(?:Disallow|Allow):.*?(/.+)")
_ROBOTS_PATH_RE = re.compile(r"(/.+)")


def _convert_headers(headers: Mapping[str, Any]) -> dict[str, str]:
    return {str(key): str(value) for key, value in headers.items() if value is not None}


def get_paths_from_robots(nav_req: Request) -> list[Request]:
    """Requests for every Allow/Disallow path listed in the site's robots.txt."""
    logger.info("starting to get paths from robots.txt.")
    root = replace(nav_req.url, path="/", raw_path="")
    robots_url = root.no_query_url() + "robots.txt"
    options = fastreq.ReqOptions(
        allow_redirect=False, timeout=5, proxy=nav_req.fasthttp_proxy
    )
    try:
        response = fastreq.get(robots_url, _convert_headers(nav_req.headers), options)
    except fastreq.RequestError:
        return []
    if not 200 <= response.status_code < 300:
        return []

    result: list[Request] = []
    for match in _ROBOTS_RULE_RE.finditer(response.text):
        found = _ROBOTS_PATH_RE.search(match.group(0).strip())
        raw = found.group(0) if found else ""
        try:
            url = get_url(raw, root)
        except ValueError:
            continue
        req = get_request("GET", url)
        req.source = "robots.txt"
        result.append(req)
    return result


def get_paths_by_fuzz(
    nav_req: Request, cancel_event: threading.Event | None = None
) -> list[Request]:
    """Probe the built-in list of common paths."""
    logger.info("starting to get paths by fuzzing.")
    return _do_fuzz(nav_req, PATH_STR.split("/"), cancel_event)


def get_paths_by_fuzz_dict(
    nav_req: Request, dict_path: str | Path, cancel_event: threading.Event | None = None
) -> list[Request]:
    """Probe every path listed, one per line, in ``dict_path``."""
    logger.info("starting to get dict path by fuzzing: %s", dict_path)
    text = Path(dict_path).read_text(encoding="utf-8")
    path_list = [line.rstrip("\r") for line in text.splitlines() if line.strip()]
    logger.debug("valid path count: %d", len(path_list))
    return _do_fuzz(nav_req, path_list, cancel_event)


def _probe(
    nav_req: Request,
    path: str,
    headers: dict[str, str],
    cancel_event: threading.Event | None,
) -> str | None:
    """Return the probed URL if the server answers 2xx, 301 or 302."""
    if cancel_event is not None and cancel_event.is_set():
        return None
    url = f"{nav_req.url.scheme}://{nav_req.url.host}/{path}"
    options = fastreq.ReqOptions(timeout=2, allow_redirect=True, proxy=nav_req.fasthttp_proxy)
    try:
        response = fastreq.get(url, headers, options)
    except fastreq.RequestError:
        return None
    status = response.status_code
    if 200 <= status < 300:
        return url
    if status in (301, 302):
        logger.info("%s", "\n".join(f"{k}: {v}" for k, v in response.headers.items()))
        return url
    return None


def _do_fuzz(
    nav_req: Request,
    path_list: Iterable[str],
    cancel_event: threading.Event | None,
) -> list[Request]:
    headers = _convert_headers(nav_req.headers)
    paths = []
    for path in path_list:
        path = path.removeprefix("/")
        paths.append(path.removesuffix("\n"))

    with ThreadPoolExecutor(max_workers=FUZZ_WORKERS) as pool:
        found = list(pool.map(lambda p: _probe(nav_req, p, headers, cancel_event), paths))

    result: list[Request] = []
    for raw in dict.fromkeys(url for url in found if url):
        try:
            url = get_url(raw)
        except ValueError:
            continue
        req = get_request("GET", url)
        req.source = "PathFuzz"
        result.append(req)
    return result