"""Collect the distinct domains seen in a list of requests."""

from __future__ import annotations

from typing import Iterable

from glint.request import Request


def sub_domain_collect(req_list: Iterable[Request], host_limit: str) -> list[str]:
    """Distinct host names that are sub-domains of ``host_limit``, in first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for req in req_list:
        domain = req.url.hostname()
        if domain in seen:
            continue
        seen.add(domain)
        if domain.endswith("." + host_limit):
            result.append(domain)
    return result


def all_domain_collect(req_list: Iterable[Request]) -> list[str]:
    """Distinct host names in first-seen order."""
    return list(dict.fromkeys(req.url.hostname() for req in req_list))