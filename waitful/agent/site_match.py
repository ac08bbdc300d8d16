"""
Site matching — decides whether a page host is on the distracting list.
"""

from __future__ import annotations

from typing import Iterable, Optional
from urllib.parse import urlsplit


def strip_www(host: str) -> str:
    host = host.strip().lower()
    return host[4:] if host.startswith("www.") else host


def host_of(url: str) -> Optional[str]:
    """Bare hostname of *url* ("www." stripped), None when the URL has no host."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    return strip_www(host) if host else None


def matches_site(host: str, site: str) -> bool:
    """
    Bidirectional substring match: "mail.example.com" matches a stored
    "example.com", and a visited "example.com" matches a stored
    "www.example.com".
    """
    host = strip_www(host)
    site = site.strip().lower()
    if not host or not site:
        return False
    return site in host or host in site


def should_intercept(host: Optional[str], sites: Iterable[str], enabled: bool = True) -> bool:
    if not enabled or not host:
        return False
    return any(matches_site(host, site) for site in sites)
