"""Proxy resolution from ``http_proxy`` / ``https_proxy`` / ``no_proxy``.

The main entry points are:

- :class:`ProxyManager` -- environment snapshot with strict per-request
  resolution and lenient status reporting.
- :func:`get_proxy_manager` / :func:`reset_proxy_manager` -- the shared,
  lazily-built instance and its reset.
- :class:`NoProxyPattern` -- ``no_proxy`` matching.
- :func:`mask_url` -- password masking for anything shown to humans.

Typical usage::

    from pkgnet.proxy import get_proxy_manager

    proxy = get_proxy_manager().get_proxy_for_request(url)
    if proxy.is_proxied:
        debug(f"Using proxy {proxy.formatted_url}")
"""

from pkgnet.proxy.manager import ProxyManager, ProxySource, get_proxy_manager, reset_proxy_manager
from pkgnet.proxy.no_proxy import NoProxyPattern
from pkgnet.proxy.url import mask_url, parse_proxy_url

__all__ = [
    "NoProxyPattern",
    "ProxyManager",
    "ProxySource",
    "get_proxy_manager",
    "mask_url",
    "parse_proxy_url",
    "reset_proxy_manager",
]
