"""Proxy manager -- environment-driven proxy resolution.

A :class:`ProxyManager` reads ``http_proxy``, ``https_proxy`` and
``no_proxy`` (lower-case first, then upper-case) once, when it is built, and
is read-only afterwards. It offers two kinds of query:

- :meth:`~ProxyManager.get_proxy_for_request` is strict. It returns a fully
  resolved :class:`~pkgnet.models.RequestProxy` or raises
  :class:`~pkgnet.exceptions.ProxyConfigurationError` when the proxy that
  applies to the request is malformed.
- :meth:`~ProxyManager.is_proxying` and
  :meth:`~ProxyManager.get_formatted_proxy` are lenient status queries for
  diagnostics and never raise.

``CGI_HTTP_PROXY`` is never consulted. In CGI contexts ``HTTP_PROXY`` may be
set from a request header; only the lower-case variable is safe there, and
the CGI variant is attacker-controlled everywhere.

Callers usually share one instance through :func:`get_proxy_manager`; after
the environment changes, :func:`reset_proxy_manager` makes the next access
read it again.
"""

from __future__ import annotations

import base64
import os
import threading
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urlsplit

from pkgnet.exceptions import ProxyConfigurationError
from pkgnet.models import ProxyEndpoint, RequestProxy
from pkgnet.proxy.no_proxy import NoProxyPattern
from pkgnet.proxy.url import mask_url, parse_proxy_url

_SCHEMES = ("http", "https")

# A proxy URL without a port is reached on the default port of the route
# built for the target, not of the proxy URL's own scheme.
HTTP_PORT = 80
HTTPS_PORT = 443


@dataclass(frozen=True)
class ProxySource:
    """A proxy value read from the environment, parsed or not."""

    env_name: str
    raw: str
    endpoint: Optional[ProxyEndpoint] = None
    error: Optional[str] = None

    @property
    def is_malformed(self) -> bool:
        return self.endpoint is None


def _read_env(environ: Mapping[str, str], name: str) -> tuple[str, str]:
    """Return ``(variable, value)`` for the first non-empty case variant."""
    for key in (name.lower(), name.upper()):
        value = environ.get(key, "").strip()
        if value:
            return key, value
    return name.lower(), ""


def _load_source(environ: Mapping[str, str], name: str) -> Optional[ProxySource]:
    env_name, raw = _read_env(environ, name)
    if not raw:
        return None
    try:
        return ProxySource(env_name=env_name, raw=raw, endpoint=parse_proxy_url(raw, env_name))
    except ProxyConfigurationError as exc:
        return ProxySource(env_name=env_name, raw=raw, error=str(exc))


class ProxyManager:
    """Proxy settings captured from the environment at construction time.

    Args:
        environ: Mapping to read from; ``os.environ`` when ``None``.

    Example::

        manager = ProxyManager({"https_proxy": "https://proxy.example.com:3128"})
        proxy = manager.get_proxy_for_request("https://repo.example.org/packages.json")
        assert proxy.secure
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        env = os.environ if environ is None else environ
        self._sources: dict[str, ProxySource] = {}
        for scheme in _SCHEMES:
            source = _load_source(env, f"{scheme}_proxy")
            if source is not None:
                self._sources[scheme] = source

        _, no_proxy = _read_env(env, "no_proxy")
        self._no_proxy: Optional[NoProxyPattern] = NoProxyPattern(no_proxy) if no_proxy else None

    @property
    def http_proxy(self) -> Optional[ProxySource]:
        return self._sources.get("http")

    @property
    def https_proxy(self) -> Optional[ProxySource]:
        return self._sources.get("https")

    @property
    def no_proxy(self) -> Optional[NoProxyPattern]:
        return self._no_proxy

    def get_proxy_for_request(self, url: str) -> RequestProxy:
        """Resolve how a request to *url* must be routed.

        Args:
            url: The request URL. Only ``http`` and ``https`` targets are
                proxied; anything else gets a direct connection.

        Returns:
            A :class:`~pkgnet.models.RequestProxy`. Its ``url`` is empty when
            no proxy applies or the host is excluded by ``no_proxy``.

        Raises:
            ProxyConfigurationError: If the proxy selected for this target is
                not a valid ``http``/``https`` URL with a host.
        """
        try:
            scheme = urlsplit(url).scheme.lower()
        except ValueError:
            return RequestProxy.none()
        if scheme not in _SCHEMES:
            return RequestProxy.none()

        source = self._sources.get(scheme)
        if scheme == "https" and source is None:
            source = self._sources.get("http")

        if self._no_proxy is not None and self._no_proxy.matches(url):
            return RequestProxy.no_proxy()
        if source is None:
            return RequestProxy.none()
        if source.endpoint is None:
            raise ProxyConfigurationError(source.error or f"{source.env_name} is malformed")

        if scheme == "http":
            return self._http_target(source.endpoint)
        return self._https_target(source.endpoint)

    def is_proxying(self) -> bool:
        """Whether any proxy variable is set, valid or not."""
        return bool(self._sources)

    def get_formatted_proxy(self) -> Optional[str]:
        """Summarise configured proxies as ``"http=..., https=..."`` with masked passwords.

        Malformed values are listed with a ``(malformed)`` suffix. Returns
        ``None`` when no proxy is configured.
        """
        parts = []
        for scheme, source in self._sources.items():
            text = f"{scheme}={mask_url(source.raw)}"
            if source.is_malformed:
                text += " (malformed)"
            parts.append(text)
        return ", ".join(parts) or None

    @staticmethod
    def _http_target(endpoint: ProxyEndpoint) -> RequestProxy:
        options: dict[str, object] = {"proxy": f"tcp://{endpoint.host_port(HTTP_PORT)}"}
        if endpoint.has_userinfo:
            raw = f"{endpoint.user}:{endpoint.password or ''}".encode("utf-8")
            options["header"] = f"Proxy-Authorization: Basic {base64.b64encode(raw).decode('ascii')}"
            options["request_fulluri"] = True
        url = endpoint.to_url(HTTP_PORT)
        return RequestProxy(
            url=url,
            context_options={"http": options},
            secure=False,
            formatted_url=mask_url(url),
        )

    @staticmethod
    def _https_target(endpoint: ProxyEndpoint) -> RequestProxy:
        # https targets never get Proxy-Authorization or request_fulluri,
        # even when the proxy URL carries user-info.
        url = endpoint.raw_url
        return RequestProxy(
            url=url,
            context_options={"http": {"proxy": f"ssl://{endpoint.host_port(HTTPS_PORT)}"}},
            secure=True,
            formatted_url=mask_url(url),
        )


_manager: Optional[ProxyManager] = None
_lock = threading.Lock()


def get_proxy_manager() -> ProxyManager:
    """Return the shared :class:`ProxyManager`, building it on first use."""
    global _manager
    with _lock:
        if _manager is None:
            _manager = ProxyManager()
        return _manager


def reset_proxy_manager() -> None:
    """Drop the shared manager so the next access re-reads the environment."""
    global _manager
    with _lock:
        _manager = None
