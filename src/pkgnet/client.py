"""Synchronous HTTP client with proxy resolution and credential negotiation.

This module provides :class:`SyncClient`, the blocking transport the CLI
uses to fetch package metadata and archives. It wraps :class:`httpx.Client`
and layers on:

- **Proxy resolution** -- the :class:`~pkgnet.proxy.ProxyManager` decides,
  per request, whether to go through ``http_proxy``/``https_proxy`` or
  connect directly (``no_proxy``).
- **Auth injection** -- the :class:`~pkgnet.auth.CredentialNegotiator`
  appends the header matching the credential stored for the origin.
- **Redirects** -- followed hop by hop so each hop resolves its own proxy
  and credential.
- **Error mapping** -- network failures become
  :class:`~pkgnet.exceptions.TransportError`, ``401``/``403`` become
  :class:`~pkgnet.exceptions.AuthError`.

httpx never reads proxy variables on its own here (``trust_env=False``);
the proxy manager is the only place they are interpreted.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import urlsplit

import httpx

from pkgnet.auth import CredentialNegotiator
from pkgnet.config import Config
from pkgnet.console import ConsoleIO
from pkgnet.exceptions import AuthError, InvalidUsageError, TransportError
from pkgnet.proxy import ProxyManager, get_proxy_manager, mask_url


def origin_for_url(url: str) -> str:
    """Return the credential origin for *url*: ``host`` or ``host:port``.

    Raises:
        InvalidUsageError: If *url* has no host.
    """
    try:
        parts = urlsplit(url)
        host = parts.hostname
        port = parts.port
    except ValueError as exc:
        raise InvalidUsageError(f"Invalid URL: {mask_url(url)}") from exc
    if not host:
        raise InvalidUsageError(f"Invalid URL: {mask_url(url)}")
    return f"{host}:{port}" if port is not None else host


MAX_REDIRECTS = 20


def _redirect_method(method: str, status: int) -> str:
    """Return the method for the next hop after a *status* redirect."""
    if status == 303 and method != "HEAD":
        return "GET"
    if status in (301, 302) and method == "POST":
        return "GET"
    return method


def _header_dict(lines: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for line in lines:
        name, sep, value = line.partition(":")
        if sep:
            headers[name.strip()] = value.strip()
    return headers


class SyncClient:
    """Synchronous HTTP client for repository requests.

    A fresh :class:`httpx.Client` is opened per request because the proxy
    can differ from one URL to the next.

    Args:
        io: Session IO holding the credential store.
        config: Effective configuration.
        proxy_manager: Proxy resolver; the shared one when ``None``.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests use
            :class:`httpx.MockTransport`).

    Example::

        client = SyncClient(io, load_config())
        response = client.get("https://repo.example.org/packages.json")
    """

    def __init__(
        self,
        io: ConsoleIO,
        config: Config,
        proxy_manager: Optional[ProxyManager] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._io = io
        self._proxy_manager = proxy_manager
        self._timeout = timeout
        self._transport = transport
        self._negotiator = CredentialNegotiator(io, config)

    @property
    def negotiator(self) -> CredentialNegotiator:
        return self._negotiator

    @property
    def proxy_manager(self) -> ProxyManager:
        return self._proxy_manager if self._proxy_manager is not None else get_proxy_manager()

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[list[str]] = None,
    ) -> httpx.Response:
        """Send a request through the resolved proxy with negotiated auth.

        Redirects are followed here rather than by httpx: every hop gets its
        own proxy and its own credential lookup, so a token for one host is
        never replayed to the host a redirect points at.

        Args:
            method: HTTP method.
            url: Absolute URL.
            headers: Extra ``"Name: value"`` header lines.

        Returns:
            The :class:`httpx.Response` from the server.

        Raises:
            InvalidUsageError: If *url* has no host.
            ProxyConfigurationError: If the proxy for *url* is malformed.
            AuthError: On 401 / 403.
            TransportError: On network errors, too many redirects and other
                4xx/5xx responses.
        """
        method = method.upper()
        base_headers = list(headers or [])

        for _ in range(MAX_REDIRECTS + 1):
            response = self._send(method, url, base_headers)
            if not response.is_redirect:
                self._map_response_error(response, url)
                return response
            url = str(response.request.url.join(response.headers["location"]))
            method = _redirect_method(method, response.status_code)
            self._io.output.debug(f"Redirected ({response.status_code}) to {mask_url(url)}")

        raise TransportError(f"Too many redirects (more than {MAX_REDIRECTS}) ending at {mask_url(url)}")

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", url, **kwargs)

    def _send(self, method: str, url: str, headers: list[str]) -> httpx.Response:
        origin = origin_for_url(url)
        output = self._io.output

        proxy = self.proxy_manager.get_proxy_for_request(url)
        if proxy.formatted_url:
            output.debug(f"Proxy for {mask_url(url)}: {proxy.formatted_url}")

        lines = self._negotiator.add_authentication_header(list(headers), origin, url)
        output.debug(f"{method} {mask_url(url)}")

        try:
            with httpx.Client(
                proxy=proxy.httpx_proxy(),
                trust_env=False,
                transport=self._transport,
                timeout=self._timeout,
                follow_redirects=False,
            ) as client:
                response = client.request(method, url, headers=_header_dict(lines))
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request to {mask_url(url)} timed out") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {mask_url(url)} failed: {exc}") from exc

        output.debug(f"Response: {response.status_code}")
        return response

    @staticmethod
    def _map_response_error(response: httpx.Response, url: str) -> None:
        status = response.status_code
        if status in (401, 403):
            raise AuthError(f"HTTP {status}: credentials rejected for {mask_url(url)}")
        if status >= 400:
            raise TransportError(f"HTTP {status} from {mask_url(url)}")
