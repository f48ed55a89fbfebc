"""Proxy commands -- show how the environment routes requests.

Typical workflow::

    pkgnet proxy status
    pkgnet proxy resolve https://repo.example.org/packages.json
"""

from __future__ import annotations

from typing import Any

import typer

from pkgnet.commands import handle_errors, mask_header
from pkgnet.output import format_response, info
from pkgnet.proxy import get_proxy_manager


proxy_app = typer.Typer(no_args_is_help=True)


@proxy_app.command("status")
def proxy_status() -> None:
    """Show whether a proxy is configured.

    Never fails on malformed values; they are listed with a
    ``(malformed)`` suffix instead.

    Example::

        pkgnet proxy status
        pkgnet --json proxy status
    """
    manager = get_proxy_manager()
    formatted = manager.get_formatted_proxy()
    no_proxy = manager.no_proxy
    format_response({
        "proxying": manager.is_proxying(),
        "proxy": formatted,
        "no_proxy": [entry.text for entry in no_proxy.entries] if no_proxy else [],
    })


@proxy_app.command("resolve")
def proxy_resolve(
    url: str = typer.Argument(help="Request URL to resolve a proxy for."),
) -> None:
    """Show the proxy a request to URL would use.

    Exits with code 7 when the proxy that applies is malformed.

    Example::

        pkgnet proxy resolve http://repo.example.org/packages.json
    """
    with handle_errors():
        proxy = get_proxy_manager().get_proxy_for_request(url)

    if not proxy.is_proxied:
        reason = f" ({proxy.formatted_url})" if proxy.formatted_url else ""
        info(f"Direct connection{reason}")

    options: dict[str, Any] = dict(proxy.context_options.get("http", {}))
    if "header" in options:
        options["header"] = mask_header(options["header"])
    format_response({
        "proxy": proxy.formatted_url or None,
        "secure": proxy.secure,
        "options": options,
    })
