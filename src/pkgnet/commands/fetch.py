"""Fetch command -- download a URL through the transport pipeline.

The request goes through the same proxy resolution and credential
negotiation as every other download, which makes this the quickest way to
check a proxy or token setup end to end.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from pkgnet.client import SyncClient
from pkgnet.commands import handle_errors, open_session
from pkgnet.output import print_data, success


def fetch_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="URL to download."),
    output_file: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the body to a file instead of stdout."
    ),
    timeout: float = typer.Option(30.0, "--timeout", help="Request timeout in seconds."),
) -> None:
    """Download URL using the configured proxies and credentials.

    Example::

        pkgnet fetch https://repo.example.org/packages.json
        pkgnet -v fetch https://gitlab.com/api/v4/projects/1 -o project.json
    """
    with handle_errors():
        io, config = open_session(ctx)
        response = SyncClient(io, config, timeout=timeout).get(url)

    if output_file is not None:
        output_file.write_bytes(response.content)
        success(f"Saved {len(response.content)} bytes to {output_file}")
    else:
        print_data(response.text)
