"""Built-in CLI sub-commands for pkgnet.

* :mod:`~pkgnet.commands.proxy` -- inspect proxy settings from the
  environment.
* :mod:`~pkgnet.commands.auth` -- preview and store credentials.
* :mod:`~pkgnet.commands.fetch` -- download a URL through the full
  transport pipeline.

Each module exports a :class:`typer.Typer` sub-application or a plain
callback registered on the root app in :mod:`pkgnet.app`. The helpers below
are shared between them.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Iterator

import typer

from pkgnet.config import Config, load_config
from pkgnet.console import ConsoleIO
from pkgnet.exceptions import PkgnetError
from pkgnet.output import error

_MASK = "***"


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn a :class:`~pkgnet.exceptions.PkgnetError` into a clean exit."""
    try:
        yield
    except PkgnetError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def open_session(ctx: typer.Context) -> tuple[ConsoleIO, Config]:
    """Load the configuration and a :class:`ConsoleIO` with its credentials."""
    obj = ctx.obj or {}
    interactive = not obj.get("no_input", False) and sys.stdin.isatty()
    config = load_config()
    io = ConsoleIO(interactive=interactive)
    io.load_configuration(config)
    return io, config


def mask_header(line: str) -> str:
    """Mask the secret in a ``"Name: value"`` header line.

    A leading scheme word is kept: ``"Authorization: Bearer abc"`` becomes
    ``"Authorization: Bearer ***"``, ``"PRIVATE-TOKEN: abc"`` becomes
    ``"PRIVATE-TOKEN: ***"``.
    """
    name, sep, value = line.partition(":")
    if not sep:
        return _MASK
    scheme, space, _ = value.strip().partition(" ")
    return f"{name}: {scheme} {_MASK}" if space else f"{name}: {_MASK}"
