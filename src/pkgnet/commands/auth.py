"""Auth commands -- preview and store repository credentials.

Credentials come from ``auth.json`` and ``PKGNET_AUTH``. These commands
never print a secret: headers are shown with their value masked.

Typical workflow::

    pkgnet auth store repo.example.org --username alice --password s3cret
    pkgnet auth header repo.example.org https://repo.example.org/packages.json
"""

from __future__ import annotations

from typing import Optional, Union

import typer

from pkgnet.auth import CredentialNegotiator
from pkgnet.commands import handle_errors, mask_header, open_session
from pkgnet.exceptions import InvalidUsageError
from pkgnet.output import format_response, info, success


auth_app = typer.Typer(no_args_is_help=True)

_STORE_CHOICES: dict[str, Union[bool, str]] = {"yes": True, "no": False, "prompt": "prompt"}


@auth_app.command("header")
def auth_header(
    ctx: typer.Context,
    origin: str = typer.Argument(help="Origin the credential is stored under (host[:port])."),
    url: str = typer.Argument(help="Request URL."),
) -> None:
    """Show which auth scheme and header a request would get.

    Example::

        pkgnet auth header gitlab.com https://gitlab.com/api/v4/projects/1
    """
    with handle_errors():
        io, config = open_session(ctx)
        negotiator = CredentialNegotiator(io, config)
        scheme = negotiator.select_scheme(origin, url)
        lines = negotiator.add_authentication_header([], origin, url)
        credential = None
        if io.has_authentication(origin):
            credential = io.get_authentication(origin).masked().model_dump()

    if not lines:
        info(f"No authentication header for {origin}")
    format_response({
        "origin": origin,
        "scheme": scheme.value,
        "credential": credential,
        "header": mask_header(lines[0]) if lines else None,
    })


@auth_app.command("store")
def auth_store(
    ctx: typer.Context,
    origin: str = typer.Argument(help="Origin to store credentials for (host[:port])."),
    username: str = typer.Option(..., "--username", "-u", help="User name or token."),
    password: str = typer.Option(..., "--password", "-P", help="Password or token marker."),
    store: Optional[str] = typer.Option(
        None, "--store", help="yes, no or prompt. Defaults to the store-auths setting."
    ),
) -> None:
    """Remember credentials for ORIGIN in the auth file.

    Example::

        pkgnet auth store repo.example.org -u alice -P s3cret --store yes
    """
    with handle_errors():
        if store is not None and store not in _STORE_CHOICES:
            raise InvalidUsageError(f"--store must be one of: {', '.join(_STORE_CHOICES)}")

        io, config = open_session(ctx)
        io.set_authentication(origin, username, password)
        mode = _STORE_CHOICES[store] if store is not None else config.get_store_auths()

        negotiator = CredentialNegotiator(io, config)
        stored = negotiator.store_auth(origin, mode)
        source = config.get_auth_config_source()

    if stored:
        success(f"Credentials for {origin} stored in {source.get_name()}")
    else:
        info(f"Credentials for {origin} not stored.")
