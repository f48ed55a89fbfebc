"""pkgnet -- credential and proxy resolution for package-manager HTTP transports.

Before a package manager sends a request it asks two questions: should this
request go through a proxy, and which credentials (if any) may be attached to
it? This package answers both, and it can persist newly learned credentials
once the user agrees.

Typical usage::

    from pkgnet.auth import CredentialNegotiator
    from pkgnet.config import load_config
    from pkgnet.console import ConsoleIO
    from pkgnet.proxy import get_proxy_manager

    config = load_config()
    io = ConsoleIO()
    io.load_configuration(config)

    proxy = get_proxy_manager().get_proxy_for_request(url)
    headers = CredentialNegotiator(io, config).add_authentication_header(
        [], "github.com", url
    )

Modules:
    app: Typer application and CLI entry point.
    auth: Scheme rules and the credential negotiator.
    proxy: Proxy resolution from the environment.
    client: httpx-based transport wiring both together.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and JSON config sources.
    console: Interactive IO and the in-memory credential store.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
