"""Credential negotiation for outgoing requests.

This package decides which authentication scheme applies to a request --
generic bearer tokens, GitHub tokens, GitLab OAuth and private tokens,
Bitbucket OAuth, or HTTP basic -- and shapes the matching header. It never
attaches credentials to public Bitbucket downloads.

The main entry points are:

- :class:`CredentialNegotiator` -- appends the auth header for an origin and
  persists credentials with optional confirmation.
- :class:`SchemeRule` -- abstract base class for one row of the dispatch table.
- :func:`create_default_rules` -- the built-in table in evaluation order.
- :func:`classify` -- pure scheme selection, handy for diagnostics.

Typical usage::

    from pkgnet.auth import CredentialNegotiator

    negotiator = CredentialNegotiator(io, config)
    headers = negotiator.add_authentication_header(headers, origin, url)
"""

from pkgnet.auth.base import AuthRequest, SchemeRule
from pkgnet.auth.negotiator import CredentialNegotiator, validate_yes_no
from pkgnet.auth.rules import classify, create_default_rules, is_public_bitbucket_download

__all__ = [
    "AuthRequest",
    "CredentialNegotiator",
    "SchemeRule",
    "classify",
    "create_default_rules",
    "is_public_bitbucket_download",
    "validate_yes_no",
]
