"""Abstract base class for authentication scheme rules.

This module defines the two foundational types of the auth subsystem:

- :class:`AuthRequest` -- everything a rule may look at when deciding whether
  it applies: the origin, the target URL, the stored credential, and the
  configured GitHub/GitLab domains.
- :class:`SchemeRule` -- the abstract base class every scheme extends.

Rules are evaluated in order by
:class:`~pkgnet.auth.negotiator.CredentialNegotiator`; the first one whose
:meth:`~SchemeRule.matches` returns ``True`` decides the header. To support
a new scheme, subclass :class:`SchemeRule` and insert it into the list built
by :func:`~pkgnet.auth.rules.create_default_rules` ahead of the HTTP basic
fallback.

See Also:
    :mod:`pkgnet.auth.rules` for the built-in rules.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from pkgnet.models import AuthScheme, Credential


@dataclass(frozen=True)
class AuthRequest:
    """Input to scheme selection for one outgoing request.

    Args:
        origin: Host (optionally ``host:port``) the credential is stored under.
        url: Full URL of the request.
        credential: The credential stored for *origin*.
        gitlab_domains: Origins configured as GitLab instances.
        github_domains: Origins configured as GitHub instances.
    """

    origin: str
    url: str
    credential: Credential
    gitlab_domains: tuple[str, ...] = field(default=())
    github_domains: tuple[str, ...] = field(default=("github.com",))


class SchemeRule(ABC):
    """One row of the scheme dispatch table.

    Every concrete rule must provide:

    1. A :attr:`scheme` property naming the :class:`~pkgnet.models.AuthScheme`
       it selects.
    2. A :meth:`matches` predicate over an :class:`AuthRequest`.
    3. A :meth:`header` producing the ``"Name: value"`` line to append, or
       ``None`` when the request must go out without credentials.

    :meth:`debug_message` is written to the debug channel when the rule is
    chosen. It must never contain the secret half of the credential.
    """

    @property
    @abstractmethod
    def scheme(self) -> AuthScheme:
        """Return the scheme this rule selects."""
        ...

    @abstractmethod
    def matches(self, request: AuthRequest) -> bool:
        """Return ``True`` if this rule applies to *request*."""
        ...

    @abstractmethod
    def header(self, credential: Credential) -> Optional[str]:
        """Return the header line to append, or ``None`` to send nothing."""
        ...

    def debug_message(self, credential: Credential) -> Optional[str]:
        """Return the debug line logged when this rule is chosen."""
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} scheme={self.scheme.value}>"
