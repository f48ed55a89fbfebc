"""Canonical Pydantic models shared across all pkgnet modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Credentials** -- :class:`Credential` and the :class:`AuthScheme` variants
selected for it by :mod:`pkgnet.auth`.

**Proxy resolution** -- :class:`ProxyEndpoint` (a parsed proxy URL) and
:class:`RequestProxy` (the per-request answer of
:class:`~pkgnet.proxy.manager.ProxyManager`).

**Configuration** -- :class:`NetworkSettings`, serialised under the ``config``
key of ``config.json``.
"""

from __future__ import annotations

import enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Credentials ---


TOKEN_PASSWORD_MARKERS = frozenset(
    {"bearer", "x-oauth-basic", "oauth2", "private-token", "gitlab-ci-token"}
)
"""``password`` values meaning "the token is in ``username``"."""

BITBUCKET_TOKEN_USERNAME = "x-token-auth"
"""``username`` value meaning "the Bitbucket token is in ``password``"."""


class AuthScheme(str, enum.Enum):
    """Authentication strategies the negotiator can pick for a request.

    Exactly one applies to every ``(origin, credential, url)`` triple;
    ``NONE`` means the request is sent without credentials even though some
    are stored (public Bitbucket downloads).
    """

    BEARER = "bearer"
    GITHUB_TOKEN = "github_token"
    GITLAB_OAUTH = "gitlab_oauth"
    GITLAB_PRIVATE_TOKEN = "gitlab_private_token"
    BITBUCKET_OAUTH = "bitbucket_oauth"
    HTTP_BASIC = "http_basic"
    NONE = "none"


class Credential(BaseModel):
    """A username/password pair stored for one origin.

    Token-based schemes overload the two fields: the token lives in one of
    them and the other carries a fixed marker that selects the scheme.

    ======================  ==================  ==================================
    scheme                  ``username``        ``password``
    ======================  ==================  ==================================
    bearer                  token               ``"bearer"``
    GitHub token            token               ``"x-oauth-basic"``
    GitLab OAuth            token               ``"oauth2"``
    GitLab private token    token               ``"private-token"`` /
                                                ``"gitlab-ci-token"``
    Bitbucket OAuth         ``"x-token-auth"``  token
    HTTP basic              user name           password
    ======================  ==================  ==================================

    Credential stores and config files rely on this shape, so it is kept
    as-is rather than split into per-scheme models.
    """

    username: str
    password: str = ""

    @property
    def secret_in_username(self) -> bool:
        """Whether ``username`` carries the secret (token schemes)."""
        return self.password in TOKEN_PASSWORD_MARKERS

    def masked(self) -> Credential:
        """Return a copy with the secret half replaced by ``***``."""
        if self.secret_in_username:
            return Credential(username="***", password=self.password)
        if not self.password:
            return Credential(username=self.username)
        return Credential(username=self.username, password="***")


# --- Proxy resolution ---


class ProxyEndpoint(BaseModel):
    """A proxy URL that passed validation.

    Built only by :func:`pkgnet.proxy.url.parse_proxy_url`. ``user`` and
    ``password`` hold percent-decoded values; ``userinfo`` keeps the text
    exactly as it appeared in the environment. ``port`` is ``None`` when the
    URL names none; the caller picks the default for the route it builds.
    """

    model_config = ConfigDict(frozen=True)

    raw_url: str
    scheme: Literal["http", "https"]
    host: str
    port: Optional[int] = None
    user: Optional[str] = None
    password: Optional[str] = None
    userinfo: Optional[str] = None

    @property
    def has_userinfo(self) -> bool:
        return self.user is not None

    def host_port(self, default_port: int) -> str:
        """``host:port`` with IPv6 literals bracketed."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port if self.port is not None else default_port}"

    def to_url(self, default_port: int) -> str:
        """Reassemble ``scheme://[userinfo@]host:port`` with an explicit port."""
        auth = f"{self.userinfo}@" if self.userinfo is not None else ""
        return f"{self.scheme}://{auth}{self.host_port(default_port)}"


class RequestProxy(BaseModel):
    """How a single request should be routed.

    Attributes:
        url: Proxy URL to connect through; empty string means "direct".
        context_options: Stream-context style options keyed by ``"http"``
            (``proxy``, and for plain-http targets ``header`` and
            ``request_fulluri``).
        secure: Whether the proxied target is reached over TLS.
        formatted_url: Human-readable description with any password masked.
    """

    model_config = ConfigDict(frozen=True)

    url: str = ""
    context_options: dict[str, Any] = Field(default_factory=dict)
    secure: bool = False
    formatted_url: str = ""

    @classmethod
    def none(cls) -> RequestProxy:
        """A direct connection: no proxy configured for this scheme."""
        return cls()

    @classmethod
    def no_proxy(cls) -> RequestProxy:
        """A direct connection because the host is listed in ``no_proxy``."""
        return cls(formatted_url="excluded by no_proxy")

    @property
    def is_proxied(self) -> bool:
        return bool(self.url)

    def httpx_proxy(self) -> Optional[str]:
        """Proxy URL in the form ``httpx.Client(proxy=...)`` expects."""
        return self.url or None


# --- Configuration ---


class NetworkSettings(BaseModel):
    """Settings read from the ``config`` section of ``config.json``.

    Keys use the hyphenated spelling on disk (``gitlab-domains``); the
    Python attribute names are accepted as well.

    Example::

        NetworkSettings.model_validate(
            {"gitlab-domains": ["gitlab.com", "git.example.org"]}
        )
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    gitlab_domains: list[str] = Field(
        default_factory=lambda: ["gitlab.com"],
        alias="gitlab-domains",
        description="Origins treated as GitLab instances",
    )
    github_domains: list[str] = Field(
        default_factory=lambda: ["github.com"],
        alias="github-domains",
        description="Origins treated as GitHub instances",
    )
    store_auths: Union[bool, Literal["prompt"]] = Field(
        default="prompt",
        alias="store-auths",
        description="Persist new credentials: true, false or prompt",
    )
