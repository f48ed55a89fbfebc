"""Built-in scheme rules and the ordered dispatch table.

The table, first match wins:

=====  ======================================================  =====================
 #     condition                                               header
=====  ======================================================  =====================
 1     ``password == "bearer"``                                ``Authorization: Bearer <username>``
 2     GitHub origin, ``password == "x-oauth-basic"``          ``Authorization: token <username>``
 3     GitLab origin, ``password == "oauth2"``                 ``Authorization: Bearer <username>``
 4     GitLab origin, private / CI token marker                ``PRIVATE-TOKEN: <username>``
 5     ``bitbucket.org``, public download URL                  none
 6     ``bitbucket.org``, ``username == "x-token-auth"``       ``Authorization: Bearer <password>``
 7     anything else                                           ``Authorization: Basic <b64>``
=====  ======================================================  =====================

Rule 7 matches unconditionally, which makes selection total.
"""

from __future__ import annotations

import base64
from typing import Optional, Sequence
from urllib.parse import urlsplit

from pkgnet.auth.base import AuthRequest, SchemeRule
from pkgnet.models import BITBUCKET_TOKEN_USERNAME, AuthScheme, Credential

BITBUCKET_ORIGIN = "bitbucket.org"
BITBUCKET_UPLOADS_HOST = "bbuseruploads.s3.amazonaws.com"
BITBUCKET_OAUTH2_ACCESS_TOKEN_URL = "https://bitbucket.org/site/oauth2/access_token"
GITHUB_ORIGIN = "github.com"

GITLAB_PRIVATE_TOKEN_MARKERS = frozenset({"private-token", "gitlab-ci-token"})


def is_public_bitbucket_download(url: str) -> bool:
    """Return ``True`` if *url* is a publicly fetchable Bitbucket download.

    Two shapes qualify: ``https://bitbucket.org/<user>/<repo>/downloads/...``
    and anything on the upload bucket ``bbuseruploads.s3.amazonaws.com``
    that those downloads redirect to. Attaching a token to either is never
    needed.
    """
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return False
    if not host:
        return False
    if host == BITBUCKET_UPLOADS_HOST:
        return True
    if host != BITBUCKET_ORIGIN and not host.endswith("." + BITBUCKET_ORIGIN):
        return False
    # "/user/repo/downloads/file" -> ["", "user", "repo", "downloads", "file"]
    segments = parts.path.split("/")
    return len(segments) >= 4 and segments[3] == "downloads"


def _basic(username: str, password: str) -> str:
    raw = f"{username}:{password}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


class BearerRule(SchemeRule):
    """Generic bearer token: the token is in ``username``."""

    @property
    def scheme(self) -> AuthScheme:
        return AuthScheme.BEARER

    def matches(self, request: AuthRequest) -> bool:
        return request.credential.password == "bearer"

    def header(self, credential: Credential) -> Optional[str]:
        return f"Authorization: Bearer {credential.username}"


class GitHubTokenRule(SchemeRule):
    """GitHub OAuth / personal access token."""

    @property
    def scheme(self) -> AuthScheme:
        return AuthScheme.GITHUB_TOKEN

    def matches(self, request: AuthRequest) -> bool:
        is_github = request.origin == GITHUB_ORIGIN or request.origin in request.github_domains
        return is_github and request.credential.password == "x-oauth-basic"

    def header(self, credential: Credential) -> Optional[str]:
        return f"Authorization: token {credential.username}"

    def debug_message(self, credential: Credential) -> Optional[str]:
        return "Using GitHub token authentication"


class GitLabOAuthRule(SchemeRule):
    """GitLab OAuth access token, sent as a bearer token."""

    @property
    def scheme(self) -> AuthScheme:
        return AuthScheme.GITLAB_OAUTH

    def matches(self, request: AuthRequest) -> bool:
        return request.origin in request.gitlab_domains and request.credential.password == "oauth2"

    def header(self, credential: Credential) -> Optional[str]:
        return f"Authorization: Bearer {credential.username}"

    def debug_message(self, credential: Credential) -> Optional[str]:
        return "Using GitLab OAuth token authentication"


class GitLabPrivateTokenRule(SchemeRule):
    """GitLab personal or CI job token, sent in GitLab's own header."""

    @property
    def scheme(self) -> AuthScheme:
        return AuthScheme.GITLAB_PRIVATE_TOKEN

    def matches(self, request: AuthRequest) -> bool:
        return (
            request.origin in request.gitlab_domains
            and request.credential.password in GITLAB_PRIVATE_TOKEN_MARKERS
        )

    def header(self, credential: Credential) -> Optional[str]:
        return f"PRIVATE-TOKEN: {credential.username}"

    def debug_message(self, credential: Credential) -> Optional[str]:
        return "Using GitLab private token authentication"


class BitbucketPublicDownloadRule(SchemeRule):
    """Public Bitbucket downloads go out without credentials."""

    @property
    def scheme(self) -> AuthScheme:
        return AuthScheme.NONE

    def matches(self, request: AuthRequest) -> bool:
        return request.origin == BITBUCKET_ORIGIN and is_public_bitbucket_download(request.url)

    def header(self, credential: Credential) -> Optional[str]:
        return None


class BitbucketOAuthRule(SchemeRule):
    """Bitbucket OAuth access token: the token is in ``password``.

    The access-token endpoint itself is excluded; it expects the consumer
    key and secret as HTTP basic credentials.
    """

    @property
    def scheme(self) -> AuthScheme:
        return AuthScheme.BITBUCKET_OAUTH

    def matches(self, request: AuthRequest) -> bool:
        return (
            request.origin == BITBUCKET_ORIGIN
            and request.url != BITBUCKET_OAUTH2_ACCESS_TOKEN_URL
            and request.credential.username == BITBUCKET_TOKEN_USERNAME
        )

    def header(self, credential: Credential) -> Optional[str]:
        return f"Authorization: Bearer {credential.password}"

    def debug_message(self, credential: Credential) -> Optional[str]:
        return "Using Bitbucket OAuth token authentication"


class HttpBasicRule(SchemeRule):
    """HTTP basic authentication per :rfc:`7617`; matches everything."""

    @property
    def scheme(self) -> AuthScheme:
        return AuthScheme.HTTP_BASIC

    def matches(self, request: AuthRequest) -> bool:
        return True

    def header(self, credential: Credential) -> Optional[str]:
        return f"Authorization: Basic {_basic(credential.username, credential.password)}"

    def debug_message(self, credential: Credential) -> Optional[str]:
        return f'Using HTTP basic authentication with username "{credential.username}"'


def create_default_rules() -> list[SchemeRule]:
    """Return the built-in rules in evaluation order."""
    return [
        BearerRule(),
        GitHubTokenRule(),
        GitLabOAuthRule(),
        GitLabPrivateTokenRule(),
        BitbucketPublicDownloadRule(),
        BitbucketOAuthRule(),
        HttpBasicRule(),
    ]


def select_rule(request: AuthRequest, rules: Optional[Sequence[SchemeRule]] = None) -> SchemeRule:
    """Return the first rule matching *request*.

    Falls back to :class:`HttpBasicRule` if a custom *rules* list has no
    catch-all.
    """
    for rule in rules if rules is not None else create_default_rules():
        if rule.matches(request):
            return rule
    return HttpBasicRule()


def classify(
    origin: str,
    credential: Credential,
    url: str,
    gitlab_domains: Sequence[str] = (),
    github_domains: Sequence[str] = (GITHUB_ORIGIN,),
) -> AuthScheme:
    """Pure scheme selection over the default table.

    Example::

        >>> classify("example.org", Credential(username="tok", password="bearer"), "https://example.org/")
        <AuthScheme.BEARER: 'bearer'>
    """
    request = AuthRequest(
        origin=origin,
        url=url,
        credential=credential,
        gitlab_domains=tuple(gitlab_domains),
        github_domains=tuple(github_domains),
    )
    return select_rule(request).scheme
