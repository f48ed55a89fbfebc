"""Credential negotiator -- picks and applies the auth scheme for a request.

The :class:`CredentialNegotiator` is what the HTTP transport calls right
before sending a request. It looks up the credential stored for the origin
in the session's :class:`~pkgnet.console.ConsoleIO`, walks the rule table from
:mod:`pkgnet.auth.rules`, and appends the resulting header. It also owns the
"remember these credentials?" workflow (:meth:`~CredentialNegotiator.store_auth`).

The negotiator never performs network I/O. Its side effects are limited to
the auth config source and the debug channel.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

from pkgnet.auth.base import AuthRequest, SchemeRule
from pkgnet.auth.rules import create_default_rules, is_public_bitbucket_download, select_rule
from pkgnet.config import Config, JsonConfigSource
from pkgnet.console import ConsoleIO, Verbosity
from pkgnet.exceptions import ValidationError
from pkgnet.models import AuthScheme

StoreAuth = Union[bool, str]


def validate_yes_no(value: Optional[str]) -> str:
    """Normalise a ``[Yn]`` answer to ``"y"`` or ``"n"``; blank means ``"y"``.

    Raises:
        ValidationError: For any other answer.
    """
    answer = (value or "").strip().lower()
    if answer == "":
        return "y"
    if answer in ("y", "n"):
        return answer
    raise ValidationError("Please answer (y)es or (n)o")


class CredentialNegotiator:
    """Attach authentication to outgoing requests and persist credentials.

    Args:
        io: Session IO; its credential store is queried, never written.
        config: Effective configuration (``gitlab-domains``,
            ``github-domains``, auth config source).
        rules: Dispatch table override; defaults to
            :func:`~pkgnet.auth.rules.create_default_rules`.

    Example::

        negotiator = CredentialNegotiator(io, config)
        headers = negotiator.add_authentication_header(
            ["Accept: application/json"], "gitlab.com", "https://gitlab.com/api/v4/projects"
        )
    """

    def __init__(
        self,
        io: ConsoleIO,
        config: Config,
        rules: Optional[Sequence[SchemeRule]] = None,
    ) -> None:
        self._io = io
        self._config = config
        self._rules = list(rules) if rules is not None else create_default_rules()

    def add_authentication_header(self, headers: list[str], origin: str, url: str) -> list[str]:
        """Return *headers* with the authentication header for *origin* appended.

        When no credential is stored for *origin*, or the URL is a public
        Bitbucket download, *headers* itself is returned untouched.
        Otherwise a new list is returned; the input is never mutated.

        Args:
            headers: ``"Name: value"`` header lines.
            origin: Host (optionally ``host:port``) credentials are keyed by.
            url: Full request URL.
        """
        request = self._build_request(origin, url)
        if request is None:
            return headers

        rule = select_rule(request, self._rules)
        line = rule.header(request.credential)
        if line is None:
            return headers

        message = rule.debug_message(request.credential)
        if message:
            self._io.write_error(message, True, Verbosity.DEBUG)
        return [*headers, line]

    def select_scheme(self, origin: str, url: str) -> AuthScheme:
        """Return the scheme :meth:`add_authentication_header` would use."""
        request = self._build_request(origin, url)
        if request is None:
            return AuthScheme.NONE
        return select_rule(request, self._rules).scheme

    def is_public_bitbucket_download(self, url: str) -> bool:
        return is_public_bitbucket_download(url)

    def store_auth(self, origin: str, store_auth: StoreAuth) -> bool:
        """Persist the session credential for *origin* as ``http-basic.<origin>``.

        Args:
            origin: Origin whose credential to store.
            store_auth: ``False`` (do nothing), ``True`` (store), or
                ``"prompt"`` (ask once; ``y`` stores, ``n`` does nothing).

        Returns:
            Whether the credential was written.

        Raises:
            ValidationError: If the prompt answer is not ``y``/``n``/blank.
                Nothing is written in that case.
            ValueError: If *store_auth* is none of the accepted values.
        """
        if store_auth is False:
            return False
        if store_auth is True:
            self._persist(origin, self._config.get_auth_config_source())
            return True
        if store_auth != "prompt":
            raise ValueError(f"store_auth must be True, False or 'prompt', got {store_auth!r}")

        source = self._config.get_auth_config_source()
        question = f"Do you want to store credentials for {origin} in {source.get_name()} ? [Yn] "
        answer = self._io.ask_and_validate(question, validate_yes_no, 1, "y")
        if answer != "y":
            return False
        self._persist(origin, source)
        return True

    def _persist(self, origin: str, source: JsonConfigSource) -> None:
        credential = self._io.get_authentication(origin)
        source.add_config_setting(f"http-basic.{origin}", credential)
        self._io.write_error(f"Stored credentials for {origin} in {source.get_name()}", True, Verbosity.VERBOSE)

    def _build_request(self, origin: str, url: str) -> Optional[AuthRequest]:
        if not self._io.has_authentication(origin):
            return None
        return AuthRequest(
            origin=origin,
            url=url,
            credential=self._io.get_authentication(origin),
            gitlab_domains=tuple(self._config.get("gitlab-domains") or ()),
            github_domains=tuple(self._config.get("github-domains") or ()),
        )
