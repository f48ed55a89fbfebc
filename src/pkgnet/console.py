"""Interactive IO: diagnostics, prompts, and the session credential store.

:class:`ConsoleIO` is the object the negotiator talks to for anything that
touches the user:

- **Credential store** -- credentials known for the current run, keyed by
  origin. Filled from the auth configuration by :meth:`load_configuration`,
  or at runtime by :meth:`set_authentication` (e.g. after a login prompt).
- **Diagnostics** -- :meth:`write_error` with a :class:`Verbosity` level,
  routed to the Rich-based :class:`~pkgnet.output.OutputManager`.
- **Prompts** -- :meth:`ask_and_validate`, backed by :func:`typer.prompt`.

The store is in memory only. Persisting a credential is the job of
:meth:`~pkgnet.auth.negotiator.CredentialNegotiator.store_auth`.
"""

from __future__ import annotations

import enum
import sys
from typing import Any, Callable, Optional

import typer

from pkgnet.config import Config
from pkgnet.exceptions import ValidationError
from pkgnet.models import Credential
from pkgnet.output import OutputManager, get_output


class Verbosity(enum.IntEnum):
    """Levels accepted by :meth:`ConsoleIO.write_error`.

    ``QUIET`` messages are always shown, ``NORMAL`` ones unless ``--quiet``
    is active, ``VERBOSE`` and ``DEBUG`` only with ``--verbose``.
    """

    QUIET = 1
    NORMAL = 2
    VERBOSE = 4
    DEBUG = 16


class ConsoleIO:
    """Terminal-backed IO with an in-memory credential store.

    Args:
        output: Output manager for diagnostics; the global one when ``None``.
        interactive: Whether prompts may read from the terminal. Defaults to
            ``sys.stdin.isatty()``.

    Example::

        io = ConsoleIO()
        io.set_authentication("repo.example.org", "alice", "s3cret")
        assert io.has_authentication("repo.example.org")
    """

    def __init__(
        self,
        output: Optional[OutputManager] = None,
        interactive: Optional[bool] = None,
    ) -> None:
        self._output = output
        self._interactive = sys.stdin.isatty() if interactive is None else interactive
        self._authentications: dict[str, Credential] = {}

    @property
    def output(self) -> OutputManager:
        return self._output if self._output is not None else get_output()

    def is_interactive(self) -> bool:
        return self._interactive

    # ------------------------------------------------------------------ #
    # Credential store
    # ------------------------------------------------------------------ #

    def has_authentication(self, origin: str) -> bool:
        return origin in self._authentications

    def get_authentication(self, origin: str) -> Credential:
        """Return the credential for *origin*.

        Raises:
            KeyError: If no credential is stored; check
                :meth:`has_authentication` first.
        """
        return self._authentications[origin]

    def set_authentication(self, origin: str, username: str, password: Optional[str] = None) -> None:
        self._authentications[origin] = Credential(username=username, password=password or "")

    def get_authentications(self) -> dict[str, Credential]:
        return dict(self._authentications)

    def load_configuration(self, config: Config) -> None:
        """Register every credential found in the auth configuration.

        Token sections are converted to the overloaded :class:`Credential`
        shape so the negotiator can tell the schemes apart:

        =================  ====================================================
        section            stored as
        =================  ====================================================
        ``http-basic``     ``{username, password}`` as given
        ``github-oauth``   ``(token, "x-oauth-basic")``
        ``gitlab-oauth``   ``(token, "oauth2")``
        ``gitlab-token``   ``(token, "private-token")``, or
                           ``(username, token)`` for ``{username, token}``
        ``bearer``         ``(token, "bearer")``
        =================  ====================================================
        """
        auth = config.get_auth_settings()

        for origin, token in _section(auth, "github-oauth").items():
            self.set_authentication(origin, str(token), "x-oauth-basic")

        for origin, token in _section(auth, "gitlab-oauth").items():
            if isinstance(token, dict):
                token = token.get("token", "")
            self.set_authentication(origin, str(token), "oauth2")

        for origin, token in _section(auth, "gitlab-token").items():
            if isinstance(token, dict):
                self.set_authentication(origin, str(token.get("username", "")), str(token.get("token", "")))
            else:
                self.set_authentication(origin, str(token), "private-token")

        for origin, creds in _section(auth, "http-basic").items():
            if isinstance(creds, dict):
                self.set_authentication(origin, str(creds.get("username", "")), creds.get("password"))

        for origin, token in _section(auth, "bearer").items():
            self.set_authentication(origin, str(token), "bearer")

    # ------------------------------------------------------------------ #
    # Diagnostics
    # ------------------------------------------------------------------ #

    def write_error(
        self,
        message: str,
        newline: bool = True,
        verbosity: Verbosity = Verbosity.NORMAL,
    ) -> None:
        """Write a diagnostic line to stderr if *verbosity* is enabled."""
        out = self.output
        if verbosity >= Verbosity.VERBOSE:
            out.debug(message, newline=newline)
        elif verbosity == Verbosity.NORMAL and out.is_quiet:
            return
        else:
            out.write(message, newline=newline)

    # ------------------------------------------------------------------ #
    # Prompts
    # ------------------------------------------------------------------ #

    def ask_and_validate(
        self,
        question: str,
        validator: Callable[[str], Any],
        attempts: Optional[int] = None,
        default: Optional[str] = None,
    ) -> Any:
        """Ask *question* until *validator* accepts the answer.

        The validator returns the normalised value or raises
        :class:`~pkgnet.exceptions.ValidationError`. A blank answer becomes
        *default*. When not interactive the default is validated and
        returned without prompting.

        Args:
            question: Prompt text, shown as-is.
            validator: Callable applied to each answer.
            attempts: Maximum number of answers; ``None`` means unlimited.
            default: Value used for blank answers.

        Raises:
            ValidationError: When the last allowed answer is rejected.
        """
        if not self._interactive:
            return validator(default or "")

        remaining = attempts
        while True:
            answer = typer.prompt(
                question,
                default=default or "",
                show_default=False,
                prompt_suffix="",
                err=True,
            )
            try:
                return validator(answer)
            except ValidationError as exc:
                if remaining is not None:
                    remaining -= 1
                    if remaining <= 0:
                        raise
                self.output.error(str(exc))


def _section(auth: dict[str, Any], name: str) -> dict[str, Any]:
    value = auth.get(name)
    return value if isinstance(value, dict) else {}
