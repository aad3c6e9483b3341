"""Template-driven mapping between IRC names and Matrix identifiers."""

from __future__ import annotations

import re
from dataclasses import dataclass

from loguru import logger

from ircbridge.core.constants import CHANNEL, NICK, SERVER, SERVER_SEPARATOR
from ircbridge.templates import (
    check_template_round_trip,
    compile_template,
    escape_regex,
    render_template,
    template_to_regex,
)

# Regex fragments substituted for the variable placeholder
_WILDCARD = ".*"
_NICK_CAPTURE = "(.*?)"
_ALIAS_CLAIM = "#(.*)"
_ALIAS_CAPTURE = "([^:]*)"

_SAMPLE_NICK = "sample"
_SAMPLE_CHANNEL = "#sample"


@dataclass(frozen=True)
class NetworkIdentity:
    """IRC network domain and the Matrix homeserver domain it is bridged to."""

    domain: str
    homeserver_domain: str

    @property
    def homeserver_suffix(self) -> str:
        """Literal ``:homeserver`` suffix of rendered identifiers."""
        return SERVER_SEPARATOR + self.homeserver_domain

    @property
    def homeserver_pattern(self) -> str:
        """Escaped ``:homeserver`` suffix for use in patterns."""
        return SERVER_SEPARATOR + escape_regex(self.homeserver_domain)


class IdentityResolver:
    """Claims, extracts and renders Matrix user IDs and room aliases for one network.

    Matching is anchored at both ends: an identifier is only claimed when it
    matches the whole template and ends with this network's homeserver.
    """

    def __init__(
        self,
        identity: NetworkIdentity,
        *,
        user_template: str,
        display_name_template: str,
        alias_template: str,
    ) -> None:
        self.identity = identity
        self.user_template = user_template
        self.display_name_template = display_name_template
        self.alias_template = alias_template

    @property
    def _literals(self) -> dict[str, str]:
        return {SERVER: self.identity.domain}

    def _user_pattern(self, fragment: str) -> re.Pattern[str]:
        return compile_template(
            self.user_template, self._literals, {NICK: fragment}, self.identity.homeserver_pattern
        )

    def _alias_pattern(self, fragment: str) -> re.Pattern[str]:
        return compile_template(
            self.alias_template, self._literals, {CHANNEL: fragment}, self.identity.homeserver_pattern
        )

    @staticmethod
    def _capture(pattern: re.Pattern[str], value: str) -> str | None:
        if pattern.groups < 1:
            return None
        match = pattern.fullmatch(value)
        if not match or not match.group(1):
            return None
        return match.group(1)

    # -- accounts ---------------------------------------------------------

    def claims_account(self, user_id: str) -> bool:
        """True if ``user_id`` is a virtual user belonging to this network."""
        return self._user_pattern(_WILDCARD).fullmatch(user_id) is not None

    def extract_local_from_account(self, user_id: str) -> str | None:
        """Extract the IRC nick encoded in ``user_id``, or None."""
        return self._capture(self._user_pattern(_NICK_CAPTURE), user_id)

    def render_account_id(self, nick: str) -> str:
        """Render the Matrix user ID for an IRC nick."""
        return self.account_local_part(nick, sigil=True) + self.identity.homeserver_suffix

    def account_local_part(self, nick: str, *, sigil: bool = False) -> str:
        """Render the user template for ``nick`` without the homeserver; strips the sigil by default."""
        uid = render_template(self.user_template, {NICK: nick, SERVER: self.identity.domain})
        return uid if sigil else uid[1:]

    def render_display_name(self, nick: str) -> str:
        """Render the Matrix display name for an IRC nick."""
        return render_template(self.display_name_template, {NICK: nick, SERVER: self.identity.domain})

    def user_regex(self) -> str:
        """Pattern matching every user ID in this network's namespace."""
        return template_to_regex(
            self.user_template, self._literals, {NICK: _WILDCARD}, self.identity.homeserver_pattern
        )

    # -- aliases ----------------------------------------------------------

    def claims_alias(self, alias: str) -> bool:
        """True if ``alias`` is a room alias belonging to this network."""
        return self._alias_pattern(_ALIAS_CLAIM).fullmatch(alias) is not None

    def extract_local_from_alias(self, alias: str) -> str | None:
        """Extract the IRC channel encoded in ``alias``, or None."""
        channel = self._capture(self._alias_pattern(_ALIAS_CAPTURE), alias)
        if channel is not None:
            logger.debug("Alias {} -> channel {}", alias, channel)
        return channel

    def render_alias(self, channel: str) -> str:
        """Render the Matrix room alias for an IRC channel."""
        alias = render_template(self.alias_template, {CHANNEL: channel, SERVER: self.identity.domain})
        return alias + self.identity.homeserver_suffix

    def alias_regex(self) -> str:
        """Pattern matching every alias in this network's namespace."""
        return template_to_regex(
            self.alias_template, self._literals, {CHANNEL: _WILDCARD}, self.identity.homeserver_pattern
        )

    # -- validation -------------------------------------------------------

    def self_test(self) -> list[str]:
        """Render a sample value through each template and extract it back.

        Returns the names of templates that fail the round trip; empty when
        all templates are usable.
        """
        failures: list[str] = []
        user_id = self.render_account_id(_SAMPLE_NICK)
        if not check_template_round_trip(self._user_pattern(_NICK_CAPTURE), user_id, _SAMPLE_NICK):
            failures.append("userTemplate")
        alias = self.render_alias(_SAMPLE_CHANNEL)
        if not check_template_round_trip(self._alias_pattern(_ALIAS_CAPTURE), alias, _SAMPLE_CHANNEL):
            failures.append("aliasTemplate")
        return failures
