"""IRC nick derivation for Matrix users connecting to IRC."""

from __future__ import annotations

from ircbridge.core.constants import (
    DISPLAY,
    ILLEGAL_NICK_CHARS_RE,
    LOCALPART,
    SERVER_SEPARATOR,
    USERID,
)
from ircbridge.core.errors import AllCharactersInvalidError
from ircbridge.templates import render_template


def strip_illegal_nick_chars(text: str) -> str:
    """Remove every character that may not appear in an IRC nick."""
    return ILLEGAL_NICK_CHARS_RE.sub("", text)


def user_id_localpart(user_id: str) -> str:
    """``@alice:example.org`` -> ``alice``."""
    return user_id[1:].split(SERVER_SEPARATOR)[0]


def derive_nick(user_id: str, display_name: str | None, nick_template: str) -> str:
    """Build an IRC nick for ``user_id`` from ``nick_template``.

    The display name is preferred when anything survives sanitising it,
    otherwise the user ID localpart is used. ``$USERID`` is substituted with
    the raw user ID and ``$LOCALPART`` with the sanitised localpart.

    Raises AllCharactersInvalidError when neither yields a legal character.
    """
    localpart = strip_illegal_nick_chars(user_id_localpart(user_id))
    display = strip_illegal_nick_chars(display_name) if display_name else ""
    chosen = display or localpart
    if not chosen:
        raise AllCharactersInvalidError(user_id)
    return render_template(
        nick_template,
        {USERID: user_id, LOCALPART: localpart, DISPLAY: chosen},
    )
