"""Identity mapping: Matrix user IDs and aliases <-> IRC nicks and channels."""

from ircbridge.identity.nick import derive_nick, strip_illegal_nick_chars, user_id_localpart
from ircbridge.identity.resolver import IdentityResolver, NetworkIdentity

__all__ = [
    "IdentityResolver",
    "NetworkIdentity",
    "derive_nick",
    "strip_illegal_nick_chars",
    "user_id_localpart",
]
