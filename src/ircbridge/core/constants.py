"""Template placeholders and IRC naming constants."""

from __future__ import annotations

import re

# Template placeholders
SERVER = "$SERVER"
NICK = "$NICK"
CHANNEL = "$CHANNEL"
DISPLAY = "$DISPLAY"
USERID = "$USERID"
LOCALPART = "$LOCALPART"

# Separates a Matrix localpart from its homeserver
SERVER_SEPARATOR = ":"

# Anything outside RFC 2812 nick characters
ILLEGAL_NICK_CHARS_RE = re.compile(r"[^A-Za-z0-9\]\[\^\\{}\-`_|]")

# +localpart:domain, matched with fullmatch
GROUP_ID_RE = re.compile(r"\+\S+:\S+")
