"""Identifier templates: rendering and compilation to regular expressions.

A template is a literal string with placeholder tokens (``$SERVER``, ``$NICK``,
``$CHANNEL`` ...) that are find/replaced. Rendering substitutes concrete values.
Compiling substitutes some placeholders with literal values and others with
regex fragments, producing a pattern that recognises rendered identifiers.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Mapping

from cachetools import LRUCache, cached

# . * + ? ^ $ { } ( ) | [ ] \
_REGEX_METACHARS = re.compile(r"[.*+?^${}()|\[\]\\]")


def escape_regex(text: str) -> str:
    """Escape regex metacharacters so ``text`` matches only itself."""
    return _REGEX_METACHARS.sub(r"\\\g<0>", text)


def escaped_placeholder(placeholder: str) -> str:
    """Return ``placeholder`` as it appears after the template has been escaped once."""
    return escape_regex(placeholder)


def render_template(template: str, literal_vars: Mapping[str, str]) -> str:
    """Replace every occurrence of each placeholder with its value. No escaping."""
    rendered = template
    for placeholder, value in literal_vars.items():
        rendered = rendered.replace(placeholder, value)
    return rendered


def template_to_regex(
    template: str,
    literal_vars: Mapping[str, str],
    regex_vars: Mapping[str, str],
    suffix: str = "",
) -> str:
    """Turn a template into a regex pattern string.

    ``literal_vars`` are substituted first and escaped along with the rest of
    the template. ``regex_vars`` are substituted afterwards with raw regex
    fragments (e.g. a capture group). ``suffix`` is appended as-is, so callers
    must escape it if it should match literally.
    """
    regex = render_template(template, literal_vars)
    regex = escape_regex(regex)
    for placeholder, fragment in regex_vars.items():
        # The placeholder is now escaped inside the template, so the search
        # pattern is the escaped form, escaped again.
        search = re.compile(escape_regex(escaped_placeholder(placeholder)))
        regex = search.sub(lambda _m, fragment=fragment: fragment, regex)
    return regex + suffix


@cached(LRUCache(maxsize=256), lock=threading.Lock())
def _compile(
    template: str,
    literal_items: tuple[tuple[str, str], ...],
    regex_items: tuple[tuple[str, str], ...],
    suffix: str,
) -> re.Pattern[str]:
    return re.compile(template_to_regex(template, dict(literal_items), dict(regex_items), suffix))


def _items(mapping: Mapping[str, str]) -> tuple[tuple[str, str], ...]:
    return tuple(mapping.items())


def compile_template(
    template: str,
    literal_vars: Mapping[str, str],
    regex_vars: Mapping[str, str],
    suffix: str = "",
) -> re.Pattern[str]:
    """Compile a template to a pattern. Results are memoised per argument set."""
    return _compile(template, _items(literal_vars), _items(regex_vars), suffix)


def check_template_round_trip(pattern: re.Pattern[str], rendered: str, expected: str) -> bool:
    """True if ``pattern`` fully matches ``rendered`` and its first group is ``expected``."""
    if pattern.groups < 1:
        return False
    match = pattern.fullmatch(rendered)
    return match is not None and match.group(1) == expected

