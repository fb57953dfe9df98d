"""
Name resolver converting schema names into declaration identifiers.

Schema names such as "users_user_full" or "account.getInfo" become
"UsersUserFull" and "AccountGetInfo"; well-known abbreviations are then
corrected ("user_id" -> "UserID").
"""

from __future__ import annotations

import keyword
import re

SEPARATORS = ("_", " ", ".")

# Substitutions applied after capitalization, in priority order. At each
# position the first entry that matches wins and matches never overlap, so
# the table is not idempotent: callers case each raw name exactly once.
ABBREVIATIONS: tuple[tuple[str, str], ...] = (
    ("_", ""),
    (" ", ""),
    (".", ""),
    ("2fa", "TwoFA"),
    ("json", "JSON"),
    ("Json", "JSON"),
    ("Id", "ID"),
    ("Ttl", "TTL"),
    ("Sdk", "SDK"),
    ("Vk", "VK"),
    ("Tv", "TV"),
    ("Url", "URL"),
)


class IdentifierCaser:
    """Converts schema names to identifiers, caching each result."""

    def __init__(self, enabled: bool = True, abbreviations: tuple[tuple[str, str], ...] = ABBREVIATIONS):
        """
        Initialize the caser.

        Args:
            enabled: When False names are returned unchanged
            abbreviations: Ordered (old, new) substitutions
        """
        self.enabled = enabled
        self._replacements = dict(abbreviations)
        self._pattern = re.compile("|".join(re.escape(old) for old, _ in abbreviations))
        self._cache: dict[str, str] = {}

    def case(self, name: str) -> str:
        """Convert a raw schema name to an identifier."""
        if not self.enabled:
            return name
        if not name:
            raise ValueError("cannot case an empty name")

        cached = self._cache.get(name)
        if cached is None:
            cached = self._cache[name] = self._convert(name)
        return cached

    def _convert(self, name: str) -> str:
        chars = list(name)
        chars[0] = chars[0].upper()
        for i in range(len(chars) - 1):
            if chars[i] in SEPARATORS:
                chars[i + 1] = chars[i + 1].upper()
        return self._pattern.sub(lambda m: self._replacements[m.group(0)], "".join(chars))


def escape_keyword(name: str) -> str:
    """Escape a Python reserved word with a trailing underscore."""
    if keyword.iskeyword(name):
        return f"{name}_"
    return name
