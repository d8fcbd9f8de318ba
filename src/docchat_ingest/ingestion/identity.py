"""Content-addressed ids and index namespaces."""

from __future__ import annotations

import hashlib
import re
import unicodedata

_DISALLOWED = re.compile(r"[^A-Za-z0-9._/-]")


def content_id(text: str) -> str:
    """Return the MD5 hex digest of *text*.

    Used as the vector primary key: re-ingesting unchanged text overwrites
    the existing vector instead of adding a duplicate.
    """
    return hashlib.md5(text.encode("utf-8"), usedforsecurity=False).hexdigest()


def namespace_for_key(key: str) -> str:
    """Derive the index namespace for a storage key.

    Accents are folded to their ASCII base letter, remaining non-ASCII
    characters are dropped and anything outside ``[A-Za-z0-9._/-]`` becomes
    ``_``.  A key with no usable characters maps to ``ns-<md5 of key>``.
    """
    folded = unicodedata.normalize("NFKD", key).encode("ascii", "ignore").decode("ascii")
    namespace = _DISALLOWED.sub("_", folded)
    if not namespace.strip("_"):
        return f"ns-{content_id(key)}"
    return namespace
