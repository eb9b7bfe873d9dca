"""Text helpers that mirror how the admin UI derives labels and paths."""

from __future__ import annotations

import re


_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_SEPARATORS = re.compile(r"[\s_\-.]+")

_UNCOUNTABLE = {"data", "equipment", "information", "media", "news", "series", "species"}


def titlecase(text: str) -> str:
    """Capitalise the first letter of every word: "post category" -> "Post Category"."""
    words = _SEPARATORS.split(text.strip())
    return " ".join(word[:1].upper() + word[1:] for word in words if word)


def key_to_label(key: str) -> str:
    """Turn a key into a human label.

    >>> key_to_label("postCategory")
    'Post Category'
    >>> key_to_label("user_accounts")
    'User Accounts'
    """
    spaced = _ACRONYM_BOUNDARY.sub(r"\1 \2", key)
    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", spaced)
    return titlecase(spaced)


def pluralize(word: str) -> str:
    """English plural for list paths ("Category" -> "Categories")."""
    if not word or word.lower() in _UNCOUNTABLE:
        return word
    lower = word.lower()
    if lower.endswith(("ss", "sh", "ch", "x", "z")):
        return word + "es"
    if lower.endswith("s"):
        return word
    if lower.endswith("y") and len(word) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


def key_to_path(key: str, plural: bool = False) -> str:
    """Turn a key into a url path segment: key_to_path("PostCategory", True) -> "post-categories"."""
    words = key_to_label(key).split(" ")
    if plural and words and words[-1]:
        words[-1] = pluralize(words[-1])
    return "-".join(word.lower() for word in words if word)
