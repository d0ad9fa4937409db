"""
String helpers for deriving URI keys and labels from class names.

`PostRepository` -> uri key `posts`, label `Posts`;
`BlogPostRepository` -> uri key `blog-posts`, label `Blog Posts`.
"""
from __future__ import annotations

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATORS = re.compile(r"[\s_\-]+")


def snake(value: str, delimiter: str = "_") -> str:
    """Convert CamelCase / kebab-case / spaced text to snake_case."""
    value = _CAMEL_BOUNDARY.sub(" ", value.strip())
    parts = [p for p in _SEPARATORS.split(value) if p]
    return delimiter.join(p.lower() for p in parts)


def kebab(value: str) -> str:
    return snake(value, "-")


def pluralize(word: str) -> str:
    """Naive English pluralization, good enough for resource names."""
    if not word:
        return word
    lower = word.lower()
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    if lower.endswith("y") and len(word) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


def humanize(value) -> str:
    """Humanize a class, instance or identifier into a title-cased name."""
    if isinstance(value, type):
        value = value.__name__
    elif not isinstance(value, str):
        value = type(value).__name__
    return snake(value, " ").title()
