"""Slug generation for post titles."""

import re
import unicodedata

FALLBACK_SLUG = "post"

_DISALLOWED = re.compile(r"[^\w\s-]")
_SEPARATOR_RUNS = re.compile(r"[-\s]+")


def generate_slug(title: str) -> str:
    """Turn a title into a URL-safe slug.

    Lowercases, folds diacritics to ASCII, drops anything that is not a word
    character, space, or hyphen, and collapses whitespace/hyphen runs into a
    single hyphen. Only hyphens are trimmed from the ends, so underscores
    (word characters) survive. Degenerate titles give an empty string.

    Same passes as ``django.utils.text.slugify``, which would also strip
    leading and trailing underscores.

    >>> generate_slug("Café com Leão!")
    'cafe-com-leao'
    >>> generate_slug("_init_ notes")
    '_init_-notes'
    """
    value = unicodedata.normalize("NFKD", str(title or "")).encode("ascii", "ignore").decode("ascii")
    value = _DISALLOWED.sub("", value.lower())
    return _SEPARATOR_RUNS.sub("-", value).strip("-")


def base_slug(title: str, max_length: int) -> str:
    """Slug used as the starting candidate when storing a post.

    Leaves room for a disambiguation suffix within ``max_length`` and falls
    back to ``FALLBACK_SLUG`` when the title yields nothing usable.
    """
    slug = generate_slug(title)[: max(1, max_length - 24)].strip("-")
    return slug or FALLBACK_SLUG


def with_suffix(slug: str, suffix: int | str) -> str:
    return f"{slug}-{suffix}"


__all__ = ["FALLBACK_SLUG", "base_slug", "generate_slug", "with_suffix"]
