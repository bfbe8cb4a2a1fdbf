"""Text processing utilities.

Slug helpers used by the content hierarchy.
"""

import re
import unicodedata
from typing import Iterable

from vectorlab.utils.validators import SLUG_MAX_LENGTH

NON_ALNUM = re.compile(r"[^a-z0-9]+")

FALLBACK_SLUG = "item"


def slugify(title: str) -> str:
    """Lowercase, hyphenated slug of a title.

    Accents are stripped and runs of anything that is not a letter or digit
    become a single hyphen. Long titles are cut to the slug length limit.

    Examples:
        "Vectors" -> "vectors"
        "Álgebra Lineal: Bases" -> "algebra-lineal-bases"

    Args:
        title: Human-readable title

    Returns:
        Slug, "item" if nothing usable is left
    """
    decomposed = unicodedata.normalize("NFKD", title)
    ascii_only = decomposed.encode("ascii", "ignore").decode("ascii")
    slug = NON_ALNUM.sub("-", ascii_only.lower()).strip("-")
    slug = slug[:SLUG_MAX_LENGTH].rstrip("-")
    return slug or FALLBACK_SLUG


def _with_suffix(base: str, suffix: str, max_length: int) -> str:
    """``base + suffix``, shortening base so the result fits max_length."""
    head = base[: max_length - len(suffix)].rstrip("-")
    return f"{head}{suffix}"


def unique_slug(base: str, taken: Iterable[str], max_length: int = SLUG_MAX_LENGTH) -> str:
    """Make ``base`` unique by appending -2, -3, ... on collision.

    Suffixed candidates never exceed max_length; base is shortened instead.

    Args:
        base: Desired slug
        taken: Slugs already in use
        max_length: Longest slug allowed

    Returns:
        First free candidate among base, base-2, base-3, ...
    """
    used = set(taken)
    if base not in used:
        return base

    n = 2
    while _with_suffix(base, f"-{n}", max_length) in used:
        n += 1
    return _with_suffix(base, f"-{n}", max_length)
