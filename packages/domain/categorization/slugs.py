"""
Slug and display-name helpers for categories
"""
import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """
    Lowercase, collapse non-alphanumeric runs to one hyphen, trim hyphens.

    "Men Jackets" → "men-jackets", "  Kid's  " → "kid-s"
    """
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


def display_name(tag: str) -> str:
    """First letter upper-cased, rest untouched ("men" → "Men")."""
    return tag[:1].upper() + tag[1:]


def default_description(tag: str) -> str:
    return f"{display_name(tag)} clothing and accessories"
