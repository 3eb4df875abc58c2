# services/catalog/src/catalog/text.py
"""Display and search text helpers used by the catalog query builders."""

import re
from typing import Any, Dict, List, Optional

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_WORD_START = re.compile(r"\b\w", re.ASCII)
_NON_NAME_CHARS = re.compile(r"[^\w\s-]", re.ASCII)

OMITTED_MANUFACTURER_FIELDS = ("authorized_distributor",)


def _capitalize_first(word: str) -> str:
    return word[:1].upper() + word[1:]


def capitalize_words(text: Optional[str]) -> Optional[str]:
    """
    Turn a spec name into a display title.

    snake_case is lower-cased and title-cased word by word. Anything else is
    treated as camelCase: only the first lower->upper boundary gets a space,
    then every word start is upper-cased.

    >>> capitalize_words("firstName")
    'First Name'
    >>> capitalize_words("first_name")
    'First Name'

    Returns None for empty input.
    """
    if not text:
        return None

    if "_" in text:
        words = text.replace("_", " ").lower().split(" ")
        return " ".join(_capitalize_first(word) for word in words)

    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", text, count=1)
    return _WORD_START.sub(lambda m: m.group(0).upper(), spaced)


def like_name(name: str = "", type: str = "") -> str:
    """
    Fuzzy prefix of a product name used to seed "related products" search.

    Keeps half of the name, plus half of the product type when the name
    starts with it, and drops punctuation.
    """
    name = name or ""
    type = type or ""

    length = len(name) // 2
    if name.startswith(type):
        length += len(type) // 2

    return _NON_NAME_CHARS.sub("", name[:length])


def _manufacturer_variants(manufacturer: Any) -> List[str]:
    if not manufacturer or not isinstance(manufacturer, str):
        return []
    words = manufacturer.split(" ")
    if len(words) <= 1:
        return words
    return [manufacturer, "-".join(words)]


def format_manufacturer_values(value: Any) -> List[str]:
    """
    Expand manufacturer names into display and slug variants.

    "Acme Corp" -> ["Acme Corp", "Acme-Corp"]; single words stay as they are.
    Lists are expanded item by item.
    """
    if isinstance(value, list):
        formatted: List[str] = []
        for item in value:
            formatted.extend(_manufacturer_variants(item))
        return formatted
    if value:
        return _manufacturer_variants(value)
    return []


def format_manufacturer_objects(manufacturers: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Copies of manufacturer records without internal distributor data."""
    return [
        {k: v for k, v in manufacturer.items() if k not in OMITTED_MANUFACTURER_FIELDS}
        for manufacturer in manufacturers
    ]
