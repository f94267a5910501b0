"""Canonical demolition item categories."""

ALLOWED_CATEGORIES: frozenset[str] = frozenset({
    "wall",
    "ceiling",
    "floor",
    "electrical",
    "plumbing",
    "cleanup",
    "door",
    "window",
    "fixture",
    "hvac",
    "structural",
    "interior",
    "exterior",
    "other",
    "signage",
    "storefront",
    "fire protection",
    "mechanical",
})

DEFAULT_CATEGORY = "other"

# Keys are lowercase; lookups are case-insensitive.
CATEGORY_ALIASES: dict[str, str] = {
    "hvac": "hvac",
    "mep": "electrical",
    "storefront": "storefront",
    "signage": "signage",
    "demolition": "other",
    "mechanical": "mechanical",
    "walls": "wall",
    "ceilings": "ceiling",
    "flooring": "floor",
    "floors": "floor",
    "doors": "door",
    "windows": "window",
    "fixtures": "fixture",
    "clean up": "cleanup",
    "clean-up": "cleanup",
    "fire": "fire protection",
    "fire-protection": "fire protection",
    "sprinkler": "fire protection",
    "sprinklers": "fire protection",
}


def normalize_category(text: object) -> str:
    """Map free-text category to one of ALLOWED_CATEGORIES.

    Comma-separated input uses its first entry. Unknown values become "other".
    """
    if not isinstance(text, str):
        return DEFAULT_CATEGORY
    first = text.split(",", 1)[0].strip().lower()
    category = CATEGORY_ALIASES.get(first, first)
    if category in ALLOWED_CATEGORIES:
        return category
    return DEFAULT_CATEGORY
