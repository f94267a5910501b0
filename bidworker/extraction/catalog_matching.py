"""Matching of demolition items against a user's price catalog."""

import re
from dataclasses import replace

from bidworker.extraction.models import DemolitionItem, PriceCatalogEntry, PricesheetMatch

COMMON_TERMS: tuple[str, ...] = (
    "wall",
    "door",
    "ceiling",
    "floor",
    "electrical",
    "plumbing",
)

# Action words appear in nearly every line and never identify a catalog entry.
_STOPWORDS = frozenset({
    "the", "and", "for", "with", "all", "per", "from", "existing",
    "remove", "removal", "demo", "demolition", "dispose",
})
_WORD = re.compile(r"[a-z0-9]+")


def format_catalog_for_prompt(catalog: list[PriceCatalogEntry]) -> str:
    """Render the catalog as a reference list grouped by category."""
    if not catalog:
        return "No price catalog items available."
    grouped: dict[str, list[PriceCatalogEntry]] = {}
    for entry in catalog:
        grouped.setdefault(entry.category or "uncategorized", []).append(entry)
    sections = []
    for category, entries in grouped.items():
        lines = [f"{category.upper()}:"]
        lines.extend(f'- "{entry.name}" (Price: ${entry.price:.2f})' for entry in entries)
        sections.append("\n".join(lines))
    return "\n\n".join(sections)


def find_catalog_entry(
    match: PricesheetMatch,
    catalog: list[PriceCatalogEntry],
) -> PriceCatalogEntry | None:
    """Catalog entry an item's match points at, by id first and name second."""
    if not match.matched:
        return None
    if match.item_id:
        for entry in catalog:
            if entry.id is not None and entry.id == match.item_id:
                return entry
    if match.item_name:
        wanted = match.item_name.strip().lower()
        for entry in catalog:
            if entry.name.strip().lower() == wanted:
                return entry
    return None


def match_from_entry(entry: PriceCatalogEntry) -> PricesheetMatch:
    return PricesheetMatch(
        matched=True,
        item_name=entry.name,
        item_price=entry.price,
        item_id=entry.id,
    )


def enhance_catalog_matches(
    items: list[DemolitionItem],
    catalog: list[PriceCatalogEntry],
) -> list[DemolitionItem]:
    """Add catalog matches the model missed.

    Items that already carry a match are returned untouched. For the rest,
    the first catalog entry whose name contains the item text (or the other
    way round), shares a common demolition term, or shares a significant
    word is taken.
    """
    if not catalog:
        return list(items)
    enhanced = []
    for item in items:
        if item.pricesheet_match.matched:
            enhanced.append(item)
            continue
        entry = _fuzzy_match(item, catalog)
        if entry is None:
            enhanced.append(item)
        else:
            enhanced.append(replace(item, pricesheet_match=match_from_entry(entry)))
    return enhanced


def _fuzzy_match(
    item: DemolitionItem,
    catalog: list[PriceCatalogEntry],
) -> PriceCatalogEntry | None:
    text = f"{item.name} {item.description}".strip().lower()
    if not text:
        return None
    item_name = item.name.strip().lower()
    item_words = _significant_words(text)
    for entry in catalog:
        name = entry.name.strip().lower()
        if not name:
            continue
        if name in text or (item_name and item_name in name):
            return entry
        if any(term in text and term in name for term in COMMON_TERMS):
            return entry
        if item_words & _significant_words(name):
            return entry
    return None


def _significant_words(text: str) -> set[str]:
    return {
        word
        for word in _WORD.findall(text)
        if len(word) > 2 and word not in _STOPWORDS
    }
