# discovery/services/content_matcher.py
import logging
from typing import Iterable, List, Sequence

from discovery.models import (
    ContentItem,
    FilterState,
    Global,
    LocationSelection,
    MatchResult,
    origin_of,
)
from discovery.services.geo_math import distance_miles
from discovery.utils.location_text import city_token, normalize_label, region_token

logger = logging.getLogger(__name__)


def _needles_for(selection: LocationSelection) -> List[str]:
    needles = [
        city_token(selection.display_name),
        (selection.city or "").strip().lower(),
        (selection.region or "").strip().lower(),
    ]
    return [n for n in needles if n]


def _label_matches(label: str, needles: Sequence[str]) -> bool:
    full = normalize_label(label)
    if not full:
        return False
    haystacks = (city_token(full), region_token(full), full)
    return any(needle in hay for needle in needles for hay in haystacks if hay)


def _filter_by_radius(origin, items: Iterable[ContentItem], radius_miles: float) -> MatchResult:
    kept = []
    distances = {}
    for item in items:
        if item.coordinates is None:
            # cannot verify proximity
            continue
        d = distance_miles(origin, item.coordinates)
        if d <= radius_miles:
            kept.append((d, item))
            distances[item.id] = d

    kept.sort(key=lambda pair: pair[0])
    result_items = [item for _, item in kept]
    return MatchResult(
        items=result_items,
        empty_after_radius_filter=not result_items,
        distances=distances,
        strategy="radius",
    )


def _filter_by_text(selection: LocationSelection, items: Iterable[ContentItem]) -> MatchResult:
    needles = _needles_for(selection)
    items = list(items)
    if not needles:
        logger.info("Selection '%s' has nothing to match on; returning all items.",
                    selection.display_name)
        return MatchResult(items=items, strategy="text")

    matched = [item for item in items
               if item.location_label and _label_matches(item.location_label, needles)]
    return MatchResult(items=matched, strategy="text")


def filter_content(selection: LocationSelection,
                   items: Sequence[ContentItem],
                   filter_state: FilterState) -> MatchResult:
    """
    Decide which items are "within range" of the active selection.

    Global returns everything. A selection with coordinates and the radius
    filter enabled keeps items within ``radius_miles`` (inclusive), nearest
    first, and flags an empty result instead of hiding it. Anything else
    falls back to permissive city/region substring matching on labels.
    """
    if isinstance(selection, Global):
        return MatchResult(items=list(items), strategy="global")

    origin = origin_of(selection)
    if origin is not None and filter_state.radius_filter_enabled:
        result = _filter_by_radius(origin, items, filter_state.radius_miles)
        logger.info("Radius filter %.1f mi around '%s': %d of %d items",
                    filter_state.radius_miles, selection.display_name,
                    len(result.items), len(items))
        return result

    result = _filter_by_text(selection, items)
    logger.info("Text match for '%s': %d of %d items",
                selection.display_name, len(result.items), len(items))
    return result


class ContentLocationMatcher:
    """Collaborator wrapper around ``filter_content`` for the controller."""

    def match(self, selection: LocationSelection,
              items: Sequence[ContentItem],
              filter_state: FilterState) -> MatchResult:
        return filter_content(selection, items, filter_state)
