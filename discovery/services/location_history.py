# discovery/services/location_history.py
from typing import List, Sequence

from discovery.models import PersistedLocation
from discovery.utils.location_text import normalize_label

HISTORY_LIMIT = 20


def _identity(location: PersistedLocation) -> str:
    return location.id or normalize_label(location.display_name)


def remember_location(history: Sequence[PersistedLocation],
                      location: PersistedLocation,
                      limit: int = HISTORY_LIMIT) -> List[PersistedLocation]:
    """Most recent first, one entry per location, at most ``limit`` entries."""
    key = _identity(location)
    kept = [entry for entry in history if _identity(entry) != key]
    if limit <= 0:
        return []
    return [location] + kept[:limit - 1]


async def record_location(store, location: PersistedLocation,
                          limit: int = HISTORY_LIMIT) -> List[PersistedLocation]:
    """Save ``location`` as the selected one and push it onto the store's history."""
    await store.save(location)
    history = remember_location(await store.load_history(), location, limit)
    await store.save_history(history)
    return history


async def clear_history(store) -> None:
    await store.save_history([])
