# discovery/services/firestore_stores.py
import asyncio
import logging
from copy import deepcopy
from typing import Dict, List, Optional

from discovery.errors import ContentFetchFailure, PersistenceReadFailure
from discovery.models import ContentItem, PersistedLocation
from discovery.utils.firestore_paths import content_col, discovery_location_doc

logger = logging.getLogger(__name__)


# -----------------------------
# Content
# -----------------------------
class FirestoreContentStore:
    """Unfiltered read of the content collection (e.g. 'reviews')."""

    def __init__(self, db, collection: str = "reviews", status: Optional[str] = None):
        self.db = db
        self.collection = collection
        self.status = status

    def _fetch_sync(self) -> List[ContentItem]:
        query = content_col(self.db, self.collection)
        if self.status:
            query = query.where("status", "==", self.status)
        try:
            docs = query.stream()
            items = [ContentItem.from_document(doc.id, doc.to_dict()) for doc in docs]
        except Exception as e:
            raise ContentFetchFailure(f"Failed to read '{self.collection}': {e}") from e
        logger.info(f"Fetched {len(items)} documents from '{self.collection}'")
        return items

    async def fetch_all(self) -> List[ContentItem]:
        return await asyncio.to_thread(self._fetch_sync)


# -----------------------------
# Saved location
# -----------------------------
class FirestoreLocationStore:
    """
    Per-user saved location and location history.

    Both live in one document: users/{uid}/settings/discovery_location
    with fields ``selected`` and ``history``.
    """

    def __init__(self, db, user_id: str):
        self.db = db
        self.user_id = user_id

    def _doc(self):
        return discovery_location_doc(self.db, self.user_id)

    def _read_sync(self) -> Dict:
        try:
            snap = self._doc().get()
        except Exception as e:
            raise PersistenceReadFailure(f"Could not read saved location for {self.user_id}: {e}") from e
        return (snap.to_dict() or {}) if snap.exists else {}

    def _merge_sync(self, fields: Dict) -> None:
        self._doc().set(fields, merge=True)

    async def save(self, location: PersistedLocation) -> None:
        await asyncio.to_thread(self._merge_sync, {"selected": location.to_dict()})
        logger.info(f"Saved location '{location.display_name}' for user {self.user_id}")

    async def load(self) -> Optional[PersistedLocation]:
        data = await asyncio.to_thread(self._read_sync)
        return PersistedLocation.from_dict(data.get("selected") or {})

    async def load_history(self) -> List[PersistedLocation]:
        try:
            data = await asyncio.to_thread(self._read_sync)
        except PersistenceReadFailure as e:
            logger.warning(f"Location history unavailable: {e}")
            return []
        history = [PersistedLocation.from_dict(entry) for entry in data.get("history") or []]
        return [entry for entry in history if entry is not None]

    async def save_history(self, history: List[PersistedLocation]) -> None:
        await asyncio.to_thread(self._merge_sync, {"history": [h.to_dict() for h in history]})


class InMemoryLocationStore:
    """Process-local LocationStore, used in development and tests."""

    def __init__(self, selected: Optional[PersistedLocation] = None,
                 history: Optional[List[PersistedLocation]] = None):
        self._selected = selected
        self._history = list(history or [])

    async def save(self, location: PersistedLocation) -> None:
        self._selected = location

    async def load(self) -> Optional[PersistedLocation]:
        return self._selected

    async def load_history(self) -> List[PersistedLocation]:
        return list(self._history)

    async def save_history(self, history: List[PersistedLocation]) -> None:
        self._history = deepcopy(list(history))
