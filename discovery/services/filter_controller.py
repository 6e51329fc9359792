# discovery/services/filter_controller.py
import logging
import numbers
from dataclasses import replace
from enum import Enum
from typing import Callable, List, Optional

from discovery.errors import ContentFetchFailure, GeocodeFailure
from discovery.models import (
    FeedSnapshot,
    FilterState,
    Global,
    LocationSelection,
    Notice,
    NoticeKind,
)
from discovery.services.collaborators import ContentStore, ForwardGeocoder, LocationStore
from discovery.services.content_matcher import ContentLocationMatcher
from discovery.services.location_history import HISTORY_LIMIT, record_location
from discovery.services.location_input import parse_manual_location
from discovery.services.location_resolver import LocationResolver

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_MILES = 50.0

NO_RESULTS_MESSAGE = "No reviews found within {radius:g} miles. Showing reviews from all locations."
FETCH_FAILED_MESSAGE = "Failed to load reviews. Please try again."


class ResolutionState(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class DiscoveryFilterController:
    """
    Owns the active selection and FilterState for one Discover session.

    Location resolution runs once per controller. Radius and toggle changes
    only mutate state; the caller re-runs ``load`` to see their effect.
    """

    def __init__(self, resolver: LocationResolver, content_store: ContentStore,
                 location_store: Optional[LocationStore] = None,
                 forward_geocoder: Optional[ForwardGeocoder] = None,
                 filter_state: Optional[FilterState] = None,
                 resolution_state: ResolutionState = ResolutionState.NOT_STARTED,
                 matcher: Optional[ContentLocationMatcher] = None,
                 on_notice: Optional[Callable[[Notice], None]] = None,
                 selection: Optional[LocationSelection] = None,
                 history_limit: int = HISTORY_LIMIT):
        self.resolver = resolver
        self.content_store = content_store
        self.location_store = location_store
        self.forward_geocoder = forward_geocoder
        self.filter_state = filter_state or FilterState(radius_miles=DEFAULT_RADIUS_MILES)
        self.resolution_state = resolution_state
        self.matcher = matcher or ContentLocationMatcher()
        self.on_notice = on_notice
        self.history_limit = history_limit
        self._selection = selection
        self._last_snapshot: Optional[FeedSnapshot] = None
        self.disposed = False

    # -----------------------------
    # Location
    # -----------------------------
    @property
    def selection(self) -> Optional[LocationSelection]:
        return self._selection

    @property
    def last_snapshot(self) -> Optional[FeedSnapshot]:
        return self._last_snapshot

    async def resolve_active_location(self) -> Optional[LocationSelection]:
        if self.resolution_state is not ResolutionState.NOT_STARTED or self.disposed:
            return self._selection

        self.resolution_state = ResolutionState.IN_PROGRESS
        try:
            try:
                selection = await self.resolver.resolve()
            except Exception as e:
                logger.error(f"Location resolution failed, using Global: {e}", exc_info=True)
                selection = Global()
            if self.disposed:
                logger.info("Controller disposed during resolution; discarding result.")
                return self._selection
            # a manual choice made while resolving wins
            if self._selection is None:
                self._selection = selection
            self.resolution_state = ResolutionState.DONE
            return self._selection
        finally:
            # cancelled or disposed mid-flight: never stay IN_PROGRESS
            if self.resolution_state is ResolutionState.IN_PROGRESS:
                self.resolution_state = ResolutionState.NOT_STARTED

    async def choose_location(self, text: str) -> LocationSelection:
        """Manual "City, State" entry. Does not re-fetch."""
        location = parse_manual_location(text)

        if self.forward_geocoder is not None:
            try:
                coords = await self.forward_geocoder.geocode(location.display_name)
                location = parse_manual_location(text, coordinates=coords)
            except GeocodeFailure as e:
                logger.info(f"No coordinates for '{location.display_name}', using text match: {e}")

        if self.disposed:
            return self._selection
        self._selection = location.to_selection()
        self.resolution_state = ResolutionState.DONE

        if self.location_store is not None:
            try:
                await record_location(self.location_store, location, self.history_limit)
            except Exception as e:
                logger.warning(f"Could not save manual location '{location.display_name}': {e}")
        return self._selection

    async def use_global(self) -> LocationSelection:
        if not self.disposed:
            self._selection = Global()
            self.resolution_state = ResolutionState.DONE
        return self._selection

    # -----------------------------
    # Filter state mutators
    # -----------------------------
    def set_radius(self, miles) -> float:
        if isinstance(miles, bool) or not isinstance(miles, numbers.Real) or not miles > 0:
            raise ValueError(f"Radius must be a positive number of miles, got {miles!r}")
        self.filter_state.radius_miles = float(miles)
        return self.filter_state.radius_miles

    def toggle_radius_filter(self) -> bool:
        self.filter_state.radius_filter_enabled = not self.filter_state.radius_filter_enabled
        return self.filter_state.radius_filter_enabled

    # -----------------------------
    # Load
    # -----------------------------
    def _emit(self, notices: List[Notice], kind: NoticeKind, message: str) -> None:
        notice = Notice(kind=kind, message=message)
        notices.append(notice)
        if self.on_notice is not None:
            self.on_notice(notice)

    async def load(self) -> FeedSnapshot:
        if self.disposed:
            return self._last_snapshot or FeedSnapshot(selection=self._selection, items=[])

        if self.resolution_state is ResolutionState.NOT_STARTED:
            await self.resolve_active_location()

        selection = self._selection
        if selection is None:
            # resolution still in flight from another trigger
            return FeedSnapshot(selection=None, items=[], filter_state=replace(self.filter_state))

        notices: List[Notice] = []
        try:
            items = await self.content_store.fetch_all()
        except ContentFetchFailure as e:
            logger.error(f"Content fetch failed: {e}")
            if self.disposed:
                return self._last_snapshot or FeedSnapshot(selection=selection, items=[])
            self._emit(notices, NoticeKind.FETCH_FAILED, FETCH_FAILED_MESSAGE)
            snapshot = FeedSnapshot(selection=selection, items=[], total_items=0,
                                    fetch_failed=True, notices=notices,
                                    filter_state=replace(self.filter_state))
            self._last_snapshot = snapshot
            return snapshot

        if self.disposed:
            return self._last_snapshot or FeedSnapshot(selection=selection, items=[])

        result = self.matcher.match(selection, items, self.filter_state)
        shown = result.items
        widened = False

        if result.empty_after_radius_filter:
            shown = list(items)
            widened = True
            if not self.filter_state.no_results_alert_shown:
                self._emit(notices, NoticeKind.NO_RESULTS,
                           NO_RESULTS_MESSAGE.format(radius=self.filter_state.radius_miles))
                self.filter_state.no_results_alert_shown = True
            logger.info("No items within radius; showing all %d items.", len(shown))
        elif result.items:
            self.filter_state.no_results_alert_shown = False

        snapshot = FeedSnapshot(
            selection=selection,
            items=shown,
            total_items=len(items),
            widened_to_all=widened,
            notices=notices,
            filter_state=replace(self.filter_state),
            distances=result.distances,
        )
        self._last_snapshot = snapshot
        return snapshot

    def dispose(self) -> None:
        """Late completions after this are discarded instead of applied."""
        self.disposed = True
