# discovery/services/location_resolver.py
import logging
from typing import Optional, Sequence

from discovery.errors import (
    GeocodeFailure,
    LocationResolutionError,
    PermissionDenied,
    PersistenceReadFailure,
    PositionUnavailable,
)
from discovery.models import Current, Global, LocationSelection, PersistedLocation
from discovery.services.collaborators import (
    GpsProvider,
    LocationStore,
    PermissionGateway,
    PermissionStatus,
    ReverseGeocoder,
)
from discovery.services.location_history import HISTORY_LIMIT, record_location

logger = logging.getLogger(__name__)


# -----------------------------
# Strategies
# -----------------------------
class ResolutionStrategy:
    """One step of the fallback chain. ``attempt`` returns None to pass."""

    name = "strategy"

    async def attempt(self) -> Optional[LocationSelection]:
        raise NotImplementedError


class CurrentPositionStrategy(ResolutionStrategy):
    """Permission -> GPS fix -> reverse geocode -> persist -> Current."""

    name = "current_position"

    def __init__(self, permissions: PermissionGateway, gps: GpsProvider,
                 geocoder: ReverseGeocoder, location_store: Optional[LocationStore] = None,
                 history_limit: int = HISTORY_LIMIT):
        self.permissions = permissions
        self.gps = gps
        self.geocoder = geocoder
        self.location_store = location_store
        self.history_limit = history_limit

    async def _permission_granted(self) -> bool:
        try:
            status = await self.permissions.request_foreground_permission()
        except PermissionDenied as e:
            logger.info(f"Location permission request failed: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error requesting location permission: {e}", exc_info=True)
            return False
        return status == PermissionStatus.GRANTED

    async def attempt(self) -> Optional[LocationSelection]:
        if not await self._permission_granted():
            logger.info("Location permission not granted; skipping current position.")
            return None

        try:
            coords = await self.gps.get_current_position()
            place = await self.geocoder.reverse_geocode(coords)
            saved = PersistedLocation.from_place(place, coords)
        except (PositionUnavailable, GeocodeFailure) as e:
            logger.warning(f"Current position unavailable, falling back: {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error reading current position, falling back: {e}", exc_info=True)
            return None

        if self.location_store is not None:
            try:
                await record_location(self.location_store, saved, self.history_limit)
            except Exception as e:
                # the fix is still good even if we could not remember it
                logger.warning(f"Could not persist current location '{saved.display_name}': {e}")

        return Current(
            coordinates=coords,
            display_name=saved.display_name,
            city=saved.city,
            region=saved.region,
        )


class SavedLocationStrategy(ResolutionStrategy):
    name = "saved_location"

    def __init__(self, location_store: Optional[LocationStore]):
        self.location_store = location_store

    async def attempt(self) -> Optional[LocationSelection]:
        if self.location_store is None:
            return None
        try:
            saved = await self.location_store.load()
            if saved is None:
                return None
            return saved.to_selection()
        except PersistenceReadFailure as e:
            logger.warning(f"Saved location could not be read: {e}")
            return None
        except Exception as e:
            logger.error(f"Saved location is unusable: {e}", exc_info=True)
            return None


class GlobalStrategy(ResolutionStrategy):
    name = "global"

    async def attempt(self) -> Optional[LocationSelection]:
        return Global()


# -----------------------------
# Combinator
# -----------------------------
async def first_success(strategies: Sequence[ResolutionStrategy]) -> LocationSelection:
    """Run strategies in order; the first non-None selection wins."""
    for strategy in strategies:
        try:
            selection = await strategy.attempt()
        except LocationResolutionError as e:
            logger.warning(f"Strategy '{strategy.name}' failed: {e}")
            continue
        except Exception as e:
            logger.error(f"Strategy '{strategy.name}' raised unexpectedly: {e}", exc_info=True)
            continue
        if selection is not None:
            logger.info(f"Location resolved by '{strategy.name}': {selection.kind}")
            return selection
    return Global()


class LocationResolver:
    """
    Produces the single active LocationSelection.

    Order: current GPS fix (when permitted), then the previously saved
    location, then Global. Never raises.
    """

    def __init__(self, permissions: PermissionGateway, gps: GpsProvider,
                 geocoder: ReverseGeocoder, location_store: Optional[LocationStore] = None,
                 strategies: Optional[Sequence[ResolutionStrategy]] = None,
                 history_limit: int = HISTORY_LIMIT):
        if strategies is None:
            strategies = [
                CurrentPositionStrategy(permissions, gps, geocoder, location_store, history_limit),
                SavedLocationStrategy(location_store),
                GlobalStrategy(),
            ]
        self.strategies = list(strategies)

    async def resolve(self) -> LocationSelection:
        return await first_success(self.strategies)
