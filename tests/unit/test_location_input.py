"""Unit tests for manual location entry, search and history."""

import pytest

from discovery.errors import InvalidLocationInput
from discovery.models import Coordinates, PersistedLocation
from discovery.services.firestore_stores import InMemoryLocationStore
from discovery.services.location_history import clear_history, record_location, remember_location
from discovery.services.location_input import (
    POPULAR_LOCATIONS,
    RADIUS_OPTIONS,
    parse_manual_location,
    search_locations,
)


class TestParseManualLocation:
    def test_city_state(self):
        loc = parse_manual_location("  Austin ,  TX ")
        assert loc.display_name == "Austin, TX"
        assert loc.city == "Austin"
        assert loc.region == "TX"
        assert loc.coordinates is None

    def test_extra_parts_become_country(self):
        loc = parse_manual_location("Toronto, ON, Canada")
        assert loc.display_name == "Toronto, ON"
        assert loc.country == "Canada"

    def test_coordinates_attached(self):
        coords = Coordinates(30.0, -97.0)
        assert parse_manual_location("Austin, TX", coordinates=coords).coordinates == coords

    @pytest.mark.parametrize("text", [None, "", "   ", "Austin", "Austin,", ", TX"])
    def test_invalid(self, text):
        with pytest.raises(InvalidLocationInput):
            parse_manual_location(text)

    def test_invalid_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_manual_location("nowhere")


class TestSearchLocations:
    def test_short_query_returns_nothing(self):
        assert search_locations("s") == []
        assert search_locations(None) == []

    def test_matches_name_or_city(self):
        names = [loc.display_name for loc in search_locations("san")]
        assert names == ["San Francisco, CA"]

    def test_case_insensitive(self):
        assert [loc.city for loc in search_locations("CHICAGO")] == ["Chicago"]

    def test_limit(self):
        many = [PersistedLocation(display_name=f"Springfield {i}, XX", city="Springfield", saved_at=0)
                for i in range(15)]
        assert len(search_locations("spring", candidates=many)) == 10
        assert len(search_locations("spring", candidates=many, limit=3)) == 3

    def test_popular_and_radius_options(self):
        assert [p.city for p in POPULAR_LOCATIONS] == ["San Francisco", "New York", "Los Angeles"]
        assert RADIUS_OPTIONS == (5, 10, 15, 25, 50, 100)


def _loc(name, loc_id=None):
    return PersistedLocation(display_name=name, id=loc_id, saved_at=0)


class TestLocationHistory:
    def test_newest_first_without_duplicates(self):
        history = [_loc("Austin, TX"), _loc("Dallas, TX")]

        updated = remember_location(history, _loc("dallas,tx"))

        assert [h.display_name for h in updated] == ["dallas,tx", "Austin, TX"]

    def test_dedupes_by_id(self):
        history = [_loc("SF", "sf-1"), _loc("NY", "ny-1")]
        updated = remember_location(history, _loc("San Francisco", "sf-1"))
        assert [h.id for h in updated] == ["sf-1", "ny-1"]
        assert updated[0].display_name == "San Francisco"

    def test_capped(self):
        history = [_loc(f"City {i}, ST") for i in range(20)]
        updated = remember_location(history, _loc("New, ST"))
        assert len(updated) == 20
        assert updated[0].display_name == "New, ST"
        assert updated[-1].display_name == "City 18, ST"

    @pytest.mark.asyncio
    async def test_record_location_saves_selection_and_history(self):
        store = InMemoryLocationStore(history=[_loc("Austin, TX")])

        await record_location(store, _loc("Miami, FL"), limit=5)

        assert (await store.load()).display_name == "Miami, FL"
        assert [h.display_name for h in await store.load_history()] == ["Miami, FL", "Austin, TX"]

    @pytest.mark.asyncio
    async def test_clear_history_keeps_selection(self):
        store = InMemoryLocationStore(selected=_loc("Austin, TX"), history=[_loc("Austin, TX")])

        await clear_history(store)

        assert await store.load_history() == []
        assert (await store.load()).display_name == "Austin, TX"
