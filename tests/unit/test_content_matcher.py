"""Unit tests for radius filtering and the string-match fallback."""

import pytest

from discovery.models import ContentItem, Coordinates, Current, FilterState, Global, Selected
from discovery.services.content_matcher import ContentLocationMatcher, filter_content
from discovery.services.geo_math import distance_miles

from tests.conftest import AUSTIN, item_at


@pytest.fixture
def current():
    return Current(coordinates=AUSTIN, display_name="Austin, TX", city="Austin", region="TX")


class TestGlobalSelection:
    @pytest.mark.parametrize("state", [
        FilterState(radius_miles=1),
        FilterState(radius_miles=1, radius_filter_enabled=False),
    ])
    def test_returns_input_unchanged(self, nearby_items, state):
        unlabeled = ContentItem(id="bare")
        items = nearby_items + [unlabeled]

        result = filter_content(Global(), items, state)

        assert result.items == items
        assert not result.empty_after_radius_filter
        assert result.strategy == "global"


class TestRadiusFilter:
    def test_boundary_at_ten_miles(self, current, nearby_items):
        result = filter_content(current, nearby_items, FilterState(radius_miles=10))

        assert [item.id for item in result.items] == ["five", "nine_nine"]
        assert result.strategy == "radius"
        assert not result.empty_after_radius_filter

    def test_boundary_is_inclusive(self, current):
        edge = item_at("edge", AUSTIN, 7.5)
        radius = distance_miles(AUSTIN, edge.coordinates)

        result = filter_content(current, [edge], FilterState(radius_miles=radius))

        assert result.items == [edge]

    def test_items_without_coordinates_are_excluded(self, current):
        labelled_only = ContentItem(id="label", location_label="Austin, TX")

        result = filter_content(current, [labelled_only], FilterState(radius_miles=100))

        assert result.items == []
        assert result.empty_after_radius_filter

    def test_sorted_nearest_first(self, current):
        items = [item_at("far", AUSTIN, 8), item_at("near", AUSTIN, 1), item_at("mid", AUSTIN, 4)]

        result = filter_content(current, items, FilterState(radius_miles=10))

        assert [item.id for item in result.items] == ["near", "mid", "far"]
        assert result.distances["near"] == pytest.approx(1.0, abs=1e-6)

    def test_empty_result_is_signalled(self, current, nearby_items):
        result = filter_content(current, nearby_items, FilterState(radius_miles=1))

        assert result.items == []
        assert result.empty_after_radius_filter

    def test_selected_with_coordinates_uses_radius(self, nearby_items):
        selection = Selected(display_name="Somewhere", coordinates=AUSTIN)

        result = filter_content(selection, nearby_items, FilterState(radius_miles=6))

        assert [item.id for item in result.items] == ["five"]


class TestTextFallback:
    def test_city_token_matches_case_insensitively(self):
        item = ContentItem(id="a", location_label="Austin, TX")
        selection = Selected(display_name="austin, texas")

        result = filter_content(selection, [item], FilterState())

        assert result.items == [item]
        assert result.strategy == "text"
        assert not result.empty_after_radius_filter

    def test_radius_disabled_falls_back_to_text(self, current):
        near_but_elsewhere = ContentItem(id="n", coordinates=AUSTIN, location_label="Dallas, TX")
        unlabeled = ContentItem(id="u", coordinates=AUSTIN)
        austin = ContentItem(id="a", location_label="Downtown Austin, Texas")

        result = filter_content(current, [near_but_elsewhere, unlabeled, austin],
                                FilterState(radius_filter_enabled=False))

        # "tx" region matches Dallas too: the fallback prefers recall
        assert [item.id for item in result.items] == ["n", "a"]

    def test_region_field_matches(self):
        selection = Selected(display_name="Brooklyn", region="new york")
        item = ContentItem(id="ny", location_label="Manhattan, New York")

        assert filter_content(selection, [item], FilterState()).items == [item]

    def test_non_matching_items_dropped(self):
        selection = Selected(display_name="Portland, OR", city="Portland", region="OR")
        items = [
            ContentItem(id="p", location_label="portland,  or"),
            ContentItem(id="s", location_label="Seattle, WA"),
            ContentItem(id="none"),
        ]

        result = filter_content(selection, items, FilterState())

        assert [item.id for item in result.items] == ["p"]

    def test_text_mode_never_flags_empty_radius(self):
        selection = Selected(display_name="Nowhere, ZZ")
        result = filter_content(selection, [ContentItem(id="x", location_label="Austin, TX")],
                                FilterState())
        assert result.items == []
        assert not result.empty_after_radius_filter

    def test_selection_without_needles_returns_everything(self):
        items = [ContentItem(id="x", location_label="Austin, TX"), ContentItem(id="y")]
        result = filter_content(Selected(display_name=" , "), items, FilterState())
        assert result.items == items


def test_matcher_class_delegates(current, nearby_items):
    result = ContentLocationMatcher().match(current, nearby_items, FilterState(radius_miles=10))
    assert len(result.items) == 2
