"""Tests for region heuristics."""

import pytest

from metgen.models.station import Region
from metgen.utils.regions import (
    great_circle_nm,
    in_north_america,
    is_ambiguous,
    region_from_coordinates,
    region_from_country,
    region_from_hint,
    region_from_icao,
)


class TestRegionFromIcao:

    @pytest.mark.parametrize("code", ["KJFK", "CYYZ", "PANC", "PHNL", "MMMX", "TJSJ", "kbos"])
    def test_north_american_prefixes(self, code):
        assert region_from_icao(code) == Region.NORTH_AMERICA

    @pytest.mark.parametrize("code", ["EGLL", "LFPG", "RJTT", "SBGR"])
    def test_other_prefixes_say_nothing(self, code):
        assert region_from_icao(code) is None

    def test_invalid_length(self):
        assert region_from_icao("KJF") is None


class TestRegionFromHint:

    def test_continent_codes(self):
        assert region_from_hint("NA") == Region.NORTH_AMERICA
        assert region_from_hint("EU") == Region.INTERNATIONAL

    def test_region_names(self):
        assert region_from_hint("north_america") == Region.NORTH_AMERICA
        assert region_from_hint("North America") == Region.NORTH_AMERICA
        assert region_from_hint("international") == Region.INTERNATIONAL

    def test_unknown_or_empty(self):
        assert region_from_hint(None) is None
        assert region_from_hint("") is None
        assert region_from_hint("mars") is None


class TestRegionFromCountry:

    def test_north_american_countries(self):
        assert region_from_country("US") == Region.NORTH_AMERICA
        assert region_from_country("ca") == Region.NORTH_AMERICA

    def test_other_countries(self):
        assert region_from_country("GB") == Region.INTERNATIONAL

    def test_missing(self):
        assert region_from_country(None) is None


class TestCoordinates:

    def test_new_york(self):
        assert in_north_america(40.64, -73.78)
        assert region_from_coordinates(40.64, -73.78) == Region.NORTH_AMERICA
        assert not is_ambiguous(40.64, -73.78)

    def test_london(self):
        assert not in_north_america(51.47, -0.45)
        assert region_from_coordinates(51.47, -0.45) == Region.INTERNATIONAL

    def test_caribbean_is_ambiguous(self):
        assert is_ambiguous(15.0, -61.0)

    def test_great_circle(self):
        # JFK to Heathrow is roughly 2990 nm
        distance = great_circle_nm(40.6398, -73.7789, 51.4706, -0.4619)
        assert distance == pytest.approx(2990, rel=0.01)
        assert great_circle_nm(10.0, 10.0, 10.0, 10.0) == 0
