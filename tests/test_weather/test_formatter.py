"""Tests for METARFormatter."""

import math
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from metgen.errors import FormattingImpossible, Stage
from metgen.models.observation import CloudLayer, ForecastPoint
from metgen.models.report import PressureTendency, TrendRemark
from metgen.models.station import Region
from metgen.weather.codes import parse_phenomenon
from metgen.weather.decoder import MetarDecoder
from metgen.weather.formatter import METARFormatter


class TestEndToEnd:

    def test_north_american_report(self, na_station, winter_observation):
        text = METARFormatter.format(na_station, winter_observation)
        assert text == "KXXX 121851Z 27012G18KT 10SM SKC M02/M05 A2992"

    def test_international_report(self, intl_station, winter_observation):
        obs = replace(winter_observation, visibility_m=9000)
        text = METARFormatter.format(intl_station, obs)
        assert text == "EGLL 121851Z 27012G18KT 9000 SKC M02/M05 Q1013"

    def test_ten_statute_miles(self, na_station, winter_observation):
        obs = replace(winter_observation, visibility_m=16093.44)
        assert METARFormatter.format(na_station, obs) == "KXXX 121851Z 27012G18KT 10SM SKC M02/M05 A2992"

    def test_deterministic(self, na_station, winter_observation):
        first = METARFormatter.format(na_station, winter_observation)
        second = METARFormatter.format(na_station, replace(winter_observation))
        assert first == second

    def test_group_order(self, na_station, winter_observation):
        obs = replace(
            winter_observation,
            visibility_m=1609.344,
            cloud_layers=(CloudLayer("OVC", 762), CloudLayer("FEW", 304.8)),
            present_weather=frozenset({parse_phenomenon("BR"), parse_phenomenon("-SN")}),
        )
        text = METARFormatter.format(na_station, obs)
        assert text == "KXXX 121851Z 27012G18KT 1SM -SN BR FEW010 OVC025 M02/M05 A2992"

    def test_decodes_as_metar(self, na_station, winter_observation):
        decoded = MetarDecoder.decode(METARFormatter.format(na_station, winter_observation))
        assert decoded is not None
        assert decoded.station == "KXXX"
        assert decoded.wind_direction == 270
        assert decoded.wind_speed == 12
        assert decoded.wind_gust == 18
        assert decoded.temperature == -2
        assert decoded.dewpoint == -5


class TestWindGroup:

    def test_gust_omitted_when_not_above_mean(self):
        assert METARFormatter.wind_group(270, 12.4, 12.9) == "27012KT"
        assert METARFormatter.wind_group(270, 12, None) == "27012KT"

    def test_calm(self):
        assert METARFormatter.wind_group(0, 0) == "00000KT"
        assert METARFormatter.wind_group(120, 0.6, 5) == "00000KT"

    def test_variable(self):
        assert METARFormatter.wind_group(None, 4) == "VRB04KT"

    def test_north(self):
        assert METARFormatter.wind_group(2, 8) == "36008KT"

    def test_missing(self):
        assert METARFormatter.wind_group(None, None) == "/////KT"

    def test_three_digit_speed(self):
        assert METARFormatter.wind_group(90, 105, 130) == "090105G130KT"


class TestGroups:

    def test_time_group(self):
        assert METARFormatter.time_group(datetime(2024, 1, 5, 3, 7, tzinfo=timezone.utc)) == "050307Z"

    def test_time_group_naive_is_utc(self):
        assert METARFormatter.time_group(datetime(2024, 1, 5, 3, 7)) == "050307Z"

    def test_missing_dewpoint(self):
        assert METARFormatter.temperature_group(-2.0, None) == "M02///"

    def test_temperature_group(self):
        assert METARFormatter.temperature_group(-0.4, -1.6) == "M00/M02"
        assert METARFormatter.temperature_group(15.2, 9.5) == "15/10"

    def test_clouds_sorted(self, winter_observation):
        obs = replace(
            winter_observation,
            cloud_layers=[CloudLayer("BKN", 1500), CloudLayer("SCT", 600), CloudLayer("OVC", 3000)],
        )
        assert METARFormatter.cloud_groups(obs) == ["SCT020", "BKN049", "OVC098"]

    def test_ceiling_layers_ascending(self, na_station, winter_observation):
        obs = replace(
            winter_observation,
            cloud_layers=[CloudLayer("OVC", 1500), CloudLayer("BKN", 900)],
        )
        assert obs.ceiling_m == 900
        text = METARFormatter.format(na_station, obs)
        assert " BKN030 OVC049 " in text

    def test_wind_direction_rounding(self):
        assert METARFormatter.wind_group(93, 14.9) == "09014KT"

    def test_clear_sky(self, winter_observation):
        assert METARFormatter.cloud_groups(winter_observation) == ["SKC"]


class TestRemarks:

    def test_no_trend(self, na_station, winter_observation):
        text = METARFormatter.format(na_station, winter_observation, TrendRemark())
        assert "RMK" not in text

    def test_pressure_tendency(self, na_station, winter_observation):
        trend = TrendRemark(pressure_tendency=PressureTendency.RISING_RAPIDLY)
        text = METARFormatter.format(na_station, winter_observation, trend)
        assert text.endswith("A2992 RMK PRESRR")

    def test_forecast_group_uses_region(self, intl_station, winter_observation):
        point = ForecastPoint(
            timestamp_utc=datetime(2024, 3, 12, 20, 0, tzinfo=timezone.utc),
            wind_dir_deg=200,
            wind_speed_kt=15.5,
            wind_gust_kt=27.2,
            visibility_m=4000,
            present_weather=frozenset({parse_phenomenon("RA")}),
        )
        trend = TrendRemark(pressure_tendency=PressureTendency.FALLING_RAPIDLY, forecast=point)
        text = METARFormatter.format(intl_station, winter_observation, trend)
        assert text.endswith("Q1013 RMK PRESFR FCST 2000Z 20015G27KT 4000 RA")

        na = replace(intl_station, region=Region.NORTH_AMERICA)
        text = METARFormatter.format(na, winter_observation, trend)
        assert text.endswith("A2992 RMK PRESFR FCST 2000Z 20015G27KT 2 1/2SM RA")

    def test_forecast_group_naive_is_utc(self):
        point = ForecastPoint(timestamp_utc=datetime(2024, 3, 12, 20, 0), wind_speed_kt=0.0)
        assert METARFormatter.forecast_group(point, Region.INTERNATIONAL) == [
            "FCST", "2000Z", "00000KT", "9999",
        ]


class TestInvariants:

    def test_non_finite_temperature(self, na_station, winter_observation):
        obs = replace(winter_observation, temperature_c=math.nan, dewpoint_c=None)
        with pytest.raises(FormattingImpossible) as exc_info:
            METARFormatter.format(na_station, obs)
        assert exc_info.value.stage == Stage.FORMAT

    def test_negative_wind(self, na_station, winter_observation):
        obs = replace(winter_observation, wind_speed_kt=-3.0, wind_gust_kt=None)
        with pytest.raises(FormattingImpossible):
            METARFormatter.format(na_station, obs)

    def test_non_positive_pressure(self, na_station, winter_observation):
        obs = replace(winter_observation, altimeter_hpa=0)
        with pytest.raises(FormattingImpossible):
            METARFormatter.format(na_station, obs)
