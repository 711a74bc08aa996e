"""Tests for WeatherNormalizer."""

import pytest
from datetime import datetime, timezone

from metgen.errors import MalformedPayload, Stage
from metgen.weather.normalizer import SchemaKind, WeatherNormalizer


class TestBasicSchema:

    def test_core_fields(self, basic_payload):
        obs = WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)

        assert obs.timestamp_utc == datetime(2024, 3, 12, 18, 51, tzinfo=timezone.utc)
        assert obs.temperature_c == -2.0
        assert obs.altimeter_hpa == 1013.25
        assert obs.wind_dir_deg == 270
        assert obs.wind_speed_kt == pytest.approx(12.246, abs=1e-3)
        assert obs.wind_gust_kt == pytest.approx(18.467, abs=1e-3)

    def test_dewpoint_from_humidity(self, basic_payload):
        obs = WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)
        assert obs.dewpoint_c == pytest.approx(-4.99, abs=0.02)

    def test_dewpoint_absent_without_humidity(self, basic_payload):
        del basic_payload['main']['humidity']
        obs = WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)
        assert obs.dewpoint_c is None

    def test_capped_visibility_is_unlimited(self, basic_payload):
        obs = WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)
        assert obs.visibility_m is None

    def test_capped_visibility_kept_in_rain(self, basic_payload):
        basic_payload['weather'] = [{"id": 501}]
        obs = WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)
        assert obs.visibility_m == 10000
        assert obs.precipitation.rain

    def test_reduced_visibility(self, basic_payload):
        basic_payload['visibility'] = 3200
        obs = WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)
        assert obs.visibility_m == 3200

    def test_clear_sky(self, basic_payload):
        obs = WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)
        assert obs.cloud_layers == ()
        assert obs.present_weather == frozenset()

    def test_cloud_codes_are_not_weather(self, basic_payload):
        basic_payload['weather'] = [{"id": 804}]
        basic_payload['clouds'] = {"all": 100}
        obs = WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)
        assert obs.present_weather == frozenset()
        assert [layer.coverage for layer in obs.cloud_layers] == ["OVC"]

    @pytest.mark.parametrize("percent,coverage", [
        (10, "FEW"),
        (25, "FEW"),
        (40, "SCT"),
        (75, "BKN"),
        (90, "OVC"),
    ])
    def test_cloud_coverage(self, basic_payload, percent, coverage):
        basic_payload['clouds'] = {"all": percent}
        obs = WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)
        assert obs.cloud_layers[0].coverage == coverage

    def test_cloud_base_from_spread(self, basic_payload):
        basic_payload['clouds'] = {"all": 75}
        obs = WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)
        spread = obs.temperature_c - obs.dewpoint_c
        assert obs.cloud_layers[0].base_height_m == pytest.approx(spread * 125.0)

    def test_calm_wind(self, basic_payload):
        basic_payload['wind'] = {"speed": 0, "deg": 0}
        obs = WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)
        assert obs.wind_speed_kt == 0
        assert obs.wind_gust_kt is None

    def test_missing_wind(self, basic_payload):
        del basic_payload['wind']
        obs = WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)
        assert obs.wind_speed_kt is None
        assert obs.wind_dir_deg is None

    def test_rain_volume_sets_flag(self, basic_payload):
        basic_payload['rain'] = {"1h": 0.3}
        obs = WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)
        assert obs.precipitation.rain


class TestExtendedSchema:

    def test_current_conditions(self, extended_payload):
        obs = WeatherNormalizer.normalize(extended_payload, SchemaKind.EXTENDED)

        assert obs.temperature_c == 10.0
        assert obs.dewpoint_c == 8.0
        assert obs.altimeter_hpa == 1002
        assert obs.visibility_m == 6000
        assert {wx.code for wx in obs.present_weather} == {"-RA", "BR"}
        assert obs.precipitation.rain
        assert obs.precipitation.obscuration

    def test_cloud_layer(self, extended_payload):
        obs = WeatherNormalizer.normalize(extended_payload, SchemaKind.EXTENDED)
        assert len(obs.cloud_layers) == 1
        assert obs.cloud_layers[0].coverage == "BKN"
        assert obs.cloud_layers[0].base_height_m == pytest.approx(250.0)
        assert obs.ceiling_m == pytest.approx(250.0)

    def test_forecast_points(self, extended_payload):
        points = WeatherNormalizer.forecast(extended_payload, SchemaKind.EXTENDED)

        assert len(points) == 3
        assert [p.timestamp_utc.hour for p in points] == [19, 20, 21]
        assert points[1].pressure_hpa == 999
        assert points[1].wind_gust_kt == pytest.approx(27.214, abs=1e-3)
        assert {wx.code for wx in points[1].present_weather} == {"RA"}
        assert points[2].visibility_m is None

    def test_forecast_sorted(self, extended_payload):
        extended_payload['hourly'].reverse()
        points = WeatherNormalizer.forecast(extended_payload, SchemaKind.EXTENDED)
        assert points == sorted(points, key=lambda p: p.timestamp_utc)

    def test_forecast_skips_bad_entries(self, extended_payload):
        extended_payload['hourly'].append({"temp": 280})
        extended_payload['hourly'].append({"dt": "soon"})
        extended_payload['hourly'].append("garbage")
        assert len(WeatherNormalizer.forecast(extended_payload, SchemaKind.EXTENDED)) == 3

    def test_basic_has_no_forecast(self, basic_payload):
        assert WeatherNormalizer.forecast(basic_payload, SchemaKind.BASIC) == []

    def test_basic_payload_is_not_extended(self, basic_payload):
        with pytest.raises(MalformedPayload):
            WeatherNormalizer.normalize(basic_payload, SchemaKind.EXTENDED)


class TestMalformedPayload:

    @pytest.mark.parametrize("path", [('dt',), ('main', 'temp'), ('main', 'pressure')])
    def test_missing_required_field(self, basic_payload, path):
        target = basic_payload
        for key in path[:-1]:
            target = target[key]
        del target[path[-1]]

        with pytest.raises(MalformedPayload) as exc_info:
            WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)
        assert exc_info.value.stage == Stage.NORMALIZE

    def test_non_numeric_field(self, basic_payload):
        basic_payload['main']['temp'] = "warm"
        with pytest.raises(MalformedPayload):
            WeatherNormalizer.normalize(basic_payload, SchemaKind.BASIC)

    def test_not_a_mapping(self):
        with pytest.raises(MalformedPayload):
            WeatherNormalizer.normalize(["not", "a", "dict"], SchemaKind.BASIC)
