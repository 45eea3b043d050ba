"""Tests for the Open-Meteo archive provider."""

from __future__ import annotations

from datetime import date
from unittest.mock import Mock, patch

import pytest
import requests

from fieldheat.datasources.openmeteo import (
    ARCHIVE_API,
    DAILY_VARS,
    OpenMeteoProvider,
    fetch_archive_daily,
    parse_archive_daily,
)
from fieldheat.exceptions import ProviderError
from fieldheat.schemas import Location

SAMPLE_RESPONSE = {
    "latitude": 40.0,
    "longitude": -88.0,
    "daily": {
        "time": ["2024-05-01", "2024-05-02"],
        "temperature_2m_max": [24.1, 26.3],
        "temperature_2m_min": [12.0, None],
        "temperature_2m_mean": [18.2, 19.9],
        "precipitation_sum": [0.0, 5.4],
        "relative_humidity_2m_mean": [65, 80],
        "shortwave_radiation_sum": [22.5, 14.1],
        "et0_fao_evapotranspiration": [4.2, 2.8],
        "wind_speed_10m_max": [15.3, 22.0],
        "dew_point_2m_mean": [10.1, 14.0],
        "soil_temperature_0_to_7cm_mean": [16.0, 17.2],
        "soil_moisture_0_to_7cm_mean": [0.28, 0.33],
    },
}


def _response(payload: dict) -> Mock:
    mock_response = Mock()
    mock_response.json.return_value = payload
    mock_response.raise_for_status = Mock()
    return mock_response


class TestFetchArchiveDaily:
    """Request construction."""

    @patch("fieldheat.datasources.openmeteo.archive.provider_session.get")
    def test_request_params(self, mock_get: Mock) -> None:
        """Coordinates to 4 decimals, full variable set, local timezone."""
        mock_get.return_value = _response(SAMPLE_RESPONSE)

        result = fetch_archive_daily(40.123456, -88.0, date(2024, 5, 1), date(2024, 5, 2))

        assert result == SAMPLE_RESPONSE
        mock_get.assert_called_once()
        assert mock_get.call_args.args[0] == ARCHIVE_API
        params = mock_get.call_args.kwargs["params"]
        assert params["latitude"] == "40.1235"
        assert params["longitude"] == "-88.0000"
        assert params["start_date"] == "2024-05-01"
        assert params["end_date"] == "2024-05-02"
        assert params["timezone"] == "auto"
        assert params["daily"].split(",") == DAILY_VARS
        assert len(DAILY_VARS) == 17
        assert mock_get.call_args.kwargs["timeout"] == 60

    @patch("fieldheat.datasources.openmeteo.archive.provider_session.get")
    def test_http_error_propagates(self, mock_get: Mock) -> None:
        mock_response = Mock()
        mock_response.raise_for_status.side_effect = requests.HTTPError("400 Bad Request")
        mock_get.return_value = mock_response

        with pytest.raises(requests.HTTPError):
            fetch_archive_daily(40.0, -88.0, date(2024, 5, 1), date(2024, 5, 2))

    def test_explicit_session(self) -> None:
        session = Mock()
        session.get.return_value = _response(SAMPLE_RESPONSE)

        fetch_archive_daily(40.0, -88.0, date(2024, 5, 1), date(2024, 5, 2), session=session)

        session.get.assert_called_once()


class TestParseArchiveDaily:
    """Response normalization."""

    def test_maps_fields(self) -> None:
        records = parse_archive_daily(SAMPLE_RESPONSE, "field-1")

        assert len(records) == 2
        first = records[0]
        assert first.location_id == "field-1"
        assert first.date == date(2024, 5, 1)
        assert first.source == "open-meteo"
        assert first.tmax == 24.1
        assert first.tmin == 12.0
        assert first.tmean == 18.2
        assert first.precipitation == 0.0
        assert first.humidity == 65
        assert first.solar_radiation == 22.5
        assert first.evapotranspiration == 4.2
        assert first.wind_speed_max == 15.3
        assert first.dew_point == 10.1
        assert first.soil_temperature == 16.0
        assert first.soil_moisture == 0.28

    def test_nulls_stay_none(self) -> None:
        records = parse_archive_daily(SAMPLE_RESPONSE, "field-1")
        assert records[1].tmin is None

    def test_missing_variable_is_none(self) -> None:
        payload = {"daily": {"time": ["2024-05-01"], "temperature_2m_max": [20.0]}}
        [record] = parse_archive_daily(payload, "field-1")
        assert record.tmax == 20.0
        assert record.soil_moisture is None

    def test_empty_response(self) -> None:
        assert parse_archive_daily({"daily": {"time": []}}, "field-1") == []
        assert parse_archive_daily({}, "field-1") == []

    def test_api_error(self) -> None:
        with pytest.raises(ProviderError, match="out of allowed range"):
            parse_archive_daily(
                {"error": True, "reason": "Parameter 'start_date' is out of allowed range"},
                "field-1",
            )


class TestOpenMeteoProvider:
    """Provider capability."""

    def test_always_configured(self) -> None:
        provider = OpenMeteoProvider()
        assert provider.is_configured
        assert provider.requires_key is False
        assert provider.name == "open-meteo"

    @patch("fieldheat.datasources.openmeteo.archive.provider_session.get")
    def test_fetch(self, mock_get: Mock) -> None:
        mock_get.return_value = _response(SAMPLE_RESPONSE)
        location = Location(location_id="field-1", lat=40.0, lon=-88.0)

        records = OpenMeteoProvider().fetch(location, date(2024, 5, 1), date(2024, 5, 2))

        assert [r.date for r in records] == [date(2024, 5, 1), date(2024, 5, 2)]
        assert all(r.location_id == "field-1" for r in records)
