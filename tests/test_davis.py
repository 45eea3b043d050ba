"""Tests for the Davis WeatherLink v2 provider."""

from __future__ import annotations

import hashlib
import hmac
from datetime import date
from unittest.mock import Mock, patch

import pytest

from fieldheat.datasources.davis import (
    DavisProvider,
    fetch_historic,
    parse_historic,
)
from fieldheat.datasources.davis.client import (
    canonical_query,
    day_end_timestamp,
    day_start_timestamp,
    fahrenheit_to_celsius,
    sign_params,
    timestamp_to_date,
)
from fieldheat.exceptions import ProviderError
from fieldheat.schemas import Location

MAY_1 = 1714521600  # 2024-05-01T00:00:00Z
MAY_2 = MAY_1 + 86400


class TestSigning:
    """HMAC-SHA256 over the sorted query string."""

    def test_canonical_query_sorted(self) -> None:
        params = {"t": 3, "api-key": "k", "station-id": "9"}
        assert canonical_query(params) == "api-key=k&station-id=9&t=3"

    def test_signature_matches_hmac(self) -> None:
        params = {"api-key": "abc", "t": 1714700000, "station-id": "42"}
        expected = hmac.new(
            b"shh",
            b"api-key=abc&station-id=42&t=1714700000",
            hashlib.sha256,
        ).hexdigest()
        assert sign_params(params, "shh") == expected

    def test_deterministic_and_order_independent(self) -> None:
        a = {"api-key": "abc", "t": 1, "station-id": "42"}
        b = {"station-id": "42", "t": 1, "api-key": "abc"}
        assert sign_params(a, "s") == sign_params(b, "s")

    def test_timestamp_changes_signature(self) -> None:
        base = {"api-key": "abc", "station-id": "42"}
        assert sign_params({**base, "t": 1}, "s") != sign_params({**base, "t": 2}, "s")


class TestConversions:
    def test_day_bounds(self) -> None:
        assert day_start_timestamp(date(2024, 5, 1)) == MAY_1
        assert day_end_timestamp(date(2024, 5, 1)) == MAY_2

    def test_timestamp_to_date_is_utc(self) -> None:
        assert timestamp_to_date(MAY_1) == date(2024, 5, 1)
        assert timestamp_to_date(MAY_2 - 1) == date(2024, 5, 1)

    @pytest.mark.parametrize(("f", "c"), [(32, 0), (212, 100), (77, 25), (-40, -40)])
    def test_fahrenheit_to_celsius(self, f: float, c: float) -> None:
        assert fahrenheit_to_celsius(f) == pytest.approx(c)


class TestFetchHistoric:
    """Signed GET construction."""

    @patch("fieldheat.datasources.davis.historic.provider_session.get")
    def test_signed_request(self, mock_get: Mock) -> None:
        mock_response = Mock()
        mock_response.json.return_value = {"sensors": []}
        mock_response.raise_for_status = Mock()
        mock_get.return_value = mock_response

        fetch_historic(
            "key-1",
            "secret-1",
            "12345",
            date(2024, 5, 1),
            date(2024, 5, 1),
            now=lambda: 1714700000.7,
        )

        url = mock_get.call_args.args[0]
        params = mock_get.call_args.kwargs["params"]
        headers = mock_get.call_args.kwargs["headers"]
        assert url == "https://api.weatherlink.com/v2/historic/12345"
        assert params == {
            "api-key": "key-1",
            "end-timestamp": MAY_2,
            "start-timestamp": MAY_1,
            "station-id": "12345",
            "t": 1714700000,
        }
        assert headers["X-Api-Secret"] == sign_params(params, "secret-1")
        assert mock_get.call_args.kwargs["timeout"] == 30


class TestParseHistoric:
    """Sub-daily ISS records folded into daily records."""

    PAYLOAD = {
        "station_id": 12345,
        "sensors": [
            {
                "sensor_type": 45,
                "data": [
                    {"ts": MAY_1 + 3600, "temp_hi_at": 77, "temp_lo_at": 59, "rainfall_mm": 1.0},
                    {"ts": MAY_1 + 7200, "temp_hi_at": 80.6, "temp_lo_at": 50, "rainfall_mm": 0.5},
                    {"ts": MAY_2 + 100, "temp_hi_at": 32.0, "temp_lo_at": 0.0, "rainfall_mm": None},
                ],
            },
            {
                "sensor_type": 243,  # console, no outdoor data
                "data": [{"ts": MAY_1 + 60, "temp_hi_at": 200.0, "temp_lo_at": -100.0}],
            },
        ],
    }

    def test_folds_per_day(self) -> None:
        records = parse_historic(self.PAYLOAD, "field-1")

        assert [r.date for r in records] == [date(2024, 5, 1), date(2024, 5, 2)]
        may1 = records[0]
        assert may1.source == "davis"
        assert may1.tmax == pytest.approx(27.0)  # max of 25.0, 27.0
        assert may1.tmin == pytest.approx(10.0)  # min of 15.0, 10.0
        assert may1.precipitation == pytest.approx(1.5)

    def test_zero_fahrenheit_is_a_reading(self) -> None:
        records = parse_historic(self.PAYLOAD, "field-1")
        may2 = records[1]
        assert may2.tmax == pytest.approx(0.0)
        assert may2.tmin == pytest.approx(-160 / 9)
        assert may2.precipitation is None

    def test_non_iss_sensors_ignored(self) -> None:
        records = parse_historic(self.PAYLOAD, "field-1")
        assert all(r.tmax is None or r.tmax < 50 for r in records)

    def test_midnight_record_closes_previous_day(self) -> None:
        payload = {
            "sensors": [
                {
                    "sensor_type": 45,
                    "data": [
                        {"ts": MAY_1 + 3600, "temp_hi_at": 77, "temp_lo_at": 59},
                        {"ts": MAY_2, "temp_hi_at": 86, "temp_lo_at": 41, "rainfall_mm": 2.0},
                    ],
                }
            ]
        }

        [may1] = parse_historic(payload, "field-1")

        assert may1.date == date(2024, 5, 1)
        assert may1.tmax == pytest.approx(30.0)
        assert may1.tmin == pytest.approx(5.0)
        assert may1.precipitation == pytest.approx(2.0)

    def test_no_sensors(self) -> None:
        assert parse_historic({"sensors": []}, "field-1") == []

    def test_api_error_message(self) -> None:
        with pytest.raises(ProviderError, match="Invalid signature"):
            parse_historic({"code": 401, "message": "Invalid signature"}, "field-1")


class TestDavisProvider:
    """Provider capability."""

    def test_needs_all_credentials(self) -> None:
        assert not DavisProvider("key", "", "123").is_configured
        assert not DavisProvider("", "secret", "123").is_configured
        assert DavisProvider("key", "secret", "123").is_configured
        assert DavisProvider("key", "secret", "123").requires_key is True

    @patch("fieldheat.datasources.davis.historic.provider_session.get")
    def test_fetch(self, mock_get: Mock) -> None:
        mock_response = Mock()
        mock_response.json.return_value = TestParseHistoric.PAYLOAD
        mock_response.raise_for_status = Mock()
        mock_get.return_value = mock_response
        location = Location(location_id="field-1", lat=40.0, lon=-88.0)

        records = DavisProvider("key", "secret", "12345").fetch(
            location, date(2024, 5, 1), date(2024, 5, 2)
        )

        assert len(records) == 2
        assert records[0].location_id == "field-1"

    @patch("fieldheat.datasources.davis.historic.provider_session.get")
    def test_fetch_drops_days_outside_window(self, mock_get: Mock) -> None:
        mock_response = Mock()
        mock_response.json.return_value = TestParseHistoric.PAYLOAD
        mock_response.raise_for_status = Mock()
        mock_get.return_value = mock_response
        location = Location(location_id="field-1", lat=40.0, lon=-88.0)

        records = DavisProvider("key", "secret", "12345").fetch(
            location, date(2024, 5, 1), date(2024, 5, 1)
        )

        assert [r.date for r in records] == [date(2024, 5, 1)]
