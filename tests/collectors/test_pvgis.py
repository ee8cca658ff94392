"""Tests for the PVGIS collector."""

from unittest.mock import MagicMock, patch

import httpx
import pytest
from solarsizer.collectors import pvgis


def pvgis_payload(edays):
    return {
        "outputs": {
            "monthly": {
                "fixed": [
                    {"month": i + 1, "E_d": eday, "E_m": round(eday * 31, 2)}
                    for i, eday in enumerate(edays)
                ]
            }
        }
    }


def ok_response(data):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = data
    return response


@pytest.fixture
def mock_get():
    with patch("solarsizer.collectors.pvgis.httpx.get") as mock:
        yield mock


@pytest.fixture(autouse=True)
def no_proxies(monkeypatch):
    monkeypatch.delenv("PVGIS_PROXY_URLS", raising=False)


@pytest.mark.parametrize(
    "latitude,region",
    [(12.0, "north"), (10.0, "north"), (9.9, "middle"), (7.0, "middle"), (6.99, "south"), (-3, "south")],
)
def test_get_region(latitude, region):
    assert pvgis.get_region(latitude) == region


def test_regional_fallback():
    series = pvgis.regional_fallback(11)
    assert series.source == "fallback:north"
    assert series.is_estimated
    assert len(series) == 12
    assert series.months[0].value == pytest.approx(4.8 * 30)


def test_parse_uses_monthly_totals():
    series = pvgis.parse_pvgis_response(pvgis_payload([4.0] * 12))
    assert series.source == "pvgis"
    assert series.months[0].value == pytest.approx(124.0)


def test_parse_falls_back_to_daily_values():
    data = {"outputs": {"monthly": {"fixed": [{"month": m, "E_d": 4.0} for m in range(1, 13)]}}}
    series = pvgis.parse_pvgis_response(data)
    assert series.months[5].value == pytest.approx(120.0)


def test_parse_malformed():
    with pytest.raises(pvgis.PvgisError):
        pvgis.parse_pvgis_response({"outputs": {}})
    with pytest.raises(pvgis.PvgisError, match="Incomplete"):
        pvgis.parse_pvgis_response(pvgis_payload([4.0] * 6))


def test_fetch_success(mock_get):
    mock_get.return_value = ok_response(pvgis_payload([5.0] * 12))

    series = pvgis.fetch_monthly_yield(9.08, 7.4)

    assert not series.is_estimated
    url = mock_get.call_args[0][0]
    assert url.startswith(pvgis.API_BASE_URL)
    assert "peakpower=1" in url
    assert "loss=14" in url


def test_fetch_retries_then_succeeds(mock_get):
    mock_get.side_effect = [
        httpx.ConnectError("Connection refused"),
        ok_response(pvgis_payload([5.0] * 12)),
    ]

    with patch("solarsizer.collectors.pvgis.time.sleep") as sleep:
        series = pvgis.fetch_monthly_yield(9.08, 7.4, attempts=2, backoff=0.5)

    assert series.source == "pvgis"
    assert mock_get.call_count == 2
    sleep.assert_called_once_with(0.5)


def test_fetch_tries_proxies(mock_get, monkeypatch):
    monkeypatch.setenv("PVGIS_PROXY_URLS", "https://proxy.example/?url=")
    mock_get.side_effect = [
        httpx.ConnectError("Connection refused"),
        ok_response(pvgis_payload([5.0] * 12)),
    ]

    series = pvgis.fetch_monthly_yield(9.08, 7.4, attempts=1)

    assert series.source == "pvgis"
    proxy_url = mock_get.call_args_list[1][0][0]
    assert proxy_url.startswith("https://proxy.example/?url=https%3A%2F%2F")


def test_fetch_all_fail_uses_fallback(mock_get):
    mock_get.side_effect = httpx.ConnectError("Connection refused")

    series = pvgis.fetch_monthly_yield(6.5, 3.4, attempts=2, backoff=0)

    assert series.source == "fallback:south"
    assert mock_get.call_count == 2


def test_fetch_bad_payload_uses_fallback(mock_get):
    mock_get.return_value = ok_response({"error": "location over sea"})

    series = pvgis.fetch_monthly_yield(8.0, 3.4, attempts=1)

    assert series.source == "fallback:middle"


def test_invalid_proxy_url_falls_through(mock_get):
    mock_get.side_effect = [
        httpx.ConnectError("Connection refused"),
        httpx.InvalidURL("Invalid URL component"),
    ]

    series = pvgis.fetch_monthly_yield(11, 8, endpoints=["https://direct", "bad proxy"], attempts=1)

    assert series.source == "fallback:north"
    assert mock_get.call_count == 2
