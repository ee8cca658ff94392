"""PVGIS monthly PV yield collector.

Fetches monthly energy output for a 1 kWp reference array from the PVGIS
PVcalc API. The direct endpoint is tried first, then any proxy prefixes
listed in PVGIS_PROXY_URLS (comma-separated). If every endpoint fails, a
regional-average series is returned instead, marked as estimated.
"""

import logging
import os
import time
from typing import Any
from urllib.parse import quote, urlencode

import httpx
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from ..models import IrradianceSeries, MonthlyYield

logger = logging.getLogger(__name__)

API_BASE_URL = "https://re.jrc.ec.europa.eu/api/v5_2/PVcalc"
DAYS_PER_MONTH = 30

# PVcalc parameters: 1 kWp crystalline-silicon array with 14% system loss
PEAK_POWER_KW = 1
SYSTEM_LOSS_PERCENT = 14

# Daily yield (kWh/kWp/day) by month for each latitude band
REGIONAL_DAILY_YIELD = {
    "north": (4.8, 5.1, 5.3, 5.2, 5.0, 4.7, 4.5, 4.3, 4.8, 5.0, 5.2, 5.1),
    "middle": (4.4, 4.6, 4.5, 4.5, 4.2, 3.9, 3.6, 3.3, 3.7, 4.0, 4.4, 4.4),
    "south": (4.0, 4.2, 4.1, 4.0, 3.8, 3.5, 3.2, 3.0, 3.4, 3.7, 4.0, 4.0),
}

NORTH_MIN_LATITUDE = 10.0
MIDDLE_MIN_LATITUDE = 7.0


class PvgisError(Exception):
    """Base exception for PVGIS collector errors."""
    pass


def get_region(latitude: float) -> str:
    """Latitude band used for the regional fallback."""
    if latitude >= NORTH_MIN_LATITUDE:
        return "north"
    if latitude >= MIDDLE_MIN_LATITUDE:
        return "middle"
    return "south"


def regional_fallback(latitude: float) -> IrradianceSeries:
    """Estimated monthly series for the region containing the latitude."""
    region = get_region(latitude)
    months = tuple(
        MonthlyYield(month=i + 1, value=round(eday * DAYS_PER_MONTH, 3))
        for i, eday in enumerate(REGIONAL_DAILY_YIELD[region])
    )
    return IrradianceSeries(months=months, source=f"fallback:{region}")


def build_url(latitude: float, longitude: float) -> str:
    params = {
        "lat": latitude,
        "lon": longitude,
        "peakpower": PEAK_POWER_KW,
        "loss": SYSTEM_LOSS_PERCENT,
        "outputformat": "json",
    }
    return f"{API_BASE_URL}?{urlencode(params)}"


def get_endpoints(latitude: float, longitude: float) -> list[str]:
    """The direct PVGIS URL followed by each configured proxy."""
    url = build_url(latitude, longitude)
    proxies = [p.strip() for p in os.environ.get("PVGIS_PROXY_URLS", "").split(",") if p.strip()]
    return [url] + [proxy + quote(url, safe="") for proxy in proxies]


def parse_pvgis_response(data: dict[str, Any]) -> IrradianceSeries:
    """Parse a PVcalc JSON response into a monthly series.

    Uses E_m (monthly kWh) where present, otherwise E_d x 30.
    """
    try:
        rows = data["outputs"]["monthly"]["fixed"]
    except (KeyError, TypeError):
        raise PvgisError("PVGIS response has no outputs.monthly.fixed data")

    months = []
    for row in rows:
        try:
            if row.get("E_m") is not None:
                value = float(row["E_m"])
            else:
                value = float(row["E_d"]) * DAYS_PER_MONTH
            months.append(MonthlyYield(month=int(row["month"]), value=value))
        except (KeyError, TypeError, ValueError) as e:
            raise PvgisError(f"Malformed monthly row {row!r}: {e}")

    try:
        return IrradianceSeries(months=tuple(months), source="pvgis")
    except ValueError as e:
        raise PvgisError(f"Incomplete PVGIS data: {e}")


def fetch_from_api(url: str, timeout: float = 30.0) -> IrradianceSeries:
    """Fetch and parse one endpoint."""
    response = httpx.get(url, timeout=timeout, follow_redirects=True)
    response.raise_for_status()
    try:
        data = response.json()
    except ValueError as e:
        raise PvgisError(f"Invalid JSON from PVGIS: {e}")
    return parse_pvgis_response(data)


def fetch_monthly_yield(
    latitude: float,
    longitude: float,
    endpoints: list[str] | None = None,
    attempts: int = 2,
    backoff: float = 1.0,
) -> IrradianceSeries:
    """Fetch the monthly yield series for a location.

    Args:
        latitude: Location latitude
        longitude: Location longitude
        endpoints: URLs to try in order (default: direct + PVGIS_PROXY_URLS)
        attempts: Tries per endpoint before moving on
        backoff: Base delay in seconds, doubled after each failed try

    Returns:
        Measured series (source='pvgis'), or the regional fallback
        (source='fallback:<region>') if every endpoint fails
    """
    if endpoints is None:
        endpoints = get_endpoints(latitude, longitude)

    for url in endpoints:
        for attempt in range(attempts):
            try:
                return fetch_from_api(url)
            except (httpx.HTTPError, httpx.InvalidURL, PvgisError) as e:
                logger.warning("PVGIS request failed (%s, attempt %d/%d): %s", url, attempt + 1, attempts, e)
                if attempt < attempts - 1 and backoff > 0:
                    time.sleep(backoff * 2**attempt)

    logger.warning(
        "All PVGIS endpoints failed, using %s regional averages", get_region(latitude)
    )
    return regional_fallback(latitude)
