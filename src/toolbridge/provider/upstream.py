"""Upstream HTTP lookups used by the bundled tool server.

Each public coroutine takes an httpx.AsyncClient and returns the text that
the matching tool sends back to the model. Upstream failures are turned
into descriptive text, never raised, so one failing API cannot break a
conversation turn.
"""

import json
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


async def make_nws_request(
    client: httpx.AsyncClient, url: str, user_agent: str
) -> dict[str, Any] | None:
    """Fetch a National Weather Service resource.

    Returns:
        The decoded JSON body, or None if the request failed
    """
    headers = {"User-Agent": user_agent, "Accept": "application/geo+json"}
    try:
        response = await client.get(url, headers=headers)
        response.raise_for_status()
        return response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error making NWS request to {url}: {e}")
        return None


def format_alert(feature: dict[str, Any]) -> str:
    props = feature.get("properties") or {}
    return "\n".join(
        [
            f"Event: {props.get('event') or 'Unknown'}",
            f"Area: {props.get('areaDesc') or 'Unknown'}",
            f"Severity: {props.get('severity') or 'Unknown'}",
            f"Status: {props.get('status') or 'Unknown'}",
            f"Headline: {props.get('headline') or 'No headline'}",
            "---",
        ]
    )


def format_period(period: dict[str, Any]) -> str:
    temperature = period.get("temperature")
    if temperature is None:
        temperature = "Unknown"
    wind = f"{period.get('windSpeed') or 'Unknown'} {period.get('windDirection') or ''}"
    return "\n".join(
        [
            f"{period.get('name') or 'Unknown'}:",
            f"Temperature: {temperature}°{period.get('temperatureUnit') or 'F'}",
            f"Wind: {wind.rstrip()}",
            f"{period.get('shortForecast') or 'No forecast available'}",
            "---",
        ]
    )


async def fetch_alerts(
    client: httpx.AsyncClient, api_base: str, user_agent: str, state: str
) -> str:
    """Build the alerts text for a two-letter US state code."""
    state_code = state.upper()
    data = await make_nws_request(
        client, f"{api_base}/alerts?area={state_code}", user_agent
    )
    if data is None:
        return "Failed to retrieve alerts data"

    features = data.get("features") or []
    if not features:
        return f"No active alerts for {state_code}"

    alerts = "\n".join(format_alert(feature) for feature in features)
    return f"Active alerts for {state_code}:\n\n{alerts}"


async def fetch_forecast(
    client: httpx.AsyncClient,
    api_base: str,
    user_agent: str,
    latitude: float,
    longitude: float,
) -> str:
    """Build the forecast text for a coordinate pair.

    The NWS API is a two-step lookup: the grid point resolves to a forecast
    URL, which is then fetched for its periods. Only US locations resolve.
    """
    points_url = f"{api_base}/points/{latitude:.4f},{longitude:.4f}"
    points_data = await make_nws_request(client, points_url, user_agent)
    if points_data is None:
        return (
            f"Failed to retrieve grid point data for coordinates: {latitude}, "
            f"{longitude}. This location may not be supported by the NWS API "
            "(only US locations are supported)."
        )

    forecast_url = (points_data.get("properties") or {}).get("forecast")
    if not forecast_url:
        return "Failed to get forecast URL from grid point data"

    forecast_data = await make_nws_request(client, forecast_url, user_agent)
    if forecast_data is None:
        return "Failed to retrieve forecast data"

    periods = (forecast_data.get("properties") or {}).get("periods") or []
    if not periods:
        return "No forecast periods available"

    forecast = "\n".join(format_period(period) for period in periods)
    return f"Forecast for {latitude}, {longitude}:\n\n{forecast}"


async def fetch_history_rates(
    client: httpx.AsyncClient,
    api_base: str,
    api_key: str | None,
    start_date: str,
    end_date: str,
    base: str = "USD",
    symbols: str = "CNY",
) -> str:
    """Build the exchange rate timeseries text for a date range."""
    params = {
        "start_date": start_date,
        "end_date": end_date,
        "base": base,
        "symbols": symbols,
    }
    headers = {"apikey": api_key} if api_key else {}
    try:
        response = await client.get(
            f"{api_base}/timeseries", params=params, headers=headers
        )
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error fetching historical rates: {e}")
        return f"Error fetching historical rates: {e}"

    return json.dumps(data, indent=2, ensure_ascii=False)


async def fetch_random_phrase(client: httpx.AsyncClient, url: str) -> str:
    """Fetch one novelty phrase as pretty-printed JSON text."""
    try:
        response = await client.get(url, params={"format": "json"})
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error fetching random phrase: {e}")
        return f"Error fetching random phrase: {e}"

    return json.dumps(data, indent=2, ensure_ascii=False)
