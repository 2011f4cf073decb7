"""Bundled MCP tool provider.

Run as a script, this module serves four tools over stdio: a weather
forecast and weather alerts from the National Weather Service, historical
exchange rates, and a random novelty phrase. The conversation engine's
ToolInvoker spawns it as a subprocess.

Logging goes to stderr because stdout carries the MCP protocol stream.
"""

import logging
import sys
from typing import Annotated

import httpx
from fastmcp import FastMCP
from pydantic import Field

from toolbridge.config import ToolbridgeSettings
from toolbridge.provider.upstream import (
    fetch_alerts,
    fetch_forecast,
    fetch_history_rates,
    fetch_random_phrase,
)

logger = logging.getLogger("toolbridge.provider")

settings = ToolbridgeSettings()

mcp = FastMCP("weather")


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.upstream_timeout)


@mcp.tool(name="get-forecast", description="Get weather forecast for a location")
async def get_forecast(
    latitude: Annotated[
        float, Field(ge=-90, le=90, description="Latitude of the location")
    ],
    longitude: Annotated[
        float, Field(ge=-180, le=180, description="Longitude of the location")
    ],
) -> str:
    logger.info(f"get-forecast called with latitude={latitude}, longitude={longitude}")
    async with _client() as client:
        return await fetch_forecast(
            client,
            settings.nws_api_base,
            settings.nws_user_agent,
            latitude,
            longitude,
        )


@mcp.tool(name="get-alerts", description="Get weather alerts for a state")
async def get_alerts(
    state: Annotated[
        str,
        Field(
            min_length=2,
            max_length=2,
            description="Two-letter state code (e.g. CA, NY)",
        ),
    ],
) -> str:
    logger.info(f"get-alerts called with state={state}")
    async with _client() as client:
        return await fetch_alerts(
            client, settings.nws_api_base, settings.nws_user_agent, state
        )


@mcp.tool(name="get-history-rates", description="Get historical exchange rates")
async def get_history_rates(
    start_date: Annotated[str, Field(description="Start date in YYYY-MM-DD format")],
    end_date: Annotated[str, Field(description="End date in YYYY-MM-DD format")],
    base: Annotated[
        str, Field(description="Base currency (default: USD)")
    ] = "USD",
    symbols: Annotated[
        str,
        Field(description="Comma-separated list of target currencies (default: CNY)"),
    ] = "CNY",
) -> str:
    logger.info(
        f"get-history-rates called with start_date={start_date}, "
        f"end_date={end_date}, base={base}, symbols={symbols}"
    )
    async with _client() as client:
        return await fetch_history_rates(
            client,
            settings.exchangerates_api_base,
            settings.exchangerates_api_key,
            start_date,
            end_date,
            base,
            symbols,
        )


@mcp.tool(name="random-qing-hua", description="随机返回一段土味情话")
async def random_qing_hua() -> str:
    logger.info("random-qing-hua called")
    async with _client() as client:
        return await fetch_random_phrase(client, settings.phrase_api_url)


def main() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [tools] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    logger.info("Weather MCP server running on stdio")
    mcp.run()


if __name__ == "__main__":
    main()
