"""Weather intent plugin and its OpenWeatherMap lookup collaborator.

Detection:
    Case-insensitive `weather in <letters and spaces>`; the argument is the
    trimmed location phrase.

Collaborator contract:
    `fetch_weather(location) -> description`, raising `CollaboratorUnavailable`
    when the lookup fails. Without an API key a fixed demo description is
    returned so the plugin remains usable offline.

Failure handling:
    `CollaboratorUnavailable` is absorbed by `WeatherPlugin.execute` into a failed
    `PluginResult`; the orchestrator then falls back to generation.
"""

import logging
import re
from collections.abc import Callable

import requests

from convo_agent.core.errors import CollaboratorUnavailable
from convo_agent.core.types import PluginResult


logger = logging.getLogger(__name__)


OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"

WEATHER_PATTERN = re.compile(r"weather\s+in\s+([a-zA-Z\s]+)", re.IGNORECASE)


def demo_weather(city: str) -> str:
    return (
        f"Current weather in {city}: 22°C, partly cloudy with light winds. "
        "(Demo data - add WEATHER_API_KEY to .env for real data)"
    )


class OpenWeatherFetcher:
    """Fetches current conditions from OpenWeatherMap.

    Args:
        api_key: API key; `None`/empty selects demo output.
        timeout: Per-request timeout in seconds.
        session: Optional `requests.Session` for connection reuse or testing.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._http = session or requests.Session()

    def __call__(self, city: str) -> str:
        """Return a one-line weather description for `city`.

        Raises:
            CollaboratorUnavailable: On transport errors, non-2xx responses, or
                payloads missing the expected fields.
        """
        if not self.api_key:
            return demo_weather(city)

        try:
            response = self._http.get(
                OPENWEATHER_URL,
                params={"q": city, "appid": self.api_key, "units": "metric"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()

            temp = round(float(data["main"]["temp"]))
            description = data["weather"][0]["description"]
            humidity = data["main"]["humidity"]
            wind = data["wind"]["speed"]
        except requests.exceptions.RequestException as err:
            raise CollaboratorUnavailable(f"Weather lookup failed for {city}") from err
        except (KeyError, IndexError, TypeError, ValueError) as err:
            raise CollaboratorUnavailable(f"Unexpected weather payload for {city}") from err

        return (
            f"Current weather in {city}: {temp}°C, {description}, "
            f"humidity {humidity}%, wind {wind} m/s"
        )


class WeatherPlugin:
    """Serves `weather in <city>` requests."""

    kind = "weather"

    def __init__(self, fetch_weather: Callable[[str], str]):
        self._fetch_weather = fetch_weather

    def matches(self, text: str) -> str | None:
        match = WEATHER_PATTERN.search(text or "")
        if not match:
            return None
        city = match.group(1).strip()
        return city or None

    def execute(self, city: str) -> PluginResult:
        try:
            description = self._fetch_weather(city)
        except CollaboratorUnavailable:
            logger.warning("Weather lookup unavailable for city=%r", city, exc_info=True)
            return PluginResult(
                kind=self.kind,
                input=city,
                output=f"Unable to fetch weather data for {city}",
                success=False,
            )

        return PluginResult(kind=self.kind, input=city, output=description, success=True)
