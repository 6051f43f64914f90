"""Tool plugin package.

Architectural role:
    Deterministic capability handlers that serve narrow intents without general
    text generation, plus the ordered registry that selects at most one of them
    per request.

Priority order of `default_registry`:
    1. `WeatherPlugin`
    2. `ArithmeticPlugin`
"""

from collections.abc import Callable

from convo_agent.config import AgentSettings
from convo_agent.plugins.arithmetic import ArithmeticPlugin
from convo_agent.plugins.registry import Plugin, PluginRegistry
from convo_agent.plugins.weather import OpenWeatherFetcher, WeatherPlugin


def default_registry(
    settings: AgentSettings,
    weather_fetcher: Callable[[str], str] | None = None,
) -> PluginRegistry:
    """Build the reference registry with weather tried before arithmetic."""
    fetcher = weather_fetcher or OpenWeatherFetcher(
        api_key=settings.weather_api_key,
        timeout=settings.weather_timeout,
    )
    return PluginRegistry([WeatherPlugin(fetcher), ArithmeticPlugin()])


__all__ = [
    "ArithmeticPlugin",
    "OpenWeatherFetcher",
    "Plugin",
    "PluginRegistry",
    "WeatherPlugin",
    "default_registry",
]
