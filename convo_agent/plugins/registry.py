"""Ordered plugin registry producing at most one `PluginResult` per request.

Dispatch logic:
    - Plugins are tried strictly in registration order. The order is the priority
      policy: weather is registered before arithmetic so a city phrase is never
      parsed as an expression.
    - The first plugin whose `matches` returns an argument is executed; later
      plugins are not consulted.
    - No match returns `None`.

Failure handling:
    Plugins report expected failures through `PluginResult(success=False)` or by
    raising `PluginExecutionFailure`, whose message becomes the diagnostic output.
    Any other exception is logged here and converted to a generic failed result,
    so dispatch never raises.

Determinism:
    Deterministic for a fixed plugin list and deterministic plugin detectors.
    Execution output may depend on external collaborators (weather lookup).
"""

import logging
from typing import Protocol

from convo_agent.core.errors import PluginExecutionFailure
from convo_agent.core.types import PluginResult


logger = logging.getLogger(__name__)


class Plugin(Protocol):
    """Uniform capability implemented by every tool handler."""

    kind: str

    def matches(self, text: str) -> str | None:
        """Return the extracted argument when the plugin claims `text`."""
        ...

    def execute(self, argument: str) -> PluginResult:
        """Serve the request; failures are reported in the result."""
        ...


class PluginRegistry:
    """Priority-ordered list of plugins."""

    def __init__(self, plugins: list[Plugin] | None = None):
        self._plugins: list[Plugin] = list(plugins or [])

    def register(self, plugin: Plugin) -> None:
        """Append a plugin at the lowest priority."""
        self._plugins.append(plugin)

    @property
    def kinds(self) -> list[str]:
        return [p.kind for p in self._plugins]

    def try_dispatch(self, text: str) -> PluginResult | None:
        """Execute the first matching plugin.

        Args:
            text: Raw user message.

        Returns:
            The matched plugin's result, or `None` when nothing matched.

        Edge cases:
            - A detector that raises is logged and treated as "no match".
            - An executor that raises yields `success=False`.
        """
        if not text:
            return None

        for plugin in self._plugins:
            try:
                argument = plugin.matches(text)
            except Exception:
                logger.exception("Plugin detector %s failed", plugin.kind)
                continue

            if argument is None:
                continue

            logger.info("Dispatching to plugin %s", plugin.kind)

            try:
                return plugin.execute(argument)
            except PluginExecutionFailure as err:
                logger.warning("Plugin %s could not serve input=%r: %s", plugin.kind, argument, err)
                return PluginResult(kind=plugin.kind, input=argument, output=str(err), success=False)
            except Exception:
                logger.exception("Plugin %s failed for input=%r", plugin.kind, argument)
                return PluginResult(
                    kind=plugin.kind,
                    input=argument,
                    output=f"Plugin {plugin.kind} failed to process the request",
                    success=False,
                )

        return None
