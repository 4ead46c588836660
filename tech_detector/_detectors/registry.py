"""Registry for file detector plugins."""

from typing import Iterable, List

from ..logging_config import logger
from .protocol import DetectorPlugin


class PluginRegistry:
    """Registry for detector plugins.

    Keeps plugins in registration order, which is the order they are
    invoked for every file.

    Example:
        plugins = PluginRegistry()
        plugins.register(DockerfileDetector())
        plugins.register(PackageJsonDetector(registry))

        infra = plugins.infrastructure_plugins
    """

    def __init__(self) -> None:
        self._plugins: List[DetectorPlugin] = []

    def register(self, plugin: DetectorPlugin) -> None:
        """Register a plugin.

        Args:
            plugin: Plugin instance implementing DetectorPlugin protocol.

        Raises:
            ValueError: If a plugin with the same name is already registered.
        """
        if plugin.name in self.names:
            raise ValueError(f"Detector plugin already registered: {plugin.name}")
        self._plugins.append(plugin)
        logger.debug(f"Registered detector plugin: {plugin.name} (infrastructure={plugin.infrastructure})")

    @property
    def plugins(self) -> List[DetectorPlugin]:
        """All plugins in registration order."""
        return list(self._plugins)

    @property
    def names(self) -> List[str]:
        return [p.name for p in self._plugins]

    @property
    def infrastructure_plugins(self) -> List[DetectorPlugin]:
        """Plugins that target deployment/build artifacts."""
        return [p for p in self._plugins if p.infrastructure]

    def select(self, names: Iterable[str]) -> List[DetectorPlugin]:
        """Get a named subset of plugins, in registration order.

        Raises:
            ValueError: If a name is not registered.
        """
        wanted = set(names)
        unknown = wanted.difference(self.names)
        if unknown:
            raise ValueError(f"Unknown detector plugin(s): {', '.join(sorted(unknown))}")
        return [p for p in self._plugins if p.name in wanted]

    def clear(self) -> None:
        """Remove all registered plugins."""
        self._plugins.clear()

    def __len__(self) -> int:
        return len(self._plugins)
