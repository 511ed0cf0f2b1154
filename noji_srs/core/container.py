"""
Service container.

Every service of this app is a process-wide singleton: one Noji client
(owning the token cache), one card cache, one scheduler (owning the
delivery state). The container builds each lazily from a factory and
hands out the same instance afterwards.

Usage:
    from noji_srs.core.container import get_container

    container = get_container()
    container.register("cards", lambda c: CardService(c.get("noji_client")))

    cards = container.get("cards")
"""

import logging
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

Factory = Callable[["ServiceContainer"], Any]


class ServiceContainer:
    """Lazy registry of singleton services keyed by name."""

    def __init__(self):
        self._factories: Dict[str, Factory] = {}
        self._instances: Dict[str, Any] = {}

    def register(self, name: str, factory: Factory) -> None:
        """Register a factory; it receives the container on first ``get``.

        Re-registering drops any instance already built under ``name``.
        """
        self._factories[name] = factory
        self._instances.pop(name, None)
        logger.debug(f"Registered service: {name}")

    def register_instance(self, name: str, instance: Any) -> None:
        """Use ``instance`` as-is (tests swap in fakes this way)."""
        self._instances[name] = instance
        logger.debug(f"Registered instance: {name}")

    def get(self, name: str) -> Any:
        """
        Return the service, building it on first access.

        Raises:
            KeyError: If nothing is registered under ``name``
        """
        if name in self._instances:
            return self._instances[name]

        factory = self._factories.get(name)
        if factory is None:
            raise KeyError(f"Service '{name}' is not registered")

        instance = factory(self)
        self._instances[name] = instance
        logger.debug(f"Created service: {name}")
        return instance

    def peek(self, name: str) -> Optional[Any]:
        """Return the instance only if it was already built."""
        return self._instances.get(name)

    def has(self, name: str) -> bool:
        return name in self._factories or name in self._instances

    def clear(self) -> None:
        self._factories.clear()
        self._instances.clear()


_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """Get the global service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """Drop every registration and instance (used between tests)."""
    global _container
    _container = ServiceContainer()
