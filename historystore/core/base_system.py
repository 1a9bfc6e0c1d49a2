from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from .locator import ServiceLocator
    from .config import ConfigManager


class BaseSystem(ABC):
    """
    Abstract Base Class for all core systems (DatabaseManager, EventBus, SQLiteHistory, ...).
    Ensures consistent initialization and access to globals (Locator, Config).

    Systems declare the systems they need by class name in `depends_on`;
    the ServiceLocator starts dependencies first and stops them last:

        class SQLiteHistory(BaseSystem):
            depends_on = ["DatabaseManager", "EventBus"]
    """
    depends_on: List[str] = []

    def __init__(self, locator: 'ServiceLocator', config: 'ConfigManager'):
        self.locator = locator
        self.config = config
        self._is_ready = False

    @abstractmethod
    async def initialize(self):
        """
        Async initialization logic (e.g. database connections, loading cache).
        Should be called by the ServiceLocator during startup.
        """
        self._is_ready = True

    @abstractmethod
    async def shutdown(self):
        """
        Cleanup logic (e.g. closing connections).
        """
        self._is_ready = False

    @property
    def is_ready(self) -> bool:
        return self._is_ready

    async def __aenter__(self):
        """Async context manager entry: Initialize system."""
        if not self._is_ready:
            await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit: Shutdown system."""
        if self._is_ready:
            await self.shutdown()
