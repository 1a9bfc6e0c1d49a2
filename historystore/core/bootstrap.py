"""
Bootstrap helpers for history store applications.

Simplifies application setup and initialization.
"""
from typing import List, Type

from loguru import logger

from .locator import ServiceLocator, sl
from .base_system import BaseSystem
from .database.manager import DatabaseManager
from .events.bus import EventBus
from .scheduling.periodic_scheduler import PeriodicTaskScheduler


class ApplicationBuilder:
    """
    Fluent builder for the history store.

    Example:
        locator = await (ApplicationBuilder("Browser Profile", "config.json")
                         .with_logging()
                         .build())
        history = locator.get_system(SQLiteHistory)
    """

    def __init__(self, name: str = "History Store", config_path: str = "config.json"):
        """
        Initialize application builder.

        Args:
            name: Application name
            config_path: Path to config.json file
        """
        self.name = name
        self.config_path = config_path
        self._systems: List[Type[BaseSystem]] = []
        self._use_default_systems = True
        self._logging_configured = False

    def with_default_systems(self, enable: bool = True):
        """
        Include default systems.

        Default systems:
        - EventBus
        - DatabaseManager
        - SQLiteHistory
        - PeriodicTaskScheduler

        Args:
            enable: Whether to include default systems

        Returns:
            Self for chaining
        """
        self._use_default_systems = enable
        return self

    def add_system(self, system_cls: Type[BaseSystem]):
        """
        Register additional custom system.

        Returns:
            Self for chaining
        """
        self._systems.append(system_cls)
        return self

    def with_logging(self, enable: bool = True):
        """
        Configure logging setup from the `general` config section.

        Returns:
            Self for chaining
        """
        self._logging_configured = enable
        return self

    async def build(self) -> ServiceLocator:
        """
        Initialize and start all systems.

        Returns:
            ServiceLocator instance with all systems started
        """
        # 1. Initialize service locator (loads config)
        sl.init(self.config_path)

        # 2. Setup logging
        if self._logging_configured:
            from .logging import setup_logging
            general = sl.config.data.general
            setup_logging(debug_mode=general.debug_mode, log_dir=general.log_dir)
            logger.info(f"Starting {self.name}")

        # 3. Register default systems
        if self._use_default_systems:
            from historystore.history.store import SQLiteHistory
            default_systems = [
                EventBus,
                DatabaseManager,
                SQLiteHistory,
                PeriodicTaskScheduler,
            ]
            for sys_cls in default_systems:
                sl.register_system(sys_cls)

        # 4. Register custom systems
        for sys_cls in self._systems:
            sl.register_system(sys_cls)

        # 5. Start all systems
        await sl.start_all()

        return sl
