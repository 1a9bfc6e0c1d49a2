"""
Core - Application Infrastructure.

Provides core systems for the history store:
- ServiceLocator: Dependency injection and system management
- BaseSystem: Abstract base for all systems
- ConfigManager: Configuration with persistence
- EventBus: Unified pub/sub messaging
- DatabaseManager: Single-writer SQLite access
- PeriodicTaskScheduler: Interval maintenance jobs

Usage:
    from historystore.core import sl

    sl.init("config.json")
    sl.register_system(MyService)
    await sl.start_all()
"""
from .base_system import BaseSystem
from .locator import ServiceLocator, sl
from .config import (
    ConfigManager,
    AppConfig,
    GeneralSettings,
    DatabaseSettings,
    HistorySettings,
)
from .events import Signal, EventBus, Events
from .database import DatabaseManager, StorageError, Statement
from .scheduling import PeriodicTaskScheduler
from .logging import setup_logging

__all__ = [
    # Core infrastructure
    "BaseSystem",
    "ServiceLocator",
    "sl",

    # Configuration
    "ConfigManager",
    "AppConfig",
    "GeneralSettings",
    "DatabaseSettings",
    "HistorySettings",

    # Events
    "Signal",
    "EventBus",
    "Events",

    # Storage
    "DatabaseManager",
    "StorageError",
    "Statement",

    # Maintenance
    "PeriodicTaskScheduler",
    "setup_logging",
]
