from typing import Dict, List, Optional, Type, TypeVar
from loguru import logger

from .base_system import BaseSystem
from .config import ConfigManager

T = TypeVar('T', bound=BaseSystem)


class ServiceLocator:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ServiceLocator, cls).__new__(cls)
            cls._instance.is_ready = False
            cls._instance._systems = {}
            cls._instance._started = []
        return cls._instance

    def init(self, config_path: str):
        if self.is_ready: return

        self.config = ConfigManager(config_path)
        self._systems: Dict[Type[BaseSystem], BaseSystem] = {}
        self._started: List[BaseSystem] = []

        self.is_ready = True

    def register_system(self, system_cls: Type[T], instance: Optional[T] = None) -> T:
        """Create (or adopt) the single instance of a system class."""
        if not self.is_ready:
            raise RuntimeError("ServiceLocator not initialized. Call init() first.")
        if system_cls in self._systems:
            return self._systems[system_cls]
        if instance is None:
            instance = system_cls(self, self.config)
        self._systems[system_cls] = instance
        logger.debug(f"Registered system: {system_cls.__name__}")
        return instance

    def get_system(self, system_cls: Type[T]) -> T:
        """Raises KeyError when the system was never registered."""
        try:
            return self._systems[system_cls]
        except KeyError:
            raise KeyError(f"System not registered: {system_cls.__name__}") from None

    def _start_order(self) -> List[BaseSystem]:
        by_name = {cls.__name__: inst for cls, inst in self._systems.items()}
        ordered: List[BaseSystem] = []
        visiting = set()

        def visit(name: str, inst: BaseSystem):
            if inst in ordered:
                return
            if name in visiting:
                raise RuntimeError(f"Circular dependency involving {name}")
            visiting.add(name)
            for dep in getattr(inst, 'depends_on', []):
                if dep not in by_name:
                    raise RuntimeError(f"{name} depends on unregistered system {dep}")
                visit(dep, by_name[dep])
            visiting.discard(name)
            ordered.append(inst)

        for name, inst in by_name.items():
            visit(name, inst)
        return ordered

    async def start_all(self):
        """Initialize every registered system, dependencies first."""
        for system in self._start_order():
            if system.is_ready:
                continue
            logger.info(f"Starting {system.__class__.__name__}")
            await system.initialize()
            self._started.append(system)

    async def stop_all(self):
        """Shutdown started systems in reverse start order."""
        while self._started:
            system = self._started.pop()
            if not system.is_ready:
                continue
            try:
                await system.shutdown()
                logger.info(f"Stopped {system.__class__.__name__}")
            except Exception as e:
                logger.error(f"Error stopping {system.__class__.__name__}: {e}")

    def reset(self):
        """Forget all systems and config (for testing)."""
        self._systems = {}
        self._started = []
        self.is_ready = False


# Global access
sl = ServiceLocator()
