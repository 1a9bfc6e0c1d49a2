from .errors import StorageError
from .manager import DatabaseManager
from .statements import Statement

__all__ = ["DatabaseManager", "StorageError", "Statement"]
