"""scriptparser database package.

SQLite storage for script projects, tag types and classified data items.
"""

from .connection_manager import ConnectionPool, DatabaseConnectionManager
from .operations import ScriptDataStore
from .project_ops import ProjectOperations
from .schema import SCHEMA_VERSION, DatabaseSchema, create_database
from .tag_ops import TagOperations, validate_items

__all__ = [
    "SCHEMA_VERSION",
    "ConnectionPool",
    "DatabaseConnectionManager",
    "DatabaseSchema",
    "ProjectOperations",
    "ScriptDataStore",
    "TagOperations",
    "create_database",
    "validate_items",
]
