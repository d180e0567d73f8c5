from planner.storage.base import Storage, generate_invite_code
from planner.storage.memory import MemoryStorage
from planner.storage.postgres import PostgresStorage

__all__ = ["MemoryStorage", "PostgresStorage", "Storage", "generate_invite_code"]
