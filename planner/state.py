from typing import Optional

import redis.asyncio as redis

from planner.sessions import SessionStore
from planner.storage import Storage

# Global runtime state initialized in lifespan.setup_resources
redis_client: Optional[redis.Redis] = None
session_store: Optional[SessionStore] = None
storage: Optional[Storage] = None
