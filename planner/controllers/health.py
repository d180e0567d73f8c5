from typing import Dict

from fastapi import APIRouter

from planner import state

router = APIRouter()


@router.get("/health")
async def health() -> Dict[str, str]:
    redis_status = "disconnected"
    if state.redis_client:
        try:
            await state.redis_client.ping()
            redis_status = "healthy"
        except Exception:
            redis_status = "unhealthy"

    storage = state.storage.name if state.storage else "uninitialized"
    return {"status": "ok", "storage": storage, "redis": redis_status}
