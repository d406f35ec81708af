from __future__ import annotations

from fastapi import APIRouter


router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, str]:
    """HTTP endpoint reporting that the service is up."""
    return {"status": "ok"}
