from __future__ import annotations

from fastapi import APIRouter

from travel_content.api.activities_api import router as activities_router
from travel_content.api.content_api import router as content_router
from travel_content.api.meta_api import router as meta_router

router = APIRouter()

router.include_router(meta_router, tags=["meta"])
router.include_router(content_router, prefix="/content", tags=["content"])
router.include_router(activities_router, prefix="/activities", tags=["activities"])
