from fastapi import APIRouter

from cypress_extractor.core.config import get_settings

router = APIRouter()


@router.get("/", summary="Health Check for Cypress Test Structure Extractor")
async def health_check():
    return {"status": "ok", "version": get_settings().VERSION}
