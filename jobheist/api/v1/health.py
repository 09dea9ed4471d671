import os

from fastapi import APIRouter

from jobheist.core.credentials import FIRECRAWL_API_KEY, OPENAI_API_KEY, usable
from jobheist.services.analysis_engine import OUTPUT_FORMATS

router = APIRouter()


@router.get("/health", summary="Health Check", description="Report service status and which upstream keys are configured.")
async def health_check():
    configured = {name: usable(os.environ.get(name)) is not None for name in (OPENAI_API_KEY, FIRECRAWL_API_KEY)}
    return {
        "status": "healthy" if all(configured.values()) else "degraded",
        "credentials": configured,
        "formats": list(OUTPUT_FORMATS),
    }
