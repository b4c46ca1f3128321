from fastapi import APIRouter

from models.api_models import HealthResponse


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(ok=True, status="healthy")
